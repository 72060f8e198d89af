# setup.py
from setuptools import setup, find_packages

setup(
    name="site-markdown",
    version="0.1.0",
    description="Асинхронный конвертер сайтов в markdown (BFS-обход)",
    packages=find_packages(include=["site_markdown", "site_markdown.*"]),
    package_data={"site_markdown": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "markdownify>=0.11",
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "click>=8.1",
        "Jinja2>=3.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "site-markdown=site_markdown.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
