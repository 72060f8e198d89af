"""
Crawl-wide registry of claimed URLs.
"""
from __future__ import annotations

import threading
from typing import Set


class DedupStore:
    """Set of normalized URLs already claimed for fetching, plus a duplicate counter.

    ``try_claim`` is the only way in: check-and-insert happens under one lock, so
    two callers presenting the same URL can never both win. Grows for the
    lifetime of a single crawl, nothing is evicted.
    """

    def __init__(self) -> None:
        self._claimed: Set[str] = set()
        self._duplicates = 0
        self._lock = threading.Lock()

    def try_claim(self, url: str) -> bool:
        """Claim *url*. Returns False (and counts a duplicate) if it was already claimed."""
        with self._lock:
            if url in self._claimed:
                self._duplicates += 1
                return False
            self._claimed.add(url)
            return True

    def note_duplicates(self, count: int) -> None:
        """Count repeats that were collapsed before reaching :meth:`try_claim`."""
        if count < 0:
            raise ValueError("count must be >= 0")
        if count:
            with self._lock:
                self._duplicates += count

    @property
    def duplicate_count(self) -> int:
        with self._lock:
            return self._duplicates

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._claimed

    def __len__(self) -> int:
        with self._lock:
            return len(self._claimed)
