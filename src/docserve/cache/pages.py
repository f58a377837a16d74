"""Thread-safe in-memory cache of rendered pages."""

from __future__ import annotations

import logging
import threading
from typing import Dict

from docserve.models import Page

LOGGER = logging.getLogger(__name__)


class PageCache:
    """Maps absolute source paths to their last rendered :class:`Page`.

    The cache is unbounded and only ever emptied by :meth:`clear`. Each clear
    starts a new generation; a :meth:`put` tagged with an older generation is
    discarded so a render that began before an invalidation cannot repopulate
    the cache with stale content.

    Concurrent first requests for the same path may both render it. The last
    write wins.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pages: Dict[str, Page] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def get(self, path: str) -> Page | None:
        with self._lock:
            return self._pages.get(path)

    def put(self, path: str, page: Page, generation: int | None = None) -> bool:
        """Store ``page`` under ``path``. Returns False when the put was dropped."""
        with self._lock:
            if generation is not None and generation != self._generation:
                LOGGER.debug("Dropping stale render of %s (generation %d)", path, generation)
                return False
            self._pages[path] = page
            return True

    def clear(self) -> None:
        with self._lock:
            self._pages = {}
            self._generation += 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._pages)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._pages
