"""Tests for the page cache."""

from __future__ import annotations

import threading

from docserve.cache.pages import PageCache
from docserve.models import Page


def _page(name: str, content: bytes = b"<p>x</p>") -> Page:
    return Page(source_path=name, content=content, fingerprint=name)


class TestPageCache:
    """Test PageCache operations."""

    def test_get_missing(self) -> None:
        assert PageCache().get("/a.md") is None

    def test_put_and_get(self) -> None:
        """Should return the stored page."""
        cache = PageCache()
        page = _page("/a.md")

        assert cache.put("/a.md", page) is True
        assert cache.get("/a.md") is page
        assert "/a.md" in cache
        assert len(cache) == 1

    def test_put_overwrites(self) -> None:
        """Should keep the last write."""
        cache = PageCache()
        cache.put("/a.md", _page("/a.md", b"one"))
        cache.put("/a.md", _page("/a.md", b"two"))

        assert cache.get("/a.md").content == b"two"

    def test_clear_empties_and_bumps_generation(self) -> None:
        """Should drop every entry and start a new generation."""
        cache = PageCache()
        cache.put("/a.md", _page("/a.md"))
        before = cache.generation

        cache.clear()

        assert len(cache) == 0
        assert cache.get("/a.md") is None
        assert cache.generation == before + 1

    def test_stale_generation_put_is_dropped(self) -> None:
        """Should ignore renders that started before a clear."""
        cache = PageCache()
        generation = cache.generation
        cache.clear()

        assert cache.put("/a.md", _page("/a.md"), generation) is False
        assert cache.get("/a.md") is None

    def test_current_generation_put_is_kept(self) -> None:
        cache = PageCache()

        assert cache.put("/a.md", _page("/a.md"), cache.generation) is True

    def test_concurrent_access(self) -> None:
        """Should stay consistent under concurrent puts, gets and clears."""
        cache = PageCache()
        errors: list[BaseException] = []

        def writer(offset: int) -> None:
            try:
                for i in range(200):
                    key = f"/{offset}/{i}.md"
                    cache.put(key, _page(key))
                    cache.get(key)
                    if i % 50 == 0:
                        cache.clear()
            except BaseException as exc:  # pragma: no cover - surfaced below
                errors.append(exc)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        for key in list(cache._pages):
            assert cache.get(key).source_path == key
