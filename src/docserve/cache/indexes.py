"""Index descriptor discovery and the read-only index cache."""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping

from pydantic import TypeAdapter, ValidationError

from docserve.errors import ConfigError
from docserve.models import Index, IndexEntry
from docserve.utils.files import iter_named_files

LOGGER = logging.getLogger(__name__)

_INDEX_ADAPTER = TypeAdapter(List[IndexEntry])


class IndexCache(Mapping[str, Index]):
    """Immutable mapping of absolute descriptor paths to their entries."""

    def __init__(self, indexes: Mapping[str, Index] | None = None) -> None:
        self._indexes: Mapping[str, Index] = MappingProxyType(dict(indexes or {}))

    def __getitem__(self, path: str) -> Index:
        return self._indexes[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._indexes)

    def __len__(self) -> int:
        return len(self._indexes)


def load_index(path: Path) -> Index:
    """Parse a descriptor file into an ordered tuple of entries."""
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ConfigError(f"Couldn't open {path} for reading: {exc}") from exc

    try:
        entries = _INDEX_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise ConfigError(f"Couldn't parse {path} as an index file: {exc}") from exc
    return tuple(entries)


def build_index_cache(root: Path, descriptor_name: str) -> IndexCache:
    """Walk ``root`` and load every descriptor named ``descriptor_name``."""
    indexes: Dict[str, Index] = {}
    for path in iter_named_files(root, descriptor_name):
        indexes[str(path)] = load_index(path)
        LOGGER.debug("Loaded index %s (%d entries)", path, len(indexes[str(path)]))

    LOGGER.info("Loaded %d index descriptor(s) under %s", len(indexes), root)
    return IndexCache(indexes)
