"""Core docserve data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True, slots=True)
class Page:
    """Rendered document held by the page cache."""

    source_path: str
    content: bytes
    fingerprint: str


class IndexEntry(BaseModel):
    """Listing metadata for one document in an index descriptor."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    date: datetime | None = None
    summary: str = ""
    tags: Tuple[str, ...] = ()


Index = Tuple[IndexEntry, ...]
