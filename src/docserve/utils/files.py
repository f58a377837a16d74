"""Utility helpers for working with files."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Iterator


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def iter_named_files(root: Path, filename: str) -> Iterator[Path]:
    """Yield files called ``filename`` under ``root``, skipping hidden directories."""
    for dirpath, dirnames, filenames in os.walk(root):
        # Pruning in place stops os.walk from descending into hidden trees.
        dirnames[:] = sorted(name for name in dirnames if not is_hidden(name))
        if filename in filenames:
            candidate = Path(dirpath) / filename
            if candidate.is_file():
                yield candidate


def compute_md5(data: bytes) -> str:
    """Compute the MD5 hex digest used as a content fingerprint."""
    return hashlib.md5(data).hexdigest()


def is_within(path: Path, root: Path) -> bool:
    """Return True when ``path`` is ``root`` or lies below it."""
    root_str = str(root).rstrip(os.sep) + os.sep
    return (str(path) + os.sep).startswith(root_str)
