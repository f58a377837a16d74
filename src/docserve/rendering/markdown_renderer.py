"""Markdown rendering for source documents.

Uses Python-Markdown to turn a source file into an HTML fragment. The
fragment is later placed between the template prefix and suffix, so no
surrounding document markup is produced here.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, Sequence

import markdown

from docserve.errors import RenderError
from docserve.models import Page
from docserve.utils.files import compute_md5

LOGGER = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = ("fenced_code", "tables", "toc", "sane_lists")


class DocumentRenderer(Protocol):
    def __call__(self, path: Path) -> Page: ...


class MarkdownRenderer:
    """Render markdown files into :class:`Page` objects."""

    def __init__(self, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> None:
        self.extensions = list(extensions)

    def __call__(self, path: Path) -> Page:
        text = read_source(path)
        # Markdown instances keep per-document state and are not thread-safe.
        md = markdown.Markdown(extensions=self.extensions)
        content = md.convert(text).encode("utf-8")
        LOGGER.debug("Rendered %s (%d bytes)", path, len(content))
        return Page(source_path=str(path), content=content, fingerprint=compute_md5(content))


def read_source(path: Path) -> str:
    """Read a source document, classifying the failures a visitor can cause."""
    try:
        return path.read_text(encoding="utf-8")
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
        raise RenderError(404, "Page not found") from exc
    except PermissionError as exc:
        raise RenderError(403, "Access denied") from exc
