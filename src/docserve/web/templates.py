"""Page template loading and hot reloading."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import NamedTuple

from docserve.errors import ConfigError

LOGGER = logging.getLogger(__name__)

PLACEHOLDER = b"{{content}}"


class TemplateFragments(NamedTuple):
    prefix: bytes
    suffix: bytes


def load(path: Path) -> TemplateFragments:
    """Read ``path`` and split it around the single content placeholder."""
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ConfigError(f"Could not read template {path}: {exc}") from exc

    parts = raw.split(PLACEHOLDER)
    if len(parts) != 2:
        raise ConfigError(
            f"Template {path} must contain {PLACEHOLDER.decode()} exactly once "
            f"(found {len(parts) - 1})"
        )
    return TemplateFragments(parts[0], parts[1])


class TemplateStore:
    """Holds the current template fragments.

    Readers call :meth:`current` once per response and use both halves of the
    returned tuple. :meth:`reload` replaces the tuple with a single reference
    assignment, so a reader never sees one old and one new fragment.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._reload_lock = threading.Lock()
        self._fragments = load(path)

    def current(self) -> TemplateFragments:
        return self._fragments

    def reload(self) -> TemplateFragments:
        with self._reload_lock:
            fragments = load(self.path)
            self._fragments = fragments
        LOGGER.debug("Template reloaded from %s", self.path)
        return fragments
