"""Exception types shared across docserve."""

from __future__ import annotations


class DocserveError(Exception):
    """Base class for every error raised by docserve."""


class ConfigError(DocserveError):
    """Fatal configuration problem detected while starting up."""


class RenderError(DocserveError):
    """Classified render failure carrying the HTTP status to report."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __repr__(self) -> str:
        return f"RenderError(status_code={self.status_code!r}, message={self.message!r})"
