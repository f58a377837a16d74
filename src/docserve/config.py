"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from docserve.errors import ConfigError


@dataclass(slots=True)
class AppConfig:
    host: str = "127.0.0.1"
    port: int = 8000
    content_root: Path = Path(".")
    public_dir: str = "public"
    template_name: str = "template.html"
    home_dir: str = ""
    default_name: str = "index"
    extension: str = "md"
    index_title: str = "Blog"

    def __post_init__(self) -> None:
        self.content_root = Path(self.content_root)
        self.extension = self.extension.lstrip(".")
        if not self.extension:
            raise ConfigError("Source file extension must not be empty")
        if not self.default_name:
            raise ConfigError("Default document name must not be empty")

    def resolve_root(self, base_dir: Path | None = None) -> Path:
        root = self.content_root.expanduser()
        if not root.is_absolute() and base_dir is not None:
            root = base_dir / root
        return root.resolve()

    def template_path(self, base_dir: Path | None = None) -> Path:
        return self.resolve_root(base_dir) / self.template_name

    def public_path(self, base_dir: Path | None = None) -> Path:
        return self.resolve_root(base_dir) / self.public_dir

    @property
    def index_descriptor_name(self) -> str:
        return f"{self.default_name}.json"
