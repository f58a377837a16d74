"""Shared fixtures for docserve tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from docserve.config import AppConfig
from docserve.web.app import ServerContext, build_context

TEMPLATE = "<html><body>{{content}}</body></html>"


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A small content tree with a template, a post and public files."""
    root = tmp_path / "site"
    (root / "blog").mkdir(parents=True)
    (root / "public").mkdir()
    (root / "template.html").write_text(TEMPLATE)
    (root / "blog" / "hello.md").write_text("# Hello\n\nWorld\n")
    (root / "public" / "robots.txt").write_text("User-agent: *\n")
    (root / "public" / "style.css").write_text("body { margin: 0; }\n")
    return root.resolve()


@pytest.fixture
def config(site: Path) -> AppConfig:
    return AppConfig(content_root=site, home_dir="blog")


@pytest.fixture
def context(config: AppConfig) -> ServerContext:
    return build_context(config)
