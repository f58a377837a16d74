"""FastAPI application serving rendered documents."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, Response
from fastapi.staticfiles import StaticFiles

from docserve.cache.indexes import IndexCache, build_index_cache
from docserve.cache.pages import PageCache
from docserve.config import AppConfig
from docserve.errors import ConfigError, RenderError
from docserve.models import Page
from docserve.rendering.markdown_renderer import DocumentRenderer, MarkdownRenderer
from docserve.utils.files import is_within
from docserve.web import responder
from docserve.web.invalidator import CacheInvalidator
from docserve.web.templates import TemplateStore

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ServerContext:
    """State shared by request handlers and the cache invalidator."""

    config: AppConfig
    root: Path
    templates: TemplateStore
    pages: PageCache
    indexes: IndexCache
    renderer: DocumentRenderer


def build_context(
    config: AppConfig,
    *,
    base_dir: Path | None = None,
    renderer: DocumentRenderer | None = None,
) -> ServerContext:
    """Load the template and index descriptors. Raises ConfigError on failure."""
    root = config.resolve_root(base_dir if base_dir is not None else Path.cwd())
    if not root.is_dir():
        raise ConfigError(f"Content root {root} is not a directory")

    return ServerContext(
        config=config,
        root=root,
        templates=TemplateStore(root / config.template_name),
        pages=PageCache(),
        indexes=build_index_cache(root, config.index_descriptor_name),
        renderer=renderer or MarkdownRenderer(),
    )


def resolve_candidate(root: Path, url_path: str, home_dir: str, default_name: str) -> Path:
    """Map a request path onto an absolute path below ``root`` without extension."""
    directory, _, filename = url_path.lstrip("/").rpartition("/")
    if not directory:
        directory = home_dir
    if not filename:
        filename = default_name

    candidate = Path(os.path.normpath(os.path.join(root, directory, filename)))
    # The candidate gets a suffix appended, so it must lie strictly below root.
    if candidate == root or not is_within(candidate, root):
        raise RenderError(404, "Page not found")
    return candidate


def get_page(context: ServerContext, source: Path) -> Page:
    """Return the cached page for ``source``, rendering it on a miss."""
    key = str(source)
    page = context.pages.get(key)
    if page is not None:
        LOGGER.debug("Cache hit for %s", key)
        return page

    LOGGER.debug("Cache miss for %s", key)
    generation = context.pages.generation
    page = context.renderer(source)
    context.pages.put(key, page, generation)
    return page


def handle(context: ServerContext, url_path: str, headers: Mapping[str, str]) -> Response:
    """Resolve ``url_path`` and build the full HTTP response for it."""
    config = context.config
    fragments = context.templates.current()
    accept_encoding = headers.get("accept-encoding")
    source: Path | str = url_path

    try:
        candidate = resolve_candidate(context.root, url_path, config.home_dir, config.default_name)

        entries = context.indexes.get(f"{candidate}.json")
        if entries is not None:
            return responder.index_response(
                fragments, config.index_title, entries, accept_encoding=accept_encoding
            )

        source = Path(f"{candidate}.{config.extension}")
        if not is_within(source.parent, context.root):
            raise RenderError(404, "Page not found")
        page = get_page(context, source)
    except RenderError as exc:
        LOGGER.warning("[%s] %s", source, exc.message)
        return responder.error_response(fragments, exc)
    except Exception as exc:
        LOGGER.exception("[%s] %s", source, exc)
        return responder.error_response(fragments, exc)

    return responder.page_response(
        fragments,
        page,
        if_none_match=headers.get("if-none-match"),
        accept_encoding=accept_encoding,
    )


def _mount_static(app: FastAPI, config: AppConfig, public: Path) -> None:
    app.mount(
        f"/{config.public_dir.strip('/')}",
        StaticFiles(directory=public, check_dir=False),
        name="public",
    )

    def _public_file(name: str):
        async def serve() -> FileResponse:
            path = public / name
            if not path.is_file():
                raise HTTPException(status_code=404, detail="Not Found")
            return FileResponse(path)

        return serve

    for name in ("favicon.ico", "robots.txt"):
        app.add_api_route(f"/{name}", _public_file(name), methods=["GET", "HEAD"], include_in_schema=False)


def create_app(
    config: AppConfig | None = None,
    *,
    base_dir: Path | None = None,
    renderer: DocumentRenderer | None = None,
    install_signal_handlers: bool = True,
) -> FastAPI:
    """Build the application. Raises ConfigError if the content tree is unusable."""
    config = config or AppConfig()
    context = build_context(config, base_dir=base_dir, renderer=renderer)
    invalidator = CacheInvalidator(context)

    app = FastAPI(title="docserve", version="0.1.0", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.context = context
    app.state.invalidator = invalidator

    @app.on_event("startup")
    async def start_invalidator() -> None:
        invalidator.start(install_signal_handler=install_signal_handlers)

    @app.on_event("shutdown")
    async def stop_invalidator() -> None:
        await invalidator.stop()

    _mount_static(app, config, context.root / config.public_dir)

    # Plain def: each request renders on its own threadpool worker.
    def serve_document(request: Request, url_path: str) -> Response:
        return handle(request.app.state.context, url_path, request.headers)

    app.add_api_route(
        "/{url_path:path}",
        serve_document,
        methods=["GET", "HEAD"],
        include_in_schema=False,
    )
    return app
