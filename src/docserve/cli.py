"""Command line interface for docserve."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from docserve.config import AppConfig
from docserve.errors import ConfigError
from docserve.web.app import build_context, create_app


console = Console()
app = typer.Typer(help="docserve - serve a directory of markdown documents over HTTP")

_DEFAULTS = AppConfig()

RootOption = typer.Option(
    _DEFAULTS.content_root, "--root", "--path", envvar="DOCSERVE_ROOT", help="Content root directory"
)
PublicOption = typer.Option(
    _DEFAULTS.public_dir, "--public", envvar="DOCSERVE_PUBLIC", help="Name of the public (static) directory"
)
TemplateOption = typer.Option(
    _DEFAULTS.template_name, "--template", "--tmpl", envvar="DOCSERVE_TEMPLATE", help="Template file name"
)
HomeOption = typer.Option(
    _DEFAULTS.home_dir, "--home", envvar="DOCSERVE_HOME", help="Directory served for top-level paths"
)
DefaultOption = typer.Option(
    _DEFAULTS.default_name, "--default", envvar="DOCSERVE_DEFAULT", help="Default document name"
)
ExtOption = typer.Option(
    _DEFAULTS.extension, "--ext", envvar="DOCSERVE_EXT", help="Extension of the source documents"
)
IndexTitleOption = typer.Option(
    _DEFAULTS.index_title, "--index-title", envvar="DOCSERVE_INDEX_TITLE", help="Heading of index listings"
)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _build_config(**options) -> AppConfig:
    try:
        return AppConfig(**options)
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc


@app.command()
def serve(
    host: str = typer.Option(_DEFAULTS.host, envvar="DOCSERVE_HOST", help="Host interface"),
    port: int = typer.Option(_DEFAULTS.port, envvar="DOCSERVE_PORT", help="Server port"),
    root: Path = RootOption,
    public: str = PublicOption,
    template: str = TemplateOption,
    home: str = HomeOption,
    default: str = DefaultOption,
    ext: str = ExtOption,
    index_title: str = IndexTitleOption,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Start the HTTP server."""
    _setup_logging(verbose)
    config = _build_config(
        host=host,
        port=port,
        content_root=root,
        public_dir=public,
        template_name=template,
        home_dir=home,
        default_name=default,
        extension=ext,
        index_title=index_title,
    )

    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - defensive
        raise typer.BadParameter(
            "uvicorn is not installed. Install it with \"python -m pip install uvicorn\""
        ) from exc

    try:
        web_app = create_app(config, base_dir=Path.cwd())
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    console.print(
        f"Serving [bold]{web_app.state.context.root}[/bold] on http://{config.host}:{config.port}"
    )
    uvicorn.run(web_app, host=config.host, port=config.port, log_level="info")


@app.command()
def check(
    root: Path = RootOption,
    template: str = TemplateOption,
    default: str = DefaultOption,
    ext: str = ExtOption,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Validate the template and every index descriptor without serving."""
    _setup_logging(verbose)
    config = _build_config(
        content_root=root,
        template_name=template,
        default_name=default,
        extension=ext,
    )

    try:
        context = build_context(config, base_dir=Path.cwd())
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    console.print(f"Template [bold]{context.templates.path}[/bold] is valid.")
    if not context.indexes:
        console.print("[yellow]No index descriptors found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Descriptor")
    table.add_column("Entries", justify="right")
    for path, entries in sorted(context.indexes.items()):
        table.add_row(path, str(len(entries)))

    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
