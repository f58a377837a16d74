"""Tests for CLI commands."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from docserve.cli import _setup_logging, app


runner = CliRunner()


class TestSetupLogging:
    """Tests for _setup_logging helper."""

    def test_setup_logging_verbose(self) -> None:
        """Verbose mode sets DEBUG level."""
        with patch("docserve.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        """Normal mode sets INFO level."""
        with patch("docserve.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            mock_config.assert_called_once()
            assert mock_config.call_args[1]["level"] == logging.INFO


class TestCheckCommand:
    """Tests for the check command."""

    def test_check_valid_site(self, site: Path) -> None:
        """Reports the template and every descriptor."""
        (site / "blog" / "index.json").write_text(json.dumps([{"name": "A"}, {"name": "B"}]))

        result = runner.invoke(app, ["check", "--root", str(site)])

        assert result.exit_code == 0
        assert "valid" in result.stdout
        assert "Entries" in result.stdout

    def test_check_without_indexes(self, site: Path) -> None:
        result = runner.invoke(app, ["check", "--root", str(site)])

        assert result.exit_code == 0
        assert "No index descriptors found" in result.stdout

    def test_check_invalid_template(self, site: Path) -> None:
        """Exits with an error for a template without a placeholder."""
        (site / "template.html").write_text("<html></html>")

        result = runner.invoke(app, ["check", "--root", str(site)])

        assert result.exit_code == 1
        assert "exactly" in result.stdout

    def test_check_reads_environment(self, site: Path) -> None:
        result = runner.invoke(app, ["check"], env={"DOCSERVE_ROOT": str(site)})

        assert result.exit_code == 0

    def test_check_empty_extension(self, site: Path) -> None:
        result = runner.invoke(app, ["check", "--root", str(site), "--ext", ""])

        assert result.exit_code == 1


class TestServeCommand:
    """Tests for the serve command."""

    @patch("uvicorn.run")
    def test_serve_starts_uvicorn(self, mock_run: MagicMock, site: Path) -> None:
        """Builds the app from options and hands it to uvicorn."""
        result = runner.invoke(
            app,
            ["serve", "--root", str(site), "--home", "blog", "--host", "0.0.0.0", "--port", "9000"],
        )

        assert result.exit_code == 0
        mock_run.assert_called_once()
        web_app = mock_run.call_args[0][0]
        assert web_app.state.context.config.home_dir == "blog"
        assert web_app.state.context.root == site
        assert mock_run.call_args[1]["host"] == "0.0.0.0"
        assert mock_run.call_args[1]["port"] == 9000

    @patch("uvicorn.run")
    def test_serve_invalid_site(self, mock_run: MagicMock, tmp_path: Path) -> None:
        """Refuses to start when the content root has no template."""
        result = runner.invoke(app, ["serve", "--root", str(tmp_path)])

        assert result.exit_code == 1
        mock_run.assert_not_called()
