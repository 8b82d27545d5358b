"""Unit tests for CLI commands.

Tests cover:
- Version and help output
- Offline URL comparison with its exit codes
- Listing configured browsers
- Opening a URL with a patched driver factory
"""

import re
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from browserscope import __version__
from browserscope.cli.main import app
from browserscope.utils.config import AppConfig
from browserscope.utils.exceptions import ConfigurationError, DriverLaunchError

runner = CliRunner()


def strip_ansi(text: str) -> str:
    """Remove ANSI escape codes from text."""
    ansi_pattern = re.compile(r"\x1b\[[0-9;]*m")
    return ansi_pattern.sub("", text)


class TestAppBasics:
    """Tests for top-level options."""

    def test_version(self) -> None:
        """--version prints the version and exits 0."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"browserscope v{__version__}" in result.output

    def test_help_lists_commands(self) -> None:
        """All commands appear in the help."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        output = strip_ansi(result.output)
        for command in ("browsers", "compare-url", "open"):
            assert command in output


class TestCompareUrl:
    """Tests for the compare-url command."""

    def test_match_exits_zero(self) -> None:
        """Matching URLs exit with 0."""
        result = runner.invoke(
            app,
            ["compare-url", "https://host/path?x=1", "//host/path", "-c", "path_and_query"],
        )
        assert result.exit_code == 0
        assert "match" in strip_ansi(result.output)

    def test_relative_kind(self) -> None:
        """--kind relative resolves against the current URL."""
        result = runner.invoke(
            app,
            [
                "compare-url",
                "http://localhost:8080/app/",
                "/app/",
                "--kind",
                "relative",
                "--component",
                "path",
                "--component",
                "host",
            ],
        )
        assert result.exit_code == 0

    def test_mismatch_exits_one(self) -> None:
        """Different URLs exit with 1."""
        result = runner.invoke(
            app, ["compare-url", "https://host/a", "https://host/b", "-c", "path"]
        )
        assert result.exit_code == 1
        assert "mismatch" in strip_ansi(result.output)

    def test_missing_component_exits_two(self) -> None:
        """Comparing without components is a usage error."""
        result = runner.invoke(app, ["compare-url", "https://host/a", "https://host/a"])
        assert result.exit_code == 2
        assert "UrlComponent" in strip_ansi(result.output)

    def test_invalid_kind_exits_two(self) -> None:
        """Unknown kinds are rejected."""
        result = runner.invoke(
            app, ["compare-url", "https://h/a", "https://h/a", "-k", "sideways", "-c", "path"]
        )
        assert result.exit_code == 2
        assert "Invalid --kind" in strip_ansi(result.output)


class TestBrowsers:
    """Tests for the browsers command."""

    def test_lists_configured_browsers(self) -> None:
        """Each configured browser is listed."""
        config = AppConfig(browsers=("chromium", "firefox"), base_url="http://localhost:5000")
        with patch("browserscope.cli.main.ConfigLoader.load", return_value=config):
            result = runner.invoke(app, ["browsers"])
        output = strip_ansi(result.output)
        assert result.exit_code == 0
        assert "chromium" in output
        assert "firefox" in output
        assert "http://localhost:5000" in output

    def test_configuration_error_exits_two(self) -> None:
        """Invalid configuration exits with 2."""
        with patch(
            "browserscope.cli.main.ConfigLoader.load",
            side_effect=ConfigurationError("Invalid value for BROWSERSCOPE_BROWSERS"),
        ):
            result = runner.invoke(app, ["browsers"])
        assert result.exit_code == 2
        assert "BROWSERSCOPE_BROWSERS" in strip_ansi(result.output)


class TestOpen:
    """Tests for the open command."""

    def test_open_prints_url_and_title(self, fake_driver, app_config) -> None:
        """open navigates and prints the page's URL and title."""
        factory = MagicMock()
        factory.create.return_value = fake_driver
        with (
            patch("browserscope.cli.main.ConfigLoader.load", return_value=app_config),
            patch("browserscope.cli.main.PlaywrightDriverFactory", return_value=factory) as cls,
        ):
            result = runner.invoke(app, ["open", "https://example.com/", "--browser", "webkit"])

        output = strip_ansi(result.output)
        assert result.exit_code == 0
        assert "https://example.com/" in output
        assert "Sample Page" in output
        assert cls.call_args.args == ("webkit",)
        assert fake_driver.quit_called

    def test_launch_failure_exits_one(self, app_config) -> None:
        """Browser errors exit with 1."""
        factory = MagicMock()
        factory.create.side_effect = DriverLaunchError("webkit")
        with (
            patch("browserscope.cli.main.ConfigLoader.load", return_value=app_config),
            patch("browserscope.cli.main.PlaywrightDriverFactory", return_value=factory),
        ):
            result = runner.invoke(app, ["open", "https://example.com/"])
        assert result.exit_code == 1
        assert "Failed to launch browser" in strip_ansi(result.output)
