"""Fixtures for integration tests.

These tests drive a real Playwright browser against the sample pages in
``pages/``. They need installed browsers (``playwright install chromium``)
and run only when BROWSERSCOPE_BROWSER_TESTS=1.
"""

import http.server
import socket
import socketserver
import threading
from pathlib import Path
from typing import Any

import pytest

from browserscope.core.factory import PlaywrightDriverFactory
from browserscope.core.session import BrowserSession
from browserscope.utils.config import AppConfig

PAGES_DIR = Path(__file__).parent / "pages"


class QuietHandler(http.server.SimpleHTTPRequestHandler):
    """Static file handler that does not log requests."""

    def log_message(self, format: str, *args: Any) -> None:
        pass


class SamplePageServer:
    """Local HTTP server serving the sample pages."""

    def __init__(self, pages_dir: Path, port: int = 8000):
        self.pages_dir = pages_dir
        self.port = port
        self._server: socketserver.TCPServer | None = None
        self._thread: threading.Thread | None = None

    def _create_handler(self) -> type[QuietHandler]:
        """Create a request handler class with pages_dir bound."""
        pages_dir = str(self.pages_dir)

        class BoundHandler(QuietHandler):
            def __init__(self, *args: Any, **kwargs: Any) -> None:
                super().__init__(*args, directory=pages_dir, **kwargs)

        return BoundHandler

    def start(self) -> None:
        """Start the server in a background thread."""
        self._server = socketserver.ThreadingTCPServer(
            ("localhost", self.port), self._create_handler()
        )
        self._server.daemon_threads = True
        self._thread = threading.Thread(target=self._server.serve_forever)
        self._thread.daemon = True
        self._thread.start()

    def stop(self) -> None:
        """Stop the server."""
        if self._server:
            self._server.shutdown()
            self._server.server_close()
            if self._thread:
                self._thread.join(timeout=5)
            self._server = None
            self._thread = None

    @property
    def base_url(self) -> str:
        """Base URL of the sample site."""
        return f"http://localhost:{self.port}"


def get_free_port() -> int:
    """Get a free port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("localhost", 0))
        return s.getsockname()[1]


@pytest.fixture(scope="module")
def page_server():
    """Serve the sample pages for the test module."""
    server = SamplePageServer(PAGES_DIR, port=get_free_port())
    server.start()
    yield server
    server.stop()


@pytest.fixture
def browser_config(page_server) -> AppConfig:
    """Configuration pointing at the sample site."""
    return AppConfig(
        base_url=page_server.base_url,
        action_timeout=0,
        wait_timeout=5000,
        poll_interval=100,
    )


@pytest.fixture
def browser(browser_config):
    """Root session in a headless Chromium, closed after the test."""
    factory = PlaywrightDriverFactory(
        "chromium", headless=True, page_load_timeout=browser_config.page_load_timeout
    )
    with BrowserSession(factory.create(), browser_config) as session:
        yield session
