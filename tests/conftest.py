"""Shared pytest fixtures for browserscope tests.

Provides a recording fake driver (windows, frames, elements, alerts), a
manual clock for deterministic waits and a test configuration.
"""

from __future__ import annotations

from typing import Any

import pytest

from browserscope.core.context import ContextTree
from browserscope.core.session import BrowserSession
from browserscope.core.waiting import Waiter
from browserscope.utils.config import AppConfig
from browserscope.utils.exceptions import (
    NoAlertPresentError,
    NoSuchFrameError,
    NoSuchWindowError,
)

SWITCH_CALLS = ("switch_to_window", "switch_to_frame", "switch_to_default_content")


class FakeDriver:
    """In-memory driver recording every pointer movement.

    Attributes:
        calls: Recorded (method, argument) tuples.
        windows: Handles of open windows in opening order.
        current_window: Window the pointer is on.
        frame_path: Frame locators entered from the window's top document.
        missing_frames: Locators for which switch_to_frame fails.
        elements: Elements returned by find_elements, keyed by selector.
    """

    def __init__(self, windows: list[str] | None = None) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.windows = list(windows or ["main"])
        self.current_window = self.windows[0]
        self.closed: set[str] = set()
        self.frame_path: list[str] = []
        self.missing_frames: set[str] = set()
        self.elements: dict[str, list[Any]] = {}
        self.url = "http://localhost:8080/app/index.html"
        self.page_title = "Sample Page"
        self.alert: Any = None
        self.script_result: Any = None
        self.quit_called = False

    @property
    def switch_calls(self) -> list[tuple[str, Any]]:
        """Recorded calls that move the pointer."""
        return [c for c in self.calls if c[0] in SWITCH_CALLS]

    def reset_calls(self) -> None:
        self.calls.clear()

    def close_window(self, handle: str) -> None:
        """Simulate the user or the page closing a window."""
        self.closed.add(handle)
        self.windows.remove(handle)

    @property
    def current_window_handle(self) -> str:
        if self.current_window in self.closed:
            raise NoSuchWindowError(f"Window {self.current_window} is closed")
        return self.current_window

    @property
    def window_handles(self) -> list[str]:
        return list(self.windows)

    @property
    def current_url(self) -> str:
        return self.url

    @property
    def title(self) -> str:
        return self.page_title

    def switch_to_window(self, handle: str) -> None:
        self.calls.append(("switch_to_window", handle))
        if handle not in self.windows:
            raise NoSuchWindowError(f"No window {handle}")
        self.current_window = handle
        self.frame_path = []

    def switch_to_frame(self, locator: str) -> None:
        self.calls.append(("switch_to_frame", locator))
        if locator in self.missing_frames:
            raise NoSuchFrameError(f"No frame {locator}")
        self.frame_path.append(locator)

    def switch_to_default_content(self) -> None:
        self.calls.append(("switch_to_default_content", None))
        self.frame_path = []

    def find_elements(self, selector: str) -> list[Any]:
        self.calls.append(("find_elements", selector))
        return list(self.elements.get(selector, []))

    def is_displayed(self, element: Any) -> bool:
        return element.is_displayed()

    def navigate(self, url: str) -> None:
        self.calls.append(("navigate", url))
        self.url = url

    def back(self) -> None:
        self.calls.append(("back", None))

    def forward(self) -> None:
        self.calls.append(("forward", None))

    def refresh(self) -> None:
        self.calls.append(("refresh", None))

    def get_alert(self) -> Any:
        if self.alert is None:
            raise NoAlertPresentError()
        return self.alert

    def execute_script(self, script: str, *args: Any) -> Any:
        self.calls.append(("execute_script", script))
        return self.script_result

    def screenshot(self, path: str) -> bytes:
        self.calls.append(("screenshot", path))
        return b"\x89PNG"

    def quit(self) -> None:
        self.quit_called = True


class FakeClock:
    """Manual clock; sleeping advances the time instantly."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_driver() -> FakeDriver:
    """Fake driver with a single window named 'main'."""
    return FakeDriver()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Manual clock starting at zero."""
    return FakeClock()


@pytest.fixture
def waiter(fake_clock: FakeClock) -> Waiter:
    """Waiter driven by the manual clock."""
    return Waiter(clock=fake_clock, sleep=fake_clock.sleep)


@pytest.fixture
def tree() -> ContextTree:
    """Empty context tree."""
    return ContextTree()


@pytest.fixture
def app_config() -> AppConfig:
    """Test configuration.

    No pause after actions and short waits, so unit tests never sleep.
    """
    return AppConfig(
        base_url="http://localhost:8080/app",
        action_timeout=0,
        wait_timeout=1000,
        poll_interval=100,
    )


@pytest.fixture
def session(fake_driver: FakeDriver, app_config: AppConfig, waiter: Waiter) -> BrowserSession:
    """Root session on the fake driver's main window."""
    return BrowserSession(fake_driver, app_config, waiter=waiter)
