"""Driver factories and the registry the test runner iterates over."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Protocol, runtime_checkable

from playwright.sync_api import sync_playwright
from playwright_stealth import Stealth

from browserscope.core.driver import PlaywrightDriver
from browserscope.core.protocols import DriverProtocol
from browserscope.utils.config import SUPPORTED_BROWSERS, AppConfig
from browserscope.utils.exceptions import ConfigurationError, DriverLaunchError

logger = logging.getLogger(__name__)


@runtime_checkable
class DriverFactory(Protocol):
    """Creates a fresh driver for one test run."""

    @property
    def name(self) -> str:
        """Name shown in logs and failure messages."""
        ...

    def create(self) -> DriverProtocol:
        """Start a browser and return a driver for it."""
        ...


class PlaywrightDriverFactory:
    """Launches a Playwright browser and wraps it in a PlaywrightDriver.

    Attributes:
        browser_name: ``chromium``, ``firefox`` or ``webkit``.
        headless: Whether to run without a visible window.
        stealth: Whether to apply playwright-stealth evasions.
        page_load_timeout: Navigation timeout in milliseconds.
    """

    def __init__(
        self,
        browser_name: str = "chromium",
        headless: bool = True,
        stealth: bool = False,
        page_load_timeout: int = 30000,
    ) -> None:
        if browser_name not in SUPPORTED_BROWSERS:
            raise ConfigurationError(
                f"Unknown browser '{browser_name}'. "
                f"Supported: {', '.join(SUPPORTED_BROWSERS)}"
            )
        self.browser_name = browser_name
        self.headless = headless
        self.stealth = stealth
        self.page_load_timeout = page_load_timeout

    def __repr__(self) -> str:
        return f"PlaywrightDriverFactory({self.browser_name}, headless={self.headless})"

    @property
    def name(self) -> str:
        return self.browser_name

    def create(self) -> PlaywrightDriver:
        """Launch the browser.

        Raises:
            DriverLaunchError: If Playwright cannot start the browser.
        """
        logger.info(f"Launching {self.browser_name} (headless={self.headless})")
        playwright = sync_playwright().start()
        try:
            browser = getattr(playwright, self.browser_name).launch(headless=self.headless)
            context = browser.new_context()
            if self.stealth:
                Stealth().apply_stealth_sync(context)
            page = context.new_page()
        except Exception as e:
            playwright.stop()
            raise DriverLaunchError(self.browser_name) from e

        return PlaywrightDriver(
            context,
            page=page,
            browser=browser,
            playwright=playwright,
            page_load_timeout=self.page_load_timeout,
        )


class DriverFactoryMethod:
    """Adapts a plain callable returning a driver to the DriverFactory protocol."""

    def __init__(self, method: Callable[[], DriverProtocol], name: str | None = None) -> None:
        self.method = method
        self._name = name or getattr(method, "__name__", "custom")

    @property
    def name(self) -> str:
        return self._name

    def create(self) -> DriverProtocol:
        return self.method()


class DriverFactoryRegistry:
    """Ordered collection of the driver factories a test runs against."""

    def __init__(self, factories: list[DriverFactory] | None = None) -> None:
        self.factories: list[DriverFactory] = list(factories or [])

    def __iter__(self) -> Iterator[DriverFactory]:
        return iter(self.factories)

    def __len__(self) -> int:
        return len(self.factories)

    @classmethod
    def from_config(cls, config: AppConfig) -> DriverFactoryRegistry:
        """Create a registry with one Playwright factory per configured browser."""
        return cls(
            [
                PlaywrightDriverFactory(
                    name,
                    headless=config.headless,
                    stealth=config.stealth,
                    page_load_timeout=config.page_load_timeout,
                )
                for name in config.browsers
            ]
        )

    def register(self, factory: DriverFactory) -> None:
        """Add a factory."""
        self.factories.append(factory)

    def register_method(
        self, method: Callable[[], DriverProtocol], name: str | None = None
    ) -> None:
        """Add a callable that creates a driver."""
        self.factories.append(DriverFactoryMethod(method, name))

    def clear(self) -> None:
        """Remove all factories."""
        self.factories.clear()
