"""Run one browser test against every registered browser."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from browserscope.core.factory import DriverFactoryRegistry
from browserscope.core.session import BrowserSession
from browserscope.utils.config import AppConfig, ConfigLoader
from browserscope.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class BrowserTestRunner:
    """Runs test callables once per browser in a DriverFactoryRegistry.

    Example:
        >>> runner = BrowserTestRunner()
        >>> runner.run_in_all_browsers(
        ...     lambda browser: browser.navigate("/").check_title_equals("Home")
        ... )
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        registry: DriverFactoryRegistry | None = None,
    ) -> None:
        self.config = config or ConfigLoader.load()
        if registry is None:
            registry = DriverFactoryRegistry.from_config(self.config)
        self.registry = registry

    def run_in_all_browsers(self, test: Callable[[BrowserSession], Any]) -> None:
        """Run ``test`` with a fresh root session in every registered browser.

        All browsers run even when one fails; the session is always closed.

        Args:
            test: Callable receiving the session.

        Raises:
            ConfigurationError: If no browsers are registered.
            Exception: The first failure, after every browser has run. Its
                message gets the browser name appended as a note.
        """
        if not len(self.registry):
            raise ConfigurationError("No browser factories registered")

        failures: list[tuple[str, Exception]] = []
        for factory in self.registry:
            logger.info(f"Running test in {factory.name}")
            try:
                driver = factory.create()
                with BrowserSession.open(driver, self.config) as session:
                    test(session)
            except Exception as e:
                logger.error(f"Test failed in {factory.name}: {type(e).__name__}: {e}")
                failures.append((factory.name, e))

        if failures:
            name, error = failures[0]
            error.add_note(f"Browser: {name}")
            if len(failures) > 1:
                others = ", ".join(n for n, _ in failures[1:])
                error.add_note(f"Also failed in: {others}")
            raise error
