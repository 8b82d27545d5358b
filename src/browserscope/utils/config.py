"""Configuration management for browserscope."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from browserscope.utils.exceptions import ConfigurationError

SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class AppConfig:
    """Test run configuration."""

    base_url: str = ""
    action_timeout: int = 250  # ms, pause after clicks and alert handling
    wait_timeout: int = 10000  # ms
    poll_interval: int = 500  # ms
    page_load_timeout: int = 30000  # ms
    browsers: tuple[str, ...] = ("chromium",)
    headless: bool = True
    stealth: bool = False


class ConfigLoader:
    """Loads configuration from environment variables."""

    @staticmethod
    def load() -> AppConfig:
        """Load configuration from environment.

        Raises:
            ConfigurationError: If a value is present but invalid.
        """
        load_dotenv()  # Load .env file if present

        return AppConfig(
            base_url=os.environ.get("BROWSERSCOPE_BASE_URL", ""),
            action_timeout=ConfigLoader._get_int_env(
                "BROWSERSCOPE_ACTION_TIMEOUT", 250
            ),
            wait_timeout=ConfigLoader._get_int_env("BROWSERSCOPE_WAIT_TIMEOUT", 10000),
            poll_interval=ConfigLoader._get_int_env(
                "BROWSERSCOPE_POLL_INTERVAL", 500
            ),
            page_load_timeout=ConfigLoader._get_int_env(
                "BROWSERSCOPE_PAGE_LOAD_TIMEOUT", 30000
            ),
            browsers=ConfigLoader._get_browsers_env(
                "BROWSERSCOPE_BROWSERS", ("chromium",)
            ),
            headless=ConfigLoader._get_bool_env("BROWSERSCOPE_HEADLESS", True),
            stealth=ConfigLoader._get_bool_env("BROWSERSCOPE_STEALTH", False),
        )

    @staticmethod
    def _get_int_env(name: str, default: int) -> int:
        """Get an integer environment variable.

        Args:
            name: The environment variable name.
            default: The default value if not set.

        Returns:
            The integer value.

        Raises:
            ConfigurationError: If the value is not a valid integer.
        """
        value = os.environ.get(name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for {name}: '{value}' is not a valid integer"
            ) from e

    @staticmethod
    def _get_bool_env(name: str, default: bool) -> bool:
        """Get a boolean environment variable (true/false, 1/0, yes/no, on/off)."""
        value = os.environ.get(name)
        if value is None:
            return default
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        raise ConfigurationError(
            f"Invalid value for {name}: '{value}' is not a valid boolean"
        )

    @staticmethod
    def _get_browsers_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
        """Get a comma separated list of browser names."""
        value = os.environ.get(name)
        if value is None:
            return default
        browsers = tuple(b.strip().lower() for b in value.split(",") if b.strip())
        if not browsers:
            raise ConfigurationError(f"{name} must name at least one browser")
        unknown = [b for b in browsers if b not in SUPPORTED_BROWSERS]
        if unknown:
            raise ConfigurationError(
                f"Invalid value for {name}: unknown browser(s) {', '.join(unknown)}. "
                f"Supported: {', '.join(SUPPORTED_BROWSERS)}"
            )
        return browsers
