"""Utilities module for browserscope."""

from .config import AppConfig, ConfigLoader
from .exceptions import (
    AlertError,
    BrowserAssertionError,
    BrowserLocationError,
    BrowserScopeError,
    ConfigurationError,
    ContextLostError,
    DriverLaunchError,
    ElementNotFound,
    ErrorKind,
    InvalidElementStateError,
    InvalidRedirectError,
    NoAlertPresentError,
    NoSuchFrameError,
    NoSuchWindowError,
    PermanentError,
    StaleElementError,
    TitleError,
    TransientError,
    UnexpectedElementStateError,
    WaitTimeoutError,
    error_kind,
    is_transient,
)
from .log import configure_logging

__all__ = [
    "AlertError",
    "AppConfig",
    "BrowserAssertionError",
    "BrowserLocationError",
    "BrowserScopeError",
    "ConfigLoader",
    "ConfigurationError",
    "ContextLostError",
    "DriverLaunchError",
    "ElementNotFound",
    "ErrorKind",
    "InvalidElementStateError",
    "InvalidRedirectError",
    "NoAlertPresentError",
    "NoSuchFrameError",
    "NoSuchWindowError",
    "PermanentError",
    "StaleElementError",
    "TitleError",
    "TransientError",
    "UnexpectedElementStateError",
    "WaitTimeoutError",
    "configure_logging",
    "error_kind",
    "is_transient",
]
