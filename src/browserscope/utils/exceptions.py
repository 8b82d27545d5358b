"""Exception hierarchy for browserscope.

Every exception carries an ``ErrorKind`` tag. The wait/retry engine decides
what to swallow by looking at the tag, never at the concrete class.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Classification tags for errors raised while driving a browser."""

    CONFIGURATION = "configuration"
    TRANSIENT = "transient"
    CONTEXT_LOST = "context_lost"
    WAIT_TIMEOUT = "wait_timeout"
    ASSERTION = "assertion"
    ELEMENT_NOT_FOUND = "element_not_found"
    DRIVER = "driver"


class BrowserScopeError(Exception):
    """Base exception for all browserscope errors."""

    kind: ErrorKind = ErrorKind.DRIVER


class TransientError(BrowserScopeError):
    """Driver errors expected to resolve on their own shortly."""

    kind = ErrorKind.TRANSIENT


class PermanentError(BrowserScopeError):
    """Errors that will not go away by retrying."""


class ConfigurationError(PermanentError):
    """Invalid or missing configuration, or a misused API."""

    kind = ErrorKind.CONFIGURATION


class InvalidRedirectError(ConfigurationError):
    """Navigation requested without a URL and without a base URL."""

    def __init__(self) -> None:
        super().__init__(
            "Cannot navigate: no URL given and no base URL is configured"
        )


class StaleElementError(TransientError):
    """The element is no longer attached to the document."""


class InvalidElementStateError(TransientError):
    """The element exists but cannot be interacted with right now."""


class ElementNotFound(BrowserScopeError):  # noqa: N818
    """No element matched the selector.

    Not transient: a predicate wait lets it propagate. Wrap the lookup in an
    action retry to wait for an element to appear.
    """

    kind = ErrorKind.ELEMENT_NOT_FOUND


class NoSuchWindowError(PermanentError):
    """The requested window does not exist (anymore)."""

    kind = ErrorKind.CONTEXT_LOST


class NoSuchFrameError(PermanentError):
    """The requested frame could not be found in the current document."""

    kind = ErrorKind.CONTEXT_LOST


class ContextLostError(PermanentError):
    """A browsing context can no longer be activated.

    Raised when the window or frame a context lives in has been closed or
    removed. The context stays lost; activating it again fails immediately.
    """

    kind = ErrorKind.CONTEXT_LOST

    def __init__(self, scope_id: str, window_handle: str, reason: str = "") -> None:
        """Initialize ContextLostError with the identity of the lost context.

        Args:
            scope_id: Scope id of the context that was lost.
            window_handle: Native window handle the context lived in.
            reason: Optional detail from the underlying driver error.
        """
        self.scope_id = scope_id
        self.window_handle = window_handle
        message = f"Context {scope_id} (window {window_handle}) is no longer available"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DriverLaunchError(PermanentError):
    """The browser driver could not be started."""

    def __init__(self, browser_name: str) -> None:
        self.browser_name = browser_name
        super().__init__(f"Failed to launch browser '{browser_name}'")


class WaitTimeoutError(BrowserScopeError):
    """A wait or retry did not succeed before its deadline."""

    kind = ErrorKind.WAIT_TIMEOUT

    def __init__(self, message: str | None, elapsed_ms: float | None = None) -> None:
        self.elapsed_ms = elapsed_ms
        super().__init__(message or "Wait timed out")


class BrowserAssertionError(BrowserScopeError):
    """A check on the page did not hold.

    Attributes:
        expected: The expected value, if the check compared values.
        actual: The value found in the browser.
    """

    kind = ErrorKind.ASSERTION

    def __init__(
        self,
        message: str,
        expected: object | None = None,
        actual: object | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class BrowserLocationError(BrowserAssertionError):
    """Current URL is not the expected one."""


class AlertError(BrowserAssertionError):
    """Alert is missing or its text is not the expected one."""


class NoAlertPresentError(AlertError):
    """The driver has no open alert."""

    def __init__(self, message: str = "No alert is open") -> None:
        super().__init__(message)


class TitleError(BrowserAssertionError):
    """Page title is not the expected one."""


class UnexpectedElementStateError(BrowserAssertionError):
    """Element is displayed/hidden or tagged differently than expected."""


def error_kind(error: BaseException) -> ErrorKind:
    """Return the classification tag of an exception.

    Exceptions that are not browserscope errors are classified as
    ``ErrorKind.DRIVER``.
    """
    if isinstance(error, BrowserScopeError):
        return error.kind
    return ErrorKind.DRIVER


def is_transient(kind: ErrorKind) -> bool:
    """Default ignorable classification for predicate waits."""
    return kind is ErrorKind.TRANSIENT
