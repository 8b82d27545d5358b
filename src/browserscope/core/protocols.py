"""Core protocols and enums for browserscope.

This module defines the capability surface the engine needs from a browser
automation driver, plus the small value types shared across modules:
- UrlKind and UrlComponent for URL comparison
- ElementProtocol, AlertProtocol and DriverProtocol for driver adapters

Adapters translate their native errors into browserscope exceptions:
NoSuchWindowError, NoSuchFrameError, StaleElementError,
InvalidElementStateError and NoAlertPresentError.
"""

from enum import Enum, Flag, auto
from typing import Any, Protocol, runtime_checkable


class UrlKind(Enum):
    """Whether an expected URL is absolute or relative to the current page."""

    ABSOLUTE = auto()
    RELATIVE = auto()


class UrlComponent(Flag):
    """URL parts that take part in a comparison.

    Members combine with ``|``; composites cover the usual groupings.
    """

    SCHEME = auto()
    HOST = auto()
    PATH = auto()
    QUERY = auto()
    FRAGMENT = auto()
    PATH_AND_QUERY = PATH | QUERY
    SCHEME_AND_HOST = SCHEME | HOST
    ALL = SCHEME | HOST | PATH | QUERY | FRAGMENT


@runtime_checkable
class ElementProtocol(Protocol):
    """An element found by the driver."""

    @property
    def tag_name(self) -> str:
        """Lower-case tag name of the element."""
        ...

    @property
    def text(self) -> str:
        """Visible text of the element."""
        ...

    def click(self) -> None:
        """Click the element."""
        ...

    def submit(self) -> None:
        """Submit the form the element belongs to."""
        ...

    def send_keys(self, text: str) -> None:
        """Type text into the element."""
        ...

    def clear(self) -> None:
        """Clear the element's value."""
        ...

    def get_attribute(self, name: str) -> str | None:
        """Return an attribute value, or None when absent."""
        ...

    def is_displayed(self) -> bool:
        """Whether the element is visible."""
        ...


@runtime_checkable
class AlertProtocol(Protocol):
    """A JavaScript dialog (alert, confirm, prompt)."""

    @property
    def text(self) -> str:
        """Message shown by the dialog."""
        ...

    def accept(self) -> None:
        """Accept (OK) the dialog."""
        ...

    def dismiss(self) -> None:
        """Dismiss (Cancel) the dialog."""
        ...


@runtime_checkable
class DriverProtocol(Protocol):
    """Capability surface consumed from a browser automation driver.

    The driver has one live pointer: the window and frame its commands run
    against. The ScopeActivator is the only component that moves it.
    """

    @property
    def current_window_handle(self) -> str:
        """Handle of the window the driver points at.

        Raises:
            NoSuchWindowError: If that window has been closed.
        """
        ...

    @property
    def window_handles(self) -> list[str]:
        """Handles of all open windows, in opening order."""
        ...

    @property
    def current_url(self) -> str:
        """Absolute URL of the current top-level document."""
        ...

    @property
    def title(self) -> str:
        """Title of the current top-level document."""
        ...

    def switch_to_window(self, handle: str) -> None:
        """Point the driver at a window; the frame pointer resets to its top.

        Raises:
            NoSuchWindowError: If the window does not exist.
        """
        ...

    def switch_to_frame(self, locator: str) -> None:
        """Enter the frame matched by ``locator`` inside the current document.

        Raises:
            NoSuchFrameError: If no frame matches.
        """
        ...

    def switch_to_default_content(self) -> None:
        """Point the driver at the top document of the current window."""
        ...

    def find_elements(self, selector: str) -> list[ElementProtocol]:
        """Return all elements matching the selector in the current document."""
        ...

    def is_displayed(self, element: ElementProtocol) -> bool:
        """Whether the element is visible."""
        ...

    def navigate(self, url: str) -> None:
        """Load ``url`` in the current window."""
        ...

    def back(self) -> None:
        """Go back in history."""
        ...

    def forward(self) -> None:
        """Go forward in history."""
        ...

    def refresh(self) -> None:
        """Reload the current page."""
        ...

    def get_alert(self) -> AlertProtocol:
        """Return the open dialog.

        Raises:
            NoAlertPresentError: If no dialog is open.
        """
        ...

    def execute_script(self, script: str, *args: Any) -> Any:
        """Run JavaScript in the current document and return its result."""
        ...

    def screenshot(self, path: str) -> bytes:
        """Save a PNG screenshot to ``path`` and return its bytes."""
        ...

    def quit(self) -> None:
        """End the native session and close all windows."""
        ...
