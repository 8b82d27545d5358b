"""Playwright adapter implementing the DriverProtocol.

Playwright has no global "current window/frame" pointer; every call goes
through a Page or Frame object. PlaywrightDriver keeps that pointer itself
so the ScopeActivator can manage it like any other driver:

- window handles are short ids assigned to the context's pages
- the frame pointer is a Playwright Frame, the page's main frame at the top

JavaScript dialogs block Playwright actions until they are resolved, so they
cannot be left open for a later ``accept()``. The driver resolves each dialog
as soon as it appears with its armed response (accept by default) and keeps
a PlaywrightAlert snapshot that get_alert() returns until it is consumed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from playwright.sync_api import (
    Browser,
    BrowserContext,
    Dialog,
    ElementHandle,
    Frame,
    Page,
    Playwright,
)
from playwright.sync_api import Error as PlaywrightError

from browserscope.utils.exceptions import (
    BrowserScopeError,
    ConfigurationError,
    InvalidElementStateError,
    NoAlertPresentError,
    NoSuchFrameError,
    NoSuchWindowError,
    StaleElementError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DIALOG_RESPONSES = ("accept", "dismiss")

_STALE_MARKERS = ("not attached", "detached", "has been disposed")
_STATE_MARKERS = ("not visible", "not enabled", "not editable", "not stable")

_SUBMIT_SCRIPT = """e => {
    const form = e.tagName === 'FORM' ? e : e.form;
    if (!form) { throw new Error('Element is not part of a form'); }
    if (form.requestSubmit) { form.requestSubmit(); } else { form.submit(); }
}"""


def translate_error(error: PlaywrightError) -> BrowserScopeError:
    """Map a Playwright error to the matching browserscope exception."""
    message = str(error)
    lowered = message.lower()
    if any(marker in lowered for marker in _STALE_MARKERS):
        return StaleElementError(message)
    if any(marker in lowered for marker in _STATE_MARKERS):
        return InvalidElementStateError(message)
    return BrowserScopeError(message)


def _call(operation: Callable[[], T]) -> T:
    try:
        return operation()
    except PlaywrightError as e:
        raise translate_error(e) from e


class PlaywrightElement:
    """An element handle found through PlaywrightDriver."""

    def __init__(self, handle: ElementHandle, action_timeout: int = 5000) -> None:
        self.handle = handle
        self.action_timeout = action_timeout

    def __repr__(self) -> str:
        return f"PlaywrightElement({self.handle!r})"

    @property
    def tag_name(self) -> str:
        return _call(lambda: self.handle.evaluate("e => e.tagName.toLowerCase()"))

    @property
    def text(self) -> str:
        return _call(self.handle.inner_text)

    def click(self) -> None:
        _call(lambda: self.handle.click(timeout=self.action_timeout))

    def submit(self) -> None:
        _call(lambda: self.handle.evaluate(_SUBMIT_SCRIPT))

    def send_keys(self, text: str) -> None:
        _call(lambda: self.handle.press_sequentially(text, timeout=self.action_timeout))

    def clear(self) -> None:
        _call(lambda: self.handle.fill("", timeout=self.action_timeout))

    def get_attribute(self, name: str) -> str | None:
        return _call(lambda: self.handle.get_attribute(name))

    def is_displayed(self) -> bool:
        return _call(self.handle.is_visible)


class PlaywrightAlert:
    """Snapshot of a dialog that the driver has already resolved.

    Attributes:
        text: The dialog's message.
        dialog_type: ``alert``, ``confirm``, ``prompt`` or ``beforeunload``.
        response: How the driver resolved it, ``accept`` or ``dismiss``.
    """

    def __init__(
        self,
        text: str,
        dialog_type: str,
        response: str,
        on_consume: Callable[[PlaywrightAlert], None],
    ) -> None:
        self.text = text
        self.dialog_type = dialog_type
        self.response = response
        self._on_consume = on_consume

    def __repr__(self) -> str:
        return f"PlaywrightAlert({self.dialog_type}, {self.text!r}, {self.response})"

    def _consume(self, requested: str) -> None:
        if requested != self.response:
            raise ConfigurationError(
                f"Dialog '{self.text}' was already resolved with '{self.response}'; "
                f"arm the driver with arm_dialog_response('{requested}') before "
                "triggering it"
            )
        self._on_consume(self)

    def accept(self) -> None:
        self._consume("accept")

    def dismiss(self) -> None:
        self._consume("dismiss")


class PlaywrightDriver:
    """DriverProtocol implementation on top of Playwright's sync API.

    Attributes:
        context: The browser context whose pages are the driver's windows.
        action_timeout: Timeout in ms for element actions.
        page_load_timeout: Timeout in ms for navigations.
    """

    def __init__(
        self,
        context: BrowserContext,
        page: Page | None = None,
        browser: Browser | None = None,
        playwright: Playwright | None = None,
        action_timeout: int = 5000,
        page_load_timeout: int = 30000,
    ) -> None:
        """Initialize the driver.

        Args:
            context: Browser context to drive.
            page: Page to start on; the context's first page (or a new one)
                when omitted.
            browser: Browser to close on quit, if the driver owns it.
            playwright: Playwright instance to stop on quit, if owned.
            action_timeout: Timeout in ms for element actions.
            page_load_timeout: Timeout in ms for navigations.
        """
        self.context = context
        self.action_timeout = action_timeout
        self.page_load_timeout = page_load_timeout
        self._browser = browser
        self._playwright = playwright
        self._pages: dict[str, Page] = {}
        self._counter = 0
        self._dialog_response = "accept"
        self._alerts: dict[str, PlaywrightAlert] = {}

        for existing in context.pages:
            self._register(existing)
        context.on("page", self._register)

        if page is None:
            page = context.pages[0] if context.pages else context.new_page()
        self._page = page
        self._frame: Frame = page.main_frame
        self._handle = self._register(page)

    def _register(self, page: Page) -> str:
        for handle, known in self._pages.items():
            if known is page:
                return handle
        self._counter += 1
        handle = f"page-{self._counter}"
        self._pages[handle] = page
        page.on("dialog", lambda dialog: self._on_dialog(handle, dialog))
        logger.debug(f"Registered window {handle}")
        return handle

    def _on_dialog(self, handle: str, dialog: Dialog) -> None:
        response = self._dialog_response
        alert = PlaywrightAlert(
            dialog.message,
            dialog.type,
            response,
            lambda consumed: self._consume_alert(handle, consumed),
        )
        # Only the latest dialog of each window is kept.
        self._alerts[handle] = alert
        logger.debug(
            f"Dialog {dialog.type} '{dialog.message}' in {handle} resolved with {response}"
        )
        if response == "accept":
            dialog.accept()
        else:
            dialog.dismiss()

    def _consume_alert(self, handle: str, alert: PlaywrightAlert) -> None:
        if self._alerts.get(handle) is alert:
            del self._alerts[handle]

    def _forget_alert(self) -> None:
        self._alerts.pop(self._handle, None)

    def arm_dialog_response(self, response: str) -> None:
        """Choose how upcoming dialogs are resolved.

        Args:
            response: ``accept`` or ``dismiss``.

        Raises:
            ConfigurationError: For any other value.
        """
        if response not in DIALOG_RESPONSES:
            raise ConfigurationError(
                f"Dialog response must be one of {', '.join(DIALOG_RESPONSES)}"
            )
        self._dialog_response = response

    # -- windows and frames --------------------------------------------------

    @property
    def current_window_handle(self) -> str:
        if self._page.is_closed():
            raise NoSuchWindowError(f"Window {self._handle} has been closed")
        return self._handle

    @property
    def window_handles(self) -> list[str]:
        return [h for h, page in self._pages.items() if not page.is_closed()]

    def switch_to_window(self, handle: str) -> None:
        page = self._pages.get(handle)
        if page is None or page.is_closed():
            raise NoSuchWindowError(f"No window with handle {handle}")
        self._page = page
        self._frame = page.main_frame
        self._handle = handle

    def switch_to_frame(self, locator: str) -> None:
        try:
            element = self._frame.query_selector(locator)
            frame = element.content_frame() if element is not None else None
        except PlaywrightError as e:
            raise NoSuchFrameError(f"Cannot enter frame '{locator}': {e}") from e
        if frame is None:
            raise NoSuchFrameError(f"No frame matches '{locator}'")
        self._frame = frame

    def switch_to_default_content(self) -> None:
        self._frame = self._page.main_frame

    # -- documents -----------------------------------------------------------

    @property
    def current_url(self) -> str:
        return self._page.url

    @property
    def title(self) -> str:
        return _call(self._page.title)

    def find_elements(self, selector: str) -> list[PlaywrightElement]:
        handles = _call(lambda: self._frame.query_selector_all(selector))
        return [PlaywrightElement(h, self.action_timeout) for h in handles]

    def is_displayed(self, element: PlaywrightElement) -> bool:
        return element.is_displayed()

    def navigate(self, url: str) -> None:
        self._forget_alert()
        _call(lambda: self._page.goto(url, timeout=self.page_load_timeout))
        self._frame = self._page.main_frame

    def back(self) -> None:
        self._forget_alert()
        _call(lambda: self._page.go_back(timeout=self.page_load_timeout))

    def forward(self) -> None:
        self._forget_alert()
        _call(lambda: self._page.go_forward(timeout=self.page_load_timeout))

    def refresh(self) -> None:
        self._forget_alert()
        _call(lambda: self._page.reload(timeout=self.page_load_timeout))

    def get_alert(self) -> PlaywrightAlert:
        """Return the unhandled dialog snapshot of the current window."""
        alert = self._alerts.get(self._handle)
        if alert is None:
            raise NoAlertPresentError()
        return alert

    def execute_script(self, script: str, *args: Any) -> Any:
        """Evaluate a JavaScript expression or function in the current frame.

        Positional arguments are passed to the function as one array.
        """
        if args:
            return _call(lambda: self._frame.evaluate(script, list(args)))
        return _call(lambda: self._frame.evaluate(script))

    def screenshot(self, path: str) -> bytes:
        return _call(lambda: self._page.screenshot(path=path, full_page=True))

    def quit(self) -> None:
        """Close the context, and the browser and Playwright if owned."""
        self.context.close()
        if self._browser is not None:
            self._browser.close()
        if self._playwright is not None:
            self._playwright.stop()
        self._browser = None
        self._playwright = None
        self._alerts.clear()
