"""Browser session wrapper.

A BrowserSession is bound to one browsing context (a window or a frame) and
exposes navigation, element lookup, alert, title and URL checks for it.
Every operation first activates the session's context, so a test can keep
sessions for a page, its frames and popup windows side by side and use them
in any order.

Example:
    >>> with BrowserSession(driver, config) as browser:
    ...     browser.navigate("/login")
    ...     form = browser.frame_scope("#login-frame")
    ...     form.send_keys("#user", "admin").click("#submit")
    ...     browser.check_url("/dashboard", UrlKind.RELATIVE, UrlComponent.PATH)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path
from types import TracebackType
from typing import Any, TypeVar

from browserscope.core.activator import ScopeActivator
from browserscope.core.context import ContextHandle, ContextTree
from browserscope.core.protocols import (
    AlertProtocol,
    DriverProtocol,
    ElementProtocol,
    UrlComponent,
    UrlKind,
)
from browserscope.core.urls import compare_url, navigation_target, url_path, urls_equal
from browserscope.core.waiting import Waiter, WaitSpec, never_ignore
from browserscope.utils.config import AppConfig, ConfigLoader
from browserscope.utils.exceptions import (
    AlertError,
    BrowserLocationError,
    ConfigurationError,
    ElementNotFound,
    NoSuchWindowError,
    TitleError,
    UnexpectedElementStateError,
    is_transient,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

FRAME_TAGS = ("iframe", "frame")

_BLUR_SCRIPT = (
    "if(document.activeElement && document.activeElement.blur) "
    "{document.activeElement.blur()}"
)


class BrowserSession:
    """Fluent wrapper around a driver, bound to one browsing context.

    Attributes:
        config: Test run configuration (timeouts, base URL).
        base_url: Base URL for relative navigation; defaults to the config's.
        action_timeout: Pause in ms after clicks, typing and alert handling.
        activator: Shared scope activator of the root session.
        context: The browsing context this session operates on.
    """

    def __init__(
        self,
        driver: DriverProtocol,
        config: AppConfig | None = None,
        activator: ScopeActivator | None = None,
        context: ContextHandle | None = None,
        waiter: Waiter | None = None,
    ) -> None:
        """Initialize the session.

        Without ``activator`` and ``context`` a new root session is created
        for the window the driver currently points at.

        Args:
            driver: Driver to operate.
            config: Configuration; loaded from the environment when omitted.
            activator: Activator shared with the session this one derives from.
            context: Context to bind to; must belong to the activator's tree.
            waiter: Polling implementation used by wait_for and retry.
        """
        self._driver = driver
        self.config = config or ConfigLoader.load()
        self.base_url = self.config.base_url
        self.action_timeout = self.config.action_timeout
        self.activator = activator or ScopeActivator(driver, ContextTree())
        if context is None:
            context = self.activator.tree.open_window(driver.current_window_handle)
        elif context not in self.activator.tree:
            raise ConfigurationError(
                f"Context {context.scope_id} does not belong to this session"
            )
        self.context = context
        self._waiter = waiter or Waiter()

    @classmethod
    def open(cls, driver: DriverProtocol, config: AppConfig | None = None) -> BrowserSession:
        """Create a root session that owns ``driver``.

        The driver is quit if the session cannot be set up, for example when
        its current window is already gone.
        """
        try:
            return cls(driver, config)
        except Exception:
            driver.quit()
            raise

    def __repr__(self) -> str:
        return f"BrowserSession({self.context.describe()}, state={self.state})"

    def __enter__(self) -> BrowserSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # -- scope ---------------------------------------------------------------

    @property
    def driver(self) -> DriverProtocol:
        """The driver, pointed at this session's context."""
        self.activate()
        return self._driver

    def unscoped_driver(self) -> DriverProtocol:
        """Return the driver without activating this session's context.

        The caller may move the driver's pointer freely; the next scoped
        operation re-enters its context from the top.
        """
        self.activator.invalidate()
        return self._driver

    def activate(self) -> BrowserSession:
        """Point the driver at this session's context."""
        self.activator.activate(self.context)
        return self

    @property
    def state(self) -> str:
        """Lifecycle state of this session's context."""
        return self.activator.tree.state_of(self.context).current_state_value

    @property
    def is_frame(self) -> bool:
        """Whether this session is bound to a frame."""
        return self.context.is_frame

    def _derive(self, context: ContextHandle) -> BrowserSession:
        session = BrowserSession(
            self._driver,
            self.config,
            activator=self.activator,
            context=context,
            waiter=self._waiter,
        )
        session.base_url = self.base_url
        session.action_timeout = self.action_timeout
        return session

    def frame_scope(self, selector: str) -> BrowserSession:
        """Open a session for the frame element matched by ``selector``.

        Args:
            selector: Selector of an ``iframe`` or ``frame`` element in this
                session's document.

        Returns:
            A session bound to the frame, already activated.

        Raises:
            ElementNotFound: If nothing matches the selector.
            UnexpectedElementStateError: If the element is not a frame.
        """
        element = self.first(selector)
        tag_name = (element.tag_name or "").lower()
        if tag_name not in FRAME_TAGS:
            raise UnexpectedElementStateError(
                f"The selected element '{selector}' is not an iframe element.",
                expected="iframe",
                actual=tag_name,
            )
        handle = self.activator.tree.open_frame(self.context, selector)
        return self._derive(handle).activate()

    @property
    def window_handles(self) -> list[str]:
        """Handles of all open windows."""
        return list(self._driver.window_handles)

    def _window_context(self, window: int | str) -> ContextHandle:
        handles = self.window_handles
        if isinstance(window, int):
            try:
                window_handle = handles[window]
            except IndexError as e:
                raise ConfigurationError(
                    f"No window at index {window}; {len(handles)} window(s) open"
                ) from e
        else:
            window_handle = window
            if window_handle not in handles:
                raise NoSuchWindowError(f"No window with handle {window_handle}")

        tree = self.activator.tree
        for existing in tree.windows():
            if existing.window_handle == window_handle and not tree.state_of(existing).is_lost:
                return existing
        return tree.open_window(window_handle)

    def window_scope(self, window: int | str) -> BrowserSession:
        """Open a session for another top-level window or tab.

        Args:
            window: Index into ``window_handles`` or a window handle.

        Returns:
            A root session bound to that window, already activated.
        """
        return self._derive(self._window_context(window)).activate()

    def switch_to_tab(self, index: int) -> BrowserSession:
        """Rebind this root session to the window at ``index``.

        Raises:
            ConfigurationError: If called on a frame session.
        """
        if self.is_frame:
            raise ConfigurationError("switch_to_tab is only available on window sessions")
        self.context = self._window_context(index)
        return self.activate()

    def close(self) -> None:
        """End the native session if this is a window session.

        Frames have no lifecycle of their own, closing them does nothing.
        """
        if self.is_frame:
            return
        logger.info("Closing browser session")
        self.activator.invalidate()
        self._driver.quit()

    # -- navigation ----------------------------------------------------------

    def navigate(self, url: str | None = None) -> BrowserSession:
        """Navigate to ``url``.

        Absolute URLs are loaded directly, ``//host/path`` keeps the current
        scheme, other relative URLs are combined with ``base_url`` (not with
        the current page). Without ``url`` the base URL itself is loaded.

        Raises:
            InvalidRedirectError: If the base URL is needed but empty.
        """
        driver = self.driver
        current = driver.current_url if url and url.startswith("//") else None
        target = navigation_target(url, self.base_url, current)
        logger.info(f"Start navigation to: {target}")
        driver.navigate(target)
        self.activator.invalidate()
        return self

    def navigate_back(self) -> BrowserSession:
        """Go back in the browser history."""
        self.driver.back()
        self.activator.invalidate()
        return self

    def navigate_forward(self) -> BrowserSession:
        """Go forward in the browser history."""
        self.driver.forward()
        self.activator.invalidate()
        return self

    def refresh(self) -> BrowserSession:
        """Reload the current page."""
        self.driver.refresh()
        self.activator.invalidate()
        return self

    @property
    def current_url(self) -> str:
        """URL of the page shown in this session's window."""
        return self.driver.current_url

    @property
    def current_url_path(self) -> str:
        """Current URL without query and fragment."""
        return url_path(self.current_url)

    # -- URL checks ----------------------------------------------------------

    def compare_url(self, url: str, kind: UrlKind, *components: UrlComponent) -> bool:
        """Compare selected parts of the current URL with ``url``.

        See ``browserscope.core.urls.compare_url``.
        """
        return compare_url(self.current_url, url, kind, *components)

    def check_url(self, url: str, kind: UrlKind, *components: UrlComponent) -> BrowserSession:
        """Check selected parts of the current URL.

        Raises:
            ConfigurationError: If no components are given.
            BrowserLocationError: If the URLs differ.
        """
        current = self.current_url
        if not compare_url(current, url, kind, *components):
            raise BrowserLocationError(
                f"Current url is not expected. Current url: '{current}'. "
                f"Expected url: '{url}'",
                expected=url,
                actual=current,
            )
        return self

    def check_url_equals(self, url: str) -> BrowserSession:
        """Check that the current URL equals ``url`` exactly (fragment aside)."""
        current = self.current_url
        if not urls_equal(current, url):
            raise BrowserLocationError(
                f"Current url is not expected. Current url: '{current}', "
                f"Expected url: '{url}'.",
                expected=url,
                actual=current,
            )
        return self

    def check_url_matches(
        self, predicate: Callable[[str], bool], failure_message: str | None = None
    ) -> BrowserSession:
        """Check the current URL against an arbitrary condition."""
        current = self.current_url
        if not predicate(current):
            raise BrowserLocationError(
                f"Current url is not expected. Current url: '{current}'. "
                + (failure_message or ""),
                actual=current,
            )
        return self

    # -- elements ------------------------------------------------------------

    def find_elements(self, selector: str) -> list[ElementProtocol]:
        """Return all elements matching ``selector`` in this context."""
        return list(self.driver.find_elements(selector))

    def first_or_default(self, selector: str) -> ElementProtocol | None:
        """Return the first matching element, or None."""
        elements = self.find_elements(selector)
        return elements[0] if elements else None

    def first(self, selector: str) -> ElementProtocol:
        """Return the first matching element.

        Raises:
            ElementNotFound: If nothing matches.
        """
        element = self.first_or_default(selector)
        if element is None:
            raise ElementNotFound(f"Element not found. Selector: {selector}")
        return element

    def single_or_default(self, selector: str) -> ElementProtocol | None:
        """Return the only matching element, or None when nothing matches.

        Raises:
            UnexpectedElementStateError: If more than one element matches.
        """
        elements = self.find_elements(selector)
        if len(elements) > 1:
            raise UnexpectedElementStateError(
                f"Selector '{selector}' matched {len(elements)} elements, expected one.",
                expected=1,
                actual=len(elements),
            )
        return elements[0] if elements else None

    def single(self, selector: str) -> ElementProtocol:
        """Return the only matching element.

        Raises:
            ElementNotFound: If nothing matches.
            UnexpectedElementStateError: If more than one element matches.
        """
        element = self.single_or_default(selector)
        if element is None:
            raise ElementNotFound(f"Element not found. Selector: {selector}")
        return element

    def last_or_default(self, selector: str) -> ElementProtocol | None:
        """Return the last matching element, or None."""
        elements = self.find_elements(selector)
        return elements[-1] if elements else None

    def last(self, selector: str) -> ElementProtocol:
        """Return the last matching element.

        Raises:
            ElementNotFound: If nothing matches.
        """
        element = self.last_or_default(selector)
        if element is None:
            raise ElementNotFound(f"Element not found. Selector: {selector}")
        return element

    def element_at(self, selector: str, index: int) -> ElementProtocol:
        """Return the matching element at ``index``.

        Raises:
            ElementNotFound: If fewer elements match.
        """
        elements = self.find_elements(selector)
        try:
            return elements[index]
        except IndexError as e:
            raise ElementNotFound(
                f"Element not found. Selector: {selector}, index: {index}, "
                f"matched: {len(elements)}"
            ) from e

    def for_each(
        self, selector: str, action: Callable[[ElementProtocol], Any]
    ) -> BrowserSession:
        """Call ``action`` for every matching element."""
        for element in self.find_elements(selector):
            action(element)
        return self

    def is_displayed(self, selector: str) -> bool:
        """Whether every matching element is visible."""
        driver = self.driver
        return all(driver.is_displayed(e) for e in self.find_elements(selector))

    def check_is_displayed(self, selector: str) -> list[ElementProtocol]:
        """Check that every matching element is visible.

        Returns:
            The matching elements.

        Raises:
            UnexpectedElementStateError: If one of them is hidden.
        """
        driver = self.driver
        elements = self.find_elements(selector)
        for index, element in enumerate(elements):
            if not driver.is_displayed(element):
                raise UnexpectedElementStateError(
                    "One or more elements are not displayed. "
                    f"Selector '{selector}', Index of non-displayed element: {index}",
                    expected="displayed",
                    actual="hidden",
                )
        return elements

    def check_is_not_displayed(self, selector: str) -> list[ElementProtocol]:
        """Check that the matching elements are not all visible.

        Passes when nothing matches or at least one match is hidden.

        Raises:
            UnexpectedElementStateError: If all matches are visible.
        """
        driver = self.driver
        elements = self.find_elements(selector)
        if elements and all(driver.is_displayed(e) for e in elements):
            raise UnexpectedElementStateError(
                "One or more elements are displayed and they shouldn't be. "
                f"Selector '{selector}', displayed elements: {len(elements)}",
                expected="hidden",
                actual="displayed",
            )
        return elements

    def click(self, selector: str) -> BrowserSession:
        """Click the first element matching ``selector``."""
        self.first(selector).click()
        return self.wait()

    def submit(self, selector: str) -> BrowserSession:
        """Submit the form of the first element matching ``selector``."""
        self.first(selector).submit()
        return self.wait()

    def send_keys(self, selector: str, text: str) -> BrowserSession:
        """Type ``text`` into every element matching ``selector``."""
        for element in self.find_elements(selector):
            element.send_keys(text)
            self.wait()
        return self

    def clear(self, selector: str) -> BrowserSession:
        """Clear every element matching ``selector``."""
        for element in self.find_elements(selector):
            element.clear()
            self.wait()
        return self

    def execute_script(self, script: str, *args: Any) -> Any:
        """Run JavaScript in this context and return its result."""
        return self.driver.execute_script(script, *args)

    def fire_js_blur(self) -> BrowserSession:
        """Blur the focused element."""
        self.execute_script(_BLUR_SCRIPT)
        return self

    def take_screenshot(self, path: str | Path) -> bytes:
        """Save a PNG screenshot to ``path`` and return its bytes."""
        return self.driver.screenshot(str(path))

    # -- alerts --------------------------------------------------------------

    def get_alert(self) -> AlertProtocol:
        """Return the open alert.

        Raises:
            AlertError: If no alert is open.
        """
        driver = self.driver
        try:
            alert = driver.get_alert()
        except Exception as e:
            raise AlertError("Alert not visible.") from e
        if alert is None:
            raise AlertError("Alert not visible.")
        return alert

    def has_alert(self) -> bool:
        """Whether an alert is open."""
        try:
            self.get_alert()
        except AlertError:
            return False
        return True

    def get_alert_text(self) -> str:
        """Return the open alert's message."""
        return self.get_alert().text

    def check_alert_text_equals(
        self, expected: str, case_sensitive: bool = False, trim: bool = True
    ) -> BrowserSession:
        """Check that the alert's message equals ``expected``.

        Raises:
            AlertError: If no alert is open or the message differs.
        """
        text = self.get_alert_text() or ""
        if trim:
            text = text.strip()
            expected = expected.strip()
        matches = text == expected if case_sensitive else text.casefold() == expected.casefold()
        if not matches:
            raise AlertError(
                "Alert does not contain expected value. "
                f"Expected value: '{expected}', provided value: '{text}'",
                expected=expected,
                actual=text,
            )
        return self

    def check_alert_text_contains(self, expected: str, trim: bool = True) -> BrowserSession:
        """Check that the alert's message contains ``expected``."""
        text = self.get_alert_text() or ""
        if trim:
            text = text.strip()
            expected = expected.strip()
        if expected not in text:
            raise AlertError(
                "Alert does not contain expected value. "
                f"Expected value: '{expected}', provided value: '{text}'",
                expected=expected,
                actual=text,
            )
        return self

    def check_alert_text(
        self, predicate: Callable[[str], bool], failure_message: str = ""
    ) -> BrowserSession:
        """Check the alert's message against an arbitrary condition."""
        text = self.get_alert_text()
        if not predicate(text):
            raise AlertError(
                f"Alert text is not correct. Provided value: '{text}' \n{failure_message}",
                actual=text,
            )
        return self

    def confirm_alert(self) -> BrowserSession:
        """Accept the open alert."""
        self.get_alert().accept()
        return self.wait()

    def dismiss_alert(self) -> BrowserSession:
        """Dismiss the open alert."""
        self.get_alert().dismiss()
        return self.wait()

    # -- title ---------------------------------------------------------------

    def get_title(self) -> str:
        """Return the page title."""
        return self.driver.title

    def _read_title(self, expected: str, trim: bool) -> tuple[str, str]:
        title = self.get_title() or ""
        if trim:
            return title.strip(), expected.strip()
        return title, expected

    def check_title_equals(
        self, title: str, case_sensitive: bool = False, trim: bool = True
    ) -> BrowserSession:
        """Check that the page title equals ``title``.

        Raises:
            TitleError: If the titles differ.
        """
        actual, expected = self._read_title(title, trim)
        equal = actual == expected if case_sensitive else actual.casefold() == expected.casefold()
        if not equal:
            raise TitleError(
                "Provided content in tab's title is not expected. "
                f"Expected value: '{expected}', provided value: '{actual}'",
                expected=expected,
                actual=actual,
            )
        return self

    def check_title_not_equals(
        self, title: str, case_sensitive: bool = False, trim: bool = True
    ) -> BrowserSession:
        """Check that the page title differs from ``title``."""
        actual, unexpected = self._read_title(title, trim)
        equal = actual == unexpected if case_sensitive else actual.casefold() == unexpected.casefold()
        if equal:
            raise TitleError(
                "Provided content in tab's title is not expected. "
                f"Title should NOT to be equal to '{unexpected}', "
                f"but provided value is '{actual}'",
                expected=f"not {unexpected}",
                actual=actual,
            )
        return self

    def check_title(
        self, predicate: Callable[[str], bool], failure_message: str = ""
    ) -> BrowserSession:
        """Check the page title against an arbitrary condition."""
        title = self.get_title()
        if not predicate(title):
            raise TitleError(
                "Provided content in tab's title is not expected. "
                f"Provided content: '{title}' \n{failure_message}",
                actual=title,
            )
        return self

    # -- waiting -------------------------------------------------------------

    def wait(self, milliseconds: int | None = None) -> BrowserSession:
        """Pause for ``milliseconds``, or ``action_timeout`` when omitted."""
        duration = self.action_timeout if milliseconds is None else milliseconds
        if duration > 0:
            time.sleep(duration / 1000)
        return self

    def wait_for(
        self,
        predicate: Callable[[], object],
        max_timeout: int | None = None,
        failure_message: str | None = None,
        ignore_transient: bool = True,
        interval: int | None = None,
    ) -> BrowserSession:
        """Wait until ``predicate`` holds.

        Timeouts default to the configured ``wait_timeout`` and
        ``poll_interval``. See ``browserscope.core.waiting.wait_for``.
        """
        spec = WaitSpec(
            max_timeout=self.config.wait_timeout if max_timeout is None else max_timeout,
            interval=self.config.poll_interval if interval is None else interval,
            failure_message=failure_message,
            ignore=is_transient if ignore_transient else never_ignore,
        )
        self._waiter.until(predicate, spec)
        return self

    def retry(
        self,
        action: Callable[[], T],
        max_timeout: int | None = None,
        interval: int | None = None,
        failure_message: str | None = None,
    ) -> T:
        """Repeat ``action`` until it completes without raising.

        See ``browserscope.core.waiting.retry``.

        Returns:
            The value returned by the successful attempt.
        """
        spec = WaitSpec(
            max_timeout=self.config.wait_timeout if max_timeout is None else max_timeout,
            interval=self.config.poll_interval if interval is None else interval,
            failure_message=failure_message,
        )
        return self._waiter.retry(action, spec)
