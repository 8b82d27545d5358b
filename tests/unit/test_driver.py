"""Unit tests for the Playwright driver adapter.

Playwright objects are replaced with MagicMocks; the tests check how the
adapter keeps its window/frame pointer, translates errors and handles
dialogs.
"""

from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError

from browserscope.core.driver import (
    PlaywrightDriver,
    PlaywrightElement,
    translate_error,
)
from browserscope.core.protocols import DriverProtocol, ElementProtocol
from browserscope.utils.exceptions import (
    BrowserScopeError,
    ConfigurationError,
    InvalidElementStateError,
    NoAlertPresentError,
    NoSuchFrameError,
    NoSuchWindowError,
    StaleElementError,
)


def make_page(url: str = "https://example.com/") -> MagicMock:
    """Create a mock Page that is open."""
    page = MagicMock()
    page.is_closed.return_value = False
    page.url = url
    return page


@pytest.fixture
def page() -> MagicMock:
    return make_page()


@pytest.fixture
def context(page) -> MagicMock:
    context = MagicMock()
    context.pages = [page]
    return context


@pytest.fixture
def driver(context) -> PlaywrightDriver:
    return PlaywrightDriver(context, action_timeout=1000, page_load_timeout=5000)


def dialog_handler(page: MagicMock):
    """Return the dialog listener the driver registered on a page."""
    for call in page.on.call_args_list:
        event, handler = call.args
        if event == "dialog":
            return handler
    raise AssertionError("no dialog listener registered")


class TestWindows:
    """Tests for window handle bookkeeping."""

    def test_satisfies_protocol(self, driver):
        """The adapter implements the driver protocol."""
        assert isinstance(driver, DriverProtocol)

    def test_initial_window(self, driver):
        """The context's first page becomes window page-1."""
        assert driver.current_window_handle == "page-1"
        assert driver.window_handles == ["page-1"]

    def test_new_page_gets_handle(self, driver, context):
        """Pages opened later are registered through the context event."""
        event, on_page = context.on.call_args.args
        assert event == "page"
        popup = make_page("https://example.com/popup")
        on_page(popup)

        assert driver.window_handles == ["page-1", "page-2"]
        driver.switch_to_window("page-2")
        assert driver.current_window_handle == "page-2"
        assert driver.current_url == "https://example.com/popup"

    def test_switch_to_unknown_window(self, driver):
        """Unknown handles raise NoSuchWindowError."""
        with pytest.raises(NoSuchWindowError):
            driver.switch_to_window("page-9")

    def test_closed_window(self, driver, page):
        """A closed page is no longer a window."""
        page.is_closed.return_value = True
        assert driver.window_handles == []
        with pytest.raises(NoSuchWindowError):
            driver.current_window_handle
        with pytest.raises(NoSuchWindowError):
            driver.switch_to_window("page-1")

    def test_new_page_created_when_context_empty(self):
        """Without pages the driver opens one."""
        context = MagicMock()
        context.pages = []
        context.new_page.return_value = make_page()
        PlaywrightDriver(context)
        context.new_page.assert_called_once()


class TestFrames:
    """Tests for the frame pointer."""

    def test_switch_to_frame(self, driver, page):
        """Frames are entered through the frame element's content frame."""
        frame = MagicMock()
        frame.query_selector_all.return_value = []
        page.main_frame.query_selector.return_value.content_frame.return_value = frame

        driver.switch_to_frame("#payment")
        driver.find_elements("input")

        page.main_frame.query_selector.assert_called_with("#payment")
        frame.query_selector_all.assert_called_once_with("input")

    def test_missing_frame(self, driver, page):
        """No matching element raises NoSuchFrameError."""
        page.main_frame.query_selector.return_value = None
        with pytest.raises(NoSuchFrameError):
            driver.switch_to_frame("#gone")

    def test_element_without_content_frame(self, driver, page):
        """Matching a non-frame element raises NoSuchFrameError."""
        page.main_frame.query_selector.return_value.content_frame.return_value = None
        with pytest.raises(NoSuchFrameError):
            driver.switch_to_frame("div")

    def test_default_content_resets(self, driver, page):
        """switch_to_default_content returns to the main frame."""
        frame = MagicMock()
        page.main_frame.query_selector.return_value.content_frame.return_value = frame
        driver.switch_to_frame("#f")
        driver.switch_to_default_content()
        driver.find_elements("a")
        page.main_frame.query_selector_all.assert_called_once_with("a")
        frame.query_selector_all.assert_not_called()


class TestElements:
    """Tests for element wrapping and error translation."""

    def test_find_elements_wraps_handles(self, driver, page):
        """Element handles are wrapped in PlaywrightElement."""
        page.main_frame.query_selector_all.return_value = [MagicMock(), MagicMock()]
        elements = driver.find_elements("li")
        assert len(elements) == 2
        assert all(isinstance(e, PlaywrightElement) for e in elements)
        assert isinstance(elements[0], ElementProtocol)

    def test_element_actions_use_timeout(self):
        """Actions pass the action timeout to Playwright."""
        handle = MagicMock()
        element = PlaywrightElement(handle, action_timeout=1234)
        element.click()
        element.send_keys("abc")
        element.clear()
        handle.click.assert_called_once_with(timeout=1234)
        handle.press_sequentially.assert_called_once_with("abc", timeout=1234)
        handle.fill.assert_called_once_with("", timeout=1234)

    def test_tag_name(self):
        """tag_name is read from the DOM."""
        handle = MagicMock()
        handle.evaluate.return_value = "iframe"
        assert PlaywrightElement(handle).tag_name == "iframe"

    def test_detached_element_is_stale(self):
        """Detached element errors become StaleElementError."""
        handle = MagicMock()
        handle.click.side_effect = PlaywrightError("Element is not attached to the DOM")
        with pytest.raises(StaleElementError):
            PlaywrightElement(handle).click()

    @pytest.mark.parametrize(
        "message,expected",
        [
            ("Element is not attached to the DOM", StaleElementError),
            ("element is not visible", InvalidElementStateError),
            ("element is not enabled", InvalidElementStateError),
            ("Target page, context or browser has been closed", BrowserScopeError),
        ],
    )
    def test_translate_error(self, message, expected):
        """Errors map by their message."""
        assert type(translate_error(PlaywrightError(message))) is expected


class TestDialogs:
    """Tests for dialog capture."""

    def test_no_dialog(self, driver):
        """Without a dialog get_alert raises NoAlertPresentError."""
        with pytest.raises(NoAlertPresentError):
            driver.get_alert()

    def test_dialog_accepted_and_recorded(self, driver, page):
        """Dialogs are accepted by default and kept until consumed."""
        dialog = MagicMock(message="Saved!", type="alert")
        dialog_handler(page)(dialog)

        dialog.accept.assert_called_once()
        alert = driver.get_alert()
        assert alert.text == "Saved!"
        alert.accept()
        with pytest.raises(NoAlertPresentError):
            driver.get_alert()

    def test_armed_dismiss(self, driver, page):
        """An armed dismiss response dismisses the dialog."""
        driver.arm_dialog_response("dismiss")
        dialog = MagicMock(message="Delete?", type="confirm")
        dialog_handler(page)(dialog)

        dialog.dismiss.assert_called_once()
        alert = driver.get_alert()
        with pytest.raises(ConfigurationError, match="already resolved"):
            alert.accept()
        alert.dismiss()

    def test_invalid_response(self, driver):
        """Only accept and dismiss can be armed."""
        with pytest.raises(ConfigurationError):
            driver.arm_dialog_response("ignore")

    @pytest.mark.parametrize(
        "move",
        [
            lambda d: d.navigate("https://example.com/next"),
            lambda d: d.back(),
            lambda d: d.forward(),
            lambda d: d.refresh(),
        ],
    )
    def test_dialog_forgotten_after_navigation(self, driver, page, move):
        """A handled dialog does not outlive the page that raised it."""
        dialog_handler(page)(MagicMock(message="hello", type="alert"))
        assert driver.get_alert().text == "hello"

        move(driver)

        with pytest.raises(NoAlertPresentError):
            driver.get_alert()

    def test_latest_dialog_replaces_earlier(self, driver, page):
        """Each window keeps only its most recent dialog."""
        handler = dialog_handler(page)
        handler(MagicMock(message="first", type="alert"))
        handler(MagicMock(message="second", type="alert"))

        alert = driver.get_alert()
        assert alert.text == "second"
        alert.accept()
        with pytest.raises(NoAlertPresentError):
            driver.get_alert()

    def test_dialogs_belong_to_their_window(self, driver, context, page):
        """A popup's dialog is only visible from the popup."""
        _, on_page = context.on.call_args.args
        popup = make_page("https://example.com/popup")
        on_page(popup)
        dialog_handler(popup)(MagicMock(message="From popup", type="alert"))

        with pytest.raises(NoAlertPresentError):
            driver.get_alert()
        driver.switch_to_window("page-2")
        assert driver.get_alert().text == "From popup"


class TestDocument:
    """Tests for navigation, scripts and teardown."""

    def test_navigate(self, driver, page):
        """navigate loads the URL with the page load timeout."""
        driver.navigate("https://example.com/login")
        page.goto.assert_called_once_with("https://example.com/login", timeout=5000)

    def test_history(self, driver, page):
        """History calls reach the page."""
        driver.back()
        driver.forward()
        driver.refresh()
        page.go_back.assert_called_once_with(timeout=5000)
        page.go_forward.assert_called_once_with(timeout=5000)
        page.reload.assert_called_once_with(timeout=5000)

    def test_title(self, driver, page):
        """title reads the page title."""
        page.title.return_value = "Home"
        assert driver.title == "Home"

    def test_execute_script(self, driver, page):
        """Arguments are passed as one array."""
        page.main_frame.evaluate.return_value = 3
        assert driver.execute_script("args => args[0] + args[1]", 1, 2) == 3
        page.main_frame.evaluate.assert_called_once_with("args => args[0] + args[1]", [1, 2])

    def test_screenshot(self, driver, page):
        """Screenshots are full page PNGs."""
        page.screenshot.return_value = b"png"
        assert driver.screenshot("/tmp/x.png") == b"png"
        page.screenshot.assert_called_once_with(path="/tmp/x.png", full_page=True)

    def test_quit_closes_owned_resources(self, context, page):
        """quit closes context and browser and stops Playwright."""
        browser = MagicMock()
        playwright = MagicMock()
        driver = PlaywrightDriver(context, page=page, browser=browser, playwright=playwright)
        driver.quit()
        context.close.assert_called_once()
        browser.close.assert_called_once()
        playwright.stop.assert_called_once()
