"""
Playwright (sync API) implementation of the UI driver contract.

Playwright raises a single `Error` type (plus `TimeoutError`) for everything, so
faults are classified by message, the same way navigation races are detected
in snapshot code: a detached element or destroyed execution context is stale,
an overlay receiving the click is an interception, and an action that could not
complete within the short per-action timeout is "not yet interactable".
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from ..config import BROWSER_KINDS, FlowConfig
from ..errors import DriverFault, FaultKind, UnsupportedConfigError
from ..models import Locator

if TYPE_CHECKING:
    from playwright.sync_api import Browser, BrowserContext, Page, Playwright
    from playwright.sync_api import ElementHandle as PlaywrightElementHandle

logger = logging.getLogger(__name__)


def to_playwright_selector(locator: Locator) -> str:
    if locator.strategy == "css":
        return locator.selector
    if locator.strategy == "xpath":
        return f"xpath={locator.selector}"
    if locator.strategy == "id":
        return f"[id=\"{locator.selector}\"]"
    if locator.strategy == "class_name":
        return f".{locator.selector}"
    if locator.strategy == "data_test":
        return f"[data-test=\"{locator.selector}\"]"
    raise ValueError(f"Unknown locator strategy: {locator.strategy}")


def classify_playwright_error(exc: Exception) -> FaultKind:
    msg = str(exc).lower()
    if (
        "not attached to the dom" in msg
        or "element is detached" in msg
        or "execution context was destroyed" in msg
        or "most likely because of a navigation" in msg
        or "cannot find context with specified id" in msg
    ):
        return FaultKind.STALE
    if "intercepts pointer events" in msg:
        return FaultKind.CLICK_INTERCEPTED
    if (
        "target page, context or browser has been closed" in msg
        or "target closed" in msg
        or "browser has been closed" in msg
    ):
        return FaultKind.SESSION_CLOSED
    if isinstance(exc, PlaywrightTimeoutError):
        return FaultKind.NOT_INTERACTABLE
    if (
        "not visible" in msg
        or "not enabled" in msg
        or "not editable" in msg
        or "outside of the viewport" in msg
        or "not stable" in msg
    ):
        return FaultKind.NOT_INTERACTABLE
    if "no element" in msg or "failed to find element" in msg:
        return FaultKind.NOT_FOUND
    return FaultKind.UNKNOWN


def _fault(exc: PlaywrightError, what: str) -> DriverFault:
    return DriverFault(classify_playwright_error(exc), f"{what}: {exc}")


class PlaywrightElement:
    def __init__(self, handle: PlaywrightElementHandle, action_timeout_ms: int) -> None:
        self._handle = handle
        self._timeout_ms = action_timeout_ms

    def is_displayed(self) -> bool:
        try:
            return self._handle.is_visible()
        except PlaywrightError as e:
            raise _fault(e, "is_displayed") from e

    def is_enabled(self) -> bool:
        try:
            return self._handle.is_enabled()
        except PlaywrightError as e:
            raise _fault(e, "is_enabled") from e

    def get_attribute(self, name: str) -> str | None:
        try:
            return self._handle.get_attribute(name)
        except PlaywrightError as e:
            raise _fault(e, f"get_attribute({name})") from e

    def get_text(self) -> str:
        try:
            return self._handle.inner_text()
        except PlaywrightError as e:
            raise _fault(e, "get_text") from e

    def click(self) -> None:
        try:
            self._handle.click(timeout=self._timeout_ms)
        except PlaywrightError as e:
            raise _fault(e, "click") from e

    def clear(self) -> None:
        try:
            self._handle.fill("", timeout=self._timeout_ms)
        except PlaywrightError as e:
            raise _fault(e, "clear") from e

    def send_keys(self, text: str) -> None:
        try:
            current = self._handle.input_value(timeout=self._timeout_ms)
            self._handle.fill(current + text, timeout=self._timeout_ms)
        except PlaywrightError as e:
            raise _fault(e, "send_keys") from e

    def select_option(self, value: str) -> None:
        try:
            self._handle.select_option(value, timeout=self._timeout_ms)
        except PlaywrightError as e:
            raise _fault(e, f"select_option({value})") from e


class PlaywrightDriver:
    """UIDriver over a single Playwright page."""

    def __init__(self, page: Page, action_timeout_ms: int = 1000) -> None:
        self.page = page
        self.action_timeout_ms = action_timeout_ms

    def navigate(self, url: str) -> None:
        try:
            self.page.goto(url)
        except PlaywrightError as e:
            raise _fault(e, f"navigate({url})") from e

    def find(self, locator: Locator) -> list[PlaywrightElement]:
        try:
            handles = self.page.query_selector_all(to_playwright_selector(locator))
        except PlaywrightError as e:
            raise _fault(e, f"find({locator})") from e
        return [PlaywrightElement(h, self.action_timeout_ms) for h in handles]

    def current_url(self) -> str:
        return self.page.url

    def screenshot_png(self) -> bytes:
        try:
            return self.page.screenshot(type="png")
        except PlaywrightError as e:
            raise _fault(e, "screenshot") from e


class BrowserSession:
    """
    Owns one browser process and one page for the duration of a flow.

    Usage:
        with BrowserSession(config) as driver:
            login = start_flow(PollingActionExecutor(driver, config.wait_policy()), config.base_url)
    """

    def __init__(self, config: FlowConfig) -> None:
        self.config = config
        self.playwright: Playwright | None = None
        self.browser: Browser | None = None
        self.context: BrowserContext | None = None
        self.driver: PlaywrightDriver | None = None

    def _launch_kwargs(self, channel: str | None, engine: str) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"headless": self.config.headless}
        if channel:
            kwargs["channel"] = channel
        if engine == "chromium":
            kwargs["args"] = [
                "--disable-notifications",
                "--disable-popup-blocking",
                "--no-first-run",
                "--no-default-browser-check",
            ]
            if not self.config.headless:
                kwargs["args"].append("--start-maximized")
        return kwargs

    def _open_page(self, engine: str, channel: str | None) -> Page:
        assert self.playwright is not None
        browser_type = getattr(self.playwright, engine)
        launch_kwargs = self._launch_kwargs(channel, engine)
        # Headed runs size the window to the screen; headless runs keep the driver viewport.
        context_kwargs: dict[str, Any] = {"no_viewport": True} if not self.config.headless else {}

        if self.config.user_data_dir:
            self.context = browser_type.launch_persistent_context(
                self.config.user_data_dir, **launch_kwargs, **context_kwargs
            )
            page = self.context.pages[0] if self.context.pages else self.context.new_page()
        else:
            self.browser = browser_type.launch(**launch_kwargs)
            self.context = self.browser.new_context(**context_kwargs)
            page = self.context.new_page()

        page.set_default_navigation_timeout(self.config.page_load_timeout_s * 1000)
        return page

    def start(self) -> PlaywrightDriver:
        kind = self.config.browser.strip().lower()
        if kind not in BROWSER_KINDS:
            raise UnsupportedConfigError(f"Unsupported browser: {self.config.browser}")
        engine, channel = BROWSER_KINDS[kind]

        self.playwright = sync_playwright().start()
        try:
            page = self._open_page(engine, channel)
        except BaseException:
            self.close()
            raise
        self.driver = PlaywrightDriver(page, action_timeout_ms=self.config.action_timeout_ms)
        logger.info(
            f"Started {kind} (headless={self.config.headless}, "
            f"persistent_profile={bool(self.config.user_data_dir)})"
        )
        return self.driver

    def close(self) -> None:
        if self.context is not None:
            self.context.close()
            self.context = None
        if self.browser is not None:
            self.browser.close()
            self.browser = None
        if self.playwright is not None:
            self.playwright.stop()
            self.playwright = None
            logger.info("Browser session closed")
        self.driver = None

    def __enter__(self) -> PlaywrightDriver:
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
