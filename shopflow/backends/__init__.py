"""
Driver backends for shopflow.

The executor only depends on the `UIDriver` / `ElementHandle` protocols;
`PlaywrightDriver` is the shipped implementation:

    from shopflow.backends import BrowserSession
    from shopflow.config import load_config

    config = load_config("config.properties")
    with BrowserSession(config) as driver:
        driver.navigate(config.base_url)
"""

from .playwright_backend import (
    BrowserSession,
    PlaywrightDriver,
    PlaywrightElement,
    classify_playwright_error,
    to_playwright_selector,
)
from .protocol import ElementHandle, UIDriver

__all__ = [
    # Protocol
    "UIDriver",
    "ElementHandle",
    # Playwright backend
    "BrowserSession",
    "PlaywrightDriver",
    "PlaywrightElement",
    "classify_playwright_error",
    "to_playwright_selector",
]
