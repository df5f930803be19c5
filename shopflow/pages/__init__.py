"""
The storefront flow as a closed set of page states.

    executor = PollingActionExecutor(driver, config.wait_policy())
    products = start_flow(executor, config.base_url).submit(config.username, config.password)
    products.add_items("Sauce Labs Onesie", "Sauce Labs Bike Light")
    overview = products.open_cart().start_checkout().fill_and_continue("Jane", "Doe", "12345")
    assert overview.finish().is_order_complete()
"""

from __future__ import annotations

import logging

from ..executor import PollingActionExecutor
from .base import TRANSITIONS, PageName, PageState, verify_state_machine
from .cart import CartPage
from .checkout import (
    ORDER_CONFIRMATION,
    CheckoutCompletePage,
    CheckoutInfoPage,
    CheckoutOverviewPage,
)
from .login import LoginPage
from .products import ProductsPage

logger = logging.getLogger(__name__)

verify_state_machine()


def start_flow(executor: PollingActionExecutor, base_url: str) -> LoginPage:
    """Enter the initial state by navigating to the application's base address."""
    executor.navigate(base_url)
    page = LoginPage(executor)
    page.wait_until_ready()
    logger.info(f"Flow started at {base_url}")
    return page


__all__ = [
    "ORDER_CONFIRMATION",
    "TRANSITIONS",
    "CartPage",
    "CheckoutCompletePage",
    "CheckoutInfoPage",
    "CheckoutOverviewPage",
    "LoginPage",
    "PageName",
    "PageState",
    "ProductsPage",
    "start_flow",
]
