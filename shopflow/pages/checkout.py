"""
Checkout steps: information form, order overview, and the completion page.
"""

from __future__ import annotations

import logging

from . import locators
from .base import PageName, PageState, live, transition

logger = logging.getLogger(__name__)

ORDER_CONFIRMATION = "Thank you for your order!"


class CheckoutInfoPage(PageState):
    name = PageName.CHECKOUT_INFO
    landmark = locators.FIRST_NAME

    def _fill(self, first: str | None, last: str | None, postal: str | None) -> None:
        first_name = (first or "").strip()
        last_name = (last or "").strip()
        postal_code = (postal or "").strip()
        logger.info(
            f"Filling checkout form: First='{first_name}', Last='{last_name}', ZIP='{postal_code}'"
        )
        self.executor.type_text(locators.FIRST_NAME, first_name)
        self.executor.type_text(locators.LAST_NAME, last_name)
        self.executor.type_text(locators.POSTAL_CODE, postal_code)

    @live
    def fill(self, first: str | None, last: str | None, postal: str | None) -> None:
        """Fill the form without submitting it."""
        self._fill(first, last, postal)

    @transition(PageName.CHECKOUT_OVERVIEW)
    def fill_and_continue(self, first: str | None, last: str | None, postal: str | None) -> None:
        for field in (
            locators.FIRST_NAME,
            locators.LAST_NAME,
            locators.POSTAL_CODE,
            locators.CONTINUE_BUTTON,
        ):
            self.executor.wait_visible(field)
        self._fill(first, last, postal)
        self.executor.click(locators.CONTINUE_BUTTON)

    @transition(PageName.CART)
    def cancel(self) -> None:
        self.executor.click(locators.CANCEL_BUTTON)


class CheckoutOverviewPage(PageState):
    name = PageName.CHECKOUT_OVERVIEW
    landmark = locators.FINISH_BUTTON

    @live
    def item_count(self) -> int:
        count = self.executor.count(locators.CART_ITEMS)
        logger.info(f"Overview contains {count} item(s)")
        return count

    @live
    def item_names(self) -> list[str]:
        return self.executor.peek_all_texts(locators.ITEM_NAMES)

    @transition(PageName.CHECKOUT_COMPLETE)
    def finish(self) -> None:
        self.executor.click(locators.FINISH_BUTTON)

    @transition(PageName.CART)
    def cancel(self) -> None:
        # Cancel leaves the overview; the cart is then opened from the header.
        self.executor.click(locators.CANCEL_BUTTON)
        self.executor.wait_gone(locators.FINISH_BUTTON)
        self.executor.click(locators.CART_LINK)


class CheckoutCompletePage(PageState):
    name = PageName.CHECKOUT_COMPLETE
    landmark = locators.COMPLETE_HEADER

    @live
    def confirmation_text(self) -> str:
        return self.executor.read_text(locators.COMPLETE_HEADER)

    @live
    def is_order_complete(self, expected: str = ORDER_CONFIRMATION) -> bool:
        headers = self.executor.count(locators.COMPLETE_HEADER)
        if headers != 1:
            logger.warning(f"Expected exactly one confirmation header, found {headers}")
            return False
        actual = self.confirmation_text()
        if actual.lower() != expected.strip().lower():
            logger.warning(f"Header visible but text mismatch. Found '{actual}', expected '{expected}'")
            return False
        logger.info(f"Order completed with confirmation text: '{actual}'")
        return True

    @transition(PageName.PRODUCTS)
    def back_to_products(self) -> None:
        self.executor.click(locators.BACK_HOME_BUTTON)
