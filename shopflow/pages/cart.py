from __future__ import annotations

import logging

from ..cart import CartControls, CartSynchronizer
from ..models import RemoveItemResult
from . import locators
from .base import PageName, PageState, live, transition

logger = logging.getLogger(__name__)

# In the cart, an item is a row; removing it makes the row disappear.
CART_PAGE_CONTROLS = CartControls(
    badge=locators.CART_BADGE,
    remove_button=locators.cart_row_remove_button,
    in_cart_marker=locators.cart_row,
)


class CartPage(PageState):
    name = PageName.CART
    landmark = locators.CART_LIST

    @property
    def _cart(self) -> CartSynchronizer:
        return CartSynchronizer(self.executor, CART_PAGE_CONTROLS)

    @live
    def cart_count(self) -> int:
        return self._cart.count()

    @live
    def item_names(self) -> list[str]:
        return self.executor.peek_all_texts(locators.ITEM_NAMES)

    @live
    def contains(self, *product_names: str) -> bool:
        for name in product_names:
            if not self._cart.is_in_cart(name):
                logger.warning(f"Product '{name}' NOT found in cart")
                return False
            logger.info(f"Product '{name}' is present in the cart")
        return True

    @live
    def remove_item(self, product_name: str) -> RemoveItemResult:
        return self._cart.remove_item(product_name)

    @live
    def is_checkout_enabled(self) -> bool:
        enabled = self.executor.is_enabled(locators.CHECKOUT_BUTTON)
        logger.info(f"Checkout button enabled: {enabled}")
        return enabled

    @transition(PageName.CHECKOUT_INFO)
    def start_checkout(self) -> None:
        self.executor.click(locators.CHECKOUT_BUTTON)

    @transition(PageName.PRODUCTS)
    def continue_shopping(self) -> None:
        self.executor.click(locators.CONTINUE_SHOPPING_BUTTON)
