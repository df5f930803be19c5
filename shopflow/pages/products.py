from __future__ import annotations

import logging

from ..cart import CartControls, CartSynchronizer
from ..models import AddItemsResult, RemoveItemResult
from ..sorting import SortCriterion, SortVerifier
from . import locators
from .base import PageName, PageState, live, transition

logger = logging.getLogger(__name__)

# On the listing, adding swaps "Add to cart" for "Remove" and removing swaps it back.
LISTING_CART_CONTROLS = CartControls(
    badge=locators.CART_BADGE,
    add_button=locators.add_to_cart_button,
    remove_button=locators.remove_button,
    in_cart_marker=locators.remove_button,
    removed_marker=locators.add_to_cart_button,
)


class ProductsPage(PageState):
    name = PageName.PRODUCTS
    landmark = locators.SORT_SELECT

    @property
    def _cart(self) -> CartSynchronizer:
        return CartSynchronizer(self.executor, LISTING_CART_CONTROLS)

    @property
    def _sort_verifier(self) -> SortVerifier:
        return SortVerifier(self.executor, prices=locators.ITEM_PRICES, names=locators.ITEM_NAMES)

    # ---------- header ----------
    @live
    def title(self) -> str:
        title = self.executor.read_text(locators.PAGE_TITLE)
        logger.info(f"Page Title: {title}")
        return title

    @live
    def cart_count(self) -> int:
        return self._cart.count()

    # ---------- cart ----------
    @live
    def is_in_cart(self, product_name: str) -> bool:
        in_cart = self._cart.is_in_cart(product_name)
        logger.info(f"'{product_name}' in cart on listing? {in_cart}")
        return in_cart

    @live
    def add_items(self, *product_names: str) -> AddItemsResult:
        """Add products not yet in the cart; confirmed by button swap and badge count."""
        if not product_names:
            logger.warning("No product names supplied to add_items()")
            count = self._cart.count()
            return AddItemsResult(success=True, count_before=count, count_after=count)
        return self._cart.add_items(product_names)

    @live
    def remove_item(self, product_name: str) -> RemoveItemResult:
        return self._cart.remove_item(product_name)

    # ---------- sorting ----------
    @live
    def prices(self) -> list[float]:
        return self._sort_verifier.read_prices()

    @live
    def product_names(self) -> list[str]:
        return self._sort_verifier.read_names()

    @live
    def is_sorted_by(self, criterion: SortCriterion = SortCriterion.PRICE_ASC) -> bool:
        return self._sort_verifier.verify(criterion)

    @transition(PageName.PRODUCTS)
    def sort(self, criterion: SortCriterion = SortCriterion.PRICE_ASC) -> None:
        self.executor.select_option(locators.SORT_SELECT, criterion.value)
        logger.info(f"Applied sort: {criterion.name}")

    # ---------- navigation ----------
    @transition(PageName.CART)
    def open_cart(self) -> None:
        self.executor.click(locators.CART_LINK)

    @transition(PageName.LOGIN)
    def logout(self) -> None:
        # The sidebar slides in; the logout link stays hidden until it has.
        self.executor.click(locators.MENU_BUTTON)
        self.executor.click(locators.LOGOUT_LINK)
        logger.info("Logged out via menu")
