"""
Locators for the storefront, built once per call site.

Per-product locators are derived from a slug of the product name so the same
name always yields an equal (and hashable) Locator.
"""

from __future__ import annotations

from ..models import Locator, slugify

# ---------- Login ----------
USERNAME = Locator.by_id("user-name")
PASSWORD = Locator.by_id("password")
LOGIN_BUTTON = Locator.by_id("login-button")

# ---------- Shared header ----------
PAGE_TITLE = Locator.by_css("span.title")
CART_BADGE = Locator.by_class("shopping_cart_badge")
CART_LINK = Locator.by_class("shopping_cart_link")
MENU_BUTTON = Locator.by_id("react-burger-menu-btn")
LOGOUT_LINK = Locator.by_id("logout_sidebar_link")

# ---------- Products ----------
SORT_SELECT = Locator.by_css("select.product_sort_container")
ITEM_PRICES = Locator.by_class("inventory_item_price")
ITEM_NAMES = Locator.by_class("inventory_item_name")

# ---------- Cart ----------
CART_LIST = Locator.by_class("cart_list")
CART_ITEMS = Locator.by_class("cart_item")
CHECKOUT_BUTTON = Locator.by_id("checkout")
CONTINUE_SHOPPING_BUTTON = Locator.by_id("continue-shopping")

# ---------- Checkout: information ----------
FIRST_NAME = Locator.by_id("first-name")
LAST_NAME = Locator.by_id("last-name")
POSTAL_CODE = Locator.by_id("postal-code")
CONTINUE_BUTTON = Locator.by_id("continue")
CANCEL_BUTTON = Locator.by_id("cancel")

# ---------- Checkout: overview / complete ----------
FINISH_BUTTON = Locator.by_id("finish")
COMPLETE_HEADER = Locator.by_css(".complete-header")
BACK_HOME_BUTTON = Locator.by_id("back-to-products")


def add_to_cart_button(product_name: str) -> Locator:
    return Locator.by_data_test(f"add-to-cart-{slugify(product_name)}")


def remove_button(product_name: str) -> Locator:
    return Locator.by_data_test(f"remove-{slugify(product_name)}")


def _xpath_literal(value: str) -> str:
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"


def cart_row(product_name: str) -> Locator:
    return Locator.by_xpath(
        "//div[@class='cart_item']"
        f"[.//div[normalize-space(text())={_xpath_literal(product_name.strip())}]]"
    )


def cart_row_remove_button(product_name: str) -> Locator:
    return Locator.by_xpath(cart_row(product_name).selector + "//button[contains(@id,'remove-')]")
