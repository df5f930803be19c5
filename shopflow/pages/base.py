"""
Page-state tokens.

Each page of the flow is a `PageState` subclass exposing only the operations
legal from that page. The legal transitions are declared once in `TRANSITIONS`;
a subclass whose `@transition` methods disagree with the table fails at class
creation time.

A token is consumed by its first transition and every later call on it raises
`IllegalTransitionError` before touching the UI. The transition returns the next
token only after that page's landmark is visible.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, ClassVar, TypeVar

from ..errors import IllegalTransitionError
from ..executor import PollingActionExecutor
from ..models import Locator

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class PageName(str, Enum):
    LOGIN = "Login"
    PRODUCTS = "Products"
    CART = "Cart"
    CHECKOUT_INFO = "CheckoutInfo"
    CHECKOUT_OVERVIEW = "CheckoutOverview"
    CHECKOUT_COMPLETE = "CheckoutComplete"


TRANSITIONS: dict[PageName, dict[str, PageName]] = {
    PageName.LOGIN: {"submit": PageName.PRODUCTS},
    PageName.PRODUCTS: {
        "open_cart": PageName.CART,
        "logout": PageName.LOGIN,
        "sort": PageName.PRODUCTS,
    },
    PageName.CART: {
        "start_checkout": PageName.CHECKOUT_INFO,
        "continue_shopping": PageName.PRODUCTS,
    },
    PageName.CHECKOUT_INFO: {
        "fill_and_continue": PageName.CHECKOUT_OVERVIEW,
        "cancel": PageName.CART,
    },
    PageName.CHECKOUT_OVERVIEW: {
        "finish": PageName.CHECKOUT_COMPLETE,
        "cancel": PageName.CART,
    },
    PageName.CHECKOUT_COMPLETE: {"back_to_products": PageName.PRODUCTS},
}

_PAGES: dict[PageName, type[PageState]] = {}


def page_class(name: PageName) -> type[PageState]:
    return _PAGES[name]


def verify_state_machine() -> None:
    """Every state in the transition table must have a page class."""
    missing = [n.value for n in TRANSITIONS if n not in _PAGES]
    if missing:
        raise TypeError(f"No page class registered for: {', '.join(missing)}")


def transition(target: PageName) -> Callable[[Callable[..., None]], Callable[..., PageState]]:
    """
    Mark a method as the transition to `target`.

    The decorated method performs the UI action only; the wrapper consumes the
    current token first and returns the next token once its landmark is visible.
    """

    def decorator(fn: Callable[..., None]) -> Callable[..., PageState]:
        operation = fn.__name__

        @functools.wraps(fn)
        def wrapper(self: PageState, *args: Any, **kwargs: Any) -> PageState:
            self._consume(operation)
            fn(self, *args, **kwargs)
            next_page = page_class(target)(self.executor)
            next_page.wait_until_ready()
            logger.info(f"{self.name.value} -> {target.value} via {operation}()")
            return next_page

        wrapper.__transition_target__ = target  # type: ignore[attr-defined]
        return wrapper

    return decorator


def live(fn: F) -> F:
    """Reject calls on a token that an earlier transition already consumed."""

    @functools.wraps(fn)
    def wrapper(self: PageState, *args: Any, **kwargs: Any) -> Any:
        self._ensure_live(fn.__name__)
        return fn(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


class PageState:
    name: ClassVar[PageName]
    landmark: ClassVar[Locator]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        declared = {
            attr: value.__transition_target__
            for attr, value in vars(cls).items()
            if hasattr(value, "__transition_target__")
        }
        expected = TRANSITIONS[cls.name]
        if declared != expected:
            raise TypeError(
                f"{cls.__name__} transitions {declared} do not match the "
                f"{cls.name.value} entry of the transition table {expected}"
            )
        _PAGES[cls.name] = cls

    def __init__(self, executor: PollingActionExecutor) -> None:
        self.executor = executor
        self._consumed = False

    def __repr__(self) -> str:
        state = "consumed" if self._consumed else "live"
        return f"<{type(self).__name__} {state}>"

    @property
    def consumed(self) -> bool:
        return self._consumed

    @classmethod
    def legal_operations(cls) -> frozenset[str]:
        return frozenset(TRANSITIONS[cls.name])

    def _ensure_live(self, operation: str) -> None:
        if self._consumed:
            raise IllegalTransitionError(
                self.name.value, operation, "page token already consumed by an earlier transition"
            )

    def _consume(self, operation: str) -> None:
        if operation not in TRANSITIONS[self.name]:
            raise IllegalTransitionError(self.name.value, operation)
        self._ensure_live(operation)
        self._consumed = True

    def invoke(self, operation: str, *args: Any, **kwargs: Any) -> PageState:
        """Dispatch a transition by name; illegal names are rejected before any UI call."""
        if operation not in TRANSITIONS[self.name]:
            raise IllegalTransitionError(self.name.value, operation)
        return getattr(self, operation)(*args, **kwargs)

    def wait_until_ready(self) -> None:
        self.executor.wait_visible(self.landmark)
