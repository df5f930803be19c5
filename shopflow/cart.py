"""
Cart mutations that only return once the UI agrees they happened.

An add is confirmed in two phases: the per-item control swap (necessary) and the
aggregate badge counter reaching `before + added` (sufficient). A remove is the
mirror image with the counter clamped at zero.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .errors import ActionTimeoutError
from .executor import PollingActionExecutor
from .models import (
    ActionFailure,
    AddItemsResult,
    Locator,
    RemoveItemResult,
    WaitPolicy,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartControls:
    """
    Where the cart lives on a given page.

    in_cart_marker(name) is visible once `name` is in the cart (advisory probe
    target and add confirmation). After a remove, the flow waits for
    removed_marker(name) to be visible, or for in_cart_marker(name) to be gone
    when no removed marker exists.
    """

    badge: Locator
    remove_button: Callable[[str], Locator]
    in_cart_marker: Callable[[str], Locator]
    add_button: Callable[[str], Locator] | None = None
    removed_marker: Callable[[str], Locator] | None = None


class CartSynchronizer:
    def __init__(
        self,
        executor: PollingActionExecutor,
        controls: CartControls,
        policy: WaitPolicy | None = None,
    ) -> None:
        self.executor = executor
        self.controls = controls
        self.policy = policy

    def count(self) -> int:
        """Badge count, read fresh; 0 when the badge is absent."""
        return self.executor.read_count(self.controls.badge, self.policy)

    def _peek_count(self) -> int:
        # Only for reporting on an operation that already failed.
        return self.executor.read_int_if_present(self.controls.badge, 0)

    def is_in_cart(self, name: str) -> bool:
        return self.executor.exists(self.controls.in_cart_marker(name))

    def _wait_for_count(self, expected: int) -> None:
        self.executor.wait_until(
            lambda: self.executor.read_counter(self.controls.badge) == expected,
            description=f"cart count == {expected}",
            policy=self.policy,
        )

    def add_items(self, names: Iterable[str]) -> AddItemsResult:
        if self.controls.add_button is None:
            raise TypeError("These cart controls do not support adding items")

        start = self.count()
        added = 0
        skipped: list[str] = []
        try:
            for name in names:
                if name is None or not name.strip():
                    logger.warning("Skipped blank product name")
                    continue
                if self.is_in_cart(name):
                    logger.info(f"'{name}' already in cart, skipping add")
                    skipped.append(name)
                    continue
                self.executor.click(self.controls.add_button(name), self.policy)
                self.executor.wait_visible(self.controls.in_cart_marker(name), self.policy)
                added += 1
            self._wait_for_count(start + added)
        except ActionTimeoutError as e:
            end = self._peek_count()
            logger.warning(
                f"Cart did not converge after adding items: expected {start + added}, "
                f"found {end} (start was {start}): {e}"
            )
            return AddItemsResult(
                success=False,
                added=added,
                skipped=skipped,
                count_before=start,
                count_after=end,
                failure=ActionFailure.from_timeout(e),
            )

        end = self.count()
        logger.info(f"Added {added} new item(s): {start} -> {end}")
        return AddItemsResult(
            success=True, added=added, skipped=skipped, count_before=start, count_after=end
        )

    def remove_item(self, name: str) -> RemoveItemResult:
        if not self.is_in_cart(name):
            logger.warning(f"'{name}' not in cart, nothing to remove")
            before = self.count()
            return RemoveItemResult(success=True, removed=False, count_before=before, count_after=before)

        before = self.count()
        expected = max(0, before - 1)
        try:
            self.executor.click(self.controls.remove_button(name), self.policy)
            if self.controls.removed_marker is not None:
                self.executor.wait_visible(self.controls.removed_marker(name), self.policy)
            else:
                self.executor.wait_gone(self.controls.in_cart_marker(name), self.policy)
            self._wait_for_count(expected)
        except ActionTimeoutError as e:
            after = self._peek_count()
            logger.warning(
                f"Cart did not converge after removing '{name}': expected {expected}, found {after}"
            )
            return RemoveItemResult(
                success=False,
                removed=False,
                count_before=before,
                count_after=after,
                failure=ActionFailure.from_timeout(e),
            )

        after = self.count()
        logger.info(f"Removed '{name}' ({before} -> {after})")
        return RemoveItemResult(success=True, removed=True, count_before=before, count_after=after)
