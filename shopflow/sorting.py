from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any

from .executor import PollingActionExecutor
from .models import Locator, WaitPolicy

logger = logging.getLogger(__name__)


class SortCriterion(str, Enum):
    """Sort options offered by the product listing; values are the <option> values."""

    NAME_ASC = "az"
    NAME_DESC = "za"
    PRICE_ASC = "lohi"
    PRICE_DESC = "hilo"

    @property
    def by_price(self) -> bool:
        return self in (SortCriterion.PRICE_ASC, SortCriterion.PRICE_DESC)

    @property
    def descending(self) -> bool:
        return self in (SortCriterion.NAME_DESC, SortCriterion.PRICE_DESC)


def parse_prices(texts: Iterable[str]) -> list[float]:
    """'$29.99' -> 29.99; entries with no parsable number are skipped."""
    out: list[float] = []
    for text in texts:
        cleaned = re.sub(r"[^\d.]", "", text or "")
        if not cleaned:
            continue
        try:
            out.append(float(cleaned))
        except ValueError:
            logger.debug(f"Ignoring malformed price entry {text!r}")
    return out


def is_ordered(values: Sequence[Any], descending: bool = False) -> bool:
    expected = sorted(values, reverse=descending)
    ok = list(values) == expected
    if not ok:
        logger.warning(f"Values not sorted: actual={list(values)} expected={expected}")
    return ok


class SortVerifier:
    """Reads the rendered listing and checks its order. Read-only."""

    def __init__(
        self,
        executor: PollingActionExecutor,
        prices: Locator,
        names: Locator,
        policy: WaitPolicy | None = None,
    ) -> None:
        self.executor = executor
        self.prices_locator = prices
        self.names_locator = names
        self.policy = policy

    def read_prices(self) -> list[float]:
        prices = parse_prices(self.executor.read_all_texts(self.prices_locator, self.policy))
        logger.debug(f"Read prices: {prices}")
        return prices

    def read_names(self) -> list[str]:
        return self.executor.read_all_texts(self.names_locator, self.policy)

    def verify(self, criterion: SortCriterion) -> bool:
        values: list[Any] = self.read_prices() if criterion.by_price else self.read_names()
        return is_ordered(values, descending=criterion.descending)
