"""
Value types shared by the executor, the cart synchronizer and the page states.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import TRANSIENT_FAULTS, ActionFailedError, ActionTimeoutError, FaultKind

T = TypeVar("T")

LocatorStrategy = Literal["css", "xpath", "id", "class_name", "data_test"]


def slugify(name: str) -> str:
    """'Sauce Labs Bike Light' -> 'sauce-labs-bike-light'"""
    return re.sub(r"[^a-z0-9]+", "-", name.strip().lower())


class Locator(BaseModel):
    """How to find zero or more elements in the remote UI. Immutable and hashable."""

    model_config = ConfigDict(frozen=True)

    strategy: LocatorStrategy
    selector: str = Field(min_length=1)

    @classmethod
    def by_css(cls, selector: str) -> Locator:
        return cls(strategy="css", selector=selector)

    @classmethod
    def by_xpath(cls, selector: str) -> Locator:
        return cls(strategy="xpath", selector=selector)

    @classmethod
    def by_id(cls, element_id: str) -> Locator:
        return cls(strategy="id", selector=element_id)

    @classmethod
    def by_class(cls, class_name: str) -> Locator:
        return cls(strategy="class_name", selector=class_name)

    @classmethod
    def by_data_test(cls, value: str) -> Locator:
        return cls(strategy="data_test", selector=value)

    def __str__(self) -> str:
        return f"{self.strategy}={self.selector}"


class WaitPolicy(BaseModel):
    """Timeout, poll interval and the fault kinds treated as transient."""

    model_config = ConfigDict(frozen=True)

    timeout_s: float = Field(10.0, gt=0)
    poll_s: float = Field(0.3, gt=0)
    transient: frozenset[FaultKind] = TRANSIENT_FAULTS

    @model_validator(mode="after")
    def _poll_below_timeout(self) -> WaitPolicy:
        if self.poll_s >= self.timeout_s:
            raise ValueError(
                f"poll_s ({self.poll_s}) must be smaller than timeout_s ({self.timeout_s})"
            )
        return self

    def with_timeout(self, timeout_s: float) -> WaitPolicy:
        return WaitPolicy(timeout_s=timeout_s, poll_s=self.poll_s, transient=self.transient)

    def is_transient(self, kind: FaultKind) -> bool:
        return kind in self.transient


DEFAULT_WAIT_POLICY = WaitPolicy()


@dataclass(frozen=True)
class StepOutcome:
    """Outcome of a single poll tick."""

    status: Literal["success", "transient", "fatal"]
    value: Any = None
    reason: str = ""

    @classmethod
    def success(cls, value: Any = None) -> StepOutcome:
        return cls(status="success", value=value)

    @classmethod
    def transient(cls, reason: str) -> StepOutcome:
        return cls(status="transient", reason=reason)

    @classmethod
    def fatal(cls, reason: str) -> StepOutcome:
        return cls(status="fatal", reason=reason)


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    status: Literal["success", "timeout", "fatal"]
    target: str
    elapsed_s: float
    attempts: int
    value: T | None = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def unwrap(self) -> T:
        if self.status == "timeout":
            raise ActionTimeoutError(self.target, self.elapsed_s, self.attempts, self.reason)
        if self.status == "fatal":
            raise ActionFailedError(self.target, self.reason)
        return self.value  # type: ignore[return-value]


class ActionFailure(BaseModel):
    """Typed payload for a wait that did not converge."""

    target: str
    elapsed_s: float
    reason: str = ""

    @classmethod
    def from_timeout(cls, exc: ActionTimeoutError) -> ActionFailure:
        return cls(target=exc.target, elapsed_s=exc.elapsed_s, reason=exc.last_reason)


class AddItemsResult(BaseModel):
    success: bool
    added: int = 0
    skipped: list[str] = Field(default_factory=list)
    count_before: int = 0
    count_after: int = 0
    failure: ActionFailure | None = None


class RemoveItemResult(BaseModel):
    success: bool
    removed: bool = False
    count_before: int = 0
    count_after: int = 0
    failure: ActionFailure | None = None


@dataclass
class ActionRecord:
    """One executor action as seen by tracing and failure artifacts."""

    action: str
    target: str
    status: str
    elapsed_s: float
    attempts: int
    detail: dict[str, Any] = field(default_factory=dict)
