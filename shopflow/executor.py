"""
Bounded polling action executor.

Every interaction with the remote UI goes through `PollingActionExecutor.perform`
(or one of the primitives built on it). Each poll tick resolves the locator
afresh, so no element handle ever outlives the tick it was found in:

    executor = PollingActionExecutor(driver, WaitPolicy(timeout_s=10, poll_s=0.3))
    executor.click(Locator.by_id("login-button"))
    title = executor.read_text(Locator.by_css("span.title"))

Within a tick:
- no match                         -> transient, retry after poll_s
- match but not interactable       -> transient (only for gated operations)
- DriverFault with a transient kind -> retry
- any other DriverFault / fatal     -> abort immediately
- deadline exceeded                -> timeout result

Non-waiting probes (`exists`, `is_visible`, `is_enabled`, `count`, `peek_text`,
`read_int_if_present`) resolve once and report False/default on any driver fault.
They are advisory only and never confirm that a mutation succeeded; counters that
gate a mutation go through `read_counter` / `read_count`, which let faults through.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .backends.protocol import ElementHandle, UIDriver
from .errors import DriverFault
from .models import (
    DEFAULT_WAIT_POLICY,
    ActionRecord,
    Locator,
    OperationResult,
    StepOutcome,
    WaitPolicy,
)

if TYPE_CHECKING:
    from .failure_artifacts import FailureArtifactRecorder
    from .tracing import Tracer

logger = logging.getLogger(__name__)

Operation = Callable[[ElementHandle], StepOutcome]


def is_interactable(handle: ElementHandle) -> bool:
    """Displayed, enabled, and not flagged with a `disabled` attribute."""
    return (
        handle.is_displayed()
        and handle.is_enabled()
        and handle.get_attribute("disabled") is None
    )


def _click(handle: ElementHandle) -> StepOutcome:
    handle.click()
    return StepOutcome.success()


def _displayed_text(handle: ElementHandle) -> StepOutcome:
    if not handle.is_displayed():
        return StepOutcome.transient("element not displayed")
    return StepOutcome.success(handle.get_text().strip())


def _displayed(handle: ElementHandle) -> StepOutcome:
    if handle.is_displayed():
        return StepOutcome.success()
    return StepOutcome.transient("element not displayed")


class PollingActionExecutor:
    def __init__(
        self,
        driver: UIDriver,
        policy: WaitPolicy | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        tracer: Tracer | None = None,
        recorder: FailureArtifactRecorder | None = None,
    ) -> None:
        self.driver = driver
        self.policy = policy or DEFAULT_WAIT_POLICY
        self.tracer = tracer
        self.recorder = recorder
        self._clock = clock
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Core loop
    # ------------------------------------------------------------------

    def _poll(
        self,
        tick: Callable[[], StepOutcome],
        *,
        target: str,
        action: str,
        policy: WaitPolicy | None,
        detail: dict[str, Any] | None = None,
    ) -> OperationResult[Any]:
        policy = policy or self.policy
        start = self._clock()
        attempts = 0
        last_reason = ""

        while True:
            attempts += 1
            try:
                outcome = tick()
            except DriverFault as fault:
                reason = f"{fault.kind.value}: {fault}"
                if not policy.is_transient(fault.kind):
                    return self._finish(
                        action,
                        OperationResult(
                            status="fatal",
                            target=target,
                            elapsed_s=self._clock() - start,
                            attempts=attempts,
                            reason=reason,
                        ),
                        detail,
                    )
                outcome = StepOutcome.transient(reason)

            if outcome.status != "transient":
                return self._finish(
                    action,
                    OperationResult(
                        status="success" if outcome.status == "success" else "fatal",
                        target=target,
                        elapsed_s=self._clock() - start,
                        attempts=attempts,
                        value=outcome.value,
                        reason=outcome.reason,
                    ),
                    detail,
                )

            last_reason = outcome.reason
            elapsed = self._clock() - start
            if elapsed >= policy.timeout_s:
                return self._finish(
                    action,
                    OperationResult(
                        status="timeout",
                        target=target,
                        elapsed_s=elapsed,
                        attempts=attempts,
                        reason=last_reason,
                    ),
                    detail,
                )
            self._sleep(min(policy.poll_s, policy.timeout_s - elapsed))

    def _finish(
        self, action: str, result: OperationResult[Any], detail: dict[str, Any] | None
    ) -> OperationResult[Any]:
        if result.status == "success":
            logger.debug(
                f"{action} {result.target} ok after {result.attempts} attempt(s) "
                f"in {result.elapsed_s:.2f}s"
            )
        elif result.status == "timeout":
            logger.warning(
                f"{action} {result.target} timed out after {result.elapsed_s:.2f}s: {result.reason}"
            )
        else:
            logger.error(f"{action} {result.target} failed: {result.reason}")

        record = ActionRecord(
            action=action,
            target=result.target,
            status=result.status,
            elapsed_s=round(result.elapsed_s, 4),
            attempts=result.attempts,
            detail=dict(detail or {}),
        )
        if self.recorder is not None:
            self.recorder.record_step(record)
        if self.tracer is not None:
            data = {
                "action": record.action,
                "target": record.target,
                "status": record.status,
                "elapsed_s": record.elapsed_s,
                "attempts": record.attempts,
                "reason": result.reason,
            }
            if record.detail.get("secret"):
                data["detail"] = {**record.detail, "text": "***"}
            else:
                data["detail"] = record.detail
            self.tracer.emit("action", data=data)
        return result

    def perform(
        self,
        locator: Locator,
        operation: Operation,
        policy: WaitPolicy | None = None,
        *,
        require_interactable: bool = True,
        action: str = "perform",
        detail: dict[str, Any] | None = None,
    ) -> OperationResult[Any]:
        """
        Run `operation` against the first element matching `locator`, retrying
        transient failures until it succeeds, fails fatally, or the policy times out.
        """

        def tick() -> StepOutcome:
            handles = self.driver.find(locator)
            if not handles:
                return StepOutcome.transient(f"no element matches {locator}")
            handle = handles[0]
            if require_interactable and not is_interactable(handle):
                return StepOutcome.transient("element not interactable")
            return operation(handle)

        return self._poll(tick, target=str(locator), action=action, policy=policy, detail=detail)

    # ------------------------------------------------------------------
    # Waiting primitives
    # ------------------------------------------------------------------

    def navigate(self, url: str) -> None:
        self.driver.navigate(url)
        logger.info(f"Navigated to: {url}")

    def click(self, locator: Locator, policy: WaitPolicy | None = None) -> None:
        self.perform(locator, _click, policy, action="click").unwrap()

    def type_text(
        self,
        locator: Locator,
        text: str,
        policy: WaitPolicy | None = None,
        *,
        secret: bool = False,
    ) -> None:
        def op(handle: ElementHandle) -> StepOutcome:
            handle.clear()
            handle.send_keys(text)
            return StepOutcome.success()

        self.perform(
            locator,
            op,
            policy,
            action="type",
            detail={"text": text, "secret": secret},
        ).unwrap()

    def select_option(self, locator: Locator, value: str, policy: WaitPolicy | None = None) -> None:
        def op(handle: ElementHandle) -> StepOutcome:
            handle.select_option(value)
            return StepOutcome.success()

        self.perform(locator, op, policy, action="select", detail={"value": value}).unwrap()

    def read_text(self, locator: Locator, policy: WaitPolicy | None = None) -> str:
        return self.perform(
            locator, _displayed_text, policy, require_interactable=False, action="read_text"
        ).unwrap()

    def wait_visible(self, locator: Locator, policy: WaitPolicy | None = None) -> None:
        self.perform(
            locator, _displayed, policy, require_interactable=False, action="wait_visible"
        ).unwrap()

    def wait_gone(self, locator: Locator, policy: WaitPolicy | None = None) -> None:
        """Succeeds only once the locator matches nothing."""

        def tick() -> StepOutcome:
            remaining = len(self.driver.find(locator))
            if remaining == 0:
                return StepOutcome.success()
            return StepOutcome.transient(f"{remaining} element(s) still present")

        self._poll(tick, target=str(locator), action="wait_gone", policy=policy).unwrap()

    def wait_until(
        self,
        condition: Callable[[], bool],
        description: str,
        policy: WaitPolicy | None = None,
    ) -> None:
        def tick() -> StepOutcome:
            if condition():
                return StepOutcome.success()
            return StepOutcome.transient(f"waiting for {description}")

        self._poll(tick, target=description, action="wait_until", policy=policy).unwrap()

    def read_all_texts(self, locator: Locator, policy: WaitPolicy | None = None) -> list[str]:
        """Wait for at least one match, then read every match within the same tick."""

        def tick() -> StepOutcome:
            handles = self.driver.find(locator)
            if not handles:
                return StepOutcome.transient(f"no element matches {locator}")
            return StepOutcome.success([h.get_text().strip() for h in handles])

        texts = self._poll(tick, target=str(locator), action="read_all_texts", policy=policy).unwrap()
        logger.debug(f"Read {len(texts)} elements' text from {locator}")
        return texts

    # ------------------------------------------------------------------
    # Non-waiting probes
    # ------------------------------------------------------------------

    def exists(self, locator: Locator) -> bool:
        try:
            return len(self.driver.find(locator)) > 0
        except DriverFault:
            return False

    def is_visible(self, locator: Locator) -> bool:
        try:
            handles = self.driver.find(locator)
            visible = bool(handles) and handles[0].is_displayed()
        except DriverFault:
            return False
        logger.debug(f"Element visible status ({locator}): {visible}")
        return visible

    def is_enabled(self, locator: Locator) -> bool:
        try:
            handles = self.driver.find(locator)
            enabled = (
                bool(handles)
                and handles[0].is_enabled()
                and handles[0].get_attribute("disabled") is None
            )
        except DriverFault:
            return False
        logger.debug(f"Element enabled status ({locator}): {enabled}")
        return enabled

    def count(self, locator: Locator) -> int:
        try:
            return len(self.driver.find(locator))
        except DriverFault:
            return 0

    def peek_text(self, locator: Locator) -> str | None:
        try:
            handles = self.driver.find(locator)
            if not handles or not handles[0].is_displayed():
                return None
            return handles[0].get_text().strip()
        except DriverFault:
            return None

    def peek_all_texts(self, locator: Locator) -> list[str]:
        try:
            return [h.get_text().strip() for h in self.driver.find(locator)]
        except DriverFault:
            return []

    def read_int_if_present(self, locator: Locator, default: int = 0) -> int:
        """Integer text of the first match, or `default` when absent or unreadable."""
        try:
            handles = self.driver.find(locator)
            if not handles:
                return default
            digits = re.sub(r"\D+", "", handles[0].get_text())
        except DriverFault:
            return default
        return int(digits) if digits else default

    # ------------------------------------------------------------------
    # Counter reads
    # ------------------------------------------------------------------

    def read_counter(self, locator: Locator) -> int | None:
        """
        Integer text of the first match. Zero matches means 0; text without digits
        gives None. Driver faults propagate so a surrounding poll retries them.
        """
        handles = self.driver.find(locator)
        if not handles:
            return 0
        digits = re.sub(r"\D+", "", handles[0].get_text())
        return int(digits) if digits else None

    def read_count(self, locator: Locator, policy: WaitPolicy | None = None) -> int:
        """Waiting counter read; faults and unreadable text are retried until the deadline."""

        def tick() -> StepOutcome:
            value = self.read_counter(locator)
            if value is None:
                return StepOutcome.transient(f"no number in {locator}")
            return StepOutcome.success(value)

        return self._poll(tick, target=str(locator), action="read_count", policy=policy).unwrap()
