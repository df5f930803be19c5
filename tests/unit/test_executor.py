from __future__ import annotations

import pytest
from storefront_fake import FakeClock

from shopflow.errors import ActionFailedError, ActionTimeoutError, DriverFault, FaultKind
from shopflow.executor import PollingActionExecutor, is_interactable
from shopflow.models import Locator, StepOutcome, WaitPolicy

BUTTON = Locator.by_id("go")
POLICY = WaitPolicy(timeout_s=1.0, poll_s=0.25)


class StubElement:
    def __init__(
        self,
        text: str = "",
        displayed: bool = True,
        enabled: bool = True,
        disabled: str | None = None,
    ) -> None:
        self.text = text
        self.displayed = displayed
        self.enabled = enabled
        self.disabled = disabled
        self.clicks = 0
        self.value = ""
        self.selected: str | None = None

    def is_displayed(self) -> bool:
        return self.displayed

    def is_enabled(self) -> bool:
        return self.enabled

    def get_attribute(self, name: str) -> str | None:
        return self.disabled if name == "disabled" else None

    def get_text(self) -> str:
        return self.text

    def click(self) -> None:
        self.clicks += 1

    def clear(self) -> None:
        self.value = ""

    def send_keys(self, text: str) -> None:
        self.value += text

    def select_option(self, value: str) -> None:
        self.selected = value


class ScriptedDriver:
    """find() returns the next scripted result; the last one repeats forever."""

    def __init__(self, *results) -> None:
        self.results = list(results)
        self.find_calls = 0

    def navigate(self, url: str) -> None:
        pass

    def find(self, locator: Locator):
        self.find_calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result

    def current_url(self) -> str:
        return "about:blank"

    def screenshot_png(self) -> bytes:
        return b""


class MockTracer:
    def __init__(self) -> None:
        self.events: list[dict] = []

    def emit(self, event_type: str, data: dict, step_id: str | None = None) -> None:
        self.events.append({"type": event_type, "data": data, "step_id": step_id})


def make_executor(driver: ScriptedDriver, clock: FakeClock, **kwargs) -> PollingActionExecutor:
    return PollingActionExecutor(driver, POLICY, clock=clock.monotonic, sleep=clock.sleep, **kwargs)


def test_click_waits_for_element_to_render() -> None:
    clock = FakeClock()
    el = StubElement()
    driver = ScriptedDriver([], [], [el])

    make_executor(driver, clock).click(BUTTON)

    assert el.clicks == 1
    assert clock.sleeps == [0.25, 0.25]


def test_locator_is_resolved_on_every_tick() -> None:
    clock = FakeClock()
    driver = ScriptedDriver([], [], [], [StubElement()])

    result = make_executor(driver, clock).perform(BUTTON, lambda h: StepOutcome.success())

    assert result.ok
    assert result.attempts == 4
    assert driver.find_calls == result.attempts


def test_timeout_is_reported_with_attempts_and_elapsed() -> None:
    clock = FakeClock()
    driver = ScriptedDriver([])

    with pytest.raises(ActionTimeoutError) as exc_info:
        make_executor(driver, clock).click(BUTTON)

    err = exc_info.value
    assert err.attempts == 5
    assert err.elapsed_s == 1.0
    assert "no element matches id=go" in err.last_reason
    assert err.reason_code == "timeout"


def test_perform_returns_timeout_result_without_raising() -> None:
    clock = FakeClock()
    result = make_executor(ScriptedDriver([]), clock).perform(BUTTON, lambda h: StepOutcome.success())

    assert result.status == "timeout"
    assert not result.ok
    assert result.target == "id=go"


def test_sleep_never_overshoots_the_deadline() -> None:
    clock = FakeClock()
    policy = WaitPolicy(timeout_s=1.0, poll_s=0.4)
    executor = PollingActionExecutor(
        ScriptedDriver([]), policy, clock=clock.monotonic, sleep=clock.sleep
    )

    with pytest.raises(ActionTimeoutError):
        executor.wait_visible(BUTTON)

    assert all(s <= 0.4 for s in clock.sleeps)
    assert clock.now == pytest.approx(1.0)


def test_transient_faults_are_retried() -> None:
    clock = FakeClock()
    el = StubElement()
    driver = ScriptedDriver(
        DriverFault(FaultKind.STALE, "detached"),
        DriverFault(FaultKind.CLICK_INTERCEPTED, "overlay"),
        [el],
    )

    make_executor(driver, clock).click(BUTTON)

    assert el.clicks == 1
    assert driver.find_calls == 3


def test_fatal_fault_aborts_without_retry() -> None:
    clock = FakeClock()
    driver = ScriptedDriver(DriverFault(FaultKind.SESSION_CLOSED, "browser has been closed"))

    with pytest.raises(ActionFailedError) as exc_info:
        make_executor(driver, clock).click(BUTTON)

    assert "session_closed" in exc_info.value.reason
    assert driver.find_calls == 1
    assert clock.sleeps == []


def test_transient_set_comes_from_the_policy() -> None:
    clock = FakeClock()
    strict = WaitPolicy(timeout_s=1.0, poll_s=0.25, transient=frozenset({FaultKind.NOT_FOUND}))
    driver = ScriptedDriver(DriverFault(FaultKind.STALE, "detached"), [StubElement()])
    executor = PollingActionExecutor(driver, strict, clock=clock.monotonic, sleep=clock.sleep)

    with pytest.raises(ActionFailedError):
        executor.click(BUTTON)


def test_fatal_step_outcome_stops_polling() -> None:
    clock = FakeClock()
    driver = ScriptedDriver([StubElement()])

    result = make_executor(driver, clock).perform(BUTTON, lambda h: StepOutcome.fatal("nope"))

    assert result.status == "fatal"
    assert result.reason == "nope"
    assert result.attempts == 1


def test_click_waits_until_disabled_attribute_is_cleared() -> None:
    clock = FakeClock()
    locked = StubElement(disabled="true")
    greyed = StubElement(enabled=False)
    ready = StubElement()
    driver = ScriptedDriver([locked], [greyed], [ready])

    make_executor(driver, clock).click(BUTTON)

    assert locked.clicks == 0
    assert greyed.clicks == 0
    assert ready.clicks == 1


def test_is_interactable() -> None:
    assert is_interactable(StubElement())
    assert not is_interactable(StubElement(displayed=False))
    assert not is_interactable(StubElement(enabled=False))
    assert not is_interactable(StubElement(disabled=""))


def test_read_text_does_not_require_enabled() -> None:
    clock = FakeClock()
    driver = ScriptedDriver([StubElement(text="  Products \n", enabled=False)])

    assert make_executor(driver, clock).read_text(BUTTON) == "Products"


def test_read_text_waits_for_display() -> None:
    clock = FakeClock()
    driver = ScriptedDriver([StubElement(text="x", displayed=False)], [StubElement(text="x")])

    assert make_executor(driver, clock).read_text(BUTTON) == "x"
    assert len(clock.sleeps) == 1


def test_type_text_clears_then_types() -> None:
    clock = FakeClock()
    el = StubElement()
    el.value = "stale input"

    make_executor(ScriptedDriver([el]), clock).type_text(BUTTON, "jane")

    assert el.value == "jane"


def test_select_option_passes_value() -> None:
    clock = FakeClock()
    el = StubElement()

    make_executor(ScriptedDriver([el]), clock).select_option(BUTTON, "lohi")

    assert el.selected == "lohi"


def test_wait_gone_requires_zero_matches() -> None:
    clock = FakeClock()
    driver = ScriptedDriver([StubElement()], [StubElement(displayed=False)], [])

    make_executor(driver, clock).wait_gone(BUTTON)

    assert driver.find_calls == 3


def test_wait_gone_timeout_is_not_absence() -> None:
    clock = FakeClock()
    driver = ScriptedDriver([StubElement(displayed=False)])

    with pytest.raises(ActionTimeoutError):
        make_executor(driver, clock).wait_gone(BUTTON)


def test_wait_until_polls_condition() -> None:
    clock = FakeClock()
    answers = iter([False, False, True])
    executor = make_executor(ScriptedDriver([]), clock)

    executor.wait_until(lambda: next(answers), description="ready")

    assert clock.now == 0.5


def test_read_all_texts_reads_every_match() -> None:
    clock = FakeClock()
    driver = ScriptedDriver([], [StubElement(text="$7.99"), StubElement(text=" $9.99 ")])

    assert make_executor(driver, clock).read_all_texts(BUTTON) == ["$7.99", "$9.99"]


def test_probes_are_advisory_on_faults() -> None:
    clock = FakeClock()
    driver = ScriptedDriver(DriverFault(FaultKind.UNKNOWN, "boom"))
    executor = make_executor(driver, clock)

    assert executor.exists(BUTTON) is False
    assert executor.is_visible(BUTTON) is False
    assert executor.is_enabled(BUTTON) is False
    assert executor.count(BUTTON) == 0
    assert executor.peek_text(BUTTON) is None
    assert executor.peek_all_texts(BUTTON) == []
    assert executor.read_int_if_present(BUTTON, 7) == 7
    assert clock.sleeps == []


def test_probes_resolve_once() -> None:
    clock = FakeClock()
    driver = ScriptedDriver([StubElement(text="3")])
    executor = make_executor(driver, clock)

    assert executor.read_int_if_present(BUTTON) == 3
    assert executor.exists(BUTTON) is True
    assert executor.is_enabled(BUTTON) is True
    assert driver.find_calls == 3


def test_read_int_if_present_defaults_when_absent_or_blank() -> None:
    clock = FakeClock()
    assert make_executor(ScriptedDriver([]), clock).read_int_if_present(BUTTON) == 0
    assert make_executor(ScriptedDriver([StubElement(text="")]), clock).read_int_if_present(BUTTON, 4) == 4


def test_read_counter_lets_faults_through() -> None:
    clock = FakeClock()
    executor = make_executor(ScriptedDriver(DriverFault(FaultKind.STALE, "gone")), clock)

    with pytest.raises(DriverFault):
        executor.read_counter(BUTTON)


def test_read_counter_tells_absent_from_unreadable() -> None:
    clock = FakeClock()
    assert make_executor(ScriptedDriver([]), clock).read_counter(BUTTON) == 0
    assert make_executor(ScriptedDriver([StubElement(text="")]), clock).read_counter(BUTTON) is None
    assert make_executor(ScriptedDriver([StubElement(text="2")]), clock).read_counter(BUTTON) == 2


def test_read_count_retries_faults_and_blank_text() -> None:
    clock = FakeClock()
    driver = ScriptedDriver(
        DriverFault(FaultKind.STALE, "re-rendered"), [StubElement(text="")], [StubElement(text="3")]
    )

    assert make_executor(driver, clock).read_count(BUTTON) == 3
    assert driver.find_calls == 3
    assert clock.sleeps == [0.25, 0.25]


def test_is_enabled_probe_honours_disabled_attribute() -> None:
    clock = FakeClock()
    driver = ScriptedDriver([StubElement(disabled="true")])

    assert make_executor(driver, clock).is_enabled(BUTTON) is False


def test_trace_redacts_secret_text() -> None:
    clock = FakeClock()
    tracer = MockTracer()
    executor = make_executor(ScriptedDriver([StubElement()]), clock, tracer=tracer)

    executor.type_text(BUTTON, "secret_sauce", secret=True)
    executor.type_text(BUTTON, "standard_user")

    assert [e["type"] for e in tracer.events] == ["action", "action"]
    assert tracer.events[0]["data"]["detail"]["text"] == "***"
    assert tracer.events[0]["data"]["status"] == "success"
    assert tracer.events[1]["data"]["detail"]["text"] == "standard_user"
