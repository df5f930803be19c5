from __future__ import annotations

import pytest
from storefront_fake import BASE_URL, VALID_PASSWORD, VALID_USERNAME, FakeClock, FakeStore

from shopflow.executor import PollingActionExecutor
from shopflow.models import WaitPolicy
from shopflow.pages import ProductsPage, start_flow


@pytest.fixture
def policy() -> WaitPolicy:
    return WaitPolicy(timeout_s=5.0, poll_s=0.25)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> FakeStore:
    return FakeStore(clock)


@pytest.fixture
def executor(store: FakeStore, clock: FakeClock, policy: WaitPolicy) -> PollingActionExecutor:
    return PollingActionExecutor(store, policy, clock=clock.monotonic, sleep=clock.sleep)


@pytest.fixture
def products(executor: PollingActionExecutor) -> ProductsPage:
    page = start_flow(executor, BASE_URL).submit(VALID_USERNAME, VALID_PASSWORD)
    assert isinstance(page, ProductsPage)
    return page
