"""
Browser fixtures for the live storefront suite.

A fresh browser session backs every test. When a test fails, a screenshot plus
the recent executor steps are written under `artifacts.dir`.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from shopflow.backends import BrowserSession, PlaywrightDriver
from shopflow.config import FlowConfig, load_config
from shopflow.errors import FlowError
from shopflow.executor import PollingActionExecutor
from shopflow.failure_artifacts import FailureArtifactRecorder, FailureArtifactsOptions
from shopflow.pages import ProductsPage, start_flow
from shopflow.tracing import JsonlTraceSink, Tracer

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).with_name("config.properties")

E2E_ENABLED = os.environ.get("SHOPFLOW_E2E") == "1"

requires_browser = pytest.mark.skipif(
    not E2E_ENABLED, reason="set SHOPFLOW_E2E=1 to drive a real browser"
)


def pytest_collection_modifyitems(config, items) -> None:
    for item in items:
        if item.path.parent == CONFIG_PATH.parent:
            item.add_marker(pytest.mark.e2e)
            item.add_marker(requires_browser)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


@pytest.fixture(scope="session")
def flow_config() -> FlowConfig:
    return load_config(CONFIG_PATH)


@pytest.fixture
def driver(flow_config: FlowConfig):
    with BrowserSession(flow_config) as driver:
        yield driver


@pytest.fixture
def recorder(request, flow_config: FlowConfig) -> FailureArtifactRecorder:
    return FailureArtifactRecorder(
        run_id=request.node.name,
        options=FailureArtifactsOptions(output_dir=flow_config.artifacts_dir),
    )


@pytest.fixture
def tracer(request, flow_config: FlowConfig):
    if not flow_config.trace_path:
        yield None
        return
    tracer = Tracer(run_id=request.node.name, sink=JsonlTraceSink(flow_config.trace_path))
    yield tracer
    tracer.close()


@pytest.fixture
def executor(
    driver: PlaywrightDriver,
    flow_config: FlowConfig,
    recorder: FailureArtifactRecorder,
    tracer,
) -> PollingActionExecutor:
    return PollingActionExecutor(
        driver, flow_config.wait_policy(), tracer=tracer, recorder=recorder
    )


@pytest.fixture(autouse=True)
def failure_screenshot(request, driver: PlaywrightDriver, recorder: FailureArtifactRecorder):
    logger.info(f"Starting test: {request.node.name}")
    yield
    report = getattr(request.node, "rep_call", None)
    if report is None or not report.failed:
        return
    try:
        screenshot = driver.screenshot_png()
        url = driver.current_url()
    except FlowError as e:
        logger.warning(f"Failed to capture screenshot: {e}")
        screenshot, url = None, None
    run_dir = recorder.persist(
        reason=str(report.longrepr).splitlines()[-1] if report.longrepr else None,
        status="failure",
        screenshot=screenshot,
        metadata={"test": request.node.nodeid, "url": url},
    )
    logger.info(f"Failure artifacts for {request.node.name}: {run_dir}")


@pytest.fixture
def products(executor: PollingActionExecutor, flow_config: FlowConfig) -> ProductsPage:
    page = start_flow(executor, flow_config.base_url).submit(
        flow_config.username, flow_config.password
    )
    assert page.title() == "Products"
    return page
