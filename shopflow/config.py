"""
Flow configuration.

Values come from a properties file (`base.url=https://...`) and can be
overridden per key with `SHOPFLOW_*` environment variables:

    base.url             -> SHOPFLOW_BASE_URL
    username             -> SHOPFLOW_USERNAME
    password             -> SHOPFLOW_PASSWORD
    browser              -> SHOPFLOW_BROWSER       (chromium|chrome|edge|firefox|webkit)
    headless             -> SHOPFLOW_HEADLESS      (true|false)
    page.load.timeout.sec-> SHOPFLOW_PAGE_LOAD_TIMEOUT_SEC
    wait.timeout.sec     -> SHOPFLOW_WAIT_TIMEOUT_SEC
    poll.interval.ms     -> SHOPFLOW_POLL_INTERVAL_MS
    action.timeout.ms    -> SHOPFLOW_ACTION_TIMEOUT_MS
    user.data.dir        -> SHOPFLOW_USER_DATA_DIR
    artifacts.dir        -> SHOPFLOW_ARTIFACTS_DIR
    trace.path           -> SHOPFLOW_TRACE_PATH
"""

from __future__ import annotations

import configparser
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .errors import UnsupportedConfigError
from .models import WaitPolicy

logger = logging.getLogger(__name__)

# kind -> (playwright engine, browser channel)
BROWSER_KINDS: dict[str, tuple[str, str | None]] = {
    "chromium": ("chromium", None),
    "chrome": ("chromium", "chrome"),
    "edge": ("chromium", "msedge"),
    "firefox": ("firefox", None),
    "webkit": ("webkit", None),
}

ENV_PREFIX = "SHOPFLOW_"

# properties key -> FlowConfig field
_PROPERTY_FIELDS: dict[str, str] = {
    "base.url": "base_url",
    "username": "username",
    "password": "password",
    "browser": "browser",
    "headless": "headless",
    "page.load.timeout.sec": "page_load_timeout_s",
    "wait.timeout.sec": "wait_timeout_s",
    "poll.interval.ms": "poll_interval_ms",
    "action.timeout.ms": "action_timeout_ms",
    "user.data.dir": "user_data_dir",
    "artifacts.dir": "artifacts_dir",
    "trace.path": "trace_path",
}


class FlowConfig(BaseModel):
    base_url: str
    username: str = ""
    password: str = ""
    browser: str = "chromium"
    headless: bool = True
    page_load_timeout_s: float = Field(30.0, gt=0)
    wait_timeout_s: float = Field(10.0, gt=0)
    poll_interval_ms: int = Field(300, gt=0)
    action_timeout_ms: int = Field(1000, gt=0)
    user_data_dir: str | None = None
    artifacts_dir: str = ".shopflow/artifacts"
    trace_path: str | None = None

    @field_validator("browser")
    @classmethod
    def _known_browser(cls, v: str) -> str:
        kind = v.strip().lower()
        if kind not in BROWSER_KINDS:
            raise ValueError(
                f"Unsupported browser: {v!r} (expected one of {', '.join(sorted(BROWSER_KINDS))})"
            )
        return kind

    @field_validator("base_url")
    @classmethod
    def _non_empty_url(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("base.url must be set")
        return v.strip()

    @model_validator(mode="after")
    def _poll_below_wait_timeout(self) -> FlowConfig:
        if self.poll_interval_ms / 1000.0 >= self.wait_timeout_s:
            raise ValueError("poll.interval.ms must be shorter than wait.timeout.sec")
        return self

    def wait_policy(self) -> WaitPolicy:
        return WaitPolicy(timeout_s=self.wait_timeout_s, poll_s=self.poll_interval_ms / 1000.0)


def env_key(property_key: str) -> str:
    return ENV_PREFIX + property_key.upper().replace(".", "_")


def read_properties(path: str | Path) -> dict[str, str]:
    parser = configparser.ConfigParser(interpolation=None, delimiters=("=", ":"))
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    text = Path(path).read_text(encoding="utf-8")
    parser.read_string("[properties]\n" + text, source=str(path))
    return dict(parser["properties"])


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> FlowConfig:
    """
    Build a FlowConfig from an optional properties file plus environment overrides.

    Blank values are treated as unset, so an empty override never masks the file.
    Raises UnsupportedConfigError when the merged values fail validation
    (missing base.url, unknown browser kind, non-numeric timeouts).
    """
    env = os.environ if environ is None else environ
    raw: dict[str, str] = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            props = read_properties(p)
            unknown = sorted(set(props) - set(_PROPERTY_FIELDS))
            if unknown:
                logger.warning(f"Ignoring unknown config keys in {p}: {unknown}")
            raw.update({k: v for k, v in props.items() if k in _PROPERTY_FIELDS})
        else:
            logger.warning(f"Config file {p} not found; using environment only")

    for key in _PROPERTY_FIELDS:
        override = env.get(env_key(key))
        if override is not None and override.strip():
            raw[key] = override

    values = {_PROPERTY_FIELDS[k]: v.strip() for k, v in raw.items() if v.strip()}
    try:
        config = FlowConfig(**values)
    except ValidationError as e:
        raise UnsupportedConfigError(str(e)) from e

    logger.info(
        f"Configuration loaded (base_url={config.base_url}, browser={config.browser}, "
        f"headless={config.headless})"
    )
    return config
