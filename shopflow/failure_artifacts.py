from __future__ import annotations

import json
import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from .models import ActionRecord

logger = logging.getLogger(__name__)

REDACTED = "***"
SCREENSHOT_FILE = "screenshot.png"
STEPS_FILE = "steps.json"
MANIFEST_FILE = "manifest.json"

RunStatus = Literal["failure", "success"]


class ArtifactManifest(BaseModel):
    run_id: str
    created_at_ms: int
    status: RunStatus
    reason: str | None = None
    step_count: int = 0
    screenshot: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


@dataclass
class FailureArtifactsOptions:
    output_dir: str = ".shopflow/artifacts"
    persist_mode: Literal["onFail", "always"] = "onFail"
    max_steps: int = 200
    """Only the most recent steps are kept for the manifest."""
    redact_secrets: bool = True


class FailureArtifactRecorder:
    """
    Bounded history of executor actions for one scenario. On failure (or always,
    depending on `persist_mode`) the history is saved next to a screenshot.
    """

    def __init__(
        self,
        *,
        run_id: str,
        options: FailureArtifactsOptions | None = None,
        time_fn: Callable[[], float] = time.time,
    ) -> None:
        self.run_id = run_id
        self.options = options or FailureArtifactsOptions()
        self._time_fn = time_fn
        self._steps: deque[dict[str, Any]] = deque(maxlen=max(1, self.options.max_steps))

    def record_step(self, record: ActionRecord) -> None:
        entry = asdict(record)
        entry["ts"] = self._time_fn()
        detail = dict(entry.get("detail") or {})
        if self.options.redact_secrets and detail.get("secret") and "text" in detail:
            detail["text"] = REDACTED
        entry["detail"] = detail
        self._steps.append(entry)

    def step_count(self) -> int:
        return len(self._steps)

    def should_persist(self, status: RunStatus) -> bool:
        return status == "failure" or self.options.persist_mode == "always"

    @staticmethod
    def _dump(target: Path, payload: Any) -> None:
        # Written beside the target and renamed so readers never see a partial file.
        partial = target.parent / f".{target.name}.partial"
        partial.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
        partial.replace(target)

    def persist(
        self,
        *,
        reason: str | None,
        status: RunStatus,
        screenshot: bytes | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Path | None:
        """Write the scenario's artifacts; returns the directory, or None when skipped."""
        if not self.should_persist(status):
            return None

        created_ms = int(self._time_fn() * 1000)
        out = Path(self.options.output_dir) / f"{self.run_id}-{created_ms}"
        out.mkdir(parents=True, exist_ok=True)

        shot_name = None
        if screenshot:
            shot_name = SCREENSHOT_FILE
            (out / shot_name).write_bytes(screenshot)
        self._dump(out / STEPS_FILE, list(self._steps))

        manifest = ArtifactManifest(
            run_id=self.run_id,
            created_at_ms=created_ms,
            status=status,
            reason=reason,
            step_count=len(self._steps),
            screenshot=shot_name,
            metadata=dict(metadata or {}),
        )
        self._dump(out / MANIFEST_FILE, manifest.model_dump())
        logger.info(f"Saved {status} artifacts for {self.run_id} in {out}")
        return out
