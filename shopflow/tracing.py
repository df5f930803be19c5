"""
Minimal trace emission: one JSON object per event, appended to a JSONL file.

    tracer = Tracer(run_id="purchase-1", sink=JsonlTraceSink("trace.jsonl"))
    executor = PollingActionExecutor(driver, tracer=tracer)
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class TraceSink(Protocol):
    def write(self, event: dict[str, Any]) -> None: ...

    def close(self) -> None: ...


class JsonlTraceSink:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("a", encoding="utf-8")

    def write(self, event: dict[str, Any]) -> None:
        self._fh.write(json.dumps(event, default=str) + "\n")
        self._fh.flush()

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()


class Tracer:
    def __init__(
        self, run_id: str, sink: TraceSink, time_fn: Callable[[], float] = time.time
    ) -> None:
        self.run_id = run_id
        self.sink = sink
        self._time_fn = time_fn
        self._seq = 0

    def emit(self, event_type: str, data: dict[str, Any], step_id: str | None = None) -> None:
        self._seq += 1
        event = {
            "v": 1,
            "type": event_type,
            "ts": self._time_fn(),
            "run_id": self.run_id,
            "seq": self._seq,
            "step_id": step_id,
            "data": data,
        }
        try:
            self.sink.write(event)
        except OSError as e:
            # Tracing must be non-fatal
            logger.warning(f"Failed to write trace event {event_type}: {e}")

    def close(self) -> None:
        self.sink.close()
