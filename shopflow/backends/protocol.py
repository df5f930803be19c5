"""
Capability contract for the remote UI automation driver.

Any backend that can satisfy these two protocols can drive the flow. Backends
must raise `DriverFault` (never their own exception types) so the executor can
classify failures by `FaultKind` alone.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..models import Locator


@runtime_checkable
class ElementHandle(Protocol):
    """A live element. Valid for one synchronous operation only."""

    def is_displayed(self) -> bool: ...

    def is_enabled(self) -> bool: ...

    def get_attribute(self, name: str) -> str | None: ...

    def get_text(self) -> str: ...

    def click(self) -> None: ...

    def clear(self) -> None: ...

    def send_keys(self, text: str) -> None: ...

    def select_option(self, value: str) -> None: ...


@runtime_checkable
class UIDriver(Protocol):
    def navigate(self, url: str) -> None: ...

    def find(self, locator: Locator) -> list[ElementHandle]: ...

    def current_url(self) -> str: ...

    def screenshot_png(self) -> bytes: ...
