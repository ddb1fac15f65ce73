"""Shared fixtures for retrykit tests."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import pytest

from retrykit.foundation.config import clear_settings_cache
from retrykit.foundation.testing import VirtualTimeEventLoop
from retrykit.runtime.observability import BoundLogger, LogEntry, configure_logging


@dataclass(slots=True)
class CaptureRenderer:
    """Renderer keeping every entry in memory."""

    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    @property
    def events(self) -> list[str]:
        return [e.event for e in self.entries]


@pytest.fixture(autouse=True)
def quiet_logging() -> Iterator[None]:
    """Silence the default renderer so test output stays readable."""
    configure_logging(format="none")
    yield


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate tests from RETRYKIT_* variables in the developer's environment."""
    import os
    for key in [k for k in os.environ if k.startswith("RETRYKIT_")]:
        monkeypatch.delenv(key)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def virtual_loop() -> Iterator[VirtualTimeEventLoop]:
    loop = VirtualTimeEventLoop()
    yield loop
    loop.close()


@pytest.fixture
def captured() -> CaptureRenderer:
    return CaptureRenderer()


@pytest.fixture
def capture_logger(captured: CaptureRenderer) -> BoundLogger:
    return BoundLogger(_renderer=captured)
