"""Concurrency primitives for the retry executor.

Key Components:
    - Clock/LoopClock/Deadline: Injectable sleep and deadline capability
    - run_sync/to_thread/abandoning_executor: Sync/async interop

Zero external dependencies: pure asyncio (Python 3.11+).
"""

from __future__ import annotations

from .clock import Clock, Deadline, LoopClock
from .interop import abandoning_executor, run_sync, to_thread

__all__ = [
    # Clock
    "Clock", "LoopClock", "Deadline",
    # Interop
    "run_sync", "to_thread", "abandoning_executor",
]
