"""Testing utilities for code built on retrykit.

Provides a virtual-time event loop so retry timing can be asserted exactly
without real waits.
"""

from .loop import VirtualTimeEventLoop, run_virtual

__all__ = ["VirtualTimeEventLoop", "run_virtual"]
