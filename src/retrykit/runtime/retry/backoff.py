"""Backoff policies for the retry executor.

A policy is asked for the next wait interval once per scheduled retry:
- FixedBackoff: Same interval every time
- ExponentialBackoff: Doubles the previously returned interval, optionally capped

Policies are stateful and sequential. Each call to ``next_interval()`` both
computes and records the interval, so one instance must only drive one retry
loop at a time. Use ``fresh()`` to get an unused copy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from retrykit.foundation.errors import InvalidConfiguration


@runtime_checkable
class BackoffPolicy(Protocol):
    """Protocol for backoff interval calculation."""

    def next_interval(self) -> float:
        """Return the wait in seconds before the next attempt and record it."""
        ...

    def fresh(self) -> BackoffPolicy:
        """Return a policy with the same parameters and no recorded state."""
        ...


@dataclass(frozen=True, slots=True)
class FixedBackoff:
    """Fixed delay between retries.

    Simple strategy for rate-limited APIs with known cooldown.

    Attributes:
        interval: Delay in seconds (default: 1.0), must be > 0
    """

    interval: float = 1.0

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise InvalidConfiguration(f"Fixed interval must be greater than 0, got {self.interval}")

    def next_interval(self) -> float:
        return self.interval

    def fresh(self) -> FixedBackoff:
        return self  # stateless


@dataclass(slots=True)
class ExponentialBackoff:
    """Exponential backoff doubling the previously returned interval.

    Returns ``initial`` on the first call and twice the last returned value
    afterwards: 1, 2, 4, 8, ... for ``initial=1.0``. With ``max_interval``
    set, the sequence saturates at the cap.

    Attributes:
        initial: First interval in seconds, must be > 0
        max_interval: Optional cap in seconds, must be >= initial
    """

    initial: float
    max_interval: float | None = None
    _last: float | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.initial <= 0:
            raise InvalidConfiguration(f"Start interval must be greater than 0, got {self.initial}")
        if self.max_interval is not None and self.max_interval < self.initial:
            raise InvalidConfiguration(
                f"Max interval {self.max_interval} must not be below start interval {self.initial}"
            )

    @property
    def last_interval(self) -> float | None:
        """Most recently returned interval, None before the first call."""
        return self._last

    def next_interval(self) -> float:
        nxt = self.initial if self._last is None else self._last * 2
        if self.max_interval is not None:
            nxt = min(nxt, self.max_interval)
        self._last = nxt
        return nxt

    def fresh(self) -> ExponentialBackoff:
        return ExponentialBackoff(self.initial, self.max_interval)
