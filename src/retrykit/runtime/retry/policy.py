"""Retry configuration for the executor.

Provides the immutable per-call RetryConfig, the ErrorMatcher that decides
which failures are retryable, and the RetryState snapshot handed to
``on_retry`` callbacks.

Optimizations:
- Frozen for immutability
- Retryable kind normalized once into a predicate at construction
"""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, TypeAlias

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    PositiveFloat,
    ValidationError,
    computed_field,
    field_validator,
)

from retrykit.foundation.errors import ErrorCode, InvalidConfiguration, classify_exception

from .backoff import BackoffPolicy, FixedBackoff

if TYPE_CHECKING:
    from retrykit.foundation.config import RetrykitSettings


ErrorKind: TypeAlias = (
    "type[BaseException] | tuple[type[BaseException], ...] | ErrorCode | str "
    "| Collection[ErrorCode | str] | Callable[[BaseException], bool] | ErrorMatcher | None"
)


class ErrorMatcher:
    """Predicate deciding whether a failure is retryable.

    Built from any ErrorKind via ``ErrorMatcher.of``:
        - exception class or tuple of classes: isinstance match
        - ErrorCode, code string or collection of codes: match on classify_exception()
        - "any" or None: every failure matches
        - callable: used as the predicate directly

    Example:
        >>> matcher = ErrorMatcher.of(ConnectionError)
        >>> matcher(ConnectionResetError())
        True
        >>> ErrorMatcher.of({ErrorCode.RATE_LIMITED})(RuntimeError("rate limit hit"))
        True
    """

    __slots__ = ("_predicate", "description")

    def __init__(self, predicate: Callable[[BaseException], bool], description: str) -> None:
        self._predicate, self.description = predicate, description

    def __call__(self, exc: BaseException) -> bool:
        return bool(self._predicate(exc))

    def __repr__(self) -> str:
        return f"ErrorMatcher({self.description})"

    @classmethod
    def any(cls) -> ErrorMatcher:
        return cls(lambda _: True, "any")

    @classmethod
    def of(cls, kind: Any) -> ErrorMatcher:
        """Normalize an ErrorKind into a matcher. Raises InvalidConfiguration on unsupported input."""
        match kind:
            case ErrorMatcher():
                return kind
            case None | "any":
                return cls.any()
            case type() if issubclass(kind, BaseException):
                return cls(lambda e: isinstance(e, kind), kind.__name__)
            case type():
                raise InvalidConfiguration(f"Retryable kind must be an exception class, got {kind.__name__}")
            case tuple() if kind and all(isinstance(k, type) and issubclass(k, BaseException) for k in kind):
                return cls(lambda e: isinstance(e, kind), " | ".join(k.__name__ for k in kind))
            case ErrorCode() | str():
                code = _to_code(kind)
                return cls(lambda e: classify_exception(e) == code, code.value)
            case set() | frozenset() | list() | tuple() if kind:
                codes = frozenset(_to_code(k) for k in kind)
                return cls(lambda e: classify_exception(e) in codes, " | ".join(sorted(codes)))
            case _ if callable(kind):
                return cls(kind, getattr(kind, "__name__", repr(kind)))
        raise InvalidConfiguration(f"Unsupported retryable error kind: {kind!r}")


def _to_code(value: object) -> ErrorCode:
    if isinstance(value, ErrorCode):
        return value
    try:
        return ErrorCode(value)
    except ValueError:
        raise InvalidConfiguration(f"Unknown error code: {value!r}") from None


@dataclass(frozen=True, slots=True)
class RetryState:
    """Snapshot of a retry decision, passed to on_retry callbacks.

    Attributes:
        attempt: 1-based number of the attempt that just failed
        error: The failure of that attempt
        delay: Backoff interval about to be waited, in seconds (jitter excluded)
        elapsed: Seconds since the call started
    """

    attempt: int
    error: BaseException
    delay: float
    elapsed: float


class RetryConfig(BaseModel):
    """Immutable configuration for one retry execution.

    Attributes:
        retry_limit: Attempts permitted after the first (total = retry_limit + 1)
        initial_delay: Seconds waited once before the first attempt
        backoff: Policy supplying the wait between attempts
        use_jitter: Add a random [0, jitter_ceiling) wait after each backoff wait
        jitter_ceiling: Exclusive upper bound of the jitter wait in seconds
        retry_on: Which failures are retryable (see ErrorMatcher)
        max_wait: Overall deadline in seconds covering the whole call, 0 = unbounded
        reraise: Surface terminal failures as the original exception (True)
            or wrapped in RetriesExhausted / UnretryableFailure (False)
        on_retry: Optional callback fired before each backoff wait

    Example:
        >>> config = RetryConfig(
        ...     retry_limit=4,
        ...     backoff=ExponentialBackoff(0.5),
        ...     retry_on=ConnectionError,
        ...     max_wait=30.0,
        ... )
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,  # BackoffPolicy protocol, ErrorMatcher
        validate_default=True,
        extra="forbid",
        revalidate_instances="never",
    )

    retry_limit: Annotated[int, Field(ge=0)] = 3
    initial_delay: NonNegativeFloat = 0.0
    backoff: BackoffPolicy = Field(default_factory=FixedBackoff, repr=False)
    use_jitter: bool = False
    jitter_ceiling: PositiveFloat = 1.0
    retry_on: ErrorMatcher = Field(default_factory=ErrorMatcher.any)
    max_wait: NonNegativeFloat = 0.0
    reraise: bool = True
    on_retry: Callable[[RetryState], None] | None = Field(default=None, exclude=True, repr=False)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise InvalidConfiguration(_format_validation_error(e)) from e

    @field_validator("retry_on", mode="before")
    @classmethod
    def _normalize_kind(cls, v: Any) -> ErrorMatcher:
        return ErrorMatcher.of(v)

    @computed_field
    @property
    def max_attempts(self) -> int:
        """Total attempts including the first."""
        return self.retry_limit + 1

    @property
    def has_deadline(self) -> bool:
        return self.max_wait > 0

    def with_fresh_backoff(self) -> RetryConfig:
        """Copy of this config owning an unused copy of its backoff policy."""
        return self.model_copy(update={"backoff": self.backoff.fresh()})

    @classmethod
    def from_settings(cls, settings: RetrykitSettings | None = None, **overrides: Any) -> RetryConfig:
        """Build a config from RetrySettings, with keyword overrides taking precedence."""
        if settings is None:
            from retrykit.foundation.config import get_settings
            settings = get_settings()
        s = settings.retry
        base: dict[str, Any] = {
            "retry_limit": s.retry_limit,
            "initial_delay": s.initial_delay,
            "use_jitter": s.use_jitter,
            "jitter_ceiling": s.jitter_ceiling,
            "max_wait": s.max_wait,
        }
        if "backoff" not in overrides:
            base["backoff"] = FixedBackoff(s.fixed_interval)
        return cls(**{**base, **overrides})


def _format_validation_error(exc: ValidationError) -> str:
    """Flatten pydantic errors into one line: 'field: message; field: message'."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "config"
        parts.append(f"{loc}: {err['msg']}")
    return "Invalid retry configuration - " + "; ".join(parts)
