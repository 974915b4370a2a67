"""
Connection Models

Typed configuration and result objects shared by the retrying connector and
the connection registry. Configuration types are Pydantic models so that the
same definitions validate Python callers, YAML files and environment-driven
settings alike.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RetryPolicy(BaseModel):
    """
    Exponential backoff policy for a single connection attempt sequence.

    The wait inserted after a failed attempt ``k`` is
    ``base_interval_ms * backoff_factor ** (k - 1)``, so the first retry waits
    exactly the base interval. The policy is immutable once built.

    Attributes:
        max_attempts: Total number of connection attempts, including the first.
        base_interval_ms: Wait in milliseconds after the first failed attempt.
        backoff_factor: Multiplier applied to the wait after each further failure.

    Example:
        ```python
        policy = RetryPolicy(max_attempts=3, base_interval_ms=100, backoff_factor=2)
        policy.backoff_ms(1)  # 100.0
        policy.backoff_ms(2)  # 200.0
        ```
    """
    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(
        default=5,
        ge=1,
        description="Total number of connection attempts, including the first one"
    )
    base_interval_ms: int = Field(
        default=5000,
        ge=0,
        description="Wait in milliseconds after the first failed attempt"
    )
    backoff_factor: float = Field(
        default=1.5,
        ge=1.0,
        description="Growth factor applied to the wait after each further failure"
    )

    def backoff_ms(self, attempt: int) -> float:
        """Wait in milliseconds after failed attempt ``attempt`` (1-indexed)."""
        if attempt < 1:
            raise ValueError("attempt numbers start at 1")
        return self.base_interval_ms * self.backoff_factor ** (attempt - 1)

    def merged(self, overrides: Optional["RetryPolicy"]) -> "RetryPolicy":
        """
        Return a copy of this policy with the explicitly set fields of
        ``overrides`` applied on top.

        Fields the caller never set on ``overrides`` keep this policy's
        values, which is what lets a config say only ``max_attempts: 3``.
        """
        if overrides is None:
            return self
        return self.model_copy(update=overrides.model_dump(exclude_unset=True))


class PoolOptions(BaseModel):
    """
    Pool-size and timeout options handed to the database driver.

    Only the fields below are typed. Anything else the driver understands
    goes into ``driver_options`` and is passed through untouched; unknown
    top-level fields are rejected. The driver's own camelCase option names
    are accepted as aliases so YAML files can use either spelling.

    Unset fields stay ``None`` and are omitted from the driver call, leaving
    the driver's (or the registry's) defaults in charge.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    POOL_FIELDS: ClassVar[Tuple[str, ...]] = (
        "min_pool_size",
        "max_pool_size",
        "server_selection_timeout_ms",
        "socket_timeout_ms",
    )

    min_pool_size: Optional[int] = Field(
        default=None,
        ge=0,
        alias="minPoolSize",
        description="Minimum number of connections the driver keeps open"
    )
    max_pool_size: Optional[int] = Field(
        default=None,
        ge=0,
        alias="maxPoolSize",
        description="Maximum number of concurrent connections in the pool"
    )
    server_selection_timeout_ms: Optional[int] = Field(
        default=None,
        ge=0,
        alias="serverSelectionTimeoutMS",
        description="How long the driver waits to find a suitable server"
    )
    socket_timeout_ms: Optional[int] = Field(
        default=None,
        ge=0,
        alias="socketTimeoutMS",
        description="How long a send or receive on a socket may take"
    )
    driver_options: Dict[str, Any] = Field(
        default_factory=dict,
        alias="driverOptions",
        description="Additional driver-specific keyword arguments, passed through as-is"
    )

    @field_validator("driver_options")
    @classmethod
    def validate_driver_options(cls, v):
        """Keep typed pool fields out of the pass-through map."""
        typed_names = set(cls.POOL_FIELDS)
        typed_names.update(cls.model_fields[name].alias for name in cls.POOL_FIELDS)
        clashes = sorted(typed_names.intersection(v))
        if clashes:
            raise ValueError(
                f"driver_options must not contain typed pool fields: {', '.join(clashes)}"
            )
        return v

    def with_defaults(self, defaults: "PoolOptions") -> "PoolOptions":
        """
        Fill every unset pool field from ``defaults``.

        An explicit ``0`` counts as set. Driver options are merged with this
        instance's entries taking precedence.
        """
        updates: Dict[str, Any] = {
            name: getattr(defaults, name)
            for name in self.POOL_FIELDS
            if getattr(self, name) is None
        }
        updates["driver_options"] = {**defaults.driver_options, **self.driver_options}
        return self.model_copy(update=updates)

    def to_driver_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for the driver client, using its option names."""
        kwargs = self.model_dump(by_alias=True, exclude_none=True, exclude={"driver_options"})
        kwargs.update(self.driver_options)
        return kwargs


class ConnectionConfig(BaseModel):
    """
    Everything needed to open one named connection.

    Attributes:
        uri: Connection string understood by the driver.
        options: Pool options; unset fields receive the registry defaults.
        retry_policy: Partial retry policy; only the fields given here
            override the registry's default policy.
    """
    uri: str = Field(..., min_length=1, description="Database connection URI")
    options: Optional[PoolOptions] = Field(
        default=None,
        description="Pool and timeout options for the driver"
    )
    retry_policy: Optional[RetryPolicy] = Field(
        default=None,
        description="Overrides for the default retry policy"
    )


class ConnectionStatus(str, Enum):
    """Terminal outcome of a connection attempt sequence."""
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class ConnectionAttemptResult:
    """
    Outcome of a connection attempt sequence.

    Exactly one of ``handle`` (on success) or ``error`` (on failure) is set.
    On failure ``error`` is the exception raised by the last attempt, as-is.
    ``attempts`` counts how many times the connector was invoked.
    """
    status: ConnectionStatus
    handle: Any = None
    error: Optional[Exception] = None
    attempts: int = 0

    def __post_init__(self):
        if self.status == ConnectionStatus.SUCCESS:
            if self.handle is None or self.error is not None:
                raise ValueError("a successful result carries a handle and no error")
        elif self.error is None or self.handle is not None:
            raise ValueError("a failed result carries an error and no handle")

    @classmethod
    def success(cls, handle: Any, attempts: int = 1) -> "ConnectionAttemptResult":
        return cls(status=ConnectionStatus.SUCCESS, handle=handle, attempts=attempts)

    @classmethod
    def failure(cls, error: Exception, attempts: int = 1) -> "ConnectionAttemptResult":
        return cls(status=ConnectionStatus.FAILURE, error=error, attempts=attempts)

    @property
    def succeeded(self) -> bool:
        return self.status == ConnectionStatus.SUCCESS
