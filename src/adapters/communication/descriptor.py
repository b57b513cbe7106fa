"""Immutable values exchanged between the builder and the executor."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from core.domain.enums import HttpMethod, HttpStatus, OperationKind

PayloadValue = str | int


@dataclass(frozen=True)
class RequestDescriptor:
    """One API call: operation, path and payload.

    The payload is copied into a read-only mapping on construction, so a
    builder reused afterwards cannot alter a descriptor it already produced.
    """

    operation: OperationKind
    path: str
    payload: Mapping[str, PayloadValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        missing = [key for key, value in self.payload.items() if value is None]
        if missing:
            raise ValueError(f"Payload values must not be None: {', '.join(sorted(missing))}")
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    @property
    def method(self) -> HttpMethod:
        return self.operation.method

    def encoded_payload(self) -> list[tuple[str, str]]:
        """Payload as `(key, value)` string pairs sorted by key."""

        return [(key, str(self.payload[key])) for key in sorted(self.payload)]


@dataclass(frozen=True)
class ExecutionFlags:
    start_immediately: bool = False
    block_until_complete: bool = False
    detached: bool = False


@dataclass(frozen=True)
class CommunicationResult:
    """Outcome of one round trip.

    `value` is only set for a decoded 200 answer of an operation that returns
    data; `error` carries a short reason for synthesised statuses.
    """

    operation: OperationKind
    status: HttpStatus
    status_code: int
    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is HttpStatus.OK

    @classmethod
    def failure(
        cls,
        operation: OperationKind,
        status: HttpStatus,
        error: str,
        *,
        status_code: int | None = None,
    ) -> "CommunicationResult":
        return cls(
            operation=operation,
            status=status,
            status_code=int(status) if status_code is None else status_code,
            error=error,
        )
