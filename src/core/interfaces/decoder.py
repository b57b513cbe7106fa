"""Contract for response decoders.

Why Protocol:
- One structural contract per operation without an inheritance tree.
- Tests and alternative front-ends can plug their own decoder per operation.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ResponseDecoder(Protocol):
    """Turns the JSON body of a 200 answer into a domain value.

    Design rules:
    - Raises (`ValueError`, pydantic `ValidationError`) on an unexpected shape;
      the executor turns that into a default-error result.
    - Never performs I/O.
    """

    def __call__(self, body: Any) -> Any:
        ...
