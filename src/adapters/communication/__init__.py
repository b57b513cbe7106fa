"""Communication layer: request builder, executor and response decoding.

Why a package:
- Groups everything between a caller's intent ("list my projects") and the
  decoded answer, behind `CommunicationBuilder` and `Communication`.
"""

from adapters.communication.builder import CommunicationBuilder
from adapters.communication.descriptor import CommunicationResult, ExecutionFlags, RequestDescriptor
from adapters.communication.errors import BuilderStateError, CommunicationError
from adapters.communication.executor import (
    Communication,
    detached_in_flight,
    shutdown_pool,
    wait_for_detached,
)

__all__ = [
    "BuilderStateError",
    "Communication",
    "CommunicationBuilder",
    "CommunicationError",
    "CommunicationResult",
    "ExecutionFlags",
    "RequestDescriptor",
    "detached_in_flight",
    "shutdown_pool",
    "wait_for_detached",
]
