"""Programming errors of the communication layer.

Expected failures (network, HTTP status, undecodable bodies) never raise: they
travel inside `CommunicationResult`. Only misuse of the builder ends up here.
"""

from __future__ import annotations


class CommunicationError(Exception):
    """Base class for communication-layer programming errors."""


class BuilderStateError(CommunicationError):
    """`build()` was called before any operation was selected."""
