"""Process-wide session (token manager).

Rules:
- Starts unauthenticated.
- Only successful login/renew/check answers write to it.
- The state is a single immutable `TokenPair` reference guarded by a lock, so
  readers never see half of an update. Concurrent writers: the last one wins.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime

from core.domain.models import TokenPair

logger = logging.getLogger(__name__)


class Session:
    """Holds the current `TokenPair` of the running client."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tokens: TokenPair | None = None

    def token_pair(self) -> TokenPair | None:
        with self._lock:
            return self._tokens

    def current_access_token(self) -> str:
        """Access token, or an empty string when no session is open."""

        with self._lock:
            return self._tokens.access_token if self._tokens else ""

    def current_renew_token(self) -> str:
        with self._lock:
            return self._tokens.renew_token if self._tokens else ""

    def is_authenticated(self) -> bool:
        with self._lock:
            return self._tokens is not None and bool(self._tokens.access_token)

    def is_expired(self, now: datetime | None = None) -> bool:
        with self._lock:
            tokens = self._tokens
        return tokens is None or tokens.is_expired(now)

    def replace(self, tokens: TokenPair) -> TokenPair | None:
        """Swap in a new pair and return the previous one."""

        with self._lock:
            previous, self._tokens = self._tokens, tokens
        logger.debug("Session tokens replaced (expiry=%s)", tokens.expiry)
        return previous

    def renew(self, tokens: TokenPair) -> TokenPair:
        """Store a renewal answer, keeping the old renew token if none was sent."""

        with self._lock:
            if not tokens.renew_token and self._tokens is not None:
                tokens = tokens.model_copy(update={"renew_token": self._tokens.renew_token})
            self._tokens = tokens
        logger.debug("Session tokens renewed (expiry=%s)", tokens.expiry)
        return tokens

    def clear(self) -> None:
        with self._lock:
            self._tokens = None


_session = Session()


def get_session() -> Session:
    """Return the process-wide session."""

    return _session
