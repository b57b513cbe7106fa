"""httpx wrapper.

Why a wrapper:
- Standardises base URL, timeouts and headers for every communication.
- Eases testing: a `httpx.MockTransport` can be injected instead of the network.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
    extra_headers: dict[str, str] | None = None,
) -> httpx.Client:
    """Create a `httpx.Client` bound to the API base URL.

    Why a builder:
    - Centralises timeouts/headers so every operation behaves the same.
    - Each communication opens and closes its own client, so worker threads
      never share a connection pool.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)

    base_url = settings.api_base_url
    if not base_url.endswith("/"):
        base_url += "/"

    return httpx.Client(
        base_url=base_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )
