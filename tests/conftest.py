from __future__ import annotations

from typing import Callable

import httpx
import pytest

from adapters.communication import CommunicationBuilder, shutdown_pool
from core.config import AppSettings
from core.session import Session, get_session

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def _isolated_state(monkeypatch: pytest.MonkeyPatch):
    for name in ("CLIENTPROJET_USERNAME", "CLIENTPROJET_PASSWORD", "CLIENTPROJET_API_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    get_session().clear()
    yield
    get_session().clear()
    shutdown_pool()


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        api_base_url="http://api.test/",
        http_timeout_seconds=2.0,
        max_workers=4,
    )


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def make_builder(settings: AppSettings, session: Session) -> Callable[[Handler], CommunicationBuilder]:
    def factory(handler: Handler) -> CommunicationBuilder:
        return CommunicationBuilder(
            settings=settings,
            session=session,
            transport=httpx.MockTransport(handler),
        )

    return factory


@pytest.fixture
def builder(settings: AppSettings, session: Session) -> CommunicationBuilder:
    """Builder for descriptor-only tests; any request it sends fails loudly."""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request to {request.url}")

    return CommunicationBuilder(settings=settings, session=session, transport=httpx.MockTransport(refuse))
