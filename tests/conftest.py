from __future__ import annotations

from typing import Any, Callable, Iterator, Optional

import pytest
import requests
from fastapi.testclient import TestClient

from esstforms.proxy.config import ProxyConfig
from esstforms.proxy.run import create_app

from .fakes import URLS, FakeSession


@pytest.fixture()
def proxy_config() -> ProxyConfig:
    return ProxyConfig(urls=dict(URLS), timeout_s=5.0)


@pytest.fixture()
def upstream() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def make_client(proxy_config: ProxyConfig) -> Iterator[Callable[..., TestClient]]:
    clients: list[TestClient] = []

    def _make(session: FakeSession, config: Optional[ProxyConfig] = None) -> TestClient:
        app = create_app(config=config or proxy_config, session=session, configure_logging=False)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture()
def api(make_client: Callable[..., TestClient], upstream: FakeSession) -> TestClient:
    return make_client(upstream)


@pytest.fixture()
def no_network(monkeypatch: pytest.MonkeyPatch) -> None:
    def _blocked(*_args: Any, **_kwargs: Any) -> None:
        raise AssertionError("unexpected network call")

    monkeypatch.setattr(requests, "request", _blocked)
    monkeypatch.setattr(requests.Session, "request", _blocked)
