"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest
from helpers import BASE_URL, FakeElasticsearch

from openalias.adapters.elasticsearch.storage import ElasticsearchStorage



@pytest.fixture
def fake_es() -> FakeElasticsearch:
    return FakeElasticsearch()


@pytest.fixture
async def client(fake_es: FakeElasticsearch):
    async with httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(fake_es)) as c:
        yield c


@pytest.fixture
async def storage(client: httpx.AsyncClient) -> ElasticsearchStorage:
    s = ElasticsearchStorage(base_url=BASE_URL, client=client)
    await s.initialize()
    return s


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build a client answering every request with ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))

    return _make
