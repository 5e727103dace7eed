"""Integration test fixtures — A Docker-based Elasticsearch.

Expects a backend to be running, e.g.:
    docker run -d -p 9200:9200 -e discovery.type=single-node -e xpack.security.enabled=false \
        docker.elastic.co/elasticsearch/elasticsearch:7.17.0

Tests are skipped when nothing answers on ``OPENALIAS_TEST_ES_URL``
(default ``http://localhost:9200``).
"""

from __future__ import annotations

import os
import time

import httpx
import pytest

from openalias.adapters.elasticsearch.storage import ElasticsearchStorage


def _wait_for_service(url: str, timeout: float = 30.0) -> bool:
    """Block until *url* returns HTTP 200, or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=5)
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(1)
    return False


@pytest.fixture(scope="session")
def elasticsearch_ready() -> str:
    """Ensure Elasticsearch is running."""
    host = os.environ.get("OPENALIAS_TEST_ES_URL", "http://localhost:9200")
    if not _wait_for_service(host, timeout=float(os.environ.get("OPENALIAS_TEST_ES_WAIT", "2"))):
        pytest.skip(f"Elasticsearch not available at {host}")
    return host


@pytest.fixture
async def storage(elasticsearch_ready: str):
    s = ElasticsearchStorage(base_url=elasticsearch_ready)
    await s.initialize()
    yield s
    # Drop everything the test created.
    for prefix in ("itest_fr", "itest_frne"):
        for name in await s.find_aliases(prefix):
            await s.delete_index(name)
    await s.shutdown()
