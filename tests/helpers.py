"""Test helpers — An in-memory Elasticsearch behind ``httpx.MockTransport``."""

from __future__ import annotations

import fnmatch
import json
import uuid
from collections.abc import Callable
from typing import Any

import httpx

BASE_URL = "http://es.test:9200"


def es_error(status: int, error_type: str, reason: str) -> httpx.Response:
    """Build an Elasticsearch failure response."""
    return httpx.Response(
        status,
        json={
            "error": {
                "root_cause": [{"type": error_type, "reason": reason}],
                "type": error_type,
                "reason": reason,
            },
            "status": status,
        },
    )


class FakeElasticsearch:
    """Just enough of the Elasticsearch REST API for the storage to run against.

    Attributes:
        indices: ``{index_name: {"aliases": set[str], "docs": list[dict]}}``.
        requests: Every request received, in order.
        failing_bulk_batches: 0-based numbers of bulk requests answered with a 500.
        reject: Predicate marking documents the bulk API rejects.
    """

    def __init__(self) -> None:
        self.indices: dict[str, dict[str, Any]] = {}
        self.pipelines: dict[str, Any] = {}
        self.scrolls: dict[str, list[dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []
        self.failing_bulk_batches: set[int] = set()
        self.reject: Callable[[dict[str, Any]], bool] = lambda doc: False
        self.page_size = 2

    # ── Helpers ──────────────────────────────────────────────────────────

    def add_index(self, name: str, aliases: tuple[str, ...] = (), docs: list[dict[str, Any]] | None = None) -> None:
        self.indices[name] = {"aliases": set(aliases), "docs": list(docs or [])}

    def requests_to(self, method: str, suffix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path.endswith(suffix)]

    def _match(self, expression: str) -> list[str]:
        names: list[str] = []
        for part in expression.split(","):
            names.extend(sorted(n for n in self.indices if fnmatch.fnmatchcase(n, part)))
        return names

    # ── Transport ────────────────────────────────────────────────────────

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = [p for p in request.url.path.split("/") if p]
        method = request.method

        if not parts:
            return httpx.Response(200, json={"cluster_name": "test-cluster", "version": {"number": "7.17.0"}})
        if parts == ["_cluster", "health"]:
            return httpx.Response(200, json={"status": "green", "cluster_name": "test-cluster", "number_of_nodes": 1})
        if parts[0] == "_cat" and method == "GET":
            return self._cat_indices(parts[2])
        if parts[:2] == ["_ingest", "pipeline"] and method == "PUT":
            self.pipelines[parts[2]] = json.loads(request.content)
            return httpx.Response(200, json={"acknowledged": True})
        if parts == ["_search", "scroll"]:
            return self._scroll(request)
        if len(parts) == 1:
            return self._index(method, parts[0], request)
        if parts[1] == "_refresh":
            return httpx.Response(200, json={"_shards": {"total": 1, "successful": 1, "failed": 0}})
        if parts[1] == "_bulk":
            return self._bulk(parts[0], request)
        if parts[1] == "_alias":
            return self._alias(method, parts[0], parts[2] if len(parts) > 2 else None)
        if parts[1] == "_search":
            return self._search(parts[0], request)
        return httpx.Response(400, json={"error": f"unsupported {method} {request.url.path}"})

    def _index(self, method: str, name: str, request: httpx.Request) -> httpx.Response:
        if method == "PUT":
            if name in self.indices:
                return es_error(
                    400,
                    "resource_already_exists_exception",
                    f"index [{name}/{uuid.uuid4().hex[:22]}] already exists",
                )
            body = json.loads(request.content)
            if "unknown" in json.dumps(body.get("settings", {})):
                return es_error(400, "illegal_argument_exception", "unknown setting [index.unknown] please check")
            self.add_index(name)
            return httpx.Response(200, json={"acknowledged": True, "index": name, "shards_acknowledged": True})
        if method == "DELETE":
            if name not in self.indices:
                return es_error(404, "index_not_found_exception", f"no such index [{name}]")
            del self.indices[name]
            return httpx.Response(200, json={"acknowledged": True})
        return httpx.Response(405)

    def _cat_indices(self, name: str) -> httpx.Response:
        names = self._match(name)
        if not names and "*" not in name:
            return es_error(404, "index_not_found_exception", f"no such index [{name}]")
        rows = [
            {
                "health": "green",
                "status": "open",
                "index": n,
                "uuid": uuid.uuid4().hex[:22],
                "pri": "1",
                "rep": "0",
                "docs.count": str(len(self.indices[n]["docs"])),
                "docs.deleted": "0",
                "store.size": "208b",
                "pri.store.size": "208b",
            }
            for n in names
        ]
        return httpx.Response(200, json=rows)

    def _bulk(self, name: str, request: httpx.Request) -> httpx.Response:
        batch_number = len(self.requests_to("POST", "/_bulk")) - 1
        if batch_number in self.failing_bulk_batches:
            return es_error(500, "es_rejected_execution_exception", "rejected execution of coordinating operation")
        if name not in self.indices:
            self.add_index(name)

        lines = [json.loads(line) for line in request.content.decode().splitlines() if line]
        items = []
        for action, doc in zip(lines[::2], lines[1::2], strict=True):
            assert action == {"index": {}}
            if self.reject(doc):
                items.append(
                    {
                        "index": {
                            "_index": name,
                            "status": 400,
                            "error": {"type": "mapper_parsing_exception", "reason": "failed to parse field [year]"},
                        }
                    }
                )
                continue
            self.indices[name]["docs"].append(doc)
            items.append({"index": {"_index": name, "_id": uuid.uuid4().hex, "result": "created", "status": 201}})
        return httpx.Response(200, json={"took": 3, "errors": False, "items": items})

    def _alias(self, method: str, expression: str, alias: str | None) -> httpx.Response:
        names = self._match(expression)
        if method == "GET":
            body = {n: {"aliases": {a: {} for a in sorted(self.indices[n]["aliases"])}} for n in names}
            return httpx.Response(200, json=body)
        if not names:
            return es_error(404, "index_not_found_exception", f"no such index [{expression}]")
        for n in names:
            if method == "PUT":
                self.indices[n]["aliases"].add(alias)
            elif method == "DELETE":
                if alias not in self.indices[n]["aliases"]:
                    return es_error(404, "aliases_not_found_exception", f"aliases [{alias}] missing")
                self.indices[n]["aliases"].discard(alias)
        return httpx.Response(200, json={"acknowledged": True})

    def _search(self, expression: str, request: httpx.Request) -> httpx.Response:
        docs = [doc for n in self._match(expression) for doc in self.indices[n]["docs"]]
        scroll_id = uuid.uuid4().hex
        self.scrolls[scroll_id] = docs
        return self._page(scroll_id)

    def _scroll(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        scroll_id = body["scroll_id"]
        if request.method == "DELETE":
            self.scrolls.pop(scroll_id, None)
            return httpx.Response(200, json={"succeeded": True, "num_freed": 1})
        if scroll_id not in self.scrolls:
            return es_error(404, "search_context_missing_exception", f"No search context found for id [{scroll_id}]")
        return self._page(scroll_id)

    def _page(self, scroll_id: str) -> httpx.Response:
        remaining = self.scrolls[scroll_id]
        page, self.scrolls[scroll_id] = remaining[: self.page_size], remaining[self.page_size :]
        hits = [{"_id": str(i), "_source": doc} for i, doc in enumerate(page)]
        return httpx.Response(200, json={"_scroll_id": scroll_id, "hits": {"total": {"value": len(hits)}, "hits": hits}})
