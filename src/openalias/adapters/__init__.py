"""Storage adapter layer — Connectors that manage indices on a search backend.

Built-in adapters:
  - elasticsearch: Elasticsearch v7+ / OpenSearch (REST API over ``httpx``)

Implement ``IndexStorage`` to connect your own search backend.
"""
