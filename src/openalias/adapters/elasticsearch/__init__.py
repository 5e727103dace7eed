"""Elasticsearch adapter — Index lifecycle, aliases and bulk ingestion over REST."""

from openalias.adapters.elasticsearch.storage import ElasticsearchStorage

__all__ = ["ElasticsearchStorage"]
