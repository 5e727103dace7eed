"""Alias registry — Dataset aliases over concrete index versions."""

from __future__ import annotations

import logging

import httpx

from openalias.adapters.base.exceptions import InvalidResponseShape, NotAcknowledged
from openalias.adapters.elasticsearch.response import ensure_success, expect_acknowledged, json_object, send
from openalias.models.index import Index
from openalias.models.naming import root_doctype_dataset, versions_pattern

logger = logging.getLogger(__name__)


class AliasRegistry:
    """Adds, removes and lists the aliases pointing at concrete indices.

    Args:
        client: Shared HTTP client whose ``base_url`` is the backend.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def add_alias(self, indices: list[str], alias: str) -> None:
        """Point ``alias`` at every index in ``indices``.

        Raises:
            NotAcknowledged: If the backend did not acknowledge the change.
        """
        if not indices:
            return
        names = ",".join(indices)
        response = await send(
            self._client,
            "PUT",
            f"/{names}/_alias/{alias}",
            details=f"cannot add alias '{alias}' to indices '{' '.join(indices)}'",
        )
        expect_acknowledged(response, NotAcknowledged, f"alias {alias} creation")
        logger.info("Alias %s added to %s", alias, names)

    async def remove_alias(self, indices: list[str], alias: str) -> None:
        """Remove ``alias`` from every index in ``indices``.

        Raises:
            NotAcknowledged: If the backend did not acknowledge the change.
        """
        if not indices:
            return
        names = ",".join(indices)
        response = await send(
            self._client,
            "DELETE",
            f"/{names}/_alias/{alias}",
            details=f"cannot remove alias '{alias}' from indices '{' '.join(indices)}'",
        )
        expect_acknowledged(response, NotAcknowledged, f"alias {alias} deletion")
        logger.info("Alias %s removed from %s", alias, names)

    async def find_aliases(self, dataset_prefix: str) -> dict[str, list[str]]:
        """Map every index of a dataset to the names of its aliases.

        Only indices named ``{dataset_prefix}_*`` are considered, so the
        dataset ``fr`` never picks up ``fr-ne`` indices.

        Args:
            dataset_prefix: The ``{doc_type}_{dataset}`` root.

        Returns:
            ``{index_name: [alias_name, ...]}`` sorted by index name.
        """
        pattern = versions_pattern(dataset_prefix)
        response = await send(
            self._client,
            "GET",
            f"/{pattern}/_alias",
            details=f"cannot find aliases to {pattern}",
        )
        ensure_success(response)

        # {"book_fr_20210101": {"aliases": {"book_fr": {}}}, "book_fr_20201231": {"aliases": {}}}
        body = json_object(response)
        aliases: dict[str, list[str]] = {}
        for index_name in sorted(body):
            entry = body[index_name]
            if not isinstance(entry, dict) or not isinstance(entry.get("aliases"), dict):
                raise InvalidResponseShape("object", f"expected aliases object for '{index_name}'")
            aliases[index_name] = list(entry["aliases"])
        return aliases

    async def get_previous_indices(self, index: Index) -> list[str]:
        """Return every other version of ``index``'s dataset."""
        base_index = root_doctype_dataset(index.doc_type, index.dataset)
        aliases = await self.find_aliases(base_index)
        return [name for name in aliases if name != index.name]
