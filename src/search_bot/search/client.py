"""
Azure AI Search REST Client

Thin asynchronous wrappers over the Azure AI Search REST API:

- SearchIndexClient : index management (get / create-or-update / delete)
- SearchClient      : per-index queries and document writes

Every call opens its own `httpx.AsyncClient`, so no connection state is shared
between turns. Transport failures and non-2xx answers are converted to
`RetrievalError` (404 to `IndexNotFoundError`). Nothing here retries.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import SearchServiceConfig
from ..core.errors import IndexNotFoundError, RetrievalError
from .models import SearchDocument, SearchHit, UpsertResult

logger = logging.getLogger("search_bot.search_client")


class _SearchServiceTransport:
    """Shared request plumbing for the two search clients."""

    def __init__(
        self,
        config: SearchServiceConfig,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.endpoint = config.endpoint.rstrip("/")
        self.api_version = config.api_version
        self.timeout = timeout
        self._api_key = config.api_key.get_secret_value()
        self._transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        url = f"{self.endpoint}{path}"
        headers = {
            "api-key": self._api_key,
            "Content-Type": "application/json",
        }
        params = {"api-version": self.api_version}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    headers=headers,
                    json=json,
                )
        except httpx.HTTPError as exc:
            logger.error(
                "Search request failed (%s): %s %s",
                type(exc).__name__,
                method,
                path,
            )
            raise RetrievalError(
                f"Search service request failed: {type(exc).__name__}"
            ) from exc

        if response.status_code == 404:
            raise IndexNotFoundError(
                f"Search service returned 404 for {method} {path}",
                status_code=404,
            )

        if response.is_error:
            logger.error(
                "Search service error %d for %s %s: %s",
                response.status_code,
                method,
                path,
                response.text[:500],
            )
            raise RetrievalError(
                f"Search service returned {response.status_code} for {method} {path}",
                status_code=response.status_code,
            )

        return response


# ---------------------------------------------------------------------
# Index Management
# ---------------------------------------------------------------------

class SearchIndexClient(_SearchServiceTransport):
    """Index-level operations (not bound to a single index)."""

    async def get_index(self, name: str) -> Dict[str, Any]:
        """Return the index definition; raises IndexNotFoundError if absent."""
        response = await self._request("GET", f"/indexes/{name}")
        return response.json()

    async def create_or_update_index(self, schema: Dict[str, Any]) -> Dict[str, Any]:
        name = schema["name"]
        response = await self._request("PUT", f"/indexes/{name}", json=schema)
        # 204 carries no body when an existing index was updated
        if response.status_code == 204 or not response.content:
            return schema
        return response.json()

    async def delete_index(self, name: str) -> None:
        await self._request("DELETE", f"/indexes/{name}")


# ---------------------------------------------------------------------
# Per-index Queries and Writes
# ---------------------------------------------------------------------

class SearchClient(_SearchServiceTransport):
    """Queries and document writes against one index."""

    def __init__(
        self,
        config: SearchServiceConfig,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(config, timeout=timeout, transport=transport)
        self.index_name = config.index_name

    async def search(self, payload: Dict[str, Any]) -> List[SearchHit]:
        """
        Run one search request.

        Parameters
        ----------
        payload : Dict[str, Any]
            Body for `POST /indexes/{index}/docs/search`.

        Returns
        -------
        List[SearchHit]
            Hits in the order returned by the service.
        """
        response = await self._request(
            "POST",
            f"/indexes/{self.index_name}/docs/search",
            json=payload,
        )
        rows = response.json().get("value", [])

        hits: List[SearchHit] = []
        for row in rows:
            hits.append(
                SearchHit(
                    document=SearchDocument.from_index_payload(row),
                    score=float(row.get("@search.score") or 0.0),
                    reranker_score=row.get("@search.rerankerScore"),
                )
            )
        return hits

    async def merge_or_upload_documents(
        self,
        documents: Sequence[SearchDocument],
    ) -> UpsertResult:
        """
        Merge-or-insert a batch of documents by key.

        A 207 multi-status answer with any failed item raises RetrievalError
        naming the failed keys; the service decides batch atomicity.
        """
        if not documents:
            return UpsertResult()

        body = {
            "value": [
                {"@search.action": "mergeOrUpload", **doc.to_index_payload()}
                for doc in documents
            ]
        }
        response = await self._request(
            "POST",
            f"/indexes/{self.index_name}/docs/index",
            json=body,
        )

        result = UpsertResult()
        for item in response.json().get("value", []):
            key = str(item.get("key"))
            if item.get("status"):
                result.succeeded.append(key)
            else:
                result.failed[key] = item.get("errorMessage") or "unknown error"

        if result.failed:
            raise RetrievalError(
                "Failed to upsert documents: " + ", ".join(sorted(result.failed)),
                status_code=response.status_code,
            )

        return result
