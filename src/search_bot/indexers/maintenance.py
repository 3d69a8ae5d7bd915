"""
Index Maintenance

Create-if-absent, readiness polling, upsert and delete against the search
service. These run from the offline setup / delete jobs, never from the
request path.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from ..core.errors import IndexNotFoundError, IndexSetupError, RetrievalError
from ..search.client import SearchClient, SearchIndexClient
from ..search.models import SearchDocument, UpsertResult

logger = logging.getLogger("search_bot.indexers")

Sleep = Callable[[float], Awaitable[Any]]


class IndexMaintenance:
    """
    Index lifecycle operations.

    Parameters
    ----------
    index_client : SearchIndexClient
        Client for index management calls.

    search_client : Optional[SearchClient]
        Client for document writes; only needed by `upsert_documents`.

    sleep : Callable
        Awaitable sleep used between readiness polls.
    """

    def __init__(
        self,
        index_client: SearchIndexClient,
        search_client: Optional[SearchClient] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._index_client = index_client
        self._search_client = search_client
        self._sleep = sleep

    async def ensure_index(self, schema: Dict[str, Any]) -> bool:
        """
        Create the index if it does not exist.

        Returns
        -------
        bool
            True if the index was created, False if it already existed.

        Raises
        ------
        IndexSetupError
            If the lookup fails for any reason other than "not found", or
            the creation call fails.
        """
        name = schema["name"]

        try:
            await self._index_client.get_index(name)
        except IndexNotFoundError:
            logger.info("Index %s does not exist. Creating it.", name)
        except RetrievalError as exc:
            raise IndexSetupError(f"Failed to look up index {name}: {exc}") from exc
        else:
            logger.info("Index %s already exists. Skipping creation.", name)
            return False

        try:
            await self._index_client.create_or_update_index(schema)
        except RetrievalError as exc:
            raise IndexSetupError(f"Failed to create index {name}: {exc}") from exc

        return True

    async def wait_until_ready(
        self,
        name: str,
        attempts: int = 5,
        initial_delay: float = 1.0,
        backoff: float = 2.0,
    ) -> None:
        """
        Poll until the index answers a lookup.

        Waits `initial_delay` seconds after the first failed poll and
        multiplies the delay by `backoff` each time.

        Raises
        ------
        IndexSetupError
            If the index is still unavailable after `attempts` polls.
        """
        delay = initial_delay
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                await self._index_client.get_index(name)
            except RetrievalError as exc:
                last_error = exc
                logger.info(
                    "Index %s not ready (attempt %d/%d): %s",
                    name,
                    attempt,
                    attempts,
                    exc,
                )
            else:
                logger.info("Index %s is ready", name)
                return

            if attempt < attempts:
                await self._sleep(delay)
                delay *= backoff

        raise IndexSetupError(
            f"Index {name} not ready after {attempts} attempts"
        ) from last_error

    async def upsert_documents(self, documents: Sequence[SearchDocument]) -> UpsertResult:
        """Merge-or-insert documents by key in one batch; service errors propagate."""
        if self._search_client is None:
            raise IndexSetupError("upsert_documents requires a SearchClient")

        result = await self._search_client.merge_or_upload_documents(documents)
        logger.info("Upserted %d documents", len(result.succeeded))
        return result

    async def delete_index(self, name: str) -> None:
        """Delete the index; not-found and other failures propagate."""
        await self._index_client.delete_index(name)
        logger.info("Deleted index %s", name)
