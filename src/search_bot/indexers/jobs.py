"""
Offline Index Jobs

Entry points for populating and dropping the search index:

    search-bot-setup-index    create the index if absent, wait for it,
                              upsert every file under INGEST_DATA_DIR
    search-bot-delete-index   delete the index

Configuration is validated before any network call.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from dotenv import load_dotenv

from ..config import Settings
from ..core.logging import configure_logging
from ..embeddings.embedder import Embedder
from ..search.client import SearchClient, SearchIndexClient
from ..search.models import UpsertResult
from .ingest import attach_vectors, load_documents
from .maintenance import IndexMaintenance
from .schema import build_index_schema

logger = logging.getLogger("search_bot.jobs")


async def run_setup(
    settings: Settings,
    maintenance: Optional[IndexMaintenance] = None,
    embedder: Optional[Embedder] = None,
) -> UpsertResult:
    """
    Create the index if needed and upsert the local documents.

    Parameters
    ----------
    settings : Settings
        Environment settings; search config is required, embedding config
        only when the index carries vectors.

    maintenance : Optional[IndexMaintenance]
        Override for tests.

    embedder : Optional[Embedder]
        Override for tests.
    """
    search_config = settings.search_config()
    vectors_enabled = settings.search_vector_dimensions is not None
    if vectors_enabled and embedder is None:
        embedder = Embedder(settings.embedding_config())

    if maintenance is None:
        maintenance = IndexMaintenance(
            SearchIndexClient(search_config),
            SearchClient(search_config),
        )

    schema = build_index_schema(
        search_config.index_name,
        semantic_configuration=settings.azure_search_semantic_configuration,
        vector_dimensions=settings.search_vector_dimensions,
    )

    created = await maintenance.ensure_index(schema)
    if created:
        await maintenance.wait_until_ready(search_config.index_name)

    documents = load_documents(settings.ingest_data_dir, settings.ingest_base_uri)
    if vectors_enabled:
        documents = await attach_vectors(documents, embedder)

    return await maintenance.upsert_documents(documents)


async def run_delete(
    settings: Settings,
    maintenance: Optional[IndexMaintenance] = None,
) -> None:
    search_config = settings.search_config()
    if maintenance is None:
        maintenance = IndexMaintenance(SearchIndexClient(search_config))
    await maintenance.delete_index(search_config.index_name)


def setup_main() -> None:
    load_dotenv()
    settings = Settings()
    configure_logging(settings.log_level)
    result = asyncio.run(run_setup(settings))
    logger.info("Setup complete: %d documents indexed", len(result.succeeded))


def delete_main() -> None:
    load_dotenv()
    settings = Settings()
    configure_logging(settings.log_level)
    asyncio.run(run_delete(settings))
