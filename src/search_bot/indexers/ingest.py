"""Turning a directory of text files into search documents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from ..embeddings.embedder import Embedder
from ..search.models import SearchDocument

logger = logging.getLogger("search_bot.ingest")


def load_documents(directory: str | Path, base_uri: str = "https://example.com") -> List[SearchDocument]:
    """
    Read every regular file in `directory` (sorted by name) as one document.

    File *i* (1-based) gets id ``str(i)``, the filename as title and display
    title, ``{base_uri}/{filename}`` as source URI and its text verbatim as
    content.
    """
    root = Path(directory)
    if not root.is_dir():
        raise FileNotFoundError(f"Data directory not found: {root}")

    files = sorted(p for p in root.iterdir() if p.is_file())
    base = base_uri.rstrip("/")

    documents: List[SearchDocument] = []
    for i, path in enumerate(files, start=1):
        documents.append(
            SearchDocument(
                id=str(i),
                title=path.name,
                source_uri=f"{base}/{path.name}",
                content=path.read_text(encoding="utf-8"),
                display_title=path.name,
            )
        )

    logger.info("Loaded %d documents from %s", len(documents), root)
    return documents


async def attach_vectors(
    documents: List[SearchDocument],
    embedder: Optional[Embedder],
) -> List[SearchDocument]:
    """Return copies of `documents` carrying content embeddings."""
    if embedder is None or not documents:
        return documents

    vectors = await embedder.embed_many([doc.content for doc in documents])
    return [
        doc.model_copy(update={"content_vector": vector})
        for doc, vector in zip(documents, vectors)
    ]
