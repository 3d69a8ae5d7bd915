"""
Azure AI Search Data Source

The retrieval adapter registered with the prompt manager. For each user turn
it:

1. Builds one query for the configured `SearchMode`
2. Embeds the query first when the mode needs a vector clause
3. Issues exactly one search request
4. Formats ranked hits and packs them greedily under a token budget

Ranking belongs to the search service; hits are consumed in the order they
arrive and never re-ordered here. Failures of the outbound calls propagate
as `RetrievalError` with no retry.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..config import SearchServiceConfig
from ..core.errors import ConfigurationError
from ..embeddings.embedder import Embedder
from .client import SearchClient
from .formatting import format_document
from .models import (
    DEFAULT_SELECTED_FIELDS,
    FIELD_CONTENT_VECTOR,
    FIELD_ID,
    SEARCHABLE_FIELDS,
    QueryRequest,
    RenderedContext,
    SearchHit,
    SearchMode,
)
from .tokenizer import Tokenizer

logger = logging.getLogger("search_bot.data_source")

NO_INPUT_MESSAGE = "No input provided for the search."
NO_RESULTS_MESSAGE = "No documents found matching the query."


class AzureSearchDataSource:
    """
    A data source that renders Azure AI Search results as prompt text.

    One adapter covers every query strategy; the strategy is chosen with
    `mode`:

    - keyword  : plain full-text query
    - semantic : full-text query reranked with a named semantic configuration
    - vector   : k-nearest-neighbour query over the vector field
    - hybrid   : full-text query over `searchable_fields`, plus a vector
                 clause when an embedder is available
    """

    def __init__(
        self,
        config: SearchServiceConfig,
        *,
        name: str = "armelysearchservice",
        mode: SearchMode = SearchMode.SEMANTIC,
        embedder: Optional[Embedder] = None,
        client: Optional[SearchClient] = None,
        vector_k: int = 2,
        top: Optional[int] = None,
        selected_fields: Optional[Sequence[str]] = None,
        searchable_fields: Optional[Sequence[str]] = None,
        vector_field: str = FIELD_CONTENT_VECTOR,
    ) -> None:
        """
        Create a data source.

        Raises
        ------
        ConfigurationError
            If the endpoint, index name or API key is blank, if semantic mode
            has no semantic configuration name, or if vector mode has no
            embedder.
        """
        missing = []
        if not config.endpoint:
            missing.append("AZURE_SEARCH_ENDPOINT")
        if not config.index_name:
            missing.append("AZURE_SEARCH_INDEX_NAME")
        if not config.api_key.get_secret_value():
            missing.append("SECRET_AZURE_SEARCH_KEY")
        if missing:
            raise ConfigurationError(missing)

        mode = SearchMode(mode)
        if mode is SearchMode.SEMANTIC and not config.semantic_configuration:
            raise ConfigurationError("AZURE_SEARCH_SEMANTIC_CONFIGURATION")
        if mode is SearchMode.VECTOR and embedder is None:
            raise ConfigurationError("AZURE_OPENAI_EMBEDDING_DEPLOYMENT_NAME")
        if vector_k < 1:
            raise ValueError("vector_k must be at least 1")
        if selected_fields is not None and FIELD_ID not in selected_fields:
            raise ValueError(f"selected_fields must include the key field '{FIELD_ID}'")

        self.name = name
        self.mode = mode
        self.config = config
        self.vector_k = vector_k
        self.top = top
        self.selected_fields = list(selected_fields or DEFAULT_SELECTED_FIELDS)
        self.searchable_fields = list(searchable_fields or SEARCHABLE_FIELDS)
        self.vector_field = vector_field

        self._embedder = embedder
        self._client = client or SearchClient(config)

    # ------------------------------------------------------------------
    # Query construction
    # ------------------------------------------------------------------

    def build_query(self, query: str, token_budget: int) -> QueryRequest:
        return QueryRequest(
            query_text=query,
            mode=self.mode,
            selected_fields=list(self.selected_fields),
            token_budget=token_budget,
        )

    def build_search_payload(
        self,
        request: QueryRequest,
        vector: Optional[List[float]] = None,
    ) -> Dict[str, Any]:
        """
        Build the body of one search request.

        Parameters
        ----------
        request : QueryRequest
            The per-turn query.

        vector : Optional[List[float]]
            Query embedding; required for vector mode, optional for hybrid.

        Returns
        -------
        Dict[str, Any]
            JSON body for `POST /indexes/{index}/docs/search`.
        """
        payload: Dict[str, Any] = {
            "select": ",".join(request.selected_fields),
        }
        if self.top is not None:
            payload["top"] = self.top

        mode = request.mode

        if mode is SearchMode.KEYWORD:
            payload["search"] = request.query_text
            payload["queryType"] = "simple"

        elif mode is SearchMode.SEMANTIC:
            payload["search"] = request.query_text
            payload["queryType"] = "semantic"
            payload["semanticConfiguration"] = self.config.semantic_configuration
            if self.config.query_language:
                payload["queryLanguage"] = self.config.query_language

        elif mode is SearchMode.VECTOR:
            if vector is None:
                raise ValueError("vector mode requires a query vector")
            payload["vectorQueries"] = [self._vector_clause(vector)]

        elif mode is SearchMode.HYBRID:
            payload["search"] = request.query_text
            payload["searchFields"] = ",".join(self.searchable_fields)
            if vector is not None:
                payload["vectorQueries"] = [self._vector_clause(vector)]

        return payload

    def _vector_clause(self, vector: List[float]) -> Dict[str, Any]:
        return {
            "kind": "vector",
            "vector": vector,
            "fields": self.vector_field,
            "k": self.vector_k,
        }

    def _needs_vector(self) -> bool:
        if self.mode is SearchMode.VECTOR:
            return True
        return self.mode is SearchMode.HYBRID and self._embedder is not None

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    async def render_context(
        self,
        query: str,
        token_budget: int,
        tokenizer: Tokenizer,
        query_vector: Optional[List[float]] = None,
    ) -> RenderedContext:
        """
        Search the index and render the hits as bounded prompt text.

        Parameters
        ----------
        query : str
            The user's utterance. Blank input short-circuits without any
            external call.

        token_budget : int
            Maximum number of tokens the rendered text may occupy.

        tokenizer : Tokenizer
            Used to count tokens of each formatted document.

        query_vector : Optional[List[float]]
            Precomputed query embedding; skips the embedding call.

        Returns
        -------
        RenderedContext
            Formatted documents, their token count and whether any hit was
            left out because of the budget.
        """
        if not query or not query.strip():
            return RenderedContext(text=NO_INPUT_MESSAGE, token_count=0, truncated=False)

        request = self.build_query(query, token_budget)

        vector = query_vector
        if vector is None and self._needs_vector():
            vector = await self._embedder.embed(query)

        payload = self.build_search_payload(request, vector)
        hits = await self._client.search(payload)

        if not hits:
            logger.info("Search (%s) returned no documents", self.mode.value)
            return RenderedContext(text=NO_RESULTS_MESSAGE, token_count=0, truncated=False)

        return self._pack(hits, request.token_budget, tokenizer)

    async def render_data(
        self,
        state: Mapping[str, Any],
        tokenizer: Tokenizer,
        max_tokens: int,
    ) -> RenderedContext:
        """Data-source hook used by the prompt manager; reads `state["input"]`."""
        return await self.render_context(state.get("input") or "", max_tokens, tokenizer)

    def _pack(
        self,
        hits: List[SearchHit],
        token_budget: int,
        tokenizer: Tokenizer,
    ) -> RenderedContext:
        """
        Greedily concatenate formatted hits while they fit in the budget.

        Packing stops at the first hit that would overflow; later, smaller
        hits are not considered. A first hit that alone exceeds the budget
        yields empty text with `truncated=True`.
        """
        used_tokens = 0
        parts: List[str] = []
        truncated = False

        for hit in hits:
            block = format_document(hit.document)
            tokens = len(tokenizer.encode(block))

            if used_tokens + tokens > token_budget:
                truncated = True
                break

            parts.append(block)
            used_tokens += tokens

        if truncated and not parts:
            logger.warning(
                "Top search result (%d tokens) exceeds token budget %d; nothing rendered",
                len(tokenizer.encode(format_document(hits[0].document))),
                token_budget,
            )

        logger.info(
            "Search (%s): %d hits, %d rendered, %d/%d tokens, truncated=%s",
            self.mode.value,
            len(hits),
            len(parts),
            used_tokens,
            token_budget,
            truncated,
        )

        return RenderedContext(
            text="".join(parts),
            token_count=used_tokens,
            truncated=truncated,
        )
