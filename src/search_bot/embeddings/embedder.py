"""
Embedding Client

This module implements the embedding client used for vector and hybrid
retrieval and for vectorising documents at ingestion time. It calls an
Azure OpenAI embedding deployment and is responsible for:

- Eager configuration validation
- Network and transport error isolation
- Strict response validation

The class is stateless and safe to reuse across requests.
"""

from __future__ import annotations

from typing import List, Optional, Sequence
import logging
import httpx

from ..config import EmbeddingConfig
from ..core.errors import ConfigurationError, EmbeddingError

logger = logging.getLogger("search_bot.embedder")


class Embedder:
    """
    Asynchronous embedding generator.

    This class performs no caching; each call is one request per batch.
    """

    def __init__(
        self,
        config: EmbeddingConfig,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize an Embedder.

        Parameters
        ----------
        config : EmbeddingConfig
            Endpoint, key and deployment of the embedding model.

        timeout : float
            HTTP timeout for each request.

        transport : Optional[httpx.AsyncBaseTransport]
            Optional transport override, used by tests.

        Raises
        ------
        ConfigurationError
            If the endpoint, key or deployment name is blank.
        """
        missing = []
        if not config.endpoint:
            missing.append("AZURE_OPENAI_ENDPOINT")
        if not config.api_key.get_secret_value():
            missing.append("SECRET_AZURE_OPENAI_API_KEY")
        if not config.deployment:
            missing.append("AZURE_OPENAI_EMBEDDING_DEPLOYMENT_NAME")
        if missing:
            raise ConfigurationError(missing)

        self.deployment = config.deployment
        self.url = (
            f"{config.endpoint.rstrip('/')}/openai/deployments/"
            f"{config.deployment}/embeddings"
        )
        self.api_version = config.api_version
        self.timeout = timeout
        self._api_key = config.api_key.get_secret_value()
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> List[float]:
        """
        Generate the embedding vector for one input text.

        Returns
        -------
        List[float]
            The first vector returned by the service.

        Raises
        ------
        EmbeddingError
            If the request fails or the service returns no vectors.
        """
        vectors = await self._request([text])
        if not vectors:
            raise EmbeddingError(
                f"Failed to generate embeddings for input of length {len(text)}"
            )
        return vectors[0]

    async def embed_many(
        self,
        texts: Sequence[str],
        batch_size: int = 16,
    ) -> List[List[float]]:
        """
        Generate embeddings for a sequence of texts, one request per batch.

        Output order matches input order.
        """
        if not texts:
            return []

        all_embeddings: List[List[float]] = []
        for start in range(0, len(texts), batch_size):
            batch = list(texts[start : start + batch_size])
            vectors = await self._request(batch)
            if len(vectors) != len(batch):
                raise EmbeddingError(
                    f"Embedding count mismatch: sent {len(batch)}, got {len(vectors)}"
                )
            all_embeddings.extend(vectors)

        return all_embeddings

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request(self, batch: List[str]) -> List[List[float]]:
        headers = {"api-key": self._api_key}
        payload = {"input": batch}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.url,
                    params={"api-version": self.api_version},
                    json=payload,
                    headers=headers,
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(
                "Embedding request failed (%s): deployment=%s, batch size=%d",
                type(exc).__name__,
                self.deployment,
                len(batch),
            )
            status_code = None
            if isinstance(exc, httpx.HTTPStatusError):
                status_code = exc.response.status_code
            raise EmbeddingError(
                f"Embedding generation failed: {type(exc).__name__}",
                status_code=status_code,
            ) from exc

        return self._extract_embeddings(response.json())

    @staticmethod
    def _extract_embeddings(data: dict) -> List[List[float]]:
        """
        Parse and validate embedding output format.

        The service returns:
            { "data": [ {"index": 0, "embedding": [...]}, ... ] }

        Raises
        ------
        EmbeddingError
            If the API returns unexpected structure or no vectors.
        """
        records = data.get("data") if isinstance(data, dict) else None
        if not isinstance(records, list) or not records:
            raise EmbeddingError("Embedding response contained no vectors.")

        records = sorted(
            records,
            key=lambda r: r.get("index", 0) if isinstance(r, dict) else 0,
        )

        embeddings: List[List[float]] = []

        for index, record in enumerate(records):
            if not isinstance(record, dict) or "embedding" not in record:
                raise EmbeddingError(
                    f"Malformed embedding record at index {index}."
                )

            emb = record["embedding"]
            if not isinstance(emb, list) or not emb or not all(
                isinstance(x, (float, int)) for x in emb
            ):
                raise EmbeddingError(
                    f"Invalid embedding vector at index {index}: must be a non-empty float list."
                )

            embeddings.append([float(x) for x in emb])

        return embeddings
