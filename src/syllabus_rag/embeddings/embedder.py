"""
Embedding Provider

This module defines the embedding capability used by ingestion and retrieval,
and its OpenAI-compatible HTTP implementation. It is responsible for:

- Single and batched text embedding (one round trip per call)
- Network and transport error isolation
- Strict response validation

Retry and backoff are left to the remote service; nothing is cached here.
"""

from __future__ import annotations

from typing import List, Sequence, Optional, Protocol, runtime_checkable
import logging
import httpx

from ..config import settings
from ..core.errors import SyllabusRAGError

logger = logging.getLogger("srag.embedder")


class EmbeddingProviderError(SyllabusRAGError):
    """Raised when embedding generation fails for any reason."""

    status_code = 502
    error_code = "embedding_provider_error"


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Capability converting text into fixed-length vectors.

    Implementations are selected when the application is wired together.
    """

    async def embed(self, text: str) -> List[float]:
        ...

    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        ...


class OpenAIEmbeddingProvider:
    """
    Asynchronous embedding generator backed by the OpenAI embeddings API
    (or any API speaking the same wire format).

    The class is stateless and safe to reuse across requests.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the provider.

        Parameters
        ----------
        api_key : Optional[str]
            Optional override for the API key. Defaults to settings.openai_api_key.

        model : Optional[str]
            Optional override for the embedding model. Defaults to settings.embedding_model.

        base_url : Optional[str]
            Full URL of the embeddings endpoint.

        timeout : Optional[float]
            HTTP timeout for each request, in seconds.

        transport : Optional[httpx.AsyncBaseTransport]
            Optional custom transport (e.g. httpx.MockTransport in tests).
        """
        self.api_key = api_key or settings.openai_api_key.get_secret_value()
        self.model = model or settings.embedding_model
        self.base_url = base_url or settings.embedding_base_url
        self.timeout = timeout or settings.embedding_timeout_seconds
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> List[float]:
        """
        Generate the embedding for one piece of text.

        Raises
        ------
        EmbeddingProviderError
            If the request fails or the response is malformed.
        """
        embeddings = await self.embed_batch([text])
        return embeddings[0]

    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Generate embeddings for a sequence of texts in a single request.

        Parameters
        ----------
        texts : Sequence[str]
            Input text strings.

        Returns
        -------
        List[List[float]]
            One embedding per input, in input order.

        Raises
        ------
        EmbeddingProviderError
            If the request fails or the response is malformed.
        """
        if not texts:
            return []

        batch = list(texts)
        headers = {"Authorization": f"Bearer {self.api_key}"}
        payload = {
            "model": self.model,
            "input": batch,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.base_url,
                    json=payload,
                    headers=headers,
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(
                "Embedding request failed (%s): batch size=%d, error=%s",
                type(exc).__name__,
                len(batch),
                str(exc),
            )
            raise EmbeddingProviderError(
                f"Embedding generation failed: {type(exc).__name__}"
            ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise EmbeddingProviderError("Embedding response is not valid JSON.") from exc

        embeddings = self._extract_embeddings(data)

        if len(embeddings) != len(batch):
            raise EmbeddingProviderError(
                f"Expected {len(batch)} embeddings, received {len(embeddings)}."
            )

        return embeddings

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_embeddings(data: dict) -> List[List[float]]:
        """
        Parse and validate embedding output format.

        OpenAI returns:
            { "data": [ {"embedding": [...], "index": 0}, ... ] }

        Records are re-ordered by ``index`` when every record carries one.

        Raises
        ------
        EmbeddingProviderError
            If the API returns unexpected structure.
        """
        if not isinstance(data, dict) or "data" not in data:
            raise EmbeddingProviderError("Embedding response missing 'data' field.")

        records = data["data"]
        if not isinstance(records, list):
            raise EmbeddingProviderError("'data' field must be a list.")

        for index, record in enumerate(records):
            if not isinstance(record, dict) or "embedding" not in record:
                raise EmbeddingProviderError(
                    f"Malformed embedding record at index {index}: {record!r}"
                )

        if all(isinstance(r.get("index"), int) for r in records):
            records = sorted(records, key=lambda r: r["index"])

        embeddings: List[List[float]] = []

        for index, record in enumerate(records):
            emb = record["embedding"]
            if not isinstance(emb, list) or not all(
                isinstance(x, (float, int)) for x in emb
            ):
                raise EmbeddingProviderError(
                    f"Invalid embedding vector at index {index}: must be float list."
                )

            embeddings.append([float(x) for x in emb])

        return embeddings
