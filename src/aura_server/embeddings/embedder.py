"""
Embedding Client

Async client for an OpenAI-compatible ``/embeddings`` endpoint.

Inputs are sent in batches; every transport, status or payload problem is
raised as ``EmbeddingError`` so callers deal with one failure type. Vectors
come back in input order even when the endpoint reorders ``data``.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

import httpx

from ..config import settings

logger = logging.getLogger("aura.embedder")


class EmbeddingError(RuntimeError):
    """Raised when embedding generation fails."""


def _default_api_key() -> str:
    key = settings.embedding_api_key or settings.openai_api_key
    return key.get_secret_value()


class Embedder:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Parameters
        ----------
        api_key : Optional[str]
            Bearer token. Defaults to ``settings.embedding_api_key``, then
            ``settings.openai_api_key``.

        model : Optional[str]
            Embedding model name. Defaults to ``settings.embedding_model``.

        base_url : Optional[str]
            Full URL of the embeddings endpoint. Defaults to
            ``settings.embedding_base_url``.

        timeout : float
            Per-request timeout in seconds.

        transport : Optional[httpx.AsyncBaseTransport]
            Replacement transport (``httpx.MockTransport`` in tests).
        """
        self.api_key = api_key or _default_api_key()
        self.model = model or settings.embedding_model
        self.base_url = base_url or settings.embedding_base_url
        self.timeout = timeout
        self._transport = transport

    async def embed(
        self,
        texts: Sequence[str],
        batch_size: int = 20,
    ) -> List[List[float]]:
        """
        Embed ``texts``, at most ``batch_size`` per request.

        Returns
        -------
        List[List[float]]
            One vector per input, in input order.

        Raises
        ------
        EmbeddingError
            If any batch fails or its response is malformed.
        """
        if not texts:
            return []

        vectors: List[List[float]] = []
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for start in range(0, len(texts), batch_size):
                batch = list(texts[start:start + batch_size])
                vectors.extend(await self._embed_batch(client, batch))
        return vectors

    async def embed_one(self, text: str) -> List[float]:
        return (await self.embed([text]))[0]

    async def _embed_batch(self, client: httpx.AsyncClient, batch: List[str]) -> List[List[float]]:
        try:
            response = await client.post(
                self.base_url,
                json={"model": self.model, "input": batch},
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            logger.error(
                "Embedding request for %d inputs failed (%s): %s",
                len(batch),
                type(exc).__name__,
                exc,
            )
            raise EmbeddingError(f"Embedding request failed: {type(exc).__name__}") from exc
        except ValueError as exc:
            raise EmbeddingError("Embedding response was not valid JSON") from exc

        vectors = self._extract_embeddings(body)
        if len(vectors) != len(batch):
            raise EmbeddingError(f"Expected {len(batch)} embeddings, received {len(vectors)}")
        return vectors

    @staticmethod
    def _extract_embeddings(body: Any) -> List[List[float]]:
        """
        Pull vectors out of ``{"data": [{"embedding": [...], "index": n}, ...]}``.

        Records are ordered by ``index`` when every record carries one.
        """
        records = body.get("data") if isinstance(body, dict) else None
        if not isinstance(records, list):
            raise EmbeddingError("Embedding response has no 'data' list")

        if records and all(isinstance(r, dict) and isinstance(r.get("index"), int) for r in records):
            records = sorted(records, key=lambda r: r["index"])

        vectors: List[List[float]] = []
        for pos, record in enumerate(records):
            vector = record.get("embedding") if isinstance(record, dict) else None
            if not isinstance(vector, list) or not all(isinstance(x, (int, float)) for x in vector):
                raise EmbeddingError(f"Malformed embedding record at position {pos}")
            vectors.append([float(x) for x in vector])
        return vectors
