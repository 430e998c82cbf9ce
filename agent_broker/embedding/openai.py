"""
OpenAI-compatible embeddings client.

Works with OpenAI, TEI, Ollama, vLLM and any other server exposing
POST /v1/embeddings.
"""

import logging
from typing import Optional, List

import httpx

from ..errors import EmbeddingError

logger = logging.getLogger("agent_broker.embedding")


class OpenAIEmbeddingClient:
    """Embedder backed by an OpenAI-compatible HTTP API."""

    def __init__(
        self,
        url: str,
        dimensions: int,
        model: Optional[str] = None,
        timeout: float = 30.0,
        http_client: httpx.Client = None,
    ):
        self.url = url.rstrip("/")
        self.model = model
        self._dimensions = dimensions
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout)

    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, texts: List[str]) -> List[List[float]]:
        """Embed ``texts``; result[i] is the vector for texts[i]."""
        if not texts:
            return []

        payload = {"input": list(texts)}
        if self.model:
            payload["model"] = self.model

        try:
            response = self._http.post(f"{self.url}/v1/embeddings", json=payload)
        except httpx.RequestError as e:
            raise EmbeddingError(f"embedding request failed: {e}") from e

        if response.status_code != 200:
            raise EmbeddingError(f"unexpected status: {response.status_code}")

        try:
            data = response.json()["data"]
        except (ValueError, KeyError, TypeError) as e:
            raise EmbeddingError(f"decode response: {e}") from e

        # Providers may return items out of order; place each by its index
        embeddings: List[Optional[List[float]]] = [None] * len(texts)
        try:
            for item in data:
                index = item.get("index", 0)
                if 0 <= index < len(embeddings):
                    embeddings[index] = [float(x) for x in item["embedding"]]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise EmbeddingError(f"decode embedding item: {e!r}") from e

        if any(e is None for e in embeddings):
            raise EmbeddingError(
                f"expected {len(texts)} embeddings, got {len(data)}"
            )
        logger.debug(f"Embedded {len(texts)} text(s) via {self.url}")
        return embeddings

    def close(self) -> None:
        if self._owns_client:
            self._http.close()
