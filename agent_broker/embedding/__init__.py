"""Text embedding providers."""

from typing import List, Protocol, runtime_checkable

from .openai import OpenAIEmbeddingClient


@runtime_checkable
class Embedder(Protocol):
    """Generates vector embeddings from text."""

    def embed(self, texts: List[str]) -> List[List[float]]:
        ...

    def dimensions(self) -> int:
        ...


__all__ = ["Embedder", "OpenAIEmbeddingClient"]
