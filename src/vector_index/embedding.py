"""Embedder collaborator contract.

Embedding generation lives outside this package; anything that turns text into
fixed-dimension float vectors and satisfies this protocol can feed an index.
"""

from typing import Protocol


class Embedder(Protocol):
    """Protocol for embedding client implementations."""

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for a batch of texts.

        Args:
            texts: List of input texts

        Returns:
            List of embedding vectors (same order as inputs)
        """
        ...

    async def embed_single(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        ...
