"""Retrieval facade combining an embedder with a vector database.

Loaders and splitters hand over :class:`Document` objects; the facade embeds
them in batches and stores them as :class:`Data` records whose metadata holds
the original text under the ``content`` key.
"""

from collections.abc import Sequence

from loguru import logger

from vector_index.base import VectorDB
from vector_index.embedding import Embedder
from vector_index.errors import ConfigurationError
from vector_index.models import (
    DEFAULT_KEY_CONTENT,
    Data,
    Document,
    SearchOptions,
    SearchResults,
)

DEFAULT_BATCH_SIZE = 32


class Index:
    """Embed-and-store / embed-and-search pipeline over any :class:`VectorDB`."""

    def __init__(
        self,
        vector_db: VectorDB,
        embedder: Embedder,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        if batch_size < 1:
            raise ConfigurationError(f"batch_size must be positive, got {batch_size}")

        self.vector_db = vector_db
        self.embedder = embedder
        self.batch_size = batch_size

    async def is_empty(self) -> bool:
        return await self.vector_db.is_empty()

    async def add(self, datas: list[Data]) -> None:
        """Insert pre-embedded records."""
        await self.vector_db.insert(datas)

    async def load_from_documents(self, documents: list[Document]) -> list[Data]:
        """Embed documents batch by batch and insert each batch.

        Returns:
            The inserted records, with their generated ids
        """
        inserted: list[Data] = []
        for start in range(0, len(documents), self.batch_size):
            batch = documents[start : start + self.batch_size]
            vectors = await self.embedder.embed_batch([doc.content for doc in batch])

            datas = [
                Data(
                    values=vector,
                    metadata={**doc.metadata, DEFAULT_KEY_CONTENT: doc.content},
                )
                for doc, vector in zip(batch, vectors, strict=True)
            ]
            await self.vector_db.insert(datas)
            inserted.extend(datas)

            logger.debug(f"Indexed documents {start + 1}-{start + len(batch)} of {len(documents)}")

        return inserted

    async def search(
        self, values: Sequence[float], options: SearchOptions | None = None
    ) -> SearchResults:
        return await self.vector_db.search(values, options)

    async def query(self, text: str, options: SearchOptions | None = None) -> SearchResults:
        """Embed ``text`` and return its nearest neighbours."""
        vector = await self.embedder.embed_single(text)
        return await self.vector_db.search(vector, options)
