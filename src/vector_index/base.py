"""Abstract vector database interface.

Retrieval pipelines hold a ``VectorDB`` and never import backend libraries.
Each implementation manages its own index lifecycle on first use.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from vector_index.models import Data, SearchOptions, SearchResults


class VectorDB(ABC):
    """Abstract base class for vector database backends."""

    @abstractmethod
    async def is_empty(self) -> bool:
        """Check whether the index holds no documents.

        Raises:
            IndexInternalError: For backend failures
        """
        ...

    @abstractmethod
    async def insert(self, datas: list[Data]) -> None:
        """Store records, assigning an id to every record whose id is empty.

        Args:
            datas: Records to store; generated ids are written back onto them

        Raises:
            IndexInternalError: For backend failures (the whole batch is aborted)
        """
        ...

    @abstractmethod
    async def search(
        self, values: Sequence[float], options: SearchOptions | None = None
    ) -> SearchResults:
        """Perform a K-nearest-neighbour search.

        Args:
            values: Query vector
            options: Top-K and backend-native filter

        Returns:
            Results in backend ranking order

        Raises:
            ConfigurationError: If the filter has the wrong type for this backend
            IndexInternalError: For backend failures
        """
        ...
