"""Storage-agnostic vector index with a RediSearch backend.

This package stores embedding vectors with metadata and runs K-nearest-neighbour
retrieval against them. Embedding generation, document loading and text
splitting are external collaborators.

Architecture:
    - models: Pydantic schemas for records, results and options
    - codec: float32 little-endian vector packing
    - metadata: Reserved-field stripping and score parsing
    - base: ``VectorDB`` abstract interface
    - redis_db: RediSearch backend with idempotent index creation
    - memory_db: Brute-force in-process backend
    - index: Embedder + vector DB retrieval facade
    - config: Hydra/Pydantic configuration and backend factory

Usage:
    >>> from vector_index import load_config, create_vector_db
    >>> db = create_vector_db(load_config("default"))
    >>> results = await db.search(query_vector, SearchOptions(top_k=5))
"""

__version__ = "0.1.0"

from vector_index.base import VectorDB
from vector_index.config import IndexConfig, create_vector_db, load_config
from vector_index.errors import (
    BackendUnavailableError,
    ConfigurationError,
    EncodingError,
    IndexInternalError,
    IndexNotFoundError,
    IndexStateError,
    VectorIndexError,
)
from vector_index.index import Index
from vector_index.memory_db import MemoryVectorDB
from vector_index.models import (
    DEFAULT_KEY_CONTENT,
    CreateIndexOptions,
    Data,
    Distance,
    Document,
    SearchOptions,
    SearchResult,
    SearchResults,
)
from vector_index.redis_db import RedisVectorDB

__all__ = [
    "DEFAULT_KEY_CONTENT",
    "BackendUnavailableError",
    "ConfigurationError",
    "CreateIndexOptions",
    "Data",
    "Distance",
    "Document",
    "EncodingError",
    "Index",
    "IndexConfig",
    "IndexInternalError",
    "IndexNotFoundError",
    "IndexStateError",
    "MemoryVectorDB",
    "RedisVectorDB",
    "SearchOptions",
    "SearchResult",
    "SearchResults",
    "VectorDB",
    "VectorIndexError",
    "create_vector_db",
    "load_config",
]
