"""Pydantic models for the storage-agnostic vector index contract.

Every backend consumes and produces these types, so retrieval pipelines never
depend on backend-specific document shapes.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_KEY_CONTENT = "content"


class Distance(str, Enum):
    """Distance metric configured once at index creation.

    Values are backend neutral; each backend maps them to its own constants.
    """

    COSINE = "cosine"
    EUCLIDEAN = "euclidean"
    DOT = "dot"


class Data(BaseModel):
    """A single embeddable record.

    Attributes:
        id: Backend-unique identifier (generated on insert when empty)
        values: Embedding vector, width must match the index dimension
        metadata: Arbitrary scalar metadata, may hold the ``content`` key
    """

    id: str = ""
    values: list[float] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class SearchResult(BaseModel):
    """A reconstructed record with its backend-native score.

    Attributes:
        data: Record with internal fields stripped from metadata
        score: Distance or similarity, meaning depends on the index Distance
    """

    data: Data
    score: float = 0.0


SearchResults = list[SearchResult]


class CreateIndexOptions(BaseModel):
    """Options used when a backend index has to be created.

    Attributes:
        dimension: Width of every stored vector
        distance: Distance metric of the index
    """

    dimension: int = Field(gt=0)
    distance: Distance = Distance.COSINE


class SearchOptions(BaseModel):
    """Per-call search configuration.

    Attributes:
        top_k: Number of neighbours requested
        filter: Backend-native filter, type-checked by the backend that runs the query
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    top_k: int = Field(default=10, ge=1)
    filter: Any = None


class Document(BaseModel):
    """Text produced by a loader or splitter, ready to be embedded."""

    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
