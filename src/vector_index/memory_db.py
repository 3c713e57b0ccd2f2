"""In-process vector database with optional JSON persistence.

Brute-force scoring over every stored vector. Scores follow the RediSearch
conventions (lower is closer) so results are interchangeable with
:class:`vector_index.redis_db.RedisVectorDB`:

- COSINE: ``1 - cosine_similarity``
- EUCLIDEAN: squared L2 distance
- DOT: ``1 - inner_product``
"""

import copy
import json
import uuid
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import numpy as np
from filelock import FileLock
from loguru import logger

from vector_index.base import VectorDB
from vector_index.codec import decode_vector, encode_vector
from vector_index.errors import ConfigurationError, IndexInternalError
from vector_index.metadata import sanitize_metadata
from vector_index.models import (
    CreateIndexOptions,
    Data,
    Distance,
    SearchOptions,
    SearchResult,
    SearchResults,
)

MetadataFilter = Callable[[dict[str, Any]], bool]
Records = dict[str, tuple[bytes, dict[str, Any]]]


def _scores(matrix: np.ndarray, query: np.ndarray, distance: Distance) -> np.ndarray:
    if distance == Distance.EUCLIDEAN:
        diff = matrix - query
        return np.einsum("ij,ij->i", diff, diff)

    dots = matrix @ query
    if distance == Distance.DOT:
        return 1.0 - dots

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    similarity = np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)
    return 1.0 - similarity


class MemoryVectorDB(VectorDB):
    """NumPy-backed store that mirrors the RediSearch backend's contract."""

    def __init__(
        self,
        *,
        path: str | Path | None = None,
        include_content: bool = False,
        include_values: bool = False,
        create_index: CreateIndexOptions | None = None,
    ):
        """Initialize the store, loading ``path`` when it already exists.

        Args:
            path: Optional JSON file the records are persisted to
            include_content: Keep the ``content`` metadata key in results
            include_values: Return stored vectors in results
            create_index: Dimension and distance; dimension is checked when set
        """
        self.path = Path(path) if path is not None else None
        self.include_content = include_content
        self.include_values = include_values
        self.create_index = create_index
        self._records: Records = {}

        if self.path is not None and self.path.exists():
            self._load(self.path)

    @property
    def distance(self) -> Distance:
        return self.create_index.distance if self.create_index else Distance.COSINE

    async def is_empty(self) -> bool:
        return not self._records

    async def insert(self, datas: list[Data]) -> None:
        """Store records; the batch is validated and persisted before memory is updated."""
        dimension = self.create_index.dimension if self.create_index else None
        for data in datas:
            if dimension is not None and len(data.values) != dimension:
                raise IndexInternalError(
                    f"Vector for {data.id or '<new>'!r} has {len(data.values)} dimensions, "
                    f"index expects {dimension}"
                )

        if not datas:
            return

        ids = [data.id or str(uuid.uuid4()) for data in datas]
        batch = {
            record_id: (encode_vector(data.values), dict(data.metadata))
            for record_id, data in zip(ids, datas, strict=True)
        }

        if self.path is not None:
            self._records = self._save(self.path, batch)
        else:
            self._records = {**self._records, **batch}

        for record_id, data in zip(ids, datas, strict=True):
            data.id = record_id

        logger.debug(f"Stored {len(datas)} records in memory index ({len(self._records)} total)")

    async def search(
        self, values: Sequence[float], options: SearchOptions | None = None
    ) -> SearchResults:
        options = options or SearchOptions()
        predicate = self._check_filter(options.filter)

        candidates = [
            (record_id, blob, metadata)
            for record_id, (blob, metadata) in self._records.items()
            if predicate is None or predicate(copy.deepcopy(metadata))
        ]
        if not candidates:
            return []

        query = np.asarray(decode_vector(encode_vector(values)), dtype=np.float64)
        vectors = [decode_vector(blob) for _, blob, _ in candidates]
        if any(len(vector) != len(query) for vector in vectors):
            raise IndexInternalError(
                f"Query vector has {len(query)} dimensions, stored vectors do not match"
            )

        scores = _scores(np.asarray(vectors, dtype=np.float64), query, self.distance)
        order = np.argsort(scores, kind="stable")[: options.top_k]

        results: SearchResults = []
        for position in order:
            record_id, _, metadata = candidates[position]
            results.append(
                SearchResult(
                    data=Data(
                        id=record_id,
                        values=vectors[position] if self.include_values else [],
                        metadata=sanitize_metadata(metadata, self.include_content),
                    ),
                    score=float(scores[position]),
                )
            )
        return results

    @staticmethod
    def _check_filter(query_filter: Any) -> MetadataFilter | None:
        if query_filter is None or callable(query_filter):
            return query_filter
        raise ConfigurationError(
            f"MemoryVectorDB expects a callable metadata predicate, got {type(query_filter).__name__}"
        )

    @staticmethod
    def _lock(path: Path) -> FileLock:
        return FileLock(path.with_suffix(path.suffix + ".lock"), timeout=30)

    @staticmethod
    def _read(path: Path) -> Records:
        rows = json.loads(path.read_text())
        return {
            row["id"]: (encode_vector(row["values"]), dict(row.get("metadata", {})))
            for row in rows
        }

    def _load(self, path: Path) -> None:
        with self._lock(path):
            self._records = self._read(path)
        logger.debug(f"Loaded {len(self._records)} records from {path}")

    def _save(self, path: Path, batch: Records) -> Records:
        """Merge ``batch`` with the file contents under the lock and write the result.

        Records on disk win over this instance's snapshot so concurrent writers
        sharing the file keep each other's inserts.

        Returns:
            The merged records that were written
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock(path):
            on_disk = self._read(path) if path.exists() else {}
            records = {**self._records, **on_disk, **batch}
            rows = [
                {"id": record_id, "values": decode_vector(blob), "metadata": metadata}
                for record_id, (blob, metadata) in records.items()
            ]
            try:
                payload = json.dumps(rows)
            except (TypeError, ValueError) as exc:
                raise IndexInternalError(f"Cannot persist records to {path}: {exc}") from exc
            path.write_text(payload)
        return records
