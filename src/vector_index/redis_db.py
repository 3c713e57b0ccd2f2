"""RediSearch vector database backend.

Stores each record as a Redis hash (metadata fields plus the packed float32
vector) and runs KNN queries through ``FT.SEARCH`` with dialect 2.

The client must be created with ``decode_responses=False`` (RESP2) so stored
vector blobs come back as raw bytes; this module decodes every other field
itself.
"""

import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from loguru import logger
from redis.asyncio import Redis
from redis.commands.search.query import Filter
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from vector_index.base import VectorDB
from vector_index.codec import decode_vector, encode_vector
from vector_index.errors import (
    BackendUnavailableError,
    ConfigurationError,
    IndexInternalError,
    IndexNotFoundError,
    IndexStateError,
)
from vector_index.metadata import (
    DEFAULT_SCORE_FIELD,
    DEFAULT_VECTOR_FIELD,
    extract_score,
    sanitize_metadata,
)
from vector_index.models import (
    CreateIndexOptions,
    Data,
    Distance,
    SearchOptions,
    SearchResult,
    SearchResults,
)

# RediSearch reports a missing index as "Unknown index name" (older modules)
# or "<name>: no such index" (Redis 8).
ERR_UNKNOWN_INDEX = ("unknown index name", "no such index")
ERR_INDEX_EXISTS = "index already exists"

REDIS_DISTANCE_METRICS: dict[Distance, str] = {
    Distance.COSINE: "COSINE",
    Distance.EUCLIDEAN: "L2",
    Distance.DOT: "IP",
}

QUERY_VECTOR_PARAM = "query_vector"
QUERY_DIALECT = 2


def _to_str(value: Any) -> Any:
    """Decode bytes as UTF-8, leaving binary blobs and non-bytes untouched."""
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value
    return value


def _to_wire_value(value: Any) -> str | bytes | int | float:
    """Map a metadata value to something redis-py can write into a hash field.

    Booleans become ``"1"``/``"0"``, ``None`` becomes an empty string and any
    other non-scalar is stored as ``str(value)``.
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    if value is None:
        return ""
    if isinstance(value, (str, bytes, int, float)):
        return value
    return str(value)


def _reply_to_dict(reply: Any) -> dict[str, Any]:
    """Turn a flat ``[key, value, ...]`` reply (or a RESP3 map) into a dict."""
    if isinstance(reply, Mapping):
        return {_to_str(key): value for key, value in reply.items()}
    items = list(reply or [])
    return {_to_str(items[i]): items[i + 1] for i in range(0, len(items) - 1, 2)}


def _is_unknown_index(exc: RedisError) -> bool:
    message = str(exc).lower()
    return isinstance(exc, ResponseError) and any(m in message for m in ERR_UNKNOWN_INDEX)


def _backend_error(exc: RedisError, action: str) -> IndexInternalError:
    """Translate a redis exception into the generic error taxonomy."""
    if isinstance(exc, (RedisConnectionError, RedisTimeoutError)):
        return BackendUnavailableError(f"{action} failed: {exc}")
    if _is_unknown_index(exc):
        return IndexNotFoundError(f"{action} failed: {exc}")
    return IndexInternalError(f"{action} failed: {exc}")


def _lifecycle_error(exc: RedisError, action: str) -> IndexInternalError:
    if isinstance(exc, (RedisConnectionError, RedisTimeoutError)):
        return BackendUnavailableError(f"{action} failed: {exc}")
    return IndexStateError(f"{action} failed during index lifecycle check: {exc}")


class RedisVectorDB(VectorDB):
    """RediSearch implementation of :class:`VectorDB`."""

    def __init__(
        self,
        client: Redis,
        index_name: str,
        *,
        include_content: bool = False,
        include_values: bool = False,
        create_index: CreateIndexOptions | None = None,
        key_prefix: str = "",
        vector_field: str = DEFAULT_VECTOR_FIELD,
        score_field: str = DEFAULT_SCORE_FIELD,
    ):
        """Initialize the backend.

        Args:
            client: ``redis.asyncio.Redis`` created with ``decode_responses=False``
            index_name: RediSearch index name
            include_content: Keep the ``content`` metadata key in results
            include_values: Decode stored vectors into ``Data.values`` in results
            create_index: Create the index on first use when absent (None disables)
            key_prefix: Prefix for hash keys, also used as the index PREFIX
            vector_field: Hash field holding the packed vector
            score_field: Field RediSearch writes the KNN distance into
        """
        self.client = client
        self.index_name = index_name
        self.include_content = include_content
        self.include_values = include_values
        self.create_index = create_index
        self.key_prefix = key_prefix
        self.vector_field = vector_field
        self.score_field = score_field

    async def is_empty(self) -> bool:
        """Check whether the index holds no documents."""
        await self.ensure_index()

        try:
            reply = await self.client.execute_command("FT.INFO", self.index_name)
        except RedisError as exc:
            raise _backend_error(exc, "FT.INFO") from exc

        info = _reply_to_dict(reply)
        return int(_to_str(info.get("num_docs", 0))) == 0

    async def insert(self, datas: list[Data]) -> None:
        """Write all records as hashes in a single pipeline.

        Records with an empty id get a random UUID, written back onto the record
        once the pipeline succeeds. Metadata values are mapped to hash scalars
        by :func:`_to_wire_value`.
        """
        await self.ensure_index()

        if not datas:
            return

        ids = [data.id or str(uuid.uuid4()) for data in datas]

        try:
            async with self.client.pipeline(transaction=False) as pipeline:
                for record_id, data in zip(ids, datas, strict=True):
                    mapping = {key: _to_wire_value(value) for key, value in data.metadata.items()}
                    mapping[self.vector_field] = encode_vector(data.values)
                    pipeline.hset(self._key(record_id), mapping=mapping)

                await pipeline.execute()
        except RedisError as exc:
            raise _backend_error(exc, "Insert") from exc

        for record_id, data in zip(ids, datas, strict=True):
            data.id = record_id

        logger.debug(f"Inserted {len(datas)} documents into index {self.index_name!r}")

    async def search(
        self, values: Sequence[float], options: SearchOptions | None = None
    ) -> SearchResults:
        """Run a KNN query and rebuild results in the order Redis ranked them."""
        options = options or SearchOptions()
        query_filter = self._check_filter(options.filter)

        await self.ensure_index()

        args = self.build_search_args(values, options.top_k, query_filter)
        try:
            reply = await self.client.execute_command(*args)
        except RedisError as exc:
            raise _backend_error(exc, "FT.SEARCH") from exc

        results = self._build_search_results(reply)
        logger.debug(
            f"KNN search on {self.index_name!r} returned {len(results)} of {options.top_k} results"
        )
        return results

    async def ensure_index(self) -> None:
        """Create the index if it does not exist yet.

        Re-queries Redis on every call. A concurrent creator winning the race
        is tolerated: the "already exists" reply is not surfaced.

        Raises:
            IndexStateError: If the lifecycle check fails for any other reason
            BackendUnavailableError: On connection failures
        """
        if self.create_index is None:
            return

        try:
            await self.client.execute_command("FT.INFO", self.index_name)
        except RedisError as exc:
            if not _is_unknown_index(exc):
                raise _lifecycle_error(exc, "FT.INFO") from exc
        else:
            return

        try:
            existing = await self.client.execute_command("FT._LIST")
        except RedisError as exc:
            raise _lifecycle_error(exc, "FT._LIST") from exc

        if self.index_name in {_to_str(name) for name in existing or []}:
            logger.debug(f"Index {self.index_name!r} listed by FT._LIST, skipping creation")
            return

        try:
            await self.client.execute_command(*self.build_create_args())
        except ResponseError as exc:
            if ERR_INDEX_EXISTS not in str(exc).lower():
                raise _lifecycle_error(exc, "FT.CREATE") from exc
            logger.warning(f"Index {self.index_name!r} was created concurrently, reusing it")
            return
        except RedisError as exc:
            raise _lifecycle_error(exc, "FT.CREATE") from exc

        logger.info(
            f"Created RediSearch index {self.index_name!r} "
            f"(dim={self.create_index.dimension}, distance={self.create_index.distance.value})"
        )

    def build_create_args(self) -> list[Any]:
        """Build the ``FT.CREATE`` command for a flat float32 vector index."""
        if self.create_index is None:
            raise ConfigurationError("create_index options are required to build FT.CREATE")

        args: list[Any] = ["FT.CREATE", self.index_name, "ON", "HASH"]
        if self.key_prefix:
            args.extend(["PREFIX", 1, self.key_prefix])

        attributes = [
            "TYPE",
            "FLOAT32",
            "DIM",
            self.create_index.dimension,
            "DISTANCE_METRIC",
            REDIS_DISTANCE_METRICS[self.create_index.distance],
        ]
        args.extend(["SCHEMA", self.vector_field, "VECTOR", "FLAT", len(attributes), *attributes])
        return args

    def build_search_args(
        self, values: Sequence[float], top_k: int, query_filter: Filter | None = None
    ) -> list[Any]:
        """Build the ``FT.SEARCH`` command for a KNN query.

        The query vector is bound as a parameter, never inlined in the query text.
        """
        query = f"(*)=>[KNN {top_k} @{self.vector_field} ${QUERY_VECTOR_PARAM}]"
        args: list[Any] = ["FT.SEARCH", self.index_name, query, "WITHPAYLOADS"]
        if query_filter is not None:
            args.extend(query_filter.args)

        args.extend(["SORTBY", self.score_field, "ASC"])
        args.extend(["LIMIT", 0, top_k])
        args.extend(["PARAMS", 2, QUERY_VECTOR_PARAM, encode_vector(values)])
        args.extend(["DIALECT", QUERY_DIALECT])
        return args

    @staticmethod
    def _check_filter(query_filter: Any) -> Filter | None:
        if query_filter is None or isinstance(query_filter, Filter):
            return query_filter
        raise ConfigurationError(
            "RedisVectorDB expects a redis.commands.search.query.Filter, "
            f"got {type(query_filter).__name__}"
        )

    def _key(self, record_id: str) -> str:
        return f"{self.key_prefix}{record_id}"

    def _parse_documents(self, reply: Any) -> list[tuple[str, dict[str, Any]]]:
        """Split a ``WITHPAYLOADS`` reply into ``(id, properties)`` pairs.

        Reply layout: ``[total, id, payload, [field, value, ...], id, ...]``.
        """
        items = list(reply or [])
        documents: list[tuple[str, dict[str, Any]]] = []
        for offset in range(1, len(items) - 2, 3):
            doc_id = str(_to_str(items[offset]))
            properties: dict[str, Any] = {}
            for key, value in _reply_to_dict(items[offset + 2]).items():
                properties[key] = value if key == self.vector_field else _to_str(value)
            documents.append((doc_id, properties))
        return documents

    def _build_search_results(self, reply: Any) -> SearchResults:
        results: SearchResults = []
        for doc_id, properties in self._parse_documents(reply):
            values: list[float] = []
            blob = properties.get(self.vector_field)
            if self.include_values and isinstance(blob, bytes):
                values = decode_vector(blob)

            results.append(
                SearchResult(
                    data=Data(
                        id=doc_id.removeprefix(self.key_prefix),
                        values=values,
                        metadata=sanitize_metadata(
                            properties,
                            self.include_content,
                            vector_field=self.vector_field,
                            score_field=self.score_field,
                        ),
                    ),
                    score=extract_score(properties, self.score_field),
                )
            )
        return results
