"""Shared fixtures for vector index tests.

``FakeRedis`` simulates the handful of RediSearch commands the backend issues
(``FT.INFO``, ``FT._LIST``, ``FT.CREATE``, ``FT.SEARCH``) and a
non-transactional pipeline, recording every call for assertions.
"""

from __future__ import annotations

from typing import Any

import pytest
from redis.connection import Encoder
from redis.exceptions import ResponseError

from vector_index.codec import encode_vector
from vector_index.models import CreateIndexOptions, Distance


class FakePipeline:
    """Records HSET calls and applies them on execute().

    Every value goes through redis-py's own encoder, so values a real client
    would reject (bool, None, dict) fail here too.
    """

    encoder = Encoder("utf-8", "strict", False)

    def __init__(self, redis: FakeRedis):
        self.redis = redis
        self.commands: list[tuple[str, dict[str, Any]]] = []
        self.executed = False

    async def __aenter__(self) -> FakePipeline:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None

    def hset(self, name: str, mapping: dict[str, Any]) -> FakePipeline:
        for value in mapping.values():
            self.encoder.encode(value)
        self.commands.append((name, dict(mapping)))
        return self

    async def execute(self) -> list[int]:
        if self.redis.pipeline_error is not None:
            raise self.redis.pipeline_error
        self.executed = True
        for name, mapping in self.commands:
            self.redis.hashes[name] = mapping
        return [len(mapping) for _, mapping in self.commands]


class FakeRedis:
    """Minimal async stand-in for ``redis.asyncio.Redis`` with a search module."""

    def __init__(self) -> None:
        self.indexes: dict[str, list[Any]] = {}
        self.hashes: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.errors: dict[str, Exception] = {}
        self.pipelines: list[FakePipeline] = []
        self.pipeline_error: Exception | None = None
        self.search_reply: list[Any] = [0]
        self.list_reply: list[bytes] | None = None

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        assert transaction is False
        pipeline = FakePipeline(self)
        self.pipelines.append(pipeline)
        return pipeline

    def count(self, command: str) -> int:
        return sum(1 for call in self.calls if call[0] == command)

    async def execute_command(self, *args: Any) -> Any:
        self.calls.append(args)
        command = args[0]
        if command in self.errors:
            raise self.errors[command]

        if command == "FT.INFO":
            if args[1] not in self.indexes:
                raise ResponseError("Unknown index name")
            return [
                b"index_name",
                args[1].encode(),
                b"index_options",
                [],
                b"num_docs",
                str(len(self.hashes)).encode(),
            ]
        if command == "FT._LIST":
            if self.list_reply is not None:
                return self.list_reply
            return [name.encode() for name in self.indexes]
        if command == "FT.CREATE":
            if args[1] in self.indexes:
                raise ResponseError("Index already exists")
            self.indexes[args[1]] = list(args)
            return b"OK"
        if command == "FT.SEARCH":
            if args[1] not in self.indexes:
                raise ResponseError(f"{args[1]}: no such index")
            return self.search_reply
        raise AssertionError(f"Unexpected command {command}")


def search_document(
    doc_id: str, score: str | None, values: list[float] | None = None, **fields: str
) -> list[Any]:
    """Build one ``id, payload, fields`` triple of an FT.SEARCH reply."""
    flat: list[Any] = []
    for key, value in fields.items():
        flat.extend([key.encode(), value.encode()])
    if values is not None:
        flat.extend([b"vec", encode_vector(values)])
    if score is not None:
        flat.extend([b"__vec_score", score.encode()])
    return [doc_id.encode(), None, flat]


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def create_options() -> CreateIndexOptions:
    return CreateIndexOptions(dimension=3, distance=Distance.COSINE)


@pytest.fixture
def make_document():
    return search_document
