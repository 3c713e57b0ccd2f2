"""Configuration management for vector index backends using Hydra.

All configuration is loaded from YAML files in conf/vector_index/.
This module provides typed config objects, validation and a backend factory.
"""

from pathlib import Path

from hydra import compose, initialize_config_dir
from omegaconf import DictConfig, OmegaConf
from pydantic import BaseModel, Field
from redis.asyncio import Redis

from vector_index.base import VectorDB
from vector_index.errors import ConfigurationError
from vector_index.index import DEFAULT_BATCH_SIZE
from vector_index.memory_db import MemoryVectorDB
from vector_index.metadata import DEFAULT_SCORE_FIELD, DEFAULT_VECTOR_FIELD
from vector_index.models import CreateIndexOptions
from vector_index.redis_db import RedisVectorDB


class RedisConfig(BaseModel):
    """RediSearch backend configuration.

    Attributes:
        url: Redis connection URL (redis:// or rediss://)
        index_name: RediSearch index name
        key_prefix: Prefix for document hash keys
        include_content: Return the ``content`` metadata key in results
        include_values: Return stored vectors in results
        vector_field: Reserved hash field holding the packed vector
        score_field: Reserved field RediSearch writes KNN distances into
        create_index: Index creation options (None disables auto-creation)
    """

    url: str = Field(default="redis://localhost:6379/0", pattern="^rediss?://")
    index_name: str = Field(min_length=1)
    key_prefix: str = ""
    include_content: bool = False
    include_values: bool = False
    vector_field: str = DEFAULT_VECTOR_FIELD
    score_field: str = DEFAULT_SCORE_FIELD
    create_index: CreateIndexOptions | None = None


class MemoryConfig(BaseModel):
    """In-memory backend configuration.

    Attributes:
        path: Optional JSON file for persistence
        include_content: Return the ``content`` metadata key in results
        include_values: Return stored vectors in results
        create_index: Dimension and distance of the index
    """

    path: str | None = None
    include_content: bool = False
    include_values: bool = False
    create_index: CreateIndexOptions | None = None


class IndexConfig(BaseModel):
    """Top-level configuration for the vector index.

    Attributes:
        backend: Index backend ("redis" or "memory")
        batch_size: Documents embedded and inserted per batch
        redis: Redis backend settings
        memory: In-memory backend settings
    """

    backend: str = Field(pattern="^(redis|memory)$")
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1, le=1000)
    redis: RedisConfig | None = None
    memory: MemoryConfig = Field(default_factory=MemoryConfig)


def load_config(
    config_name: str = "default",
    config_path: str | Path | None = None,
    overrides: list[str] | None = None,
) -> IndexConfig:
    """Load vector index configuration from Hydra YAML files.

    Args:
        config_name: Name of config file (without .yaml extension)
        config_path: Path to config directory (defaults to conf/vector_index/)
        overrides: List of config overrides (e.g., ["redis.index_name=docs"])

    Returns:
        Validated configuration object

    Example:
        >>> config = load_config("default", overrides=["backend=memory"])
        >>> config.backend
        'memory'
    """
    if config_path is None:
        # Default to conf/vector_index/ relative to repo root
        repo_root = Path(__file__).parent.parent.parent
        config_path = repo_root / "conf" / "vector_index"

    config_path = Path(config_path).resolve()

    if not config_path.exists():
        raise FileNotFoundError(
            f"Config directory not found: {config_path}\n" f"Create it with: mkdir -p {config_path}"
        )

    with initialize_config_dir(
        config_dir=str(config_path), version_base=None, job_name="vector_index"
    ):
        cfg: DictConfig = compose(config_name=config_name, overrides=overrides or [])

    # Convert OmegaConf to dict and validate with Pydantic
    config_dict = OmegaConf.to_container(cfg, resolve=True)
    return IndexConfig(**config_dict)  # type: ignore


def create_default_config() -> dict[str, object]:
    """Create a default configuration dictionary for bootstrapping.

    Example:
        >>> import yaml
        >>> with open("conf/vector_index/default.yaml", "w") as f:
        ...     yaml.dump(create_default_config(), f)
    """
    return {
        "backend": "redis",
        "batch_size": DEFAULT_BATCH_SIZE,
        "redis": {
            "url": "${oc.env:REDIS_URL,'redis://localhost:6379/0'}",
            "index_name": "vector-index",
            "key_prefix": "doc:",
            "include_content": True,
            "include_values": False,
            "vector_field": DEFAULT_VECTOR_FIELD,
            "score_field": DEFAULT_SCORE_FIELD,
            "create_index": {"dimension": 1536, "distance": "cosine"},
        },
        "memory": {
            "path": None,
            "include_content": True,
            "include_values": False,
            "create_index": {"dimension": 1536, "distance": "cosine"},
        },
    }


def create_vector_db(config: IndexConfig, client: Redis | None = None) -> VectorDB:
    """Instantiate the configured backend.

    Args:
        config: Validated index configuration
        client: Existing redis client to reuse (created from ``config.redis.url`` otherwise)

    Raises:
        ConfigurationError: If the selected backend has no settings
    """
    if config.backend == "memory":
        return MemoryVectorDB(
            path=config.memory.path,
            include_content=config.memory.include_content,
            include_values=config.memory.include_values,
            create_index=config.memory.create_index,
        )

    if config.backend == "redis":
        settings = config.redis
        if settings is None:
            raise ConfigurationError("backend 'redis' selected but no redis settings provided")

        if client is None:
            # Vector blobs must come back as raw bytes
            client = Redis.from_url(settings.url, decode_responses=False)

        return RedisVectorDB(
            client,
            settings.index_name,
            include_content=settings.include_content,
            include_values=settings.include_values,
            create_index=settings.create_index,
            key_prefix=settings.key_prefix,
            vector_field=settings.vector_field,
            score_field=settings.score_field,
        )

    raise ConfigurationError(f"Unsupported vector index backend {config.backend!r}")
