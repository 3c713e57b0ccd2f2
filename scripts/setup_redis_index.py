"""Set up the RediSearch vector index.

This script creates the index described by conf/vector_index/default.yaml if it
does not exist yet, and reports whether it holds any documents.

Usage:
    python scripts/setup_redis_index.py [hydra overrides...]

Example:
    python scripts/setup_redis_index.py redis.index_name=docs redis.create_index.dimension=768
"""

import asyncio
import sys

from vector_index import IndexConfig, RedisVectorDB, VectorIndexError, create_vector_db, load_config


async def setup(config: IndexConfig) -> None:
    """Ensure the configured index exists and print its state."""
    db = create_vector_db(config)
    if not isinstance(db, RedisVectorDB):
        print(f"❌ Error: backend is {config.backend!r}, expected 'redis'")
        sys.exit(1)

    if db.create_index is None:
        print("❌ Error: redis.create_index must be set to create the index")
        sys.exit(1)

    print("🔧 Setting up RediSearch...\n")
    print(f"  • Index: {db.index_name}")
    print(f"  • Dimension: {db.create_index.dimension}")
    print(f"  • Distance: {db.create_index.distance.value}")

    try:
        await db.ensure_index()
        empty = await db.is_empty()
    finally:
        await db.client.aclose()

    print(f"\n✅ Index '{db.index_name}' is ready ({'empty' if empty else 'has documents'})")


def main() -> None:
    """Create the RediSearch index."""
    config = load_config("default", overrides=sys.argv[1:])

    try:
        asyncio.run(setup(config))
    except VectorIndexError as e:
        print(f"❌ Error: {e}")
        print("\nTroubleshooting:")
        print("  • Check REDIS_URL points at a Redis Stack / Redis 8 server")
        print("  • Ensure the search module is loaded (FT._LIST must succeed)")
        sys.exit(1)


if __name__ == "__main__":
    main()
