"""Redis caching layer for catalog data.

This package provides:
- Connection lifecycle handle (RedisCache)
- Cache key generation and filter canonicalization (CacheKeyGenerator)
- TTL policies per entity type (CacheTTL, EntityKind)
- Per-entity store operations (CacheManager)
- Compression codec (encode, decode, should_compress)
- Fail-open results (CacheResult) and cache error kinds
"""

from src.cache.compression import decode, decode_strict, encode, should_compress
from src.cache.connection import CacheState, RedisCache, cache
from src.cache.exceptions import (
    CacheError,
    CacheUnavailableError,
    DecodeCorruptionError,
    SchemaMismatchError,
)
from src.cache.keys import CacheKeyGenerator
from src.cache.manager import CacheManager, cache_manager
from src.cache.result import CacheResult
from src.cache.ttl import CacheTTL, EntityKind

__all__ = [
    # Connection
    "CacheState",
    "RedisCache",
    "cache",
    # Key generation
    "CacheKeyGenerator",
    # Cache manager
    "CacheManager",
    "cache_manager",
    "CacheResult",
    # TTL policies
    "CacheTTL",
    "EntityKind",
    # Codec
    "encode",
    "decode",
    "decode_strict",
    "should_compress",
    # Errors
    "CacheError",
    "CacheUnavailableError",
    "DecodeCorruptionError",
    "SchemaMismatchError",
]
