"""
In-process storage for enrichment payloads.
"""
from .screen_cache import ScreenCache, CacheEntry, build_cache_key

__all__ = [
    'ScreenCache',
    'CacheEntry',
    'build_cache_key',
]
