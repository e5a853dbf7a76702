"""
Configuration for the relay endpoint.
"""
from .settings import (
    RelaySettings,
    DEFAULT_FIGMA_API_BASE,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_CACHE_MAX_ENTRIES,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
)

__all__ = [
    'RelaySettings',
    'DEFAULT_FIGMA_API_BASE',
    'DEFAULT_CACHE_TTL_SECONDS',
    'DEFAULT_CACHE_MAX_ENTRIES',
    'DEFAULT_REQUEST_TIMEOUT_SECONDS',
]
