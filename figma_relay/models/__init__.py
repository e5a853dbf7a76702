"""
Data models for the relay pipeline.
"""
from .enrichment import (
    Screen,
    RequestParams,
    EnrichmentPayload,
    CacheStatus,
)

__all__ = [
    'Screen',
    'RequestParams',
    'EnrichmentPayload',
    'CacheStatus',
]
