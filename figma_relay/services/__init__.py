"""
Relay services.
"""
from .screen_selector import select_screens
from .enrichment_service import EnrichmentService, EnrichmentResult

__all__ = [
    'select_screens',
    'EnrichmentService',
    'EnrichmentResult',
]
