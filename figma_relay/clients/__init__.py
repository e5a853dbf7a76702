"""
Clients for upstream APIs.
"""
from .figma_client import FigmaClient, FILE_ENDPOINT, NODES_ENDPOINT

__all__ = [
    'FigmaClient',
    'FILE_ENDPOINT',
    'NODES_ENDPOINT',
]
