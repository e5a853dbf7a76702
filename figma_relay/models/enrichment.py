"""
Enrichment data models.

Defines the validated request parameters, the screens extracted from a Figma
document tree and the composed payload that is cached and returned.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple


class CacheStatus(Enum):
    """Provenance marker returned in the `_cache` field."""
    HIT = 'hit'
    FALLBACK_ON_429 = 'fallback_on_429'
    MISS_SET = 'miss_set'


@dataclass(frozen=True)
class RequestParams:
    """
    Validated query parameters for one request.

    Attributes:
        file_key: Figma file key
        depth: Document traversal depth, one of "1", "2", "3"
        limit: Maximum number of screens, within [1, 25]
    """
    file_key: str
    depth: str = '1'
    limit: int = 10


@dataclass(frozen=True)
class Screen:
    """A top-level FRAME or SECTION directly under a CANVAS."""
    id: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {'id': self.id, 'name': self.name}


@dataclass(frozen=True)
class EnrichmentPayload:
    """
    Composed result for one (file_key, depth, limit) triple.

    Immutable once built; the same instance is stored in the cache and
    rendered for every response that hits it.
    """
    file_key: str
    file_name: str
    last_modified: str
    screens: Tuple[Screen, ...] = ()
    nodes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'screens', tuple(self.screens))
        object.__setattr__(self, 'nodes', MappingProxyType(dict(self.nodes)))

    def to_dict(self) -> Dict[str, Any]:
        """Render the response body (without the cache marker)."""
        return {
            'file_key': self.file_key,
            'file_name': self.file_name,
            'last_modified': self.last_modified,
            'screens': [screen.to_dict() for screen in self.screens],
            'nodes': dict(self.nodes),
        }
