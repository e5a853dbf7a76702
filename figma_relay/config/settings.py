"""
Relay configuration.

Settings are read from environment variables once per invocation and passed
explicitly into the enrichment service, so tests can build them directly
without touching the process environment.
"""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

# Upstream
DEFAULT_FIGMA_API_BASE = 'https://api.figma.com/v1'
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0

# Cache
DEFAULT_CACHE_TTL_SECONDS = 600  # 10 minutes
DEFAULT_CACHE_MAX_ENTRIES = 256

# Metrics
DEFAULT_METRICS_NAMESPACE = 'FigmaRelay/Enrich'

_TRUTHY = ('1', 'true', 'yes', 'on')


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    """Parse a float variable, falling back to the default when unparsable."""
    raw = env.get(key)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    """Parse a positive int variable, falling back to the default when unparsable."""
    raw = env.get(key)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class RelaySettings:
    """
    Immutable configuration for one relay invocation.

    Attributes:
        relay_key: Shared secret expected in the X-Relay-Key header
        figma_token: Personal access token for the Figma REST API
        figma_api_base: Base URL of the Figma REST API
        request_timeout_seconds: Deadline applied to each upstream call
        cache_ttl_seconds: Maximum age of a cached payload
        cache_max_entries: Capacity bound of the in-process cache
        metrics_enabled: Whether CloudWatch metrics are emitted
        metrics_namespace: CloudWatch namespace for emitted metrics
    """
    relay_key: str = ''
    figma_token: str = ''
    figma_api_base: str = DEFAULT_FIGMA_API_BASE
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    cache_max_entries: int = DEFAULT_CACHE_MAX_ENTRIES
    metrics_enabled: bool = False
    metrics_namespace: str = DEFAULT_METRICS_NAMESPACE

    @classmethod
    def from_environment(cls, env: Optional[Mapping[str, str]] = None) -> 'RelaySettings':
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from (defaults to os.environ)

        Returns:
            RelaySettings instance
        """
        if env is None:
            env = os.environ

        return cls(
            relay_key=env.get('RELAY_KEY', ''),
            figma_token=env.get('FIGMA_PAT', ''),
            figma_api_base=(env.get('FIGMA_API_BASE') or DEFAULT_FIGMA_API_BASE).rstrip('/'),
            request_timeout_seconds=_env_float(
                env, 'FIGMA_TIMEOUT_SECONDS', DEFAULT_REQUEST_TIMEOUT_SECONDS
            ),
            cache_ttl_seconds=_env_int(env, 'CACHE_TTL_SECONDS', DEFAULT_CACHE_TTL_SECONDS),
            cache_max_entries=_env_int(env, 'CACHE_MAX_ENTRIES', DEFAULT_CACHE_MAX_ENTRIES),
            metrics_enabled=env.get('METRICS_ENABLED', '').strip().lower() in _TRUTHY,
            metrics_namespace=env.get('METRICS_NAMESPACE') or DEFAULT_METRICS_NAMESPACE,
        )
