"""
Figma enrichment pipeline.

Runs the per-request chain after authorization and validation:
cache lookup, file fetch (with rate-limit fallback), screen selection,
node fetch (degrading to an empty mapping), payload composition and
cache store.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from figma_relay.clients import FigmaClient
from figma_relay.data_access import ScreenCache, build_cache_key
from figma_relay.exceptions import RelayError, UpstreamRateLimitedError
from figma_relay.models import CacheStatus, EnrichmentPayload, RequestParams
from figma_relay.services.screen_selector import select_screens
from figma_relay.utils.metrics_emitter import MetricsEmitter
from figma_relay.utils.structured_logger import StructuredLogger, get_structured_logger


@dataclass(frozen=True)
class EnrichmentResult:
    """A payload and where it came from."""
    payload: EnrichmentPayload
    cache_status: CacheStatus

    def to_response_body(self) -> Dict[str, Any]:
        body = self.payload.to_dict()
        body['_cache'] = self.cache_status.value
        return body


class EnrichmentService:
    """
    Orchestrates one enrichment request against Figma and the cache.
    """

    def __init__(
        self,
        client: FigmaClient,
        cache: ScreenCache,
        metrics: Optional[MetricsEmitter] = None,
        logger: Optional[StructuredLogger] = None
    ):
        """
        Initialize enrichment service.

        Args:
            client: Figma API client
            cache: Payload cache shared across invocations
            metrics: Optional metrics emitter
            logger: Optional structured logger
        """
        self.client = client
        self.cache = cache
        self.metrics = metrics
        self.logger = logger or get_structured_logger('EnrichmentService')

    def enrich(self, params: RequestParams) -> EnrichmentResult:
        """
        Produce the enrichment payload for validated parameters.

        Args:
            params: Validated request parameters

        Returns:
            EnrichmentResult with payload and cache provenance

        Raises:
            UpstreamRateLimitedError: File fetch throttled and nothing cached
            UpstreamFailureError: File fetch failed
        """
        cache_key = build_cache_key(params.file_key, params.depth, params.limit)

        cached = self.cache.get(cache_key)
        if cached is not None:
            return self._result(cache_key, cached, CacheStatus.HIT)

        try:
            file_json = self.client.fetch_file(params.file_key, params.depth)
        except UpstreamRateLimitedError:
            fallback = self.cache.scan_prefix(params.file_key)
            if fallback is None:
                self.logger.warning(
                    'Rate limited with no cached fallback',
                    operation='rate_limit_fallback',
                    cache_key=cache_key
                )
                raise
            return self._result(cache_key, fallback, CacheStatus.FALLBACK_ON_429)

        document = file_json.get('document')
        screens = select_screens(document if isinstance(document, dict) else None, params.limit)
        nodes = self._fetch_nodes(params.file_key, [screen.id for screen in screens])

        payload = EnrichmentPayload(
            file_key=params.file_key,
            file_name=file_json.get('name'),
            last_modified=file_json.get('lastModified'),
            screens=screens,
            nodes=nodes,
        )
        self.cache.put(cache_key, payload)

        return self._result(cache_key, payload, CacheStatus.MISS_SET)

    def _fetch_nodes(self, file_key: str, ids) -> Dict[str, Any]:
        """Fetch node detail, degrading every failure to an empty mapping."""
        if not ids:
            return {}

        try:
            return self.client.fetch_nodes(file_key, ids)
        except RelayError as e:
            self.logger.warning(
                'Node fetch failed, responding without node detail',
                operation='figma_nodes_fetch',
                error_type=type(e).__name__,
                status_code=e.status_code,
                node_count=len(ids)
            )
            if self.metrics is not None:
                self.metrics.emit_node_fetch_degraded()
            return {}

    def _result(
        self,
        cache_key: str,
        payload: EnrichmentPayload,
        status: CacheStatus
    ) -> EnrichmentResult:
        self.logger.log_cache_result(cache_key, status.value, **self.cache.get_cache_stats())
        if self.metrics is not None:
            self.metrics.emit_cache_result(status.value)
        return EnrichmentResult(payload=payload, cache_status=status)
