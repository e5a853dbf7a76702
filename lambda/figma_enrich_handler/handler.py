"""
HTTP API Lambda handler for Figma screen enrichment.

GET /figma-enrich?file_key=...&depth=1&limit=10

Authorizes the caller with the X-Relay-Key header, validates the query,
then delegates to EnrichmentService. The payload cache and the HTTP
session live at module level so warm invocations reuse them.
"""
from typing import Any, Dict, Optional

import requests
from botocore.exceptions import BotoCoreError

from figma_relay.clients import FigmaClient
from figma_relay.config import RelaySettings
from figma_relay.data_access import ScreenCache
from figma_relay.exceptions import MethodNotAllowedError, RelayError
from figma_relay.services import EnrichmentService
from figma_relay.utils.auth import RELAY_KEY_HEADER, authorize_relay_key, get_header
from figma_relay.utils.metrics_emitter import MetricsEmitter
from figma_relay.utils.response_builder import (
    internal_error_response,
    relay_error_response,
    success_response,
)
from figma_relay.utils.structured_logger import (
    StructuredLogger,
    configure_lambda_logging,
    get_structured_logger,
)
from figma_relay.utils.validators import validate_request_params

configure_lambda_logging()

# Reused across warm invocations
_cache: Optional[ScreenCache] = None
_http_session: Optional[requests.Session] = None
_metrics_emitter: Optional[MetricsEmitter] = None


def get_cache(settings: RelaySettings) -> ScreenCache:
    """Get or create the container-wide payload cache."""
    global _cache
    if _cache is None:
        _cache = ScreenCache(
            ttl_seconds=settings.cache_ttl_seconds,
            max_entries=settings.cache_max_entries
        )
    return _cache


def get_http_session() -> requests.Session:
    """Get or create the container-wide HTTP session."""
    global _http_session
    if _http_session is None:
        _http_session = requests.Session()
    return _http_session


def get_metrics_emitter(
    settings: RelaySettings,
    logger: StructuredLogger
) -> Optional[MetricsEmitter]:
    """
    Get or create the metrics emitter.

    Returns None when metrics are disabled or the CloudWatch client cannot
    be built (no region, bad credentials config); the request then runs
    without metrics and the next invocation tries again.
    """
    global _metrics_emitter
    if not settings.metrics_enabled:
        return None
    if _metrics_emitter is None:
        try:
            _metrics_emitter = MetricsEmitter(namespace=settings.metrics_namespace)
        except BotoCoreError as e:
            logger.warning(
                'Metrics disabled for this invocation',
                operation='get_metrics_emitter',
                error_type=type(e).__name__,
                error_message=str(e)
            )
            return None
    return _metrics_emitter


def get_http_method(event: Dict[str, Any]) -> Optional[str]:
    """Read the HTTP method from a payload 2.0 or 1.0 event."""
    http_context = (event.get('requestContext') or {}).get('http') or {}
    method = http_context.get('method') or event.get('httpMethod')
    return method.upper() if method else None


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda entry point.

    Responses:
    - 200 with payload and `_cache` marker
    - 400 / 401 / 405 before any upstream call
    - 429 when Figma throttles the file fetch and nothing is cached
    - Figma's status (or 502) when the file fetch fails
    - 500 for misconfiguration or unexpected faults
    """
    request_id = getattr(context, 'aws_request_id', None) or \
        (event.get('requestContext') or {}).get('requestId')
    logger = get_structured_logger('FigmaEnrichHandler', request_id=request_id)
    metrics = None

    try:
        method = get_http_method(event)
        logger.info('HTTP request received', operation='lambda_handler', method=method)

        if method != 'GET':
            raise MethodNotAllowedError(method)

        settings = RelaySettings.from_environment()

        authorize_relay_key(
            get_header(event.get('headers'), RELAY_KEY_HEADER),
            settings.relay_key
        )

        params = validate_request_params(event.get('queryStringParameters'))
        logger = logger.bind(file_key=params.file_key)

        metrics = get_metrics_emitter(settings, logger)

        client = FigmaClient(
            settings.figma_token,
            api_base=settings.figma_api_base,
            timeout=settings.request_timeout_seconds,
            session=get_http_session(),
            metrics=metrics,
            logger=logger.bind(component='FigmaClient')
        )
        service = EnrichmentService(
            client,
            get_cache(settings),
            metrics=metrics,
            logger=logger.bind(component='EnrichmentService')
        )

        result = service.enrich(params)
        return success_response(result.to_response_body())

    except RelayError as e:
        if e.status_code >= 500:
            logger.error('Request failed', operation='lambda_handler', error=e, status_code=e.status_code)
        else:
            logger.warning(
                'Request rejected',
                operation='lambda_handler',
                error_type=type(e).__name__,
                status_code=e.status_code,
                field=getattr(e, 'field', None)
            )
        return relay_error_response(e)

    except Exception as e:
        logger.error('Unhandled error', operation='lambda_handler', error=e, exc_info=True)
        return internal_error_response(e)

    finally:
        if metrics is not None:
            metrics.flush()
