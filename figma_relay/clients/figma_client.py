"""
Figma REST API client.

Performs the two upstream calls of the relay (file metadata, then node
detail) and classifies every response into success, rate limited, or
failure. No retries are attempted here.
"""

import time
from typing import Any, Dict, Iterable, Optional
from urllib.parse import quote

import requests

from figma_relay.config.settings import DEFAULT_FIGMA_API_BASE, DEFAULT_REQUEST_TIMEOUT_SECONDS
from figma_relay.exceptions import (
    ServerMisconfiguredError,
    UpstreamFailureError,
    UpstreamRateLimitedError,
    truncate_body,
)
from figma_relay.utils.metrics_emitter import MetricsEmitter
from figma_relay.utils.structured_logger import (
    LoggingContext,
    StructuredLogger,
    get_structured_logger,
)

FILE_ENDPOINT = 'file'
NODES_ENDPOINT = 'nodes'

TOKEN_HEADER = 'X-Figma-Token'


class FigmaClient:
    """
    Thin client over a requests.Session for the Figma file endpoints.

    Raises:
        ServerMisconfiguredError: At construction, if no token is configured
    """

    def __init__(
        self,
        token: Optional[str],
        api_base: str = DEFAULT_FIGMA_API_BASE,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
        metrics: Optional[MetricsEmitter] = None,
        logger: Optional[StructuredLogger] = None
    ):
        """
        Initialize Figma client.

        Args:
            token: Figma personal access token
            api_base: Base URL of the Figma REST API
            timeout: Per-call timeout in seconds
            session: Optional requests session for testing
            metrics: Optional metrics emitter
            logger: Optional structured logger
        """
        if not token:
            raise ServerMisconfiguredError('FIGMA_PAT is not configured')

        self.api_base = api_base.rstrip('/')
        self.timeout = timeout
        self.metrics = metrics
        self.logger = logger or get_structured_logger('FigmaClient')

        self.session = session or requests.Session()
        self.session.headers.update({
            TOKEN_HEADER: token,
            'Accept': 'application/json',
        })

    def fetch_file(self, file_key: str, depth: str) -> Dict[str, Any]:
        """
        Fetch file metadata and its document tree down to `depth`.

        Args:
            file_key: Figma file key
            depth: Traversal depth ("1", "2" or "3")

        Returns:
            Parsed file JSON

        Raises:
            UpstreamRateLimitedError: Figma answered 429
            UpstreamFailureError: Any other failure
        """
        return self._get(
            FILE_ENDPOINT,
            f'/files/{quote(file_key, safe="")}',
            params={'depth': depth}
        )

    def fetch_nodes(self, file_key: str, ids: Iterable[str]) -> Dict[str, Any]:
        """
        Fetch node detail for the given node ids.

        Args:
            file_key: Figma file key
            ids: Node ids; no call is made when empty

        Returns:
            Mapping from node id to node detail (empty when Figma sends none)

        Raises:
            UpstreamRateLimitedError: Figma answered 429
            UpstreamFailureError: Any other failure
        """
        ids = list(ids)
        if not ids:
            return {}

        data = self._get(
            NODES_ENDPOINT,
            f'/files/{quote(file_key, safe="")}/nodes',
            params={'ids': ','.join(ids)}
        )
        nodes = data.get('nodes')
        return nodes if isinstance(nodes, dict) else {}

    def _get(self, endpoint: str, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        url = f'{self.api_base}{path}'
        start_time = time.time()
        status_code = None

        try:
            with LoggingContext(self.logger, f'figma_{endpoint}_fetch', url=url, params=params):
                response = self.session.get(url, params=params, timeout=self.timeout)
                status_code = response.status_code
        except requests.RequestException as e:
            self._record(endpoint, None, start_time, failed=True)
            raise UpstreamFailureError(endpoint, upstream_body=str(e)) from e

        if status_code == 429:
            self._record(endpoint, status_code, start_time, failed=True)
            self.logger.warning(
                f'Figma {endpoint} fetch rate limited',
                operation=f'figma_{endpoint}_fetch',
                retry_after=response.headers.get('Retry-After')
            )
            raise UpstreamRateLimitedError(endpoint, response.headers.get('Retry-After'))

        if not 200 <= status_code < 300:
            self._record(endpoint, status_code, start_time, failed=True)
            self.logger.warning(
                f'Figma {endpoint} fetch failed',
                operation=f'figma_{endpoint}_fetch',
                status_code=status_code,
                body=truncate_body(response.text)
            )
            raise UpstreamFailureError(endpoint, status_code, response.text)

        try:
            data = response.json()
        except ValueError:
            data = None

        if not isinstance(data, dict):
            self._record(endpoint, status_code, start_time, failed=True)
            raise UpstreamFailureError(
                endpoint,
                status_code,
                response.text,
                message=f'Figma {endpoint} response was not valid JSON'
            )

        self._record(endpoint, status_code, start_time)
        return data

    def _record(
        self,
        endpoint: str,
        status_code: Optional[int],
        start_time: float,
        failed: bool = False
    ) -> None:
        if self.metrics is None:
            return

        latency_ms = (time.time() - start_time) * 1000
        self.metrics.emit_upstream_latency(endpoint, status_code, latency_ms)
        if failed:
            self.metrics.emit_upstream_error(endpoint, status_code)
