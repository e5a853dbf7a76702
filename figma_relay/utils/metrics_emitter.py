"""
CloudWatch metrics emitter for the relay endpoint.

Tracks cache provenance, upstream latency and upstream errors. Metrics are
buffered during an invocation and flushed once at the end.
"""

import logging
import time
from typing import Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class MetricsEmitter:
    """
    Emits CloudWatch metrics for relay operations.

    Emission failures are logged and swallowed; metrics never fail a request.
    """

    def __init__(
        self,
        namespace: str = 'FigmaRelay/Enrich',
        cloudwatch_client=None,
        buffer_size: int = 20
    ):
        """
        Initialize metrics emitter.

        Args:
            namespace: CloudWatch namespace for metrics
            cloudwatch_client: Optional CloudWatch client for testing
            buffer_size: Number of metrics batched per put_metric_data call
        """
        self.namespace = namespace
        self.cloudwatch = cloudwatch_client or boto3.client('cloudwatch')
        self._metric_buffer: List[Dict] = []
        self._buffer_size = buffer_size

    def emit_cache_result(self, status: str) -> None:
        """
        Emit metric for the cache provenance of a served payload.

        Args:
            status: hit, miss_set or fallback_on_429
        """
        self._add_metric(
            metric_name='CacheResult',
            value=1,
            unit='Count',
            dimensions=[{'Name': 'Status', 'Value': status}]
        )

    def emit_upstream_latency(
        self,
        endpoint: str,
        status_code: Optional[int],
        latency_ms: float
    ) -> None:
        """
        Emit metric for an upstream Figma call.

        Args:
            endpoint: 'file' or 'nodes'
            status_code: HTTP status from Figma, None for transport errors
            latency_ms: Call duration in milliseconds
        """
        self._add_metric(
            metric_name='UpstreamLatency',
            value=latency_ms,
            unit='Milliseconds',
            dimensions=[
                {'Name': 'Endpoint', 'Value': endpoint},
                {'Name': 'StatusCode', 'Value': str(status_code or 'none')}
            ]
        )

    def emit_upstream_error(self, endpoint: str, status_code: Optional[int]) -> None:
        """
        Emit metric for a failed upstream call.

        Args:
            endpoint: 'file' or 'nodes'
            status_code: HTTP status from Figma, None for transport errors
        """
        self._add_metric(
            metric_name='UpstreamErrors',
            value=1,
            unit='Count',
            dimensions=[
                {'Name': 'Endpoint', 'Value': endpoint},
                {'Name': 'StatusCode', 'Value': str(status_code or 'none')}
            ]
        )

    def emit_node_fetch_degraded(self) -> None:
        """Emit metric when node detail was replaced by an empty mapping."""
        self._add_metric(
            metric_name='NodeFetchDegraded',
            value=1,
            unit='Count',
            dimensions=[]
        )

    def _add_metric(
        self,
        metric_name: str,
        value: float,
        unit: str,
        dimensions: List[Dict]
    ) -> None:
        """
        Add metric to buffer and flush if needed.

        Args:
            metric_name: Name of the metric
            value: Metric value
            unit: Metric unit
            dimensions: Metric dimensions
        """
        self._metric_buffer.append({
            'MetricName': metric_name,
            'Value': value,
            'Unit': unit,
            'Dimensions': dimensions,
            'Timestamp': time.time()
        })

        if len(self._metric_buffer) >= self._buffer_size:
            self.flush()

    def flush(self) -> None:
        """Flush buffered metrics to CloudWatch."""
        if not self._metric_buffer:
            return

        batch = self._metric_buffer
        self._metric_buffer = []

        try:
            self.cloudwatch.put_metric_data(
                Namespace=self.namespace,
                MetricData=batch
            )
        except (ClientError, BotoCoreError) as e:
            logger.warning(
                f'Failed to emit metrics: {e}',
                extra={'namespace': self.namespace, 'metric_count': len(batch)}
            )
