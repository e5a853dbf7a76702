"""
Structured JSON logging for the relay Lambda.

This module provides a structured logger that outputs JSON-formatted
logs with correlation IDs, context, and standardized fields for
CloudWatch Logs Insights queries.
"""

import json
import logging
import os
import time
from datetime import datetime, timezone
from typing import Any, Optional


class StructuredLogger:
    """
    Structured JSON logger for the relay pipeline.

    Outputs logs in JSON format with:
    - Timestamp (ISO 8601)
    - Log level
    - Correlation IDs (requestId, fileKey)
    - Component and operation
    - Message and additional context
    """

    def __init__(
        self,
        component: str,
        request_id: Optional[str] = None,
        file_key: Optional[str] = None
    ):
        """
        Initialize structured logger.

        Args:
            component: Component name (e.g., 'FigmaEnrichHandler', 'FigmaClient')
            request_id: Request identifier from the Lambda context
            file_key: Figma file key for correlation
        """
        self.component = component
        self.request_id = request_id
        self.file_key = file_key
        self.logger = logging.getLogger(component)

        log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.logger.setLevel(getattr(logging, log_level, logging.INFO))

    def bind(self, **kwargs) -> 'StructuredLogger':
        """Return a copy of this logger with extra correlation IDs set."""
        return StructuredLogger(
            component=kwargs.get('component', self.component),
            request_id=kwargs.get('request_id', self.request_id),
            file_key=kwargs.get('file_key', self.file_key)
        )

    def _format_log(
        self,
        level: str,
        message: str,
        operation: Optional[str] = None,
        **kwargs
    ) -> str:
        """
        Format log entry as JSON.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR)
            message: Log message
            operation: Operation being performed
            **kwargs: Additional context fields

        Returns:
            JSON-formatted log string
        """
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': level,
            'component': self.component,
            'message': message
        }

        if self.request_id:
            log_entry['requestId'] = self.request_id
        if self.file_key:
            log_entry['fileKey'] = self.file_key

        if operation:
            log_entry['operation'] = operation

        if kwargs:
            log_entry['context'] = kwargs

        return json.dumps(log_entry, default=str)

    def debug(self, message: str, operation: Optional[str] = None, **kwargs) -> None:
        """Log debug message."""
        self.logger.debug(self._format_log('DEBUG', message, operation, **kwargs))

    def info(self, message: str, operation: Optional[str] = None, **kwargs) -> None:
        """Log info message."""
        self.logger.info(self._format_log('INFO', message, operation, **kwargs))

    def warning(self, message: str, operation: Optional[str] = None, **kwargs) -> None:
        """Log warning message."""
        self.logger.warning(self._format_log('WARNING', message, operation, **kwargs))

    def error(
        self,
        message: str,
        operation: Optional[str] = None,
        error: Optional[Exception] = None,
        exc_info: bool = False,
        **kwargs
    ) -> None:
        """
        Log error message.

        Args:
            message: Log message
            operation: Operation being performed
            error: Exception object if available
            exc_info: Attach the current traceback
            **kwargs: Additional context
        """
        if error:
            kwargs['error_type'] = type(error).__name__
            kwargs['error_message'] = str(error)

        self.logger.error(
            self._format_log('ERROR', message, operation, **kwargs),
            exc_info=exc_info
        )

    def log_cache_result(self, cache_key: str, status: str, **stats) -> None:
        """
        Log cache provenance at INFO level.

        Args:
            cache_key: Composite cache key
            status: hit, miss_set or fallback_on_429
            **stats: Cache counters, as returned by ScreenCache.get_cache_stats
        """
        self.info(
            f'Cache {status}',
            operation='cache_lookup',
            cache_key=cache_key,
            cache_status=status,
            **stats
        )

    def log_performance(self, operation: str, duration_ms: float, **kwargs) -> None:
        """
        Log performance metric at DEBUG level.

        Args:
            operation: Operation name
            duration_ms: Duration in milliseconds
            **kwargs: Additional context
        """
        self.debug(
            f'Performance: {operation}',
            operation='performance',
            operation_name=operation,
            duration_ms=duration_ms,
            **kwargs
        )


class LoggingContext:
    """
    Context manager for logging operation duration.

    Logs operation start, end, and duration. Exceptions are logged as
    failures and re-raised.
    """

    def __init__(self, logger: StructuredLogger, operation: str, **kwargs):
        self.logger = logger
        self.operation = operation
        self.context = kwargs
        self.start_time: Optional[float] = None
        self.duration_ms: Optional[float] = None

    def __enter__(self):
        self.start_time = time.time()
        self.logger.debug(
            f'Starting operation: {self.operation}',
            operation=self.operation,
            **self.context
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is None:
            return False

        self.duration_ms = (time.time() - self.start_time) * 1000

        if exc_type is not None:
            self.logger.warning(
                f'Operation failed: {self.operation}',
                operation=self.operation,
                duration_ms=self.duration_ms,
                error_type=exc_type.__name__,
                error_message=str(exc_val),
                **self.context
            )
        else:
            self.logger.log_performance(self.operation, self.duration_ms, **self.context)
        return False


def get_structured_logger(
    component: str,
    request_id: Optional[str] = None,
    file_key: Optional[str] = None
) -> StructuredLogger:
    """
    Factory function for creating StructuredLogger instances.

    Args:
        component: Name of the component (e.g., 'FigmaEnrichHandler')
        request_id: Optional request ID from the Lambda context
        file_key: Optional Figma file key for context

    Returns:
        Configured StructuredLogger instance

    Example:
        >>> logger = get_structured_logger('FigmaClient', request_id='abc-123')
        >>> logger.info('Fetching file')
    """
    return StructuredLogger(
        component=component,
        request_id=request_id,
        file_key=file_key
    )


def configure_lambda_logging():
    """
    Configure logging for the Lambda environment.

    Sets up the root logger to output bare messages, since every message is
    already a JSON document. Should be called at module level in handlers.
    """
    log_level = os.getenv('LOG_LEVEL', 'INFO').upper()

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(message)s',
        force=True
    )

    # Keep SDK and HTTP client chatter out unless explicitly debugging
    if log_level != 'DEBUG':
        logging.getLogger('boto3').setLevel(logging.WARNING)
        logging.getLogger('botocore').setLevel(logging.WARNING)
        logging.getLogger('urllib3').setLevel(logging.WARNING)
