"""
Exception hierarchy for the relay pipeline.

Every error knows its HTTP status and how to render its own error envelope,
so the Lambda handler only has to catch RelayError at the boundary.
"""
from typing import Any, Dict, Optional

# Upstream bodies are echoed back to callers and logged; keep them bounded.
MAX_UPSTREAM_BODY_CHARS = 2000


def truncate_body(body: Optional[str], limit: int = MAX_UPSTREAM_BODY_CHARS) -> Optional[str]:
    """Truncate an upstream response body for logging and echoing."""
    if body is None:
        return None
    if len(body) <= limit:
        return body
    return body[:limit] + '...'


class RelayError(Exception):
    """Base exception for all classified relay failures."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        """
        Initialize relay error.

        Args:
            message: Error message returned in the envelope
            status_code: HTTP status override
        """
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_response_body(self) -> Dict[str, Any]:
        """Render the error envelope."""
        return {'error': self.message}


class MethodNotAllowedError(RelayError):
    """Raised for any inbound method other than GET."""

    status_code = 405

    def __init__(self, method: Optional[str] = None):
        super().__init__('Method not allowed')
        self.method = method


class UnauthorizedError(RelayError):
    """Raised when the relay key is missing, wrong, or not configured."""

    status_code = 401

    def __init__(self, message: str = 'Unauthorized'):
        super().__init__(message)


class ValidationError(RelayError):
    """Raised when a query parameter fails validation."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Query parameter that failed validation
        """
        super().__init__(message)
        self.field = field


class ServerMisconfiguredError(RelayError):
    """Raised when a required server secret is absent."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__('Server misconfigured')
        self.detail = detail

    def to_response_body(self) -> Dict[str, Any]:
        return {'error': self.message, 'detail': self.detail}


class UpstreamRateLimitedError(RelayError):
    """Raised when Figma answers 429 and no cached fallback is available."""

    status_code = 429

    def __init__(self, endpoint: str, retry_after: Optional[str] = None):
        """
        Initialize rate limit error.

        Args:
            endpoint: Upstream endpoint that was throttled ('file' or 'nodes')
            retry_after: Retry-After header value from Figma, if any
        """
        super().__init__('Figma rate limit reached and no cached result is available')
        self.endpoint = endpoint
        self.retry_after = retry_after

    def to_response_body(self) -> Dict[str, Any]:
        body = {'error': self.message, 'figma_status': 429}
        if self.retry_after:
            body['retry_after'] = self.retry_after
        return body


class UpstreamFailureError(RelayError):
    """
    Raised when a Figma call fails for any reason other than rate limiting.

    Mirrors the upstream status when there is one; transport failures and
    unknown statuses map to 502.
    """

    def __init__(
        self,
        endpoint: str,
        upstream_status: Optional[int] = None,
        upstream_body: Optional[str] = None,
        message: Optional[str] = None
    ):
        """
        Initialize upstream failure.

        Args:
            endpoint: Upstream endpoint that failed ('file' or 'nodes')
            upstream_status: HTTP status returned by Figma, None if no response
            upstream_body: Raw upstream body for diagnostics
            message: Error message override
        """
        status_code = upstream_status if upstream_status and upstream_status >= 400 else 502
        super().__init__(message or f'Figma {endpoint} fetch failed', status_code=status_code)
        self.endpoint = endpoint
        self.upstream_status = upstream_status
        self.upstream_body = truncate_body(upstream_body)

    def to_response_body(self) -> Dict[str, Any]:
        return {
            'error': self.message,
            'figma_status': self.upstream_status,
            'figma_body': self.upstream_body,
        }
