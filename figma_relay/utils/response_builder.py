"""
Utility for building API Gateway proxy responses.
"""
import json
from typing import Any, Dict, Optional

from figma_relay.exceptions import RelayError

DEFAULT_HEADERS = {
    'Content-Type': 'application/json',
    'Access-Control-Allow-Origin': '*',
}


def _build_response(
    status_code: int,
    body: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    merged_headers = dict(DEFAULT_HEADERS)
    if headers:
        merged_headers.update(headers)

    return {
        'statusCode': status_code,
        'headers': merged_headers,
        'body': json.dumps(body),
    }


def success_response(
    body: Optional[Dict[str, Any]] = None,
    status_code: int = 200
) -> Dict[str, Any]:
    """
    Build success response.

    Args:
        body: Response body dict
        status_code: HTTP status code

    Returns:
        API Gateway response dict
    """
    return _build_response(status_code, body or {})


def error_response(
    status_code: int,
    error: str,
    **details: Any
) -> Dict[str, Any]:
    """
    Build error response.

    Args:
        status_code: HTTP status code
        error: Short error description
        **details: Extra envelope fields (figma_status, figma_body, detail)

    Returns:
        API Gateway response dict
    """
    body = {'error': error}
    body.update(details)
    return _build_response(status_code, body)


def relay_error_response(error: RelayError) -> Dict[str, Any]:
    """
    Build the response for a classified relay error.

    Args:
        error: RelayError raised by the pipeline

    Returns:
        API Gateway response dict with the error's own status and envelope
    """
    headers = None
    if error.status_code == 405:
        headers = {'Allow': 'GET'}
    retry_after = getattr(error, 'retry_after', None)
    if retry_after:
        headers = {'Retry-After': str(retry_after)}

    return _build_response(error.status_code, error.to_response_body(), headers)


def internal_error_response(error: Exception) -> Dict[str, Any]:
    """
    Build 500 response for an unexpected fault.

    Args:
        error: The unhandled exception

    Returns:
        API Gateway response dict with status 500
    """
    return error_response(500, 'Unexpected error', detail=str(error))
