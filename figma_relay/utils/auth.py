"""
Shared-secret authorization for relay callers.
"""
import hmac
from typing import Any, Mapping, Optional

from figma_relay.exceptions import UnauthorizedError

RELAY_KEY_HEADER = 'X-Relay-Key'


def get_header(headers: Optional[Mapping[str, Any]], name: str) -> Optional[str]:
    """
    Look up a header case-insensitively.

    API Gateway HTTP APIs lowercase header names; REST APIs keep the
    caller's casing.
    """
    if not headers:
        return None

    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def authorize_relay_key(provided: Optional[str], configured: Optional[str]) -> None:
    """
    Check the caller's relay key against the configured secret.

    Args:
        provided: Value of the X-Relay-Key header
        configured: Relay key from server configuration

    Raises:
        UnauthorizedError: If no key is configured, none was provided, or
            the two differ
    """
    if not configured:
        raise UnauthorizedError()

    if provided is None:
        raise UnauthorizedError()

    if not hmac.compare_digest(provided.encode('utf-8'), configured.encode('utf-8')):
        raise UnauthorizedError()
