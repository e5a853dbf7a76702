"""
Utility functions and services.
"""
from .auth import authorize_relay_key, get_header
from .validators import (
    validate_file_key,
    validate_depth,
    clamp_limit,
    validate_request_params,
)
from .response_builder import (
    success_response,
    error_response,
    relay_error_response,
    internal_error_response,
)

__all__ = [
    'authorize_relay_key',
    'get_header',
    'validate_file_key',
    'validate_depth',
    'clamp_limit',
    'validate_request_params',
    'success_response',
    'error_response',
    'relay_error_response',
    'internal_error_response',
]
