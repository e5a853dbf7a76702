"""
Input validation utilities for relay query parameters.
"""
import re
from typing import Any, Mapping, Optional

from figma_relay.exceptions import ValidationError
from figma_relay.models import RequestParams

VALID_DEPTHS = ('1', '2', '3')
DEFAULT_DEPTH = '1'

DEFAULT_LIMIT = 10
MIN_LIMIT = 1
MAX_LIMIT = 25

# Leading integer, as parseInt reads it: "3.5" -> 3, "5abc" -> 5
LEADING_INT_PATTERN = re.compile(r'\s*([+-]?\d+)')


def validate_file_key(file_key: Optional[str]) -> str:
    """
    Validate the Figma file key.

    Args:
        file_key: Raw file_key query value

    Returns:
        File key with surrounding whitespace removed

    Raises:
        ValidationError: If the file key is missing or blank
    """
    if file_key is None or not str(file_key).strip():
        raise ValidationError('Missing file_key', field='file_key')
    return str(file_key).strip()


def validate_depth(depth: Optional[str]) -> str:
    """
    Validate document depth.

    Args:
        depth: Raw depth query value, defaults to "1" when absent

    Returns:
        Depth string

    Raises:
        ValidationError: If depth is not exactly "1", "2" or "3"
    """
    if depth is None or depth == '':
        return DEFAULT_DEPTH

    if depth not in VALID_DEPTHS:
        raise ValidationError(
            f'depth must be one of: {", ".join(VALID_DEPTHS)}',
            field='depth'
        )
    return depth


def clamp_limit(limit: Any) -> int:
    """
    Parse and clamp the screen limit into [MIN_LIMIT, MAX_LIMIT].

    The leading integer of the value is used; values with no leading
    integer fall back to DEFAULT_LIMIT. Clamping is silent.
    """
    match = LEADING_INT_PATTERN.match(str(limit)) if limit is not None else None
    value = int(match.group(1)) if match else DEFAULT_LIMIT

    return max(MIN_LIMIT, min(value, MAX_LIMIT))


def validate_request_params(query: Optional[Mapping[str, Any]]) -> RequestParams:
    """
    Validate and normalize query parameters.

    Args:
        query: Query string parameters (may be None)

    Returns:
        Normalized RequestParams

    Raises:
        ValidationError: If file_key is missing or depth is invalid
    """
    query = query or {}

    return RequestParams(
        file_key=validate_file_key(query.get('file_key')),
        depth=validate_depth(query.get('depth')),
        limit=clamp_limit(query.get('limit')),
    )
