"""
Pytest configuration and fixtures.
"""
import json
import os
import sys
from unittest.mock import Mock

import pytest

# Make the package and the Lambda handler (as `handler`) importable
REPO_ROOT = os.path.join(os.path.dirname(__file__), '..')
sys.path.insert(0, REPO_ROOT)
sys.path.insert(0, os.path.join(REPO_ROOT, 'lambda', 'figma_enrich_handler'))

from figma_relay.config import RelaySettings


class FakeClock:
    """Manually advanced time source for cache tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(status_code=200, json_body=None, text=None, headers=None):
    """Build a mock requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.headers = headers or {}

    if json_body is not None:
        response.json.return_value = json_body
        response.text = text if text is not None else json.dumps(json_body)
    else:
        response.json.side_effect = ValueError('No JSON object could be decoded')
        response.text = text or ''

    return response


def make_file_json(canvases=None, name='Checkout flow', last_modified='2024-05-01T10:00:00Z'):
    """Build a Figma file response with the given canvases."""
    return {
        'name': name,
        'lastModified': last_modified,
        'document': {
            'id': '0:0',
            'type': 'DOCUMENT',
            'children': canvases if canvases is not None else [],
        },
    }


def make_canvas(canvas_id, children):
    return {'id': canvas_id, 'name': f'Page {canvas_id}', 'type': 'CANVAS', 'children': children}


def make_node(node_id, node_type='FRAME', name=None):
    return {'id': node_id, 'name': name or f'Node {node_id}', 'type': node_type}


@pytest.fixture(scope="session", autouse=True)
def env_vars():
    """Set up environment variables for tests."""
    os.environ["RELAY_KEY"] = "relay-secret"
    os.environ["FIGMA_PAT"] = "figd_test_token"
    os.environ["LOG_LEVEL"] = "INFO"
    os.environ["METRICS_ENABLED"] = "false"


@pytest.fixture
def clock():
    """Manually advanced clock."""
    return FakeClock()


@pytest.fixture
def settings():
    """Explicit relay settings."""
    return RelaySettings(
        relay_key='relay-secret',
        figma_token='figd_test_token',
        figma_api_base='https://api.figma.test/v1',
        request_timeout_seconds=5.0,
    )


@pytest.fixture
def mock_session():
    """Mock requests session."""
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def sample_file_json():
    """A file with two canvases: three frames plus a text node, then two sections."""
    return make_file_json([
        make_canvas('1:0', [
            make_node('1:1'),
            make_node('1:2'),
            make_node('1:3', 'TEXT'),
            make_node('1:4'),
        ]),
        make_canvas('2:0', [
            make_node('2:1', 'SECTION'),
            make_node('2:2', 'SECTION'),
        ]),
    ])
