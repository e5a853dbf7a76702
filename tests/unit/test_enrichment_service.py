"""
Unit tests for the enrichment pipeline.

Uses a mocked FigmaClient and a real ScreenCache driven by a fake clock.
"""
from unittest.mock import Mock

import pytest
from conftest import make_canvas, make_file_json

from figma_relay.clients import FigmaClient
from figma_relay.data_access import ScreenCache, build_cache_key
from figma_relay.exceptions import UpstreamFailureError, UpstreamRateLimitedError
from figma_relay.models import CacheStatus, RequestParams
from figma_relay.services import EnrichmentService

NODES = {'1:1': {'document': {'id': '1:1', 'type': 'FRAME'}}}


@pytest.fixture
def mock_client(sample_file_json):
    client = Mock(spec=FigmaClient)
    client.fetch_file.return_value = sample_file_json
    client.fetch_nodes.return_value = NODES
    return client


@pytest.fixture
def cache(clock):
    return ScreenCache(ttl_seconds=600, clock=clock)


@pytest.fixture
def service(mock_client, cache):
    return EnrichmentService(mock_client, cache)


class TestCacheMiss:
    """Test the full fetch path."""

    def test_miss_fetches_and_caches(self, service, mock_client, cache):
        """Test a miss fetches file and nodes, then stores the payload."""
        result = service.enrich(RequestParams('abc', '1', 4))

        assert result.cache_status is CacheStatus.MISS_SET
        mock_client.fetch_file.assert_called_once_with('abc', '1')
        mock_client.fetch_nodes.assert_called_once_with('abc', ['1:1', '1:2', '1:4', '2:1'])

        payload = result.payload
        assert payload.file_key == 'abc'
        assert payload.file_name == 'Checkout flow'
        assert payload.last_modified == '2024-05-01T10:00:00Z'
        assert [s.id for s in payload.screens] == ['1:1', '1:2', '1:4', '2:1']
        assert dict(payload.nodes) == NODES

        assert cache.get(build_cache_key('abc', '1', 4)) is payload

    def test_response_body_shape(self, service):
        """Test the rendered body carries the payload and cache marker."""
        body = service.enrich(RequestParams('abc', '1', 1)).to_response_body()

        assert body == {
            'file_key': 'abc',
            'file_name': 'Checkout flow',
            'last_modified': '2024-05-01T10:00:00Z',
            'screens': [{'id': '1:1', 'name': 'Node 1:1'}],
            'nodes': NODES,
            '_cache': 'miss_set',
        }

    def test_no_screens_skips_node_fetch(self, mock_client, service):
        """Test the node call is skipped when no screens are found."""
        mock_client.fetch_file.return_value = make_file_json([make_canvas('1:0', [])])

        result = service.enrich(RequestParams('abc', '1', 10))

        mock_client.fetch_nodes.assert_not_called()
        assert result.payload.screens == ()
        assert dict(result.payload.nodes) == {}

    def test_missing_document(self, mock_client, service):
        """Test a file response without a document yields no screens."""
        mock_client.fetch_file.return_value = {'name': 'Empty'}

        result = service.enrich(RequestParams('abc', '1', 10))

        assert result.payload.screens == ()
        assert result.payload.file_name == 'Empty'


class TestCacheHit:
    """Test cached responses."""

    def test_second_request_hits_cache(self, service, mock_client):
        """Test identical requests within TTL fetch once and match."""
        first = service.enrich(RequestParams('abc', '2', 5))
        second = service.enrich(RequestParams('abc', '2', 5))

        assert second.cache_status is CacheStatus.HIT
        assert second.payload is first.payload
        assert mock_client.fetch_file.call_count == 1

    def test_expired_entry_refetches(self, service, mock_client, clock):
        """Test a request after TTL triggers a fresh upstream fetch."""
        service.enrich(RequestParams('abc', '1', 10))
        clock.advance(601)

        result = service.enrich(RequestParams('abc', '1', 10))

        assert result.cache_status is CacheStatus.MISS_SET
        assert mock_client.fetch_file.call_count == 2

    def test_different_limit_is_a_different_key(self, service, mock_client):
        """Test depth/limit are part of the cache key."""
        service.enrich(RequestParams('abc', '1', 10))
        service.enrich(RequestParams('abc', '1', 11))

        assert mock_client.fetch_file.call_count == 2


class TestRateLimitFallback:
    """Test 429 handling on the file fetch."""

    def test_fallback_to_other_depth_and_limit(self, service, mock_client):
        """Test a cached entry for the same file is served on 429."""
        cached = service.enrich(RequestParams('abc', '2', 3)).payload
        mock_client.fetch_file.side_effect = UpstreamRateLimitedError('file')

        result = service.enrich(RequestParams('abc', '1', 10))

        assert result.cache_status is CacheStatus.FALLBACK_ON_429
        assert result.payload is cached

    def test_fallback_is_not_cached_under_new_key(self, service, mock_client, cache):
        """Test serving a fallback does not store it under the requested key."""
        service.enrich(RequestParams('abc', '2', 3))
        mock_client.fetch_file.side_effect = UpstreamRateLimitedError('file')

        service.enrich(RequestParams('abc', '1', 10))

        assert build_cache_key('abc', '1', 10) not in cache

    def test_no_fallback_raises(self, service, mock_client):
        """Test 429 with nothing cached for the file propagates."""
        mock_client.fetch_file.side_effect = UpstreamRateLimitedError('file')

        with pytest.raises(UpstreamRateLimitedError):
            service.enrich(RequestParams('abc', '1', 10))

    def test_other_file_is_not_a_fallback(self, service, mock_client):
        """Test entries for another file key are never served."""
        service.enrich(RequestParams('other', '1', 10))
        mock_client.fetch_file.side_effect = UpstreamRateLimitedError('file')

        with pytest.raises(UpstreamRateLimitedError):
            service.enrich(RequestParams('abc', '1', 10))

    def test_expired_entry_is_not_a_fallback(self, service, mock_client, clock):
        """Test stale entries are not served on 429."""
        service.enrich(RequestParams('abc', '2', 3))
        clock.advance(601)
        mock_client.fetch_file.side_effect = UpstreamRateLimitedError('file')

        with pytest.raises(UpstreamRateLimitedError):
            service.enrich(RequestParams('abc', '1', 10))


class TestFailures:
    """Test upstream failure propagation and degradation."""

    def test_file_failure_propagates_and_is_not_cached(self, service, mock_client, cache):
        """Test a failed file fetch raises and caches nothing."""
        mock_client.fetch_file.side_effect = UpstreamFailureError('file', 404, 'Not found')

        with pytest.raises(UpstreamFailureError):
            service.enrich(RequestParams('abc', '1', 10))

        assert len(cache) == 0
        mock_client.fetch_nodes.assert_not_called()

    @pytest.mark.parametrize('error', [
        UpstreamRateLimitedError('nodes'),
        UpstreamFailureError('nodes', 500, 'boom'),
        UpstreamFailureError('nodes'),
    ])
    def test_node_failure_degrades_to_empty_nodes(self, mock_client, cache, error):
        """Test node-fetch failures still succeed with empty nodes."""
        metrics = Mock()
        service = EnrichmentService(mock_client, cache, metrics=metrics)
        mock_client.fetch_nodes.side_effect = error

        result = service.enrich(RequestParams('abc', '1', 10))

        assert result.cache_status is CacheStatus.MISS_SET
        assert dict(result.payload.nodes) == {}
        assert len(result.payload.screens) == 5
        metrics.emit_node_fetch_degraded.assert_called_once()


class TestMetrics:
    """Test cache metrics emission."""

    def test_cache_results_emitted(self, mock_client, cache):
        """Test each served payload emits its provenance."""
        metrics = Mock()
        service = EnrichmentService(mock_client, cache, metrics=metrics)

        service.enrich(RequestParams('abc', '1', 10))
        service.enrich(RequestParams('abc', '1', 10))

        statuses = [c.args[0] for c in metrics.emit_cache_result.call_args_list]
        assert statuses == ['miss_set', 'hit']

    def test_cache_stats_logged_with_result(self, mock_client, cache):
        """Test the cache counters travel with each cache provenance log."""
        logger = Mock()
        service = EnrichmentService(mock_client, cache, logger=logger)

        service.enrich(RequestParams('abc', '1', 10))
        service.enrich(RequestParams('abc', '1', 10))

        last_call = logger.log_cache_result.call_args
        assert last_call.args[1] == 'hit'
        assert last_call.kwargs['cache_hits'] == 1
        assert last_call.kwargs['cache_misses'] == 1
        assert last_call.kwargs['size'] == 1
