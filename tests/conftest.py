"""Test configuration and fixtures"""

import pytest
import tempfile
from pathlib import Path

from fakes import FakeBroker, FakeCatalog
from spotify_trends.config.settings import DEFAULT_ROSTER
from spotify_trends.trending.aggregator import TrendingAggregator


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def broker():
    """Broker that already holds a token"""
    return FakeBroker()


@pytest.fixture
def catalog():
    """Empty scripted catalog; tests fill in results"""
    return FakeCatalog()


@pytest.fixture
def roster_names():
    return list(DEFAULT_ROSTER)


@pytest.fixture
def make_aggregator():
    """Aggregator factory with fixed fan-out parameters independent of user config"""
    def _factory(catalog, broker, **overrides):
        options = dict(
            per_query_limit=10,
            per_query_take=5,
            capacity=20,
            use_market=True,
            recent_years_only=False,
            strict_language=False,
        )
        options.update(overrides)
        return TrendingAggregator(client=catalog, broker=broker, **options)
    return _factory


@pytest.fixture
def sample_search_payload():
    """Combined search response with one artist and one track"""
    return {
        'artists': {
            'items': [{
                'id': 'artist_123',
                'name': 'Test Artist',
                'popularity': 77,
                'images': [{'url': 'https://i.scdn.co/image/artist', 'height': 640, 'width': 640}],
                'followers': {'total': 1234567},
            }]
        },
        'tracks': {
            'items': [{
                'id': 'track_123',
                'name': 'Test Song',
                'popularity': 75,
                'preview_url': None,
                'external_urls': {'spotify': 'https://open.spotify.com/track/track_123'},
                'artists': [{'id': 'artist_123', 'name': 'Test Artist'}],
                'album': {
                    'id': 'album_123',
                    'name': 'Test Album',
                    'release_date': '2023-01-01',
                    'images': [{'url': 'https://i.scdn.co/image/album', 'height': 300, 'width': 300}],
                },
            }]
        },
    }
