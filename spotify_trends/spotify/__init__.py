"""
Spotify integration package

Three modules live here:

1. Client Module (client.py):
   - Async catalog search over aiohttp with request throttling
   - Maps HTTP and payload failures onto the catalog error taxonomy
   - get_catalog_client() / reset_catalog_client() singleton helpers

2. Models Module (models.py):
   - SpotifyArtist, SpotifyAlbum, SpotifyTrack, SpotifyImage built from API payloads
   - SearchResult for interactive searches, TrendingSet for aggregated trending tracks

3. Languages Module (languages.py):
   - The closed Language enumeration with display names, trending keywords
     and catalog markets

Usage:

    from spotify_trends.spotify import get_catalog_client, Language

    client = get_catalog_client()
    tracks = await client.search_tracks(token, Language.HINDI.trending_queries[0])
"""

from .languages import Language
from .models import (
    SpotifyImage,
    SpotifyArtist,
    SpotifyAlbum,
    SpotifyTrack,
    SearchResult,
    TrendingSet,
)
from .client import CatalogClient, get_catalog_client, reset_catalog_client

__all__ = [
    # Languages
    'Language',

    # Models
    'SpotifyImage',
    'SpotifyArtist',
    'SpotifyAlbum',
    'SpotifyTrack',
    'SearchResult',
    'TrendingSet',

    # Client
    'CatalogClient',
    'get_catalog_client',
    'reset_catalog_client',
]
