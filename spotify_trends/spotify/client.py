"""
Spotify catalog search client

This module is the only place that talks to the Spotify `/v1/search` endpoint.
Every method takes the bearer token explicitly: token ownership stays with the
CredentialBroker and the callers decide when a new token is needed.

Architecture Overview:

1. **Rate Limiting Layer**: asyncio-throttle caps outgoing requests per second
   - Configurable through `network.requests_per_second`
   - A single wait-and-retry on HTTP 429 honouring Retry-After

2. **Error Mapping**: Transport and payload problems become catalog errors
   - HTTP 401 -> AuthExpired (never retried here)
   - Other non-2xx, connection errors, timeouts -> NetworkError
   - Unexpected JSON shape -> DecodingError

3. **Failure Policy per Operation**:
   - search_artist / search_tracks are used by fan-out refreshes, so network
     and decoding failures are logged and collapse to None / []
   - combined_search backs the interactive search box and raises SearchError
   - AuthExpired always propagates; it is the caller's signal to re-acquire

Query encoding is left to aiohttp: parameters are passed as a mapping and
percent-encoded by the HTTP layer, so non-Latin keywords and spaces are safe.

Usage Examples:

    client = get_catalog_client()
    tracks = await client.search_tracks(token, "bollywood", limit=10, market="IN")
    artist = await client.search_artist(token, "Dua Lipa")
    result = await client.combined_search(token, "weeknd")
"""

from typing import List, Optional, Dict, Any

import asyncio
import aiohttp
from asyncio_throttle import Throttler

from ..config.settings import get_settings
from ..exceptions import AuthExpired, DecodingError, NetworkError, SearchError
from ..utils.logger import get_logger
from .models import SearchResult, SpotifyArtist, SpotifyTrack


# Upper bound for a server-requested Retry-After wait
MAX_RETRY_AFTER = 30


class CatalogClient:
    """
    Async client for the Spotify catalog search endpoint

    The HTTP session is created lazily on first use so that it binds to the
    running event loop. Tests and callers that manage their own session can
    inject one.

    Attributes:
        base_url: API root, e.g. https://api.spotify.com/v1
        requests_made: Number of HTTP requests issued (retries included)
    """

    def __init__(
        self,
        base_url: str = "https://api.spotify.com/v1",
        session: Optional[aiohttp.ClientSession] = None,
        requests_per_second: int = 10,
        timeout: float = 30,
        user_agent: str = "spotify-trends/1.0",
    ):
        """
        Args:
            base_url: API root URL
            session: Shared aiohttp session; one is created lazily when omitted
            requests_per_second: Client-side request cap
            timeout: Total request timeout in seconds for a lazily created session
            user_agent: User-Agent header sent with every request
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.user_agent = user_agent
        self.logger = get_logger(__name__)

        self._session = session
        self._owns_session = session is None
        self._throttler = Throttler(rate_limit=max(1, requests_per_second), period=1.0)
        self.requests_made = 0

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it"""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _search(
        self,
        token: str,
        query: str,
        types: str,
        limit: int,
        market: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Issue one GET /search and return the decoded JSON body

        Args:
            token: Bearer token
            query: Raw query text (encoded by aiohttp)
            types: Comma separated result types ("artist", "track", "artist,track")
            limit: Maximum items per type
            market: Optional ISO market code

        Returns:
            Decoded JSON object

        Raises:
            AuthExpired: HTTP 401
            NetworkError: Transport failure or non-2xx status
            DecodingError: Body is not a JSON object
        """
        params = {'q': query, 'type': types, 'limit': str(limit)}
        if market:
            params['market'] = market
        headers = {
            'Authorization': f'Bearer {token}',
            'User-Agent': self.user_agent,
        }
        url = f"{self.base_url}/search"
        session = await self._get_session()

        retried = False
        while True:
            try:
                async with self._throttler:
                    self.requests_made += 1
                    async with session.get(url, params=params, headers=headers) as response:
                        status = response.status

                        if status == 401:
                            raise AuthExpired(details={'query': query, 'status': status})

                        if status == 429 and not retried:
                            retry_after = self._retry_after(response.headers)
                            self.logger.warning(f"Rate limited, waiting {retry_after} seconds...")
                            retried = True
                        elif not 200 <= status < 300:
                            raise NetworkError(
                                f"Search request failed with HTTP {status}",
                                details={'query': query, 'status': status}
                            )
                        else:
                            try:
                                payload = await response.json(content_type=None)
                            except ValueError as e:
                                raise DecodingError(
                                    "Search response is not valid JSON",
                                    details={'query': query}
                                ) from e
                            if not isinstance(payload, dict):
                                raise DecodingError(
                                    "Search response is not a JSON object",
                                    details={'query': query}
                                )
                            return payload
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise NetworkError(f"Network error: {e}", details={'query': query}) from e

            await asyncio.sleep(retry_after)

    @staticmethod
    def _retry_after(headers) -> float:
        try:
            value = float(headers.get('Retry-After', 1))
        except (TypeError, ValueError):
            value = 1.0
        return min(max(value, 0.0), MAX_RETRY_AFTER)

    async def search_artist(
        self,
        token: str,
        name: str,
        market: Optional[str] = None,
    ) -> Optional[SpotifyArtist]:
        """
        Look up an artist by name and return the first match

        Args:
            token: Bearer token
            name: Artist name as typed in the roster
            market: Optional ISO market code

        Returns:
            First matching SpotifyArtist, or None when there is no match or
            the request failed

        Raises:
            AuthExpired: The token was rejected
        """
        try:
            data = await self._search(token, name, 'artist', 1, market)
            items = data['artists']['items']
            return SpotifyArtist.from_spotify_data(items[0]) if items else None
        except AuthExpired:
            raise
        except (NetworkError, DecodingError) as e:
            self.logger.warning(f"Artist search failed for '{name}': {e}")
            return None
        except (KeyError, TypeError, IndexError) as e:
            self.logger.warning(f"Unexpected artist search payload for '{name}': {e}")
            return None

    async def search_tracks(
        self,
        token: str,
        query: str,
        limit: int = 10,
        market: Optional[str] = None,
    ) -> List[SpotifyTrack]:
        """
        Search tracks for a keyword

        Args:
            token: Bearer token
            query: Keyword, optionally with Spotify search filters (year:...)
            limit: Maximum number of tracks
            market: Optional ISO market code

        Returns:
            Up to `limit` tracks in Spotify's relevance order; an empty list
            when the request failed

        Raises:
            AuthExpired: The token was rejected
        """
        try:
            data = await self._search(token, query, 'track', limit, market)
            items = data['tracks']['items']
            return [SpotifyTrack.from_spotify_data(item) for item in items if item][:limit]
        except AuthExpired:
            raise
        except (NetworkError, DecodingError) as e:
            self.logger.warning(f"Track search failed for '{query}': {e}")
            return []
        except (KeyError, TypeError) as e:
            self.logger.warning(f"Unexpected track search payload for '{query}': {e}")
            return []

    async def combined_search(
        self,
        token: str,
        query: str,
        limit: int = 20,
        market: Optional[str] = None,
    ) -> SearchResult:
        """
        Search artists and tracks in a single request

        Args:
            token: Bearer token
            query: Non-empty free text
            limit: Maximum items per type
            market: Optional ISO market code

        Returns:
            SearchResult with both sections

        Raises:
            ValueError: Empty query
            AuthExpired: The token was rejected
            SearchError: Network or decoding failure
        """
        if not query or not query.strip():
            raise ValueError("Search query cannot be empty")

        try:
            data = await self._search(token, query, 'artist,track', limit, market)
            return SearchResult.from_spotify_data(data)
        except AuthExpired:
            raise
        except (NetworkError, DecodingError) as e:
            raise SearchError(f"Search failed: {e.message}", details=e.details) from e
        except (KeyError, TypeError) as e:
            raise SearchError(
                "Search failed: unexpected response format",
                details={'query': query}
            ) from e


# Global client instance
_client_instance: Optional[CatalogClient] = None


def get_catalog_client() -> CatalogClient:
    """
    Get the global catalog client instance (singleton pattern)

    Built from the current settings on first access.

    Returns:
        Global CatalogClient instance
    """
    global _client_instance
    if not _client_instance:
        settings = get_settings()
        _client_instance = CatalogClient(
            base_url=settings.spotify.api_base_url,
            requests_per_second=settings.network.requests_per_second,
            timeout=settings.network.request_timeout,
            user_agent=settings.network.user_agent,
        )
    return _client_instance


def reset_catalog_client() -> None:
    """Reset the global catalog client, e.g. after a settings reload"""
    global _client_instance
    _client_instance = None
