"""
Trending aggregation

The Spotify Web API has no "trending" endpoint, so trending tracks are
approximated by searching a fixed, ordered list of keywords per language and
merging the top results:

1. For each keyword (in table order) search up to `per_query_limit` tracks
2. Keep the first `per_query_take` tracks of each result
3. Append them, skipping ids already appended by an earlier keyword
4. Truncate to `capacity` tracks

With strict language mode on, the merged list is then narrowed to tracks
whose title, album or artist names contain the language's script, or that
feature one of its seed artists. The list is topped up to `capacity` with
`artist:<seed>` searches under the same filter.

The popular-artist roster is loaded the same way: one artist lookup per name,
in roster order.

Failure policy for both fan-outs:
- A failed keyword or name contributes nothing; the run continues
- The first HTTP 401 in a run triggers one token re-acquisition; the failed
  call itself is not retried, later calls use the new token
- The run fails with AggregationError only when no credential can be obtained
  before the first call
"""

from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ..config.auth import CredentialBroker, get_broker
from ..config.settings import get_settings
from ..exceptions import AggregationError, AuthError, AuthExpired
from ..spotify.client import CatalogClient, get_catalog_client
from ..spotify.languages import Language
from ..spotify.models import SpotifyArtist, SpotifyTrack, TrendingSet
from ..utils.logger import create_operation_logger, get_logger, OperationLogger, log_performance


def merge_keyword_results(
    results: Iterable[Sequence[SpotifyTrack]],
    per_query: int = 5,
    capacity: int = 20,
) -> List[SpotifyTrack]:
    """
    Merge per-keyword search results into one ordered, deduplicated list

    Args:
        results: One track sequence per keyword, in keyword order
        per_query: How many leading tracks of each result are considered
        capacity: Maximum length of the merged list

    Returns:
        Tracks in keyword order then result order; a track found by several
        keywords keeps the position of the first keyword that returned it
    """
    merged: List[SpotifyTrack] = []
    seen = set()

    for tracks in results:
        for track in list(tracks)[:per_query]:
            if track.id in seen:
                continue
            seen.add(track.id)
            merged.append(track)

    return merged[:capacity]


def year_filter(now: Optional[datetime] = None) -> str:
    """Spotify search filter limiting results to the last three calendar years"""
    year = (now or datetime.now()).year
    return f"year:{year - 2}-{year}"


def in_language(track: SpotifyTrack, language: Language, seed_artists: Iterable[str] = ()) -> bool:
    """
    Strict language test for one track

    True when the track name, album name or any artist name contains the
    language's script, or when any artist is one of the seed artists
    (case-insensitive). Latin-script languages accept every track.
    """
    names = [track.name, track.album.name] + [artist.name for artist in track.artists]
    if any(language.matches_script(name) for name in names):
        return True
    seeds = {seed.lower() for seed in seed_artists}
    return any((artist.name or "").lower() in seeds for artist in track.artists)


class TrendingAggregator:
    """
    Builds TrendingSets and the popular-artist list from catalog searches

    Attributes:
        last_updated: Completion time of the latest trending refresh
        last_artists_updated: Completion time of the latest roster refresh
    """

    def __init__(
        self,
        client: Optional[CatalogClient] = None,
        broker: Optional[CredentialBroker] = None,
        per_query_limit: Optional[int] = None,
        per_query_take: Optional[int] = None,
        capacity: Optional[int] = None,
        use_market: Optional[bool] = None,
        recent_years_only: Optional[bool] = None,
        strict_language: Optional[bool] = None,
    ):
        """
        Args:
            client: Catalog client, defaults to the global instance
            broker: Credential broker, defaults to the global instance
            per_query_limit: Tracks requested per keyword
            per_query_take: Leading tracks kept per keyword
            capacity: Maximum trending set size
            use_market: Bias searches with the language's market code
            recent_years_only: Append a year filter to every keyword
            strict_language: Keep only tracks in the language's script or by a
                seed artist, topping up with seed-artist searches

        Unset options are read from the trending settings section.
        """
        trending = get_settings().trending

        self.client = client or get_catalog_client()
        self.broker = broker or get_broker()
        self.per_query_limit = per_query_limit if per_query_limit is not None else trending.per_query_limit
        self.per_query_take = per_query_take if per_query_take is not None else trending.per_query_take
        self.capacity = capacity if capacity is not None else trending.max_tracks
        self.use_market = use_market if use_market is not None else trending.use_market
        self.recent_years_only = (
            recent_years_only if recent_years_only is not None else trending.recent_years_only
        )
        self.strict_language = (
            strict_language if strict_language is not None else trending.strict_language
        )
        self.logger = get_logger(__name__)

        self.last_updated: Optional[datetime] = None
        self.last_artists_updated: Optional[datetime] = None

    async def _ensure_credential(self, operation: str) -> None:
        if self.broker.has_credential:
            return
        try:
            await self.broker.acquire()
        except AuthError as e:
            raise AggregationError(
                e.message,
                details={'operation': operation, 'reason': e.reason}
            ) from e

    async def _reacquire(self, op_logger: OperationLogger) -> None:
        try:
            await self.broker.acquire()
            op_logger.progress("access token re-acquired after 401")
        except AuthError as e:
            op_logger.warning(f"token re-acquisition failed: {e.reason}")

    def _with_year_filter(self, query: str) -> str:
        if self.recent_years_only:
            return f"{query} {year_filter()}"
        return query

    def _queries_for(self, language: Language) -> List[str]:
        return [self._with_year_filter(query) for query in language.trending_queries]

    @log_performance
    async def refresh_for_language(self, language: Language) -> TrendingSet:
        """
        Aggregate trending tracks for a language

        Args:
            language: Selected language

        Returns:
            TrendingSet with at most `capacity` unique tracks

        Raises:
            AggregationError: No credential was available and none could be acquired
        """
        await self._ensure_credential("refresh trending tracks")

        queries = self._queries_for(language)
        market = language.market if self.use_market else None
        op_logger = create_operation_logger(__name__, f"Trending refresh ({language.key})")
        op_logger.start()

        results: List[List[SpotifyTrack]] = []
        reacquired = False

        async def search(query: str) -> List[SpotifyTrack]:
            nonlocal reacquired
            try:
                return await self.client.search_tracks(
                    self.broker.token, query, limit=self.per_query_limit, market=market
                )
            except AuthExpired:
                op_logger.warning(f"token rejected for '{query}'")
                if not reacquired:
                    reacquired = True
                    await self._reacquire(op_logger)
                return []

        for index, query in enumerate(queries, 1):
            tracks = await search(query)
            op_logger.progress(f"'{query}' returned {len(tracks)} tracks", index, len(queries))
            results.append(tracks)

        merged = merge_keyword_results(results, self.per_query_take, self.capacity)

        if self.strict_language:
            seeds = language.seed_artists
            merged = [track for track in merged if in_language(track, language, seeds)]
            seen = {track.id for track in merged}

            for name in seeds:
                if len(merged) >= self.capacity:
                    break
                tracks = await search(self._with_year_filter(f"artist:{name}"))
                for track in tracks:
                    if track.id in seen:
                        continue
                    seen.add(track.id)
                    if in_language(track, language, seeds):
                        merged.append(track)
                op_logger.progress(f"seed '{name}' topped up to {len(merged)} tracks")

            merged = merged[:self.capacity]

        refreshed_at = datetime.now()
        self.last_updated = refreshed_at

        op_logger.complete(f"Loaded {len(merged)} trending tracks for {language.key}")
        return TrendingSet(language=language, tracks=merged, refreshed_at=refreshed_at)

    @log_performance
    async def refresh_popular_artists(
        self,
        names: Sequence[str],
        market: Optional[str] = None,
    ) -> List[SpotifyArtist]:
        """
        Look up the roster artists by name

        Names that return no match or fail are skipped without raising. An
        artist returned for two different names is kept once.

        Args:
            names: Roster names in display order
            market: Optional market code

        Returns:
            Found artists in roster order

        Raises:
            AggregationError: No credential was available and none could be acquired
        """
        await self._ensure_credential("load popular artists")

        op_logger = create_operation_logger(__name__, "Popular artists refresh")
        op_logger.start()

        artists: List[SpotifyArtist] = []
        seen = set()
        reacquired = False

        for index, name in enumerate(names, 1):
            try:
                artist = await self.client.search_artist(self.broker.token, name, market=market)
            except AuthExpired:
                op_logger.warning(f"token rejected for '{name}'")
                artist = None
                if not reacquired:
                    reacquired = True
                    await self._reacquire(op_logger)

            if artist is None:
                op_logger.progress(f"no match for '{name}'", index, len(names))
                continue
            if artist.id in seen:
                continue

            seen.add(artist.id)
            artists.append(artist)

        self.last_artists_updated = datetime.now()
        op_logger.complete(f"Loaded {len(artists)}/{len(names)} popular artists")
        return artists
