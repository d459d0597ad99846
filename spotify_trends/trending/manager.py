"""
Trends manager: the single owner of the dashboard state

The manager wires the credential broker, catalog client, aggregator, resolver
and search session together and is the only place that decides when a
refresh runs. All work happens on one asyncio event loop.

Operations and their guards:

- Track refresh: own RefreshScheduler with the recurring timer; triggers while
  in flight are dropped
- Roster refresh: own RefreshScheduler, no timer
- Language switch / manual refresh: a compound operation on a third
  scheduler. It clears the search overlay, runs both refreshes (joining one
  that is already in flight) and clears `is_refreshing` when both are done.
  Language selections are debounced with duplicate suppression first.
- Search: debounced by the SearchSession, stale results discarded

Teardown stops the timers and debouncers and discards the state object before
waiting for in-flight work, so late completions are never published.
"""

import asyncio
from typing import Callable, List, Optional, Sequence, Union

from ..config.auth import CredentialBroker, get_broker
from ..config.settings import get_settings
from ..exceptions import AggregationError, AuthError
from ..spotify.client import CatalogClient, get_catalog_client
from ..spotify.languages import Language
from ..spotify.models import SpotifyArtist
from ..utils.debounce import Debouncer
from ..utils.logger import get_logger
from .aggregator import TrendingAggregator
from .resolver import ArtistResolver
from .scheduler import RefreshScheduler
from .search import SearchSession
from .state import DashboardSnapshot, DashboardState


class TrendsManager:
    """
    Keeps popular artists and trending tracks fresh for the selected language

    Attributes:
        state: Published dashboard state
        tracks_scheduler: Guards trending track refreshes (owns the timer)
        artists_scheduler: Guards roster refreshes
        language_scheduler: Guards the compound language/manual refresh
        search_session: Interactive search input handler
    """

    def __init__(
        self,
        client: Optional[CatalogClient] = None,
        broker: Optional[CredentialBroker] = None,
        language: Union[Language, str, None] = None,
        refresh_interval: Optional[float] = None,
        roster: Optional[Sequence[str]] = None,
        language_debounce_ms: Optional[int] = None,
        search_debounce_ms: Optional[int] = None,
        aggregator: Optional[TrendingAggregator] = None,
    ):
        """
        Args:
            client: Catalog client, defaults to the global instance
            broker: Credential broker, defaults to the global instance
            language: Initial language, defaults to the configured one
            refresh_interval: Timer period in seconds; 0 or None in settings disables it
            roster: Popular artist names, defaults to the configured roster
            language_debounce_ms: Quiet period for language selection
            search_debounce_ms: Quiet period for search input
            aggregator: Preconfigured aggregator (built from client/broker when omitted)
        """
        settings = get_settings()
        trending = settings.trending

        self.client = client or get_catalog_client()
        self.broker = broker or get_broker()
        self.use_market = trending.use_market
        self.roster_names: List[str] = list(roster if roster is not None else trending.roster)
        self.logger = get_logger(__name__)

        self._language = Language.from_name(language or trending.language)
        self._tracks_language: Optional[Language] = None
        self._roster_artists: List[SpotifyArtist] = []
        self._loading = 0
        self._closed = False

        self.state = DashboardState(DashboardSnapshot(selected_language=self._language))
        self.aggregator = aggregator or TrendingAggregator(client=self.client, broker=self.broker)
        self.resolver = ArtistResolver()

        interval = refresh_interval if refresh_interval is not None else trending.refresh_interval
        self.tracks_scheduler = RefreshScheduler("trending-tracks", self._refresh_tracks, interval or None)
        self.artists_scheduler = RefreshScheduler("popular-artists", self._refresh_artists)
        self.language_scheduler = RefreshScheduler("language-switch", self._compound_refresh)

        debounce_ms = (
            language_debounce_ms if language_debounce_ms is not None else trending.language_debounce_ms
        )
        self._language_debouncer = Debouncer(
            debounce_ms / 1000, self._on_language_settled, distinct=True, name="language",
            initial=self._language,
        )

        self.search_session = SearchSession(
            self.state,
            client=self.client,
            broker=self.broker,
            debounce_ms=search_debounce_ms,
            market_provider=self._market,
        )

    @property
    def snapshot(self) -> DashboardSnapshot:
        return self.state.snapshot

    @property
    def language(self) -> Language:
        """Language of the latest settled selection"""
        return self._language

    def subscribe(self, callback: Callable[[DashboardSnapshot], None]) -> Callable[[], None]:
        return self.state.subscribe(callback)

    def _market(self) -> Optional[str]:
        return self._language.market if self.use_market else None

    def _begin_loading(self) -> None:
        self._loading += 1
        self.state.update(is_loading=True)

    def _end_loading(self) -> None:
        self._loading = max(0, self._loading - 1)
        self.state.update(is_loading=self._loading > 0)

    def _publish_derived(self) -> None:
        snapshot = self.state.snapshot
        if self.resolver.update(snapshot.trending_tracks, self._roster_artists):
            self.state.update(
                language_artists=self.resolver.artists,
                artist_images=self.resolver.image_map,
            )

    async def _refresh_tracks(self) -> None:
        language = self._language
        self._begin_loading()
        try:
            self.state.update(error_message=None)
            try:
                trending = await self.aggregator.refresh_for_language(language)
            except AggregationError as e:
                self.logger.error(f"Trending refresh failed: {e}")
                self.state.update(error_message=e.message)
                return

            self._tracks_language = language
            self.state.update(
                trending_tracks=trending.tracks,
                last_updated=trending.refreshed_at,
            )
            self._publish_derived()
        finally:
            self._end_loading()

    async def _refresh_artists(self) -> None:
        self._begin_loading()
        try:
            self.state.update(error_message=None)
            try:
                artists = await self.aggregator.refresh_popular_artists(
                    self.roster_names, market=self._market()
                )
            except AggregationError as e:
                self.logger.error(f"Popular artists refresh failed: {e}")
                self.state.update(error_message=e.message)
                return

            self._roster_artists = artists
            self.state.update(popular_artists=artists)
            self._publish_derived()
        finally:
            self._end_loading()

    async def _join_tracks(self, reason: str) -> None:
        task = self.tracks_scheduler.trigger(reason)
        if task is None:
            await self.tracks_scheduler.wait_idle()
            # The joined run may have been for the previous language
            if self._tracks_language != self._language:
                task = self.tracks_scheduler.trigger(reason)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def _join_artists(self, reason: str) -> None:
        task = self.artists_scheduler.trigger(reason)
        if task is None:
            await self.artists_scheduler.wait_idle()
        else:
            await asyncio.gather(task, return_exceptions=True)

    async def _compound_refresh(self) -> None:
        reason = self.language_scheduler.last_reason or "language"
        self.state.update(is_refreshing=True)
        try:
            while True:
                language = self._language
                self.search_session.clear()
                await asyncio.gather(self._join_tracks(reason), self._join_artists(reason))
                # A selection that settled while we were running was dropped by the scheduler
                if language == self._language or self._closed:
                    break
        finally:
            self.state.update(is_refreshing=False)

    async def _on_language_settled(self, language: Language) -> None:
        if self._closed:
            return
        self.logger.console_info(f"Language changed to {language.key}")
        self._language = language
        self.language_scheduler.trigger("language")

    def select_language(self, language: Union[Language, str]) -> Language:
        """
        Select a language

        The selection is published immediately; the refresh starts once the
        selection has been stable for the language debounce window.

        Raises:
            ValueError: Unknown language name
        """
        selected = Language.from_name(language)
        self.state.update(selected_language=selected)
        self._language_debouncer.push(selected)
        return selected

    def manual_refresh(self) -> Optional[asyncio.Task]:
        """Clear the search overlay and refresh tracks and artists"""
        return self.language_scheduler.trigger("manual")

    def set_update_interval(self, seconds: Optional[float]) -> None:
        """Reschedule the trending timer; an in-flight refresh is unaffected"""
        self.tracks_scheduler.set_interval(seconds)

    def search(self, text: str) -> None:
        """Feed search-box input (debounced)"""
        self.search_session.submit(text)

    async def search_now(self, text: str) -> None:
        await self.search_session.search_now(text)

    def clear_search(self) -> None:
        self.search_session.clear()

    async def start(self) -> Optional[asyncio.Task]:
        """
        Acquire a token, run the initial load and start the timer

        When the token exchange fails the error is published and nothing is
        loaded; manual_refresh() retries.

        Returns:
            The initial load task, or None when the token could not be acquired
        """
        self._begin_loading()
        try:
            self.state.update(error_message=None)
            await self.broker.acquire()
        except AuthError as e:
            self.logger.error(str(e))
            self.state.update(error_message=e.message)
            return None
        finally:
            self._end_loading()

        task = self.language_scheduler.trigger("startup")
        self.tracks_scheduler.start()
        return task

    async def wait_idle(self) -> None:
        """Wait until no refresh of any kind is in flight"""
        await self.language_scheduler.wait_idle()
        await asyncio.gather(
            self.tracks_scheduler.wait_idle(),
            self.artists_scheduler.wait_idle(),
        )

    async def close(self) -> None:
        """Stop timers, discard the state and release HTTP sessions"""
        if self._closed:
            return
        self._closed = True

        self.tracks_scheduler.stop()
        self._language_debouncer.close()
        self.search_session.close()
        self.state.discard()

        await self.wait_idle()
        await self.client.close()
        await self.broker.close()
        self.logger.debug("Trends manager closed")
