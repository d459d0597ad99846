"""Test the trends manager end to end against a scripted catalog"""

import asyncio

import pytest

from fakes import FakeBroker, FakeCatalog, make_artist, make_track
from spotify_trends.spotify.languages import Language
from spotify_trends.spotify.models import SearchResult
from spotify_trends.trending.manager import TrendsManager


def catalog_with_tracks(*languages, artists=None):
    tracks = {}
    for language in languages:
        for index, query in enumerate(language.trending_queries):
            performer = make_artist(f"{language.key}-artist-{index}")
            tracks[query] = [
                make_track(f"{language.key}-{index}-{i}", [performer], album_image=f"https://img/{language.key}/{index}")
                for i in range(3)
            ]
    return FakeCatalog(tracks=tracks, artists=artists or {})


@pytest.fixture
def make_manager(make_aggregator):
    def _factory(catalog, broker=None, language="english", roster=None):
        broker = broker or FakeBroker()
        manager = TrendsManager(
            client=catalog,
            broker=broker,
            language=language,
            refresh_interval=0,
            roster=roster if roster is not None else [],
            language_debounce_ms=300,
            search_debounce_ms=300,
            aggregator=make_aggregator(catalog, broker),
        )
        return manager

    return _factory


class TestTrendsManager:
    """Test refresh coordination and published state"""

    @pytest.mark.asyncio
    async def test_startup_loads_everything(self, make_manager, roster_names):
        """Test three roster misses leave five artists and no error"""
        found = roster_names[:3] + roster_names[6:]
        catalog = catalog_with_tracks(Language.ENGLISH, artists={
            name: make_artist(f"roster-{index}", name=name, image=f"https://img/r{index}")
            for index, name in enumerate(found)
        })
        manager = make_manager(catalog, roster=roster_names)

        task = await manager.start()
        assert task is not None
        await manager.wait_idle()

        snapshot = manager.snapshot
        assert len(snapshot.popular_artists) == 5
        assert snapshot.error_message is None
        assert not snapshot.is_loading
        assert not snapshot.is_refreshing
        assert len(snapshot.trending_tracks) == 18
        assert snapshot.last_updated is not None
        assert [a.id for a in snapshot.language_artists][:2] == ['english-artist-0', 'english-artist-1']
        assert snapshot.artist_images['english-artist-0'] == 'https://img/english/0'
        assert not manager.tracks_scheduler.timer_running

        await manager.close()

    @pytest.mark.asyncio
    async def test_language_switch_debounced(self, make_manager):
        """Test a quick hindi-then-tamil selection aggregates only tamil"""
        catalog = catalog_with_tracks(Language.ENGLISH, Language.HINDI, Language.TAMIL)
        manager = make_manager(catalog)
        await manager.start()
        await manager.wait_idle()
        catalog.calls.clear()

        manager.select_language("hindi")
        await asyncio.sleep(0.2)
        manager.select_language("tamil")
        assert manager.snapshot.selected_language is Language.TAMIL

        await asyncio.sleep(0.4)
        await manager.wait_idle()

        assert catalog.queries('tracks') == Language.TAMIL.trending_queries
        assert {call[3] for call in catalog.calls} == {'IN'}
        assert manager.snapshot.trending_tracks[0].id == 'tamil-0-0'
        assert manager.language is Language.TAMIL

        await manager.close()

    @pytest.mark.asyncio
    async def test_reselecting_same_language_is_ignored(self, make_manager):
        catalog = catalog_with_tracks(Language.ENGLISH, Language.KOREAN)
        manager = make_manager(catalog)
        await manager.start()
        await manager.wait_idle()

        manager.select_language("korean")
        await asyncio.sleep(0.35)
        await manager.wait_idle()
        catalog.calls.clear()

        manager.select_language("ko")
        await asyncio.sleep(0.35)
        await manager.wait_idle()

        assert catalog.calls == []
        await manager.close()

    @pytest.mark.asyncio
    async def test_flip_back_to_startup_language_is_ignored(self, make_manager):
        """Test leaving the startup language and returning inside the window searches nothing"""
        catalog = catalog_with_tracks(Language.ENGLISH, Language.HINDI)
        manager = make_manager(catalog)
        await manager.start()
        await manager.wait_idle()
        catalog.calls.clear()

        manager.select_language("hindi")
        await asyncio.sleep(0.1)
        manager.select_language("english")
        await asyncio.sleep(0.4)
        await manager.wait_idle()

        assert catalog.calls == []
        assert manager.language == Language.ENGLISH
        assert manager.snapshot.selected_language == Language.ENGLISH
        await manager.close()

    @pytest.mark.asyncio
    async def test_manual_refresh_clears_search(self, make_manager):
        catalog = catalog_with_tracks(Language.ENGLISH)
        catalog.searches['drake'] = SearchResult(artists=[make_artist('drake')])
        manager = make_manager(catalog)
        await manager.start()
        await manager.wait_idle()

        await manager.search_now("drake")
        assert manager.snapshot.search_active

        task = manager.manual_refresh()
        assert task is not None
        assert manager.manual_refresh() is None
        await task

        assert not manager.snapshot.search_active
        assert not manager.snapshot.is_refreshing
        await manager.close()

    @pytest.mark.asyncio
    async def test_search_does_not_touch_trending(self, make_manager):
        catalog = catalog_with_tracks(Language.ENGLISH)
        catalog.searches['x'] = SearchResult(tracks=[make_track('found')])
        manager = make_manager(catalog)
        await manager.start()
        await manager.wait_idle()
        before = manager.snapshot.trending_tracks

        await manager.search_now("x")

        assert manager.snapshot.trending_tracks == before
        manager.clear_search()
        assert manager.snapshot.search_result is None
        await manager.close()

    @pytest.mark.asyncio
    async def test_start_with_failing_broker(self, make_manager):
        """Test a failed token exchange is published and nothing is loaded"""
        catalog = catalog_with_tracks(Language.ENGLISH)
        manager = make_manager(catalog, broker=FakeBroker(token=None, fail=True))

        assert await manager.start() is None

        assert manager.snapshot.error_message == "Failed to get access token: invalid_client"
        assert not manager.snapshot.is_loading
        assert catalog.calls == []
        await manager.close()

    @pytest.mark.asyncio
    async def test_close_discards_late_results(self, make_manager):
        """Test results arriving after close are never published"""
        catalog = catalog_with_tracks(Language.ENGLISH)
        first_query = Language.ENGLISH.trending_queries[0]
        catalog.delays[first_query] = 0.05
        broker = FakeBroker()
        manager = make_manager(catalog, broker=broker)

        await manager.start()
        await asyncio.sleep(0.01)
        await manager.close()

        assert manager.snapshot.trending_tracks == ()
        assert not manager.state.active
        assert catalog.closed
        assert broker.closed

    @pytest.mark.asyncio
    async def test_set_update_interval(self, make_manager):
        manager = make_manager(catalog_with_tracks(Language.ENGLISH))
        manager.set_update_interval(120)
        assert manager.tracks_scheduler.interval == 120
        with pytest.raises(ValueError):
            manager.set_update_interval(-1)
        await manager.close()

    @pytest.mark.asyncio
    async def test_interval_set_after_start_fires(self, make_manager):
        """Test a manager started without a timer refreshes once an interval is set"""
        catalog = catalog_with_tracks(Language.ENGLISH)
        manager = make_manager(catalog)
        await manager.start()
        await manager.wait_idle()
        assert not manager.tracks_scheduler.timer_running
        catalog.calls.clear()

        manager.set_update_interval(0.05)
        assert manager.tracks_scheduler.timer_running
        await asyncio.sleep(0.2)
        await manager.wait_idle()

        assert catalog.queries('tracks')[:len(Language.ENGLISH.trending_queries)] == \
            Language.ENGLISH.trending_queries
        await manager.close()

    @pytest.mark.asyncio
    async def test_unknown_language_rejected(self, make_manager):
        manager = make_manager(FakeCatalog())
        with pytest.raises(ValueError):
            manager.select_language("klingon")
        await manager.close()
