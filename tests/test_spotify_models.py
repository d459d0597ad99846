"""Test Spotify models and the language table"""

import pytest

from spotify_trends.spotify.languages import Language
from spotify_trends.spotify.models import SearchResult, SpotifyArtist, SpotifyTrack, TrendingSet


class TestSpotifyModels:
    """Test Spotify data models"""

    def test_spotify_artist_creation(self):
        """Test SpotifyArtist creation from API data"""
        data = {
            'id': 'artist_123',
            'name': 'Test Artist',
            'popularity': 80,
            'images': [{'url': 'https://i.scdn.co/a.jpg', 'height': 640, 'width': 640}],
            'followers': {'total': 1000000},
        }

        artist = SpotifyArtist.from_spotify_data(data)
        assert artist.id == 'artist_123'
        assert artist.name == 'Test Artist'
        assert artist.popularity == 80
        assert artist.followers == 1000000
        assert artist.image_url == 'https://i.scdn.co/a.jpg'

    def test_simplified_artist_defaults(self):
        """Test embedded artist records without optional fields"""
        artist = SpotifyArtist.from_spotify_data({'id': 'a1', 'name': 'Embedded'})
        assert artist.popularity is None
        assert artist.followers is None
        assert artist.images == []
        assert artist.image_url is None

    def test_spotify_track_properties(self, sample_search_payload):
        """Test SpotifyTrack derived properties"""
        track = SpotifyTrack.from_spotify_data(sample_search_payload['tracks']['items'][0])

        assert track.id == 'track_123'
        assert track.album_id == 'album_123'
        assert track.album_image_url == 'https://i.scdn.co/image/album'
        assert track.primary_artist.id == 'artist_123'
        assert track.artist_ids == ['artist_123']
        assert track.all_artists == 'Test Artist'
        assert track.external_url == 'https://open.spotify.com/track/track_123'
        assert track.album.release_date == '2023-01-01'

    def test_track_requires_artists_and_album(self):
        """Test malformed track payloads raise instead of producing partial tracks"""
        with pytest.raises(KeyError):
            SpotifyTrack.from_spotify_data({'id': 't1', 'name': 'No album', 'artists': []})

    def test_search_result_requires_both_sections(self, sample_search_payload):
        """Test combined search decoding"""
        result = SearchResult.from_spotify_data(sample_search_payload)
        assert len(result.artists) == 1
        assert len(result.tracks) == 1
        assert not result.is_empty

        with pytest.raises(KeyError):
            SearchResult.from_spotify_data({'artists': {'items': []}})

        assert SearchResult().is_empty

    def test_search_result_skips_null_items(self, sample_search_payload):
        """Test null entries in either section are dropped instead of failing the search"""
        sample_search_payload['artists']['items'].insert(0, None)
        sample_search_payload['tracks']['items'].append(None)

        result = SearchResult.from_spotify_data(sample_search_payload)

        assert [a.id for a in result.artists] == ['artist_123']
        assert [t.id for t in result.tracks] == ['track_123']

    def test_trending_set_iteration(self, sample_search_payload):
        """Test TrendingSet behaves like a sequence of tracks"""
        track = SpotifyTrack.from_spotify_data(sample_search_payload['tracks']['items'][0])
        trending = TrendingSet(language=Language.HINDI, tracks=[track])

        assert len(trending) == 1
        assert list(trending) == [track]
        assert trending.track_ids == ['track_123']


class TestLanguages:
    """Test the language table"""

    def test_eighteen_languages(self):
        """Test the closed set of locale codes"""
        assert len(Language) == 18
        assert Language.ENGLISH.value == 'en'
        assert Language.CHINESE.value == 'zh'

    def test_every_language_has_keywords(self):
        """Test each language carries 4 to 6 ordered keywords, a label and a market"""
        for language in Language:
            queries = language.trending_queries
            assert 4 <= len(queries) <= 6, language
            assert len(set(queries)) == len(queries)
            assert language.display_name
            assert len(language.market) == 2

    def test_seed_artists(self):
        """Test every language names five distinct seed artists"""
        for language in Language:
            seeds = language.seed_artists
            assert len(seeds) == 5, language
            assert len(set(seeds)) == 5
        assert Language.KOREAN.seed_artists[0] == 'BTS'

    def test_script_patterns(self):
        assert Language.HINDI.matches_script('तुम ही हो')
        assert Language.MARATHI.matches_script('झिंगाट')
        assert Language.KOREAN.matches_script('사랑')
        assert Language.JAPANESE.matches_script('アイドル')
        assert Language.CHINESE.matches_script('晴天')
        assert not Language.HINDI.matches_script('Kesariya')
        assert not Language.TAMIL.matches_script(None)
        assert Language.FRENCH.script_pattern is None
        assert Language.FRENCH.matches_script('anything')

    def test_trending_queries_are_copies(self):
        """Test callers cannot mutate the table"""
        queries = Language.TAMIL.trending_queries
        queries.append("mutated")
        assert "mutated" not in Language.TAMIL.trending_queries

    def test_markets(self):
        """Test language to market mapping"""
        assert Language.ENGLISH.market == 'US'
        assert Language.HINDI.market == 'IN'
        assert Language.TAMIL.market == 'IN'
        assert Language.PORTUGUESE.market == 'BR'
        assert Language.CHINESE.market == 'TW'

    def test_from_name(self):
        """Test lookup by name or code"""
        assert Language.from_name('hindi') is Language.HINDI
        assert Language.from_name('Tamil') is Language.TAMIL
        assert Language.from_name('ko') is Language.KOREAN
        assert Language.from_name(Language.FRENCH) is Language.FRENCH
        assert Language.default() is Language.ENGLISH

        with pytest.raises(ValueError):
            Language.from_name('klingon')
