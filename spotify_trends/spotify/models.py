"""
Data models for Spotify catalog search results

This module defines the data structures used by the refresh pipeline. They are
plain dataclasses built from Spotify Web API search responses through
`from_spotify_data()` factory methods, mirroring the payload shapes:

- SpotifyImage: One artwork rendition (url plus optional size)
- SpotifyArtist: Artist record, either a full search hit (popularity, images,
  followers) or the simplified reference embedded in a track
- SpotifyAlbum: Album context of a track, used for album-art fallbacks
- SpotifyTrack: Track with ordered artists (first = primary) and its album
- SearchResult: Artists and tracks returned by one interactive search
- TrendingSet: Bounded, ordered result of one trending aggregation run

Factory methods raise KeyError/TypeError on malformed payloads; the catalog
client turns those into DecodingError so a single bad response never reaches
the published state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any, Iterator

from .languages import Language


@dataclass
class SpotifyImage:
    """Artwork rendition as returned in `images` arrays"""
    url: str
    height: Optional[int] = None
    width: Optional[int] = None

    @classmethod
    def from_spotify_data(cls, data: Dict[str, Any]) -> 'SpotifyImage':
        return cls(
            url=data['url'],
            height=data.get('height'),
            width=data.get('width'),
        )


def _images(data: Dict[str, Any]) -> List[SpotifyImage]:
    return [SpotifyImage.from_spotify_data(image) for image in data.get('images') or []]


@dataclass
class SpotifyArtist:
    """
    Artist profile data from the Spotify Web API

    The same artist can be seen twice with different richness: as a full
    artist search hit (popularity, images, followers) and as the simplified
    reference embedded in a track (id and name only). Identity is `id`.

    Attributes:
        id: Spotify's unique artist identifier
        name: Artist display name
        popularity: Algorithmic popularity score (0-100) when known
        images: Artist photos, largest first as delivered by the API
        followers: Total follower count when known
    """
    id: str
    name: str
    popularity: Optional[int] = None
    images: List[SpotifyImage] = field(default_factory=list)
    followers: Optional[int] = None

    @classmethod
    def from_spotify_data(cls, data: Dict[str, Any]) -> 'SpotifyArtist':
        """
        Factory method to construct SpotifyArtist from Spotify API response data

        Handles both simplified and full artist objects, defaulting optional
        fields when they are absent.

        Args:
            data: Raw artist data from Spotify API response

        Returns:
            SpotifyArtist instance
        """
        return cls(
            id=data['id'],
            name=data['name'],
            popularity=data.get('popularity'),
            images=_images(data),
            # Safe extraction of nested followers.total field
            followers=data.get('followers', {}).get('total') if data.get('followers') else None
        )

    @property
    def image_url(self) -> Optional[str]:
        """URL of the first artist image, or None when the record has none"""
        return self.images[0].url if self.images else None


@dataclass
class SpotifyAlbum:
    """Album context of a track; only what the dashboard needs"""
    id: str
    name: str
    images: List[SpotifyImage] = field(default_factory=list)
    release_date: Optional[str] = None

    @classmethod
    def from_spotify_data(cls, data: Dict[str, Any]) -> 'SpotifyAlbum':
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            images=_images(data),
            release_date=data.get('release_date'),
        )

    @property
    def image_url(self) -> Optional[str]:
        return self.images[0].url if self.images else None


@dataclass
class SpotifyTrack:
    """
    Track metadata from a catalog search

    Attributes:
        id: Spotify's unique track identifier
        name: Track title
        popularity: Algorithmic popularity score (0-100) when known
        artists: Contributing artists in credit order; the first one is primary
        album: Album context with artwork
        preview_url: 30-second audio preview URL (often None)
        external_url: Link to the track on open.spotify.com
    """
    id: str
    name: str
    artists: List[SpotifyArtist]
    album: SpotifyAlbum
    popularity: Optional[int] = None
    preview_url: Optional[str] = None
    external_url: str = ""

    @classmethod
    def from_spotify_data(cls, data: Dict[str, Any]) -> 'SpotifyTrack':
        """
        Factory method for constructing SpotifyTrack from a search result item

        Args:
            data: Raw track object from `tracks.items`

        Returns:
            SpotifyTrack with nested artist and album objects
        """
        # Recursively construct artist objects from embedded artist data
        artists = [SpotifyArtist.from_spotify_data(artist) for artist in data['artists']]

        return cls(
            id=data['id'],
            name=data['name'],
            artists=artists,
            album=SpotifyAlbum.from_spotify_data(data['album']),
            popularity=data.get('popularity'),
            preview_url=data.get('preview_url'),
            external_url=(data.get('external_urls') or {}).get('spotify', ''),
        )

    @property
    def album_id(self) -> str:
        return self.album.id

    @property
    def album_images(self) -> List[SpotifyImage]:
        return self.album.images

    @property
    def album_image_url(self) -> Optional[str]:
        return self.album.image_url

    @property
    def primary_artist(self) -> Optional[SpotifyArtist]:
        """First credited artist, or None for a track without artists"""
        return self.artists[0] if self.artists else None

    @property
    def artist_ids(self) -> List[str]:
        return [artist.id for artist in self.artists]

    @property
    def all_artists(self) -> str:
        """Comma separated artist names for display"""
        return ", ".join(artist.name for artist in self.artists)


@dataclass
class SearchResult:
    """
    Result of one interactive combined search

    Ephemeral: a new result replaces the previous one entirely.
    """
    artists: List[SpotifyArtist] = field(default_factory=list)
    tracks: List[SpotifyTrack] = field(default_factory=list)

    @classmethod
    def from_spotify_data(cls, data: Dict[str, Any]) -> 'SearchResult':
        """
        Build from a `type=artist,track` response

        Both sections must be present; a missing section is a decoding error.
        Null items inside a section are skipped.
        """
        return cls(
            artists=[SpotifyArtist.from_spotify_data(item) for item in data['artists']['items'] if item],
            tracks=[SpotifyTrack.from_spotify_data(item) for item in data['tracks']['items'] if item],
        )

    @property
    def is_empty(self) -> bool:
        return not self.artists and not self.tracks


@dataclass
class TrendingSet:
    """
    Ordered, capacity-bounded result of one trending aggregation

    Insertion order is keyword order then per-keyword result order, and the
    first sighting of a track id wins. The aggregator enforces the capacity.
    """
    language: Language
    tracks: List[SpotifyTrack] = field(default_factory=list)
    refreshed_at: Optional[datetime] = None

    def __len__(self) -> int:
        return len(self.tracks)

    def __iter__(self) -> Iterator[SpotifyTrack]:
        return iter(self.tracks)

    @property
    def track_ids(self) -> List[str]:
        return [track.id for track in self.tracks]
