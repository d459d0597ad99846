"""
Artist resolution for the language-driven artist list

The dashboard shows artists that appear in the current trending tracks rather
than only the fixed roster. Track payloads embed simplified artist records
(id and name, no images, no popularity), so the list is enriched from the
roster where possible and artwork gaps are filled from album art.

Both operations are pure functions of (tracks, roster). ArtistResolver wraps
them with a cache keyed by the identity of its inputs.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..spotify.models import SpotifyArtist, SpotifyTrack


def resolve_artists(
    tracks: Sequence[SpotifyTrack],
    roster: Sequence[SpotifyArtist],
) -> List[SpotifyArtist]:
    """
    Derive a deduplicated artist list from trending tracks

    Tracks are walked in order and each track's artists in credit order; the
    first sighting of an id is kept. When the roster knows that id, its richer
    record is used instead of the embedded one.

    Args:
        tracks: Trending tracks in display order
        roster: Popular-artist roster records

    Returns:
        Artists in first-seen order, or the roster unchanged when the tracks
        yield no artists at all
    """
    by_id = {artist.id: artist for artist in roster}
    seen = set()
    resolved: List[SpotifyArtist] = []

    for track in tracks:
        for artist in track.artists:
            if artist.id in seen:
                continue
            seen.add(artist.id)
            resolved.append(by_id.get(artist.id, artist))

    if not resolved:
        return list(roster)
    return resolved


def _first_album_art(tracks: Iterable[SpotifyTrack], artist_id: str, predicate) -> Optional[str]:
    for track in tracks:
        url = track.album_image_url
        if url and predicate(track, artist_id):
            return url
    return None


def _is_sole(track: SpotifyTrack, artist_id: str) -> bool:
    return len(track.artists) == 1 and track.artists[0].id == artist_id


def _is_primary(track: SpotifyTrack, artist_id: str) -> bool:
    return bool(track.artists) and track.artists[0].id == artist_id


def _is_featured(track: SpotifyTrack, artist_id: str) -> bool:
    return artist_id in track.artist_ids


# Album-art tiers, tried in order after the roster image
_ALBUM_TIERS = (_is_sole, _is_primary, _is_featured)


def build_image_fallbacks(
    tracks: Sequence[SpotifyTrack],
    roster: Sequence[SpotifyArtist],
) -> Dict[str, str]:
    """
    Pick one image URL per artist id

    Priority, first match wins:
        1. the roster artist's own image
        2. album art of a track where the artist is the only artist
        3. album art of a track where the artist is credited first
        4. album art of any track featuring the artist

    Within a tier the earliest track wins. Tracks without album art never
    contribute. Artists with no candidate at all are absent from the map.

    Args:
        tracks: Trending tracks in display order
        roster: Popular-artist roster records

    Returns:
        Mapping of artist id to image URL
    """
    fallbacks: Dict[str, str] = {}

    for artist in roster:
        if artist.image_url and artist.id not in fallbacks:
            fallbacks[artist.id] = artist.image_url

    candidate_ids: List[str] = []
    for track in tracks:
        for artist_id in track.artist_ids:
            if artist_id not in fallbacks and artist_id not in candidate_ids:
                candidate_ids.append(artist_id)

    for artist_id in candidate_ids:
        for predicate in _ALBUM_TIERS:
            url = _first_album_art(tracks, artist_id, predicate)
            if url:
                fallbacks[artist_id] = url
                break

    return fallbacks


CacheKey = Tuple[Tuple[str, ...], Tuple[Tuple[str, Optional[str]], ...]]


class ArtistResolver:
    """
    Cached resolver over the latest trending tracks and roster

    The cache key is the ordered track id sequence plus the roster ids and
    image URLs, so any change in either input recomputes both the artist list
    and the image map.
    """

    def __init__(self):
        self._key: Optional[CacheKey] = None
        self._artists: List[SpotifyArtist] = []
        self._images: Dict[str, str] = {}
        self.recomputations = 0

    @staticmethod
    def _cache_key(tracks: Sequence[SpotifyTrack], roster: Sequence[SpotifyArtist]) -> CacheKey:
        return (
            tuple(track.id for track in tracks),
            tuple((artist.id, artist.image_url) for artist in roster),
        )

    def update(self, tracks: Sequence[SpotifyTrack], roster: Sequence[SpotifyArtist]) -> bool:
        """
        Recompute if the inputs changed

        Returns:
            True when a recomputation happened
        """
        key = self._cache_key(tracks, roster)
        if key == self._key:
            return False

        self._artists = resolve_artists(tracks, roster)
        self._images = build_image_fallbacks(tracks, roster)
        self._key = key
        self.recomputations += 1
        return True

    @property
    def artists(self) -> List[SpotifyArtist]:
        return list(self._artists)

    @property
    def image_map(self) -> Dict[str, str]:
        return dict(self._images)

    def image_for(self, artist: SpotifyArtist) -> Optional[str]:
        """The artist's own image, else the resolved fallback, else None"""
        return artist.image_url or self._images.get(artist.id)
