"""
Read-only projections of a DashboardSnapshot for display

When a search result is active it replaces the lists entirely; otherwise the
baseline is filtered locally by the text currently in the search box.
"""

from typing import List, Optional, Sequence

from ..spotify.models import SpotifyArtist, SpotifyTrack
from ..utils.helpers import matches_text
from .state import DashboardSnapshot


DEFAULT_POPULARITY = 55


def track_matches(track: SpotifyTrack, text: Optional[str]) -> bool:
    """Case-insensitive match against track, artist and album names"""
    if not text:
        return True
    return (
        matches_text(track.name, text)
        or any(matches_text(artist.name, text) for artist in track.artists)
        or matches_text(track.album.name, text)
    )


def visible_artists(snapshot: DashboardSnapshot, text: Optional[str] = None) -> List[SpotifyArtist]:
    """Artists to show: search hits, else language artists filtered by name"""
    if snapshot.search_result is not None:
        return list(snapshot.search_result.artists)
    return [artist for artist in snapshot.language_artists if matches_text(artist.name, text)]


def visible_tracks(snapshot: DashboardSnapshot, text: Optional[str] = None) -> List[SpotifyTrack]:
    """Tracks to show: search hits, else trending tracks filtered locally"""
    if snapshot.search_result is not None:
        return list(snapshot.search_result.tracks)
    return [track for track in snapshot.trending_tracks if track_matches(track, text)]


def average_popularity(
    artists: Sequence[SpotifyArtist],
    tracks: Sequence[SpotifyTrack],
) -> int:
    """
    Mean popularity over all rated artists and tracks

    Unrated records are ignored. Returns DEFAULT_POPULARITY when nothing in
    either list carries a score.
    """
    scores = [artist.popularity for artist in artists if artist.popularity is not None]
    scores += [track.popularity for track in tracks if track.popularity is not None]
    if not scores:
        return DEFAULT_POPULARITY
    return sum(scores) // len(scores)


def total_followers(artists: Sequence[SpotifyArtist]) -> int:
    return sum(artist.followers or 0 for artist in artists)
