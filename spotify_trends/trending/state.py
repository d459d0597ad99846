"""
Published dashboard state

DashboardState holds the single current DashboardSnapshot. Snapshots are
frozen; every mutation builds a new snapshot with dataclasses.replace() and
notifies subscribers with it. Subscribers therefore only ever see complete,
read-only views.

Once discard() is called the state refuses further updates, so results of
requests that were in flight during teardown are dropped silently.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Tuple

from ..spotify.languages import Language
from ..spotify.models import SearchResult, SpotifyArtist, SpotifyTrack
from ..utils.logger import get_logger


@dataclass(frozen=True)
class DashboardSnapshot:
    """
    Immutable view of everything the presentation layer renders

    Attributes:
        popular_artists: Roster artists found in the catalog, in roster order
        trending_tracks: Baseline trending tracks for the selected language
        language_artists: Artists derived from the trending tracks
        artist_images: Fallback image URL per artist id (read-only mapping)
        search_result: Active search overlay, None when no search is active
        is_loading: True while any refresh is running
        is_refreshing: True while a language switch or manual refresh runs
        error_message: Single rolling user-facing error, None when clear
        selected_language: Language selected by the user
        last_updated: Completion time of the latest trending refresh
    """
    popular_artists: Tuple[SpotifyArtist, ...] = ()
    trending_tracks: Tuple[SpotifyTrack, ...] = ()
    language_artists: Tuple[SpotifyArtist, ...] = ()
    artist_images: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    search_result: Optional[SearchResult] = None
    is_loading: bool = False
    is_refreshing: bool = False
    error_message: Optional[str] = None
    selected_language: Language = Language.ENGLISH
    last_updated: Optional[datetime] = None

    @property
    def search_active(self) -> bool:
        return self.search_result is not None


Subscriber = Callable[[DashboardSnapshot], None]

_SEQUENCE_FIELDS = ('popular_artists', 'trending_tracks', 'language_artists')
_FIELD_NAMES = frozenset(f.name for f in fields(DashboardSnapshot))


class DashboardState:
    """
    Publish/subscribe store for the dashboard snapshot

    Only the trends manager and the search session write here.
    """

    def __init__(self, initial: Optional[DashboardSnapshot] = None):
        self._snapshot = initial or DashboardSnapshot()
        self._subscribers: List[Subscriber] = []
        self._active = True
        self.logger = get_logger(__name__)

    @property
    def snapshot(self) -> DashboardSnapshot:
        return self._snapshot

    @property
    def active(self) -> bool:
        return self._active

    def update(self, **changes) -> bool:
        """
        Replace fields of the snapshot and notify subscribers

        Sequence fields are frozen into tuples and the image map is copied.

        Returns:
            False when the state has been discarded and the update was ignored

        Raises:
            AttributeError: For an unknown field name
        """
        if not self._active:
            self.logger.debug(f"Update ignored on discarded state: {sorted(changes)}")
            return False

        unknown = set(changes) - _FIELD_NAMES
        if unknown:
            raise AttributeError(f"Unknown dashboard fields: {', '.join(sorted(unknown))}")

        for name in _SEQUENCE_FIELDS:
            if name in changes:
                changes[name] = tuple(changes[name])
        if 'artist_images' in changes:
            changes['artist_images'] = MappingProxyType(dict(changes['artist_images']))

        self._snapshot = replace(self._snapshot, **changes)
        self._publish()
        return True

    def _publish(self) -> None:
        snapshot = self._snapshot
        for subscriber in list(self._subscribers):
            try:
                subscriber(snapshot)
            except Exception as e:
                self.logger.error(f"State subscriber failed: {e}", exc_info=True)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for every new snapshot

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def discard(self) -> None:
        """Stop accepting updates and drop all subscribers"""
        self._active = False
        self._subscribers.clear()
