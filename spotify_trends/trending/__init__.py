"""
Trending package - refresh orchestration for the dashboard

Modules:

1. aggregator.py: keyword fan-out and merge into a TrendingSet, roster lookups
2. resolver.py: language-driven artist list and four-tier image fallbacks
3. scheduler.py: non-overlapping refresh runner with a recurring timer
4. search.py: debounced interactive search with stale-result suppression
5. state.py: immutable snapshots behind a publish/subscribe store
6. manager.py: TrendsManager, the single owner wiring everything together
7. views.py: read-only projections and local filtering for display

Usage:

    from spotify_trends.trending import TrendsManager

    manager = TrendsManager(language="hindi")
    await manager.start()
    manager.select_language("tamil")
    ...
    await manager.close()
"""

from .aggregator import TrendingAggregator, merge_keyword_results
from .resolver import ArtistResolver, resolve_artists, build_image_fallbacks
from .scheduler import RefreshScheduler, SchedulerState
from .search import SearchSession
from .state import DashboardSnapshot, DashboardState
from .manager import TrendsManager

__all__ = [
    'TrendingAggregator',
    'merge_keyword_results',
    'ArtistResolver',
    'resolve_artists',
    'build_image_fallbacks',
    'RefreshScheduler',
    'SchedulerState',
    'SearchSession',
    'DashboardSnapshot',
    'DashboardState',
    'TrendsManager',
]
