"""
spotify-trends: Popular artists and trending tracks per language on top of the Spotify Web API

The Spotify Web API offers catalog search but no "what is trending" endpoint,
and nothing at all per language. spotify-trends approximates both by fanning
out a fixed list of keyword searches per language, merging the results
deterministically, and keeping that view fresh on a timer and on user events.

## Core Architecture

**Configuration (`spotify_trends/config/`)**
- Settings from YAML files, `.env` and environment variables
- Client-credentials token exchange shared by every catalog call

**Spotify Integration (`spotify_trends/spotify/`)**
- Async catalog search client over aiohttp with request throttling
- Data models for artists, albums, tracks and search results
- The language table: display names, trending keywords and markets

**Trending Engine (`spotify_trends/trending/`)**
- Keyword aggregation into a bounded, deduplicated trending set
- Artist resolution from tracks, enriched from the popular-artist roster
- Non-overlapping refresh scheduling with a recurring timer
- Debounced language switching and interactive search
- Immutable published snapshots with subscribers

**Social Feed (`spotify_trends/feed/`)**
- Read-only Reddit listings for music subreddits

**Utilities (`spotify_trends/utils/`)**
- Colored console and rotating file logging
- Debounce primitive, formatting and validation helpers

## Quick Start

```bash
pip install -e .

export SPOTIFY_CLIENT_ID=...
export SPOTIFY_CLIENT_SECRET=...

spotify-trends trending --language hindi
spotify-trends watch --language korean --interval 120
spotify-trends search "dua lipa"
```
"""

__version__ = "0.3.0"

__author__ = "Verryx-02"

__description__ = "Popular artists and trending tracks per language from the Spotify Web API"

__all__ = [
    "__version__",
    "__author__",
    "__description__",
]
