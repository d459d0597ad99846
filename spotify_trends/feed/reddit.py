"""
Read-only Reddit feed client

Fetches the hot listing of a subreddit, or searches it, through Reddit's
public JSON endpoints. No authentication is used; Reddit only requires a
descriptive User-Agent. Failures surface as a single FeedError message and
are never retried.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import asyncio
import aiohttp

from ..config.settings import get_settings
from ..exceptions import FeedError
from ..utils.logger import get_logger


@dataclass
class RedditPost:
    """One post from a listing's `data.children[].data`"""
    title: str
    selftext: str
    author: str
    score: int
    num_comments: int
    created_utc: float
    subreddit: str
    thumbnail: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_reddit_data(cls, data: Dict[str, Any]) -> 'RedditPost':
        return cls(
            title=data['title'],
            selftext=data.get('selftext') or "",
            author=data['author'],
            score=int(data['score']),
            num_comments=int(data['num_comments']),
            created_utc=float(data['created_utc']),
            subreddit=data['subreddit'],
            thumbnail=data.get('thumbnail') or None,
            url=data.get('url') or None,
        )

    @property
    def has_thumbnail(self) -> bool:
        # Reddit uses placeholders such as "self" and "default" instead of a URL
        return bool(self.thumbnail) and self.thumbnail.startswith('http')


class FeedClient:
    """
    Async client for subreddit listings

    Attributes:
        base_url: Reddit root URL
        subreddit: Default subreddit
        limit: Default number of posts
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        subreddit: Optional[str] = None,
        limit: Optional[int] = None,
        user_agent: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        feed = settings.feed

        self.base_url = (base_url or feed.base_url).rstrip('/')
        self.subreddit = subreddit or feed.subreddit
        self.limit = limit or feed.limit
        self.user_agent = user_agent or feed.user_agent
        self.timeout = timeout or settings.network.request_timeout
        self.logger = get_logger(__name__)

        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def hot(self, subreddit: Optional[str] = None, limit: Optional[int] = None) -> List[RedditPost]:
        """
        Fetch the hot listing

        Raises:
            FeedError: Network failure, error status or unexpected payload
        """
        url = f"{self.base_url}/r/{subreddit or self.subreddit}/hot.json"
        return await self._fetch(url, {'limit': str(limit or self.limit)})

    async def search(
        self,
        query: str,
        subreddit: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[RedditPost]:
        """
        Search posts within a subreddit by relevance

        An empty query falls back to the hot listing.

        Raises:
            FeedError: Network failure, error status or unexpected payload
        """
        if not query or not query.strip():
            return await self.hot(subreddit, limit)

        url = f"{self.base_url}/r/{subreddit or self.subreddit}/search.json"
        params = {
            'q': query.strip(),
            'limit': str(limit or self.limit),
            'sort': 'relevance',
            'restrict_sr': '1',
        }
        return await self._fetch(url, params)

    async def _fetch(self, url: str, params: Dict[str, str]) -> List[RedditPost]:
        session = await self._get_session()
        try:
            async with session.get(url, params=params, headers={'User-Agent': self.user_agent}) as response:
                if response.status != 200:
                    raise FeedError(f"Network error: HTTP {response.status}", details={'url': url})
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error(f"Reddit request failed: {e}")
            raise FeedError(f"Network error: {e}", details={'url': url}) from e
        except ValueError as e:
            raise FeedError("Failed to load posts: invalid JSON", details={'url': url}) from e

        try:
            children = payload['data']['children']
            return [RedditPost.from_reddit_data(child['data']) for child in children]
        except (KeyError, TypeError, ValueError) as e:
            self.logger.error(f"Reddit decoding error: {e}")
            raise FeedError(f"Failed to load posts: {e}", details={'url': url}) from e
