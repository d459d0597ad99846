"""
Social feed package
Read-only Reddit listing client used by the `feed` command
"""

from .reddit import FeedClient, RedditPost

__all__ = [
    'FeedClient',
    'RedditPost',
]
