"""Reading cache backends."""

from .base import ReadingCache
from .memory import InMemoryReadingCache
from .redis import RedisReadingCache

__all__ = [
    "ReadingCache",
    "InMemoryReadingCache",
    "RedisReadingCache",
]
