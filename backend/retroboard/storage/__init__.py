"""Storage layer: MongoDB access and the response cache."""

from retroboard.storage.cache import CacheEntry, TTLCache
from retroboard.storage.repository import StatsRepository

__all__ = ["CacheEntry", "TTLCache", "StatsRepository"]
