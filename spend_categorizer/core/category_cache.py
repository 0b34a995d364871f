"""
Category Cache

Maps normalized transaction names to categories across two tiers:
1. Remote store (durable, shared between users/sessions)
2. Local store (fallback, size-bounded, TTL-limited)

Remote failures never reach the caller: they are logged and the local tier
answers instead.
"""
import logging
from typing import Dict, Optional

from .categories import Category
from .errors import TransportError
from .models import normalize_key
from ..storage.local_cache import LocalCategoryCache
from ..storage.remote_cache import RemoteCategoryStore

logger = logging.getLogger(__name__)


class CategoryCache:
    """
    Two-tier read-through cache of description -> category
    """

    def __init__(self,
                 local: Optional[LocalCategoryCache] = None,
                 remote: Optional[RemoteCategoryStore] = None):
        """
        Args:
            local: Local fallback tier (in-memory if not given)
            remote: Remote tier, or None when no remote store is configured
        """
        self.local = local if local is not None else LocalCategoryCache()
        self.remote = remote

    def get(self, description: str) -> Optional[Category]:
        """
        Get category for a description (remote first, then local)

        A remote hit is copied into the local tier so it survives a later
        remote outage.
        """
        key = normalize_key(description)
        if not key:
            return None

        if self.remote is not None:
            try:
                stored = self.remote.get(key)
            except TransportError as e:
                logger.warning("Remote cache lookup failed, falling back to local cache: %s", e)
            else:
                category = Category.parse(stored) if stored is not None else None
                if category is not None and category.is_informative:
                    self.local.put(key, category)
                    return category
                if stored is not None:
                    logger.warning("Ignoring unusable remote cache value %r for %s", stored, key)

        return self.local.get(key)

    def put(self, description: str, category: Category):
        """
        Store a category in both tiers

        The local tier is written whatever happens remotely. Other is never
        cached.
        """
        key = normalize_key(description)
        if not key:
            return

        if not category.is_informative:
            logger.debug("Not caching uninformative category for %s", key)
            return

        if self.remote is not None:
            try:
                self.remote.put(key, category.value)
            except TransportError as e:
                logger.warning("Remote cache write failed, using local cache only: %s", e)

        self.local.put(key, category)

    def stats(self) -> Dict:
        stats = self.local.stats()
        stats['remote_configured'] = self.remote is not None
        return stats

    def __repr__(self) -> str:
        return f"CategoryCache(local={self.local!r}, remote={self.remote!r})"
