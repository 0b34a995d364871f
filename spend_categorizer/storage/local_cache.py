"""
Local category cache

Size-bounded fallback tier kept in memory and mirrored to a JSON file:

    {"version": 1,
     "mappings": {"TESCO STORES": {"category": "Food & Dining", "timestamp": 1700000000000}}}

Entries older than the TTL are ignored on read. When a new key would push
the cache past `max_entries`, the oldest entries (by timestamp) are evicted
first.
"""
import json
import logging
import os
import tempfile
import threading
import time
from datetime import timedelta
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from ..core.categories import Category

logger = logging.getLogger(__name__)

CACHE_VERSION = 1
DEFAULT_MAX_ENTRIES = 1000
DEFAULT_TTL = timedelta(days=30)


def _valid_entry(entry) -> bool:
    """{"category": str, "timestamp": epoch millis}"""
    if not isinstance(entry, dict):
        return False
    timestamp = entry.get('timestamp')
    return (isinstance(entry.get('category'), str)
            and isinstance(timestamp, (int, float))
            and not isinstance(timestamp, bool))


class LocalCategoryCache:
    """
    Local tier of the category cache

    All reads and writes go through one lock: eviction is a read-modify-write
    on the shared mapping.
    """

    def __init__(self,
                 path: Optional[Union[str, Path]] = None,
                 max_entries: int = DEFAULT_MAX_ENTRIES,
                 ttl: timedelta = DEFAULT_TTL,
                 clock: Callable[[], float] = time.time):
        """
        Args:
            path: JSON file to persist to. None keeps the cache in memory only.
            max_entries: Upper bound on stored mappings
            ttl: Maximum age of an entry that is still served
            clock: Returns the current time in epoch seconds
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self.path = Path(path).expanduser() if path else None
        self.max_entries = max_entries
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._mappings: Dict[str, Dict] = self._load()

    def _now_millis(self) -> int:
        return int(self._clock() * 1000)

    def _load(self) -> Dict[str, Dict]:
        if self.path is None or not self.path.exists():
            return {}

        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Local category cache at %s is unreadable, starting empty: %s", self.path, e)
            return {}

        if not isinstance(data, dict) or data.get('version') != CACHE_VERSION:
            logger.info("Local category cache at %s has an old format, starting empty", self.path)
            return {}

        mappings = data.get('mappings')
        if not isinstance(mappings, dict):
            return {}

        entries = {key: entry for key, entry in mappings.items() if _valid_entry(entry)}
        if len(entries) < len(mappings):
            logger.warning("Dropped %d malformed entries from local category cache at %s",
                           len(mappings) - len(entries), self.path)
        return entries

    def _save(self):
        if self.path is None:
            return

        payload = {'version': CACHE_VERSION, 'mappings': self._mappings}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix='.category_cache.', suffix='.tmp')
            try:
                with os.fdopen(fd, 'w') as f:
                    json.dump(payload, f)
                os.replace(tmp_name, self.path)
            except BaseException:
                os.unlink(tmp_name)
                raise
        except OSError as e:
            logger.warning("Local category cache write to %s failed: %s", self.path, e)

    def get(self, key: str) -> Optional[Category]:
        """
        Look up a normalized key

        Returns:
            The cached category, or None on a miss or an expired entry
        """
        with self._lock:
            entry = self._mappings.get(key)

        if entry is None:
            return None

        age_millis = self._now_millis() - entry['timestamp']
        if age_millis > self.ttl.total_seconds() * 1000:
            logger.debug("Local cache entry for %s expired", key)
            return None

        category = Category.parse(entry['category'])
        if category is None or category is Category.OTHER:
            return None
        return category

    def put(self, key: str, category: Category):
        """
        Store or refresh a mapping, evicting the oldest entries if the cache is full

        Other is never stored.
        """
        if category is Category.OTHER:
            return

        with self._lock:
            if key not in self._mappings:
                overflow = len(self._mappings) + 1 - self.max_entries
                if overflow > 0:
                    self._evict_oldest(overflow)

            self._mappings[key] = {
                'category': category.value,
                'timestamp': self._now_millis(),
            }
            self._save()

    def _evict_oldest(self, count: int):
        # sorted() is stable: equal timestamps go in insertion order
        oldest = sorted(self._mappings.items(), key=lambda item: item[1]['timestamp'])[:count]
        for key, _ in oldest:
            del self._mappings[key]

        logger.debug("Evicted %d oldest local cache entries", len(oldest))

    def stats(self) -> Dict:
        """Number of cached mappings and their contents"""
        with self._lock:
            entries = [
                {'name': key, 'category': entry['category']}
                for key, entry in self._mappings.items()
            ]
        return {'total': len(entries), 'entries': entries}

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._mappings

    def __len__(self) -> int:
        with self._lock:
            return len(self._mappings)

    def __repr__(self) -> str:
        location = str(self.path) if self.path else 'memory'
        return f"LocalCategoryCache({location}, max_entries={self.max_entries})"
