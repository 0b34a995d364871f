"""
Categorization Orchestrator

The main engine that categorizes transactions using:
1. Rule matching (free, no I/O)
2. Category cache (remote store, then local fallback)
3. LLM suggestions in rate-limited batches (for whatever is left)

New LLM answers are written back to the cache in the background so the same
description is never sent to the classifier twice.
"""
import logging
import threading
import time
from collections import Counter
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .categories import Category
from .category_cache import CategoryCache
from .errors import ConfigurationError
from .llm_categorizer import AnthropicTransport, LLMCategorizer
from .models import Transaction
from .rule_matcher import RuleMatcher
from ..storage.local_cache import LocalCategoryCache
from ..storage.remote_cache import RemoteCategoryStore

logger = logging.getLogger(__name__)


class CategorizationOrchestrator:
    """
    Orchestrates transaction categorization using multiple strategies
    """

    def __init__(self,
                 rule_matcher: Optional[RuleMatcher] = None,
                 cache: Optional[CategoryCache] = None,
                 llm_categorizer: Optional[LLMCategorizer] = None,
                 batch_size: Optional[int] = None,
                 batch_delay: float = 1.0,
                 lookup_workers: int = 8,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            rule_matcher: Keyword rules (built-in rules if not given)
            cache: Category cache, or None to skip the cache stage
            llm_categorizer: Batch classifier, or None to skip the LLM stage
            batch_size: Descriptions per classifier call (defaults to the
                classifier's max_batch_size)
            batch_delay: Seconds to wait between classifier calls
            lookup_workers: Threads used for concurrent cache lookups
            sleep: Sleep function for the inter-batch delay (injected by tests)
        """
        self.rule_matcher = rule_matcher if rule_matcher is not None else RuleMatcher()
        self.cache = cache
        self.llm_categorizer = llm_categorizer
        self.batch_delay = batch_delay
        self._sleep = sleep

        if llm_categorizer is not None:
            self.batch_size = min(batch_size or llm_categorizer.max_batch_size,
                                  llm_categorizer.max_batch_size)
        else:
            self.batch_size = batch_size or 20

        self._lookup_pool = ThreadPoolExecutor(max_workers=lookup_workers,
                                               thread_name_prefix='category-lookup')
        self._writer_pool = ThreadPoolExecutor(max_workers=1,
                                               thread_name_prefix='category-writeback')
        self._pending_writes = set()
        self._pending_lock = threading.Lock()

        # Stats
        self.stats = Counter({
            'total': 0,
            'rule_match': 0,
            'cache_hit': 0,
            'llm_suggest': 0,
            'unresolved': 0,
            'llm_batches': 0,
            'exhausted_batches': 0,
        })

    @property
    def llm_enabled(self) -> bool:
        return self.llm_categorizer is not None and self.llm_categorizer.enabled

    def resolve(self, transactions: Sequence[Transaction]) -> List[Transaction]:
        """
        Categorize every transaction that has no category yet (or Other)

        Transactions sharing a description are resolved together. The input
        is left untouched; a new list is returned.

        Args:
            transactions: List of Transaction objects

        Returns:
            New list of transactions, same order, categories filled in
        """
        if not isinstance(transactions, (list, tuple)):
            raise TypeError(f"Expected a list of transactions, got {type(transactions).__name__}")
        for txn in transactions:
            if not isinstance(txn, Transaction):
                raise TypeError(f"Expected Transaction, got {type(txn).__name__}")

        # Distinct descriptions, first-seen order
        descriptions = list(dict.fromkeys(t.description for t in transactions if t.needs_category))
        if not descriptions:
            return list(transactions)

        resolved = self._resolve_descriptions(descriptions)

        return [
            txn.with_category(resolved.get(txn.description, Category.OTHER)) if txn.needs_category else txn
            for txn in transactions
        ]

    def resolve_description(self, description: str) -> Category:
        """Resolve a single description through the same pipeline"""
        return self._resolve_descriptions([description]).get(description, Category.OTHER)

    def _resolve_descriptions(self, descriptions: List[str]) -> Dict[str, Category]:
        self.stats['total'] += len(descriptions)

        # First pass: rules
        rule_hits = self._match_rules(descriptions)
        remaining = [d for d in descriptions if d not in rule_hits]

        # Second pass: cache
        cache_hits = self._lookup_cache(remaining)
        remaining = [d for d in remaining if d not in cache_hits]

        # Third pass: LLM for whatever is left
        llm_hits = self._classify(remaining)

        resolved: Dict[str, Category] = {}
        for desc in descriptions:
            category = rule_hits.get(desc) or cache_hits.get(desc) or llm_hits.get(desc) or Category.OTHER
            resolved[desc] = category

        learned = {d: c for d, c in llm_hits.items() if c.is_informative}
        self.stats['llm_suggest'] += len(learned)
        self.stats['unresolved'] += sum(1 for c in resolved.values() if c is Category.OTHER)

        if learned:
            self._remember(learned)

        logger.info("Resolved %d descriptions: %d by rules, %d from cache, %d by LLM, %d left as Other",
                    len(descriptions), len(rule_hits), len(cache_hits), len(learned),
                    sum(1 for c in resolved.values() if c is Category.OTHER))
        return resolved

    def _match_rules(self, descriptions: Iterable[str]) -> Dict[str, Category]:
        hits = {}
        for desc in descriptions:
            category = self.rule_matcher.match(desc)
            if category is not None:
                hits[desc] = category

        self.stats['rule_match'] += len(hits)
        return hits

    def _lookup_cache(self, descriptions: List[str]) -> Dict[str, Category]:
        if self.cache is None or not descriptions:
            return {}

        # Lookups are independent reads, so run them side by side
        results = self._lookup_pool.map(self.cache.get, descriptions)
        hits = {desc: category for desc, category in zip(descriptions, results) if category is not None}

        self.stats['cache_hit'] += len(hits)
        return hits

    def _classify(self, descriptions: List[str]) -> Dict[str, Category]:
        if not descriptions or not self.llm_enabled:
            return {}

        batches = [descriptions[i:i + self.batch_size] for i in range(0, len(descriptions), self.batch_size)]
        if len(batches) > 1:
            logger.info("Classifying %d descriptions in %d batches", len(descriptions), len(batches))

        results: Dict[str, Category] = {}
        # One batch at a time: the delay between them is the rate limit
        for index, batch in enumerate(batches):
            if index > 0:
                self._sleep(self.batch_delay)

            batch_result = self.llm_categorizer.classify_batch(batch)
            self.stats['llm_batches'] += 1
            if batch_result.exhausted:
                self.stats['exhausted_batches'] += 1

            results.update(batch_result.categories)
            categorized = sum(1 for c in batch_result.categories.values() if c.is_informative)
            logger.debug("Batch %d/%d: categorized %d/%d", index + 1, len(batches), categorized, len(batch))

        return results

    def _remember(self, learned: Dict[str, Category]):
        """Write learned categories to the cache without waiting for the result"""
        if self.cache is None:
            return

        for desc, category in learned.items():
            future = self._writer_pool.submit(self.cache.put, desc, category)
            with self._pending_lock:
                self._pending_writes.add(future)
            future.add_done_callback(self._write_done)

    def _write_done(self, future: Future):
        with self._pending_lock:
            self._pending_writes.discard(future)

        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.warning("Background cache write failed: %s", error)

    def wait_for_pending_writes(self, timeout: Optional[float] = None) -> bool:
        """
        Block until background cache writes have finished

        Returns:
            True if every pending write completed within the timeout
        """
        with self._pending_lock:
            pending = list(self._pending_writes)
        if not pending:
            return True

        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def close(self):
        """Finish pending cache writes and release worker threads"""
        self.wait_for_pending_writes()
        self._lookup_pool.shutdown(wait=True)
        self._writer_pool.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def print_stats(self):
        """Print categorization statistics"""
        if self.stats['total'] == 0:
            print("No transactions categorized yet")
            return

        total = self.stats['total']

        print("\n" + "=" * 80)
        print("📊 CATEGORIZATION STATISTICS")
        print("=" * 80)
        print(f"Unique descriptions: {total}")
        print(f"\n✅ Categorization Results:")
        print(f"  • Rule match: {self.stats['rule_match']} ({self.stats['rule_match']/total*100:.1f}%)")
        print(f"  • Cache hit: {self.stats['cache_hit']} ({self.stats['cache_hit']/total*100:.1f}%)")

        if self.llm_enabled:
            print(f"  • LLM suggestion: {self.stats['llm_suggest']} ({self.stats['llm_suggest']/total*100:.1f}%)")
            print(f"  • LLM batches: {self.stats['llm_batches']} ({self.stats['exhausted_batches']} failed)")

        print(f"\n📋 Left as Other: {self.stats['unresolved']} ({self.stats['unresolved']/total*100:.1f}%)")
        print("=" * 80)


def category_distribution(transactions: Iterable[Transaction]) -> Dict[Category, int]:
    """Count transactions per category; uncategorized ones count as Other"""
    counts: Dict[Category, int] = Counter()
    for txn in transactions:
        counts[txn.category or Category.OTHER] += 1
    return dict(counts)


def create_orchestrator(settings=None, use_llm: Optional[bool] = None,
                        use_remote: Optional[bool] = None) -> CategorizationOrchestrator:
    """
    Build the full pipeline from configuration

    Args:
        settings: Settings object (read from the environment if None)
        use_llm: Override settings.enable_llm
        use_remote: Set False to skip the remote cache tier

    Returns:
        Ready-to-use orchestrator
    """
    from ..config import Settings

    settings = settings or Settings.from_env()

    remote = None
    if settings.remote_configured and use_remote is not False:
        remote = RemoteCategoryStore(dsn=settings.database_url,
                                     port=settings.db_port,
                                     connect_timeout=settings.db_connect_timeout)
    else:
        logger.info("No remote category store configured, using local cache only")

    local = LocalCategoryCache(
        path=settings.local_cache_path,
        max_entries=settings.local_cache_max_entries,
        ttl=timedelta(days=settings.local_cache_ttl_days),
    )
    cache = CategoryCache(local=local, remote=remote)

    enable_llm = settings.enable_llm if use_llm is None else use_llm
    transport = None
    if enable_llm:
        try:
            transport = AnthropicTransport(
                api_key=settings.anthropic_api_key,
                model=settings.llm_model,
                max_tokens=settings.llm_max_tokens,
            )
        except ConfigurationError as e:
            logger.warning("LLM categorization disabled: %s", e)

    llm_categorizer = None
    if transport is not None:
        llm_categorizer = LLMCategorizer(
            transport,
            max_batch_size=settings.batch_size,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            retry_base_delay=settings.retry_base_delay,
        )

    return CategorizationOrchestrator(
        rule_matcher=RuleMatcher(),
        cache=cache,
        llm_categorizer=llm_categorizer,
        batch_size=settings.batch_size,
        batch_delay=settings.batch_delay,
    )
