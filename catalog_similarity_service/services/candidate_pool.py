"""Gather candidate items for a reference item from several catalog lookups."""
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Optional, Sequence

from catalog_similarity_service.ml.ranker import dedupe_candidates
from catalog_similarity_service.models import CatalogItem, KeywordTag
from catalog_similarity_service.services.catalog_source import CatalogSource

logger = logging.getLogger(__name__)


class CandidatePoolBuilder:
    """
    Build a deduplicated candidate pool.

    Lookups run concurrently. A lookup that raises or misses the deadline
    contributes nothing instead of failing the whole pool.
    """

    def __init__(self, source: CatalogSource, max_workers: int = 4):
        """
        Args:
            source: Catalog lookups (e.g. TMDBClient)
            max_workers: Threads used for concurrent lookups
        """
        if max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self.source = source
        self.max_workers = max_workers

    def _run_isolated(self, tasks: Dict[str, Callable[[], List]], timeout: Optional[float]) -> Dict[str, List]:
        """
        Run independent lookups concurrently and collect their results.

        Args:
            tasks: Name -> zero-argument callable
            timeout: Seconds to wait for all of them (None waits indefinitely)

        Returns:
            Name -> result list (empty for failed or timed-out lookups)
        """
        if timeout is not None and timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")

        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="candidate-pool")
        try:
            futures = {name: executor.submit(task) for name, task in tasks.items()}
            done, _ = wait(futures.values(), timeout=timeout)

            results: Dict[str, List] = {}
            for name, future in futures.items():
                if future not in done:
                    future.cancel()
                    logger.warning(f"Lookup '{name}' did not finish within {timeout}s; ignoring it")
                    results[name] = []
                    continue
                try:
                    results[name] = list(future.result() or [])
                except Exception as e:
                    logger.warning(f"Lookup '{name}' failed: {e}")
                    results[name] = []
            return results
        finally:
            # Abandon stragglers rather than block on them
            executor.shutdown(wait=False, cancel_futures=True)

    def fetch_keywords(self, reference: CatalogItem, timeout: Optional[float] = None) -> List[KeywordTag]:
        """
        Fetch the reference item's keywords.

        Returns:
            Keywords, or an empty list if the lookup fails
        """
        media_type = reference.media_type or "movie"
        results = self._run_isolated(
            {'keywords': lambda: self.source.fetch_keywords(reference.id, media_type)},
            timeout
        )
        keywords = results['keywords']
        logger.info(f"Fetched {len(keywords)} keywords for {media_type} {reference.id!r}")
        return keywords

    def build_pool(
        self,
        reference: CatalogItem,
        keywords: Sequence[KeywordTag] = (),
        timeout: Optional[float] = None
    ) -> List[CatalogItem]:
        """
        Merge discovery and similar-items lookups into one pool.

        Discovery runs twice: page 1 filtered by the reference's keywords and
        page 2 by genre only. Discovery is skipped when the reference has no
        genres.

        Args:
            reference: Reference item (never included in the pool)
            keywords: Reference keywords used to narrow discovery
            timeout: Seconds to wait for the lookups

        Returns:
            Unique candidates: discovery results first, then similar items
        """
        media_type = reference.media_type or "movie"
        genre_ids = sorted(reference.genre_ids, key=str)
        keyword_ids = [k.id for k in keywords if k.id is not None]

        tasks: Dict[str, Callable[[], List]] = {}
        if genre_ids:
            tasks['discover_keywords'] = lambda: self.source.discover_by_genres_and_keywords(
                genre_ids, keyword_ids, 1, media_type
            )
            tasks['discover_genres'] = lambda: self.source.discover_by_genres_and_keywords(
                genre_ids, [], 2, media_type
            )
        tasks['similar'] = lambda: self.source.fetch_similar(reference.id, media_type)

        results = self._run_isolated(tasks, timeout)

        merged = []
        for name in ('discover_keywords', 'discover_genres', 'similar'):
            merged.extend(results.get(name, []))

        pool = dedupe_candidates(merged, exclude_id=reference.id)
        logger.info(f"✓ Built candidate pool of {len(pool)} items for {media_type} {reference.id!r}")
        return pool
