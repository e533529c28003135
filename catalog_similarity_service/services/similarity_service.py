"""Service for "more like this" recommendations."""
import logging
import time
from dataclasses import replace
from typing import Dict, List, Optional

from catalog_similarity_service.config import get_fetch_timeout, get_max_results, get_similarity_policy
from catalog_similarity_service.ml.ranker import rank_candidates
from catalog_similarity_service.models import CatalogItem, ScoredCandidate, SimilarityPolicy
from catalog_similarity_service.services.candidate_pool import CandidatePoolBuilder
from catalog_similarity_service.services.catalog_source import CatalogSource

logger = logging.getLogger(__name__)


class SimilarItemsService:
    """
    Service for content-based "more like this" recommendations.
    Gathers candidates from the catalog and ranks them against a reference item.
    """

    def __init__(
            self,
            source: CatalogSource,
            policy: Optional[SimilarityPolicy] = None,
            default_max_results: Optional[int] = None,
            fetch_timeout: Optional[float] = None,
            max_workers: int = 4
    ):
        """
        Initialize the service.

        Args:
            source: Catalog lookups (e.g. TMDBClient)
            policy: Scoring policy (None = from config)
            default_max_results: Results per call when not given (None = from config)
            fetch_timeout: Seconds allowed for catalog lookups (None = from config)
            max_workers: Threads for concurrent lookups
        """
        self.source = source
        self.policy = policy or get_similarity_policy()
        self.default_max_results = default_max_results or get_max_results()
        self.fetch_timeout = fetch_timeout or get_fetch_timeout()
        self.pool_builder = CandidatePoolBuilder(source, max_workers=max_workers)

        logger.info("Initialized SimilarItemsService")
        logger.info(f"Weights: {self.policy.weights.to_dict()}, threshold: {self.policy.threshold}")

    def get_scored_items(
            self,
            reference: CatalogItem,
            max_results: Optional[int] = None,
            threshold: Optional[int] = None,
            timeout: Optional[float] = None
    ) -> List[ScoredCandidate]:
        """
        Rank similar items and keep their scores.

        Args:
            reference: Item to find similar items for
            max_results: Maximum number of results
            threshold: Minimum score (defaults to the policy's)
            timeout: Seconds allowed for all catalog lookups

        Returns:
            ScoredCandidates, best first (possibly empty)

        Raises:
            ValueError: Invalid max_results, threshold or timeout
        """
        max_results = self.default_max_results if max_results is None else max_results
        threshold = self.policy.threshold if threshold is None else threshold
        timeout = self.fetch_timeout if timeout is None else timeout

        if max_results <= 0:
            raise ValueError(f"max_results must be positive, got {max_results}")
        if threshold < 0 or threshold > 100:
            raise ValueError(f"threshold must be between 0 and 100, got {threshold}")
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")

        started = time.monotonic()
        keywords = self.pool_builder.fetch_keywords(reference, timeout=timeout)

        # Keyword lookup and pool building share one deadline
        remaining = max(timeout - (time.monotonic() - started), 0.001)
        candidates = self.pool_builder.build_pool(reference, keywords, timeout=remaining)

        if not candidates:
            logger.info(f"No candidates found for {reference.id!r}")
            return []

        return rank_candidates(
            reference,
            candidates,
            keywords,
            threshold=threshold,
            max_results=max_results,
            exclude_id=reference.id,
            policy=self.policy
        )

    def get_similar_items(
            self,
            reference: CatalogItem,
            max_results: Optional[int] = None,
            threshold: Optional[int] = None,
            timeout: Optional[float] = None
    ) -> List[CatalogItem]:
        """
        Get items similar to the reference item.

        Lookup failures degrade to fewer (or zero) results; they never raise.

        Args:
            reference: Item to find similar items for
            max_results: Maximum number of results
            threshold: Minimum score (defaults to the policy's)
            timeout: Seconds allowed for all catalog lookups

        Returns:
            Similar items, best first (possibly empty)
        """
        scored = self.get_scored_items(reference, max_results, threshold, timeout)
        media_type = reference.media_type or "movie"
        # Candidates share the reference's media type
        return [
            s.item if s.item.media_type else replace(s.item, media_type=media_type)
            for s in scored
        ]

    def get_stats(self) -> Dict:
        """Get the configuration this service scores with."""
        return {
            'weights': self.policy.weights.to_dict(),
            'generic_genre_ids': sorted(self.policy.generic_genre_ids),
            'threshold': self.policy.threshold,
            'default_max_results': self.default_max_results,
            'fetch_timeout': self.fetch_timeout
        }
