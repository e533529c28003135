"""Compute similarity scores between a reference item and a candidate."""
import math
from typing import AbstractSet, Dict, Iterable, NamedTuple, Optional, Sequence
import logging

import numpy as np

from catalog_similarity_service.ml.text_processor import jaccard_similarity, tokenize
from catalog_similarity_service.models import CatalogItem, KeywordTag, SimilarityPolicy

logger = logging.getLogger(__name__)


class GenreMatch(NamedTuple):
    """How a candidate's genres line up with the reference item's."""

    shared_count: int
    only_generic: bool


def genre_overlap(reference_ids: AbstractSet, candidate_ids: AbstractSet) -> float:
    """
    Shared genres over the larger of the two genre sets (not the union).

    A candidate matching only a few of a genre-rich reference's tags scores
    low even if every tag it has is shared.

    Returns:
        Overlap in [0, 1]; 0 if either set is empty
    """
    if not reference_ids or not candidate_ids:
        return 0.0

    shared = len(set(reference_ids) & set(candidate_ids))
    return shared / max(len(reference_ids), len(candidate_ids))


def genre_match_info(
    reference_ids: AbstractSet,
    candidate_ids: AbstractSet,
    generic_genre_ids: AbstractSet
) -> GenreMatch:
    """
    Count shared genres and flag single generic-genre matches.

    Args:
        reference_ids: Reference item genre IDs
        candidate_ids: Candidate genre IDs
        generic_genre_ids: Genres that are weak signals on their own

    Returns:
        GenreMatch(shared_count, only_generic)
    """
    shared = set(reference_ids or ()) & set(candidate_ids or ())
    only_generic = len(shared) == 1 and next(iter(shared)) in generic_genre_ids
    return GenreMatch(shared_count=len(shared), only_generic=only_generic)


def keyword_overlap(
    reference_keywords: Sequence[KeywordTag],
    candidate_keyword_names: Optional[AbstractSet[str]]
) -> float:
    """
    Fraction of the reference keywords that the candidate also has.

    Args:
        reference_keywords: Keywords of the reference item
        candidate_keyword_names: Lowercased candidate keyword names

    Returns:
        Overlap in [0, 1]; 0 if either side is empty
    """
    if not reference_keywords or not candidate_keyword_names:
        return 0.0

    matches = sum(1 for k in reference_keywords if k.name.lower() in candidate_keyword_names)
    return matches / len(reference_keywords)


def text_similarity(text_a: str | None, text_b: str | None) -> float:
    """Jaccard similarity of the two texts' token sets."""
    return jaccard_similarity(tokenize(text_a), tokenize(text_b))


def year_proximity(year_a: Optional[int], year_b: Optional[int]) -> float:
    """
    Step score on release year distance.

    Returns:
        1.0 same year, 0.6 one apart, 0.3 two apart, else 0.0 (also when unknown)
    """
    if year_a is None or year_b is None:
        return 0.0

    diff = abs(year_a - year_b)
    if diff == 0:
        return 1.0
    if diff == 1:
        return 0.6
    if diff == 2:
        return 0.3
    return 0.0


def quality_score(candidate: CatalogItem, min_vote_count: int = 50) -> float:
    """
    Coarse quality proxy from rating average, gated on vote count.

    Args:
        candidate: Item to score
        min_vote_count: Below this many votes the average is not trusted

    Returns:
        0.3 for too few votes, otherwise 1.0 / 0.7 / 0.5 / 0.2 by rating band
    """
    if candidate.rating_count < min_vote_count:
        return 0.3

    rating = candidate.rating_average
    if rating >= 7.5:
        return 1.0
    if rating >= 6.5:
        return 0.7
    if rating >= 5.5:
        return 0.5
    return 0.2


def round_score(total: float) -> int:
    """Clamp to [0, 100] and round half up."""
    return int(math.floor(min(100.0, max(0.0, total)) + 0.5))


def get_score_statistics(scores: Iterable[float]) -> Dict[str, float]:
    """
    Summary statistics for a batch of scores.

    Args:
        scores: Candidate scores

    Returns:
        Dictionary with mean, std, min, max and median (all 0.0 when empty)
    """
    values = np.asarray(list(scores), dtype=float)
    if values.size == 0:
        return {'count': 0, 'mean': 0.0, 'std': 0.0, 'min': 0.0, 'max': 0.0, 'median': 0.0}

    return {
        'count': int(values.size),
        'mean': float(values.mean()),
        'std': float(values.std()),
        'min': float(values.min()),
        'max': float(values.max()),
        'median': float(np.median(values))
    }


class SimilarityComputer:
    """Weighted multi-signal similarity between a reference item and candidates."""

    def __init__(self, policy: Optional[SimilarityPolicy] = None):
        """
        Initialize similarity computer.

        Args:
            policy: Weights and dampening/exclusion knobs (defaults if omitted)
        """
        self.policy = policy or SimilarityPolicy()

    @property
    def weights(self):
        return self.policy.weights

    def match_genres(self, reference: CatalogItem, candidate: CatalogItem) -> GenreMatch:
        """Genre match info using the policy's generic genre set."""
        return genre_match_info(reference.genre_ids, candidate.genre_ids, self.policy.generic_genre_ids)

    def score_breakdown(
        self,
        reference: CatalogItem,
        candidate: CatalogItem,
        reference_keywords: Sequence[KeywordTag] = (),
        candidate_keyword_names: Optional[AbstractSet[str]] = None
    ) -> Dict[str, float]:
        """
        Weighted contribution of each signal, before dampening.

        Args:
            reference: Reference item
            candidate: Candidate item
            reference_keywords: Keywords of the reference item
            candidate_keyword_names: Lowercased candidate keyword names
                (defaults to the candidate's attached keywords)

        Returns:
            Dict with genre, keywords, overview, release_year and vote_quality parts
        """
        if candidate_keyword_names is None:
            candidate_keyword_names = candidate.keyword_names

        weights = self.weights
        return {
            'genre': genre_overlap(reference.genre_ids, candidate.genre_ids) * weights.genre,
            'keywords': keyword_overlap(reference_keywords, candidate_keyword_names) * weights.keywords,
            'overview': text_similarity(reference.description, candidate.description) * weights.overview,
            'release_year': year_proximity(reference.release_year, candidate.release_year) * weights.release_year,
            'vote_quality': quality_score(candidate, self.policy.min_vote_count) * weights.vote_quality,
        }

    def compute_similarity_score(
        self,
        reference: CatalogItem,
        candidate: CatalogItem,
        reference_keywords: Sequence[KeywordTag] = (),
        candidate_keyword_names: Optional[AbstractSet[str]] = None
    ) -> int:
        """
        Compute a 0-100 similarity score.

        Candidates sharing no genre with the reference score 0 regardless of
        the other signals. A lone generic-genre match totalling below the
        dampening cutoff is scaled down by the dampening factor.

        Args:
            reference: Reference item
            candidate: Candidate item
            reference_keywords: Keywords of the reference item
            candidate_keyword_names: Lowercased candidate keyword names
                (defaults to the candidate's attached keywords)

        Returns:
            Integer score in [0, 100]
        """
        match = self.match_genres(reference, candidate)
        if match.shared_count == 0:
            return 0

        parts = self.score_breakdown(reference, candidate, reference_keywords, candidate_keyword_names)
        total = sum(parts.values())

        if match.only_generic and total < self.policy.dampening_cutoff:
            total *= self.policy.dampening_factor

        score = round_score(total)
        logger.debug(f"Scored candidate {candidate.id!r} against {reference.id!r}: {score} {parts}")
        return score
