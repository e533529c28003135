"""Exclusion policy and ranking of scored candidates."""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence

from catalog_similarity_service.ml.similarity_computer import SimilarityComputer, get_score_statistics
from catalog_similarity_service.models import CatalogItem, KeywordTag, ScoredCandidate, SimilarityPolicy
from catalog_similarity_service.models.catalog_item import ItemId

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 6


def should_exclude(
    reference: CatalogItem,
    candidate: CatalogItem,
    score: int,
    policy: Optional[SimilarityPolicy] = None,
    threshold: Optional[int] = None
) -> bool:
    """
    Decide whether a scored candidate is dropped outright.

    A lone generic-genre match has to clear threshold + generic_margin
    rather than the plain threshold.

    Args:
        reference: Reference item
        candidate: Candidate item
        score: Candidate score
        policy: Scoring policy (defaults if omitted)
        threshold: Threshold in effect (defaults to the policy's)

    Returns:
        True if the candidate must be excluded
    """
    policy = policy or SimilarityPolicy()
    if threshold is None:
        threshold = policy.threshold

    match = SimilarityComputer(policy).match_genres(reference, candidate)
    if match.shared_count == 0:
        return True
    if match.only_generic and score < threshold + policy.generic_margin:
        return True
    return False


def dedupe_candidates(candidates: Iterable[CatalogItem], exclude_id: Optional[ItemId] = None) -> List[CatalogItem]:
    """
    Drop repeated identifiers (first occurrence wins) and the excluded identifier.

    Args:
        candidates: Candidate items in pool order
        exclude_id: Identifier that must never appear (usually the reference item)

    Returns:
        Unique candidates in first-seen order
    """
    seen = set()
    unique = []
    for candidate in candidates:
        if candidate is None or candidate.id is None:
            continue
        if candidate.id == exclude_id or candidate.id in seen:
            continue
        seen.add(candidate.id)
        unique.append(candidate)
    return unique


def _tie_break_key(scored: ScoredCandidate):
    """Score descending, then identifier ascending (numeric IDs before string IDs)."""
    item_id = scored.item.id
    if isinstance(item_id, str):
        return -scored.score, 1, 0, item_id
    return -scored.score, 0, item_id, ""


def rank_candidates(
    reference: CatalogItem,
    candidates: Iterable[CatalogItem],
    reference_keywords: Sequence[KeywordTag] = (),
    threshold: Optional[int] = None,
    max_results: int = DEFAULT_MAX_RESULTS,
    exclude_id: Optional[ItemId] = None,
    policy: Optional[SimilarityPolicy] = None,
    workers: Optional[int] = None
) -> List[ScoredCandidate]:
    """
    Score, filter and rank candidates against a reference item.

    Args:
        reference: Reference item
        candidates: Candidate pool (may contain duplicates and the reference)
        reference_keywords: Keywords of the reference item
        threshold: Minimum score to keep (defaults to the policy's, 25)
        max_results: Maximum number of results
        exclude_id: Identifier to drop (defaults to reference.id)
        policy: Scoring policy (defaults if omitted)
        workers: Score with a thread pool of this size when > 1

    Returns:
        ScoredCandidates sorted by score descending, ties by identifier

    Raises:
        ValueError: threshold outside [0, 100] or max_results <= 0
    """
    policy = policy or SimilarityPolicy()
    if threshold is None:
        threshold = policy.threshold
    if threshold < 0 or threshold > 100:
        raise ValueError(f"threshold must be between 0 and 100, got {threshold}")
    if max_results <= 0:
        raise ValueError(f"max_results must be positive, got {max_results}")
    if exclude_id is None:
        exclude_id = reference.id

    unique = dedupe_candidates(candidates, exclude_id=exclude_id)
    computer = SimilarityComputer(policy)
    reference_keywords = list(reference_keywords or ())

    def score(candidate: CatalogItem) -> int:
        return computer.compute_similarity_score(reference, candidate, reference_keywords)

    if workers and workers > 1 and len(unique) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            scores = list(executor.map(score, unique))
    else:
        scores = [score(candidate) for candidate in unique]

    scored = []
    for candidate, candidate_score in zip(unique, scores):
        if should_exclude(reference, candidate, candidate_score, policy, threshold):
            continue
        if candidate_score < threshold:
            continue
        scored.append(ScoredCandidate(item=candidate, score=candidate_score))

    scored.sort(key=_tie_break_key)
    ranked = scored[:max_results]

    stats = get_score_statistics(scores)
    logger.info(
        f"Ranked {len(unique)} candidates for {reference.id!r}: {len(scored)} passed, "
        f"returning {len(ranked)} (score mean {stats['mean']:.1f}, max {stats['max']:.0f})"
    )
    return ranked
