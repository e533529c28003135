"""Scoring weights and policy knobs for similarity scoring."""
import logging
from dataclasses import dataclass, field, fields

logger = logging.getLogger(__name__)

# TMDB genre IDs: Drama, Comedy, Thriller
DEFAULT_GENERIC_GENRE_IDS = frozenset({18, 35, 53})


@dataclass(frozen=True)
class SimilarityWeights:
    """Per-signal weights. Should sum to 100 so scores land on a 0-100 scale."""

    genre: float = 40
    keywords: float = 25
    overview: float = 20
    release_year: float = 8
    vote_quality: float = 7

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 0:
                raise ValueError(f"Weight '{f.name}' must be non-negative, got {value}")

        if abs(self.total - 100) > 1e-9:
            logger.warning(f"Similarity weights sum to {self.total}, not 100; scores will be clamped to [0, 100]")

    @property
    def total(self) -> float:
        return self.genre + self.keywords + self.overview + self.release_year + self.vote_quality

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class SimilarityPolicy:
    """
    Everything that tunes scoring and exclusion.

    Attributes:
        weights: Per-signal weights
        generic_genre_ids: Genres that are weak signals when they are the only match
        threshold: Minimum score for a candidate to be returned
        generic_margin: Extra score a generic-only match needs above the threshold
        dampening_cutoff: Generic-only totals below this are dampened
        dampening_factor: Multiplier applied when dampening
        min_vote_count: Vote count below which the quality signal is low-confidence
    """

    weights: SimilarityWeights = field(default_factory=SimilarityWeights)
    generic_genre_ids: frozenset = DEFAULT_GENERIC_GENRE_IDS
    threshold: int = 25
    generic_margin: int = 15
    dampening_cutoff: float = 45
    dampening_factor: float = 0.6
    min_vote_count: int = 50

    def __post_init__(self):
        if self.threshold < 0 or self.threshold > 100:
            raise ValueError(f"threshold must be between 0 and 100, got {self.threshold}")
        if self.generic_margin < 0:
            raise ValueError(f"generic_margin must be non-negative, got {self.generic_margin}")
        if not 0 <= self.dampening_factor <= 1:
            raise ValueError(f"dampening_factor must be between 0 and 1, got {self.dampening_factor}")
        if self.min_vote_count < 0:
            raise ValueError(f"min_vote_count must be non-negative, got {self.min_vote_count}")
        # Accept any iterable of IDs
        object.__setattr__(self, "generic_genre_ids", frozenset(self.generic_genre_ids))
