"""A candidate paired with its similarity score."""
from dataclasses import dataclass

from catalog_similarity_service.models.catalog_item import CatalogItem


@dataclass(frozen=True)
class ScoredCandidate:
    """Produced per ranking call; never persisted."""

    item: CatalogItem
    score: int

    def __repr__(self):
        return f"<ScoredCandidate(id={self.item.id}, score={self.score})>"
