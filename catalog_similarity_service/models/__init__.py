"""Value objects used by the similarity engine"""

from catalog_similarity_service.models.catalog_item import CatalogItem, KeywordTag
from catalog_similarity_service.models.scored_candidate import ScoredCandidate
from catalog_similarity_service.models.similarity_weights import SimilarityPolicy, SimilarityWeights

__all__ = [
    "CatalogItem",
    "KeywordTag",
    "ScoredCandidate",
    "SimilarityPolicy",
    "SimilarityWeights",
]
