"""Service classes"""

from .candidate_pool import CandidatePoolBuilder
from .similarity_service import SimilarItemsService
from .tmdb_client import TMDBClient

__all__ = ["CandidatePoolBuilder", "SimilarItemsService", "TMDBClient"]
