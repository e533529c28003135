"""Retrieval interface the candidate pool is built from."""
from typing import List, Protocol, Sequence

from catalog_similarity_service.models import CatalogItem, KeywordTag
from catalog_similarity_service.models.catalog_item import ItemId

MEDIA_TYPES = ("movie", "tv")


class CatalogSource(Protocol):
    """External catalog lookups. Implementations may raise on failure."""

    def fetch_keywords(self, item_id: ItemId, media_type: str = "movie") -> List[KeywordTag]:
        """Theme tags for an item."""
        ...

    def discover_by_genres_and_keywords(
        self,
        genre_ids: Sequence,
        keyword_ids: Sequence = (),
        page: int = 1,
        media_type: str = "movie"
    ) -> List[CatalogItem]:
        """Items having any of the genres and all of the keywords."""
        ...

    def fetch_similar(self, item_id: ItemId, media_type: str = "movie") -> List[CatalogItem]:
        """The catalog's own "similar items" list."""
        ...
