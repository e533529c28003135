"""Client for the TMDB catalog API"""
from typing import Dict, List, Optional, Sequence
import logging
import requests

from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from catalog_similarity_service.config import get_tmdb_api_token, get_tmdb_base_url
from catalog_similarity_service.models import CatalogItem, KeywordTag
from catalog_similarity_service.models.catalog_item import ItemId, keywords_from_tmdb
from catalog_similarity_service.services.catalog_source import MEDIA_TYPES

logger = logging.getLogger(__name__)

# TMDB ANDs with_keywords; more than a handful returns almost nothing
MAX_DISCOVER_KEYWORDS = 5


def _check_media_type(media_type: str) -> str:
    if media_type not in MEDIA_TYPES:
        raise ValueError(f"media_type must be one of {MEDIA_TYPES}, got {media_type!r}")
    return media_type


class TMDBClient:
    """Fetch items, keywords and candidate lists from TMDB."""

    def __init__(
            self,
            base_url: Optional[str] = None,
            api_token: Optional[str] = None,
            timeout: float = 10
    ):
        self.base_url = (base_url or get_tmdb_base_url()).rstrip('/')
        self.timeout = timeout

        # Configure session with retries
        self.session = requests.Session()
        self.session.headers['accept'] = 'application/json'
        token = api_token or get_tmdb_api_token()
        if token:
            self.session.headers['Authorization'] = f"Bearer {token}"

        retry_strategy = Retry(
            total=2,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        # noinspection HttpUrlsUsage
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _get(self, path: str, params: Optional[Dict] = None) -> Dict:
        url = f"{self.base_url}{path}"
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    # ===== ITEM ENDPOINTS =====

    def get_item(self, item_id: ItemId, media_type: str = "movie") -> CatalogItem:
        """Fetch a single movie or TV show by ID"""
        media_type = _check_media_type(media_type)
        data = self._get(f"/{media_type}/{item_id}")
        return CatalogItem.from_tmdb(data, media_type=media_type)

    def fetch_keywords(self, item_id: ItemId, media_type: str = "movie") -> List[KeywordTag]:
        """
        Fetch theme/topic keywords for an item.

        Movies return them under 'keywords', TV shows under 'results'.
        """
        media_type = _check_media_type(media_type)
        data = self._get(f"/{media_type}/{item_id}/keywords")
        entries = data.get('keywords')
        if entries is None:
            entries = data.get('results', [])
        return keywords_from_tmdb(entries)

    # ===== CANDIDATE ENDPOINTS =====

    def discover_by_genres_and_keywords(
            self,
            genre_ids: Sequence,
            keyword_ids: Sequence = (),
            page: int = 1,
            media_type: str = "movie"
    ) -> List[CatalogItem]:
        """
        Discover items having any of the genres and all of the first keywords.

        Args:
            genre_ids: Genre IDs (OR-ed)
            keyword_ids: Keyword IDs (AND-ed, first MAX_DISCOVER_KEYWORDS only)
            page: Result page
            media_type: 'movie' or 'tv'

        Returns:
            Items sorted by popularity
        """
        media_type = _check_media_type(media_type)
        if not genre_ids:
            return []

        params = {
            'with_genres': '|'.join(str(g) for g in genre_ids),
            'page': page,
            'sort_by': 'popularity.desc',
        }
        keyword_ids = [k for k in keyword_ids if k is not None][:MAX_DISCOVER_KEYWORDS]
        if keyword_ids:
            params['with_keywords'] = ','.join(str(k) for k in keyword_ids)

        data = self._get(f"/discover/{media_type}", params=params)
        return [CatalogItem.from_tmdb(r, media_type=media_type) for r in data.get('results', [])]

    def fetch_similar(self, item_id: ItemId, media_type: str = "movie") -> List[CatalogItem]:
        """Fetch TMDB's own similar-items list"""
        media_type = _check_media_type(media_type)
        data = self._get(f"/{media_type}/{item_id}/similar")
        return [CatalogItem.from_tmdb(r, media_type=media_type) for r in data.get('results', [])]
