"""Shared test fixtures and configuration for pytest."""
import pytest
from unittest.mock import Mock
from typing import Dict, List

from catalog_similarity_service.models import CatalogItem, KeywordTag, SimilarityPolicy

ACTION = 28
SCIFI = 878
ADVENTURE = 12
DRAMA = 18
COMEDY = 35
HORROR = 27


# ===== Sample Data Fixtures =====

@pytest.fixture
def sample_movie_payload() -> Dict:
    """TMDB movie detail payload."""
    return {
        'id': 603,
        'title': 'The Matrix',
        'overview': 'A computer hacker learns about the true nature of reality.',
        'genres': [{'id': ACTION, 'name': 'Action'}, {'id': SCIFI, 'name': 'Science Fiction'}],
        'release_date': '1999-03-30',
        'vote_average': 8.2,
        'vote_count': 24000,
    }


@pytest.fixture
def sample_tv_payload() -> Dict:
    """TMDB TV result payload (list-endpoint shape)."""
    return {
        'id': 1396,
        'name': 'Breaking Bad',
        'overview': 'A high school chemistry teacher turned methamphetamine producer.',
        'genre_ids': [DRAMA, 80],
        'first_air_date': '2008-01-20',
        'vote_average': 8.9,
        'vote_count': 13000,
    }


@pytest.fixture
def reference_item() -> CatalogItem:
    """Action/sci-fi reference item."""
    return CatalogItem(
        id=1,
        genre_ids={ACTION, SCIFI},
        description='a lone hero fights invaders',
        release_date='2020-06-01',
        rating_average=7.0,
        rating_count=800,
        title='Invaders',
        media_type='movie',
    )


@pytest.fixture
def candidate_a() -> CatalogItem:
    """Strong match for reference_item."""
    return CatalogItem(
        id=2,
        genre_ids={ACTION, SCIFI},
        description='a hero battles an alien invasion',
        release_date='2021-02-14',
        rating_average=8.0,
        rating_count=1200,
        title='Alien Invasion',
        media_type='movie',
    )


@pytest.fixture
def drama_reference() -> CatalogItem:
    """Reference tagged with a single generic genre."""
    return CatalogItem(
        id=100,
        genre_ids={DRAMA},
        description='a family gathers for a funeral in a small town',
        release_date='1995-01-01',
        rating_average=7.0,
        rating_count=500,
        media_type='movie',
    )


@pytest.fixture
def drama_candidate() -> CatalogItem:
    """Generic-genre-only match with nothing else in common."""
    return CatalogItem(
        id=101,
        genre_ids={DRAMA},
        description='astronauts repair a broken satellite',
        release_date='2015-01-01',
        rating_average=6.0,
        rating_count=10,
        media_type='movie',
    )


@pytest.fixture
def make_item():
    """Factory for candidate items."""
    def _make(item_id, genre_ids=(ACTION, SCIFI), description='', release_date=None,
              rating_average=0.0, rating_count=0, keywords=None) -> CatalogItem:
        return CatalogItem(
            id=item_id,
            genre_ids=frozenset(genre_ids),
            description=description,
            release_date=release_date,
            rating_average=rating_average,
            rating_count=rating_count,
            keywords=keywords,
        )
    return _make


@pytest.fixture
def sample_keywords() -> List[KeywordTag]:
    """Reference keywords."""
    return [
        KeywordTag(id=9882, name='space'),
        KeywordTag(id=4565, name='dystopia'),
        KeywordTag(id=310, name='artificial intelligence'),
        KeywordTag(id=1721, name='fight'),
    ]


@pytest.fixture
def default_policy() -> SimilarityPolicy:
    """Default scoring policy."""
    return SimilarityPolicy()


# ===== Mock Fixtures =====

@pytest.fixture
def mock_catalog_source(candidate_a, sample_keywords):
    """Mock CatalogSource returning one good candidate."""
    mock = Mock()
    mock.fetch_keywords.return_value = sample_keywords
    mock.discover_by_genres_and_keywords.return_value = [candidate_a]
    mock.fetch_similar.return_value = []
    return mock


# ===== Configuration Fixtures =====

@pytest.fixture
def mock_config(monkeypatch):
    """Mock configuration values."""
    monkeypatch.setenv('TMDB_BASE_URL', 'http://tmdb.test/3')
    monkeypatch.setenv('TMDB_API_TOKEN', 'test-token')
    monkeypatch.setenv('SIMILARITY_THRESHOLD', '25')
    monkeypatch.setenv('SIMILAR_ITEMS_MAX_RESULTS', '4')
    monkeypatch.setenv('CANDIDATE_FETCH_TIMEOUT', '5')


# ===== Azure Functions Fixtures =====

@pytest.fixture
def mock_http_request():
    """Mock Azure Functions HttpRequest."""
    mock_req = Mock()
    mock_req.route_params = {}
    mock_req.params = {}
    mock_req.get_json.return_value = {}
    return mock_req
