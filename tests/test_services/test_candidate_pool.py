"""Unit tests for CandidatePoolBuilder."""
import logging
import threading
from unittest.mock import Mock

import pytest
import requests

from catalog_similarity_service.models import CatalogItem, KeywordTag
from catalog_similarity_service.services.candidate_pool import CandidatePoolBuilder


def _items(*ids):
    return [CatalogItem(id=i, genre_ids={28}) for i in ids]


class TestCandidatePoolBuilderInit:
    """Tests for CandidatePoolBuilder initialization."""

    def test_rejects_non_positive_workers(self):
        """Test that max_workers must be positive."""
        with pytest.raises(ValueError, match='max_workers'):
            CandidatePoolBuilder(Mock(), max_workers=0)


class TestFetchKeywords:
    """Tests for fetch_keywords method."""

    def test_returns_keywords(self, reference_item, sample_keywords):
        """Test fetching reference keywords."""
        source = Mock()
        source.fetch_keywords.return_value = sample_keywords

        result = CandidatePoolBuilder(source).fetch_keywords(reference_item)

        assert result == sample_keywords
        source.fetch_keywords.assert_called_once_with(1, 'movie')

    def test_failure_yields_empty_list(self, reference_item, caplog):
        """Test that a failing keyword lookup degrades to no keywords."""
        source = Mock()
        source.fetch_keywords.side_effect = requests.ConnectionError("down")

        with caplog.at_level(logging.WARNING):
            result = CandidatePoolBuilder(source).fetch_keywords(reference_item)

        assert result == []
        assert "Lookup 'keywords' failed" in caplog.text


class TestBuildPool:
    """Tests for build_pool method."""

    def test_merges_sources_in_order(self, reference_item, sample_keywords):
        """Test discovery results come first, then similar items, deduplicated."""
        # Arrange
        source = Mock()
        source.discover_by_genres_and_keywords.side_effect = lambda genres, keywords, page, media_type: (
            _items(10, 11) if page == 1 else _items(11, 12)
        )
        source.fetch_similar.return_value = _items(12, 13, 1)

        # Act
        pool = CandidatePoolBuilder(source).build_pool(reference_item, sample_keywords)

        # Assert
        assert [c.id for c in pool] == [10, 11, 12, 13]

    def test_discovery_calls(self, reference_item, sample_keywords):
        """Test keyword-filtered page 1 and genre-only page 2."""
        # Arrange
        source = Mock()
        source.discover_by_genres_and_keywords.return_value = []
        source.fetch_similar.return_value = []

        # Act
        CandidatePoolBuilder(source).build_pool(reference_item, sample_keywords)

        # Assert
        calls = {c.args[2]: c.args for c in source.discover_by_genres_and_keywords.call_args_list}
        assert calls[1] == ([28, 878], [9882, 4565, 310, 1721], 1, 'movie')
        assert calls[2] == ([28, 878], [], 2, 'movie')
        source.fetch_similar.assert_called_once_with(1, 'movie')

    def test_reference_excluded(self, reference_item):
        """Test that the reference item never enters its own pool."""
        source = Mock()
        source.discover_by_genres_and_keywords.return_value = _items(1, 2)
        source.fetch_similar.return_value = _items(1)

        pool = CandidatePoolBuilder(source).build_pool(reference_item)

        assert [c.id for c in pool] == [2]

    def test_no_genres_skips_discovery(self):
        """Test that a reference without genres only uses similar items."""
        source = Mock()
        source.fetch_similar.return_value = _items(5)
        reference = CatalogItem(id=1, media_type='tv')

        pool = CandidatePoolBuilder(source).build_pool(reference)

        source.discover_by_genres_and_keywords.assert_not_called()
        source.fetch_similar.assert_called_once_with(1, 'tv')
        assert [c.id for c in pool] == [5]

    def test_failed_source_is_isolated(self, reference_item, caplog):
        """Test that one failing lookup does not lose the others."""
        # Arrange
        source = Mock()
        source.discover_by_genres_and_keywords.side_effect = requests.HTTPError("503")
        source.fetch_similar.return_value = _items(7)

        # Act
        with caplog.at_level(logging.WARNING):
            pool = CandidatePoolBuilder(source).build_pool(reference_item)

        # Assert
        assert [c.id for c in pool] == [7]
        assert "discover_keywords" in caplog.text
        assert "discover_genres" in caplog.text

    def test_all_sources_fail(self, reference_item):
        """Test that total failure yields an empty pool rather than raising."""
        source = Mock()
        source.discover_by_genres_and_keywords.side_effect = RuntimeError("boom")
        source.fetch_similar.side_effect = requests.Timeout("slow")

        assert CandidatePoolBuilder(source).build_pool(reference_item) == []

    def test_none_result_treated_as_empty(self, reference_item):
        """Test that a source returning None contributes nothing."""
        source = Mock()
        source.discover_by_genres_and_keywords.return_value = None
        source.fetch_similar.return_value = _items(3)

        assert [c.id for c in CandidatePoolBuilder(source).build_pool(reference_item)] == [3]

    def test_slow_source_times_out(self, reference_item, caplog):
        """Test that a lookup missing the deadline is ignored."""
        # Arrange
        release = threading.Event()
        source = Mock()
        source.discover_by_genres_and_keywords.return_value = _items(4)

        def slow_similar(item_id, media_type):
            release.wait(5)
            return _items(99)

        source.fetch_similar.side_effect = slow_similar

        # Act
        try:
            with caplog.at_level(logging.WARNING):
                pool = CandidatePoolBuilder(source).build_pool(reference_item, timeout=0.2)
        finally:
            release.set()

        # Assert
        assert [c.id for c in pool] == [4]
        assert "Lookup 'similar' did not finish" in caplog.text

    def test_lookups_run_concurrently(self, reference_item):
        """Test that lookups overlap instead of running one after another."""
        # Arrange: each lookup waits until all three have started
        barrier = threading.Barrier(3, timeout=2)
        source = Mock()

        def discover(genres, keywords, page, media_type):
            barrier.wait()
            return _items(20 + page)

        def similar(item_id, media_type):
            barrier.wait()
            return _items(30)

        source.discover_by_genres_and_keywords.side_effect = discover
        source.fetch_similar.side_effect = similar

        # Act
        pool = CandidatePoolBuilder(source, max_workers=3).build_pool(reference_item, timeout=5)

        # Assert
        assert [c.id for c in pool] == [21, 22, 30]

    def test_invalid_timeout(self, reference_item):
        """Test that a non-positive timeout is rejected."""
        with pytest.raises(ValueError, match='timeout'):
            CandidatePoolBuilder(Mock()).build_pool(reference_item, timeout=0)

    def test_keywords_without_ids_skipped(self, reference_item):
        """Test that keywords lacking IDs are left out of discovery."""
        source = Mock()
        source.discover_by_genres_and_keywords.return_value = []
        source.fetch_similar.return_value = []

        CandidatePoolBuilder(source).build_pool(reference_item, [KeywordTag(None, 'x'), KeywordTag(5, 'y')])

        page_one = [c.args for c in source.discover_by_genres_and_keywords.call_args_list if c.args[2] == 1][0]
        assert page_one[1] == [5]
