"""Application configuration"""

import json
import os
from pathlib import Path

from catalog_similarity_service.models.similarity_weights import (
    DEFAULT_GENERIC_GENRE_IDS,
    SimilarityPolicy,
    SimilarityWeights,
)


def _get_config_value(key: str, default: str | None = None) -> str | None:
    """
    Get configuration value from environment or local.settings.json.

    Priority:
    1. Environment variable
    2. local.settings.json (Values.key)
    3. Default value

    Args:
        key: Configuration key name
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    # Try environment variable first
    value = os.getenv(key)
    if value:
        return value

    # Try local.settings.json
    project_root = Path(__file__).resolve().parent.parent
    local_settings_path = project_root / "local.settings.json"

    if local_settings_path.exists():
        try:
            with open(local_settings_path) as f:
                settings = json.load(f)
                value = settings.get("Values", {}).get(key)
                if value:
                    return value
        except (json.JSONDecodeError, KeyError):
            pass

    # Return default
    return default


def get_tmdb_base_url() -> str | None:
    """
    Get the TMDB API base URL.

    Returns:
        Base URL without trailing slash
    """
    return _get_config_value("TMDB_BASE_URL", default="https://api.themoviedb.org/3")


def get_tmdb_api_token() -> str | None:
    """
    Get the TMDB read access token (sent as a bearer token).

    Returns:
        Token or None
    """
    return _get_config_value("TMDB_API_TOKEN")


def get_similarity_threshold() -> int:
    """
    Get the minimum score a candidate needs to be returned.

    Returns:
        Threshold in [0, 100] (default: 25)
    """
    raw = _get_config_value("SIMILARITY_THRESHOLD", default="25")
    try:
        threshold = int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"SIMILARITY_THRESHOLD must be an integer, got {raw!r}")
    if threshold < 0 or threshold > 100:
        raise ValueError(f"SIMILARITY_THRESHOLD must be between 0 and 100, got {threshold}")
    return threshold


def get_max_results() -> int:
    """
    Get the default number of similar items returned per request.

    Returns:
        Positive result count (default: 4)
    """
    raw = _get_config_value("SIMILAR_ITEMS_MAX_RESULTS", default="4")
    try:
        max_results = int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"SIMILAR_ITEMS_MAX_RESULTS must be an integer, got {raw!r}")
    if max_results <= 0:
        raise ValueError(f"SIMILAR_ITEMS_MAX_RESULTS must be positive, got {max_results}")
    return max_results


def get_fetch_timeout() -> float:
    """
    Get the overall timeout for building the candidate pool.

    Returns:
        Timeout in seconds (default: 15.0)
    """
    raw = _get_config_value("CANDIDATE_FETCH_TIMEOUT", default="15")
    try:
        timeout = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"CANDIDATE_FETCH_TIMEOUT must be a number, got {raw!r}")
    if timeout <= 0:
        raise ValueError(f"CANDIDATE_FETCH_TIMEOUT must be positive, got {timeout}")
    return timeout


def get_similarity_weights() -> SimilarityWeights:
    """
    Get scoring weights.

    SIMILARITY_WEIGHTS is a JSON object with any of the keys genre, keywords,
    overview, release_year, vote_quality. Missing keys keep their defaults.

    Returns:
        SimilarityWeights
    """
    raw = _get_config_value("SIMILARITY_WEIGHTS")
    if raw is None:
        return SimilarityWeights()

    try:
        values = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"SIMILARITY_WEIGHTS is not valid JSON: {e}")
    if not isinstance(values, dict):
        raise ValueError("SIMILARITY_WEIGHTS must be a JSON object")

    try:
        return SimilarityWeights(**{k: float(v) for k, v in values.items()})
    except TypeError as e:
        raise ValueError(f"Invalid SIMILARITY_WEIGHTS: {e}")


def get_generic_genre_ids() -> frozenset:
    """
    Get the genre IDs that count as weak signals when they are the only match.

    Returns:
        Frozenset of genre IDs (default: Drama, Comedy, Thriller)
    """
    raw = _get_config_value("GENERIC_GENRE_IDS")
    if raw is None:
        return DEFAULT_GENERIC_GENRE_IDS

    try:
        return frozenset(int(part) for part in raw.split(",") if part.strip())
    except ValueError:
        raise ValueError(f"GENERIC_GENRE_IDS must be a comma-separated list of integers, got {raw!r}")


def get_similarity_policy() -> SimilarityPolicy:
    """
    Build the scoring policy from configuration.

    Returns:
        SimilarityPolicy
    """
    return SimilarityPolicy(
        weights=get_similarity_weights(),
        generic_genre_ids=get_generic_genre_ids(),
        threshold=get_similarity_threshold(),
    )
