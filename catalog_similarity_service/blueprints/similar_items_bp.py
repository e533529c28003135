"""Get "more like this" items for a movie or TV show."""
import azure.functions as func
import logging
import json

import requests

from catalog_similarity_service.services import SimilarItemsService, TMDBClient
from catalog_similarity_service.services.catalog_source import MEDIA_TYPES

# Initialize blueprint
bp = func.Blueprint()

# Initialize client and service (singleton pattern)
tmdb_client = TMDBClient()
similar_items_service = SimilarItemsService(tmdb_client)

logger = logging.getLogger(__name__)

MAX_N = 20


def _error(message: str, status_code: int) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps({"error": message}),
        status_code=status_code,
        mimetype="application/json"
    )


@bp.route(route="{media_type}/{item_id}/similar", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def get_similar_items(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get items similar to a movie or TV show.

    Query Parameters:
        - n: Number of results (default: configured, max: 20)
        - threshold: Minimum similarity score 0-100 (default: configured)
    """
    try:
        media_type = req.route_params.get('media_type')
        item_id = req.route_params.get('item_id')

        if media_type not in MEDIA_TYPES:
            return _error(f"media_type must be one of: {', '.join(MEDIA_TYPES)}", 400)

        if not item_id:
            return _error("item_id is required", 400)

        try:
            item_id = int(item_id)
        except ValueError:
            return _error("item_id must be an integer", 400)

        # Get query parameters
        try:
            n = int(req.params.get('n', similar_items_service.default_max_results))
            threshold = int(req.params.get('threshold', similar_items_service.policy.threshold))
        except ValueError:
            return _error("n and threshold must be integers", 400)

        # Validate parameters
        if n < 1 or n > MAX_N:
            return _error(f"n must be between 1 and {MAX_N}", 400)

        if threshold < 0 or threshold > 100:
            return _error("threshold must be between 0 and 100", 400)

        # Load the reference item
        try:
            reference = tmdb_client.get_item(item_id, media_type)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                return _error(f"{media_type} {item_id} not found", 404)
            raise

        items = similar_items_service.get_similar_items(reference, max_results=n, threshold=threshold)

        # An empty list is a normal outcome, not an error
        response = {
            "item_id": item_id,
            "media_type": media_type,
            "count": len(items),
            "results": [item.to_dict() for item in items]
        }

        return func.HttpResponse(
            json.dumps(response),
            status_code=200,
            mimetype="application/json"
        )

    except Exception as e:
        logger.error(f"Error getting similar items: {str(e)}", exc_info=True)
        return _error("Internal server error", 500)


# noinspection PyUnusedLocal
@bp.route(route="similar/stats", methods=["GET"])
def get_similarity_stats(req: func.HttpRequest) -> func.HttpResponse:
    """
    Get the scoring configuration in use.
    """
    try:
        stats = similar_items_service.get_stats()

        return func.HttpResponse(
            json.dumps(stats, default=str),
            status_code=200,
            mimetype="application/json"
        )

    except Exception as e:
        logger.error(f"Error getting stats: {str(e)}", exc_info=True)
        return _error("Internal server error", 500)


# noinspection PyUnusedLocal
@bp.route(route="similar/health", methods=["GET"])
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint."""
    return func.HttpResponse(
        json.dumps({
            "status": "healthy",
            "service": "catalog-similarity-service",
            "version": "1.0.0"
        }),
        status_code=200,
        mimetype="application/json"
    )
