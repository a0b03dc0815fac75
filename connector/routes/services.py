"""
Service listing routes, including the per-service review endpoints
"""
from flask import Blueprint, request, jsonify

from connector.extensions import limiter
from connector.services import catalog, listing_gate, review_workflow
from connector.utils.auth import require_auth
from connector.utils.helpers import json_body

services_bp = Blueprint("services", __name__)


# ---------------------------------------------------------------------------
# GET /api/services  -- Browse listings
# ---------------------------------------------------------------------------
@services_bp.route("", methods=["GET"])
def list_services():
    """List services.

    Query params:
        category_id, subcategory_id, community_id, provider_id, is_active,
        tag, min_rating, max_rating, min_reviews: filters
        sort: comma separated fields, "-" prefix for descending
        page, limit: pagination
    """
    result = catalog.list_services(request.args.to_dict())
    return jsonify({
        "success": True,
        "count": len(result["items"]),
        "total": result["total"],
        "page": result["page"],
        "pages": result["pages"],
        "pagination": result["pagination"],
        "data": [service.to_dict() for service in result["items"]],
    }), 200


# ---------------------------------------------------------------------------
# POST /api/services  -- Publish a listing (providers with a live subscription)
# ---------------------------------------------------------------------------
@services_bp.route("", methods=["POST"])
@limiter.limit("20 per minute")
@require_auth
def create_service():
    service = listing_gate.create_service(request.current_user, json_body())
    return jsonify({"success": True, "data": service.to_dict()}), 201


@services_bp.route("/<service_id>", methods=["GET"])
def get_service(service_id):
    return jsonify({"success": True, "data": catalog.get_service_with_aggregate(service_id)}), 200


@services_bp.route("/<service_id>", methods=["PUT"])
@limiter.limit("30 per minute")
@require_auth
def update_service(service_id):
    service = catalog.update_service(service_id, request.current_user, json_body())
    return jsonify({"success": True, "data": service.to_dict()}), 200


@services_bp.route("/<service_id>", methods=["DELETE"])
@require_auth
def delete_service(service_id):
    catalog.delete_service(service_id, request.current_user)
    return jsonify({"success": True, "data": {}}), 200


# ---------------------------------------------------------------------------
# GET /api/services/community/<id>  -- Listings in the caller's community
# ---------------------------------------------------------------------------
@services_bp.route("/community/<community_id>", methods=["GET"])
@require_auth
def services_by_community(community_id):
    services = catalog.services_by_community(request.current_user, community_id)
    return jsonify({
        "success": True,
        "count": len(services),
        "data": [service.to_dict() for service in services],
    }), 200


@services_bp.route("/provider/<provider_id>", methods=["GET"])
def services_by_provider(provider_id):
    services = catalog.services_by_provider(provider_id)
    return jsonify({
        "success": True,
        "count": len(services),
        "data": [service.to_dict() for service in services],
    }), 200


# ---------------------------------------------------------------------------
# /api/services/<id>/reviews
# ---------------------------------------------------------------------------
@services_bp.route("/<service_id>/reviews", methods=["GET"])
def list_service_reviews(service_id):
    reviews = review_workflow.list_reviews(service_id)
    return jsonify({
        "success": True,
        "count": len(reviews),
        "data": [review.to_dict() for review in reviews],
    }), 200


@services_bp.route("/<service_id>/reviews", methods=["POST"])
@limiter.limit("10 per minute")
@require_auth
def create_review(service_id):
    """Review a service.

    Body JSON:
        rating: int 1-5 (required)
        comment: str, max 500 (required)
        service_date: YYYY-MM-DD (optional)
        specific_ratings: {criterion: int 1-5} (optional)
    """
    review = review_workflow.add_review(request.current_user, service_id, json_body())
    return jsonify({"success": True, "data": review.to_dict()}), 201
