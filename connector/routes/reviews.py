"""
Review routes
"""
from flask import Blueprint, request, jsonify

from connector.extensions import limiter
from connector.services import review_workflow
from connector.utils.auth import require_auth
from connector.utils.helpers import json_body

reviews_bp = Blueprint("reviews", __name__)


@reviews_bp.route("", methods=["GET"])
def list_reviews():
    reviews = review_workflow.list_reviews(request.args.get("service_id"))
    return jsonify({
        "success": True,
        "count": len(reviews),
        "data": [review.to_dict() for review in reviews],
    }), 200


@reviews_bp.route("/<review_id>", methods=["GET"])
def get_review(review_id):
    review = review_workflow.get_review(review_id)
    return jsonify({"success": True, "data": review.to_dict()}), 200


# ---------------------------------------------------------------------------
# PUT /api/reviews/<id>  -- Edit own review (owner or admin)
# ---------------------------------------------------------------------------
@reviews_bp.route("/<review_id>", methods=["PUT"])
@limiter.limit("20 per minute")
@require_auth
def update_review(review_id):
    """Update a review.

    Body JSON (any of): rating, comment, service_date, specific_ratings
    """
    review = review_workflow.update_review(review_id, request.current_user, json_body())
    return jsonify({"success": True, "data": review.to_dict()}), 200


@reviews_bp.route("/<review_id>", methods=["DELETE"])
@require_auth
def delete_review(review_id):
    review_workflow.delete_review(review_id, request.current_user)
    return jsonify({"success": True, "data": {}}), 200


# ---------------------------------------------------------------------------
# PUT /api/reviews/<id>/response  -- Provider reply
# ---------------------------------------------------------------------------
@reviews_bp.route("/<review_id>/response", methods=["PUT"])
@limiter.limit("20 per minute")
@require_auth
def respond_to_review(review_id):
    data = json_body()
    review = review_workflow.add_provider_response(
        review_id, request.current_user, data.get("provider_response") or data.get("response")
    )
    return jsonify({"success": True, "data": review.to_dict()}), 200


# ---------------------------------------------------------------------------
# PUT /api/reviews/<id>/report  -- Flag for moderation
# ---------------------------------------------------------------------------
@reviews_bp.route("/<review_id>/report", methods=["PUT"])
@limiter.limit("10 per minute")
@require_auth
def report_review(review_id):
    data = json_body()
    review = review_workflow.report_review(
        review_id, request.current_user, data.get("report_reason") or data.get("reason")
    )
    return jsonify({"success": True, "data": review.to_dict()}), 200
