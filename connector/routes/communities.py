"""
Community and service category routes
"""
from flask import Blueprint, request, jsonify

from connector.extensions import limiter
from connector.services import catalog
from connector.utils.auth import require_auth, require_role
from connector.utils.helpers import json_body

communities_bp = Blueprint("communities", __name__)
categories_bp = Blueprint("categories", __name__)


# ---------------------------------------------------------------------------
# Communities
# ---------------------------------------------------------------------------
@communities_bp.route("", methods=["GET"])
def list_communities():
    communities = catalog.list_communities()
    return jsonify({
        "success": True,
        "count": len(communities),
        "data": [c.to_dict() for c in communities],
    }), 200


@communities_bp.route("/<community_id>", methods=["GET"])
def get_community(community_id):
    return jsonify({"success": True, "data": catalog.get_community(community_id).to_dict()}), 200


@communities_bp.route("", methods=["POST"])
@limiter.limit("10 per minute")
@require_auth
@require_role("admin")
def create_community():
    community = catalog.create_community(request.current_user, json_body())
    return jsonify({"success": True, "data": community.to_dict()}), 201


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------
@categories_bp.route("", methods=["GET"])
def list_categories():
    categories = catalog.list_categories()
    return jsonify({
        "success": True,
        "count": len(categories),
        "data": [c.to_dict() for c in categories],
    }), 200


@categories_bp.route("", methods=["POST"])
@limiter.limit("10 per minute")
@require_auth
@require_role("admin")
def create_category():
    category = catalog.create_category(request.current_user, json_body())
    return jsonify({"success": True, "data": category.to_dict()}), 201


@categories_bp.route("/<category_id>", methods=["DELETE"])
@require_auth
@require_role("admin")
def delete_category(category_id):
    catalog.delete_category(request.current_user, category_id)
    return jsonify({"success": True, "data": {}}), 200
