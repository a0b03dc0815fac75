"""
Provider subscription routes
"""
import logging

from flask import Blueprint, request, jsonify

from connector.extensions import limiter
from connector.services import subscription_lifecycle
from connector.services.exceptions import ValidationError
from connector.utils.auth import require_auth
from connector.utils.helpers import json_body

logger = logging.getLogger(__name__)

subscriptions_bp = Blueprint("subscriptions", __name__)


# ---------------------------------------------------------------------------
# POST /api/subscriptions  -- Start checkout for a plan
# ---------------------------------------------------------------------------
@subscriptions_bp.route("", methods=["POST"])
@limiter.limit("10 per minute")
@require_auth
def create_subscription():
    """Create a pending subscription and its payment order.

    Body JSON:
        plan: str (optional, defaults to "basic")

    Returns the order id and client secret the client pays against.
    """
    data = request.get_json(silent=True) or {}
    subscription, order = subscription_lifecycle.create_subscription(
        request.current_user, data.get("plan", "basic")
    )
    return jsonify({
        "success": True,
        "data": subscription.to_dict(),
        "order": {
            "order_id": order.order_id,
            "client_secret": order.client_secret,
            "amount": order.amount,
            "currency": order.currency,
        },
    }), 201


@subscriptions_bp.route("", methods=["GET"])
@require_auth
def list_subscriptions():
    subscriptions = subscription_lifecycle.list_subscriptions(
        request.current_user, request.args.get("status")
    )
    return jsonify({
        "success": True,
        "count": len(subscriptions),
        "data": [s.to_dict() for s in subscriptions],
    }), 200


@subscriptions_bp.route("/provider", methods=["GET"])
@require_auth
def current_subscription():
    user = request.current_user
    subscription = subscription_lifecycle.get_current(user)
    return jsonify({
        "success": True,
        "data": subscription.to_dict(),
        "publishing_allowed": subscription_lifecycle.is_publishing_allowed(user.id),
        "about_to_expire": subscription_lifecycle.is_about_to_expire(user.id),
    }), 200


# ---------------------------------------------------------------------------
# POST /api/subscriptions/verify  -- Confirm payment from the client
# ---------------------------------------------------------------------------
@subscriptions_bp.route("/verify", methods=["POST"])
@limiter.limit("10 per minute")
@require_auth
def verify_payment():
    """Activate a pending subscription.

    Body JSON:
        order_id: str (required)
        payment_id: str (optional for card payments)
        signature: str (required)
    """
    data = json_body()
    if not data.get("order_id") or not data.get("signature"):
        raise ValidationError("order_id and signature are required")

    subscription = subscription_lifecycle.verify_payment(
        request.current_user, data["order_id"], data.get("payment_id"), data["signature"]
    )
    return jsonify({"success": True, "data": subscription.to_dict()}), 200


@subscriptions_bp.route("/cancel", methods=["PUT"])
@require_auth
def cancel_subscription():
    data = request.get_json(silent=True) or {}
    subscription = subscription_lifecycle.cancel_subscription(
        request.current_user, data.get("reason")
    )
    return jsonify({"success": True, "data": subscription.to_dict()}), 200
