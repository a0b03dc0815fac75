"""
Payment gateway webhooks
"""
import json
import logging

from flask import Blueprint, request, jsonify

from connector import db
from connector.models import WebhookEvent
from connector.services import subscription_lifecycle
from connector.services.exceptions import Conflict
from connector.services.payment_gateway import get_payment_gateway
from connector.utils.helpers import utcnow

logger = logging.getLogger(__name__)

webhooks_bp = Blueprint("webhooks", __name__)

FINAL_STATUSES = ("processed", "ignored", "failed")


# ---------------------------------------------------------------------------
# POST /api/webhooks/stripe
# ---------------------------------------------------------------------------
@webhooks_bp.route("/stripe", methods=["POST"])
def stripe_webhook():
    """
    Handle Stripe webhook events with signature verification.
    Events: payment_intent.succeeded, payment_intent.payment_failed
    Redelivered events (same event id) that were already handled are
    acknowledged without reprocessing.
    """
    payload = request.get_data(as_text=True)
    sig_header = request.headers.get("Stripe-Signature", "")

    # Raises ValidationError (400) on a bad signature or payload
    event = get_payment_gateway().parse_webhook(payload, sig_header)

    record = WebhookEvent.query.filter_by(event_id=event.event_id).first()
    if record is not None and record.status in FINAL_STATUSES:
        logger.info("Webhook %s already handled (%s)", event.event_id, record.status)
        return jsonify({"received": True, "duplicate": True}), 200

    if record is None:
        record = WebhookEvent(
            event_id=event.event_id,
            event_type=event.event_type,
            payload=json.loads(payload),
        )
        db.session.add(record)
        db.session.commit()

    try:
        if event.event_type == "payment_intent.succeeded":
            record.status = _handle_payment_succeeded(event.data)
        elif event.event_type == "payment_intent.payment_failed":
            record.status = _handle_payment_failed(event.data)
        else:
            record.status = "ignored"
    except Conflict as e:
        # e.g. payment for a checkout the provider already cancelled
        db.session.rollback()
        logger.warning("Webhook %s could not be applied: %s", event.event_id, e.message)
        record.status = "failed"
        record.error_message = e.message

    record.processed_at = utcnow()
    db.session.commit()
    return jsonify({"received": True}), 200


def _handle_payment_succeeded(intent):
    """Activate the subscription paid for by this intent, if any."""
    method_types = intent.get("payment_method_types") or ["card"]
    subscription = subscription_lifecycle.activate_from_webhook(
        intent.get("id", ""),
        payment_id=intent.get("latest_charge"),
        payment_method=method_types[0],
    )
    if subscription is None:
        logger.info("Webhook payment %s matches no subscription", intent.get("id"))
        return "ignored"
    logger.info("Webhook confirmed subscription %s", subscription.id)
    return "processed"


def _handle_payment_failed(intent):
    # Subscription stays pending; the provider can retry checkout
    error = intent.get("last_payment_error") or {}
    logger.info("Payment %s failed: %s", intent.get("id"), error.get("message", "unknown"))
    return "processed"
