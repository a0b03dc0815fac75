"""
Subscription lifecycle

    pending --verify--> active --cancel--> cancelled
       |                   +---lapse---> expired
       +---cancel--> cancelled

``cancelled`` and ``expired`` are terminal. Every status change goes
through ``_transition``; lapsed active records are expired on read and by
the scheduled sweep.
"""
import logging
from datetime import timedelta

from dateutil.relativedelta import relativedelta
from flask import current_app
from sqlalchemy.exc import IntegrityError

from connector import db
from connector.models import Subscription, SubscriptionInvoice
from connector.models.subscription import CURRENT_STATUSES
from connector.utils.helpers import utcnow, as_utc
from .exceptions import Conflict, Forbidden, NotFound, ValidationError
from .payment_gateway import get_payment_gateway

logger = logging.getLogger(__name__)

TRANSITIONS = {
    'pending': {'active', 'cancelled'},
    'active': {'cancelled', 'expired'},
    'cancelled': set(),
    'expired': set(),
}

DEFAULT_CANCELLATION_REASON = 'User cancelled'


def _transition(subscription, new_status):
    """Move a subscription to ``new_status`` or raise Conflict"""
    current = subscription.status
    if new_status not in TRANSITIONS.get(current, set()):
        raise Conflict(f'Cannot change subscription from {current} to {new_status}')
    subscription.status = new_status
    logger.info('Subscription %s: %s -> %s', subscription.id, current, new_status)


def _period_end(start):
    return start + relativedelta(months=1)


def _plan(plan_name):
    plans = current_app.config['SUBSCRIPTION_PLANS']
    plan = plans.get(plan_name)
    if plan is None:
        raise ValidationError(f"Unknown plan '{plan_name}'. Available: {', '.join(sorted(plans))}")
    return plan


def _require_provider(user):
    if user.role != 'provider':
        raise Forbidden('Only providers can manage subscriptions')


def expire_lapsed(provider_id=None):
    """
    Expire active subscriptions whose end date has passed

    Args:
        provider_id (str): Limit to one provider, or all providers if None

    Returns:
        int: Number of subscriptions expired
    """
    query = Subscription.query.filter(
        Subscription.status == 'active',
        Subscription.end_date <= utcnow(),
    )
    if provider_id is not None:
        query = query.filter(Subscription.provider_id == provider_id)

    lapsed = query.all()
    for subscription in lapsed:
        _transition(subscription, 'expired')
    if lapsed:
        db.session.commit()
    return len(lapsed)


def _current_record(provider_id):
    return Subscription.query.filter(
        Subscription.provider_id == provider_id,
        Subscription.status.in_(CURRENT_STATUSES),
    ).order_by(Subscription.created_at.desc()).first()


def get_current(user):
    """The provider's pending or active subscription"""
    _require_provider(user)
    expire_lapsed(user.id)
    subscription = _current_record(user.id)
    if subscription is None:
        raise NotFound('No subscription found')
    return subscription


def list_subscriptions(user, status=None):
    if user.role != 'admin':
        raise Forbidden('Only admins can list subscriptions')
    query = Subscription.query
    if status:
        query = query.filter_by(status=status)
    return query.order_by(Subscription.created_at.desc()).all()


def create_subscription(user, plan_name='basic'):
    """
    Open a pending subscription and its payment order

    Returns:
        tuple: (Subscription, PaymentOrder)
    """
    _require_provider(user)
    plan = _plan(plan_name)

    expire_lapsed(user.id)
    if _current_record(user.id) is not None:
        raise Conflict('You already have an active or pending subscription')

    # Raises ExternalDependencyError before anything is persisted
    order = get_payment_gateway().create_order(plan['amount'], plan['currency'], user.id)

    start = utcnow()
    subscription = Subscription(
        provider_id=user.id,
        plan=plan_name,
        status='pending',
        start_date=start,
        end_date=_period_end(start),
        amount=plan['amount'],
        currency=plan['currency'],
        payment_gateway_id=order.order_id,
    )
    db.session.add(subscription)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict('You already have an active or pending subscription')

    logger.info('Subscription %s (%s) created for provider %s, order %s',
                subscription.id, plan_name, user.id, order.order_id)
    return subscription, order


def _activate(subscription, payment_id, payment_method):
    _transition(subscription, 'active')
    now = utcnow()
    subscription.start_date = now
    subscription.end_date = _period_end(now)
    subscription.payment_method = payment_method
    subscription.invoices.append(SubscriptionInvoice(
        invoice_id=payment_id or subscription.payment_gateway_id,
        amount=subscription.amount,
        status='paid',
        paid_at=now,
    ))


def verify_payment(user, order_id, payment_id, signature):
    """
    Activate a pending subscription after the gateway confirms payment

    Failed or unreachable verification leaves the record pending.
    """
    subscription = Subscription.query.filter_by(payment_gateway_id=order_id).first()
    if subscription is None:
        raise NotFound('Subscription not found')
    if subscription.provider_id != user.id:
        raise Forbidden('This subscription belongs to another provider')
    if 'active' not in TRANSITIONS[subscription.status]:
        raise Conflict(f'Cannot activate a {subscription.status} subscription')

    result = get_payment_gateway().verify_payment(
        order_id, payment_id, signature, subscription.amount, subscription.currency
    )
    if not result.verified:
        logger.info('Payment verification failed for subscription %s: %s', subscription.id, result.reason)
        raise ValidationError('Invalid payment signature')

    _activate(subscription, payment_id, result.payment_method)
    db.session.commit()
    return subscription


def activate_from_webhook(order_id, payment_id=None, payment_method=None):
    """
    Activate the subscription owning ``order_id`` from a verified webhook

    Returns:
        Subscription or None: None when no subscription has this order id
    """
    subscription = Subscription.query.filter_by(payment_gateway_id=order_id).first()
    if subscription is None:
        return None
    if subscription.status == 'active':
        return subscription  # already activated by the client confirmation

    _activate(subscription, payment_id, payment_method)
    db.session.commit()
    return subscription


def cancel_subscription(user, reason=None):
    _require_provider(user)
    subscription = _current_record(user.id)
    if subscription is None:
        raise NotFound('No active subscription found')

    _transition(subscription, 'cancelled')
    subscription.cancellation_reason = reason or DEFAULT_CANCELLATION_REASON
    subscription.cancellation_date = utcnow()
    subscription.auto_renew = False
    db.session.commit()
    return subscription


def _live_active(provider_id):
    return Subscription.query.filter(
        Subscription.provider_id == provider_id,
        Subscription.status == 'active',
        Subscription.end_date > utcnow(),
    ).first()


def is_publishing_allowed(provider_id):
    """Active status alone is not enough: the end date must still be ahead"""
    return _live_active(provider_id) is not None


def is_about_to_expire(provider_id, days=None):
    if days is None:
        days = current_app.config.get('SUBSCRIPTION_EXPIRY_WARNING_DAYS', 7)
    subscription = _live_active(provider_id)
    if subscription is None:
        return False
    return as_utc(subscription.end_date) <= utcnow() + timedelta(days=days)


def expiring_soon(days=None):
    """Active subscriptions ending within the warning window"""
    if days is None:
        days = current_app.config.get('SUBSCRIPTION_EXPIRY_WARNING_DAYS', 7)
    now = utcnow()
    return Subscription.query.filter(
        Subscription.status == 'active',
        Subscription.end_date > now,
        Subscription.end_date <= now + timedelta(days=days),
    ).all()
