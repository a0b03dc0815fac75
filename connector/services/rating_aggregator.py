"""
Rating aggregation

A service's ``average_rating`` and ``review_count`` are recomputed from
scratch from its reviews after every review mutation and written in a
single UPDATE. Racing recomputes converge on the same values because each
one rescans the source rows.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from connector import db
from connector.models import Review, Service

logger = logging.getLogger(__name__)

_ONE_DECIMAL = Decimal('0.1')


def round_rating(total, count):
    """
    Mean of ``count`` ratings summing to ``total``, rounded half up to one
    decimal place (4.25 -> 4.3). Returns None when there are no ratings.
    """
    if not count:
        return None
    mean = Decimal(int(total)) / Decimal(int(count))
    return float(mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def compute_aggregate(service_id):
    """
    Read the current aggregate for a service straight from its reviews

    Returns:
        tuple: (average_rating or None, review_count)
    """
    count, total = db.session.query(
        func.count(Review.id), func.coalesce(func.sum(Review.rating), 0)
    ).filter(Review.service_id == service_id).one()
    return round_rating(total, count), int(count)


def recompute(service_id):
    """
    Recompute and persist the rating aggregate of one service

    Failures are logged and rolled back, never raised: the review change
    that triggered the recompute is already committed, and a later
    recompute repairs the aggregate.

    Returns:
        tuple: (average_rating, review_count) written, or None if nothing
        was written
    """
    try:
        average, count = compute_aggregate(service_id)
        updated = Service.query.filter_by(id=service_id).update(
            {Service.average_rating: average, Service.review_count: count},
            synchronize_session=False,
        )
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception('Rating recompute failed for service %s', service_id)
        return None

    if not updated:
        logger.info('Rating recompute skipped, service %s no longer exists', service_id)
        return None

    logger.info('Service %s rating recomputed: average=%s count=%d', service_id, average, count)
    return average, count


def recompute_all():
    """Recompute every service's aggregate; returns the number of services"""
    service_ids = [row.id for row in db.session.query(Service.id).all()]
    for service_id in service_ids:
        recompute(service_id)
    return len(service_ids)
