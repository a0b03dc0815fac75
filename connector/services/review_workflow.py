"""
Review workflow

Customers review services; every change that can move a service's rating
is followed by an explicit call to the rating aggregator, after the review
change itself has been committed.
"""
import logging

from sqlalchemy.exc import IntegrityError

from connector import db
from connector.models import Review, Service
from connector.utils.helpers import parse_date
from connector.utils.validators import validate_length, validate_rating, validate_specific_ratings
from . import rating_aggregator
from .exceptions import Conflict, Forbidden, NotFound, ValidationError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('rating', 'comment', 'service_date', 'specific_ratings')

COMMENT_MAX = 500
RESPONSE_MAX = 500
REPORT_REASON_MAX = 200


def _get_review(review_id):
    review = db.session.get(Review, review_id)
    if review is None:
        raise NotFound('Review not found')
    return review


def _validate(data, partial=False):
    """Validate review fields, returning them converted for storage"""
    cleaned = {}

    if not partial or 'rating' in data:
        if not validate_rating(data.get('rating')):
            raise ValidationError('Rating must be a whole number between 1 and 5')
        cleaned['rating'] = data['rating']

    if not partial or 'comment' in data:
        if not validate_length(data.get('comment'), COMMENT_MAX, required=True):
            raise ValidationError(f'Comment is required and must be at most {COMMENT_MAX} characters')
        cleaned['comment'] = data['comment']

    if data.get('service_date') is not None:
        service_date = parse_date(data['service_date'])
        if service_date is None:
            raise ValidationError('service_date must be a date (YYYY-MM-DD)')
        cleaned['service_date'] = service_date
    elif 'service_date' in data:
        cleaned['service_date'] = None

    if 'specific_ratings' in data:
        if not validate_specific_ratings(data['specific_ratings']):
            raise ValidationError('specific_ratings values must be whole numbers between 1 and 5')
        cleaned['specific_ratings'] = data['specific_ratings']

    return cleaned


def _can_manage(review, user):
    return review.customer_id == user.id or user.role == 'admin'


def list_reviews(service_id=None):
    query = Review.query
    if service_id is not None:
        if db.session.get(Service, service_id) is None:
            raise NotFound('Service not found')
        query = query.filter_by(service_id=service_id)
    return query.order_by(Review.created_at.desc()).all()


def get_review(review_id):
    return _get_review(review_id)


def add_review(user, service_id, data):
    service = db.session.get(Service, service_id)
    if service is None:
        raise NotFound('Service not found')
    if user.role != 'customer':
        raise Forbidden('Only customers can review services')

    fields = _validate(data)

    if Review.query.filter_by(service_id=service_id, customer_id=user.id).first() is not None:
        raise Conflict('You have already reviewed this service')

    review = Review(service_id=service_id, customer_id=user.id, **fields)
    db.session.add(review)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent submission from the same customer
        db.session.rollback()
        raise Conflict('You have already reviewed this service')

    logger.info('Review %s (%d stars) added to service %s by %s',
                review.id, review.rating, service_id, user.id)
    rating_aggregator.recompute(service_id)
    return review


def update_review(review_id, user, patch):
    review = _get_review(review_id)
    if not _can_manage(review, user):
        raise Forbidden('Not authorized to update this review')

    unknown = sorted(set(patch) - set(EDITABLE_FIELDS))
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(unknown)}")

    fields = _validate(patch, partial=True)
    rating_changed = 'rating' in fields and fields['rating'] != review.rating

    for key, value in fields.items():
        setattr(review, key, value)
    db.session.commit()

    logger.info('Review %s updated by %s', review.id, user.id)
    if rating_changed:
        rating_aggregator.recompute(review.service_id)
    return review


def delete_review(review_id, user):
    review = _get_review(review_id)
    if not _can_manage(review, user):
        raise Forbidden('Not authorized to delete this review')

    service_id = review.service_id
    db.session.delete(review)
    db.session.commit()

    logger.info('Review %s on service %s deleted by %s', review_id, service_id, user.id)
    rating_aggregator.recompute(service_id)


def add_provider_response(review_id, user, text):
    review = _get_review(review_id)
    service = db.session.get(Service, review.service_id)
    if service is None or service.provider_id != user.id:
        raise Forbidden('Only the service provider can respond to this review')
    if not validate_length(text, RESPONSE_MAX, required=True):
        raise ValidationError(f'Response is required and must be at most {RESPONSE_MAX} characters')

    review.provider_response = text
    db.session.commit()
    return review


def report_review(review_id, user, reason):
    """Flag a review for moderation; a later report replaces the reason"""
    review = _get_review(review_id)
    if not validate_length(reason, REPORT_REASON_MAX, required=True):
        raise ValidationError(f'Report reason is required and must be at most {REPORT_REASON_MAX} characters')

    review.is_reported = True
    review.report_reason = reason
    db.session.commit()

    logger.info('Review %s reported by %s', review.id, user.id)
    return review
