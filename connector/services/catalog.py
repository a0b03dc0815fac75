"""
Service catalog - browsing, editing and removing listings, plus the
category and community reference data they hang off
"""
import json
import logging

from flask import current_app
from sqlalchemy import Text, cast, func, or_

from connector import db
from connector.models import Community, Review, Service, ServiceCategory
from connector.models.community import COMMUNITY_TYPES
from connector.middleware.sanitize import sanitize_string
from connector.utils.helpers import safe_float, safe_int
from connector.utils.validators import validate_length, missing_fields
from .exceptions import Conflict, Forbidden, NotFound, ValidationError
from .listing_gate import validate_service_fields

logger = logging.getLogger(__name__)

# Owners may edit these; provider, community and aggregates are fixed
UPDATABLE_FIELDS = (
    'title', 'description', 'category_id', 'subcategory_id', 'tags',
    'price_info', 'availability', 'images', 'custom_fields', 'is_active',
)

SORTABLE_FIELDS = {
    'created_at': Service.created_at,
    'updated_at': Service.updated_at,
    'title': Service.title,
    'average_rating': Service.average_rating,
    'review_count': Service.review_count,
}

EQUALITY_FILTERS = {
    'category_id': Service.category_id,
    'subcategory_id': Service.subcategory_id,
    'community_id': Service.community_id,
    'provider_id': Service.provider_id,
}


def _parse_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).lower() in ('1', 'true', 'yes')


def _sort_clauses(sort):
    """'-average_rating,title' -> [average_rating DESC, title ASC]"""
    clauses = []
    for part in (sort or '').split(','):
        part = part.strip()
        if not part:
            continue
        column = SORTABLE_FIELDS.get(part.lstrip('-'))
        if column is None:
            raise ValidationError(f"Cannot sort by '{part.lstrip('-')}'")
        clauses.append(column.desc() if part.startswith('-') else column.asc())
    return clauses or [Service.created_at.desc()]


def list_services(filters):
    """
    Filtered, sorted, paginated listing

    Args:
        filters (dict): Query string arguments. Equality: category_id,
            subcategory_id, community_id, provider_id, is_active, tag.
            Range: min_rating, max_rating, min_reviews. Also sort, page,
            limit.

    Returns:
        dict: {'items', 'total', 'page', 'limit', 'pages', 'pagination'}
    """
    query = Service.query

    for key, column in EQUALITY_FILTERS.items():
        if filters.get(key):
            query = query.filter(column == filters[key])

    if filters.get('is_active') is not None:
        query = query.filter(Service.is_active.is_(_parse_bool(filters['is_active'])))

    min_rating = safe_float(filters.get('min_rating'))
    if min_rating is not None:
        query = query.filter(Service.average_rating >= min_rating)
    max_rating = safe_float(filters.get('max_rating'))
    if max_rating is not None:
        query = query.filter(Service.average_rating <= max_rating)
    min_reviews = safe_int(filters.get('min_reviews'), default=None)
    if min_reviews is not None:
        query = query.filter(Service.review_count >= min_reviews)

    if filters.get('tag'):
        # tags is a JSON list; match the quoted element in its serialized form
        tag = json.dumps(sanitize_string(filters['tag']).lower())
        query = query.filter(func.lower(cast(Service.tags, Text), type_=Text).contains(tag, autoescape=True))

    query = query.order_by(*_sort_clauses(filters.get('sort')))

    default_limit = current_app.config['ITEMS_PER_PAGE']
    max_limit = current_app.config['MAX_ITEMS_PER_PAGE']
    page = max(1, safe_int(filters.get('page'), 1))
    limit = min(max_limit, max(1, safe_int(filters.get('limit'), default_limit)))

    paginated = query.paginate(page=page, per_page=limit, error_out=False)

    pagination = {}
    if paginated.has_next:
        pagination['next'] = {'page': page + 1, 'limit': limit}
    if paginated.has_prev:
        pagination['prev'] = {'page': page - 1, 'limit': limit}

    return {
        'items': paginated.items,
        'total': paginated.total,
        'page': page,
        'limit': limit,
        'pages': paginated.pages,
        'pagination': pagination,
    }


def get_service(service_id):
    service = db.session.get(Service, service_id)
    if service is None:
        raise NotFound('Service not found')
    return service


def get_service_with_aggregate(service_id):
    """Service dict with its rating aggregate and reviews, newest first"""
    service = get_service(service_id)
    data = service.to_dict()
    data['reviews'] = [
        review.to_dict()
        for review in service.reviews.order_by(Review.created_at.desc())
    ]
    return data


def _require_owner(service, user):
    if service.provider_id != user.id and user.role != 'admin':
        raise Forbidden('Not authorized to modify this service')


def update_service(service_id, user, patch):
    service = get_service(service_id)
    _require_owner(service, user)

    fields = {key: patch[key] for key in UPDATABLE_FIELDS if key in patch}
    if 'subcategory_id' in fields and 'category_id' not in fields:
        fields_to_check = dict(fields, category_id=service.category_id)
    else:
        fields_to_check = fields
    validate_service_fields(fields_to_check, partial=True)

    for key, value in fields.items():
        setattr(service, key, value)
    db.session.commit()

    logger.info('Service %s updated by %s', service.id, user.id)
    return service


def delete_service(service_id, user):
    service = get_service(service_id)
    _require_owner(service, user)

    Review.query.filter_by(service_id=service_id).delete()
    db.session.delete(service)
    db.session.commit()
    logger.info('Service %s and its reviews deleted by %s', service_id, user.id)


def services_by_community(user, community_id):
    if user.role != 'admin' and user.community_id != community_id:
        raise Forbidden('You can only browse services in your own community')
    if db.session.get(Community, community_id) is None:
        raise NotFound('Community not found')
    return Service.query.filter_by(community_id=community_id, is_active=True) \
        .order_by(Service.created_at.desc()).all()


def services_by_provider(provider_id):
    return Service.query.filter_by(provider_id=provider_id, is_active=True) \
        .order_by(Service.created_at.desc()).all()


# Categories

def list_categories(include_inactive=False):
    query = ServiceCategory.query
    if not include_inactive:
        query = query.filter_by(is_active=True)
    return query.order_by(ServiceCategory.display_order, ServiceCategory.name).all()


def _require_admin(user):
    if user.role != 'admin':
        raise Forbidden('Admin access required')


def create_category(user, data):
    _require_admin(user)

    name = data.get('name')
    if not validate_length(name, 50, required=True):
        raise ValidationError('Category name is required and must be at most 50 characters')
    if not validate_length(data.get('description'), 500):
        raise ValidationError('Category description must be at most 500 characters')
    if not isinstance(data.get('form_fields', []), list):
        raise ValidationError('form_fields must be a list')

    parent_id = data.get('parent_id')
    if parent_id:
        parent = db.session.get(ServiceCategory, parent_id)
        if parent is None:
            raise ValidationError('Parent category not found')
        if parent.parent_id is not None:
            raise ValidationError('Categories can only be nested one level deep')

    if ServiceCategory.query.filter_by(name=name).first() is not None:
        raise Conflict(f"Category '{name}' already exists")

    category = ServiceCategory(
        name=name,
        description=data.get('description'),
        parent_id=parent_id,
        form_fields=data.get('form_fields', []),
        icon=data.get('icon'),
        display_order=safe_int(data.get('display_order'), 0),
    )
    db.session.add(category)
    db.session.commit()
    return category


def delete_category(user, category_id):
    _require_admin(user)

    category = db.session.get(ServiceCategory, category_id)
    if category is None:
        raise NotFound('Category not found')

    if category.subcategories.count():
        raise Conflict('Cannot delete a category that has subcategories')
    in_use = Service.query.filter(
        or_(Service.category_id == category_id, Service.subcategory_id == category_id)
    ).count()
    if in_use:
        raise Conflict('Cannot delete a category that is used by services')

    db.session.delete(category)
    db.session.commit()
    logger.info('Category %s deleted by %s', category_id, user.id)


# Communities

def list_communities():
    return Community.query.filter_by(is_active=True).order_by(Community.name).all()


def get_community(community_id):
    community = db.session.get(Community, community_id)
    if community is None:
        raise NotFound('Community not found')
    return community


def create_community(user, data):
    _require_admin(user)

    missing = missing_fields(data, ('name', 'city', 'state', 'postal_code'))
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    community_type = data.get('community_type', 'apartment')
    if community_type not in COMMUNITY_TYPES:
        raise ValidationError(f"community_type must be one of: {', '.join(COMMUNITY_TYPES)}")
    for key in ('buildings', 'amenities'):
        if not isinstance(data.get(key, []), list):
            raise ValidationError(f'{key} must be a list')

    community = Community(
        name=data['name'],
        street=data.get('street'),
        city=data['city'],
        state=data['state'],
        postal_code=data['postal_code'],
        community_type=community_type,
        buildings=data.get('buildings', []),
        description=data.get('description'),
        amenities=data.get('amenities', []),
        total_units=safe_int(data.get('total_units'), None),
    )
    db.session.add(community)
    db.session.commit()
    return community
