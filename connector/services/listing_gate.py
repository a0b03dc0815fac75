"""
Listing gate - who may publish a new service

Only providers with a live subscription can create listings. Editing or
removing an existing listing is not gated (see ``catalog``).
"""
import logging

from connector import db
from connector.models import Service, ServiceCategory
from connector.utils.validators import validate_length, missing_fields
from .exceptions import Forbidden, ValidationError
from .subscription_lifecycle import is_publishing_allowed

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('title', 'description', 'category_id', 'tags', 'price_info', 'availability')

# Caller-settable on create; provider, community and aggregates never are
CREATE_FIELDS = (
    'title', 'description', 'category_id', 'subcategory_id', 'tags',
    'price_info', 'availability', 'images', 'custom_fields', 'is_active',
)


def can_create_service(user):
    """Raise Forbidden unless ``user`` may publish a new service"""
    if user.role != 'provider':
        logger.info('Listing gate: user %s rejected, role %s', user.id, user.role)
        raise Forbidden('Only service providers can create services')

    if not is_publishing_allowed(user.id):
        logger.info('Listing gate: provider %s rejected, no active subscription', user.id)
        raise Forbidden('An active subscription is required to create services')


def validate_service_fields(data, partial=False):
    """
    Check listing fields shared by create and update

    Args:
        data (dict): Whitelisted payload
        partial (bool): Skip required-field checks (updates)
    """
    errors = []

    if not partial:
        missing = missing_fields(data, REQUIRED_FIELDS)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    if 'title' in data and not validate_length(data['title'], 100, required=True):
        errors.append('title is required and must be at most 100 characters')
    if 'description' in data and not validate_length(data['description'], 1000, required=True):
        errors.append('description is required and must be at most 1000 characters')

    if 'tags' in data:
        tags = data['tags']
        if not isinstance(tags, list) or not tags or not all(isinstance(t, str) and t.strip() for t in tags):
            errors.append('tags must be a non-empty list of strings')

    if 'price_info' in data:
        price = data['price_info']
        if not isinstance(price, dict) or not isinstance(price.get('amount'), (int, float)) \
                or isinstance(price.get('amount'), bool) or price['amount'] < 0:
            errors.append('price_info.amount must be a non-negative number')

    for key in ('availability', 'custom_fields'):
        if key in data and not isinstance(data[key], dict):
            errors.append(f'{key} must be an object')
    if 'images' in data and not isinstance(data['images'], list):
        errors.append('images must be a list')

    if errors:
        raise ValidationError('; '.join(errors))

    if 'category_id' in data and db.session.get(ServiceCategory, data['category_id']) is None:
        raise ValidationError('Category not found')
    if data.get('subcategory_id'):
        subcategory = db.session.get(ServiceCategory, data['subcategory_id'])
        category_id = data.get('category_id')
        if subcategory is None or (category_id and subcategory.parent_id != category_id):
            raise ValidationError('Subcategory not found in this category')


def create_service(user, data):
    """
    Publish a new service for ``user``

    The provider and community are taken from the authenticated user,
    whatever the payload says.
    """
    can_create_service(user)

    fields = {key: data[key] for key in CREATE_FIELDS if key in data}
    validate_service_fields(fields)
    if not user.community_id:
        raise ValidationError('Join a community before publishing services')

    service = Service(
        provider_id=user.id,
        community_id=user.community_id,
        **fields,
    )
    db.session.add(service)
    db.session.commit()

    logger.info('Service %s created by provider %s in community %s',
                service.id, user.id, user.community_id)
    return service
