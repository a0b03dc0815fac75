"""Utilities package"""
from .helpers import generate_uuid, utcnow, as_utc, parse_date, safe_int
from .validators import (
    validate_rating,
    validate_length,
    validate_specific_ratings,
    missing_fields,
)

__all__ = [
    'generate_uuid',
    'utcnow',
    'as_utc',
    'parse_date',
    'safe_int',
    'validate_rating',
    'validate_length',
    'validate_specific_ratings',
    'missing_fields',
]
