"""
Helper utilities
"""
import uuid
from datetime import datetime, date, timezone


def generate_uuid():
    """
    Generate a primary key value

    Returns:
        str: UUID4 string
    """
    return str(uuid.uuid4())


def utcnow():
    """Current time as a timezone-aware UTC datetime"""
    return datetime.now(timezone.utc)


def as_utc(dt):
    """
    Normalize a datetime read back from the database

    SQLite drops tzinfo on DateTime(timezone=True) columns, so naive values
    are assumed to be UTC.

    Args:
        dt (datetime): Datetime or None

    Returns:
        datetime: Aware UTC datetime, or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def isoformat(dt):
    if dt is None:
        return None
    if isinstance(dt, datetime):
        return as_utc(dt).isoformat()
    return dt.isoformat()


def parse_date(date_string, format='%Y-%m-%d'):
    """
    Parse date string to date object

    Args:
        date_string (str): Date string, ISO datetimes are accepted too
        format (str): strptime format string

    Returns:
        date: Date object or None if invalid
    """
    if isinstance(date_string, date):
        return date_string
    if not isinstance(date_string, str):
        return None
    try:
        return datetime.strptime(date_string[:10], format).date()
    except ValueError:
        return None


def safe_int(value, default=0):
    """
    Safely convert value to int

    Args:
        value: Value to convert
        default (int): Default value if conversion fails

    Returns:
        int: Converted value or default
    """
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def safe_float(value, default=None):
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def json_body():
    """
    The request's JSON object body

    Raises:
        ValidationError: Body missing or not a JSON object
    """
    from flask import request
    from connector.services.exceptions import ValidationError

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data
