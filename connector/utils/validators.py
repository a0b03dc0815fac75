"""
Validation utilities
"""
import html


def validate_rating(value):
    """
    A rating is a whole number of stars between 1 and 5

    Booleans are rejected even though they are ints in Python.
    """
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 5


def validate_length(value, max_length, required=False):
    """
    Validate an optional (or required) text field

    Args:
        value: Submitted value
        max_length (int): Maximum number of characters, counted on the text
            as submitted (JSON bodies arrive HTML-escaped)
        required (bool): Whether an empty value is an error

    Returns:
        bool: True if valid, False otherwise
    """
    if value is None or value == '':
        return not required
    if not isinstance(value, str):
        return False
    if required and not value.strip():
        return False
    return len(html.unescape(value)) <= max_length


def validate_specific_ratings(value):
    """Per-criterion ratings: a mapping of criterion name to a 1-5 rating"""
    if value is None:
        return True
    if not isinstance(value, dict):
        return False
    return all(isinstance(k, str) and validate_rating(v) for k, v in value.items())


def missing_fields(data, fields):
    """
    Names of required fields that are absent or empty

    Args:
        data (dict): Submitted payload
        fields (iterable): Required field names

    Returns:
        list: Missing field names, in the order given
    """
    return [f for f in fields if data.get(f) in (None, '', [], {})]
