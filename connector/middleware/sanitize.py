"""Escape HTML in user supplied strings before they reach the database"""
import html


def sanitize_string(value):
    """Escape < > & " ' so stored text cannot carry markup"""
    if not isinstance(value, str):
        return value
    return html.escape(value, quote=True)


def sanitize_dict(data):
    """Recursively escape every string leaf of a JSON structure"""
    if isinstance(data, dict):
        return {key: sanitize_dict(value) for key, value in data.items()}
    if isinstance(data, list):
        return [sanitize_dict(item) for item in data]
    return sanitize_string(data)
