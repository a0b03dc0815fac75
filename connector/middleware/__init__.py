"""Middleware package"""
from .request_context import register_request_hooks
from .sanitize import sanitize_dict, sanitize_string

__all__ = [
    'register_request_hooks',
    'sanitize_dict',
    'sanitize_string',
]
