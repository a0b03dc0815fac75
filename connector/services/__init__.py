"""
Business logic layer

Routes stay thin: they authenticate, parse the request and call into
these modules, which raise ``exceptions.ServiceError`` subclasses on any
rejected operation.
"""
from . import catalog, listing_gate, rating_aggregator, review_workflow, subscription_lifecycle
from .exceptions import (
    ServiceError,
    NotFound,
    Forbidden,
    Conflict,
    ValidationError,
    ExternalDependencyError,
    Internal,
)

__all__ = [
    'catalog',
    'listing_gate',
    'rating_aggregator',
    'review_workflow',
    'subscription_lifecycle',
    'ServiceError',
    'NotFound',
    'Forbidden',
    'Conflict',
    'ValidationError',
    'ExternalDependencyError',
    'Internal',
]
