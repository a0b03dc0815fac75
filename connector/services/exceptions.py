"""
Domain exceptions raised by the service layer

Each carries a stable ``kind`` (rendered as ``error`` in JSON responses)
and the HTTP status the API maps it to.
"""


class ServiceError(Exception):
    """Base class for all service layer errors"""
    kind = 'internal'
    status_code = 500

    def __init__(self, message=None):
        self.message = message or self.__class__.__doc__
        super().__init__(self.message)

    def to_dict(self):
        return {'success': False, 'error': self.kind, 'message': self.message}


class NotFound(ServiceError):
    """Resource not found"""
    kind = 'not_found'
    status_code = 404


class Forbidden(ServiceError):
    """Not allowed to perform this action"""
    kind = 'forbidden'
    status_code = 403


class Conflict(ServiceError):
    """Request conflicts with the current state of the resource"""
    kind = 'conflict'
    status_code = 409


class ValidationError(ServiceError):
    """Invalid input"""
    kind = 'validation_error'
    status_code = 400


class ExternalDependencyError(ServiceError):
    """Payment gateway unavailable"""
    kind = 'external_dependency_error'
    status_code = 502


class Internal(ServiceError):
    """Internal server error"""
    kind = 'internal'
    status_code = 500
