"""
JSON error responses

Every error leaves the API as ``{"success": false, "error": <kind>,
"message": <text>}``.
"""
import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from connector import db
from connector.services.exceptions import ServiceError, Internal

logger = logging.getLogger(__name__)


def _error(kind, message, status, **extra):
    body = {'success': False, 'error': kind, 'message': message}
    body.update(extra)
    return jsonify(body), status


def register_error_handlers(app):

    @app.errorhandler(ServiceError)
    def handle_service_error(e):
        if e.status_code >= 500:
            logger.error('%s: %s', e.kind, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e):
        db.session.rollback()
        logger.exception('Unhandled database error')
        error = Internal('A database error occurred')
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(429)
    def ratelimit_handler(e):
        # Flask-Limiter sets Retry-After; read it back for the body
        retry_after = dict(e.get_headers()).get('Retry-After') if hasattr(e, 'get_headers') else None
        retry_after_seconds = int(retry_after) if retry_after else 60
        return _error('rate_limited', 'Too many requests. Please try again later.', 429,
                      retry_after=retry_after_seconds)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        kind = (e.name or 'error').lower().replace(' ', '_')
        return _error(kind, e.description, e.code)
