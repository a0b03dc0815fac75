"""
Bearer token verification

Tokens are issued by the identity service; this API only verifies them and
loads the user they name.
"""
import logging
from functools import wraps

import jwt
from flask import request, jsonify, current_app

from connector import db
from connector.models import User

logger = logging.getLogger(__name__)


def decode_token(token: str) -> dict:
    """Decode and verify JWT token"""
    try:
        return jwt.decode(
            token,
            current_app.config['JWT_SECRET_KEY'],
            algorithms=[current_app.config['JWT_ALGORITHM']]
        )
    except jwt.ExpiredSignatureError:
        raise ValueError('Token has expired')
    except jwt.InvalidTokenError:
        raise ValueError('Invalid token')


def require_auth(f):
    """Decorator to require authentication for routes"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get('Authorization')

        if not auth_header:
            return jsonify({'success': False, 'error': 'unauthorized',
                            'message': 'Missing authorization header'}), 401

        try:
            # Extract token from "Bearer <token>"
            token = auth_header.split(' ')[1] if ' ' in auth_header else auth_header
            payload = decode_token(token)
            user_id = payload['user_id']
        except (ValueError, IndexError, KeyError) as e:
            return jsonify({'success': False, 'error': 'unauthorized',
                            'message': str(e) or 'Invalid token'}), 401

        user = db.session.get(User, user_id)
        if user is None:
            logger.info('Token for unknown user %s rejected', user_id)
            return jsonify({'success': False, 'error': 'unauthorized',
                            'message': 'User not found'}), 401

        # Attach user info to request
        request.user_id = user.id
        request.user_role = user.role
        request.current_user = user

        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles):
    """Decorator to require specific role(s) for routes"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not hasattr(request, 'user_role'):
                return jsonify({'success': False, 'error': 'unauthorized',
                                'message': 'Authentication required'}), 401

            if request.user_role not in roles:
                return jsonify({'success': False, 'error': 'forbidden',
                                'message': 'Insufficient permissions'}), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
