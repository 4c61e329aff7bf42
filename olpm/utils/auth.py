"""
Authentication Helpers
Bearer-token identity and role decorators for the JSON API
"""
from datetime import timedelta
from functools import wraps
import logging

import jwt
from flask import current_app, g, request

from olpm.errors import AuthenticationError, AuthorizationError
from olpm.utils.helpers import now_utc

logger = logging.getLogger(__name__)

STATUS_ERRORS = {
    'banned': ('Account banned. Contact administrator for assistance.', 'ACCOUNT_BANNED'),
    'pending': ('Account pending approval. Please wait for admin approval.', 'ACCOUNT_PENDING'),
}


def create_token(user, expires_in=None):
    """Issue a signed token for a user"""
    hours = current_app.config['JWT_EXPIRES_HOURS']
    payload = {
        'id': user.id,
        'role': user.role,
        'exp': now_utc() + (expires_in or timedelta(hours=hours)),
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET'],
        algorithm=current_app.config['JWT_ALGORITHM'],
    )


def decode_token(token):
    return jwt.decode(
        token,
        current_app.config['JWT_SECRET'],
        algorithms=[current_app.config['JWT_ALGORITHM']],
    )


def get_current_user():
    """Get the user attached by authenticate_token, if any"""
    return g.get('current_user')


def _bearer_token():
    header = request.headers.get('Authorization', '')
    parts = header.split(' ', 1)
    if len(parts) != 2 or parts[0].lower() != 'bearer' or not parts[1].strip():
        return None
    return parts[1].strip()


# Decorators
def authenticate_token(f):
    """
    Decorator to require a valid bearer token
    Loads a fresh copy of the user so status changes apply immediately
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from olpm.extensions import db
        from olpm.models import User

        token = _bearer_token()
        if not token:
            raise AuthenticationError('Access denied. No token provided.')

        try:
            payload = decode_token(token)
        except jwt.PyJWTError as exc:
            logger.warning("Rejected token: %s", exc)
            raise AuthenticationError('Invalid token.')

        user_id = payload.get('id')
        user = db.session.get(User, user_id) if user_id is not None else None
        if user is None:
            raise AuthenticationError('Invalid token. User not found.')

        if not user.is_approved:
            message, code = STATUS_ERRORS.get(
                user.status,
                ('Invalid account status. Contact administrator.', 'INVALID_STATUS'),
            )
            raise AuthorizationError(message, code=code)

        g.current_user = user
        return f(*args, **kwargs)
    return decorated_function


def authorize_roles(*roles):
    """
    Decorator to require one of the given roles
    Must be applied below authenticate_token
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = get_current_user()
            if user is None or user.role not in roles:
                logger.warning(
                    "Role check failed: need %s, have %s",
                    roles, getattr(user, 'role', None),
                )
                raise AuthorizationError('Access denied. Insufficient permissions.')
            return f(*args, **kwargs)
        return decorated_function
    return decorator
