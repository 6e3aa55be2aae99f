"""
Supabase JWT Authentication for AssignHub.
Validates Bearer tokens on all /api/ routes except public endpoints, and
provides the role guard used by teacher-only and student-only routes.
"""
import logging
from functools import wraps

import jwt
from flask import request, jsonify, g

from . import config as app_config
from .errors import ConfigurationError, PersistenceError
from .repositories import UserRepository
from .services.identity import landing_path

logger = logging.getLogger(__name__)

# Routes that don't require authentication
PUBLIC_EXACT = [
    '/api/health',
    '/api/auth/sign-in',
]


def get_jwt_secret():
    """Get the Supabase JWT secret from configuration."""
    secret = app_config.SUPABASE_JWT_SECRET
    if not secret:
        raise ConfigurationError('SUPABASE_JWT_SECRET not configured')
    return secret


def validate_token(token):
    """
    Validate a Supabase JWT and return the decoded payload.
    Returns None if invalid.
    """
    try:
        payload = jwt.decode(
            token,
            get_jwt_secret(),
            algorithms=['HS256'],
            audience='authenticated',
        )
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def is_public_route(path):
    """Check if a route is public (no auth required)."""
    return path in PUBLIC_EXACT


def init_auth(app):
    """
    Register the before_request auth hook on the Flask app.
    Call this BEFORE registering blueprints.
    """
    @app.before_request
    def check_auth():
        # Skip non-API routes
        if not request.path.startswith('/api/'):
            return None

        if is_public_route(request.path):
            return None

        auth_header = request.headers.get('Authorization', '')
        if not auth_header.startswith('Bearer '):
            return jsonify({'error': 'Authentication required'}), 401

        token = auth_header[7:]  # Strip 'Bearer '
        try:
            payload = validate_token(token)
        except ConfigurationError as e:
            logger.error("Auth not configured: %s", e)
            return jsonify(e.to_dict()), e.status_code
        if payload is None:
            return jsonify({'error': 'Invalid or expired token'}), 401

        g.user_id = payload.get('sub')
        g.user_email = payload.get('email', '')
        g.access_token = token


def current_user():
    """Load (once per request) the profile of the authenticated caller."""
    if 'user' not in g:
        user_id = g.get('user_id')
        g.user = UserRepository().get(user_id) if user_id else None
    return g.user


def require_role(role=None):
    """
    Route guard. No profile -> 401; wrong role -> 403 with the caller's own
    landing page so the client can send them home.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                user = current_user()
            except PersistenceError as e:
                return jsonify(e.to_dict()), e.status_code
            if user is None:
                return jsonify({'error': 'Authentication required', 'redirect': '/'}), 401
            if role and user.role != role:
                logger.info("User %s with role %s denied %s route %s",
                            user.id, user.role, role, request.path)
                return jsonify({
                    'error': 'You do not have access to this page',
                    'redirect': landing_path(user.role),
                }), 403
            return fn(user, *args, **kwargs)
        return wrapper
    return decorator
