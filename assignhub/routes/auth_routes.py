"""
Auth Routes for AssignHub.
Handles sign-in, sign-out, session resolution and the forced password change.
"""
import logging
from flask import Blueprint, request, jsonify, g

from assignhub.auth import current_user
from assignhub.errors import AssignHubError
from assignhub.services.identity import IdentityResolver, LOGIN_PATH

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)


@auth_bp.route('/api/auth/sign-in', methods=['POST'])
def sign_in():
    """
    PUBLIC endpoint, no JWT required.
    Returns the Supabase session plus where the client should navigate.
    """
    data = request.get_json(silent=True) or {}
    try:
        resolution = IdentityResolver().sign_in(
            data.get('email', '').strip(),
            data.get('password', ''),
            data.get('path', LOGIN_PATH),
        )
        return jsonify(resolution.to_dict())
    except AssignHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.exception("Unexpected error during sign in: %s", e)
        return jsonify({"error": "Authentication error. Please try again."}), 500


@auth_bp.route('/api/auth/session', methods=['GET'])
def session():
    """Resolve the caller's profile for the page they are currently on."""
    path = request.args.get('path', LOGIN_PATH)
    resolution = IdentityResolver().resolve(g.user_id, path)
    return jsonify(resolution.to_dict())


@auth_bp.route('/api/auth/sign-out', methods=['POST'])
def sign_out():
    resolution = IdentityResolver().sign_out(g.get('access_token'))
    return jsonify(resolution.to_dict())


@auth_bp.route('/api/auth/change-password', methods=['POST'])
def change_password():
    data = request.get_json(silent=True) or {}
    try:
        user = current_user()
        if user is None:
            return jsonify({"error": "Authentication required", "redirect": LOGIN_PATH}), 401
        resolution = IdentityResolver().change_password(
            user,
            data.get('current_password', ''),
            data.get('new_password', ''),
            data.get('confirm_password', ''),
        )
        return jsonify(resolution.to_dict())
    except AssignHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.exception("Error during password change: %s", e)
        return jsonify({"error": "An unexpected error occurred. Please try again."}), 500
