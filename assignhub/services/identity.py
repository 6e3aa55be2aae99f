"""
Identity resolution: turn an authenticated Supabase user into an AssignHub
profile and decide where the client should go next.

    ANONYMOUS -> AUTHENTICATING -> AUTHENTICATED_NEEDS_PASSWORD_CHANGE
                                -> AUTHENTICATED_READY
    (any) -> ANONYMOUS on sign-out

Sign-in is two separate steps: authenticate with Supabase Auth, then load
the profile. A failed profile load leaves the caller anonymous with a
recoverable error message instead of raising.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from assignhub.errors import AuthorizationError, PersistenceError, ValidationError
from assignhub.models import User, ROLE_STUDENT, ROLE_TEACHER
from assignhub.repositories import UserRepository
from assignhub.supabase_client import create_auth_client, get_supabase

logger = logging.getLogger(__name__)

LOGIN_PATH = '/'
CHANGE_PASSWORD_PATH = '/change-password'
LANDING_PATHS = {
    ROLE_TEACHER: '/teacher',
    ROLE_STUDENT: '/student',
}
# Only these locations get redirected to the role's landing page
ENTRY_PATHS = (LOGIN_PATH, CHANGE_PASSWORD_PATH)

MIN_PASSWORD_LENGTH = 6
PROFILE_ERROR = "Could not fetch user data. Please try again."


class IdentityState(str, Enum):
    ANONYMOUS = 'anonymous'
    AUTHENTICATING = 'authenticating'
    AUTHENTICATED_NEEDS_PASSWORD_CHANGE = 'needs_password_change'
    AUTHENTICATED_READY = 'ready'


@dataclass
class Resolution:
    state: IdentityState
    user: Optional[User] = None
    redirect: Optional[str] = None
    error: Optional[str] = None
    session: dict = field(default_factory=dict)

    def to_dict(self):
        return {
            "state": self.state.value,
            "user": self.user.to_dict() if self.user else None,
            "redirect": self.redirect,
            "error": self.error,
            "session": self.session or None,
        }


def landing_path(role):
    return LANDING_PATHS.get(role, LOGIN_PATH)


class IdentityResolver:

    def __init__(self, users=None, auth_client_factory=None):
        self.users = users or UserRepository()
        self.auth_client_factory = auth_client_factory or create_auth_client

    def resolve(self, user_id, current_path=LOGIN_PATH):
        """Load the profile for an authenticated user and pick a redirect."""
        if not user_id:
            return Resolution(IdentityState.ANONYMOUS)

        try:
            user = self.users.get(user_id)
        except PersistenceError as e:
            logger.error("Error fetching user data for %s: %s", user_id, e)
            user = None
        if user is None:
            return Resolution(IdentityState.ANONYMOUS, error=PROFILE_ERROR)

        if not user.password_changed:
            return Resolution(IdentityState.AUTHENTICATED_NEEDS_PASSWORD_CHANGE,
                              user=user, redirect=CHANGE_PASSWORD_PATH)

        redirect = None
        if current_path in ENTRY_PATHS:
            redirect = landing_path(user.role)
        return Resolution(IdentityState.AUTHENTICATED_READY, user=user, redirect=redirect)

    def _authenticate(self, email, password):
        client = self.auth_client_factory()
        try:
            response = client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.info("Sign in failed for %s: %s", email, e)
            raise AuthorizationError("Invalid email or password.") from e
        if response is None or response.user is None:
            raise AuthorizationError("Invalid email or password.")
        return response

    def sign_in(self, email, password, current_path=LOGIN_PATH):
        if not email or not password:
            raise ValidationError("Please enter your email and password.")

        logger.info("Identity %s -> %s for %s", IdentityState.ANONYMOUS.value,
                    IdentityState.AUTHENTICATING.value, email)
        # Phase one: credentials only. The profile is loaded separately below.
        response = self._authenticate(email, password)
        session = {}
        if response.session is not None:
            session = {
                "access_token": response.session.access_token,
                "refresh_token": response.session.refresh_token,
                "expires_at": response.session.expires_at,
            }

        resolution = self.resolve(response.user.id, current_path)
        resolution.session = session if resolution.user else {}
        return resolution

    def sign_out(self, access_token=None):
        if access_token:
            try:
                get_supabase().auth.admin.sign_out(access_token)
            except Exception as e:
                logger.warning("Sign out could not revoke session: %s", e)
        return Resolution(IdentityState.ANONYMOUS, redirect=LOGIN_PATH)

    def change_password(self, user, current_password, new_password, confirm_password):
        if not current_password or not new_password or not confirm_password:
            raise ValidationError("Please fill in all password fields")
        if new_password != confirm_password:
            raise ValidationError("New password and confirm password must be the same")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        try:
            self._authenticate(user.email, current_password)
        except AuthorizationError:
            raise AuthorizationError("Current password incorrect")

        try:
            get_supabase().auth.admin.update_user_by_id(user.id, {"password": new_password})
        except Exception as e:
            logger.error("Failed to update password for %s: %s", user.id, e)
            raise PersistenceError("Failed to update password. Please try again.") from e

        # Password is already changed here; a failed flag write leaves the
        # user on the change-password page.
        try:
            self.users.mark_password_changed(user.id)
            user.password_changed = True
        except PersistenceError as e:
            logger.error("Error updating password_changed flag for %s: %s", user.id, e)

        logger.info("Password changed for %s", user.id)
        if user.password_changed:
            return Resolution(IdentityState.AUTHENTICATED_READY, user=user,
                              redirect=landing_path(user.role))
        return Resolution(IdentityState.AUTHENTICATED_NEEDS_PASSWORD_CHANGE, user=user,
                          redirect=CHANGE_PASSWORD_PATH)
