"""
Supabase client access for AssignHub.

The shared client uses the service key and is created on first use. Password
checks get a throwaway client so a user session never leaks into the shared one.
"""
import logging
from supabase import create_client, Client

from . import config as app_config
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_supabase: Client = None


def get_supabase() -> Client:
    """Get or create the service-role Supabase client."""
    global _supabase
    if _supabase is None:
        url = app_config.SUPABASE_URL
        key = app_config.SUPABASE_SERVICE_KEY
        if not url or not key:
            raise ConfigurationError(
                "Supabase credentials not configured. Check SUPABASE_URL and "
                "SUPABASE_SERVICE_KEY in .env"
            )
        _supabase = create_client(url, key)
        logger.info("Supabase client created for %s", url)
    return _supabase


def create_auth_client() -> Client:
    """Create a short-lived client for signing a user in."""
    url = app_config.SUPABASE_URL
    key = app_config.SUPABASE_ANON_KEY or app_config.SUPABASE_SERVICE_KEY
    if not url or not key:
        raise ConfigurationError(
            "Supabase credentials not configured. Check SUPABASE_URL and "
            "SUPABASE_ANON_KEY in .env"
        )
    return create_client(url, key)


def reset_supabase():
    global _supabase
    _supabase = None
