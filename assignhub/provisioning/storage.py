#!/usr/bin/env python3
"""
Create the private storage buckets AssignHub needs, then install storage
policies via the `create_storage_policies` RPC.

Run: python3 -m assignhub.provisioning.storage
Exits non-zero on missing configuration or on any failed step.
"""
import argparse
import logging
import os
import sys

from dotenv import load_dotenv
from supabase import create_client

from assignhub import config as app_config

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = [
    'image/png',
    'image/jpeg',
    'image/gif',
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'application/vnd.ms-excel',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'text/plain',
]


class ProvisioningError(Exception):
    pass


def bucket_options():
    return {
        "public": False,
        "file_size_limit": app_config.BUCKET_SIZE_LIMIT,
        "allowed_mime_types": list(ALLOWED_MIME_TYPES),
    }


def ensure_bucket(client, name, existing_names):
    """Create `name` unless it already exists. Returns True when created."""
    if name in existing_names:
        logger.info("Bucket %s already exists", name)
        return False
    try:
        client.storage.create_bucket(name, options=bucket_options())
    except Exception as e:
        raise ProvisioningError(f"Error creating bucket {name}: {e}") from e
    logger.info("Bucket %s created", name)
    return True


def setup_storage(client, buckets):
    try:
        existing = client.storage.list_buckets() or []
    except Exception as e:
        raise ProvisioningError(f"Error listing buckets: {e}") from e
    existing_names = {getattr(b, 'name', None) or getattr(b, 'id', None) for b in existing}

    created = [name for name in buckets if ensure_bucket(client, name, existing_names)]

    try:
        client.rpc('create_storage_policies').execute()
    except Exception as e:
        raise ProvisioningError(f"Error setting storage policies: {e}") from e
    logger.info("Storage policies set successfully")
    return created


def main(argv=None, client_factory=create_client):
    parser = argparse.ArgumentParser(description="Provision AssignHub storage buckets")
    parser.add_argument('--env-file', default=None, help="Path to a .env file to load first")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    if args.env_file:
        load_dotenv(args.env_file, override=True)

    url = os.getenv("SUPABASE_URL") or app_config.SUPABASE_URL
    key = os.getenv("SUPABASE_SERVICE_KEY") or app_config.SUPABASE_SERVICE_KEY
    if not url or not key:
        logger.error("Missing SUPABASE_URL or SUPABASE_SERVICE_KEY")
        return 1

    buckets = [app_config.SUBMISSIONS_BUCKET, app_config.ASSIGNMENT_FILES_BUCKET]
    try:
        setup_storage(client_factory(url, key), buckets)
    except ProvisioningError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
