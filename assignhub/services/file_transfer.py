"""
File transfer between AssignHub and Supabase Storage.

Uploads are a single attempt. Downloads try the authenticated storage API
first and fall back to fetching a one-hour signed URL over HTTP. Deletes are
best-effort: a missing bucket or object is logged, never raised.
"""
import logging
import mimetypes
from dataclasses import dataclass

import requests

from assignhub import config as app_config
from assignhub.errors import ConfigurationError, DownloadError, UploadError
from assignhub.supabase_client import get_supabase

logger = logging.getLogger(__name__)

STRATEGY_DIRECT = 'direct'
STRATEGY_SIGNED_URL = 'signed_url'


@dataclass
class IncomingFile:
    """A file received from a client, before it is stored."""
    name: str
    data: bytes
    content_type: str

    @property
    def size(self):
        return len(self.data)

    @classmethod
    def from_storage(cls, file_storage):
        """Build from a werkzeug FileStorage (request.files entry)."""
        return cls(
            name=file_storage.filename or '',
            data=file_storage.read(),
            content_type=file_storage.mimetype or 'application/octet-stream',
        )


@dataclass
class DownloadedFile:
    content: bytes
    file_name: str
    content_type: str
    strategy: str


def clean_storage_path(path):
    """Strip surrounding slashes and a stray 'submissions/' prefix."""
    cleaned = (path or '').strip('/')
    if cleaned.startswith('submissions/'):
        cleaned = cleaned[len('submissions/'):]
    return cleaned


def _is_missing_bucket(error):
    return 'bucket not found' in str(error).lower()


class FileTransfer:
    """Moves bytes in and out of Supabase Storage buckets."""

    def __init__(self, client=None, signed_url_expiry=None):
        self._client = client
        self.signed_url_expiry = signed_url_expiry or app_config.SIGNED_URL_EXPIRY

    @property
    def db(self):
        return self._client if self._client is not None else get_supabase()

    def upload(self, bucket, path, data, content_type=None):
        storage = self.db.storage
        options = {"content-type": content_type or 'application/octet-stream'}
        try:
            storage.from_(bucket).upload(path, data, options)
        except Exception as e:
            if _is_missing_bucket(e):
                logger.error("Upload to missing bucket %s: %s", bucket, e)
                raise ConfigurationError(
                    f"The '{bucket}' storage bucket is not properly configured. "
                    "Please contact support."
                ) from e
            logger.error("Upload of %s to %s failed: %s", path, bucket, e)
            raise UploadError(str(e)) from e
        logger.info("Uploaded %s to %s (%d bytes)", path, bucket, len(data))
        return path

    def signed_url(self, bucket, path, expires_in=None):
        """Create a time-limited link for a private object."""
        result = self.db.storage.from_(bucket).create_signed_url(
            path, expires_in or self.signed_url_expiry
        )
        url = None
        if isinstance(result, dict):
            url = result.get('signedURL') or result.get('signedUrl')
        if not url:
            raise DownloadError("Could not generate signed URL")
        return url

    def download(self, bucket, path, display_name=None):
        cleaned = clean_storage_path(path)
        if not cleaned:
            raise DownloadError("Invalid file path")
        file_name = display_name or cleaned.rsplit('/', 1)[-1] or 'download'
        content_type = mimetypes.guess_type(file_name)[0] or 'application/octet-stream'

        try:
            content = self._download_direct(bucket, cleaned)
            return DownloadedFile(content, file_name, content_type, STRATEGY_DIRECT)
        except Exception as direct_error:
            logger.info("Direct download of %s failed, trying signed URL: %s",
                        cleaned, direct_error)

        try:
            content = self._download_signed(bucket, cleaned)
            return DownloadedFile(content, file_name, content_type, STRATEGY_SIGNED_URL)
        except Exception as signed_error:
            logger.error("Signed URL download of %s failed: %s", cleaned, signed_error)
            raise DownloadError() from signed_error

    def _download_direct(self, bucket, path):
        content = self.db.storage.from_(bucket).download(path)
        if not content:
            raise DownloadError("No data received")
        return content

    def _download_signed(self, bucket, path):
        url = self.signed_url(bucket, path)
        with requests.get(url) as response:
            response.raise_for_status()
            return response.content

    def remove(self, bucket, path):
        """Best-effort delete. Returns True when the object was removed."""
        cleaned = clean_storage_path(path)
        if not cleaned:
            return False
        storage = self.db.storage
        try:
            buckets = storage.list_buckets() or []
            names = {getattr(b, 'name', None) or getattr(b, 'id', None) for b in buckets}
            if bucket not in names:
                logger.warning("Bucket %s not found, skipping delete of %s", bucket, cleaned)
                return False
            storage.from_(bucket).remove([cleaned])
        except Exception as e:
            logger.warning("Could not delete %s from %s: %s", cleaned, bucket, e)
            return False
        logger.info("Deleted %s from %s", cleaned, bucket)
        return True
