"""
Configuration management for AssignHub.
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Supabase configuration
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "")

# Direct Postgres connection, only used by assignhub/provisioning/db_policies.py
DATABASE_URL = os.getenv("DATABASE_URL", "")

# Storage buckets
SUBMISSIONS_BUCKET = os.getenv("SUBMISSIONS_BUCKET", "assignment-submissions")
ASSIGNMENT_FILES_BUCKET = os.getenv("ASSIGNMENT_FILES_BUCKET", "assignment_files")

# Server configuration
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
DEBUG = os.getenv("DEBUG", "false").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Submission upload limits
MAX_SUBMISSION_BYTES = 10 * 1024 * 1024
ALLOWED_SUBMISSION_TYPES = [
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'application/vnd.ms-excel',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'text/plain',
    'image/jpeg',
    'image/png',
    'image/gif',
]

# Bucket provisioning limits (enforced by storage, not by the app)
BUCKET_SIZE_LIMIT = "50MB"

# Signed download links
SIGNED_URL_EXPIRY = 3600

# Academic years: 1-5, 6 = final year
MIN_YEAR = 1
MAX_YEAR = 6
DEFAULT_STUDENT_YEAR = MIN_YEAR

