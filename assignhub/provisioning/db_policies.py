#!/usr/bin/env python3
"""
Install row-level-security policies on the submissions table.

Students may read, insert and update only their own rows; teachers may read
every row. Existing policies are dropped first so the script can be re-run.

Run: python3 -m assignhub.provisioning.db_policies
"""
import argparse
import logging
import os
import sys

from dotenv import load_dotenv
from sqlalchemy import create_engine, text

logger = logging.getLogger(__name__)

POLICY_NAMES = [
    "Users can view their own submissions",
    "Users can create their own submissions",
    "Users can update their own submissions",
    "Users can delete their own submissions",
    "Teachers can view all submissions",
]

CREATE_POLICIES = [
    """CREATE POLICY "Users can view their own submissions"
    ON public.submissions
    FOR SELECT
    USING (auth.uid() = student_id);""",

    """CREATE POLICY "Users can create their own submissions"
    ON public.submissions
    FOR INSERT
    WITH CHECK (auth.uid() = student_id);""",

    """CREATE POLICY "Users can update their own submissions"
    ON public.submissions
    FOR UPDATE
    USING (auth.uid() = student_id);""",

    """CREATE POLICY "Teachers can view all submissions"
    ON public.submissions
    FOR SELECT
    USING (EXISTS (
      SELECT 1 FROM auth.users
      WHERE id = auth.uid() AND raw_user_meta_data->>'role' = 'teacher'
    ));""",
]


def policy_statements():
    """Ordered SQL: enable RLS, drop old policies, create new ones."""
    statements = ["ALTER TABLE public.submissions ENABLE ROW LEVEL SECURITY;"]
    statements += [
        f'DROP POLICY IF EXISTS "{name}" ON public.submissions;' for name in POLICY_NAMES
    ]
    statements += CREATE_POLICIES
    return statements


def apply_policies(engine):
    # One transaction: a failed statement leaves the old policies in place
    with engine.begin() as conn:
        for sql in policy_statements():
            logger.info("Executing: %s ...", sql.splitlines()[0])
            conn.execute(text(sql))


def main(argv=None, engine_factory=create_engine):
    parser = argparse.ArgumentParser(description="Install AssignHub row-level-security policies")
    parser.add_argument('--database-url', default=None,
                        help="Postgres URL (defaults to DATABASE_URL)")
    parser.add_argument('--env-file', default=None, help="Path to a .env file to load first")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    if args.env_file:
        load_dotenv(args.env_file, override=True)

    database_url = args.database_url or os.getenv("DATABASE_URL")
    if not database_url:
        logger.error("Missing DATABASE_URL")
        return 1

    try:
        apply_policies(engine_factory(database_url))
    except Exception as e:
        logger.error("Error setting up database policies: %s", e)
        return 1
    logger.info("Database policies set up successfully")
    return 0


if __name__ == '__main__':
    sys.exit(main())
