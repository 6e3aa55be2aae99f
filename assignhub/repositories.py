"""
Typed repositories over the Supabase tables.

Callers get User / Assignment / Submission records back and never build
PostgREST queries themselves. Any failure talking to the database surfaces
as PersistenceError.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from .errors import PersistenceError
from .models import Assignment, Submission, User, ROLE_STUDENT
from .supabase_client import get_supabase

logger = logging.getLogger(__name__)

SUBMISSION_CONFLICT_TARGET = 'assignment_id,student_id'


class _Repository:
    table = None

    def __init__(self, client=None):
        self._client = client

    @property
    def db(self):
        return self._client if self._client is not None else get_supabase()

    def _run(self, action, build):
        """Build a query against this repository's table and execute it."""
        db = self.db
        try:
            return build(db.table(self.table)).execute()
        except Exception as e:
            logger.error("%s on %s failed: %s", action, self.table, e)
            raise PersistenceError(f"Failed to {action}: {e}") from e

    @staticmethod
    def _first(result):
        rows = result.data or []
        return rows[0] if rows else None


class UserRepository(_Repository):
    table = 'users'

    def get(self, user_id) -> Optional[User]:
        result = self._run("load user profile",
                           lambda t: t.select('*').eq('id', user_id).limit(1))
        row = self._first(result)
        return User.from_row(row) if row else None

    def mark_password_changed(self, user_id):
        self._run("update password flag",
                  lambda t: t.update({'password_changed': True}).eq('id', user_id))

    def count_students(self, year) -> int:
        result = self._run("count students",
                           lambda t: t.select('id', count='exact')
                           .eq('role', ROLE_STUDENT).eq('year', year))
        if result.count is not None:
            return result.count
        return len(result.data or [])


class AssignmentRepository(_Repository):
    table = 'assignments'

    def get(self, assignment_id) -> Optional[Assignment]:
        result = self._run("load assignment",
                           lambda t: t.select('*').eq('id', assignment_id).limit(1))
        row = self._first(result)
        return Assignment.from_row(row) if row else None

    def get_owned(self, assignment_id, teacher_id) -> Optional[Assignment]:
        """Load an assignment only if `teacher_id` owns it."""
        result = self._run("verify assignment ownership",
                           lambda t: t.select('*').eq('id', assignment_id)
                           .eq('teacher_id', teacher_id).limit(1))
        row = self._first(result)
        return Assignment.from_row(row) if row else None

    def insert(self, values: dict) -> Assignment:
        result = self._run("create assignment", lambda t: t.insert(values))
        row = self._first(result)
        if not row:
            raise PersistenceError("Failed to create assignment")
        return Assignment.from_row(row)

    def list_by_year(self, year) -> List[Assignment]:
        result = self._run("list assignments",
                           lambda t: t.select('*').eq('year', year)
                           .order('created_at', desc=True))
        return [Assignment.from_row(r) for r in result.data or []]

    def list_by_teacher(self, teacher_id) -> List[Assignment]:
        result = self._run("list assignments",
                           lambda t: t.select('*').eq('teacher_id', teacher_id)
                           .order('created_at', desc=True))
        return [Assignment.from_row(r) for r in result.data or []]


class SubmissionRepository(_Repository):
    table = 'submissions'

    def get(self, submission_id) -> Optional[Submission]:
        result = self._run("load submission",
                           lambda t: t.select('*').eq('id', submission_id).limit(1))
        row = self._first(result)
        return Submission.from_row(row) if row else None

    def find_by_assignment_and_student(self, assignment_id, student_id) -> Optional[Submission]:
        result = self._run("load submission",
                           lambda t: t.select('*').eq('assignment_id', assignment_id)
                           .eq('student_id', student_id).limit(1))
        row = self._first(result)
        return Submission.from_row(row) if row else None

    def list_by_assignment(self, assignment_id) -> List[Submission]:
        result = self._run("list submissions",
                           lambda t: t.select('*').eq('assignment_id', assignment_id)
                           .order('submitted_at', desc=True))
        return [Submission.from_row(r) for r in result.data or []]

    def count_by_assignment(self, assignment_id) -> int:
        result = self._run("count submissions",
                           lambda t: t.select('id', count='exact').eq('assignment_id', assignment_id))
        if result.count is not None:
            return result.count
        return len(result.data or [])

    def upsert(self, values: dict) -> Submission:
        """Insert or overwrite the row for (assignment_id, student_id)."""
        result = self._run("save submission",
                           lambda t: t.upsert(values,
                                              on_conflict=SUBMISSION_CONFLICT_TARGET,
                                              ignore_duplicates=False))
        row = self._first(result)
        if not row:
            raise PersistenceError("Failed to save submission")
        return Submission.from_row(row)

    def update_grade(self, submission_id, grade, feedback) -> Submission:
        values = {
            'grade': grade,
            'feedback': feedback,
            'updated_at': datetime.now(timezone.utc).isoformat(),
        }
        result = self._run("save grade",
                           lambda t: t.update(values).eq('id', submission_id))
        row = self._first(result)
        if not row:
            raise PersistenceError("Failed to update submission. Please try again.")
        return Submission.from_row(row)

    def delete(self, submission_id):
        self._run("delete submission", lambda t: t.delete().eq('id', submission_id))
