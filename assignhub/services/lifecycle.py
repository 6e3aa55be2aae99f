"""
Submission lifecycle: when a student may create, replace or delete a
submission, and the ordered steps each of those takes.

Rules:
- A marked submission (grade set, or non-blank feedback) is frozen for the
  student: no replace, no delete.
- Delete additionally requires now <= the assignment's due date.
- Replace has no due-date gate. Late uploads are allowed and only flagged
  as overdue to the caller.
"""
import logging
import time

from assignhub import config as app_config
from assignhub.errors import AuthorizationError, NotFoundError, PersistenceError, ValidationError
from assignhub.models import utc_now
from assignhub.repositories import AssignmentRepository, SubmissionRepository, UserRepository
from assignhub.services.file_transfer import FileTransfer

logger = logging.getLogger(__name__)


def can_delete(submission, assignment, now=None):
    """
    True only when the submission is unmarked and the due date has not passed.

    This is the single predicate behind both the delete prompt and the delete
    itself; `remove` evaluates it again right before acting.
    """
    if submission is None or assignment is None:
        return False
    if submission.is_marked:
        return False
    due = assignment.due_at
    if due is None:
        return False
    return (now or utc_now()) <= due


def can_submit(assignment, existing, now=None):
    """True when there is nothing to replace, or the existing one could be deleted."""
    if existing is None:
        return True
    return can_delete(existing, assignment, now)


def validate_upload(incoming, max_bytes=None, allowed_types=None):
    """Reject oversize or unsupported files before anything is uploaded."""
    max_bytes = max_bytes or app_config.MAX_SUBMISSION_BYTES
    allowed_types = allowed_types or app_config.ALLOWED_SUBMISSION_TYPES

    if incoming is None or not incoming.name:
        raise ValidationError("No file uploaded")
    if incoming.size == 0:
        raise ValidationError("The selected file is empty.")
    if incoming.size > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise ValidationError(f"File too large. Please select a file smaller than {limit_mb}MB.")
    if incoming.content_type not in allowed_types:
        raise ValidationError(
            "Invalid file type. Please select a valid file type "
            "(PDF, Word, Excel, Text, or Image)."
        )


def build_storage_path(owner_id, file_name, timestamp_ms=None):
    """
    '<owner>/<stem>-<ms timestamp>.<ext>' so repeat uploads never collide.

    The stem is everything before the first dot; the extension everything
    after the last one.
    """
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    stem = file_name.split('.')[0] or 'file'
    if '.' in file_name:
        ext = file_name.rsplit('.', 1)[1]
        return f"{owner_id}/{stem}-{timestamp_ms}.{ext}"
    return f"{owner_id}/{stem}-{timestamp_ms}"


def ensure_published_for(assignment, student):
    """Students only reach assignments published for their own year."""
    year = student.year if student is not None and student.year else app_config.DEFAULT_STUDENT_YEAR
    if assignment.year != year:
        raise AuthorizationError("This assignment is not published for your year.")


class SubmissionLifecycle:
    """Sequences the multi-step effects of submitting and deleting."""

    def __init__(self, submissions=None, assignments=None, users=None, files=None, bucket=None):
        self.submissions = submissions or SubmissionRepository()
        self.assignments = assignments or AssignmentRepository()
        self.users = users or UserRepository()
        self.files = files or FileTransfer()
        self.bucket = bucket or app_config.SUBMISSIONS_BUCKET

    def _load_assignment(self, assignment_id):
        assignment = self.assignments.get(assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment not found")
        return assignment

    def status(self, assignment_id, student_id, now=None):
        """The student's view of one assignment: their submission and what they may do."""
        now = now or utc_now()
        assignment = self._load_assignment(assignment_id)
        ensure_published_for(assignment, self.users.get(student_id))
        existing = self.submissions.find_by_assignment_and_student(assignment_id, student_id)
        return {
            "assignment": assignment.to_dict(),
            "submission": existing.to_dict() if existing else None,
            "is_overdue": assignment.is_overdue(now),
            "can_submit": can_submit(assignment, existing, now),
            "can_delete": can_delete(existing, assignment, now),
        }

    def submit(self, incoming, assignment_id, student_id, student_email=None):
        validate_upload(incoming)
        assignment = self._load_assignment(assignment_id)
        profile = self.users.get(student_id)
        ensure_published_for(assignment, profile)

        existing = self.submissions.find_by_assignment_and_student(assignment_id, student_id)
        if existing is not None and existing.is_marked:
            raise AuthorizationError(
                "You cannot replace a submission that has already been marked or received feedback."
            )

        path = build_storage_path(student_id, incoming.name)
        self.files.upload(self.bucket, path, incoming.data, incoming.content_type)

        if profile is not None:
            student_name = profile.display_name
        elif student_email:
            student_name = student_email.split('@')[0]
        else:
            student_name = f"Student {student_id[:8]}"

        row = {
            "assignment_id": assignment.id,
            "student_id": student_id,
            "student_name": student_name,
            "file_path": path,
            "file_name": incoming.name,
            "file_size": incoming.size,
            "file_type": incoming.content_type,
            "submitted_at": utc_now().isoformat(),
        }
        try:
            submission = self.submissions.upsert(row)
        except PersistenceError:
            # Row is written last, so only the new blob can be left behind
            if not self.files.remove(self.bucket, path):
                logger.warning("Orphaned submission file left in storage: %s", path)
            raise

        if existing is not None:
            logger.info("Submission %s replaced by student %s", submission.id, student_id)
        else:
            logger.info("Submission %s created by student %s", submission.id, student_id)
        return submission

    def remove(self, submission_id, student_id, now=None):
        """
        Delete a student's own submission.

        Eligibility is re-read from the database here, not trusted from the
        earlier prompt, so a grade saved in between blocks the delete.
        """
        submission = self.submissions.get(submission_id)
        if submission is None:
            raise NotFoundError("Submission not found")
        if submission.student_id != student_id:
            raise AuthorizationError("You can only delete your own submission.")

        assignment = self._load_assignment(submission.assignment_id)
        if not can_delete(submission, assignment, now):
            if submission.is_marked:
                raise AuthorizationError(
                    "You cannot delete a submission that has already been marked or received feedback."
                )
            raise AuthorizationError(
                "The due date has passed. You can no longer delete or modify your submission."
            )

        self.files.remove(self.bucket, submission.file_path)
        self.submissions.delete(submission.id)
        logger.info("Submission %s deleted by student %s", submission.id, student_id)
        return submission

    def download(self, submission_id, requester):
        """Students get their own file; teachers files for assignments they own."""
        submission = self.submissions.get(submission_id)
        if submission is None:
            raise NotFoundError("Submission not found")
        if requester.is_teacher:
            if self.assignments.get_owned(submission.assignment_id, requester.id) is None:
                raise AuthorizationError("You do not have permission to download this submission.")
        elif submission.student_id != requester.id:
            raise AuthorizationError("You do not have permission to download this submission.")
        return self.files.download(self.bucket, submission.file_path, submission.file_name)
