"""
Grading workflow: the owning teacher sets a 0-100 grade and feedback.
"""
import logging

from assignhub.errors import AuthorizationError, NotFoundError, ValidationError
from assignhub.repositories import AssignmentRepository, SubmissionRepository

logger = logging.getLogger(__name__)

MIN_GRADE = 0
MAX_GRADE = 100


def parse_grade(raw):
    """Turn a form value into an int grade, or None when left blank."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValidationError("Grade must be a number between 0 and 100.")
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        raise ValidationError("Grade must be a number between 0 and 100.")


def validate_grade(grade):
    if grade is None:
        return
    if isinstance(grade, bool) or not isinstance(grade, int):
        raise ValidationError("Grade must be a whole number between 0 and 100.")
    if grade < MIN_GRADE or grade > MAX_GRADE:
        raise ValidationError("Grade must be a number between 0 and 100.")


def normalize_feedback(feedback):
    """Blank feedback is stored as NULL so it does not count as marked."""
    if feedback is None:
        return None
    text = str(feedback).strip()
    return text or None


class GradingWorkflow:

    def __init__(self, submissions=None, assignments=None):
        self.submissions = submissions or SubmissionRepository()
        self.assignments = assignments or AssignmentRepository()

    def _require_owner(self, assignment_id, teacher_id):
        assignment = self.assignments.get_owned(assignment_id, teacher_id)
        if assignment is None:
            raise AuthorizationError("You do not have permission to grade this submission")
        return assignment

    def grade(self, submission_id, teacher_id, numeric_grade=None, feedback_text=None):
        validate_grade(numeric_grade)
        feedback = normalize_feedback(feedback_text)

        submission = self.submissions.get(submission_id)
        if submission is None:
            raise NotFoundError("Submission not found")

        # Ownership is checked against the database, not the caller's view
        self._require_owner(submission.assignment_id, teacher_id)

        updated = self.submissions.update_grade(submission.id, numeric_grade, feedback)
        logger.info("Submission %s graded by %s: grade=%s feedback=%s",
                    submission.id, teacher_id, numeric_grade, feedback is not None)
        return updated

    def list_submissions(self, assignment_id, teacher_id):
        """All submissions for an assignment the teacher owns, newest first."""
        assignment = self.assignments.get(assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment not found")
        if assignment.teacher_id != teacher_id:
            raise AuthorizationError("You do not have permission to view these submissions")
        return assignment, self.submissions.list_by_assignment(assignment_id)
