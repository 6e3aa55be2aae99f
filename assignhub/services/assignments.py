"""
Assignment publishing and listing.

Teachers create assignments, tutorials and lab instructions for one student
year, optionally with an attached file. Students see what is published for
their own year.
"""
import logging
import uuid

from assignhub import config as app_config
from assignhub.errors import AuthorizationError, NotFoundError, ValidationError
from assignhub.models import CATEGORIES, parse_timestamp, utc_now
from assignhub.repositories import AssignmentRepository, SubmissionRepository, UserRepository
from assignhub.services.file_transfer import FileTransfer
from assignhub.services.lifecycle import can_delete, can_submit, ensure_published_for

logger = logging.getLogger(__name__)


def _parse_year(raw):
    try:
        year = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("Please fill in all required fields including year.")
    if year < app_config.MIN_YEAR or year > app_config.MAX_YEAR:
        raise ValidationError(
            f"Year must be between {app_config.MIN_YEAR} and {app_config.MAX_YEAR}."
        )
    return year


class AssignmentService:

    def __init__(self, assignments=None, submissions=None, users=None, files=None, bucket=None):
        self.assignments = assignments or AssignmentRepository()
        self.submissions = submissions or SubmissionRepository()
        self.users = users or UserRepository()
        self.files = files or FileTransfer()
        self.bucket = bucket or app_config.ASSIGNMENT_FILES_BUCKET

    def get(self, assignment_id):
        assignment = self.assignments.get(assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment not found")
        return assignment

    def create(self, teacher, title, description, due_date, category, year, attachment=None):
        if not teacher.is_teacher:
            raise AuthorizationError("Only teachers can create assignments.")

        title = (title or '').strip()
        description = (description or '').strip()
        if not title or not description or not due_date or not category:
            raise ValidationError("Please fill in all required fields including year.")
        if category not in CATEGORIES:
            raise ValidationError(f"Category must be one of: {', '.join(CATEGORIES)}")
        if parse_timestamp(due_date) is None:
            raise ValidationError("Due date is not a valid date.")
        year = _parse_year(year)

        row = {
            "title": title,
            "description": description,
            "due_date": due_date,
            "category": category,
            "teacher_id": teacher.id,
            "year": year,
            "file_name": None,
            "file_path": None,
            "file_type": None,
            "file_size": None,
        }

        if attachment is not None and attachment.name:
            ext = attachment.name.rsplit('.', 1)[1] if '.' in attachment.name else 'bin'
            path = f"{teacher.id}/{uuid.uuid4().hex}.{ext}"
            self.files.upload(self.bucket, path, attachment.data, attachment.content_type)
            row.update({
                "file_name": attachment.name,
                "file_path": path,
                "file_type": attachment.content_type,
                "file_size": attachment.size,
            })

        assignment = self.assignments.insert(row)
        logger.info("Assignment %s (%s, year %s) created by %s",
                    assignment.id, category, year, teacher.id)
        return assignment

    def list_for_student(self, student, now=None):
        now = now or utc_now()
        year = student.year
        if not year:
            logger.warning("Student %s has no year set, defaulting to %s",
                           student.id, app_config.DEFAULT_STUDENT_YEAR)
            year = app_config.DEFAULT_STUDENT_YEAR

        teacher_names = {}
        items = []
        for assignment in self.assignments.list_by_year(year):
            if assignment.teacher_id not in teacher_names:
                teacher = self.users.get(assignment.teacher_id)
                teacher_names[assignment.teacher_id] = teacher.name if teacher and teacher.name else 'Unknown'
            own = self.submissions.find_by_assignment_and_student(assignment.id, student.id)
            item = assignment.to_dict()
            item.update({
                "teacher_name": teacher_names[assignment.teacher_id],
                "submitted": own is not None,
                "grade": own.grade if own else None,
                "is_overdue": assignment.is_overdue(now),
                "can_submit": can_submit(assignment, own, now),
                "can_delete": can_delete(own, assignment, now),
            })
            items.append(item)
        return year, items

    def list_for_teacher(self, teacher):
        if not teacher.is_teacher:
            raise AuthorizationError("Only teachers can view their assignments.")

        totals = {}
        items = []
        for assignment in self.assignments.list_by_teacher(teacher.id):
            if assignment.year not in totals:
                totals[assignment.year] = self.users.count_students(assignment.year)
            item = assignment.to_dict()
            item.update({
                "teacher_name": teacher.name or teacher.display_name,
                "submission_count": self.submissions.count_by_assignment(assignment.id),
                "total_students": totals[assignment.year],
            })
            items.append(item)
        return items

    def download_attachment(self, assignment_id, requester):
        assignment = self.get(assignment_id)
        if not assignment.file_path:
            raise NotFoundError("This assignment has no attached file")
        if requester.is_student:
            ensure_published_for(assignment, requester)
        if requester.is_teacher and assignment.teacher_id != requester.id:
            raise AuthorizationError("You do not have permission to download this file.")
        return self.files.download(self.bucket, assignment.file_path,
                                   assignment.file_name or 'assignment_file')
