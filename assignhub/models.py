"""
Record types for the three Supabase tables AssignHub reads and writes.

Rows come back from PostgREST as plain dicts; `from_row` keeps only the
columns we use so extra columns added on the database side are harmless.
"""
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Optional


ROLE_STUDENT = 'student'
ROLE_TEACHER = 'teacher'
ROLES = (ROLE_STUDENT, ROLE_TEACHER)

CATEGORY_ASSIGNMENT = 'Assignment'
CATEGORY_TUTORIAL = 'Tutorial'
CATEGORY_LAB_REPORT = 'Lab Report'
CATEGORIES = (CATEGORY_ASSIGNMENT, CATEGORY_TUTORIAL, CATEGORY_LAB_REPORT)


def parse_timestamp(value):
    """
    Parse a Supabase date or timestamp string into an aware UTC datetime.

    Date-only values ('2025-05-20') are midnight UTC and naive timestamps
    are taken as UTC. Returns None for empty or unparseable input.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def utc_now():
    return datetime.now(timezone.utc)


@dataclass
class User:
    id: str
    email: str
    role: str
    name: Optional[str] = None
    year: Optional[int] = None
    password_changed: bool = False

    @classmethod
    def from_row(cls, row: dict) -> "User":
        year = row.get('year')
        return cls(
            id=row['id'],
            email=row.get('email') or '',
            role=row.get('role') or ROLE_STUDENT,
            name=row.get('name'),
            year=int(year) if year is not None else None,
            # Missing flag means the account was never through the forced change
            password_changed=row.get('password_changed') is not False,
        )

    @property
    def is_teacher(self):
        return self.role == ROLE_TEACHER

    @property
    def is_student(self):
        return self.role == ROLE_STUDENT

    @property
    def display_name(self):
        """Profile name, else email local part, else 'Student <id prefix>'."""
        if self.name:
            return self.name
        if self.email:
            return self.email.split('@')[0]
        return f"Student {self.id[:8]}"

    def to_dict(self):
        return asdict(self)


@dataclass
class Assignment:
    id: str
    title: str
    description: str
    due_date: Optional[str]
    category: str
    teacher_id: str
    year: Optional[int] = None
    created_at: Optional[str] = None
    file_name: Optional[str] = None
    file_path: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = None

    @classmethod
    def from_row(cls, row: dict) -> "Assignment":
        year = row.get('year')
        return cls(
            id=row['id'],
            title=row.get('title') or '',
            description=row.get('description') or '',
            due_date=row.get('due_date'),
            category=row.get('category') or CATEGORY_ASSIGNMENT,
            teacher_id=row.get('teacher_id') or '',
            year=int(year) if year is not None else None,
            created_at=row.get('created_at'),
            file_name=row.get('file_name'),
            file_path=row.get('file_path'),
            file_type=row.get('file_type'),
            file_size=row.get('file_size'),
        )

    @property
    def due_at(self):
        return parse_timestamp(self.due_date)

    def is_overdue(self, now=None):
        due = self.due_at
        if due is None:
            return False
        return due < (now or utc_now())

    def to_dict(self):
        return asdict(self)


@dataclass
class Submission:
    id: str
    assignment_id: str
    student_id: str
    file_path: str
    file_name: str
    submitted_at: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    grade: Optional[int] = None
    feedback: Optional[str] = None
    student_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> "Submission":
        return cls(
            id=row['id'],
            assignment_id=row['assignment_id'],
            student_id=row['student_id'],
            file_path=row.get('file_path') or '',
            file_name=row.get('file_name') or '',
            submitted_at=row.get('submitted_at'),
            file_size=row.get('file_size'),
            file_type=row.get('file_type'),
            grade=row.get('grade'),
            feedback=row.get('feedback'),
            student_name=row.get('student_name'),
        )

    @property
    def is_marked(self):
        """True once a grade or non-blank feedback exists."""
        has_feedback = self.feedback is not None and self.feedback.strip() != ''
        return self.grade is not None or has_feedback

    def to_dict(self):
        return asdict(self)
