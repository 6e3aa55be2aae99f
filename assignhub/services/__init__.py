"""
AssignHub Services
==================

Business logic for the AssignHub application.

Services:
- lifecycle: submission create / replace / delete rules
- grading: owner-only grade and feedback
- identity: profile resolution, sign-in and password change
- file_transfer: Supabase Storage upload / download / delete
- assignments: assignment publishing and listing
"""

# Services are imported directly when needed to avoid circular imports
# Example: from assignhub.services.lifecycle import SubmissionLifecycle

__all__ = [
    'lifecycle',
    'grading',
    'identity',
    'file_transfer',
    'assignments',
]
