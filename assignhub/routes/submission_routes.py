"""
Submission API routes for AssignHub.
Students upload, replace, download and delete their own submissions.
"""
import logging
from flask import Blueprint, g, request, jsonify

from assignhub.auth import require_role
from assignhub.errors import AssignHubError, NotFoundError
from assignhub.models import ROLE_STUDENT
from assignhub.routes.assignment_routes import send_download
from assignhub.services.file_transfer import IncomingFile
from assignhub.services.lifecycle import SubmissionLifecycle, can_delete

submission_bp = Blueprint('submission', __name__)
logger = logging.getLogger(__name__)


@submission_bp.route('/api/assignments/<assignment_id>/submission', methods=['POST'])
@require_role(ROLE_STUDENT)
def submit(user, assignment_id):
    """Upload a file and record it as this student's submission."""
    if 'file' not in request.files:
        return jsonify({"error": "No file uploaded"}), 400

    try:
        incoming = IncomingFile.from_storage(request.files['file'])
        submission = SubmissionLifecycle().submit(incoming, assignment_id, user.id,
                                                 student_email=g.get("user_email"))
        return jsonify({
            "success": True,
            "submission": submission.to_dict(),
            "message": "Your assignment has been submitted successfully!",
        })
    except AssignHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.exception("Error submitting assignment %s: %s", assignment_id, e)
        return jsonify({"error": "An error occurred while submitting your assignment. Please try again."}), 500


@submission_bp.route('/api/submissions/<submission_id>/can-delete', methods=['GET'])
@require_role(ROLE_STUDENT)
def check_delete(user, submission_id):
    """Prompt-time check. The DELETE call repeats it before acting."""
    try:
        lifecycle = SubmissionLifecycle()
        submission = lifecycle.submissions.get(submission_id)
        if submission is None or submission.student_id != user.id:
            raise NotFoundError("Submission not found")
        assignment = lifecycle.assignments.get(submission.assignment_id)
        return jsonify({"can_delete": can_delete(submission, assignment)})
    except AssignHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.exception("Error checking submission %s: %s", submission_id, e)
        return jsonify({"error": str(e)}), 500


@submission_bp.route('/api/submissions/<submission_id>', methods=['DELETE'])
@require_role(ROLE_STUDENT)
def delete_submission(user, submission_id):
    try:
        removed = SubmissionLifecycle().remove(submission_id, user.id)
        return jsonify({
            "success": True,
            "deleted": removed.id,
            "message": "Your submission has been deleted. You can now submit a new file.",
        })
    except AssignHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.exception("Error deleting submission %s: %s", submission_id, e)
        return jsonify({"error": "An error occurred while deleting your submission."}), 500


@submission_bp.route('/api/submissions/<submission_id>/download', methods=['GET'])
@require_role()
def download_submission(user, submission_id):
    try:
        downloaded = SubmissionLifecycle().download(submission_id, user)
        return send_download(downloaded)
    except AssignHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.exception("Error downloading submission %s: %s", submission_id, e)
        return jsonify({"error": "Could not download the file. Please try again later."}), 500
