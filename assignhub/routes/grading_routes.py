"""
Grading API routes for AssignHub.
Teachers review submissions for their own assignments and save grades/feedback.
"""
import logging
from flask import Blueprint, request, jsonify

from assignhub.auth import require_role
from assignhub.errors import AssignHubError
from assignhub.models import ROLE_TEACHER
from assignhub.services.grading import GradingWorkflow, parse_grade

grading_bp = Blueprint('grading', __name__)
logger = logging.getLogger(__name__)


@grading_bp.route('/api/assignments/<assignment_id>/submissions', methods=['GET'])
@require_role(ROLE_TEACHER)
def list_submissions(user, assignment_id):
    try:
        assignment, submissions = GradingWorkflow().list_submissions(assignment_id, user.id)
        return jsonify({
            "assignment": assignment.to_dict(),
            "submissions": [s.to_dict() for s in submissions],
            "total_submissions": len(submissions),
        })
    except AssignHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.exception("Error listing submissions for %s: %s", assignment_id, e)
        return jsonify({"error": str(e)}), 500


@grading_bp.route('/api/submissions/<submission_id>/grade', methods=['POST'])
@require_role(ROLE_TEACHER)
def grade_submission(user, submission_id):
    """Save grade (0-100, blank to clear) and feedback for one submission."""
    data = request.get_json(silent=True) or {}
    try:
        grade = parse_grade(data.get('grade'))
        updated = GradingWorkflow().grade(submission_id, user.id, grade, data.get('feedback'))
        return jsonify({
            "success": True,
            "submission": updated.to_dict(),
            "message": "Grade and feedback saved successfully!",
        })
    except AssignHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.exception("Error saving feedback for %s: %s", submission_id, e)
        return jsonify({"error": "Failed to save feedback. Please try again."}), 500
