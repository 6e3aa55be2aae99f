"""
Assignment API routes for AssignHub.
Handles creating, listing and viewing assignments, tutorials and lab
instructions, and downloading their attached files.
"""
import io
import logging
from flask import Blueprint, request, jsonify, send_file

from assignhub.auth import require_role
from assignhub.errors import AssignHubError
from assignhub.models import ROLE_TEACHER
from assignhub.services.assignments import AssignmentService
from assignhub.services.file_transfer import IncomingFile
from assignhub.services.lifecycle import SubmissionLifecycle

assignment_bp = Blueprint('assignment', __name__)
logger = logging.getLogger(__name__)


def send_download(downloaded):
    """Stream a DownloadedFile back as an attachment."""
    response = send_file(
        io.BytesIO(downloaded.content),
        mimetype=downloaded.content_type,
        as_attachment=True,
        download_name=downloaded.file_name,
    )
    response.headers['X-Download-Strategy'] = downloaded.strategy
    return response


@assignment_bp.route('/api/assignments', methods=['POST'])
@require_role(ROLE_TEACHER)
def create_assignment(user):
    """Create an assignment. Accepts multipart (with optional 'file') or JSON."""
    data = request.form if request.form else (request.get_json(silent=True) or {})
    attachment = None
    if 'file' in request.files and request.files['file'].filename:
        attachment = IncomingFile.from_storage(request.files['file'])

    try:
        assignment = AssignmentService().create(
            user,
            title=data.get('title'),
            description=data.get('description'),
            due_date=data.get('due_date'),
            category=data.get('category'),
            year=data.get('year'),
            attachment=attachment,
        )
        return jsonify({"success": True, "assignment": assignment.to_dict()}), 201
    except AssignHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.exception("Error creating assignment: %s", e)
        return jsonify({"error": str(e)}), 500


@assignment_bp.route('/api/assignments', methods=['GET'])
@require_role()
def list_assignments(user):
    """Teachers get their own assignments; students get those for their year."""
    try:
        service = AssignmentService()
        if user.is_teacher:
            return jsonify({"assignments": service.list_for_teacher(user)})

        year, items = service.list_for_student(user)
        category = request.args.get('category')
        if category:
            items = [a for a in items if a.get('category') == category]
        return jsonify({"year": year, "assignments": items})
    except AssignHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.exception("Error listing assignments: %s", e)
        return jsonify({"error": str(e)}), 500


@assignment_bp.route('/api/assignments/<assignment_id>', methods=['GET'])
@require_role()
def get_assignment(user, assignment_id):
    """Students also get their submission and what they may do with it."""
    try:
        if user.is_student:
            return jsonify(SubmissionLifecycle().status(assignment_id, user.id))
        assignment = AssignmentService().get(assignment_id)
        return jsonify({"assignment": assignment.to_dict()})
    except AssignHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.exception("Error fetching assignment %s: %s", assignment_id, e)
        return jsonify({"error": str(e)}), 500


@assignment_bp.route('/api/assignments/<assignment_id>/file', methods=['GET'])
@require_role()
def download_assignment_file(user, assignment_id):
    try:
        downloaded = AssignmentService().download_attachment(assignment_id, user)
        return send_download(downloaded)
    except AssignHubError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.exception("Error downloading assignment file %s: %s", assignment_id, e)
        return jsonify({"error": str(e)}), 500
