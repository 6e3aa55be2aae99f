"""
AssignHub API Routes
====================

All API route blueprints for the AssignHub application.

Usage:
    from assignhub.routes import register_routes
    register_routes(app)
"""
from .auth_routes import auth_bp
from .assignment_routes import assignment_bp
from .submission_routes import submission_bp
from .grading_routes import grading_bp


def register_routes(app):
    """Register all route blueprints with the Flask app."""
    app.register_blueprint(auth_bp)
    app.register_blueprint(assignment_bp)
    app.register_blueprint(submission_bp)
    app.register_blueprint(grading_bp)


__all__ = [
    'register_routes',
    'auth_bp',
    'assignment_bp',
    'submission_bp',
    'grading_bp',
]
