#!/usr/bin/env python3
"""
AssignHub - Coursework submission and grading API
=================================================
Run: python3 -m assignhub.app
Then call: http://localhost:3000/api/health
"""
import logging

from flask import Flask, jsonify
from flask_cors import CORS

from assignhub import config as app_config
from assignhub.auth import init_auth
from assignhub.routes import register_routes

logger = logging.getLogger(__name__)


def create_app(test_config=None):
    """Build the Flask app with auth and all blueprints registered."""
    logging.basicConfig(
        level=getattr(logging, app_config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = app_config.MAX_SUBMISSION_BYTES + 1024 * 1024
    if test_config:
        app.config.update(test_config)
    CORS(app)

    # ══════════════════════════════════════════════════════════════
    # AUTHENTICATION (before blueprints)
    # ══════════════════════════════════════════════════════════════
    init_auth(app)

    @app.route('/api/health')
    def health():
        return jsonify({"status": "ok"})

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({"error": "File too large. Please select a file smaller than 10MB."}), 413

    register_routes(app)
    logger.info("AssignHub app created")
    return app


if __name__ == '__main__':
    create_app().run(host=app_config.HOST, port=app_config.PORT, debug=app_config.DEBUG)
