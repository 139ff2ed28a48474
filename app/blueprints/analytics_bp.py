"""
Analytics & Reporting Blueprint.

Endpoints:
    GET /api/v1/analytics?project_id=<pid>    engagement level, risk, per-person breakdown
    GET /api/v1/projects/<pid>/report         full change-readiness report
    GET /api/v1/ai-context                    cross-project context for the AI coach
"""

from flask import Blueprint, g, jsonify, request

from app.blueprints import register_error_handlers
from app.middleware.jwt_auth import require_user
from app.middleware.project_access import require_project_reader
from app.services import analytics_service, report_service
from app.services.ai_context_service import get_ai_context
from app.services.project_service import can_read_project
from app.utils.errors import E, api_error

analytics_bp = register_error_handlers(Blueprint("analytics", __name__, url_prefix="/api/v1"))


@analytics_bp.route("/analytics", methods=["GET"])
@require_user
def project_analytics():
    project_id = request.args.get("project_id", type=int)
    if project_id is None:
        return api_error(E.VALIDATION_REQUIRED, "project_id required")
    if not can_read_project(g.user_id, g.user_email, project_id):
        return api_error(E.FORBIDDEN, "Forbidden")
    return jsonify(analytics_service.get_project_analytics(project_id)), 200


@analytics_bp.route("/projects/<int:project_id>/report", methods=["GET"])
@require_user
@require_project_reader("project_id")
def project_report(project_id):
    return jsonify(report_service.build_project_report(project_id)), 200


@analytics_bp.route("/ai-context", methods=["GET"])
@require_user
def ai_context():
    return jsonify(get_ai_context(g.user_id)), 200
