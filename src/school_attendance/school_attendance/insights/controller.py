from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_user_id, teacher_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/teacher/insights", endpoint="teacher_insights")
    @teacher_required
    def insights():
        return jsonify(container.insights_service.student_insights(current_user_id()))

    @app.route("/api/teacher/analytics", endpoint="teacher_analytics")
    @teacher_required
    def analytics():
        return jsonify(container.insights_service.class_analytics(current_user_id()))
