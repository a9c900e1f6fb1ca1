from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, query_date, query_int
from ..core.enums import Period
from ..periods.resolver import parse_period
from ..container import Container


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    @app.route("/api/admin/overview", endpoint="admin_overview")
    @admin_required
    def overview():
        return jsonify(reports.overview())

    @app.route("/api/admin/school/attendance-summary", endpoint="admin_school_summary")
    @admin_required
    def school_summary():
        return jsonify(
            reports.school_attendance_summary(
                period=parse_period(request.args.get("period"), Period.DAILY),
                start=query_date("startDate"),
                end=query_date("endDate"),
            )
        )

    @app.route("/api/admin/classes/<int:class_id>/attendance-summary", endpoint="admin_class_summary")
    @admin_required
    def class_summary(class_id: int):
        return jsonify(
            reports.class_attendance_summary(
                class_id,
                period=parse_period(request.args.get("period"), Period.DAILY),
                start=query_date("startDate"),
                end=query_date("endDate"),
            )
        )

    @app.route("/api/admin/classes/<int:class_id>/attendance", endpoint="admin_class_attendance")
    @admin_required
    def class_attendance(class_id: int):
        return jsonify(reports.class_attendance_log(class_id))

    @app.route("/api/admin/students/daily-attendance", endpoint="admin_student_daily")
    @admin_required
    def student_daily():
        return jsonify(
            reports.student_daily_attendance(
                period=parse_period(request.args.get("period"), Period.WEEKLY),
                class_id=query_int("classId"),
                start=query_date("startDate"),
                end=query_date("endDate"),
            )
        )
