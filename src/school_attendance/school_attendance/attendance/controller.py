from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_user_id, json_body, parse_date, query_date, query_int, teacher_required
from ..common.validators import require_id
from ..container import Container


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service

    @app.route("/api/teacher/dashboard", endpoint="teacher_dashboard")
    @teacher_required
    def dashboard():
        return jsonify(attendance.get_dashboard(current_user_id()))

    @app.route("/api/teacher/attendance/draft", methods=["POST"], endpoint="teacher_save_draft")
    @teacher_required
    def save_draft():
        data = json_body()
        attendance.save_draft(current_user_id(), require_id(data.get("classId"), "classId"), data.get("submissions"))
        return jsonify({"message": "Draft saved"})

    @app.route("/api/teacher/attendance/submit", methods=["POST"], endpoint="teacher_submit_attendance")
    @teacher_required
    def submit():
        data = json_body()
        attendance.submit_attendance(current_user_id(), require_id(data.get("classId"), "classId"), data.get("submissions"))
        return jsonify({"message": "Attendance submitted"})

    @app.route("/api/teacher/classes/<int:class_id>/attendance", methods=["PUT"], endpoint="teacher_update_attendance")
    @teacher_required
    def update_by_date(class_id: int):
        data = json_body()
        attendance.update_attendance_by_date(
            current_user_id(),
            class_id,
            parse_date(data.get("date")),
            data.get("submissions"),
        )
        return jsonify({"message": "Attendance updated"})

    @app.route("/api/teacher/attendance/history", endpoint="teacher_attendance_history")
    @teacher_required
    def history():
        return jsonify(
            attendance.get_history(current_user_id(), start=query_date("startDate"), end=query_date("endDate"))
        )

    @app.route("/api/teacher/attendance/details", endpoint="teacher_attendance_details")
    @teacher_required
    def details():
        work_date = query_date("date")
        if work_date is None:
            work_date = parse_date(None)
        return jsonify(attendance.get_details(current_user_id(), work_date))

    @app.route("/api/teacher/notifications", endpoint="teacher_notifications")
    @teacher_required
    def notifications():
        return jsonify(attendance.get_notifications(current_user_id()))

    @app.route("/api/teacher/classes/<int:class_id>/students", endpoint="teacher_class_students")
    @teacher_required
    def class_students(class_id: int):
        return jsonify(attendance.list_class_students(current_user_id(), class_id))

    @app.route("/api/teacher/students/<int:student_id>/monthly", endpoint="teacher_student_monthly")
    @teacher_required
    def student_monthly(student_id: int):
        return jsonify(
            attendance.student_monthly_attendance(
                current_user_id(),
                student_id,
                month=query_int("month"),
                year=query_int("year"),
            )
        )

    @app.route("/api/teacher/profile", endpoint="teacher_profile")
    @teacher_required
    def profile():
        return jsonify(container.report_service.teacher_profile(current_user_id()))
