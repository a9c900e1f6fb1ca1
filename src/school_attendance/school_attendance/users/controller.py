from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.web import admin_required, current_user_id, json_body, login_required, query_date
from ..periods.resolver import parse_period
from ..core.enums import Period
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        session.clear()
        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value

        return jsonify({"user": container.auth_service.current_user(s_user.user_id)})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def logout():
        session.clear()
        return jsonify({"message": "Logged out"})

    @app.route("/api/auth/me", endpoint="auth_me")
    @login_required()
    def me():
        return jsonify({"user": container.auth_service.current_user(current_user_id())})

    @app.route("/api/admin/teachers", endpoint="admin_teachers")
    @admin_required
    def list_teachers():
        return jsonify(container.teacher_account_service.list_teachers())

    @app.route("/api/admin/teachers", methods=["POST"], endpoint="admin_create_teacher")
    @admin_required
    def create_teacher():
        data = json_body()
        teacher_id = container.teacher_account_service.create_teacher(
            email=data.get("email"),
            password=data.get("password"),
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
            class_id=data.get("classId"),
        )
        return jsonify({"id": teacher_id, "message": "Teacher created"}), 201

    @app.route("/api/admin/teachers/<int:teacher_id>", methods=["PUT"], endpoint="admin_update_teacher")
    @admin_required
    def update_teacher(teacher_id: int):
        container.teacher_account_service.update_teacher(teacher_id, json_body())
        return jsonify({"message": "Teacher updated"})

    @app.route("/api/admin/teachers/<int:teacher_id>/detail", endpoint="admin_teacher_detail")
    @admin_required
    def teacher_detail(teacher_id: int):
        return jsonify(
            container.report_service.teacher_detail(
                teacher_id,
                period=parse_period(request.args.get("period"), Period.MONTHLY),
                start=query_date("startDate"),
                end=query_date("endDate"),
            )
        )
