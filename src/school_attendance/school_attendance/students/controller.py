from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import admin_required, json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/students", endpoint="admin_students")
    @admin_required
    def list_students():
        return jsonify(container.student_service.list_students())

    @app.route("/api/admin/students", methods=["POST"], endpoint="admin_create_student")
    @admin_required
    def create_student():
        data = json_body()
        student_id = container.student_service.create_student(
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
            roll_number=data.get("rollNumber"),
            class_id=data.get("classId"),
        )
        return jsonify({"id": student_id, "message": "Student created"}), 201

    @app.route("/api/admin/students/<int:student_id>", methods=["PUT"], endpoint="admin_update_student")
    @admin_required
    def update_student(student_id: int):
        container.student_service.update_student(student_id, json_body())
        return jsonify({"message": "Student updated"})

    @app.route("/api/admin/students/<int:student_id>", methods=["DELETE"], endpoint="admin_delete_student")
    @admin_required
    def delete_student(student_id: int):
        container.student_service.delete_student(student_id)
        return jsonify({"message": "Student deleted"})
