from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import admin_required, json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/classes", endpoint="admin_classes")
    @admin_required
    def list_classes():
        return jsonify(container.class_service.list_classes())

    @app.route("/api/admin/classes", methods=["POST"], endpoint="admin_create_class")
    @admin_required
    def create_class():
        data = json_body()
        class_id = container.class_service.record_class(
            grade_level=data.get("gradeLevel") or data.get("name"),
            teacher_id=data.get("teacherId"),
        )
        return jsonify({"id": class_id, "message": "Class created"}), 201

    @app.route("/api/admin/classes/<int:class_id>", methods=["PUT"], endpoint="admin_update_class")
    @admin_required
    def update_class(class_id: int):
        container.class_service.update_class(class_id, json_body())
        return jsonify({"message": "Class updated"})

    @app.route("/api/admin/classes/<int:class_id>", methods=["DELETE"], endpoint="admin_delete_class")
    @admin_required
    def delete_class(class_id: int):
        container.class_service.delete_class(class_id)
        return jsonify({"message": "Class deleted"})
