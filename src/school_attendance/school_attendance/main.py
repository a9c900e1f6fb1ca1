from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .core.constants import ATTENDANCE_CUTOFF_DAYS
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, ensure_demo_admin, list_tables

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .classes.controller import register as register_classes
from .insights.controller import register as register_insights
from .reports.controller import register as register_reports
from .students.controller import register as register_students
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify({"message": str(e)}), e.http_status

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error: %s", e)
        return jsonify({"message": "Internal server error"}), 500


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Passing ``container`` skips settings-driven database wiring (used by tests).
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_admin(db_config)
            logger.info("demo admin ready")

        container = build_container(
            db_config=db_config,
            cutoff_days=int(getattr(settings, "ATTENDANCE_CUTOFF_DAYS", ATTENDANCE_CUTOFF_DAYS)),
        )

    app.extensions["container"] = container
    register_error_handlers(app)

    register_users(app, container)
    register_classes(app, container)
    register_students(app, container)
    register_reports(app, container)
    register_attendance(app, container)
    register_insights(app, container)

    return app
