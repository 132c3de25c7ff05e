from __future__ import annotations

import importlib
import logging
import logging.config
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_logging_config, get_settings_module

from .analytics.controller import register as register_analytics
from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.exceptions import (
    AuthorizationError,
    DomainError,
    NotFoundError,
    PolicyViolationError,
    StateConflictError,
    ValidationError,
)
from .database.bootstrap import apply_schema, ensure_default_leave_types, list_tables
from .employees.controller import register as register_employees
from .leave.controller import register as register_leave
from .payroll.controller import register as register_payroll
from .policies.controller import register as register_policies

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (StateConflictError, 409),
    (PolicyViolationError, 422),
)


def status_for(error: DomainError) -> int:
    for kind, status in _STATUS_BY_ERROR:
        if isinstance(error, kind):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        body = {"error": type(error).__name__, "message": str(error)}
        if isinstance(error, PolicyViolationError):
            body["rule"] = error.rule
        return jsonify(body), status_for(error)


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logging.config.dictConfig(
        get_logging_config(
            getattr(settings, "LOG_LEVEL", "INFO"),
            getattr(settings, "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
        )
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            created = ensure_default_leave_types(db_config)
            logger.info("Default leave types ready (%s created)", created)

        container = build_container(db_config=db_config, settings=settings)

    register_error_handlers(app)
    register_policies(app, container)
    register_employees(app, container)
    register_attendance(app, container)
    register_leave(app, container)
    register_analytics(app, container)
    register_payroll(app, container)

    return app
