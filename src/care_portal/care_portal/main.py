from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .access.controller import register as register_access
from .audit.controller import register as register_audit
from .common.logging_setup import setup_logging
from .compliance.cli import register_cli as register_compliance_cli
from .compliance.controller import register as register_compliance
from .container import Container, build_container
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .database.cli import SCHEMA_PATH, SEED_PATH, register_cli
from .devices.controller import register as register_devices
from .fire_evac.controller import register as register_fire_evac
from .isp.controller import register as register_isp
from .kiosks.controller import register as register_kiosks
from .locations.controller import register as register_locations
from .logs.controller import register as register_logs
from .residents.controller import register as register_residents
from .settings.controller import register as register_settings
from .shifts.controller import register as register_shifts
from .supervisor.controller import register as register_supervisor
from .teams.controller import register as register_teams
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

DOMAIN_OPTIONS = ("PAIRING_TOKEN_TTL_MINUTES", "ISP_DUE_DAYS", "RESET_TOKEN_TTL_MINUTES", "INVITE_TTL_HOURS")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        return jsonify({"success": False, "message": str(exc)}), exc.status_code

    @app.errorhandler(404)
    def handle_not_found(_exc):
        return jsonify({"success": False, "message": "Not found"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(_exc):
        return jsonify({"success": False, "message": "Method not allowed"}), 405

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("unhandled error: %s", exc)
        return jsonify({"success": False, "message": "Internal server error"}), 500


def register_routes(app: Flask, container: Container) -> None:
    register_users(app, container)
    register_access(app, container)
    register_shifts(app, container)
    register_residents(app, container)
    register_isp(app, container)
    register_logs(app, container)
    register_kiosks(app, container)
    register_devices(app, container)
    register_settings(app, container)
    register_audit(app, container)
    register_locations(app, container)
    register_supervisor(app, container)
    register_fire_evac(app, container)
    register_compliance(app, container)
    register_teams(app, container)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["DB_CONFIG"] = dict(db_config)
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        auto_init_db = bool(getattr(settings, "AUTO_INIT_DB", False))
        auto_seed_db = bool(getattr(settings, "AUTO_SEED_DB", False))
        if auto_init_db:
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        if auto_seed_db:
            apply_seed_sql(db_config, seed_path=SEED_PATH)
            ensure_demo_users(db_config)
            logger.info("demo seed ready")

        options = {name: getattr(settings, name) for name in DOMAIN_OPTIONS if hasattr(settings, name)}
        container = build_container(db_config=db_config, options=options)

    register_error_handlers(app)
    register_routes(app, container)
    register_cli(app)
    register_compliance_cli(app, container)
    return app
