from __future__ import annotations

from flask import Flask, jsonify

from ..common.validators import require_non_empty
from ..common.web import current_user_id, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/access/check", methods=["POST"], endpoint="check_access")
    def check_access():
        data = json_body()
        result = container.access_service.check_access(current_user_id(), data.get("route", "/"), data.get("device_id"))
        return jsonify(result)

    @app.route("/api/access/session", methods=["GET"], endpoint="session_info")
    def session_info():
        return jsonify(container.access_service.get_session_info(current_user_id()))

    @app.route("/api/access/activity", methods=["POST"], endpoint="log_session_activity")
    @login_required
    def log_session_activity():
        data = json_body()
        activity = require_non_empty(data.get("activity"), "Activity")
        container.access_service.log_session_activity(current_user_id(), activity, data.get("details"))
        return ok()
