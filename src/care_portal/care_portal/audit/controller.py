from __future__ import annotations

from datetime import datetime

from flask import Flask, request

from ..common.web import current_user_id, login_required, ok
from ..container import Container


def _filters() -> dict:
    return {
        "actor": request.args.get("actor") or None,
        "action": request.args.get("action") or None,
        "location": request.args.get("location") or None,
        "date_from": request.args.get("from") or None,
        "date_to": request.args.get("to") or None,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/audit/logs", methods=["GET"], endpoint="audit_logs")
    @login_required
    def audit_logs():
        logs = container.audit_report_service.list_logs(
            actor_id=current_user_id(),
            limit=request.args.get("limit", default=1000, type=int),
            **_filters(),
        )
        return ok(logs=logs)

    @app.route("/api/audit/actors", methods=["GET"], endpoint="audit_actors")
    @login_required
    def audit_actors():
        return ok(actors=container.audit_report_service.list_actors(actor_id=current_user_id()))

    @app.route("/api/audit/actions", methods=["GET"], endpoint="audit_actions")
    @login_required
    def audit_actions():
        return ok(actions=container.audit_report_service.list_actions(actor_id=current_user_id()))

    @app.route("/api/audit/locations", methods=["GET"], endpoint="audit_locations")
    @login_required
    def audit_locations():
        return ok(locations=container.audit_report_service.list_locations(actor_id=current_user_id()))

    @app.route("/api/audit/export.csv", methods=["GET"], endpoint="audit_export_csv")
    @login_required
    def audit_export_csv():
        csv_bytes = container.audit_report_service.export_csv(actor_id=current_user_id(), **_filters())
        filename = f"audit_logs_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
