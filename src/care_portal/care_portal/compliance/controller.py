from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/compliance/overview", methods=["GET"], endpoint="compliance_overview")
    @login_required
    def compliance_overview():
        return ok(**container.compliance_service.get_compliance_overview(user_id=current_user_id()))

    @app.route("/api/compliance/alerts", methods=["GET"], endpoint="compliance_alerts")
    @login_required
    def compliance_alerts():
        return ok(alerts=container.compliance_service.list_active_alerts(user_id=current_user_id()))

    @app.route("/api/compliance/alerts/<int:alert_id>/dismiss", methods=["POST"], endpoint="dismiss_alert")
    @login_required
    def dismiss_alert(alert_id: int):
        container.compliance_service.dismiss_alert(user_id=current_user_id(), alert_id=alert_id)
        return ok()

    @app.route("/api/compliance/schedule", methods=["GET"], endpoint="alert_schedule")
    @login_required
    def alert_schedule():
        return ok(schedule=container.compliance_service.get_alert_schedule(user_id=current_user_id()))

    @app.route("/api/compliance/schedule", methods=["PUT"], endpoint="set_alert_schedule")
    @login_required
    def set_alert_schedule():
        data = json_body()
        schedule = container.compliance_service.set_alert_schedule(
            user_id=current_user_id(),
            weekday=data.get("weekday"),
            hour=data.get("hour"),
            minute=data.get("minute"),
        )
        return ok(schedule=schedule)

    @app.route("/api/isps/<int:isp_id>/due-date", methods=["PUT"], endpoint="set_isp_due_date")
    @login_required
    def set_isp_due_date(isp_id: int):
        data = json_body()
        updated = container.compliance_service.set_isp_due_date(
            user_id=current_user_id(), isp_id=isp_id, due_at=data.get("due_at")
        )
        return ok(**updated)
