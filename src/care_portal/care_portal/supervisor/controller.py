from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/supervisor/team", methods=["GET"], endpoint="team_members")
    @login_required
    def team_members():
        return ok(team=container.supervisor_service.get_team_members(user_id=current_user_id()))

    @app.route("/api/supervisor/isps", methods=["GET"], endpoint="location_isps")
    @login_required
    def location_isps():
        return ok(isps=container.supervisor_service.get_location_isps(user_id=current_user_id()))

    @app.route("/api/supervisor/isp-acknowledgments", methods=["GET"], endpoint="supervisor_isp_acknowledgments")
    @login_required
    def supervisor_isp_acknowledgments():
        return ok(acknowledgments=container.supervisor_service.get_isp_acknowledgments(user_id=current_user_id()))

    @app.route("/api/supervisor/time-exceptions", methods=["GET"], endpoint="pending_time_exceptions")
    @login_required
    def pending_time_exceptions():
        exceptions = container.time_exception_service.get_pending_time_exceptions(user_id=current_user_id())
        return ok(exceptions=exceptions)

    @app.route(
        "/api/supervisor/time-exceptions/<exception_id>/approve", methods=["POST"], endpoint="approve_time_exception"
    )
    @login_required
    def approve_time_exception(exception_id: str):
        decision = container.time_exception_service.approve_time_exception(
            user_id=current_user_id(), exception_id=exception_id, note=json_body().get("note")
        )
        return ok(**decision)

    @app.route("/api/supervisor/time-exceptions/<exception_id>/deny", methods=["POST"], endpoint="deny_time_exception")
    @login_required
    def deny_time_exception(exception_id: str):
        decision = container.time_exception_service.deny_time_exception(
            user_id=current_user_id(), exception_id=exception_id, reason=json_body().get("reason")
        )
        return ok(**decision)
