from __future__ import annotations

from flask import Flask, request

from ..common.web import current_user_id, login_required, ok
from ..container import Container
from ..core.constants import DEFAULT_LOG_LIMIT


def _filters() -> dict:
    return {
        "staff_id": request.args.get("staff_id"),
        "date_from": request.args.get("date_from"),
        "date_to": request.args.get("date_to"),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/team/activities", methods=["GET"], endpoint="team_activities")
    @login_required
    def team_activities():
        activities = container.team_service.get_team_activities(
            user_id=current_user_id(),
            limit=request.args.get("limit", default=DEFAULT_LOG_LIMIT, type=int),
            **_filters(),
        )
        return ok(activities=activities)

    @app.route("/api/team/stats", methods=["GET"], endpoint="team_log_stats")
    @login_required
    def team_log_stats():
        stats = container.team_service.get_team_log_stats(
            user_id=current_user_id(),
            date_from=request.args.get("date_from"),
            date_to=request.args.get("date_to"),
        )
        return ok(stats=stats)

    @app.route("/api/team/roster", methods=["GET"], endpoint="team_roster")
    @login_required
    def team_roster():
        return ok(team=container.team_service.get_team_roster(user_id=current_user_id()))

    @app.route("/api/team/locations", methods=["GET"], endpoint="managed_locations")
    @login_required
    def managed_locations():
        return ok(locations=container.team_service.get_managed_locations(user_id=current_user_id()))

    @app.route("/api/team/shifts", methods=["GET"], endpoint="team_shift_summary")
    @login_required
    def team_shift_summary():
        return ok(**container.team_service.get_team_shift_summary(user_id=current_user_id(), **_filters()))

    @app.route("/api/admin/activities", methods=["GET"], endpoint="all_employee_activities")
    @login_required
    def all_employee_activities():
        activities = container.team_service.get_all_employee_activities(
            actor_id=current_user_id(),
            limit=request.args.get("limit", default=DEFAULT_LOG_LIMIT, type=int),
            **_filters(),
        )
        return ok(activities=activities)

    @app.route("/api/admin/shifts", methods=["GET"], endpoint="all_employee_shift_summary")
    @login_required
    def all_employee_shift_summary():
        return ok(**container.team_service.get_all_employee_shift_summary(actor_id=current_user_id(), **_filters()))
