from __future__ import annotations

from flask import Flask, request

from ..common.web import current_user_id, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/logs/templates", methods=["GET"], endpoint="log_templates")
    @login_required
    def log_templates():
        return ok(templates=container.log_service.get_log_templates(user_id=current_user_id()))

    @app.route("/api/residents/<int:resident_id>/logs", methods=["GET"], endpoint="list_resident_logs")
    @login_required
    def list_resident_logs(resident_id: int):
        logs = container.log_service.list_resident_logs(user_id=current_user_id(), resident_id=resident_id)
        return ok(logs=logs)

    @app.route("/api/residents/<int:resident_id>/logs", methods=["POST"], endpoint="create_resident_log")
    @login_required
    def create_resident_log(resident_id: int):
        data = json_body()
        log_id = container.log_service.create_resident_log(
            user_id=current_user_id(),
            resident_id=resident_id,
            template=data.get("template", ""),
            fields=data.get("fields"),
            content=data.get("content"),
        )
        return ok(log_id=log_id), 201

    @app.route("/api/logs/<int:log_id>", methods=["PUT"], endpoint="edit_resident_log")
    @login_required
    def edit_resident_log(log_id: int):
        data = json_body()
        new_id = container.log_service.edit_resident_log(
            user_id=current_user_id(),
            log_id=log_id,
            fields=data.get("fields"),
            content=data.get("content"),
        )
        return ok(log_id=new_id)

    @app.route("/api/logs", methods=["GET"], endpoint="get_resident_logs")
    @login_required
    def get_resident_logs():
        logs = container.log_service.get_resident_logs(
            user_id=current_user_id(),
            resident_id=request.args.get("resident_id", type=int),
            limit=request.args.get("limit", type=int),
        )
        return ok(logs=logs)

    @app.route("/api/logs/summary", methods=["GET"], endpoint="recent_logs_summary")
    @login_required
    def recent_logs_summary():
        return ok(summary=container.log_service.get_recent_logs_summary(user_id=current_user_id()))

    @app.route("/api/logs/search", methods=["GET"], endpoint="search_logs")
    @login_required
    def search_logs():
        logs = container.log_service.search_logs(
            user_id=current_user_id(),
            query=request.args.get("q", ""),
            resident_id=request.args.get("resident_id", type=int),
            template=request.args.get("template") or None,
            date_from=request.args.get("from") or None,
            date_to=request.args.get("to") or None,
            limit=request.args.get("limit", type=int),
        )
        return ok(logs=logs)

    @app.route("/api/admin/logs/recent", methods=["GET"], endpoint="admin_recent_logs")
    @login_required
    def admin_recent_logs():
        logs = container.log_service.get_recent_logs_for_admin(
            actor_id=current_user_id(), limit=request.args.get("limit", default=20, type=int)
        )
        return ok(logs=logs)
