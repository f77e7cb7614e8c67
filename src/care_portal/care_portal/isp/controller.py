from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/residents/<int:resident_id>/isp", methods=["GET"], endpoint="current_isp")
    @login_required
    def current_isp(resident_id: int):
        return ok(isp=container.isp_service.get_current_isp(user_id=current_user_id(), resident_id=resident_id))

    @app.route("/api/residents/<int:resident_id>/isps", methods=["GET"], endpoint="list_resident_isps")
    @login_required
    def list_resident_isps(resident_id: int):
        return ok(isps=container.isp_service.list_resident_isps(user_id=current_user_id(), resident_id=resident_id))

    @app.route("/api/residents/<int:resident_id>/isps", methods=["POST"], endpoint="author_isp")
    @login_required
    def author_isp(resident_id: int):
        data = json_body()
        isp_id = container.isp_service.author_isp(
            user_id=current_user_id(),
            resident_id=resident_id,
            content=data.get("content", ""),
            goals=data.get("goals") or [],
        )
        return ok(isp_id=isp_id), 201

    @app.route("/api/residents/<int:resident_id>/isp/publish", methods=["POST"], endpoint="publish_isp")
    @login_required
    def publish_isp(resident_id: int):
        return ok(isp=container.isp_service.publish_isp(user_id=current_user_id(), resident_id=resident_id))

    @app.route("/api/residents/<int:resident_id>/isp/acknowledge", methods=["POST"], endpoint="acknowledge_isp")
    @login_required
    def acknowledge_isp(resident_id: int):
        container.isp_service.acknowledge_isp(user_id=current_user_id(), resident_id=resident_id)
        return ok()

    @app.route("/api/residents/<int:resident_id>/isp/acknowledgments", methods=["GET"], endpoint="isp_acknowledgments")
    @login_required
    def isp_acknowledgments(resident_id: int):
        acks = container.isp_service.list_isp_acknowledgments(user_id=current_user_id(), resident_id=resident_id)
        return ok(acknowledgments=acks)

    @app.route("/api/residents/<int:resident_id>/isp/status", methods=["GET"], endpoint="isp_status")
    @login_required
    def isp_status(resident_id: int):
        uid = current_user_id()
        return ok(
            status=container.isp_service.get_resident_isp_status(user_id=uid, resident_id=resident_id),
            can_log=container.isp_service.can_log_for_resident(user_id=uid, resident_id=resident_id),
        )

    @app.route("/api/isp/pending", methods=["GET"], endpoint="pending_acknowledgments")
    @login_required
    def pending_acknowledgments():
        return ok(pending=container.isp_service.get_pending_acknowledgments(user_id=current_user_id()))
