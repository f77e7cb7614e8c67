from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/fire-evac", methods=["GET"], endpoint="fire_evac_plans")
    @login_required
    def fire_evac_plans():
        return ok(plans=container.fire_evac_service.get_fire_evac_plans(user_id=current_user_id()))

    @app.route("/api/residents/<int:resident_id>/fire-evac", methods=["GET"], endpoint="resident_fire_evac_plans")
    @login_required
    def resident_fire_evac_plans(resident_id: int):
        plans = container.fire_evac_service.get_resident_fire_evac_plans(
            user_id=current_user_id(), resident_id=resident_id
        )
        return ok(plans=plans)

    @app.route("/api/residents/<int:resident_id>/fire-evac", methods=["POST"], endpoint="save_fire_evac_plan")
    @login_required
    def save_fire_evac_plan(resident_id: int):
        data = json_body()
        saved = container.fire_evac_service.save_resident_fire_evac_plan(
            user_id=current_user_id(),
            resident_id=resident_id,
            file_ref=data.get("file_ref", ""),
            file_name=data.get("file_name", ""),
            file_size=data.get("file_size"),
            content_type=data.get("content_type"),
            details={k: v for k, v in data.items() if k not in ("file_ref", "file_name", "file_size", "content_type")},
        )
        return ok(**saved), 201
