from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/settings/app", methods=["GET"], endpoint="get_app_settings")
    @login_required
    def get_app_settings():
        return ok(settings=container.settings_service.get_app_settings(actor_id=current_user_id()))

    @app.route("/api/settings/app", methods=["PATCH"], endpoint="update_app_settings")
    @login_required
    def update_app_settings():
        settings = container.settings_service.update_app_settings(actor_id=current_user_id(), changes=json_body())
        return ok(settings=settings)

    @app.route("/api/settings/users", methods=["GET"], endpoint="users_with_roles")
    @login_required
    def users_with_roles():
        return ok(users=container.settings_service.get_all_users_with_roles(actor_id=current_user_id()))

    @app.route("/api/settings/users/<int:user_id>/role", methods=["PUT"], endpoint="update_user_role")
    @login_required
    def update_user_role(user_id: int):
        data = json_body()
        container.settings_service.update_user_role(
            actor_id=current_user_id(),
            target_user_id=user_id,
            role=data.get("role", ""),
            locations=data.get("locations") or [],
        )
        return ok()

    @app.route("/api/settings/users/<int:user_id>/role", methods=["DELETE"], endpoint="delete_user_role")
    @login_required
    def delete_user_role(user_id: int):
        container.settings_service.delete_user_role(actor_id=current_user_id(), target_user_id=user_id)
        return ok()

    @app.route("/api/settings/my-role", methods=["GET"], endpoint="my_role")
    def my_role():
        return ok(role=container.settings_service.get_user_role(current_user_id()))

    @app.route("/api/settings/locations", methods=["GET"], endpoint="locations_overview")
    @login_required
    def locations_overview():
        return ok(locations=container.settings_service.get_locations(actor_id=current_user_id()))
