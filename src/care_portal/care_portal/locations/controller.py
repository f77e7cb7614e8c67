from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/locations", methods=["GET"], endpoint="list_locations")
    @login_required
    def list_locations():
        return ok(locations=container.location_service.list_locations(actor_id=current_user_id()))

    @app.route("/api/locations", methods=["POST"], endpoint="create_location")
    @login_required
    def create_location():
        data = json_body()
        location_id = container.location_service.create_location(
            actor_id=current_user_id(),
            name=data.get("name", ""),
            address=data.get("address"),
            capacity=data.get("capacity"),
        )
        return ok(location_id=location_id), 201

    @app.route("/api/locations/<int:location_id>", methods=["PATCH"], endpoint="update_location")
    @login_required
    def update_location(location_id: int):
        data = json_body()
        container.location_service.update_location(
            actor_id=current_user_id(),
            location_id=location_id,
            name=data.get("name"),
            address=data.get("address"),
            capacity=data.get("capacity"),
            status=data.get("status"),
        )
        return ok()

    @app.route("/api/locations/<int:location_id>", methods=["DELETE"], endpoint="delete_location")
    @login_required
    def delete_location(location_id: int):
        container.location_service.delete_location(actor_id=current_user_id(), location_id=location_id)
        return ok()

    @app.route("/api/locations/sync", methods=["POST"], endpoint="sync_locations")
    @login_required
    def sync_locations():
        return ok(**container.location_service.sync_locations_from_strings(actor_id=current_user_id()))
