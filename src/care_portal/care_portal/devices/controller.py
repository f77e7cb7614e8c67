from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_user_id, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/devices", methods=["POST"], endpoint="register_device")
    @login_required
    def register_device():
        data = json_body()
        new_id = container.device_service.register_device(
            actor_id=current_user_id(),
            device_id=data.get("device_id", ""),
            device_name=data.get("device_name", ""),
            location=data.get("location", ""),
            device_type=data.get("device_type"),
            metadata=data.get("metadata"),
            notes=data.get("notes"),
        )
        return ok(id=new_id), 201

    @app.route("/api/devices", methods=["GET"], endpoint="list_devices")
    @login_required
    def list_devices():
        devices = container.device_service.list_devices(
            actor_id=current_user_id(), location=request.args.get("location") or None
        )
        return ok(devices=devices)

    @app.route("/api/devices/check", methods=["POST"], endpoint="check_device")
    def check_device():
        data = json_body()
        return jsonify(container.device_service.check_device(user_id=current_user_id(), device_id=data.get("device_id", "")))

    @app.route("/api/devices/usage", methods=["POST"], endpoint="record_device_usage")
    @login_required
    def record_device_usage():
        data = json_body()
        return jsonify(
            container.device_service.record_device_usage(user_id=current_user_id(), device_id=data.get("device_id", ""))
        )

    @app.route("/api/devices/<int:id>/status", methods=["PUT"], endpoint="update_device_status")
    @login_required
    def update_device_status(id: int):
        data = json_body()
        container.device_service.update_device_status(
            actor_id=current_user_id(), id=id, is_active=bool(data.get("is_active"))
        )
        return ok()

    @app.route("/api/devices/<int:id>", methods=["PATCH"], endpoint="update_device")
    @login_required
    def update_device(id: int):
        data = json_body()
        container.device_service.update_device(
            actor_id=current_user_id(),
            id=id,
            device_name=data.get("device_name"),
            location=data.get("location"),
            device_type=data.get("device_type"),
            notes=data.get("notes"),
        )
        return ok()

    @app.route("/api/devices/<int:id>", methods=["DELETE"], endpoint="delete_device")
    @login_required
    def delete_device(id: int):
        container.device_service.delete_device(actor_id=current_user_id(), id=id)
        return ok()
