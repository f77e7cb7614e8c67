from __future__ import annotations

from flask import Flask, request

from ..common.web import current_user_id, json_body, login_required, ok
from ..container import Container

GUARDIAN_FIELDS = ("name", "phone", "email", "relationship", "address", "resident_id")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/residents/mine", methods=["GET"], endpoint="my_residents")
    @login_required
    def my_residents():
        return ok(residents=container.resident_service.get_my_residents(user_id=current_user_id()))

    @app.route("/api/residents", methods=["GET"], endpoint="list_residents")
    @login_required
    def list_residents():
        residents = container.resident_service.list_residents(
            user_id=current_user_id(), location=request.args.get("location") or None
        )
        return ok(residents=residents)

    @app.route("/api/residents/<int:resident_id>", methods=["GET"], endpoint="get_resident")
    @login_required
    def get_resident(resident_id: int):
        return ok(resident=container.resident_service.get_resident(user_id=current_user_id(), resident_id=resident_id))

    @app.route("/api/residents", methods=["POST"], endpoint="create_resident")
    @login_required
    def create_resident():
        data = json_body()
        resident_id = container.resident_service.create_resident(
            actor_id=current_user_id(),
            name=data.get("name", ""),
            location=data.get("location", ""),
            dob=data.get("dob"),
        )
        return ok(resident_id=resident_id), 201

    @app.route("/api/guardians", methods=["GET"], endpoint="list_guardians")
    @login_required
    def list_guardians():
        guardians = container.guardian_service.list_guardians(
            user_id=current_user_id(), resident_id=request.args.get("resident_id", type=int)
        )
        return ok(guardians=guardians)

    @app.route("/api/guardians", methods=["POST"], endpoint="create_guardian")
    @login_required
    def create_guardian():
        data = json_body()
        guardian_id = container.guardian_service.create_guardian(
            actor_id=current_user_id(),
            name=data.get("name", ""),
            phone=data.get("phone", ""),
            email=data.get("email", ""),
            resident_id=data.get("resident_id"),
            relationship=data.get("relationship"),
            address=data.get("address"),
        )
        return ok(guardian_id=guardian_id), 201

    @app.route("/api/guardians/<int:guardian_id>", methods=["PATCH"], endpoint="update_guardian")
    @login_required
    def update_guardian(guardian_id: int):
        data = json_body()
        fields = {k: data[k] for k in GUARDIAN_FIELDS if k in data}
        container.guardian_service.update_guardian(actor_id=current_user_id(), guardian_id=guardian_id, **fields)
        return ok()

    @app.route("/api/guardians/<int:guardian_id>", methods=["DELETE"], endpoint="delete_guardian")
    @login_required
    def delete_guardian(guardian_id: int):
        container.guardian_service.delete_guardian(actor_id=current_user_id(), guardian_id=guardian_id)
        return ok()
