from __future__ import annotations

from flask import Flask, jsonify, request, send_file

from ..common.web import current_user_id, json_body, login_required, ok
from ..container import Container
from .qr import pairing_qr_png


def register(app: Flask, container: Container) -> None:
    # ---- admin: pairing and registry ----

    @app.route("/api/kiosks/pairings", methods=["POST"], endpoint="create_kiosk_pairing")
    @login_required
    def create_kiosk_pairing():
        data = json_body()
        pairing = container.kiosk_service.create_kiosk_pairing(
            actor_id=current_user_id(),
            location=data.get("location", ""),
            device_label=data.get("device_label"),
        )
        return ok(pairing=pairing), 201

    @app.route("/api/kiosks/pairings", methods=["GET"], endpoint="list_pairing_tokens")
    @login_required
    def list_pairing_tokens():
        return ok(tokens=container.kiosk_service.list_pairing_tokens(actor_id=current_user_id()))

    @app.route("/api/kiosks/pairings/<token>/qr", methods=["GET"], endpoint="pairing_qr_image")
    @login_required
    def pairing_qr_image(token: str):
        container.guard.require_admin(current_user_id())
        return send_file(pairing_qr_png(token), mimetype="image/png")

    @app.route("/api/kiosks", methods=["GET"], endpoint="list_kiosks")
    @login_required
    def list_kiosks():
        return ok(kiosks=container.kiosk_service.list_kiosks(actor_id=current_user_id()))

    @app.route("/api/kiosks", methods=["POST"], endpoint="register_kiosk")
    @login_required
    def register_kiosk():
        data = json_body()
        kiosk_id = container.kiosk_service.register_kiosk(
            actor_id=current_user_id(),
            device_id=data.get("device_id", ""),
            location=data.get("location", ""),
            device_label=data.get("device_label"),
        )
        return ok(kiosk_id=kiosk_id), 201

    @app.route("/api/kiosks/<int:kiosk_id>", methods=["PATCH"], endpoint="update_kiosk")
    @login_required
    def update_kiosk(kiosk_id: int):
        data = json_body()
        container.kiosk_service.update_kiosk(
            actor_id=current_user_id(),
            kiosk_id=kiosk_id,
            location=data.get("location"),
            device_label=data.get("device_label"),
            status=data.get("status"),
        )
        return ok()

    @app.route("/api/kiosks/<int:kiosk_id>/label", methods=["PUT"], endpoint="update_kiosk_label")
    @login_required
    def update_kiosk_label(kiosk_id: int):
        data = json_body()
        container.kiosk_service.update_kiosk_label(
            actor_id=current_user_id(), kiosk_id=kiosk_id, device_label=data.get("device_label")
        )
        return ok()

    @app.route("/api/kiosks/<int:kiosk_id>/status", methods=["PUT"], endpoint="update_kiosk_status")
    @login_required
    def update_kiosk_status(kiosk_id: int):
        data = json_body()
        container.kiosk_service.update_kiosk_status(
            actor_id=current_user_id(), kiosk_id=kiosk_id, status=data.get("status", "")
        )
        return ok()

    @app.route("/api/kiosks/<int:kiosk_id>/deactivate", methods=["POST"], endpoint="deactivate_kiosk")
    @login_required
    def deactivate_kiosk(kiosk_id: int):
        container.kiosk_service.deactivate_kiosk(actor_id=current_user_id(), kiosk_id=kiosk_id)
        return ok()

    @app.route("/api/kiosks/<int:kiosk_id>", methods=["DELETE"], endpoint="delete_kiosk")
    @login_required
    def delete_kiosk(kiosk_id: int):
        container.kiosk_service.delete_kiosk(actor_id=current_user_id(), kiosk_id=kiosk_id)
        return ok()

    # ---- kiosk side ----

    @app.route("/api/kiosk/pair", methods=["POST"], endpoint="complete_pairing")
    def complete_pairing():
        data = json_body()
        result = container.kiosk_service.complete_pairing(
            token=data.get("token", ""), kiosk_identifier=data.get("kiosk_identifier")
        )
        return ok(**result), 201

    @app.route("/api/kiosk/pair/image", methods=["POST"], endpoint="complete_pairing_from_image")
    def complete_pairing_from_image():
        if "image" not in request.files:
            return jsonify({"success": False, "message": "Missing image file"}), 400
        result = container.kiosk_service.complete_pairing_from_image(
            request.files["image"].stream, kiosk_identifier=request.form.get("kiosk_identifier")
        )
        return ok(**result), 201

    @app.route("/api/kiosk/<device_id>", methods=["GET"], endpoint="kiosk_by_device")
    def kiosk_by_device(device_id: str):
        kiosk = container.kiosk_service.get_kiosk_by_device(device_id)
        if not kiosk:
            return jsonify({"success": False, "message": "Kiosk not registered"}), 404
        return ok(kiosk=kiosk)

    @app.route("/api/kiosk/<device_id>/heartbeat", methods=["POST"], endpoint="kiosk_heartbeat")
    def kiosk_heartbeat(device_id: str):
        return jsonify({"success": container.kiosk_service.update_kiosk_last_seen(device_id)})

    @app.route("/api/kiosk/<device_id>/clock-in", methods=["POST"], endpoint="kiosk_clock_in")
    @login_required
    def kiosk_clock_in(device_id: str):
        data = json_body()
        shift_id = container.kiosk_service.kiosk_clock_in(
            device_id=device_id, user_id=current_user_id(), selfie_id=data.get("selfie_id")
        )
        return ok(shift_id=shift_id), 201

    @app.route("/api/kiosk/<device_id>/audit", methods=["POST"], endpoint="kiosk_log_audit")
    def kiosk_log_audit(device_id: str):
        data = json_body()
        audit_id = container.kiosk_service.kiosk_log_audit(
            device_id=device_id,
            event=data.get("event", ""),
            user_id=current_user_id(),
            details=data.get("details"),
        )
        return ok(audit_id=audit_id), 201
