from __future__ import annotations

from flask import Flask, request

from ..common.web import current_user_id, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/care/clock-in", methods=["POST"], endpoint="care_clock_in")
    @login_required
    def care_clock_in():
        data = json_body()
        shift_id = container.shift_service.clock_in(
            user_id=current_user_id(),
            location=data.get("location", ""),
            selfie_id=data.get("selfie_id"),
        )
        return ok(shift_id=shift_id), 201

    @app.route("/api/care/clock-out", methods=["POST"], endpoint="care_clock_out")
    @login_required
    def care_clock_out():
        data = json_body()
        return ok(**container.shift_service.clock_out(user_id=current_user_id(), selfie_id=data.get("selfie_id")))

    @app.route("/api/care/shift", methods=["GET"], endpoint="current_shift")
    @login_required
    def current_shift():
        return ok(shift=container.shift_service.get_current_shift(user_id=current_user_id()))

    @app.route("/api/care/selfie-policy", methods=["GET"], endpoint="selfie_policy")
    @login_required
    def selfie_policy():
        return ok(selfie_enforced=container.shift_service.is_selfie_enforced())

    @app.route("/api/shifts", methods=["GET"], endpoint="list_shifts")
    @login_required
    def list_shifts():
        shifts = container.shift_service.list_shifts(
            actor_id=current_user_id(),
            location=request.args.get("location") or None,
            user_id=request.args.get("user_id", type=int),
            limit=request.args.get("limit", default=100, type=int),
        )
        return ok(shifts=shifts)
