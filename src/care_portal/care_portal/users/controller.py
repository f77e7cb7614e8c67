from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.web import current_user_id, json_body, login_required, ok
from ..container import Container

RESET_REQUESTED_MESSAGE = "If the email exists, a reset link has been sent"


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        session.clear()
        session["user_id"] = user.user_id
        session["name"] = user.name
        session["role"] = user.role.value if user.role else None
        container.access_service.log_session_activity(user.user_id, "login", data.get("device_id"))
        return ok(user=container.employee_service.get_current_user(user.user_id))

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    @login_required
    def logout():
        container.access_service.log_session_activity(current_user_id(), "logout")
        session.clear()
        return ok()

    @app.route("/api/auth/me", methods=["GET"], endpoint="current_user")
    @login_required
    def current_user():
        return ok(user=container.employee_service.get_current_user(current_user_id()))

    @app.route("/api/auth/bootstrap", methods=["GET"], endpoint="bootstrap_status")
    def bootstrap_status():
        return ok(needs_bootstrap=container.auth_service.needs_bootstrap())

    @app.route("/api/auth/bootstrap", methods=["POST"], endpoint="bootstrap_admin")
    def bootstrap_admin():
        data = json_body()
        result = container.auth_service.bootstrap_first_admin(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
        )
        if not result["ok"]:
            return jsonify({"success": False, "message": result["message"]}), 409
        return ok(user_id=result["user_id"]), 201

    @app.route("/api/auth/password-reset", methods=["POST"], endpoint="request_password_reset")
    def request_password_reset():
        data = json_body()
        container.password_reset_service.generate_token(data.get("email", ""))
        return ok(message=RESET_REQUESTED_MESSAGE)

    @app.route("/api/auth/password-reset/verify", methods=["POST"], endpoint="verify_password_reset")
    def verify_password_reset():
        data = json_body()
        return jsonify(container.password_reset_service.verify_token(data.get("email", ""), data.get("token", "")))

    @app.route("/api/auth/password-reset/confirm", methods=["POST"], endpoint="confirm_password_reset")
    def confirm_password_reset():
        data = json_body()
        container.password_reset_service.reset_password(
            data.get("email", ""), data.get("token", ""), data.get("new_password", "")
        )
        return ok()

    @app.route("/api/employees", methods=["GET"], endpoint="list_employees")
    @login_required
    def list_employees():
        return ok(employees=container.employee_service.list_employees(actor_id=current_user_id()))

    @app.route("/api/employees", methods=["POST"], endpoint="create_employee_account")
    @login_required
    def create_employee_account():
        data = json_body()
        result = container.employee_service.create_employee_account(
            actor_id=current_user_id(),
            full_name=data.get("full_name", ""),
            email=data.get("email", ""),
            role=data.get("role", ""),
            temp_password=data.get("temp_password"),
            locations=data.get("locations") or [],
        )
        return ok(user_id=result["user_id"], employee_id=result["employee_id"]), 201

    @app.route("/api/employees/invite", methods=["POST"], endpoint="onboard_employee")
    @login_required
    def onboard_employee():
        data = json_body()
        invite = container.employee_service.onboard_employee(
            actor_id=current_user_id(),
            name=data.get("name", ""),
            email=data.get("email", ""),
            role=data.get("role", ""),
            location=data.get("location", ""),
        )
        return ok(**invite), 201

    @app.route("/api/employees/accept-invite", methods=["POST"], endpoint="accept_invite")
    def accept_invite():
        data = json_body()
        user_id = container.employee_service.accept_invite(token=data.get("token", ""), password=data.get("password", ""))
        return ok(user_id=user_id)
