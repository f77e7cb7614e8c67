from __future__ import annotations

from typing import Optional

from ..audit.service import AuditService
from ..core.constants import WEB_DEVICE_ID
from ..core.enums import AccessReason, Role
from ..users.employee_repository import EmployeeRepository
from ..users.repository import RoleRepository

ADMIN_ROUTES = ("/admin", "/settings", "/people/employees")
CARE_ROUTES = ("/care", "/residents", "/guardians")
PUBLIC_ROUTES = ("/", "/signin", "/pending")

UNAUTHORIZED_DEVICE_ROUTE = "/unauthorized-device"


def _matches(route: str, prefixes: tuple[str, ...]) -> bool:
    for prefix in prefixes:
        if prefix == "/":
            # The root is public, not everything below it.
            if route == "/":
                return True
        elif route == prefix or route.startswith(prefix + "/"):
            return True
    return False


def default_route_for(role: Optional[Role]) -> str:
    if role == Role.ADMIN:
        return "/admin"
    if role in (Role.SUPERVISOR, Role.STAFF):
        return "/care"
    return "/pending"


def _denied(reason: AccessReason, redirect_to: str) -> dict:
    return {
        "granted": False,
        "reason": reason.value,
        "redirect_to": redirect_to,
        "user_role": None,
        "locations": [],
    }


class AccessService:
    """Route-level access decisions for the frontend router."""

    def __init__(self, employees: EmployeeRepository, roles: RoleRepository, audit: AuditService):
        self._employees = employees
        self._roles = roles
        self._audit = audit

    def _audit_access(self, user_id: int, route: str, granted: bool, reason: AccessReason) -> None:
        self._audit.log(
            "access_granted" if granted else "access_denied",
            user_id=user_id,
            device_id=WEB_DEVICE_ID,
            location="system",
            details=f"route={route},granted={str(granted).lower()},reason={reason.value}",
        )

    def check_access(self, user_id: Optional[int], route: str, device_id: Optional[str] = None) -> dict:
        if not user_id:
            return _denied(AccessReason.NOT_AUTHENTICATED, "/signin")

        employee = self._employees.get_by_user_id(int(user_id))
        if not employee:
            return _denied(AccessReason.USER_NOT_FOUND, "/signin")

        if device_id:
            if device_id != employee.assigned_device_id:
                self._audit_access(user_id, route, False, AccessReason.UNAUTHORIZED_DEVICE)
                return _denied(AccessReason.UNAUTHORIZED_DEVICE, UNAUTHORIZED_DEVICE_ROUTE)
        elif employee.assigned_device_id:
            self._audit_access(user_id, route, False, AccessReason.DEVICE_ID_MISSING)
            return _denied(AccessReason.DEVICE_ID_MISSING, UNAUTHORIZED_DEVICE_ROUTE)

        role_row = self._roles.get_for_user(int(user_id))
        if not role_row:
            return _denied(AccessReason.NO_ROLE_ASSIGNED, "/pending")

        role = role_row.role
        redirect_to = ""
        if _matches(route, PUBLIC_ROUTES):
            granted, reason = True, AccessReason.PUBLIC_ROUTE
        elif _matches(route, ADMIN_ROUTES):
            if role == Role.ADMIN:
                granted, reason = True, AccessReason.ADMIN_ACCESS
            else:
                granted, reason = False, AccessReason.INSUFFICIENT_PRIVILEGES
                redirect_to = default_route_for(role)
        elif _matches(route, CARE_ROUTES):
            granted = True
            reason = AccessReason.ADMIN_OVERRIDE if role == Role.ADMIN else AccessReason.CARE_ACCESS
        else:
            granted, reason = False, AccessReason.ROUTE_NOT_FOUND
            redirect_to = default_route_for(role)

        return {
            "granted": granted,
            "reason": reason.value,
            "redirect_to": redirect_to,
            "user_role": role.value,
            "locations": list(role_row.locations),
            "user_id": int(user_id),
            "user_name": employee.display_name,
        }

    def get_session_info(self, user_id: Optional[int]) -> dict:
        anonymous = {
            "authenticated": False,
            "user": None,
            "role": None,
            "locations": [],
            "default_route": "/signin",
        }
        if not user_id:
            return anonymous
        employee = self._employees.get_by_user_id(int(user_id))
        if not employee:
            return anonymous

        user = {"id": int(user_id), "name": employee.display_name, "email": employee.work_email}
        role_row = self._roles.get_for_user(int(user_id))
        if not role_row:
            return {"authenticated": True, "user": user, "role": None, "locations": [], "default_route": "/pending"}

        return {
            "authenticated": True,
            "user": user,
            "role": role_row.role.value,
            "locations": list(role_row.locations),
            "default_route": default_route_for(role_row.role),
        }

    def log_session_activity(self, user_id: Optional[int], activity: str, details: Optional[str] = None) -> None:
        if not user_id:
            return
        self._audit.log(activity, user_id=int(user_id), device_id=WEB_DEVICE_ID, location="system", details=details)
