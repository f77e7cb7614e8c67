from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..access.guard import AccessGuard
from ..audit.service import AuditService
from ..common.datetime_utils import fmt_datetime, now_local
from ..common.tokens import url_token
from ..common.validators import (
    clean_locations,
    normalize_email,
    parse_role,
    require_min_length,
    require_non_empty,
)
from ..core.constants import INVITE_TTL_HOURS, MIN_PASSWORD_LENGTH, RESET_TOKEN_TTL_MINUTES, WEB_DEVICE_ID
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from .employee_repository import EmployeeRepository
from .repository import PasswordResetRepository, RoleRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    name: str
    email: str
    role: Optional[Role]
    locations: tuple[str, ...]


class AuthService:
    """Use case: sign in, and create the very first admin account."""

    def __init__(
        self,
        users: UserRepository,
        roles: RoleRepository,
        employees: EmployeeRepository,
        audit: AuditService,
    ):
        self._users = users
        self._roles = roles
        self._employees = employees
        self._audit = audit

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # unknown hash method, e.g. a placeholder value
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        role = self._roles.get_for_user(user.user_id)
        logger.info("user_id=%s signed in", user.user_id)
        return SessionUser(
            user_id=user.user_id,
            name=user.display_name,
            email=user.email,
            role=role.role if role else None,
            locations=role.locations if role else (),
        )

    def needs_bootstrap(self) -> bool:
        return self._roles.count_admins() == 0

    def bootstrap_first_admin(
        self, *, name: str, email: str, password: str, now: Optional[datetime] = None
    ) -> dict:
        if not self.needs_bootstrap():
            return {"ok": False, "message": "Admin already exists"}

        name = require_non_empty(name, "Name")
        email = normalize_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        if self._users.get_by_email(email):
            raise ValidationError("An account with this email already exists")

        now = now or now_local()
        user_id = self._users.create_user(
            name=name, email=email, password_hash=generate_password_hash(password), created_at=now
        )
        self._roles.upsert(user_id=user_id, role=Role.ADMIN, locations=[], assigned_by=None, assigned_at=now)
        if not self._employees.get_by_email(email):
            self._employees.create(
                name=name,
                work_email=email,
                role=Role.ADMIN,
                locations=[],
                created_at=now,
                created_by=None,
                user_id=user_id,
                has_accepted_invite=True,
            )
        self._audit.log("bootstrap_admin", user_id=user_id, details=f"userId={user_id}", now=now)
        logger.info("first admin created user_id=%s", user_id)
        return {"ok": True, "user_id": user_id}


class EmployeeService:
    """Use case: manage employees and their accounts (admin)."""

    def __init__(
        self,
        users: UserRepository,
        employees: EmployeeRepository,
        roles: RoleRepository,
        guard: AccessGuard,
        audit: AuditService,
        *,
        invite_ttl_hours: int = INVITE_TTL_HOURS,
    ):
        self._users = users
        self._employees = employees
        self._roles = roles
        self._guard = guard
        self._audit = audit
        self._invite_ttl = timedelta(hours=int(invite_ttl_hours))

    def _ensure_email_free(self, email: str) -> None:
        if self._users.get_by_email(email) or self._employees.get_by_email(email):
            raise ValidationError("Employee with this email already exists")

    def create_employee_account(
        self,
        *,
        actor_id: Optional[int],
        full_name: str,
        email: str,
        role: str,
        temp_password: Optional[str] = None,
        locations: Optional[Sequence[str]] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        self._guard.require_admin(actor_id)
        full_name = require_non_empty(full_name, "Full name")
        email = normalize_email(email)
        parsed_role = parse_role(role)
        locs = clean_locations(locations)
        if temp_password:
            require_min_length(temp_password, "Password", MIN_PASSWORD_LENGTH)
        self._ensure_email_free(email)

        now = now or now_local()
        # Without a temporary password the account is unusable until a reset.
        secret = temp_password or url_token()
        user_id = self._users.create_user(
            name=full_name, email=email, password_hash=generate_password_hash(secret), created_at=now
        )
        employee_id = self._employees.create(
            name=full_name,
            work_email=email,
            role=parsed_role,
            locations=locs,
            created_at=now,
            created_by=actor_id,
            user_id=user_id,
            has_accepted_invite=True,
        )
        self._roles.upsert(user_id=user_id, role=parsed_role, locations=locs, assigned_by=actor_id, assigned_at=now)
        self._audit.log(
            "create_employee_account",
            user_id=actor_id,
            details=f"employeeId={employee_id},role={parsed_role.value}",
            now=now,
        )
        logger.info("employee account created employee_id=%s user_id=%s", employee_id, user_id)
        return {"ok": True, "user_id": user_id, "employee_id": employee_id}

    def onboard_employee(
        self,
        *,
        actor_id: Optional[int],
        name: str,
        email: str,
        role: str,
        location: str,
        now: Optional[datetime] = None,
    ) -> dict:
        self._guard.require_admin(actor_id)
        name = require_non_empty(name, "Name")
        email = normalize_email(email)
        parsed_role = parse_role(role)
        location = require_non_empty(location, "Location")
        self._ensure_email_free(email)

        now = now or now_local()
        token = url_token()
        expires_at = now + self._invite_ttl
        employee_id = self._employees.create(
            name=name,
            work_email=email,
            role=parsed_role,
            locations=[location],
            created_at=now,
            created_by=actor_id,
            invite_token=token,
            invite_expires_at=expires_at,
        )
        self._audit.log(
            "send_employee_invite",
            user_id=actor_id,
            details=f"employeeId={employee_id},email={email}",
            now=now,
        )
        logger.info("invite issued employee_id=%s expires_at=%s", employee_id, expires_at)
        return {"employee_id": employee_id, "invite_token": token, "invite_expires_at": fmt_datetime(expires_at)}

    def accept_invite(self, *, token: str, password: str, now: Optional[datetime] = None) -> int:
        token = require_non_empty(token, "Invite token")
        employee = self._employees.get_by_invite_token(token)
        if not employee:
            raise ValidationError("Invalid invite token")
        if employee.has_accepted_invite:
            raise ValidationError("Invite already accepted")

        now = now or now_local()
        if employee.invite_expires_at and employee.invite_expires_at < now:
            raise ValidationError("Invite has expired")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        if self._users.get_by_email(employee.work_email):
            raise ValidationError("An account with this email already exists")

        user_id = self._users.create_user(
            name=employee.name,
            email=employee.work_email,
            password_hash=generate_password_hash(password),
            created_at=now,
        )
        self._roles.upsert(
            user_id=user_id,
            role=employee.role or Role.STAFF,
            locations=list(employee.locations),
            assigned_by=employee.invited_by,
            assigned_at=now,
        )
        self._employees.mark_invite_accepted(employee.employee_id, user_id=user_id)
        self._audit.log("accept_invite", user_id=user_id, details=f"employeeId={employee.employee_id}", now=now)
        return user_id

    def list_employees(self, *, actor_id: Optional[int]) -> list[dict]:
        self._guard.require_admin(actor_id)
        roles = {r.user_id: r for r in self._roles.list_all()}
        out: list[dict] = []
        for e in self._employees.list_all():
            role = roles.get(e.user_id) if e.user_id is not None else None
            out.append(
                {
                    "employee_id": e.employee_id,
                    "user_id": e.user_id,
                    "name": e.display_name,
                    "email": e.work_email,
                    "role": role.role.value if role else (e.role.value if e.role else None),
                    "locations": list(role.locations if role else e.locations),
                    "has_accepted_invite": e.has_accepted_invite,
                    "assigned_device_id": e.assigned_device_id,
                    "employment_status": e.employment_status,
                }
            )
        return out

    def get_current_user(self, user_id: Optional[int]) -> Optional[dict]:
        if not user_id:
            return None
        user = self._users.get_by_id(int(user_id))
        employee = self._employees.get_by_user_id(int(user_id))
        if not user and not employee:
            return None
        role = self._roles.get_for_user(int(user_id))
        return {
            "user_id": int(user_id),
            "email": user.email if user else employee.work_email,
            "name": user.display_name if user else employee.display_name,
            "role": role.role.value if role else None,
            "locations": list(role.locations if role else (employee.locations if employee else ())),
            "last_login_at": fmt_datetime(user.last_login_at) if user else None,
            "last_login_device_id": user.last_login_device_id if user else None,
            "last_login_location": user.last_login_location if user else None,
        }


class PasswordResetService:
    """Use case: forgotten password. Tokens never leave the server; they are logged for delivery."""

    def __init__(
        self,
        users: UserRepository,
        resets: PasswordResetRepository,
        audit: AuditService,
        *,
        ttl_minutes: int = RESET_TOKEN_TTL_MINUTES,
    ):
        self._users = users
        self._resets = resets
        self._audit = audit
        self._ttl = timedelta(minutes=int(ttl_minutes))

    def generate_token(self, email: str, *, now: Optional[datetime] = None) -> Optional[dict]:
        normalized = (email or "").strip().lower()
        user = self._users.get_by_email(normalized)
        if not user:
            return None

        now = now or now_local()
        token = url_token()
        expires_at = now + self._ttl
        self._resets.create(user_id=user.user_id, token=token, expires_at=expires_at, created_at=now)
        logger.info(
            "password reset token issued user_id=%s email=%s token=%s expires_at=%s",
            user.user_id,
            normalized,
            token,
            fmt_datetime(expires_at),
        )
        return {"email": normalized, "token": token, "user_name": user.name, "expires_at": fmt_datetime(expires_at)}

    def verify_token(self, email: str, token: str, *, now: Optional[datetime] = None) -> dict:
        normalized = (email or "").strip().lower()
        user = self._users.get_by_email(normalized)
        if not user:
            return {"valid": False, "message": "User not found"}

        reset = self._resets.find_unused(user_id=user.user_id, token=token or "")
        if not reset:
            return {"valid": False, "message": "Invalid reset token"}
        if reset.expires_at < (now or now_local()):
            return {"valid": False, "message": "Reset token has expired"}
        return {"valid": True, "user_name": user.name, "email": normalized}

    def reset_password(self, email: str, token: str, new_password: str, *, now: Optional[datetime] = None) -> dict:
        normalized = (email or "").strip().lower()
        user = self._users.get_by_email(normalized)
        if not user:
            raise NotFoundError("User not found")

        reset = self._resets.find_unused(user_id=user.user_id, token=token or "")
        if not reset:
            raise ValidationError("Invalid or expired reset token")

        now = now or now_local()
        if reset.expires_at < now:
            raise ValidationError("Reset token has expired")
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)

        self._users.update_password(user.user_id, password_hash=generate_password_hash(new_password), updated_at=now)
        self._resets.mark_used(reset.token_id, used_at=now)
        self._audit.log(
            "password_reset",
            user_id=user.user_id,
            device_id=WEB_DEVICE_ID,
            details=f"Password reset completed for {normalized}",
            now=now,
        )
        return {"success": True}
