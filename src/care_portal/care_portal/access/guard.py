from __future__ import annotations

import logging
from typing import Optional

from ..audit.service import AuditService
from ..core.enums import CARE_ROLES, SUPERVISOR_ROLES, Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..users.model import RoleAssignment
from ..users.repository import RoleRepository

logger = logging.getLogger(__name__)


class AccessGuard:
    """Role checks shared by every service.

    Each `require_*` returns the caller's role row so callers can apply
    location scoping without a second lookup. Denials are written to the
    audit trail before the error is raised.
    """

    def __init__(self, roles: RoleRepository, audit: AuditService):
        self._roles = roles
        self._audit = audit

    @staticmethod
    def require_user(user_id: Optional[int]) -> int:
        if not user_id:
            raise AuthenticationError("Not authenticated")
        return int(user_id)

    def get_role(self, user_id: int) -> Optional[RoleAssignment]:
        return self._roles.get_for_user(int(user_id))

    def _deny(self, user_id: int, reason: str, message: str) -> AuthorizationError:
        logger.warning("access denied user_id=%s reason=%s", user_id, reason)
        self._audit.log("access_denied", user_id=user_id, details=reason)
        return AuthorizationError(message)

    def require_care_access(self, user_id: Optional[int]) -> RoleAssignment:
        uid = self.require_user(user_id)
        role = self.get_role(uid)
        if not role or role.role not in CARE_ROLES:
            raise self._deny(uid, "care_access_required", "Care access required")
        return role

    def require_supervisor(self, user_id: Optional[int]) -> RoleAssignment:
        uid = self.require_user(user_id)
        role = self.get_role(uid)
        if not role or role.role not in SUPERVISOR_ROLES:
            raise self._deny(uid, "supervisor_access_required", "Supervisor access required")
        return role

    def require_admin(self, user_id: Optional[int]) -> RoleAssignment:
        uid = self.require_user(user_id)
        role = self.get_role(uid)
        if not role or role.role != Role.ADMIN:
            raise self._deny(uid, "admin_required", "Admin access required")
        return role

    @staticmethod
    def can_access_location(role: RoleAssignment, location: Optional[str]) -> bool:
        if role.role == Role.ADMIN:
            return True
        return bool(location) and location in role.locations
