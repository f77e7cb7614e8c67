from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for endpoint authorization."""

    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    STAFF = "staff"


CARE_ROLES = frozenset({Role.ADMIN, Role.SUPERVISOR, Role.STAFF})
SUPERVISOR_ROLES = frozenset({Role.ADMIN, Role.SUPERVISOR})


class KioskStatus(str, Enum):
    ACTIVE = "active"
    DISABLED = "disabled"
    RETIRED = "retired"


class PairingStatus(str, Enum):
    """Lifecycle of a kiosk pairing token."""

    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"


class DeviceType(str, Enum):
    KIOSK = "kiosk"
    MOBILE = "mobile"
    DESKTOP = "desktop"


class LocationStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class AccessReason(str, Enum):
    """Why check_access granted or denied a route."""

    NOT_AUTHENTICATED = "not_authenticated"
    USER_NOT_FOUND = "user_not_found"
    UNAUTHORIZED_DEVICE = "unauthorized_device"
    DEVICE_ID_MISSING = "device_id_missing"
    NO_ROLE_ASSIGNED = "no_role_assigned"
    PUBLIC_ROUTE = "public_route"
    ADMIN_ACCESS = "admin_access"
    CARE_ACCESS = "care_access"
    ADMIN_OVERRIDE = "admin_override"
    INSUFFICIENT_PRIVILEGES = "insufficient_privileges"
    ROUTE_NOT_FOUND = "route_not_found"


class AlertType(str, Enum):
    ISP = "isp"
    FIRE_EVAC = "fire_evac"


class ComplianceStatus(str, Enum):
    """How close a review item is to its due date."""

    OK = "ok"
    DUE_SOON = "due-soon"
    OVERDUE = "overdue"


class TimeExceptionKind(str, Enum):
    LONG_SHIFT = "long_shift"
    MISSED_CLOCK_OUT = "missed_clock_out"


class ReviewStatus(str, Enum):
    APPROVED = "approved"
    DENIED = "denied"
