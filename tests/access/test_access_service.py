from __future__ import annotations

import pytest

from src.care_portal.care_portal.core.enums import Role
from src.care_portal.care_portal.core.exceptions import AuthenticationError, AuthorizationError


def test_check_access_without_user_redirects_to_signin(world):
    result = world.container.access_service.check_access(None, "/care")
    assert result["granted"] is False
    assert result["reason"] == "not_authenticated"
    assert result["redirect_to"] == "/signin"


def test_check_access_unknown_employee(world):
    result = world.container.access_service.check_access(999, "/care")
    assert result["reason"] == "user_not_found"
    assert result["redirect_to"] == "/signin"


def test_staff_cannot_open_admin_routes(world, people):
    result = world.container.access_service.check_access(people["staff"], "/admin/kiosks")
    assert result["granted"] is False
    assert result["reason"] == "insufficient_privileges"
    assert result["redirect_to"] == "/care"
    assert world.audit.entries == []


def test_admin_gets_override_on_care_routes(world, people):
    result = world.container.access_service.check_access(people["admin"], "/residents/3")
    assert result["granted"] is True
    assert result["reason"] == "admin_override"
    assert result["user_role"] == "admin"


def test_staff_gets_care_access_with_locations(world, people):
    result = world.container.access_service.check_access(people["staff"], "/care")
    assert result["granted"] is True
    assert result["reason"] == "care_access"
    assert result["locations"] == ["Maple House"]
    assert result["user_name"] == "Stu Staff"


def test_root_is_public_but_not_its_children(world, people):
    service = world.container.access_service
    assert service.check_access(people["staff"], "/")["reason"] == "public_route"
    unknown = service.check_access(people["staff"], "/whatever")
    assert unknown["granted"] is False
    assert unknown["reason"] == "route_not_found"
    assert unknown["redirect_to"] == "/care"


def test_prefix_must_end_at_segment_boundary(world, people):
    result = world.container.access_service.check_access(people["admin"], "/administrator")
    assert result["reason"] == "route_not_found"


def test_user_without_role_goes_to_pending(world):
    uid = world.add_user("No Role", None)
    result = world.container.access_service.check_access(uid, "/care")
    assert result["reason"] == "no_role_assigned"
    assert result["redirect_to"] == "/pending"


def test_assigned_device_is_enforced(world):
    uid = world.add_user("Pinned", Role.STAFF, ["Maple House"], device_id="dev-1")
    service = world.container.access_service

    missing = service.check_access(uid, "/care")
    assert missing["reason"] == "device_id_missing"
    assert missing["redirect_to"] == "/unauthorized-device"

    wrong = service.check_access(uid, "/care", device_id="dev-2")
    assert wrong["reason"] == "unauthorized_device"

    assert service.check_access(uid, "/care", device_id="dev-1")["granted"] is True
    denied = [e for e in world.audit.entries if e.event == "access_denied"]
    assert len(denied) == 2
    assert "reason=unauthorized_device" in denied[-1].details


def test_device_id_without_assigned_device_is_denied(world, people):
    service = world.container.access_service
    result = service.check_access(people["staff"], "/care", device_id="random-device")
    assert result["granted"] is False
    assert result["reason"] == "unauthorized_device"
    assert result["redirect_to"] == "/unauthorized-device"
    entry = world.audit.entries[-1]
    assert entry.event == "access_denied"
    assert "reason=unauthorized_device" in entry.details

    assert service.check_access(people["staff"], "/care")["granted"] is True


def test_session_info_for_anonymous_and_staff(world, people):
    service = world.container.access_service
    assert service.get_session_info(None)["default_route"] == "/signin"

    info = service.get_session_info(people["supervisor"])
    assert info["authenticated"] is True
    assert info["role"] == "supervisor"
    assert info["default_route"] == "/care"
    assert info["user"]["name"] == "Sam Super"


def test_log_session_activity_writes_audit(world, people):
    world.container.access_service.log_session_activity(people["staff"], "page_view", "route=/care")
    entry = world.audit.entries[-1]
    assert entry.event == "page_view"
    assert entry.device_id == "web"
    assert entry.location == "system"


def test_guard_denials_are_audited(world, people):
    guard = world.container.guard
    with pytest.raises(AuthenticationError):
        guard.require_care_access(None)
    with pytest.raises(AuthorizationError):
        guard.require_admin(people["staff"])
    entry = world.audit.entries[-1]
    assert entry.event == "access_denied"
    assert entry.details == "admin_required"


def test_guard_location_scope(world, people):
    guard = world.container.guard
    staff_role = guard.get_role(people["staff"])
    admin_role = guard.get_role(people["admin"])
    assert guard.can_access_location(staff_role, "Maple House")
    assert not guard.can_access_location(staff_role, "Cedar House")
    assert not guard.can_access_location(staff_role, None)
    assert guard.can_access_location(admin_role, "Anywhere")
