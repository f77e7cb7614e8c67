from __future__ import annotations

import pytest

from conftest import FIXED_NOW
from src.care_portal.care_portal.core.enums import DeviceType
from src.care_portal.care_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def _register(world, people, device_id="browser-1", **kwargs):
    return world.container.device_service.register_device(
        actor_id=people["admin"],
        device_id=device_id,
        device_name=kwargs.pop("device_name", "Front Office PC"),
        location=kwargs.pop("location", "Maple House"),
        now=FIXED_NOW,
        **kwargs,
    )


def test_register_device(world, people):
    new_id = _register(world, people, device_type="Mobile", metadata={"os": "android"})
    device = world.devices.get_by_id(new_id)
    assert device.device_type == DeviceType.MOBILE
    assert device.metadata == {"os": "android"}
    entry = world.audit.entries[-1]
    assert entry.event == "device_registered"
    assert entry.details == "Registered device: Front Office PC"

    with pytest.raises(ValidationError, match="Device already registered"):
        _register(world, people)
    with pytest.raises(ValidationError, match="Device type must be one of"):
        _register(world, people, device_id="other", device_type="toaster")


def test_non_admin_messages_are_specific(world, people):
    devices = world.container.device_service
    with pytest.raises(AuthorizationError, match="Only admins can register devices"):
        devices.register_device(actor_id=people["staff"], device_id="x", device_name="x", location="x")
    with pytest.raises(AuthorizationError, match="Only admins can view devices"):
        devices.list_devices(actor_id=people["supervisor"])
    with pytest.raises(AuthorizationError, match="Only admins can delete devices"):
        devices.delete_device(actor_id=people["staff"], id=1)


def test_check_device(world, people):
    devices = world.container.device_service
    admin_view = devices.check_device(user_id=people["admin"], device_id="anything")
    assert admin_view["is_admin"] is True

    assert devices.check_device(user_id=people["staff"], device_id="browser-1")["is_registered"] is False

    new_id = _register(world, people)
    devices.update_device_status(actor_id=people["admin"], id=new_id, is_active=False)
    result = devices.check_device(user_id=people["staff"], device_id="browser-1")
    assert result["is_registered"] is True
    assert result["is_active"] is False
    assert world.audit.entries[-1].event == "device_deactivated"


def test_list_and_update(world, people):
    devices = world.container.device_service
    first = _register(world, people)
    _register(world, people, device_id="browser-2", location="Cedar House")

    assert len(devices.list_devices(actor_id=people["admin"])) == 2
    assert [d["device_id"] for d in devices.list_devices(actor_id=people["admin"], location="Cedar House")] == [
        "browser-2"
    ]

    devices.update_device(actor_id=people["admin"], id=first, device_name="Nurse Station", notes="upstairs")
    updated = world.devices.get_by_id(first)
    assert updated.device_name == "Nurse Station"
    assert updated.notes == "upstairs"
    assert world.audit.entries[-1].event == "device_updated"

    with pytest.raises(NotFoundError, match="Device not found"):
        devices.update_device(actor_id=people["admin"], id=999, device_name="x")


def test_delete_device(world, people):
    devices = world.container.device_service
    new_id = _register(world, people)
    assert devices.delete_device(actor_id=people["admin"], id=new_id) is True
    assert world.devices.get_by_id(new_id) is None
    assert world.audit.entries[-1].details == "Deleted device: Front Office PC"


def test_record_device_usage(world, people):
    devices = world.container.device_service
    assert devices.record_device_usage(user_id=people["staff"], device_id="nope") == {
        "success": False,
        "message": "Device not registered",
    }

    new_id = _register(world, people)
    result = devices.record_device_usage(user_id=people["staff"], device_id="browser-1", now=FIXED_NOW)
    assert result["success"] is True
    assert world.devices.get_by_id(new_id).last_used_by == people["staff"]
    user = world.users.get_by_id(people["staff"])
    assert user.last_login_device_id == "browser-1"
    assert user.last_login_location == "Maple House"

    devices.update_device_status(actor_id=people["admin"], id=new_id, is_active=False)
    assert devices.record_device_usage(user_id=people["staff"], device_id="browser-1")["message"] == (
        "Device is inactive"
    )
