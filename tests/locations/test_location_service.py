from __future__ import annotations

import pytest

from conftest import FIXED_NOW
from src.care_portal.care_portal.core.enums import LocationStatus
from src.care_portal.care_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def test_create_and_update_location(world, people):
    service = world.container.location_service
    loc_id = service.create_location(
        actor_id=people["admin"], name=" Birch House ", address="1 Birch Rd", capacity="5", now=FIXED_NOW
    )
    location = world.locations.get_by_id(loc_id)
    assert location.name == "Birch House"
    assert location.capacity == 5

    with pytest.raises(ValidationError, match="Location already exists"):
        service.create_location(actor_id=people["admin"], name="Birch House")

    service.update_location(actor_id=people["admin"], location_id=loc_id, status="inactive", now=FIXED_NOW)
    assert world.locations.get_by_id(loc_id).status == LocationStatus.INACTIVE
    assert world.audit.entries[-1].details == f"locationId={loc_id},fields=status"

    assert [l["name"] for l in service.list_locations(actor_id=people["admin"])] == ["Birch House"]


def test_location_validation(world, people):
    service = world.container.location_service
    with pytest.raises(ValidationError, match="Capacity must be a number"):
        service.create_location(actor_id=people["admin"], name="X", capacity="lots")
    with pytest.raises(ValidationError, match="Capacity must not be negative"):
        service.create_location(actor_id=people["admin"], name="X", capacity=-1)
    with pytest.raises(NotFoundError, match="Location not found"):
        service.update_location(actor_id=people["admin"], location_id=42, name="Y")
    with pytest.raises(AuthorizationError):
        service.create_location(actor_id=people["supervisor"], name="X")


def test_delete_blocked_while_referenced(world, people):
    service = world.container.location_service
    loc_id = service.create_location(actor_id=people["admin"], name="Birch House")
    world.add_resident("Resident D", "Birch House")
    with pytest.raises(ValidationError, match="assigned to one or more residents"):
        service.delete_location(actor_id=people["admin"], location_id=loc_id)


def test_delete_blocked_by_kiosk_and_employee(world, people):
    service = world.container.location_service
    kiosk_loc = service.create_location(actor_id=people["admin"], name="Kiosk House")
    world.add_kiosk("kiosk-k", "Kiosk House")
    with pytest.raises(ValidationError, match="It has registered kiosks"):
        service.delete_location(actor_id=people["admin"], location_id=kiosk_loc)

    maple = service.create_location(actor_id=people["admin"], name="Maple House")
    with pytest.raises(ValidationError, match="assigned to one or more employees"):
        service.delete_location(actor_id=people["admin"], location_id=maple)


def test_delete_unreferenced_location(world, people):
    service = world.container.location_service
    loc_id = service.create_location(actor_id=people["admin"], name="Empty House")
    assert service.delete_location(actor_id=people["admin"], location_id=loc_id) is True
    assert world.locations.get_by_id(loc_id) is None
    assert world.audit.entries[-1].event == "delete_location"


def test_sync_creates_missing_rows(world, people):
    service = world.container.location_service
    service.create_location(actor_id=people["admin"], name="Maple House")
    world.add_resident("Resident A", "Maple House")
    world.add_kiosk("kiosk-s", "Oak House")
    world.container.shift_service.clock_in(user_id=people["other_staff"], location="Cedar House")

    result = service.sync_locations_from_strings(actor_id=people["admin"], now=FIXED_NOW)
    assert result["success"] is True
    assert result["already_existed"] == 1
    assert {l["name"] for l in result["locations"]} == {"Cedar House", "Oak House"}
    assert result["created"] == 2
    assert result["total_found"] == 3

    again = service.sync_locations_from_strings(actor_id=people["admin"])
    assert again["created"] == 0
