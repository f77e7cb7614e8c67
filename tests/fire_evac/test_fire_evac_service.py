from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import FIXED_NOW
from src.care_portal.care_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def _save(world, user_id, resident_id, **kwargs):
    kwargs.setdefault("file_ref", "plans/evac.pdf")
    kwargs.setdefault("file_name", "evac.pdf")
    return world.container.fire_evac_service.save_resident_fire_evac_plan(
        user_id=user_id, resident_id=resident_id, now=kwargs.pop("now", FIXED_NOW), **kwargs
    )


def test_plans_are_versioned_per_resident(world, people):
    resident = world.add_resident("Resident A", "Maple House")
    first = _save(world, people["supervisor"], resident, details={"mobility_needs": " Wheelchair "})
    second = _save(world, people["supervisor"], resident, file_size=2048, now=FIXED_NOW + timedelta(days=1))
    assert (first["version"], second["version"]) == (1, 2)

    plans = world.container.fire_evac_service.get_resident_fire_evac_plans(
        user_id=people["staff"], resident_id=resident, now=FIXED_NOW + timedelta(days=1)
    )
    assert [p["version"] for p in plans] == [2, 1]
    assert plans[1]["mobility_needs"] == "Wheelchair"
    assert plans[0]["file_size"] == 2048
    assert plans[0]["days_until_due"] == 365
    assert plans[0]["status"] == "ok"

    entry = world.audit.entries[-1]
    assert entry.event == "upload_fire_evac_plan"
    assert entry.details == f"residentId={resident},version=2"
    assert entry.location == "Maple House"


def test_plan_review_status_moves_with_time(world, people):
    resident = world.add_resident("Resident A", "Maple House")
    _save(world, people["supervisor"], resident)
    service = world.container.fire_evac_service

    soon = service.get_resident_fire_evac_plans(
        user_id=people["staff"], resident_id=resident, now=FIXED_NOW + timedelta(days=340)
    )
    assert soon[0]["status"] == "due-soon"
    late = service.get_resident_fire_evac_plans(
        user_id=people["staff"], resident_id=resident, now=FIXED_NOW + timedelta(days=366)
    )
    assert late[0]["status"] == "overdue"
    assert late[0]["days_until_due"] == -1


def test_only_supervisors_in_scope_can_save(world, people):
    maple = world.add_resident("Resident A", "Maple House")
    cedar = world.add_resident("Resident B", "Cedar House")
    with pytest.raises(AuthorizationError):
        _save(world, people["staff"], maple)
    with pytest.raises(AuthorizationError):
        _save(world, people["supervisor"], cedar)
    with pytest.raises(NotFoundError):
        _save(world, people["supervisor"], 999)
    assert world.fire_evac_plans.plans == {}


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"file_ref": "  "}, "File reference is required"),
        ({"file_name": ""}, "File name is required"),
        ({"file_size": -1}, "File size must be a non-negative number"),
        ({"file_size": "big"}, "File size must be a non-negative number"),
        ({"details": {"colour": "red"}}, "Unknown plan fields: colour"),
        ({"details": {"notes": 5}}, "Plan details must be text"),
    ],
)
def test_invalid_plans_are_rejected(world, people, kwargs, message):
    resident = world.add_resident("Resident A", "Maple House")
    with pytest.raises(ValidationError, match=message):
        _save(world, people["supervisor"], resident, **kwargs)


def test_overview_lists_latest_plan_per_visible_resident(world, people):
    maple = world.add_resident("Resident A", "Maple House")
    cedar = world.add_resident("Resident B", "Cedar House")
    world.add_resident("Resident C", "Maple House")
    _save(world, people["supervisor"], maple)
    _save(world, people["supervisor"], maple)
    _save(world, people["admin"], cedar)
    service = world.container.fire_evac_service

    mine = service.get_fire_evac_plans(user_id=people["staff"], now=FIXED_NOW)
    assert [(p["resident_id"], p["version"]) for p in mine] == [(maple, 2)]

    everyone = service.get_fire_evac_plans(user_id=people["admin"], now=FIXED_NOW)
    assert {p["resident_id"] for p in everyone} == {maple, cedar}
