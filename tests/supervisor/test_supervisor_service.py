from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import FIXED_NOW
from src.care_portal.care_portal.core.enums import Role
from src.care_portal.care_portal.core.exceptions import AuthorizationError
from src.care_portal.care_portal.supervisor.service import neutral_resident_id


def test_neutral_resident_id_is_stable_and_padded():
    assert neutral_resident_id(1) == "0049"
    assert neutral_resident_id("12") == "1569"
    assert neutral_resident_id(12) == neutral_resident_id("12")
    assert len(neutral_resident_id(123456789)) == 4


def test_team_members_scoped_to_shared_locations(world, people):
    world.container.shift_service.clock_in(user_id=people["staff"], location="Maple House", now=FIXED_NOW)
    supervisor = world.container.supervisor_service

    team = supervisor.get_team_members(user_id=people["supervisor"])
    assert [m["name"] for m in team] == ["Stu Staff"]
    assert team[0]["is_currently_clocked"] is True
    assert team[0]["last_clock_in"] == FIXED_NOW.isoformat(timespec="seconds")

    everyone = supervisor.get_team_members(user_id=people["admin"])
    assert {m["name"] for m in everyone} == {"Stu Staff", "Cara Cedar"}

    with pytest.raises(AuthorizationError):
        supervisor.get_team_members(user_id=people["staff"])


def test_location_isps_hide_resident_names(world, people):
    resident = world.add_resident("Resident A", "Maple House")
    world.add_resident("Resident B", "Cedar House")
    isps = world.container.isp_service
    isps.author_isp(user_id=people["supervisor"], resident_id=resident, content="Plan", now=FIXED_NOW)

    items = world.container.supervisor_service.get_location_isps(user_id=people["supervisor"])
    assert len(items) == 1
    assert items[0]["resident_neutral_id"] == neutral_resident_id(resident)
    assert "resident_id" not in items[0]
    assert items[0]["created_at"] == FIXED_NOW.isoformat(timespec="seconds")


def test_isp_acknowledgment_summary(world, people):
    resident = world.add_resident("Resident A", "Maple House")
    second_staff = world.add_user("Bea Maple", Role.STAFF, ["Maple House"])
    isps = world.container.isp_service
    isps.author_isp(user_id=people["supervisor"], resident_id=resident, content="Plan")
    isps.publish_isp(user_id=people["supervisor"], resident_id=resident, now=FIXED_NOW)
    isps.acknowledge_isp(user_id=people["staff"], resident_id=resident, now=FIXED_NOW + timedelta(hours=1))

    summary = world.container.supervisor_service.get_isp_acknowledgments(user_id=people["supervisor"])
    assert len(summary) == 1
    item = summary[0]
    assert item["acknowledged"] == 1
    assert item["total_staff"] == 2
    assert item["location"] == "Maple House"
    assert [s["user_id"] for s in item["staff"]] == [second_staff, people["staff"]]
    assert item["staff"][0]["acknowledged_at"] is None
