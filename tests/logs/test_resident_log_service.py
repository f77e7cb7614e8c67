from __future__ import annotations

import json
from datetime import timedelta

import pytest

from conftest import FIXED_NOW
from src.care_portal.care_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError


@pytest.fixture
def maple(world):
    return world.add_resident("Resident A", "Maple House")


@pytest.fixture
def cedar(world):
    return world.add_resident("Resident B", "Cedar House")


def test_create_log_from_fields(world, people, maple):
    logs = world.container.log_service
    log_id = logs.create_resident_log(
        user_id=people["staff"],
        resident_id=maple,
        template="daily_notes",
        fields={"mood": "Good", "notes": "Ate lunch"},
        now=FIXED_NOW,
    )
    stored = world.logs.get_by_id(log_id)
    assert stored.version == 1
    assert stored.location == "Maple House"
    assert json.loads(stored.content) == {"mood": "Good", "notes": "Ate lunch"}
    assert world.audit.entries[-1].details == f"residentId={maple},template=daily_notes,version=1"


def test_create_log_validation(world, people, maple, cedar):
    logs = world.container.log_service
    with pytest.raises(ValidationError, match="Content is required"):
        logs.create_resident_log(user_id=people["staff"], resident_id=maple, template="daily_notes")
    with pytest.raises(ValidationError, match="Template is required"):
        logs.create_resident_log(user_id=people["staff"], resident_id=maple, template=" ", content="x")
    with pytest.raises(AuthorizationError, match="Access denied to create logs for this resident"):
        logs.create_resident_log(user_id=people["staff"], resident_id=cedar, template="daily_notes", content="x")
    with pytest.raises(NotFoundError):
        logs.create_resident_log(user_id=people["staff"], resident_id=404, template="daily_notes", content="x")


@pytest.mark.parametrize("fields", ["abc", ["mood", "calm"], 7])
def test_fields_must_be_an_object(world, people, maple, fields):
    with pytest.raises(ValidationError, match="Fields must be an object"):
        world.container.log_service.create_resident_log(
            user_id=people["staff"], resident_id=maple, template="daily_notes", fields=fields
        )
    assert world.logs.logs == {}


def test_logging_blocked_until_isp_acknowledged(world, people, maple):
    isps = world.container.isp_service
    isps.author_isp(user_id=people["supervisor"], resident_id=maple, content="Plan")
    isps.publish_isp(user_id=people["supervisor"], resident_id=maple)
    logs = world.container.log_service

    with pytest.raises(ValidationError, match="Must acknowledge ISP before logging"):
        logs.create_resident_log(user_id=people["staff"], resident_id=maple, template="daily_notes", content="x")

    isps.acknowledge_isp(user_id=people["staff"], resident_id=maple)
    assert logs.create_resident_log(user_id=people["staff"], resident_id=maple, template="daily_notes", content="x")


def test_edit_adds_a_new_version(world, people, maple):
    logs = world.container.log_service
    first = logs.create_resident_log(
        user_id=people["staff"], resident_id=maple, template="incident_report", content="Fell", now=FIXED_NOW
    )
    edited = logs.edit_resident_log(
        user_id=people["staff"], log_id=first, content="Fell, no injury", now=FIXED_NOW + timedelta(minutes=5)
    )
    assert edited != first
    assert world.logs.get_by_id(first).content == "Fell"
    new_row = world.logs.get_by_id(edited)
    assert new_row.version == 2
    assert new_row.template == "incident_report"

    with pytest.raises(AuthorizationError, match="Not your log"):
        logs.edit_resident_log(user_id=people["supervisor"], log_id=first, content="mine now")
    with pytest.raises(NotFoundError, match="Log not found"):
        logs.edit_resident_log(user_id=people["staff"], log_id=999, content="x")


def test_listing_enriches_names(world, people, maple):
    logs = world.container.log_service
    logs.create_resident_log(user_id=people["staff"], resident_id=maple, template="daily_notes", content="a")

    rows = logs.list_resident_logs(user_id=people["supervisor"], resident_id=maple)
    assert rows[0]["resident_name"] == "Resident A"
    assert rows[0]["author_name"] == "Stu Staff"

    by_resident = logs.get_resident_logs(user_id=people["staff"], resident_id=maple)
    assert len(by_resident) == 1


def test_recent_logs_are_location_scoped(world, people, maple, cedar):
    logs = world.container.log_service
    logs.create_resident_log(user_id=people["staff"], resident_id=maple, template="daily_notes", content="a")
    logs.create_resident_log(user_id=people["other_staff"], resident_id=cedar, template="daily_notes", content="b")

    assert [r["resident_id"] for r in logs.get_resident_logs(user_id=people["staff"])] == [maple]
    assert len(logs.get_resident_logs(user_id=people["admin"])) == 2


def test_summary_counts(world, people, maple):
    logs = world.container.log_service
    logs.create_resident_log(
        user_id=people["staff"], resident_id=maple, template="daily_notes", content="a", now=FIXED_NOW
    )
    logs.create_resident_log(
        user_id=people["supervisor"], resident_id=maple, template="medication_log", content="b", now=FIXED_NOW
    )
    logs.create_resident_log(
        user_id=people["staff"],
        resident_id=maple,
        template="daily_notes",
        content="old",
        now=FIXED_NOW - timedelta(days=30),
    )

    summary = logs.get_recent_logs_summary(user_id=people["staff"], now=FIXED_NOW)
    assert summary == {
        "total_logs": 2,
        "logs_by_location": {"Maple House": 2},
        "logs_by_template": {"daily_notes": 1, "medication_log": 1},
        "my_logs": 1,
    }


def test_search_logs(world, people, maple):
    logs = world.container.log_service
    logs.create_resident_log(
        user_id=people["staff"], resident_id=maple, template="daily_notes", content="Went for a WALK", now=FIXED_NOW
    )
    logs.create_resident_log(
        user_id=people["staff"],
        resident_id=maple,
        template="incident_report",
        content="Slipped",
        now=FIXED_NOW - timedelta(days=3),
    )

    assert len(logs.search_logs(user_id=people["staff"], query="walk")) == 1
    assert len(logs.search_logs(user_id=people["staff"], template="incident_report")) == 1
    recent = logs.search_logs(user_id=people["staff"], date_from=(FIXED_NOW - timedelta(days=1)).date().isoformat())
    assert [r["content"] for r in recent] == ["Went for a WALK"]

    with pytest.raises(ValidationError, match="Invalid date filter"):
        logs.search_logs(user_id=people["staff"], date_from="yesterday")


def test_templates_are_copies(world, people):
    logs = world.container.log_service
    templates = logs.get_log_templates(user_id=people["staff"])
    assert [t["id"] for t in templates] == ["daily_notes", "incident_report", "medication_log", "care_plan_update"]
    templates[0]["name"] = "changed"
    assert logs.get_log_templates(user_id=people["staff"])[0]["name"] == "Daily Notes"


def test_admin_recent_logs_include_author_role(world, people, maple):
    logs = world.container.log_service
    logs.create_resident_log(user_id=people["staff"], resident_id=maple, template="daily_notes", content="a")

    rows = logs.get_recent_logs_for_admin(actor_id=people["admin"])
    assert rows[0]["author_role"] == "staff"
    with pytest.raises(AuthorizationError):
        logs.get_recent_logs_for_admin(actor_id=people["supervisor"])
