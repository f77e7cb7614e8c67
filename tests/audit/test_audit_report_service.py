from __future__ import annotations

import csv
import io
from datetime import timedelta

import pytest

from conftest import FIXED_NOW
from src.care_portal.care_portal.audit.report_service import object_type_for
from src.care_portal.care_portal.core.exceptions import AuthorizationError, ValidationError


@pytest.fixture
def trail(world, people):
    audit = world.container.audit_service
    audit.log("clock_in", user_id=people["staff"], location="Maple House", now=FIXED_NOW)
    audit.log(
        "create_resident_log",
        user_id=people["staff"],
        details="residentId=1,template=daily_notes,version=1",
        location="Maple House",
        now=FIXED_NOW + timedelta(hours=1),
    )
    audit.log("kiosk_paired", user_id=None, details="kioskId=3", now=FIXED_NOW - timedelta(days=2))
    return world


@pytest.mark.parametrize(
    "details, expected",
    [
        ("residentId=4", "Resident Record"),
        ("employeeId=2,role=staff", "Employee Record"),
        ("kioskId=9", "Kiosk Device"),
        ("alertId=1", "Compliance Alert"),
        (None, "System"),
    ],
)
def test_object_type_for(details, expected):
    assert object_type_for(details) == expected


def test_list_logs_newest_first_with_names(trail, people):
    rows = trail.container.audit_report_service.list_logs(actor_id=people["admin"])
    assert [r["event"] for r in rows] == ["create_resident_log", "clock_in", "kiosk_paired"]
    assert rows[0]["actor_name"] == "Stu Staff"
    assert rows[0]["object_type"] == "Resident Record"
    assert rows[2]["actor_id"] == "system"
    assert rows[2]["location"] == "System"


def test_list_logs_filters(trail, people):
    reports = trail.container.audit_report_service
    assert len(reports.list_logs(actor_id=people["admin"], actor=str(people["staff"]))) == 2
    assert len(reports.list_logs(actor_id=people["admin"], actor="system")) == 1
    assert len(reports.list_logs(actor_id=people["admin"], action="clock_in")) == 1
    assert len(reports.list_logs(actor_id=people["admin"], location="System")) == 1

    day = FIXED_NOW.date().isoformat()
    assert len(reports.list_logs(actor_id=people["admin"], date_from=day, date_to=day)) == 2

    with pytest.raises(ValidationError, match="Invalid date"):
        reports.list_logs(actor_id=people["admin"], date_from="02/03/2026")


def test_lookups(trail, people):
    reports = trail.container.audit_report_service
    assert reports.list_actions(actor_id=people["admin"]) == ["clock_in", "create_resident_log", "kiosk_paired"]
    assert reports.list_locations(actor_id=people["admin"]) == ["Maple House"]
    actors = {a["name"]: a["role"] for a in reports.list_actors(actor_id=people["admin"])}
    assert actors["Sam Super"] == "supervisor"


def test_export_csv(trail, people):
    data = trail.container.audit_report_service.export_csv(actor_id=people["admin"], action="clock_in")
    text = data.decode("utf-8-sig")
    rows = list(csv.DictReader(io.StringIO(text)))
    assert len(rows) == 1
    assert rows[0]["event"] == "clock_in"
    assert rows[0]["actor_name"] == "Stu Staff"


def test_reports_need_admin(trail, people):
    with pytest.raises(AuthorizationError):
        trail.container.audit_report_service.list_logs(actor_id=people["supervisor"])
