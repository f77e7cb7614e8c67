from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime

import pytest
from werkzeug.security import generate_password_hash

from src.care_portal.care_portal.audit.model import AuditEntry
from src.care_portal.care_portal.compliance.model import ComplianceAlert
from src.care_portal.care_portal.container import Container, wire_services
from src.care_portal.care_portal.core.enums import KioskStatus, LocationStatus, PairingStatus, Role
from src.care_portal.care_portal.devices.model import Device
from src.care_portal.care_portal.fire_evac.model import FireEvacPlan
from src.care_portal.care_portal.isp.model import Isp, IspAcknowledgment
from src.care_portal.care_portal.kiosks.model import Kiosk, PairingToken
from src.care_portal.care_portal.locations.model import Location
from src.care_portal.care_portal.logs.model import ResidentLog
from src.care_portal.care_portal.residents.model import Guardian, Resident
from src.care_portal.care_portal.settings.model import AppSettings
from src.care_portal.care_portal.shifts.model import Shift
from src.care_portal.care_portal.supervisor.model import TimeExceptionReview
from src.care_portal.care_portal.users.employee_model import Employee
from src.care_portal.care_portal.users.model import PasswordResetToken, RoleAssignment, User

FIXED_NOW = datetime(2026, 3, 2, 9, 0, 0)


class _Ids:
    def __init__(self):
        self._next = 1

    def take(self) -> int:
        value = self._next
        self._next += 1
        return value


class FakeAuditRepo:
    def __init__(self):
        self._ids = _Ids()
        self.entries: list[AuditEntry] = []

    def insert(self, *, user_id, event, timestamp, device_id, location, details):
        entry = AuditEntry(
            audit_id=self._ids.take(),
            user_id=user_id,
            event=event,
            timestamp=timestamp,
            device_id=device_id,
            location=location,
            details=details,
        )
        self.entries.append(entry)
        return entry.audit_id

    def list_recent(self, *, limit):
        ordered = sorted(self.entries, key=lambda e: (e.timestamp, e.audit_id), reverse=True)
        return ordered[:limit]

    def distinct_events(self):
        return sorted({e.event for e in self.entries})

    def distinct_locations(self):
        return sorted({e.location for e in self.entries})

    def events(self) -> list[str]:
        return [e.event for e in self.entries]


class FakeUserRepo:
    def __init__(self):
        self._ids = _Ids()
        self.users: dict[int, User] = {}

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def list_all(self):
        return list(self.users.values())

    def create_user(self, *, name, email, password_hash, created_at):
        uid = self._ids.take()
        self.users[uid] = User(user_id=uid, name=name, email=email, password_hash=password_hash)
        return uid

    def update_password(self, user_id, *, password_hash, updated_at):
        user = self.users.get(int(user_id))
        if not user:
            return False
        self.users[user.user_id] = dataclasses.replace(user, password_hash=password_hash)
        return True

    def record_login(self, user_id, *, at, device_id, location):
        user = self.users.get(int(user_id))
        if not user:
            return False
        self.users[user.user_id] = dataclasses.replace(
            user, last_login_at=at, last_login_device_id=device_id, last_login_location=location
        )
        return True


class FakeRoleRepo:
    def __init__(self):
        self.roles: dict[int, RoleAssignment] = {}

    def get_for_user(self, user_id):
        return self.roles.get(int(user_id))

    def list_all(self):
        return list(self.roles.values())

    def count_admins(self):
        return sum(1 for r in self.roles.values() if r.role == Role.ADMIN)

    def upsert(self, *, user_id, role, locations, assigned_by, assigned_at):
        self.roles[int(user_id)] = RoleAssignment(
            user_id=int(user_id),
            role=role,
            locations=tuple(locations),
            assigned_by=assigned_by,
            assigned_at=assigned_at,
        )

    def delete_for_user(self, user_id):
        return self.roles.pop(int(user_id), None) is not None


class FakeResetRepo:
    def __init__(self):
        self._ids = _Ids()
        self.tokens: dict[int, PasswordResetToken] = {}

    def create(self, *, user_id, token, expires_at, created_at):
        tid = self._ids.take()
        self.tokens[tid] = PasswordResetToken(
            token_id=tid, user_id=user_id, token=token, expires_at=expires_at, created_at=created_at
        )
        return tid

    def find_unused(self, *, user_id, token):
        return next(
            (t for t in self.tokens.values() if t.user_id == user_id and t.token == token and not t.used),
            None,
        )

    def mark_used(self, token_id, *, used_at):
        self.tokens[token_id] = dataclasses.replace(self.tokens[token_id], used=True, used_at=used_at)
        return True


class FakeEmployeeRepo:
    def __init__(self):
        self._ids = _Ids()
        self.employees: dict[int, Employee] = {}

    def get_by_id(self, employee_id):
        return self.employees.get(int(employee_id))

    def get_by_user_id(self, user_id):
        return next((e for e in self.employees.values() if e.user_id == int(user_id)), None)

    def get_by_email(self, work_email):
        return next((e for e in self.employees.values() if e.work_email == work_email), None)

    def get_by_invite_token(self, token):
        return next((e for e in self.employees.values() if e.invite_token == token), None)

    def list_all(self):
        return list(self.employees.values())

    def create(
        self,
        *,
        name,
        work_email,
        role,
        locations,
        created_at,
        created_by,
        user_id=None,
        invite_token=None,
        invite_expires_at=None,
        has_accepted_invite=False,
    ):
        eid = self._ids.take()
        self.employees[eid] = Employee(
            employee_id=eid,
            name=name,
            work_email=work_email,
            user_id=user_id,
            role=role,
            locations=tuple(locations),
            invite_token=invite_token,
            invite_expires_at=invite_expires_at,
            invited_at=created_at if invite_token else None,
            invited_by=created_by if invite_token else None,
            has_accepted_invite=has_accepted_invite,
            created_at=created_at,
        )
        return eid

    def mark_invite_accepted(self, employee_id, *, user_id):
        emp = self.employees[int(employee_id)]
        self.employees[emp.employee_id] = dataclasses.replace(emp, user_id=user_id, has_accepted_invite=True)
        return True

    def any_with_location(self, location):
        return any(location in e.locations for e in self.employees.values())


class FakeShiftRepo:
    def __init__(self):
        self._ids = _Ids()
        self.shifts: dict[int, Shift] = {}

    def get_by_id(self, shift_id):
        return self.shifts.get(int(shift_id))

    def get_open_for_user(self, user_id):
        open_shifts = [s for s in self.shifts.values() if s.user_id == user_id and s.is_open]
        return max(open_shifts, key=lambda s: s.clock_in_time, default=None)

    def get_latest_for_user(self, user_id):
        mine = [s for s in self.shifts.values() if s.user_id == user_id]
        return max(mine, key=lambda s: (s.clock_in_time, s.shift_id), default=None)

    def create(self, *, user_id, location, clock_in_time, device_id, kiosk_id=None, clock_in_selfie=None):
        sid = self._ids.take()
        self.shifts[sid] = Shift(
            shift_id=sid,
            user_id=user_id,
            location=location,
            clock_in_time=clock_in_time,
            device_id=device_id,
            kiosk_id=kiosk_id,
            clock_in_selfie=clock_in_selfie,
        )
        return sid

    def close(self, shift_id, *, clock_out_time, clock_out_selfie=None):
        shift = self.shifts[shift_id]
        self.shifts[shift_id] = dataclasses.replace(
            shift, clock_out_time=clock_out_time, clock_out_selfie=clock_out_selfie
        )
        return True

    def list_recent(self, *, locations=None, user_id=None, limit=100):
        items = list(self.shifts.values())
        if locations is not None:
            items = [s for s in items if s.location in locations]
        if user_id is not None:
            items = [s for s in items if s.user_id == user_id]
        items.sort(key=lambda s: (s.clock_in_time, s.shift_id), reverse=True)
        return items[:limit]

    def list_between(self, *, start=None, end=None, user_ids=None, locations=None):
        items = list(self.shifts.values())
        if start is not None:
            items = [s for s in items if s.clock_in_time >= start]
        if end is not None:
            items = [s for s in items if s.clock_in_time <= end]
        if user_ids is not None:
            items = [s for s in items if s.user_id in user_ids]
        if locations is not None:
            items = [s for s in items if s.location in locations]
        return sorted(items, key=lambda s: (s.clock_in_time, s.shift_id), reverse=True)

    def any_at_location(self, location):
        return any(s.location == location for s in self.shifts.values())

    def distinct_locations(self):
        return sorted({s.location for s in self.shifts.values() if s.location})


class FakeSettingsRepo:
    def __init__(self, settings: AppSettings | None = None):
        self.settings = settings

    def get(self):
        return self.settings

    def save(self, settings):
        self.settings = settings


class FakeResidentRepo:
    def __init__(self):
        self._ids = _Ids()
        self.residents: dict[int, Resident] = {}

    def get_by_id(self, resident_id):
        return self.residents.get(int(resident_id))

    def list_all(self):
        return sorted(self.residents.values(), key=lambda r: r.name)

    def list_by_locations(self, locations):
        return [r for r in self.list_all() if r.location in locations]

    def create(self, *, name, location, dob, created_at, created_by):
        rid = self._ids.take()
        self.residents[rid] = Resident(
            resident_id=rid, name=name, location=location, dob=dob, created_at=created_at, created_by=created_by
        )
        return rid

    def any_at_location(self, location):
        return any(r.location == location for r in self.residents.values())


class FakeGuardianRepo:
    def __init__(self):
        self._ids = _Ids()
        self.guardians: dict[int, Guardian] = {}

    def get_by_id(self, guardian_id):
        return self.guardians.get(int(guardian_id))

    def list_all(self, *, resident_id=None):
        items = list(self.guardians.values())
        if resident_id is not None:
            items = [g for g in items if g.resident_id == resident_id]
        return items

    def create(self, *, name, phone, email, resident_id, relationship, address, created_at, created_by):
        gid = self._ids.take()
        self.guardians[gid] = Guardian(
            guardian_id=gid,
            name=name,
            phone=phone,
            email=email,
            resident_id=resident_id,
            relationship=relationship,
            address=address,
            created_at=created_at,
            created_by=created_by,
        )
        return gid

    def update(self, guardian_id, **fields):
        guardian = self.guardians.get(int(guardian_id))
        if not guardian:
            return False
        self.guardians[guardian.guardian_id] = dataclasses.replace(guardian, **fields)
        return True

    def delete(self, guardian_id):
        return self.guardians.pop(int(guardian_id), None) is not None


class FakeIspRepo:
    def __init__(self):
        self._ids = _Ids()
        self.isps: dict[int, Isp] = {}

    def get_by_id(self, isp_id):
        return self.isps.get(int(isp_id))

    def get_latest_for_resident(self, resident_id):
        items = self.list_for_resident(resident_id)
        return items[0] if items else None

    def list_for_resident(self, resident_id):
        items = [i for i in self.isps.values() if i.resident_id == int(resident_id)]
        return sorted(items, key=lambda i: (i.version, i.isp_id), reverse=True)

    def list_for_residents(self, resident_ids):
        items = [i for i in self.isps.values() if i.resident_id in set(resident_ids)]
        return sorted(items, key=lambda i: (i.created_at, i.isp_id), reverse=True)

    def create(self, *, resident_id, version, content, goals, created_at, created_by):
        iid = self._ids.take()
        self.isps[iid] = Isp(
            isp_id=iid,
            resident_id=resident_id,
            version=version,
            content=content,
            goals=tuple(goals),
            created_at=created_at,
            created_by=created_by,
        )
        return iid

    def mark_published(self, isp_id, *, published_at, published_by, due_at):
        isp = self.isps[int(isp_id)]
        self.isps[isp.isp_id] = dataclasses.replace(
            isp, published=True, published_at=published_at, published_by=published_by, due_at=due_at
        )
        return True

    def set_due_at(self, isp_id, *, due_at):
        isp = self.isps.get(int(isp_id))
        if not isp:
            return False
        self.isps[isp.isp_id] = dataclasses.replace(isp, due_at=due_at)
        return True


class FakeAckRepo:
    def __init__(self):
        self._ids = _Ids()
        self.acks: dict[int, IspAcknowledgment] = {}

    def find(self, *, user_id, isp_id):
        return next((a for a in self.acks.values() if a.user_id == user_id and a.isp_id == isp_id), None)

    def create(self, *, resident_id, user_id, isp_id, acknowledged_at):
        aid = self._ids.take()
        self.acks[aid] = IspAcknowledgment(
            ack_id=aid, resident_id=resident_id, user_id=user_id, isp_id=isp_id, acknowledged_at=acknowledged_at
        )
        return aid

    def list_for_resident(self, resident_id):
        return [a for a in self.acks.values() if a.resident_id == int(resident_id)]

    def list_for_user(self, user_id):
        return [a for a in self.acks.values() if a.user_id == int(user_id)]

    def list_for_isps(self, isp_ids):
        return [a for a in self.acks.values() if a.isp_id in set(isp_ids)]


class FakeLogRepo:
    def __init__(self):
        self._ids = _Ids()
        self.logs: dict[int, ResidentLog] = {}

    def get_by_id(self, log_id):
        return self.logs.get(int(log_id))

    def max_version(self, resident_id):
        return max((l.version for l in self.logs.values() if l.resident_id == resident_id), default=0)

    def create(self, *, resident_id, author_id, version, template, content, location, created_at):
        lid = self._ids.take()
        self.logs[lid] = ResidentLog(
            log_id=lid,
            resident_id=resident_id,
            author_id=author_id,
            version=version,
            template=template,
            content=content,
            location=location,
            created_at=created_at,
        )
        return lid

    def _newest_first(self, items):
        return sorted(items, key=lambda l: (l.created_at, l.log_id), reverse=True)

    def list_for_resident(self, resident_id, *, limit=None):
        items = self._newest_first(l for l in self.logs.values() if l.resident_id == resident_id)
        return items[:limit] if limit else items

    def list_recent(self, *, limit, since=None):
        items = self._newest_first(self.logs.values())
        if since is not None:
            items = [l for l in items if l.created_at >= since]
        return items[:limit]

    def list_between(self, *, start=None, end=None, author_ids=None):
        items = self._newest_first(self.logs.values())
        if start is not None:
            items = [l for l in items if l.created_at >= start]
        if end is not None:
            items = [l for l in items if l.created_at <= end]
        if author_ids is not None:
            items = [l for l in items if l.author_id in author_ids]
        return items


class FakeKioskRepo:
    def __init__(self):
        self._ids = _Ids()
        self.kiosks: dict[int, Kiosk] = {}

    def get_by_id(self, kiosk_id):
        return self.kiosks.get(int(kiosk_id))

    def get_by_device_id(self, device_id):
        return next((k for k in self.kiosks.values() if k.device_id == device_id), None)

    def list_all(self):
        return sorted(self.kiosks.values(), key=lambda k: k.kiosk_id, reverse=True)

    def create(self, *, device_id, location, name, device_label, status, registered_by, created_at):
        kid = self._ids.take()
        self.kiosks[kid] = Kiosk(
            kiosk_id=kid,
            device_id=device_id,
            location=location,
            name=name,
            device_label=device_label,
            status=status,
            registered_at=created_at,
            registered_by=registered_by,
            created_at=created_at,
        )
        return kid

    def update(self, kiosk_id, **fields):
        kiosk = self.kiosks.get(int(kiosk_id))
        if not kiosk or not fields:
            return False
        self.kiosks[kiosk.kiosk_id] = dataclasses.replace(kiosk, **fields)
        return True

    def delete(self, kiosk_id):
        return self.kiosks.pop(int(kiosk_id), None) is not None

    def any_at_location(self, location):
        return any(k.location == location for k in self.kiosks.values())


class FakePairingRepo:
    def __init__(self):
        self._ids = _Ids()
        self.tokens: dict[int, PairingToken] = {}

    def get_by_token(self, token):
        return next((t for t in self.tokens.values() if t.token == token), None)

    def list_by_status(self, status):
        return [t for t in self.tokens.values() if t.status == status]

    def create(self, *, token, location, device_label, issued_by, issued_at, expires_at):
        pid = self._ids.take()
        self.tokens[pid] = PairingToken(
            pairing_id=pid,
            token=token,
            location=location,
            status=PairingStatus.ACTIVE,
            issued_by=issued_by,
            issued_at=issued_at,
            expires_at=expires_at,
            device_label=device_label,
        )
        return pid

    def mark_used(self, pairing_id, *, device_id, used_at):
        self.tokens[pairing_id] = dataclasses.replace(
            self.tokens[pairing_id], status=PairingStatus.USED, device_id=device_id, used_at=used_at
        )
        return True

    def mark_expired(self, pairing_ids):
        for pid in pairing_ids:
            self.tokens[pid] = dataclasses.replace(self.tokens[pid], status=PairingStatus.EXPIRED)
        return len(pairing_ids)


class FakeDeviceRepo:
    def __init__(self):
        self._ids = _Ids()
        self.devices: dict[int, Device] = {}

    def get_by_id(self, id):
        return self.devices.get(int(id))

    def get_by_device_id(self, device_id):
        return next((d for d in self.devices.values() if d.device_id == device_id), None)

    def list_all(self, *, location=None):
        items = [d for d in self.devices.values() if location is None or d.location == location]
        return sorted(items, key=lambda d: (d.registered_at, d.id), reverse=True)

    def create(
        self, *, device_id, device_name, location, device_type, registered_by, registered_at, metadata=None, notes=None
    ):
        did = self._ids.take()
        self.devices[did] = Device(
            id=did,
            device_id=device_id,
            device_name=device_name,
            location=location,
            device_type=device_type,
            registered_by=registered_by,
            registered_at=registered_at,
            metadata=dict(metadata or {}),
            notes=notes,
        )
        return did

    def update(self, id, **fields):
        device = self.devices.get(int(id))
        if not device or not fields:
            return False
        self.devices[device.id] = dataclasses.replace(device, **fields)
        return True

    def record_usage(self, id, *, user_id, at):
        return self.update(id, last_used_at=at, last_used_by=user_id)

    def delete(self, id):
        return self.devices.pop(int(id), None) is not None


class FakeLocationRepo:
    def __init__(self):
        self._ids = _Ids()
        self.locations: dict[int, Location] = {}

    def get_by_id(self, location_id):
        return self.locations.get(int(location_id))

    def get_by_name(self, name):
        return next((l for l in self.locations.values() if l.name == name), None)

    def list_all(self):
        return sorted(self.locations.values(), key=lambda l: l.name)

    def create(self, *, name, address, capacity, created_by, created_at):
        lid = self._ids.take()
        self.locations[lid] = Location(
            location_id=lid,
            name=name,
            address=address,
            capacity=capacity,
            status=LocationStatus.ACTIVE,
            created_by=created_by,
            created_at=created_at,
        )
        return lid

    def update(self, location_id, *, updated_at, **fields):
        location = self.locations.get(int(location_id))
        if not location:
            return False
        self.locations[location.location_id] = dataclasses.replace(location, updated_at=updated_at, **fields)
        return True

    def delete(self, location_id):
        return self.locations.pop(int(location_id), None) is not None


class FakeFireEvacRepo:
    def __init__(self):
        self._ids = _Ids()
        self.plans: dict[int, FireEvacPlan] = {}

    def list_for_resident(self, resident_id):
        items = [p for p in self.plans.values() if p.resident_id == int(resident_id)]
        return sorted(items, key=lambda p: (p.version, p.plan_id), reverse=True)

    def get_latest_for_resident(self, resident_id):
        items = self.list_for_resident(resident_id)
        return items[0] if items else None

    def create(self, plan):
        pid = self._ids.take()
        self.plans[pid] = dataclasses.replace(plan, plan_id=pid)
        return pid


class FakeAlertRepo:
    def __init__(self):
        self._ids = _Ids()
        self.alerts: dict[int, ComplianceAlert] = {}

    def get_by_id(self, alert_id):
        return self.alerts.get(int(alert_id))

    def list_active(self, *, locations=None):
        items = [a for a in self.alerts.values() if a.active]
        if locations is not None:
            items = [a for a in items if a.location in locations]
        return sorted(items, key=lambda a: (a.created_at, a.alert_id), reverse=True)

    def find_active(self, *, alert_type, location, due_at, resident_id=None):
        for alert in self.alerts.values():
            if (alert.active, alert.alert_type, alert.location, alert.due_at, alert.resident_id) == (
                True,
                alert_type,
                location,
                due_at,
                resident_id,
            ):
                return alert
        return None

    def create(self, *, alert_type, title, description, location, due_at, created_at, resident_id=None):
        aid = self._ids.take()
        self.alerts[aid] = ComplianceAlert(
            alert_id=aid,
            alert_type=alert_type,
            title=title,
            description=description,
            location=location,
            due_at=due_at,
            created_at=created_at,
            resident_id=resident_id,
        )
        return aid

    def dismiss(self, alert_id, *, dismissed_by, dismissed_at):
        alert = self.alerts.get(int(alert_id))
        if not alert or not alert.active:
            return False
        self.alerts[alert.alert_id] = dataclasses.replace(
            alert, active=False, dismissed_by=dismissed_by, dismissed_at=dismissed_at
        )
        return True


class FakeTimeExceptionRepo:
    def __init__(self):
        self._ids = _Ids()
        self.reviews: dict[int, TimeExceptionReview] = {}

    def find(self, *, shift_id, kind):
        return next((r for r in self.reviews.values() if (r.shift_id, r.kind) == (shift_id, kind)), None)

    def list_for_shifts(self, shift_ids):
        return [r for r in self.reviews.values() if r.shift_id in set(shift_ids)]

    def create(self, *, shift_id, kind, status, decided_by, decided_at, reason=None):
        rid = self._ids.take()
        self.reviews[rid] = TimeExceptionReview(
            review_id=rid,
            shift_id=shift_id,
            kind=kind,
            status=status,
            decided_by=decided_by,
            decided_at=decided_at,
            reason=reason,
        )
        return rid


@dataclass
class World:
    """In-memory repositories plus the services wired on top of them."""

    users: FakeUserRepo
    roles: FakeRoleRepo
    employees: FakeEmployeeRepo
    resets: FakeResetRepo
    audit: FakeAuditRepo
    shifts: FakeShiftRepo
    settings: FakeSettingsRepo
    residents: FakeResidentRepo
    guardians: FakeGuardianRepo
    isps: FakeIspRepo
    acks: FakeAckRepo
    logs: FakeLogRepo
    kiosks: FakeKioskRepo
    pairing_tokens: FakePairingRepo
    devices: FakeDeviceRepo
    locations: FakeLocationRepo
    fire_evac_plans: FakeFireEvacRepo
    alerts: FakeAlertRepo
    time_exception_reviews: FakeTimeExceptionRepo
    container: Container

    def add_user(
        self,
        name: str,
        role: Role | None,
        locations=(),
        *,
        email: str | None = None,
        password: str = "password123",
        device_id: str | None = None,
    ) -> int:
        email = email or f"{name.lower().replace(' ', '.')}@example.com"
        uid = self.users.create_user(
            name=name, email=email, password_hash=generate_password_hash(password), created_at=FIXED_NOW
        )
        if role is not None:
            self.roles.upsert(user_id=uid, role=role, locations=list(locations), assigned_by=None, assigned_at=FIXED_NOW)
        eid = self.employees.create(
            name=name,
            work_email=email,
            role=role,
            locations=list(locations),
            created_at=FIXED_NOW,
            created_by=None,
            user_id=uid,
            has_accepted_invite=True,
        )
        if device_id:
            emp = self.employees.employees[eid]
            self.employees.employees[eid] = dataclasses.replace(emp, assigned_device_id=device_id)
        return uid

    def add_resident(self, name: str, location: str) -> int:
        return self.residents.create(name=name, location=location, dob=None, created_at=FIXED_NOW, created_by=None)

    def add_kiosk(self, device_id: str, location: str, status: KioskStatus = KioskStatus.ACTIVE) -> int:
        return self.kiosks.create(
            device_id=device_id,
            location=location,
            name=f"Kiosk {device_id[:8]}",
            device_label=None,
            status=status,
            registered_by=None,
            created_at=FIXED_NOW,
        )

    def add_shift(
        self, user_id: int, location: str, clock_in_time: datetime, clock_out_time: datetime | None = None
    ) -> int:
        sid = self.shifts.create(user_id=user_id, location=location, clock_in_time=clock_in_time, device_id="web")
        if clock_out_time is not None:
            self.shifts.close(sid, clock_out_time=clock_out_time)
        return sid


def build_world() -> World:
    repos = dict(
        users=FakeUserRepo(),
        roles=FakeRoleRepo(),
        employees=FakeEmployeeRepo(),
        resets=FakeResetRepo(),
        audit=FakeAuditRepo(),
        shifts=FakeShiftRepo(),
        settings=FakeSettingsRepo(),
        residents=FakeResidentRepo(),
        guardians=FakeGuardianRepo(),
        isps=FakeIspRepo(),
        acks=FakeAckRepo(),
        logs=FakeLogRepo(),
        kiosks=FakeKioskRepo(),
        pairing_tokens=FakePairingRepo(),
        devices=FakeDeviceRepo(),
        locations=FakeLocationRepo(),
        fire_evac_plans=FakeFireEvacRepo(),
        alerts=FakeAlertRepo(),
        time_exception_reviews=FakeTimeExceptionRepo(),
    )
    wiring = dict(repos)
    wiring["audit_entries"] = wiring.pop("audit")
    container = wire_services(conn=None, **wiring)
    return World(container=container, **repos)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def world() -> World:
    return build_world()


@pytest.fixture
def people(world):
    """One user per role: admin everywhere, supervisor and staff at Maple House."""
    return {
        "admin": world.add_user("Ada Admin", Role.ADMIN),
        "supervisor": world.add_user("Sam Super", Role.SUPERVISOR, ["Maple House"]),
        "staff": world.add_user("Stu Staff", Role.STAFF, ["Maple House"]),
        "other_staff": world.add_user("Cara Cedar", Role.STAFF, ["Cedar House"]),
    }
