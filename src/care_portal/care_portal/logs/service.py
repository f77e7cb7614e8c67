from __future__ import annotations

import copy
import json
import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Mapping, Optional, Sequence

from ..access.guard import AccessGuard
from ..audit.service import AuditService
from ..common.datetime_utils import fmt_datetime, now_local, parse_iso_datetime
from ..common.validators import require_mapping, require_non_empty
from ..core.constants import (
    DEFAULT_ADMIN_LOG_LIMIT,
    DEFAULT_LOG_LIMIT,
    DEFAULT_RESIDENT_LOG_LIMIT,
    RECENT_LOG_DAYS,
)
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..isp.service import IspService
from ..residents.model import Resident
from ..residents.repository import ResidentRepository
from ..residents.service import visible_residents
from ..users.model import RoleAssignment
from ..users.repository import RoleRepository, UserRepository
from .model import ResidentLog
from .repository import ResidentLogRepository
from .templates import LOG_TEMPLATES

logger = logging.getLogger(__name__)


def _content_from(fields: Optional[Mapping], content: Optional[str]) -> str:
    if fields is not None:
        values = require_mapping(fields, "Fields")
        if values:
            return json.dumps(values, ensure_ascii=False)
    return require_non_empty(content, "Content")


class ResidentLogService:
    """Versioned case logs, gated by ISP acknowledgment."""

    def __init__(
        self,
        logs: ResidentLogRepository,
        residents: ResidentRepository,
        users: UserRepository,
        roles: RoleRepository,
        isps: IspService,
        guard: AccessGuard,
        audit: AuditService,
    ):
        self._logs = logs
        self._residents = residents
        self._users = users
        self._roles = roles
        self._isps = isps
        self._guard = guard
        self._audit = audit

    def _author_names(self) -> dict[int, str]:
        return {u.user_id: u.display_name for u in self._users.list_all()}

    def _enrich(self, logs: Sequence[ResidentLog], residents: Mapping[int, Resident]) -> list[dict]:
        names = self._author_names()
        out: list[dict] = []
        for log in logs:
            resident = residents.get(log.resident_id)
            out.append(
                {
                    "id": log.log_id,
                    "resident_id": log.resident_id,
                    "resident_name": resident.name if resident else "Unknown Resident",
                    "resident_location": resident.location if resident else "Unknown Location",
                    "author_id": log.author_id,
                    "author_name": names.get(log.author_id, "Unknown User"),
                    "version": log.version,
                    "template": log.template,
                    "content": log.content,
                    "created_at": fmt_datetime(log.created_at),
                }
            )
        return out

    def _scoped(self, role: RoleAssignment, logs: Sequence[ResidentLog]) -> tuple[list[ResidentLog], dict[int, Resident]]:
        residents = {r.resident_id: r for r in visible_residents(self._residents, role)}
        if role.is_admin:
            return list(logs), residents
        return [log for log in logs if log.resident_id in residents], residents

    def _resident_for(self, role: RoleAssignment, resident_id: int, denied_message: str) -> Resident:
        resident = self._residents.get_by_id(int(resident_id))
        if not resident:
            raise NotFoundError("Resident not found")
        if not self._guard.can_access_location(role, resident.location):
            raise AuthorizationError(denied_message)
        return resident

    def create_resident_log(
        self,
        *,
        user_id: Optional[int],
        resident_id: int,
        template: str,
        fields: Optional[Mapping] = None,
        content: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        role = self._guard.require_care_access(user_id)
        resident = self._resident_for(role, resident_id, "Access denied to create logs for this resident")
        template = require_non_empty(template, "Template")
        body = _content_from(fields, content)

        if not self._isps.can_log_for_resident(user_id=user_id, resident_id=resident.resident_id):
            raise ValidationError("Must acknowledge ISP before logging")

        version = self._logs.max_version(resident.resident_id) + 1
        now = now or now_local()
        log_id = self._logs.create(
            resident_id=resident.resident_id,
            author_id=int(user_id),
            version=version,
            template=template,
            content=body,
            location=resident.location,
            created_at=now,
        )
        self._audit.log(
            "create_resident_log",
            user_id=int(user_id),
            details=f"residentId={resident.resident_id},template={template},version={version}",
            location=resident.location,
            now=now,
        )
        return log_id

    def edit_resident_log(
        self,
        *,
        user_id: Optional[int],
        log_id: int,
        fields: Optional[Mapping] = None,
        content: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        self._guard.require_care_access(user_id)
        original = self._logs.get_by_id(int(log_id))
        if not original:
            raise NotFoundError("Log not found")
        if original.author_id != int(user_id):
            raise AuthorizationError("Not your log")
        resident = self._residents.get_by_id(original.resident_id)
        if not resident:
            raise NotFoundError("Resident not found")
        body = _content_from(fields, content)

        version = self._logs.max_version(resident.resident_id) + 1
        now = now or now_local()
        new_id = self._logs.create(
            resident_id=resident.resident_id,
            author_id=int(user_id),
            version=version,
            template=original.template,
            content=body,
            location=resident.location,
            created_at=now,
        )
        self._audit.log(
            "edit_resident_log",
            user_id=int(user_id),
            details=f"residentId={resident.resident_id},logId={original.log_id},version={version}",
            location=resident.location,
            now=now,
        )
        return new_id

    def list_resident_logs(self, *, user_id: Optional[int], resident_id: int) -> list[dict]:
        role = self._guard.require_care_access(user_id)
        resident = self._resident_for(role, resident_id, "Access denied to this resident's logs")
        logs = self._logs.list_for_resident(resident.resident_id)
        return self._enrich(logs, {resident.resident_id: resident})

    def get_resident_logs(
        self,
        *,
        user_id: Optional[int],
        resident_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        role = self._guard.require_care_access(user_id)
        if resident_id is not None:
            resident = self._resident_for(role, resident_id, "Access denied to this resident's logs")
            logs = self._logs.list_for_resident(resident.resident_id, limit=int(limit or DEFAULT_RESIDENT_LOG_LIMIT))
            return self._enrich(logs, {resident.resident_id: resident})

        logs, residents = self._scoped(role, self._logs.list_recent(limit=int(limit or DEFAULT_LOG_LIMIT)))
        return self._enrich(logs, residents)

    def get_recent_logs_summary(self, *, user_id: Optional[int], now: Optional[datetime] = None) -> dict:
        role = self._guard.require_care_access(user_id)
        since = (now or now_local()) - timedelta(days=RECENT_LOG_DAYS)
        logs, residents = self._scoped(role, self._logs.list_recent(limit=DEFAULT_LOG_LIMIT, since=since))

        by_location: Counter = Counter()
        by_template: Counter = Counter()
        for log in logs:
            resident = residents.get(log.resident_id) or self._residents.get_by_id(log.resident_id)
            if resident:
                by_location[resident.location] += 1
            if log.template:
                by_template[log.template] += 1

        return {
            "total_logs": len(logs),
            "logs_by_location": dict(by_location),
            "logs_by_template": dict(by_template),
            "my_logs": sum(1 for log in logs if log.author_id == int(user_id)),
        }

    def search_logs(
        self,
        *,
        user_id: Optional[int],
        query: str = "",
        resident_id: Optional[int] = None,
        template: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        role = self._guard.require_care_access(user_id)
        try:
            start = parse_iso_datetime(date_from)
            end = parse_iso_datetime(date_to)
        except ValueError:
            raise ValidationError("Invalid date filter")

        logs, residents = self._scoped(role, self._logs.list_recent(limit=int(limit or DEFAULT_LOG_LIMIT)))
        if resident_id is not None:
            logs = [log for log in logs if log.resident_id == int(resident_id)]
        if template:
            logs = [log for log in logs if log.template == template]
        if start:
            logs = [log for log in logs if log.created_at >= start]
        if end:
            logs = [log for log in logs if log.created_at <= end]

        term = (query or "").strip().lower()
        if term:
            logs = [
                log
                for log in logs
                if term in log.content.lower() or (log.template and term in log.template.lower())
            ]

        if role.is_admin:
            missing = {log.resident_id for log in logs} - set(residents)
            for rid in missing:
                resident = self._residents.get_by_id(rid)
                if resident:
                    residents[rid] = resident
        return self._enrich(logs, residents)

    def get_log_templates(self, *, user_id: Optional[int]) -> list[dict]:
        self._guard.require_care_access(user_id)
        return copy.deepcopy(LOG_TEMPLATES)

    def get_recent_logs_for_admin(self, *, actor_id: Optional[int], limit: int = DEFAULT_ADMIN_LOG_LIMIT) -> list[dict]:
        self._guard.require_admin(actor_id)
        logs = self._logs.list_recent(limit=int(limit))
        residents = {r.resident_id: r for r in self._residents.list_all()}
        roles = {r.user_id: r.role.value for r in self._roles.list_all()}
        out = self._enrich(logs, residents)
        for item in out:
            item["author_role"] = roles.get(item["author_id"], "unknown")
        return out
