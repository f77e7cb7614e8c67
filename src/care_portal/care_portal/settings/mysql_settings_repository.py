from __future__ import annotations

from typing import Optional

from ..core.constants import DEFAULT_ALERT_HOUR, DEFAULT_ALERT_MINUTE, DEFAULT_ALERT_WEEKDAY
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import AppSettings
from .repository import SettingsRepository


def _or_default(value, default: int) -> int:
    return int(value) if value is not None else default


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self) -> Optional[AppSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT compliance_reminder_template, guardian_invite_template,
                       alert_weekday, alert_hour, alert_minute, selfie_enforced
                FROM app_config
                ORDER BY config_id
                LIMIT 1
                """
            )
            row = fetchone(cur)
            if not row:
                return None
            return AppSettings(
                compliance_reminder_template=row.get("compliance_reminder_template") or "",
                guardian_invite_template=row.get("guardian_invite_template") or "",
                alert_weekday=_or_default(row.get("alert_weekday"), DEFAULT_ALERT_WEEKDAY),
                alert_hour=_or_default(row.get("alert_hour"), DEFAULT_ALERT_HOUR),
                alert_minute=_or_default(row.get("alert_minute"), DEFAULT_ALERT_MINUTE),
                selfie_enforced=bool(row.get("selfie_enforced")),
            )

    def save(self, settings: AppSettings) -> None:
        values = (
            settings.compliance_reminder_template,
            settings.guardian_invite_template,
            settings.alert_weekday,
            settings.alert_hour,
            settings.alert_minute,
            1 if settings.selfie_enforced else 0,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT config_id FROM app_config ORDER BY config_id LIMIT 1")
            row = fetchone(cur)
            if row:
                cur.execute(
                    """
                    UPDATE app_config
                    SET compliance_reminder_template=%s, guardian_invite_template=%s,
                        alert_weekday=%s, alert_hour=%s, alert_minute=%s, selfie_enforced=%s
                    WHERE config_id=%s
                    """,
                    values + (row["config_id"],),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO app_config(compliance_reminder_template, guardian_invite_template,
                                           alert_weekday, alert_hour, alert_minute, selfie_enforced)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    values,
                )
