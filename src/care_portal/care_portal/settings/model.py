from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_ALERT_HOUR, DEFAULT_ALERT_MINUTE, DEFAULT_ALERT_WEEKDAY


@dataclass(frozen=True)
class AppSettings:
    """Single-row application configuration."""

    compliance_reminder_template: str = ""
    guardian_invite_template: str = ""
    alert_weekday: int = DEFAULT_ALERT_WEEKDAY
    alert_hour: int = DEFAULT_ALERT_HOUR
    alert_minute: int = DEFAULT_ALERT_MINUTE
    selfie_enforced: bool = False

    def to_dict(self) -> dict:
        return {
            "compliance_reminder_template": self.compliance_reminder_template,
            "guardian_invite_template": self.guardian_invite_template,
            "alert_weekday": self.alert_weekday,
            "alert_hour": self.alert_hour,
            "alert_minute": self.alert_minute,
            "selfie_enforced": self.selfie_enforced,
        }
