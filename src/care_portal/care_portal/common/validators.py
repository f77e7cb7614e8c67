from __future__ import annotations

import re
from collections.abc import Mapping

from ..core.enums import Role
from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: str | None, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str | None, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters long")
    return value


def normalize_email(value: str | None) -> str:
    email = require_non_empty(value, "Email").lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("Invalid email address")
    return email


def parse_role(value: str | None) -> Role:
    try:
        return Role((value or "").strip().lower())
    except ValueError:
        raise ValidationError("Role must be one of admin, supervisor, staff")



def require_mapping(value, field_name: str) -> dict:
    if not isinstance(value, Mapping):
        raise ValidationError(f"{field_name} must be an object")
    return dict(value)


def clean_string_list(values, field_name: str) -> list[str]:
    """Trim and drop blanks; anything but a list of strings is rejected."""
    if values is None:
        return []
    if not isinstance(values, (list, tuple)):
        raise ValidationError(f"{field_name} must be a list")
    out: list[str] = []
    for v in values:
        if not isinstance(v, str):
            raise ValidationError(f"{field_name} must be a list of strings")
        if v.strip():
            out.append(v.strip())
    return out


def clean_locations(values) -> list[str]:
    """Trim, drop blanks and de-duplicate while keeping order."""
    out: list[str] = []
    for name in clean_string_list(values, "Locations"):
        if name not in out:
            out.append(name)
    return out
