from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ResidentLog:
    """A case note. Edits never overwrite: they add a row with the next version."""

    log_id: int
    resident_id: int
    author_id: Optional[int]
    version: int
    template: Optional[str]
    content: str
    location: Optional[str]
    created_at: datetime
