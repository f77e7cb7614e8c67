from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Isp:
    """One version of a resident's Individual Service Plan.

    Versions only move forward: draft (published=False) -> published. A
    resident's current ISP is always the highest version.
    """

    isp_id: int
    resident_id: int
    version: int
    content: str = ""
    goals: tuple[str, ...] = ()
    published: bool = False
    created_at: Optional[datetime] = None
    created_by: Optional[int] = None
    published_at: Optional[datetime] = None
    published_by: Optional[int] = None
    due_at: Optional[datetime] = None


@dataclass(frozen=True)
class IspAcknowledgment:
    """A user confirmed reading one specific ISP version."""

    ack_id: int
    resident_id: int
    user_id: int
    isp_id: int
    acknowledged_at: datetime
