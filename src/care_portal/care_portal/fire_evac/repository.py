from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import FireEvacPlan


class FireEvacRepository(Protocol):
    def get_latest_for_resident(self, resident_id: int) -> Optional[FireEvacPlan]:
        raise NotImplementedError

    def list_for_resident(self, resident_id: int) -> Sequence[FireEvacPlan]:
        """Highest version first."""
        raise NotImplementedError

    def create(self, plan: FireEvacPlan) -> int:
        """Insert `plan`; its `plan_id` is ignored."""
        raise NotImplementedError
