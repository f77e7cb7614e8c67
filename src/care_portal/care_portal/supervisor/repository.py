from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ReviewStatus, TimeExceptionKind
from .model import TimeExceptionReview


class TimeExceptionReviewRepository(Protocol):
    def find(self, *, shift_id: int, kind: TimeExceptionKind) -> Optional[TimeExceptionReview]:
        raise NotImplementedError

    def list_for_shifts(self, shift_ids: Sequence[int]) -> Sequence[TimeExceptionReview]:
        raise NotImplementedError

    def create(
        self,
        *,
        shift_id: int,
        kind: TimeExceptionKind,
        status: ReviewStatus,
        decided_by: int,
        decided_at: datetime,
        reason: Optional[str] = None,
    ) -> int:
        raise NotImplementedError
