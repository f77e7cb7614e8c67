from __future__ import annotations

from typing import Optional, Protocol

from .model import AppSettings


class SettingsRepository(Protocol):
    def get(self) -> Optional[AppSettings]:
        """The stored row, or None before the first save."""
        raise NotImplementedError

    def save(self, settings: AppSettings) -> None:
        raise NotImplementedError
