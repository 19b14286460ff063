from __future__ import annotations

from typing import Optional, Protocol

from .model import AppSettings


class SettingsRepository(Protocol):
    def get(self) -> Optional[AppSettings]:
        """The singleton row, or None when it was never created."""

        raise NotImplementedError

    def save(self, settings: AppSettings) -> None:
        """Insert or replace the singleton row."""

        raise NotImplementedError
