"""User nutrition settings service."""

from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID

from nutrilog.domain.errors import InvalidInputError
from nutrilog.domain.logs import NutritionSettings
from nutrilog.services.timezones import LAST_HOUR, resolve_timezone


class UserSettingsRepository(Protocol):
    """Persistence interface for user settings."""

    def get_settings(self, user_id: UUID) -> NutritionSettings | None:
        """Return the user's settings if a row exists."""

    def save_settings(self, user_id: UUID, settings: NutritionSettings) -> None:
        """Create or update the user's settings."""


@dataclass
class UserSettingsService:
    """Service for user settings."""

    repository: UserSettingsRepository
    default_timezone: str = "UTC"

    def get_settings(self, user_id: UUID) -> NutritionSettings:
        """Return stored settings, or defaults when none exist."""
        stored = self.repository.get_settings(user_id)
        if stored is None:
            return NutritionSettings(timezone=self.default_timezone)
        return stored

    def get_timezone(self, user_id: UUID) -> str:
        """Return the user timezone or the default if unset."""
        return self.get_settings(user_id).timezone or self.default_timezone

    def set_timezone(self, user_id: UUID, timezone: str) -> NutritionSettings:
        """Persist a user's timezone."""
        return self.update_settings(user_id, timezone=timezone)

    def set_logging_hours(
        self, user_id: UUID, start_hour: int, end_hour: int
    ) -> NutritionSettings:
        """Persist the hours during which the user usually logs food."""
        return self.update_settings(
            user_id, logging_start_hour=start_hour, logging_end_hour=end_hour
        )

    def update_settings(
        self,
        user_id: UUID,
        timezone: str | None = None,
        logging_start_hour: int | None = None,
        logging_end_hour: int | None = None,
    ) -> NutritionSettings:
        """Apply a partial update, saving only when every field is valid.

        Omitted hours keep their stored values.
        """
        current = self.get_settings(user_id)
        if timezone is not None:
            resolve_timezone(timezone)
        start_hour = (
            logging_start_hour
            if logging_start_hour is not None
            else current.logging_start_hour
        )
        end_hour = (
            logging_end_hour
            if logging_end_hour is not None
            else current.logging_end_hour
        )
        if not 0 <= start_hour < end_hour <= LAST_HOUR:
            raise InvalidInputError("Logging hours must satisfy 0 <= start < end <= 23")
        updated = replace(
            current,
            timezone=timezone if timezone is not None else current.timezone,
            logging_start_hour=start_hour,
            logging_end_hour=end_hour,
        )
        self.repository.save_settings(user_id, updated)
        return updated
