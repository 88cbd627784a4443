"""Supabase repository for user nutrition settings."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from nutrilog.adapters.supabase_food_repository import UNIQUE_VIOLATION
from nutrilog.domain.logs import NutritionSettings
from nutrilog.services.user_settings import UserSettingsRepository


@dataclass
class SupabaseUserSettingsRepository(UserSettingsRepository):
    """Supabase implementation for ``nutrition_settings``."""

    client: Client

    def get_settings(self, user_id: UUID) -> NutritionSettings | None:
        """Return the stored settings for a user."""
        response = (
            self.client.table("nutrition_settings")
            .select("timezone, logging_start_hour, logging_end_hour")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        defaults = NutritionSettings()
        return NutritionSettings(
            timezone=row.get("timezone") or defaults.timezone,
            logging_start_hour=_int_or(
                row.get("logging_start_hour"), defaults.logging_start_hour
            ),
            logging_end_hour=_int_or(
                row.get("logging_end_hour"), defaults.logging_end_hour
            ),
        )

    def save_settings(self, user_id: UUID, settings: NutritionSettings) -> None:
        """Create the settings row, or update it when one already exists."""
        payload = {
            "timezone": settings.timezone,
            "logging_start_hour": settings.logging_start_hour,
            "logging_end_hour": settings.logging_end_hour,
            "updated_at": datetime.now(tz=UTC).isoformat(),
        }
        if self.get_settings(user_id) is None:
            try:
                self.client.table("nutrition_settings").insert(
                    {"user_id": str(user_id), **payload}
                ).execute()
            except APIError as exc:
                if exc.code != UNIQUE_VIOLATION:
                    raise
            else:
                return
        self.client.table("nutrition_settings").update(payload).eq(
            "user_id", str(user_id)
        ).execute()


def _int_or(value: object, default: int) -> int:
    if value is None:
        return default
    return int(value)
