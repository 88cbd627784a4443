"""Food log writer."""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from nutrilog.domain.errors import InvalidInputError, NotFoundError
from nutrilog.domain.logs import LogEntry, NewLogEntry, RecentFood
from nutrilog.services.catalog import CatalogService
from nutrilog.services.foods import FoodRecordResolver
from nutrilog.services.streaks import LogDateRepository
from nutrilog.services.timezones import local_date, logged_at_for
from nutrilog.services.user_settings import UserSettingsService

_logger = logging.getLogger(__name__)


class FoodLogRepository(LogDateRepository, Protocol):
    """Persistence interface for food log entries.

    Every read excludes soft-deleted entries and is scoped to ``user_id``.
    """

    def create_entry(self, entry: NewLogEntry) -> LogEntry:
        """Insert a log entry and return it."""

    def get_entry(self, user_id: UUID, entry_id: UUID) -> LogEntry | None:
        """Return a non-deleted entry owned by the user, if present."""

    def list_entries(self, user_id: UUID, day: date) -> list[LogEntry]:
        """Return entries for a calendar date ordered by logged_at."""

    def soft_delete_entry(
        self, user_id: UUID, entry_id: UUID, deleted_at: datetime
    ) -> None:
        """Mark an entry as deleted."""

    def record_recent_use(
        self, user_id: UUID, food_id: UUID, used_at: datetime
    ) -> None:
        """Increment the recent-use counter for a food."""

    def list_recent_foods(self, user_id: UUID, limit: int) -> list[RecentFood]:
        """Return recently used foods, most recent first."""


@dataclass
class FoodLogService:
    """Writes dated log entries that reference canonical food records."""

    repository: FoodLogRepository
    resolver: FoodRecordResolver
    catalog: CatalogService
    user_settings: UserSettingsService

    def resolve_logged_at(
        self,
        user_id: UUID,
        logged_at: datetime | None = None,
        logged_date: date | None = None,
        hour: int | None = None,
    ) -> datetime:
        """Return the instant an entry counts for.

        An explicit ``logged_at`` is returned as-is. A bare ``logged_date`` is
        placed at ``hour`` local time, defaulting to the user's logging start
        hour.
        """
        if logged_at is not None:
            return logged_at
        if logged_date is None:
            return datetime.now(tz=UTC)
        settings = self.user_settings.get_settings(user_id)
        return logged_at_for(
            logged_date,
            hour if hour is not None else settings.logging_start_hour,
            settings.timezone,
        )

    def log_food(  # noqa: PLR0913
        self,
        user_id: UUID,
        food_id: UUID,
        quantity: float,
        unit: str,
        logged_at: datetime,
        logged_date: date | None = None,
    ) -> LogEntry:
        """Persist a log entry for an existing food record."""
        cleaned_unit, expected_date = self._checked_entry(
            user_id, quantity, unit, logged_at, logged_date
        )
        food = self.resolver.get_food(food_id)
        return self._write_entry(
            user_id, food.id, quantity, cleaned_unit, logged_at, expected_date
        )

    async def log_catalog_food(  # noqa: PLR0913
        self,
        user_id: UUID,
        external_id: int,
        quantity: float,
        unit: str,
        logged_at: datetime,
        logged_date: date | None = None,
    ) -> LogEntry:
        """Resolve a catalog selection and log it."""
        cleaned_unit, expected_date = self._checked_entry(
            user_id, quantity, unit, logged_at, logged_date
        )
        food = await self.resolver.resolve_by_external_id(external_id)
        return self._write_entry(
            user_id, food.id, quantity, cleaned_unit, logged_at, expected_date
        )

    async def log_barcode(  # noqa: PLR0913
        self,
        user_id: UUID,
        upc: str,
        quantity: float,
        unit: str,
        logged_at: datetime,
        logged_date: date | None = None,
    ) -> LogEntry:
        """Resolve a scanned barcode and log it."""
        self._checked_entry(user_id, quantity, unit, logged_at, logged_date)
        summary = await self.catalog.lookup_barcode(upc)
        return await self.log_catalog_food(
            user_id, summary.external_id, quantity, unit, logged_at, logged_date
        )

    def _checked_entry(  # noqa: PLR0913
        self,
        user_id: UUID,
        quantity: float,
        unit: str,
        logged_at: datetime,
        logged_date: date | None,
    ) -> tuple[str, date]:
        """Validate entry fields and return the cleaned unit and local date.

        Runs before any catalog lookup or food insert so that a rejected entry
        leaves no side effects behind.
        """
        cleaned_unit = _validated_quantity_and_unit(quantity, unit)
        timezone_name = self.user_settings.get_timezone(user_id)
        expected_date = local_date(logged_at, timezone_name)
        if logged_date is not None and logged_date != expected_date:
            raise InvalidInputError(
                f"logged_date {logged_date.isoformat()} does not match "
                f"{expected_date.isoformat()} in {timezone_name}"
            )
        return cleaned_unit, expected_date

    def _write_entry(  # noqa: PLR0913
        self,
        user_id: UUID,
        food_id: UUID,
        quantity: float,
        unit: str,
        logged_at: datetime,
        logged_date: date,
    ) -> LogEntry:
        entry = self.repository.create_entry(
            NewLogEntry(
                user_id=user_id,
                food_id=food_id,
                quantity=float(quantity),
                unit=unit,
                logged_at=logged_at.astimezone(UTC),
                logged_date=logged_date,
            )
        )
        try:
            self.repository.record_recent_use(
                user_id, food_id, used_at=datetime.now(tz=UTC)
            )
        except Exception as exc:  # noqa: BLE001
            # The entry is already stored; recent foods catch up on the next log.
            _logger.warning(
                "Failed to record recent food use: user_id=%s food_id=%s",
                user_id,
                food_id,
                exc_info=exc,
            )
        _logger.info(
            "Food logged: user_id=%s food_id=%s date=%s",
            user_id,
            food_id,
            logged_date.isoformat(),
        )
        return entry

    def list_day(self, user_id: UUID, day: date) -> list[LogEntry]:
        """Return the user's entries for a date."""
        return sorted(
            self.repository.list_entries(user_id, day),
            key=lambda entry: entry.logged_at,
        )

    def soft_delete(self, user_id: UUID, entry_id: UUID) -> None:
        """Mark one of the user's entries as deleted."""
        entry = self.repository.get_entry(user_id, entry_id)
        if entry is None:
            raise NotFoundError(f"Log entry {entry_id} does not exist")
        self.repository.soft_delete_entry(
            user_id, entry_id, deleted_at=datetime.now(tz=UTC)
        )

    def recent_foods(self, user_id: UUID, limit: int = 10) -> list[RecentFood]:
        """Return the user's recently used foods."""
        return self.repository.list_recent_foods(user_id, limit)


def _validated_quantity_and_unit(quantity: float, unit: str) -> str:
    if isinstance(quantity, bool) or not isinstance(quantity, int | float):
        raise InvalidInputError("Quantity must be a number")
    if not math.isfinite(quantity) or quantity <= 0:
        raise InvalidInputError("Quantity must be greater than zero")
    cleaned_unit = unit.strip() if isinstance(unit, str) else ""
    if not cleaned_unit:
        raise InvalidInputError("Unit must not be empty")
    return cleaned_unit
