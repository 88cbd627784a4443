"""Logging streak calculation."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Protocol
from uuid import UUID

from nutrilog.domain.logs import StreakResult
from nutrilog.services.timezones import today_in
from nutrilog.services.user_settings import UserSettingsService

_ONE_DAY = timedelta(days=1)


class LogDateRepository(Protocol):
    """Read access to the calendar dates a user has logged food on."""

    def list_log_dates(self, user_id: UUID, since: date | None = None) -> set[date]:
        """Return distinct dates with at least one non-deleted entry."""


def compute_streak(dates: Iterable[date], today: date) -> StreakResult:
    """Return the run of consecutive logged days ending today or yesterday.

    If today has no entry the walk starts at yesterday, so an unlogged today
    does not break the streak. If neither today nor yesterday is logged the
    streak is 0 regardless of older history. Dates after ``today`` are ignored.
    """
    logged = {
        value.date() if isinstance(value, datetime) else value
        for value in dates
        if isinstance(value, date)
    }
    logged = {value for value in logged if value <= today}
    most_recent = max(logged) if logged else None

    expected = today if today in logged else today - _ONE_DAY
    streak = 0
    while expected in logged:
        streak += 1
        expected -= _ONE_DAY
    return StreakResult(streak=streak, most_recent_date=most_recent)


@dataclass
class StreakService:
    """Computes a user's current streak from their food log."""

    repository: LogDateRepository
    user_settings: UserSettingsService

    def compute_streak(
        self, user_id: UUID, now: datetime | None = None
    ) -> StreakResult:
        """Return the user's streak as of now in their timezone."""
        timezone_name = self.user_settings.get_timezone(user_id)
        today = today_in(timezone_name, now)
        dates = self.repository.list_log_dates(user_id)
        return compute_streak(dates, today)
