"""Domain models for food logging."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from nutrilog.domain.foods import FoodRecord


@dataclass(frozen=True)
class LogEntry:
    """A single act of recording consumption."""

    id: UUID
    user_id: UUID
    food_id: UUID
    quantity: float
    unit: str
    logged_at: datetime
    logged_date: date
    deleted_at: datetime | None = None


@dataclass(frozen=True)
class NewLogEntry:
    """Log entry data ready to be inserted."""

    user_id: UUID
    food_id: UUID
    quantity: float
    unit: str
    logged_at: datetime
    logged_date: date


@dataclass(frozen=True)
class RecentFood:
    """Food recently used by a user."""

    food: FoodRecord
    use_count: int
    last_used: datetime | None


@dataclass(frozen=True)
class StreakResult:
    """Derived logging streak, recomputed on every read."""

    streak: int
    most_recent_date: date | None


@dataclass(frozen=True)
class NutritionSettings:
    """Per-user logging preferences."""

    timezone: str = "UTC"
    logging_start_hour: int = 6
    logging_end_hour: int = 22
