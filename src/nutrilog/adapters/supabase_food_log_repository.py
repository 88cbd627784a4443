"""Supabase repository for food log entries."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from nutrilog.adapters.supabase_food_repository import parse_food
from nutrilog.domain.logs import LogEntry, NewLogEntry, RecentFood
from nutrilog.services.food_logs import FoodLogRepository

_LOG_COLUMNS = (
    "id, user_id, food_id, quantity, unit, logged_at, logged_date, deleted_at"
)


@dataclass
class SupabaseFoodLogRepository(FoodLogRepository):
    """Supabase implementation for ``food_logs`` and ``recent_foods``."""

    client: Client

    def create_entry(self, entry: NewLogEntry) -> LogEntry:
        """Create a log entry row and return it."""
        response = (
            self.client.table("food_logs")
            .insert(
                {
                    "user_id": str(entry.user_id),
                    "food_id": str(entry.food_id),
                    "quantity": entry.quantity,
                    "unit": entry.unit,
                    "logged_at": entry.logged_at.isoformat(),
                    "logged_date": entry.logged_date.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create food log")
        return _parse_entry(response.data[0])

    def get_entry(self, user_id: UUID, entry_id: UUID) -> LogEntry | None:
        """Return a non-deleted entry owned by the user."""
        response = (
            self.client.table("food_logs")
            .select(_LOG_COLUMNS)
            .eq("id", str(entry_id))
            .eq("user_id", str(user_id))
            .is_("deleted_at", "null")
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def list_entries(self, user_id: UUID, day: date) -> list[LogEntry]:
        """Return non-deleted entries for a date."""
        response = (
            self.client.table("food_logs")
            .select(_LOG_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("logged_date", day.isoformat())
            .is_("deleted_at", "null")
            .order("logged_at", desc=False)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]

    def list_log_dates(self, user_id: UUID, since: date | None = None) -> set[date]:
        """Return distinct logged dates, excluding soft-deleted entries."""
        query = (
            self.client.table("food_logs")
            .select("logged_date")
            .eq("user_id", str(user_id))
            .is_("deleted_at", "null")
        )
        if since is not None:
            query = query.gte("logged_date", since.isoformat())
        response = query.execute()
        return {
            date.fromisoformat(str(row["logged_date"]))
            for row in response.data or []
            if row.get("logged_date")
        }

    def soft_delete_entry(
        self, user_id: UUID, entry_id: UUID, deleted_at: datetime
    ) -> None:
        """Mark an entry as deleted."""
        self.client.table("food_logs").update(
            {
                "deleted_at": deleted_at.isoformat(),
                "updated_at": deleted_at.isoformat(),
            }
        ).eq("id", str(entry_id)).eq("user_id", str(user_id)).execute()

    def record_recent_use(
        self, user_id: UUID, food_id: UUID, used_at: datetime
    ) -> None:
        """Increment usage counters via the database function."""
        self.client.rpc(
            "increment_recent_food_use_count",
            {"p_user_id": str(user_id), "p_food_id": str(food_id)},
        ).execute()

    def list_recent_foods(self, user_id: UUID, limit: int) -> list[RecentFood]:
        """Return recently used foods for a user."""
        response = (
            self.client.table("recent_foods")
            .select("use_count, last_used, foods(*)")
            .eq("user_id", str(user_id))
            .order("last_used", desc=True)
            .limit(limit)
            .execute()
        )
        recent = []
        for row in response.data or []:
            food_row = row.get("foods")
            if not isinstance(food_row, dict):
                continue
            recent.append(
                RecentFood(
                    food=parse_food(food_row),
                    use_count=int(row.get("use_count") or 0),
                    last_used=_parse_timestamp(row.get("last_used")),
                )
            )
        return recent


def _parse_timestamp(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def _parse_entry(row: dict[str, object]) -> LogEntry:
    return LogEntry(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        food_id=UUID(str(row["food_id"])),
        quantity=float(row.get("quantity", 0.0)),
        unit=str(row.get("unit", "")),
        logged_at=datetime.fromisoformat(str(row["logged_at"])),
        logged_date=date.fromisoformat(str(row["logged_date"])),
        deleted_at=_parse_timestamp(row.get("deleted_at")),
    )
