"""Pydantic models for nutrition API payloads."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ManualFoodRequest(BaseModel):
    """Manual food entry with per-100g nutrient facts."""

    description: str = Field(max_length=255)
    brand_name: str | None = Field(default=None, max_length=255)
    serving_size: float | None = None
    serving_unit: str | None = Field(default=None, max_length=50)
    calories_per_100g: float | None = None
    protein_per_100g: float | None = None
    fat_per_100g: float | None = None
    carbs_per_100g: float | None = None
    fiber_per_100g: float | None = None
    sugar_per_100g: float | None = None
    sodium_per_100g: float | None = None

    def nutrients(self) -> dict[str, float | None]:
        """Return nutrient values keyed by NutrientProfile field."""
        return {
            "calories": self.calories_per_100g,
            "protein_g": self.protein_per_100g,
            "fat_g": self.fat_per_100g,
            "carbs_g": self.carbs_per_100g,
            "fiber_g": self.fiber_per_100g,
            "sugar_g": self.sugar_per_100g,
            "sodium_mg": self.sodium_per_100g,
        }


class DerivedFoodRequest(BaseModel):
    """Absolute nutrient totals measured for a logged quantity."""

    description: str = Field(max_length=255)
    quantity: float
    nutrients: dict[str, float | None]
    fdc_id: int | None = None
    brand_name: str | None = Field(default=None, max_length=255)
    serving_size: float | None = None
    serving_unit: str | None = Field(default=None, max_length=50)


class LogTiming(BaseModel):
    """When a log entry happened.

    ``logged_at`` wins when present. Otherwise ``logged_date`` plus ``hour``
    (local time) is converted to an instant, and with neither the current
    time is used.
    """

    quantity: float
    unit: str
    logged_at: datetime | None = None
    logged_date: date | None = None
    hour: int | None = None


class CatalogLogRequest(LogTiming):
    """Log a catalog search selection."""

    fdc_id: int


class FoodLogRequest(LogTiming):
    """Log an existing local food."""

    food_id: UUID


class BarcodeLogRequest(LogTiming):
    """Log a scanned barcode."""

    upc: str = Field(max_length=32)


class SettingsUpdateRequest(BaseModel):
    """Partial update of nutrition settings."""

    timezone: str | None = None
    logging_start_hour: int | None = None
    logging_end_hour: int | None = None
