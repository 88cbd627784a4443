"""Domain models for canonical food records."""

from dataclasses import dataclass, fields
from uuid import UUID

NUTRIENT_FIELDS = (
    "calories",
    "protein_g",
    "fat_g",
    "carbs_g",
    "fiber_g",
    "sugar_g",
    "sodium_mg",
)


@dataclass(frozen=True)
class NutrientProfile:
    """Nutrient values per 100 units (grams or milliliters)."""

    calories: float | None = None
    protein_g: float | None = None
    fat_g: float | None = None
    carbs_g: float | None = None
    fiber_g: float | None = None
    sugar_g: float | None = None
    sodium_mg: float | None = None

    def as_dict(self) -> dict[str, float | None]:
        """Return nutrient values keyed by field name."""
        return {field.name: getattr(self, field.name) for field in fields(self)}

    def divided(self, divisor: float) -> "NutrientProfile":
        """Return a copy with every present value divided by divisor."""
        return NutrientProfile(
            **{
                name: value / divisor if value is not None else None
                for name, value in self.as_dict().items()
            }
        )


@dataclass(frozen=True)
class FoodRecord:
    """Canonical nutrition-facts entity shared by log entries."""

    id: UUID
    external_id: int | None
    description: str
    brand_name: str | None
    serving_size: float | None
    serving_unit: str | None
    nutrients: NutrientProfile

    @property
    def is_manual(self) -> bool:
        return self.external_id is None


@dataclass(frozen=True)
class NewFoodRecord:
    """Food data ready to be inserted."""

    external_id: int | None
    description: str
    nutrients: NutrientProfile
    brand_name: str | None = None
    serving_size: float | None = None
    serving_unit: str | None = None


@dataclass(frozen=True)
class CatalogFoodSummary:
    """Search result from the external nutrient catalog."""

    external_id: int
    description: str
    brand_owner: str | None
    brand_name: str | None
    data_type: str | None
    gtin_upc: str | None = None


@dataclass(frozen=True)
class CatalogFoodDetails:
    """Validated catalog item with nutrients on a per-100 basis."""

    summary: CatalogFoodSummary
    serving_size: float | None
    serving_unit: str | None
    nutrients: NutrientProfile
