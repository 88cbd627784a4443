"""Supabase repository for canonical food records."""

from dataclasses import dataclass
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from nutrilog.domain.errors import DuplicateRecordError
from nutrilog.domain.foods import FoodRecord, NewFoodRecord, NutrientProfile
from nutrilog.services.foods import FoodRepository

UNIQUE_VIOLATION = "23505"

# NutrientProfile field -> foods column
_NUTRIENT_COLUMNS = {
    "calories": "calories_per_100g",
    "protein_g": "protein_per_100g",
    "fat_g": "fat_per_100g",
    "carbs_g": "carbs_per_100g",
    "fiber_g": "fiber_per_100g",
    "sugar_g": "sugar_per_100g",
    "sodium_mg": "sodium_per_100g",
}


@dataclass
class SupabaseFoodRepository(FoodRepository):
    """Supabase-backed repository for the shared ``foods`` table.

    Uniqueness is enforced by partial unique indexes on ``fdc_id`` (where not
    null) and on ``description`` (where ``fdc_id`` is null).
    """

    client: Client

    def find_by_external_id(self, external_id: int) -> FoodRecord | None:
        """Return the food cached for an FDC id."""
        response = (
            self.client.table("foods")
            .select("*")
            .eq("fdc_id", external_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_food(response.data[0])

    def find_manual_by_description(self, description: str) -> FoodRecord | None:
        """Return the manual food with an exact description."""
        response = (
            self.client.table("foods")
            .select("*")
            .eq("description", description)
            .is_("fdc_id", "null")
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_food(response.data[0])

    def get_food(self, food_id: UUID) -> FoodRecord | None:
        """Return a food by id."""
        response = (
            self.client.table("foods")
            .select("*")
            .eq("id", str(food_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_food(response.data[0])

    def insert_food(self, food: NewFoodRecord) -> FoodRecord:
        """Insert a food, translating unique violations."""
        try:
            response = self.client.table("foods").insert(_food_payload(food)).execute()
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                raise DuplicateRecordError(
                    f"Food {food.description!r} (fdc_id={food.external_id}) "
                    "already exists"
                ) from exc
            raise
        if not response.data:
            raise RuntimeError("Failed to create food entry")
        return parse_food(response.data[0])


def _food_payload(food: NewFoodRecord) -> dict[str, object]:
    payload: dict[str, object] = {
        "fdc_id": food.external_id,
        "description": food.description,
        "brand_name": food.brand_name,
        "serving_size": food.serving_size,
        "serving_unit": food.serving_unit,
    }
    for field_name, value in food.nutrients.as_dict().items():
        payload[_NUTRIENT_COLUMNS[field_name]] = value
    return payload


def parse_food(row: dict[str, object]) -> FoodRecord:
    """Parse a foods row into a domain model."""
    fdc_id = row.get("fdc_id")
    serving_size = row.get("serving_size")
    return FoodRecord(
        id=UUID(str(row["id"])),
        external_id=int(fdc_id) if fdc_id is not None else None,
        description=str(row.get("description", "")),
        brand_name=row.get("brand_name"),
        serving_size=float(serving_size) if serving_size is not None else None,
        serving_unit=row.get("serving_unit"),
        nutrients=NutrientProfile(
            **{
                field_name: _optional_float(row.get(column))
                for field_name, column in _NUTRIENT_COLUMNS.items()
            }
        ),
    )


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)
