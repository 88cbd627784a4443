"""Resolution of food references into canonical food records."""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrilog.domain.errors import (
    DuplicateRecordError,
    InvalidInputError,
    NotFoundError,
)
from nutrilog.domain.foods import (
    NUTRIENT_FIELDS,
    FoodRecord,
    NewFoodRecord,
    NutrientProfile,
)
from nutrilog.services.catalog import CatalogService

_logger = logging.getLogger(__name__)


class FoodRepository(Protocol):
    """Persistence interface for canonical food records.

    ``insert_food`` must enforce uniqueness on ``external_id`` when present and
    on ``description`` for manual records, raising ``DuplicateRecordError``.
    """

    def find_by_external_id(self, external_id: int) -> FoodRecord | None:
        """Return the record cached for a catalog id, if present."""

    def find_manual_by_description(self, description: str) -> FoodRecord | None:
        """Return the manual record with this exact description, if present."""

    def get_food(self, food_id: UUID) -> FoodRecord | None:
        """Return a record by local id, if present."""

    def insert_food(self, food: NewFoodRecord) -> FoodRecord:
        """Insert a record and return it."""


@dataclass
class FoodRecordResolver:
    """Returns the single canonical record for a food reference."""

    repository: FoodRepository
    catalog: CatalogService

    async def resolve_by_external_id(self, external_id: int) -> FoodRecord:
        """Return the local record for a catalog id, fetching it on first use."""
        _require_external_id(external_id)
        existing = self.repository.find_by_external_id(external_id)
        if existing is not None:
            return existing

        details = await self.catalog.get_details(external_id)
        return self._insert_external(
            external_id,
            NewFoodRecord(
                external_id=external_id,
                description=details.summary.description,
                brand_name=details.summary.brand_name or details.summary.brand_owner,
                serving_size=details.serving_size,
                serving_unit=details.serving_unit,
                nutrients=details.nutrients,
            ),
        )

    def resolve_manual(  # noqa: PLR0913
        self,
        description: str,
        nutrients: Mapping[str, float | None] | NutrientProfile | None = None,
        brand_name: str | None = None,
        serving_size: float | None = None,
        serving_unit: str | None = None,
    ) -> FoodRecord:
        """Create a manual record, refusing duplicates of the same description."""
        new_food = NewFoodRecord(
            external_id=None,
            description=_clean_description(description),
            nutrients=_validated_profile(nutrients),
            brand_name=_clean_optional(brand_name),
            serving_size=_validated_serving_size(serving_size),
            serving_unit=_clean_optional(serving_unit),
        )
        existing = self.repository.find_manual_by_description(new_food.description)
        if existing is not None:
            raise DuplicateRecordError(
                f"A manual food named {new_food.description!r} already exists",
                existing=existing,
            )
        try:
            return self.repository.insert_food(new_food)
        except DuplicateRecordError as exc:
            existing = exc.existing or self.repository.find_manual_by_description(
                new_food.description
            )
            raise DuplicateRecordError(str(exc), existing=existing) from exc

    def derive_from_logged_nutrients(  # noqa: PLR0913
        self,
        description: str,
        quantity: float,
        absolute_nutrients: Mapping[str, float | None],
        external_id: int | None = None,
        brand_name: str | None = None,
        serving_size: float | None = None,
        serving_unit: str | None = None,
    ) -> FoodRecord:
        """Create a record from nutrient totals measured for a logged quantity."""
        if not _is_number(quantity) or quantity <= 0:
            raise InvalidInputError("Quantity must be greater than zero")
        totals = _validated_profile(absolute_nutrients)
        per_100 = totals.divided(quantity / 100)

        if external_id is None:
            return self.resolve_manual(
                description,
                per_100,
                brand_name=brand_name,
                serving_size=serving_size,
                serving_unit=serving_unit,
            )

        _require_external_id(external_id)
        new_food = NewFoodRecord(
            external_id=external_id,
            description=_clean_description(description),
            nutrients=per_100,
            brand_name=_clean_optional(brand_name),
            serving_size=_validated_serving_size(serving_size),
            serving_unit=_clean_optional(serving_unit),
        )
        existing = self.repository.find_by_external_id(external_id)
        if existing is not None:
            return existing
        return self._insert_external(external_id, new_food)

    def get_food(self, food_id: UUID) -> FoodRecord:
        """Return a stored record or raise NotFoundError."""
        food = self.repository.get_food(food_id)
        if food is None:
            raise NotFoundError(f"Food {food_id} does not exist")
        return food

    def _insert_external(self, external_id: int, new_food: NewFoodRecord) -> FoodRecord:
        try:
            return self.repository.insert_food(new_food)
        except DuplicateRecordError:
            # A concurrent resolution inserted the same catalog item first.
            _logger.info(
                "Catalog food already stored, reusing: external_id=%s", external_id
            )
            existing = self.repository.find_by_external_id(external_id)
            if existing is None:
                raise
            return existing


def _require_external_id(external_id: object) -> None:
    if isinstance(external_id, bool) or not isinstance(external_id, int):
        raise InvalidInputError("External id must be an integer")
    if external_id <= 0:
        raise InvalidInputError("External id must be positive")


def _clean_description(description: str) -> str:
    cleaned = description.strip() if isinstance(description, str) else ""
    if not cleaned:
        raise InvalidInputError("Description must not be empty")
    return cleaned


def _clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _validated_serving_size(value: float | None) -> float | None:
    if value is None:
        return None
    if not _is_number(value) or value <= 0:
        raise InvalidInputError("Serving size must be greater than zero")
    return float(value)


def _validated_profile(
    nutrients: Mapping[str, float | None] | NutrientProfile | None,
) -> NutrientProfile:
    if nutrients is None:
        return NutrientProfile()
    if isinstance(nutrients, NutrientProfile):
        values = nutrients.as_dict()
    else:
        unknown = set(nutrients) - set(NUTRIENT_FIELDS)
        if unknown:
            raise InvalidInputError(f"Unknown nutrient fields: {sorted(unknown)}")
        values = dict(nutrients)
    for name, value in values.items():
        if value is None:
            continue
        if not _is_number(value):
            raise InvalidInputError(f"Nutrient {name} must be a number")
        if value < 0:
            raise InvalidInputError(f"Nutrient {name} must not be negative")
    return NutrientProfile(
        **{
            name: float(value) if value is not None else None
            for name, value in values.items()
        }
    )


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)
