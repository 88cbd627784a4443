"""Catalog service integrating USDA FDC."""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from nutrilog.adapters.fdc_client import FdcClient
from nutrilog.domain.catalog import (
    LABEL_NUTRIENT_KEYS,
    NUTRIENT_CODES,
    FdcFoodPayload,
    FdcSearchPayload,
)
from nutrilog.domain.errors import (
    InvalidInputError,
    InvalidUpstreamDataError,
    NotFoundError,
    UpstreamUnavailableError,
)
from nutrilog.domain.foods import (
    CatalogFoodDetails,
    CatalogFoodSummary,
    NutrientProfile,
)
from nutrilog.services.cache import Cache

MIN_QUERY_LENGTH = 2
_WEIGHT_VOLUME_UNITS = {"g", "grm", "gram", "grams", "ml", "mlt", "milliliter"}

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass
class CatalogService:
    """Service for nutrient catalog lookups with caching."""

    fdc_client: FdcClient
    cache: Cache
    page_size: int = 25
    debug: bool = False
    search_retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(
        self, query: str, limit: int | None = None
    ) -> list[CatalogFoodSummary]:
        """Search FDC foods with caching."""
        cleaned = query.strip()
        if len(cleaned) < MIN_QUERY_LENGTH:
            return []
        page_size = limit or self.page_size
        cache_key = ("search", f"{cleaned.lower()}:{page_size}")
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return list(cached)

        payload = await self._call_with_retry(
            lambda: self.fdc_client.search_foods(cleaned, page_size=page_size),
            action="search",
        )
        try:
            parsed = FdcSearchPayload.model_validate(payload)
        except ValidationError as exc:
            _logger.warning("Catalog search returned invalid data: query=%s", cleaned)
            raise InvalidUpstreamDataError(
                f"Catalog search for {cleaned!r} returned invalid data"
            ) from exc
        foods = [_to_summary(food) for food in parsed.foods]
        self.cache.set(cache_key, list(foods))
        if self.debug:
            _logger.info("Catalog search: query=%s results=%s", cleaned, len(foods))
        return foods

    async def get_details(self, external_id: int) -> CatalogFoodDetails:
        """Retrieve validated food details on a per-100 basis.

        No retry is attempted; a failed lookup is never cached.
        """
        cache_key = ("details", str(external_id))
        cached = self.cache.get(cache_key)
        if isinstance(cached, CatalogFoodDetails):
            return cached

        try:
            payload = await self.fdc_client.get_food(external_id)
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(
                f"Catalog lookup for {external_id} failed "
                f"(status={_status_code_from_exception(exc)})"
            ) from exc
        if payload is None:
            raise NotFoundError(f"Catalog has no food with id {external_id}")

        try:
            parsed = FdcFoodPayload.model_validate(payload)
        except ValidationError as exc:
            _logger.warning(
                "Catalog returned invalid food data: external_id=%s errors=%s",
                external_id,
                exc.error_count(),
            )
            raise InvalidUpstreamDataError(
                f"Catalog food {external_id} failed validation"
            ) from exc

        details = CatalogFoodDetails(
            summary=_to_summary(parsed),
            serving_size=parsed.servingSize,
            serving_unit=parsed.servingSizeUnit,
            nutrients=_extract_nutrients(parsed),
        )
        self.cache.set(cache_key, details)
        if self.debug:
            _logger.info("Catalog food: external_id=%s", external_id)
        return details

    async def lookup_barcode(self, upc: str) -> CatalogFoodSummary:
        """Find the catalog item whose GTIN/UPC matches a scanned barcode."""
        digits = upc.strip()
        if not digits.isdigit():
            raise InvalidInputError("Barcode must contain digits only")
        for food in await self.search(digits):
            if food.gtin_upc and food.gtin_upc.lstrip("0") == digits.lstrip("0"):
                return food
        raise NotFoundError(f"No catalog food matches barcode {digits}")

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except httpx.HTTPError as exc:
                attempt += 1
                status_code = _status_code_from_exception(exc)
                if self.debug:
                    _logger.warning(
                        "Catalog %s failed (attempt %s/%s, status=%s): %s",
                        action,
                        attempt,
                        self.search_retry_attempts + 1,
                        status_code,
                        exc,
                    )
                if attempt > self.search_retry_attempts:
                    raise UpstreamUnavailableError(
                        f"Catalog {action} failed (status={status_code})"
                    ) from exc
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _to_summary(food: FdcFoodPayload) -> CatalogFoodSummary:
    return CatalogFoodSummary(
        external_id=food.fdcId,
        description=food.description,
        brand_owner=food.brandOwner,
        brand_name=food.brandName,
        data_type=food.dataType,
        gtin_upc=food.gtinUpc,
    )


def _extract_nutrients(food: FdcFoodPayload) -> NutrientProfile:
    """Map FDC nutrients onto a per-100 NutrientProfile.

    ``foodNutrients`` are already per 100 g/ml. When only the per-serving
    label panel is present, values are rescaled by the serving size.
    """
    values: dict[str, float] = {}
    for nutrient in food.foodNutrients:
        field_name = NUTRIENT_CODES.get(nutrient.code or 0)
        amount = nutrient.quantity
        if field_name is None or amount is None:
            continue
        values.setdefault(field_name, float(amount))
    if values:
        return NutrientProfile(**values)
    return _label_nutrients_per_100(food)


def _label_nutrients_per_100(food: FdcFoodPayload) -> NutrientProfile:
    if not food.labelNutrients or not food.servingSize:
        return NutrientProfile()
    unit = (food.servingSizeUnit or "").strip().lower()
    if unit not in _WEIGHT_VOLUME_UNITS:
        return NutrientProfile()
    factor = 100.0 / food.servingSize
    values: dict[str, float] = {}
    for key, field_name in LABEL_NUTRIENT_KEYS.items():
        label = food.labelNutrients.get(key)
        if label is None or label.value is None:
            continue
        values[field_name] = label.value * factor
    return NutrientProfile(**values)
