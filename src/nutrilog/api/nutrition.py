"""Nutrition API endpoints scoped to the calling user."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import (
    APIRouter,
    Depends,
    Header,
    HTTPException,
    Query,
    Request,
    Response,
    status,
)

from nutrilog.api.models import (
    BarcodeLogRequest,
    CatalogLogRequest,
    DerivedFoodRequest,
    FoodLogRequest,
    ManualFoodRequest,
    SettingsUpdateRequest,
)
from nutrilog.domain.foods import CatalogFoodSummary, FoodRecord  # noqa: TC001
from nutrilog.domain.logs import (  # noqa: TC001
    LogEntry,
    NutritionSettings,
    RecentFood,
)
from nutrilog.services.timezones import COMMON_TIMEZONES

if TYPE_CHECKING:
    from nutrilog.containers import AppContainer


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


def _container(request: Request) -> AppContainer:
    return request.app.state.container


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests come from the trusted gateway."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def current_user_id(x_user_id: str | None = Header(default=None)) -> UUID:
    """Return the authenticated user id forwarded by the gateway."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    try:
        return UUID(x_user_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from exc


router = APIRouter(
    prefix="/nutrition",
    tags=["nutrition"],
    dependencies=[Depends(require_api_token)],
)


@router.get("/search")
async def search_foods(query: str, request: Request) -> list[CatalogFoodSummary]:
    """Search the external nutrient catalog."""
    return await _container(request).catalog_service.search(query)


@router.get("/foods/{fdc_id}")
async def get_catalog_food(fdc_id: int, request: Request) -> FoodRecord:
    """Return the local record for a catalog food, caching it on first use."""
    return await _container(request).food_resolver.resolve_by_external_id(fdc_id)


@router.post("/foods/manual", status_code=status.HTTP_201_CREATED)
async def create_manual_food(body: ManualFoodRequest, request: Request) -> FoodRecord:
    """Create a manual food entry."""
    return _container(request).food_resolver.resolve_manual(
        body.description,
        body.nutrients(),
        brand_name=body.brand_name,
        serving_size=body.serving_size,
        serving_unit=body.serving_unit,
    )


@router.post("/foods/derived", status_code=status.HTTP_201_CREATED)
async def create_derived_food(body: DerivedFoodRequest, request: Request) -> FoodRecord:
    """Create a food from nutrient totals measured for a quantity."""
    return _container(request).food_resolver.derive_from_logged_nutrients(
        body.description,
        body.quantity,
        body.nutrients,
        external_id=body.fdc_id,
        brand_name=body.brand_name,
        serving_size=body.serving_size,
        serving_unit=body.serving_unit,
    )


@router.post("/log-entry", status_code=status.HTTP_201_CREATED)
async def log_catalog_food(
    body: CatalogLogRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> LogEntry:
    """Log a food selected from catalog search results."""
    service = _container(request).food_log_service
    logged_at = service.resolve_logged_at(
        user_id, body.logged_at, body.logged_date, body.hour
    )
    return await service.log_catalog_food(
        user_id, body.fdc_id, body.quantity, body.unit, logged_at, body.logged_date
    )


@router.post("/scan", status_code=status.HTTP_201_CREATED)
async def log_barcode(
    body: BarcodeLogRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> LogEntry:
    """Log a food identified by a scanned barcode."""
    service = _container(request).food_log_service
    logged_at = service.resolve_logged_at(
        user_id, body.logged_at, body.logged_date, body.hour
    )
    return await service.log_barcode(
        user_id, body.upc, body.quantity, body.unit, logged_at, body.logged_date
    )


@router.post("/food-logs", status_code=status.HTTP_201_CREATED)
async def log_local_food(
    body: FoodLogRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> LogEntry:
    """Log a food that already exists locally (manual or recent)."""
    service = _container(request).food_log_service
    logged_at = service.resolve_logged_at(
        user_id, body.logged_at, body.logged_date, body.hour
    )
    return service.log_food(
        user_id, body.food_id, body.quantity, body.unit, logged_at, body.logged_date
    )


@router.get("/food-logs")
async def list_food_logs(
    request: Request,
    day: date = Query(alias="date"),
    user_id: UUID = Depends(current_user_id),
) -> list[LogEntry]:
    """Return the user's entries for a date."""
    return _container(request).food_log_service.list_day(user_id, day)


@router.delete("/food-logs/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_food_log(
    entry_id: UUID,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> Response:
    """Soft-delete one of the user's entries."""
    _container(request).food_log_service.soft_delete(user_id, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/recent-foods")
async def recent_foods(
    request: Request,
    limit: int = 10,
    user_id: UUID = Depends(current_user_id),
) -> list[RecentFood]:
    """Return the user's recently used foods."""
    return _container(request).food_log_service.recent_foods(user_id, limit)


@router.get("/streak")
async def streak(
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return the user's current logging streak."""
    result = _container(request).streak_service.compute_streak(user_id)
    return {
        "streak": result.streak,
        "most_recent_date": (
            result.most_recent_date.isoformat() if result.most_recent_date else None
        ),
    }


@router.get("/settings/timezones")
async def list_timezones() -> list[dict[str, str]]:
    """Return the timezones offered in the settings picker."""
    return [{"value": value, "label": label} for value, label in COMMON_TIMEZONES]


@router.get("/settings")
async def get_settings(
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> NutritionSettings:
    """Return the user's nutrition settings."""
    return _container(request).user_settings_service.get_settings(user_id)


@router.put("/settings")
async def update_settings(
    body: SettingsUpdateRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> NutritionSettings:
    """Update timezone and/or logging hours."""
    return _container(request).user_settings_service.update_settings(
        user_id,
        timezone=body.timezone,
        logging_start_hour=body.logging_start_hour,
        logging_end_hour=body.logging_end_hour,
    )
