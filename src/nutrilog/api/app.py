"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from nutrilog.api.nutrition import router as nutrition_router
from nutrilog.app_logging import configure_logging
from nutrilog.containers import AppContainer
from nutrilog.domain.errors import (
    DuplicateRecordError,
    InvalidInputError,
    InvalidUpstreamDataError,
    NotFoundError,
    NutrilogError,
    UpstreamUnavailableError,
)

_ERROR_STATUS: dict[type[NutrilogError], int] = {
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateRecordError: status.HTTP_409_CONFLICT,
    InvalidUpstreamDataError: status.HTTP_502_BAD_GATEWAY,
    UpstreamUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(debug=container.settings.debug)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(nutrition_router)

    @app.exception_handler(NutrilogError)
    async def handle_domain_error(request: Request, exc: NutrilogError) -> JSONResponse:
        status_code = _status_for(exc)
        if isinstance(exc, InvalidUpstreamDataError | UpstreamUnavailableError):
            logger.warning(
                "Catalog failure on %s: %s", request.url.path, exc, exc_info=exc
            )
        body: dict[str, object] = {"error": str(exc)}
        if isinstance(exc, DuplicateRecordError) and exc.existing is not None:
            body["existing_food"] = jsonable_encoder(exc.existing)
        return JSONResponse(status_code=status_code, content=body)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _status_for(exc: NutrilogError) -> int:
    for error_type, status_code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR
