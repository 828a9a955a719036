"""HTTP API exposing the forecast service."""

from __future__ import annotations

import logging
from typing import Any

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from .config import Settings, load_settings
from .exceptions import (
    ConfigError,
    ForecastError,
    MalformedPayload,
    MissingTemperatureData,
    RegionNotFoundInPayload,
    TransportFailure,
    UnsupportedRegion,
    UpstreamRejected,
)
from .log_setup import setup_logger
from .service import ForecastService

router = APIRouter(prefix="/weather", tags=["weather"])

STATUS_BY_ERROR: dict[type[ForecastError], int] = {
    UnsupportedRegion: 400,
    RegionNotFoundInPayload: 404,
    UpstreamRejected: 502,
    MalformedPayload: 502,
    MissingTemperatureData: 502,
    TransportFailure: 502,
}


def status_for(exc: ForecastError) -> int:
    if isinstance(exc, TransportFailure) and exc.timeout:
        return 504
    for error_type, status in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status
    return 500


def _service(request: Request) -> ForecastService:
    return request.app.state.forecast_service


@router.get("")
def default_city_forecast(request: Request) -> dict[str, Any]:
    result = _service(request).get_forecast(None)
    return {"success": True, "data": result.to_payload()}


@router.get("/{city}")
def city_forecast(city: str, request: Request) -> dict[str, Any]:
    result = _service(request).get_forecast(city)
    return {"success": True, "data": result.to_payload()}


def _forecast_error_handler(request: Request, exc: ForecastError) -> JSONResponse:
    status = status_for(exc)
    logger: logging.Logger = request.app.state.logger
    log = logger.warning if status < 500 else logger.error
    log("Forecast request %s failed (%s): %s", request.url.path, exc.kind, exc.message)
    return JSONResponse(
        status_code=status,
        content={
            "success": False,
            "error": exc.kind,
            "message": exc.message,
            "details": exc.details,
        },
    )


def _config_error_handler(request: Request, exc: Exception) -> JSONResponse:
    request.app.state.logger.error("Configuration failure: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "config_error", "message": str(exc), "details": {}},
    )


def create_app(
    settings: Settings | None = None,
    service: ForecastService | None = None,
    logger: logging.Logger | None = None,
) -> FastAPI:
    """Build the FastAPI app; settings are loaded from the environment when omitted."""
    settings = settings or load_settings()
    logger = logger or setup_logger()

    app = FastAPI(title="CWA Township Forecast")
    app.state.settings = settings
    app.state.logger = logger
    app.state.forecast_service = service or ForecastService(settings=settings, logger=logger)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(router)
    app.add_exception_handler(ForecastError, _forecast_error_handler)
    app.add_exception_handler(ConfigError, _config_error_handler)
    return app


def main() -> int:
    """Serve the API with uvicorn."""
    logger = setup_logger()
    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2

    app = create_app(settings=settings, logger=logger)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
