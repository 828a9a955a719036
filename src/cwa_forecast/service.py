"""Request layer: resolve a city, fetch its dataset, and normalize the payload."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from .config import Settings
from .exceptions import NormalizationError
from .forecast.cwa import CwaClient, check_service_status
from .forecast.models import ForecastResult
from .forecast.normalizer import normalize_payload
from .regions import RegionResolver, ResolvedRegion


class ForecastFetch(BaseModel):
    """Resolved region, raw payload and normalized result of one request."""

    region: ResolvedRegion
    raw_payload: dict[str, Any]
    result: ForecastResult


def build_resolver(settings: Settings, logger: logging.Logger) -> RegionResolver:
    fallback = (
        settings.forecast_nationwide_dataset_id
        if settings.forecast_allow_nationwide_fallback
        else None
    )
    return RegionResolver(fallback_dataset_id=fallback, logger=logger)


class ForecastService:
    """Implements ``get_forecast(city)`` on top of the resolver, client and normalizer."""

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        client: CwaClient | None = None,
        resolver: RegionResolver | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self._owns_client = client is None
        self.client = client or CwaClient(settings=settings, logger=logger)
        self.resolver = resolver or build_resolver(settings, logger)

    def __enter__(self) -> ForecastService:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def resolve_city(self, city: str | None) -> ResolvedRegion:
        if not city:
            city = self.settings.forecast_default_city
            self.logger.info("No city requested; using default city %s", city)
        return self.resolver.resolve(city)

    def fetch(self, city: str | None = None) -> ForecastFetch:
        """Fetch and normalize the forecast, keeping the raw payload alongside."""
        region = self.resolve_city(city)
        payload = self.client.fetch_dataset(
            region.dataset_id,
            region.district,
            element_names=self.settings.element_names,
        )
        check_service_status(payload)

        try:
            result = normalize_payload(
                payload, region.district, city=region.city, logger=self.logger
            )
        except NormalizationError as exc:
            self.logger.warning(
                "Dataset %s payload for %s did not normalize (%s): %s",
                region.dataset_id,
                region.district,
                exc.kind,
                exc.details,
            )
            raise
        return ForecastFetch(region=region, raw_payload=payload, result=result)

    def get_forecast(self, city: str | None = None) -> ForecastResult:
        return self.fetch(city).result
