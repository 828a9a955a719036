"""Typed models for normalized forecast output."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

PLACEHOLDER = "--"


class CanonicalElementKey(StrEnum):
    """Weather elements kept after normalization."""

    TEMPERATURE = "T"
    RAIN_PROBABILITY = "PoP12h"
    RELATIVE_HUMIDITY = "RH"
    WIND = "WS"
    WEATHER = "Wx"


class SeriesEntry(BaseModel):
    """One forecast period of a single element."""

    model_config = ConfigDict(frozen=True)

    start_time: str | None = None
    end_time: str | None = None
    values: tuple[str, ...] = ()

    def value_at(self, position: int) -> str | None:
        if position < len(self.values):
            return self.values[position]
        return None


ElementSeries = tuple[SeriesEntry, ...]


class ForecastRecord(BaseModel):
    """One time window of the normalized forecast."""

    model_config = ConfigDict(populate_by_name=True)

    start_time: str = Field(alias="startTime")
    end_time: str | None = Field(default=None, alias="endTime")
    weather: str = PLACEHOLDER
    rain: str = PLACEHOLDER
    temp: str = PLACEHOLDER
    humid: str = PLACEHOLDER
    wind_speed: str = Field(default=PLACEHOLDER, alias="windSpeed")
    wind_scale: str = Field(default=PLACEHOLDER, alias="windScale")


class ForecastResult(BaseModel):
    """Normalized forecast for one region."""

    city: str
    district: str
    forecasts: list[ForecastRecord] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready response body for this result."""
        return self.model_dump(mode="json", by_alias=True)
