"""Normalize CWA datastore payloads into ordered forecast records."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..exceptions import MalformedPayload, MissingTemperatureData, RegionNotFoundInPayload
from .elements import canonical_key, element_name, pick, read_series
from .models import (
    PLACEHOLDER,
    CanonicalElementKey,
    ElementSeries,
    ForecastRecord,
    ForecastResult,
    SeriesEntry,
)
from .shapes import LOCATION_SHAPES, match_location_shape, records_container

# Upstream spellings of "no rain probability for this period".
_RAIN_NOT_APPLICABLE = frozenset({" ", "-", ""})


def normalize_payload(
    payload: Mapping[str, Any],
    district: str,
    *,
    city: str,
    logger: logging.Logger | None = None,
) -> ForecastResult:
    """Extract ``district`` from a decoded datastore payload.

    Raises a NormalizationError subclass when the payload does not match any
    known layout. The payload is only read, never modified.
    """
    log = logger or logging.getLogger(__name__)

    locations = _locate_locations(payload, log)
    location = _select_location(locations, district)
    elements = build_element_index(location, district)
    records = align_records(elements)

    log.debug("Normalized %d forecast periods for %s/%s", len(records), city, district)
    return ForecastResult(city=city, district=district, forecasts=records)


def _locate_locations(payload: Mapping[str, Any], log: logging.Logger) -> list[dict[str, Any]]:
    attempted = [shape.name for shape in LOCATION_SHAPES]
    if not isinstance(payload, Mapping):
        raise MalformedPayload(
            f"Payload is {type(payload).__name__}, expected a JSON object.",
            details={"attempted_shapes": attempted},
        )

    records = records_container(payload)
    if records is None:
        raise MalformedPayload(
            "Payload has no 'records' object.",
            details={"top_level_keys": sorted(payload), "attempted_shapes": attempted},
        )

    matched = match_location_shape(records)
    if matched is None:
        raise MalformedPayload(
            "Payload records contain no recognizable location list.",
            details={
                "top_level_keys": sorted(payload),
                "record_keys": sorted(records),
                "attempted_shapes": attempted,
            },
        )
    shape, locations = matched
    log.debug("Payload matched location shape %r with %d locations", shape.name, len(locations))
    return locations


def _select_location(locations: list[dict[str, Any]], district: str) -> dict[str, Any]:
    names: list[str] = []
    for location in locations:
        name = pick(location, "locationName", "LocationName")
        if name == district:
            return location
        if isinstance(name, str):
            names.append(name)
    raise RegionNotFoundInPayload(district, available=names)


def build_element_index(
    location: Mapping[str, Any], district: str
) -> dict[CanonicalElementKey, ElementSeries]:
    """Map canonical element keys to their series; unknown names are dropped."""
    raw_elements = pick(location, "weatherElement", "WeatherElement")
    if not isinstance(raw_elements, list):
        raw_elements = []

    index: dict[CanonicalElementKey, ElementSeries] = {}
    raw_names: list[str] = []
    for element in raw_elements:
        if not isinstance(element, dict):
            continue
        raw_name = element_name(element)
        if isinstance(raw_name, str):
            raw_names.append(raw_name)
        key = canonical_key(raw_name)
        if key is None or key in index:
            continue
        index[key] = read_series(element)

    if not index.get(CanonicalElementKey.TEMPERATURE):
        raise MissingTemperatureData(district, available=raw_names)
    return index


class _SeriesLookup:
    """Finds the entry of one element series for a backbone period."""

    def __init__(self, series: ElementSeries | None) -> None:
        self._series: ElementSeries = series or ()
        self._by_start: dict[str, SeriesEntry] = {}
        for entry in self._series:
            if entry.start_time is not None:
                self._by_start.setdefault(entry.start_time, entry)

    def entry_for(self, index: int, start_time: str | None) -> SeriesEntry | None:
        if self._by_start and start_time is not None:
            return self._by_start.get(start_time)
        if index < len(self._series):
            return self._series[index]
        return None


def _value(entry: SeriesEntry | None, position: int = 0) -> str:
    if entry is None:
        return PLACEHOLDER
    value = entry.value_at(position)
    return PLACEHOLDER if value is None else value


def _rain_value(entry: SeriesEntry | None) -> str:
    value = _value(entry)
    if entry is not None and value in _RAIN_NOT_APPLICABLE:
        return "0"
    return value


def align_records(elements: Mapping[CanonicalElementKey, ElementSeries]) -> list[ForecastRecord]:
    """Emit one record per temperature period, in temperature order."""
    backbone = elements[CanonicalElementKey.TEMPERATURE]
    rain = _SeriesLookup(elements.get(CanonicalElementKey.RAIN_PROBABILITY))
    humidity = _SeriesLookup(elements.get(CanonicalElementKey.RELATIVE_HUMIDITY))
    wind = _SeriesLookup(elements.get(CanonicalElementKey.WIND))
    weather = _SeriesLookup(elements.get(CanonicalElementKey.WEATHER))

    records: list[ForecastRecord] = []
    for index, temp_entry in enumerate(backbone):
        start = temp_entry.start_time
        wind_entry = wind.entry_for(index, start)
        records.append(
            ForecastRecord(
                start_time=start or PLACEHOLDER,
                end_time=temp_entry.end_time,
                weather=_value(weather.entry_for(index, start)),
                rain=_rain_value(rain.entry_for(index, start)),
                temp=_value(temp_entry),
                humid=_value(humidity.entry_for(index, start)),
                wind_speed=_value(wind_entry, 0),
                wind_scale=_value(wind_entry, 1),
            )
        )
    return records
