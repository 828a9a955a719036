"""Upstream element-name table and per-period field readers."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from .models import CanonicalElementKey, SeriesEntry

# Every raw element name observed across datasets and API versions.
ELEMENT_NAME_TABLE: Mapping[str, CanonicalElementKey] = MappingProxyType(
    {
        "T": CanonicalElementKey.TEMPERATURE,
        "溫度": CanonicalElementKey.TEMPERATURE,
        "平均溫度": CanonicalElementKey.TEMPERATURE,
        "PoP12h": CanonicalElementKey.RAIN_PROBABILITY,
        "12小時降雨機率": CanonicalElementKey.RAIN_PROBABILITY,
        "RH": CanonicalElementKey.RELATIVE_HUMIDITY,
        "相對濕度": CanonicalElementKey.RELATIVE_HUMIDITY,
        "平均相對濕度": CanonicalElementKey.RELATIVE_HUMIDITY,
        "WS": CanonicalElementKey.WIND,
        "風速": CanonicalElementKey.WIND,
        "Wx": CanonicalElementKey.WEATHER,
        "天氣現象": CanonicalElementKey.WEATHER,
    }
)

_ASCII_NAME_TABLE: Mapping[str, CanonicalElementKey] = MappingProxyType(
    {name.casefold(): key for name, key in ELEMENT_NAME_TABLE.items() if name.isascii()}
)


def pick(mapping: Mapping[str, Any], *names: str) -> Any:
    """Return the value of the first of ``names`` present in ``mapping``."""
    for name in names:
        if name in mapping:
            return mapping[name]
    return None


def canonical_key(raw_name: Any) -> CanonicalElementKey | None:
    """Map a raw upstream element name to its canonical key, if known."""
    if not isinstance(raw_name, str):
        return None
    name = raw_name.strip()
    key = ELEMENT_NAME_TABLE.get(name)
    if key is None and name.isascii():
        key = _ASCII_NAME_TABLE.get(name.casefold())
    return key


def element_name(element: Mapping[str, Any]) -> Any:
    return pick(element, "elementName", "ElementName")


def read_series(element: Mapping[str, Any]) -> tuple[SeriesEntry, ...]:
    """Read one element's periods into series entries, keeping upstream order."""
    periods = pick(element, "time", "Time")
    if not isinstance(periods, list):
        return ()
    return tuple(_read_entry(period) for period in periods if isinstance(period, dict))


def _read_entry(period: Mapping[str, Any]) -> SeriesEntry:
    start = pick(period, "startTime", "StartTime", "dataTime", "DataTime")
    end = pick(period, "endTime", "EndTime")
    return SeriesEntry(
        start_time=_as_str(start),
        end_time=_as_str(end),
        values=_read_values(pick(period, "elementValue", "ElementValue")),
    )


def _read_values(raw_values: Any) -> tuple[str, ...]:
    # Older payloads: [{"value": "2", "measures": "m/s"}, {"value": "2", ...}].
    # Newer payloads: [{"WindSpeed": "2", "BeaufortScale": "2"}].
    if isinstance(raw_values, dict):
        raw_values = [raw_values]
    if not isinstance(raw_values, list):
        return ()

    values: list[str] = []
    for item in raw_values:
        if isinstance(item, dict):
            if "value" in item or "Value" in item:
                value = _as_value(pick(item, "value", "Value"))
                if value is not None:
                    values.append(value)
                continue
            for child in item.values():
                value = _as_value(child)
                if value is not None:
                    values.append(value)
        else:
            value = _as_value(item)
            if value is not None:
                values.append(value)
    return tuple(values)


def _as_value(value: Any) -> str | None:
    # Blank strings are meaningful ("not applicable" rain), so keep them as-is.
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return f"{value:g}" if isinstance(value, float) else str(value)
    return None


def _as_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
