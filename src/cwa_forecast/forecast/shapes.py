"""Known layouts of the location list inside a CWA datastore payload.

Each descriptor pairs a name with an extractor that returns the location list
when the layout matches and ``None`` otherwise. Descriptors are tried in
``LOCATION_SHAPES`` order, so supporting a newly observed layout means adding
an entry here.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from .elements import pick

RECORDS_KEYS = ("records", "Records")
GROUP_KEYS = ("locations", "Locations")
LOCATION_KEYS = ("location", "Location")


@dataclass(frozen=True)
class LocationShape:
    name: str
    extract: Callable[[Mapping[str, Any]], list[dict[str, Any]] | None]


def _nested(records: Mapping[str, Any]) -> list[dict[str, Any]] | None:
    groups = pick(records, *GROUP_KEYS)
    if not isinstance(groups, list):
        return None
    locations: list[dict[str, Any]] = []
    matched = False
    for group in groups:
        if not isinstance(group, dict):
            continue
        entries = pick(group, *LOCATION_KEYS)
        if isinstance(entries, list):
            matched = True
            locations.extend(entry for entry in entries if isinstance(entry, dict))
    return locations if matched else None


def _flat(records: Mapping[str, Any]) -> list[dict[str, Any]] | None:
    entries = pick(records, *LOCATION_KEYS)
    if not isinstance(entries, list):
        return None
    return [entry for entry in entries if isinstance(entry, dict)]


LOCATION_SHAPES: tuple[LocationShape, ...] = (
    LocationShape(name="nested", extract=_nested),
    LocationShape(name="flat", extract=_flat),
)


def records_container(payload: Mapping[str, Any]) -> Mapping[str, Any] | None:
    records = pick(payload, *RECORDS_KEYS)
    return records if isinstance(records, dict) else None


def match_location_shape(
    records: Mapping[str, Any],
) -> tuple[LocationShape, list[dict[str, Any]]] | None:
    """Return the first matching shape and its location list."""
    for shape in LOCATION_SHAPES:
        locations = shape.extract(records)
        if locations is not None:
            return shape, locations
    return None
