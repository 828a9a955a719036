"""Application exception classes."""

from __future__ import annotations

from typing import Any


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class JournalError(Exception):
    """Raised when writing to journal files fails."""


class ForecastError(Exception):
    """Base class for tagged forecast failures.

    Every subclass carries a stable ``kind`` tag and a ``details`` dict with
    enough context to tell which input or payload variant caused the failure.
    """

    kind = "forecast_error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}


class UnsupportedRegion(ForecastError):
    """Raised when a region key has no configured sub-region or dataset."""

    kind = "unsupported_region"

    def __init__(self, region_key: str, *, supported: list[str] | None = None) -> None:
        super().__init__(
            f"Region {region_key!r} is not supported.",
            details={"region": region_key, "supported": list(supported or [])},
        )
        self.region_key = region_key


class UpstreamRejected(ForecastError):
    """Raised when the upstream service reports that it rejected the request."""

    kind = "upstream_rejected"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code


class TransportFailure(ForecastError):
    """Raised when the outbound call fails (network, non-2xx, timeout, non-JSON)."""

    kind = "transport_failure"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        timeout: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code
        self.timeout = timeout


class NormalizationError(ForecastError):
    """Raised when a payload matches none of the known shape variants."""

    kind = "normalization_error"


class MalformedPayload(NormalizationError):
    """Raised when no location list can be found in the payload."""

    kind = "malformed_payload"


class RegionNotFoundInPayload(NormalizationError):
    """Raised when the payload has no location with the requested name."""

    kind = "region_not_found_in_payload"

    def __init__(self, district: str, *, available: list[str]) -> None:
        super().__init__(
            f"Location {district!r} not found in payload "
            f"(available: {', '.join(available) or 'none'}).",
            details={"district": district, "available": list(available)},
        )
        self.district = district
        self.available = list(available)


class MissingTemperatureData(NormalizationError):
    """Raised when the selected location carries no temperature series."""

    kind = "missing_temperature_data"

    def __init__(self, district: str, *, available: list[str]) -> None:
        super().__init__(
            f"Location {district!r} has no temperature element "
            f"(elements present: {', '.join(available) or 'none'}).",
            details={"district": district, "available_elements": list(available)},
        )
        self.district = district
        self.available = list(available)
