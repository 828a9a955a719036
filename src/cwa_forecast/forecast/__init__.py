"""CWA datastore client and payload normalization."""

from .cwa import CwaClient, check_service_status
from .models import CanonicalElementKey, ForecastRecord, ForecastResult, SeriesEntry
from .normalizer import normalize_payload

__all__ = [
    "CanonicalElementKey",
    "CwaClient",
    "ForecastRecord",
    "ForecastResult",
    "SeriesEntry",
    "check_service_status",
    "normalize_payload",
]
