"""HTTP API routes and error-to-status mapping."""

from __future__ import annotations

import logging
from typing import Any

import pytest
from fastapi.testclient import TestClient

from cwa_forecast.api import create_app
from cwa_forecast.config import Settings
from cwa_forecast.exceptions import (
    ConfigError,
    ForecastError,
    MalformedPayload,
    RegionNotFoundInPayload,
    TransportFailure,
    UnsupportedRegion,
    UpstreamRejected,
)
from cwa_forecast.forecast.models import ForecastRecord, ForecastResult


class StubService:
    def __init__(self, outcome: ForecastResult | Exception) -> None:
        self.outcome = outcome
        self.requested: list[str | None] = []

    def get_forecast(self, city: str | None = None) -> ForecastResult:
        self.requested.append(city)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def _result(city: str = "臺北市", district: str = "信義區") -> ForecastResult:
    return ForecastResult(
        city=city,
        district=district,
        forecasts=[
            ForecastRecord(
                start_time="2024-01-01T06:00:00+08:00",
                end_time="2024-01-01T18:00:00+08:00",
                temp="22",
                rain="10",
            )
        ],
    )


def _client(outcome: ForecastResult | Exception) -> tuple[TestClient, StubService]:
    service = StubService(outcome)
    app = create_app(
        settings=Settings(_env_file=None),
        service=service,  # type: ignore[arg-type]
        logger=logging.getLogger("test_api"),
    )
    return TestClient(app), service


def test_city_route_returns_normalized_forecast() -> None:
    client, service = _client(_result())
    response = client.get("/weather/臺北市")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["city"] == "臺北市"
    assert body["data"]["district"] == "信義區"
    assert body["data"]["forecasts"][0] == {
        "startTime": "2024-01-01T06:00:00+08:00",
        "endTime": "2024-01-01T18:00:00+08:00",
        "weather": "--",
        "rain": "10",
        "temp": "22",
        "humid": "--",
        "windSpeed": "--",
        "windScale": "--",
    }
    assert service.requested == ["臺北市"]


def test_bare_route_defers_to_default_city() -> None:
    client, service = _client(_result("基隆市", "仁愛區"))
    response = client.get("/weather")
    assert response.status_code == 200
    assert service.requested == [None]


@pytest.mark.parametrize(
    ("error", "status", "kind"),
    [
        (UnsupportedRegion("東京都", supported=["臺北市"]), 400, "unsupported_region"),
        (RegionNotFoundInPayload("仁愛區", available=["中正區"]), 404, "region_not_found_in_payload"),
        (UpstreamRejected("bad key", status_code=401), 502, "upstream_rejected"),
        (MalformedPayload("no records"), 502, "malformed_payload"),
        (TransportFailure("boom", status_code=500), 502, "transport_failure"),
        (TransportFailure("slow", timeout=True), 504, "transport_failure"),
        (ForecastError("other"), 500, "forecast_error"),
    ],
)
def test_forecast_errors_map_to_status(error: Exception, status: int, kind: str) -> None:
    client, _ = _client(error)
    response = client.get("/weather/基隆市")
    assert response.status_code == status
    body = response.json()
    assert body["success"] is False
    assert body["error"] == kind


def test_error_body_carries_diagnostics() -> None:
    client, _ = _client(RegionNotFoundInPayload("仁愛區", available=["中正區", "信義區"]))
    body = client.get("/weather/基隆市").json()
    assert body["details"] == {"district": "仁愛區", "available": ["中正區", "信義區"]}


def test_config_error_is_server_error() -> None:
    client, _ = _client(ConfigError("CWA_API_KEY is not set"))
    response = client.get("/weather/基隆市")
    assert response.status_code == 500
    assert response.json()["error"] == "config_error"


def test_health() -> None:
    client, _ = _client(_result())
    assert client.get("/health").json() == {"status": "ok"}
