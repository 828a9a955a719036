"""CWA datastore client request building and error mapping."""

from __future__ import annotations

import logging
from typing import Any

import httpx
import pytest

from cwa_forecast.config import Settings
from cwa_forecast.exceptions import ConfigError, TransportFailure, UpstreamRejected
from cwa_forecast.forecast.cwa import CwaClient, check_service_status

TEST_KEY = "CWA-12345678-ABCD-ABCD-ABCD-1234567890AB"


def _make_settings(**overrides: Any) -> Settings:
    defaults: dict[str, Any] = {"CWA_API_KEY": TEST_KEY, "CWA_TIMEOUT_SECONDS": 5.0}
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def _make_client(handler: Any, **settings_overrides: Any) -> CwaClient:
    return CwaClient(
        settings=_make_settings(**settings_overrides),
        logger=logging.getLogger("test_cwa_client"),
        transport=httpx.MockTransport(handler),
    )


def test_fetch_dataset_builds_datastore_request() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": "true", "records": {}})

    with _make_client(handler) as client:
        payload = client.fetch_dataset("F-D0047-051", "仁愛區", ["T", "PoP12h"])

    assert payload == {"success": "true", "records": {}}
    request = seen[0]
    assert request.url.path == "/api/v1/rest/datastore/F-D0047-051"
    assert request.url.params["Authorization"] == TEST_KEY
    assert request.url.params["locationName"] == "仁愛區"
    assert request.url.params["elementName"] == "T,PoP12h"
    assert request.url.params["sort"] == "time"


def test_fetch_dataset_omits_element_filter_when_empty() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"records": {}})

    with _make_client(handler) as client:
        client.fetch_dataset("F-D0047-051", "仁愛區")
    assert "elementName" not in seen[0].url.params


def test_missing_api_key_is_config_error_before_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
        raise AssertionError("no request expected")

    with _make_client(handler, CWA_API_KEY="") as client:
        with pytest.raises(ConfigError, match="CWA_API_KEY"):
            client.fetch_dataset("F-D0047-051", "仁愛區")


@pytest.mark.parametrize("status", [401, 403])
def test_auth_status_maps_to_upstream_rejected(status: int) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"message": "Unauthorized"})

    with _make_client(handler) as client:
        with pytest.raises(UpstreamRejected) as exc_info:
            client.fetch_dataset("F-D0047-051", "仁愛區")
    assert exc_info.value.status_code == status


def test_server_error_maps_to_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="maintenance")

    with _make_client(handler) as client:
        with pytest.raises(TransportFailure) as exc_info:
            client.fetch_dataset("F-D0047-051", "仁愛區")
    assert exc_info.value.status_code == 503
    assert exc_info.value.timeout is False


def test_timeout_maps_to_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with _make_client(handler) as client:
        with pytest.raises(TransportFailure) as exc_info:
            client.fetch_dataset("F-D0047-051", "仁愛區")
    assert exc_info.value.timeout is True


def test_connect_error_message_does_not_leak_key() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError(f"failed {request.url}", request=request)

    with _make_client(handler) as client:
        with pytest.raises(TransportFailure) as exc_info:
            client.fetch_dataset("F-D0047-051", "仁愛區")
    assert TEST_KEY not in str(exc_info.value)


def test_non_json_body_is_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    with _make_client(handler) as client:
        with pytest.raises(TransportFailure, match="non-JSON"):
            client.fetch_dataset("F-D0047-051", "仁愛區")


def test_non_object_body_is_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=["unexpected"])

    with _make_client(handler) as client:
        with pytest.raises(TransportFailure, match="unexpected payload type list"):
            client.fetch_dataset("F-D0047-051", "仁愛區")


@pytest.mark.parametrize("flag", ["false", "False", False])
def test_service_failure_flag_raises_upstream_rejected(flag: Any) -> None:
    with pytest.raises(UpstreamRejected, match="Invalid Authorization"):
        check_service_status({"success": flag, "message": "Invalid Authorization"})


@pytest.mark.parametrize("payload", [{"success": "true"}, {"records": {}}])
def test_service_success_or_missing_flag_passes(payload: dict[str, Any]) -> None:
    check_service_status(payload)
