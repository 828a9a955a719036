"""CWA open-data datastore client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings
from ..exceptions import TransportFailure, UpstreamRejected
from ..redaction import sanitize_text

DATASTORE_PATH = "/v1/rest/datastore/{dataset_id}"


class CwaClient:
    """Fetches raw datastore payloads from opendata.cwa.gov.tw."""

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self._base_url = str(settings.cwa_api_base_url).rstrip("/")
        self._client = httpx.Client(
            timeout=settings.cwa_timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> CwaClient:
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def fetch_dataset(
        self,
        dataset_id: str,
        location_name: str,
        element_names: list[str] | None = None,
    ) -> dict[str, Any]:
        """GET one dataset filtered to ``location_name`` and return the decoded body.

        Raises ConfigError when no API key is configured.
        """
        params: dict[str, str] = {
            "Authorization": self.settings.require_api_key(),
            "locationName": location_name,
            "sort": "time",
        }
        if element_names:
            params["elementName"] = ",".join(element_names)

        url = self._base_url + DATASTORE_PATH.format(dataset_id=dataset_id)
        self.logger.info("Fetching CWA dataset %s for %s", dataset_id, location_name)
        return self._request_json(url, params=params, context=f"dataset {dataset_id}")

    def _request_json(self, url: str, *, params: dict[str, str], context: str) -> dict[str, Any]:
        try:
            response = self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            body = sanitize_text(exc.response.text[:300])
            if status in (401, 403):
                raise UpstreamRejected(
                    f"CWA rejected {context} request with status {status}: {body}",
                    status_code=status,
                ) from exc
            raise TransportFailure(
                f"CWA {context} failed with status {status}: {body}",
                status_code=status,
            ) from exc
        except httpx.TimeoutException as exc:
            raise TransportFailure(
                f"CWA {context} timed out after {self.settings.cwa_timeout_seconds}s.",
                timeout=True,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportFailure(
                f"CWA {context} request failed: {sanitize_text(str(exc))}"
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportFailure(f"CWA {context} returned a non-JSON response.") from exc

        if not isinstance(payload, dict):
            raise TransportFailure(
                f"CWA {context} returned unexpected payload type {type(payload).__name__}."
            )
        return payload


def check_service_status(payload: dict[str, Any]) -> None:
    """Raise UpstreamRejected when the payload's ``success`` flag reports failure."""
    flag = payload.get("success")
    rejected = flag is False or (isinstance(flag, str) and flag.strip().lower() == "false")
    if not rejected:
        return

    message = payload.get("message")
    result = payload.get("result")
    if not message and isinstance(result, dict):
        message = result.get("message")
    raise UpstreamRejected(
        f"CWA reported failure: {sanitize_text(str(message or 'no message'))}",
        details={"top_level_keys": sorted(payload)},
    )
