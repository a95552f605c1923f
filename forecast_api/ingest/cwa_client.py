"""CWA open-data API client for the township forecast dataset."""

import logging
from typing import Any

import httpx

from forecast_api.config.schema import ServiceConfig
from forecast_api.ingest.errors import (
    ConfigurationError,
    DataNotFoundError,
    TransportError,
    UpstreamHttpError,
)

logger = logging.getLogger(__name__)


class CwaClient:
    """Fetches the raw township forecast document.

    One GET per call, no retries and no caching. The municipality is not
    sent upstream; the dataset returns every township of the county and
    selection happens in the normalizer.
    """

    def __init__(self, config: ServiceConfig):
        self.config = config

    async def fetch_raw_forecast(self) -> dict[str, Any]:
        if not self.config.has_api_key:
            raise ConfigurationError("CWA_API_KEY is not set")

        url = self.config.dataset_url
        params = {"Authorization": self.config.api_key}
        try:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                resp = await client.get(url, params=params)
        except httpx.RequestError as e:
            logger.error("CWA request failed: %s -> %s", url, e)
            raise TransportError(f"Request failed: {e}") from e

        if not resp.is_success:
            payload = _error_payload(resp)
            logger.error(
                "CWA API %d: %s -> %s", resp.status_code, url, payload,
            )
            raise UpstreamHttpError(resp.status_code, payload)

        try:
            data = resp.json()
        except ValueError as e:
            raise DataNotFoundError("CWA response is not JSON") from e
        if not isinstance(data, dict):
            raise DataNotFoundError("CWA response is not a JSON object")
        return data


def _error_payload(resp: httpx.Response) -> Any:
    """Decoded upstream error body, or the raw text when it is not JSON."""
    try:
        return resp.json()
    except ValueError:
        return resp.text
