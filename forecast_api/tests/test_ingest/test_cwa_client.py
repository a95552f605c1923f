"""Tests for the CWA client with mocked httpx."""

import asyncio

import httpx
import pytest
import respx

from forecast_api.config.schema import ServiceConfig
from forecast_api.ingest.cwa_client import CwaClient
from forecast_api.ingest.errors import (
    ConfigurationError,
    DataNotFoundError,
    TransportError,
    UpstreamHttpError,
)


def _fetch(config: ServiceConfig) -> dict:
    return asyncio.run(CwaClient(config).fetch_raw_forecast())


class TestFetchRawForecast:
    @respx.mock
    def test_success(self, config: ServiceConfig, raw_document: dict):
        respx.get(config.dataset_url).mock(
            return_value=httpx.Response(200, json=raw_document)
        )

        result = _fetch(config)
        assert result["records"]["issueTime"] == "2026-10-16T17:00:00+08:00"

    @respx.mock
    def test_only_authorization_param(self, config: ServiceConfig, raw_document: dict):
        route = respx.get(config.dataset_url).mock(
            return_value=httpx.Response(200, json=raw_document)
        )

        _fetch(config)
        assert route.call_count == 1
        request = route.calls[0].request
        assert dict(request.url.params) == {"Authorization": "test-key"}

    @respx.mock(assert_all_called=False)
    def test_missing_key_skips_network(self, keyless_config: ServiceConfig):
        route = respx.get(keyless_config.dataset_url)

        with pytest.raises(ConfigurationError):
            _fetch(keyless_config)
        assert not route.called

    @respx.mock
    def test_upstream_error_payload(self, config: ServiceConfig):
        body = {"success": "false", "message": "Resource not found"}
        respx.get(config.dataset_url).mock(
            return_value=httpx.Response(401, json=body)
        )

        with pytest.raises(UpstreamHttpError) as exc_info:
            _fetch(config)
        assert exc_info.value.status_code == 401
        assert exc_info.value.payload == body

    @respx.mock
    def test_upstream_error_plain_text(self, config: ServiceConfig):
        respx.get(config.dataset_url).mock(
            return_value=httpx.Response(503, text="Service Unavailable")
        )

        with pytest.raises(UpstreamHttpError) as exc_info:
            _fetch(config)
        assert exc_info.value.status_code == 503
        assert exc_info.value.payload == "Service Unavailable"

    @respx.mock
    def test_no_retry(self, config: ServiceConfig):
        route = respx.get(config.dataset_url).mock(return_value=httpx.Response(503))

        with pytest.raises(UpstreamHttpError):
            _fetch(config)
        assert route.call_count == 1

    @respx.mock
    def test_transport_error(self, config: ServiceConfig):
        respx.get(config.dataset_url).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(TransportError):
            _fetch(config)

    @respx.mock
    def test_non_object_body(self, config: ServiceConfig):
        respx.get(config.dataset_url).mock(
            return_value=httpx.Response(200, json=["not", "an", "object"])
        )

        with pytest.raises(DataNotFoundError):
            _fetch(config)

    @respx.mock
    def test_redirect_followed(self, config: ServiceConfig, raw_document: dict):
        moved_url = "https://test-cwa.example.com/api/v2/rest/datastore/F-D0047-091"
        respx.get(config.dataset_url).mock(
            return_value=httpx.Response(301, headers={"Location": moved_url})
        )
        moved = respx.get(moved_url).mock(
            return_value=httpx.Response(200, json=raw_document)
        )

        result = _fetch(config)
        assert moved.called
        assert "records" in result

    @respx.mock
    def test_unfollowed_redirect_is_upstream_error(self, config: ServiceConfig):
        respx.get(config.dataset_url).mock(
            return_value=httpx.Response(301, text="Moved")
        )

        with pytest.raises(UpstreamHttpError) as exc_info:
            _fetch(config)
        assert exc_info.value.status_code == 301
        assert exc_info.value.payload == "Moved"
