"""
Unit tests for the shared Applivery transport and failure classification.
Version: 1.0.0
"""
import httpx
import pytest

from conftest import make_response

from applivery_deploy.clients.base_client import BaseAppliveryClient, classify_transport_error
from applivery_deploy.core.exceptions import (
    AppliveryAPIError,
    AppliveryNetworkError,
    AppliveryParseError,
    AppliveryValidationError,
)


pytestmark = pytest.mark.unit

URL = "https://api.applivery.test/v1/integrations/distributions"


class TestClassifyTransportError:

    def test_status_error_becomes_api_error(self):
        request = httpx.Request("GET", URL)
        response = httpx.Response(503, request=request, text="maintenance")
        exc = httpx.HTTPStatusError("503", request=request, response=response)

        result = classify_transport_error(exc, "fetch publications", URL)
        assert isinstance(result, AppliveryAPIError)
        assert result.status_code == 503
        assert result.response_body == "maintenance"
        assert str(result) == "Failed to fetch publications: Service Unavailable"

    def test_request_error_becomes_network_error(self):
        exc = httpx.ConnectError("refused", request=httpx.Request("GET", URL))
        result = classify_transport_error(exc, "fetch publications", URL)
        assert isinstance(result, AppliveryNetworkError)
        assert result.original_error is exc
        assert URL in str(result)

    def test_anything_else_becomes_network_error(self):
        exc = RuntimeError("event loop closed")
        result = classify_transport_error(exc, "upload build", URL)
        assert isinstance(result, AppliveryNetworkError)
        assert str(result).startswith("Unexpected error while trying to upload build")

    def test_typed_errors_pass_through(self):
        exc = AppliveryValidationError("bad input")
        assert classify_transport_error(exc, "x", URL) is exc


class TestCallApplivery:

    @pytest.fixture
    def client(self, mock_settings):
        return BaseAppliveryClient(mock_settings)

    @pytest.mark.asyncio
    async def test_returns_decoded_body(self, client, mock_http):
        mock_http.request.return_value = make_response(200, {"data": {"id": "x"}})
        body = await client._call_applivery("GET", URL, "fetch", params={"page": "1"})

        assert body == {"data": {"id": "x"}}
        kwargs = mock_http.request.call_args.kwargs
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == URL
        assert kwargs["params"] == {"page": "1"}
        assert kwargs["headers"]["Authorization"] == "Bearer test-api-key"
        assert kwargs["headers"]["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_created_status_is_success(self, client, mock_http):
        mock_http.request.return_value = make_response(201, {"data": {}})
        assert await client._call_applivery("POST", URL, "create") == {"data": {}}

    @pytest.mark.asyncio
    async def test_multipart_request_has_no_json_content_type(self, client, mock_http):
        await client._call_applivery("POST", URL, "upload", data={"a": "b"}, files={"build": ("f", b"", "x")})
        headers = mock_http.request.call_args.kwargs["headers"]
        assert "Content-Type" not in headers

    @pytest.mark.asyncio
    async def test_uses_configured_timeout(self, client, mock_http):
        await client._call_applivery("GET", URL, "fetch")
        assert mock_http.async_client_class.call_args.kwargs["timeout"] == 30.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [204, 302, 400, 404, 500])
    async def test_other_statuses_are_api_errors(self, client, mock_http, status):
        mock_http.request.return_value = make_response(
            status, text='{"error":"nope"}', reason="Nope"
        )
        with pytest.raises(AppliveryAPIError) as exc_info:
            await client._call_applivery("GET", URL, "fetch publications")
        assert exc_info.value.status_code == status
        assert exc_info.value.response_body == '{"error":"nope"}'
        assert str(exc_info.value) == "Failed to fetch publications: Nope"

    @pytest.mark.asyncio
    async def test_transport_failure_is_network_error(self, client, mock_http):
        mock_http.request.side_effect = httpx.ConnectTimeout("timed out")
        with pytest.raises(AppliveryNetworkError):
            await client._call_applivery("GET", URL, "fetch")

    @pytest.mark.asyncio
    async def test_non_json_body_is_parse_error(self, client, mock_http):
        mock_http.request.return_value = make_response(200, text="<html>oops</html>")
        with pytest.raises(AppliveryParseError) as exc_info:
            await client._call_applivery("GET", URL, "fetch")
        assert exc_info.value.raw_body == "<html>oops</html>"

    @pytest.mark.asyncio
    async def test_non_object_body_is_parse_error(self, client, mock_http):
        mock_http.request.return_value = make_response(200, [1, 2])
        with pytest.raises(AppliveryParseError):
            await client._call_applivery("GET", URL, "fetch")


class TestEnvelopeHelpers:

    def test_extract_data(self):
        assert BaseAppliveryClient._extract_data({"data": {"id": "1"}}) == {"id": "1"}

    @pytest.mark.parametrize("body", [{}, {"data": None}, {"data": []}])
    def test_extract_data_missing(self, body):
        with pytest.raises(AppliveryParseError):
            BaseAppliveryClient._extract_data(body)
