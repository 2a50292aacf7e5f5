"""
Unit tests for the builds client (upload and status lookup).
Version: 1.0.0
"""
import httpx
import pytest

from conftest import build_payload, make_response

from applivery_deploy.clients.builds_client import BuildsClient, build_upload_fields
from applivery_deploy.core.exceptions import AppliveryAPIError, AppliveryValidationError
from applivery_deploy.schemas.builds import (
    BuildPlatform,
    DeployerDetails,
    DeployerInfo,
    NotifyLanguage,
    UploadBuildRequest,
)


pytestmark = pytest.mark.unit


@pytest.fixture
def client(mock_settings):
    return BuildsClient(mock_settings)


@pytest.fixture
def payload():
    return UploadBuildRequest(versionName="feature/login", buildPlatform=BuildPlatform.IOS)


class TestBuildUploadFields:

    def test_minimal(self, payload):
        assert build_upload_fields(payload) == {
            "versionName": "feature/login",
            "buildPlatform": "ios",
        }

    def test_full(self):
        payload = UploadBuildRequest(
            versionName="main",
            buildPlatform=BuildPlatform.ANDROID,
            tags=["nightly", "qa"],
            changelog="Fixes",
            notifyCollaborators=False,
            notifyEmployees=True,
            notifyMessage="New build",
            notifyLanguage=NotifyLanguage.ENGLISH,
            deployer=DeployerInfo(name="CI", info=DeployerDetails(commit="abc")),
        )
        assert build_upload_fields(payload) == {
            "versionName": "main",
            "buildPlatform": "android",
            "tags": "nightly,qa",
            "changelog": "Fixes",
            "notifyCollaborators": "false",
            "notifyEmployees": "true",
            "notifyMessage": "New build",
            "notifyLanguage": "en",
            "deployer.name": "CI",
            "deployer.info.commit": "abc",
        }

    def test_empty_changelog_is_still_sent(self):
        payload = UploadBuildRequest(versionName="main", buildPlatform="ios", changelog="")
        assert build_upload_fields(payload)["changelog"] == ""

    def test_empty_tags_not_sent(self):
        payload = UploadBuildRequest(versionName="main", buildPlatform="ios", tags=[])
        assert "tags" not in build_upload_fields(payload)


class TestUploadBuild:

    @pytest.mark.asyncio
    async def test_missing_file_sends_nothing(self, client, payload, mock_http, tmp_path):
        with pytest.raises(AppliveryValidationError):
            await client.upload_build(str(tmp_path / "missing.ipa"), payload)
        mock_http.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_directory_is_rejected(self, client, payload, mock_http, tmp_path):
        with pytest.raises(AppliveryValidationError):
            await client.upload_build(str(tmp_path), payload)
        mock_http.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_uploads_to_upload_host(self, client, payload, mock_http, build_file):
        mock_http.request.return_value = make_response(200, {"data": build_payload()})

        build = await client.upload_build(str(build_file), payload)

        assert build.id == "build-1"
        assert build.status == "pending"
        kwargs = mock_http.request.call_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["url"] == "https://upload.applivery.test/v1/integrations/builds"
        assert kwargs["data"] == {"versionName": "feature/login", "buildPlatform": "ios"}
        filename, _, content_type = kwargs["files"]["build"]
        assert filename == "App.ipa"
        assert content_type == "application/octet-stream"

    @pytest.mark.asyncio
    async def test_upload_uses_long_timeout(self, client, payload, mock_http, build_file):
        mock_http.request.return_value = make_response(200, {"data": build_payload()})
        await client.upload_build(str(build_file), payload)

        timeout = mock_http.async_client_class.call_args.kwargs["timeout"]
        assert isinstance(timeout, httpx.Timeout)
        assert timeout.read == 600.0
        assert timeout.connect == 30.0

    @pytest.mark.asyncio
    async def test_zero_upload_timeout_disables_read_limit(
        self, payload, mock_http, build_file, monkeypatch
    ):
        from applivery_deploy.core.config import Settings

        monkeypatch.setenv("INPUT_UPLOAD-TIMEOUT", "0")
        client = BuildsClient(Settings(api_key="k"))
        mock_http.request.return_value = make_response(200, {"data": build_payload()})

        await client.upload_build(str(build_file), payload)

        timeout = mock_http.async_client_class.call_args.kwargs["timeout"]
        assert timeout.read is None
        assert timeout.write is None
        assert timeout.connect == 30.0

    @pytest.mark.asyncio
    async def test_rejected_upload(self, client, payload, mock_http, build_file):
        mock_http.request.return_value = make_response(
            413, text="too large", reason="Payload Too Large"
        )
        with pytest.raises(AppliveryAPIError) as exc_info:
            await client.upload_build(str(build_file), payload)
        assert exc_info.value.status_code == 413


class TestGetBuild:

    @pytest.mark.asyncio
    async def test_uses_metadata_host(self, client, mock_http):
        mock_http.request.return_value = make_response(
            200, {"data": build_payload(status="processed")}
        )

        build = await client.get_build("build-1")

        assert build.is_processed
        kwargs = mock_http.request.call_args.kwargs
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == "https://api.applivery.test/v1/integrations/builds/build-1"

    @pytest.mark.asyncio
    async def test_tolerates_null_tags_and_bad_timestamp(self, client, mock_http):
        record = build_payload(status="processed")
        record["tags"] = None
        record["updatedAt"] = "yesterday"
        mock_http.request.return_value = make_response(200, {"data": record})

        build = await client.get_build("build-1")

        assert build.is_processed
        assert build.tags == []
        assert build.updatedAt == "yesterday"
