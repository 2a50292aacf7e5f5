"""
Builds client — streamed build upload and build status lookup.
Version: 1.0.0
"""
import logging
import os
from typing import Dict

import httpx

from applivery_deploy.clients.base_client import BaseAppliveryClient
from applivery_deploy.core.config import Settings
from applivery_deploy.core.constants.deploy import BUILD_FILE_FIELD, BUILDS_PATH
from applivery_deploy.core.exceptions import AppliveryValidationError
from applivery_deploy.schemas.builds import Build, UploadBuildRequest
from applivery_deploy.utils.date_transform import build_transformer
from applivery_deploy.utils.deployer import flatten_deployer_info

logger = logging.getLogger("builds_client")


def build_upload_fields(payload: UploadBuildRequest) -> Dict[str, str]:
    """
    Multi-part text fields for an upload, present values only.

    Fields left as None are never sent, so "not provided" stays distinct
    from an empty value. Tags are comma joined, booleans sent as
    "true"/"false", deployer info flattened to dotted keys.
    """
    fields: Dict[str, str] = {
        "versionName": payload.versionName,
        "buildPlatform": payload.buildPlatform.value,
    }
    if payload.tags:
        fields["tags"] = ",".join(payload.tags)
    if payload.changelog is not None:
        fields["changelog"] = payload.changelog
    if payload.notifyCollaborators is not None:
        fields["notifyCollaborators"] = "true" if payload.notifyCollaborators else "false"
    if payload.notifyEmployees is not None:
        fields["notifyEmployees"] = "true" if payload.notifyEmployees else "false"
    if payload.notifyMessage is not None:
        fields["notifyMessage"] = payload.notifyMessage
    if payload.notifyLanguage is not None:
        fields["notifyLanguage"] = payload.notifyLanguage.value
    fields.update(flatten_deployer_info(payload.deployer))
    return fields


class BuildsClient(BaseAppliveryClient):
    def __init__(self, settings: Settings) -> None:
        super().__init__(settings)
        self._upload_url = self._join_url(settings.base_uploads_url, BUILDS_PATH)
        # Status lookups go to the metadata API, uploads API only accepts uploads
        self._builds_url = self._join_url(settings.base_url, BUILDS_PATH)
        self._upload_timeout = httpx.Timeout(
            settings.request_timeout,
            read=settings.upload_timeout,
            write=settings.upload_timeout,
        )

    async def upload_build(self, build_path: str, payload: UploadBuildRequest) -> Build:
        """
        Upload a build file with its metadata.

        The file is streamed from disk by httpx, never read fully into
        memory, and no body size limit is applied.

        Args:
            build_path: Path to the .ipa/.apk/.aab artifact
            payload: Version name, platform and optional metadata

        Returns:
            Build: The created build record

        Raises:
            AppliveryValidationError: build_path is not an existing regular file
            AppliveryAPIError, AppliveryNetworkError, AppliveryParseError
        """
        if not os.path.isfile(build_path):
            raise AppliveryValidationError(f"Build file does not exist: {build_path}")

        filename = os.path.basename(build_path)
        fields = build_upload_fields(payload)
        logger.debug("upload fields=%s", sorted(fields))

        with open(build_path, "rb") as fh:
            body = await self._call_applivery(
                "POST",
                self._upload_url,
                f"upload build '{filename}'",
                data=fields,
                files={BUILD_FILE_FIELD: (filename, fh, "application/octet-stream")},
                timeout=self._upload_timeout,
            )
        data = self._extract_data(body)
        return self._to_model(Build, build_transformer(data))

    async def get_build(self, build_id: str) -> Build:
        """
        Fetch the current state of a build.

        Raises:
            AppliveryAPIError, AppliveryNetworkError, AppliveryParseError
        """
        body = await self._call_applivery(
            "GET",
            self._join_url(self._builds_url, build_id),
            f"fetch build {build_id}",
        )
        data = self._extract_data(body)
        return self._to_model(Build, build_transformer(data))
