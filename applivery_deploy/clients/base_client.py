"""
Base Applivery client — authenticated requests and failure classification.

Every outbound call goes through `_call_applivery`, which logs the
request/response inside a log group and turns any failure into one of:
AppliveryAPIError, AppliveryNetworkError, AppliveryParseError.
Version: 1.0.0
"""
import json
import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from applivery_deploy.core.actions import log_group
from applivery_deploy.core.config import Settings
from applivery_deploy.core.constants.deploy import SUCCESS_STATUS_CODES
from applivery_deploy.core.exceptions import (
    AppliveryAPIError,
    AppliveryError,
    AppliveryNetworkError,
    AppliveryParseError,
)

logger = logging.getLogger("applivery_client")

ModelT = TypeVar("ModelT", bound=BaseModel)


def _response_text(response: httpx.Response) -> str:
    try:
        return response.text
    except httpx.ResponseNotRead:
        return ""


def classify_transport_error(exc: BaseException, action: str, url: str) -> AppliveryError:
    """
    Map a failure raised while sending a request to a typed Applivery error.

    - httpx.HTTPStatusError (a response was received) -> AppliveryAPIError
    - httpx.RequestError (sent, no response)           -> AppliveryNetworkError
    - anything else                                    -> AppliveryNetworkError
    """
    if isinstance(exc, AppliveryError):
        return exc
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        return AppliveryAPIError(
            f"Failed to {action}: {response.reason_phrase or 'Unknown error'}",
            response.status_code,
            _response_text(response),
        )
    if isinstance(exc, httpx.RequestError):
        return AppliveryNetworkError(f"Network error while trying to {action} at {url}", exc)
    return AppliveryNetworkError(f"Unexpected error while trying to {action} at {url}", exc)


class BaseAppliveryClient:
    """Shared transport for the Applivery integration API."""

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.api_key
        self._base_url = settings.base_url
        self._timeout = settings.request_timeout

    @staticmethod
    def _join_url(base_url: str, path: str) -> str:
        return f"{base_url.rstrip('/')}/{path.lstrip('/')}"

    def _headers(self, json_body: bool = True) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key or ''}",
            "Accept": "application/json",
        }
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def _call_applivery(
        self,
        method: str,
        url: str,
        action: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, str]] = None,
        files: Optional[Dict[str, Any]] = None,
        timeout: Optional[httpx.Timeout | float] = None,
    ) -> Dict[str, Any]:
        """
        Send one request and return the decoded JSON body.

        Args:
            method: HTTP method
            url: Absolute URL
            action: Short description used in log lines and error messages
            params: Query parameters
            json_body: JSON payload
            data, files: Multi-part form fields and files
            timeout: Overrides the configured request timeout

        Returns:
            dict: Decoded response envelope

        Raises:
            AppliveryAPIError: status other than 200/201
            AppliveryNetworkError: no response received
            AppliveryParseError: body is not a JSON object
        """
        with log_group(f"Applivery: {action}"):
            logger.debug("applivery request method=%s url=%s params=%s", method, url, params)
            if json_body is not None:
                logger.debug("applivery request body=%s", json.dumps(json_body, default=str))

            try:
                async with httpx.AsyncClient(timeout=timeout or self._timeout) as client:
                    resp = await client.request(
                        method=method,
                        url=url,
                        headers=self._headers(json_body=files is None),
                        params=params,
                        json=json_body,
                        data=data,
                        files=files,
                    )
            except Exception as exc:
                raise classify_transport_error(exc, action, url) from exc

            body_text = _response_text(resp)
            if resp.status_code not in SUCCESS_STATUS_CODES:
                logger.debug("applivery response status=%s url=%s", resp.status_code, url)
                raise AppliveryAPIError(
                    f"Failed to {action}: {resp.reason_phrase or 'Unknown error'}",
                    resp.status_code,
                    body_text,
                )
            logger.debug(
                "applivery response status=%s bytes=%s", resp.status_code, len(body_text or "")
            )

            try:
                body = resp.json()
            except ValueError as exc:
                raise AppliveryParseError(
                    f"Invalid response while trying to {action}: body is not JSON", body_text
                ) from exc
            if not isinstance(body, dict):
                raise AppliveryParseError(
                    f"Invalid response while trying to {action}: expected a JSON object",
                    body_text,
                )
            return body

    @staticmethod
    def _extract_data(body: Dict[str, Any]) -> Dict[str, Any]:
        """Return the `data` object of a response envelope."""
        data = body.get("data")
        if not isinstance(data, dict):
            raise AppliveryParseError(
                "Invalid response structure: missing data object", json.dumps(body, default=str)
            )
        return data

    @staticmethod
    def _to_model(model: Type[ModelT], record: Dict[str, Any]) -> ModelT:
        try:
            return model.model_validate(record)
        except ValidationError as exc:
            raise AppliveryParseError(
                f"Invalid {model.__name__} record: {exc.error_count()} validation error(s)",
                json.dumps(record, default=str),
            ) from exc
