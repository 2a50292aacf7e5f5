"""
Pytest configuration and shared fixtures for the Applivery deploy tests.

Provides settings, mocked clients, an httpx.AsyncClient patch and sample
publication/build payloads.
Version: 1.0.0
"""
import os
from typing import Any, Dict, List, Optional

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from applivery_deploy.core import log_config
from applivery_deploy.schemas.builds import Build
from applivery_deploy.schemas.publications import Publication


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop CI inputs and runner variables so tests never read the host's."""
    for key in list(os.environ):
        if key.startswith(("INPUT_", "APPLIVERY_", "GITHUB_", "RUNNER_")):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture(autouse=True)
def clear_secrets():
    log_config._secrets.clear()
    yield
    log_config._secrets.clear()


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_settings():
    """Settings object with test defaults (no real credentials)."""
    from applivery_deploy.core.config import Settings
    return Settings(
        api_key="test-api-key",
        base_url="https://api.applivery.test/v1",
        base_uploads_url="https://upload.applivery.test/v1/",
        branch_name="feature/login",
        build_path="/tmp/app.ipa",
        tags=["nightly"],
        max_attempts=3,
        wait_time=0,
    )


@pytest.fixture
def build_file(tmp_path):
    """A small build artifact on disk."""
    path = tmp_path / "App.ipa"
    path.write_bytes(b"PK\x03\x04fake-ipa-contents")
    return path


# ---------------------------------------------------------------------------
# HTTP transport (mocked)
# ---------------------------------------------------------------------------

def make_response(
    status_code: int = 200,
    body: Any = None,
    text: Optional[str] = None,
    reason: str = "OK",
) -> MagicMock:
    """httpx.Response stand-in exposing what the clients read."""
    import json

    response = MagicMock()
    response.status_code = status_code
    response.reason_phrase = reason
    if text is None:
        text = json.dumps(body) if body is not None else ""
    response.text = text
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def mock_http():
    """Patch httpx.AsyncClient; set mock_http.request.side_effect / return_value."""
    with patch("applivery_deploy.clients.base_client.httpx.AsyncClient") as MockAsyncClient:
        mock_ctx = AsyncMock()
        mock_ctx.request = AsyncMock(return_value=make_response(200, {"data": {}}))
        MockAsyncClient.return_value.__aenter__ = AsyncMock(return_value=mock_ctx)
        MockAsyncClient.return_value.__aexit__ = AsyncMock(return_value=False)
        mock_ctx.async_client_class = MockAsyncClient
        yield mock_ctx


# ---------------------------------------------------------------------------
# Sample payloads
# ---------------------------------------------------------------------------

def publication_payload(
    id: str = "pub-1",
    slug: str = "feature-login",
    filter_type: str = "gitBranch",
    filter_value: str = "feature/login",
    created_at: str = "2024-03-01T10:00:00.000Z",
) -> Dict[str, Any]:
    return {
        "id": id,
        "slug": slug,
        "distributionUrl": f"https://dist.applivery.test/{slug}",
        "filter": {"type": filter_type, "value": filter_value},
        "visibility": "unlisted",
        "security": "public",
        "groups": [],
        "tags": [],
        "createdAt": created_at,
        "updatedAt": created_at,
    }


def build_payload(id: str = "build-1", status: str = "pending") -> Dict[str, Any]:
    return {
        "id": id,
        "status": status,
        "tags": ["nightly"],
        "versionName": "feature/login",
        "application": "app-1",
        "os": "ios",
        "createdAt": "2024-03-01T10:05:00.000Z",
        "updatedAt": "2024-03-01T10:05:00.000Z",
    }


def page_envelope(items: List[Dict[str, Any]], current_page: int = 1, total_pages: int = 1):
    return {
        "data": {
            "items": items,
            "totalItems": len(items),
            "itemsPerPage": 25,
            "currentPage": current_page,
            "totalPages": total_pages,
        }
    }


def make_publication(**kwargs) -> Publication:
    return Publication.model_validate(publication_payload(**kwargs))


def make_build(**kwargs) -> Build:
    return Build.model_validate(build_payload(**kwargs))


# ---------------------------------------------------------------------------
# Clients (mocked)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_publications_client():
    """Mocked PublicationsClient."""
    client = MagicMock()
    client.fetch_publications = AsyncMock(return_value=[])
    client.create_publication = AsyncMock(return_value=make_publication(id="pub-new"))
    return client


@pytest.fixture
def mock_builds_client():
    """Mocked BuildsClient."""
    client = MagicMock()
    client.upload_build = AsyncMock(return_value=make_build(status="processed"))
    client.get_build = AsyncMock(return_value=make_build(status="processed"))
    return client


@pytest.fixture
def mock_outputs():
    """In-memory outputs sink."""
    from applivery_deploy.core.actions import ActionOutputs
    return ActionOutputs(output_path="")
