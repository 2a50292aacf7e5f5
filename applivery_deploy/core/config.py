"""
Settings — deploy step inputs read from the CI environment.

GitHub Actions exposes each `with:` input as INPUT_<NAME> (upper case,
hyphens kept). For local runs the same inputs can be given as
APPLIVERY_<NAME> (upper snake case), directly or through a .env file.
Version: 1.0.0
"""
import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from applivery_deploy.schemas.builds import BuildPlatform


load_dotenv()


DEFAULT_BASE_URL = "https://api.applivery.io/v1"
DEFAULT_UPLOADS_URL = "https://upload.applivery.io/v1"


def get_input(name: str) -> Optional[str]:
    """Read a step input by its hyphenated name. Empty values count as unset."""
    for key in (
        f"INPUT_{name.upper()}",
        f"APPLIVERY_{name.upper().replace('-', '_')}",
    ):
        value = os.getenv(key)
        if value is not None and value.strip():
            return value.strip()
    return None


def _branch_from_ref() -> Optional[str]:
    ref = os.getenv("GITHUB_REF")
    if not ref:
        return None
    return ref.replace("refs/heads/", "")


class Settings(BaseModel):
    model_config = ConfigDict(validate_default=True)

    # Applivery API
    api_key: Optional[str] = Field(default_factory=lambda: get_input("api-key"))
    base_url: str = Field(
        default_factory=lambda: get_input("base-url") or DEFAULT_BASE_URL
    )
    base_uploads_url: str = Field(
        default_factory=lambda: get_input("base-uploads-url") or DEFAULT_UPLOADS_URL
    )
    request_timeout: float = Field(
        default_factory=lambda: get_input("request-timeout") or 30.0, gt=0
    )
    # Large artifacts on slow runners; 0 disables the read/write timeout
    upload_timeout: Optional[float] = Field(
        default_factory=lambda: get_input("upload-timeout") or 600.0, ge=0
    )

    # Publication
    publication_password: Optional[str] = Field(
        default_factory=lambda: get_input("publication-password")
    )
    branch_name: Optional[str] = Field(
        default_factory=lambda: get_input("branch-name") or _branch_from_ref()
    )
    slug_name: Optional[str] = Field(default_factory=lambda: get_input("slug-name"))

    # Build
    build_path: Optional[str] = Field(default_factory=lambda: get_input("build-path"))
    build_platform: BuildPlatform = Field(
        default_factory=lambda: get_input("build-platform") or BuildPlatform.IOS
    )
    changelog: Optional[str] = Field(default_factory=lambda: get_input("changelog"))
    tags: List[str] = Field(default_factory=lambda: get_input("tags"))

    # Processing poll
    skip_processing: bool = Field(
        default_factory=lambda: get_input("skip-processing") or False
    )
    max_attempts: int = Field(
        default_factory=lambda: get_input("max-attempts") or 10, ge=0
    )
    wait_time: int = Field(default_factory=lambda: get_input("wait-time") or 10, ge=0)

    @field_validator("upload_timeout")
    @classmethod
    def _zero_is_unlimited(cls, value):
        return value or None

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value):
        if value is None:
            workflow = os.getenv("GITHUB_WORKFLOW")
            return [workflow] if workflow else []
        if isinstance(value, str):
            return [tag.strip() for tag in value.split(",") if tag.strip()]
        return value

    @property
    def secrets(self) -> List[str]:
        """Values that must never appear in logs."""
        return [s for s in (self.api_key, self.publication_password) if s]

    def missing_required(self) -> List[str]:
        missing = []
        if not self.api_key:
            missing.append("api-key")
        if not self.build_path:
            missing.append("build-path")
        if not self.branch_name:
            missing.append("branch-name")
        return missing


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
