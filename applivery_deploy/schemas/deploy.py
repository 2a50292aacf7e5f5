"""
Deploy schemas — one run's request and result.
Version: 1.0.0
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from applivery_deploy.core.config import Settings
from applivery_deploy.schemas.builds import Build, BuildPlatform, DeployerInfo
from applivery_deploy.schemas.publications import Publication
from applivery_deploy.utils.slug import sanitize_branch_name


class DeployRequest(BaseModel):
    branch_name: str
    slug_name: str
    build_path: str
    build_platform: BuildPlatform = BuildPlatform.IOS
    publication_password: Optional[str] = None
    changelog: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    skip_processing: bool = False
    max_attempts: int = Field(default=10, ge=0)
    wait_time: int = Field(default=10, ge=0)  # seconds
    deployer: Optional[DeployerInfo] = None

    @classmethod
    def from_settings(
        cls, settings: Settings, deployer: Optional[DeployerInfo] = None
    ) -> "DeployRequest":
        """Slug defaults to the sanitized branch name."""
        branch_name = settings.branch_name or ""
        return cls(
            branch_name=branch_name,
            slug_name=settings.slug_name or sanitize_branch_name(branch_name),
            build_path=settings.build_path or "",
            build_platform=settings.build_platform,
            publication_password=settings.publication_password,
            changelog=settings.changelog,
            tags=settings.tags,
            skip_processing=settings.skip_processing,
            max_attempts=settings.max_attempts,
            wait_time=settings.wait_time,
            deployer=deployer,
        )


class DeployResult(BaseModel):
    publication: Publication
    build: Build
    created_publication: bool = False
