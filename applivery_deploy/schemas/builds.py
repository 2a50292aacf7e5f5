"""
Build schemas — uploaded build records, upload payload and deployer info.
Version: 1.0.0
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from applivery_deploy.utils.date_transform import coerce_timestamp


# Only status the deploy step understands; anything else is "still processing"
BUILD_STATUS_PROCESSED = "processed"


class BuildPlatform(str, Enum):
    IOS = "ios"
    ANDROID = "android"


class NotifyLanguage(str, Enum):
    SPANISH = "es"
    ENGLISH = "en"
    FRENCH = "fr"
    GERMAN = "ge"
    ITALIAN = "it"
    CHINESE = "zh"
    PORTUGUESE = "pt"
    RUSSIAN = "ru"


class DeployerDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    commit: Optional[str] = None
    commitMessage: Optional[str] = None
    branch: Optional[str] = None
    tag: Optional[str] = None
    triggerTimestamp: Optional[str] = None
    ciUrl: Optional[str] = None
    repositoryUrl: Optional[str] = None
    buildUrl: Optional[str] = None
    buildNumber: Optional[str] = None


class DeployerInfo(BaseModel):
    """Provenance of an upload: which CI system triggered it and from where."""
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    info: Optional[DeployerDetails] = None


class UploadedBy(BaseModel):
    id: Optional[str] = None
    email: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    picture: Optional[str] = None


class StorageProvider(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    region: Optional[str] = None
    config: Optional[str] = None


class ApplicationInfo(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    slug: Optional[str] = None
    picture: Optional[str] = None


class Build(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    status: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    versionName: Optional[str] = None
    application: Optional[str] = None
    applicationInfo: Optional[ApplicationInfo] = None
    changelog: Optional[str] = None
    info: Optional[Dict[str, Any]] = None
    size: Optional[float] = None
    processTime: Optional[float] = None
    queuedTime: Optional[float] = None
    versionCode: Optional[str | int] = None
    os: Optional[str] = None  # BuildPlatform value
    deployer: Optional[DeployerInfo] = None
    uploadedBy: Optional[UploadedBy] = None
    storageProvider: Optional[StorageProvider] = None
    createdAt: Optional[Union[datetime, str]] = None
    updatedAt: Optional[Union[datetime, str]] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _null_tags(cls, value):
        return [] if value is None else value

    @field_validator("createdAt", "updatedAt", mode="before")
    @classmethod
    def _timestamp(cls, value):
        return coerce_timestamp(value)

    @property
    def is_processed(self) -> bool:
        return self.status == BUILD_STATUS_PROCESSED


class UploadBuildRequest(BaseModel):
    versionName: str
    buildPlatform: BuildPlatform
    tags: Optional[List[str]] = None
    changelog: Optional[str] = None
    notifyCollaborators: Optional[bool] = None
    notifyEmployees: Optional[bool] = None
    notifyMessage: Optional[str] = None
    notifyLanguage: Optional[NotifyLanguage] = None
    deployer: Optional[DeployerInfo] = None
