"""
Publication schemas — distribution endpoint models.

A publication is the stable distribution URL builds are routed to,
selected by its filter (git branch, tag, last build...).
Version: 1.0.0
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from applivery_deploy.utils.date_transform import coerce_timestamp


class PublicationFilterType(str, Enum):
    LAST = "last"
    BUILDS = "builds"
    GIT_BRANCH = "gitBranch"
    GIT_TAG = "gitTag"
    TAG = "tag"


class PublicationVisibility(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    UNLISTED = "unlisted"


class PublicationSecurity(str, Enum):
    PUBLIC = "public"
    PASSWORD = "password"
    LOGGED = "logged"


class PublicationFilter(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    value: Optional[str] = None


def _iso(value: Optional[Union[datetime, str]]) -> Optional[str]:
    return value.isoformat() if isinstance(value, datetime) else value


class Publication(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    slug: Optional[str] = None
    distributionUrl: Optional[str] = None
    filter: Optional[PublicationFilter] = None
    visibility: Optional[str] = None  # PublicationVisibility value
    security: Optional[str] = None  # PublicationSecurity value
    groups: List[Any] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    # Unparseable timestamps are kept as the raw string
    createdAt: Optional[Union[datetime, str]] = None
    updatedAt: Optional[Union[datetime, str]] = None

    @field_validator("groups", "tags", mode="before")
    @classmethod
    def _null_list(cls, value):
        return [] if value is None else value

    @field_validator("createdAt", "updatedAt", mode="before")
    @classmethod
    def _timestamp(cls, value):
        return coerce_timestamp(value)

    def matches_filter(self, filter_type: str, filter_value: str) -> bool:
        """Exact match on filter type and value."""
        if self.filter is None:
            return False
        return self.filter.type == filter_type and self.filter.value == filter_value

    def summary(self) -> Dict[str, Any]:
        """Log friendly subset of the publication."""
        return {
            "id": self.id,
            "slug": self.slug,
            "distributionUrl": self.distributionUrl,
            "createdAt": _iso(self.createdAt),
            "updatedAt": _iso(self.updatedAt),
        }


class PublicationQuery(BaseModel):
    """Search filters for the distributions endpoint."""
    visibility: Optional[PublicationVisibility] = None
    security: Optional[PublicationSecurity] = None
    filterType: Optional[PublicationFilterType] = None
    filterValue: Optional[str] = None
    slug: Optional[str] = None

    def to_params(self) -> Dict[str, str]:
        params = {}
        for key, value in self.model_dump(exclude_none=True, mode="json").items():
            params[key] = str(value)
        return params


class CreatePublicationRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    slug: str
    security: Optional[PublicationSecurity] = None
    password: str = ""
    visibility: PublicationVisibility
    filter: PublicationFilter
    tags: Optional[List[str]] = None
    groups: Optional[List[str]] = None
    showDevInfo: Optional[bool] = None
    showHistory: Optional[bool] = None
