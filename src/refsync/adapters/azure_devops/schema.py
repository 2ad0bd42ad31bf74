"""Pydantic models describing the Azure DevOps Git and Build REST payloads."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from refsync.domain.types import RefUpdateStatus


class AzureDevOpsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GitRefPayload(AzureDevOpsBaseModel):
    name: str
    object_id: str = Field(alias="objectId")


class GitRefUpdatePayload(AzureDevOpsBaseModel):
    """Request body entry for ``POST .../refs``."""

    name: str
    old_object_id: str = Field(alias="oldObjectId")
    new_object_id: str = Field(alias="newObjectId")
    is_locked: bool = Field(default=False, alias="isLocked")
    repository_id: str = Field(alias="repositoryId")


class GitRefUpdateResultPayload(AzureDevOpsBaseModel):
    name: str | None = None
    success: bool
    update_status: RefUpdateStatus = Field(alias="updateStatus")
    repository_id: str = Field(default="", alias="repositoryId")
    old_object_id: str = Field(default="", alias="oldObjectId")
    new_object_id: str = Field(default="", alias="newObjectId")

    @field_validator("update_status", mode="before")
    @classmethod
    def _parse_status(cls, value: object) -> RefUpdateStatus:
        return RefUpdateStatus.from_wire(value)


class GitUserDatePayload(AzureDevOpsBaseModel):
    name: str | None = None
    email: str | None = None
    date: datetime

    @field_validator("date")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class GitCommitRefPayload(AzureDevOpsBaseModel):
    commit_id: str = Field(alias="commitId")
    committer: GitUserDatePayload


class BuildRepositoryPayload(AzureDevOpsBaseModel):
    id: str
    type: str | None = None


class BuildPayload(AzureDevOpsBaseModel):
    id: int
    repository: BuildRepositoryPayload


class GitRefList(AzureDevOpsBaseModel):
    count: int | None = None
    value: list[GitRefPayload] = Field(default_factory=list[GitRefPayload])


class GitRefUpdateResultList(AzureDevOpsBaseModel):
    count: int | None = None
    value: list[GitRefUpdateResultPayload] = Field(
        default_factory=list[GitRefUpdateResultPayload]
    )


class GitCommitRefList(AzureDevOpsBaseModel):
    count: int | None = None
    value: list[GitCommitRefPayload] = Field(default_factory=list[GitCommitRefPayload])


class ErrorResponse(AzureDevOpsBaseModel):
    message: str
    type_key: str | None = Field(default=None, alias="typeKey")
    error_code: int | None = Field(default=None, alias="errorCode")
