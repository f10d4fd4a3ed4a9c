"""Pydantic models for CloudPDF request parameters and API responses."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "AccountResponse",
    "AuthResponse",
    "CreateDocumentParams",
    "DefaultPermissions",
    "DeleteResponse",
    "DocumentResponse",
    "DownloadPolicy",
    "FileResponse",
    "FileStatus",
    "InfoField",
    "PermissionResponse",
    "UpdateDocumentParams",
    "UploadDocumentFileParams",
    "ViewerTokenParams",
    "Watermark",
    "WebhookParams",
    "WebhookResponse",
    "coerce_params",
    "to_payload",
]

DownloadPolicy = Literal["NotAllowed", "Allowed", "EmailRequired"]
InfoField = Literal["email", "name", "organization", "phone"]

ParamsT = TypeVar("ParamsT", bound="RequestModel")


class RequestModel(BaseModel):
    """Base for parameters sent to the API in camelCase.

    Known fields are validated; unknown keys are passed through as given so
    newer API parameters can be used without a client release.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )


class ResponseModel(BaseModel):
    """Base for API responses; unknown fields are ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class FileStatus(str, Enum):
    """Processing state of an uploaded document file.

    The API moves a file from ``WaitingUpload`` to ``Processing`` once the
    client marks its upload complete, then to ``Completed`` or ``Failed``.
    """

    WAITING_UPLOAD = "WaitingUpload"
    PROCESSING = "Processing"
    COMPLETED = "Completed"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in (FileStatus.COMPLETED, FileStatus.FAILED)


class DefaultPermissions(RequestModel):
    """Permissions applied to viewers of a document."""

    download: DownloadPolicy | None = None
    search: bool | None = None
    selection: bool | None = None
    info: list[InfoField] | None = None


class Watermark(RequestModel):
    """Text stamped over every page shown in a viewer session."""

    text: str = Field(..., min_length=1)
    font_size: int | None = Field(default=None, gt=0)
    opacity: float | None = Field(default=None, ge=0.0, le=1.0)
    color: str | None = None
    rotation: float | None = None


class CreateDocumentParams(RequestModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    parent_id: str | None = None
    tags: list[str] | None = None
    default_permissions: DefaultPermissions | None = None


class UpdateDocumentParams(RequestModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    parent_id: str | None = None
    tags: list[str] | None = None
    default_permissions: DefaultPermissions | None = None


class UploadDocumentFileParams(RequestModel):
    upload_completed: bool


class ViewerTokenParams(RequestModel):
    """Permissions granted to a single viewer session."""

    id: str = Field(..., min_length=1)
    download: DownloadPolicy | None = None
    search: bool | None = None
    selection: bool | None = None
    info: list[InfoField] | None = None
    watermark: Watermark | None = None


class WebhookParams(RequestModel):
    url: str = Field(..., min_length=1)
    events: list[str] | None = None
    enabled: bool | None = None
    description: str | None = None


class AuthResponse(ResponseModel):
    organization_name: str
    message: str


class AccountResponse(ResponseModel):
    organization_name: str
    plan: str
    allowed_monthly_uploads: int
    used_monthly_uploads: int
    allowed_monthly_views: int
    used_monthly_views: int
    allowed_storage: int
    used_storage: Any = None


class FileResponse(ResponseModel):
    id: str
    status: FileStatus
    upload_url: str | None = None


class PermissionResponse(ResponseModel):
    download: DownloadPolicy
    search: bool
    selection: bool
    info: list[InfoField] = Field(default_factory=list)


class DocumentResponse(ResponseModel):
    id: str
    name: str
    description: str | None = None
    file: FileResponse
    default_permissions: PermissionResponse | None = None


class DeleteResponse(ResponseModel):
    deletion_time: int


class WebhookResponse(ResponseModel):
    id: str
    url: str
    events: list[str] = Field(default_factory=list)
    enabled: bool = True
    description: str | None = None


def coerce_params(
    model: type[ParamsT], params: ParamsT | Mapping[str, Any]
) -> ParamsT:
    """Return ``params`` as an instance of ``model``.

    Plain mappings may use either camelCase or snake_case keys.
    """

    if isinstance(params, model):
        return params
    return model.model_validate(dict(params))


def to_payload(params: RequestModel) -> dict[str, Any]:
    """Serialise request parameters the way the API expects them."""

    return params.model_dump(mode="json", by_alias=True, exclude_none=True)
