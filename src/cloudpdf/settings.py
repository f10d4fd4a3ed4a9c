"""Environment-backed settings primitives for :mod:`cloudpdf`."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["DEFAULT_API_URL", "CloudPDFSettings", "get_settings"]

DEFAULT_API_URL = "https://api.cloudpdf.io/v2"


class CloudPDFSettings(BaseSettings):
    """Expose environment-derived configuration for the CloudPDF client.

    All environment lookups made by the library go through this class.
    Explicit arguments given to :class:`cloudpdf.CloudPDF` always take
    precedence over these values.

    Attributes:
        api_key: Static API key sent when the client is not in signed mode.
        cloud_name: Cloud identifier used as the ``kid`` of signed
            credentials.
        signing_secret: Shared secret used to sign credentials with HS256.
        api_url: Base URL of the CloudPDF REST API.
    """

    api_key: str | None = Field(default=None, alias="CLOUDPDF_API_KEY")
    cloud_name: str | None = Field(default=None, alias="CLOUDPDF_CLOUD_NAME")
    signing_secret: str | None = Field(
        default=None, alias="CLOUDPDF_SIGNING_SECRET"
    )
    api_url: str = Field(default=DEFAULT_API_URL, alias="CLOUDPDF_API_URL")

    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    @field_validator("api_key", "cloud_name", "signing_secret", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> str | None:
        """Treat unset and blank values the same way.

        Args:
            value: Raw environment value.

        Returns:
            The stripped string, or ``None`` when nothing usable was set.
        """

        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("api_url", mode="before")
    @classmethod
    def _normalise_url(cls, value: object) -> str:
        if value in (None, ""):
            return DEFAULT_API_URL
        return str(value).strip().rstrip("/")


def get_settings() -> CloudPDFSettings:
    """Return a :class:`CloudPDFSettings` instance.

    Returns:
        Settings parsed from environment variables.
    """

    return CloudPDFSettings()
