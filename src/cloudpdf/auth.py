"""Credential configuration and per-request authorisation modes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from cloudpdf.errors import ConfigurationError
from cloudpdf.settings import CloudPDFSettings
from cloudpdf.signing import Signer

__all__ = ["ApiKeyAuth", "AuthMode", "Credentials", "SignedAuth", "initial_mode"]


@dataclass(frozen=True, slots=True)
class Credentials:
    """Values identifying the caller to the CloudPDF API."""

    api_key: str
    cloud_name: str | None = None
    signing_secret: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigurationError("apiKey should be set")

    @property
    def can_sign(self) -> bool:
        """Return ``True`` when both signing values are configured."""

        return bool(self.cloud_name and self.signing_secret)

    def signer(self) -> Signer:
        """Return a :class:`Signer` for these credentials.

        Raises:
            ConfigurationError: If the cloud name or signing secret is missing.
        """

        return Signer(self.cloud_name, self.signing_secret)

    @classmethod
    def from_settings(
        cls,
        settings: CloudPDFSettings,
        *,
        api_key: str | None = None,
        cloud_name: str | None = None,
        signing_secret: str | None = None,
    ) -> Credentials:
        """Build credentials, falling back to ``settings`` for ``None`` values.

        An explicit empty string is kept, so it never picks up the environment.
        """

        if api_key is None:
            api_key = settings.api_key or ""
        if cloud_name is None:
            cloud_name = settings.cloud_name
        if signing_secret is None:
            signing_secret = settings.signing_secret
        return cls(
            api_key=api_key, cloud_name=cloud_name, signing_secret=signing_secret
        )


@dataclass(frozen=True, slots=True)
class ApiKeyAuth:
    """Send the static API key with every request."""

    api_key: str = field(repr=False)

    name = "api_key"

    def token(self, operation_name: str, params: Any) -> str:
        _ = operation_name, params
        return self.api_key


@dataclass(frozen=True, slots=True)
class SignedAuth:
    """Send a fresh credential scoped to each request's operation."""

    signer: Signer

    name = "signed"

    def token(self, operation_name: str, params: Any) -> str:
        return self.signer.sign(operation_name, params)


AuthMode = Union[ApiKeyAuth, SignedAuth]


def initial_mode(credentials: Credentials) -> AuthMode:
    """Return the mode a new transport starts in.

    Signed mode is the default whenever signing is configured.
    """

    if credentials.can_sign:
        return SignedAuth(credentials.signer())
    return ApiKeyAuth(credentials.api_key)
