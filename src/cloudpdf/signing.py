"""Signed credential helpers.

CloudPDF accepts short-lived HS256 JSON Web Tokens in place of the static API
key. Every token is scoped to a single API function: the payload carries the
function name and the parameters of the call, and the header carries the cloud
name as key id so the API can pick the matching signing secret.

Provides:
- parse_duration(value): convert ``"15s"``/``"1h"``/seconds into seconds
- Signer(cloud_name, signing_secret): credential factory
- SignedClaims: decoded view of a verified credential
"""

from __future__ import annotations

import logging
import math
import re
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Final, Union

import jwt

from cloudpdf.errors import ConfigurationError, InvalidCredentialError

__all__ = [
    "ALGORITHM",
    "DEFAULT_EXPIRES_IN",
    "DEFAULT_VIEWER_EXPIRES_IN",
    "Duration",
    "SignedClaims",
    "Signer",
    "VIEWER_FUNCTION",
    "parse_duration",
]

LOGGER = logging.getLogger(__name__)

ALGORITHM: Final[str] = "HS256"
# The API verifier matches this literal, including its casing.
TOKEN_TYPE: Final[str] = "JWt"
VIEWER_FUNCTION: Final[str] = "APIGetDocument"
DEFAULT_EXPIRES_IN: Final[str] = "15s"
DEFAULT_VIEWER_EXPIRES_IN: Final[str] = "1h"
NOT_CONFIGURED_MESSAGE: Final[str] = "cloudName and signingSecret should be set"

Duration = Union[int, float, str, timedelta]

_UNIT_SECONDS: Final[dict[str, float]] = {
    "ms": 0.001,
    "msec": 0.001,
    "msecs": 0.001,
    "millisecond": 0.001,
    "milliseconds": 0.001,
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
    "w": 604800,
    "week": 604800,
    "weeks": 604800,
    "y": 31557600,
    "yr": 31557600,
    "yrs": 31557600,
    "year": 31557600,
    "years": 31557600,
}
_DURATION_RE: Final[re.Pattern[str]] = re.compile(
    r"^\s*(?P<amount>\d+(?:\.\d+)?|\.\d+)\s*(?P<unit>[a-z]+)?\s*$", re.IGNORECASE
)


def parse_duration(value: Duration) -> int:
    """Return ``value`` as a whole number of seconds.

    Args:
        value: Seconds as a number, a :class:`~datetime.timedelta`, or a
            compact string such as ``"15s"``, ``"10m"``, ``"1h"`` or ``"2d"``.
            A bare digit string is read as seconds.

    Returns:
        The duration in seconds, floored to an integer. Sub-second values
        give ``0``, which signs a credential that is already expired.

    Raises:
        ValueError: If the value is malformed or negative.
    """

    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, timedelta):
        seconds = value.total_seconds()
    elif isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        match = _DURATION_RE.match(value)
        if match is None:
            raise ValueError(f"Invalid duration: {value!r}")
        unit = (match.group("unit") or "s").lower()
        if unit not in _UNIT_SECONDS:
            raise ValueError(f"Unknown duration unit {unit!r} in {value!r}")
        seconds = float(match.group("amount")) * _UNIT_SECONDS[unit]
    else:
        raise ValueError(f"Invalid duration: {value!r}")

    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError(f"Duration must be finite and not negative: {value!r}")
    return int(seconds)


@dataclass(frozen=True, slots=True)
class SignedClaims:
    """Claims recovered from a verified credential."""

    function: str
    params: Any
    issued_at: datetime
    expires_at: datetime
    key_id: str | None

    @property
    def lifetime(self) -> timedelta:
        """Return the validity window the credential was issued with."""

        return self.expires_at - self.issued_at


class Signer:
    """Create HS256 credentials scoped to a CloudPDF API function.

    Args:
        cloud_name: Cloud identifier, embedded as the ``kid`` header.
        signing_secret: Shared secret used for the HMAC signature.

    Raises:
        ConfigurationError: If either value is missing or empty.
    """

    algorithm = ALGORITHM

    def __init__(self, cloud_name: str | None, signing_secret: str | None) -> None:
        if not cloud_name or not signing_secret:
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE)
        self.cloud_name = cloud_name
        self._secret = signing_secret

    def __repr__(self) -> str:
        return f"{type(self).__name__}(cloud_name={self.cloud_name!r})"

    def sign(
        self,
        operation_name: str,
        params: Any = None,
        expires_in: Duration = DEFAULT_EXPIRES_IN,
    ) -> str:
        """Return a credential authorising ``operation_name`` with ``params``.

        Args:
            operation_name: API function the credential is valid for. The API
                compares it verbatim with the function being called.
            params: JSON-serialisable parameters of the call. ``None`` is
                signed as an empty object.
            expires_in: Lifetime of the credential, see :func:`parse_duration`.

        Returns:
            The compact JWT string.
        """

        lifetime = parse_duration(expires_in)
        issued_at = int(time.time())
        payload = {
            "function": operation_name,
            "params": {} if params is None else params,
            "iat": issued_at,
            "exp": issued_at + lifetime,
        }
        headers = {"alg": ALGORITHM, "typ": TOKEN_TYPE, "kid": self.cloud_name}
        LOGGER.debug(
            "Signing credential",
            extra={"function": operation_name, "expires_in_seconds": lifetime},
        )
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM, headers=headers)

    def sign_viewer_token(
        self,
        params: Mapping[str, Any],
        expires_in: Duration = DEFAULT_VIEWER_EXPIRES_IN,
    ) -> str:
        """Return a credential for a viewer session on a single document.

        Viewer tokens live longer than call credentials because they are
        handed to people reading a document rather than to a machine.
        """

        return self.sign(VIEWER_FUNCTION, dict(params), expires_in)

    def verify(self, token: str, *, verify_expiry: bool = True) -> SignedClaims:
        """Verify ``token`` with this signer's secret and return its claims.

        Args:
            token: Credential created by :meth:`sign`.
            verify_expiry: Reject credentials whose ``exp`` has passed.

        Returns:
            The decoded :class:`SignedClaims`.

        Raises:
            InvalidCredentialError: If the signature, algorithm, expiry or
                payload shape is not acceptable.
        """

        try:
            header = jwt.get_unverified_header(token)
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={
                    "verify_exp": verify_expiry,
                    "require": ["exp", "iat"],
                },
            )
        except jwt.PyJWTError as exc:
            raise InvalidCredentialError(f"Invalid credential: {exc}") from exc

        function = payload.get("function")
        if not isinstance(function, str):
            raise InvalidCredentialError("Credential payload is missing 'function'")

        return SignedClaims(
            function=function,
            params=payload.get("params"),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            key_id=header.get("kid"),
        )
