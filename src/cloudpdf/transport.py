"""Authenticated HTTP transport for the CloudPDF REST API."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any, Final, Union

import httpx

from cloudpdf.auth import ApiKeyAuth, AuthMode, Credentials, SignedAuth, initial_mode
from cloudpdf.errors import ApiError, UploadError
from cloudpdf.settings import DEFAULT_API_URL

__all__ = [
    "AUTH_HEADER",
    "FileContent",
    "ProgressCallback",
    "Transport",
    "UPLOAD_CHUNK_SIZE",
]

LOGGER = logging.getLogger(__name__)

AUTH_HEADER: Final[str] = "X-Authorization"
JSON_CONTENT_TYPE: Final[str] = "application/json"
PDF_CONTENT_TYPE: Final[str] = "application/pdf"
UPLOAD_CHUNK_SIZE: Final[int] = 64 * 1024

FileContent = Union[bytes, bytearray, memoryview, str, "os.PathLike[str]"]
ProgressCallback = Callable[[int], None]


class Transport:
    """Issue CloudPDF API requests with the configured authorisation.

    Every request carries either the static API key or a credential signed
    for that request's operation in the ``X-Authorization`` header. Each call
    opens its own :class:`httpx.AsyncClient`; nothing is pooled, retried or
    timed out by the transport.

    Args:
        credentials: API key and optional signing configuration.
        base_url: Root URL that request paths are appended to.
        http_transport: Optional httpx transport, mainly for tests.
    """

    def __init__(
        self,
        credentials: Credentials,
        base_url: str = DEFAULT_API_URL,
        *,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self._http_transport = http_transport
        self._mode: AuthMode = initial_mode(credentials)

    @property
    def mode(self) -> AuthMode:
        """Return the active authorisation mode."""

        return self._mode

    @property
    def is_signed(self) -> bool:
        """Return ``True`` while requests carry signed credentials."""

        return isinstance(self._mode, SignedAuth)

    def set_signed(self, enabled: bool) -> None:
        """Switch between signed credentials and the static API key.

        Raises:
            ConfigurationError: If signing is enabled without a cloud name and
                signing secret. The current mode is kept in that case.
        """

        if enabled:
            self._mode = SignedAuth(self.credentials.signer())
        else:
            self._mode = ApiKeyAuth(self.credentials.api_key)

    def headers_for(self, operation_name: str, params: Any = None) -> dict[str, str]:
        """Return the headers for a request to ``operation_name``."""

        payload = {} if params is None else params
        return {
            "Content-Type": JSON_CONTENT_TYPE,
            AUTH_HEADER: self._mode.token(operation_name, payload),
        }

    async def get(self, operation_name: str, path: str, params: Any = None) -> Any:
        return await self._request("GET", operation_name, path, params, send_body=False)

    async def delete(self, operation_name: str, path: str, params: Any = None) -> Any:
        return await self._request(
            "DELETE", operation_name, path, params, send_body=False
        )

    async def post(self, operation_name: str, path: str, params: Any = None) -> Any:
        return await self._request("POST", operation_name, path, params, send_body=True)

    async def put(self, operation_name: str, path: str, params: Any = None) -> Any:
        return await self._request("PUT", operation_name, path, params, send_body=True)

    async def patch(self, operation_name: str, path: str, params: Any = None) -> Any:
        return await self._request(
            "PATCH", operation_name, path, params, send_body=True
        )

    async def upload(
        self,
        upload_url: str,
        content: FileContent,
        on_progress: ProgressCallback | None = None,
        *,
        content_type: str = PDF_CONTENT_TYPE,
    ) -> httpx.Response:
        """PUT raw file bytes to a pre-signed upload URL.

        The URL itself authorises the upload, so no API credential is sent.

        Args:
            upload_url: One-time URL issued by the API for this file.
            content: File bytes, or a path whose content is read into memory.
            on_progress: Called with integer percentages as the body is sent.
                Values never decrease and the last one is always ``100``.
            content_type: Media type announced for the upload.

        Returns:
            The response of the storage service.

        Raises:
            UploadError: If the file cannot be read or the upload fails.
        """

        data = _read_content(content)
        headers = {"Content-Type": content_type, "Content-Length": str(len(data))}
        LOGGER.debug("Uploading file content", extra={"size_bytes": len(data)})
        try:
            async with self._client() as client:
                response = await client.put(
                    upload_url,
                    content=_iter_with_progress(data, on_progress),
                    headers=headers,
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise UploadError("Upload error") from exc
        LOGGER.debug(
            "Upload finished",
            extra={"size_bytes": len(data), "status_code": response.status_code},
        )
        return response

    async def _request(
        self,
        method: str,
        operation_name: str,
        path: str,
        params: Any,
        *,
        send_body: bool,
    ) -> Any:
        payload = {} if params is None else params
        headers = self.headers_for(operation_name, payload)
        url = f"{self.base_url}{path}"
        LOGGER.debug(
            "CloudPDF request",
            extra={
                "operation": operation_name,
                "method": method,
                "path": path,
                "auth_mode": self._mode.name,
            },
        )
        try:
            async with self._client() as client:
                response = await client.request(
                    method,
                    url,
                    headers=headers,
                    json=payload if send_body else None,
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise _status_error(exc.response) from exc
        except httpx.HTTPError as exc:
            raise ApiError(f"HTTP error: {exc}") from exc
        return _decode_body(response)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=None, transport=self._http_transport)


def _status_error(response: httpx.Response) -> ApiError:
    code = _extract_error_code(response)
    if code is None:
        message = f"HTTP error {response.status_code}"
    else:
        message = f"HTTP error {code}"
    return ApiError(message, code=code, status_code=response.status_code)


def _extract_error_code(response: httpx.Response) -> str | None:
    """Return the ``code`` field of an error body, or ``None`` when absent."""

    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    code = body.get("code")
    if code is None and isinstance(body.get("error"), dict):
        code = body["error"].get("code")
    return None if code is None else str(code)


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise ApiError(
            "HTTP error: response body is not valid JSON",
            status_code=response.status_code,
        ) from exc


def _read_content(content: FileContent) -> bytes:
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content)
    if isinstance(content, (str, os.PathLike)):
        try:
            return Path(content).read_bytes()
        except OSError as exc:
            raise UploadError(f"Upload error: cannot read {content}") from exc
    raise TypeError(
        f"Upload content must be bytes or a path, not {type(content).__name__}"
    )


async def _iter_with_progress(
    data: bytes, on_progress: ProgressCallback | None
) -> AsyncIterator[bytes]:
    total = len(data)
    reported = -1
    view = memoryview(data)
    for offset in range(0, total, UPLOAD_CHUNK_SIZE):
        chunk = view[offset : offset + UPLOAD_CHUNK_SIZE]
        yield bytes(chunk)
        percent = (offset + len(chunk)) * 100 // total
        if on_progress is not None and percent != reported:
            reported = percent
            on_progress(percent)
    if on_progress is not None and reported != 100:
        on_progress(100)
