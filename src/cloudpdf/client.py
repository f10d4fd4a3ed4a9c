"""High level asynchronous client for the CloudPDF API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Final

import httpx
from pydantic import TypeAdapter, ValidationError

from cloudpdf.auth import Credentials
from cloudpdf.errors import ApiError, WorkflowError
from cloudpdf.models import (
    AccountResponse,
    AuthResponse,
    CreateDocumentParams,
    DeleteResponse,
    DocumentResponse,
    FileResponse,
    UpdateDocumentParams,
    UploadDocumentFileParams,
    ViewerTokenParams,
    WebhookParams,
    WebhookResponse,
    coerce_params,
    to_payload,
)
from cloudpdf.settings import CloudPDFSettings, get_settings
from cloudpdf.signing import DEFAULT_VIEWER_EXPIRES_IN, Duration
from cloudpdf.transport import FileContent, ProgressCallback, Transport

__all__ = ["CloudPDF", "Operation"]

LOGGER = logging.getLogger(__name__)

WORKFLOW_ERROR_MESSAGE: Final[str] = "Something went wrong"


class Operation:
    """Function names the API expects inside signed credentials."""

    GET_AUTH: Final[str] = "APIV2GetAuth"
    GET_ACCOUNT: Final[str] = "APIV2GetAccount"
    CREATE_DOCUMENT: Final[str] = "APIV2CreateDocument"
    GET_DOCUMENT: Final[str] = "APIV2GetDocument"
    UPDATE_DOCUMENT: Final[str] = "APIV2UpdateDocument"
    DELETE_DOCUMENT: Final[str] = "APIV2DeleteDocument"
    CREATE_DOCUMENT_FILE: Final[str] = "APIV2PostDocumentFile"
    GET_DOCUMENT_FILE: Final[str] = "APIV2GetDocumentFile"
    PATCH_DOCUMENT_FILE: Final[str] = "APIV2PatchDocumentFile"
    LIST_WEBHOOKS: Final[str] = "APIV2GetWebhooks"
    CREATE_WEBHOOK: Final[str] = "APIV2CreateWebhook"
    GET_WEBHOOK: Final[str] = "APIV2GetWebhook"
    UPDATE_WEBHOOK: Final[str] = "APIV2UpdateWebhook"
    DELETE_WEBHOOK: Final[str] = "APIV2DeleteWebhook"


class CloudPDF:
    """Manage CloudPDF documents, files, webhooks and viewer tokens.

    Arguments left as ``None`` fall back to the ``CLOUDPDF_*`` environment
    variables read by :class:`~cloudpdf.settings.CloudPDFSettings`; any other
    value, including an empty string, is used as given. This also applies to
    the signing configuration, so ``CloudPDF("key")`` starts in signed mode
    when ``CLOUDPDF_CLOUD_NAME`` and ``CLOUDPDF_SIGNING_SECRET`` are set. Pass
    empty strings or call ``set_signed(False)`` to use the API key only.

    Example:
        >>> client = CloudPDF("api-key", cloud_name="acme", signing_secret="...")
        >>> document = await client.upload_document("report.pdf", {"name": "Report"})
        >>> token = client.get_viewer_token({"id": document.id})

    Raises:
        ConfigurationError: If no API key is configured.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        cloud_name: str | None = None,
        signing_secret: str | None = None,
        base_url: str | None = None,
        settings: CloudPDFSettings | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings_obj = settings or get_settings()
        self.credentials = Credentials.from_settings(
            settings_obj,
            api_key=api_key,
            cloud_name=cloud_name,
            signing_secret=signing_secret,
        )
        self.api = Transport(
            self.credentials,
            base_url or settings_obj.api_url,
            http_transport=http_transport,
        )

    @property
    def is_signed(self) -> bool:
        """Return whether requests are currently sent with signed credentials."""

        return self.api.is_signed

    def set_signed(self, enabled: bool) -> None:
        """Enable or disable signed credentials for subsequent requests.

        Raises:
            ConfigurationError: If enabling without signing configuration.
        """

        self.api.set_signed(enabled)

    async def auth(self) -> AuthResponse:
        data = await self.api.get(Operation.GET_AUTH, "/auth")
        return _parse(AuthResponse, data)

    async def account(self) -> AccountResponse:
        data = await self.api.get(Operation.GET_ACCOUNT, "/account")
        return _parse(AccountResponse, data)

    # Documents

    async def create_document(
        self, params: CreateDocumentParams | Mapping[str, Any]
    ) -> DocumentResponse:
        """Create a document; its file resource carries the upload URL."""

        return _parse(DocumentResponse, await self._post_document(params))

    async def get_document(self, document_id: str) -> DocumentResponse:
        data = await self.api.get(
            Operation.GET_DOCUMENT, f"/documents/{document_id}", {"id": document_id}
        )
        return _parse(DocumentResponse, data)

    async def update_document(
        self,
        document_id: str,
        params: UpdateDocumentParams | Mapping[str, Any],
    ) -> DocumentResponse:
        payload = {
            "id": document_id,
            **to_payload(coerce_params(UpdateDocumentParams, params)),
        }
        data = await self.api.put(
            Operation.UPDATE_DOCUMENT, f"/documents/{document_id}", payload
        )
        return _parse(DocumentResponse, data)

    async def delete_document(self, document_id: str) -> DeleteResponse:
        data = await self.api.delete(
            Operation.DELETE_DOCUMENT, f"/documents/{document_id}", {"id": document_id}
        )
        return _parse(DeleteResponse, data)

    # Document files

    async def create_document_file(self, document_id: str) -> FileResponse:
        """Create a new file version for an existing document."""

        return _parse(FileResponse, await self._post_document_file(document_id))

    async def get_document_file(self, document_id: str, file_id: str) -> FileResponse:
        data = await self.api.get(
            Operation.GET_DOCUMENT_FILE,
            f"/documents/{document_id}/files/{file_id}",
            {"id": document_id, "fileId": file_id},
        )
        return _parse(FileResponse, data)

    async def upload_document_file_complete(
        self,
        document_id: str,
        file_id: str,
        params: UploadDocumentFileParams | Mapping[str, Any],
    ) -> FileResponse:
        """Tell the API the file bytes were uploaded so processing can start."""

        data = await self._patch_document_file(document_id, file_id, params)
        return _parse(FileResponse, data)

    async def upload_document(
        self,
        content: FileContent,
        params: CreateDocumentParams | Mapping[str, Any],
        on_progress: ProgressCallback | None = None,
    ) -> DocumentResponse:
        """Create a document, upload its PDF and mark the upload complete.

        The steps are not transactional: if the upload fails the created
        document is left in the ``WaitingUpload`` state.

        Args:
            content: PDF bytes or a path to the PDF.
            params: Parameters of the new document.
            on_progress: Optional callback receiving upload percentages.

        Returns:
            The created document with its file in the post-upload state.

        Raises:
            WorkflowError: If an API response lacks the file or its upload
                URL, or has an unexpected shape.
            UploadError: If the file could not be uploaded.
            ApiError: If an API call failed.
        """

        data = await self._post_document(params)
        document = _parse(DocumentResponse, data, workflow=True)
        file = await self._upload_file(document.id, document.file, content, on_progress)
        return document.model_copy(update={"file": file})

    async def upload_document_from_path(
        self,
        path: str,
        params: CreateDocumentParams | Mapping[str, Any],
        on_progress: ProgressCallback | None = None,
    ) -> DocumentResponse:
        return await self.upload_document(path, params, on_progress)

    async def upload_new_version(
        self,
        document_id: str,
        content: FileContent,
        on_progress: ProgressCallback | None = None,
    ) -> FileResponse:
        """Replace the PDF of an existing document with a new file version."""

        data = await self._post_document_file(document_id)
        file = _parse(FileResponse, data, workflow=True)
        return await self._upload_file(document_id, file, content, on_progress)

    async def _post_document(
        self, params: CreateDocumentParams | Mapping[str, Any]
    ) -> Any:
        payload = to_payload(coerce_params(CreateDocumentParams, params))
        return await self.api.post(Operation.CREATE_DOCUMENT, "/documents", payload)

    async def _post_document_file(self, document_id: str) -> Any:
        return await self.api.post(
            Operation.CREATE_DOCUMENT_FILE,
            f"/documents/{document_id}/files",
            {"id": document_id},
        )

    async def _patch_document_file(
        self,
        document_id: str,
        file_id: str,
        params: UploadDocumentFileParams | Mapping[str, Any],
    ) -> Any:
        payload = {
            "id": document_id,
            "fileId": file_id,
            **to_payload(coerce_params(UploadDocumentFileParams, params)),
        }
        return await self.api.patch(
            Operation.PATCH_DOCUMENT_FILE,
            f"/documents/{document_id}/files/{file_id}",
            payload,
        )

    async def _upload_file(
        self,
        document_id: str,
        file: FileResponse,
        content: FileContent,
        on_progress: ProgressCallback | None,
    ) -> FileResponse:
        if not file.upload_url:
            raise WorkflowError(WORKFLOW_ERROR_MESSAGE)
        await self.api.upload(file.upload_url, content, on_progress)
        LOGGER.debug(
            "File uploaded, marking complete",
            extra={"document_id": document_id, "file_id": file.id},
        )
        data = await self._patch_document_file(
            document_id, file.id, UploadDocumentFileParams(upload_completed=True)
        )
        return _parse(FileResponse, data, workflow=True)

    # Webhooks

    async def list_webhooks(self) -> list[WebhookResponse]:
        data = await self.api.get(Operation.LIST_WEBHOOKS, "/webhooks")
        items = data.get("webhooks", []) if isinstance(data, dict) else data
        return _parse(list[WebhookResponse], items)

    async def create_webhook(
        self, params: WebhookParams | Mapping[str, Any]
    ) -> WebhookResponse:
        payload = to_payload(coerce_params(WebhookParams, params))
        data = await self.api.post(Operation.CREATE_WEBHOOK, "/webhooks", payload)
        return _parse(WebhookResponse, data)

    async def get_webhook(self, webhook_id: str) -> WebhookResponse:
        data = await self.api.get(
            Operation.GET_WEBHOOK, f"/webhooks/{webhook_id}", {"id": webhook_id}
        )
        return _parse(WebhookResponse, data)

    async def update_webhook(
        self, webhook_id: str, params: WebhookParams | Mapping[str, Any]
    ) -> WebhookResponse:
        payload = {"id": webhook_id, **to_payload(coerce_params(WebhookParams, params))}
        data = await self.api.put(
            Operation.UPDATE_WEBHOOK, f"/webhooks/{webhook_id}", payload
        )
        return _parse(WebhookResponse, data)

    async def delete_webhook(self, webhook_id: str) -> DeleteResponse:
        data = await self.api.delete(
            Operation.DELETE_WEBHOOK, f"/webhooks/{webhook_id}", {"id": webhook_id}
        )
        return _parse(DeleteResponse, data)

    # Viewer

    def get_viewer_token(
        self,
        params: ViewerTokenParams | Mapping[str, Any],
        expires_in: Duration = DEFAULT_VIEWER_EXPIRES_IN,
    ) -> str:
        """Return a signed token granting a viewer access to one document.

        The token is computed locally and works regardless of the request
        mode selected with :meth:`set_signed`.

        Raises:
            ConfigurationError: If the cloud name or signing secret is missing.
        """

        payload = to_payload(coerce_params(ViewerTokenParams, params))
        return self.credentials.signer().sign_viewer_token(payload, expires_in)


def _parse(shape: Any, data: Any, *, workflow: bool = False) -> Any:
    """Validate an untyped response body against ``shape``.

    A body of the wrong shape is reported as :class:`WorkflowError` inside the
    upload workflows and as :class:`ApiError` everywhere else.
    """

    try:
        return TypeAdapter(shape).validate_python(data)
    except ValidationError as exc:
        LOGGER.debug(
            "Unexpected response shape",
            extra={"shape": getattr(shape, "__name__", str(shape))},
        )
        if workflow:
            raise WorkflowError(WORKFLOW_ERROR_MESSAGE) from exc
        raise ApiError("Unexpected response from the CloudPDF API") from exc
