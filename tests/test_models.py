"""Tests for request and response models."""

import pytest
from pydantic import ValidationError

from cloudpdf.models import (
    CreateDocumentParams,
    DocumentResponse,
    FileStatus,
    UploadDocumentFileParams,
    coerce_params,
    to_payload,
)

from conftest import document_body


def test_payload_is_camel_case_without_unset_fields():
    params = coerce_params(
        CreateDocumentParams,
        {
            "name": "Report",
            "parent_id": "folder-1",
            "defaultPermissions": {"search": False},
        },
    )

    assert to_payload(params) == {
        "name": "Report",
        "parentId": "folder-1",
        "defaultPermissions": {"search": False},
    }


def test_coerce_params_returns_model_instances_unchanged():
    params = UploadDocumentFileParams(upload_completed=True)
    assert coerce_params(UploadDocumentFileParams, params) is params


def test_unknown_request_fields_are_passed_through():
    params = coerce_params(
        CreateDocumentParams, {"name": "Report", "colour": "red", "tags": None}
    )

    assert to_payload(params) == {"name": "Report", "colour": "red"}


def test_known_request_fields_are_still_validated():
    with pytest.raises(ValidationError):
        coerce_params(CreateDocumentParams, {"name": "", "colour": "red"})


def test_responses_ignore_unknown_fields():
    body = dict(document_body(), createdAt="2024-01-01T00:00:00Z")
    body["file"]["sizeBytes"] = 1234

    document = DocumentResponse.model_validate(body)

    assert document.file.upload_url is not None
    assert document.file.status is FileStatus.WAITING_UPLOAD


@pytest.mark.parametrize(
    ("status", "terminal"),
    [
        (FileStatus.WAITING_UPLOAD, False),
        (FileStatus.PROCESSING, False),
        (FileStatus.COMPLETED, True),
        (FileStatus.FAILED, True),
    ],
)
def test_file_status_terminal_states(status, terminal):
    assert status.is_terminal is terminal
