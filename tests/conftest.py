"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
import inspect
import json
import os
import sys
from collections.abc import Callable
from typing import Any

import httpx
import pytest

# Ensure src/ is on sys.path for tests so the src layout is used during test runs
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

API_KEY = "test-api-key"
CLOUD_NAME = "acme"
SIGNING_SECRET = "s3cret-signing-key-with-enough-bytes-for-hs256"
BASE_URL = "https://api.test/v2"
UPLOAD_URL = "https://uploads.test/bucket/file.pdf?signature=abc"


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "asyncio: mark test as requiring an event loop")


def pytest_pyfunc_call(pyfuncitem: Any) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    if inspect.iscoroutinefunction(pyfuncitem.obj):
        call_kwargs = {
            name: pyfuncitem.funcargs[name]
            for name in pyfuncitem._fixtureinfo.argnames  # type: ignore[attr-defined]
        }

        event_loop = asyncio.new_event_loop()
        try:
            event_loop.run_until_complete(pyfuncitem.obj(**call_kwargs))
        finally:
            event_loop.close()
        return True
    return None


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer credentials out of the test run."""

    for name in (
        "CLOUDPDF_API_KEY",
        "CLOUDPDF_CLOUD_NAME",
        "CLOUDPDF_SIGNING_SECRET",
        "CLOUDPDF_API_URL",
    ):
        monkeypatch.delenv(name, raising=False)


class FakeServer:
    """Route-table stand-in for the CloudPDF API and the upload bucket.

    Routes map ``(method, url)`` to a response factory. Every request is
    recorded together with its fully read body.
    """

    def __init__(self) -> None:
        self.routes: dict[
            tuple[str, str], Callable[[httpx.Request], httpx.Response]
        ] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        url: str,
        *,
        status_code: int = 200,
        json_body: Any = None,
        content: bytes | None = None,
    ) -> None:
        def _respond(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status_code, content=content)
            return httpx.Response(status_code, json=json_body)

        self.routes[(method, url)] = _respond

    def add_error(self, method: str, url: str, exc: Exception) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc

        self.routes[(method, url)] = _raise

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, str(request.url))
        if key not in self.routes:
            return httpx.Response(404, json={"code": "route_not_found"})
        return self.routes[key](request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def last(self, method: str | None = None) -> httpx.Request:
        for request in reversed(self.requests):
            if method is None or request.method == method:
                return request
        raise AssertionError(f"no {method or 'HTTP'} request recorded")

    @staticmethod
    def json_of(request: httpx.Request) -> Any:
        return json.loads(request.content)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


def document_body(upload_url: str | None = UPLOAD_URL) -> dict[str, Any]:
    return {
        "id": "doc-1",
        "name": "Quarterly report",
        "description": None,
        "file": {"id": "file-1", "status": "WaitingUpload", "uploadUrl": upload_url},
        "defaultPermissions": {
            "download": "NotAllowed",
            "search": True,
            "selection": True,
            "info": [],
        },
    }
