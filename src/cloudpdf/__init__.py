"""CloudPDF - asynchronous client for the CloudPDF document API."""

from __future__ import annotations

from importlib import import_module
from typing import Any, TYPE_CHECKING

__all__ = [
    "ApiError",
    "CloudPDF",
    "CloudPDFError",
    "ConfigurationError",
    "FileStatus",
    "Signer",
    "UploadError",
    "WorkflowError",
]

__version__ = "0.1.0"

if TYPE_CHECKING:
    from .client import CloudPDF
    from .errors import (
        ApiError,
        CloudPDFError,
        ConfigurationError,
        UploadError,
        WorkflowError,
    )
    from .models import FileStatus
    from .signing import Signer


def __getattr__(name: str) -> Any:
    """Lazily import submodules so ``import cloudpdf`` stays cheap."""

    module_map = {
        "ApiError": "errors",
        "CloudPDF": "client",
        "CloudPDFError": "errors",
        "ConfigurationError": "errors",
        "FileStatus": "models",
        "Signer": "signing",
        "UploadError": "errors",
        "WorkflowError": "errors",
    }

    if name not in module_map:
        raise AttributeError(name)

    module = import_module(f".{module_map[name]}", __name__)
    return getattr(module, name)
