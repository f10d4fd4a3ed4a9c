"""Example script: upload a PDF and print a viewer token for it."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Optional

from cloudpdf import CloudPDF, FileStatus


async def _upload_and_share(path: Path, name: str, expires_in: str) -> dict[str, str]:
    client = CloudPDF()

    def _progress(percent: int) -> None:
        print(f"upload {percent}%")

    document = await client.upload_document(path, {"name": name}, _progress)

    file = document.file
    while not file.status.is_terminal:
        await asyncio.sleep(2)
        file = await client.get_document_file(document.id, file.id)
    if file.status is FileStatus.FAILED:
        raise SystemExit(f"Processing failed for document {document.id}")

    token = client.get_viewer_token(
        {"id": document.id, "download": "NotAllowed", "search": True},
        expires_in=expires_in,
    )
    return {"document_id": document.id, "viewer_token": token}


def main(argv: Optional[list[str]] = None) -> int:
    """Upload a PDF, wait for processing and print a viewer token."""
    parser = argparse.ArgumentParser(
        description=(
            "Upload a PDF to CloudPDF using credentials from CLOUDPDF_* "
            "environment variables and print a viewer token for it."
        )
    )
    parser.add_argument("path", type=Path)
    parser.add_argument("--name", help="Document name (defaults to the file name)")
    parser.add_argument("--expires-in", default="1h")
    args = parser.parse_args(argv)

    result = asyncio.run(
        _upload_and_share(args.path, args.name or args.path.stem, args.expires_in)
    )
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover - example entry point
    raise SystemExit(main())
