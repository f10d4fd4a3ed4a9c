"""Command-line utilities for cloudpdf."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from .client import CloudPDF
from .errors import CloudPDFError
from .models import ViewerTokenParams


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


def _viewer_token(args: argparse.Namespace) -> int:
    client = CloudPDF(args.api_key or None)
    params = ViewerTokenParams(
        id=args.document_id,
        download=args.download,
        search=False if args.no_search else None,
        selection=False if args.no_selection else None,
        info=args.info or None,
    )
    print(client.get_viewer_token(params, args.expires_in))
    return 0


def _decode(args: argparse.Namespace) -> int:
    client = CloudPDF(args.api_key or None)
    claims = client.credentials.signer().verify(
        args.token, verify_expiry=not args.no_verify_expiry
    )
    _print_json(
        {
            "function": claims.function,
            "params": claims.params,
            "issued_at": claims.issued_at.isoformat(),
            "expires_at": claims.expires_at.isoformat(),
            "key_id": claims.key_id,
        }
    )
    return 0


def _account(args: argparse.Namespace) -> int:
    client = CloudPDF(args.api_key or None)
    account = asyncio.run(client.account())
    _print_json(account.model_dump(mode="json", by_alias=True))
    return 0


def _upload(args: argparse.Namespace) -> int:
    client = CloudPDF(args.api_key or None)
    params: dict[str, Any] = {"name": args.name}
    if args.description:
        params["description"] = args.description

    def _progress(percent: int) -> None:
        if not args.quiet:
            print(f"\rUploading... {percent}%", end="", file=sys.stderr)

    document = asyncio.run(client.upload_document(args.path, params, _progress))
    if not args.quiet:
        print(file=sys.stderr)
    _print_json(document.model_dump(mode="json", by_alias=True))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloudpdf",
        description="Work with the CloudPDF API. Credentials are read from "
        "CLOUDPDF_API_KEY, CLOUDPDF_CLOUD_NAME and CLOUDPDF_SIGNING_SECRET.",
    )
    parser.add_argument(
        "--api-key",
        help="API key. Overrides CLOUDPDF_API_KEY.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log requests to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    token = subparsers.add_parser(
        "viewer-token", help="Print a signed viewer token for a document."
    )
    token.add_argument("document_id", help="Document identifier.")
    token.add_argument(
        "--expires-in",
        default="1h",
        help="Token lifetime such as 30m, 1h or 2d (default: 1h).",
    )
    token.add_argument(
        "--download",
        choices=["NotAllowed", "Allowed", "EmailRequired"],
        help="Download policy for the viewer.",
    )
    token.add_argument("--no-search", action="store_true", help="Disable search.")
    token.add_argument(
        "--no-selection", action="store_true", help="Disable text selection."
    )
    token.add_argument(
        "--info",
        nargs="+",
        choices=["email", "name", "organization", "phone"],
        help="Visitor details the viewer asks for.",
    )
    token.set_defaults(handler=_viewer_token)

    decode = subparsers.add_parser(
        "decode", help="Verify a signed token and print its claims."
    )
    decode.add_argument("token", help="Signed token to inspect.")
    decode.add_argument(
        "--no-verify-expiry",
        action="store_true",
        help="Accept tokens whose expiry has passed.",
    )
    decode.set_defaults(handler=_decode)

    account = subparsers.add_parser("account", help="Print account usage.")
    account.set_defaults(handler=_account)

    upload = subparsers.add_parser("upload", help="Upload a PDF as a new document.")
    upload.add_argument("path", help="Path to the PDF file.")
    upload.add_argument("--name", required=True, help="Document name.")
    upload.add_argument("--description", help="Document description.")
    upload.add_argument(
        "--quiet", "-q", action="store_true", help="Do not report progress."
    )
    upload.set_defaults(handler=_upload)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the cloudpdf command line."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:  # pragma: no cover - controlled via tests
        exit_code = int(exc.code) if isinstance(exc.code, int) else 1
        return 0 if exit_code == 0 else 1

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    try:
        return int(args.handler(args))
    except (CloudPDFError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
