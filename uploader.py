#!/usr/bin/env python3
"""Command-line client for a running PDF upload store."""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

import requests

API_BASE_DEFAULT = os.getenv("PDF_STORE_API", "http://127.0.0.1:8000")
UPLOAD_TIMEOUT = int(os.getenv("UPLOAD_TIMEOUT", "900"))


class ClientError(RuntimeError):
    """Raised when the service rejects a request or cannot be reached."""


def _raise_for_status(response: requests.Response) -> None:
    if response.ok:
        return
    try:
        detail = response.json().get("detail")
    except ValueError:
        detail = None
    raise ClientError(f"{response.status_code}: {detail or response.text or response.reason}")


def upload_file(path: Path, api_base: str = API_BASE_DEFAULT, timeout: int = UPLOAD_TIMEOUT) -> dict:
    with path.open("rb") as handle:
        response = requests.post(
            f"{api_base.rstrip('/')}/api/upload",
            files={"file": (path.name, handle, "application/pdf")},
            timeout=timeout,
        )
    _raise_for_status(response)
    return response.json()


def list_files(api_base: str = API_BASE_DEFAULT, timeout: int = UPLOAD_TIMEOUT) -> List[dict]:
    response = requests.get(f"{api_base.rstrip('/')}/api/uploaded-pdfs", timeout=timeout)
    _raise_for_status(response)
    return response.json().get("files", [])


def download_file(
    name: str,
    dest: Path,
    api_base: str = API_BASE_DEFAULT,
    timeout: int = UPLOAD_TIMEOUT,
) -> Path:
    url = f"{api_base.rstrip('/')}/api/uploaded-pdfs/{quote(name, safe='')}"
    with requests.get(url, stream=True, timeout=timeout) as response:
        _raise_for_status(response)
        with dest.open("wb") as handle:
            for chunk in response.iter_content(chunk_size=65536):
                if chunk:
                    handle.write(chunk)
    return dest


def _format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KiB"
    return f"{size / (1024 * 1024):.1f} MiB"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Upload, list and download PDFs from the upload store.")
    parser.add_argument("--api-base", default=API_BASE_DEFAULT, help="Service base URL (default: %(default)s)")
    parser.add_argument("--timeout", type=int, default=UPLOAD_TIMEOUT, help="Request timeout in seconds")
    sub = parser.add_subparsers(dest="command", required=True)

    upload = sub.add_parser("upload", help="Upload a PDF")
    upload.add_argument("path", type=Path)

    sub.add_parser("list", help="List stored PDFs, newest first")

    download = sub.add_parser("download", help="Download a stored PDF by its stored name")
    download.add_argument("name")
    download.add_argument("--output", "-o", type=Path, default=None, help="Destination path")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if args.command == "upload":
            if not args.path.is_file():
                print(f"No such file: {args.path}", file=sys.stderr)
                return 2
            payload = upload_file(args.path, args.api_base, args.timeout)
            print(f"Stored {payload['originalName']} as {payload['filename']} ({_format_size(payload['size'])})")
        elif args.command == "list":
            files = list_files(args.api_base, args.timeout)
            if not files:
                print("No uploaded PDFs.")
            for entry in files:
                print(f"{entry['uploadedAt']}  {_format_size(entry['size']):>10}  {entry['filename']}")
        elif args.command == "download":
            dest = download_file(args.name, args.output or Path(args.name), args.api_base, args.timeout)
            print(f"Saved {dest}")
    except (ClientError, requests.RequestException) as exc:
        print(f"Request failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
