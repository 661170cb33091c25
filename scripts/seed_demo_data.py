"""Seed an Artoo deployment with sample files from a local directory."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Sequence

from artoo.clients.api_client import ArtooClient
from artoo.credentials import CredentialStore

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_DATA_DIR = REPO_ROOT / "sample_data"


def _discover_files(data_dir: Path) -> list[Path]:
    if not data_dir.exists():
        raise FileNotFoundError(f"Sample data directory not found: {data_dir}")
    return [path for path in sorted(data_dir.rglob("*")) if path.is_file()]


def _register_user(credentials_file: Path, username: str, password: str) -> None:
    # Writes straight to the file the server reads at startup.
    CredentialStore(str(credentials_file)).set(username, password)
    print(f"Registered {username} in {credentials_file}")


def seed(client: ArtooClient, data_dir: Path, data_files: Sequence[Path], prefix: str) -> None:
    for path in data_files:
        key = f"{prefix}{path.relative_to(data_dir).as_posix()}"
        print(f"Uploading {key} ({path.stat().st_size} bytes)")
        result = client.upload_path(key, path)
        print(f"  etag={result['etag']}")
    listed = client.list_files(prefix or None)
    print(f"{len(listed)} object(s) under {prefix or '<root>'}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed Artoo demo data")
    parser.add_argument("--rest-base", default="http://localhost:8787", help="REST base URL")
    parser.add_argument("--data-dir", type=Path, default=DEFAULT_DATA_DIR, help="Directory of sample files")
    parser.add_argument("--prefix", default="seed/", help="Key prefix for uploaded files")
    parser.add_argument("--username", default=os.environ.get("ARTOO_USERNAME", "demo"))
    parser.add_argument("--password", default=os.environ.get("ARTOO_PASSWORD"))
    parser.add_argument(
        "--credentials-file",
        type=Path,
        default=os.environ.get("ARTOO_CREDENTIALS_FILE"),
        help="Register the user in this credentials file before logging in",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    if not args.password:
        raise SystemExit("A password is required (--password or ARTOO_PASSWORD)")
    files = _discover_files(args.data_dir)
    if not files:
        raise SystemExit(f"No files found in {args.data_dir}")

    if args.credentials_file:
        _register_user(args.credentials_file, args.username, args.password)
    client = ArtooClient(args.rest_base)
    client.login(args.username, args.password)
    seed(client, args.data_dir, files, args.prefix)


if __name__ == "__main__":
    main()
