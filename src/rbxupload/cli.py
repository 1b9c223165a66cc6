"""Command-line entry point for rbxupload."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from .config import UploaderConfig
from .errors import RbxUploadError
from .models import MAX_CREATOR_ID, Creator, CreatorType, UploadImageOptions
from .observability import get_logger, set_level
from .pipeline import upload_image

logger = get_logger("rbxupload.cli")


def _creator_type(value: str) -> CreatorType:
    try:
        return CreatorType.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _creator_id(value: str) -> int:
    try:
        parsed = int(value, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid creator id {value!r}") from None
    if not 0 < parsed <= MAX_CREATOR_ID:
        raise argparse.ArgumentTypeError(
            f"creator id must be between 1 and {MAX_CREATOR_ID}, got {value}"
        )
    return parsed


def _non_empty(value: str) -> str:
    if not value.strip():
        raise argparse.ArgumentTypeError("must not be empty")
    return value


def _positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number {value!r}") from None
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {value}")
    return parsed


def _add_upload_image_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", type=Path, help="Image file to upload")
    parser.add_argument(
        "--name",
        required=True,
        type=_non_empty,
        help="Display name of the new asset",
    )
    parser.add_argument(
        "--description",
        default="",
        help="Description of the new asset",
    )
    parser.add_argument(
        "--creator-type",
        required=True,
        type=_creator_type,
        metavar="{user,group}",
        help="Whether the asset is owned by a user or a group",
    )
    parser.add_argument(
        "--creator-id",
        required=True,
        type=_creator_id,
        help="Numeric id of the owning user or group",
    )
    auth = parser.add_mutually_exclusive_group()
    auth.add_argument(
        "--api-key",
        help="Cloud API key; takes precedence over any session cookie",
    )
    auth.add_argument(
        "--cookie",
        help="Session cookie; defaults to the ROBLOSECURITY environment variable",
    )
    parser.add_argument(
        "--retry-moderation",
        action="store_true",
        help="Retry uploads rejected by moderation (session cookie only)",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=30.0,
        help="Per-request HTTP timeout in seconds",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Emit debug logs on stderr",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rbxupload",
        description="Upload images as Roblox decals, alpha-bled for clean edges.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    upload_parser = subparsers.add_parser(
        "upload-image",
        help="Alpha-bleed an image and upload it, printing its asset id",
    )
    _add_upload_image_arguments(upload_parser)
    return parser


def _run_upload_image(args: argparse.Namespace) -> int:
    options = UploadImageOptions(
        path=args.path,
        name=args.name,
        description=args.description,
        creator=Creator.from_cli(args.creator_type, args.creator_id),
        api_key=args.api_key,
        cookie=args.cookie,
        retry_moderation=args.retry_moderation,
    )
    config = UploaderConfig(timeout_seconds=args.timeout)

    try:
        result = upload_image(options, config)
    except RbxUploadError as exc:
        logger.debug("Upload failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print("Image uploaded successfully!", file=sys.stderr)
    print(result.asset_uri)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    set_level(logging.DEBUG if args.verbose else logging.ERROR)

    if args.command == "upload-image":
        return _run_upload_image(args)
    parser.error(f"Unknown command {args.command!r}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
