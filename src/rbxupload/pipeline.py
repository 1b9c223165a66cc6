"""The ``upload-image`` pipeline.

Reads an image, alpha-bleeds it, re-encodes it as PNG and uploads it
with whichever protocol the resolved credential selects::

    bytes -> RGBA image -> bled image -> PNG bytes -> driver -> asset id
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from pathlib import Path

from rbxupload.auth import discover_cookie, resolve_credential
from rbxupload.config import UploaderConfig
from rbxupload.errors import InputReadError
from rbxupload.image import alpha_bleed, decode_image, encode_png
from rbxupload.models import UploadImageOptions, UploadResult
from rbxupload.observability import get_logger
from rbxupload.roblox_api.client import RobloxApiClient
from rbxupload.utils.secret import SecretString

log = get_logger("rbxupload.pipeline")


def read_input(path: Path) -> bytes:
    """Read the input file.

    Raises
    ------
    InputReadError
        If the file cannot be read.
    """
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise InputReadError(
            message=f"Couldn't read input file {str(path)!r}: {exc.strerror or exc}",
            context={"path": str(path)},
            cause=exc,
        ) from exc


def prepare_image(data: bytes) -> bytes:
    """Decode *data*, alpha-bleed it and return it re-encoded as PNG."""
    image = decode_image(data)
    alpha_bleed(image)
    width, height = image.size
    encoded = encode_png(image)
    log.debug(
        "Image prepared",
        extra={
            "extra_fields": {
                "op": "prepare_image",
                "width": width,
                "height": height,
                "input_bytes": len(data),
                "png_bytes": len(encoded),
            }
        },
    )
    return encoded


def upload_image(
    options: UploadImageOptions,
    config: UploaderConfig | None = None,
    discover: Callable[[], SecretString | None] = discover_cookie,
) -> UploadResult:
    """Run the whole pipeline for one image.

    Parameters
    ----------
    options:
        Validated CLI options.  ``api_key`` / ``cookie`` given here take
        precedence over the ones in *config*.
    config:
        Endpoint and timing configuration.  Defaults to
        :class:`UploaderConfig()`.
    discover:
        Cookie discovery collaborator used when no credential is given.

    Returns
    -------
    UploadResult
        The new asset's id (always positive).

    Raises
    ------
    RbxUploadError
        Any failure of a pipeline step.
    """
    config = config if config is not None else UploaderConfig()
    if options.api_key or options.cookie:
        config = dataclasses.replace(
            config,
            api_key=options.api_key or config.api_key,
            cookie=options.cookie or config.cookie,
        )

    data = read_input(options.path)
    encoded = prepare_image(data)
    metadata = options.metadata
    credential = resolve_credential(config, discover=discover)

    with RobloxApiClient.from_credential(credential, config) as client:
        log.info(
            "Uploading image",
            extra={
                "extra_fields": {
                    "op": "upload_image",
                    "protocol": client.protocol.name,
                    "creator_type": metadata.creator.creator_type.value,
                    "retry_moderation": options.retry_moderation,
                }
            },
        )
        if options.retry_moderation:
            result = client.upload_with_moderation_retry(encoded, metadata)
        else:
            result = client.upload(encoded, metadata)

    log.info(
        "Image uploaded",
        extra={"extra_fields": {"op": "upload_image", "asset_id": result.asset_id}},
    )
    return result
