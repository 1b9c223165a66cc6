"""rbxupload -- alpha-bleed an image and upload it as a Roblox decal.

Public re-exports
-----------------

* **Pipeline:** :func:`upload_image`
* **Driver:** :class:`RobloxApiClient`
* **Configuration:** :class:`UploaderConfig`
* **Credentials:** :class:`ApiKeyCredential`, :class:`CookieCredential`,
  :func:`resolve_credential`, :class:`SecretString`
* **Errors:** Every :class:`RbxUploadError` subclass and :class:`ErrorCode`
* **Models:** Metadata, creator and result types

Usage::

    from rbxupload import Creator, RobloxApiClient, UploadMetadata, UploaderConfig
    from rbxupload import resolve_credential

    config = UploaderConfig(api_key="...")
    metadata = UploadMetadata("Logo", "", Creator.user(1))
    with RobloxApiClient.from_credential(resolve_credential(config), config) as client:
        result = client.upload(png_bytes, metadata)
    print(result.asset_uri)
"""

from __future__ import annotations

# ── Credentials ─────────────────────────────────────────────────────────
from rbxupload.auth import (
    ApiKeyCredential,
    CookieCredential,
    discover_cookie,
    resolve_credential,
)

# ── Configuration ───────────────────────────────────────────────────────
from rbxupload.config import UploaderConfig

# ── Errors ──────────────────────────────────────────────────────────────
from rbxupload.errors import (
    ApiError,
    BadRequestJsonError,
    BadResponseJsonError,
    ErrorCode,
    ImageDecodeError,
    InputReadError,
    InvalidHeaderError,
    MissingCredentialError,
    MissingCsrfTokenError,
    RbxUploadError,
    ResponseError,
    TransportError,
)

# ── Models ──────────────────────────────────────────────────────────────
from rbxupload.models import (
    Creator,
    CreatorType,
    DriverState,
    UploadImageOptions,
    UploadMetadata,
    UploadResult,
)

# ── Pipeline and driver ─────────────────────────────────────────────────
from rbxupload.pipeline import upload_image
from rbxupload.roblox_api.client import RobloxApiClient
from rbxupload.utils.secret import SecretString

__all__ = [
    # Pipeline and driver
    "upload_image",
    "RobloxApiClient",
    # Configuration
    "UploaderConfig",
    # Credentials
    "ApiKeyCredential",
    "CookieCredential",
    "SecretString",
    "discover_cookie",
    "resolve_credential",
    # Errors
    "RbxUploadError",
    "ErrorCode",
    "MissingCredentialError",
    "InvalidHeaderError",
    "TransportError",
    "MissingCsrfTokenError",
    "ResponseError",
    "BadRequestJsonError",
    "BadResponseJsonError",
    "ApiError",
    "InputReadError",
    "ImageDecodeError",
    # Models
    "Creator",
    "CreatorType",
    "DriverState",
    "UploadImageOptions",
    "UploadMetadata",
    "UploadResult",
]
