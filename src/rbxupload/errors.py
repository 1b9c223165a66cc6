"""Error hierarchy for rbxupload.

Every public error class inherits from RbxUploadError. Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

Callers that build an error from remote data (response bodies, header
values) must scrub the credential plaintext first; see
:func:`rbxupload.utils.redact.scrub`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the tool can raise."""

    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    TRANSPORT = "TRANSPORT"
    MISSING_CSRF_TOKEN = "MISSING_CSRF_TOKEN"
    RESPONSE_ERROR = "RESPONSE_ERROR"
    BAD_REQUEST_JSON = "BAD_REQUEST_JSON"
    BAD_RESPONSE_JSON = "BAD_RESPONSE_JSON"
    API_ERROR = "API_ERROR"
    INVALID_HEADER = "INVALID_HEADER"
    INPUT_READ_ERROR = "INPUT_READ_ERROR"
    IMAGE_DECODE_ERROR = "IMAGE_DECODE_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class RbxUploadError(Exception):
    """Base exception for all rbxupload errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` identifying the error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Credential errors
# ---------------------------------------------------------------------------

class MissingCredentialError(RbxUploadError):
    """Neither an API key, an explicit cookie, nor a discovered cookie
    was available.
    """

    def __init__(
        self,
        message: str = "No API key or session cookie could be found",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.MISSING_CREDENTIAL,
            message=message,
            context=context,
            cause=cause,
        )


class InvalidHeaderError(RbxUploadError):
    """A credential or token contains bytes that are illegal in an HTTP
    header value.

    Context keys: ``header``.  The offending value is never included.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.INVALID_HEADER,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Transport / response errors
# ---------------------------------------------------------------------------

class TransportError(RbxUploadError):
    """A network-level failure occurred (timeout, DNS, TLS, connection reset).

    Context keys: ``method``, ``url``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.TRANSPORT,
            message=message,
            context=context,
            cause=cause,
        )


class MissingCsrfTokenError(RbxUploadError):
    """The CSRF challenge response did not carry an ``X-CSRF-Token`` header."""

    def __init__(
        self,
        message: str = "Request for CSRF token did not return an X-CSRF-Token header",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.MISSING_CSRF_TOKEN,
            message=message,
            context=context,
            cause=cause,
        )


class ResponseError(RbxUploadError):
    """The service returned a non-2xx status that is not recoverable.

    Context keys: ``status``, ``body``.
    """

    def __init__(
        self,
        status: int,
        body: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.status = status
        self.body = body
        ctx = {"status": status, "body": body}
        if context:
            ctx.update(context)
        super().__init__(
            code=ErrorCode.RESPONSE_ERROR,
            message=f"Roblox API returned HTTP {status} with body: {body}",
            context=ctx,
            cause=cause,
        )


class BadRequestJsonError(RbxUploadError):
    """The upload metadata could not be serialised to JSON."""

    def __init__(
        self,
        message: str = "Unable to convert request to JSON",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.BAD_REQUEST_JSON,
            message=message,
            context=context,
            cause=cause,
        )


class BadResponseJsonError(RbxUploadError):
    """The service returned 2xx but the body did not match the expected schema.

    Context keys: ``body``.
    """

    def __init__(
        self,
        body: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.body = body
        ctx = {"body": body}
        if context:
            ctx.update(context)
        super().__init__(
            code=ErrorCode.BAD_RESPONSE_JSON,
            message=f"Roblox API returned success, but had malformed JSON response: {body}",
            context=ctx,
            cause=cause,
        )


class ApiError(RbxUploadError):
    """A protocol-level failure: moderation exhausted, polling timeout, or
    an explicit failure verdict from the service.

    Context keys: ``reason``.
    """

    def __init__(
        self,
        reason: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.reason = reason
        ctx = {"reason": reason}
        if context:
            ctx.update(context)
        super().__init__(
            code=ErrorCode.API_ERROR,
            message=f"Roblox API error: {reason}",
            context=ctx,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Input errors
# ---------------------------------------------------------------------------

class InputReadError(RbxUploadError):
    """The input image file could not be read.

    Context keys: ``path``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.INPUT_READ_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class ImageDecodeError(RbxUploadError):
    """The input bytes could not be decoded as a raster image.

    Context keys: ``size_bytes``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_DECODE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )
