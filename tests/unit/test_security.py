"""Credential hygiene and error taxonomy checks.

Covers:
- Every error kind carries its code, message and context
- No credential plaintext survives into str/repr/context of any error
  produced from an echoing endpoint
- Validation errors never echo the header value
"""

from __future__ import annotations

import json
from unittest.mock import patch

import httpx
import pytest

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
from rbxupload.roblox_api.cloud import CloudProtocol
from rbxupload.roblox_api.session import SessionProtocol
from rbxupload.utils.secret import SecretString

SECRET = "PLAINTEXT-CREDENTIAL-0123456789"


class TestErrorTaxonomy:
    @pytest.mark.parametrize(
        "error, code",
        [
            (MissingCredentialError(), ErrorCode.MISSING_CREDENTIAL),
            (TransportError("net"), ErrorCode.TRANSPORT),
            (MissingCsrfTokenError(), ErrorCode.MISSING_CSRF_TOKEN),
            (ResponseError(500, "x"), ErrorCode.RESPONSE_ERROR),
            (BadRequestJsonError(), ErrorCode.BAD_REQUEST_JSON),
            (BadResponseJsonError("x"), ErrorCode.BAD_RESPONSE_JSON),
            (ApiError("timeout"), ErrorCode.API_ERROR),
            (InvalidHeaderError("bad"), ErrorCode.INVALID_HEADER),
            (InputReadError("io"), ErrorCode.INPUT_READ_ERROR),
            (ImageDecodeError("img"), ErrorCode.IMAGE_DECODE_ERROR),
        ],
    )
    def test_codes(self, error, code):
        assert isinstance(error, RbxUploadError)
        assert error.code == code

    def test_response_error_fields(self):
        err = ResponseError(404, "not here")
        assert (err.status, err.body) == (404, "not here")
        assert str(err) == "Roblox API returned HTTP 404 with body: not here"
        assert err.context == {"status": 404, "body": "not here"}

    def test_api_error_reason(self):
        err = ApiError("moderation", context={"attempts": 5})
        assert str(err) == "Roblox API error: moderation"
        assert err.context == {"reason": "moderation", "attempts": 5}

    def test_cause_chained(self):
        root = OSError("disk")
        err = InputReadError("cannot read", cause=root)
        assert err.cause is root
        assert err.__cause__ is root

    def test_repr_includes_context(self):
        assert "context={'status': 1" in repr(ResponseError(1, "b"))


def _echo(status: int) -> httpx.Response:
    body = {"echo": f"x-api-key: {SECRET}", "cookie": f".ROBLOSECURITY={SECRET}"}
    return httpx.Response(status, content=json.dumps(body).encode())


def _assert_clean(err: RbxUploadError) -> None:
    assert SECRET not in str(err)
    assert SECRET not in repr(err)
    assert SECRET not in json.dumps(err.context, default=str)


class TestNoPlaintextInErrors:
    @pytest.mark.parametrize("status", [400, 401, 403, 500])
    def test_cloud_response_error(self, config, metadata, status):
        proto = CloudProtocol(SecretString(SECRET), config)
        with patch.object(proto._transport._client, "request", return_value=_echo(status)):
            with pytest.raises(RbxUploadError) as exc_info:
                proto.upload(b"x", metadata)
        _assert_clean(exc_info.value)

    def test_cloud_bad_response_json(self, config, metadata):
        proto = CloudProtocol(SecretString(SECRET), config)
        with patch.object(proto._transport._client, "request", return_value=_echo(200)):
            with pytest.raises(BadResponseJsonError) as exc_info:
                proto.upload(b"x", metadata)
        _assert_clean(exc_info.value)

    @pytest.mark.parametrize("status", [200, 400, 500])
    def test_session_errors(self, config, metadata, status):
        proto = SessionProtocol(SecretString(SECRET), config)
        with patch.object(proto._transport._client, "request", return_value=_echo(status)):
            with pytest.raises(RbxUploadError) as exc_info:
                proto.upload(b"x", metadata)
        _assert_clean(exc_info.value)

    def test_invalid_credential_header(self, config, metadata):
        proto = SessionProtocol(SecretString(SECRET + "\n"), config)
        with patch.object(proto._transport._client, "request") as mock_req:
            with pytest.raises(InvalidHeaderError) as exc_info:
                proto.upload(b"x", metadata)
        _assert_clean(exc_info.value)
        mock_req.assert_not_called()
