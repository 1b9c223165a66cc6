"""Tests for pipeline.py: read, bleed, encode, resolve, upload.

HTTP is faked at ``httpx.Client.request`` so the real transport, both
protocols and the credential resolver all run.
"""

from __future__ import annotations

import io
import json
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from PIL import Image

from rbxupload.config import UploaderConfig
from rbxupload.errors import ImageDecodeError, InputReadError, MissingCredentialError
from rbxupload.models import Creator, UploadImageOptions, UploadResult
from rbxupload.pipeline import prepare_image, read_input, upload_image
from rbxupload.utils.secret import SecretString

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_response(status_code: int = 200, body=None, headers: dict | None = None) -> httpx.Response:
    content = json.dumps(body).encode() if body is not None else b""
    return httpx.Response(status_code, content=content, headers=headers or {})


def make_options(path: Path, **overrides) -> UploadImageOptions:
    fields = dict(path=path, name="n", description="d", creator=Creator.user(1))
    fields.update(overrides)
    return UploadImageOptions(**fields)


@pytest.fixture
def image_file(tmp_path, png_bytes) -> Path:
    path = tmp_path / "sprite.png"
    path.write_bytes(png_bytes)
    return path


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

class TestReadInput:
    def test_reads_bytes(self, image_file, png_bytes):
        assert read_input(image_file) == png_bytes

    def test_missing_file(self, tmp_path):
        missing = tmp_path / "nope.png"
        with pytest.raises(InputReadError) as exc_info:
            read_input(missing)
        assert exc_info.value.context == {"path": str(missing)}
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    def test_directory(self, tmp_path):
        with pytest.raises(InputReadError):
            read_input(tmp_path)


class TestPrepareImage:
    def test_output_is_bled_png(self, png_bytes):
        out = prepare_image(png_bytes)
        img = Image.open(io.BytesIO(out))
        assert img.format == "PNG"
        assert img.convert("RGBA").getpixel((1, 0)) == (255, 0, 0, 0)

    def test_undecodable_input(self):
        with pytest.raises(ImageDecodeError):
            prepare_image(b"GIF89a-but-not-really")


# ---------------------------------------------------------------------------
# Whole pipeline
# ---------------------------------------------------------------------------

class TestUploadImage:
    def test_no_credential_sends_nothing(self, image_file):
        with patch("httpx.Client.request") as mock_req:
            with pytest.raises(MissingCredentialError):
                upload_image(make_options(image_file), UploaderConfig(), discover=lambda: None)
        mock_req.assert_not_called()

    def test_unreadable_input_sends_nothing(self, tmp_path):
        with patch("httpx.Client.request") as mock_req:
            with pytest.raises(InputReadError):
                upload_image(make_options(tmp_path / "missing.png", api_key="k"))
        mock_req.assert_not_called()

    def test_cloud_flow_end_to_end(self, image_file, config):
        responses = [
            make_response(200, {"path": "operations/op1"}),
            make_response(200, {"path": "operations/op1", "done": True, "response": {"assetId": "42"}}),
        ]
        with patch("httpx.Client.request", side_effect=responses) as mock_req:
            result = upload_image(make_options(image_file, api_key="k"), config)

        assert result == UploadResult(asset_id=42)
        create = mock_req.call_args_list[0]
        assert create.kwargs["headers"] == {"x-api-key": "k"}
        _, uploaded, content_type = create.kwargs["files"]["fileContent"]
        assert content_type == "image/png"
        bled = Image.open(io.BytesIO(uploaded)).convert("RGBA")
        assert bled.getpixel((1, 0)) == (255, 0, 0, 0)

    def test_session_flow_with_discovered_cookie(self, image_file, config):
        responses = [
            make_response(403, headers={"X-CSRF-Token": "T"}),
            make_response(200, {"AssetId": 7}),
        ]
        with patch("httpx.Client.request", side_effect=responses) as mock_req:
            result = upload_image(
                make_options(image_file), config, discover=lambda: SecretString("found"),
            )
        assert result.asset_id == 7
        assert mock_req.call_args.kwargs["headers"]["Cookie"] == ".ROBLOSECURITY=found"

    def test_retry_moderation_selects_retry_path(self, image_file, config):
        responses = [
            make_response(200, {"Moderated": True}),
            make_response(200, {"AssetId": 8}),
        ]
        with patch("httpx.Client.request", side_effect=responses) as mock_req:
            result = upload_image(
                make_options(image_file, cookie="c", retry_moderation=True), config,
            )
        assert result.asset_id == 8
        assert mock_req.call_count == 2

    def test_options_credentials_override_config(self, image_file, config):
        config.cookie = "config-cookie"
        responses = [
            make_response(200, {"path": "operations/op1"}),
            make_response(200, {"done": True, "response": {"assetId": 1}}),
        ]
        with patch("httpx.Client.request", side_effect=responses) as mock_req:
            upload_image(make_options(image_file, api_key="opt-key"), config)
        assert mock_req.call_args.kwargs["headers"] == {"x-api-key": "opt-key"}
