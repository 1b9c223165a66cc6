"""Shared test fixtures for the rbxupload test suite."""

from __future__ import annotations

import io

import pytest
from PIL import Image

from rbxupload.config import UploaderConfig
from rbxupload.models import Creator, UploadMetadata


@pytest.fixture
def config() -> UploaderConfig:
    """Default test configuration with zero-length waits."""
    return UploaderConfig(
        poll_initial_delay=0.0,
        poll_max_delay=0.0,
        moderation_delay=0.0,
    )


@pytest.fixture
def metadata() -> UploadMetadata:
    """Metadata for a decal owned by user 1."""
    return UploadMetadata(name="n", description="d", creator=Creator.user(1))


@pytest.fixture
def group_metadata() -> UploadMetadata:
    """Metadata for a decal owned by group 7."""
    return UploadMetadata(name="Logo", description="", creator=Creator.group(7))


@pytest.fixture
def png_bytes() -> bytes:
    """A 2x1 PNG: one opaque red pixel next to a fully transparent black one."""
    img = Image.new("RGBA", (2, 1))
    img.putpixel((0, 0), (255, 0, 0, 255))
    img.putpixel((1, 0), (0, 0, 0, 0))
    out = io.BytesIO()
    img.save(out, format="PNG")
    return out.getvalue()


@pytest.fixture(autouse=True)
def _no_ambient_cookie(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's ROBLOSECURITY variable out of every test."""
    monkeypatch.delenv("ROBLOSECURITY", raising=False)
