"""Decode input bytes to RGBA and encode the result as PNG."""

from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from rbxupload.errors import ImageDecodeError


def decode_image(data: bytes) -> Image.Image:
    """Decode *data* into an ``RGBA`` Pillow image.

    Any format Pillow can read is accepted; the result is always
    converted to ``RGBA``.

    Raises
    ------
    ImageDecodeError
        If the bytes are not a decodable image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.convert("RGBA")
    # Pillow reports corrupt data through several exception types.
    except (
        UnidentifiedImageError,
        OSError,
        SyntaxError,
        ValueError,
        Image.DecompressionBombError,
    ) as exc:
        raise ImageDecodeError(
            message=f"Couldn't load image: {exc}",
            context={"size_bytes": len(data)},
            cause=exc,
        ) from exc


def encode_png(image: Image.Image) -> bytes:
    """Encode *image* as PNG and return the bytes."""
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()
