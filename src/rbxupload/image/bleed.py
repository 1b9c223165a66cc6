"""Alpha bleeding for RGBA rasters.

Fully transparent pixels still carry RGB values, and bilinear filtering
on the GPU samples them at the edge of a sprite.  Left as black (the
usual export default) they show up as a dark halo.  Bleeding copies the
colour of the nearest visible pixel into every fully transparent one so
the halo disappears, while leaving the alpha channel untouched.

The fill is a breadth-first flood from every pixel with ``alpha > 0``.
Seeds are enqueued in row-major order and neighbours are visited
up, left, right, down, so ties between equally distant sources always
resolve the same way and the output is byte-stable.
"""

from __future__ import annotations

from collections import deque

from PIL import Image

_CHANNELS = 4


def bleed_pixels(buf: bytearray, width: int, height: int) -> None:
    """Alpha-bleed a raw RGBA buffer in place.

    Parameters
    ----------
    buf:
        Row-major RGBA bytes, ``width * height * 4`` long.
    width, height:
        Raster dimensions in pixels.

    Raises
    ------
    ValueError
        If *buf* does not match the given dimensions.
    """
    count = width * height
    if width < 0 or height < 0 or len(buf) != count * _CHANNELS:
        raise ValueError(
            f"buffer of {len(buf)} bytes does not match a {width}x{height} RGBA raster"
        )
    if count == 0:
        return

    visited = bytearray(count)
    queue: deque[int] = deque()
    for i in range(count):
        if buf[i * _CHANNELS + 3] > 0:
            visited[i] = 1
            queue.append(i)

    # Nothing visible, or nothing to fill.
    if not queue or len(queue) == count:
        return

    while queue:
        i = queue.popleft()
        x = i % width
        src = i * _CHANNELS
        rgb = buf[src:src + 3]

        neighbours = []
        if i >= width:
            neighbours.append(i - width)
        if x > 0:
            neighbours.append(i - 1)
        if x < width - 1:
            neighbours.append(i + 1)
        if i < count - width:
            neighbours.append(i + width)

        for j in neighbours:
            if visited[j]:
                continue
            visited[j] = 1
            dst = j * _CHANNELS
            buf[dst:dst + 3] = rgb
            queue.append(j)


def alpha_bleed(image: Image.Image) -> None:
    """Alpha-bleed a Pillow image in place.

    Parameters
    ----------
    image:
        An image in ``RGBA`` mode.  Size and alpha are preserved; only the
        RGB of pixels with ``alpha == 0`` may change.

    Raises
    ------
    ValueError
        If *image* is not in ``RGBA`` mode.
    """
    if image.mode != "RGBA":
        raise ValueError(f"alpha_bleed expects an RGBA image, got mode {image.mode!r}")
    width, height = image.size
    buf = bytearray(image.tobytes())
    bleed_pixels(buf, width, height)
    image.frombytes(bytes(buf))
