"""Image preparation: decoding, alpha bleeding and PNG encoding.

Exports
-------
decode_image
    Decode arbitrary image bytes to an RGBA Pillow image.
alpha_bleed / bleed_pixels
    Fill fully transparent pixels with the nearest visible colour.
encode_png
    Encode a Pillow image as PNG bytes.
"""

from .bleed import alpha_bleed, bleed_pixels
from .codec import decode_image, encode_png

__all__ = [
    "alpha_bleed",
    "bleed_pixels",
    "decode_image",
    "encode_png",
]
