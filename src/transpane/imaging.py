"""Image encoding helpers.

Captured images travel through the pipeline as base64 strings, optionally
wrapped in a ``data:image/png;base64,`` URL. These helpers convert between
that form, PIL images and raw BGRA frames.
"""

import base64
import binascii
import io

import numpy as np
from numpy.typing import NDArray
from PIL import Image

# Type alias for BGRA frame (height, width, 4 channels)
BGRAFrame = NDArray[np.uint8]

_DATA_URL_PREFIX = "data:"


def strip_data_url(image_data: str) -> str:
    """Return the bare base64 payload of a data URL or base64 string."""
    if image_data.startswith(_DATA_URL_PREFIX) and "," in image_data:
        return image_data.split(",", 1)[1]
    return image_data


def to_data_url(image_data: str, mime: str = "image/png") -> str:
    """Wrap a bare base64 payload in a data URL."""
    if image_data.startswith(_DATA_URL_PREFIX):
        return image_data
    return f"data:{mime};base64,{image_data}"


def decode_image(image_data: str) -> Image.Image:
    """Decode a base64 image into an RGB PIL image.

    Raises:
        ValueError: If the payload is not valid base64 or not an image.
    """
    try:
        raw = base64.b64decode(strip_data_url(image_data), validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 image data: {e}") from e
    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except OSError as e:
        raise ValueError(f"unreadable image: {e}") from e
    return image.convert("RGB")


def encode_image(image: Image.Image, format: str = "PNG") -> str:
    """Encode a PIL image as a bare base64 string."""
    buffer = io.BytesIO()
    image.save(buffer, format=format)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def bgra_to_rgb(frame: BGRAFrame) -> NDArray[np.uint8]:
    """Convert a BGRA array of shape (H, W, 4) to RGB of shape (H, W, 3)."""
    # B=0, G=1, R=2, A=3 -> R=2, G=1, B=0
    return np.ascontiguousarray(frame[:, :, [2, 1, 0]])


def encode_frame(frame: BGRAFrame) -> str:
    """Encode a raw BGRA frame as a base64 PNG."""
    return encode_image(Image.fromarray(bgra_to_rgb(frame)))
