"""
Image codec: encoded payloads <-> RasterImage

Accepts raw image bytes, base64 text and data URLs on the way in and
produces PNG bytes or a PNG data URL on the way out.
"""

import base64
import binascii
from io import BytesIO
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from .errors import DecodeFailure
from .raster import RasterImage

PNG_MIME = "image/png"


def clean_base64(data: str) -> str:
    """Strip a data URL prefix (data:<mime>;base64,) if present"""
    if "," in data:
        return data.split(",", 1)[1]
    return data


def _payload_bytes(data: Union[bytes, bytearray, str]) -> bytes:
    if isinstance(data, str):
        try:
            return base64.b64decode(clean_base64(data).strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeFailure(f"Invalid base64 payload: {e}") from e
    return bytes(data)


def decode_image(data: Union[bytes, bytearray, str]) -> RasterImage:
    """
    Decode an image payload into an RGBA RasterImage

    Args:
        data: Encoded image bytes, base64 text or a data URL

    Raises:
        DecodeFailure: If the payload is empty or not a readable image
    """
    payload = _payload_bytes(data)
    if not payload:
        raise DecodeFailure("Empty image payload")

    try:
        with Image.open(BytesIO(payload)) as img:
            rgba = np.array(img.convert("RGBA"), dtype=np.uint8)
    except Exception as e:
        raise DecodeFailure(f"Cannot read image: {e}") from e

    if rgba.ndim != 3 or rgba.shape[0] == 0 or rgba.shape[1] == 0:
        raise DecodeFailure(f"Decoded image has no pixels: {rgba.shape}")

    return RasterImage(rgba)


def load_image(path: Path) -> RasterImage:
    """Decode an image file (FileNotFoundError if it does not exist)"""
    if not path.exists():
        raise FileNotFoundError(f"Input image not found: {path}")
    return decode_image(path.read_bytes())


def encode_png(image: RasterImage) -> bytes:
    buf = BytesIO()
    Image.fromarray(image.pixels).save(buf, "PNG", optimize=True)
    return buf.getvalue()


def to_data_url(image: RasterImage) -> str:
    encoded = base64.b64encode(encode_png(image)).decode("utf-8")
    return f"data:{PNG_MIME};base64,{encoded}"


def save_image(image: RasterImage, path: Path) -> Path:
    path.write_bytes(encode_png(image))
    return path
