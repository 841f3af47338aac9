"""
RasterImage and KeyColor: the data passed between pipeline stages
"""

from dataclasses import dataclass
from typing import NamedTuple, Union

import numpy as np

from .errors import DimensionMismatch


class KeyColor(NamedTuple):
    """Background color to remove (RGB, 0-255)"""

    r: int
    g: int
    b: int

    @classmethod
    def from_hex(cls, value: str) -> "KeyColor":
        """Parse #RRGGBB, RRGGBB or #RGB"""
        s = value.strip().lstrip("#")
        if len(s) == 3:
            s = "".join(c * 2 for c in s)
        if len(s) != 6:
            raise ValueError(f"Invalid hex color: {value!r}")
        try:
            return cls(int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))
        except ValueError as e:
            raise ValueError(f"Invalid hex color: {value!r}") from e

    @property
    def hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"


GREEN = KeyColor(0, 255, 0)
MAGENTA = KeyColor(255, 0, 255)


@dataclass
class RasterImage:
    """
    RGBA image held as a uint8 array of shape (height, width, 4)

    The alpha channel is interleaved with RGB, matching the layout of an
    8-bit RGBA pixel buffer.
    """

    pixels: np.ndarray

    def __post_init__(self):
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray) or pixels.ndim != 3 or pixels.shape[2] != 4:
            shape = getattr(pixels, "shape", None)
            raise DimensionMismatch(f"Expected (height, width, 4) pixel array, got {shape}")
        if pixels.shape[0] <= 0 or pixels.shape[1] <= 0:
            raise DimensionMismatch(
                f"Image must have positive size, got {pixels.shape[1]}x{pixels.shape[0]}"
            )
        if pixels.dtype != np.uint8:
            raise DimensionMismatch(f"Expected uint8 pixels, got {pixels.dtype}")

    @classmethod
    def from_buffer(
        cls, buffer: Union[bytes, bytearray, np.ndarray], width: int, height: int
    ) -> "RasterImage":
        """
        Build an image from a flat interleaved RGBA buffer

        Raises:
            DimensionMismatch: If the buffer length is not width * height * 4
        """
        if width <= 0 or height <= 0:
            raise DimensionMismatch(f"Image must have positive size, got {width}x{height}")

        if isinstance(buffer, np.ndarray):
            flat = buffer.astype(np.uint8, copy=False).ravel()
        else:
            flat = np.frombuffer(bytes(buffer), dtype=np.uint8)

        expected = width * height * 4
        if flat.size != expected:
            raise DimensionMismatch(
                f"Buffer length {flat.size} != {width}x{height}x4 ({expected})"
            )

        return cls(flat.reshape(height, width, 4).copy())

    @classmethod
    def from_rgb(cls, rgb: np.ndarray) -> "RasterImage":
        """Wrap an (H, W, 3) RGB array as a fully opaque image"""
        rgb = np.asarray(rgb, dtype=np.uint8)
        if rgb.ndim != 3 or rgb.shape[2] != 3:
            raise DimensionMismatch(f"Expected (height, width, 3) RGB array, got {rgb.shape}")
        alpha = np.full(rgb.shape[:2], 255, dtype=np.uint8)
        return cls(np.dstack([rgb, alpha]))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[:, :, 3]

    def with_alpha(self, alpha: np.ndarray) -> "RasterImage":
        """Return a new image with the same RGB and the given alpha channel"""
        if alpha.shape != (self.height, self.width):
            raise DimensionMismatch(
                f"Alpha map {alpha.shape} does not match image {self.width}x{self.height}"
            )
        return RasterImage(np.dstack([self.rgb, alpha.astype(np.uint8)]))

    def copy(self) -> "RasterImage":
        return RasterImage(self.pixels.copy())

    def to_bytes(self) -> bytes:
        """Flat interleaved RGBA buffer"""
        return self.pixels.tobytes()
