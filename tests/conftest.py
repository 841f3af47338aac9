from io import BytesIO
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from chromacut.pipeline import PipelineLogger, RasterImage

GREEN_RGB = (0, 255, 0)
RED_RGB = (255, 0, 0)


def solid_rgb(h: int, w: int, color) -> np.ndarray:
    img = np.zeros((h, w, 3), dtype=np.uint8)
    img[...] = color
    return img


def keyed_scene(size: int = 10, block: int = 2, bg=GREEN_RGB, fg=RED_RGB) -> RasterImage:
    """Flat background with a centered square of foreground color"""
    rgb = solid_rgb(size, size, bg)
    start = (size - block) // 2
    rgb[start : start + block, start : start + block] = fg
    return RasterImage.from_rgb(rgb)


def png_bytes(image: RasterImage) -> bytes:
    buf = BytesIO()
    Image.fromarray(image.pixels).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def logger(tmp_path: Path) -> PipelineLogger:
    log = PipelineLogger(log_file=tmp_path / "logs" / "debug.log")
    log.start_image("test")
    return log
