"""
Stage 1: Key Color Selection from Average Luminance
"""

from typing import Optional, Union

import numpy as np
from PIL import Image

from ..config import PipelineConfig
from ..errors import SamplingDegraded
from ..logger import PipelineLogger
from ..raster import KeyColor, RasterImage


def sample_grid(pixels: np.ndarray, size: int = 100) -> np.ndarray:
    """
    Reduce an image to at most size x size RGB samples

    Large images are downsampled with a bilinear resize so the cost does not
    depend on input resolution; small images are sampled directly.

    Args:
        pixels: RGB or RGBA array (H, W, C)
        size: Grid edge length

    Returns:
        RGB samples (N, 3)

    Raises:
        SamplingDegraded: If the array is empty or not an image
    """
    if pixels is None:
        raise SamplingDegraded("no image to sample")

    pixels = np.asarray(pixels)
    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise SamplingDegraded(f"cannot sample array of shape {pixels.shape}")

    h, w = pixels.shape[:2]
    if h == 0 or w == 0:
        raise SamplingDegraded(f"cannot sample zero-size image ({w}x{h})")

    rgb = np.ascontiguousarray(pixels[:, :, :3], dtype=np.uint8)

    if h > size or w > size:
        resized = Image.fromarray(rgb).resize((size, size), Image.Resampling.BILINEAR)
        rgb = np.asarray(resized, dtype=np.uint8)

    return rgb.reshape(-1, 3)


def average_luminance(samples: np.ndarray) -> float:
    """Mean of (R + G + B) / 3 over all samples"""
    return float(samples.astype(np.float64).sum(axis=1).mean() / 3.0)


def choose_key_color(
    image: Optional[Union[RasterImage, np.ndarray]],
    config: PipelineConfig,
    logger: PipelineLogger,
) -> KeyColor:
    """
    Pick a key color that contrasts with the image's dominant luminance

    Light images (average luminance above the threshold) get the magenta key,
    dark images get green. Any sampling problem degrades to the dark key
    instead of raising, so the pipeline always gets a key color.

    Args:
        image: Source image (RasterImage or array); None when decoding failed
        config: Pipeline configuration
        logger: Logger instance

    Returns:
        KeyColor
    """
    logger.log_info("Stage 1: Choosing key color...")

    if config.key_color is not None:
        key = KeyColor(*config.key_color)
        logger.log_s1(method="configured", key_color=key.hex, degraded=False)
        logger.log_info(f"  Using configured key color {key.hex}")
        return key

    pixels = image.pixels if isinstance(image, RasterImage) else image

    try:
        samples = sample_grid(pixels, config.sample_size)
    except SamplingDegraded as e:
        key = config.dark_key
        logger.log_warning(f"  Sampling degraded ({e.reason}), falling back to {key.hex}")
        logger.log_s1(method="fallback", key_color=key.hex, degraded=True, reason=e.reason)
        return key

    luminance = average_luminance(samples)
    key = config.light_key if luminance > config.luminance_threshold else config.dark_key

    logger.log_s1(
        method="luminance",
        samples=int(len(samples)),
        average_luminance=luminance,
        threshold=config.luminance_threshold,
        key_color=key.hex,
        degraded=False,
    )
    logger.log_info(f"  Average luminance {luminance:.1f} -> key {key.hex}")

    return key
