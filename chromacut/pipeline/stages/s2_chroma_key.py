"""
Stage 2: Chroma Keying by Euclidean RGB Distance with a Feathered Edge
"""

from typing import Union

import numpy as np

from ..config import PipelineConfig
from ..logger import PipelineLogger
from ..raster import KeyColor, RasterImage

# Feather band spans [tolerance, tolerance * (1 + FEATHER_WIDTH))
FEATHER_WIDTH = 0.3


def color_distance(rgb: np.ndarray, key_color: KeyColor) -> np.ndarray:
    """Euclidean distance of every pixel to the key color (H, W) float64"""
    diff = rgb.astype(np.float64) - np.array(key_color, dtype=np.float64)
    return np.sqrt(np.sum(diff**2, axis=-1))


def feather_alpha(
    distance: Union[float, np.ndarray], tolerance: float
) -> Union[float, np.ndarray]:
    """
    Alpha ramp inside the feather band

    0 at distance == tolerance, 255 at distance == tolerance * 1.3, clamped
    to [0, 255] outside that range. Rounded half to even like 8-bit storage,
    so the band edges are exact for any tolerance.
    """
    alpha = ((distance - tolerance) / (tolerance * FEATHER_WIDTH)) * 255.0
    return np.clip(np.rint(alpha), 0.0, 255.0)


def chroma_key(
    image: RasterImage,
    key_color: KeyColor,
    config: PipelineConfig,
    logger: PipelineLogger,
) -> RasterImage:
    """
    Compute alpha from distance to the key color

    Algorithm (per pixel, d = RGB distance to key):
    1. d < tolerance: alpha = 0
    2. d < tolerance * 1.3: alpha = min(feather(d), prior alpha)
    3. otherwise: alpha unchanged

    RGB channels are passed through untouched.

    Args:
        image: Source RGBA image
        key_color: Background color to remove
        config: Pipeline configuration
        logger: Logger instance

    Returns:
        New RasterImage with the keyed alpha channel
    """
    logger.log_info(f"Stage 2: Keying out {key_color.hex} (tolerance {config.tolerance:g})...")

    tolerance = float(config.tolerance)
    distance = color_distance(image.rgb, key_color)
    prior = image.alpha.astype(np.float64)

    removed = distance < tolerance
    band = ~removed & (distance < tolerance * (1.0 + FEATHER_WIDTH))

    alpha = prior.copy()
    alpha[removed] = 0.0
    alpha[band] = np.minimum(feather_alpha(distance[band], tolerance), prior[band])

    # 8-bit storage rounds half to even
    keyed = np.clip(np.rint(alpha), 0, 255).astype(np.uint8)

    removed_count = int(np.count_nonzero(removed))
    feathered_count = int(np.count_nonzero(band))

    logger.log_s2(
        method="euclidean_rgb",
        key_color=key_color.hex,
        tolerance=tolerance,
        feather_limit=tolerance * (1.0 + FEATHER_WIDTH),
        removed_pixels=removed_count,
        feathered_pixels=feathered_count,
    )
    logger.log_info(
        f"  Removed {removed_count:,} pixels, feathered {feathered_count:,} edge pixels"
    )

    return image.with_alpha(keyed)
