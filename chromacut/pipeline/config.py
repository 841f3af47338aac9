"""
PipelineConfig: Configuration for the chroma key matting pipeline
"""

import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigurationError
from .raster import GREEN, MAGENTA, KeyColor

REGION_LABELING_METHODS = ("components", "flood_fill")


def _is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_whole_number(value) -> bool:
    return _is_number(value) and float(value).is_integer()


@dataclass
class PipelineConfig:
    """Configuration for the matting pipeline"""

    # Stage 1: Key color sampling
    sample_size: int = 100
    luminance_threshold: float = 128.0
    light_key: KeyColor = MAGENTA
    dark_key: KeyColor = GREEN
    key_color: Optional[KeyColor] = None  # Skip sampling when set

    # Stage 2: Chroma keying
    tolerance: float = 50.0

    # Stage 4: Region filter
    min_region_size: int = 50
    region_labeling: str = "components"

    # Output
    output_path: Optional[Path] = None

    def __post_init__(self):
        if not _is_number(self.tolerance) or not 0 < self.tolerance < float("inf"):
            raise ConfigurationError(f"tolerance must be a finite number > 0, got {self.tolerance}")
        if not _is_whole_number(self.min_region_size) or self.min_region_size < 1:
            raise ConfigurationError(
                f"min_region_size must be an integer >= 1, got {self.min_region_size}"
            )
        if self.region_labeling not in REGION_LABELING_METHODS:
            raise ConfigurationError(
                f"region_labeling must be one of {'|'.join(REGION_LABELING_METHODS)}, "
                f"got {self.region_labeling!r}"
            )
        if not _is_whole_number(self.sample_size) or self.sample_size < 1:
            raise ConfigurationError(f"sample_size must be an integer >= 1, got {self.sample_size}")

