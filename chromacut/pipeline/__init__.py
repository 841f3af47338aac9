"""
Chroma Key Matting Pipeline
"""

from .config import PipelineConfig
from .errors import (
    CompositorError,
    ConfigurationError,
    DecodeFailure,
    DimensionMismatch,
    MattingError,
    PipelineCancelled,
    SamplingDegraded,
    StageError,
)
from .logger import PipelineLogger
from .pipeline import MattingPipeline
from .raster import GREEN, MAGENTA, KeyColor, RasterImage

__all__ = [
    "MattingPipeline",
    "PipelineLogger",
    "PipelineConfig",
    "RasterImage",
    "KeyColor",
    "GREEN",
    "MAGENTA",
    "MattingError",
    "DecodeFailure",
    "DimensionMismatch",
    "ConfigurationError",
    "SamplingDegraded",
    "StageError",
    "PipelineCancelled",
    "CompositorError",
]
