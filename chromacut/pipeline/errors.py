"""
Error taxonomy for the matting pipeline

Every error carries the name of the stage that raised it so callers can tell
configuration problems apart from bad image data.
"""

from typing import Optional


class MattingError(Exception):
    """Base class for all pipeline failures"""

    stage = "pipeline"

    def __init__(self, reason: str, stage: Optional[str] = None):
        self.reason = reason
        if stage is not None:
            self.stage = stage
        super().__init__(f"[{self.stage}] {reason}")


class DecodeFailure(MattingError):
    """Image payload could not be parsed into a pixel buffer"""

    stage = "decode"


class DimensionMismatch(MattingError):
    """Pixel buffer does not match its declared width and height"""

    stage = "raster"


class ConfigurationError(MattingError, ValueError):
    """Invalid pipeline configuration"""

    stage = "config"


class SamplingDegraded(MattingError):
    """Key color sampling could not analyze the image (never leaves stage 1)"""

    stage = "s1_key_color"


class StageError(MattingError):
    """Unexpected failure inside a pipeline stage"""


class PipelineCancelled(MattingError):
    """Cancellation was requested between two stages"""


class CompositorError(MattingError):
    """External compositor returned no usable image"""

    stage = "compositor"
