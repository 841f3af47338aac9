"""
MattingPipeline: Main orchestration class
"""

import threading
from pathlib import Path
from typing import Callable, Optional, TypeVar, Union

import numpy as np

from . import codec
from .config import PipelineConfig
from .errors import DimensionMismatch, MattingError, PipelineCancelled, StageError
from .logger import PipelineLogger
from .raster import KeyColor, RasterImage
from .stages import choose_key_color, chroma_key, clean_alpha, filter_regions

T = TypeVar("T")


class MattingPipeline:
    """
    Chroma key matting pipeline

    Stages:
    1. Key Color Selection (luminance heuristic)
    2. Chroma Keying (RGB distance + feather band)
    3. Morphological Cleanup (2x erode, 2x dilate)
    4. Small Region Removal (4-connected components)

    Each stage consumes the complete output of the previous one. Cancellation
    is only observed between stages.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        logger: Optional[PipelineLogger] = None,
    ):
        self.config = config or PipelineConfig()
        self.logger = logger or PipelineLogger()

    def run(
        self,
        image: RasterImage,
        key_color: Optional[KeyColor] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> RasterImage:
        """
        Run all stages on an in-memory image

        Args:
            image: Source image (not modified)
            key_color: Color to key out; chosen by stage 1 when None
            cancel_event: Checked between stages

        Returns:
            Cutout with the same size and RGB, alpha replaced

        Raises:
            DimensionMismatch: If a stage changes the buffer shape
            StageError: If a stage fails unexpectedly
            PipelineCancelled: If cancel_event is set between stages
        """
        owns_log = not self.logger.active
        if owns_log:
            self.logger.start_image("<memory>")

        try:
            result = self._run_stages(image.copy(), key_color, cancel_event)
        except Exception as e:
            if owns_log:
                self.logger.log_failure(e)
            raise

        if owns_log:
            self.logger.finish_image()
        return result

    def _run_stages(
        self,
        source: RasterImage,
        key_color: Optional[KeyColor],
        cancel_event: Optional[threading.Event],
    ) -> RasterImage:
        self.logger.log_info(f"  Image size: {source.width}x{source.height}")

        if key_color is None:
            key_color = self._run_stage(
                "s1_key_color",
                cancel_event,
                lambda: choose_key_color(source, self.config, self.logger),
            )

        keyed = self._run_stage(
            "s2_chroma_key",
            cancel_event,
            lambda: chroma_key(source, key_color, self.config, self.logger),
        )
        self._check_shape("s2_chroma_key", source, keyed.pixels.shape[:2])

        alpha = np.ascontiguousarray(keyed.alpha)

        cleaned = self._run_stage(
            "s3_morphology", cancel_event, lambda: clean_alpha(alpha, self.logger)
        )
        self._check_shape("s3_morphology", source, cleaned.shape)

        filtered = self._run_stage(
            "s4_region_filter",
            cancel_event,
            lambda: filter_regions(cleaned, self.config, self.logger),
        )
        self._check_shape("s4_region_filter", source, filtered.shape)

        return keyed.with_alpha(filtered)

    def process_bytes(
        self,
        data: Union[bytes, str],
        key_color: Optional[KeyColor] = None,
        label: str = "<bytes>",
    ) -> bytes:
        """
        Decode a payload, run the pipeline and return PNG bytes

        Raises:
            DecodeFailure: If the payload is not an image (no stage runs)
        """
        self.logger.start_image(label)
        try:
            image = codec.decode_image(data)
            result = self.run(image, key_color=key_color)
            output = codec.encode_png(result)
        except Exception as e:
            self.logger.log_failure(e)
            raise

        self.logger.finish_image()
        return output

    def process(self, input_path: Path) -> Path:
        """
        Process a single image file through the full pipeline

        Args:
            input_path: Path to input image

        Returns:
            Path to output PNG

        Raises:
            FileNotFoundError: If input doesn't exist
            MattingError: If decoding or a stage fails
            OSError: If the output cannot be written
        """
        if not input_path.exists():
            raise FileNotFoundError(f"Input image not found: {input_path}")

        self.logger.start_image(input_path)
        self.logger.log_info(f"Processing: {input_path}")

        try:
            image = codec.load_image(input_path)
            result = self.run(image)

            output_path = self._compute_output_path(input_path)
            codec.save_image(result, output_path)
        except Exception as e:
            self.logger.log_failure(e)
            raise

        self.logger.log_info(f"  Saved → {output_path}")
        self.logger.finish_image(output_path)
        return output_path

    def _run_stage(
        self,
        stage: str,
        cancel_event: Optional[threading.Event],
        fn: Callable[[], T],
    ) -> T:
        if cancel_event is not None and cancel_event.is_set():
            raise PipelineCancelled(f"cancelled before {stage}", stage=stage)

        try:
            return fn()
        except MattingError:
            raise
        except Exception as e:
            raise StageError(str(e), stage=stage) from e

    @staticmethod
    def _check_shape(stage: str, source: RasterImage, shape: tuple) -> None:
        if tuple(shape) != (source.height, source.width):
            raise DimensionMismatch(
                f"stage output {tuple(shape)} != input ({source.height}, {source.width})",
                stage=stage,
            )

    def _compute_output_path(self, input_path: Path) -> Path:
        if self.config.output_path is not None:
            return self.config.output_path

        # Default: same directory, add _transparent suffix
        return input_path.with_name(f"{input_path.stem}_transparent.png")
