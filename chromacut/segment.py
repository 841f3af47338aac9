"""
Instruction-driven cutouts through an external compositor

The compositor (an image-editing model) receives the source image, an
instruction naming what to keep and a key color, and returns the kept
object placed on a flat patch of that color. The matting pipeline then
keys that color out.
"""

from typing import Optional, Protocol

from .pipeline import MattingPipeline
from .pipeline.codec import decode_image
from .pipeline.errors import CompositorError, DecodeFailure
from .pipeline.raster import KeyColor
from .pipeline.stages import choose_key_color


class Compositor(Protocol):
    def place_on_background(
        self, image_bytes: bytes, instruction: str, key_color: KeyColor
    ) -> Optional[bytes]:
        """Return encoded image bytes, or None when the model produced no image"""
        ...


def build_edit_prompt(instruction: str, key_color: KeyColor) -> str:
    color = key_color.hex
    return (
        f"Keep only: {instruction}. Place the object(s) on a solid {color} background. "
        f"Remove everything else and ensure the background is completely uniform "
        f"{color} color with no gradients or variations."
    )


def segment_image(
    image_bytes: bytes,
    instruction: str,
    compositor: Compositor,
    pipeline: Optional[MattingPipeline] = None,
) -> bytes:
    """
    Cut out the object named by an instruction

    Steps:
    1. Choose a key color contrasting with the source image
    2. Ask the compositor to isolate the object on that color
    3. Key the color out with the matting pipeline

    Args:
        image_bytes: Encoded source image
        instruction: What to keep, in natural language
        compositor: External image-editing collaborator
        pipeline: Matting pipeline (default configuration if None)

    Returns:
        PNG bytes of the cutout

    Raises:
        CompositorError: If the compositor returns no image
        DecodeFailure: If the compositor's image cannot be decoded
    """
    pipeline = pipeline or MattingPipeline()
    logger = pipeline.logger

    logger.start_image(f"segment: {instruction}")

    try:
        source = decode_image(image_bytes)
    except DecodeFailure as e:
        logger.log_warning(f"Source image unreadable for sampling: {e.reason}")
        source = None

    key_color = choose_key_color(source, pipeline.config, logger)
    logger.log_info(f"Requesting {instruction!r} on {key_color.hex} from compositor")

    try:
        keyed_bytes = compositor.place_on_background(image_bytes, instruction, key_color)
        if not keyed_bytes:
            raise CompositorError("Failed to generate image with contrasting background")
    except Exception as e:
        logger.log_failure(e, stage="compositor")
        raise

    logger.finish_image()
    return pipeline.process_bytes(
        keyed_bytes, key_color=key_color, label=f"segment: {instruction}"
    )
