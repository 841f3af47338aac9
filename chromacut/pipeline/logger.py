"""
PipelineLogger: per-image JSON records for the matting pipeline

Every image handled by the pipeline ends up as exactly one JSON line in the
log file: its stage entries, its outcome ("ok" or "failed"), the output
location on success, and the failing stage and reason on failure.
"""

import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

STAGE_NAMES = {
    1: "s1_key_color",
    2: "s2_chroma_key",
    3: "s3_morphology",
    4: "s4_region_filter",
}


class PipelineLogger:
    """Console + stdlib logging, with one JSON record per processed image"""

    def __init__(
        self,
        log_file: Optional[Path] = None,
        debug_mode: bool = False,
        verbose: bool = False,
    ):
        self.log_file = log_file or Path.home() / ".local/share/chromacut/debug.log"
        self.debug_mode = debug_mode
        self.verbose = verbose
        self.current_image: Optional[Dict[str, Any]] = None
        self.logs: list[Dict[str, Any]] = []
        self._started_at: Optional[float] = None

        self.log_file.parent.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger("chromacut.pipeline")
        self.logger.setLevel(logging.DEBUG if debug_mode else logging.INFO)

    @property
    def active(self) -> bool:
        """True while an image record is open"""
        return self.current_image is not None

    def start_image(self, source: Union[Path, str]):
        """
        Open the record for a new image (file path or a label for in-memory input)

        A record left open by an earlier image is written out first so it is
        never merged into this one.
        """
        if self.current_image is not None:
            self.logger.warning(
                "Record for %s was still open, saving it as unfinished",
                self.current_image["image"],
            )
            self.save_image_log()

        self.current_image = {
            "image": str(source),
            "timestamp": datetime.now().isoformat(),
            "status": "running",
            "stages": [],
        }
        self._started_at = time.perf_counter()

    def log_s1(self, **kwargs):
        self._log_stage(STAGE_NAMES[1], kwargs)

    def log_s2(self, **kwargs):
        self._log_stage(STAGE_NAMES[2], kwargs)

    def log_s3(self, **kwargs):
        self._log_stage(STAGE_NAMES[3], kwargs)

    def log_s4(self, **kwargs):
        self._log_stage(STAGE_NAMES[4], kwargs)

    def _log_stage(self, stage_name: str, data: Dict[str, Any]):
        if self.current_image is None:
            raise RuntimeError("Must call start_image() before logging stages")

        self.current_image["stages"].append(
            {"stage": stage_name, "timestamp": datetime.now().isoformat(), **data}
        )

        if self.debug_mode:
            print(f"[{stage_name}] {json.dumps(data, indent=2)}")

    def log_info(self, message: str):
        self.logger.info(message)
        if self.verbose:
            print(f"INFO: {message}")

    def log_warning(self, message: str):
        self.logger.warning(message)
        print(f"WARNING: {message}")

    def log_error(self, message: str, exc_info: bool = False):
        self.logger.error(message, exc_info=exc_info)
        print(f"ERROR: {message}")

    def log_failure(self, error: BaseException, stage: Optional[str] = None):
        """
        Report a failure once and close the current record with it

        The stage and reason come from a MattingError; other exceptions are
        attributed to `stage` (default "pipeline") and logged with traceback.
        """
        reason = getattr(error, "reason", None) or str(error) or type(error).__name__
        stage = stage or getattr(error, "stage", None) or "pipeline"
        unexpected = not hasattr(error, "reason") or error.__cause__ is not None

        self.log_error(f"[{stage}] {reason}", exc_info=unexpected)

        if self.current_image is not None:
            self.current_image["status"] = "failed"
            self.current_image["error"] = {
                "stage": stage,
                "reason": reason,
                "type": type(error).__name__,
            }
        self.save_image_log()

    def finish_image(self, output: Optional[Union[Path, str]] = None):
        """Close the current record as successful"""
        if self.current_image is None:
            return

        self.current_image["status"] = "ok"
        if output is not None:
            self.current_image["output"] = str(output)
        self.save_image_log()

    def save_image_log(self):
        """Append the current record to the log file as one JSON line"""
        if self.current_image is None:
            return

        record = self.current_image
        if self._started_at is not None:
            record["duration_ms"] = round((time.perf_counter() - self._started_at) * 1000, 3)

        # Cleared first so a failing write cannot leave the record open
        self.current_image = None
        self._started_at = None
        self.logs.append(record)

        with open(self.log_file, "a") as f:
            json.dump(record, f)
            f.write("\n")
