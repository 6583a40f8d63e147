"""
Timing utilities for the prescription pipeline.
"""

import logging
import time
from typing import Any, Dict, Optional

logger = logging.getLogger("rxreader.timing")


class StageTimer:
    """Context manager that logs how long a pipeline stage took."""

    def __init__(self, stage_name: str, logger_instance: Optional[logging.Logger] = None):
        self.stage_name = stage_name
        self.logger = logger_instance or logger
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None
        self.metadata: Dict[str, Any] = {}

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.info(f"[TIMING START] {self.stage_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time

        log_parts = [
            f"[TIMING END] {self.stage_name}",
            f"Duration: {self.duration:.3f}s",
        ]
        if exc_type is not None:
            log_parts.append(f"Failed: {exc_type.__name__}")
        if self.metadata:
            meta_str = ", ".join(f"{k}={v}" for k, v in self.metadata.items())
            log_parts.append(f"Metadata: {meta_str}")

        self.logger.info(" | ".join(log_parts))
        return False

    def add_metadata(self, key: str, value: Any) -> None:
        """Attach a key/value pair to the end-of-stage log line."""
        self.metadata[key] = value
