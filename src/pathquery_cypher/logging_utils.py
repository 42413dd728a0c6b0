from __future__ import annotations

import logging
import os
import traceback


def configure_logging(level_name: str = "INFO") -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )


def format_exception_summary(exc: BaseException, max_frames: int = 4) -> str:
    """One header line plus the innermost ``max_frames`` frames."""
    frames = traceback.extract_tb(exc.__traceback__)[-max_frames:]
    lines = [f"{type(exc).__name__}: {exc}"]
    lines.extend(
        f"    at {frame.name}({os.path.basename(frame.filename)}:{frame.lineno})"
        for frame in frames
    )
    return "\n".join(lines)
