from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional


def configure_logging(
    log_path: Optional[str] = None,
    level: int = logging.INFO,
    also_console: bool = True,
) -> Optional[str]:
    """Configure root logging once per process.

    Console records go to stderr so stdout stays free for command output
    (summaries, PATH suggestions, pass-through report text). A file handler
    is added when log_path is given.

    Returns the file path being used, if any.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_simtools_configured", False):
        return getattr(logger, "_simtools_log_path", log_path)

    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    if log_path:
        Path(log_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(Path(log_path).expanduser(), encoding="utf-8")
        file_handler.setFormatter(fmt)
        handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_simtools_configured", True)
    setattr(logger, "_simtools_log_path", log_path)

    logging.getLogger(__name__).debug("Logging initialized (file=%s)", log_path)
    return log_path
