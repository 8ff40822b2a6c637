"""
Logging setup for the command line.
"""

import logging
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Third-party loggers that are chatty at INFO/DEBUG
NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def configure_logging(level: str, log_file: Optional[Path] = None) -> None:
    """Configure root logging once per process.

    Args:
        level: Level name such as "INFO"; unknown names fall back to WARNING
        log_file: Optional file that receives the same records as stderr
    """
    resolved_level = logging.getLevelName(level.upper())
    if not isinstance(resolved_level, int):
        resolved_level = logging.WARNING

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=resolved_level, format=LOG_FORMAT, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved_level, logging.WARNING))
