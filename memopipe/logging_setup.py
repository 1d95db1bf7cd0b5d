"""Console logging for the pipeline.

Log lines carry a bracketed level tag (``[INFO]``, ``[SUCCESS]``,
``[WARNING]``, ``[ERROR]``) and are colored when written to a terminal.
``SUCCESS`` is an extra level between INFO and WARNING used to mark stage
completions.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_COLORS = {
    "DEBUG": "\033[0;37m",
    "INFO": "\033[0;34m",
    "SUCCESS": "\033[0;32m",
    "WARNING": "\033[1;33m",
    "ERROR": "\033[0;31m",
    "CRITICAL": "\033[0;31m",
}
_RESET = "\033[0m"


def log_success(logger: logging.Logger, msg: str, *args) -> None:
    logger.log(SUCCESS, msg, *args)


class LevelTagFormatter(logging.Formatter):
    """Prefix each message with its level tag, optionally colored."""

    def __init__(self, *, color: bool = False) -> None:
        super().__init__("%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        tag = f"[{record.levelname}]"
        if self.color:
            tag = f"{_COLORS.get(record.levelname, '')}{tag}{_RESET}"
        return f"{tag} {message}"


def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> None:
    """Configure the ``memopipe`` logger tree.

    Other libraries' loggers (urllib3, pydub) are left alone. Calling this
    more than once is a no-op.
    """
    logger = logging.getLogger("memopipe")
    if getattr(logger, "_memopipe_configured", False):
        return

    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    isatty = getattr(stream, "isatty", None)
    handler.setFormatter(LevelTagFormatter(color=bool(isatty and isatty())))

    logger.setLevel(getattr(logging, str(level or "INFO").upper(), logging.INFO))
    logger.handlers = [handler]
    logger.propagate = False
    setattr(logger, "_memopipe_configured", True)
