"""
Logging configuration for procinspect.

Reports go to stdout, so diagnostics are logged to stderr unless another
handler is given (the Textual browser owns the terminal).
"""

import logging
import sys

DEFAULT_LEVEL = "WARNING"


def setup_logging(level: str = DEFAULT_LEVEL, handler: logging.Handler | None = None) -> None:
    """
    Configure Python logging for procinspect.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR). Unknown names
            fall back to WARNING.
        handler: Handler to log through instead of stderr.

    Log Format:
        YYYY-MM-DD HH:MM:SS [LEVEL] Message
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler],
        force=True,
    )
