"""Logging setup for the proxy: plain-text lines on stderr."""
import logging
import sys


class PlainFormatter(logging.Formatter):
    """Plain text formatter for stderr output."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the root logger and return it.

    Existing handlers are replaced, so calling this twice doesn't duplicate
    lines. urllib3 (used by requests) is held at WARNING.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    root_logger.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(PlainFormatter())
    root_logger.addHandler(stderr_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return root_logger
