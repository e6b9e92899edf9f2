"""
Logging setup for vaultform.

Modules log through ``logging.getLogger(__name__)``; this module owns the
single handler attached to the package logger.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("vaultform")


def configure_logging(verbose: bool = False, stream=None) -> logging.Logger:
    """
    Attach a stream handler to the vaultform logger.

    Calling this again replaces the handler, so the logger always writes to
    the stream current at the last call.

    Args:
        verbose: Log at DEBUG instead of INFO
        stream: Optional stream for the handler (defaults to stderr)

    Returns:
        The package logger
    """
    for old in list(logger.handlers):
        logger.removeHandler(old)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    set_verbose(verbose)
    return logger


def set_verbose(verbose: bool) -> None:
    """Switch the package logger between DEBUG and INFO."""
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
