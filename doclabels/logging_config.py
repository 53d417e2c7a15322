"""
Logging configuration for doclabels.

Quiet by default; --verbose or DOCLABELS_VERBOSE=1 enables debug output.
"""

import logging
import sys
import warnings


def configure_quiet_mode(quiet: bool = True):
    """
    Configure logging to only surface warnings and errors.

    Args:
        quiet: If True, suppress informational output. If False, show everything.
    """
    logger = logging.getLogger("doclabels")
    if quiet:
        warnings.filterwarnings("ignore")
        if logger.level == logging.NOTSET or logger.level < logging.WARNING:
            logger.setLevel(logging.WARNING)
    else:
        warnings.filterwarnings("default")
        logger.setLevel(logging.INFO)


def enable_debug_mode():
    """Enable debug-level logging to stderr."""
    # Re-enable warnings
    warnings.filterwarnings("default")

    # Configure root logger for debug output
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Add stderr handler if not already present
    if not any(isinstance(h, logging.StreamHandler) and h.stream == sys.stderr
               for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        ))
        root_logger.addHandler(handler)

    logging.getLogger("doclabels").setLevel(logging.DEBUG)


def configure_ops_log(store_path):
    """Configure a persistent operations log for a label store.

    Writes to {store_path}/doclabels-ops.log using a rotating file handler
    (1MB max, 3 backups). Always active regardless of --verbose.
    Returns the handler so it can be removed on close().
    """
    from logging.handlers import RotatingFileHandler
    from pathlib import Path

    log_path = Path(store_path) / "doclabels-ops.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        str(log_path),
        maxBytes=1_000_000,
        backupCount=3,
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    doclabels_logger = logging.getLogger("doclabels")
    doclabels_logger.addHandler(handler)
    # Ensure doclabels logger allows INFO through even in quiet mode
    if doclabels_logger.level == logging.NOTSET or doclabels_logger.level > logging.INFO:
        doclabels_logger.setLevel(logging.INFO)

    return handler
