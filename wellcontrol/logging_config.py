"""
Logging setup for the well-control core.

Modules log through ``logging.getLogger(__name__)`` below the ``wellcontrol``
namespace. Advisory conditions (geometry interference, missing rheology,
root-finder iteration caps) are logged there; the root finder also raises
``RuntimeWarning`` through :mod:`warnings`, which can be routed into the
same handlers.
"""

import logging
import sys
from typing import List, Optional

PACKAGE_LOGGER = "wellcontrol"
WARNINGS_LOGGER = "py.warnings"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"

# Attribute marking handlers installed here
_OWNED = "_wellcontrol_handler"


def _drop_owned_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _OWNED, False):
            logger.removeHandler(handler)
            handler.close()


def _build_handlers(level: int, log_file: Optional[str]) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        setattr(handler, _OWNED, True)
    return handlers


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    capture_warnings: bool = True,
) -> logging.Logger:
    """
    Configure the ``wellcontrol`` logger.

    Repeated calls replace the handlers installed by earlier calls and leave
    handlers added by the caller alone.

    Parameters
    ----------
    level : int
        Logging level for the package logger and its handlers.
    log_file : str, optional
        Also write the log to this file (overwritten).
    capture_warnings : bool
        Route :mod:`warnings` output (e.g. bisection iteration caps) to the
        same handlers via the ``py.warnings`` logger.

    Returns
    -------
    logging.Logger
        The package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    warnings_logger = logging.getLogger(WARNINGS_LOGGER)
    _drop_owned_handlers(logger)
    _drop_owned_handlers(warnings_logger)

    logger.setLevel(level)
    logger.propagate = False
    for handler in _build_handlers(level, log_file):
        logger.addHandler(handler)

    logging.captureWarnings(capture_warnings)
    if capture_warnings:
        for handler in logger.handlers:
            if getattr(handler, _OWNED, False):
                warnings_logger.addHandler(handler)

    logger.debug("Logging initialized at level %s", logging.getLevelName(level))
    return logger


def reset_logging() -> None:
    """Remove handlers installed by :func:`setup_logging` and stop capturing warnings."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    _drop_owned_handlers(logging.getLogger(WARNINGS_LOGGER))
    _drop_owned_handlers(logger)
    logger.propagate = True
    logging.captureWarnings(False)
