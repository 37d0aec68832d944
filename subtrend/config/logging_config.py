# subtrend/config/logging_config.py

"""Logging for subtrend CLI runs.

Each run writes a DEBUG log named after the command and its start time
(e.g. ``trends_20260214_153045.log``) inside ``Settings.LOGS_DIR``, which
``SUBTREND_LOGS_DIR`` overrides.  The stderr handler shows records at
``Settings.LOG_LEVEL`` (env ``SUBTREND_LOG_LEVEL``) and above, or
everything when ``verbose`` is set.  Trend JSON goes to stdout, so log
lines never mix with it.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from subtrend.config.settings import Settings

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(levelname)-8s %(name)s: %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def console_level(verbose: bool = False) -> int:
    """Threshold for the stderr handler.

    Unknown names in ``Settings.LOG_LEVEL`` fall back to WARNING.
    """
    if verbose:
        return logging.DEBUG
    level = logging.getLevelName(Settings.LOG_LEVEL)
    return level if isinstance(level, int) else logging.WARNING


def _find_handlers(
    project_logger: logging.Logger,
) -> tuple[logging.FileHandler | None, logging.StreamHandler | None]:
    file_handler = None
    console_handler = None
    for handler in project_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            file_handler = file_handler or handler
        elif isinstance(handler, logging.StreamHandler):
            console_handler = console_handler or handler
    return file_handler, console_handler


def setup_logging(command: str = "trends", verbose: bool = False) -> Path:
    """Attach the run's file and stderr handlers to the ``subtrend`` logger.

    Calling it again keeps the existing handlers and only applies the new
    console threshold.

    Args:
        command: CLI command name, used as the log file prefix.
        verbose: Show DEBUG records on stderr too.

    Returns:
        Path of the log file this run writes to.
    """
    project_logger = logging.getLogger("subtrend")
    project_logger.setLevel(logging.DEBUG)
    level = console_level(verbose)

    file_handler, console_handler = _find_handlers(project_logger)
    if file_handler is not None and console_handler is not None:
        console_handler.setLevel(level)
        return Path(file_handler.baseFilename)

    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"{command}_{timestamp}.log"

    if file_handler is None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
        )
        project_logger.addHandler(file_handler)

    if console_handler is None:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        project_logger.addHandler(console_handler)
    console_handler.setLevel(level)

    project_logger.debug(
        "Logging to %s (console level %s)",
        file_handler.baseFilename,
        logging.getLevelName(level),
    )
    return Path(file_handler.baseFilename)
