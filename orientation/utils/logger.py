# orientation/utils/logger.py
# ============================================================
# Structured Logging Setup
# ============================================================
# Every module in the pipeline logs through a named logger with
# Rich console output. Records emitted from dispatcher worker
# threads carry the worker's name so interleaved page logs can
# be told apart.
#
# Usage:
#   from orientation.utils.logger import get_logger
#   logger = get_logger(__name__)
#   logger.info("Dispatching 12 pages over 4 workers")
# ============================================================

import logging
import threading

from rich.logging import RichHandler

from config.settings import settings


class WorkerNameFilter(logging.Filter):
    """Adds `worker` to each record: "(thread-name) " off the main thread, else ""."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.threadName == threading.main_thread().name:
            record.worker = ""
        else:
            record.worker = f"({record.threadName}) "
        return True


def get_logger(name: str) -> logging.Logger:
    """
    Return a named logger with a single Rich console handler.

    Calling it again for the same name returns the same logger without
    stacking handlers. The level comes from `settings.log_level`.

    Example:
        >>> logger = get_logger("orientation.pipeline.dispatcher")
        >>> logger.debug("Page 3: upside_down")
        [10:30:45] DEBUG    orientation.pipeline.dispatcher (orientation-worker_1) — Page 3: upside_down
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        level = getattr(logging, settings.log_level.upper(), logging.INFO)
        logger.setLevel(level)

        handler = RichHandler(
            level=level,
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
            markup=True,
        )
        handler.addFilter(WorkerNameFilter())
        handler.setFormatter(logging.Formatter("%(name)s %(worker)s— %(message)s"))
        logger.addHandler(handler)

        logger.propagate = False

    return logger
