import logging
import os
from datetime import datetime

from rich.logging import RichHandler

from utils import config

LOG_FILE_PREFIX = "bizmgr_"


class CenteredFormatter(logging.Formatter):
    longest_name_length = 14  # Initial default width

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=14):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, initial_width
        )

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )
        width = CenteredFormatter.longest_name_length
        # format a copy, the file handler must still see the raw name
        record = logging.makeLogRecord(record.__dict__)
        record.name = record.name.center(width)
        return super().format(record)


def _file_handler(log_dir: str) -> logging.Handler:
    """
    One log file per day, everything down to DEBUG.
    """
    os.makedirs(log_dir, exist_ok=True)
    filename = os.path.join(
        log_dir, f"{LOG_FILE_PREFIX}{datetime.now():%Y%m%d}.log"
    )
    handler = logging.FileHandler(filename, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-8s [%(name)s] %(message)s")
    )
    handler.setLevel(logging.DEBUG)
    return handler


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for rich output,
    plus a daily log file when BIZMGR_LOG_DIR is set.
    """
    if name is None:
        name = "bizmgr"
    logger = logging.getLogger(name)
    log_level = logging.DEBUG if config.DEBUG else logging.INFO

    if not logger.handlers:
        console_handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        console_handler.setFormatter(CenteredFormatter("[%(name)s]  %(message)s"))
        console_handler.setLevel(log_level)
        logger.addHandler(console_handler)

        if config.LOG_DIR:
            logger.addHandler(_file_handler(config.LOG_DIR))
            logger.setLevel(logging.DEBUG)
        else:
            logger.setLevel(log_level)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized.")

    return logger
