"""
Application logger.

Every module logs through the shared ``log`` instance:

    from printer_buddy.utils.logger import log
    log.info(f"Loaded {count} printers")

Records carry the thread name so fetches running on worker threads can be
told apart from the Tk main loop.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

LOG_NAME = "printer_buddy"
LOG_FORMAT = "%(asctime)s [%(levelname)-8s] [%(threadName)s] %(module)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_DIR = os.environ.get(
    "PRINT_BUDDY_HOME",
    os.path.join(os.path.expanduser("~"), ".print_decision_buddy"),
)
LOG_FILE = os.path.join(LOG_DIR, "print_buddy.log")


def setup_logger(level: int = logging.INFO, enable_file_logging: bool = True) -> logging.Logger:
    """
    Configure and return the application logger.

    Safe to call more than once; handlers are only attached on the first call.

    Args:
        level: Logging level for the console handler
        enable_file_logging: Also write to a rotating file in the config directory
    """
    logger = logging.getLogger(LOG_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if enable_file_logging:
        try:
            os.makedirs(LOG_DIR, exist_ok=True)
            file_handler = RotatingFileHandler(
                LOG_FILE, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"File logging disabled: {e}")

    return logger


log = setup_logger()
