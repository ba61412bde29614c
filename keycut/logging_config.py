"""Logging configuration for Keycut."""

import logging
import sys


class ColoredFormatter(logging.Formatter):
    """Custom logging formatter to add colors to log levels."""

    yellow = "\x1b[33;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"
    green = "\x1b[32;20m"
    cyan = "\x1b[36;20m"

    FORMATS = {
        logging.DEBUG: cyan + "%(levelname)s" + reset + " - %(message)s",
        logging.INFO: green + "%(levelname)s" + reset + " - %(message)s",
        logging.WARNING: yellow + "%(levelname)s" + reset + " - %(message)s",
        logging.ERROR: red + "%(levelname)s" + reset + " - %(message)s",
        logging.CRITICAL: bold_red + "%(levelname)s" + reset + " - %(message)s",
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno)
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)


def setup_logging(level=logging.INFO):
    """Attach a colored console handler to the keycut logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    log = logging.getLogger("keycut")
    log.setLevel(level)

    # Log to stderr so stdout stays free for results
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredFormatter())

    if not log.handlers:
        log.addHandler(console_handler)
    else:
        for handler in log.handlers:
            handler.setLevel(level)

    return log


# Create a default logger instance
logger = logging.getLogger("keycut")
