"""Logging configuration for carousel."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Handlers installed here carry this name so a second setup replaces them
HANDLER_NAME = "carousel"


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """
    Setup logging configuration for the CLI.

    Records go to stderr so the tables printed on stdout stay parseable.
    Without ``--verbose`` only warnings reach the console; a log file always
    receives debug output.

    Args:
        verbose: Enable verbose/debug logging
        log_file: Optional log file path
    """
    console_level = logging.DEBUG if verbose else logging.WARNING
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if handler.get_name() == HANDLER_NAME:
            root_logger.removeHandler(handler)
            handler.close()

    handlers = [logging.StreamHandler(sys.stderr)]
    handlers[0].setLevel(console_level)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    for handler in handlers:
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    root_logger.setLevel(logging.DEBUG if (verbose or log_file) else console_level)
