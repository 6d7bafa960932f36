"""
Central logging configuration for giatmatrix.

Keeps package diagnostics at INFO (DEBUG on request) while suppressing
verbose output from the Google client libraries.
"""

import logging
import os
from typing import Optional

# Third-party loggers that flood DEBUG output with request details.
NOISY_LOGGERS = (
    "gspread",
    "google.auth",
    "google.auth.transport.requests",
    "urllib3.connectionpool",
    "requests.packages.urllib3",
    "charset_normalizer",
)

PACKAGE_LOGGERS = (
    "giatmatrix",
    "giatmatrix.matrix_writer",
    "giatmatrix.description_parser",
    "giatmatrix.attachment_reconciler",
    "giatmatrix.gspread_sheet",
)


def configure_matrix_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure logging levels for giatmatrix.

    Args:
        debug_mode: Whether to enable debug logging for giatmatrix modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        GIATMATRIX_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        GIATMATRIX_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("GIATMATRIX_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("GIATMATRIX_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    # Only add a handler if none exist, so host applications keep their own setup
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(root_level)
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s - %(name)s - %(message)s")
        )
        root_logger.addHandler(handler)

    logger_config: dict[str, int] = {name: logging.WARNING for name in NOISY_LOGGERS}

    package_level = logging.DEBUG if final_debug else logging.INFO
    for module in PACKAGE_LOGGERS:
        logger_config[module] = package_level

    for logger_name, level in logger_config.items():
        logging.getLogger(logger_name).setLevel(level)

    if final_debug:
        root_logger.info("Debug logging enabled for giatmatrix modules")
    else:
        root_logger.info("Production logging configuration applied")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in ("giatmatrix", "gspread", "google.auth"):
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
