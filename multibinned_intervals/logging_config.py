"""
Logging configuration for multibinned-intervals.

Modules log through loggers under the `multibinned_intervals` namespace.
Importing the package installs nothing but a NullHandler, so records
propagate to whatever the application configured. Scripts that want the
tree's output on stdout without configuring logging themselves can call
setup_logging().

Usage:
    from .logging_config import get_logger
    logger = get_logger(__name__)
    logger.debug("Message")
"""

import logging
import sys


PACKAGE_LOGGER_NAME = "multibinned_intervals"


class _ConsoleHandler(logging.StreamHandler):
    """Stdout handler installed by setup_logging(), told apart from foreign handlers."""


def _console_handlers(package_logger: logging.Logger) -> list:
    return [h for h in package_logger.handlers if isinstance(h, _ConsoleHandler)]


def setup_logging(level: int = logging.INFO, force: bool = False, propagate: bool = False) -> None:
    """
    Send the package's log records to stdout.

    Only the handler installed here is inspected or replaced; handlers added
    by the application or by test tooling are left alone.

    Args:
        level: Logging level (default: INFO)
        force: If True, reconfigure even if already configured
        propagate: Whether records should still reach ancestor loggers
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    existing = _console_handlers(package_logger)

    if existing and not force:
        return

    for handler in existing:
        package_logger.removeHandler(handler)

    package_logger.setLevel(level)

    console_handler = _ConsoleHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger.addHandler(console_handler)
    package_logger.propagate = propagate


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    if not any(isinstance(h, logging.NullHandler) for h in package_logger.handlers):
        package_logger.addHandler(logging.NullHandler())

    if name.startswith(PACKAGE_LOGGER_NAME):
        return logging.getLogger(name)
    else:
        return logging.getLogger(f"{PACKAGE_LOGGER_NAME}.{name}")
