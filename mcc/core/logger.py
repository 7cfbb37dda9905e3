"""Unified logging for minecraft-compose with console and file output."""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

ROOT_LOGGER = "mcc"

# Loggers of libraries we talk through; only surfaced with --debug
THIRD_PARTY_LOGGERS = ("docker", "urllib3")

# Track if file logging has been set up
_file_logging_configured = False


def get_level(debug: bool = False, quiet: bool = False, verbosity: int = 0) -> int:
    """Map CLI flags to a logging level.

    Args:
        debug: --debug given (everything, including third-party loggers)
        quiet: --quiet given (errors only)
        verbosity: Number of -v flags

    Returns:
        A logging level constant
    """
    if debug:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    if verbosity >= 1:
        return logging.DEBUG
    return logging.INFO


def configure_logging(debug: bool = False, quiet: bool = False, verbosity: int = 0) -> int:
    """Apply the level selected by CLI flags to the mcc logger tree.

    Returns:
        The level that was applied
    """
    level = get_level(debug=debug, quiet=quiet, verbosity=verbosity)
    root_logger = get_logger(ROOT_LOGGER)
    root_logger.setLevel(level)

    for handler in root_logger.handlers:
        if isinstance(handler, RichHandler):
            handler.setLevel(level)

    third_party_level = logging.DEBUG if debug else logging.WARNING
    for name in THIRD_PARTY_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.setLevel(third_party_level)
        if debug and not any(isinstance(h, RichHandler) for h in library_logger.handlers):
            library_logger.addHandler(_rich_handler())

    return level


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False):
    """Set up file logging for minecraft-compose operations.

    Args:
        log_file: Path to log file
        verbose: Enable debug-level logging

    Note:
        Creates the log directory if it doesn't exist.
    """
    global _file_logging_configured

    if _file_logging_configured or not log_file:
        return

    target_log_file = Path(log_file)
    target_log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger(ROOT_LOGGER)
    file_handler = logging.FileHandler(target_log_file)
    file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Detailed format for file logs
    file_formatter = logging.Formatter(
        "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)
    root_logger.addHandler(file_handler)

    if verbose:
        root_logger.setLevel(logging.DEBUG)

    _file_logging_configured = True

    root_logger.debug(f"File logging initialized: {target_log_file}")


def _rich_handler() -> RichHandler:
    handler = RichHandler(console=console, show_path=False, show_time=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance with console output.

    Child loggers of ``mcc`` propagate to the single console handler attached
    to the ``mcc`` logger; anything else gets its own handler.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger with Rich console handler
    """
    logger = logging.getLogger(name)

    if name != ROOT_LOGGER and name.startswith(ROOT_LOGGER + "."):
        get_logger(ROOT_LOGGER)
        return logger

    # Only add console handler if not already present
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(_rich_handler())
        logger.setLevel(logging.INFO)
        logger.propagate = False

    return logger
