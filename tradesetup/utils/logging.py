"""
Logging configuration for the trade setup engine.

Library code only calls ``get_logger(__name__)``. Entry points decide how
much reaches the console: ``configure_logging`` takes a level name and
``configure_cli_logging`` maps the CLI's 0-3 verbosity onto it. Console
output always goes to stderr so rendered results on stdout stay clean.
"""
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import structlog

# CLI verbosity -> console level
VERBOSITY_LEVELS = {
    0: "ERROR",    # errors only
    1: "WARNING",  # normal
    2: "INFO",     # detailed
    3: "DEBUG",    # everything
}


def _processors(json_output: bool) -> List[Any]:
    processors: List[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Console logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file that receives every record at DEBUG
    """
    console_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    # The root level gates structlog's filter_by_level, so open it up when a
    # file wants DEBUG records
    root_logger.setLevel(logging.DEBUG if log_file else console_level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(file_handler)

    # Pretty output on a terminal, JSON lines when piped or written to a file
    structlog.configure(
        processors=_processors(json_output=bool(log_file) or not sys.stderr.isatty()),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def configure_cli_logging(verbose: int = 1, log_file: Optional[str] = None) -> None:
    """
    Configure logging from a CLI verbosity level.

    Args:
        verbose: 0=errors only, 1=normal, 2=detailed, 3=debug
        log_file: Optional file path to save detailed logs
    """
    level = VERBOSITY_LEVELS.get(verbose, "DEBUG" if verbose > 3 else "ERROR")
    configure_logging(level, log_file=log_file)


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    return structlog.get_logger(name)
