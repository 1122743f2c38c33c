"""
Logging utilities for the CDN rewriter.

Provides colorful CLI logging and status output using the rich library.
"""

import logging
from typing import Dict, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn


# Global console instance; diagnostics go to stderr so rewritten HTML can
# be piped through stdout
console = Console(stderr=True)

# Logger instances cache
_loggers: Dict[str, logging.Logger] = {}

# Level applied to loggers created lazily through get_logger()
_default_level = logging.INFO


def setup_logger(
    name: str = "cdn_rewrite",
    level: Optional[int] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and configure a logger with rich formatting.

    Args:
        name: Logger name
        level: Logging level (default: the level last passed to configure_logging)
        log_file: Optional file path to write logs

    Returns:
        Configured logger instance
    """
    if level is None:
        level = _default_level

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Clear existing handlers
    logger.handlers.clear()

    console_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    # File handler if specified
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    _loggers[name] = logger
    return logger


def configure_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Apply a level (and optional log file) to every logger of the package.

    Args:
        level: Logging level
        log_file: Optional file path to write logs
    """
    global _default_level
    _default_level = level
    for name in list(_loggers) or ["cdn_rewrite"]:
        setup_logger(name, level, log_file)


def get_logger(name: str = "cdn_rewrite") -> logging.Logger:
    """
    Get or create a logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    if name not in _loggers:
        return setup_logger(name)
    return _loggers[name]


def create_progress() -> Progress:
    """Create a rich progress bar instance."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console
    )


def print_status(message: str, style: str = "bold blue") -> None:
    """
    Print a styled status message.

    Args:
        message: Message to print
        style: Rich style string
    """
    console.print(f"[{style}]{escape(message)}[/{style}]")


def print_error(message: str) -> None:
    """Print an error message."""
    print_status(f"❌ {message}", "bold red")


def print_success(message: str) -> None:
    """Print a success message."""
    print_status(f"✅ {message}", "bold green")


def print_warning(message: str) -> None:
    """Print a warning message."""
    print_status(f"⚠️ {message}", "bold yellow")


def print_info(message: str) -> None:
    """Print an info message."""
    print_status(f"ℹ️ {message}", "bold cyan")
