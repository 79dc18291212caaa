"""User-facing progress and warning messages."""

import logging
import sys
from typing import Optional, Protocol

from rich.console import Console

logger = logging.getLogger("gitsource")


class Display(Protocol):
    """Channel the downloader reports progress and warnings to."""

    def status(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...


class ConsoleDisplay:
    """Progress and warning lines rendered with rich."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)

    def status(self, message: str):
        logger.debug(message)
        self.console.print(f"[dim]→[/dim] {message}", highlight=False)

    def warning(self, message: str):
        logger.debug(message)
        self.console.print(f"[yellow]{message}[/yellow]", highlight=False)


class LogDisplay:
    """Routes messages to the gitsource logger only."""

    def status(self, message: str):
        logger.info(message)

    def warning(self, message: str):
        logger.warning(message)


def configure_logging(debug: bool):
    """
    Configures the logging system based on the debug flag.
    """
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter("%(message)s")
    handler.setFormatter(formatter)

    log_level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(log_level)

    if not logger.hasHandlers():
        logger.addHandler(handler)
