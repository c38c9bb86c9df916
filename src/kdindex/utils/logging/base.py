"""Base logger for loggers to implement.

This module provides the base logger class for loggers to implement, a console
logger that reports through the shared rich console, and a no-op logger that
does nothing for testing purposes.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from rich.table import Table

from kdindex.utils.logging.console import console


def setup_logger(name: str = "kdindex") -> logging.Logger:
    """Return a logger for library modules.

    Args:
        name: The logger name, usually the module ``__name__``.

    Returns:
        A stdlib logger. Handlers are left to the application.
    """
    logger = logging.getLogger(name)
    logger.addHandler(logging.NullHandler())
    return logger


class BaseLogger(ABC):
    """Base logger class."""

    def __init__(self):
        """Initializes the logger."""
        self.console = console

    @abstractmethod
    def log(self, *objects: Any):
        """Log any objects.

        Args:
            objects: Any objects to log
        """
        pass

    @abstractmethod
    def log_metrics(self, metrics: dict, step: int):
        """Logs the metrics.

        Args:
            metrics: The metrics to log
            step: The step number
        """
        pass


class NoOpLogger(BaseLogger):
    """A logger that does nothing."""

    def log(self, *objects: Any):
        """Discards the objects."""
        pass

    def log_metrics(self, metrics: dict, step: int):
        """Discards the metrics."""
        pass


class ConsoleLogger(BaseLogger):
    """A logger that writes to the rich console."""

    def log(self, *objects: Any):
        """Logs the messages to the console.

        Args:
            objects: The objects to log
        """
        self.console.log(*objects)

    def log_metrics(self, metrics: dict, step: int):
        """Renders the metrics as a table on the console.

        Args:
            metrics: The metrics to log
            step: The step number
        """
        table = Table(title=f"step {step}")
        table.add_column("metric")
        table.add_column("value", justify="right")
        for name, value in metrics.items():
            rendered = f"{value:.4f}" if isinstance(value, float) else str(value)
            table.add_row(name, rendered)
        self.console.print(table)
