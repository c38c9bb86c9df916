"""Common logging utilities."""

from kdindex.utils.logging.base import BaseLogger as BaseLogger
from kdindex.utils.logging.base import ConsoleLogger as ConsoleLogger
from kdindex.utils.logging.base import NoOpLogger
from kdindex.utils.logging.base import setup_logger as setup_logger
from kdindex.utils.logging.console import console as console
from kdindex.utils.logging.progress_bar import (
    get_progress_widgets as get_progress_widgets,
)

no_op_logger = NoOpLogger()
