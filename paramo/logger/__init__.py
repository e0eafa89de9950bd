"""Run tracing for PARAMO."""

from paramo.logger.base_logger import TraceLogger
from paramo.logger.table_logger import Logger
from paramo.logger.formatting import format_character_set, format_state

# Shared trace; off unless a caller switches it on
paramo_logger = Logger("paramo.trace")
paramo_logger.disabled = True

__all__ = [
    "TraceLogger",
    "Logger",
    "paramo_logger",
    "format_character_set",
    "format_state",
]
