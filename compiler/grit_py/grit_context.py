"""
Translation context.

One CompilationContext is shared by the driver, the code generator and the
command line. Today it only carries logging options; the translator reads no
configuration files or environment variables.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Hierarchical logging levels; a message is shown when its level <= the context level."""
    SILENT = 0      # Nothing, not even errors
    ERROR = 3       # Diagnostics only (CLI default)
    WARNING = 6     # Library default
    INFO = 10       # Pipeline stages (-v)
    DEBUG = 30      # Per-item details such as emitted classes and token counts (-vvv)

    @classmethod
    def from_verbosity(cls, count: int) -> 'LogLevel':
        """Map the number of `-v` flags to a level: 0 ERROR, 1-2 INFO, 3+ DEBUG."""
        if count >= 3:
            return cls.DEBUG
        if count >= 1:
            return cls.INFO
        return cls.ERROR


@dataclass
class CompilationContext:
    """
    Options that cut across the pipeline stages.

    Attributes:
        log_rich_format:    Prefix log lines with a timestamp and `[LEVEL]` tag.
        log_level:          Most verbose level that is still printed.
    """
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING

    def logs(self, level: LogLevel) -> bool:
        return level != LogLevel.SILENT and self.log_level >= level

    @staticmethod
    def default() -> 'CompilationContext':
        return CompilationContext(log_level=LogLevel.WARNING)
