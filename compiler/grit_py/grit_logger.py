"""
Logging for the Grit translator.

Messages go to stderr so that Rust code printed on stdout stays clean. Whether
a message is shown, and how it is prefixed, is decided by the
CompilationContext passed in.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import sys
import time
from typing import Optional

from grit_context import CompilationContext, LogLevel

_LEVEL_TAGS = {
    LogLevel.ERROR: "ERROR",
    LogLevel.WARNING: "WARNING",
    LogLevel.INFO: "INFO",
    LogLevel.DEBUG: "DEBUG",
}


def _rich_prefix(log_level: LogLevel) -> str:
    tag = _LEVEL_TAGS.get(log_level)
    if tag is None:
        return ""
    return f"{time.strftime('%Y-%m-%d %H:%M:%S', time.localtime())} [{tag}] "


def log(context: Optional[CompilationContext], log_level: LogLevel, message: str) -> None:
    """
    Print a message to stderr if the context admits its level.

    Without a context the message is printed unconditionally; only the CLI's
    snippet printer relies on that.
    """
    if context is None:
        print(message, file=sys.stderr)
        return
    if not context.logs(log_level):
        return
    prefix = _rich_prefix(log_level) if context.log_rich_format else ""
    print(f"{prefix}{message}", file=sys.stderr)


def log_error(context: Optional[CompilationContext], message: str) -> None:
    log(context, LogLevel.ERROR, message)


def log_warning(context: Optional[CompilationContext], message: str) -> None:
    log(context, LogLevel.WARNING, message)


def log_info(context: Optional[CompilationContext], message: str) -> None:
    log(context, LogLevel.INFO, message)


def log_debug(context: Optional[CompilationContext], message: str) -> None:
    log(context, LogLevel.DEBUG, message)


def log_stage(context: Optional[CompilationContext], stage: str, unit: Optional[str] = None) -> None:
    """
    Announce a pipeline stage at INFO level.

    Args:
        context: The compilation context.
        stage: Stage name, e.g. "Tokenizing".
        unit: File being processed; omitted stages end with "...".
    """
    if unit:
        log_info(context, f"{stage} '{unit}'")
    else:
        log_info(context, f"{stage}...")
