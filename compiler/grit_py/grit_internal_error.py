#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

# grit_internal_error.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

from grit_ast import Span

DEFAULT_ICE_CODE = "ICE-9999"

# Every internal error the translator can raise, by code
ICE_CODES = {
    "ICE-1010": "unsupported expression type for code generation",
    "ICE-1020": "unsupported statement type for code generation",
    "ICE-1030": "node has no display form",
    "ICE-1330": "scope underflow in code generation",
    DEFAULT_ICE_CODE: "uncategorized internal error",
}

_ICE_TAG_RE = re.compile(r"\[(ICE-\d{4})\]")


@dataclass(frozen=True)
class ICELocation:
    filename: Optional[str]
    span: Optional[Span]

    @classmethod
    def of(cls, node: Any, filename: Optional[str] = None) -> ICELocation:
        """Location of an AST node; nodes built by hand may have no span."""
        return cls(filename=filename, span=getattr(node, "span", None))

    def prefix(self) -> str:
        parts = []
        if self.filename:
            parts.append(self.filename)
        if self.span is not None:
            parts.append(f"{self.span.start_line}:{self.span.start_column}")
        return ":".join(parts)


class InternalCompilerError(RuntimeError):
    """
    ICE = translator bug / violated pipeline invariant.
    Not for user mistakes (those are LexerError / ParseError diagnostics).

    The message should start with a `[ICE-xxxx]` tag from ICE_CODES; untagged
    messages are reported as ICE-9999.
    """

    def __init__(self, message: str, loc: ICELocation | None = None):
        super().__init__(message)
        self.message = message
        self.loc = loc

    @property
    def code(self) -> str:
        match = _ICE_TAG_RE.search(self.message)
        return match.group(1) if match else DEFAULT_ICE_CODE

    def format(self) -> str:
        message = self.message if _ICE_TAG_RE.search(self.message) else f"[{DEFAULT_ICE_CODE}] {self.message}"
        where = self.loc.prefix() if self.loc else ""
        if where:
            return f"{where}: internal compiler error: {message}"
        return f"internal compiler error: {message}"
