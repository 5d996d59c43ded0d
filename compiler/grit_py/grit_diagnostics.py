#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

"""
User-facing diagnostics.

Lexer and parser failures are exceptions inside the pipeline; the driver turns
them into Diagnostic records carrying a stable `[XXX-nnnn]` code, a location
and an optional span end used for caret underlining.
"""

import os
import re
from dataclasses import dataclass
from typing import Optional

from grit_lexer import LexerError, Token
from grit_parser import ParseError


DIAGNOSTIC_CODE_FAMILIES = {
    "LEX": [
        "LEX-0040",  # unexpected character
        "LEX-0060",  # integer literal out of range
    ],
    "PAR": [
        "PAR-0010",  # unexpected token
        "PAR-0020",  # unexpected end of file
        "PAR-0030",  # invalid expression
    ],
    "DRV": [
        "DRV-0010",  # cannot read source file
    ],
}

_CODE_TAG_RE = re.compile(r"\[([A-Z]{3}-\d{4})\]")


def is_registered_code(code: str) -> bool:
    family = code.split("-", 1)[0]
    return code in DIAGNOSTIC_CODE_FAMILIES.get(family, [])


@dataclass
class Diagnostic:
    kind: str  # "error" or "warning"
    message: str  # "<phase>: [CODE] text", e.g. "syntax: [PAR-0010] Expected ..."
    filename: Optional[str] = None

    # Primary location (start of the span)
    line: Optional[int] = None
    column: Optional[int] = None

    # Optional end of span (exclusive)
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    @property
    def code(self) -> Optional[str]:
        match = _CODE_TAG_RE.search(self.message)
        return match.group(1) if match else None

    def format(self) -> str:
        """One-line header; the CLI prints the source snippet below it."""
        loc = ""
        if self.filename is not None:
            # pseudo files such as "<input>" are shown as-is
            loc = self.filename if self.filename.startswith("<") else os.path.abspath(self.filename)
        if self.line is not None:
            loc = f"{loc}:{self.line}" if loc else f"{self.line}"
            if self.column is not None:
                loc += f":{self.column}"
        if loc:
            return f"{loc}: {self.kind}: {self.message}"
        return f"{self.kind}: {self.message}"


def diag_from_token(
        kind: str,
        message: str,
        *,
        filename: Optional[str],
        token: Optional[Token],
) -> Diagnostic:
    if token is None:
        return Diagnostic(kind=kind, message=message, filename=filename)
    return Diagnostic(
        kind=kind,
        message=message,
        filename=filename,
        line=token.line,
        column=token.column,
        end_line=token.line,
        end_column=token.column + max(1, len(token.text)),
    )


def diag_from_lexer_error(error: LexerError) -> Diagnostic:
    # the offending character is the whole span
    return Diagnostic(
        kind="error",
        message=f"syntax: {error.message}",
        filename=error.filename,
        line=error.line,
        column=error.column,
        end_line=error.line,
        end_column=error.column + 1,
    )


def diag_from_parse_error(error: ParseError) -> Diagnostic:
    return diag_from_token(
        "error",
        f"syntax: [{error.code}] {error.message}",
        filename=error.filename,
        token=error.token,
    )


def diag_unreadable_file(path: str, reason: Exception) -> Diagnostic:
    # I/O failure or invalid UTF-8
    return Diagnostic(kind="error", message=f"file: [DRV-0010] cannot read {path}: {reason}")
