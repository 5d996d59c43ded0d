#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

"""
String escape helpers shared by the AST printer and Rust codegen.

The lexer decodes Grit string literals (`\\n`, `\\t`, `\\r`, `\\\\`, `\\'`), so
StringLiteral nodes hold raw text. This module encodes that text back to a
Rust string-literal body or to a Grit single-quoted literal body.
"""

_RUST_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\0": "\\0",
}

_GRIT_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}


def encode_rust_string(text: str) -> str:
    """
    Encode raw text into a Rust string-literal body (without quotes).
    """
    return "".join(_RUST_ESCAPES.get(ch, ch) for ch in text)


def encode_grit_string(text: str) -> str:
    """
    Encode raw text into a Grit string-literal body (without quotes).

    Re-lexing `'<result>'` yields the original text again.
    """
    return "".join(_GRIT_ESCAPES.get(ch, ch) for ch in text)


def escape_format_braces(text: str) -> str:
    """Double literal braces so the text is safe inside a Rust format string."""
    return text.replace("{", "{{").replace("}", "}}")


def convert_format_placeholders(text: str) -> str:
    """
    Turn a Grit print format into a Rust format string body.

    Literal braces are escaped first, then `%d` and `%s` become `{}`.
    """
    return escape_format_braces(text).replace("%d", "{}").replace("%s", "{}")
