#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import os

from grit_diagnostics import (
    Diagnostic, diag_from_lexer_error, diag_from_parse_error, diag_from_token, diag_unreadable_file, is_registered_code)
from grit_lexer import LexerError, Token, TokenKind
from grit_parser import InvalidExpression


def test_format_with_full_location():
    diag = Diagnostic(kind="error", message="boom", filename="a.grit", line=3, column=7)

    assert diag.format() == f"{os.path.abspath('a.grit')}:3:7: error: boom"


def test_format_keeps_pseudo_filenames():
    diag = Diagnostic(kind="error", message="boom", filename="<input>", line=1, column=2)

    assert diag.format() == "<input>:1:2: error: boom"


def test_format_without_filename():
    assert Diagnostic(kind="warning", message="hm", line=4, column=1).format() == "4:1: warning: hm"
    assert Diagnostic(kind="warning", message="hm", line=4).format() == "4: warning: hm"


def test_format_without_location():
    assert Diagnostic(kind="error", message="boom").format() == "error: boom"


def test_diag_from_token_spans_token_text():
    tok = Token(TokenKind.IDENT, "counter", 2, 5)

    diag = diag_from_token("error", "bad", filename="<input>", token=tok)

    assert (diag.line, diag.column, diag.end_line, diag.end_column) == (2, 5, 2, 12)


def test_diag_from_token_eof_has_width_one():
    tok = Token(TokenKind.EOF, "", 1, 9)

    diag = diag_from_token("error", "bad", filename=None, token=tok)

    assert diag.end_column == 10


def test_diag_from_token_without_token():
    diag = diag_from_token("error", "bad", filename="x.grit", token=None)

    assert diag.line is None
    assert diag.column is None


def test_code_is_read_from_message():
    assert Diagnostic(kind="error", message="syntax: [PAR-0020] Unexpected end of file").code == "PAR-0020"
    assert Diagnostic(kind="error", message="no code here").code is None


def test_diag_from_lexer_error_underlines_one_character():
    error = LexerError("[LEX-0040] unexpected character '@' at 3:4", "f.grit", 3, 4, "@")

    diag = diag_from_lexer_error(error)

    assert diag.message == "syntax: [LEX-0040] unexpected character '@' at 3:4"
    assert (diag.filename, diag.line, diag.column, diag.end_line, diag.end_column) == ("f.grit", 3, 4, 3, 5)
    assert diag.code == "LEX-0040"


def test_diag_from_parse_error_prefixes_code():
    tok = Token(TokenKind.RPAREN, ")", 1, 5)

    diag = diag_from_parse_error(InvalidExpression(tok, "p.grit"))

    assert diag.message == "syntax: [PAR-0030] Invalid expression at line 1, column 5"
    assert (diag.line, diag.column, diag.end_column) == (1, 5, 6)


def test_diag_unreadable_file():
    diag = diag_unreadable_file("gone.grit", FileNotFoundError("no such file"))

    assert diag.format() == "error: file: [DRV-0010] cannot read gone.grit: no such file"
    assert is_registered_code(diag.code)
