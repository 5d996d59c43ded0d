#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from grit_lexer import Lexer, LexerError


def test_unexpected_character_reports_char_and_position():
    src = "x = 1 @ 2"

    with pytest.raises(LexerError) as excinfo:
        Lexer.from_source(src).tokenize()

    assert excinfo.value.message == "[LEX-0040] unexpected character '@' at 1:7"
    assert excinfo.value.char == "@"
    assert excinfo.value.line == 1
    assert excinfo.value.column == 7


def test_unexpected_character_on_later_line():
    src = "x = 1\n  y = #"

    with pytest.raises(LexerError) as excinfo:
        Lexer.from_source(src).tokenize()

    assert excinfo.value.line == 2
    assert excinfo.value.column == 7
    assert "'#'" in excinfo.value.message


def test_lone_bang_is_unexpected_character():
    with pytest.raises(LexerError) as excinfo:
        Lexer.from_source("!x").tokenize()

    assert "unexpected character '!'" in excinfo.value.message
    assert excinfo.value.column == 1


def test_bang_equal_is_not_an_error():
    tokens = Lexer.from_source("a != b").tokenize()

    assert tokens[1].text == "!="


def test_double_quote_outside_string_is_unexpected():
    with pytest.raises(LexerError) as excinfo:
        Lexer.from_source('"hello"').tokenize()

    assert excinfo.value.char == '"'


def test_int_literal_above_64bit_range_raises():
    src = "9223372036854775808"

    with pytest.raises(LexerError) as excinfo:
        Lexer.from_source(src).tokenize()

    assert "exceeds 64-bit signed range" in excinfo.value.message
    assert excinfo.value.line == 1
    assert excinfo.value.column == 1


def test_int_literal_at_64bit_max_is_accepted():
    tokens = Lexer.from_source("9223372036854775807").tokenize()

    assert tokens[0].text == "9223372036854775807"


def test_lexer_error_carries_filename():
    with pytest.raises(LexerError) as excinfo:
        Lexer("$", filename="demo.grit").tokenize()

    assert excinfo.value.filename == "demo.grit"
    assert str(excinfo.value) == excinfo.value.message


def test_non_ascii_digit_is_unexpected_character():
    with pytest.raises(LexerError) as excinfo:
        Lexer.from_source("x = ²").tokenize()

    assert excinfo.value.message == "[LEX-0040] unexpected character '²' at 1:5"


def test_non_ascii_digit_after_dot_is_not_a_fraction():
    with pytest.raises(LexerError) as excinfo:
        Lexer.from_source("x = 1.²").tokenize()

    assert excinfo.value.char == "²"
    assert excinfo.value.column == 7
