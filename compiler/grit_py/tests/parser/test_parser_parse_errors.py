#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from grit_lexer import Lexer, TokenKind
from grit_parser import InvalidExpression, ParseError, Parser, UnexpectedEof, UnexpectedToken


def _parse(src: str):
    return Parser.from_source(src).parse()


def test_unterminated_group_is_unexpected_eof():
    with pytest.raises(UnexpectedEof) as excinfo:
        _parse("(1 + 2")

    assert excinfo.value.expected == "')'"
    assert excinfo.value.message == "Unexpected end of file, expected ')'"


def test_parse_errors_share_a_base_class():
    with pytest.raises(ParseError):
        _parse("(1 + 2")


def test_class_without_name():
    with pytest.raises(UnexpectedToken) as excinfo:
        _parse("class 42")

    err = excinfo.value
    assert err.expected == "class name"
    assert err.found.kind is TokenKind.INT
    assert err.message == "Expected class name but found INT at line 1, column 7"


def test_fn_without_name():
    with pytest.raises(UnexpectedToken) as excinfo:
        _parse("fn { 1 }")

    assert excinfo.value.expected == "function or class name"
    assert excinfo.value.found.kind is TokenKind.LBRACE


def test_method_without_name():
    with pytest.raises(UnexpectedToken) as excinfo:
        _parse("fn Foo > (x) { x }")

    assert excinfo.value.expected == "method name"


def test_parameters_must_be_comma_separated():
    with pytest.raises(UnexpectedToken) as excinfo:
        _parse("fn f(a b) { a }")

    assert excinfo.value.expected == "',' or ')'"
    assert excinfo.value.found.text == "b"


def test_double_comma_in_parameters():
    with pytest.raises(UnexpectedToken) as excinfo:
        _parse("fn f(a,,) { a }")

    assert excinfo.value.expected == "parameter name"
    assert excinfo.value.found.kind is TokenKind.COMMA


def test_parameter_must_be_identifier():
    with pytest.raises(UnexpectedToken) as excinfo:
        _parse("fn f(1) { 1 }")

    assert excinfo.value.expected == "')' or parameter name"


def test_function_without_body():
    with pytest.raises(UnexpectedEof) as excinfo:
        _parse("fn f()")

    assert excinfo.value.expected == "'{'"


def test_unclosed_block():
    with pytest.raises(UnexpectedEof) as excinfo:
        _parse("fn f() {\n  1\n")

    assert excinfo.value.expected == "'}'"


def test_while_without_body():
    with pytest.raises(UnexpectedEof) as excinfo:
        _parse("while x")

    assert excinfo.value.expected == "'{'"


def test_else_without_body():
    with pytest.raises(UnexpectedEof) as excinfo:
        _parse("if x { 1 } else")

    assert excinfo.value.expected == "'{'"


def test_if_body_must_start_with_brace():
    with pytest.raises(UnexpectedToken) as excinfo:
        _parse("if x y")

    assert excinfo.value.expected == "'{'"
    assert excinfo.value.found.kind is TokenKind.IDENT


def test_invalid_expression_start():
    with pytest.raises(InvalidExpression) as excinfo:
        _parse("x = )")

    assert excinfo.value.message == "Invalid expression at line 1, column 5"
    assert excinfo.value.token.kind is TokenKind.RPAREN


def test_missing_assignment_value_is_unexpected_eof():
    with pytest.raises(UnexpectedEof) as excinfo:
        _parse("x = ")

    assert excinfo.value.expected == "expression"


def test_missing_right_operand():
    with pytest.raises(UnexpectedEof) as excinfo:
        _parse("1 +")

    assert excinfo.value.expected == "expression"


def test_unterminated_call_arguments():
    with pytest.raises(UnexpectedEof) as excinfo:
        _parse("foo(1, 2")

    assert excinfo.value.expected == "',' or ')'"


def test_dot_requires_name():
    with pytest.raises(UnexpectedToken) as excinfo:
        _parse("a.(b)")

    assert excinfo.value.expected == "field or method name"


def test_stray_closing_brace_at_top_level():
    with pytest.raises(InvalidExpression) as excinfo:
        _parse("x = 1\n}")

    assert excinfo.value.token.line == 2
    assert excinfo.value.token.column == 1


def test_parse_error_carries_filename():
    tokens = Lexer("class", filename="demo.grit").tokenize()

    with pytest.raises(ParseError) as excinfo:
        Parser(tokens, filename="demo.grit").parse()

    assert excinfo.value.filename == "demo.grit"
    assert str(excinfo.value) == excinfo.value.message
