#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from grit_ast import (
    BinaryOp, BinaryOperator, ClassDef, FieldAccess, FunctionCall, FunctionDef, Grouped, Identifier, IfStmt,
    IntLiteral, MethodCall, MethodDef, Program, StringLiteral, WhileStmt, ExpressionStmt, Assignment)
from grit_ast_printer import display, format_node, format_program
from grit_parser import Parser


# ============================================================================
# display()
# ============================================================================

def test_display_expressions():
    assert display(IntLiteral(42)) == "42"
    assert display(StringLiteral("hello")) == "'hello'"
    assert display(BinaryOp(IntLiteral(1), BinaryOperator.ADD, IntLiteral(2))) == "(1 + 2)"
    assert display(Grouped(IntLiteral(42))) == "(42)"
    assert display(FunctionCall("foo", [])) == "foo()"
    assert display(FunctionCall("add", [IntLiteral(1), IntLiteral(2), IntLiteral(3)])) == "add(1, 2, 3)"
    assert display(FieldAccess(Identifier("obj"), "field")) == "obj.field"
    assert display(MethodCall(Identifier("obj"), "method", [])) == "obj.method()"
    assert display(MethodCall(Identifier("Point"), "new", [IntLiteral(3), IntLiteral(4)])) == "Point.new(3, 4)"


def test_display_string_reescapes_quotes_and_newlines():
    assert display(StringLiteral("it's\n")) == "'it\\'s\\n'"


def test_display_statements():
    assert display(Assignment("x", IntLiteral(42))) == "x = 42"
    assert display(FunctionDef("add", ["x", "y"], [])) == "fn add(x, y)"
    assert display(ClassDef("Point")) == "class Point"
    assert display(MethodDef("Foo", "new", ["x", "y"], [])) == "fn Foo > new(x, y)"
    assert display(WhileStmt(BinaryOp(Identifier("x"), BinaryOperator.LT, IntLiteral(10)), [])) == "while (x < 10)"


def test_display_if_variants():
    cond = Identifier("x")
    body = [ExpressionStmt(IntLiteral(1))]

    assert display(IfStmt(cond, body)) == "if x"
    assert display(IfStmt(cond, body, [(cond, body)])) == "if x elif(s)"
    assert display(IfStmt(cond, body, [], body)) == "if x + else"
    assert display(IfStmt(cond, body, [(cond, body)], body)) == "if x elif(s) + else"


def test_display_program_joins_statements_with_newlines():
    program = Program([Assignment("x", IntLiteral(1)), ExpressionStmt(Identifier("x"))])

    assert display(program) == "x = 1\nx"


def test_display_output_reparses_to_same_ast():
    src = "print('%d', x)\nobj.m(1)\nx = 5"
    program = Parser.from_source(src).parse()

    assert display(program) == src
    assert Parser.from_source(display(program)).parse() == program


# ============================================================================
# format_node()
# ============================================================================

def test_format_node_shows_classes_scalars_and_spans():
    program = Parser.from_source("x = 1 + 2").parse()

    lines = format_node(program)

    assert lines[0].startswith("Program @1:1-")
    assert lines[1] == "  statements:"
    assert lines[2].startswith("    Assignment(name='x') @1:1-")
    assert any("BinaryOp(op=ADD)" in line for line in lines)
    assert any("IntLiteral(value=2) @1:9-1:10" in line for line in lines)


def test_format_program_prints_params_inline_and_elif_pairs():
    program = Parser.from_source("fn f(a, b) {\n if a { 1 } elif b { 2 }\n}").parse()

    text = format_program(program)

    assert "FunctionDef(name='f')" in text
    assert "a, b" in text
    assert "elif:" in text


def test_format_node_without_spans():
    lines = format_node(IntLiteral(5))

    assert lines == ["IntLiteral(value=5)"]
