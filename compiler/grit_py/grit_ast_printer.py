#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import is_dataclass, fields
from enum import Enum
from typing import List, Any

from grit_ast import (
    Span, Node, Program, Expr, IntLiteral, FloatLiteral, StringLiteral, Identifier, BinaryOp, Grouped, FunctionCall,
    FieldAccess, MethodCall, Stmt, Assignment, ExpressionStmt, FunctionDef, ClassDef, MethodDef, IfStmt, WhileStmt)
from grit_internal_error import ICELocation, InternalCompilerError
from grit_string_escape import encode_grit_string


# ==========================
# Source-like display forms
# ==========================

def display(node: Any) -> str:
    """
    Render a node in a compact, source-like form.

    Binary operations are always parenthesized, so the result is unambiguous
    but not minimal. Statements with bodies show only their header.
    """
    if isinstance(node, Program):
        return "\n".join(display(stmt) for stmt in node.statements)
    if isinstance(node, Expr):
        return _display_expr(node)
    if isinstance(node, Stmt):
        return _display_stmt(node)
    raise InternalCompilerError(f"[ICE-1030] cannot display {type(node).__name__}")


def _display_args(args: List[Expr]) -> str:
    return ", ".join(_display_expr(arg) for arg in args)


def _display_expr(expr: Expr) -> str:
    if isinstance(expr, IntLiteral):
        return str(expr.value)
    if isinstance(expr, FloatLiteral):
        return repr(expr.value)
    if isinstance(expr, StringLiteral):
        return f"'{encode_grit_string(expr.value)}'"
    if isinstance(expr, Identifier):
        return expr.name
    if isinstance(expr, BinaryOp):
        return f"({_display_expr(expr.left)} {expr.op.symbol} {_display_expr(expr.right)})"
    if isinstance(expr, Grouped):
        return f"({_display_expr(expr.inner)})"
    if isinstance(expr, FunctionCall):
        return f"{expr.name}({_display_args(expr.args)})"
    if isinstance(expr, FieldAccess):
        return f"{_display_expr(expr.object)}.{expr.field}"
    if isinstance(expr, MethodCall):
        return f"{_display_expr(expr.object)}.{expr.method}({_display_args(expr.args)})"
    raise InternalCompilerError(f"[ICE-1030] cannot display expression {type(expr).__name__}", ICELocation.of(expr))


def _display_stmt(stmt: Stmt) -> str:
    if isinstance(stmt, Assignment):
        return f"{stmt.name} = {_display_expr(stmt.value)}"
    if isinstance(stmt, ExpressionStmt):
        return _display_expr(stmt.expr)
    if isinstance(stmt, FunctionDef):
        return f"fn {stmt.name}({', '.join(stmt.params)})"
    if isinstance(stmt, ClassDef):
        return f"class {stmt.name}"
    if isinstance(stmt, MethodDef):
        return f"fn {stmt.class_name} > {stmt.method_name}({', '.join(stmt.params)})"
    if isinstance(stmt, IfStmt):
        text = f"if {_display_expr(stmt.condition)}"
        if stmt.elif_branches:
            text += " elif(s)"
        if stmt.else_branch is not None:
            text += " + else"
        return text
    if isinstance(stmt, WhileStmt):
        return f"while {_display_expr(stmt.condition)}"
    raise InternalCompilerError(f"[ICE-1030] cannot display statement {type(stmt).__name__}", ICELocation.of(stmt))


# ==========================
# Debug tree
# ==========================

def _format_span(span: Span | None) -> str:
    if span is None:
        return ""
    return f" @{span.start_line}:{span.start_column}-{span.end_line}:{span.end_column}"


def _format_scalar(value: Any) -> str:
    if isinstance(value, Enum):
        return value.name
    return repr(value)


def format_node(node: Any, indent: int = 0) -> List[str]:
    """
    Generic, reflection-based AST pretty-printer.

    - Shows the node class name.
    - Prints simple scalar fields inline (excluding `span`).
    - Recursively prints child Node / list fields on new indented lines.
    - Appends a concise span annotation like `@1:1-1:6` when available.

    `(condition, branch)` pairs of elif clauses are printed as `elif:` entries.
    """
    ind = "  " * indent

    # Lists: print each element at same indentation
    if isinstance(node, list):
        lines: List[str] = []
        for elem in node:
            lines.extend(format_node(elem, indent))
        return lines

    if isinstance(node, tuple):
        lines = [ind + "elif:"]
        for elem in node:
            lines.extend(format_node(elem, indent + 1))
        return lines

    if isinstance(node, Node) and is_dataclass(node):
        data_fields = [f for f in fields(node) if f.name != "span"]
        simple_parts = []
        child_fields = []

        for f in data_fields:
            value = getattr(node, f.name)
            if isinstance(value, (Node, list)):
                child_fields.append((f.name, value))
            else:
                simple_parts.append((f.name, value))

        # Header: ClassName(field1=..., field2=...) @line:col-line:col
        header = node.__class__.__name__
        inner = ", ".join(f"{name}={_format_scalar(value)}" for name, value in simple_parts if value is not None)
        if inner:
            header = f"{header}({inner})"
        header += _format_span(node.span)

        lines = [ind + header]

        for name, value in child_fields:
            if isinstance(value, list):
                if not value:
                    continue
                lines.append(ind + "  " + f"{name}:")
                if all(isinstance(elem, str) for elem in value):
                    lines.append(ind + "    " + ", ".join(value))
                    continue
                for elem in value:
                    lines.extend(format_node(elem, indent + 2))
            else:
                lines.append(ind + "  " + f"{name}:")
                lines.extend(format_node(value, indent + 2))

        return lines

    # Fallback for unexpected values
    return [ind + repr(node)]


def format_program(program: Program) -> str:
    return "\n".join(format_node(program))
