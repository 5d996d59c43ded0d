#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


# ==========================
# AST definitions
# ==========================


@dataclass
class Span:
    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass
class Node:
    span: Optional[Span] = field(default=None, repr=False, compare=False, kw_only=True)


# --- operators ---

class BinaryOperator(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def precedence(self) -> int:
        """Binding strength: comparisons 0, additive 1, multiplicative 2."""
        if self in (BinaryOperator.MUL, BinaryOperator.DIV):
            return 2
        if self in (BinaryOperator.ADD, BinaryOperator.SUB):
            return 1
        return 0

    @property
    def is_comparison(self) -> bool:
        return self.precedence == 0


# --- expressions ---

class Expr(Node):
    pass


@dataclass
class IntLiteral(Expr):
    value: int


@dataclass
class FloatLiteral(Expr):
    value: float


@dataclass
class StringLiteral(Expr):
    value: str  # decoded text, without quotes


@dataclass
class Identifier(Expr):
    name: str


@dataclass
class BinaryOp(Expr):
    left: Expr
    op: BinaryOperator
    right: Expr


@dataclass
class Grouped(Expr):
    inner: Expr


@dataclass
class FunctionCall(Expr):
    name: str
    args: List[Expr]


@dataclass
class FieldAccess(Expr):
    object: Expr
    field: str


@dataclass
class MethodCall(Expr):
    object: Expr
    method: str
    args: List[Expr]  # empty for a bare `obj.name`


# --- statements ---

class Stmt(Node):
    pass


@dataclass
class Assignment(Stmt):
    name: str  # plain variable, or "self.<field>" for a field store
    value: Expr

    @property
    def field_name(self) -> Optional[str]:
        """The stored field when this assigns `self.<field>`, else None."""
        if self.name.startswith("self."):
            return self.name[len("self."):]
        return None


@dataclass
class ExpressionStmt(Stmt):
    expr: Expr


@dataclass
class FunctionDef(Stmt):
    name: str
    params: List[str]
    body: List[Stmt]


@dataclass
class ClassDef(Stmt):
    name: str


@dataclass
class MethodDef(Stmt):
    class_name: str
    method_name: str
    params: List[str]
    body: List[Stmt]


@dataclass
class IfStmt(Stmt):
    condition: Expr
    then_branch: List[Stmt]
    elif_branches: List[Tuple[Expr, List[Stmt]]] = field(default_factory=list)
    else_branch: Optional[List[Stmt]] = None


@dataclass
class WhileStmt(Stmt):
    condition: Expr
    body: List[Stmt]


# --- program ---

@dataclass
class Program(Node):
    statements: List[Stmt] = field(default_factory=list)
