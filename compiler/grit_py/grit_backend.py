"""
Grit Code Generation Backend

Orchestrates Rust code generation from a parsed Grit program.

The backend handles the "WHAT" and "WHEN" of code generation, while delegating
the "HOW" to the RustEmitter.

Responsibilities:
- Partition top-level statements into classes, free functions and the entry point
- Infer struct fields from method bodies
- Decide between `let`, `let mut` and plain reassignment
- Detect implicit returns
- Parenthesize binary operations by precedence and position

The backend contains no knowledge of Rust syntax.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, NoReturn, Optional, Set, Tuple

from grit_ast import (
    Expr, IntLiteral, FloatLiteral, StringLiteral, Identifier, BinaryOp, Grouped, FunctionCall, FieldAccess,
    MethodCall, Stmt, Assignment, ExpressionStmt, FunctionDef, ClassDef, MethodDef, IfStmt, WhileStmt, Program)
from grit_context import CompilationContext
from grit_internal_error import InternalCompilerError, ICELocation
from grit_logger import log_debug, log_stage
from grit_rust_emitter import RustEmitter
from grit_scope_context import ScopeContext


PRINT_BUILTIN = "print"
TO_INT_BUILTIN = "to_int"
TO_FLOAT_BUILTIN = "to_float"
TO_STRING_BUILTIN = "to_string"
CONSTRUCTOR_NAME = "new"
CONSTRUCTOR_TEMP_PREFIX = "grit_init_"

# Binds tighter than every binary operator: receivers, cast and to_string operands
POSTFIX_PRECEDENCE = 3

DEFINITION_TYPES = (FunctionDef, ClassDef, MethodDef)


@dataclass
class ClassInfo:
    """A Grit class as lowered to a Rust struct plus impl block."""
    name: str
    methods: List[MethodDef] = field(default_factory=list)
    fields: List[str] = field(default_factory=list)  # first-seen order

    @property
    def method_names(self) -> Set[str]:
        return {m.method_name for m in self.methods}

    def add_field(self, name: str) -> None:
        if name not in self.fields:
            self.fields.append(name)


@dataclass
class FunctionFrame:
    """Per-body facts computed before emitting a function, method or main."""
    params: List[str]
    locals: Set[str]  # every plain-assignment target in the body
    mutable: Set[str]  # assigned more than once, or a reassigned parameter
    class_info: Optional[ClassInfo] = None
    is_constructor: bool = False


# ============================================================================
# AST walking helpers
# ============================================================================

def iter_definitions(stmts: List[Stmt]) -> Iterator[Stmt]:
    """
    Yield function, class and method definitions in source order, including
    those nested inside other bodies (they are emitted as top-level items).
    """
    for stmt in stmts:
        if isinstance(stmt, DEFINITION_TYPES):
            yield stmt
            if isinstance(stmt, (FunctionDef, MethodDef)):
                yield from iter_definitions(stmt.body)
        elif isinstance(stmt, IfStmt):
            yield from iter_definitions(stmt.then_branch)
            for _, branch in stmt.elif_branches:
                yield from iter_definitions(branch)
            if stmt.else_branch is not None:
                yield from iter_definitions(stmt.else_branch)
        elif isinstance(stmt, WhileStmt):
            yield from iter_definitions(stmt.body)


def iter_statements(stmts: List[Stmt]) -> Iterator[Stmt]:
    """Pre-order walk through if/while bodies; does not enter definitions."""
    for stmt in stmts:
        yield stmt
        if isinstance(stmt, IfStmt):
            yield from iter_statements(stmt.then_branch)
            for _, branch in stmt.elif_branches:
                yield from iter_statements(branch)
            if stmt.else_branch is not None:
                yield from iter_statements(stmt.else_branch)
        elif isinstance(stmt, WhileStmt):
            yield from iter_statements(stmt.body)


def count_assignments(stmts: List[Stmt]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for stmt in iter_statements(stmts):
        if isinstance(stmt, Assignment) and stmt.field_name is None:
            counts[stmt.name] = counts.get(stmt.name, 0) + 1
    return counts


def assigns_self_field(stmts: List[Stmt]) -> bool:
    return any(isinstance(s, Assignment) and s.field_name is not None for s in iter_statements(stmts))


def is_print_call(expr: Expr) -> bool:
    return isinstance(expr, FunctionCall) and expr.name == PRINT_BUILTIN


def is_condition_bool(expr: Expr) -> bool:
    """True when the expression already yields a bool (a comparison, possibly parenthesized)."""
    while isinstance(expr, Grouped):
        expr = expr.inner
    return isinstance(expr, BinaryOp) and expr.op.is_comparison


# ============================================================================
# Backend
# ============================================================================

@dataclass
class CodeGenerator:
    """
    Grit to Rust code generation backend.

    Decides what to emit and in which order; the RustEmitter owns the syntax.
    Each call to generate_program() starts from a fresh emitter, so an instance
    can be reused.
    """

    context: CompilationContext = field(default_factory=CompilationContext.default)
    filename: Optional[str] = None

    # Target-specific emitter (handles all code emission)
    emitter: RustEmitter = field(default_factory=RustEmitter)

    # Classes by name, in first-appearance order
    _classes: Dict[str, ClassInfo] = field(default_factory=dict)

    # Body currently being emitted
    _frame: Optional[FunctionFrame] = None
    _current_scope: Optional[ScopeContext] = None

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def generate_program(self, program: Program) -> str:
        """
        Main entry point: generate a complete Rust source file for the program.
        """
        log_stage(self.context, "Generating Rust code")
        self.emitter = RustEmitter()
        self._classes = {}
        self._frame = None
        self._current_scope = None

        statements = program.statements
        if len(statements) == 1 and isinstance(statements[0], ExpressionStmt) \
                and not isinstance(statements[0].expr, FunctionCall):
            self._emit_result_program(statements[0].expr)
            return self.emitter.get_output()

        class_stmts: List[Stmt] = []
        function_defs: List[FunctionDef] = []
        for stmt in iter_definitions(statements):
            if isinstance(stmt, FunctionDef):
                function_defs.append(stmt)
            else:
                class_stmts.append(stmt)
        main_stmts = [s for s in statements if not isinstance(s, DEFINITION_TYPES)]

        self._collect_classes(class_stmts)

        for info in self._classes.values():
            self._emit_class(info)
            self.emitter.emit_blank_line()

        for func in function_defs:
            self._emit_function(func)
            self.emitter.emit_blank_line()

        self._emit_main(main_stmts)
        return self.emitter.get_output()

    def generate_expression(self, expr: Expr) -> str:
        """Render a single expression with minimal parenthesization."""
        return self._gen_expr(expr)

    # -------------------------------------------------------------------------
    # Internal compiler error handling
    # -------------------------------------------------------------------------

    def ice(self, message: str, *, node=None) -> NoReturn:
        raise InternalCompilerError(message, ICELocation.of(node, self.filename))

    # -------------------------------------------------------------------------
    # Classes
    # -------------------------------------------------------------------------

    def _collect_classes(self, class_stmts: List[Stmt]) -> None:
        for stmt in class_stmts:
            if isinstance(stmt, ClassDef):
                self._classes.setdefault(stmt.name, ClassInfo(stmt.name))
            elif isinstance(stmt, MethodDef):
                info = self._classes.setdefault(stmt.class_name, ClassInfo(stmt.class_name))
                info.methods.append(stmt)

        # class names are known only now; they are never fields
        for info in self._classes.values():
            for method in info.methods:
                self._collect_fields(info, method)
            log_debug(self.context, f"Class '{info.name}' fields: {', '.join(info.fields) or '<none>'}")

    def _collect_fields(self, info: ClassInfo, method: MethodDef) -> None:
        excluded = set(method.params) | set(count_assignments(method.body)) | {"self"} | set(self._classes)
        self._scan_fields_in_block(info, method.body, excluded)

    def _scan_fields_in_block(self, info: ClassInfo, stmts: List[Stmt], excluded: Set[str]) -> None:
        for stmt in stmts:
            if isinstance(stmt, Assignment):
                if stmt.field_name is not None:
                    info.add_field(stmt.field_name)
                self._scan_fields_in_expr(info, stmt.value, excluded)
            elif isinstance(stmt, ExpressionStmt):
                self._scan_fields_in_expr(info, stmt.expr, excluded)
            elif isinstance(stmt, IfStmt):
                self._scan_fields_in_expr(info, stmt.condition, excluded)
                self._scan_fields_in_block(info, stmt.then_branch, excluded)
                for condition, branch in stmt.elif_branches:
                    self._scan_fields_in_expr(info, condition, excluded)
                    self._scan_fields_in_block(info, branch, excluded)
                if stmt.else_branch is not None:
                    self._scan_fields_in_block(info, stmt.else_branch, excluded)
            elif isinstance(stmt, WhileStmt):
                self._scan_fields_in_expr(info, stmt.condition, excluded)
                self._scan_fields_in_block(info, stmt.body, excluded)

    def _scan_fields_in_expr(self, info: ClassInfo, expr: Expr, excluded: Set[str]) -> None:
        if isinstance(expr, Identifier):
            if expr.name not in excluded:
                info.add_field(expr.name)
        elif isinstance(expr, BinaryOp):
            self._scan_fields_in_expr(info, expr.left, excluded)
            self._scan_fields_in_expr(info, expr.right, excluded)
        elif isinstance(expr, Grouped):
            self._scan_fields_in_expr(info, expr.inner, excluded)
        elif isinstance(expr, FunctionCall):
            for arg in expr.args:
                self._scan_fields_in_expr(info, arg, excluded)
        elif isinstance(expr, FieldAccess):
            if isinstance(expr.object, Identifier) and expr.object.name == "self":
                info.add_field(expr.field)
            self._scan_fields_in_expr(info, expr.object, excluded)
        elif isinstance(expr, MethodCall):
            if (isinstance(expr.object, Identifier) and expr.object.name == "self"
                    and not expr.args and expr.method not in info.method_names):
                info.add_field(expr.method)
            self._scan_fields_in_expr(info, expr.object, excluded)
            for arg in expr.args:
                self._scan_fields_in_expr(info, arg, excluded)

    def _emit_class(self, info: ClassInfo) -> None:
        log_debug(self.context, f"Emitting struct '{info.name}' with {len(info.methods)} method(s)")
        self.emitter.emit_struct(info.name, info.fields)
        if not info.methods:
            return

        self.emitter.emit_blank_line()
        self.emitter.emit_impl_start(info.name)
        for i, method in enumerate(info.methods):
            if i > 0:
                self.emitter.emit_blank_line()
            if method.method_name == CONSTRUCTOR_NAME:
                self._emit_constructor(info, method)
            else:
                self._emit_method(info, method)
        self.emitter.emit_block_end()

    def _emit_constructor(self, info: ClassInfo, method: MethodDef) -> None:
        frame = self._enter_body(method.params, method.body, class_info=info, is_constructor=True)
        self.emitter.emit_constructor_header(self._param_specs(frame))

        # top-level `self.f = e` become initializers; an initializer followed by
        # other statements is bound to a local first so it reads the bindings
        # of its own source position
        inits: Dict[str, str] = {}
        pending: List[Tuple[str, Expr]] = []
        for stmt in method.body:
            if isinstance(stmt, Assignment) and stmt.field_name is not None:
                pending.append((stmt.field_name, stmt.value))
            elif not isinstance(stmt, DEFINITION_TYPES):
                for field_name, value in pending:
                    temp = f"{CONSTRUCTOR_TEMP_PREFIX}{field_name}"
                    self.emitter.emit_let(temp, self._gen_expr(value), mutable=False)
                    inits[field_name] = temp
                pending = []
                self._emit_stmt(stmt)

        for field_name, value in pending:
            inits[field_name] = self._gen_expr(value)
        field_inits = [(f, inits.get(f, self.emitter.emit_int_literal(0))) for f in info.fields]
        self.emitter.emit_struct_literal(field_inits)

        self.emitter.emit_block_end()
        self._leave_body()

    def _emit_method(self, info: ClassInfo, method: MethodDef) -> None:
        frame = self._enter_body(method.params, method.body, class_info=info)
        tail = self._tail_expression(method.body)
        self.emitter.emit_method_header(
            method.method_name,
            self._param_specs(frame),
            mutates_self=assigns_self_field(method.body),
            returns_value=tail is not None,
        )
        self._emit_body(method.body, tail)
        self.emitter.emit_block_end()
        self._leave_body()

    # -------------------------------------------------------------------------
    # Functions and entry point
    # -------------------------------------------------------------------------

    def _emit_function(self, func: FunctionDef) -> None:
        log_debug(self.context, f"Emitting function '{func.name}'")
        frame = self._enter_body(func.params, func.body)
        tail = self._tail_expression(func.body)
        rust_name = self.emitter.mangle_function_name(func.name)
        self.emitter.emit_function_header(rust_name, self._param_specs(frame), returns_value=True)
        self._emit_body(func.body, tail)
        if tail is None:
            # every function returns i64; bodies without a final expression yield 0
            self.emitter.emit_tail_expr(self.emitter.emit_int_literal(0))
        self.emitter.emit_block_end()
        self._leave_body()

    def _emit_main(self, stmts: List[Stmt]) -> None:
        log_debug(self.context, f"Emitting entry point with {len(stmts)} statement(s)")
        self._enter_body([], stmts)
        self.emitter.emit_main_header()
        self._emit_block_sequence(stmts)
        self.emitter.emit_block_end()
        self._leave_body()

    def _emit_result_program(self, expr: Expr) -> None:
        """A program that is a single bare expression prints its value."""
        log_debug(self.context, "Single expression program: emitting result printer")
        self.emitter.emit_main_header()
        self.emitter.emit_let("result", self._gen_expr(expr), mutable=False)
        self.emitter.emit_expr_stmt(self.emitter.emit_println(None, ["result"]))
        self.emitter.emit_block_end()

    def _tail_expression(self, body: List[Stmt]) -> Optional[ExpressionStmt]:
        stmts = [s for s in body if not isinstance(s, DEFINITION_TYPES)]
        if stmts and isinstance(stmts[-1], ExpressionStmt) and not is_print_call(stmts[-1].expr):
            return stmts[-1]
        return None

    def _emit_body(self, body: List[Stmt], tail: Optional[ExpressionStmt]) -> None:
        for stmt in body:
            if stmt is tail:
                self.emitter.emit_tail_expr(self._gen_expr(stmt.expr))
            else:
                self._emit_stmt(stmt)

    # -------------------------------------------------------------------------
    # Scopes
    # -------------------------------------------------------------------------

    def _enter_body(self, params: List[str], body: List[Stmt], *, class_info: Optional[ClassInfo] = None,
                    is_constructor: bool = False) -> FunctionFrame:
        counts = count_assignments(body)
        mutable = {name for name, count in counts.items() if count > 1 or name in params}
        self._frame = FunctionFrame(
            params=list(params),
            locals=set(counts),
            mutable=mutable,
            class_info=class_info,
            is_constructor=is_constructor,
        )
        self._current_scope = ScopeContext(declared_vars=set(params))
        return self._frame

    def _leave_body(self) -> None:
        self._frame = None
        self._current_scope = None

    def _push_scope(self) -> ScopeContext:
        """Enter a new block scope."""
        new_scope = ScopeContext(parent=self._current_scope)
        self._current_scope = new_scope
        return new_scope

    def _pop_scope(self) -> None:
        """Exit current block scope."""
        if self._current_scope is None:
            self.ice("[ICE-1330] scope underflow")
        self._current_scope = self._current_scope.parent

    def _param_specs(self, frame: FunctionFrame) -> List[Tuple[str, bool]]:
        return [(p, p in frame.mutable) for p in frame.params]

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    def _emit_block_sequence(self, stmts: List[Stmt]) -> None:
        for stmt in stmts:
            self._emit_stmt(stmt)

    def _emit_nested_block(self, stmts: List[Stmt]) -> None:
        self._push_scope()
        self._emit_block_sequence(stmts)
        self._pop_scope()

    def _emit_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, Assignment):
            self._emit_assignment(stmt)

        elif isinstance(stmt, ExpressionStmt):
            self.emitter.emit_expr_stmt(self._gen_expr(stmt.expr))

        elif isinstance(stmt, IfStmt):
            self.emitter.emit_if_header(self._gen_condition(stmt.condition))
            self._emit_nested_block(stmt.then_branch)
            for condition, branch in stmt.elif_branches:
                self.emitter.emit_else_if_header(self._gen_condition(condition))
                self._emit_nested_block(branch)
            if stmt.else_branch is not None:
                self.emitter.emit_else()
                self._emit_nested_block(stmt.else_branch)
            self.emitter.emit_block_end()

        elif isinstance(stmt, WhileStmt):
            self.emitter.emit_while_header(self._gen_condition(stmt.condition))
            self._emit_nested_block(stmt.body)
            self.emitter.emit_block_end()

        elif isinstance(stmt, DEFINITION_TYPES):
            # already emitted as a top-level item
            return

        else:
            self.ice(f"[ICE-1020] unsupported statement type for code generation: {type(stmt).__name__}", node=stmt)

    def _emit_assignment(self, stmt: Assignment) -> None:
        rust_value = self._gen_expr(stmt.value)

        if stmt.field_name is not None:
            self.emitter.emit_assign(self.emitter.emit_self_field(stmt.field_name), rust_value)
            return

        rust_name = self.emitter.mangle_identifier(stmt.name)
        if self._current_scope is not None and self._current_scope.is_declared(stmt.name):
            self.emitter.emit_assign(rust_name, rust_value)
            return

        if self._current_scope is not None:
            self._current_scope.add_declared(stmt.name)
        mutable = self._frame is not None and stmt.name in self._frame.mutable
        self.emitter.emit_let(rust_name, rust_value, mutable)

    def _gen_condition(self, expr: Expr) -> str:
        rust_cond = self._gen_expr(expr)
        if is_condition_bool(expr):
            return rust_cond
        return self.emitter.emit_truthy(rust_cond)

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def _gen_expr(self, expr: Expr, parent_precedence: Optional[int] = None, is_right_child: bool = False) -> str:
        if isinstance(expr, IntLiteral):
            return self.emitter.emit_int_literal(expr.value)

        if isinstance(expr, FloatLiteral):
            return self.emitter.emit_float_literal(expr.value)

        if isinstance(expr, StringLiteral):
            return self.emitter.emit_string_literal(expr.value)

        if isinstance(expr, Identifier):
            return self._gen_identifier(expr.name)

        if isinstance(expr, Grouped):
            # explicit source parentheses are always kept
            return self.emitter.emit_paren_expr(self._gen_expr(expr.inner))

        if isinstance(expr, BinaryOp):
            precedence = expr.op.precedence
            rust_left = self._gen_expr(expr.left, precedence, False)
            rust_right = self._gen_expr(expr.right, precedence, True)
            rust_expr = self.emitter.emit_binary_op(expr.op.symbol, rust_left, rust_right)
            needs_parens = parent_precedence is not None and (
                precedence < parent_precedence or (precedence == parent_precedence and is_right_child))
            if needs_parens:
                return self.emitter.emit_paren_expr(rust_expr)
            return rust_expr

        if isinstance(expr, FunctionCall):
            return self._gen_call(expr)

        if isinstance(expr, FieldAccess):
            return self.emitter.emit_field_access(self._gen_receiver(expr.object), expr.field)

        if isinstance(expr, MethodCall):
            return self._gen_method_call(expr)

        self.ice(f"[ICE-1010] unsupported expression type for code generation: {type(expr).__name__}", node=expr)

    def _gen_receiver(self, expr: Expr) -> str:
        return self._gen_expr(expr, POSTFIX_PRECEDENCE)

    def _gen_identifier(self, name: str) -> str:
        if name == "self":
            return "self"
        frame = self._frame
        if (frame is not None and frame.class_info is not None and not frame.is_constructor
                and name not in frame.params and name not in frame.locals
                and name in frame.class_info.fields):
            # bare field reference inside a method body
            return self.emitter.emit_self_field(name)
        return self.emitter.emit_var_ref(self.emitter.mangle_identifier(name))

    def _gen_call(self, call: FunctionCall) -> str:
        args = call.args

        if call.name == PRINT_BUILTIN:
            grit_format: Optional[str] = None
            values = args
            if args and isinstance(args[0], StringLiteral):
                grit_format = args[0].value
                values = args[1:]
            return self.emitter.emit_println(grit_format, [self._gen_expr(a) for a in values])

        if len(args) == 1:
            if call.name == TO_INT_BUILTIN:
                return self.emitter.emit_cast(self._gen_receiver(args[0]), self.emitter.INT_TYPE)
            if call.name == TO_FLOAT_BUILTIN:
                return self.emitter.emit_cast(self._gen_receiver(args[0]), self.emitter.FLOAT_TYPE)
            if call.name == TO_STRING_BUILTIN:
                return self.emitter.emit_to_string(self._gen_receiver(args[0]))

        rust_name = self.emitter.mangle_function_name(call.name)
        return self.emitter.emit_function_call(rust_name, [self._gen_expr(a) for a in args])

    def _gen_method_call(self, call: MethodCall) -> str:
        rust_args = [self._gen_expr(a) for a in call.args]
        obj = call.object

        if isinstance(obj, Identifier) and obj.name in self._classes:
            # `Point.new(1, 2)` calls an associated function
            return self.emitter.emit_associated_call(obj.name, call.method, rust_args)

        if not call.args and self._is_field_read(obj, call.method):
            return self.emitter.emit_field_access(self._gen_receiver(obj), call.method)

        return self.emitter.emit_method_call(self._gen_receiver(obj), call.method, rust_args)

    def _is_field_read(self, obj: Expr, name: str) -> bool:
        """Decide whether a bare `obj.name` reads a field rather than calling a method."""
        frame = self._frame
        if isinstance(obj, Identifier) and obj.name == "self" and frame is not None and frame.class_info is not None:
            info = frame.class_info
            return name in info.fields and name not in info.method_names
        is_method = any(name in info.method_names for info in self._classes.values())
        is_field = any(name in info.fields for info in self._classes.values())
        return is_field and not is_method


def generate_program(program: Program, context: Optional[CompilationContext] = None) -> str:
    return CodeGenerator(context=context or CompilationContext.default()).generate_program(program)


def generate_expression(expr: Expr) -> str:
    return CodeGenerator().generate_expression(expr)
