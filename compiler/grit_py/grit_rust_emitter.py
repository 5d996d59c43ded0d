"""
Rust Code Emitter

Handles Rust-specific code emission. Knows how to emit Rust syntax, but not why or when.
All orchestration logic and decisions live in the CodeGenerator backend.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import math
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from grit_string_escape import encode_rust_string, convert_format_placeholders


@dataclass
class RustCodeBuilder:
    """
    Helper for building Rust code with indentation tracking.
    """
    lines: List[str] = field(default_factory=list)
    indent_level: int = 0
    indent_str: str = "    "  # 4 spaces

    def indent(self) -> None:
        self.indent_level += 1

    def dedent(self) -> None:
        assert self.indent_level > 0, "dedent below zero"
        self.indent_level -= 1

    def emit(self, line: str = "") -> None:
        """Emit a line with current indentation."""
        if line:
            self.lines.append(self.indent_str * self.indent_level + line)
        else:
            self.lines.append("")

    def to_string(self) -> str:
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"


@dataclass
class RustEmitter:
    """
    Rust-specific code emitter.

    Responsibilities:
    - Emit Rust syntax (items, statements, expressions, macros)
    - Name mangling for Rust keywords
    - Literal encoding

    Does NOT:
    - Decide what to emit (partitioning, field inference, implicit returns)
    - Track variable declarations (the backend passes `mutable` / `declare` decisions in)
    """

    # Rust keywords usable as raw identifiers (`r#type`); self/Self/super/crate cannot be raw
    RUST_KEYWORDS: Set[str] = field(default_factory=lambda: {
        'as', 'async', 'await', 'break', 'const', 'continue', 'dyn', 'enum', 'extern', 'false',
        'for', 'impl', 'in', 'let', 'loop', 'match', 'mod', 'move', 'mut', 'pub', 'ref', 'return',
        'static', 'struct', 'trait', 'true', 'type', 'unsafe', 'use', 'where',
        # reserved for future use
        'abstract', 'become', 'box', 'do', 'final', 'macro', 'override', 'priv', 'try', 'typeof',
        'unsized', 'virtual', 'yield',
    })

    # Identifiers that cannot be raw and cannot be used as plain names either
    RUST_RESERVED_PATHS: Set[str] = field(default_factory=lambda: {'Self', 'super', 'crate'})

    INT_TYPE: str = "i64"
    FLOAT_TYPE: str = "f64"

    # Output builder
    out: RustCodeBuilder = field(default_factory=RustCodeBuilder)

    def get_output(self) -> str:
        """Returns the complete generated Rust code."""
        return self.out.to_string()

    # ============================================================================
    # Name mangling
    # ============================================================================

    def mangle_identifier(self, name: str) -> str:
        """
        Mangle an identifier if it conflicts with Rust keywords.

        Keywords become raw identifiers (`type` -> `r#type`); path keywords that
        cannot be raw get a `_` suffix.
        """
        if name in self.RUST_KEYWORDS:
            return f"r#{name}"
        if name in self.RUST_RESERVED_PATHS:
            return f"{name}_"
        return name

    def mangle_function_name(self, name: str) -> str:
        """User functions named `main` would clash with the generated entry point."""
        if name == "main":
            return "grit_main"
        return self.mangle_identifier(name)

    # ============================================================================
    # Expressions
    # ============================================================================

    def emit_int_literal(self, value: int) -> str:
        return str(value)

    def emit_float_literal(self, value: float) -> str:
        if math.isinf(value):
            # literals beyond f64 range parse to inf
            return "f64::INFINITY"
        # repr keeps the fractional part: 2.0 stays "2.0"
        return repr(value)

    def emit_string_literal(self, value: str) -> str:
        return f'"{encode_rust_string(value)}"'

    def emit_var_ref(self, rust_name: str) -> str:
        return rust_name

    def emit_self_field(self, field_name: str) -> str:
        return f"self.{self.mangle_identifier(field_name)}"

    def emit_binary_op(self, op: str, rust_left: str, rust_right: str) -> str:
        return f"{rust_left} {op} {rust_right}"

    def emit_paren_expr(self, rust_inner: str) -> str:
        return f"({rust_inner})"

    def emit_function_call(self, rust_func_name: str, rust_args: List[str]) -> str:
        return f"{rust_func_name}({', '.join(rust_args)})"

    def emit_method_call(self, rust_obj: str, method_name: str, rust_args: List[str]) -> str:
        return f"{rust_obj}.{self.mangle_identifier(method_name)}({', '.join(rust_args)})"

    def emit_associated_call(self, type_name: str, func_name: str, rust_args: List[str]) -> str:
        """Call of an associated function, e.g. `Point::new(1, 2)`."""
        return f"{type_name}::{self.mangle_identifier(func_name)}({', '.join(rust_args)})"

    def emit_field_access(self, rust_obj: str, field_name: str) -> str:
        return f"{rust_obj}.{self.mangle_identifier(field_name)}"

    def emit_cast(self, rust_expr: str, rust_type: str) -> str:
        return f"({rust_expr} as {rust_type})"

    def emit_to_string(self, rust_expr: str) -> str:
        return f"{rust_expr}.to_string()"

    def emit_truthy(self, rust_expr: str) -> str:
        """Integer-valued condition to a Rust bool."""
        return f"{rust_expr} != 0"

    def emit_println(self, grit_format: Optional[str], rust_values: List[str]) -> str:
        """
        Emit a `println!` invocation.

        With a Grit format string, `%d` / `%s` become `{}` placeholders; without
        one, every value gets its own `{}` separated by spaces.
        """
        if grit_format is None:
            if not rust_values:
                return "println!()"
            rust_format = " ".join("{}" for _ in rust_values)
        else:
            rust_format = encode_rust_string(convert_format_placeholders(grit_format))
        if not rust_values:
            return f'println!("{rust_format}")'
        return f'println!("{rust_format}", {", ".join(rust_values)})'

    # ============================================================================
    # Items
    # ============================================================================

    def emit_blank_line(self) -> None:
        self.out.emit()

    def emit_struct(self, name: str, field_names: List[str]) -> None:
        """Emit a record type; every field is a 64-bit integer."""
        self.out.emit("#[derive(Clone)]")
        self.out.emit(f"struct {name} {{")
        self.out.indent()
        for field_name in field_names:
            self.out.emit(f"{self.mangle_identifier(field_name)}: {self.INT_TYPE},")
        self.out.dedent()
        self.out.emit("}")

    def emit_impl_start(self, name: str) -> None:
        self.out.emit(f"impl {name} {{")
        self.out.indent()

    def _format_params(self, params: List[Tuple[str, bool]]) -> List[str]:
        parts = []
        for name, mutable in params:
            prefix = "mut " if mutable else ""
            parts.append(f"{prefix}{self.mangle_identifier(name)}: {self.INT_TYPE}")
        return parts

    def emit_function_header(self, rust_name: str, params: List[Tuple[str, bool]], returns_value: bool) -> None:
        """Emit `fn name(a: i64, ...) -> i64 {` and open the body."""
        ret = f" -> {self.INT_TYPE}" if returns_value else ""
        self.out.emit(f"fn {rust_name}({', '.join(self._format_params(params))}){ret} {{")
        self.out.indent()

    def emit_method_header(self, method_name: str, params: List[Tuple[str, bool]], mutates_self: bool,
                           returns_value: bool) -> None:
        receiver = "&mut self" if mutates_self else "&self"
        parts = [receiver] + self._format_params(params)
        ret = f" -> {self.INT_TYPE}" if returns_value else ""
        self.out.emit(f"fn {self.mangle_identifier(method_name)}({', '.join(parts)}){ret} {{")
        self.out.indent()

    def emit_constructor_header(self, params: List[Tuple[str, bool]]) -> None:
        self.out.emit(f"fn new({', '.join(self._format_params(params))}) -> Self {{")
        self.out.indent()

    def emit_struct_literal(self, field_inits: List[Tuple[str, str]]) -> None:
        """
        Emit the constructor's result record:

            Self {
                x: x,
                y: 0,
            }
        """
        self.out.emit("Self {")
        self.out.indent()
        for field_name, rust_value in field_inits:
            self.out.emit(f"{self.mangle_identifier(field_name)}: {rust_value},")
        self.out.dedent()
        self.out.emit("}")

    def emit_main_header(self) -> None:
        self.out.emit("fn main() {")
        self.out.indent()

    # ============================================================================
    # Statements
    # ============================================================================

    def emit_let(self, rust_name: str, rust_value: str, mutable: bool) -> None:
        keyword = "let mut" if mutable else "let"
        self.out.emit(f"{keyword} {rust_name} = {rust_value};")

    def emit_assign(self, rust_target: str, rust_value: str) -> None:
        self.out.emit(f"{rust_target} = {rust_value};")

    def emit_expr_stmt(self, rust_expr: str) -> None:
        self.out.emit(f"{rust_expr};")

    def emit_tail_expr(self, rust_expr: str) -> None:
        """Final expression of a body, used as its value (no terminator)."""
        self.out.emit(rust_expr)

    def emit_if_header(self, rust_cond: str) -> None:
        self.out.emit(f"if {rust_cond} {{")
        self.out.indent()

    def emit_else_if_header(self, rust_cond: str) -> None:
        self.out.dedent()
        self.out.emit(f"}} else if {rust_cond} {{")
        self.out.indent()

    def emit_else(self) -> None:
        self.out.dedent()
        self.out.emit("} else {")
        self.out.indent()

    def emit_while_header(self, rust_cond: str) -> None:
        self.out.emit(f"while {rust_cond} {{")
        self.out.indent()

    def emit_block_end(self) -> None:
        """Emit closing brace for a block."""
        self.out.dedent()
        self.out.emit("}")
