#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

"""
Program-level Rust generation: entry point, free functions, variables and
control flow.
"""

from grit_ast import ExpressionStmt, IntLiteral, Program
from grit_backend import CodeGenerator, generate_program


# ============================================================================
# Entry point
# ============================================================================

def test_single_expression_program_prints_result():
    program = Program([ExpressionStmt(IntLiteral(5))])

    assert generate_program(program) == 'fn main() {\n    let result = 5;\n    println!("{}", result);\n}\n'


def test_single_binary_expression_program(generate_source):
    assert generate_source("1 + 2") == 'fn main() {\n    let result = 1 + 2;\n    println!("{}", result);\n}\n'


def test_single_call_statement_is_not_a_result_program(generate_source):
    assert generate_source("print('hi')") == 'fn main() {\n    println!("hi");\n}\n'
    assert generate_source("foo(1)") == "fn main() {\n    foo(1);\n}\n"


def test_empty_program_has_empty_main():
    assert generate_program(Program([])) == "fn main() {\n}\n"


def test_assignment_and_print(generate_source):
    out = generate_source("x = 42\nprint('%d', x)")

    assert out == 'fn main() {\n    let x = 42;\n    println!("{}", x);\n}\n'


def test_generator_instance_can_be_reused(generate_source, parse_source):
    generator = CodeGenerator()
    program = parse_source("x = 1\ny = x")

    assert generator.generate_program(program) == generator.generate_program(program)


# ============================================================================
# Functions
# ============================================================================

def test_function_with_implicit_return(generate_source):
    out = generate_source("fn add(a, b) { a + b }")

    assert out == (
        "fn add(a: i64, b: i64) -> i64 {\n"
        "    a + b\n"
        "}\n"
        "\n"
        "fn main() {\n"
        "}\n"
    )


def test_function_and_main_ordering(generate_source):
    out = generate_source(
        """
        fn double(n) {
            doubled = n * 2
            doubled
        }
        result = double(21)
        print('%d', result)
        """
    )

    assert out == (
        "fn double(n: i64) -> i64 {\n"
        "    let doubled = n * 2;\n"
        "    doubled\n"
        "}\n"
        "\n"
        "fn main() {\n"
        "    let result = double(21);\n"
        '    println!("{}", result);\n'
        "}\n"
    )


def test_function_without_final_expression_returns_zero(generate_source):
    out = generate_source("fn show(x) { print('%d', x) }")

    assert "fn show(x: i64) -> i64 {\n" in out
    assert '    println!("{}", x);\n    0\n}\n' in out


def test_function_without_parameters(generate_source):
    assert "fn foo() -> i64 {\n    5\n}\n" in generate_source("fn foo() { 5 }")


def test_reassigned_parameter_is_mutable(generate_source):
    out = generate_source("fn inc(n) {\n n = n + 1\n n\n}")

    assert "fn inc(mut n: i64) -> i64 {\n    n = n + 1;\n    n\n}\n" in out


def test_function_calls_in_main(generate_source):
    out = generate_source("fn f(x) { x }\nother_func(42)\ny = f(1)")

    assert "    other_func(42);\n" in out
    assert "    let y = f(1);\n" in out


def test_nested_function_definitions_are_hoisted(generate_source):
    out = generate_source(
        """
        if 1 {
            fn helper() { 7 }
        }
        x = helper()
        """
    )

    assert out == (
        "fn helper() -> i64 {\n"
        "    7\n"
        "}\n"
        "\n"
        "fn main() {\n"
        "    if 1 != 0 {\n"
        "    }\n"
        "    let x = helper();\n"
        "}\n"
    )


def test_user_main_does_not_clash_with_entry_point(generate_source):
    out = generate_source("fn main() { 1 }\nmain()")

    assert out == "fn grit_main() -> i64 {\n    1\n}\n\nfn main() {\n    grit_main();\n}\n"


# ============================================================================
# Variables
# ============================================================================

def test_reassigned_variable_is_declared_mutable(generate_source):
    out = generate_source(
        """
        x = 0
        while x < 10 {
            x = x + 1
        }
        """
    )

    assert out == (
        "fn main() {\n"
        "    let mut x = 0;\n"
        "    while x < 10 {\n"
        "        x = x + 1;\n"
        "    }\n"
        "}\n"
    )


def test_single_assignments_use_plain_let(generate_source):
    out = generate_source("a = 1\nb = 2\nc = a + b")

    assert "    let a = 1;\n    let b = 2;\n    let c = a + b;\n" in out
    assert "mut" not in out


def test_rust_keyword_variable_names(generate_source):
    out = generate_source("type = 1\nprint('%d', type)")

    assert "    let r#type = 1;\n" in out
    assert '    println!("{}", r#type);\n' in out


# ============================================================================
# Control flow
# ============================================================================

def test_if_elif_else(generate_source):
    out = generate_source(
        """
        a = 1
        b = 2
        if a < b {
            print('less')
        } elif a > b {
            print('greater')
        } else {
            print('equal')
        }
        """
    )

    assert out == (
        "fn main() {\n"
        "    let a = 1;\n"
        "    let b = 2;\n"
        "    if a < b {\n"
        '        println!("less");\n'
        "    } else if a > b {\n"
        '        println!("greater");\n'
        "    } else {\n"
        '        println!("equal");\n'
        "    }\n"
        "}\n"
    )


def test_assignment_inside_branch_reuses_outer_binding(generate_source):
    out = generate_source("x = 1\nif x > 0 {\n    x = 2\n}")

    assert "    let mut x = 1;\n    if x > 0 {\n        x = 2;\n    }\n" in out


def test_integer_condition_is_compared_with_zero(generate_source):
    out = generate_source("flag = 1\nif flag { print('yes') }\nwhile flag - 1 { flag = 0 }")

    assert "    if flag != 0 {\n" in out
    assert "    while flag - 1 != 0 {\n" in out


def test_grouped_comparison_condition_is_kept(generate_source):
    out = generate_source("a = 1\nif (a < 2) { a = 3 }")

    assert "    if (a < 2) {\n" in out
