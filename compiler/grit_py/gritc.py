#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import argparse
from pathlib import Path
from typing import List

from grit_ast_printer import display, format_program
from grit_context import CompilationContext, LogLevel
from grit_diagnostics import Diagnostic
from grit_driver import GritDriver, TranslationResult
from grit_internal_error import InternalCompilerError
from grit_lexer import TokenKind
from grit_logger import log_error, log_info


def print_diagnostics(result: TranslationResult, context: CompilationContext) -> None:
    source_lines = result.source.splitlines()
    for diag in result.diagnostics:
        print_diagnostic_with_snippet(diag, source_lines, context)


def print_diagnostic_with_snippet(diag: Diagnostic, source_lines: List[str],
                                  context: CompilationContext = None) -> None:
    # First line: header
    log_error(context, diag.format())

    if diag.line is None:
        return

    line_idx = diag.line - 1
    if not (0 <= line_idx < len(source_lines)):
        return

    src_line = source_lines[line_idx]

    # Pretty "N | ..." formatting (calculate width so multi-digit line numbers align)
    width = max(5, len(str(diag.line)))
    gutter = f"{diag.line:>{width}} | "

    log_error(context, gutter + src_line)

    if diag.column is None:
        return

    start_col = max(1, diag.column)
    if diag.end_line is None or diag.end_column is None:
        end_col = start_col
    elif diag.end_line == diag.line:
        end_col = max(start_col, diag.end_column)
    else:
        end_col = len(src_line) + 1

    caret_width = max(1, end_col - start_col)
    caret_prefix = " " * width + " | " + " " * (start_col - 1)
    log_error(context, caret_prefix + "^" * caret_width)


def build_compilation_context(args: argparse.Namespace) -> CompilationContext:
    """Build a CompilationContext from command-line arguments."""
    return CompilationContext(
        log_rich_format=getattr(args, 'log', False),
        log_level=LogLevel.from_verbosity(getattr(args, 'verbosity', 0)),
    )


def _run_pipeline(args: argparse.Namespace, *, generate: bool):
    """Run the pipeline on args.file, returning (result, context, exit_code)."""
    context = build_compilation_context(args)
    driver = GritDriver(context=context)
    try:
        result = driver.translate_file(args.file, generate=generate)
    except InternalCompilerError as e:
        log_error(context, e.format())
        return None, context, 1
    print_diagnostics(result, context=context)
    exit_code = 1 if result.has_errors() else 0
    return result, context, exit_code


def cmd_gen(args: argparse.Namespace) -> int:
    """Generate Rust code for a Grit file."""
    result, context, exit_code = _run_pipeline(args, generate=True)
    if exit_code != 0:
        return exit_code

    if args.output:
        Path(args.output).write_text(result.rust_code, encoding="utf-8")
        log_info(context, f"Wrote '{args.output}'")
    else:
        print(result.rust_code, end="")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    _, _, exit_code = _run_pipeline(args, generate=False)
    return exit_code


def cmd_ast(args: argparse.Namespace) -> int:
    """
    Pretty-print the parsed program.

    By default, prints the compact source-like form.
    With --debug, prints the reflection-based node tree.
    """
    result, _, exit_code = _run_pipeline(args, generate=False)
    if exit_code != 0:
        return exit_code

    if args.debug:
        print(format_program(result.program))
    else:
        print(display(result.program))
    return 0


def cmd_tok(args: argparse.Namespace) -> int:
    result, _, exit_code = _run_pipeline(args, generate=False)
    if result is None or result.tokens is None:
        return exit_code or 1

    for tok in result.tokens:
        if not args.include_eof and tok.kind is TokenKind.EOF:
            continue
        # Format: file:line:col: KIND  'text'
        print(
            f"{args.file}:{tok.line}:{tok.column}:\t"
            f"{tok.kind.name:<12} {tok.text!r}"
        )
    return exit_code


def cmd_run(args: argparse.Namespace) -> int:
    """
    Print every pipeline product: tokens, AST (compact and debug) and the
    generated Rust code.
    """
    result, _, exit_code = _run_pipeline(args, generate=True)
    if result is None or result.tokens is None:
        return exit_code or 1

    print("Tokens:")
    for tok in result.tokens:
        print(f"  {tok.kind.name} {tok.text!r} at {tok.line}:{tok.column}")
    print()

    if not result.source.strip():
        print("Empty input - nothing to parse")
        return 0

    if exit_code != 0:
        return exit_code

    print("AST:")
    for line in display(result.program).splitlines():
        print(f"  {line}")
    print()
    print("Debug AST:")
    for line in format_program(result.program).splitlines():
        print(f"  {line}")
    print()
    print("Generated Rust code:")
    for line in result.rust_code.rstrip().splitlines():
        print(f"  {line}")
    return 0


def _add_file_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("file", help="Grit source file (e.g. 'examples/hello.grit')")


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="gritc", description="Grit to Rust translator")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    parser.add_argument("-v", "--verbose",
                        action='count',
                        default=0,
                        dest='verbosity',
                        help="Increase verbosity: -v=INFO, -vvv=DEBUG")
    parser.add_argument("-l", "--log",
                        action='store_true',
                        default=False,
                        help="Enable rich log formatting (timestamps, levels)")

    ###########################
    # gen command
    ###########################
    p_gen = subparsers.add_parser("gen", help="Generate Rust code", aliases=["codegen"])
    p_gen.add_argument("--output", "-o", help="Output Rust file (default: stdout)")
    _add_file_arg(p_gen)
    p_gen.set_defaults(func=cmd_gen)

    ###########################
    # check command
    ###########################
    p_check = subparsers.add_parser("check", help="Tokenize and parse a file, reporting errors")
    _add_file_arg(p_check)
    p_check.set_defaults(func=cmd_check)

    ###########################
    # tok command
    ###########################
    p_tok = subparsers.add_parser("tok", help="Dump lexer tokens", aliases=["tokens"])
    p_tok.add_argument("--include-eof", "-I", action="store_true",
                       help="Include the EOF token in the output")
    _add_file_arg(p_tok)
    p_tok.set_defaults(func=cmd_tok)

    ###########################
    # ast command
    ###########################
    p_ast = subparsers.add_parser("ast", help="Pretty-print the parsed program")
    p_ast.add_argument("--debug", "-d", action="store_true",
                       help="Print the full node tree instead of the compact form")
    _add_file_arg(p_ast)
    p_ast.set_defaults(func=cmd_ast)

    ###########################
    # run command
    ###########################
    p_run = subparsers.add_parser("run", help="Print tokens, AST and generated Rust code")
    _add_file_arg(p_run)
    p_run.set_defaults(func=cmd_run)

    args = parser.parse_args(argv)

    rc = args.func(args)
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
