#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from grit_ast import Program
from grit_backend import CodeGenerator
from grit_context import CompilationContext
from grit_diagnostics import Diagnostic, diag_from_lexer_error, diag_from_parse_error, diag_unreadable_file
from grit_lexer import LexerError, Lexer, Token
from grit_logger import log_debug, log_info, log_stage
from grit_parser import Parser, ParseError


@dataclass
class TranslationResult:
    """
    Outcome of running the pipeline over one source text.

    Contains:
      - the tokens (if lexing succeeded)
      - the program (if parsing succeeded)
      - the generated Rust code (if every stage succeeded)
      - diagnostics accumulated on the way
    """
    filename: Optional[str] = None
    source: str = ""
    tokens: Optional[List[Token]] = None
    program: Optional[Program] = None
    rust_code: Optional[str] = None
    context: CompilationContext = field(default_factory=CompilationContext.default)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def has_errors(self) -> bool:
        return any(d.kind == "error" for d in self.diagnostics)


def compile_source(source: str, filename: str = "<input>") -> str:
    """
    Translate Grit source to Rust in one call.

    Raises LexerError or ParseError on malformed input.
    """
    tokens = Lexer(source, filename=filename).tokenize()
    program = Parser(tokens, filename=filename).parse()
    return CodeGenerator(filename=filename).generate_program(program)


class GritDriver:
    """
    Pipeline driver:
      - read file
      - tokenize
      - parse
      - generate Rust

    Lexer and parser errors are turned into Diagnostics; internal compiler
    errors propagate to the caller.
    """

    def __init__(self, context: CompilationContext | None = None):
        self.context = context or CompilationContext.default()

    # --- Public API ---

    def translate_file(self, path: str | Path, *, generate: bool = True) -> TranslationResult:
        path = Path(path)
        log_info(self.context, f"Reading '{path}'")
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            result = TranslationResult(filename=str(path), context=self.context)
            result.diagnostics.append(diag_unreadable_file(str(path), e))
            return result
        return self.translate_source(source, str(path), generate=generate)

    def translate_source(self, source: str, filename: str = "<input>", *, generate: bool = True) -> TranslationResult:
        """
        Run the pipeline over a source string.

          1. Tokenize.
          2. Parse into a Program.
          3. Generate Rust code (skipped when generate=False).

        Stops at the first failing stage; the result keeps the products of the
        stages that succeeded.
        """
        result = TranslationResult(filename=filename, source=source, context=self.context)

        log_stage(self.context, "Tokenizing", filename)
        try:
            result.tokens = Lexer(source, filename=filename).tokenize()
        except LexerError as e:
            result.diagnostics.append(diag_from_lexer_error(e))
            return result
        log_debug(self.context, f"Tokenized {len(result.tokens)} token(s)")

        log_stage(self.context, "Parsing", filename)
        try:
            result.program = Parser(result.tokens, filename=filename).parse()
        except ParseError as e:
            result.diagnostics.append(diag_from_parse_error(e))
            return result
        log_debug(self.context, f"Parsed {len(result.program.statements)} top-level statement(s)")

        if generate:
            generator = CodeGenerator(context=self.context, filename=filename)
            result.rust_code = generator.generate_program(result.program)

        return result
