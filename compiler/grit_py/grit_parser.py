#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from typing import List, Optional, Tuple

from grit_ast import (
    Span, BinaryOperator, Expr, IntLiteral, FloatLiteral, StringLiteral, Identifier, BinaryOp, Grouped, FunctionCall,
    MethodCall, Stmt, Assignment, ExpressionStmt, FunctionDef, ClassDef, MethodDef, IfStmt, WhileStmt, Program)
from grit_lexer import TokenKind, Token, Lexer


# ==========================
# Parse errors
# ==========================

@dataclass
class ParseError(Exception):
    message: str
    token: Optional[Token] = None
    filename: Optional[str] = None

    code = "PAR-0000"

    def __str__(self) -> str:
        return self.message


class UnexpectedToken(ParseError):
    """A required token is present but of the wrong kind."""

    code = "PAR-0010"

    def __init__(self, expected: str, found: Token, filename: Optional[str] = None) -> None:
        super().__init__(
            f"Expected {expected} but found {found.kind.name} at line {found.line}, column {found.column}",
            found,
            filename,
        )
        self.expected = expected
        self.found = found


class UnexpectedEof(ParseError):
    """Input ended while a construct was still incomplete."""

    code = "PAR-0020"

    def __init__(self, expected: str, token: Optional[Token] = None, filename: Optional[str] = None) -> None:
        super().__init__(f"Unexpected end of file, expected {expected}", token, filename)
        self.expected = expected


class InvalidExpression(ParseError):
    """A token that cannot start an expression was found in expression position."""

    code = "PAR-0030"

    def __init__(self, token: Token, filename: Optional[str] = None) -> None:
        super().__init__(f"Invalid expression at line {token.line}, column {token.column}", token, filename)


# ==========================
# Parser
# ==========================

BINARY_OPERATORS = {
    TokenKind.PLUS: BinaryOperator.ADD,
    TokenKind.MINUS: BinaryOperator.SUB,
    TokenKind.STAR: BinaryOperator.MUL,
    TokenKind.SLASH: BinaryOperator.DIV,
    TokenKind.EQEQ: BinaryOperator.EQ,
    TokenKind.NE: BinaryOperator.NE,
    TokenKind.LT: BinaryOperator.LT,
    TokenKind.LE: BinaryOperator.LE,
    TokenKind.GT: BinaryOperator.GT,
    TokenKind.GE: BinaryOperator.GE,
}


class Parser:
    def __init__(self, tokens: List[Token], filename: Optional[str] = None) -> None:
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].kind is not TokenKind.EOF:
            # tolerate token streams that were not produced by Lexer.tokenize()
            if self.tokens:
                last = self.tokens[-1]
                eof = Token(TokenKind.EOF, "", last.line, last.column + len(last.text))
            else:
                eof = Token(TokenKind.EOF, "", 1, 1)
            self.tokens.append(eof)
        self.index = 0
        self.filename = filename

    @classmethod
    def from_source(cls, source: str) -> "Parser":
        lexer = Lexer.from_source(source)
        tokens = lexer.tokenize()
        return cls(tokens)

    # --- token utilities ---

    def _peek(self, offset: int = 0) -> Token:
        pos = min(self.index + offset, len(self.tokens) - 1)
        return self.tokens[pos]

    def _last(self) -> Token:
        return self.tokens[self.index - 1 if self.index > 0 else 0]

    def _at_end(self) -> bool:
        return self._peek().kind is TokenKind.EOF

    def _advance(self) -> Token:
        tok = self._peek()
        if not self._at_end():
            self.index += 1
        return tok

    def _check(self, kind: TokenKind, offset: int = 0) -> bool:
        return self._peek(offset).kind is kind

    def _match(self, *kinds: TokenKind) -> bool:
        if self._peek().kind in kinds:
            self._advance()
            return True
        return False

    def _expect(self, kind: TokenKind, expected: str) -> Token:
        if self._check(kind):
            return self._advance()
        raise self._error_at_current(expected)

    def _error_at_current(self, expected: str) -> ParseError:
        tok = self._peek()
        if tok.kind is TokenKind.EOF:
            return UnexpectedEof(expected, tok, self.filename)
        return UnexpectedToken(expected, tok, self.filename)

    def _skip_newlines(self) -> None:
        while self._match(TokenKind.NEWLINE):
            pass

    def _check_past_newlines(self, kind: TokenKind) -> bool:
        offset = 0
        while self._check(TokenKind.NEWLINE, offset):
            offset += 1
        return self._check(kind, offset)

    def _span_start(self) -> Span:
        here = self._peek()
        return Span(here.line, here.column, here.line, here.column)

    def _extend_span(self, start: Span) -> Span:
        here = self._last()
        return Span(
            start.start_line,
            start.start_column,
            here.line,
            here.column + len(here.text),
        )

    # --- entry point ---

    def parse(self) -> Program:
        start = self._span_start()
        statements: List[Stmt] = []
        self._skip_newlines()
        while not self._at_end():
            statements.append(self._parse_statement())
            self._skip_newlines()
        return Program(statements, span=self._extend_span(start))

    # --- statements ---

    def _parse_statement(self) -> Stmt:
        if self._check(TokenKind.CLASS):
            stmt = self._parse_class_def()
        elif self._check(TokenKind.FN):
            stmt = self._parse_function_def()
        elif self._check(TokenKind.IF):
            stmt = self._parse_if_stmt()
        elif self._check(TokenKind.WHILE):
            stmt = self._parse_while_stmt()
        elif self._check(TokenKind.IDENT) and self._check(TokenKind.EQ, 1):
            stmt = self._parse_assignment()
        elif (self._check(TokenKind.SELF) and self._check(TokenKind.DOT, 1)
              and self._check(TokenKind.IDENT, 2) and self._check(TokenKind.EQ, 3)):
            stmt = self._parse_field_assignment()
        else:
            start = self._span_start()
            expr = self._parse_expression()
            stmt = ExpressionStmt(expr, span=self._extend_span(start))

        # one trailing newline belongs to the statement; EOF or '}' also end it
        self._match(TokenKind.NEWLINE)
        return stmt

    def _parse_class_def(self) -> ClassDef:
        start = self._span_start()
        self._advance()  # 'class'
        name_tok = self._expect(TokenKind.IDENT, "class name")
        return ClassDef(name_tok.text, span=self._extend_span(start))

    def _parse_function_def(self) -> Stmt:
        # fn name(params) { ... }  |  fn Class > method(params) { ... }
        start = self._span_start()
        self._advance()  # 'fn'
        first = self._expect(TokenKind.IDENT, "function or class name")

        method_tok: Optional[Token] = None
        if self._match(TokenKind.GT):
            method_tok = self._expect(TokenKind.IDENT, "method name")

        params: List[str] = []
        if self._check(TokenKind.LPAREN):
            params = self._parse_params()

        body = self._parse_block()

        if method_tok is not None:
            return MethodDef(first.text, method_tok.text, params, body, span=self._extend_span(start))
        return FunctionDef(first.text, params, body, span=self._extend_span(start))

    def _parse_params(self) -> List[str]:
        self._expect(TokenKind.LPAREN, "'('")
        params: List[str] = []
        self._skip_newlines()
        if self._match(TokenKind.RPAREN):
            return params

        expected = "')' or parameter name"
        while True:
            self._skip_newlines()
            name_tok = self._expect(TokenKind.IDENT, expected)
            params.append(name_tok.text)
            self._skip_newlines()
            if self._match(TokenKind.COMMA):
                # a trailing comma before ')' is allowed
                self._skip_newlines()
                if self._match(TokenKind.RPAREN):
                    return params
                expected = "parameter name"
                continue
            self._expect(TokenKind.RPAREN, "',' or ')'")
            return params

    def _parse_block(self) -> List[Stmt]:
        self._skip_newlines()
        self._expect(TokenKind.LBRACE, "'{'")
        body: List[Stmt] = []
        self._skip_newlines()
        while not self._check(TokenKind.RBRACE):
            if self._at_end():
                raise UnexpectedEof("'}'", self._peek(), self.filename)
            body.append(self._parse_statement())
            self._skip_newlines()
        self._expect(TokenKind.RBRACE, "'}'")
        return body

    def _parse_if_stmt(self) -> IfStmt:
        start = self._span_start()
        self._advance()  # 'if'
        condition = self._parse_expression()
        then_branch = self._parse_block()

        elif_branches: List[Tuple[Expr, List[Stmt]]] = []
        while self._check_past_newlines(TokenKind.ELIF):
            self._skip_newlines()
            self._advance()  # 'elif'
            elif_condition = self._parse_expression()
            elif_branches.append((elif_condition, self._parse_block()))

        else_branch: Optional[List[Stmt]] = None
        if self._check_past_newlines(TokenKind.ELSE):
            self._skip_newlines()
            self._advance()  # 'else'
            else_branch = self._parse_block()

        return IfStmt(condition, then_branch, elif_branches, else_branch, span=self._extend_span(start))

    def _parse_while_stmt(self) -> WhileStmt:
        start = self._span_start()
        self._advance()  # 'while'
        condition = self._parse_expression()
        body = self._parse_block()
        return WhileStmt(condition, body, span=self._extend_span(start))

    def _parse_assignment(self) -> Assignment:
        start = self._span_start()
        name_tok = self._advance()
        self._advance()  # '='
        value = self._parse_expression()
        return Assignment(name_tok.text, value, span=self._extend_span(start))

    def _parse_field_assignment(self) -> Assignment:
        # self . field = value
        start = self._span_start()
        self._advance()  # 'self'
        self._advance()  # '.'
        field_tok = self._advance()
        self._advance()  # '='
        value = self._parse_expression()
        return Assignment(f"self.{field_tok.text}", value, span=self._extend_span(start))

    # --- expressions ---

    def parse_expression(self) -> Expr:
        """Parse a single expression starting at the current token."""
        return self._parse_expression()

    def _parse_expression(self, min_precedence: int = 0) -> Expr:
        # precedence climbing; newline, ',' and ')' are not operators and end the loop
        start = self._span_start()
        left = self._parse_postfix_expr()
        while True:
            op = BINARY_OPERATORS.get(self._peek().kind)
            if op is None or op.precedence < min_precedence:
                break
            self._advance()
            right = self._parse_expression(op.precedence + 1)
            left = BinaryOp(left, op, right, span=self._extend_span(start))
        return left

    def _parse_postfix_expr(self) -> Expr:
        start = self._span_start()
        expr = self._parse_primary_expr()
        while self._match(TokenKind.DOT):
            name_tok = self._expect(TokenKind.IDENT, "field or method name")
            args: List[Expr] = []
            if self._check(TokenKind.LPAREN):
                args = self._parse_call_args()
            expr = MethodCall(expr, name_tok.text, args, span=self._extend_span(start))
        return expr

    def _parse_call_args(self) -> List[Expr]:
        self._advance()  # '('
        args: List[Expr] = []
        if self._match(TokenKind.RPAREN):
            return args
        while True:
            args.append(self._parse_expression())
            if self._match(TokenKind.COMMA):
                continue
            self._expect(TokenKind.RPAREN, "',' or ')'")
            return args

    def _parse_primary_expr(self) -> Expr:
        start = self._span_start()
        tok = self._peek()

        if tok.kind is TokenKind.INT:
            self._advance()
            return IntLiteral(int(tok.text), span=self._extend_span(start))

        if tok.kind is TokenKind.FLOAT:
            self._advance()
            return FloatLiteral(float(tok.text), span=self._extend_span(start))

        if tok.kind is TokenKind.STRING:
            self._advance()
            return StringLiteral(tok.text, span=self._extend_span(start))

        if tok.kind is TokenKind.SELF:
            self._advance()
            return Identifier("self", span=self._extend_span(start))

        if tok.kind is TokenKind.IDENT:
            self._advance()
            if self._check(TokenKind.LPAREN):
                args = self._parse_call_args()
                return FunctionCall(tok.text, args, span=self._extend_span(start))
            return Identifier(tok.text, span=self._extend_span(start))

        if tok.kind is TokenKind.LPAREN:
            self._advance()
            inner = self._parse_expression()
            self._expect(TokenKind.RPAREN, "')'")
            return Grouped(inner, span=self._extend_span(start))

        if tok.kind is TokenKind.EOF:
            raise UnexpectedEof("expression", tok, self.filename)

        raise InvalidExpression(tok, self.filename)
