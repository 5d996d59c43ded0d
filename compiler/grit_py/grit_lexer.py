#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import Enum, auto
from typing import List


# ==========================
# Tokens and lexer
# ==========================

class TokenKind(Enum):
    # Special
    EOF = auto()

    IDENT = auto()  # identifier, e.g. x, total, Point
    INT = auto()  # integer literal, e.g. 42
    FLOAT = auto()  # float literal, e.g. 3.14
    STRING = auto()  # string literal, e.g. 'hello', text holds the decoded value

    # Keywords
    FN = auto()
    IF = auto()
    ELIF = auto()
    ELSE = auto()
    WHILE = auto()
    CLASS = auto()
    SELF = auto()

    # Punctuation / operators
    LBRACE = auto()  # {
    RBRACE = auto()  # }
    LPAREN = auto()  # (
    RPAREN = auto()  # )
    COMMA = auto()  # ,
    DOT = auto()  # .
    NEWLINE = auto()  # \n
    EQ = auto()  # =
    PLUS = auto()  # +
    MINUS = auto()  # -
    STAR = auto()  # *
    SLASH = auto()  # /
    LT = auto()  # <
    GT = auto()  # >
    LE = auto()  # <=
    GE = auto()  # >=
    EQEQ = auto()  # ==
    NE = auto()  # !=


KEYWORDS = {
    "fn": TokenKind.FN,
    "if": TokenKind.IF,
    "elif": TokenKind.ELIF,
    "else": TokenKind.ELSE,
    "while": TokenKind.WHILE,
    "class": TokenKind.CLASS,
    "self": TokenKind.SELF,
}

SINGLE_CHAR_TOKENS = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    "\n": TokenKind.NEWLINE,
}

# Escapes decoded inside string literals; anything else after '\' is kept verbatim
STRING_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    "'": "'",
}

I64_MAX = 2 ** 63 - 1


def is_ascii_digit(c: str) -> bool:
    # ASCII only: int() and float() reject digits such as "²"
    return "0" <= c <= "9"


@dataclass
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"{self.text!r}" if self.kind != TokenKind.EOF else "end-of-file"


@dataclass
class LexerError(Exception):
    message: str
    filename: str
    line: int
    column: int
    char: str = ""

    def __str__(self) -> str:
        return self.message


class Lexer:
    def __init__(self, source: str, filename: str = "<input>") -> None:
        self.source = source
        self.filename = filename
        self.length = len(source)
        self.index = 0
        self.line = 1
        self.column = 1

    @classmethod
    def from_source(cls, source: str) -> "Lexer":
        return cls(source)

    # --- low-level char utilities ---

    def _at_end(self) -> bool:
        return self.index >= self.length

    def _peek(self) -> str:
        if self._at_end():
            return "\0"
        return self.source[self.index]

    def _peek_next(self) -> str:
        if self.index + 1 >= self.length:
            return "\0"
        return self.source[self.index + 1]

    def _advance(self) -> str:
        c = self._peek()
        if not self._at_end():
            self.index += 1
            if c == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return c

    # --- main API ---

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.kind is TokenKind.EOF:
                break
        return tokens

    def next_token(self) -> Token:
        """
        Scan and return the next token.

        Once the input is exhausted every call returns a fresh EOF token
        positioned at the end of input.
        """
        self._skip_ws()
        start_line, start_col = self.line, self.column

        if self._at_end():
            return Token(TokenKind.EOF, "", start_line, start_col)

        c = self._advance()

        # identifiers / keywords
        if c.isalpha() or c == "_":
            ident = [c]
            while self._peek().isalnum() or self._peek() == "_":
                ident.append(self._advance())
            text = "".join(ident)
            return Token(KEYWORDS.get(text, TokenKind.IDENT), text, start_line, start_col)

        # numbers: integer, or float when '.' is followed by a digit
        if is_ascii_digit(c):
            return self._read_number(c, start_line, start_col)

        # strings
        if c == "'":
            text = self._read_string_literal()
            return Token(TokenKind.STRING, text, start_line, start_col)

        # punctuation / operators with lookahead

        if c == "=":
            if self._peek() == "=":
                self._advance()
                return Token(TokenKind.EQEQ, "==", start_line, start_col)
            return Token(TokenKind.EQ, c, start_line, start_col)

        if c == "!":
            if self._peek() == "=":
                self._advance()
                return Token(TokenKind.NE, "!=", start_line, start_col)
            self._unexpected_char(c, start_line, start_col)

        if c == "<":
            if self._peek() == "=":
                self._advance()
                return Token(TokenKind.LE, "<=", start_line, start_col)
            return Token(TokenKind.LT, c, start_line, start_col)

        if c == ">":
            if self._peek() == "=":
                self._advance()
                return Token(TokenKind.GE, ">=", start_line, start_col)
            return Token(TokenKind.GT, c, start_line, start_col)

        kind = SINGLE_CHAR_TOKENS.get(c)
        if kind is not None:
            return Token(kind, c, start_line, start_col)

        self._unexpected_char(c, start_line, start_col)

    def _unexpected_char(self, c: str, line: int, column: int):
        raise LexerError(f"[LEX-0040] unexpected character {c!r} at {line}:{column}", self.filename, line, column, c)

    def _read_number(self, c: str, start_line: int, start_col: int) -> Token:
        digits = [c]
        while is_ascii_digit(self._peek()):
            digits.append(self._advance())

        # only consume '.' when a digit follows, so `42.foo` stays INT DOT IDENT
        if self._peek() == "." and is_ascii_digit(self._peek_next()):
            digits.append(self._advance())
            while is_ascii_digit(self._peek()):
                digits.append(self._advance())
            return Token(TokenKind.FLOAT, "".join(digits), start_line, start_col)

        text = "".join(digits)
        if int(text) > I64_MAX:
            raise LexerError(f"[LEX-0060] integer literal '{text}' exceeds 64-bit signed range",
                             self.filename, start_line, start_col)
        return Token(TokenKind.INT, text, start_line, start_col)

    def _read_string_literal(self) -> str:
        chars: List[str] = []
        while not self._at_end():
            ch = self._advance()
            if ch == "'":
                break
            if ch == "\\" and not self._at_end():
                esc = self._advance()
                decoded = STRING_ESCAPES.get(esc)
                if decoded is None:
                    chars.append("\\")
                    chars.append(esc)
                else:
                    chars.append(decoded)
                continue
            chars.append(ch)
        # an unterminated literal simply ends at end of input
        return "".join(chars)

    def _skip_ws(self) -> None:
        while self._peek() in (" ", "\t", "\r") and not self._at_end():
            self._advance()
