from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List

from .errors import ParseError


class TokenType(str, Enum):
    NUMBER = "NUMBER"
    STRING = "STRING"
    IDENT = "IDENT"
    TRUE = "TRUE"
    FALSE = "FALSE"
    NULL = "NULL"
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    EQ = "=="
    NE = "!="
    GE = ">="
    LE = "<="
    GT = ">"
    LT = "<"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    PERCENT = "%"
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    COMMA = ","
    DOT = "."
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    type: TokenType
    text: str
    position: int
    value: Any = None


_KEYWORDS = {
    "and": TokenType.AND,
    "or": TokenType.OR,
    "not": TokenType.NOT,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "null": TokenType.NULL,
}

# Longest operators first so ">=" wins over ">".
_OPERATORS = [
    ("&&", TokenType.AND),
    ("||", TokenType.OR),
    ("==", TokenType.EQ),
    ("!=", TokenType.NE),
    (">=", TokenType.GE),
    ("<=", TokenType.LE),
    (">", TokenType.GT),
    ("<", TokenType.LT),
    ("!", TokenType.NOT),
    ("+", TokenType.PLUS),
    ("-", TokenType.MINUS),
    ("*", TokenType.STAR),
    ("/", TokenType.SLASH),
    ("%", TokenType.PERCENT),
    ("(", TokenType.LPAREN),
    (")", TokenType.RPAREN),
    ("[", TokenType.LBRACKET),
    ("]", TokenType.RBRACKET),
    (",", TokenType.COMMA),
    (".", TokenType.DOT),
]

_ESCAPES = {'"': '"', "'": "'", "\\": "\\", "n": "\n", "t": "\t", "r": "\r"}


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_ident_part(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


class Lexer:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def tokens(self) -> List[Token]:
        out: List[Token] = []
        while True:
            token = self._next()
            out.append(token)
            if token.type is TokenType.EOF:
                return out

    def _next(self) -> Token:
        text = self.text
        while self.pos < len(text) and text[self.pos].isspace():
            self.pos += 1
        if self.pos >= len(text):
            return Token(TokenType.EOF, "", self.pos)

        ch = text[self.pos]
        if _is_digit(ch):
            return self._number()
        if ch in ('"', "'"):
            return self._string(ch)
        if _is_ident_start(ch):
            return self._identifier()
        for symbol, token_type in _OPERATORS:
            if text.startswith(symbol, self.pos):
                start = self.pos
                self.pos += len(symbol)
                return Token(token_type, symbol, start)
        raise ParseError(self.pos, f"Unknown operator token '{ch}'", text)

    def _number(self) -> Token:
        text = self.text
        start = self.pos
        while self.pos < len(text) and _is_digit(text[self.pos]):
            self.pos += 1
        is_float = False
        # A dot only belongs to the literal when a digit follows; "1.toString()" stays a method call.
        if self.pos + 1 < len(text) and text[self.pos] == "." and _is_digit(text[self.pos + 1]):
            is_float = True
            self.pos += 1
            while self.pos < len(text) and _is_digit(text[self.pos]):
                self.pos += 1
        if self.pos < len(text) and text[self.pos] in "eE":
            exp_end = self.pos + 1
            if exp_end < len(text) and text[exp_end] in "+-":
                exp_end += 1
            if exp_end < len(text) and _is_digit(text[exp_end]):
                is_float = True
                self.pos = exp_end
                while self.pos < len(text) and _is_digit(text[self.pos]):
                    self.pos += 1
        if self.pos < len(text) and (
            _is_ident_part(text[self.pos])
            or (text[self.pos] == "." and self.pos + 1 < len(text) and _is_digit(text[self.pos + 1]))
        ):
            raise ParseError(start, f"Invalid numeric literal '{text[start:self.pos + 1]}'", text)
        raw = text[start:self.pos]
        value = float(raw) if is_float else int(raw)
        return Token(TokenType.NUMBER, raw, start, value)

    def _string(self, quote: str) -> Token:
        text = self.text
        start = self.pos
        self.pos += 1
        chars: List[str] = []
        while self.pos < len(text):
            ch = text[self.pos]
            if ch == "\\":
                if self.pos + 1 >= len(text):
                    break
                escaped = text[self.pos + 1]
                if escaped not in _ESCAPES:
                    raise ParseError(self.pos, f"Invalid escape sequence '\\{escaped}'", text)
                chars.append(_ESCAPES[escaped])
                self.pos += 2
                continue
            if ch == quote:
                self.pos += 1
                return Token(TokenType.STRING, text[start:self.pos], start, "".join(chars))
            chars.append(ch)
            self.pos += 1
        raise ParseError(start, "Unterminated string literal", text)

    def _identifier(self) -> Token:
        text = self.text
        start = self.pos
        while self.pos < len(text) and _is_ident_part(text[self.pos]):
            self.pos += 1
        raw = text[start:self.pos]
        token_type = _KEYWORDS.get(raw.lower(), TokenType.IDENT)
        return Token(token_type, raw, start, raw)


def tokenize(text: str) -> List[Token]:
    return Lexer(text).tokens()
