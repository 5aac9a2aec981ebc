"""Recursive-descent parser for rule expressions.

Precedence, lowest first: OR, AND, equality, relational, additive,
multiplicative, unary (NOT, !, -), postfix (method calls, `.key`, `[n]`),
primary. Parsing is purely syntactic and never touches an execution context.
"""

from __future__ import annotations

import functools
from typing import Callable, List, Tuple

from .errors import ParseError
from .lexer import Token, TokenType, tokenize
from .nodes import (
    BinaryOp,
    Call,
    Expression,
    IndexSegment,
    KeySegment,
    Literal,
    MethodCall,
    Path,
    Segment,
    Subscript,
    UnaryOp,
)

_EQUALITY = {TokenType.EQ: "==", TokenType.NE: "!="}
_RELATIONAL = {TokenType.GE: ">=", TokenType.LE: "<=", TokenType.GT: ">", TokenType.LT: "<"}
_ADDITIVE = {TokenType.PLUS: "+", TokenType.MINUS: "-"}
_MULTIPLICATIVE = {TokenType.STAR: "*", TokenType.SLASH: "/", TokenType.PERCENT: "%"}

# Keywords are valid member names after a dot (e.g. `flags.not`).
_NAME_TOKENS = {
    TokenType.IDENT,
    TokenType.AND,
    TokenType.OR,
    TokenType.NOT,
    TokenType.TRUE,
    TokenType.FALSE,
    TokenType.NULL,
}


class Parser:
    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0

    def parse(self) -> Expression:
        if self._peek().type is TokenType.EOF:
            raise ParseError(0, "Empty expression", self.text)
        expr = self._or()
        token = self._peek()
        if token.type is TokenType.RPAREN:
            raise ParseError(token.position, "Unmatched ')'", self.text)
        if token.type is not TokenType.EOF:
            raise ParseError(token.position, f"Unexpected token '{token.text}'", self.text)
        return expr

    # -- token helpers -------------------------------------------------

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        if token.type is not TokenType.EOF:
            self.index += 1
        return token

    def _match(self, token_type: TokenType) -> bool:
        if self._peek().type is token_type:
            self._advance()
            return True
        return False

    def _error(self, token: Token, reason: str) -> ParseError:
        return ParseError(token.position, reason, self.text)

    # -- binary levels -------------------------------------------------

    def _or(self) -> Expression:
        left = self._and()
        while self._match(TokenType.OR):
            left = BinaryOp("OR", left, self._and())
        return left

    def _and(self) -> Expression:
        left = self._equality()
        while self._match(TokenType.AND):
            left = BinaryOp("AND", left, self._equality())
        return left

    def _binary_level(self, operators: dict, operand: Callable[[], Expression]) -> Expression:
        left = operand()
        while self._peek().type in operators:
            op = operators[self._advance().type]
            left = BinaryOp(op, left, operand())
        return left

    def _equality(self) -> Expression:
        return self._binary_level(_EQUALITY, self._relational)

    def _relational(self) -> Expression:
        return self._binary_level(_RELATIONAL, self._additive)

    def _additive(self) -> Expression:
        return self._binary_level(_ADDITIVE, self._multiplicative)

    def _multiplicative(self) -> Expression:
        return self._binary_level(_MULTIPLICATIVE, self._unary)

    def _unary(self) -> Expression:
        if self._match(TokenType.NOT):
            return UnaryOp("NOT", self._unary())
        if self._match(TokenType.MINUS):
            operand = self._unary()
            if isinstance(operand, Literal) and type(operand.value) in (int, float):
                return Literal(-operand.value)
            return UnaryOp("-", operand)
        return self._postfix()

    # -- postfix / primary ---------------------------------------------

    def _postfix(self) -> Expression:
        expr = self._primary()
        while True:
            token = self._peek()
            if token.type is TokenType.DOT:
                self._advance()
                name_token = self._advance()
                if name_token.type not in _NAME_TOKENS:
                    raise self._error(name_token, "Expected property or method name after '.'")
                if self._peek().type is TokenType.LPAREN:
                    lparen = self._advance()
                    expr = MethodCall(expr, name_token.text, self._arguments(lparen))
                else:
                    expr = _extend(expr, KeySegment(name_token.text))
            elif token.type is TokenType.LBRACKET:
                self._advance()
                expr = _extend(expr, IndexSegment(self._index(token)))
            else:
                return expr

    def _index(self, lbracket: Token) -> int:
        token = self._advance()
        if token.type is not TokenType.NUMBER or not isinstance(token.value, int):
            raise self._error(token, "Array index must be a non-negative integer literal")
        if not self._match(TokenType.RBRACKET):
            raise self._error(lbracket, "Unmatched '['")
        return token.value

    def _arguments(self, lparen: Token) -> Tuple[Expression, ...]:
        args: List[Expression] = []
        if self._match(TokenType.RPAREN):
            return ()
        while True:
            if self._peek().type is TokenType.EOF:
                raise self._error(lparen, "Unmatched '('")
            args.append(self._or())
            if self._match(TokenType.COMMA):
                continue
            if self._match(TokenType.RPAREN):
                return tuple(args)
            token = self._peek()
            if token.type is TokenType.EOF:
                raise self._error(lparen, "Unmatched '('")
            raise self._error(token, f"Expected ',' or ')' but found '{token.text}'")

    def _primary(self) -> Expression:
        token = self._advance()
        if token.type in (TokenType.NUMBER, TokenType.STRING):
            return Literal(token.value)
        if token.type is TokenType.TRUE:
            return Literal(True)
        if token.type is TokenType.FALSE:
            return Literal(False)
        if token.type is TokenType.NULL:
            return Literal(None)
        if token.type is TokenType.IDENT:
            if self._peek().type is TokenType.LPAREN:
                lparen = self._advance()
                return Call(token.text, self._arguments(lparen))
            return Path(token.text)
        if token.type is TokenType.LPAREN:
            expr = self._or()
            if not self._match(TokenType.RPAREN):
                raise self._error(token, "Unmatched '('")
            return expr
        if token.type is TokenType.EOF:
            raise self._error(token, "Unexpected end of expression")
        if token.type is TokenType.RPAREN:
            raise self._error(token, "Unmatched ')'")
        raise self._error(token, f"Unexpected token '{token.text}'")


def _extend(expr: Expression, segment: Segment) -> Expression:
    if isinstance(expr, Path):
        return Path(expr.root, expr.segments + (segment,))
    if isinstance(expr, Subscript):
        return Subscript(expr.receiver, expr.segments + (segment,))
    return Subscript(expr, (segment,))


def parse(text: str) -> Expression:
    if text is None:
        raise ParseError(0, "Empty expression", "")
    return Parser(text).parse()


def build_parse_cache(maxsize: int = 512) -> Callable[[str], Expression]:
    """Return a memoised `parse`; safe because parsing is pure and trees are immutable."""
    return functools.lru_cache(maxsize=maxsize)(parse)


parse_cached = build_parse_cache()
