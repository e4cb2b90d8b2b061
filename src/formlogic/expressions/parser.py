"""Recursive descent parser for the form expression language.

Grammar (precedence low to high):
    expr        → "if" expr "then" expr "else" expr | or_expr
    or_expr     → and_expr ("or" and_expr)*
    and_expr    → not_expr ("and" not_expr)*
    not_expr    → "not" not_expr | comparison
    comparison  → addition (comp_op addition | "not"? "in" addition)?
    addition    → multiply (("+"|"-") multiply)*
    multiply    → unary (("*"|"/") unary)*
    unary       → "-" unary | postfix
    postfix     → primary ("." IDENT | "[" expr "]")*
    primary     → literal | func_call | IDENT | "(" expr ")" | list_literal
    literal     → INT | FLOAT | STRING | "true" | "false" | "null"
    func_call   → IDENT "(" (expr ("," expr)*)? ")"
    list_literal → "[" (expr ("," expr)*)? "]"
"""

from __future__ import annotations

from functools import lru_cache

from formlogic.exceptions import ExpressionError
from formlogic.expressions.ast import (
    BinaryExpr,
    BinaryOp,
    Expr,
    FuncCall,
    IfExpr,
    Index,
    InExpr,
    ListExpr,
    Literal,
    Member,
    Name,
    UnaryExpr,
    UnaryOp,
)
from formlogic.expressions.tokenizer import Token, TokenKind, tokenize

_COMPARISON_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.EQ: BinaryOp.EQ,
    TokenKind.NE: BinaryOp.NE,
    TokenKind.LT: BinaryOp.LT,
    TokenKind.GT: BinaryOp.GT,
    TokenKind.LE: BinaryOp.LE,
    TokenKind.GE: BinaryOp.GE,
}

# Keywords that are also accepted as member names (``item.in``, ``ref.null``).
_KEYWORD_MEMBER_KINDS = frozenset(
    {
        TokenKind.TRUE,
        TokenKind.FALSE,
        TokenKind.NULL,
        TokenKind.AND,
        TokenKind.OR,
        TokenKind.NOT,
        TokenKind.IN,
        TokenKind.IF,
        TokenKind.THEN,
        TokenKind.ELSE,
    },
)


class _Parser:
    """Recursive descent parser for expressions."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def expect(self, kind: TokenKind) -> Token:
        tok = self.current
        if tok.kind != kind:
            raise ExpressionError(f"Expected {kind}, got {tok.kind} ({tok.value!r})", tok.pos)
        return self.advance()

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.current.kind in kinds:
            return self.advance()
        return None

    # -- Grammar rules --

    def parse_expr(self) -> Expr:
        if self.match(TokenKind.IF):
            condition = self.parse_expr()
            self.expect(TokenKind.THEN)
            then_expr = self.parse_expr()
            self.expect(TokenKind.ELSE)
            else_expr = self.parse_expr()
            return IfExpr(condition=condition, then_expr=then_expr, else_expr=else_expr)
        return self.parse_or_expr()

    def parse_or_expr(self) -> Expr:
        left = self.parse_and_expr()
        while self.match(TokenKind.OR):
            left = BinaryExpr(op=BinaryOp.OR, left=left, right=self.parse_and_expr())
        return left

    def parse_and_expr(self) -> Expr:
        left = self.parse_not_expr()
        while self.match(TokenKind.AND):
            left = BinaryExpr(op=BinaryOp.AND, left=left, right=self.parse_not_expr())
        return left

    def parse_not_expr(self) -> Expr:
        if self.match(TokenKind.NOT):
            return UnaryExpr(op=UnaryOp.NOT, operand=self.parse_not_expr())
        return self.parse_comparison()

    def parse_comparison(self) -> Expr:
        left = self.parse_addition()

        if self.match(TokenKind.IN):
            return InExpr(value=left, container=self.parse_addition())
        if self.current.kind == TokenKind.NOT and self.peek(1).kind == TokenKind.IN:
            self.advance()
            self.advance()
            return InExpr(value=left, container=self.parse_addition(), negated=True)

        if self.current.kind in _COMPARISON_OPS:
            op = _COMPARISON_OPS[self.advance().kind]
            return BinaryExpr(op=op, left=left, right=self.parse_addition())

        return left

    def parse_addition(self) -> Expr:
        left = self.parse_multiply()
        while self.current.kind in (TokenKind.PLUS, TokenKind.MINUS):
            op = BinaryOp.ADD if self.advance().kind == TokenKind.PLUS else BinaryOp.SUB
            left = BinaryExpr(op=op, left=left, right=self.parse_multiply())
        return left

    def parse_multiply(self) -> Expr:
        left = self.parse_unary()
        while self.current.kind in (TokenKind.STAR, TokenKind.SLASH):
            op = BinaryOp.MUL if self.advance().kind == TokenKind.STAR else BinaryOp.DIV
            left = BinaryExpr(op=op, left=left, right=self.parse_unary())
        return left

    def parse_unary(self) -> Expr:
        if self.match(TokenKind.MINUS):
            return UnaryExpr(op=UnaryOp.NEG, operand=self.parse_unary())
        return self.parse_postfix()

    def parse_postfix(self) -> Expr:
        expr = self.parse_primary()
        while True:
            if self.match(TokenKind.DOT):
                tok = self.current
                if tok.kind != TokenKind.IDENT and tok.kind not in _KEYWORD_MEMBER_KINDS:
                    raise ExpressionError(f"Expected member name, got {tok.kind} ({tok.value!r})", tok.pos)
                self.advance()
                expr = Member(target=expr, name=tok.value)
            elif self.match(TokenKind.LBRACKET):
                index = self.parse_expr()
                self.expect(TokenKind.RBRACKET)
                expr = Index(target=expr, index=index)
            else:
                return expr

    def parse_primary(self) -> Expr:  # noqa: PLR0911
        tok = self.current

        if tok.kind == TokenKind.LPAREN:
            self.advance()
            expr = self.parse_expr()
            self.expect(TokenKind.RPAREN)
            return expr

        if tok.kind == TokenKind.LBRACKET:
            return ListExpr(items=tuple(self._parse_sequence(TokenKind.LBRACKET, TokenKind.RBRACKET)))

        if tok.kind == TokenKind.INT:
            self.advance()
            return Literal(value=int(tok.value))
        if tok.kind == TokenKind.FLOAT:
            self.advance()
            return Literal(value=float(tok.value))
        if tok.kind == TokenKind.STRING:
            self.advance()
            return Literal(value=tok.value)
        if tok.kind == TokenKind.TRUE:
            self.advance()
            return Literal(value=True)
        if tok.kind == TokenKind.FALSE:
            self.advance()
            return Literal(value=False)
        if tok.kind == TokenKind.NULL:
            self.advance()
            return Literal(value=None)

        if tok.kind == TokenKind.IDENT:
            if self.peek(1).kind == TokenKind.LPAREN:
                self.advance()
                args = self._parse_sequence(TokenKind.LPAREN, TokenKind.RPAREN)
                return FuncCall(name=tok.value, args=tuple(args))
            self.advance()
            return Name(name=tok.value)

        if tok.kind == TokenKind.EOF:
            raise ExpressionError("Unexpected end of expression", tok.pos)
        raise ExpressionError(f"Unexpected token: {tok.kind} ({tok.value!r})", tok.pos)

    def _parse_sequence(self, opening: TokenKind, closing: TokenKind) -> list[Expr]:
        """'(' | '[' (expr (',' expr)*)? ')' | ']'"""
        self.expect(opening)
        items: list[Expr] = []
        if self.current.kind != closing:
            items.append(self.parse_expr())
            while self.match(TokenKind.COMMA):
                items.append(self.parse_expr())
        self.expect(closing)
        return items


@lru_cache(maxsize=1024)
def parse_expression(source: str) -> Expr:
    """Parse an expression string into an AST.

    Parsing is pure and the AST is immutable, so results are memoised per
    source string.

    Args:
        source (str): Expression string, e.g. ``"price * quantity"``.

    Raises:
        ExpressionError: If the expression is empty or malformed.

    Returns:
        Expr: Parsed expression AST.
    """
    if not source.strip():
        raise ExpressionError("Expression is empty", 0)

    parser = _Parser(tokenize(source))
    expr = parser.parse_expr()

    if parser.current.kind != TokenKind.EOF:
        raise ExpressionError(
            f"Unexpected token after expression: {parser.current.value!r}",
            parser.current.pos,
        )
    return expr
