"""Immutable AST nodes of the expression language."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator


class BinaryOp(StrEnum):
    """Binary operators."""

    AND = "and"
    OR = "or"
    EQ = "="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


class UnaryOp(StrEnum):
    """Unary operators."""

    NOT = "not"
    NEG = "-"


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Name:
    """Bare variable such as ``age``, ``computed`` or ``item``."""

    name: str


@dataclass(frozen=True)
class Member:
    """``target.name`` lookup."""

    target: Expr
    name: str


@dataclass(frozen=True)
class Index:
    """``target[index]`` lookup (1-based on lists, key on mappings)."""

    target: Expr
    index: Expr


@dataclass(frozen=True)
class ListExpr:
    items: tuple[Expr, ...]


@dataclass(frozen=True)
class UnaryExpr:
    op: UnaryOp
    operand: Expr


@dataclass(frozen=True)
class BinaryExpr:
    op: BinaryOp
    left: Expr
    right: Expr


@dataclass(frozen=True)
class InExpr:
    """Membership (``x in [..]``) or containment (``"a" in text``)."""

    value: Expr
    container: Expr
    negated: bool = False


@dataclass(frozen=True)
class FuncCall:
    name: str
    args: tuple[Expr, ...]


@dataclass(frozen=True)
class IfExpr:
    condition: Expr
    then_expr: Expr
    else_expr: Expr


Expr = Literal | Name | Member | Index | ListExpr | UnaryExpr | BinaryExpr | InExpr | FuncCall | IfExpr


def iter_nodes(expr: Expr) -> Iterator[Expr]:
    """Yield every node of an expression tree, depth first."""
    yield expr
    if isinstance(expr, Member):
        yield from iter_nodes(expr.target)
    elif isinstance(expr, Index):
        yield from iter_nodes(expr.target)
        yield from iter_nodes(expr.index)
    elif isinstance(expr, (ListExpr, FuncCall)):
        children = expr.items if isinstance(expr, ListExpr) else expr.args
        for child in children:
            yield from iter_nodes(child)
    elif isinstance(expr, UnaryExpr):
        yield from iter_nodes(expr.operand)
    elif isinstance(expr, BinaryExpr):
        yield from iter_nodes(expr.left)
        yield from iter_nodes(expr.right)
    elif isinstance(expr, InExpr):
        yield from iter_nodes(expr.value)
        yield from iter_nodes(expr.container)
    elif isinstance(expr, IfExpr):
        yield from iter_nodes(expr.condition)
        yield from iter_nodes(expr.then_expr)
        yield from iter_nodes(expr.else_expr)


def computed_references(expr: Expr) -> set[str]:
    """Return the names read through ``computed.<name>`` in an expression."""
    return {
        node.name
        for node in iter_nodes(expr)
        if isinstance(node, Member) and isinstance(node.target, Name) and node.target.name == "computed"
    }
