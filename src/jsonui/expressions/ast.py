"""Expression syntax tree."""

from dataclasses import dataclass
from enum import Enum

from ..value import Value


class BinaryOp(str, Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    EQ = "=="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    AND = "&&"
    OR = "||"
    COALESCE = "??"


class UnaryOp(str, Enum):
    NOT = "!"
    NEG = "-"


@dataclass(frozen=True)
class Literal:
    value: Value


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class Member:
    target: "Expr"
    name: str


@dataclass(frozen=True)
class Index:
    target: "Expr"
    index: "Expr"


@dataclass(frozen=True)
class MethodCall:
    target: "Expr"
    method: str
    args: tuple["Expr", ...]


@dataclass(frozen=True)
class Unary:
    op: UnaryOp
    operand: "Expr"


@dataclass(frozen=True)
class Binary:
    op: BinaryOp
    left: "Expr"
    right: "Expr"


@dataclass(frozen=True)
class Conditional:
    condition: "Expr"
    then_expr: "Expr"
    else_expr: "Expr"


Expr = Literal | Identifier | Member | Index | MethodCall | Unary | Binary | Conditional
