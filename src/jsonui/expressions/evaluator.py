"""
Tree-walking evaluator for binding expressions.

Expressions read state through a `Scope`; they never write. Missing
values flow through as Null. Type errors (e.g. `"a" * 2`) raise
`ExpressionEvalError`, which the binding layer turns into Null.
"""

from collections.abc import Callable, Mapping
from typing import Protocol

from ..value import FALSE, NULL, TRUE, Value, ValueKind
from .ast import (
    Binary,
    BinaryOp,
    Conditional,
    Expr,
    Identifier,
    Index,
    Literal,
    Member,
    MethodCall,
    Unary,
    UnaryOp,
)


class ExpressionEvalError(Exception):
    """Error during expression evaluation."""

    pass


class Scope(Protocol):
    """Name resolution for the first segment of a path."""

    def lookup(self, name: str) -> Value:
        ...


class MappingScope:
    """Scope backed by a plain mapping (tests, iteration variables)."""

    def __init__(self, values: Mapping[str, object], parent: Scope | None = None) -> None:
        self.values = {k: Value.of(v) for k, v in values.items()}
        self.parent = parent

    def lookup(self, name: str) -> Value:
        if name in self.values:
            return self.values[name]
        return self.parent.lookup(name) if self.parent is not None else NULL


def evaluate(expr: Expr, scope: Scope) -> Value:
    """
    Evaluate an expression AST against a scope.

    Raises:
        ExpressionEvalError: On type errors or division by zero
    """
    try:
        return _evaluate(expr, scope)
    except RecursionError as e:
        raise ExpressionEvalError("Expression is nested too deeply") from e
    except OverflowError as e:
        raise ExpressionEvalError(str(e)) from e


def _evaluate(expr: Expr, scope: Scope) -> Value:
    if isinstance(expr, Literal):
        return expr.value
    if isinstance(expr, Identifier):
        return scope.lookup(expr.name)
    if isinstance(expr, Member):
        return _member(_evaluate(expr.target, scope), expr.name)
    if isinstance(expr, Index):
        return _index(_evaluate(expr.target, scope), _evaluate(expr.index, scope))
    if isinstance(expr, MethodCall):
        target = _evaluate(expr.target, scope)
        args = [_evaluate(arg, scope) for arg in expr.args]
        return _call(target, expr.method, args)
    if isinstance(expr, Unary):
        return _unary(expr.op, _evaluate(expr.operand, scope))
    if isinstance(expr, Binary):
        return _binary(expr, scope)
    if isinstance(expr, Conditional):
        branch = expr.then_expr if _evaluate(expr.condition, scope).truthy else expr.else_expr
        return _evaluate(branch, scope)
    raise ExpressionEvalError(f"Unknown expression node: {type(expr).__name__}")


# ----------------------------------------------------------------------
# Paths
# ----------------------------------------------------------------------


def _member(target: Value, name: str) -> Value:
    if target.kind is ValueKind.OBJECT and name in target.raw:
        return target.raw[name]

    sized = target.kind in (ValueKind.ARRAY, ValueKind.STRING, ValueKind.OBJECT)
    if name == "count" and sized:
        return Value.of(len(target.raw))
    if name == "isEmpty":
        return Value.of(not sized or len(target.raw) == 0)
    if name in ("first", "last") and target.kind is ValueKind.ARRAY:
        return target.at(0 if name == "first" else -1)
    return NULL


def _index(target: Value, index: Value) -> Value:
    if target.kind is ValueKind.ARRAY:
        position = index.as_int()
        return target.at(position) if position is not None else NULL
    if target.kind is ValueKind.OBJECT:
        key = index.as_str()
        if key is None and index.is_number:
            key = index.stringify()
        return target.get(key) if key is not None else NULL
    if target.kind is ValueKind.STRING:
        position = index.as_int()
        if position is not None and -len(target.raw) <= position < len(target.raw):
            return Value.of(target.raw[position])
    return NULL


def _call(target: Value, method: str, args: list[Value]) -> Value:
    if method == "contains":
        if len(args) != 1:
            raise ExpressionEvalError("contains() takes exactly one argument")
        needle = args[0]
        if target.kind is ValueKind.ARRAY:
            return Value.of(any(_equals(item, needle) for item in target.raw))
        if target.kind is ValueKind.STRING:
            return Value.of(needle.stringify() in target.raw)
        return FALSE
    if method in _STRING_METHODS:
        if args:
            raise ExpressionEvalError(f"{method}() takes no arguments")
        text = target.as_str()
        return Value.of(_STRING_METHODS[method](text)) if text is not None else NULL
    raise ExpressionEvalError(f"Unknown method: {method}()")


_STRING_METHODS: dict[str, Callable[[str], str]] = {
    "uppercased": str.upper,
    "lowercased": str.lower,
    "trimmed": str.strip,
}


# ----------------------------------------------------------------------
# Operators
# ----------------------------------------------------------------------


def _unary(op: UnaryOp, operand: Value) -> Value:
    if op == UnaryOp.NOT:
        return FALSE if operand.truthy else TRUE
    if operand.is_null:
        return NULL
    if not operand.is_number:
        raise ExpressionEvalError(f"Cannot negate a {operand.kind.value}")
    return Value.of(-operand.raw)


def _binary(expr: Binary, scope: Scope) -> Value:
    op = expr.op

    # Short-circuit operators evaluate the right side lazily
    if op == BinaryOp.AND:
        return TRUE if _evaluate(expr.left, scope).truthy and _evaluate(expr.right, scope).truthy else FALSE
    if op == BinaryOp.OR:
        return TRUE if _evaluate(expr.left, scope).truthy or _evaluate(expr.right, scope).truthy else FALSE
    if op == BinaryOp.COALESCE:
        left = _evaluate(expr.left, scope)
        return left if not left.is_null else _evaluate(expr.right, scope)

    left = _evaluate(expr.left, scope)
    right = _evaluate(expr.right, scope)

    if op == BinaryOp.EQ:
        return Value.of(_equals(left, right))
    if op == BinaryOp.NE:
        return Value.of(not _equals(left, right))
    if op in (BinaryOp.LT, BinaryOp.GT, BinaryOp.LE, BinaryOp.GE):
        return Value.of(_compare(op, left, right))
    if op == BinaryOp.ADD and (left.kind is ValueKind.STRING or right.kind is ValueKind.STRING):
        return Value.of(left.stringify() + right.stringify())
    return _arithmetic(op, left, right)


def _equals(left: Value, right: Value) -> bool:
    if left.is_number and right.is_number:
        return left.raw == right.raw
    return left == right


def _compare(op: BinaryOp, left: Value, right: Value) -> bool:
    if left.is_number and right.is_number:
        a, b = left.raw, right.raw
    elif left.kind is ValueKind.STRING and right.kind is ValueKind.STRING:
        a, b = left.raw, right.raw
    else:
        raise ExpressionEvalError(f"Cannot compare {left.kind.value} with {right.kind.value}")
    if op == BinaryOp.LT:
        return a < b
    if op == BinaryOp.GT:
        return a > b
    if op == BinaryOp.LE:
        return a <= b
    return a >= b


def _number(value: Value, op: BinaryOp) -> int | float:
    # Unset state reads as zero in arithmetic so `${count} + 1` works before init
    if value.is_null:
        return 0
    if not value.is_number:
        raise ExpressionEvalError(f"Operator {op.value} needs numbers, got {value.kind.value}")
    return value.raw


def _arithmetic(op: BinaryOp, left: Value, right: Value) -> Value:
    a = _number(left, op)
    b = _number(right, op)

    if op == BinaryOp.ADD:
        return Value.of(a + b)
    if op == BinaryOp.SUB:
        return Value.of(a - b)
    if op == BinaryOp.MUL:
        return Value.of(a * b)
    if b == 0:
        raise ExpressionEvalError("Division by zero")
    if op == BinaryOp.DIV:
        if isinstance(a, int) and isinstance(b, int) and a % b == 0:
            return Value.of(a // b)
        return Value.of(a / b)
    if op == BinaryOp.MOD:
        return Value.of(a % b)
    raise ExpressionEvalError(f"Unsupported operator: {op.value}")
