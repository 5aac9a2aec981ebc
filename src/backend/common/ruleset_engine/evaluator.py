from __future__ import annotations

import math
from typing import Any, Optional

from .context import ExecutionContext, resolve, traverse
from .errors import EvalError, EvalErrorKind
from .functions import FunctionRegistry, default_registry
from .methods import invoke_method
from .nodes import BinaryOp, Call, Expression, Literal, MethodCall, Path, Subscript, UnaryOp
from .values import ValueKind, kind_of, to_display_string, values_equal

_RELATIONAL = {
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
}
_ARITHMETIC = {"+", "-", "*", "/", "%"}


class Evaluator:
    """Walks an expression tree against an ExecutionContext.

    Unresolved paths evaluate to null. Dereferencing a null (method call,
    relational/arithmetic/logical operand) raises NULL_PROPERTY_ACCESS so the
    executor can decide whether to suppress it.
    """

    def __init__(self, registry: Optional[FunctionRegistry] = None):
        self.registry = registry or default_registry

    def evaluate(self, expr: Expression, context: ExecutionContext) -> Any:
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, Path):
            return resolve(context, expr)
        if isinstance(expr, Subscript):
            return traverse(self.evaluate(expr.receiver, context), expr.segments)
        if isinstance(expr, BinaryOp):
            return self._binary(expr, context)
        if isinstance(expr, UnaryOp):
            return self._unary(expr, context)
        if isinstance(expr, Call):
            return self._call(expr, context)
        if isinstance(expr, MethodCall):
            receiver = self.evaluate(expr.receiver, context)
            if receiver is None:
                raise EvalError.null_property_access(f"{expr.method}()")
            args = [self.evaluate(arg, context) for arg in expr.arguments]
            return invoke_method(receiver, expr.method, args)
        raise TypeError(f"Unknown expression node: {type(expr).__name__}")

    def evaluate_condition(self, expr: Expression, context: ExecutionContext) -> bool:
        value = self.evaluate(expr, context)
        if value is None:
            raise EvalError.null_property_access("condition")
        if not isinstance(value, bool):
            raise EvalError.type_mismatch(f"Condition must evaluate to boolean, got {kind_of(value).value}")
        return value

    def _boolean_operand(self, op: str, expr: Expression, context: ExecutionContext) -> bool:
        value = self.evaluate(expr, context)
        if value is None:
            raise EvalError.null_property_access(op)
        if not isinstance(value, bool):
            raise EvalError.type_mismatch(f"{op} requires boolean operands, got {kind_of(value).value}")
        return value

    def _binary(self, expr: BinaryOp, context: ExecutionContext) -> Any:
        op = expr.operator
        if op == "AND":
            return self._boolean_operand(op, expr.left, context) and self._boolean_operand(op, expr.right, context)
        if op == "OR":
            return self._boolean_operand(op, expr.left, context) or self._boolean_operand(op, expr.right, context)

        left = self.evaluate(expr.left, context)
        right = self.evaluate(expr.right, context)
        if op == "==":
            return values_equal(left, right)
        if op == "!=":
            return not values_equal(left, right)
        if left is None or right is None:
            raise EvalError.null_property_access(op)

        left_kind = kind_of(left)
        right_kind = kind_of(right)
        if op in _RELATIONAL:
            if left_kind is right_kind and left_kind in (ValueKind.NUMBER, ValueKind.STRING):
                return _RELATIONAL[op](left, right)
            raise EvalError.type_mismatch(f"Cannot compare {left_kind.value} {op} {right_kind.value}")
        if op in _ARITHMETIC:
            return _arithmetic(op, left, right, left_kind, right_kind)
        raise EvalError.type_mismatch(f"Unsupported operator '{op}'")

    def _unary(self, expr: UnaryOp, context: ExecutionContext) -> Any:
        if expr.operator == "NOT":
            return not self._boolean_operand("NOT", expr.operand, context)
        value = self.evaluate(expr.operand, context)
        if value is None:
            raise EvalError.null_property_access(expr.operator)
        if kind_of(value) is not ValueKind.NUMBER:
            raise EvalError.type_mismatch(f"Unary '{expr.operator}' requires a number, got {kind_of(value).value}")
        return -value

    def _call(self, expr: Call, context: ExecutionContext) -> Any:
        fn = self.registry.lookup(expr.name)
        if fn is None:
            raise EvalError(EvalErrorKind.UNKNOWN_FUNCTION, f"Unknown function '{expr.name}'")
        args = [self.evaluate(arg, context) for arg in expr.arguments]
        return fn(args)


def _arithmetic(op: str, left: Any, right: Any, left_kind: ValueKind, right_kind: ValueKind) -> Any:
    if op == "+" and ValueKind.STRING in (left_kind, right_kind):
        return to_display_string(left) + to_display_string(right)
    if left_kind is not ValueKind.NUMBER or right_kind is not ValueKind.NUMBER:
        raise EvalError.type_mismatch(f"Cannot apply '{op}' to {left_kind.value} and {right_kind.value}")
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if right == 0:
        raise EvalError(EvalErrorKind.DIVISION_BY_ZERO, f"Division by zero in '{op}'")
    if isinstance(left, int) and isinstance(right, int):
        # Integer operands truncate toward zero; the remainder takes the sign of the dividend.
        quotient = abs(left) // abs(right)
        if (left < 0) != (right < 0):
            quotient = -quotient
        return quotient if op == "/" else left - right * quotient
    if op == "%":
        return math.fmod(left, right)
    return left / right


default_evaluator = Evaluator()


def evaluate(expr: Expression, context: ExecutionContext) -> Any:
    return default_evaluator.evaluate(expr, context)
