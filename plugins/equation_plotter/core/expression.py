"""Safe arithmetic evaluation of equation right-hand sides."""

from __future__ import annotations

import ast
import math
from functools import lru_cache
from typing import Callable, Mapping

from .errors import EvaluationError

_MAX_EXPR_LENGTH = 1024

Evaluator = Callable[[str, Mapping[str, float]], float]

BUILTIN_CONSTANTS: dict[str, float] = {"pi": math.pi, "e": math.e, "tau": math.tau}


FUNCTIONS: dict[str, Callable[..., float]] = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "sinh": math.sinh,
    "cosh": math.cosh,
    "tanh": math.tanh,
    "log": lambda x, base=math.e: math.log(x, base),
    "ln": lambda x: math.log(x),
    "log10": math.log10,
    "exp": math.exp,
    "sqrt": math.sqrt,
    "abs": abs,
    "min": min,
    "max": max,
}


def normalize_exponents(expression: str) -> str:
    """Interpret caret as exponent."""

    return expression.replace("^", "**")


def _validate_ast(node: ast.AST) -> None:
    if isinstance(node, ast.Expression):
        _validate_ast(node.body)
        return
    if isinstance(node, ast.BinOp):
        if not isinstance(node.op, (ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Mod, ast.Pow)):
            raise EvaluationError("Operator not permitted")
        _validate_ast(node.left)
        _validate_ast(node.right)
        return
    if isinstance(node, ast.UnaryOp):
        if not isinstance(node.op, (ast.UAdd, ast.USub)):
            raise EvaluationError("Unary operator not permitted")
        _validate_ast(node.operand)
        return
    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name):
            raise EvaluationError("Only named functions are permitted")
        if node.keywords:
            raise EvaluationError("Keyword arguments are not supported")
        for arg in node.args:
            _validate_ast(arg)
        return
    if isinstance(node, ast.Name):
        if node.id.startswith("__"):
            raise EvaluationError("Names starting with __ are not allowed")
        return
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise EvaluationError("Only numeric literals are allowed")
        return
    raise EvaluationError("Unsupported syntax")


def _eval_node(
    node: ast.AST,
    context: Mapping[str, float],
    functions: Mapping[str, Callable[..., float]],
) -> float:
    if isinstance(node, ast.Constant):
        value = node.value
    elif isinstance(node, ast.Name):
        if node.id in context:
            value = context[node.id]
        else:
            raise EvaluationError(f"Unknown variable '{node.id}'")
    elif isinstance(node, ast.UnaryOp):
        operand = _eval_node(node.operand, context, functions)
        value = +operand if isinstance(node.op, ast.UAdd) else -operand
    elif isinstance(node, ast.BinOp):
        left = _eval_node(node.left, context, functions)
        right = _eval_node(node.right, context, functions)
        op = node.op
        if isinstance(op, ast.Add):
            value = left + right
        elif isinstance(op, ast.Sub):
            value = left - right
        elif isinstance(op, ast.Mult):
            value = left * right
        elif isinstance(op, ast.Div):
            value = left / right
        elif isinstance(op, ast.Mod):
            value = left % right
        elif isinstance(op, ast.Pow):
            value = left ** right
        else:  # pragma: no cover - guarded by _validate_ast
            raise EvaluationError("Operator not permitted")
    elif isinstance(node, ast.Call):
        func_name = node.func.id  # type: ignore[attr-defined]
        func = functions.get(func_name)
        if func is None:
            raise EvaluationError(f"Function '{func_name}' is not allowed")
        args = [_eval_node(arg, context, functions) for arg in node.args]
        value = func(*args)
    else:  # pragma: no cover - guarded by _validate_ast
        raise EvaluationError("Unsupported syntax")

    if isinstance(value, complex):
        raise EvaluationError("Complex results are not supported")
    if not isinstance(value, (int, float)):
        raise EvaluationError("Expression returned a non-numeric value")
    if math.isnan(value) or math.isinf(value):
        raise EvaluationError("Result is not finite")
    return float(value)


@lru_cache(maxsize=256)
def _parse_cached(text: str) -> ast.Expression:
    try:
        parsed = ast.parse(text, mode="eval")
    except SyntaxError as exc:
        raise EvaluationError(f"Could not parse expression '{text}': {exc.msg}") from exc
    except (RecursionError, MemoryError) as exc:
        raise EvaluationError("Expression is nested too deeply") from exc
    try:
        _validate_ast(parsed)
    except RecursionError as exc:
        raise EvaluationError("Expression is nested too deeply") from exc
    return parsed


def parse_expression(expression: str) -> ast.Expression:
    """Parse and validate ``expression`` without evaluating it."""

    if not expression or not isinstance(expression, str):
        raise EvaluationError("Expression is required")
    text = normalize_exponents(expression.strip())
    if len(text) > _MAX_EXPR_LENGTH:
        raise EvaluationError("Expression is too long")
    return _parse_cached(text)


def evaluate_parsed(parsed: ast.Expression, scope: Mapping[str, float]) -> float:
    context = {**BUILTIN_CONSTANTS, **scope}
    try:
        return _eval_node(parsed.body, context, FUNCTIONS)
    except EvaluationError:
        raise
    except RecursionError as exc:
        raise EvaluationError("Expression is nested too deeply") from exc
    except (ZeroDivisionError, OverflowError, ValueError, TypeError) as exc:
        raise EvaluationError(f"Evaluation failed: {exc}") from exc


def evaluate_expression(expression: str, scope: Mapping[str, float] | None = None) -> float:
    """Evaluate ``expression`` against ``scope`` and return a finite float.

    ``pi``, ``e`` and ``tau`` are available unless ``scope`` overrides them.
    """

    return evaluate_parsed(parse_expression(expression), scope or {})


__all__ = [
    "BUILTIN_CONSTANTS",
    "Evaluator",
    "FUNCTIONS",
    "evaluate_expression",
    "evaluate_parsed",
    "normalize_exponents",
    "parse_expression",
]
