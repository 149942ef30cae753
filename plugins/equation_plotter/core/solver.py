"""Evaluation of ``dependent = expression`` equations over sampled scopes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .errors import EvaluationError, UnsupportedEquationError
from .expression import Evaluator, evaluate_expression, normalize_exponents

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SampleFailure:
    """A sample the evaluator rejected."""

    index: int
    point: Mapping[str, float]
    message: str

    def to_dict(self) -> dict[str, object]:
        return {"index": self.index, "point": dict(self.point), "message": self.message}


@dataclass(slots=True)
class SolveResult:
    values: list[float | None] = field(default_factory=list)
    failures: list[SampleFailure] = field(default_factory=list)


def split_equation(equation_string: str, dependent_variable: str) -> str:
    """Return the right-hand side once the left side is confirmed to be ``dependent_variable``."""

    if not equation_string or "=" not in equation_string:
        raise UnsupportedEquationError(
            f"Equation '{equation_string}' must have the form '{dependent_variable} = <expression>'."
        )
    lhs, rhs = normalize_exponents(equation_string).split("=", 1)
    if lhs.strip() != dependent_variable:
        raise UnsupportedEquationError(
            f"Dependent variable '{dependent_variable}' is not isolated on the left-hand side "
            f"of '{equation_string}'."
        )
    if not rhs.strip():
        raise UnsupportedEquationError(f"Equation '{equation_string}' has an empty right-hand side.")
    return rhs.strip()


def dependent_from_equation(equation_string: str) -> str:
    """Return the trimmed left-hand side of ``equation_string``."""

    if not equation_string or "=" not in equation_string:
        raise UnsupportedEquationError(
            f"Equation '{equation_string}' must have the form '<dependent> = <expression>'."
        )
    lhs = equation_string.split("=", 1)[0].strip()
    if not lhs.isidentifier():
        raise UnsupportedEquationError(
            f"Left-hand side '{lhs}' of '{equation_string}' is not a bare variable name."
        )
    return lhs


def solve_equation(
    equation_string: str,
    independent_variables: Mapping[str, float],
    dependent_variable: str,
    constants: Mapping[str, float] | None = None,
    *,
    evaluator: Evaluator = evaluate_expression,
) -> float:
    """Evaluate the dependent variable for one set of independent values.

    Independent values override constants of the same name. Raises
    :class:`UnsupportedEquationError` for a malformed equation and
    :class:`EvaluationError` when the evaluator rejects the expression.
    """

    rhs = split_equation(equation_string, dependent_variable)
    scope = {**(constants or {}), **independent_variables}
    return evaluator(rhs, scope)


def solve_over_samples(
    equation_string: str,
    dependent_variable: str,
    samples: Sequence[Mapping[str, float]],
    constants: Mapping[str, float] | None = None,
    *,
    evaluator: Evaluator = evaluate_expression,
) -> SolveResult:
    """Solve once per sample, recording rejected samples as ``None``."""

    rhs = split_equation(equation_string, dependent_variable)
    base_scope = dict(constants or {})
    result = SolveResult()
    for index, point in enumerate(samples):
        try:
            value: float | None = evaluator(rhs, {**base_scope, **point})
        except EvaluationError as exc:
            logger.warning("sample %d %s could not be evaluated: %s", index, dict(point), exc)
            result.failures.append(SampleFailure(index=index, point=dict(point), message=str(exc)))
            value = None
        result.values.append(value)
    return result


__all__ = [
    "SampleFailure",
    "SolveResult",
    "dependent_from_equation",
    "solve_equation",
    "solve_over_samples",
    "split_equation",
]
