"""Sampling, solving and unit bookkeeping for a whole equation record."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .errors import EquationValidationError, SamplingError
from .expression import Evaluator, evaluate_expression
from .sampling import sample_axis
from .solver import SampleFailure, dependent_from_equation, solve_over_samples
from .unit_text import separate_label_text_from_units

if TYPE_CHECKING:
    from .record import EquationRecord

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EvaluatedPoints:
    x_units: str
    y_units: str
    x_points: list[float]
    y_points: list[float | None]
    z_units: str | None = None
    z_points: list[float | None] | None = None
    failures: list[SampleFailure] = field(default_factory=list)


def _independent_name(label: str, axis: str) -> tuple[str, str]:
    name, units = separate_label_text_from_units(label)
    if not name:
        raise EquationValidationError(f"{axis}_variable is required, e.g. 'T (K)'.")
    if not name.isidentifier():
        raise EquationValidationError(f"{axis}_variable name '{name}' is not a valid variable name.")
    return name, units


def _dependent_name(label: str, equation_string: str) -> tuple[str, str]:
    name, units = separate_label_text_from_units(label)
    if not name:
        name = dependent_from_equation(equation_string)
    return name, units


def _check_budget(total: int, max_points: int | None) -> None:
    if max_points is not None and total > max_points:
        raise SamplingError(f"Requested {total} samples which exceeds the limit of {max_points}.")


def evaluate_equation_record(
    record: "EquationRecord",
    *,
    evaluator: Evaluator = evaluate_expression,
    max_points: int | None = None,
) -> EvaluatedPoints:
    """Sample the independent axes of ``record`` and solve the dependent one.

    For 3-D records ``x_points`` and ``y_points`` hold the flattened x-major
    cross product of the x and y samples, parallel to ``z_points``.
    """

    constants = record.parsed_constants()
    x_name, x_units = _independent_name(record.x_variable, "x")
    x_samples = sample_axis(
        record.x_range_default,
        record.num_of_points,
        record.points_spacing,
        points_specified=record.x_points_specified,
        limits=record.x_range_limits,
        reverse=record.reverse_scaling,
        axis="x",
    )

    if not record.is_3d:
        y_name, y_units = _dependent_name(record.y_variable, record.equation_string)
        _check_budget(len(x_samples), max_points)
        solved = solve_over_samples(
            record.equation_string,
            y_name,
            [{x_name: x} for x in x_samples],
            constants,
            evaluator=evaluator,
        )
        logger.info(
            "evaluated %s over %d samples (%d failed)",
            y_name,
            len(x_samples),
            len(solved.failures),
        )
        return EvaluatedPoints(
            x_units=x_units,
            y_units=y_units,
            x_points=x_samples,
            y_points=solved.values,
            failures=solved.failures,
        )

    if not record.z_variable:
        raise EquationValidationError("graphical_dimensionality 3 requires a z_variable.")
    y_name, y_units = _independent_name(record.y_variable, "y")
    z_name, z_units = _dependent_name(record.z_variable, record.equation_string)
    y_samples = sample_axis(
        record.y_range_default,
        record.num_of_points,
        record.points_spacing,
        points_specified=record.y_points_specified,
        limits=record.y_range_limits,
        reverse=record.reverse_scaling,
        axis="y",
    )
    _check_budget(len(x_samples) * len(y_samples), max_points)
    pairs = [(x, y) for x in x_samples for y in y_samples]
    solved = solve_over_samples(
        record.equation_string,
        z_name,
        [{x_name: x, y_name: y} for x, y in pairs],
        constants,
        evaluator=evaluator,
    )
    logger.info(
        "evaluated %s over %d x %d grid (%d failed)",
        z_name,
        len(x_samples),
        len(y_samples),
        len(solved.failures),
    )
    return EvaluatedPoints(
        x_units=x_units,
        y_units=y_units,
        x_points=[x for x, _ in pairs],
        y_points=[y for _, y in pairs],
        z_units=z_units,
        z_points=solved.values,
        failures=solved.failures,
    )


__all__ = ["EvaluatedPoints", "evaluate_equation_record"]
