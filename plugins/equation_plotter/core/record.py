"""Equation record model and its validation rules."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import numpy as np

from .errors import ConstantFormatError, EquationValidationError, EvaluationError
from .expression import Evaluator, evaluate_expression
from .grid import assemble_grid, is_sorted_cross_product
from .sampling import PointsSpacing
from .solver import SampleFailure

_CONSTANT_PATTERN = re.compile(r"^\d+(\.\d+)?(.*)?$", re.DOTALL)
_FLOAT_PREFIX = re.compile(r"^\d+(?:\.\d*)?(?:[eE][+-]?\d+)?")
_OPERATOR_PREFIXES = ("*", "/", "^", "+", "-", "%")

INPUT_FIELDS: tuple[str, ...] = (
    "equation_string",
    "x_variable",
    "y_variable",
    "z_variable",
    "constants",
    "num_of_points",
    "x_range_default",
    "x_range_limits",
    "x_points_specified",
    "y_range_default",
    "y_range_limits",
    "y_points_specified",
    "z_range_default",
    "z_range_limits",
    "points_spacing",
    "reverse_scaling",
    "graphical_dimensionality",
)
OUTPUT_FIELDS: tuple[str, ...] = (
    "x_units",
    "y_units",
    "z_units",
    "x_points",
    "y_points",
    "z_points",
)


def validate_constant_value(value: Any) -> str:
    """Return ``value`` as text if it is a number optionally followed by a unit."""

    if isinstance(value, bool):
        raise ConstantFormatError(f"Invalid format: '{value}'. Expected a numeric value, optionally followed by a unit.")
    if isinstance(value, (int, float)):
        value = repr(value) if isinstance(value, float) else str(value)
    if not isinstance(value, str) or not _CONSTANT_PATTERN.match(value.strip()):
        raise ConstantFormatError(f"Invalid format: '{value}'. Expected a numeric value, optionally followed by a unit.")
    return value.strip()


def _strip_outer_parentheses(text: str) -> str:
    if not (text.startswith("(") and text.endswith(")")):
        return text
    depth = 0
    for index, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0 and index != len(text) - 1:
                return text
    return text[1:-1].strip()


def parse_constant(value: Any) -> tuple[float, str]:
    """Split a constant into its numeric magnitude and unit text.

    ``"8.314 J/(mol*K)"`` gives ``(8.314, "J/(mol*K)")`` and
    ``"1*10**13 (s**-1)"`` gives ``(1e13, "s**-1")``.
    """

    text = validate_constant_value(value)
    parts = text.split(None, 1)
    head, tail = parts[0], parts[1] if len(parts) > 1 else ""
    try:
        magnitude = evaluate_expression(head, {})
    except EvaluationError:
        match = _FLOAT_PREFIX.match(text)
        if match is None:  # pragma: no cover - guarded by validate_constant_value
            raise ConstantFormatError(f"Constant '{text}' has no numeric prefix.")
        magnitude = float(match.group(0))
        tail = text[match.end() :]
        if tail.lstrip().startswith(_OPERATOR_PREFIXES):
            raise ConstantFormatError(f"Constant '{text}' has a numeric part that could not be evaluated.")
    if not math.isfinite(magnitude):
        raise ConstantFormatError(f"Constant '{text}' is not a finite number.")
    return magnitude, _strip_outer_parentheses(tail.strip())


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _validate_range(value: Any, name: str) -> list[float]:
    if not isinstance(value, (list, tuple)) or len(value) != 2 or not all(_is_number(item) for item in value):
        raise EquationValidationError(f"{name} must be a list of two numeric values.")
    return [float(item) for item in value]


def _validate_limits(value: Any, name: str) -> list[float | None]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise EquationValidationError(f"{name} must be a list of two elements (numeric or None).")
    if not all(item is None or _is_number(item) for item in value):
        raise EquationValidationError(f"Elements in {name} must be numeric or None.")
    return [None if item is None else float(item) for item in value]


def _validate_points(value: Any, name: str) -> list[float]:
    if not isinstance(value, (list, tuple)) or not all(_is_number(item) for item in value):
        raise EquationValidationError(f"{name} must be a list of numeric values.")
    return [float(item) for item in value]


def _validate_label(value: Any, name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise EquationValidationError(f"{name} must be a string such as 'T (K)'.")
    return value


@dataclass
class EquationRecord:
    """An equation, its variables and constants, and how to sample it.

    Normally created blank and filled through the setters, or built from a
    partial mapping with :func:`~.serialization.record_from_dict`::

        record = EquationRecord()
        record.set_equation("k = A * (e ** (-Ea / (R * T)))")
        record.set_x_variable("T (K)")
        record.set_y_variable("k (s**-1)")
        record.add_constants([{"Ea": "30000 J/mol"}, {"R": "8.314 J/(mol*K)"}])
        record.add_constants({"A": "1*10**13 (s**-1)", "e": "2.71828"})
        record.set_num_of_points(10)
        record.set_x_range_default([200, 500])
        record.set_x_range_limits([None, 600])
        record.evaluate()

    Every setter validates before mutating. ``evaluate`` fills the output
    fields (``x_units`` ... ``z_points``) and leaves the inputs alone unless
    ``strip_inputs`` is requested.
    """

    equation_string: str = ""
    x_variable: str = ""
    y_variable: str = ""
    z_variable: str = ""
    constants: dict[str, str] = field(default_factory=dict)
    num_of_points: int | None = None
    x_range_default: list[float] = field(default_factory=lambda: [0.0, 1.0])
    x_range_limits: list[float | None] = field(default_factory=lambda: [None, None])
    x_points_specified: list[float] = field(default_factory=list)
    y_range_default: list[float] = field(default_factory=lambda: [0.0, 1.0])
    y_range_limits: list[float | None] = field(default_factory=lambda: [None, None])
    y_points_specified: list[float] = field(default_factory=list)
    z_range_default: list[float] | None = None
    z_range_limits: list[float | None] = field(default_factory=lambda: [None, None])
    points_spacing: str = ""
    reverse_scaling: bool = False
    graphical_dimensionality: int = 2

    x_units: str | None = None
    y_units: str | None = None
    z_units: str | None = None
    x_points: list[float] | None = None
    y_points: list[float | None] | None = None
    z_points: list[float | None] | None = None

    extra_fields: dict[str, Any] = field(default_factory=dict)
    diagnostics: list[SampleFailure] = field(default_factory=list, repr=False)
    output_only: bool = field(default=False, repr=False)

    # ---- Constants -------------------------------------------------------
    def add_constants(self, constants: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> None:
        """Add one ``{name: value}`` mapping or a list of such mappings.

        All entries are validated before any is inserted, so a rejected
        value leaves ``constants`` unchanged.
        """

        if isinstance(constants, Mapping):
            batches: Sequence[Mapping[str, Any]] = [constants]
        elif isinstance(constants, (list, tuple)):
            batches = constants
        else:
            raise EquationValidationError(
                "Expected a mapping for one constant or a list of mappings for multiple constants."
            )
        staged: dict[str, str] = {}
        for batch in batches:
            if not isinstance(batch, Mapping):
                raise EquationValidationError(
                    "Each item in the list must be a mapping containing a constant name-value pair."
                )
            for name, value in batch.items():
                if not isinstance(name, str) or not name.isidentifier():
                    raise EquationValidationError(f"Constant name {name!r} is not a valid identifier.")
                staged[name] = validate_constant_value(value)
        self.constants.update(staged)

    def parsed_constants(self) -> dict[str, float]:
        """Return the numeric magnitude of every constant."""

        return {name: parse_constant(value)[0] for name, value in self.constants.items()}

    def constant_units(self) -> dict[str, str]:
        return {name: parse_constant(value)[1] for name, value in self.constants.items()}

    # ---- Setters ---------------------------------------------------------
    def set_equation(self, equation_string: str) -> None:
        if not isinstance(equation_string, str):
            raise EquationValidationError("equation_string must be a string.")
        self.equation_string = equation_string

    def set_x_variable(self, x_variable: str) -> None:
        """Set the x variable, e.g. ``"T (K)"`` for temperature in kelvin."""

        self.x_variable = _validate_label(x_variable, "x_variable")

    def set_y_variable(self, y_variable: str) -> None:
        """Set the y variable, e.g. ``"k (s**-1)"`` for a rate constant."""

        self.y_variable = _validate_label(y_variable, "y_variable")

    def set_z_variable(self, z_variable: str) -> None:
        """Set the z variable, e.g. ``"E (J)"``."""

        self.z_variable = _validate_label(z_variable, "z_variable")

    def set_num_of_points(self, num_points: int) -> None:
        if isinstance(num_points, bool) or not isinstance(num_points, int) or num_points <= 0:
            raise EquationValidationError("Number of points must be a positive integer.")
        self.num_of_points = num_points

    def set_x_range_default(self, x_range: Sequence[float]) -> None:
        self.x_range_default = _validate_range(x_range, "x_range_default")

    def set_x_range_limits(self, x_limits: Sequence[float | None]) -> None:
        self.x_range_limits = _validate_limits(x_limits, "x_range_limits")

    def set_x_points_specified(self, x_points: Sequence[float]) -> None:
        self.x_points_specified = _validate_points(x_points, "x_points_specified")

    def set_y_range_default(self, y_range: Sequence[float]) -> None:
        self.y_range_default = _validate_range(y_range, "y_range_default")

    def set_y_range_limits(self, y_limits: Sequence[float | None]) -> None:
        self.y_range_limits = _validate_limits(y_limits, "y_range_limits")

    def set_y_points_specified(self, y_points: Sequence[float]) -> None:
        self.y_points_specified = _validate_points(y_points, "y_points_specified")

    def set_z_range_default(self, z_range: Sequence[float]) -> None:
        self.z_range_default = _validate_range(z_range, "z_range_default")

    def set_z_range_limits(self, z_limits: Sequence[float | None]) -> None:
        self.z_range_limits = _validate_limits(z_limits, "z_range_limits")

    def set_points_spacing(self, points_spacing: str) -> None:
        spacing = PointsSpacing.parse(points_spacing)
        self.points_spacing = spacing.value if points_spacing else ""

    def set_reverse_scaling(self, reverse_scaling: bool) -> None:
        if not isinstance(reverse_scaling, bool):
            raise EquationValidationError("reverse_scaling must be a boolean.")
        self.reverse_scaling = reverse_scaling

    def set_graphical_dimensionality(self, dimensionality: int) -> None:
        if isinstance(dimensionality, bool) or dimensionality not in (2, 3):
            raise EquationValidationError("graphical_dimensionality must be 2 or 3.")
        self.graphical_dimensionality = dimensionality

    # ---- Evaluation ------------------------------------------------------
    @property
    def is_3d(self) -> bool:
        return self.graphical_dimensionality == 3

    def evaluate(
        self,
        strip_inputs: bool = False,
        *,
        evaluator: Evaluator = evaluate_expression,
        max_points: int | None = None,
    ) -> "EquationRecord":
        """Sample and solve the equation, storing units and points on the record.

        Re-running recomputes the outputs from the same inputs. With
        ``strip_inputs`` the record is reduced to its output fields.
        """

        from .evaluation import evaluate_equation_record

        if self.output_only:
            raise EquationValidationError("Record only holds evaluated output and cannot be re-evaluated.")
        evaluated = evaluate_equation_record(self, evaluator=evaluator, max_points=max_points)
        self.x_units = evaluated.x_units
        self.y_units = evaluated.y_units
        self.x_points = evaluated.x_points
        self.y_points = evaluated.y_points
        # A 2-D run clears z outputs left by an earlier 3-D run.
        self.z_units = evaluated.z_units
        self.z_points = evaluated.z_points
        self.diagnostics = list(evaluated.failures)
        if strip_inputs:
            self.strip_inputs()
        return self

    def strip_inputs(self) -> None:
        """Drop every input field, keeping only units and points."""

        outputs = {name: getattr(self, name) for name in OUTPUT_FIELDS}
        is_3d = self.is_3d
        fresh = EquationRecord()
        for name in INPUT_FIELDS:
            setattr(self, name, getattr(fresh, name))
        self.extra_fields = {}
        for name, value in outputs.items():
            setattr(self, name, value)
        self.graphical_dimensionality = 3 if is_3d else 2
        self.output_only = True

    def output_projection(self) -> dict[str, Any]:
        from .serialization import output_projection

        return output_projection(self)

    def to_json(self, *, evaluate: bool = False, strip_inputs: bool = False, pretty: bool = True) -> str:
        """Return the record as JSON text, optionally evaluating it first."""

        from .serialization import dumps

        if evaluate:
            self.evaluate(strip_inputs=strip_inputs)
        elif strip_inputs:
            self.strip_inputs()
        return dumps(self, pretty=pretty)

    def get_z_matrix(
        self,
        x_points: Sequence[float] | None = None,
        y_points: Sequence[float] | None = None,
        z_points: Sequence[float | None] | None = None,
    ) -> np.ndarray:
        """Return the z values arranged by sorted unique x (rows) and y (columns)."""

        x_points = self.x_points if x_points is None else x_points
        y_points = self.y_points if y_points is None else y_points
        z_points = self.z_points if z_points is None else z_points
        if x_points is None or y_points is None or z_points is None:
            raise EquationValidationError("x, y and z points are required to build a z matrix.")
        # Reversed 3-D sweeps are no longer in x-major sorted order.
        sequential = self.is_3d and is_sorted_cross_product(x_points, y_points)
        _, _, matrix = assemble_grid(x_points, y_points, z_points, sequential=sequential)
        return matrix


__all__ = [
    "INPUT_FIELDS",
    "OUTPUT_FIELDS",
    "EquationRecord",
    "parse_constant",
    "validate_constant_value",
]
