"""Facade for the equation plotter core utilities."""

from __future__ import annotations

from typing import Any, Mapping

from .errors import (
    ConstantFormatError,
    DimensionMismatchError,
    EquationValidationError,
    EvaluationError,
    MalformedUnitError,
    SamplingError,
    UnitConversionError,
    UnitNotFoundError,
    UnsupportedEquationError,
)
from .expression import evaluate_expression
from .grid import assemble_grid, matrix_to_lists
from .record import EquationRecord, parse_constant, validate_constant_value
from .registry import PintUnitBackend, get_backend
from .sampling import PointsSpacing, sample_axis
from .scaling import get_units_scaling_ratio, scale_dataseries_dict, scale_fig_dict_values
from .serialization import (
    dumps,
    export_to_json_file,
    load_json_file,
    loads,
    output_projection,
    record_from_dict,
    record_to_dataseries,
    record_to_dict,
)
from .settings import EquationPlotterSettings, load_settings
from .solver import SampleFailure, solve_equation
from .unit_text import (
    convert_inverse_units,
    extract_tagged_strings,
    remove_tagged_strings,
    return_custom_units_markup,
    separate_label_text_from_units,
    tag_micro_units,
    untag_micro_units,
)


def evaluate_record(
    data: Mapping[str, Any],
    *,
    strip_inputs: bool = False,
    max_points: int | None = None,
) -> dict[str, object]:
    """Evaluate a record mapping and return its exchange form plus diagnostics."""

    record = record_from_dict(data)
    is_3d = record.is_3d
    record.evaluate(strip_inputs=strip_inputs, max_points=max_points)
    result: dict[str, object] = {
        "record": record_to_dict(record),
        "diagnostics": [failure.to_dict() for failure in record.diagnostics],
    }
    if is_3d:
        result["grid"] = {
            "x": sorted(set(record.x_points or [])),
            "y": sorted(set(record.y_points or [])),
            "z": matrix_to_lists(record.get_z_matrix()),
        }
    return result


def units_scaling_ratio(from_unit: str, to_unit: str, *, inverse_depth: int = 100) -> float:
    """Return the scaling ratio using the process-wide backend."""

    return get_units_scaling_ratio(from_unit, to_unit, inverse_depth=inverse_depth)


def scale_figure(
    figure: Mapping[str, Any],
    *,
    x_factor: float = 1,
    y_factor: float = 1,
    x_units: tuple[str, str] | None = None,
    y_units: tuple[str, str] | None = None,
) -> dict[str, object]:
    """Scale a figure mapping, deriving factors from unit pairs when given."""

    if x_units is not None:
        x_factor *= get_units_scaling_ratio(*x_units)
    if y_units is not None:
        y_factor *= get_units_scaling_ratio(*y_units)
    scaled = scale_fig_dict_values(dict(figure), x_factor, y_factor)
    return {"figure": scaled, "x_factor": x_factor, "y_factor": y_factor}


__all__ = [
    "ConstantFormatError",
    "DimensionMismatchError",
    "EquationPlotterSettings",
    "EquationRecord",
    "EquationValidationError",
    "EvaluationError",
    "MalformedUnitError",
    "PintUnitBackend",
    "PointsSpacing",
    "SampleFailure",
    "SamplingError",
    "UnitConversionError",
    "UnitNotFoundError",
    "UnsupportedEquationError",
    "assemble_grid",
    "convert_inverse_units",
    "dumps",
    "evaluate_expression",
    "evaluate_record",
    "export_to_json_file",
    "extract_tagged_strings",
    "get_backend",
    "get_units_scaling_ratio",
    "load_json_file",
    "load_settings",
    "loads",
    "matrix_to_lists",
    "output_projection",
    "parse_constant",
    "record_from_dict",
    "record_to_dataseries",
    "record_to_dict",
    "remove_tagged_strings",
    "return_custom_units_markup",
    "sample_axis",
    "scale_dataseries_dict",
    "scale_fig_dict_values",
    "scale_figure",
    "separate_label_text_from_units",
    "solve_equation",
    "tag_micro_units",
    "units_scaling_ratio",
    "untag_micro_units",
    "validate_constant_value",
]
