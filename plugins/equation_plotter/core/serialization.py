"""Mapping and JSON exchange format for equation records."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .errors import EquationValidationError
from .record import INPUT_FIELDS, OUTPUT_FIELDS, EquationRecord
from .unit_text import separate_label_text_from_units

_SETTERS: dict[str, str] = {
    "equation_string": "set_equation",
    "x_variable": "set_x_variable",
    "y_variable": "set_y_variable",
    "z_variable": "set_z_variable",
    "num_of_points": "set_num_of_points",
    "x_range_default": "set_x_range_default",
    "x_range_limits": "set_x_range_limits",
    "x_points_specified": "set_x_points_specified",
    "y_range_default": "set_y_range_default",
    "y_range_limits": "set_y_range_limits",
    "y_points_specified": "set_y_points_specified",
    "z_range_default": "set_z_range_default",
    "z_range_limits": "set_z_range_limits",
    "points_spacing": "set_points_spacing",
    "reverse_scaling": "set_reverse_scaling",
    "graphical_dimensionality": "set_graphical_dimensionality",
}


def record_from_dict(data: Mapping[str, Any] | None) -> EquationRecord:
    """Build a record from a partial mapping, validating each known field.

    Unknown keys are kept in ``extra_fields`` and written back out by
    :func:`record_to_dict`.
    """

    record = EquationRecord()
    if data is None:
        return record
    if not isinstance(data, Mapping):
        raise EquationValidationError("An equation record must be a mapping of field names to values.")
    for key, value in data.items():
        if key == "constants":
            if value:
                record.add_constants(value)
        elif key in _SETTERS:
            if value is None:
                continue
            getattr(record, _SETTERS[key])(value)
        elif key in OUTPUT_FIELDS:
            setattr(record, key, value)
        else:
            record.extra_fields[key] = value
    return record


def record_to_dict(record: EquationRecord) -> dict[str, Any]:
    """Return the exchange mapping for ``record``.

    A record reduced with ``strip_inputs`` only yields its output fields.
    """

    if record.output_only:
        return output_projection(record)
    payload: dict[str, Any] = {}
    for name in INPUT_FIELDS:
        value = getattr(record, name)
        if value is None:
            continue
        payload[name] = dict(value) if name == "constants" else value
    payload.update(record.extra_fields)
    for name in OUTPUT_FIELDS:
        value = getattr(record, name)
        if value is not None:
            payload[name] = value
    return payload


def output_projection(record: EquationRecord) -> dict[str, Any]:
    """Return only the units and points of an evaluated record."""

    payload: dict[str, Any] = {}
    for name in ("x_units", "y_units", "x_points", "y_points"):
        payload[name] = getattr(record, name)
    if record.is_3d:
        payload["z_units"] = record.z_units
        payload["z_points"] = record.z_points
    return payload


def record_to_dataseries(record: EquationRecord) -> dict[str, Any]:
    """Return a plottable series (``name``, ``x``, ``y`` and optional ``z``)."""

    if record.x_points is None or record.y_points is None:
        raise EquationValidationError("Record must be evaluated before it can be plotted.")
    label = record.z_variable if record.is_3d else record.y_variable
    name = separate_label_text_from_units(label)[0] or record.equation_string or "equation"
    series: dict[str, Any] = {"name": name, "x": list(record.x_points), "y": list(record.y_points)}
    if record.is_3d and record.z_points is not None:
        series["z"] = list(record.z_points)
    return series


def dumps(record: EquationRecord, *, pretty: bool = True) -> str:
    return json.dumps(record_to_dict(record), indent=4 if pretty else None)


def loads(text: str) -> EquationRecord:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise EquationValidationError(f"Equation record is not valid JSON: {exc}") from exc
    return record_from_dict(data)


def load_json_file(path: str | Path) -> EquationRecord:
    with Path(path).open("r", encoding="utf-8") as handle:
        return loads(handle.read())


def export_to_json_file(
    record: EquationRecord,
    filename: str | Path,
    *,
    evaluate: bool = True,
    strip_inputs: bool = False,
) -> Path:
    """Write ``record`` as indented JSON, evaluating it first by default.

    ``.json`` is appended when ``filename`` lacks it.
    """

    path = Path(filename)
    if ".json" not in path.name.lower():
        path = path.with_name(path.name + ".json")
    text = record.to_json(evaluate=evaluate, strip_inputs=strip_inputs)
    with path.open("w", encoding="utf-8") as handle:
        handle.write(text)
    return path


__all__ = [
    "dumps",
    "export_to_json_file",
    "load_json_file",
    "loads",
    "output_projection",
    "record_from_dict",
    "record_to_dataseries",
    "record_to_dict",
]
