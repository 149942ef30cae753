"""Unit scaling ratios and rescaling of sampled data series."""

from __future__ import annotations

import copy
import logging
from typing import Any, MutableMapping, Sequence

from .errors import DimensionMismatchError, MalformedUnitError, UnitConversionError, UnitNotFoundError
from .registry import PintUnitBackend, get_backend
from .unit_text import (
    canonicalize_micro_symbols,
    convert_inverse_units,
    extract_tagged_strings,
    micro_tag_suffix,
    remove_tagged_strings,
    tag_micro_units,
)

logger = logging.getLogger(__name__)

DEFAULT_INVERSE_DEPTH = 100


def _prepare_units(units_string: str, backend: PintUnitBackend) -> str:
    processed = canonicalize_micro_symbols(units_string.replace("^", "**"))
    processed = tag_micro_units(processed)
    for custom_unit in extract_tagged_strings(processed):
        backend.register_custom_unit(custom_unit, micro_of=micro_tag_suffix(custom_unit))
    return remove_tagged_strings(processed)


def _describe_failure(
    exc: UnitConversionError,
    original: tuple[str, str],
    processed: tuple[str, str],
) -> UnitConversionError:
    context = (
        f"Unit 1: '{original[0]}', Unit 2: '{original[1]}'. "
        f"Processed Unit 1: '{processed[0]}', Processed Unit 2: '{processed[1]}'."
    )
    if isinstance(exc, UnitNotFoundError):
        message = f"Unit not found or not registered: {exc}. Ensure all unit definitions are set. {context}"
    elif isinstance(exc, MalformedUnitError):
        message = f"Malformed unit expression: {exc}. Make sure units are valid and properly formatted. {context}"
    elif isinstance(exc, DimensionMismatchError):
        message = f"Units are not compatible: {exc}. Double-check that the records have the same units. {context}"
    else:
        message = f"Unexpected error while converting units: {exc}. {context}"
    return type(exc)(message, original=original, processed=processed)


def get_units_scaling_ratio(
    units_string_1: str,
    units_string_2: str,
    *,
    backend: PintUnitBackend | None = None,
    inverse_depth: int = DEFAULT_INVERSE_DEPTH,
) -> float:
    """Return the factor converting a value in ``units_string_1`` to ``units_string_2``.

    ``("kg", "g")`` gives ``1000``. Identical strings short-circuit to ``1``.
    Reciprocal notation such as ``1/bar`` is rewritten to ``(bar)**(-1)``
    and the conversion retried once when the first attempt fails.
    """

    if units_string_1 == units_string_2:
        return 1.0
    backend = backend if backend is not None else get_backend()
    original = (units_string_1, units_string_2)
    processed = original
    try:
        processed = (_prepare_units(units_string_1, backend), _prepare_units(units_string_2, backend))
    except UnitConversionError as exc:
        raise _describe_failure(exc, original, processed) from exc
    try:
        return backend.ratio(*processed)
    except UnitConversionError as exc:
        logger.warning("retrying unit conversion with inverse units rewritten: %s", exc)

    processed = (
        convert_inverse_units(processed[0], inverse_depth),
        convert_inverse_units(processed[1], inverse_depth),
    )
    try:
        return backend.ratio(*processed)
    except UnitConversionError as exc:
        raise _describe_failure(exc, original, processed) from exc


def _scale_values(values: Sequence[Any], factor: float) -> list[float | None]:
    return [None if value is None else float(value) * factor for value in values]


def scale_dataseries_dict(
    dataseries: MutableMapping[str, Any],
    num_to_scale_x_values_by: float = 1,
    num_to_scale_y_values_by: float = 1,
    num_to_scale_z_values_by: float = 1,
) -> MutableMapping[str, Any]:
    """Scale the ``x``, ``y`` and ``z`` arrays of one series in place.

    A factor of ``1`` leaves the corresponding array untouched. ``None``
    gaps are preserved.
    """

    factors = {
        "x": num_to_scale_x_values_by,
        "y": num_to_scale_y_values_by,
        "z": num_to_scale_z_values_by,
    }
    for axis, factor in factors.items():
        if dataseries.get(axis) and factor != 1:
            dataseries[axis] = _scale_values(dataseries[axis], factor)
    return dataseries


def scale_fig_dict_values(
    fig_dict: MutableMapping[str, Any],
    num_to_scale_x_values_by: float = 1,
    num_to_scale_y_values_by: float = 1,
) -> MutableMapping[str, Any]:
    """Return a scaled deep copy of ``fig_dict``; the input is not modified."""

    scaled = copy.deepcopy(fig_dict)
    for index, dataseries in enumerate(scaled.get("data", [])):
        scaled["data"][index] = scale_dataseries_dict(
            dataseries, num_to_scale_x_values_by, num_to_scale_y_values_by, 1
        )
    return scaled


__all__ = [
    "DEFAULT_INVERSE_DEPTH",
    "get_units_scaling_ratio",
    "scale_dataseries_dict",
    "scale_fig_dict_values",
]
