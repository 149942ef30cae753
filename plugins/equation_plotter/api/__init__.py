"""Equation plotter API with standardized responses."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, Response, current_app, request

from common.errors import ValidationAppError
from common.logging import get_logger
from common.responses import fail, ok
from common.validation import SchemaModel, ValidationError, parse_model

from ..core import (
    DimensionMismatchError,
    EquationValidationError,
    MalformedUnitError,
    UnitConversionError,
    UnitNotFoundError,
    UnsupportedEquationError,
    evaluate_record,
    load_settings,
    return_custom_units_markup,
    scale_figure,
    units_scaling_ratio,
)

logger = get_logger()


class EvaluatePayload(SchemaModel):
    record: dict[str, Any]
    strip_inputs: bool = False


class RatioPayload(SchemaModel):
    from_unit: str
    to_unit: str


class MarkupPayload(SchemaModel):
    units: str
    custom_units: list[str] = []


class ScalePayload(SchemaModel):
    figure: dict[str, Any]
    x_factor: float = 1
    y_factor: float = 1
    x_units: tuple[str, str] | None = None
    y_units: tuple[str, str] | None = None


api_bp = Blueprint("equation_plotter_api", __name__, url_prefix="/api/equation_plotter")


def _settings():
    settings = current_app.config.get("PLUGIN_SETTINGS", {}).get("equation_plotter", {})
    return load_settings(settings)


def _invalid_request(exc: ValidationError) -> Response:
    return fail(
        ValidationAppError(
            message=str(exc),
            code="equation_plotter.invalid_request",
            details=getattr(exc, "details", None),
        )
    )


def _unit_failure(exc: UnitConversionError) -> Response:
    details = {"original": list(exc.original), "processed": list(exc.processed)}
    if isinstance(exc, UnitNotFoundError):
        code, status = "equation_plotter.unit_not_found", 400
    elif isinstance(exc, MalformedUnitError):
        code, status = "equation_plotter.malformed_unit", 400
    elif isinstance(exc, DimensionMismatchError):
        code, status = "equation_plotter.dimension_mismatch", 422
    else:
        code, status = "equation_plotter.unit_conversion_failed", 400
    return fail(ValidationAppError(message=str(exc), code=code, status_code=status, details=details))


@api_bp.post("/evaluate")
def evaluate_endpoint() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(EvaluatePayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    settings = _settings()
    try:
        result = evaluate_record(
            payload.record,
            strip_inputs=payload.strip_inputs,
            max_points=settings.max_points,
        )
    except UnsupportedEquationError as exc:
        return fail(ValidationAppError(message=str(exc), code="equation_plotter.unsupported_equation"))
    except EquationValidationError as exc:
        return fail(ValidationAppError(message=str(exc), code="equation_plotter.invalid_record"))
    if result["diagnostics"]:
        logger.info("evaluation finished with %d failed samples", len(result["diagnostics"]))
    return ok(result)


@api_bp.post("/units/ratio")
def ratio_endpoint() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(RatioPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        ratio = units_scaling_ratio(
            payload.from_unit,
            payload.to_unit,
            inverse_depth=_settings().inverse_units_depth,
        )
    except UnitConversionError as exc:
        return _unit_failure(exc)
    return ok({"from_unit": payload.from_unit, "to_unit": payload.to_unit, "ratio": ratio})


@api_bp.post("/units/markup")
def markup_endpoint() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(MarkupPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    return ok({"units": return_custom_units_markup(payload.units, payload.custom_units)})


@api_bp.post("/figure/scale")
def scale_endpoint() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(ScalePayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        result = scale_figure(
            payload.figure,
            x_factor=payload.x_factor,
            y_factor=payload.y_factor,
            x_units=payload.x_units,
            y_units=payload.y_units,
        )
    except UnitConversionError as exc:
        return _unit_failure(exc)
    except (AttributeError, TypeError, ValueError) as exc:
        return fail(ValidationAppError(message=f"Figure could not be scaled: {exc}", code="equation_plotter.invalid_figure"))
    return ok(result)


blueprints = [api_bp]


__all__ = [
    "blueprints",
    "evaluate_endpoint",
    "ratio_endpoint",
    "markup_endpoint",
    "scale_endpoint",
]
