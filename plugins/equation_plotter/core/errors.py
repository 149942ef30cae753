"""Exception types shared by the equation plotter core."""

from __future__ import annotations


class EquationValidationError(ValueError):
    """Raised when an equation record field is malformed."""


class ConstantFormatError(EquationValidationError):
    """Raised when a constant value lacks a leading numeric literal."""


class UnsupportedEquationError(EquationValidationError):
    """Raised when the equation is not of the form ``dependent = expression``."""


class SamplingError(EquationValidationError):
    """Raised when a range, limit or spacing mode cannot produce samples."""


class EvaluationError(ValueError):
    """Raised when an expression cannot be parsed or evaluated."""


class UnitConversionError(Exception):
    """Base exception for unit scaling failures.

    ``original`` and ``processed`` hold the two unit strings as supplied by
    the caller and as handed to the conversion backend.
    """

    def __init__(
        self,
        message: str,
        *,
        original: tuple[str, str] = ("", ""),
        processed: tuple[str, str] = ("", ""),
    ) -> None:
        super().__init__(message)
        self.original = original
        self.processed = processed


class UnitNotFoundError(UnitConversionError):
    """Raised when a unit is unknown to the backend or was never registered."""


class MalformedUnitError(UnitConversionError):
    """Raised when a unit expression cannot be parsed."""


class DimensionMismatchError(UnitConversionError):
    """Raised when two units do not share the same dimensionality."""


__all__ = [
    "EquationValidationError",
    "ConstantFormatError",
    "UnsupportedEquationError",
    "SamplingError",
    "EvaluationError",
    "UnitConversionError",
    "UnitNotFoundError",
    "MalformedUnitError",
    "DimensionMismatchError",
]
