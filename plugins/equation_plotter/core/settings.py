"""Configuration helpers for the equation plotter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .scaling import DEFAULT_INVERSE_DEPTH

DEFAULT_MAX_POINTS = 10_000


@dataclass(frozen=True)
class EquationPlotterSettings:
    max_points: int
    inverse_units_depth: int


def _positive_int(value: object, default: int) -> int:
    try:
        parsed = int(float(value))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return max(parsed, 1)


def load_settings(raw: Mapping[str, object] | None) -> EquationPlotterSettings:
    """Build settings from the ``equation_plotter`` block of ``config.yml``.

    Missing or malformed values fall back to the defaults.
    """

    raw = raw or {}
    return EquationPlotterSettings(
        max_points=_positive_int(raw.get("max_points"), DEFAULT_MAX_POINTS),
        inverse_units_depth=_positive_int(raw.get("inverse_units_depth"), DEFAULT_INVERSE_DEPTH),
    )


__all__ = ["DEFAULT_MAX_POINTS", "EquationPlotterSettings", "load_settings"]
