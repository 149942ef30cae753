"""Generation of independent-variable samples for an equation record."""

from __future__ import annotations

from enum import Enum
from typing import Sequence

import numpy as np

from .errors import SamplingError

DEFAULT_NUM_OF_POINTS = 10

Limits = Sequence[float | None]


class PointsSpacing(str, Enum):
    LINEAR = "Linear"
    LOGARITHMIC = "Logarithmic"

    @classmethod
    def parse(cls, value: "str | PointsSpacing | None") -> "PointsSpacing":
        """Resolve user input; an empty value means linear spacing."""

        if isinstance(value, cls):
            return value
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.LINEAR
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("linear", "lin"):
                return cls.LINEAR
            if lowered in ("logarithmic", "log"):
                return cls.LOGARITHMIC
        raise SamplingError(f"points_spacing must be 'Linear' or 'Logarithmic', got {value!r}")


def _coerce_points(points: Sequence[float], axis: str) -> list[float]:
    values: list[float] = []
    for point in points:
        if isinstance(point, bool):
            raise SamplingError(f"{axis}_points_specified must contain numbers, got {point!r}")
        try:
            values.append(float(point))
        except (TypeError, ValueError) as exc:
            raise SamplingError(f"{axis}_points_specified must contain numbers, got {point!r}") from exc
    return values


def check_limits(samples: Sequence[float], limits: Limits | None, axis: str = "x") -> None:
    """Reject any sample outside the set ``limits``; ``None`` means open-ended."""

    if not limits:
        return
    low, high = limits
    for sample in samples:
        if low is not None and sample < low:
            raise SamplingError(f"{axis} value {sample} is below the lower limit {low}")
        if high is not None and sample > high:
            raise SamplingError(f"{axis} value {sample} is above the upper limit {high}")


def generate_range(
    range_default: Sequence[float],
    num_of_points: int,
    spacing: "str | PointsSpacing | None" = PointsSpacing.LINEAR,
) -> list[float]:
    """Return ``num_of_points`` samples spanning ``range_default`` inclusively."""

    low, high = float(range_default[0]), float(range_default[1])
    if num_of_points < 1:
        raise SamplingError("Number of points must be a positive integer.")
    if PointsSpacing.parse(spacing) is PointsSpacing.LOGARITHMIC:
        if low <= 0 or high <= 0:
            raise SamplingError(
                f"Logarithmic spacing requires strictly positive bounds, got [{low}, {high}]"
            )
        values = np.geomspace(low, high, num_of_points)
    else:
        values = np.linspace(low, high, num_of_points)
    return [float(value) for value in values]


def sample_axis(
    range_default: Sequence[float],
    num_of_points: int | None = None,
    spacing: "str | PointsSpacing | None" = PointsSpacing.LINEAR,
    *,
    points_specified: Sequence[float] | None = None,
    limits: Limits | None = None,
    reverse: bool = False,
    axis: str = "x",
) -> list[float]:
    """Resolve the ordered samples for one independent axis.

    Explicit ``points_specified`` win over the generated range. Every sample
    must satisfy ``limits``; the final order is reversed when ``reverse``.
    """

    if points_specified:
        samples = _coerce_points(points_specified, axis)
    else:
        samples = generate_range(
            range_default,
            num_of_points if num_of_points is not None else DEFAULT_NUM_OF_POINTS,
            spacing,
        )
    check_limits(samples, limits, axis)
    if reverse:
        samples.reverse()
    return samples


__all__ = [
    "DEFAULT_NUM_OF_POINTS",
    "PointsSpacing",
    "check_limits",
    "generate_range",
    "sample_axis",
]
