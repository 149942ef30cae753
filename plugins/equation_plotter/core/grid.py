"""Reshaping of flattened (x, y, z) samples into a z matrix."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def _as_float(value: float | None) -> float:
    return np.nan if value is None else float(value)


def assemble_grid(
    x_points: Sequence[float],
    y_points: Sequence[float],
    z_points: Sequence[float | None],
    *,
    sequential: bool = True,
) -> tuple[list[float], list[float], np.ndarray]:
    """Return ``(unique_x, unique_y, matrix)`` with ``matrix[i, j]`` at ``(x_i, y_j)``.

    Rows follow the sorted unique x values and columns the sorted unique y
    values. With ``sequential`` the z values are consumed in order while
    walking x then y, which matches the layout produced for 3-D records.
    Otherwise each cell is looked up by its ``(x, y)`` pair and the last
    matching sample wins. Cells without a sample stay NaN.
    """

    unique_x = sorted(set(x_points))
    unique_y = sorted(set(y_points))
    matrix = np.full((len(unique_x), len(unique_y)), np.nan)

    if sequential:
        position = 0
        for row in range(len(unique_x)):
            for column in range(len(unique_y)):
                if position >= len(z_points):
                    return unique_x, unique_y, matrix
                matrix[row, column] = _as_float(z_points[position])
                position += 1
        return unique_x, unique_y, matrix

    row_index = {value: index for index, value in enumerate(unique_x)}
    column_index = {value: index for index, value in enumerate(unique_y)}
    for x_value, y_value, z_value in zip(x_points, y_points, z_points):
        matrix[row_index[x_value], column_index[y_value]] = _as_float(z_value)
    return unique_x, unique_y, matrix


def is_sorted_cross_product(x_points: Sequence[float], y_points: Sequence[float]) -> bool:
    """True when the pairs walk the sorted unique x values, then y values."""

    unique_x = sorted(set(x_points))
    unique_y = sorted(set(y_points))
    expected = [(x, y) for x in unique_x for y in unique_y]
    return list(zip(x_points, y_points)) == expected


def matrix_to_lists(matrix: np.ndarray) -> list[list[float | None]]:
    """Convert a matrix to nested lists with NaN cells as ``None``."""

    return [[None if np.isnan(cell) else float(cell) for cell in row] for row in matrix]


__all__ = ["assemble_grid", "is_sorted_cross_product", "matrix_to_lists"]
