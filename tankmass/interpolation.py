#!/usr/bin/env python3
"""
Numeric interpolation over the calibration tables.

  - linear_interpolate:        1-D line through two points (extrapolates)
  - find_bracket:              pair of neighbours around a value in a sorted sequence
  - bilinear_interpolate_vcf:  VCF grid lookup over temperature x density
"""
from typing import Any, Callable, Optional, Sequence, Tuple

from tankmass.errors import TableDataError


# ------------------------ 1-D ------------------------

def linear_interpolate(x: float, x0: float, x1: float, y0: float, y1: float) -> float:
    if x1 == x0:
        return y0
    t = (x - x0) / (x1 - x0)
    return (1 - t) * y0 + t * y1


def find_bracket(items: Sequence[Any],
                 x: float,
                 key: Optional[Callable[[Any], float]] = None,
                 default: Tuple[int, int] = (0, 0)) -> Tuple[int, int]:
    """
    Return (i0, i1) bracketing x in a sequence sorted ascending by key.

    - exact hit returns (i, i)
    - otherwise the first adjacent pair with key[i] <= x <= key[i+1]
    - x outside the table returns `default`
    """
    if not items:
        raise TableDataError("Cannot bracket a value in an empty table.")
    k = key or (lambda v: v)

    for i, item in enumerate(items):
        if k(item) == x:
            return (i, i)

    for i in range(len(items) - 1):
        if k(items[i]) <= x <= k(items[i + 1]):
            return (i, i + 1)
    return default


# ------------------------ 2-D ------------------------

def bilinear_interpolate_vcf(temperature: float, density: float, grid) -> float:
    """
    Interpolate the VCF grid at (temperature, density).

    Each axis is bracketed on its own. A zero-width bracket collapses that
    axis, so an exact grid point returns the stored cell and a point on a grid
    line is a plain 1-D interpolation along the other axis.
    """
    temps, dens, values = grid.temperatures, grid.densities, grid.values
    i0, i1 = find_bracket(temps, temperature)
    j0, j1 = find_bracket(dens, density)

    t1, t2 = temps[i0], temps[i1]
    d1, d2 = dens[j0], dens[j1]

    if i0 == i1 and j0 == j1:
        return values[i0][j0]
    if i0 == i1:
        return linear_interpolate(density, d1, d2, values[i0][j0], values[i0][j1])
    if j0 == j1:
        return linear_interpolate(temperature, t1, t2, values[i0][j0], values[i1][j0])

    q11 = values[i0][j0]   # (T1, D1)
    q21 = values[i1][j0]   # (T2, D1)
    q12 = values[i0][j1]   # (T1, D2)
    q22 = values[i1][j1]   # (T2, D2)

    area = (t2 - t1) * (d2 - d1)
    return (
        q11 * (t2 - temperature) * (d2 - density)
        + q21 * (temperature - t1) * (d2 - density)
        + q12 * (t2 - temperature) * (density - d1)
        + q22 * (temperature - t1) * (density - d1)
    ) / area
