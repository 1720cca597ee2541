#!/usr/bin/env python3
import logging
from typing import Optional

from tankmass.errors import TableLookupError
from tankmass.interpolation import bilinear_interpolate_vcf, find_bracket, linear_interpolate
from tankmass.tables import TableModel, default_tables

logger = logging.getLogger(__name__)


def _tables(tables: Optional[TableModel]) -> TableModel:
    return tables if tables is not None else default_tables()


# ------------------------ correction factors ------------------------

def lookup_vcf(temperature: float, density: float, tables: Optional[TableModel] = None) -> float:
    """Product temperature factor from the temperature x density grid."""
    return bilinear_interpolate_vcf(temperature, density, _tables(tables).vcf)


def lookup_pcf(pressure: float, tables: Optional[TableModel] = None) -> float:
    """
    Pressure correction factor, linear between the two bracketing pressures.

    Outside the table the bracket is the first/last pair and the factor is
    extrapolated along that line.
    """
    rows = _tables(tables).pcf
    i0, i1 = find_bracket(rows, pressure, key=lambda r: r.pressure, default=(0, len(rows) - 1))
    if i0 == i1:
        return rows[i0].factor
    if not rows[0].pressure <= pressure <= rows[-1].pressure:
        logger.warning("Pressure %s bar outside PCF table [%s, %s], extrapolating",
                       pressure, rows[0].pressure, rows[-1].pressure)
    lo, hi = rows[i0], rows[i1]
    return linear_interpolate(pressure, lo.pressure, hi.pressure, lo.factor, hi.factor)


def lookup_scf(shell_temperature: float, tables: Optional[TableModel] = None) -> float:
    """Shell correction factor. Exact match only: no interpolation."""
    t = _tables(tables)
    for r in t.scf:
        if r.temperature == shell_temperature:
            return r.factor
    temps = t.scf_temperatures()
    raise TableLookupError(
        "SCF", shell_temperature,
        hint=f"Use a listed shell temperature ({temps[0]:g} to {temps[-1]:g} °C).",
    )


# ------------------------ capacity ------------------------

def lookup_reference_volume(height_mm: float, tables: Optional[TableModel] = None) -> float:
    """Reference volume (L) at a liquid height, clamped to the table ends."""
    rows = _tables(tables).height_capacity
    if height_mm <= rows[0].height_mm:
        return rows[0].capacity_l
    if height_mm >= rows[-1].height_mm:
        return rows[-1].capacity_l

    i0, i1 = find_bracket(rows, height_mm, key=lambda r: r.height_mm)
    a, b = rows[i0], rows[i1]
    if a.height_mm == b.height_mm:
        return a.capacity_l
    return linear_interpolate(height_mm, a.height_mm, b.height_mm, a.capacity_l, b.capacity_l)


def capacity_from_percent(percent: float, tables: Optional[TableModel] = None) -> float:
    """Capacity (L) at a fill percentage from the percent-height table, clamped to its ends."""
    rows = _tables(tables).percent_height
    if not rows:
        return 0.0
    i0, i1 = find_bracket(rows, percent, key=lambda r: r.percent, default=(0, len(rows) - 1))
    lo, hi = rows[i0], rows[i1]
    if i0 == i1:
        return lo.capacity_l
    if percent <= lo.percent:
        return lo.capacity_l
    if percent >= hi.percent:
        return hi.capacity_l
    return linear_interpolate(percent, lo.percent, hi.percent, lo.capacity_l, hi.capacity_l)


def fill_percent(height_mm: float, tables: Optional[TableModel] = None) -> float:
    """Reference volume at height as % of the full tank, in [0, 100]."""
    t = _tables(tables)
    full = t.full_capacity_l
    if full <= 0:
        return 0.0
    pct = lookup_reference_volume(height_mm, t) / full * 100.0
    return max(0.0, min(100.0, pct))
