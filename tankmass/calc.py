#!/usr/bin/env python3
"""
Mass of product in the bullet tank from manual field inputs.

Process:
  1) validate density / product temperature / pressure against RANGES
  2) VCF  from product temperature x density   (bilinear)
  3) SCF  from shell temperature               (exact match)
  4) reference volume from liquid height       (linear, clamped)
  5) PCF  from pressure                        (linear)
  6) corrected volume = reference volume * VCF * SCF * PCF
  7) mass = corrected volume * density

Every intermediate factor is returned so the caller can show the working.
"""
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from tankmass.errors import RangeError
from tankmass.lookups import lookup_pcf, lookup_reference_volume, lookup_scf, lookup_vcf
from tankmass.tables import TableModel, default_tables

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------
# CONFIG
# --------------------------------------------------------------------

# Nominal operating pressure used when none is entered (bar)
DEFAULT_PRESSURE_BAR = 17.0

# Inclusive supported ranges. Height is advisory: the height lookup clamps instead.
RANGES = {
    "density":             (0.50, 0.59),   # kg/L
    "product_temperature": (0.0, 30.0),    # °C
    "pressure":            (10.0, 24.0),   # bar
    "height_mm":           (0.0, 1114.0),  # mm
}


@dataclass(frozen=True)
class CalculationInput:
    density: float               # kg/L
    product_temperature: float   # °C, for VCF
    shell_temperature: float     # °C, for SCF (must be listed in the table)
    height_mm: float             # mm, for reference volume
    pressure: Optional[float] = None   # bar; DEFAULT_PRESSURE_BAR when None
    apply_pressure: bool = True


@dataclass(frozen=True)
class CalculationResult:
    used_density: float
    used_product_temperature: float
    used_shell_temperature: float
    used_pressure: float
    vcf: float
    scf: float
    reference_volume: float
    corrected_volume: float
    pcf: Optional[float]
    corrected_volume_with_pressure: float
    mass: float
    clamped: Dict[str, bool] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# --------------------------------------------------------------------
# validation
# --------------------------------------------------------------------

def _check_range(name: str, value: float):
    low, high = RANGES[name]
    if not low <= value <= high:
        raise RangeError(name, value, low, high)


def validate_inputs(density: float, product_temperature: float, pressure: float):
    _check_range("density", density)
    _check_range("product_temperature", product_temperature)
    _check_range("pressure", pressure)


# --------------------------------------------------------------------
# pipeline
# --------------------------------------------------------------------

def calculate(inputs: CalculationInput, tables: Optional[TableModel] = None) -> CalculationResult:
    t = tables if tables is not None else default_tables()
    pressure = DEFAULT_PRESSURE_BAR if inputs.pressure is None else inputs.pressure

    validate_inputs(inputs.density, inputs.product_temperature, pressure)

    h_lo = t.height_capacity[0].height_mm
    h_hi = t.height_capacity[-1].height_mm
    height_clamped = inputs.height_mm < h_lo or inputs.height_mm > h_hi
    if height_clamped:
        logger.debug("Height %s mm outside table [%s, %s], clamping", inputs.height_mm, h_lo, h_hi)

    vcf = lookup_vcf(inputs.product_temperature, inputs.density, t)
    scf = lookup_scf(inputs.shell_temperature, t)
    reference_volume = lookup_reference_volume(inputs.height_mm, t)
    pcf = lookup_pcf(pressure, t) if inputs.apply_pressure else None

    # Corrected Volume = Reference Volume * VCF * SCF * PCF
    corrected_volume = reference_volume * vcf * scf * (pcf if pcf is not None else 1.0)
    mass = corrected_volume * inputs.density

    logger.debug("vcf=%.6f scf=%.6f pcf=%s ref=%.3f L corr=%.3f L mass=%.3f kg",
                 vcf, scf, pcf, reference_volume, corrected_volume, mass)

    return CalculationResult(
        used_density=inputs.density,
        used_product_temperature=inputs.product_temperature,
        used_shell_temperature=inputs.shell_temperature,
        used_pressure=pressure,
        vcf=vcf,
        scf=scf,
        reference_volume=reference_volume,
        corrected_volume=corrected_volume,
        pcf=pcf,
        corrected_volume_with_pressure=corrected_volume,
        mass=mass,
        clamped={"density": False, "temperature": False, "pressure": False, "height": height_clamped},
    )
