#!/usr/bin/env python3
"""
Reference tables for the bullet tank and their CSV loaders.

Tables are parsed once with pandas, checked for the invariants the lookups
depend on (sorted axes, rectangular grid, non-empty) and then kept as frozen
dataclasses. A TableModel is passed explicitly into every lookup so tests can
inject synthetic tables.
"""
import logging
import math
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from tankmass.errors import TableDataError

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"

VCF_CSV = "vcf_table.csv"
PCF_CSV = "pressure_correction_factors.csv"
SCF_CSV = "shell_correction_factors.csv"
HEIGHT_CSV = "height_capacity.csv"
PERCENT_CSV = "percent_height.csv"

# Nameplate capacity of the tank (L), used for percent-of-full figures
TOTAL_CAPACITY_L = 39557.0


# --------------------------------------------------------------------
# table types
# --------------------------------------------------------------------

def _check_ascending(name: str, values: Sequence[float], strict: bool = True):
    for v in values:
        if not math.isfinite(v):
            raise TableDataError(f"{name} has a blank or non-finite value ({v}).")
    for a, b in zip(values, values[1:]):
        if a > b or (strict and a == b):
            kind = "strictly ascending" if strict else "ascending"
            raise TableDataError(f"{name} must be {kind} (found {a} before {b}).")


@dataclass(frozen=True)
class VCFGrid:
    temperatures: Tuple[float, ...]
    densities: Tuple[float, ...]
    values: Tuple[Tuple[float, ...], ...]   # [temperature row][density column]

    def __post_init__(self):
        if not self.temperatures or not self.densities:
            raise TableDataError("VCF grid needs at least one temperature and one density.")
        _check_ascending("VCF temperature axis", self.temperatures)
        _check_ascending("VCF density axis", self.densities)
        if len(self.values) != len(self.temperatures):
            raise TableDataError(
                f"VCF grid has {len(self.values)} rows for {len(self.temperatures)} temperatures."
            )
        for t, row in zip(self.temperatures, self.values):
            if len(row) != len(self.densities):
                raise TableDataError(
                    f"VCF row at {t} °C has {len(row)} values for {len(self.densities)} densities."
                )


@dataclass(frozen=True)
class PCFRow:
    pressure: float
    factor: float


@dataclass(frozen=True)
class SCFRow:
    temperature: float
    factor: float


@dataclass(frozen=True)
class HeightCapacityRow:
    height_mm: float
    capacity_l: float


@dataclass(frozen=True)
class PercentHeightRow:
    percent: float
    height_mm: float
    capacity_l: float


@dataclass(frozen=True)
class TableModel:
    vcf: VCFGrid
    pcf: Tuple[PCFRow, ...]
    scf: Tuple[SCFRow, ...]
    height_capacity: Tuple[HeightCapacityRow, ...]
    percent_height: Tuple[PercentHeightRow, ...] = field(default=())

    def __post_init__(self):
        if not self.pcf:
            raise TableDataError("PCF table is empty.")
        if not self.scf:
            raise TableDataError("SCF table is empty.")
        if not self.height_capacity:
            raise TableDataError("Height-capacity table is empty.")
        _check_ascending("PCF pressures", [r.pressure for r in self.pcf])
        temps = [r.temperature for r in self.scf]
        if len(set(temps)) != len(temps):
            raise TableDataError("SCF table lists a shell temperature more than once.")
        _check_ascending("Height-capacity heights",
                         [r.height_mm for r in self.height_capacity], strict=False)
        if self.percent_height:
            _check_ascending("Percent-height percents", [r.percent for r in self.percent_height])

    @property
    def full_capacity_l(self) -> float:
        return self.height_capacity[-1].capacity_l

    def scf_temperatures(self) -> List[float]:
        return [r.temperature for r in self.scf]


# --------------------------------------------------------------------
# CSV parsing
# --------------------------------------------------------------------

def _load_csv(path: os.PathLike, **kw) -> pd.DataFrame:
    try:
        return pd.read_csv(path, **kw)
    except FileNotFoundError as e:
        raise TableDataError(f"Table file not found: {path}") from e
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise TableDataError(f"{os.path.basename(path)} could not be parsed ({e})") from e


def _read_csv(path: os.PathLike, required: Sequence[str]) -> pd.DataFrame:
    df = _load_csv(path)
    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise TableDataError(f"{os.path.basename(path)} missing columns: {missing}")
    df = df[list(required)].dropna(how="all").copy()
    if df.empty:
        raise TableDataError(f"{os.path.basename(path)} has no data rows.")
    for col in required:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    bad = df[df.isna().any(axis=1)]
    if not bad.empty:
        raise TableDataError(
            f"{os.path.basename(path)} has non-numeric values on line(s) {[i + 2 for i in bad.index]}"
        )
    return df


def parse_vcf_csv(path: os.PathLike) -> VCFGrid:
    """First column: temperature (°C); remaining headers: densities (kg/L)."""
    df = _load_csv(path, index_col=0)
    if df.empty:
        raise TableDataError(f"{os.path.basename(path)} has no data rows.")
    try:
        densities = [float(str(c).strip()) for c in df.columns]
        temperatures = [float(t) for t in df.index]
    except ValueError as e:
        raise TableDataError(f"{os.path.basename(path)}: bad axis value ({e})") from e
    grid = df.apply(pd.to_numeric, errors="coerce")
    if grid.isna().any().any():
        raise TableDataError(f"{os.path.basename(path)} has missing or non-numeric grid cells.")
    return VCFGrid(
        temperatures=tuple(temperatures),
        densities=tuple(densities),
        values=tuple(tuple(float(v) for v in row) for row in grid.itertuples(index=False)),
    )


def parse_pcf_csv(path: os.PathLike) -> Tuple[PCFRow, ...]:
    df = _read_csv(path, ["pressure_bar", "factor"])
    return tuple(PCFRow(float(p), float(f)) for p, f in zip(df["pressure_bar"], df["factor"]))


def parse_scf_csv(path: os.PathLike) -> Tuple[SCFRow, ...]:
    df = _read_csv(path, ["temperature_c", "factor"])
    return tuple(SCFRow(float(t), float(f)) for t, f in zip(df["temperature_c"], df["factor"]))


def parse_height_capacity_csv(path: os.PathLike) -> Tuple[HeightCapacityRow, ...]:
    df = _read_csv(path, ["height_mm", "capacity_l"])
    # calibration exports are not guaranteed to be in height order
    df = df.sort_values("height_mm", kind="stable")
    return tuple(HeightCapacityRow(float(h), float(c)) for h, c in zip(df["height_mm"], df["capacity_l"]))


def parse_percent_height_csv(path: os.PathLike,
                             total_capacity_l: float = TOTAL_CAPACITY_L) -> Tuple[PercentHeightRow, ...]:
    df = _read_csv(path, ["percent", "height_mm"])
    return tuple(
        PercentHeightRow(float(p), float(h), float(p) / 100.0 * total_capacity_l)
        for p, h in zip(df["percent"], df["height_mm"])
    )


# --------------------------------------------------------------------
# loading
# --------------------------------------------------------------------

def load_tables(data_dir: Optional[os.PathLike] = None) -> TableModel:
    """Build a TableModel from the five CSV files in data_dir (bundled data by default)."""
    d = Path(data_dir) if data_dir is not None else DATA_DIR
    if not d.is_dir():
        raise TableDataError(f"Table directory not found: {d}")

    percent_path = d / PERCENT_CSV
    heights = parse_height_capacity_csv(d / HEIGHT_CSV)
    # percent rows are scaled to this tank's full capacity, not the bundled nameplate
    full_l = heights[-1].capacity_l
    tables = TableModel(
        vcf=parse_vcf_csv(d / VCF_CSV),
        pcf=parse_pcf_csv(d / PCF_CSV),
        scf=parse_scf_csv(d / SCF_CSV),
        height_capacity=heights,
        percent_height=parse_percent_height_csv(percent_path, full_l) if percent_path.exists() else (),
    )
    logger.debug(
        "Loaded tables from %s: VCF %dx%d, PCF %d rows, SCF %d rows, height %d rows, percent %d rows",
        d, len(tables.vcf.temperatures), len(tables.vcf.densities), len(tables.pcf),
        len(tables.scf), len(tables.height_capacity), len(tables.percent_height),
    )
    return tables


@lru_cache(maxsize=1)
def default_tables() -> TableModel:
    """Bundled tables, loaded on first use and shared read-only afterwards."""
    return load_tables(DATA_DIR)
