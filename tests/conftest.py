import pytest

from tankmass.tables import (
    HeightCapacityRow, PCFRow, PercentHeightRow, SCFRow, TableModel, VCFGrid,
)

# VCF = 1 + a(rho) * (20 - T), a(rho) = 0.0109 - 0.015 * rho
VCF_TEMPS = (0.0, 10.0, 20.0, 30.0)
VCF_DENS = (0.50, 0.54, 0.55, 0.58)
VCF_VALUES = (
    (1.068, 1.056, 1.053, 1.044),
    (1.034, 1.028, 1.0265, 1.022),
    (1.0, 1.0, 1.0, 1.0),
    (0.966, 0.972, 0.9735, 0.978),
)

PCF_ROWS = ((10.0, 1.006), (17.0, 1.0), (18.0, 0.999), (24.0, 0.994))
SCF_ROWS = ((10.0, 0.99964), (20.0, 1.0), (30.0, 1.00036))
# height 200 mm holds exactly 100 L
HEIGHT_ROWS = ((0.0, 0.0), (100.0, 50.0), (200.0, 100.0), (1114.0, 1000.0))
PERCENT_ROWS = ((0.0, 0.0), (50.0, 500.0), (100.0, 1114.0))
TOTAL_L = 1000.0


@pytest.fixture
def tables():
    return TableModel(
        vcf=VCFGrid(VCF_TEMPS, VCF_DENS, VCF_VALUES),
        pcf=tuple(PCFRow(p, f) for p, f in PCF_ROWS),
        scf=tuple(SCFRow(t, f) for t, f in SCF_ROWS),
        height_capacity=tuple(HeightCapacityRow(h, c) for h, c in HEIGHT_ROWS),
        percent_height=tuple(PercentHeightRow(p, h, p / 100.0 * TOTAL_L) for p, h in PERCENT_ROWS),
    )


@pytest.fixture
def table_dir(tmp_path):
    """The synthetic tables as CSV files; height rows deliberately out of order."""
    lines = ["temperature_c," + ",".join(f"{d:.2f}" for d in VCF_DENS)]
    for t, row in zip(VCF_TEMPS, VCF_VALUES):
        lines.append(f"{t}," + ",".join(str(v) for v in row))
    (tmp_path / "vcf_table.csv").write_text("\n".join(lines) + "\n")

    (tmp_path / "pressure_correction_factors.csv").write_text(
        "pressure_bar,factor\n" + "".join(f"{p},{f}\n" for p, f in PCF_ROWS))
    (tmp_path / "shell_correction_factors.csv").write_text(
        "temperature_c,factor\n" + "".join(f"{t},{f}\n" for t, f in SCF_ROWS))
    (tmp_path / "height_capacity.csv").write_text(
        "height_mm,capacity_l\n" + "".join(f"{h},{c}\n" for h, c in reversed(HEIGHT_ROWS)))
    (tmp_path / "percent_height.csv").write_text(
        "percent,height_mm\n" + "".join(f"{p},{h}\n" for p, h in PERCENT_ROWS))
    return tmp_path
