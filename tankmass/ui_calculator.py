#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import sys
from typing import Optional, Tuple

from PySide6.QtCore import Qt
from PySide6.QtGui import QDoubleValidator
from PySide6.QtWidgets import (
    QAbstractItemView, QApplication, QCheckBox, QComboBox, QGridLayout,
    QHeaderView, QLabel, QLineEdit, QMessageBox, QProgressBar, QPushButton,
    QTableWidget, QTableWidgetItem, QWidget
)

from tankmass.calc import DEFAULT_PRESSURE_BAR, RANGES, CalculationInput, CalculationResult, calculate
from tankmass.errors import RangeError, TableDataError, TableLookupError
from tankmass.lookups import fill_percent, lookup_reference_volume
from tankmass.tables import TableModel, default_tables

GREEN = "background-color: #e9f8ea;"  # light green for inputs

# (label, formatter) rows of the results table
RESULT_ROWS = [
    ("Reference Volume (L)",             lambda r: f"{r.reference_volume:.3f}"),
    ("Product Temperature Factor (VCF)", lambda r: f"{r.vcf:.6f}"),
    ("Shell Correction Factor (SCF)",    lambda r: f"{r.scf:.6f}"),
    ("PCF used",                         lambda r: "-" if r.pcf is None else f"{r.pcf:.6f}"),
    ("Corrected Volume (L)",             lambda r: f"{r.corrected_volume:.3f}"),
    ("Product Density used (kg/L)",      lambda r: f"{r.used_density:.3f}"),
    ("Mass (kg)",                        lambda r: f"{r.mass:.3f}"),
]

# --------------------------------------------------------------------
# helpers
# --------------------------------------------------------------------

def msg(text: str, title="Info"):
    m = QMessageBox(QMessageBox.Icon.Information, title, text)
    m.exec()

def safe_float(s: str) -> Optional[float]:
    try:
        return float(str(s).replace(",", "."))
    except ValueError:
        return None

def read_form(density: str, temp: str, height: str, pressure: str,
              apply_pressure: bool) -> Tuple[float, float, float, Optional[float]]:
    """Convert the form texts to numbers; ValueError names the missing fields."""
    values = {
        "density": safe_float(density),
        "temperature": safe_float(temp),
        "height": safe_float(height),
    }
    if apply_pressure:
        values["pressure"] = safe_float(pressure)
    missing = [k for k, v in values.items() if v is None]
    if missing:
        raise ValueError(f"Please enter numeric {', '.join(missing)}.")
    return values["density"], values["temperature"], values["height"], values.get("pressure")

def _line(default: str, low: float, high: float, decimals: int) -> QLineEdit:
    ed = QLineEdit(default)
    ed.setValidator(QDoubleValidator(low, high, decimals))
    ed.setStyleSheet(GREEN)
    return ed

# --------------------------------------------------------------------
# Main window
# --------------------------------------------------------------------

class CalculatorWindow(QWidget):
    def __init__(self, tables: TableModel):
        super().__init__()
        self.tables = tables
        self.setWindowTitle("Bullet Tank Mass Calculator")
        self.resize(640, 520)

        g = QGridLayout(self)

        d_lo, d_hi = RANGES["density"]
        t_lo, t_hi = RANGES["product_temperature"]
        p_lo, p_hi = RANGES["pressure"]
        h_lo, h_hi = RANGES["height_mm"]

        # ----- inputs -----
        self.edDensity = _line("0.550", d_lo, d_hi, 3)
        self.edTemp = _line("20.0", t_lo, t_hi, 2)
        self.edHeight = _line("557", h_lo, h_hi, 1)
        self.edPressure = _line(f"{DEFAULT_PRESSURE_BAR:g}", p_lo, p_hi, 2)

        self.cbShell = QComboBox()
        for t in tables.scf_temperatures():
            self.cbShell.addItem(f"{t:g}", t)
        idx = self.cbShell.findText("20")
        if idx >= 0:
            self.cbShell.setCurrentIndex(idx)

        self.chkPressure = QCheckBox("Apply pressure correction (PCF)")
        self.chkPressure.setChecked(True)
        self.chkPressure.toggled.connect(self.edPressure.setEnabled)

        g.addWidget(QLabel(f"Density (kg/L) [{d_lo}–{d_hi}]:"), 0, 0); g.addWidget(self.edDensity, 0, 1)
        g.addWidget(QLabel(f"Product temp (°C) [{t_lo:g}–{t_hi:g}]:"), 1, 0); g.addWidget(self.edTemp, 1, 1)
        g.addWidget(QLabel("Shell temp (°C):"), 2, 0); g.addWidget(self.cbShell, 2, 1)
        g.addWidget(QLabel(f"Height (mm) [{h_lo:g}–{h_hi:g}]:"), 3, 0); g.addWidget(self.edHeight, 3, 1)
        g.addWidget(QLabel(f"Pressure (bar) [{p_lo:g}–{p_hi:g}]:"), 4, 0); g.addWidget(self.edPressure, 4, 1)
        g.addWidget(self.chkPressure, 5, 0, 1, 2)

        # ----- fill level -----
        self.bar = QProgressBar(); self.bar.setRange(0, 100)
        self.lblCap = QLabel("-")
        self.edHeight.textChanged.connect(self.update_gauge)
        g.addWidget(QLabel("Fill level:"), 6, 0); g.addWidget(self.bar, 6, 1)
        g.addWidget(self.lblCap, 7, 1)

        # ----- results -----
        self.tbl = QTableWidget(len(RESULT_ROWS), 2)
        self.tbl.setHorizontalHeaderLabels(["Quantity", "Value"])
        self.tbl.verticalHeader().setVisible(False)
        self.tbl.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.tbl.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        for r, (label, _) in enumerate(RESULT_ROWS):
            self.tbl.setItem(r, 0, QTableWidgetItem(label))
            self._set_value(r, "-")
        g.addWidget(self.tbl, 8, 0, 1, 2)

        self.btnCalc = QPushButton("Calculate")
        self.btnCalc.clicked.connect(self.compute)
        g.addWidget(self.btnCalc, 9, 0, 1, 2)

        self.update_gauge()

    def _set_value(self, r: int, text: str):
        it = QTableWidgetItem(text)
        it.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        self.tbl.setItem(r, 1, it)

    def update_gauge(self):
        h = safe_float(self.edHeight.text())
        if h is None:
            self.bar.setValue(0); self.lblCap.setText("-")
            return
        self.bar.setValue(round(fill_percent(h, self.tables)))
        self.lblCap.setText(f"H: {h:.1f} mm   CAP: {lookup_reference_volume(h, self.tables):.1f} L")

    def compute(self):
        try:
            density, temp, height, pressure = read_form(
                self.edDensity.text(), self.edTemp.text(), self.edHeight.text(),
                self.edPressure.text(), self.chkPressure.isChecked())
        except ValueError as e:
            msg(str(e), "Input error")
            return

        try:
            res = calculate(CalculationInput(
                density=density,
                product_temperature=temp,
                shell_temperature=self.cbShell.currentData(),
                height_mm=height,
                pressure=pressure,
                apply_pressure=self.chkPressure.isChecked(),
            ), self.tables)
        except (RangeError, TableLookupError) as e:
            msg(str(e), "Input error")
            return
        self.show_result(res)

    def show_result(self, res: CalculationResult):
        for r, (_, fmt) in enumerate(RESULT_ROWS):
            self._set_value(r, fmt(res))

# --------------------------------------------------------------------
# main
# --------------------------------------------------------------------

def main():
    app = QApplication(sys.argv)
    try:
        tables = default_tables()
    except TableDataError as e:
        msg(f"Reference tables could not be loaded:\n{e}", "Error")
        return 1
    w = CalculatorWindow(tables)
    w.show()
    return app.exec()

if __name__ == "__main__":
    sys.exit(main())
