"""Tests for validation and the correction pipeline."""
import math

import pytest

import tankmass.calc as calc_mod
from tankmass.calc import DEFAULT_PRESSURE_BAR, CalculationInput, calculate, validate_inputs
from tankmass.errors import RangeError, TableLookupError


def _inputs(**kw):
    base = dict(density=0.55, product_temperature=20.0, shell_temperature=20.0, height_mm=200.0)
    base.update(kw)
    return CalculationInput(**base)


class TestAcceptance:
    """Reference volume 100 L, SCF 1.0, PCF 1.0 at the nominal 17 bar."""

    def test_reference_conditions(self, tables):
        res = calculate(_inputs(density=0.550, product_temperature=20.0, pressure=17.0), tables)
        assert res.reference_volume == 100.0
        assert res.scf == 1.0 and res.pcf == 1.0
        assert res.vcf == pytest.approx(1.0, abs=1e-6)
        assert res.corrected_volume == pytest.approx(100.0, abs=1e-3)
        assert res.mass == pytest.approx(55.0, abs=1e-3)

    def test_cold_product(self, tables):
        res = calculate(_inputs(density=0.540, product_temperature=0.0), tables)
        assert res.vcf == pytest.approx(1.056, abs=1e-6)
        assert res.corrected_volume == pytest.approx(105.6, abs=1e-3)
        assert res.mass == pytest.approx(57.024, abs=1e-3)

    def test_warm_product(self, tables):
        res = calculate(_inputs(density=0.580, product_temperature=30.0), tables)
        assert res.vcf == pytest.approx(0.978, abs=1e-6)
        assert res.corrected_volume == pytest.approx(97.8, abs=1e-3)
        assert res.mass == pytest.approx(56.724, abs=1e-3)


class TestPipeline:
    def test_default_pressure(self, tables):
        res = calculate(_inputs(), tables)
        assert res.used_pressure == DEFAULT_PRESSURE_BAR
        assert res.pcf == 1.0

    def test_all_factors_multiply(self, tables):
        res = calculate(_inputs(product_temperature=10.0, shell_temperature=30.0,
                                height_mm=150.0, pressure=18.0), tables)
        assert res.reference_volume == pytest.approx(75.0)
        assert res.vcf == pytest.approx(1.0265)
        assert res.scf == 1.00036
        assert res.pcf == 0.999
        expected = 75.0 * 1.0265 * 1.00036 * 0.999
        assert res.corrected_volume == pytest.approx(expected)
        assert res.corrected_volume_with_pressure == res.corrected_volume
        assert res.mass == pytest.approx(expected * 0.55)

    def test_pressure_correction_disabled(self, tables):
        res = calculate(_inputs(pressure=24.0, apply_pressure=False), tables)
        assert res.pcf is None
        assert res.corrected_volume == pytest.approx(100.0)

    def test_used_inputs_echoed(self, tables):
        res = calculate(_inputs(density=0.54, product_temperature=12.5, shell_temperature=10.0), tables)
        assert res.used_density == 0.54
        assert res.used_product_temperature == 12.5
        assert res.used_shell_temperature == 10.0

    def test_idempotent(self, tables):
        inp = _inputs(density=0.533, product_temperature=7.3, height_mm=321.0, pressure=12.2)
        assert calculate(inp, tables) == calculate(inp, tables)

    def test_as_dict(self, tables):
        d = calculate(_inputs(), tables).as_dict()
        for key in ("vcf", "scf", "pcf", "reference_volume", "corrected_volume",
                    "corrected_volume_with_pressure", "mass", "clamped"):
            assert key in d
        assert d["clamped"] == {"density": False, "temperature": False, "pressure": False, "height": False}

    def test_height_out_of_range_is_clamped_not_rejected(self, tables):
        res = calculate(_inputs(height_mm=1500.0), tables)
        assert res.reference_volume == 1000.0
        assert res.clamped["height"] is True
        res = calculate(_inputs(height_mm=-3.0), tables)
        assert res.reference_volume == 0.0
        assert res.clamped["height"] is True

    def test_shell_temperature_not_listed(self, tables):
        with pytest.raises(TableLookupError):
            calculate(_inputs(shell_temperature=21.0), tables)

    def test_bundled_tables(self):
        res = calculate(_inputs(height_mm=557.0))
        assert res.vcf == pytest.approx(1.0, abs=1e-6)
        assert res.scf == 1.0 and res.pcf == 1.0
        assert res.mass == pytest.approx(res.reference_volume * 0.55)


class TestValidation:
    @pytest.mark.parametrize("field,kw", [
        ("density", dict(density=0.60)),
        ("density", dict(density=0.49)),
        ("product_temperature", dict(product_temperature=-0.5)),
        ("product_temperature", dict(product_temperature=30.01)),
        ("pressure", dict(pressure=9.9)),
        ("pressure", dict(pressure=24.5)),
        ("density", dict(density=math.nan)),
        ("product_temperature", dict(product_temperature=math.nan)),
        ("pressure", dict(pressure=math.nan)),
    ])
    def test_out_of_range(self, tables, field, kw):
        with pytest.raises(RangeError, match="out of supported range") as exc:
            calculate(_inputs(**kw), tables)
        assert exc.value.field == field

    @pytest.mark.parametrize("kw", [
        dict(density=0.50), dict(density=0.59),
        dict(product_temperature=0.0), dict(product_temperature=30.0),
        dict(pressure=10.0), dict(pressure=24.0),
    ])
    def test_bounds_inclusive(self, tables, kw):
        calculate(_inputs(**kw), tables)

    def test_fails_before_any_lookup(self, tables, monkeypatch):
        def boom(*a, **kw):
            raise AssertionError("lookup ran")
        for name in ("lookup_vcf", "lookup_scf", "lookup_pcf", "lookup_reference_volume"):
            monkeypatch.setattr(calc_mod, name, boom)
        with pytest.raises(RangeError):
            calculate(_inputs(density=0.60), tables)

    def test_message_names_field(self):
        with pytest.raises(RangeError, match="^Density 0.6 out of supported range"):
            validate_inputs(0.6, 20.0, 17.0)
        with pytest.raises(RangeError, match="^Product temperature"):
            validate_inputs(0.55, 40.0, 17.0)
        with pytest.raises(RangeError, match="^Pressure"):
            validate_inputs(0.55, 20.0, 30.0)
