#!/usr/bin/env python3
import argparse
import json
import logging
import sys

from tankmass.calc import DEFAULT_PRESSURE_BAR, RANGES, CalculationInput, calculate
from tankmass.errors import RangeError, TableDataError, TableLookupError
from tankmass.lookups import capacity_from_percent, fill_percent, lookup_reference_volume
from tankmass.tables import default_tables, load_tables


def _load(args):
    return load_tables(args.data_dir) if args.data_dir else default_tables()


# ------------------------ CLI commands ------------------------

def cmd_calc(args) -> int:
    tables = _load(args)
    inputs = CalculationInput(
        density=args.density,
        product_temperature=args.temperature,
        shell_temperature=args.shell_temperature,
        height_mm=args.height,
        pressure=args.pressure,
        apply_pressure=not args.no_pressure,
    )
    res = calculate(inputs, tables)

    if args.json:
        print(json.dumps(res.as_dict(), indent=2))
        return 0

    print("\nTank mass calculation:")
    print(f"  Height            : {args.height:.1f} mm" + ("  (clamped to table)" if res.clamped["height"] else ""))
    print(f"  Reference volume  : {res.reference_volume:.3f} L")
    print(f"  Density           : {res.used_density:.3f} kg/L")
    print(f"  Product temp.     : {res.used_product_temperature:.2f} °C")
    print(f"  Shell temp.       : {res.used_shell_temperature:.2f} °C")
    print(f"  VCF               : {res.vcf:.6f}")
    print(f"  SCF               : {res.scf:.6f}")
    if res.pcf is not None:
        print(f"  PCF               : {res.pcf:.6f}  (at {res.used_pressure:g} bar)")
    else:
        print("  PCF               : not applied")
    print(f"  Corrected volume  : {res.corrected_volume:.3f} L")
    print(f"  MASS              : {res.mass:.3f} kg  ({res.mass / 1000.0:.3f} t)")
    return 0


def cmd_capacity(args) -> int:
    tables = _load(args)
    if args.height is not None:
        cap = lookup_reference_volume(args.height, tables)
        pct = fill_percent(args.height, tables)
        print(f"Height {args.height:.1f} mm -> {cap:.3f} L  ({pct:.2f} % full)")
    else:
        cap = capacity_from_percent(args.percent, tables)
        print(f"Fill {args.percent:g} % -> {cap:.3f} L")
    return 0


def cmd_tables(args) -> int:
    tables = _load(args)
    if args.table == "pcf":
        print("pressure_bar  factor")
        for r in tables.pcf:
            print(f"{r.pressure:>12g}  {r.factor:.6f}")
    elif args.table == "scf":
        print("temperature_c  factor")
        for r in tables.scf:
            print(f"{r.temperature:>13g}  {r.factor:.6f}")
    elif args.table == "height":
        print("height_mm  capacity_l")
        for r in tables.height_capacity:
            print(f"{r.height_mm:>9g}  {r.capacity_l:.1f}")
    elif args.table == "vcf":
        grid = tables.vcf
        print("T\\rho  " + "  ".join(f"{d:>8.3f}" for d in grid.densities))
        for t, row in zip(grid.temperatures, grid.values):
            print(f"{t:>6g}  " + "  ".join(f"{v:>8.5f}" for v in row))
    return 0


# ------------------------ parser ------------------------

def build_parser():
    p = argparse.ArgumentParser(prog="tankmass", description="Bullet tank product mass from field readings")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    p.add_argument("--data-dir", default=None, help="directory with the reference CSV tables (default: bundled)")
    sub = p.add_subparsers(dest="cmd", required=True)

    d_lo, d_hi = RANGES["density"]
    t_lo, t_hi = RANGES["product_temperature"]
    p_lo, p_hi = RANGES["pressure"]

    c = sub.add_parser("calc", help="Corrected volume and mass")
    c.add_argument("--density", type=float, required=True, help=f"product density, kg/L ({d_lo}-{d_hi})")
    c.add_argument("--temperature", type=float, required=True, help=f"product temperature, °C ({t_lo}-{t_hi})")
    c.add_argument("--shell-temperature", type=float, required=True, help="shell temperature, °C (listed in SCF table)")
    c.add_argument("--height", type=float, required=True, help="liquid height, mm")
    c.add_argument("--pressure", type=float, default=None,
                   help=f"pressure, bar ({p_lo}-{p_hi}, default {DEFAULT_PRESSURE_BAR:g})")
    c.add_argument("--no-pressure", action="store_true", help="do not apply the pressure correction factor")
    c.add_argument("--json", action="store_true", help="print the full result as JSON")
    c.set_defaults(func=cmd_calc)

    cap = sub.add_parser("capacity", help="Capacity at a height or fill percentage")
    grp = cap.add_mutually_exclusive_group(required=True)
    grp.add_argument("--height", type=float, help="liquid height, mm")
    grp.add_argument("--percent", type=float, help="fill percentage")
    cap.set_defaults(func=cmd_capacity)

    t = sub.add_parser("tables", help="Print a reference table")
    t.add_argument("table", choices=["pcf", "scf", "height", "vcf"])
    t.set_defaults(func=cmd_tables)

    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (RangeError, TableLookupError) as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 2
    except TableDataError as e:
        print(f"Table error: {e}", file=sys.stderr)
        return 3


if __name__ == "__main__":
    sys.exit(main())
