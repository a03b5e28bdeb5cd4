#!/usr/bin/env python
"""
Load a SRIM stopping table and tabulate it.

Usage::

    python example_srim_table.py "Hydrogen in Aluminum.txt"

The stopping powers are printed in MeV/um and MeV/(mg/cm2), followed by
the ranges computed by integrating the tabulated curve.
"""

import sys

import numpy as np
from tabulate import tabulate

from pystoppow import TabulatedStoppingPower
from pystoppow.transport.batch import compute_table, stopping_power_table


def main(filepath):
    model = TabulatedStoppingPower.from_srim(filepath, loglog=True)
    model.summary()

    grid = np.geomspace(model.get_Emin(), model.get_Emax(), 12)
    df = stopping_power_table(model, grid)
    df["range_um"] = compute_table(model, grid, quantity="Range", show_progress=False)["Range"]
    print(tabulate(df, headers="keys", tablefmt="fancy_grid", showindex=False, floatfmt=".4g"))


if __name__ == "__main__":
    if len(sys.argv) != 2:
        sys.exit(__doc__)
    main(sys.argv[1])
