#!/usr/bin/env python
"""
Example usage of the cold-matter models and the path-integration engine.

This script demonstrates:
  • Building a Bethe-Bloch model for protons in aluminium.
  • Building a tabulated model from a plain text table written on the fly.
  • Querying exit energy, entrance energy, thickness and range in both unit modes.
  • Detecting a particle that ranges out inside the target.
"""

import tempfile
from pathlib import Path

import numpy as np

from pystoppow import BetheBloch, TabulatedStoppingPower
from pystoppow.io.data_registry import lookup


def main():
    # --- Bethe-Bloch for protons in aluminium ---
    mp, Zp = lookup("p")
    mAl, ZAl = lookup("Al")
    bethe = BetheBloch(mp, Zp, [mAl], [ZAl], [6.026e22])
    bethe.summary()

    E0 = 10.0
    x = 200.0
    E_exit = bethe.Eout(E0, x)
    print(f"\n{E0} MeV proton after {x} um of Al: {E_exit:.4f} MeV")
    print(f"Entrance energy recovered from exit energy: {bethe.Ein(E_exit, x):.6f} MeV")
    print(f"Thickness from {E0} to 5 MeV: {bethe.Thickness(E0, 5.0):.2f} um")
    print(f"Range of a {E0} MeV proton: {bethe.Range(E0):.2f} um")

    bethe.set_mode("areal_density")
    print(f"Same range in areal density: {bethe.Range(E0):.3f} mg/cm2")
    bethe.set_mode("length")

    energy, result = bethe.Eout(E0, 1000.0, full_output=True)
    if result.ranged_out:
        print(f"Through 1000 um the proton ranges out after {result.distance:.1f} um (reported energy {energy} MeV)")

    # --- Tabulated model sampled from the Bethe-Bloch curve ---
    grid = np.geomspace(bethe.get_Emin(), bethe.get_Emax(), 60)
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "H_in_Al.txt"
        lines = [f"Density={bethe.density:.5f}", "Units=MeV/um", "Ion=H", "Target=Al", "SourceProgram=pystoppow"]
        lines += [f"{E:.6e} {bethe.dEdx(E):.6e}" for E in grid]
        path.write_text("\n".join(lines) + "\n")
        tabulated = TabulatedStoppingPower.from_txt(path, loglog=True)

    tabulated.summary()
    print(f"\nTabulated exit energy: {tabulated.Eout(E0, x):.4f} MeV (Bethe-Bloch: {E_exit:.4f} MeV)")


if __name__ == "__main__":
    main()
