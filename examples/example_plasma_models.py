#!/usr/bin/env python
"""
Compare plasma stopping-power models on a common energy grid.

This script demonstrates:
  • Building Li-Petrasso, Grabowski and BPS models for a fully ionized DT plasma.
  • Building Zimmerman and Mehlhorn models for a partially ionized CH plasma.
  • Evaluating stopping power and exit energy over an energy grid with
    compute_table, optionally spread over worker processes.
"""

import numpy as np
from tabulate import tabulate

from pystoppow import BPS, Grabowski, LiPetrasso, Mehlhorn, Species, Zimmerman
from pystoppow.io.data_registry import lookup
from pystoppow.transport.batch import compute_table


def main():
    m_alpha, Z_alpha = lookup("alpha")

    # --- Fully ionized DT at 5 keV, 1e25 /cc per ion species ---
    dt = [Species(2.014, 1, 5.0, 1e25), Species(3.016, 1, 5.0, 1e25)]
    fully_ionized = {
        "Li-Petrasso": LiPetrasso(m_alpha, Z_alpha, dt, Te=5.0),
        "Grabowski": Grabowski(m_alpha, Z_alpha, dt, Te=5.0),
        "BPS": BPS(m_alpha, Z_alpha, dt, Te=5.0),
    }

    # --- Partially ionized CH at 50 eV ---
    ch = [Species(12.011, 6, 0.05, 5e22, 4.0), Species(1.008, 1, 0.05, 5e22, 1.0)]
    partially_ionized = {
        "Zimmerman": Zimmerman(m_alpha, Z_alpha, ch, Te=0.05),
        "Mehlhorn": Mehlhorn(m_alpha, Z_alpha, ch, Te=0.05),
    }

    energies = np.linspace(1.0, 3.5, 6)
    for label, models in (("DT, 5 keV", fully_ionized), ("CH, 50 eV", partially_ionized)):
        columns = {}
        for name, model in models.items():
            df = compute_table(model, energies, quantity="dEdx", show_progress=False)
            columns[name] = df["dEdx"].to_numpy()
        rows = [[E] + [columns[name][i] for name in columns] for i, E in enumerate(energies)]
        print(f"\nStopping power [MeV/um], alpha in {label}")
        print(tabulate(rows, headers=["E [MeV]"] + list(columns), tablefmt="fancy_grid", floatfmt=".4e"))

    # --- Exit energies through 10 mg/cm2 of DT, in parallel ---
    model = fully_ionized["Li-Petrasso"]
    model.set_mode("areal_density")
    df = compute_table(model, energies, quantity="Eout", thickness=10.0, parallel=True)
    print(f"\nExit energy after 10 {df.attrs['thickness_unit']} of DT (Li-Petrasso)")
    print(tabulate(df, headers="keys", tablefmt="fancy_grid", showindex=False))


if __name__ == "__main__":
    main()
