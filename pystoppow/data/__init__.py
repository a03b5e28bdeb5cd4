# This file marks this directory as a Python package
"""
Data resources for pystoppow.

Contents
--------

- ``elements.json``:
  Lookup table mapping element names to symbol, atomic number, mass number,
  standard atomic mass (amu), solid/gas density (g/cm³) and mean excitation
  energy (eV). Atomic masses follow IUPAC (https://ciaaw.org/atomic-weights.htm),
  mean excitation energies follow ICRU Report 37/49.

- ``particles.json``:
  Rest masses (amu) and charges of the light projectiles commonly produced in
  fusion experiments (p, d, t, He3, alpha) and of the electron.
"""
