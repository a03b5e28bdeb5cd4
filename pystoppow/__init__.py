"""
pystoppow: charged-particle stopping powers in matter and plasmas.

pystoppow evaluates the stopping power of ions in cold matter and in
plasmas through one model interface, and integrates it along a path to
answer exit-energy, entrance-energy, thickness and range queries.
It supports:

- Tabulated stopping powers from plain text or SRIM output files
- Bethe-Bloch stopping in cold, multi-element targets
- Li-Petrasso and Grabowski stopping in fully ionized plasmas
- Zimmerman and Mehlhorn stopping in partially ionized plasmas
- Length (µm) or areal-density (mg/cm²) units, switchable per model
- Batch evaluation into pandas DataFrames, optionally in parallel

Main subpackages
----------------

- :mod:`pystoppow.models`: The model interface and physical models.
- :mod:`pystoppow.transport`: Path integration and batch evaluation.
- :mod:`pystoppow.io`: Tabulated data parsing and atomic data lookup.
- :mod:`pystoppow.utils`: Interpolation and parallelism helpers.
"""

from .exceptions import StopPowError, DomainError, RangeError, ConvergenceError, TableFormatError
from .models import (
    Mode,
    StoppingPowerModel,
    TabulatedStoppingPower,
    BetheBloch,
    Species,
    LiPetrasso,
    Grabowski,
    Zimmerman,
    Mehlhorn,
    BPS,
)
from .transport import IntegrationSettings, PathResult

__version__ = "0.1.0"

__all__ = [
    "StopPowError",
    "DomainError",
    "RangeError",
    "ConvergenceError",
    "TableFormatError",
    "Mode",
    "StoppingPowerModel",
    "TabulatedStoppingPower",
    "BetheBloch",
    "Species",
    "LiPetrasso",
    "Grabowski",
    "Zimmerman",
    "Mehlhorn",
    "BPS",
    "IntegrationSettings",
    "PathResult",
]
