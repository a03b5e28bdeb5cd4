"""
Path integration on top of stopping-power models.

Modules
-------

- :mod:`settings`: :class:`~pystoppow.transport.settings.IntegrationSettings`,
  solver tolerances and the ranged-out convention.
- :mod:`engine`: exit energy, entrance energy, thickness and range queries.
- :mod:`batch`: evaluation of many queries at once into :class:`pandas.DataFrame` objects,
  optionally in parallel.
"""

from .settings import IntegrationSettings
from .engine import PathResult, energy_in, energy_out, particle_range, thickness

__all__ = [
    "IntegrationSettings",
    "PathResult",
    "energy_in",
    "energy_out",
    "particle_range",
    "thickness",
]
