"""
I/O submodule for pystoppow.

Modules
-------

- :mod:`data_registry`:
  Atomic data lookup (``elements.json``, ``particles.json``). See
  :func:`~pystoppow.io.data_registry.lookup` and
  :func:`~pystoppow.io.data_registry.get_mean_excitation_energy`.

- :mod:`stopping_power`:
  Defines :class:`~pystoppow.io.stopping_power.StoppingPowerTable` for parsing
  and validating tabulated stopping-power curves from text or SRIM files.
"""

from .stopping_power import StoppingPowerTable
from .data_registry import lookup

__all__ = ["StoppingPowerTable", "lookup"]
