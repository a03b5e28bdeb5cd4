"""
Utility submodule for pystoppow.

Modules
-------

- :mod:`interpolation`:
  :class:`~pystoppow.utils.interpolation.TableCursor` for scalar lookups with
  a cached index hint, and :class:`~pystoppow.utils.interpolation.Interpolator`
  for vectorised linear or log-log interpolation.

- :mod:`parallel`:
  :func:`~pystoppow.utils.parallel.grid_worker_count` and
  :func:`~pystoppow.utils.parallel.grid_chunksize` to spread energy grids
  over process pools.
"""

from .interpolation import Interpolator, TableCursor
from .parallel import grid_chunksize, grid_worker_count

__all__ = ["Interpolator", "TableCursor", "grid_worker_count", "grid_chunksize"]
