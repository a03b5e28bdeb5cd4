"""
Interpolation utilities for tabulated stopping-power curves.

This module defines two tools:

- :class:`TableCursor`: scalar lookup with a cached bracketing index. The
  path-integration engine sweeps energy monotonically, so consecutive queries
  almost always fall in the same or a neighbouring table interval. The cursor
  checks those first and only falls back to a binary search when the query
  jumps.
- :class:`Interpolator`: vectorised energy → value interpolation built on
  :func:`numpy.interp`, used for batch evaluation and resampling.

Both support linear or log-log interpolation and refuse to extrapolate.

Examples
--------

>>> cursor = TableCursor([1.0, 10.0], [10.0, 5.0])
>>> cursor(5.0)
7.777...
>>> Interpolator([1.0, 10.0], [10.0, 5.0]).interpolate(energy=[1.0, 10.0])
array([10.,  5.])
"""

from typing import Sequence, Union
import numpy as np


class TableCursor:
    """
    Piecewise interpolant over a strictly increasing abscissa with an index hint.

    The hint is the only mutable state. Any hint value is a valid starting
    point, so sharing a cursor between callers can cost extra searches but
    never produces a wrong result.
    """

    def __init__(self, x: np.ndarray, y: np.ndarray, loglog: bool = False):
        """
        Initialize the cursor.

        :param x: Strictly increasing abscissa (at least two points).
        :type x: np.ndarray
        :param y: Ordinate values, same shape as ``x``.
        :type y: np.ndarray
        :param loglog: If True, interpolate linearly in log-log space.
        :type loglog: bool

        :raises ValueError: On shape mismatch, fewer than two points,
                            non-increasing abscissa, or non-positive values in log-log mode.
        """
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        if x.shape != y.shape or x.ndim != 1:
            raise ValueError(f"Shape mismatch: x {x.shape}, y {y.shape}.")
        if len(x) < 2:
            raise ValueError("At least two points are required for interpolation.")
        if not np.all(np.diff(x) > 0):
            raise ValueError("Abscissa must be strictly increasing.")
        if loglog and (np.any(x <= 0) or np.any(y <= 0)):
            raise ValueError("Log-log interpolation requires all values to be > 0.")

        self.loglog = loglog
        self.x_min = float(x[0])
        self.x_max = float(x[-1])
        self._x = np.log(x) if loglog else x
        self._y = np.log(y) if loglog else y
        self._last = len(x) - 2
        self._index = 0

    @property
    def index(self) -> int:
        """Index of the interval used by the most recent lookup."""
        return self._index

    def locate(self, value: float) -> int:
        """
        Return ``i`` such that ``x[i] <= value <= x[i + 1]``.

        :param value: Abscissa value, already transformed to log space in log-log mode.
        :type value: float

        :returns: Interval index in ``[0, len(x) - 2]``.
        :rtype: int
        """
        x = self._x
        i = self._index
        if x[i] <= value <= x[i + 1]:
            return i
        if i > 0 and x[i - 1] <= value < x[i]:
            i -= 1
        elif i < self._last and x[i + 1] < value <= x[i + 2]:
            i += 1
        else:
            i = int(np.searchsorted(x, value, side="right")) - 1
            i = min(max(i, 0), self._last)
        self._index = i
        return i

    def __call__(self, value: float) -> float:
        """
        Interpolate at a single point.

        :param value: Abscissa value within ``[x_min, x_max]``.
        :type value: float

        :returns: Interpolated ordinate.
        :rtype: float

        :raises ValueError: If ``value`` is outside the tabulated range.
        """
        if not (self.x_min <= value <= self.x_max):
            raise ValueError(f"Value {value} out of bounds: [{self.x_min}, {self.x_max}].")
        u = np.log(value) if self.loglog else value
        i = self.locate(u)
        x0, x1 = self._x[i], self._x[i + 1]
        y0, y1 = self._y[i], self._y[i + 1]
        result = y0 + (y1 - y0) * (u - x0) / (x1 - x0)
        return float(np.exp(result)) if self.loglog else float(result)


class Interpolator:
    """
    Vectorised interpolator for stopping-power curves.

    Applies log-log interpolation when requested; both axes must then be positive.
    """

    def __init__(self, energy: np.ndarray, values: np.ndarray, loglog: bool = False):
        """
        Initialize the Interpolator.

        :param energy: Array of energy values (x-axis), strictly increasing.
        :type energy: np.ndarray
        :param values: Array of stopping-power values (y-axis).
        :type values: np.ndarray
        :param loglog: If True, applies log-log interpolation.
        :type loglog: bool
        """
        self.energy = np.asarray(energy, dtype=float)
        self.values = np.asarray(values, dtype=float)
        self.loglog = loglog

    def interpolate(self, *, energy: Union[float, Sequence[float]]) -> np.ndarray:
        """
        Interpolate values at one or more energies.

        :param energy: A single energy value or a sequence of energy values.
        :type energy: float or Sequence[float]

        :returns: Array of interpolated values.
        :rtype: np.ndarray

        :raises ValueError: If any energy input is outside the range of known energies,
                            or if log-log mode is used with non-positive values.
        """
        energy_input = np.atleast_1d(np.asarray(energy, dtype=float))
        min_e, max_e = self.energy.min(), self.energy.max()

        if np.any(energy_input < min_e) or np.any(energy_input > max_e):
            raise ValueError(f"Energy input(s) {energy_input} out of bounds: [{min_e}, {max_e}].")

        x = self.energy
        y = self.values

        if self.loglog:
            if np.any(x <= 0) or np.any(y <= 0):
                raise ValueError("Log-log interpolation requires all values to be > 0.")
            return np.exp(np.interp(np.log(energy_input), np.log(x), np.log(y)))
        return np.interp(energy_input, x, y)
