"""
Stopping power interpolated from a table.

:class:`TabulatedStoppingPower` wraps a validated
:class:`~pystoppow.io.stopping_power.StoppingPowerTable` and interpolates it
with a :class:`~pystoppow.utils.interpolation.TableCursor`. The validity
domain is the tabulated energy range; queries outside it raise
:class:`~pystoppow.exceptions.DomainError` rather than extrapolate.

Examples
--------

>>> model = TabulatedStoppingPower.from_srim("Hydrogen in Aluminum.txt")
>>> model.dEdx(10.0)
0.00916...
>>> model.set_mode("areal_density")
>>> model.Thickness(10.0, 5.0)
112.3...
"""

from pathlib import Path
from typing import Optional, Union

import numpy as np

from pystoppow.io.stopping_power import StoppingPowerTable
from pystoppow.models.base import Mode, StoppingPowerModel
from pystoppow.transport.settings import IntegrationSettings
from pystoppow.utils.interpolation import TableCursor


class TabulatedStoppingPower(StoppingPowerModel):
    """Stopping-power model backed by a tabulated curve."""

    model_type = "Tabulated"

    def __init__(self, table: StoppingPowerTable, loglog: bool = False,
                 mode: Union[Mode, str] = Mode.LENGTH,
                 settings: Optional[IntegrationSettings] = None):
        """
        Initialize the model from a table.

        :param table: Validated stopping-power table (MeV vs MeV/µm).
        :type table: StoppingPowerTable
        :param loglog: Interpolate in log-log space instead of linearly.
        :type loglog: bool
        :param mode: Initial unit mode.
        :type mode: Mode or str
        :param settings: Integration settings for path queries.
        :type settings: IntegrationSettings, optional
        """
        super().__init__(table.density, mode=mode, settings=settings)
        self.table = table
        self._cursor = TableCursor(table.energy, table.stopping, loglog=loglog)
        self._Emin = table.Emin
        self._Emax = table.Emax
        self.info = " ".join(
            f"{key}={value}" for key, value in
            (("ion", table.ion), ("target", table.target), ("source", table.source_program))
            if value
        )

    @classmethod
    def from_txt(cls, filepath: Union[str, Path], density: Optional[float] = None, **kwargs) -> "TabulatedStoppingPower":
        """
        Build a model from a plain two-column text file.

        See :meth:`~pystoppow.io.stopping_power.StoppingPowerTable.from_txt` for the format.
        """
        return cls(StoppingPowerTable.from_txt(filepath, density=density), **kwargs)

    @classmethod
    def from_srim(cls, filepath: Union[str, Path], **kwargs) -> "TabulatedStoppingPower":
        """Build a model from a SRIM stopping table output file."""
        return cls(StoppingPowerTable.from_srim(filepath), **kwargs)

    @classmethod
    def from_arrays(cls, energy, stopping, density: float, **kwargs) -> "TabulatedStoppingPower":
        """
        Build a model directly from arrays.

        :param energy: Energies in MeV, strictly increasing.
        :param stopping: Stopping powers in MeV/µm.
        :param density: Target density in g/cm³.
        """
        return cls(StoppingPowerTable(np.asarray(energy), np.asarray(stopping), density), **kwargs)

    def get_Emin(self) -> float:
        return self._Emin

    def get_Emax(self) -> float:
        return self._Emax

    def _stopping_power(self, E: float) -> float:
        return self._cursor(E)

    def _summary_rows(self):
        return [
            ("Table points", len(self.table)),
            ("Interpolation", "log-log" if self._cursor.loglog else "linear"),
        ]
