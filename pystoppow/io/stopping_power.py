"""
Representation of tabulated stopping-power data for one projectile/target pair.

This module defines the :class:`StoppingPowerTable`, which stores and validates
stopping power vs. energy curves for a projectile in a solid target.

Main features
-------------

- Parsing from plain two-column text files or SRIM output files
- Validation (shape, finiteness, positivity, strictly increasing energy)
- Serialization to and from dictionaries
- Vectorised interpolation

Stopping powers are always stored in MeV/µm. Tables given per areal density
are converted at load time using the target density.

Examples
--------

>>> from pystoppow.io.stopping_power import StoppingPowerTable
>>> spt = StoppingPowerTable.from_txt("H_in_Al.txt")
>>> spt.density
2.702
>>> spt.energy[:3]
array([0.01, 0.011, 0.012])
"""

from pathlib import Path
import logging
import re
import warnings
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from pystoppow.exceptions import TableFormatError
from pystoppow.utils.interpolation import Interpolator

logger = logging.getLogger(__name__)

_FLOAT = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"

_SRIM_DENSITY = re.compile(
    rf"Target\s+Density\s*=\s*({_FLOAT})\s*(g/cm3|kg/m3)\s*=\s*({_FLOAT})\s*(atoms/cm3|atoms/m3)"
)
_SRIM_ROW = re.compile(rf"^\s*({_FLOAT})\s+(eV|keV|MeV|GeV)\s+({_FLOAT})\s+({_FLOAT})")
_SRIM_SCALE_KEV_UM = re.compile(rf"^\s*({_FLOAT})\s+keV\s*/\s*micron")
_SRIM_ION = re.compile(r"^\s*Ion\s*=\s*(\w+)")
# "-----------  ----------" under the column titles, and the long rule before the unit table
_SRIM_COLUMN_RULE = re.compile(r"^\s*-{5,}(?:\s+-{5,})+\s*$")
_SRIM_FOOTER_RULE = re.compile(r"^\s*-{20,}\s*$")

_ENERGY_UNITS = {"eV": 1e-6, "keV": 1e-3, "MeV": 1.0, "GeV": 1e3}


class StoppingPowerTable:
    """
    Container for a tabulated stopping-power curve.

    :attr UNITS_LENGTH: Label of the per-length stopping unit (MeV/µm).
    :attr UNITS_AREAL: Label of the per-areal-density stopping unit (MeV/(mg/cm²)).
    :attr REQUIRED_DICT_KEYS: Required dictionary keys for :meth:`from_dict`.
    """

    UNITS_LENGTH = "MeV/um"
    UNITS_AREAL = "MeV/(mg/cm2)"
    REQUIRED_DICT_KEYS = ["energy", "stopping", "density"]

    def __init__(self, energy: np.ndarray, stopping: np.ndarray, density: float,
                 ion: Optional[str] = None, target: Optional[str] = None,
                 source_program: Optional[str] = None):
        """
        Initialize a StoppingPowerTable.

        :param energy: Projectile kinetic energies in MeV, strictly increasing.
        :type energy: np.ndarray
        :param stopping: Corresponding stopping powers in MeV/µm, positive.
        :type stopping: np.ndarray
        :param density: Target mass density in g/cm³.
        :type density: float
        :param ion: Optional projectile label.
        :type ion: Optional[str]
        :param target: Optional target label.
        :type target: Optional[str]
        :param source_program: Optional name of the program that produced the data.
        :type source_program: Optional[str]

        :raises TableFormatError: If the data fail validation.
        """
        self.energy = np.asarray(energy, dtype=float)
        self.stopping = np.asarray(stopping, dtype=float)
        self.density = float(density)
        self.ion = ion
        self.target = target
        self.source_program = source_program

        self._validate()

    def __repr__(self):
        return (f"<StoppingPowerTable ion={self.ion}, target={self.target}, "
                f"E=[{self.Emin}, {self.Emax}] MeV, n={len(self.energy)}>")

    def __len__(self):
        return len(self.energy)

    @property
    def Emin(self) -> float:
        """Lowest tabulated energy (MeV)."""
        return float(self.energy[0])

    @property
    def Emax(self) -> float:
        """Highest tabulated energy (MeV)."""
        return float(self.energy[-1])

    @property
    def stopping_mgcm2(self) -> np.ndarray:
        """
        Stopping powers per areal density.

        :returns: Stopping powers in MeV/(mg/cm²).
        :rtype: np.ndarray
        """
        return self.stopping * 1e4 / (self.density * 1e3)

    def _validate(self):
        """
        Perform internal consistency checks on the input data.

        Validates that:
          - Energy and stopping arrays are one-dimensional with identical shape.
          - At least two points are provided.
          - All values are finite, stopping powers are positive.
          - Energy values are strictly increasing.
          - The density is positive.

        :raises TableFormatError: On any violation.
        :warns UserWarning: If the table contains energies below 1 keV.
        """
        if self.energy.ndim != 1 or self.energy.shape != self.stopping.shape:
            raise TableFormatError(
                f"Shape mismatch: energy {self.energy.shape}, stopping {self.stopping.shape}."
            )

        if len(self.energy) < 2:
            raise TableFormatError(
                f"Insufficient data points: got {len(self.energy)}, need at least 2."
            )

        if not np.isfinite(self.energy).all() or not np.isfinite(self.stopping).all():
            raise TableFormatError("Energy and stopping arrays must contain only finite values.")

        if not np.all(np.diff(self.energy) > 0):
            raise TableFormatError("Energy values must be strictly increasing with no duplicates.")

        if np.any(self.energy < 0) or np.any(self.stopping <= 0):
            raise TableFormatError("Energies must be non-negative and stopping powers positive.")

        if not np.isfinite(self.density) or self.density <= 0:
            raise TableFormatError(f"Target density must be positive, got {self.density}.")

        if self.energy[0] < 1e-3:
            warnings.warn(
                f"Table starts at {self.energy[0]:.3g} MeV; stopping data below 1 keV are rarely reliable.",
                UserWarning,
                stacklevel=3,
            )

    def to_dict(self) -> Dict:
        """
        Serialize the object to a dictionary.

        :returns: Dictionary containing metadata and the stopping-power table.
        :rtype: dict
        """
        return {
            "energy": self.energy.tolist(),
            "stopping": self.stopping.tolist(),
            "density": self.density,
            "ion": self.ion,
            "target": self.target,
            "source_program": self.source_program,
        }

    @staticmethod
    def from_dict(data: Dict) -> "StoppingPowerTable":
        """
        Create a :class:`StoppingPowerTable` instance from a serialized dictionary.

        **Expected dictionary format**::

            {
                "energy": [...],          # list of float, MeV
                "stopping": [...],        # list of float, MeV/um
                "density": 2.702,         # float, g/cm3
                "ion": "H",               # optional
                "target": "Al",           # optional
                "source_program": "SRIM"  # optional
            }

        :param data: Dictionary containing serialized table data.
        :type data: dict

        :returns: A new :class:`StoppingPowerTable` instance.
        :rtype: StoppingPowerTable

        :raises TableFormatError: If required fields are missing.
        """
        missing = [key for key in StoppingPowerTable.REQUIRED_DICT_KEYS if key not in data]
        if missing:
            raise TableFormatError(f"Missing required field(s) in dictionary: {', '.join(missing)}")

        return StoppingPowerTable(
            energy=np.array(data["energy"]),
            stopping=np.array(data["stopping"]),
            density=data["density"],
            ion=data.get("ion"),
            target=data.get("target"),
            source_program=data.get("source_program"),
        )

    def interpolate(self, *, energy: np.ndarray, loglog: bool = False) -> np.ndarray:
        """
        Interpolate stopping powers (MeV/µm) at the given energies.

        :param energy: Energy values in MeV.
        :type energy: np.ndarray
        :param loglog: Whether to perform interpolation in log-log space.
        :type loglog: bool

        :returns: Interpolated stopping powers.
        :rtype: np.ndarray
        """
        interpolator = Interpolator(self.energy, self.stopping, loglog=loglog)
        return interpolator.interpolate(energy=energy)

    @staticmethod
    def _read_lines(filepath: Union[str, Path]) -> List[str]:
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")
        with open(filepath, "r", errors="replace") as f:
            return f.readlines()

    @staticmethod
    def from_txt(filepath: Union[str, Path], density: Optional[float] = None) -> "StoppingPowerTable":
        """
        Create a :class:`StoppingPowerTable` from a plain two-column text file.

        The file may start with ``Key=Value`` header lines and may contain
        ``#`` comments. Every other non-blank line must hold at least two
        whitespace-separated numbers: energy (MeV) and stopping power.

        *Example*::

            # protons in aluminium
            Density=2.702
            Units=MeV/um
            Ion=H
            Target=Al
            SourceProgram=SRIM-2013
            0.1   0.0842
            0.2   0.0762
            ...

        Recognised header keys are ``Density`` (g/cm³), ``Units``
        (``MeV/um`` or ``MeV/(mg/cm2)``), ``Ion``, ``Target`` and ``SourceProgram``.

        :param filepath: Path to the input .txt file.
        :type filepath: str or Path
        :param density: Target density in g/cm³; overrides the header value.
        :type density: float, optional

        :returns: :class:`StoppingPowerTable` instance parsed from file.
        :rtype: StoppingPowerTable

        :raises FileNotFoundError: If the file does not exist.
        :raises TableFormatError: On malformed rows, unknown units, a missing density
                                  or data that fail validation.
        """
        lines = StoppingPowerTable._read_lines(filepath)

        header = {}
        rows = []
        for lineno, raw in enumerate(lines, start=1):
            line = raw.split("#", 1)[0].strip()
            if not line:
                continue
            if "=" in line:
                key, value = line.split("=", 1)
                header[key.strip()] = value.strip()
                continue
            fields = line.split()
            try:
                values = [float(v) for v in fields[:2]]
            except ValueError:
                raise TableFormatError(f"Line {lineno}: cannot parse numeric values from '{raw.rstrip()}'.")
            if len(values) < 2:
                raise TableFormatError(f"Line {lineno}: expected two columns, got '{raw.rstrip()}'.")
            rows.append(values)

        if density is None:
            if "Density" not in header:
                raise TableFormatError(
                    f"No target density in '{filepath}': add a 'Density=' header or pass density=."
                )
            try:
                density = float(header["Density"])
            except ValueError:
                raise TableFormatError(f"Invalid density value: {header['Density']}")

        if not rows:
            raise TableFormatError(f"No data rows found in '{filepath}'.")
        data = np.array(rows)
        energy, stopping = data[:, 0], data[:, 1]

        units = header.get("Units", StoppingPowerTable.UNITS_LENGTH).replace(" ", "")
        if units == StoppingPowerTable.UNITS_AREAL:
            stopping = stopping * density * 1e3 / 1e4
        elif units != StoppingPowerTable.UNITS_LENGTH:
            raise TableFormatError(
                f"Unsupported units: {units}. Use {StoppingPowerTable.UNITS_LENGTH} "
                f"or {StoppingPowerTable.UNITS_AREAL}."
            )

        logger.debug("Loaded %d rows from %s", len(energy), filepath)
        return StoppingPowerTable(
            energy=energy,
            stopping=stopping,
            density=density,
            ion=header.get("Ion"),
            target=header.get("Target"),
            source_program=header.get("SourceProgram"),
        )

    @staticmethod
    def _parse_srim_density(lines: List[str]) -> Tuple[float, float]:
        for line in lines:
            match = _SRIM_DENSITY.search(line)
            if match:
                rho, rho_units, n, n_units = match.groups()
                rho = float(rho) * (1e-3 if rho_units == "kg/m3" else 1.0)
                n = float(n) * (1e-6 if n_units == "atoms/m3" else 1.0)
                return rho, n
        raise TableFormatError("SRIM file has no 'Target Density' header line.")

    @staticmethod
    def _split_srim_sections(lines: List[str]) -> Tuple[int, int]:
        """Return the indices of the column underline and of the footer separator."""
        end = next((i for i, line in enumerate(lines) if _SRIM_FOOTER_RULE.match(line)), None)
        if end is None:
            raise TableFormatError("SRIM file has no separator line closing the stopping table.")
        start = next((i for i in range(end) if _SRIM_COLUMN_RULE.match(lines[i])), None)
        if start is None:
            raise TableFormatError("SRIM file has no column header underline above the stopping table.")
        return start, end

    @staticmethod
    def from_srim(filepath: Union[str, Path]) -> "StoppingPowerTable":
        """
        Create a :class:`StoppingPowerTable` from a SRIM stopping table output file.

        The file is split into a header (up to the dashed column underline),
        the stopping table, and a footer starting at the long dashed separator.
        Every non-blank table line must be a data row; rows are kept in file
        order, so the energies must already be increasing.

        The electronic and nuclear stopping columns are summed and converted
        to MeV/µm using the ``keV / micron`` factor listed in the footer
        ("Multiply Stopping by ... for Stopping Units"). The target density is
        read from the ``Target Density = ... g/cm3 = ... atoms/cm3`` header line.

        :param filepath: Path to the SRIM output file.
        :type filepath: str or Path

        :returns: :class:`StoppingPowerTable` instance parsed from file.
        :rtype: StoppingPowerTable

        :raises FileNotFoundError: If the file does not exist.
        :raises TableFormatError: If the section separators, the density, the data rows or
                                  the conversion factor are missing, if a table line is
                                  malformed, or if the energies are not strictly increasing.
        """
        lines = StoppingPowerTable._read_lines(filepath)
        start, end = StoppingPowerTable._split_srim_sections(lines)
        header, footer = lines[:start], lines[end:]
        density, number_density = StoppingPowerTable._parse_srim_density(header)

        rows = []
        for lineno in range(start + 1, end):
            line = lines[lineno]
            if not line.strip():
                continue
            match = _SRIM_ROW.match(line)
            if not match:
                raise TableFormatError(f"Line {lineno + 1}: malformed SRIM data row '{line.rstrip()}'.")
            E, unit, elec, nuc = match.groups()
            rows.append((float(E) * _ENERGY_UNITS[unit], float(elec) + float(nuc)))

        if not rows:
            raise TableFormatError(f"No stopping data rows found in SRIM file '{filepath}'.")

        scale_keV_um = None
        for line in footer:
            match = _SRIM_SCALE_KEV_UM.match(line)
            if match:
                scale_keV_um = float(match.group(1))
        if not scale_keV_um:
            raise TableFormatError(f"SRIM file '{filepath}' has no 'keV / micron' conversion factor.")

        data = np.array(rows)

        ion_match = next(filter(None, (_SRIM_ION.match(line) for line in header)), None)
        logger.debug("SRIM table %s: %d rows, rho=%g g/cc, n=%g /cc", filepath, len(data), density, number_density)
        return StoppingPowerTable(
            energy=data[:, 0],
            stopping=data[:, 1] * scale_keV_um * 1e-3,
            density=density,
            ion=ion_match.group(1) if ion_match else None,
            target=None,
            source_program="SRIM",
        )
