"""
Shared machinery for multi-species plasma stopping-power models.

This module defines:

- :class:`Species`: immutable descriptor of one field-particle population.
- :class:`PlasmaModel`: base for fully ionized plasma models (Li-Petrasso,
  Grabowski). Species are held as parallel numpy arrays for vectorised
  per-species sums; free electrons can be supplied explicitly or generated
  from quasi-neutrality.
- :class:`PartiallyIonizedModel`: base for models that split each ion's
  electrons into bound and free populations (Zimmerman, Mehlhorn).

All temperatures are in keV, masses in amu, number densities in 1/cm³.
"""

from dataclasses import dataclass
import math
from typing import Iterable, List, Optional, Sequence, Union

import numpy as np

from pystoppow.models import constants as const
from pystoppow.models.base import Mode, StoppingPowerModel
from pystoppow.transport.settings import IntegrationSettings

#: Electron mass in amu
ELECTRON_MASS_AMU = const.me / const.amu


@dataclass(frozen=True)
class Species:
    """
    One field-particle population.

    :ivar mass: Particle mass in amu.
    :ivar charge: Charge in units of e. For partially ionized models this is
        the nuclear charge Z; electrons have -1.
    :ivar temperature: Temperature in keV.
    :ivar density: Number density in 1/cm³.
    :ivar ionization: Mean ionization state Zbar (partially ionized models only).
    """

    mass: float
    charge: float
    temperature: float
    density: float
    ionization: Optional[float] = None

    def __post_init__(self):
        for name in ("mass", "temperature", "density"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0):
                raise ValueError(f"Species {name} must be positive and finite, got {value}.")
        if not math.isfinite(self.charge):
            raise ValueError(f"Species charge must be finite, got {self.charge}.")
        if self.ionization is not None and not (0 <= self.ionization <= self.charge):
            raise ValueError(
                f"Ionization must satisfy 0 <= Zbar <= Z, got Zbar={self.ionization}, Z={self.charge}."
            )

    @classmethod
    def electron(cls, temperature: float, density: float) -> "Species":
        """Free-electron population with the given temperature and density."""
        return cls(ELECTRON_MASS_AMU, -1.0, temperature, density)

    @property
    def is_electron(self) -> bool:
        return self.mass < 0.01

    @property
    def mass_density(self) -> float:
        """Mass density in g/cm³."""
        return self.mass * const.amu * self.density


def _validate_projectile(mt: float, Zt: float):
    if not (math.isfinite(mt) and mt > 0 and math.isfinite(Zt) and Zt > 0):
        raise ValueError(f"Projectile mass and charge must be positive, got mt={mt}, Zt={Zt}.")


def _species_from_arrays(*arrays: Sequence[float]) -> List[Species]:
    arrays = [np.atleast_1d(np.asarray(a, dtype=float)) for a in arrays]
    lengths = {len(a) for a in arrays}
    if len(lengths) != 1:
        raise ValueError(f"Field arrays must all have the same length, got {[len(a) for a in arrays]}.")
    return [Species(*map(float, row)) for row in zip(*arrays)]


class PlasmaModel(StoppingPowerModel):
    """
    Base class for fully ionized plasma models.

    :ivar mt: Projectile mass in amu.
    :ivar Zt: Projectile charge in units of e.
    :ivar species: Field species, electrons included, in insertion order.
    :ivar mf: Species masses (amu).
    :ivar Zf: Species charges (e).
    :ivar Tf: Species temperatures (keV).
    :ivar nf: Species number densities (1/cm³).
    """

    Emin = 0.1
    Emax = 30.0

    def __init__(self, mt: float, Zt: float, species: Iterable[Species], Te: Optional[float] = None,
                 mode: Union[Mode, str] = Mode.LENGTH,
                 settings: Optional[IntegrationSettings] = None):
        """
        Initialize the plasma composition.

        :param mt: Projectile mass in amu.
        :param Zt: Projectile charge in units of e.
        :param species: Field species. Must include electrons unless ``Te`` is given.
        :param Te: If given, free electrons at this temperature (keV) are appended
                   with density ``sum(Z * n)`` over the ion species.
        :param mode: Initial unit mode.
        :param settings: Integration settings for path queries.

        :raises ValueError: On invalid projectile parameters or an empty species list.
        """
        _validate_projectile(mt, Zt)
        species = list(species)
        if not species:
            raise ValueError("At least one field species is required.")
        if Te is not None:
            ne = sum(s.charge * s.density for s in species if not s.is_electron)
            if ne <= 0:
                raise ValueError("Cannot add electrons: ion species carry no positive charge.")
            species.append(Species.electron(Te, ne))

        self.mt = float(mt)
        self.Zt = float(Zt)
        self.species = tuple(species)
        self.mf = np.array([s.mass for s in species])
        self.Zf = np.array([s.charge for s in species])
        self.Tf = np.array([s.temperature for s in species])
        self.nf = np.array([s.density for s in species])

        super().__init__(float(np.sum(self.mf * const.amu * self.nf)), mode=mode, settings=settings)

    @classmethod
    def from_arrays(cls, mt: float, Zt: float, mf: Sequence[float], Zf: Sequence[float],
                    Tf: Sequence[float], nf: Sequence[float], Te: Optional[float] = None, **kwargs):
        """
        Build a model from parallel field arrays.

        :param mf: Species masses (amu).
        :param Zf: Species charges (e).
        :param Tf: Species temperatures (keV).
        :param nf: Species number densities (1/cm³).
        :param Te: Optional electron temperature; see ``__init__``.

        :raises ValueError: If the arrays differ in length or hold invalid values.
        """
        return cls(mt, Zt, _species_from_arrays(mf, Zf, Tf, nf), Te=Te, **kwargs)

    @classmethod
    def from_field(cls, mt: float, Zt: float, field: Sequence[Sequence[float]],
                   Te: Optional[float] = None, **kwargs):
        """
        Build a model from rows ``[m, Z, T, n]``, one per species.

        :raises ValueError: If a row does not have four entries.
        """
        rows = [tuple(row) for row in field]
        if any(len(row) != 4 for row in rows):
            raise ValueError("Each field row must be [mass, charge, temperature, density].")
        return cls(mt, Zt, [Species(*map(float, row)) for row in rows], Te=Te, **kwargs)

    def get_Emin(self) -> float:
        return self.Emin

    def get_Emax(self) -> float:
        return self.Emax

    def velocity(self, E: float) -> float:
        """Projectile speed in cm/s (non-relativistic)."""
        return const.c * math.sqrt(2.0 * E / (self.mt * const.amuc2_MeV))

    def thermal_velocity(self, constant: float = 2.0) -> np.ndarray:
        """Species thermal speeds ``sqrt(constant * kT / m)`` in cm/s."""
        return const.c * np.sqrt(constant * self.Tf * 1e-3 / (self.mf * const.amuc2_MeV))

    def debye_length(self) -> float:
        """Debye length of the field plasma in cm."""
        total = np.sum(4.0 * math.pi * self.nf * (self.Zf * const.e) ** 2 / (self.Tf * const.keVtoErg))
        return 1.0 / math.sqrt(total)

    def plasma_frequency(self) -> np.ndarray:
        """Species plasma frequencies in rad/s."""
        return np.sqrt(4.0 * math.pi * self.nf * (self.Zf * const.e) ** 2 / (self.mf * const.amu))

    def _summary_rows(self):
        rows = [("Projectile (mt, Zt)", f"{self.mt:g} amu, {self.Zt:g} e")]
        for i, s in enumerate(self.species):
            label = "e" if s.is_electron else f"ion {i}"
            rows.append((f"Species {label}", f"m={s.mass:.4g} Z={s.charge:g} T={s.temperature:g} keV n={s.density:.3e}"))
        return rows


class PartiallyIonizedModel(StoppingPowerModel):
    """
    Base class for partially ionized plasma models.

    Each ion species carries its nuclear charge ``Z`` and mean ionization
    ``Zbar``. Free electrons have temperature ``Te`` and density
    ``ne = sum(Zbar * n)``.

    :ivar mt: Projectile mass in amu.
    :ivar Zt: Projectile charge in units of e.
    :ivar species: Ion species in insertion order.
    :ivar Te: Electron temperature (keV).
    :ivar ne: Free-electron density (1/cm³).
    """

    Emin = 0.1
    Emax = 30.0

    def __init__(self, mt: float, Zt: float, species: Iterable[Species], Te: float,
                 mode: Union[Mode, str] = Mode.LENGTH,
                 settings: Optional[IntegrationSettings] = None):
        """
        Initialize the partially ionized composition.

        :param mt: Projectile mass in amu.
        :param Zt: Projectile charge in units of e.
        :param species: Ion species, each with ``ionization`` set.
        :param Te: Electron temperature in keV.
        :param mode: Initial unit mode.
        :param settings: Integration settings for path queries.

        :raises ValueError: On invalid projectile or electron parameters, an empty
                            species list, or a species without an ionization state.
        """
        _validate_projectile(mt, Zt)
        species = list(species)
        if not species:
            raise ValueError("At least one field species is required.")
        if any(s.ionization is None for s in species):
            raise ValueError("Every species of a partially ionized plasma needs an ionization state.")
        if any(s.is_electron for s in species):
            raise ValueError("Electrons are derived from the ionization states; do not list them.")
        if any(s.charge <= 0 for s in species):
            raise ValueError("Ion species of a partially ionized plasma need a positive nuclear charge.")
        if not (math.isfinite(Te) and Te > 0):
            raise ValueError(f"Electron temperature must be positive, got {Te}.")

        self.mt = float(mt)
        self.Zt = float(Zt)
        self.species = tuple(species)
        self.mf = np.array([s.mass for s in species])
        self.Zf = np.array([s.charge for s in species])
        self.Tf = np.array([s.temperature for s in species])
        self.nf = np.array([s.density for s in species])
        self.Zbar = np.array([s.ionization for s in species])
        self.Te = float(Te)
        self.ne = float(np.sum(self.Zbar * self.nf))

        super().__init__(float(np.sum(self.mf * const.amu * self.nf)), mode=mode, settings=settings)

    @classmethod
    def from_arrays(cls, mt: float, Zt: float, mf: Sequence[float], Zf: Sequence[float],
                    Tf: Sequence[float], nf: Sequence[float], Zbar: Sequence[float], Te: float, **kwargs):
        """
        Build a model from parallel field arrays.

        :raises ValueError: If the arrays differ in length or hold invalid values.
        """
        return cls(mt, Zt, _species_from_arrays(mf, Zf, Tf, nf, Zbar), Te, **kwargs)

    @classmethod
    def from_field(cls, mt: float, Zt: float, field: Sequence[Sequence[float]], Te: float, **kwargs):
        """
        Build a model from rows ``[m, Z, T, n, Zbar]``, one per ion species.

        :raises ValueError: If a row does not have five entries.
        """
        rows = [tuple(row) for row in field]
        if any(len(row) != 5 for row in rows):
            raise ValueError("Each field row must be [mass, charge, temperature, density, ionization].")
        return cls(mt, Zt, [Species(*map(float, row)) for row in rows], Te, **kwargs)

    def get_Emin(self) -> float:
        return self.Emin

    def get_Emax(self) -> float:
        return self.Emax

    def velocity(self, E: float) -> float:
        """Projectile speed in cm/s (non-relativistic)."""
        return const.c * math.sqrt(2.0 * E / (self.mt * const.amuc2_MeV))

    @property
    def electrons(self) -> Optional[Species]:
        """The free-electron population, or None for a neutral gas."""
        if self.ne > 0:
            return Species.electron(self.Te, self.ne)
        return None

    def _summary_rows(self):
        rows = [
            ("Projectile (mt, Zt)", f"{self.mt:g} amu, {self.Zt:g} e"),
            ("Electrons", f"Te={self.Te:g} keV ne={self.ne:.3e}"),
        ]
        for i, s in enumerate(self.species):
            rows.append((f"Species {i}", f"m={s.mass:.4g} Z={s.charge:g} Zbar={s.ionization:g} "
                                         f"T={s.temperature:g} keV n={s.density:.3e}"))
        return rows
