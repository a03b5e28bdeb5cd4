"""
Common contract for stopping-power models.

This module defines:

- :class:`Mode`: the unit system of rates and thicknesses (LENGTH or AREAL_DENSITY).
- :class:`StoppingPowerModel`: the abstract base every model implements.

A model is built once from its composition and physical parameters; after
that its only mutable state is the unit mode. The mode is not guarded by a
lock. When one instance is shared between callers, changing the mode and
querying must happen under the callers' own synchronisation, or each unit of
work should use its own instance. The integration engine reads the mode once
per call via :meth:`StoppingPowerModel.rate_function`, so a call in progress
is never affected by a later mode change.

Energies are always in MeV. In LENGTH mode rates are MeV/µm and thicknesses
µm; in AREAL_DENSITY mode rates are MeV/(mg/cm²) and thicknesses mg/cm².
"""

from abc import ABC, abstractmethod
from enum import Enum
import logging
from typing import Callable, List, Optional, Tuple, Union

from tabulate import tabulate

from pystoppow.exceptions import DomainError
from pystoppow.transport import engine
from pystoppow.transport.engine import PathResult
from pystoppow.transport.settings import DEFAULT_SETTINGS, IntegrationSettings

logger = logging.getLogger(__name__)


class Mode(Enum):
    """Unit system of a model's rates and thicknesses."""

    LENGTH = "length"
    AREAL_DENSITY = "areal_density"

    @classmethod
    def coerce(cls, value: Union["Mode", str]) -> "Mode":
        """
        Convert a string such as ``"length"`` or ``"areal_density"`` to a :class:`Mode`.

        ``"rhor"`` is accepted as an alias of AREAL_DENSITY.

        :raises ValueError: If the value is not a known mode.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key == "rhor":
            return cls.AREAL_DENSITY
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown mode '{value}'. Use one of {[m.value for m in cls]}.")

    @property
    def rate_unit(self) -> str:
        return "MeV/um" if self is Mode.LENGTH else "MeV/(mg/cm2)"

    @property
    def thickness_unit(self) -> str:
        return "um" if self is Mode.LENGTH else "mg/cm2"


class StoppingPowerModel(ABC):
    """
    Abstract stopping-power model.

    Subclasses implement :meth:`_stopping_power` (MeV/µm, called only inside
    the validity domain), :meth:`get_Emin` and :meth:`get_Emax`, and pass the
    target mass density to ``__init__``.

    :attr model_type: Short human-readable name of the model.
    """

    model_type = "Abstract"

    def __init__(self, density: float, mode: Union[Mode, str] = Mode.LENGTH,
                 settings: Optional[IntegrationSettings] = None):
        """
        Initialize the shared model state.

        :param density: Target mass density in g/cm³.
        :type density: float
        :param mode: Initial unit mode.
        :type mode: Mode or str
        :param settings: Integration settings for path queries.
        :type settings: IntegrationSettings, optional

        :raises ValueError: If the density is not positive.
        """
        density = float(density)
        if not density > 0:
            raise ValueError(f"Target density must be positive, got {density}.")
        self._density = density
        self._um_to_mgcm2 = 1e4 / (density * 1e3)
        self._mode = Mode.coerce(mode)
        self.settings = settings if settings is not None else DEFAULT_SETTINGS
        self.info = ""

    def __repr__(self):
        return (f"<{type(self).__name__} E=[{self.get_Emin():g}, {self.get_Emax():g}] MeV, "
                f"rho={self.density:g} g/cc, mode={self._mode.value}>")

    # --- mode accessors ---

    @property
    def mode(self) -> Mode:
        """Current unit mode."""
        return self._mode

    @mode.setter
    def mode(self, value: Union[Mode, str]):
        mode = Mode.coerce(value)
        if mode is not self._mode:
            logger.debug("%s switched to %s mode.", self.model_type, mode.value)
        self._mode = mode

    def set_mode(self, mode: Union[Mode, str]):
        """
        Set the unit mode used by subsequent calls.

        Passing a :class:`Mode` always succeeds. Strings are converted with
        :meth:`Mode.coerce`; an unknown string leaves the current mode unchanged.

        :param mode: New unit mode.
        :type mode: Mode or str

        :raises ValueError: If ``mode`` is a string that names no mode.
        """
        self.mode = mode

    def get_mode(self) -> Mode:
        """Return the current unit mode."""
        return self._mode

    @property
    def density(self) -> float:
        """Target mass density in g/cm³."""
        return self._density

    # --- to be provided by subclasses ---

    @abstractmethod
    def _stopping_power(self, E: float) -> float:
        """Stopping power in MeV/µm at ``E`` (MeV), already domain-checked."""

    @abstractmethod
    def get_Emin(self) -> float:
        """Lower bound of the validity domain, MeV."""

    @abstractmethod
    def get_Emax(self) -> float:
        """Upper bound of the validity domain, MeV."""

    # --- rate evaluation ---

    def _check_domain(self, E: float) -> float:
        E = float(E)
        Emin, Emax = self.get_Emin(), self.get_Emax()
        if not (Emin <= E <= Emax):
            raise DomainError(E, Emin, Emax)
        return E

    def dEdx_MeV_um(self, E: float) -> float:
        """
        Stopping power per unit length.

        :param E: Projectile energy in MeV.
        :type E: float

        :returns: Stopping power in MeV/µm (positive).
        :rtype: float

        :raises DomainError: If ``E`` is outside ``[Emin, Emax]``.
        """
        return float(self._stopping_power(self._check_domain(E)))

    def dEdx_MeV_mgcm2(self, E: float) -> float:
        """
        Stopping power per unit areal density.

        :param E: Projectile energy in MeV.
        :type E: float

        :returns: Stopping power in MeV/(mg/cm²) (positive).
        :rtype: float

        :raises DomainError: If ``E`` is outside ``[Emin, Emax]``.
        """
        return self.dEdx_MeV_um(E) * self._um_to_mgcm2

    def rate_function(self, mode: Optional[Union[Mode, str]] = None) -> Callable[[float], float]:
        """
        Return the rate function for a fixed unit mode.

        :param mode: Mode to use; defaults to the current mode.
        :type mode: Mode or str, optional

        :returns: Callable mapping energy (MeV) to stopping power in that mode's unit.
        :rtype: Callable[[float], float]
        """
        mode = self._mode if mode is None else Mode.coerce(mode)
        return self.dEdx_MeV_um if mode is Mode.LENGTH else self.dEdx_MeV_mgcm2

    def dEdx(self, E: float) -> float:
        """
        Stopping power in the current mode's unit.

        :param E: Projectile energy in MeV.
        :type E: float

        :returns: MeV/µm in LENGTH mode, MeV/(mg/cm²) in AREAL_DENSITY mode.
        :rtype: float

        :raises DomainError: If ``E`` is outside ``[Emin, Emax]``.
        """
        return self.rate_function()(E)

    # --- path queries ---

    def Eout(self, E: float, x: float, full_output: bool = False) -> Union[float, Tuple[float, PathResult]]:
        """
        Exit energy after traversing a thickness.

        :param E: Entrance energy in MeV.
        :type E: float
        :param x: Thickness in the current mode's unit.
        :type x: float
        :param full_output: If True, also return the :class:`~pystoppow.transport.engine.PathResult`
                            with the ranged-out flag.
        :type full_output: bool

        :returns: Exit energy in MeV, or ``(energy, PathResult)``.
        :rtype: float or tuple
        """
        result = engine.energy_out(self, E, x)
        if full_output:
            return result.energy, result
        return result.energy

    def Ein(self, E: float, x: float) -> float:
        """
        Entrance energy required to exit a thickness with energy ``E``.

        :param E: Exit energy in MeV.
        :type E: float
        :param x: Thickness in the current mode's unit.
        :type x: float

        :returns: Entrance energy in MeV.
        :rtype: float
        """
        return engine.energy_in(self, E, x)

    def Thickness(self, E1: float, E2: float) -> float:
        """
        Thickness over which the particle slows from ``E1`` to ``E2``.

        :param E1: Entrance energy in MeV.
        :type E1: float
        :param E2: Exit energy in MeV.
        :type E2: float

        :returns: Thickness in the current mode's unit.
        :rtype: float
        """
        return engine.thickness(self, E1, E2)

    def Range(self, E: float) -> float:
        """
        Range of a particle with energy ``E``.

        :param E: Initial energy in MeV.
        :type E: float

        :returns: Range in the current mode's unit.
        :rtype: float
        """
        return engine.particle_range(self, E)

    # --- reporting ---

    def _summary_rows(self) -> List[Tuple[str, object]]:
        return []

    def summary(self, verbose: bool = False):
        """
        Print a summary of the model configuration.

        :param verbose: If True, also print the integration settings.
        :type verbose: bool, optional
        """
        rows = [
            ("Model", self.model_type),
            ("Emin [MeV]", self.get_Emin()),
            ("Emax [MeV]", self.get_Emax()),
            ("Density [g/cm³]", self.density),
            ("Mode", f"{self._mode.value} ({self._mode.rate_unit})"),
        ]
        rows.extend(self._summary_rows())
        if self.info:
            rows.append(("Info", self.info))

        print("\nStopping-power model")
        print(tabulate(rows, headers=["Parameter", "Value"], tablefmt="fancy_grid"))
        if verbose:
            self.settings.summary()
