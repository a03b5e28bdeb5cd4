"""
Numerical settings for the path-integration engine.

:class:`IntegrationSettings` gathers the solver choice, tolerances and
iteration budgets used by :mod:`pystoppow.transport.engine`, together with
the convention applied when a particle ranges out. Instances are immutable;
use :func:`dataclasses.replace` to derive a variant.

Examples
--------

>>> settings = IntegrationSettings.from_dict({"rtol": 1e-10, "ranged_out_energy": "emin"})
>>> model = LiPetrasso(..., settings=settings)
"""

from dataclasses import dataclass, asdict
from typing import Literal
import math

from tabulate import tabulate

RANGED_OUT_POLICIES = ("zero", "emin")
ODE_METHODS = ("RK45", "RK23", "DOP853", "LSODA", "Radau", "BDF")


@dataclass(frozen=True)
class IntegrationSettings:
    """
    Configuration container for path integration.

    :ivar method: :func:`scipy.integrate.solve_ivp` method for forward integration.
    :ivar rtol: Relative tolerance of the ODE solver.
    :ivar atol: Absolute tolerance of the ODE solver (MeV).
    :ivar max_step: Largest step the ODE solver may take (µm or mg/cm²).
    :ivar energy_xtol: Absolute tolerance of the entrance-energy root finder (MeV).
    :ivar energy_rtol: Relative tolerance of the entrance-energy root finder.
    :ivar max_iterations: Iteration cap of the entrance-energy root finder.
    :ivar quad_limit: Subinterval cap of the thickness quadrature.
    :ivar quad_epsrel: Relative tolerance of the thickness quadrature.
    :ivar ranged_out_energy: Energy reported when a particle ranges out,
        ``"zero"`` (0 MeV) or ``"emin"`` (the model's lower domain bound).
    :ivar range_Emin: Final energy (MeV) used by ``Range`` queries.
    """

    @classmethod
    def from_dict(cls, config: dict) -> "IntegrationSettings":
        """
        Create an IntegrationSettings instance from a dictionary.

        :param config: Dictionary of configuration fields.
        :type config: dict

        :returns: Populated IntegrationSettings instance.
        :rtype: IntegrationSettings

        :raises ValueError: If unknown keys are present in the dictionary.
        """
        valid_keys = set(cls.__dataclass_fields__.keys())
        extra_keys = set(config.keys()) - valid_keys
        if extra_keys:
            raise ValueError(
                f"Unrecognized keys in IntegrationSettings config: {sorted(extra_keys)}"
            )
        return cls(**config)

    method: str = "RK45"
    rtol: float = 1e-8
    atol: float = 1e-10
    max_step: float = math.inf

    energy_xtol: float = 1e-9
    energy_rtol: float = 1e-10
    max_iterations: int = 200

    quad_limit: int = 200
    quad_epsrel: float = 1e-8

    ranged_out_energy: Literal["zero", "emin"] = "zero"
    range_Emin: float = 0.02

    def __post_init__(self):
        if self.method not in ODE_METHODS:
            raise ValueError(f"Unknown ODE method '{self.method}'. Choose from {ODE_METHODS}.")
        if self.ranged_out_energy not in RANGED_OUT_POLICIES:
            raise ValueError(
                f"ranged_out_energy must be one of {RANGED_OUT_POLICIES}, got '{self.ranged_out_energy}'."
            )
        for name in ("rtol", "atol", "max_step", "energy_xtol", "energy_rtol", "quad_epsrel"):
            if not getattr(self, name) > 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}.")
        for name in ("max_iterations", "quad_limit"):
            if int(getattr(self, name)) < 1:
                raise ValueError(f"{name} must be at least 1, got {getattr(self, name)}.")
        if self.range_Emin < 0:
            raise ValueError(f"range_Emin must be non-negative, got {self.range_Emin}.")

    def summary(self):
        """Print the settings as a table."""
        rows = [(key, value) for key, value in asdict(self).items()]
        print(tabulate(rows, headers=["Setting", "Value"], tablefmt="fancy_grid"))


DEFAULT_SETTINGS = IntegrationSettings()
