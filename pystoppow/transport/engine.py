"""
Path-integration engine.

Stateless algorithms that turn a model's stopping-power function into
path-integrated quantities. Every function takes any object implementing
:class:`~pystoppow.models.base.StoppingPowerModel` and reads its unit mode
exactly once, through :meth:`~pystoppow.models.base.StoppingPowerModel.rate_function`.

- :func:`energy_out`: exit energy after a given thickness (adaptive Runge-Kutta
  via :func:`scipy.integrate.solve_ivp`, with a terminal event at ``Emin``).
- :func:`energy_in`: entrance energy for a given exit energy and thickness
  (:func:`scipy.optimize.brentq` over the forward integrator).
- :func:`thickness`: path length between two energies (:func:`scipy.integrate.quad`
  of the inverse stopping power).
- :func:`particle_range`: thickness from an energy down to the range cutoff.

Distances are in µm when the model is in LENGTH mode and in mg/cm² in
AREAL_DENSITY mode.
"""

from dataclasses import dataclass
import logging
import math
from typing import Callable, Optional

from scipy.integrate import quad, solve_ivp
from scipy.optimize import brentq

from pystoppow.exceptions import ConvergenceError, DomainError, RangeError
from pystoppow.transport.settings import IntegrationSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathResult:
    """
    Outcome of a forward path integration.

    :ivar energy: Exit energy in MeV (the ranged-out floor when ``ranged_out``).
    :ivar ranged_out: True if the particle stopped before traversing the full thickness.
    :ivar distance: Path length actually traversed, in the mode's thickness unit.
    """

    energy: float
    ranged_out: bool
    distance: float


def _settings_for(model, settings: Optional[IntegrationSettings]) -> IntegrationSettings:
    return settings if settings is not None else model.settings


def _check_energy(E: float, Emin: float, Emax: float, what: str = "Energy") -> float:
    E = float(E)
    if not (Emin <= E <= Emax):
        raise DomainError(E, Emin, Emax,
                          f"{what} {E!r} MeV is outside the valid domain [{Emin}, {Emax}] MeV.")
    return E


def _check_thickness(x: float) -> float:
    x = float(x)
    if not math.isfinite(x) or x < 0:
        raise ValueError(f"Thickness must be finite and non-negative, got {x}.")
    return x


def _propagate(rate: Callable[[float], float], Emin: float, Emax: float,
               E: float, x: float, settings: IntegrationSettings) -> PathResult:
    """
    Integrate ``dE/ds = -rate(E)`` from ``s = 0`` to ``s = x``.

    Trial stages of the Runge-Kutta step may undershoot ``Emin``; the rate is
    evaluated at the clamped energy there. When the particle reaches ``Emin``
    the terminal event stops the solver and the result carries
    ``energy = Emin``, ``ranged_out = True`` and the stopping distance.

    :raises ConvergenceError: If the ODE solver fails.
    """
    if E <= Emin:
        return PathResult(Emin, True, 0.0)

    def rhs(s, y):
        return [-rate(min(max(y[0], Emin), Emax))]

    def stopped(s, y):
        return y[0] - Emin

    stopped.terminal = True
    stopped.direction = -1

    sol = solve_ivp(
        rhs, (0.0, x), [E],
        method=settings.method,
        rtol=settings.rtol,
        atol=settings.atol,
        max_step=settings.max_step,
        events=stopped,
    )
    if sol.status == -1:
        raise ConvergenceError(f"Forward integration failed at E={E} MeV, x={x}: {sol.message}")

    if sol.status == 1:
        return PathResult(Emin, True, float(sol.t_events[0][0]))

    E_final = float(sol.y[0, -1])
    if E_final <= Emin:
        return PathResult(Emin, True, x)
    return PathResult(E_final, False, x)


def _path_length(rate: Callable[[float], float], E_in: float, E_out: float,
                 settings: IntegrationSettings) -> float:
    """Integrate the inverse stopping power from E_out to E_in."""
    def inverse_rate(energy):
        value = rate(energy)
        if not value > 0:
            raise RangeError(
                f"Stopping power vanishes at {energy} MeV; {E_out} MeV is unreachable from {E_in} MeV."
            )
        return 1.0 / value

    out = quad(inverse_rate, E_out, E_in,
               limit=settings.quad_limit, epsrel=settings.quad_epsrel, full_output=1)
    if len(out) > 3:
        raise ConvergenceError(f"Thickness quadrature from {E_in} to {E_out} MeV failed: {out[3]}")
    return float(out[0])


def energy_out(model, E: float, x: float,
               settings: Optional[IntegrationSettings] = None) -> PathResult:
    """
    Compute the exit energy of a particle after traversing a thickness.

    A particle that reaches the model's ``Emin`` before ``x`` is consumed is
    reported as ranged out. Its energy is then 0 or ``Emin`` according to
    ``settings.ranged_out_energy``.

    :param model: Stopping-power model.
    :type model: StoppingPowerModel
    :param E: Entrance energy in MeV.
    :type E: float
    :param x: Thickness in µm (LENGTH) or mg/cm² (AREAL_DENSITY).
    :type x: float
    :param settings: Optional override of the model's integration settings.
    :type settings: IntegrationSettings, optional

    :returns: Exit energy, ranged-out flag and distance traversed.
    :rtype: PathResult

    :raises DomainError: If ``E`` is outside the model's validity domain.
    :raises ValueError: If ``x`` is negative or not finite.
    :raises ConvergenceError: If the ODE solver fails.
    """
    settings = _settings_for(model, settings)
    rate = model.rate_function()
    Emin, Emax = model.get_Emin(), model.get_Emax()
    E = _check_energy(E, Emin, Emax)
    x = _check_thickness(x)

    if x == 0:
        return PathResult(E, False, 0.0)

    result = _propagate(rate, Emin, Emax, E, x, settings)
    if result.ranged_out:
        floor = 0.0 if settings.ranged_out_energy == "zero" else Emin
        logger.debug("Particle at %g MeV ranged out after %g of %g", E, result.distance, x)
        return PathResult(floor, True, result.distance)
    return result


def energy_in(model, E: float, x: float,
              settings: Optional[IntegrationSettings] = None) -> float:
    """
    Compute the entrance energy required to exit a thickness with a given energy.

    The forward integrator is inverted with Brent's method on
    ``[E, Emax]``. For trial entrance energies that range out, the residual is
    continued linearly past ``Emin`` so that it stays strictly monotonic.

    :param model: Stopping-power model.
    :type model: StoppingPowerModel
    :param E: Exit energy in MeV.
    :type E: float
    :param x: Thickness in µm (LENGTH) or mg/cm² (AREAL_DENSITY).
    :type x: float
    :param settings: Optional override of the model's integration settings.
    :type settings: IntegrationSettings, optional

    :returns: Entrance energy in MeV.
    :rtype: float

    :raises DomainError: If ``E`` is outside the domain, or the required
                         entrance energy would exceed ``Emax``.
    :raises ValueError: If ``x`` is negative or not finite.
    :raises ConvergenceError: If the root finder does not converge.
    """
    settings = _settings_for(model, settings)
    rate = model.rate_function()
    Emin, Emax = model.get_Emin(), model.get_Emax()
    E = _check_energy(E, Emin, Emax, "Exit energy")
    x = _check_thickness(x)

    if x == 0:
        return E

    rate_floor = rate(Emin)

    def residual(Ein):
        result = _propagate(rate, Emin, Emax, Ein, x, settings)
        if result.ranged_out:
            return Emin - (x - result.distance) * rate_floor - E
        return result.energy - E

    f_hi = residual(Emax)
    if f_hi < 0:
        raise DomainError(
            E, Emin, Emax,
            f"Exit energy {E} MeV after {x} requires an entrance energy above Emax={Emax} MeV."
        )
    if f_hi == 0:
        return Emax

    f_lo = residual(E)
    if f_lo >= 0:
        return E

    root, info = brentq(
        residual, E, Emax,
        xtol=settings.energy_xtol,
        rtol=settings.energy_rtol,
        maxiter=settings.max_iterations,
        full_output=True,
        disp=False,
    )
    if not info.converged:
        raise ConvergenceError(
            f"Entrance energy search did not converge after {info.iterations} iterations: {info.flag}"
        )
    logger.debug("Ein(%g MeV, %g) = %g MeV in %d iterations", E, x, root, info.iterations)
    return float(root)


def thickness(model, E_in: float, E_out: float,
              settings: Optional[IntegrationSettings] = None) -> float:
    """
    Compute the path length over which a particle slows from ``E_in`` to ``E_out``.

    Evaluates ``∫ dE / S(E)`` from ``E_out`` to ``E_in`` by adaptive quadrature.

    :param model: Stopping-power model.
    :type model: StoppingPowerModel
    :param E_in: Entrance energy in MeV.
    :type E_in: float
    :param E_out: Exit energy in MeV.
    :type E_out: float
    :param settings: Optional override of the model's integration settings.
    :type settings: IntegrationSettings, optional

    :returns: Thickness in µm (LENGTH) or mg/cm² (AREAL_DENSITY).
    :rtype: float

    :raises DomainError: If ``E_in`` is outside the model's validity domain.
    :raises RangeError: If ``E_out > E_in``, or ``E_out`` is below ``Emin`` and
                        therefore cannot be reached, or the stopping power
                        vanishes along the path.
    :raises ConvergenceError: If the quadrature does not meet its tolerance.
    """
    settings = _settings_for(model, settings)
    rate = model.rate_function()
    Emin, Emax = model.get_Emin(), model.get_Emax()
    E_in = _check_energy(E_in, Emin, Emax, "Entrance energy")
    E_out = float(E_out)

    if math.isnan(E_out) or E_out > E_in:
        raise RangeError(f"Exit energy {E_out} MeV exceeds entrance energy {E_in} MeV.")
    if E_out == E_in:
        return 0.0
    if E_out < Emin:
        raise RangeError(
            f"Exit energy {E_out} MeV is unreachable: the particle ranges out at Emin={Emin} MeV."
        )

    return _path_length(rate, E_in, E_out, settings)


def particle_range(model, E: float, settings: Optional[IntegrationSettings] = None) -> float:
    """
    Compute the range of a particle, i.e. the thickness needed to slow it to
    ``max(Emin, settings.range_Emin)``.

    :param model: Stopping-power model.
    :type model: StoppingPowerModel
    :param E: Initial energy in MeV.
    :type E: float
    :param settings: Optional override of the model's integration settings.
    :type settings: IntegrationSettings, optional

    :returns: Range in µm (LENGTH) or mg/cm² (AREAL_DENSITY).
    :rtype: float

    :raises DomainError: If ``E`` is outside the model's validity domain.
    """
    settings = _settings_for(model, settings)
    rate = model.rate_function()
    Emin, Emax = model.get_Emin(), model.get_Emax()
    E = _check_energy(E, Emin, Emax)
    cutoff = max(Emin, settings.range_Emin)
    if E <= cutoff:
        return 0.0
    return _path_length(rate, E, cutoff, settings)
