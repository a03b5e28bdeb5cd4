"""
Brown-Preston-Singleton stopping power for weakly coupled plasmas.

Implements L.S. Brown, D.L. Preston and R.L. Singleton, Phys. Rep. 410, 237
(2005), exact to leading and next-to-leading order in the plasma coupling.
Each field species ``b`` contributes three terms:

- a classical short-distance term (Eq. 3.3), an integral over the
  Boltzmann-weighted collision parameter ``u``;
- a classical long-distance term (Eq. 3.4) built from the plasma dispersion
  function ``F(v)`` and the species weights ``ρ_b(v) / ρ_total(v)``;
- a quantum correction (Eq. 3.19) built from ``2 Re ψ(1 + iη) - ln η²``,
  which vanishes in the classical limit and turns the Bohr logarithm into
  the Bethe logarithm for fast projectiles.

Charges are in Lorentz-Heaviside units (``e_LH² = 4π e²``), so the Debye wave
number of species ``b`` is ``κ_b² = β_b e_b² n_b`` with ``β_b = 1 / kT_b``.
The wave number ``K`` in the logarithms is arbitrary and cancels between the
short- and long-distance terms; the electron Debye wave number is used.

For Maxwellian species the dispersion integral has the closed form

.. math::

    F(v) = \\sum_b \\kappa_b^2 \\left[ 1 - 2 x_b D(x_b) + i \\sqrt{\\pi}\\, x_b e^{-x_b^2} \\right],
    \\qquad x_b = v \\sqrt{\\beta_b m_b / 2}

with Dawson's integral :math:`D`, so only the angular integral of the
long-distance term is numerical.

The validity domain is ``[0.01 mt, 50 mt]`` MeV. A projectile whose energy is
comparable to the plasma temperature gains energy from the field, and the
stopping power turns negative; path queries need a positive stopping power.
"""

import cmath
from dataclasses import replace
import math
from typing import Iterable, Optional, Union

import numpy as np
from scipy.integrate import quad, quad_vec
from scipy.special import dawsn, psi, softmax

from pystoppow.models import constants as const
from pystoppow.models.base import Mode
from pystoppow.models.plasma import PlasmaModel, Species
from pystoppow.transport.settings import DEFAULT_SETTINGS, IntegrationSettings

EULER_GAMMA = 0.5772156649015329

_SQRT_PI = math.sqrt(math.pi)
#: Thermal speed sqrt(3 kT / m) in units of sqrt(2 kT / m)
_T_THERMAL = math.sqrt(1.5)

#: Path-query tolerances matched to the accuracy of the per-species quadratures
BPS_SETTINGS = replace(DEFAULT_SETTINGS, rtol=1e-6, quad_epsrel=1e-5)


def _digamma_term(eta: float) -> float:
    """``2 Re ψ(1 + iη) - ln η²``."""
    if eta > 1e3:
        inv2 = 1.0 / (eta * eta)
        return inv2 / 6.0 + inv2 * inv2 / 60.0
    return 2.0 * float(psi(1.0 + 1j * eta).real) - 2.0 * math.log(eta)


def _thermal_kernel(t: float, y: float, mass_ratio: float) -> float:
    """
    Velocity kernel of the quantum correction.

    :param t: Relative speed scaled by ``sqrt(β m_b / 2)``.
    :param y: Projectile speed scaled by ``sqrt(β m_b / 2)``.
    :param mass_ratio: ``M_pb / m_b``.
    """
    z = 2.0 * y * t
    if z < 1.0:
        # sinh(z) - z cosh(z), series below z = 0.01
        if z < 1e-2:
            odd = -z ** 3 / 3.0 - z ** 5 / 30.0 - z ** 7 / 840.0
        else:
            odd = math.sinh(z) - z * math.cosh(z)
        return 2.0 * math.exp(-(y * y + t * t)) * (math.sinh(z) + mass_ratio * odd / (2.0 * t * t))
    near = 1.0 + mass_ratio * (0.5 / (t * t) - y / t)
    far = 1.0 + mass_ratio * (0.5 / (t * t) + y / t)
    return near * math.exp(-(y - t) ** 2) - far * math.exp(-(y + t) ** 2)


class BPS(PlasmaModel):
    """
    Brown-Preston-Singleton plasma stopping power.

    :ivar epsrel: Relative tolerance of the per-species quadratures.
    :ivar limit: Subinterval limit of the per-species quadratures.
    """

    model_type = "BPS"
    Emin = 0.01
    Emax = 50.0
    epsrel = 1e-6
    limit = 200

    def __init__(self, mt: float, Zt: float, species: Iterable[Species], Te: Optional[float] = None,
                 mode: Union[Mode, str] = Mode.LENGTH,
                 settings: Optional[IntegrationSettings] = None):
        """
        Initialize the BPS model.

        :param mt: Projectile mass in amu.
        :param Zt: Projectile charge in units of e.
        :param species: Field species, electrons included unless ``Te`` is given.
        :param Te: Optional electron temperature (keV) for automatic electrons.
        :param mode: Initial unit mode.
        :param settings: Integration settings for path queries. Defaults to
                         :data:`BPS_SETTINGS`.
        """
        super().__init__(mt, Zt, species, Te=Te, mode=mode,
                         settings=settings if settings is not None else BPS_SETTINGS)

        self._m_p = self.mt * const.amu
        self._m_b = self.mf * const.amu
        self._beta = 1.0 / (self.Tf * const.keVtoErg)
        self._e_p = self.Zt * const.e_LH
        e_b = self.Zf * const.e_LH
        self._kappa2 = self._beta * e_b ** 2 * self.nf
        self._sqrt_a = np.sqrt(0.5 * self._beta * self._m_b)
        self._log_rho0 = np.log(self._kappa2 * self._sqrt_a)
        self._M_pb = self._m_p + self._m_b
        m_pb = self._m_p * self._m_b / self._M_pb

        electrons = [i for i, s in enumerate(self.species) if s.is_electron]
        self._K2 = float(self._kappa2[electrons[0]] if electrons else np.sum(self._kappa2))

        # argument of the short-distance logarithm per unit u / (1 - u)
        self._C = self._beta * np.abs(self._e_p * e_b) * math.sqrt(self._K2) / (4.0 * math.pi) * self._m_b / m_pb
        # quantum parameter η_pb times the scaled relative speed
        self._eta0 = np.abs(self._e_p * e_b) * self._sqrt_a / (4.0 * math.pi * const.hbar)

    def get_Emin(self) -> float:
        return self.Emin * self.mt

    def get_Emax(self) -> float:
        return self.Emax * self.mt

    # --- dispersion ---

    def dispersion(self, v: float) -> complex:
        """
        Plasma dispersion function ``F(v)`` in 1/cm².

        ``F(0)`` is the squared inverse Debye length; for speeds far above
        every thermal speed ``F(v) → -Σ ω_b² / v²``.

        :param v: Phase speed in cm/s.
        """
        x = self._sqrt_a * v
        terms = self._kappa2 * (1.0 - 2.0 * x * dawsn(x) + 1j * _SQRT_PI * x * np.exp(-x * x))
        return complex(np.sum(terms))

    def _log_dispersion(self, v: float):
        """``Im[F ln(F / K²)]`` and the weights ``ρ_b / ρ_total`` at speed ``v``."""
        F = self.dispersion(v)
        weights = softmax(self._log_rho0 - (self._sqrt_a * v) ** 2)
        return (F * cmath.log(F / self._K2)).imag, weights

    # --- per-species contributions, erg/cm ---

    def _short_range(self, vp: float) -> np.ndarray:
        X = (self._sqrt_a * vp) ** 2
        B = self._beta * self._M_pb * vp ** 2
        prefactor = (self._e_p ** 2 / (4.0 * math.pi)) * self._kappa2 / (self._beta * self._m_p * vp) \
            * np.sqrt(self._beta * self._m_b / (2.0 * math.pi))

        # u = s² removes the u^(-1/2) endpoint singularity
        values = np.empty(len(self.species))
        for i in range(len(values)):
            X_i, B_i, C_i = float(X[i]), float(B[i]), float(self._C[i])

            def integrand(s):
                s2 = s * s
                log_term = -math.log(C_i * s2 / (1.0 - s2)) + 2.0 - 2.0 * EULER_GAMMA
                return 2.0 * math.exp(-X_i * s2) * (log_term * (B_i * s2 - 1.0) + 2.0)

            edge = 1.0 / math.sqrt(X_i)
            values[i] = quad(integrand, 0.0, 1.0, points=[edge] if edge < 1.0 else None,
                             epsabs=0.0, epsrel=self.epsrel, limit=self.limit)[0]
        return prefactor * values

    def _long_range(self, vp: float) -> np.ndarray:
        def integrand(cos_theta):
            im_g, weights = self._log_dispersion(vp * cos_theta)
            return cos_theta * weights * im_g

        crossings = sorted({float(c) for c in 1.0 / (self._sqrt_a * vp) if c < 1.0})
        angular = quad_vec(integrand, 0.0, 1.0, epsrel=self.epsrel, points=crossings or None)[0]

        im_g, weights = self._log_dispersion(vp)
        boundary = weights * im_g / (self._beta * self._m_p * vp ** 2)
        return self._e_p ** 2 / (4.0 * math.pi ** 2) * (boundary - angular)

    def _quantum(self, vp: float) -> np.ndarray:
        y_all = self._sqrt_a * vp
        mass_ratio = self._M_pb / self._m_b
        prefactor = (self._e_p ** 2 / (4.0 * math.pi)) * self._kappa2 \
            / (2.0 * self._beta * self._m_p * vp ** 2 * _SQRT_PI)

        values = np.empty(len(self.species))
        for i in range(len(values)):
            y, ratio, eta0 = float(y_all[i]), float(mass_ratio[i]), float(self._eta0[i])
            lower = min(_T_THERMAL, y) / 5.0
            upper = max(_T_THERMAL, y) + 10.0
            values[i] = quad(lambda t: _digamma_term(eta0 / t) * _thermal_kernel(t, y, ratio),
                             lower, upper, points=[y], epsabs=0.0, epsrel=self.epsrel, limit=self.limit)[0]
        return prefactor * values

    # --- public rates, MeV/um ---

    def dEdx_short(self, E: float) -> float:
        """Classical short-distance stopping power in MeV/µm."""
        vp = self.velocity(self._check_domain(E))
        return float(np.sum(self._short_range(vp))) * const.ERG_PER_CM_TO_MEV_PER_UM

    def dEdx_long(self, E: float) -> float:
        """Classical long-distance stopping power in MeV/µm."""
        vp = self.velocity(self._check_domain(E))
        return float(np.sum(self._long_range(vp))) * const.ERG_PER_CM_TO_MEV_PER_UM

    def dEdx_quantum(self, E: float) -> float:
        """Quantum correction to the stopping power in MeV/µm."""
        vp = self.velocity(self._check_domain(E))
        return float(np.sum(self._quantum(vp))) * const.ERG_PER_CM_TO_MEV_PER_UM

    def _stopping_power(self, E: float) -> float:
        vp = self.velocity(E)
        total = self._short_range(vp) + self._long_range(vp) + self._quantum(vp)
        return float(np.sum(total)) * const.ERG_PER_CM_TO_MEV_PER_UM

    def _summary_rows(self):
        rows = super()._summary_rows()
        rows.append(("Screening wave number K [1/cm]", f"{math.sqrt(self._K2):.3e}"))
        rows.append(("Debye length [cm]", f"{self.debye_length():.3e}"))
        return rows
