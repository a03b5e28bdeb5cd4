"""
Li-Petrasso stopping power for fully ionized plasmas.

Implements C.K. Li and R.D. Petrasso, Phys. Rev. Lett. 70, 3059 (1993).
For each field species ``f`` the stopping power is

.. math::

    \\frac{dE}{dx} = \\left(\\frac{Z_t e}{v_t}\\right)^2 \\omega_{pf}^2
    \\left[ G(x^{t/f}) \\ln\\Lambda + \\theta(x^{t/f}) \\ln\\left(1.123\\sqrt{x^{t/f}}\\right) \\right]

where :math:`x^{t/f} = (v_t / v_f)^2`. The Chandrasekhar-type function
:math:`G` is built from the Maxwellian error function, so the rate passes
continuously from the fast-projectile limit (electrons at low temperature)
through the thermal regime to the slow limit. The collective term uses the
modified Bessel form :math:`K_0(x^{-1/2}) K_1(x^{-1/2}) x^{-1/2}`, which vanishes
smoothly for slow projectiles.
"""

import math
from typing import Iterable, Optional, Union

import numpy as np
from scipy.special import erf, k0, k1

from pystoppow.models import constants as const
from pystoppow.models.base import Mode
from pystoppow.models.plasma import PlasmaModel, Species
from pystoppow.transport.settings import IntegrationSettings

_TWO_OVER_SQRT_PI = 2.0 / math.sqrt(math.pi)


class LiPetrasso(PlasmaModel):
    """
    Li-Petrasso plasma stopping power.

    :ivar collective: Whether the collective (plasma wave) contribution is included.
    """

    model_type = "Li-Petrasso"

    def __init__(self, mt: float, Zt: float, species: Iterable[Species], Te: Optional[float] = None,
                 collective: bool = True, mode: Union[Mode, str] = Mode.LENGTH,
                 settings: Optional[IntegrationSettings] = None):
        """
        Initialize the Li-Petrasso model.

        :param mt: Projectile mass in amu.
        :param Zt: Projectile charge in units of e.
        :param species: Field species, electrons included unless ``Te`` is given.
        :param Te: Optional electron temperature (keV) for automatic electrons.
        :param collective: Include the collective term.
        :param mode: Initial unit mode.
        :param settings: Integration settings for path queries.
        """
        super().__init__(mt, Zt, species, Te=Te, mode=mode, settings=settings)
        self.collective = bool(collective)

        self._mr = const.amu * self.mt * self.mf / (self.mt + self.mf)
        self._lD = self.debye_length()
        self._vth2 = self.thermal_velocity(2.0)
        self._vth1 = self.thermal_velocity(1.0)
        self._vth_mean = self.thermal_velocity(8.0 / math.pi)
        self._wpf2 = self.plasma_frequency() ** 2

    def set_collective(self, enabled: bool):
        """Turn the collective contribution on or off."""
        self.collective = bool(enabled)

    def relative_velocity(self, E: float) -> np.ndarray:
        """Mean relative speed between projectile and each species (cm/s)."""
        vt = self.velocity(E)
        vf = self._vth_mean
        ratio2 = 4.0 * vt ** 2 / (math.pi * vf ** 2)
        return (vf / 2.0) * np.exp(-ratio2) + vt * (1.0 + math.pi * vf ** 2 / (8.0 * vt ** 2)) * erf(np.sqrt(ratio2))

    def coulomb_logarithm(self, E: float) -> np.ndarray:
        """
        Coulomb logarithm for each species.

        The minimum impact parameter combines the classical distance of closest
        approach with the quantum diffraction length, so the electron term picks
        up the quantum cutoff automatically when it dominates.
        """
        u = self.relative_velocity(E)
        p_perp = self.Zf * self.Zt * const.e ** 2 / (self._mr * u ** 2)
        p_min = np.sqrt(p_perp ** 2 + (const.hbar / (2.0 * self._mr * u)) ** 2)
        return np.maximum(0.5 * np.log1p((self._lD / p_min) ** 2), 0.0)

    def _stopping_power(self, E: float) -> float:
        vt = self.velocity(E)
        x = (vt / self._vth2) ** 2
        sqrt_x = np.sqrt(x)
        mu = _TWO_OVER_SQRT_PI * sqrt_x * np.exp(-x)
        erfunc = erf(sqrt_x)
        LL = self.coulomb_logarithm(E)
        rat = self.mf / self.mt

        # G(x) * lnΛ written without dividing by lnΛ
        bracket = LL * (erfunc - mu) - rat * (mu * LL - erfunc)

        if self.collective:
            inv_sqrt = self._vth1 / vt
            bracket = bracket + k0(inv_sqrt) * k1(inv_sqrt) * inv_sqrt

        prefactor = (self.Zt * const.e / vt) ** 2 * self._wpf2
        return float(np.sum(prefactor * bracket)) * const.ERG_PER_CM_TO_MEV_PER_UM

    def _summary_rows(self):
        rows = super()._summary_rows()
        rows.append(("Collective term", "on" if self.collective else "off"))
        rows.append(("Debye length [cm]", f"{self._lD:.3e}"))
        return rows
