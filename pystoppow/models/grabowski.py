"""
Grabowski stopping power for plasmas of arbitrary coupling.

Implements the molecular-dynamics fit of P.E. Grabowski et al.,
Phys. Rev. Lett. 111, 215002 (2013). For each field species the stopping
power is

.. math::

    \\frac{dE}{dx} = \\frac{(Z_t Z_f e)^2}{\\lambda_D^2 (1+g)^{2/3}}
    R(w, g) \\left[ G(w) \\ln\\left(\\sqrt{e} + \\frac{\\alpha + w^2}{g_0}\\right) + H(w) \\right]

with :math:`w = v_t / (v_{th} s)`, the coupling :math:`g = \\sqrt{3} |Z_t| \\Gamma^{3/2}`
and the scale :math:`s = d (1 + c g)^{1/3}`. The fit interpolates smoothly
between the weakly coupled (Coulomb logarithm) and strongly coupled limits,
and between slow and fast projectiles.

The validity domain scales with the projectile mass: ``[0.1 mt, 30 mt]`` MeV.
"""

import math

import numpy as np
from scipy.special import erf

from pystoppow.models import constants as const
from pystoppow.models.plasma import PlasmaModel

GAMMA_E = 0.5772156649015329

#: Fit constants from the Grabowski et al. paper
ALPHA = 4.0 * math.exp(-2.0 * GAMMA_E)
A = 1.04102e-5
B = 0.183260
C = 0.116053
D = 0.824982
G0 = 2.03301e-3

_SQRT_E = math.sqrt(math.e)


def _M1(g, s, Z):
    return s * np.log1p(ALPHA / _SQRT_E / (g * (1.0 + A * Z ** 2 * g))) / math.log1p(ALPHA / _SQRT_E / G0)


def _M2(w, g, s):
    return np.log1p((s * w) ** 3 / g) / (s ** 2 * np.log1p(w ** 3 / G0))


def _R(w, g, s, Z):
    return (_M1(g, s, Z) + B * _M2(w, g, s) * w ** 2) * (1.0 + g) ** (2.0 / 3.0) / (w ** 2 * (1.0 + B * w ** 2))


def _G(w):
    return erf(w / math.sqrt(2.0)) - math.sqrt(2.0 / math.pi) * w * np.exp(-w ** 2 / 2.0)


def _H(w):
    return w ** 4 * np.log(w) / (12.0 + w ** 4) - w ** 3 * np.exp(-w ** 2 / 2.0) / (3.0 * math.sqrt(2.0 * math.pi))


class Grabowski(PlasmaModel):
    """Grabowski et al. (2013) plasma stopping power."""

    model_type = "Grabowski"

    def get_Emin(self) -> float:
        return 0.1 * self.mt

    def get_Emax(self) -> float:
        return 30.0 * self.mt

    def _stopping_power(self, E: float) -> float:
        v = self.velocity(E)
        kT = self.Tf * const.keVtoErg
        vth = np.sqrt(kT / (self.mf * const.amu))

        r0 = (4.0 * math.pi * self.nf / 3.0) ** (-1.0 / 3.0)
        Gamma = (self.Zf * const.e) ** 2 / (r0 * kT)
        g = math.sqrt(3.0) * abs(self.Zt) * Gamma ** 1.5
        s = D * (1.0 + C * g) ** (1.0 / 3.0)
        w = v / (vth * s)

        lD = np.sqrt(kT / (4.0 * math.pi * self.nf * const.e ** 2))
        norm = (self.Zt * self.Zf * const.e / lD) ** 2 / (1.0 + g) ** (2.0 / 3.0)

        bracket = _G(w) * np.log(_SQRT_E + (ALPHA + w ** 2) / G0) + _H(w)
        return float(np.sum(_R(w, g, s, self.Zt) * bracket * norm)) * const.ERG_PER_CM_TO_MEV_PER_UM
