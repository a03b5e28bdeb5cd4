"""
Bethe-Bloch stopping power in cold matter.

Electronic stopping of a fast ion in a (possibly multi-element) solid or gas,

.. math::

    \\frac{dE}{dx} = \\sum_i \\frac{4\\pi n_i Z_i (Z_t e^2)^2}{m_e c^2 \\beta^2}
    \\left[\\ln\\frac{2 m_e c^2 \\beta^2 \\gamma^2}{I_i} - \\beta^2\\right]

with relativistic :math:`\\beta`, :math:`\\gamma` of the projectile and mean
excitation energies :math:`I_i` taken from the bundled atomic data unless
given explicitly. Shell and density-effect corrections are not included,
so the model is restricted to ``E >= 0.6 mt`` MeV (Andersen and Ziegler).
"""

import math
from typing import Optional, Sequence, Union

import numpy as np

from pystoppow.io.data_registry import get_mean_excitation_energy
from pystoppow.models import constants as const
from pystoppow.models.base import Mode, StoppingPowerModel
from pystoppow.transport.settings import IntegrationSettings


class BetheBloch(StoppingPowerModel):
    """
    Relativistic Bethe-Bloch model for a projectile in cold matter.

    :ivar mt: Projectile mass in amu.
    :ivar Zt: Projectile charge in units of e.
    :ivar mf: Target species masses in amu.
    :ivar Zf: Target species nuclear charges.
    :ivar nf: Target species number densities in 1/cm³.
    :ivar mean_excitation: Mean excitation energy of each species in eV.
    """

    model_type = "Bethe-Bloch"
    Emax = 30.0

    def __init__(self, mt: float, Zt: float, mf: Sequence[float], Zf: Sequence[float],
                 nf: Sequence[float], mean_excitation: Optional[Sequence[float]] = None,
                 mode: Union[Mode, str] = Mode.LENGTH,
                 settings: Optional[IntegrationSettings] = None):
        """
        Initialize the Bethe-Bloch calculator.

        :param mt: Projectile mass in amu.
        :param Zt: Projectile charge in units of e.
        :param mf: Target species masses in amu.
        :param Zf: Target species nuclear charges.
        :param nf: Target species number densities in 1/cm³.
        :param mean_excitation: Optional mean excitation energies in eV, one per species.
        :param mode: Initial unit mode.
        :param settings: Integration settings for path queries.

        :raises ValueError: On non-positive projectile parameters, mismatched
                            array lengths, non-positive masses or densities, or
                            an element without a tabulated mean excitation energy.
        """
        self.mt = float(mt)
        self.Zt = float(Zt)
        self.mf = np.asarray(mf, dtype=float)
        self.Zf = np.asarray(Zf, dtype=float)
        self.nf = np.asarray(nf, dtype=float)

        if not (self.mt > 0 and self.Zt > 0):
            raise ValueError(f"Projectile mass and charge must be positive, got mt={mt}, Zt={Zt}.")
        if self.mf.ndim != 1 or len(self.mf) == 0 or not (len(self.mf) == len(self.Zf) == len(self.nf)):
            raise ValueError(
                f"Target arrays must be non-empty and of equal length: "
                f"mf={self.mf.shape}, Zf={self.Zf.shape}, nf={self.nf.shape}."
            )
        if np.any(self.mf <= 0) or np.any(self.nf <= 0) or np.any(self.Zf <= 0):
            raise ValueError("Target masses, charges and densities must all be positive.")

        if mean_excitation is None:
            mean_excitation = [get_mean_excitation_energy(int(round(Z))) for Z in self.Zf]
        self.mean_excitation = np.asarray(mean_excitation, dtype=float)
        if self.mean_excitation.shape != self.Zf.shape or np.any(self.mean_excitation <= 0):
            raise ValueError("mean_excitation must hold one positive energy (eV) per species.")

        super().__init__(float(np.sum(self.mf * const.amu * self.nf)), mode=mode, settings=settings)

        self._Emin = 0.6 * self.mt
        self._I_erg = self.mean_excitation * const.eVtoErg
        self._prefactor = 4.0 * math.pi * self.nf * self.Zf * (self.Zt * const.e ** 2) ** 2

    def get_Emin(self) -> float:
        return self._Emin

    def get_Emax(self) -> float:
        return self.Emax

    def _stopping_power(self, E: float) -> float:
        gamma = 1.0 + E / (self.mt * const.amuc2_MeV)
        beta2 = 1.0 - 1.0 / gamma ** 2
        mec2 = const.me * const.c ** 2

        log_term = np.log(2.0 * mec2 * beta2 * gamma ** 2 / self._I_erg) - beta2
        dEdx_erg_cm = np.sum(self._prefactor / (mec2 * beta2) * log_term)
        return float(dEdx_erg_cm) * const.ERG_PER_CM_TO_MEV_PER_UM

    def _summary_rows(self):
        return [
            ("Projectile (mt, Zt)", f"{self.mt:g} amu, {self.Zt:g} e"),
            ("Species", len(self.mf)),
            ("I [eV]", ", ".join(f"{v:g}" for v in self.mean_excitation)),
        ]
