"""
Zimmerman stopping power for partially ionized plasmas.

Implements G.B. Zimmerman, "Recent developments in Monte Carlo techniques",
UCRL-JC-105616 (1990). The stopping power is the sum of three terms:

- free electrons, with a Maxwellian-averaged stopping number and a fitted
  Coulomb logarithm (Eq. 16) that is continuous in the ratio of projectile
  to electron thermal speed;
- bound electrons, a Bethe-like term with an effective mean excitation
  energy of the partially stripped ion (Eq. 20);
- ions, with a minimum impact parameter combining the classical and
  quantum limits (Eq. 14).

With ``quantum=True`` the electron temperature is replaced by
``sqrt(Te**2 + (2/3 E_F)**2)``, which accounts for degeneracy when the
Fermi energy ``E_F`` is comparable to ``Te``.
"""

import math
from typing import Iterable, Optional, Union

import numpy as np
from scipy.special import erf

from pystoppow.models import constants as const
from pystoppow.models.base import Mode
from pystoppow.models.plasma import PartiallyIonizedModel, Species
from pystoppow.transport.settings import IntegrationSettings


def fermi_energy(ne: float) -> float:
    """
    Electron Fermi energy.

    :param ne: Electron density in 1/cm³.
    :type ne: float

    :returns: Fermi energy in keV.
    :rtype: float
    """
    EF_erg = const.hbar ** 2 * (3.0 * math.pi ** 2 * ne) ** (2.0 / 3.0) / (2.0 * const.me)
    return EF_erg / const.keVtoErg


class Zimmerman(PartiallyIonizedModel):
    """
    Zimmerman partially ionized plasma stopping power.

    :ivar quantum: Whether the degeneracy-corrected electron temperature is used.
    """

    model_type = "Zimmerman"

    def __init__(self, mt: float, Zt: float, species: Iterable[Species], Te: float,
                 quantum: bool = False, mode: Union[Mode, str] = Mode.LENGTH,
                 settings: Optional[IntegrationSettings] = None):
        super().__init__(mt, Zt, species, Te, mode=mode, settings=settings)
        self.quantum = bool(quantum)

    def set_quantum(self, enabled: bool):
        """Turn the degeneracy correction on or off."""
        self.quantum = bool(enabled)

    @property
    def electron_temperature(self) -> float:
        """Effective electron temperature in keV."""
        if self.quantum and self.ne > 0:
            return math.sqrt(self.Te ** 2 + (2.0 / 3.0 * fermi_energy(self.ne)) ** 2)
        return self.Te

    def debye_length(self) -> float:
        """Debye length in cm, from free electrons and ionized ions."""
        total = np.sum(4.0 * math.pi * self.nf * (self.Zbar * const.e) ** 2 / (self.Tf * const.keVtoErg))
        total += 4.0 * math.pi * self.ne * const.e ** 2 / (self.electron_temperature * const.keVtoErg)
        if total <= 0:
            return math.inf
        return 1.0 / math.sqrt(total)

    def dEdx_free_electron(self, E: float) -> float:
        """Free-electron stopping power in MeV/µm."""
        if self.ne <= 0:
            return 0.0
        vt = self.velocity(E)
        vth = math.sqrt(2.0 * self.electron_temperature * const.keVtoErg / const.me)
        y = vt / vth
        omega_pe = math.sqrt(4.0 * math.pi * const.e ** 2 * self.ne / const.me)
        y2 = y * y
        LambdaF = (4.0 * math.pi * const.me * vth ** 2 / (const.h * omega_pe)) \
            * (0.321 + 0.259 * y2 + 0.0707 * y2 ** 2 + 0.05 * y2 ** 3) \
            / (1.0 + 0.130 * y2 + 0.05 * y2 ** 2)
        LF = 0.5 * math.log1p(LambdaF ** 2) * (math.erf(y) - 2.0 / math.sqrt(math.pi) * y * math.exp(-y2))
        dEdx = 4.0 * math.pi * const.e ** 4 * (self.Zt / vt) ** 2 * self.ne * LF / const.me
        return dEdx * const.ERG_PER_CM_TO_MEV_PER_UM

    def mean_excitation_energy(self) -> np.ndarray:
        """
        Effective mean excitation energy of each ion's bound electrons (Eq. 20).

        :returns: Energies in keV; NaN for fully stripped species.
        :rtype: np.ndarray
        """
        bound_fraction = (self.Zf - self.Zbar) / self.Zf
        with np.errstate(divide="ignore", invalid="ignore"):
            Ibar = self.Zf * (0.024 - 0.013 * bound_fraction) / np.sqrt(bound_fraction)
        return np.where(bound_fraction > 0, Ibar, np.nan)

    def dEdx_bound_electron(self, E: float) -> float:
        """Bound-electron stopping power in MeV/µm."""
        bound = self.Zf - self.Zbar
        mask = bound > 0
        if not np.any(mask):
            return 0.0
        vt = self.velocity(E)
        Ibar_erg = self.mean_excitation_energy()[mask] * const.keVtoErg
        LB = np.maximum(np.log(2.0 * const.me * vt ** 2 / Ibar_erg), 0.0)
        prefactor = 4.0 * math.pi * const.e ** 4 * self.Zt ** 2 / (const.me * vt ** 2)
        dEdx = prefactor * np.sum(self.nf[mask] * bound[mask] * LB)
        return float(dEdx) * const.ERG_PER_CM_TO_MEV_PER_UM

    def dEdx_ion(self, E: float) -> float:
        """Ion stopping power in MeV/µm."""
        mask = self.Zbar > 0
        lD = self.debye_length()
        if not np.any(mask) or not math.isfinite(lD):
            return 0.0
        vt = self.velocity(E)
        mf = self.mf[mask]
        Zi = self.Zbar[mask]
        mr = const.amu * mf * self.mt / (mf + self.mt)
        b_min = np.sqrt((const.h / (4.0 * math.pi * mr * vt)) ** 2
                        + (const.e ** 2 * Zi * self.Zt / (mr * vt ** 2)) ** 2)
        Li = np.maximum(np.log(lD / b_min), 0.0)
        prefactor = 4.0 * math.pi * const.e ** 4 * (self.Zt / vt) ** 2 / const.amu
        dEdx = prefactor * np.sum(self.nf[mask] * Zi ** 2 * Li / mf)
        return float(dEdx) * const.ERG_PER_CM_TO_MEV_PER_UM

    def _stopping_power(self, E: float) -> float:
        return self.dEdx_free_electron(E) + self.dEdx_bound_electron(E) + self.dEdx_ion(E)

    def _summary_rows(self):
        rows = super()._summary_rows()
        rows.append(("Degeneracy correction", "on" if self.quantum else "off"))
        return rows
