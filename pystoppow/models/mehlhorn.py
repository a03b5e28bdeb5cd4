"""
Mehlhorn stopping power for partially ionized matter.

Implements T.A. Mehlhorn, J. Appl. Phys. 52, 6522 (1981). The rate is the sum
of a cold contribution from the bound electrons of each partially ionized
species and a hot contribution from the free electrons and ionized ions.

Cold part, per species with bound electrons:

- Bethe stopping on the ``Z - Zbar`` bound electrons (Eq. 1), using an
  effective projectile charge (Eq. 6) and a scaled mean excitation energy
  ``Z² I(Z - Zbar) / (Z - Zbar)²`` (Eq. 7);
- LSS low-energy electronic stopping (Eq. 3);
- nuclear stopping (Eq. 4).

The electronic part is the smaller of the Bethe and LSS values, which
switches continuously from the LSS ``sqrt(E)`` regime to the Bethe regime.

Hot part: :class:`~pystoppow.models.li_petrasso.LiPetrasso` on the free
electrons (density ``sum(Zbar n)``, temperature ``Te``) and the ions with
``Zbar > 0``.
"""

import math
from functools import lru_cache
from typing import Iterable, Optional, Sequence, Tuple, Union

import numpy as np

from pystoppow.io.data_registry import load_lookup_table
from pystoppow.models import constants as const
from pystoppow.models.base import Mode
from pystoppow.models.li_petrasso import LiPetrasso
from pystoppow.models.plasma import PartiallyIonizedModel, Species
from pystoppow.transport.settings import IntegrationSettings


@lru_cache(maxsize=None)
def _neutral_excitation_table() -> Tuple[np.ndarray, np.ndarray]:
    """Mean excitation energy (eV) vs. electron count, anchored at I(0) = 0."""
    records = sorted(load_lookup_table().values(), key=lambda r: r["atomic_number"])
    Z = np.array([0.0] + [r["atomic_number"] for r in records])
    I = np.array([0.0] + [r["mean_excitation_energy"] for r in records])
    return Z, I


def scaled_mean_excitation(Z: float, Zbar: float) -> float:
    """
    Mean excitation energy of an ion with ``Z - Zbar`` bound electrons (Eq. 7).

    The neutral-atom value ``I(Z - Zbar)`` is linearly interpolated between
    tabulated elements and scaled by ``Z² / (Z - Zbar)²``.

    :param Z: Nuclear charge.
    :param Zbar: Mean ionization state, ``0 <= Zbar < Z``.

    :returns: Mean excitation energy in eV.
    :rtype: float

    :raises ValueError: If the ion is fully stripped or ``Z - Zbar`` exceeds the table.
    """
    bound = Z - Zbar
    Z_table, I_table = _neutral_excitation_table()
    if not (0 < bound <= Z_table[-1]):
        raise ValueError(f"Cannot compute mean excitation energy for Z={Z}, Zbar={Zbar}.")
    I_bound = float(np.interp(bound, Z_table, I_table))
    return Z ** 2 * I_bound / bound ** 2


class Mehlhorn(PartiallyIonizedModel):
    """
    Mehlhorn partially ionized stopping power.

    :ivar mean_excitation: Mean excitation energy (eV) of the bound electrons of each species,
        NaN for fully stripped species.
    """

    model_type = "Mehlhorn"

    def __init__(self, mt: float, Zt: float, species: Iterable[Species], Te: float,
                 mean_excitation: Optional[Sequence[float]] = None,
                 mode: Union[Mode, str] = Mode.LENGTH,
                 settings: Optional[IntegrationSettings] = None):
        """
        Initialize the Mehlhorn model.

        :param mt: Projectile mass in amu.
        :param Zt: Projectile charge in units of e.
        :param species: Ion species with ionization states.
        :param Te: Electron temperature in keV.
        :param mean_excitation: Optional manual mean excitation energies (eV), one per species.
        :param mode: Initial unit mode.
        :param settings: Integration settings for path queries.

        :raises ValueError: If ``mean_excitation`` has the wrong length or non-positive entries.
        """
        super().__init__(mt, Zt, species, Te, mode=mode, settings=settings)
        self.set_mean_excitation(mean_excitation)

        plasma_species = [Species(s.mass, s.ionization, s.temperature, s.density)
                          for s in self.species if s.ionization > 0]
        if self.electrons is not None:
            plasma_species.insert(0, self.electrons)
            self.plasma = LiPetrasso(self.mt, self.Zt, plasma_species)
        else:
            self.plasma = None

    def set_mean_excitation(self, mean_excitation: Optional[Sequence[float]] = None):
        """
        Set the mean excitation energies of the bound electrons.

        :param mean_excitation: Energies in eV, one per species, or None to
                                use the scaled neutral-atom values.
        :type mean_excitation: Sequence[float], optional
        """
        if mean_excitation is None:
            self.mean_excitation = np.array([
                scaled_mean_excitation(Z, Zbar) if Zbar < Z else np.nan
                for Z, Zbar in zip(self.Zf, self.Zbar)
            ])
            self._manual_excitation = False
        else:
            values = np.asarray(mean_excitation, dtype=float)
            if values.shape != self.Zf.shape or np.any(values <= 0):
                raise ValueError("mean_excitation must hold one positive energy (eV) per species.")
            self.mean_excitation = values
            self._manual_excitation = True

    def effective_charge(self, E: float) -> float:
        """Effective projectile charge (Eq. 6)."""
        beta = self.velocity(E) / const.c
        return max(self.Zt * (1.0 - 1.034 * math.exp(-137.04 * beta / self.Zt ** 0.69)), 0.0)

    def dEdx_bethe(self, E: float, Zeff: float) -> np.ndarray:
        """Bethe stopping on bound electrons, per species, in MeV/µm."""
        gamma = 1.0 + E / (self.mt * const.amuc2_MeV)
        beta2 = 1.0 - 1.0 / gamma ** 2
        mec2 = const.me * const.c ** 2
        bound = self.Zf - self.Zbar
        prefactor = 4.0 * math.pi * self.nf * bound * (Zeff * const.e ** 2) ** 2 / (mec2 * beta2)
        with np.errstate(invalid="ignore"):
            log_term = np.log(2.0 * mec2 * beta2 * gamma ** 2 / (self.mean_excitation * const.eVtoErg)) - beta2
        return np.maximum(prefactor * log_term, 0.0) * const.ERG_PER_CM_TO_MEV_PER_UM

    def dEdx_lss(self, E: float, Zeff: float) -> np.ndarray:
        """LSS low-energy electronic stopping, per species, in MeV/µm."""
        A = self.mf / self.mt
        Z23 = Zeff ** (2.0 / 3.0) + self.Zf ** (2.0 / 3.0)
        K = 0.0793 * Zeff ** (2.0 / 3.0) * np.sqrt(self.Zf) * (1.0 + A) ** 1.5 / (Z23 ** 0.75 * np.sqrt(self.mf))
        a = 4.683e-9 / np.sqrt(Z23)
        El = (1.0 + A) * self.Zf * Zeff * const.e ** 2 / (A * a)
        RL = (1.0 + A) ** 2 / (4.0 * math.pi * A * self.nf * a ** 2)
        # K sqrt(El E) / RL with energies in keV and RL in um gives keV/um
        keV_um = K * np.sqrt(El / const.keVtoErg) * math.sqrt(1e3 * E) / (RL * 1e4)
        return keV_um * 1e-3

    def dEdx_nuclear(self, E: float, Zeff: float) -> np.ndarray:
        """Nuclear stopping, per species, in MeV/µm."""
        C = E / self.mt
        Z23 = Zeff ** (2.0 / 3.0) + self.Zf ** (2.0 / 3.0)
        Cn = 4.14e6 * (self.mt / (self.mt + self.mf)) ** 1.5 * np.sqrt(Zeff * self.Zf / self.mf) / Z23 ** 0.75
        Cn_prime = self.mf * self.mt / (self.mf + self.mt) / (Zeff * self.Zf) / np.sqrt(Z23)
        # MeV cm2/g, scaled by each species' mass density
        dEdr = Cn * math.sqrt(C) * np.exp(-45.2 * (Cn_prime * C) ** 0.277)
        rho_i = self.mf * const.amu * self.nf
        return dEdr * rho_i * 1e-4

    def dEdx_cold(self, E: float) -> float:
        """Bound-electron and nuclear stopping in MeV/µm."""
        bound = self.Zbar < self.Zf
        Zeff = self.effective_charge(E)
        if not np.any(bound) or Zeff <= 0:
            return 0.0
        electronic = np.minimum(self.dEdx_bethe(E, Zeff), self.dEdx_lss(E, Zeff))
        total = electronic + self.dEdx_nuclear(E, Zeff)
        return float(np.sum(total[bound]))

    def dEdx_hot(self, E: float) -> float:
        """Free-electron and ionized-ion stopping in MeV/µm."""
        if self.plasma is None:
            return 0.0
        return self.plasma.dEdx_MeV_um(E)

    def _stopping_power(self, E: float) -> float:
        return self.dEdx_cold(E) + self.dEdx_hot(E)

    def _summary_rows(self):
        rows = super()._summary_rows()
        source = "manual" if self._manual_excitation else "scaled neutral"
        rows.append(("I [eV] (" + source + ")", ", ".join(f"{v:.4g}" for v in self.mean_excitation)))
        return rows
