"""
Stopping-power models.

Every model implements :class:`~pystoppow.models.base.StoppingPowerModel`
and can be handed to the path-integration engine.

Modules
-------

- :mod:`base`: :class:`~pystoppow.models.base.Mode` and the abstract model contract.
- :mod:`tabulated`: :class:`~pystoppow.models.tabulated.TabulatedStoppingPower`,
  interpolation of text or SRIM tables.
- :mod:`bethe_bloch`: :class:`~pystoppow.models.bethe_bloch.BetheBloch`, cold matter.
- :mod:`plasma`: :class:`~pystoppow.models.plasma.Species` and the plasma base classes.
- :mod:`li_petrasso`: :class:`~pystoppow.models.li_petrasso.LiPetrasso`, fully ionized plasmas.
- :mod:`grabowski`: :class:`~pystoppow.models.grabowski.Grabowski`, arbitrarily coupled plasmas.
- :mod:`bps`: :class:`~pystoppow.models.bps.BPS`, weakly coupled plasmas to next-to-leading order.
- :mod:`zimmerman`: :class:`~pystoppow.models.zimmerman.Zimmerman`, partially ionized plasmas.
- :mod:`mehlhorn`: :class:`~pystoppow.models.mehlhorn.Mehlhorn`, partially ionized matter.
"""

from .base import Mode, StoppingPowerModel
from .tabulated import TabulatedStoppingPower
from .bethe_bloch import BetheBloch
from .plasma import Species, PlasmaModel, PartiallyIonizedModel
from .li_petrasso import LiPetrasso
from .grabowski import Grabowski
from .zimmerman import Zimmerman
from .mehlhorn import Mehlhorn
from .bps import BPS

__all__ = [
    "Mode",
    "StoppingPowerModel",
    "TabulatedStoppingPower",
    "BetheBloch",
    "Species",
    "PlasmaModel",
    "PartiallyIonizedModel",
    "LiPetrasso",
    "Grabowski",
    "Zimmerman",
    "Mehlhorn",
    "BPS",
]
