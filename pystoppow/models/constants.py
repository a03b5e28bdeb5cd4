"""
Physical constants in CGS units (CODATA 2010).

Masses are in grams, energies in erg unless noted, charges in statcoulomb.
The keV- and MeV-suffixed quantities are convenience conversions used by the
plasma models, which work with temperatures in keV and projectile energies
in MeV.
"""

import math

#: Electron mass [g]
me = 9.10938291e-28
#: Atomic mass unit [g]
amu = 1.66053892e-24
#: Speed of light [cm/s]
c = 2.99792458e10
#: Elementary charge [statC]
e = 4.80320451e-10
#: Elementary charge in Lorentz-Heaviside units
e_LH = e * math.sqrt(4 * math.pi)
#: Planck constant [erg s]
h = 6.62606957e-27
#: Reduced Planck constant [erg s]
hbar = 1.054571726e-27

#: Energy of 1 keV in erg
keVtoErg = 1.602176565e-9
#: Energy of 1 MeV in erg
MeVtoErg = 1.602176565e-6
#: Energy of 1 erg in MeV
ErgtoMeV = 1.0 / MeVtoErg
#: Energy of 1 eV in erg
eVtoErg = 1.602176565e-12

#: Atomic mass unit rest energy [MeV]
amuc2_MeV = amu * c**2 * ErgtoMeV

#: Conversion factor from a rate in erg/cm to MeV/um
ERG_PER_CM_TO_MEV_PER_UM = ErgtoMeV * 1e-4
