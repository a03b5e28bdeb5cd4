import math

import numpy as np
import pytest

from pystoppow.exceptions import DomainError
from pystoppow.models.bethe_bloch import BetheBloch
from pystoppow.models.bps import BPS, BPS_SETTINGS
from pystoppow.models.grabowski import Grabowski
from pystoppow.models.li_petrasso import LiPetrasso
from pystoppow.models.mehlhorn import Mehlhorn, scaled_mean_excitation
from pystoppow.models.plasma import ELECTRON_MASS_AMU, Species
from pystoppow.models.zimmerman import Zimmerman, fermi_energy

ENERGY_GRID = np.geomspace(0.1, 30.0, 3000)


def rates_on(model, grid=ENERGY_GRID):
    return np.array([model.dEdx(E) for E in grid])


def assert_positive_and_continuous(rates, max_step=0.02):
    assert np.all(np.isfinite(rates))
    assert np.all(rates > 0)
    # neighbouring grid points differ by 0.2% in energy
    assert np.max(np.abs(np.diff(np.log(rates)))) < max_step


@pytest.fixture
def deuterium_plasma():
    return LiPetrasso.from_arrays(1.007, 1, [2.014, ELECTRON_MASS_AMU], [1, -1], [1.0, 1.0], [1e24, 1e24])


@pytest.fixture
def aluminum_plasma():
    return [Species(26.98, 13, 0.1, 6.026e22, 3.0)]


# ------------------------------
# Species

def test_species_electron():
    electron = Species.electron(2.0, 1e23)
    assert electron.is_electron
    assert electron.charge == -1
    assert electron.temperature == 2.0


def test_species_mass_density():
    assert Species(2.014, 1, 1.0, 1e24).mass_density == pytest.approx(2.014 * 1.66054e-24 * 1e24, rel=1e-4)


@pytest.mark.parametrize("args", [
    (-1.0, 1, 1.0, 1e24),
    (2.0, 1, 0.0, 1e24),
    (2.0, 1, 1.0, -1e24),
    (2.0, 1, 1.0, math.inf),
    (2.0, math.nan, 1.0, 1e24),
    (26.98, 13, 1.0, 1e22, 14.0),
    (26.98, 13, 1.0, 1e22, -1.0),
])
def test_species_invalid(args):
    with pytest.raises(ValueError):
        Species(*args)


def test_species_is_immutable():
    species = Species(2.014, 1, 1.0, 1e24)
    with pytest.raises(AttributeError):
        species.density = 2e24


# ------------------------------
# Li-Petrasso

def test_li_petrasso_positive_and_continuous(deuterium_plasma):
    assert_positive_and_continuous(rates_on(deuterium_plasma))


def test_li_petrasso_domain(deuterium_plasma):
    assert deuterium_plasma.get_Emin() == 0.1
    assert deuterium_plasma.get_Emax() == 30.0
    for E in (0.05, 31.0, math.nan):
        with pytest.raises(DomainError):
            deuterium_plasma.dEdx(E)


def test_li_petrasso_automatic_electrons():
    model = LiPetrasso(1.007, 1, [Species(2.014, 1, 1.0, 1e24), Species(4.0026, 2, 1.0, 5e23)], Te=1.0)
    assert len(model.species) == 3
    electrons = model.species[-1]
    assert electrons.is_electron
    assert electrons.density == pytest.approx(2e24)


def test_li_petrasso_field_rows_match_arrays(deuterium_plasma):
    from_rows = LiPetrasso.from_field(1.007, 1, [[2.014, 1, 1.0, 1e24]], Te=1.0)
    assert from_rows.dEdx(3.0) == pytest.approx(deuterium_plasma.dEdx(3.0))
    assert from_rows.density == pytest.approx(deuterium_plasma.density)


def test_li_petrasso_collective_term(deuterium_plasma):
    with_collective = deuterium_plasma.dEdx(10.0)
    deuterium_plasma.set_collective(False)
    assert deuterium_plasma.dEdx(10.0) < with_collective


def test_li_petrasso_hot_plasma_stops_less():
    cold = LiPetrasso.from_field(1.007, 1, [[2.014, 1, 0.1, 1e24]], Te=0.1)
    hot = LiPetrasso.from_field(1.007, 1, [[2.014, 1, 10.0, 1e24]], Te=10.0)
    assert hot.dEdx(3.0) < cold.dEdx(3.0)


def test_li_petrasso_coulomb_logarithm(deuterium_plasma):
    LL = deuterium_plasma.coulomb_logarithm(3.0)
    assert LL.shape == (2,)
    assert np.all(LL > 1.0)
    assert np.all(LL < 20.0)


def test_li_petrasso_charge_scaling():
    proton = LiPetrasso.from_field(1.007, 1, [[2.014, 1, 1.0, 1e24]], Te=1.0)
    alpha = LiPetrasso.from_field(4.0015, 2, [[2.014, 1, 1.0, 1e24]], Te=1.0)
    # equal velocity: same E/m
    ratio = alpha.dEdx(4.0015 * 2.0) / proton.dEdx(1.007 * 2.0)
    assert 3.0 < ratio < 5.0


def test_li_petrasso_round_trip(deuterium_plasma):
    deuterium_plasma.set_mode("areal_density")
    E_exit = deuterium_plasma.Eout(10.0, 20.0)
    assert 0.1 <= E_exit < 10.0
    assert deuterium_plasma.Ein(E_exit, 20.0) == pytest.approx(10.0, rel=1e-6)


@pytest.mark.parametrize("call", [
    lambda: LiPetrasso(0.0, 1, [Species(2.014, 1, 1.0, 1e24)], Te=1.0),
    lambda: LiPetrasso(1.007, 0, [Species(2.014, 1, 1.0, 1e24)], Te=1.0),
    lambda: LiPetrasso(1.007, 1, [], Te=1.0),
    lambda: LiPetrasso.from_arrays(1.007, 1, [2.014, 1.0], [1], [1.0], [1e24]),
    lambda: LiPetrasso.from_field(1.007, 1, [[2.014, 1, 1.0]]),
    lambda: LiPetrasso(1.007, 1, [Species(2.014, -1, 1.0, 1e24)], Te=1.0),
])
def test_li_petrasso_invalid(call):
    with pytest.raises(ValueError):
        call()


def test_plasma_summary(deuterium_plasma, capsys):
    deuterium_plasma.summary()
    out = capsys.readouterr().out
    assert "Li-Petrasso" in out
    assert "Debye length" in out


# ------------------------------
# Grabowski

def test_grabowski_positive_and_continuous():
    model = Grabowski.from_field(1.007, 1, [[2.014, 1, 1.0, 1e24]], Te=1.0)
    grid = np.geomspace(model.get_Emin(), model.get_Emax(), 3000)
    assert_positive_and_continuous(rates_on(model, grid))


def test_grabowski_domain_scales_with_mass():
    model = Grabowski.from_field(4.0015, 2, [[2.014, 1, 1.0, 1e24]], Te=1.0)
    assert model.get_Emin() == pytest.approx(0.40015)
    assert model.get_Emax() == pytest.approx(120.045)
    with pytest.raises(DomainError):
        model.dEdx(0.2)
    assert model.dEdx(100.0) > 0


def test_grabowski_comparable_to_li_petrasso(deuterium_plasma):
    model = Grabowski.from_field(1.007, 1, [[2.014, 1, 1.0, 1e24]], Te=1.0)
    ratio = model.dEdx(10.0) / deuterium_plasma.dEdx(10.0)
    assert 0.3 < ratio < 3.0


# ------------------------------
# Zimmerman

def test_fermi_energy_aluminum_electrons():
    # Free-electron Fermi energy of solid Al is 11.7 eV
    assert fermi_energy(1.81e23) == pytest.approx(11.7e-3, rel=0.02)


def test_zimmerman_positive_and_continuous(aluminum_plasma):
    model = Zimmerman(1.007, 1, aluminum_plasma, Te=0.1)
    assert model.ne == pytest.approx(3.0 * 6.026e22)
    assert_positive_and_continuous(rates_on(model))


def test_zimmerman_components(aluminum_plasma):
    model = Zimmerman(1.007, 1, aluminum_plasma, Te=0.1)
    free = model.dEdx_free_electron(5.0)
    bound = model.dEdx_bound_electron(5.0)
    ion = model.dEdx_ion(5.0)
    assert free > 0 and bound > 0 and ion >= 0
    assert model.dEdx(5.0) == pytest.approx(free + bound + ion)


def test_zimmerman_neutral_has_only_bound_electrons():
    model = Zimmerman(1.007, 1, [Species(26.98, 13, 0.01, 6.026e22, 0.0)], Te=0.01)
    assert model.electrons is None
    assert model.dEdx_free_electron(5.0) == 0.0
    assert model.dEdx_ion(5.0) == 0.0
    assert_positive_and_continuous(rates_on(model, np.geomspace(0.1, 30.0, 500)))


def test_zimmerman_fully_ionized_has_no_bound_electrons():
    model = Zimmerman(1.007, 1, [Species(2.014, 1, 1.0, 1e24, 1.0)], Te=1.0)
    assert model.dEdx_bound_electron(5.0) == 0.0
    assert np.isnan(model.mean_excitation_energy()[0])
    assert model.dEdx(5.0) > 0


def test_zimmerman_degeneracy_correction(aluminum_plasma):
    model = Zimmerman(1.007, 1, aluminum_plasma, Te=0.005)
    classical = model.dEdx(2.0)
    model.set_quantum(True)
    assert model.electron_temperature > 0.005
    assert model.dEdx(2.0) != classical


def test_zimmerman_requires_ionization_state():
    with pytest.raises(ValueError, match="ionization"):
        Zimmerman(1.007, 1, [Species(26.98, 13, 0.1, 6.026e22)], Te=0.1)


@pytest.mark.parametrize("call", [
    lambda: Zimmerman(1.007, 1, [Species(26.98, 13, 0.1, 6.026e22, 3.0)], Te=0.0),
    lambda: Zimmerman(1.007, 1, [Species(26.98, 13, 0.1, 6.026e22, 3.0), Species.electron(0.1, 1e23)], Te=0.1),
    lambda: Zimmerman.from_field(1.007, 1, [[26.98, 13, 0.1, 6.026e22]], Te=0.1),
    lambda: Zimmerman.from_arrays(1.007, 1, [26.98], [13], [0.1], [6.026e22], [3.0, 1.0], Te=0.1),
])
def test_zimmerman_invalid(call):
    with pytest.raises(ValueError):
        call()


def test_partially_ionized_from_arrays(aluminum_plasma):
    model = Zimmerman.from_arrays(1.007, 1, [26.98], [13], [0.1], [6.026e22], [3.0], Te=0.1)
    reference = Zimmerman(1.007, 1, aluminum_plasma, Te=0.1)
    assert model.dEdx(5.0) == pytest.approx(reference.dEdx(5.0))


# ------------------------------
# Mehlhorn

def test_scaled_mean_excitation():
    assert scaled_mean_excitation(13, 0) == pytest.approx(166.0)
    # Z - Zbar = 10 bound electrons: Ne-like I(10) scaled by (13/10)^2
    assert scaled_mean_excitation(13, 3) == pytest.approx(169.0 / 100.0 * 137.0)
    with pytest.raises(ValueError):
        scaled_mean_excitation(13, 13)


def test_mehlhorn_positive_and_continuous(aluminum_plasma):
    model = Mehlhorn(1.007, 1, aluminum_plasma, Te=0.1)
    assert model.plasma is not None
    assert_positive_and_continuous(rates_on(model))


def test_mehlhorn_neutral_matches_bethe_bloch():
    mehlhorn = Mehlhorn(1.007, 1, [Species(26.98, 13, 0.001, 6.026e22, 0.0)], Te=0.001)
    bethe = BetheBloch(1.007, 1, [26.98], [13], [6.026e22])
    assert mehlhorn.plasma is None
    assert mehlhorn.dEdx(10.0) == pytest.approx(bethe.dEdx(10.0), rel=1e-3)


def test_mehlhorn_fully_stripped_is_plasma_only():
    model = Mehlhorn(1.007, 1, [Species(2.014, 1, 1.0, 1e24, 1.0)], Te=1.0)
    assert model.dEdx_cold(5.0) == 0.0
    assert model.dEdx(5.0) == pytest.approx(model.plasma.dEdx_MeV_um(5.0))


def test_mehlhorn_cold_part_uses_smaller_electronic_term():
    model = Mehlhorn(1.007, 1, [Species(26.98, 13, 0.001, 6.026e22, 0.0)], Te=0.001)
    Zeff = model.effective_charge(0.1)
    lss = model.dEdx_lss(0.1, Zeff)[0]
    bethe = model.dEdx_bethe(0.1, Zeff)[0]
    assert model.dEdx_cold(0.1) == pytest.approx(min(lss, bethe) + model.dEdx_nuclear(0.1, Zeff)[0])


def test_mehlhorn_effective_charge():
    model = Mehlhorn(4.0015, 2, [Species(26.98, 13, 0.001, 6.026e22, 0.0)], Te=0.001)
    assert 0.0 <= model.effective_charge(0.1) < model.effective_charge(10.0) <= 2.0
    assert model.effective_charge(30.0) == pytest.approx(2.0, rel=1e-3)


def test_mehlhorn_manual_mean_excitation(aluminum_plasma):
    scaled = Mehlhorn(1.007, 1, aluminum_plasma, Te=0.1)
    manual = Mehlhorn(1.007, 1, aluminum_plasma, Te=0.1, mean_excitation=[500.0])
    np.testing.assert_allclose(manual.mean_excitation, [500.0])
    assert manual.dEdx(10.0) < scaled.dEdx(10.0)
    with pytest.raises(ValueError):
        Mehlhorn(1.007, 1, aluminum_plasma, Te=0.1, mean_excitation=[500.0, 600.0])


def test_mehlhorn_summary(aluminum_plasma, capsys):
    Mehlhorn(1.007, 1, aluminum_plasma, Te=0.1).summary()
    out = capsys.readouterr().out
    assert "Mehlhorn" in out
    assert "scaled neutral" in out


# ------------------------------
# Brown-Preston-Singleton

@pytest.fixture(scope="module")
def bps_plasma():
    return BPS.from_field(1.007, 1, [[2.014, 1, 1.0, 1e24]], Te=1.0)


def test_bps_positive_and_continuous(bps_plasma):
    grid = np.geomspace(bps_plasma.get_Emin(), bps_plasma.get_Emax(), 200)
    assert_positive_and_continuous(rates_on(bps_plasma, grid), max_step=0.1)


def test_bps_domain_scales_with_mass():
    model = BPS.from_field(4.0015, 2, [[2.014, 1, 1.0, 1e24]], Te=1.0)
    assert model.get_Emin() == pytest.approx(0.040015)
    assert model.get_Emax() == pytest.approx(200.075)
    with pytest.raises(DomainError):
        model.dEdx(0.02)
    with pytest.raises(DomainError):
        model.dEdx_quantum(250.0)


def test_bps_components_sum_to_total(bps_plasma):
    short = bps_plasma.dEdx_short(3.0)
    long = bps_plasma.dEdx_long(3.0)
    quantum = bps_plasma.dEdx_quantum(3.0)
    assert bps_plasma.dEdx_MeV_um(3.0) == pytest.approx(short + long + quantum, rel=1e-9)


def test_bps_quantum_correction_reduces_fast_stopping(bps_plasma):
    total = bps_plasma.dEdx(10.0)
    assert bps_plasma.dEdx_quantum(10.0) < 0 < total


def test_bps_comparable_to_li_petrasso(bps_plasma, deuterium_plasma):
    ratio = bps_plasma.dEdx(10.0) / deuterium_plasma.dEdx(10.0)
    assert 0.5 < ratio < 2.0


def test_bps_dispersion_limits(bps_plasma):
    assert bps_plasma.dispersion(0.0) == pytest.approx(1.0 / bps_plasma.debye_length() ** 2, rel=1e-9)
    # far above the electron thermal speed F(v) -> -sum(w_p^2) / v^2
    v = 100.0 * bps_plasma.thermal_velocity().max()
    expected = -np.sum(bps_plasma.plasma_frequency() ** 2) / v ** 2
    F = bps_plasma.dispersion(v)
    assert F.real == pytest.approx(expected, rel=1e-3)
    assert abs(F.imag) < 1e-6 * abs(F.real)


def test_bps_uses_loose_path_settings(bps_plasma):
    assert bps_plasma.settings == BPS_SETTINGS
    assert BPS_SETTINGS.quad_epsrel > bps_plasma.epsrel


def test_bps_round_trip(bps_plasma):
    x = bps_plasma.Thickness(3.0, 1.0)
    assert x > 0
    assert bps_plasma.Eout(3.0, x) == pytest.approx(1.0, rel=1e-3)


def test_bps_summary(bps_plasma, capsys):
    bps_plasma.summary()
    out = capsys.readouterr().out
    assert "BPS" in out
    assert "Screening wave number" in out
