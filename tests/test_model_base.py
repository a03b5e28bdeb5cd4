import logging

import pytest

from pystoppow.exceptions import DomainError, StopPowError
from pystoppow.models.base import Mode, StoppingPowerModel


class LinearModel(StoppingPowerModel):
    model_type = "Linear"

    def get_Emin(self):
        return 1.0

    def get_Emax(self):
        return 10.0

    def _stopping_power(self, E):
        return 0.1 * E


@pytest.fixture
def model():
    return LinearModel(2.0)


@pytest.mark.parametrize("value, expected", [
    ("length", Mode.LENGTH),
    ("areal_density", Mode.AREAL_DENSITY),
    ("rhor", Mode.AREAL_DENSITY),
    (" Length ", Mode.LENGTH),
    (Mode.AREAL_DENSITY, Mode.AREAL_DENSITY),
])
def test_mode_coerce(value, expected):
    assert Mode.coerce(value) is expected


def test_mode_coerce_unknown():
    with pytest.raises(ValueError, match="Unknown mode"):
        Mode.coerce("furlong")


def test_mode_units():
    assert Mode.LENGTH.rate_unit == "MeV/um"
    assert Mode.LENGTH.thickness_unit == "um"
    assert Mode.AREAL_DENSITY.rate_unit == "MeV/(mg/cm2)"
    assert Mode.AREAL_DENSITY.thickness_unit == "mg/cm2"


def test_abstract_model_cannot_be_instantiated():
    with pytest.raises(TypeError):
        StoppingPowerModel(1.0)


@pytest.mark.parametrize("density", [0.0, -1.0, float("nan")])
def test_invalid_density(density):
    with pytest.raises(ValueError, match="density"):
        LinearModel(density)


def test_default_mode_and_switching(model):
    assert model.get_mode() is Mode.LENGTH
    assert model.dEdx(5.0) == pytest.approx(0.5)
    model.set_mode("areal_density")
    assert model.mode is Mode.AREAL_DENSITY
    assert model.dEdx(5.0) == pytest.approx(0.5 * 1e4 / 2e3)
    model.mode = Mode.LENGTH
    assert model.dEdx(5.0) == pytest.approx(0.5)


def test_set_mode_unknown_string_keeps_current_mode(model):
    model.set_mode(Mode.AREAL_DENSITY)
    with pytest.raises(ValueError, match="Unknown mode"):
        model.set_mode("furlongs")
    assert model.get_mode() is Mode.AREAL_DENSITY


def test_mode_change_is_logged(model, caplog):
    with caplog.at_level(logging.DEBUG, logger="pystoppow.models.base"):
        model.set_mode("rhor")
        model.set_mode(Mode.AREAL_DENSITY)
    messages = [r.getMessage() for r in caplog.records]
    assert messages == ["Linear switched to areal_density mode."]


def test_rate_function_is_bound_to_mode(model):
    rate = model.rate_function()
    model.set_mode(Mode.AREAL_DENSITY)
    assert rate(5.0) == pytest.approx(0.5)
    assert model.rate_function("length")(5.0) == pytest.approx(0.5)
    assert model.rate_function()(5.0) == pytest.approx(2.5)


@pytest.mark.parametrize("energy", [0.5, 10.5, float("nan"), float("inf")])
def test_domain_error(model, energy):
    with pytest.raises(DomainError):
        model.dEdx_MeV_um(energy)
    with pytest.raises(DomainError):
        model.dEdx_MeV_mgcm2(energy)


def test_domain_error_hierarchy(model):
    with pytest.raises(StopPowError):
        model.dEdx(20.0)
    with pytest.raises(ValueError):
        model.dEdx(20.0)


def test_domain_bounds_inclusive(model):
    assert model.dEdx(1.0) == pytest.approx(0.1)
    assert model.dEdx(10.0) == pytest.approx(1.0)


def test_repr_and_summary(model, capsys):
    assert "LinearModel" in repr(model)
    model.info = "test target"
    model.summary()
    out = capsys.readouterr().out
    assert "Linear" in out
    assert "MeV/um" in out
    assert "test target" in out
