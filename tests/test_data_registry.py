import pytest
from pystoppow.io import data_registry
from pystoppow.io.data_registry import (
    get_element,
    get_mean_excitation_energy,
    load_lookup_table,
    load_particle_table,
    lookup,
)


def test_load_lookup_table_contents():
    table = load_lookup_table()
    assert isinstance(table, dict)
    assert "Hydrogen" in table
    assert table["Aluminum"]["symbol"] == "Al"
    assert table["Aluminum"]["atomic_number"] == 13


def test_every_element_has_required_fields():
    for name, record in load_lookup_table().items():
        for key in ("symbol", "atomic_number", "atomic_mass", "mean_excitation_energy"):
            assert key in record, f"{name} lacks {key}"
        assert record["mean_excitation_energy"] > 0


def test_load_particle_table_contents():
    particles = load_particle_table()
    assert set(particles) >= {"p", "d", "t", "He3", "alpha", "e"}
    assert particles["e"]["charge"] == -1
    assert particles["e"]["mass"] < 1e-3


@pytest.mark.parametrize("identifier", ["Aluminum", "Al", 13, "13"])
def test_get_element_identifiers(identifier):
    record = get_element(identifier)
    assert record["name"] == "Aluminum"
    assert record["symbol"] == "Al"


@pytest.mark.parametrize("identifier", ["Unobtainium", 999, "0"])
def test_get_element_unknown(identifier):
    with pytest.raises(ValueError):
        get_element(identifier)


def test_lookup_particles_take_precedence():
    mass, charge = lookup("alpha")
    assert mass == pytest.approx(4.0015, rel=1e-4)
    assert charge == 2
    mass, charge = lookup("p")
    assert mass == pytest.approx(1.00728, rel=1e-4)
    assert charge == 1


def test_lookup_element_is_fully_stripped():
    mass, charge = lookup("Al")
    assert mass == pytest.approx(26.98, rel=1e-3)
    assert charge == 13
    assert lookup(13) == lookup("Aluminum")


def test_get_mean_excitation_energy():
    assert get_mean_excitation_energy("Al") == pytest.approx(166.0)
    assert get_mean_excitation_energy(1) == pytest.approx(19.2)


def test_load_json_fallback(monkeypatch):
    def missing(package):
        raise ModuleNotFoundError(package)

    monkeypatch.setattr("importlib.resources.files", missing)
    data = data_registry._load_json("particles.json")
    assert "alpha" in data


def test_load_json_fallback_matches_installed(monkeypatch):
    installed = data_registry._load_json("elements.json")
    monkeypatch.setattr("importlib.resources.files", lambda package: (_ for _ in ()).throw(FileNotFoundError()))
    assert data_registry._load_json("elements.json") == installed
