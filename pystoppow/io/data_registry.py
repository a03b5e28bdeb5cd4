"""
Atomic data lookup for pystoppow.

This module provides functions to:

- Load the ``elements.json`` periodic table and the ``particles.json``
  light-projectile table shipped with the package
- Resolve an element or particle identifier (name, symbol, atomic number,
  or particle label such as ``"alpha"``) to its mass and default charge
- Retrieve mean excitation energies used by the cold-matter models

All file paths are resolved using :mod:`importlib.resources`, making them portable
within installed packages or local development environments.

Examples
--------

>>> from pystoppow.io.data_registry import lookup
>>> lookup("alpha")
(4.001506179, 2)
>>> lookup("Al")
(26.982, 13)
"""

import os
import json
from functools import lru_cache
from typing import Dict, Tuple, Union


def _load_json(filename: str) -> Dict[str, Dict]:
    """
    Load a JSON resource from :mod:`pystoppow.data`.

    Tries the installed package first, with a fallback to the source tree.

    :param filename: Name of the JSON file inside the data package.
    :type filename: str

    :returns: Parsed JSON content.
    :rtype: dict

    :raises FileNotFoundError: If the file cannot be found in either location.
    """
    try:
        from importlib.resources import files
        path = files("pystoppow.data").joinpath(filename)
        with open(path, "r") as f:
            return json.load(f)
    except (ModuleNotFoundError, FileNotFoundError):
        # Fallback for local use
        local_path = os.path.abspath(
            os.path.join(os.path.dirname(__file__), "..", "data", filename)
        )
        with open(local_path, "r") as f:
            return json.load(f)


@lru_cache(maxsize=None)
def load_lookup_table() -> Dict[str, Dict]:
    """
    Load the chemical elements lookup table.

    :returns: Dictionary mapping element names to their properties.
    :rtype: dict[str, dict]

    :raises FileNotFoundError: If the elements.json file cannot be found.
    :raises json.JSONDecodeError: If the file content is not valid JSON.
    """
    return _load_json("elements.json")


@lru_cache(maxsize=None)
def load_particle_table() -> Dict[str, Dict]:
    """
    Load the light-projectile lookup table (p, d, t, He3, alpha, e).

    :returns: Dictionary mapping particle labels to mass (amu) and charge.
    :rtype: dict[str, dict]
    """
    return _load_json("particles.json")


def get_element(identifier: Union[str, int]) -> Dict:
    """
    Resolve an element identifier to its record in the lookup table.

    The identifier may be a full element name (``"Aluminum"``), a symbol
    (``"Al"``) or an atomic number (``13`` or ``"13"``).

    :param identifier: Element name, symbol or atomic number.
    :type identifier: str or int

    :returns: Copy of the element record, including its ``name``.
    :rtype: dict

    :raises ValueError: If the identifier does not match any element.
    """
    table = load_lookup_table()

    if isinstance(identifier, str) and identifier in table:
        return {"name": identifier, **table[identifier]}

    for name, record in table.items():
        if isinstance(identifier, str) and record["symbol"] == identifier:
            return {"name": name, **record}

    if isinstance(identifier, (int, str)) and str(identifier).isdigit():
        Z = int(identifier)
        for name, record in table.items():
            if record["atomic_number"] == Z:
                return {"name": name, **record}
        raise ValueError(f"No element found with atomic number {Z}")

    raise ValueError(f"Unknown element identifier: {identifier}")


def lookup(identifier: Union[str, int]) -> Tuple[float, int]:
    """
    Return the mass (amu) and default charge of an element or particle.

    Particle labels (``p``, ``d``, ``t``, ``He3``, ``alpha``, ``e``) take
    precedence over element symbols. For elements the default charge is the
    fully stripped nuclear charge ``Z``.

    :param identifier: Particle label, element name, symbol or atomic number.
    :type identifier: str or int

    :returns: Tuple ``(mass_amu, default_charge)``.
    :rtype: tuple[float, int]

    :raises ValueError: If the identifier cannot be resolved.
    """
    particles = load_particle_table()
    if isinstance(identifier, str) and identifier in particles:
        record = particles[identifier]
        return record["mass"], record["charge"]

    record = get_element(identifier)
    return record["atomic_mass"], record["atomic_number"]


def get_mean_excitation_energy(identifier: Union[str, int]) -> float:
    """
    Return the mean excitation energy of a neutral element.

    :param identifier: Element name, symbol or atomic number.
    :type identifier: str or int

    :returns: Mean excitation energy in eV.
    :rtype: float
    """
    return float(get_element(identifier)["mean_excitation_energy"])
