"""
Batch evaluation of stopping-power queries.

Runs many independent queries (stopping power, exit energy, entrance energy,
thickness or range) over an energy grid and collects the results into a
:class:`pandas.DataFrame`. Queries do not mutate the model, so they can be
spread over a :class:`~concurrent.futures.ProcessPoolExecutor`; each worker
receives its own pickled copy of the model, frozen at the unit mode the
model had when :func:`compute_table` was called.

Examples
--------

>>> model = LiPetrasso.from_arrays(1, 1, [2.0, ELECTRON_MASS_AMU], [1, -1], [1, 1], [1e24, 1e24])
>>> df = compute_table(model, np.linspace(1, 15, 50), quantity="Eout", thickness=100.0)
>>> df.columns.tolist()
['energy', 'Eout', 'ranged_out']
"""

from concurrent.futures import ProcessPoolExecutor
from functools import partial
import logging
import time
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd
from tqdm import tqdm

from pystoppow.transport import engine
from pystoppow.utils.parallel import grid_chunksize, grid_worker_count

logger = logging.getLogger(__name__)

#: Quantity name -> name of the extra argument it needs (None if it needs none)
QUANTITIES = {
    "dEdx": None,
    "Eout": "thickness",
    "Ein": "thickness",
    "Thickness": "E_final",
    "Range": None,
}


def _run_energy_task(func, energy):
    """
    Internal wrapper for multiprocessing task execution.

    :param func: Callable taking one energy.
    :type func: Callable
    :param energy: Energy in MeV.
    :type energy: float
    :return: Output of func(energy)
    """
    return func(energy)


def _evaluate(model, quantity: str, argument: Optional[float], energy: float) -> dict:
    """
    Evaluate one query at one energy.

    :param model: Stopping-power model.
    :param quantity: One of :data:`QUANTITIES`.
    :param argument: Thickness (for Eout/Ein) or final energy (for Thickness).
    :param energy: Energy in MeV.

    :returns: Dictionary of result columns for this energy.
    :rtype: dict
    """
    if quantity == "dEdx":
        return {"dEdx": model.dEdx(energy)}
    if quantity == "Eout":
        result = engine.energy_out(model, energy, argument)
        return {"Eout": result.energy, "ranged_out": result.ranged_out}
    if quantity == "Ein":
        return {"Ein": engine.energy_in(model, energy, argument)}
    if quantity == "Thickness":
        return {"Thickness": engine.thickness(model, energy, argument)}
    return {"Range": engine.particle_range(model, energy)}


def compute_table(
    model,
    energies: Union[float, Sequence[float], np.ndarray],
    quantity: str = "dEdx",
    thickness: Optional[float] = None,
    E_final: Optional[float] = None,
    parallel: bool = False,
    max_workers: Optional[int] = None,
    show_progress: bool = True,
) -> pd.DataFrame:
    """
    Evaluate a query over an energy grid.

    For each energy:
      - ``dEdx``: stopping power in the model's current unit
      - ``Eout``: exit energy after ``thickness`` (plus a ``ranged_out`` column)
      - ``Ein``: entrance energy for that exit energy after ``thickness``
      - ``Thickness``: thickness from that energy down to ``E_final``
      - ``Range``: range of the particle

    Errors raised by any single query propagate to the caller.

    :param model: Stopping-power model.
    :type model: StoppingPowerModel
    :param energies: Energies in MeV.
    :type energies: float or Sequence[float] or np.ndarray
    :param quantity: Quantity to compute.
    :type quantity: str
    :param thickness: Thickness for ``Eout`` and ``Ein`` in the current unit.
    :type thickness: float, optional
    :param E_final: Final energy in MeV for ``Thickness``.
    :type E_final: float, optional
    :param parallel: Whether to use a process pool.
    :type parallel: bool
    :param max_workers: Requested number of worker processes; see
        :func:`~pystoppow.utils.parallel.grid_worker_count`.
    :type max_workers: int, optional
    :param show_progress: Whether to display a tqdm progress bar.
    :type show_progress: bool

    :returns: One row per energy, with ``energy`` and the result columns.
        ``df.attrs`` records the unit mode and units.
    :rtype: pandas.DataFrame

    :raises ValueError: If the quantity is unknown or its extra argument is missing.
    """
    if quantity not in QUANTITIES:
        raise ValueError(f"Unknown quantity '{quantity}'. Choose from {list(QUANTITIES)}.")
    needed = QUANTITIES[quantity]
    argument = {"thickness": thickness, "E_final": E_final}.get(needed)
    if needed is not None and argument is None:
        raise ValueError(f"Quantity '{quantity}' requires the '{needed}' argument.")

    energy_grid = np.atleast_1d(np.asarray(energies, dtype=float))
    func = partial(_evaluate, model, quantity, argument)
    mode = model.get_mode()
    start_time = time.time()

    if parallel and len(energy_grid) > 1:
        worker_count = grid_worker_count(energy_grid, max_workers=max_workers)
        chunksize = grid_chunksize(energy_grid, worker_count)
        with ProcessPoolExecutor(max_workers=worker_count) as executor:
            results = list(tqdm(
                executor.map(partial(_run_energy_task, func), energy_grid, chunksize=chunksize),
                total=len(energy_grid),
                desc=f"[{worker_count} workers] {model.model_type} {quantity}",
                unit="energy",
                disable=not show_progress,
            ))
    else:
        results = [func(E) for E in tqdm(energy_grid, desc=f"{model.model_type} {quantity}",
                                          unit="energy", disable=not show_progress)]

    logger.info("Computed %d %s values in %.2f s", len(energy_grid), quantity, time.time() - start_time)

    df = pd.DataFrame(results)
    df.insert(0, "energy", energy_grid)
    df.attrs["mode"] = mode.value
    df.attrs["rate_unit"] = mode.rate_unit
    df.attrs["thickness_unit"] = mode.thickness_unit
    return df


def stopping_power_table(model, energies: Union[Sequence[float], np.ndarray]) -> pd.DataFrame:
    """
    Tabulate a model's stopping power in both unit systems.

    The model's mode is not touched.

    :param model: Stopping-power model.
    :type model: StoppingPowerModel
    :param energies: Energies in MeV, all within the validity domain.
    :type energies: Sequence[float] or np.ndarray

    :returns: Columns ``energy``, ``dEdx_MeV_um`` and ``dEdx_MeV_mgcm2``.
    :rtype: pandas.DataFrame
    """
    energy_grid = np.atleast_1d(np.asarray(energies, dtype=float))
    per_length = model.rate_function("length")
    per_areal = model.rate_function("areal_density")
    return pd.DataFrame({
        "energy": energy_grid,
        "dEdx_MeV_um": [per_length(E) for E in energy_grid],
        "dEdx_MeV_mgcm2": [per_areal(E) for E in energy_grid],
    })
