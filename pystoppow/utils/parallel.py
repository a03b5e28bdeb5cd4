"""
Process-pool sizing for batch evaluation over energy grids.

:func:`pystoppow.transport.batch.compute_table` evaluates one independent
query per grid energy. This module decides how those points are spread over
worker processes:

- :func:`grid_worker_count`: how many processes to start for a grid.
- :func:`grid_chunksize`: how many consecutive grid energies each process
  receives per dispatch.
"""

import math
import os
import warnings

#: Number of dispatches each worker should receive over one grid.
CHUNKS_PER_WORKER = 4


def _grid_size(energies) -> int:
    return len(energies) if hasattr(energies, "__len__") else int(energies)


def grid_worker_count(energies, max_workers: int = None) -> int:
    """
    Number of worker processes for an energy grid.

    One core stays with the parent process, which collects results and
    drives the progress bar. A grid never gets more workers than points.

    :param energies: The energy grid, or its number of points.
    :type energies: Sequence[float] or int
    :param max_workers: Requested number of workers. Values above the
        available cores are reduced with a warning.
    :type max_workers: int or None

    :returns: Number of worker processes (at least 1).
    :rtype: int

    :raises ValueError: If ``max_workers`` is smaller than 1.
    """
    n_points = _grid_size(energies)
    available = max(1, (os.cpu_count() or 1) - 1)

    if max_workers is not None and max_workers < 1:
        raise ValueError(f"max_workers must be at least 1, got {max_workers}.")
    if n_points <= 1:
        return 1
    if max_workers is None:
        return min(n_points, available)

    workers = min(max_workers, available, n_points)
    if max_workers > available:
        warnings.warn(
            f"max_workers={max_workers} exceeds the {available} cores available for batch "
            f"evaluation; using {workers} workers for {n_points} energies."
        )
    return workers


def grid_chunksize(energies, workers: int) -> int:
    """
    Grid energies handed to a worker per dispatch.

    Each worker receives about :data:`CHUNKS_PER_WORKER` chunks, so cheap
    queries (tabulated ``dEdx``) are not dominated by inter-process traffic
    while slow ones (plasma-model ``Range``) still balance across workers.

    :param energies: The energy grid, or its number of points.
    :type energies: Sequence[float] or int
    :param workers: Number of worker processes.
    :type workers: int

    :returns: Chunk size for :meth:`concurrent.futures.Executor.map` (at least 1).
    :rtype: int
    """
    n_points = _grid_size(energies)
    return max(1, math.ceil(n_points / (max(1, workers) * CHUNKS_PER_WORKER)))
