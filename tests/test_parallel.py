import os

import numpy as np
import pytest

from pystoppow.utils.parallel import CHUNKS_PER_WORKER, grid_chunksize, grid_worker_count


@pytest.fixture
def eight_cores(monkeypatch):
    monkeypatch.setattr(os, "cpu_count", lambda: 8)


@pytest.mark.parametrize("energies", [[], [0.5], np.array([2.0]), 0])
def test_single_point_grids_use_one_worker(energies):
    assert grid_worker_count(energies) == 1


def test_large_grid_leaves_one_core_free(eight_cores):
    assert grid_worker_count(np.linspace(0.1, 30.0, 1000)) == 7


def test_workers_never_exceed_grid_points(eight_cores):
    assert grid_worker_count(3) == 3
    assert grid_worker_count([1.0, 2.0], max_workers=6) == 2


def test_unknown_cpu_count(monkeypatch):
    monkeypatch.setattr(os, "cpu_count", lambda: None)
    assert grid_worker_count(50) == 1


def test_requested_workers_honoured(eight_cores):
    assert grid_worker_count(10, max_workers=2) == 2


def test_requested_workers_above_cores_warn(monkeypatch):
    monkeypatch.setattr(os, "cpu_count", lambda: 4)
    with pytest.warns(UserWarning, match=r"max_workers=10 exceeds the 3 cores .* using 3 workers for 10 energies"):
        assert grid_worker_count(np.arange(10), max_workers=10) == 3


@pytest.mark.parametrize("requested", [0, -2])
def test_requested_workers_must_be_positive(requested):
    with pytest.raises(ValueError, match="at least 1"):
        grid_worker_count(10, max_workers=requested)


def test_chunksize_spreads_grid_over_workers():
    assert grid_chunksize(1000, 7) == 36
    assert grid_chunksize(np.zeros(7 * CHUNKS_PER_WORKER), 7) == 1


@pytest.mark.parametrize("energies, workers", [(0, 4), (3, 8), ([1.0, 2.0], 0)])
def test_chunksize_at_least_one(energies, workers):
    assert grid_chunksize(energies, workers) == 1
