import numpy as np
import pytest
from pystoppow.utils.interpolation import Interpolator, TableCursor


@pytest.fixture
def curve():
    energy = np.array([1.0, 2.0, 4.0, 8.0, 16.0])
    values = np.array([10.0, 8.0, 6.0, 4.0, 2.0])
    return energy, values


def test_cursor_matches_numpy_interp(curve):
    energy, values = curve
    cursor = TableCursor(energy, values)
    queries = np.linspace(1.0, 16.0, 41)
    np.testing.assert_allclose([cursor(p) for p in queries], np.interp(queries, energy, values))


def test_cursor_exact_nodes(curve):
    energy, values = curve
    cursor = TableCursor(energy, values)
    for e, v in zip(energy, values):
        assert cursor(e) == pytest.approx(v)


def test_cursor_two_point_table():
    cursor = TableCursor([1.0, 10.0], [10.0, 5.0])
    assert 5.0 < cursor(5.0) < 10.0
    assert cursor(5.0) == pytest.approx(10.0 - 5.0 * 4.0 / 9.0)


def test_cursor_reuses_neighbouring_interval(curve):
    energy, values = curve
    cursor = TableCursor(energy, values)
    cursor(1.5)
    assert cursor.index == 0
    cursor(3.0)
    assert cursor.index == 1
    cursor(12.0)
    assert cursor.index == 3
    cursor(7.0)
    assert cursor.index == 2


def test_cursor_downward_sweep(curve):
    energy, values = curve
    cursor = TableCursor(energy, values)
    sweep = np.linspace(16.0, 1.0, 200)
    np.testing.assert_allclose([cursor(e) for e in sweep], np.interp(sweep, energy, values))


def test_cursor_shared_hint_is_harmless(curve):
    energy, values = curve
    cursor = TableCursor(energy, values)
    first = cursor(15.0)
    cursor(1.1)
    assert cursor(15.0) == first


def test_cursor_loglog_power_law():
    energy = np.array([1.0, 10.0, 100.0])
    values = 3.0 * energy ** -0.5
    cursor = TableCursor(energy, values, loglog=True)
    assert cursor(5.0) == pytest.approx(3.0 * 5.0 ** -0.5)


def test_cursor_out_of_bounds(curve):
    cursor = TableCursor(*curve)
    with pytest.raises(ValueError, match="out of bounds"):
        cursor(0.5)
    with pytest.raises(ValueError, match="out of bounds"):
        cursor(16.5)


@pytest.mark.parametrize("x, y, loglog", [
    ([1.0, 2.0], [1.0], False),
    ([1.0], [1.0], False),
    ([1.0, 1.0, 2.0], [1.0, 2.0, 3.0], False),
    ([2.0, 1.0], [1.0, 2.0], False),
    ([1.0, 2.0], [1.0, 0.0], True),
])
def test_cursor_invalid_tables(x, y, loglog):
    with pytest.raises(ValueError):
        TableCursor(x, y, loglog=loglog)


def test_interpolate_linear(curve):
    energy, values = curve
    interp = Interpolator(energy, values)
    test_e = [1.5, 5.0, 12.0]
    np.testing.assert_allclose(interp.interpolate(energy=test_e), np.interp(test_e, energy, values))


def test_interpolate_scalar_returns_array(curve):
    result = Interpolator(*curve).interpolate(energy=2.0)
    assert result.shape == (1,)
    assert result[0] == pytest.approx(8.0)


def test_interpolate_loglog():
    energy = np.array([1, 10, 100])
    values = np.array([10, 100, 1000])
    interp = Interpolator(energy, values, loglog=True)
    assert np.allclose(interp.interpolate(energy=[10]), [100], rtol=1e-4)


def test_out_of_bounds_energy(curve):
    interp = Interpolator(*curve)
    with pytest.raises(ValueError, match="out of bounds"):
        interp.interpolate(energy=[0.5, 3.5])


def test_loglog_invalid_values():
    energy = np.array([0.0, 1.0, 10.0])
    values = np.array([1.0, 2.0, 3.0])
    interp = Interpolator(energy, values, loglog=True)
    with pytest.raises(ValueError, match="Log-log"):
        interp.interpolate(energy=[1.0])
