import numpy as np
import pytest

from noise_normalizer import config as DEFAULTS
from noise_normalizer import kernels

PROFILES = [DEFAULTS.FADE_QUINTIC, DEFAULTS.FADE_CUBIC, DEFAULTS.FADE_NONE]


@pytest.mark.parametrize("profile", PROFILES)
def test_fade_curve_shape(profile):
    assert kernels.fade_curve(0.0, profile) == 1.0
    assert kernels.fade_curve(0.5, profile) == pytest.approx(0.5)
    for t in (1.0, -1.0, 1.5, -3.0):
        assert kernels.fade_curve(t, profile) == 0.0
        assert kernels.d_fade_curve(t, profile) == 0.0
    # Continuous at the support boundary.
    assert abs(kernels.fade_curve(1.0 - 1e-9, profile)) < 1e-8


@pytest.mark.parametrize("profile", PROFILES)
def test_fade_curve_symmetry(profile):
    for t in np.linspace(0.01, 0.99, 25):
        assert kernels.fade_curve(-t, profile) == kernels.fade_curve(t, profile)
        assert kernels.d_fade_curve(-t, profile) == -kernels.d_fade_curve(t, profile)


@pytest.mark.parametrize("profile", PROFILES)
def test_d_fade_curve_matches_finite_difference(profile):
    h = 1e-6
    for t in [-0.9, -0.6, -0.25, 0.1, 0.45, 0.8]:
        numeric = (kernels.fade_curve(t + h, profile) - kernels.fade_curve(t - h, profile)) / (2 * h)
        assert kernels.d_fade_curve(t, profile) == pytest.approx(numeric, rel=1e-6, abs=1e-8)


def test_select_gradients_ties_keep_first():
    point = np.array([0.0, 0.0])
    lattice_points = np.array([[0.0, 0.0]])
    gradients = np.array([[1.0, 0.0], [0.0, 1.0]])
    indices, dots = kernels.select_gradients(point, lattice_points, gradients)
    assert indices[0] == 0
    assert dots[0] == 0.0


def test_select_gradients_invariant_to_table_order():
    rng = np.random.default_rng(11)
    gradients = rng.normal(size=(24, 3))
    lattice_points = rng.random((8, 3))
    point = rng.random(3)
    permutation = rng.permutation(len(gradients))
    shuffled = np.ascontiguousarray(gradients[permutation])

    indices, dots = kernels.select_gradients(point, lattice_points, gradients)
    shuffled_indices, shuffled_dots = kernels.select_gradients(point, lattice_points, shuffled)

    assert np.allclose(dots, shuffled_dots)
    assert np.array_equal(gradients[indices], shuffled[shuffled_indices])


def test_select_gradients_is_argmax():
    rng = np.random.default_rng(5)
    gradients = rng.normal(size=(12, 2))
    lattice_points = rng.random((7, 2))
    point = rng.random(2)
    indices, dots = kernels.select_gradients(point, lattice_points, gradients)
    all_dots = (point - lattice_points) @ gradients.T
    assert np.array_equal(indices, np.argmax(all_dots, axis=1))
    assert np.allclose(dots, all_dots.max(axis=1))


def test_radial_kernel_zero_at_support_boundary():
    lattice_points = np.array([[0.0, 0.0]])
    gradients = np.array([[1.0, 0.0]])
    value, derivative, _, _ = kernels.evaluate(
        np.array([0.5, 0.0]), lattice_points, gradients,
        DEFAULTS.KERNEL_RADIAL, 0.25, DEFAULTS.FADE_QUINTIC
    )
    assert value == 0.0
    assert np.all(derivative == 0.0)

    inside, _, _, _ = kernels.evaluate(
        np.array([0.5 - 1e-6, 0.0]), lattice_points, gradients,
        DEFAULTS.KERNEL_RADIAL, 0.25, DEFAULTS.FADE_QUINTIC
    )
    assert 0.0 < inside < 1e-20


def test_separable_kernel_zero_at_support_boundary():
    lattice_points = np.array([[0.0, 0.0]])
    gradients = np.array([[1.0, 1.0]])
    value, derivative, _, _ = kernels.evaluate(
        np.array([1.0, 0.3]), lattice_points, gradients,
        DEFAULTS.KERNEL_SEPARABLE, 0.0, DEFAULTS.FADE_QUINTIC
    )
    assert value == 0.0
    assert np.all(derivative == 0.0)


def test_try_move_doubles_until_the_point_moves():
    point = np.array([1.0e6])
    derivative = np.array([1.0])
    # 2^-40 is lost against 1e6 (ulp 2^-33); 2^-33 is not.
    assert kernels.try_move(point, derivative, 2.0 ** -40, 7, False)
    assert point[0] > 1.0e6

    stuck = np.array([1.0e6])
    assert not kernels.try_move(stuck, derivative, 2.0 ** -40, 6, False)
    assert stuck[0] == 1.0e6


def test_try_move_clamps_to_unit_cube():
    point = np.array([0.999, 0.001])
    assert kernels.try_move(point, np.array([1.0, -1.0]), 1.0, 7, True)
    assert np.array_equal(point, [1.0, 0.0])

    # Pinned against the boundary: nothing can move.
    assert not kernels.try_move(point, np.array([1.0, -1.0]), 1.0, 7, True)
