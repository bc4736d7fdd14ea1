import numpy as np
import pytest

from noise_normalizer import AscentResult, fold_best, search


def make_result(value):
    empty = np.zeros(2)
    return AscentResult(value, empty, empty, np.zeros(4, dtype=np.int64), empty, True, 1)


def test_fold_best():
    low, high, tie = make_result(0.5), make_result(0.9), make_result(0.9)
    assert fold_best(None, low) is low
    assert fold_best(low, high) is high
    assert fold_best(high, low) is high
    assert fold_best(high, tie) is high


def test_search_finds_perlin2d_maximum(make_normalizer):
    reports = list(search(make_normalizer("perlin2d"), num_restarts=6, seed=2024))

    assert [r.index for r in reports] == list(range(6))
    best_values = [r.best.value for r in reports]
    assert best_values == sorted(best_values)
    assert reports[-1].best.value == max(r.result.value for r in reports)
    assert reports[-1].best.value == pytest.approx(1.0, abs=1e-9)


# Best of 30 seeded perlin3d restarts. The edge gradients give many local maxima.
PERLIN_3D_SEED_1_BEST = 1.0363538112118034


def test_seeded_perlin3d_search_matches_recorded_best(make_normalizer):
    reports = list(search(make_normalizer("perlin3d"), num_restarts=30, seed=1))

    values = [r.result.value for r in reports]
    best = reports[-1].best
    assert best.value == pytest.approx(PERLIN_3D_SEED_1_BEST, rel=1e-6)
    assert best.value == max(values)
    assert best is reports[values.index(max(values))].result
    assert min(values) < best.value - 1e-3
    assert np.all((best.point >= 0.0) & (best.point <= 1.0))


def test_search_is_deterministic_for_a_seed(make_normalizer):
    normalizer = make_normalizer("perlin3d")
    first = list(search(normalizer, num_restarts=3, seed=99))
    second = list(search(normalizer, num_restarts=3, seed=99))
    for a, b in zip(first, second):
        assert np.array_equal(a.result.starting_point, b.result.starting_point)
        assert a.result.value == b.result.value
    assert first[-1].best.value == second[-1].best.value


def test_search_uses_configured_seed(make_normalizer):
    a = next(search(make_normalizer("perlin2d", seed=5), num_restarts=1))
    b = next(search(make_normalizer("perlin2d"), num_restarts=1, seed=5))
    assert np.array_equal(a.result.starting_point, b.result.starting_point)


def test_search_with_injected_sampler(make_normalizer):
    reports = list(search(make_normalizer("perlin2d"), num_restarts=2, sampler=lambda n: np.full(n, 0.25)))
    for report in reports:
        assert np.array_equal(report.result.starting_point, [0.25, 0.25])


def test_unbounded_search_can_be_stopped(make_normalizer):
    reports = search(make_normalizer("perlin2d"), seed=1)
    taken = [next(reports) for _ in range(3)]
    reports.close()
    assert [r.index for r in taken] == [0, 1, 2]


def test_simplex_starting_points_are_unskewed(make_normalizer):
    normalizer = make_normalizer("simplex2d")
    point = normalizer.sample_starting_point(lambda n: np.array([0.3, 0.6]))
    g = normalizer.unskew_constant
    assert np.allclose(point, [0.3 + 0.9 * g, 0.6 + 0.9 * g])


def test_parallel_search_matches_serial(make_normalizer):
    normalizer = make_normalizer("perlin2d")
    serial = list(search(normalizer, num_restarts=4, seed=3))
    parallel = list(search(normalizer, num_restarts=4, seed=3, workers=2))
    assert [r.index for r in parallel] == [0, 1, 2, 3]
    for a, b in zip(serial, parallel):
        assert np.array_equal(a.result.starting_point, b.result.starting_point)
        assert a.result.value == b.result.value
    assert serial[-1].best.value == parallel[-1].best.value
