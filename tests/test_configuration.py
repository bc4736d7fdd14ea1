import numpy as np
import pytest

from noise_normalizer import PRESETS, ConfigurationError, NoiseNormalizer, get_preset
from noise_normalizer import config as DEFAULTS


@pytest.mark.parametrize("name", sorted(PRESETS))
def test_every_preset_builds(make_normalizer, name):
    normalizer = make_normalizer(name)
    preset = get_preset(name)
    assert normalizer.dimensionality == preset["dimensionality"]
    assert normalizer.gradients.shape == (len(preset["gradients"]), preset["dimensionality"])
    expected_points = 2 ** (preset["dimensionality"] + 1) - 1 if normalizer.is_radial else 2 ** preset["dimensionality"]
    assert len(normalizer.lattice_points) == expected_points


def test_defaults_apply_without_config(logger):
    normalizer = NoiseNormalizer(config={}, logger=logger)
    assert normalizer.settings["preset"] == DEFAULTS.DEFAULT_PRESET
    assert normalizer.max_step_retry_doublings == DEFAULTS.MAX_STEP_RETRY_DOUBLINGS
    assert normalizer.settings["gradient_multiplier"] == DEFAULTS.GRADIENT_MULTIPLIER


def test_user_config_overrides_preset(make_normalizer):
    normalizer = make_normalizer("simplex2d", base_step_rate=0.001, starting_point=[0.1, 0.1])
    assert normalizer.base_step_rate == 0.001
    assert np.array_equal(normalizer.default_starting_point(), [0.1, 0.1])


def test_custom_gradient_table(make_normalizer):
    normalizer = make_normalizer("perlin2d", gradients=[[1, 0], [-1, 0], [0, 1], [0, -1]])
    assert normalizer.gradients.dtype == np.float64
    assert normalizer.gradients.shape == (4, 2)


def test_presets_are_not_mutated_by_multiplier(make_normalizer):
    before = get_preset("perlin2d")["gradients"].copy()
    make_normalizer("perlin2d", gradient_multiplier=3.0)
    assert np.array_equal(get_preset("perlin2d")["gradients"], before)


@pytest.mark.parametrize("overrides, message", [
    ({"preset": "perlin9d"}, "Unknown preset"),
    ({"dimensionality": 0}, "dimensionality"),
    ({"dimensionality": 3}, "3"),
    ({"gradients": []}, "non-empty"),
    ({"gradients": [[1.0, 0.0, 0.0]]}, "3-dimensional"),
    ({"gradients": [[1.0, float("nan")]]}, "non-finite"),
    ({"kernel_kind": "gaussian"}, "kernel_kind"),
    ({"fade_curve_profile": "septic"}, "fade_curve_profile"),
    ({"search_mode": "forever"}, "search_mode"),
    ({"search_mode": "fixed"}, "starting_point"),
    ({"starting_point": [0.1, 0.2, 0.3]}, "starting_point"),
    ({"base_step_rate": 0.0}, "base_step_rate"),
    ({"max_step_retry_doublings": -1}, "max_step_retry_doublings"),
    ({"gradient_multiplier": -2.0}, "gradient_multiplier"),
    ({"kernel_kind": "radial"}, "unskew_constant"),
    ({"base_step_rate": "fast"}, "base_step_rate"),
    ({"base_step_rate": float("nan")}, "base_step_rate"),
    ({"gradient_multiplier": "double"}, "gradient_multiplier"),
    ({"gradient_multiplier": float("inf")}, "gradient_multiplier"),
    ({"starting_point": 0.5}, "starting_point"),
    ({"starting_point": ["a", "b"]}, "starting_point"),
    ({"starting_point": [[0.1, 0.2]]}, "starting_point"),
    ({"starting_point": [0.1, float("nan")]}, "starting_point"),
    ({"max_step_retry_doublings": "7"}, "max_step_retry_doublings"),
    ({"seed": "lucky"}, "seed"),
])
def test_malformed_configuration_is_rejected(logger, overrides, message):
    config = {"preset": "perlin2d", **overrides}
    with pytest.raises(ConfigurationError, match=message):
        NoiseNormalizer(config=config, logger=logger)


def test_radial_kernel_needs_positive_radius(logger):
    with pytest.raises(ConfigurationError, match="kernel_radius_sq"):
        NoiseNormalizer(config={"preset": "simplex2d", "kernel_radius_sq": 0.0}, logger=logger)


@pytest.mark.parametrize("overrides", [
    {"kernel_radius_sq": "wide"},
    {"kernel_radius_sq": float("nan")},
    {"kernel_radius_sq": float("inf")},
])
def test_radial_kernel_needs_finite_radius(logger, overrides):
    with pytest.raises(ConfigurationError, match="kernel_radius_sq"):
        NoiseNormalizer(config={"preset": "simplex2d", **overrides}, logger=logger)


@pytest.mark.parametrize("value", ["skewed", float("nan"), [0.1]])
def test_radial_kernel_needs_numeric_unskew_constant(logger, value):
    with pytest.raises(ConfigurationError, match="unskew_constant"):
        NoiseNormalizer(config={"preset": "simplex2d", "unskew_constant": value}, logger=logger)
