# noise_normalizer/presets.py

"""
================================================================================
NOISE FAMILY PRESETS
================================================================================
Named, ready-to-run configurations for the supported noise families. Each
preset is a dictionary with the same keys a user configuration may override
(see NoiseNormalizer). Select one by name with get_preset().

Data Contract:
---------------
- Every preset defines: dimensionality, kernel_kind, gradients, search_mode.
- Radial (simplex-style) presets also define: unskew_constant,
  kernel_radius_sq, starting_point, base_step_rate.
- Separable (Perlin-style) presets also define: fade_curve_profile,
  base_step_rate.
================================================================================
"""

from . import config as DEFAULTS
from . import gradient_tables

PRESETS = {
    # SuperSimplex-style 2D noise. The reference configuration.
    "simplex2d": {
        "dimensionality": 2,
        "kernel_kind": "radial",
        "gradients": gradient_tables.SIMPLEX_2D_12,
        "unskew_constant": -0.211324865405187,
        "kernel_radius_sq": 2.0 / 3.0,
        "starting_point": [0.2, 0.6],
        "base_step_rate": DEFAULTS.SIMPLEX_BASE_STEP_RATE,
        "search_mode": "fixed",
    },
    # Classic 3D simplex lattice, unskew (1/sqrt(4) - 1) / 3.
    "simplex3d": {
        "dimensionality": 3,
        "kernel_kind": "radial",
        "gradients": gradient_tables.PERLIN_3D_EDGES,
        "unskew_constant": -1.0 / 6.0,
        "kernel_radius_sq": 0.6,
        "starting_point": [0.35, 0.15, -0.05],
        "base_step_rate": DEFAULTS.SIMPLEX_BASE_STEP_RATE,
        "search_mode": "fixed",
    },
    "perlin2d": {
        "dimensionality": 2,
        "kernel_kind": "separable",
        "gradients": gradient_tables.PERLIN_2D_SQUARE,
        "fade_curve_profile": "quintic",
        "base_step_rate": DEFAULTS.PERLIN_BASE_STEP_RATE,
        "search_mode": "restarts",
    },
    "perlin3d": {
        "dimensionality": 3,
        "kernel_kind": "separable",
        "gradients": gradient_tables.PERLIN_3D_EDGES,
        "fade_curve_profile": "quintic",
        "base_step_rate": DEFAULTS.PERLIN_BASE_STEP_RATE,
        "search_mode": "restarts",
    },
    "perlin3d_sponge": {
        "dimensionality": 3,
        "kernel_kind": "separable",
        "gradients": gradient_tables.SPONGE_3D_256,
        "fade_curve_profile": "quintic",
        "base_step_rate": DEFAULTS.PERLIN_BASE_STEP_RATE,
        "search_mode": "restarts",
    },
    "perlin4d": {
        "dimensionality": 4,
        "kernel_kind": "separable",
        "gradients": gradient_tables.PERLIN_4D,
        "fade_curve_profile": "quintic",
        "base_step_rate": DEFAULTS.PERLIN_BASE_STEP_RATE,
        "search_mode": "restarts",
    },
}


def get_preset(name: str) -> dict:
    """Returns a shallow copy of the named preset. Raises KeyError if unknown."""
    return dict(PRESETS[name])
