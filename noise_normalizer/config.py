# noise_normalizer/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the noise
normalizer. These values are used if they are not explicitly provided by the
selected preset or by the user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC RUN.
Instead, pass a configuration dictionary to the NoiseNormalizer instance.
================================================================================
"""

# --- Search ---
DEFAULT_SEED = 1337
DEFAULT_PRESET = "perlin3d"

# --- Gradient Ascent Tuning ---
# Base rate for each ascent step. The Perlin kernel has larger derivatives
# than the radial simplex kernel, so it takes smaller steps.
SIMPLEX_BASE_STEP_RATE = 1.0 / 32768
PERLIN_BASE_STEP_RATE = 1.0 / 131072

# If a step does not change the point, the rate is doubled up to this many
# times (7 -> up to 128x the base rate) before the ascent is declared converged.
MAX_STEP_RETRY_DOUBLINGS = 7

# Use this to test a normalization constant: set it to 1/max and check that
# the search no longer finds values above 1. Leave it at 1 to compute the
# unmodified noise bounds.
GRADIENT_MULTIPLIER = 1.0

# --- Kernel Kind IDs ---
KERNEL_RADIAL = 0     # Simplex-style attn^4 falloff
KERNEL_SEPARABLE = 1  # Perlin-style product of per-axis fade curves

KERNEL_KINDS = {
    "radial": KERNEL_RADIAL,
    "separable": KERNEL_SEPARABLE,
}

# --- Fade Curve Profile IDs ---
FADE_QUINTIC = 0
FADE_CUBIC = 1
FADE_NONE = 2

FADE_CURVE_PROFILES = {
    "quintic": FADE_QUINTIC,
    "cubic": FADE_CUBIC,
    "none": FADE_NONE,
}
DEFAULT_FADE_CURVE_PROFILE = "quintic"

# --- Search Modes ---
# 'fixed': a single ascent from the configured starting point.
# 'restarts': repeated ascents from random starting points.
SEARCH_MODES = ("fixed", "restarts")

# --- Compiled Ascent Loop Outcomes ---
CLIMB_CONVERGED = 0
CLIMB_REPORT = 1
CLIMB_EXHAUSTED = 2

# --- Reporting ---
# Stand-in exponent for a zero derivative magnitude, below any real float.
ZERO_MAGNITUDE_EXPONENT = -1100

# --- Parallel Restarts ---
# Number of restarts handed to the worker pool per batch.
RESTARTS_PER_WORKER_BATCH = 4
