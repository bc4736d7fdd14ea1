# noise_normalizer/normalizer.py

"""
================================================================================
CORE NOISE NORMALIZER
================================================================================
This module contains the NoiseNormalizer class, which estimates the largest
value a gradient noise function can output by gradient ascent, so the noise
can later be divided by it.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): Parameters which override the selected preset, which in
      turn overrides the internal defaults. Expected keys include 'preset',
      'gradients', 'kernel_kind', 'base_step_rate', etc.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - evaluate(): the noise value, derivative and gradient selection at a point.
    - ascend(): an immutable AscentResult for one gradient ascent run.
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same configuration and starting point, ascend() is
  deterministic. Results never alias the arrays used while climbing.
================================================================================
"""

import logging
import math
from typing import NamedTuple

import numpy as np

from . import config as DEFAULTS
from . import kernels
from . import lattice
from . import presets

# --- Ascent Driver States ---
ASCENDING = "ascending"
CONVERGED = "converged"
EXHAUSTED = "exhausted"


class ConfigurationError(ValueError):
    """Raised when a normalizer configuration cannot describe a valid run."""


class AscentResult(NamedTuple):
    """The best state seen during one gradient ascent run. Arrays are read-only copies."""
    value: float
    point: np.ndarray
    derivative: np.ndarray
    gradient_indices: np.ndarray
    starting_point: np.ndarray
    converged: bool
    steps: int


def _frozen(array: np.ndarray) -> np.ndarray:
    copy = np.array(array)
    copy.flags.writeable = False
    return copy


def _binary_exponent(x: float) -> int:
    """Unbiased base-2 exponent of a non-negative float (floor(log2(x)))."""
    if x <= 0.0:
        return DEFAULTS.ZERO_MAGNITUDE_EXPONENT
    return math.frexp(x)[1] - 1


class NoiseNormalizer:
    """
    Finds the maximum output of a gradient noise kernel by gradient ascent.
    This class is backend-only; reporting beyond log messages is left to callers.
    """
    def __init__(self, config: dict, logger: logging.Logger):
        """
        Initializes the normalizer.

        Args:
            config (dict): User-defined parameters to override the preset.
            logger (logging.Logger): The logger instance for all output.

        Raises:
            ConfigurationError: If the resulting settings are inconsistent.
        """
        self.logger = logger
        self.user_config = config

        # --- Resolve Preset ---
        preset_name = self.user_config.get('preset', DEFAULTS.DEFAULT_PRESET)
        try:
            preset = presets.get_preset(preset_name)
        except KeyError:
            raise ConfigurationError(
                f"Unknown preset '{preset_name}'. Choose one of: {', '.join(sorted(presets.PRESETS))}."
            ) from None
        self.logger.debug(f"Using preset '{preset_name}'.")

        def setting(key, default=None):
            return self.user_config.get(key, preset.get(key, default))

        # --- Consolidate Configuration ---
        self.settings = {
            'preset': preset_name,
            'dimensionality': setting('dimensionality'),
            'kernel_kind': setting('kernel_kind'),
            'gradients': setting('gradients'),
            'fade_curve_profile': setting('fade_curve_profile', DEFAULTS.DEFAULT_FADE_CURVE_PROFILE),
            'unskew_constant': setting('unskew_constant'),
            'kernel_radius_sq': setting('kernel_radius_sq'),
            'starting_point': setting('starting_point'),
            'base_step_rate': setting('base_step_rate', DEFAULTS.PERLIN_BASE_STEP_RATE),
            'max_step_retry_doublings': setting('max_step_retry_doublings', DEFAULTS.MAX_STEP_RETRY_DOUBLINGS),
            'gradient_multiplier': setting('gradient_multiplier', DEFAULTS.GRADIENT_MULTIPLIER),
            'seed': setting('seed', DEFAULTS.DEFAULT_SEED),
            'search_mode': setting('search_mode', 'restarts'),
        }
        self._validate_settings()

        # --- Public Properties for easy access ---
        self.dimensionality = int(self.settings['dimensionality'])
        self.kernel_id = DEFAULTS.KERNEL_KINDS[self.settings['kernel_kind']]
        self.fade_profile_id = DEFAULTS.FADE_CURVE_PROFILES[self.settings['fade_curve_profile']]
        self.is_radial = self.kernel_id == DEFAULTS.KERNEL_RADIAL
        self.radius_sq = float(self.settings['kernel_radius_sq']) if self.is_radial else 0.0
        self.unskew_constant = float(self.settings['unskew_constant']) if self.is_radial else 0.0
        self.base_step_rate = float(self.settings['base_step_rate'])
        self.max_step_retry_doublings = int(self.settings['max_step_retry_doublings'])

        # Gradients are scaled once, up front, so every evaluation sees the
        # multiplied table.
        self.gradients = np.ascontiguousarray(
            np.asarray(self.settings['gradients'], dtype=np.float64) * float(self.settings['gradient_multiplier'])
        )
        self.lattice_points = lattice.build_lattice(self.kernel_id, self.dimensionality, self.unskew_constant)

        self.logger.info(
            f"NoiseNormalizer initialized: {self.dimensionality}D {self.settings['kernel_kind']} kernel, "
            f"{len(self.gradients)} gradients, {len(self.lattice_points)} lattice points."
        )

    def _validate_settings(self):
        """Rejects configurations that would silently produce meaningless results."""
        s = self.settings

        n = s['dimensionality']
        if not isinstance(n, (int, np.integer)) or isinstance(n, bool) or n < 1:
            raise ConfigurationError(f"dimensionality must be a positive integer, got {n!r}.")

        if s['kernel_kind'] not in DEFAULTS.KERNEL_KINDS:
            raise ConfigurationError(
                f"Unknown kernel_kind {s['kernel_kind']!r}. Expected one of {sorted(DEFAULTS.KERNEL_KINDS)}."
            )
        if s['fade_curve_profile'] not in DEFAULTS.FADE_CURVE_PROFILES:
            raise ConfigurationError(
                f"Unknown fade_curve_profile {s['fade_curve_profile']!r}. "
                f"Expected one of {sorted(DEFAULTS.FADE_CURVE_PROFILES)}."
            )
        if s['search_mode'] not in DEFAULTS.SEARCH_MODES:
            raise ConfigurationError(
                f"Unknown search_mode {s['search_mode']!r}. Expected one of {list(DEFAULTS.SEARCH_MODES)}."
            )

        if s['gradients'] is None:
            raise ConfigurationError("No gradient table configured.")
        try:
            gradients = np.asarray(s['gradients'], dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Gradient table is not a rectangular numeric table: {e}") from e
        if gradients.ndim != 2 or gradients.shape[0] == 0:
            raise ConfigurationError(f"Gradient table must be a non-empty list of vectors, got shape {gradients.shape}.")
        if gradients.shape[1] != n:
            raise ConfigurationError(
                f"Gradient table has {gradients.shape[1]}-dimensional vectors but dimensionality is {n}."
            )
        if not np.isfinite(gradients).all():
            raise ConfigurationError("Gradient table contains non-finite values.")

        multiplier = self._finite_float('gradient_multiplier')
        if multiplier <= 0:
            raise ConfigurationError(f"gradient_multiplier must be a positive number, got {multiplier!r}.")

        if s['kernel_kind'] == 'radial':
            if s['unskew_constant'] is None:
                raise ConfigurationError("The radial kernel requires an unskew_constant.")
            self._finite_float('unskew_constant')
            if s['kernel_radius_sq'] is None or self._finite_float('kernel_radius_sq') <= 0:
                raise ConfigurationError(f"kernel_radius_sq must be positive, got {s['kernel_radius_sq']!r}.")

        if s['starting_point'] is not None:
            try:
                starting_point = np.asarray(s['starting_point'], dtype=np.float64)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"starting_point is not a list of numbers: {e}") from e
            if starting_point.ndim != 1 or starting_point.shape[0] != n:
                raise ConfigurationError(
                    f"starting_point must be a list of {n} coordinates, got {s['starting_point']!r}."
                )
            if not np.isfinite(starting_point).all():
                raise ConfigurationError("starting_point contains non-finite values.")
        if s['search_mode'] == 'fixed' and s['starting_point'] is None:
            raise ConfigurationError("search_mode 'fixed' requires a starting_point.")

        if not self._finite_float('base_step_rate') > 0:
            raise ConfigurationError(f"base_step_rate must be positive, got {s['base_step_rate']!r}.")
        doublings = s['max_step_retry_doublings']
        if not isinstance(doublings, (int, np.integer)) or isinstance(doublings, bool) or doublings < 0:
            raise ConfigurationError(f"max_step_retry_doublings must be a non-negative integer, got {doublings!r}.")

        seed = s['seed']
        if seed is not None and (not isinstance(seed, (int, np.integer)) or isinstance(seed, bool) or seed < 0):
            raise ConfigurationError(f"seed must be a non-negative integer, got {seed!r}.")

    def _finite_float(self, key: str) -> float:
        """The setting under key as a float. Raises ConfigurationError if it is not a finite number."""
        value = self.settings[key]
        try:
            number = float(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"{key} must be a number, got {value!r}.") from e
        if not np.isfinite(number):
            raise ConfigurationError(f"{key} must be finite, got {value!r}.")
        return number

    def _as_point(self, point) -> np.ndarray:
        """A fresh, writeable float64 copy of point, checked for length."""
        array = np.array(point, dtype=np.float64).reshape(-1)
        if array.shape[0] != self.dimensionality:
            raise ConfigurationError(
                f"Point has {array.shape[0]} coordinates but dimensionality is {self.dimensionality}."
            )
        return array

    def evaluate(self, point) -> tuple[float, np.ndarray, np.ndarray, np.ndarray]:
        """
        Evaluates the noise at point with the steepest gradient picked for
        every lattice point.

        Returns:
            (value, derivative, gradient_indices, gradient_dots)
        """
        value, derivative, indices, dots = kernels.evaluate(
            self._as_point(point), self.lattice_points, self.gradients,
            self.kernel_id, self.radius_sq, self.fade_profile_id
        )
        return float(value), derivative, indices, dots

    def sample_starting_point(self, sampler) -> np.ndarray:
        """
        Turns N uniform samples in [0, 1) into a starting point inside the
        central cell: the unit cube for Perlin, the unskewed cube for simplex.

        Args:
            sampler: callable taking a count and returning that many uniform
                samples in [0, 1), e.g. numpy Generator.random.
        """
        u = self._as_point(sampler(self.dimensionality))
        if self.is_radial:
            return u + self.unskew_constant * u.sum()
        return u

    def default_starting_point(self) -> np.ndarray:
        """The configured starting point for 'fixed' search mode."""
        if self.settings['starting_point'] is None:
            raise ConfigurationError("No starting_point configured.")
        return self._as_point(self.settings['starting_point'])

    def ascend(self, starting_point, max_steps: int = None) -> AscentResult:
        """
        Runs gradient ascent from starting_point until no step size up to
        base_step_rate * 2^max_step_retry_doublings moves the point.

        Args:
            starting_point: N coordinates. Copied; never modified.
            max_steps (int, optional): Stop early after this many steps. The
                result then has converged=False.

        Returns:
            AscentResult with the largest value seen. If no value above 0 was
            seen, the result holds value 0 at the starting point with gradient
            indices of -1.
        """
        if max_steps is not None and max_steps < 1:
            raise ValueError(f"max_steps must be at least 1, got {max_steps}.")
        point = self._as_point(starting_point)
        start = point.copy()
        clamp = not self.is_radial

        best_value = np.zeros(1)
        best_point = point.copy()
        best_derivative = np.zeros(self.dimensionality)
        best_indices = np.full(len(self.lattice_points), -1, dtype=np.int64)

        state = ASCENDING
        last_exponent = None
        steps = 0
        while state == ASCENDING:
            report_below = np.inf if last_exponent is None else math.ldexp(1.0, last_exponent)
            step_budget = -1 if max_steps is None else max_steps - steps

            outcome, value, magnitude_sq, taken = kernels.climb(
                point, self.lattice_points, self.gradients,
                self.kernel_id, self.radius_sq, self.fade_profile_id,
                self.base_step_rate, self.max_step_retry_doublings, clamp,
                best_value, best_point, best_derivative, best_indices,
                report_below, step_budget
            )
            steps += taken

            # Every time the movement drops by an order of magnitude, report the status.
            exponent = _binary_exponent(magnitude_sq)
            if last_exponent is None or exponent < last_exponent:
                last_exponent = exponent
                self.logger.debug(
                    f"Current derivative magnitude: {math.sqrt(magnitude_sq)}, "
                    f"current value: {value}, current max value: {best_value[0]}"
                )

            if outcome == DEFAULTS.CLIMB_CONVERGED:
                state = CONVERGED
                self.logger.debug(f"Convergence condition met after {steps} steps.")
            elif outcome == DEFAULTS.CLIMB_EXHAUSTED:
                state = EXHAUSTED
                self.logger.warning(f"Ascent stopped after reaching the {max_steps} step budget.")

        return AscentResult(
            value=float(best_value[0]),
            point=_frozen(best_point),
            derivative=_frozen(best_derivative),
            gradient_indices=_frozen(best_indices),
            starting_point=_frozen(start),
            converged=state == CONVERGED,
            steps=steps,
        )
