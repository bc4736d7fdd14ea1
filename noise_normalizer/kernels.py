# noise_normalizer/kernels.py

"""
================================================================================
GRADIENT NOISE KERNELS
================================================================================
This module provides the Numba-compiled numeric core of the normalizer:
fade curves, gradient selection, noise value + analytic derivative for both
kernel kinds, and the inner gradient ascent loop. It is designed to be a pure
utility; the only state it touches is the arrays passed in.

Data Contract:
---------------
- Inputs:
    - point: float64 array (N,), the evaluation point.
    - lattice_points: float64 array (M, N) from lattice.build_lattice().
    - gradients: float64 array (G, N), the gradient table.
    - kernel_kind / fade_profile: integer IDs from config.
- Outputs:
    - Noise value (float) and derivative (float64 array (N,)).
    - Per-lattice-point gradient indices (int64 (M,)) and dot products.
- Side Effects: Functions documented as "in place" write to their output
  arrays and to the point being climbed. Nothing else.
- Invariants: Gradient selection is recomputed from scratch at every
  evaluation. Kernels contribute exactly zero at and beyond their support
  boundary.
================================================================================
"""

import numpy as np
from numba import njit

from .config import (
    CLIMB_CONVERGED, CLIMB_EXHAUSTED, CLIMB_REPORT,
    FADE_CUBIC, FADE_NONE, KERNEL_RADIAL,
)


@njit
def fade_curve(t, profile):
    """Symmetric falloff: the interpolation profile at 1 - |t|, zero for |t| >= 1."""
    if t < 0.0:
        t = -t
    if t >= 1.0:
        return 0.0
    u = 1.0 - t
    if profile == FADE_CUBIC:
        return u * u * (3.0 - 2.0 * u)
    if profile == FADE_NONE:
        return u
    # 6u^5 - 15u^4 + 10u^3
    return u * u * u * (u * (u * 6.0 - 15.0) + 10.0)


@njit
def d_fade_curve(t, profile):
    """Derivative of fade_curve with respect to the signed argument t."""
    sign = 1.0
    if t < 0.0:
        t = -t
        sign = -1.0
    if t >= 1.0:
        return 0.0
    u = 1.0 - t
    if profile == FADE_CUBIC:
        slope = 6.0 * u * (1.0 - u)
    elif profile == FADE_NONE:
        slope = 1.0
    else:
        slope = 30.0 * u * u * (u * (u - 2.0) + 1.0)
    # d/dt f(1 - t) = -f'(u)
    return -sign * slope


@njit
def select_gradients_into(point, lattice_points, gradients, indices, dots):
    """
    For every lattice point, stores the index of the gradient with the largest
    dot product against (point - lattice point), and that dot product.
    Ties keep the first gradient encountered. In place.
    """
    n = point.shape[0]
    for k in range(lattice_points.shape[0]):
        best_dot = -np.inf
        best_index = -1
        for j in range(gradients.shape[0]):
            dot = 0.0
            for i in range(n):
                dot += (point[i] - lattice_points[k, i]) * gradients[j, i]
            if dot > best_dot:
                best_dot = dot
                best_index = j
        indices[k] = best_index
        dots[k] = best_dot


@njit
def select_gradients(point, lattice_points, gradients):
    """Allocating wrapper around select_gradients_into. Returns (indices, dots)."""
    m = lattice_points.shape[0]
    indices = np.empty(m, dtype=np.int64)
    dots = np.empty(m, dtype=np.float64)
    select_gradients_into(point, lattice_points, gradients, indices, dots)
    return indices, dots


@njit
def radial_value_into(point, lattice_points, gradients, indices, dots, radius_sq, derivative):
    """
    Simplex-style kernel: each lattice point contributes attn^4 * dot where
    attn = radius_sq - |point - lattice point|^2, and nothing when attn <= 0.
    Writes the derivative in place and returns the value.
    """
    n = point.shape[0]
    derivative[:] = 0.0
    value = 0.0
    for k in range(lattice_points.shape[0]):
        dist_sq = 0.0
        for i in range(n):
            d = point[i] - lattice_points[k, i]
            dist_sq += d * d
        attn = radius_sq - dist_sq
        if attn <= 0.0:
            continue
        attn_sq = attn * attn
        falloff = attn_sq * attn_sq
        dot = dots[k]
        value += falloff * dot

        # Product rule on attn^4 * dot, gradient held at its selected value.
        d_attn_multiplier = -8.0 * attn_sq * attn * dot
        g = indices[k]
        for i in range(n):
            derivative[i] += d_attn_multiplier * (point[i] - lattice_points[k, i]) + falloff * gradients[g, i]
    return value


@njit
def separable_value_into(point, lattice_points, gradients, indices, dots, fade_profile, derivative):
    """
    Perlin-style kernel: each lattice vertex contributes falloff * dot where
    falloff is the product of per-axis fade curves of (point - vertex).
    Writes the derivative in place and returns the value.
    """
    n = point.shape[0]
    derivative[:] = 0.0
    value = 0.0
    for k in range(lattice_points.shape[0]):
        falloff = 1.0
        for i in range(n):
            falloff *= fade_curve(point[i] - lattice_points[k, i], fade_profile)
        dot = dots[k]
        g = indices[k]

        for l in range(n):
            d_falloff = 1.0
            for i in range(n):
                a = point[i] - lattice_points[k, i]
                if i == l:
                    d_falloff *= d_fade_curve(a, fade_profile)
                else:
                    d_falloff *= fade_curve(a, fade_profile)
            derivative[l] += gradients[g, l] * falloff + dot * d_falloff

        value += falloff * dot
    return value


@njit
def value_into(point, lattice_points, gradients, indices, dots,
               kernel_kind, radius_sq, fade_profile, derivative):
    """Dispatches to the kernel for kernel_kind. Returns the value."""
    if kernel_kind == KERNEL_RADIAL:
        return radial_value_into(point, lattice_points, gradients, indices, dots, radius_sq, derivative)
    return separable_value_into(point, lattice_points, gradients, indices, dots, fade_profile, derivative)


@njit
def evaluate(point, lattice_points, gradients, kernel_kind, radius_sq, fade_profile):
    """
    Selects gradients and evaluates the noise at point.
    Returns (value, derivative, gradient indices, dot products).
    """
    indices, dots = select_gradients(point, lattice_points, gradients)
    derivative = np.empty(point.shape[0], dtype=np.float64)
    value = value_into(point, lattice_points, gradients, indices, dots,
                       kernel_kind, radius_sq, fade_profile, derivative)
    return value, derivative, indices, dots


@njit
def try_move(point, derivative, base_rate, max_doublings, clamp):
    """
    Moves point along derivative * rate, doubling the rate up to max_doublings
    times while the move is lost to floating-point precision. Clamps to
    [0, 1] per axis when clamp is set. In place; returns whether it moved.
    """
    rate = base_rate
    for _ in range(max_doublings + 1):
        moved = False
        for l in range(point.shape[0]):
            coord = point[l] + derivative[l] * rate
            if clamp:
                if coord > 1.0:
                    coord = 1.0
                elif coord < 0.0:
                    coord = 0.0
            if coord != point[l]:
                moved = True
            point[l] = coord
        if moved:
            return True
        rate *= 2.0
    return False


@njit
def climb(point, lattice_points, gradients, kernel_kind, radius_sq, fade_profile,
          base_rate, max_doublings, clamp,
          best_value, best_point, best_derivative, best_indices,
          report_below, step_budget):
    """
    Runs gradient ascent steps on point (in place) and returns as soon as one
    of these happens:
        - the point can no longer move (CLIMB_CONVERGED),
        - step_budget steps were taken, if step_budget > 0 (CLIMB_EXHAUSTED),
        - the squared derivative magnitude fell below report_below (CLIMB_REPORT).

    best_value is a length-1 array; it and the other best_* arrays are
    overwritten with a copy of the current state whenever a larger value is
    seen.

    Returns (outcome, last value, last squared derivative magnitude, steps).
    """
    n = point.shape[0]
    m = lattice_points.shape[0]
    indices = np.empty(m, dtype=np.int64)
    dots = np.empty(m, dtype=np.float64)
    derivative = np.empty(n, dtype=np.float64)
    steps = 0
    while True:
        select_gradients_into(point, lattice_points, gradients, indices, dots)
        value = value_into(point, lattice_points, gradients, indices, dots,
                           kernel_kind, radius_sq, fade_profile, derivative)
        steps += 1

        if value > best_value[0]:
            best_value[0] = value
            best_point[:] = point
            best_derivative[:] = derivative
            best_indices[:] = indices

        magnitude_sq = 0.0
        for l in range(n):
            magnitude_sq += derivative[l] * derivative[l]

        if magnitude_sq == 0.0:
            return CLIMB_CONVERGED, value, magnitude_sq, steps
        if not try_move(point, derivative, base_rate, max_doublings, clamp):
            return CLIMB_CONVERGED, value, magnitude_sq, steps
        if step_budget > 0 and steps >= step_budget:
            return CLIMB_EXHAUSTED, value, magnitude_sq, steps
        if magnitude_sq < report_below:
            return CLIMB_REPORT, value, magnitude_sq, steps
