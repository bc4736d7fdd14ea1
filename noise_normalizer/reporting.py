# noise_normalizer/reporting.py

"""
Human-readable formatting of ascent results. Output is meant for people
watching a search converge, not for machines.
"""

import logging

import numpy as np

from .normalizer import AscentResult


def _vector(array: np.ndarray) -> str:
    if array.dtype.kind == "f":
        items = [repr(float(v)) for v in array]
    else:
        items = [str(int(v)) for v in array]
    return "[" + ", ".join(items) + "]"


def normalization_multiplier(value: float) -> float:
    """The factor that maps a maximum of value onto 1. Infinite for value <= 0."""
    return 1.0 / value if value > 0 else float("inf")


def summary_lines(result: AscentResult) -> list[str]:
    """The summary block printed after an ascent (or search) finishes."""
    return [
        f"Max Value Found: {result.value!r}",
        f"Normalization Multiplier: {normalization_multiplier(result.value)!r}",
        f"Location: {_vector(result.point)}",
        f"Starting Location: {_vector(result.starting_point)}",
        f"Gradient Indices: {_vector(result.gradient_indices)}",
        f"Derivative Vector: {_vector(result.derivative)}",
        f"Steps: {result.steps}" + ("" if result.converged else " (step budget reached before convergence)"),
    ]


def log_summary(logger: logging.Logger, result: AscentResult, title: str = "Result"):
    logger.info(f"--- {title} ---")
    for line in summary_lines(result):
        logger.info(f"  {line}")


def restart_line(index: int, result: AscentResult, best: AscentResult) -> str:
    """One-line status after a restart."""
    return (f"Restart {index}: value {result.value!r} after {result.steps} steps, "
            f"global max {best.value!r}")
