# noise_normalizer/__init__.py

# Public API of the noise normalizer package.

from .normalizer import AscentResult, ConfigurationError, NoiseNormalizer
from .presets import PRESETS, get_preset
from .restarts import RestartReport, fold_best, search

__all__ = [
    "AscentResult",
    "ConfigurationError",
    "NoiseNormalizer",
    "PRESETS",
    "get_preset",
    "RestartReport",
    "fold_best",
    "search",
]
