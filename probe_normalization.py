# probe_normalization.py

"""
Checks a normalization constant: scales the gradients by 1/max and searches
again. If the constant is right, nothing found should exceed 1.

Usage:
    python probe_normalization.py --preset perlin2d --max-value 1.0 --restarts 50
"""

import argparse
import logging
import sys

from noise_normalizer import reporting
from noise_normalizer.normalizer import ConfigurationError, NoiseNormalizer
from noise_normalizer.presets import PRESETS
from noise_normalizer.restarts import search

# Values up to 1 + this are accepted, to allow for rounding in the constant.
DEFAULT_TOLERANCE = 1e-9


def probe(preset: str, max_value: float, logger: logging.Logger, restarts: int = 100,
          seed: int = None, tolerance: float = DEFAULT_TOLERANCE, max_steps: int = None) -> bool:
    """
    Runs the preset's search with gradients scaled by 1/max_value.
    Returns True when the best value found stays within 1 + tolerance.
    """
    config = {'preset': preset, 'gradient_multiplier': 1.0 / max_value}
    if seed is not None:
        config['seed'] = seed
    normalizer = NoiseNormalizer(config=config, logger=logger)

    if normalizer.settings['search_mode'] == 'fixed':
        best = normalizer.ascend(normalizer.default_starting_point(), max_steps=max_steps)
    else:
        best = None
        for report in search(normalizer, num_restarts=restarts, max_steps=max_steps):
            best = report.best

    reporting.log_summary(logger, best, title="Normalized Search")
    if best.value <= 1.0 + tolerance:
        logger.info(f"✅ SUCCESS: Normalized max {best.value!r} stays within 1.")
        return True
    logger.error(f"❌ FAILURE: Normalized max {best.value!r} exceeds 1. "
                 f"Try a max value of at least {max_value * best.value!r}.")
    return False


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Verify a noise normalization constant.")
    parser.add_argument("--preset", type=str, choices=sorted(PRESETS), required=True)
    parser.add_argument("--max-value", type=float, required=True,
                        help="The maximum found by normalize_noise.py.")
    parser.add_argument("--restarts", type=int, default=100)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--tolerance", type=float, default=DEFAULT_TOLERANCE)
    parser.add_argument("--max-steps", type=int, default=None)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s',
                        stream=sys.stdout)
    logger = logging.getLogger("NormalizationProbe")

    if args.max_value <= 0:
        logger.critical("--max-value must be positive.")
        return 1
    try:
        passed = probe(args.preset, args.max_value, logger, restarts=args.restarts, seed=args.seed,
                       tolerance=args.tolerance, max_steps=args.max_steps)
    except ConfigurationError as e:
        logger.critical(f"Invalid configuration: {e}")
        return 1
    return 0 if passed else 1


if __name__ == '__main__':
    sys.exit(main())
