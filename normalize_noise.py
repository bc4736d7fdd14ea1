# normalize_noise.py

"""
================================================================================
NOISE NORMALIZER COMMAND-LINE TOOL
================================================================================
This script estimates the maximum value a gradient noise function can output,
so that the noise can be divided by it. Pick a preset, optionally override it
with a JSON configuration file, and let it climb.

In 'restarts' mode with --restarts 0 (the default for Perlin presets) the
search runs until interrupted with Ctrl+C. Stop it once the reported global
max has stopped changing, then re-run with a different --seed to make sure.

Usage:
    python normalize_noise.py --preset simplex2d
    python normalize_noise.py --preset perlin3d --restarts 1000 --workers 4
    python normalize_noise.py --config path/to/your/config.json
================================================================================
"""
import argparse
import json
import logging
import sys
import time

from tqdm import tqdm

from noise_normalizer import config as DEFAULTS
from noise_normalizer import reporting
from noise_normalizer.normalizer import ConfigurationError, NoiseNormalizer
from noise_normalizer.presets import PRESETS
from noise_normalizer.restarts import search


def load_config(config_path: str) -> dict:
    """Loads a JSON configuration file. Raises OSError or json.JSONDecodeError."""
    with open(config_path, 'r') as f:
        return json.load(f)


def build_config(args: argparse.Namespace, file_config: dict) -> dict:
    """Command-line flags take precedence over the configuration file."""
    config = dict(file_config)
    if args.preset is not None:
        config['preset'] = args.preset
    if args.mode is not None:
        config['search_mode'] = args.mode
    if args.seed is not None:
        config['seed'] = args.seed
    if args.gradient_multiplier is not None:
        config['gradient_multiplier'] = args.gradient_multiplier
    return config


def run_fixed(normalizer: NoiseNormalizer, logger: logging.Logger, max_steps: int = None):
    """Single ascent from the configured starting point."""
    starting_point = normalizer.default_starting_point()
    logger.info(f"Climbing from {starting_point.tolist()}...")
    result = normalizer.ascend(starting_point, max_steps=max_steps)
    reporting.log_summary(logger, result, title="Gradient Ascent Complete")
    return result


def run_restarts(normalizer: NoiseNormalizer, logger: logging.Logger, num_restarts: int = None,
                 workers: int = 1, max_steps: int = None):
    """Random restart search. Returns the global best, also when interrupted."""
    best = None
    completed = 0
    reports = search(normalizer, num_restarts=num_restarts, workers=workers, max_steps=max_steps)
    try:
        for report in tqdm(reports, total=num_restarts, desc="Restarts", disable=num_restarts is None):
            completed += 1
            logger.info(reporting.restart_line(report.index, report.result, report.best))
            if best is None or report.best is not best:
                reporting.log_summary(logger, report.best, title="New Global Max")
            best = report.best
    except KeyboardInterrupt:
        logger.info(f"Search interrupted after {completed} restarts.")
    finally:
        reports.close()

    if best is not None:
        reporting.log_summary(logger, best, title=f"Global Max After {completed} Restarts")
    return best


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Estimate the maximum output of a gradient noise function by gradient ascent."
    )
    parser.add_argument("--preset", type=str, choices=sorted(PRESETS), default=None,
                        help=f"Noise family to normalize (default: {DEFAULTS.DEFAULT_PRESET}).")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to a JSON file overriding preset settings.")
    parser.add_argument("--mode", type=str, choices=DEFAULTS.SEARCH_MODES, default=None,
                        help="'fixed' climbs once from the configured starting point; "
                             "'restarts' climbs from random points. Defaults to the preset's mode.")
    parser.add_argument("--restarts", type=int, default=0,
                        help="Number of restarts in 'restarts' mode. 0 runs until interrupted.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for random starting points.")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes for restarts.")
    parser.add_argument("--max-steps", type=int, default=None,
                        help="Stop each ascent after this many steps even if not converged.")
    parser.add_argument("--gradient-multiplier", type=float, default=None,
                        help="Scale every gradient, e.g. by 1/max to test a normalization.")
    parser.add_argument("--verbose", action="store_true", help="Log per-step convergence status.")
    args = parser.parse_args(argv)

    # 1. --- Setup Logging ---
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("Normalizer")

    # 2. --- Load Configuration ---
    file_config = {}
    if args.config:
        logger.info(f"Loading configuration from: {args.config}")
        try:
            file_config = load_config(args.config)
        except (OSError, json.JSONDecodeError) as e:
            logger.critical(f"Failed to load or parse config file: {e}")
            return 1

    try:
        normalizer = NoiseNormalizer(config=build_config(args, file_config), logger=logger)
    except ConfigurationError as e:
        logger.critical(f"Invalid configuration: {e}")
        return 1

    # 3. --- Search ---
    start_time = time.perf_counter()
    if normalizer.settings['search_mode'] == 'fixed':
        run_fixed(normalizer, logger, max_steps=args.max_steps)
    else:
        num_restarts = args.restarts if args.restarts > 0 else None
        run_restarts(normalizer, logger, num_restarts=num_restarts,
                     workers=args.workers, max_steps=args.max_steps)
    logger.info(f"Total time: {time.perf_counter() - start_time:.2f} seconds.")
    return 0


# --- Command-Line Interface ---
if __name__ == "__main__":
    sys.exit(main())
