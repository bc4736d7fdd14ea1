# noise_normalizer/restarts.py

"""
================================================================================
RANDOM RESTART SEARCH
================================================================================
Wraps NoiseNormalizer.ascend() in an outer loop that starts from fresh random
points, so that maxima in different basins are all given a chance. The global
best is an explicit reduction (fold_best) over the per-restart results.

Data Contract:
---------------
- Inputs:
    - normalizer: a configured NoiseNormalizer.
    - num_restarts: how many restarts to run, or None to run until the
      caller stops iterating.
    - seed / sampler: the source of uniform samples for starting points.
    - workers: the number of processes to run restarts in.
- Outputs:
    - A RestartReport per restart, in restart order.
- Side Effects: Starts worker processes when workers > 1.
- Invariants: Starting points are drawn in the calling process in restart
  order, so the same seed gives the same reports for any worker count.
  The reported best value never decreases.
================================================================================
"""

import itertools
import logging
import multiprocessing
import os
from typing import Iterator, NamedTuple, Optional

import numpy as np

from . import config as DEFAULTS
from .normalizer import AscentResult, NoiseNormalizer


class RestartReport(NamedTuple):
    index: int
    result: AscentResult
    best: AscentResult


def fold_best(best: Optional[AscentResult], candidate: AscentResult) -> AscentResult:
    """The better of two results. Ties keep the earlier one."""
    if best is None or candidate.value > best.value:
        return candidate
    return best


# --- Global variables for worker processes ---
worker_normalizer = None


def init_worker(config: dict):
    """Builds the NoiseNormalizer each worker process climbs with."""
    global worker_normalizer
    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    worker_normalizer = NoiseNormalizer(config=config, logger=worker_logger)


def ascend_task(task):
    """Runs one restart in a worker. task is (index, starting_point, max_steps)."""
    index, starting_point, max_steps = task
    return index, worker_normalizer.ascend(starting_point, max_steps=max_steps)


def _restart_indices(num_restarts):
    if num_restarts is None:
        return itertools.count()
    return iter(range(num_restarts))


def search(
    normalizer: NoiseNormalizer,
    num_restarts: int = None,
    seed: int = None,
    sampler=None,
    workers: int = 1,
    max_steps: int = None,
) -> Iterator[RestartReport]:
    """
    Runs gradient ascent from random starting points, yielding a report after
    every restart.

    Args:
        normalizer: The configured normalizer.
        num_restarts (int, optional): Number of restarts. None runs forever.
        seed (int, optional): Seed for the default sampler. Falls back to the
            normalizer's configured seed.
        sampler (callable, optional): Takes a count, returns that many uniform
            samples in [0, 1). Overrides seed.
        workers (int): Processes to use. 1 runs in the calling process.
        max_steps (int, optional): Per-restart step budget.
    """
    if sampler is None:
        if seed is None:
            seed = normalizer.settings['seed']
        sampler = np.random.default_rng(seed).random

    indices = _restart_indices(num_restarts)
    best = None

    if workers <= 1:
        for index in indices:
            starting_point = normalizer.sample_starting_point(sampler)
            result = normalizer.ascend(starting_point, max_steps=max_steps)
            best = fold_best(best, result)
            yield RestartReport(index, result, best)
        return

    batch_size = workers * DEFAULTS.RESTARTS_PER_WORKER_BATCH
    normalizer.logger.info(f"Using {workers} worker processes.")
    with multiprocessing.Pool(processes=workers, initializer=init_worker, initargs=(normalizer.user_config,)) as pool:
        while True:
            # Batches keep an unbounded search from queueing tasks forever.
            batch = [
                (index, normalizer.sample_starting_point(sampler), max_steps)
                for index in itertools.islice(indices, batch_size)
            ]
            if not batch:
                return
            for index, result in pool.imap(ascend_task, batch):
                best = fold_best(best, result)
                yield RestartReport(index, result, best)
