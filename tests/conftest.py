import logging

import pytest

from noise_normalizer import NoiseNormalizer


@pytest.fixture
def logger():
    return logging.getLogger("tests")


@pytest.fixture
def make_normalizer(logger):
    def make(preset, **overrides):
        return NoiseNormalizer(config={"preset": preset, **overrides}, logger=logger)
    return make
