import json
import logging
import sys

import pytest

import normalize_noise
import probe_normalization


def test_restart_search_runs():
    assert normalize_noise.main(["--preset", "perlin2d", "--restarts", "2", "--seed", "1"]) == 0


def test_fixed_search_with_step_budget():
    assert normalize_noise.main(["--preset", "simplex2d", "--max-steps", "1000"]) == 0


def test_config_file_overrides(tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({
        "preset": "perlin2d",
        "search_mode": "fixed",
        "starting_point": [0.3, 0.3],
    }))
    assert normalize_noise.main(["--config", str(config_path)]) == 0


def test_missing_config_file_fails(tmp_path):
    assert normalize_noise.main(["--config", str(tmp_path / "missing.json")]) == 1


def test_invalid_config_fails(tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"preset": "perlin2d", "gradients": [[1, 0, 0]]}))
    assert normalize_noise.main(["--config", str(config_path)]) == 1


def test_probe_accepts_correct_constant(logger):
    assert probe_normalization.probe("perlin2d", 1.0, logger, restarts=3, seed=4)


def test_probe_rejects_low_constant(logger):
    assert not probe_normalization.probe("perlin2d", 0.9, logger, restarts=3, seed=4)
    assert probe_normalization.main(["--preset", "perlin2d", "--max-value", "0.9", "--restarts", "2"]) == 1


@pytest.mark.parametrize("file_config", [
    {"preset": "perlin2d", "base_step_rate": "fast"},
    {"preset": "simplex2d", "starting_point": 0.5},
    {"preset": "simplex2d", "kernel_radius_sq": "wide"},
    {"preset": "perlin2d", "gradient_multiplier": "double"},
])
def test_wrongly_typed_config_fails_cleanly(tmp_path, caplog, file_config):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(file_config))
    with caplog.at_level(logging.CRITICAL):
        assert normalize_noise.main(["--config", str(config_path)]) == 1
    assert any(r.levelno == logging.CRITICAL for r in caplog.records)


@pytest.mark.parametrize("script, argv", [
    (normalize_noise, ["--preset", "perlin2d", "--restarts", "1", "--seed", "1"]),
    (probe_normalization, ["--preset", "perlin2d", "--max-value", "1.0", "--restarts", "1"]),
])
def test_scripts_log_to_stdout(monkeypatch, script, argv):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    assert script.main(argv) == 0
    assert calls and calls[0]["stream"] is sys.stdout
