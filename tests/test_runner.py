# tests/test_runner.py
import numpy as np

from hogwild_ising.simulation.runner import EXIT_CONFIG_ERROR, main, run_from_config
from hogwild_ising.utils.config import Config, SamplerConfig, LoggingConfig


def _cfg(**sampler):
    base = dict(n_vertices=64, max_degree=3, beta=0.2, n_workers=2, n_iterations=5, seed=1)
    base.update(sampler)
    return Config(sampler=SamplerConfig(**base),
                  logging=LoggingConfig(progress_every=0), verbose=False)


def test_run_random_mode():
    graph, result = run_from_config(_cfg())
    assert graph.n_vertices == 64
    assert np.all(graph.degrees() <= 3)
    assert result.n_iterations == 5
    assert result.magnetization.shape == (5,)


def test_run_lattice_mode_is_seeded():
    g1, r1 = run_from_config(_cfg(graph_mode="lattice", max_degree=4, n_workers=1))
    g2, r2 = run_from_config(_cfg(graph_mode="lattice", max_degree=4, n_workers=1))
    np.testing.assert_array_equal(g1.indices, g2.indices)
    np.testing.assert_array_equal(r1.final_state, r2.final_state)


def test_run_without_seed():
    _, result = run_from_config(_cfg(seed=None, record_observables=False))
    assert result.magnetization is None
    assert result.final_state.shape == (64,)


def test_main_success(tmp_path):
    log_file = tmp_path / "run.log"
    rc = main(["--preset", "quick", "--set", "sampler.n_iterations=3",
               "--set", f"logging.log_file='{log_file}'"])
    assert rc == 0
    assert log_file.exists()


def test_main_configuration_error():
    rc = main(["--preset", "quick", "--set", "sampler.graph_mode=lattice"])
    assert rc == EXIT_CONFIG_ERROR


def test_main_missing_config_file(tmp_path):
    rc = main(["--config", str(tmp_path / "missing.yaml")])
    assert rc == EXIT_CONFIG_ERROR


def test_main_malformed_config_file(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("sampler: [unclosed\n", encoding="utf-8")
    assert main(["--config", str(bad)]) == EXIT_CONFIG_ERROR

    listed = tmp_path / "list.yaml"
    listed.write_text("- 1\n- 2\n", encoding="utf-8")
    assert main(["--config", str(listed)]) == EXIT_CONFIG_ERROR


def test_main_rotating_log_file(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    rc = main(["--preset", "quick", "--set", "sampler.n_iterations=2",
               "--set", f"logging.log_file='{log_file}'",
               "--set", "logging.max_bytes=200", "--set", "logging.backup_count=2"])
    assert rc == 0
    assert log_file.exists()
    assert (tmp_path / "logs" / "run.log.1").exists()
