import os
import pickle

import pytest
import yaml

from psoswarm.training import pso_optimization
from psoswarm.utils import util_report


def test_run_writes_reports(tmp_path, capsys):
    result = pso_optimization.run(["--reports_dir", str(tmp_path), "--seed", "11", "--n_iterations", "20", "-q"])
    run_dir = tmp_path / "00000--pso_optimization"
    for name in ["configuration.yaml", "log.txt", "history.pkl", "convergence_curve.png", "mean_distance.png", "w_inertia.png",
                 "features_last_iteration.png"]:
        assert (run_dir / name).is_file(), name
    with open(run_dir / "history.pkl", "rb") as f:
        history = pickle.load(f)
    assert history['global_best_val'] == result.history
    assert len(result.history) == 20
    out = capsys.readouterr().out
    assert "Optimization finished" in out
    assert "Iteration: 1," not in out


def test_run_ids_increase(tmp_path):
    args = ["--reports_dir", str(tmp_path), "--n_iterations", "2", "-q"]
    pso_optimization.run(args)
    pso_optimization.run(args)
    assert sorted(os.listdir(tmp_path)) == ["00000--pso_optimization", "00001--pso_optimization"]


def test_same_seed_same_result(tmp_path):
    a = pso_optimization.run(["--reports_dir", str(tmp_path / "a"), "--seed", "3", "--n_iterations", "15", "-q"])
    b = pso_optimization.run(["--reports_dir", str(tmp_path / "b"), "--seed", "3", "--n_iterations", "15", "-q"])
    assert a.history == b.history
    assert a.g_best_val == b.g_best_val


def test_config_file_and_overrides(tmp_path):
    cfg_file = tmp_path / "pso.yaml"
    cfg_file.write_text(yaml.dump({'seed': 1, 'id_exp': 7, 'data': {'reports_dir': str(tmp_path / "reports")},
                                   'trainer_pso': {'n_particles': 5, 'n_iterations': 4, 'w_cognitive': 1.5}}))
    result = pso_optimization.run(["-f", str(cfg_file), "--n_iterations", "6", "-q"])
    run_dir = tmp_path / "reports" / "00007--pso_optimization"
    with open(run_dir / "configuration.yaml") as f:
        cfg = yaml.load(f, Loader=yaml.FullLoader)
    assert cfg['trainer_pso']['n_particles'] == 5
    assert cfg['trainer_pso']['n_iterations'] == 6
    assert cfg['trainer_pso']['w_cognitive'] == 1.5
    assert cfg['trainer_pso']['w_social'] == 2.0
    assert len(result.history) == 6


def test_unknown_config_key_raises(tmp_path):
    cfg_file = tmp_path / "pso.yaml"
    cfg_file.write_text("trainer_pso:\n  n_particle: 5\n")
    with pytest.raises(ValueError):
        pso_optimization.run(["-f", str(cfg_file), "--reports_dir", str(tmp_path), "-q"])


def test_plot_failure_is_reported_and_run_completes(tmp_path, monkeypatch, capsys):
    def failing_plot(plot_training_dir, global_best_val):
        raise util_report.ArtifactWriteFailure("disk full")

    monkeypatch.setattr(util_report, "plot_pso_convergence", failing_plot)
    assert pso_optimization.main(["--reports_dir", str(tmp_path), "--n_iterations", "3", "-q"]) == 0
    captured = capsys.readouterr()
    assert "disk full" in captured.out + captured.err
    assert "Optimization finished" in captured.out


@pytest.mark.parametrize("content", ["seed: 1\ntrainer_pso:\n", "data:\n"])
def test_empty_config_sections_use_defaults(tmp_path, content):
    cfg_file = tmp_path / "pso.yaml"
    cfg_file.write_text(content)
    result = pso_optimization.run(["-f", str(cfg_file), "--reports_dir", str(tmp_path / "reports"), "--n_iterations", "2", "-q"])
    assert len(result.history) == 2
    with open(tmp_path / "reports" / "00000--pso_optimization" / "configuration.yaml") as f:
        cfg = yaml.load(f, Loader=yaml.FullLoader)
    assert cfg['trainer_pso']['n_particles'] == 30


@pytest.mark.parametrize("content", ["- 1\n- 2\n", "trainer_pso: 5\n", "data: [1, 2]\n"])
def test_malformed_config_raises_value_error(tmp_path, content):
    cfg_file = tmp_path / "pso.yaml"
    cfg_file.write_text(content)
    with pytest.raises(ValueError):
        pso_optimization.run(["-f", str(cfg_file), "--reports_dir", str(tmp_path / "reports"), "-q"])


def test_invalid_parameters_leave_no_run_directory(tmp_path):
    reports_dir = tmp_path / "reports"
    with pytest.raises(ValueError):
        pso_optimization.run(["--reports_dir", str(reports_dir), "--n_particles", "0", "-q"])
    assert not reports_dir.exists()
    pso_optimization.run(["--reports_dir", str(reports_dir), "--n_iterations", "1", "-q"])
    assert os.listdir(reports_dir) == ["00000--pso_optimization"]


def test_failed_convergence_plot_does_not_skip_other_plots(tmp_path, monkeypatch, capsys):
    def failing_plot(plot_training_dir, global_best_val):
        raise util_report.ArtifactWriteFailure("read-only file system")

    monkeypatch.setattr(util_report, "plot_pso_convergence", failing_plot)
    pso_optimization.run(["--reports_dir", str(tmp_path), "--n_iterations", "3", "-q"])
    run_dir = tmp_path / "00000--pso_optimization"
    assert not (run_dir / "convergence_curve.png").exists()
    for name in ["mean_distance.png", "w_inertia.png", "features_last_iteration.png"]:
        assert (run_dir / name).is_file(), name
    captured = capsys.readouterr()
    assert "read-only file system" in captured.out + captured.err
