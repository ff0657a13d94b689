"""End-to-end tests for the command-line interface."""

import json

import numpy as np
import pytest

from circuit_sim.cli import main
from circuit_sim.data_utils import read_trajectory, load_trajectory


class TestCLI:

    def test_quadratic_euler(self, tmp_path):
        output = tmp_path / "1-1.dat"
        assert main(["quadratic-euler", "--output", str(output)]) == 0

        t, y = read_trajectory(str(output))
        assert t.shape == (501,)
        assert t[0] == 0.0
        assert y[0, 0] == -1.0
        assert t[-1] == pytest.approx(5.0)

    def test_rc_backward_euler(self, tmp_path):
        output = tmp_path / "rc-be.dat"
        npz = tmp_path / "rc-be.npz"
        status = main([
            "rc-backward-euler", "--output", str(output), "--npz", str(npz),
            "--t-end", "2e-4",
        ])
        assert status == 0

        t, y = read_trajectory(str(output))
        assert y.shape[1] == 2
        assert np.all(y[0] == 0.0)

        t_npz, y_npz, metadata = load_trajectory(str(npz))
        assert t_npz.shape[0] == t.shape[0]
        assert np.allclose(np.asarray(y_npz), y, rtol=1e-6, atol=1e-12)
        assert metadata["method"] == "linear-backward-euler"

    def test_integration_error_exit_status(self, tmp_path, caplog):
        output = tmp_path / "trapezoidal.dat"
        status = main([
            "quadratic-trapezoidal", "--output", str(output), "--max-iterations", "1",
        ])
        assert status == 1
        assert "NonConvergenceError" in caplog.text

        # Only the initial condition was written before the abort
        t, y = read_trajectory(str(output))
        assert t.shape == (1,)
        assert y[0, 0] == -1.0

    def test_config_file(self, tmp_path):
        config = tmp_path / "run.json"
        config.write_text('{"preset": "quadratic-trapezoidal", "t_end": 0.1}')
        output = tmp_path / "out.dat"
        assert main(["--config", str(config), "--output", str(output)]) == 0
        t, _ = read_trajectory(str(output))
        assert t.shape == (11,)

    def test_initial_state_override(self, tmp_path):
        output = tmp_path / "out.dat"
        status = main([
            "rc-forward-euler", "--output", str(output), "--t-end", "1e-4",
            "--initial-state", "1.0", "0.5",
        ])
        assert status == 0
        _, y = read_trajectory(str(output))
        assert np.allclose(y[0], [1.0, 0.5])

    @pytest.mark.parametrize("model_parameters", [{"r1": -1.0}, {"resistance": 1.0}])
    def test_invalid_model_parameters(self, tmp_path, capsys, model_parameters):
        config = tmp_path / "run.json"
        config.write_text(json.dumps({
            "preset": "rc-forward-euler", "model_parameters": model_parameters
        }))
        output = tmp_path / "out.dat"
        with pytest.raises(SystemExit) as excinfo:
            main(["--config", str(config), "--output", str(output)])
        assert excinfo.value.code == 2
        assert next(iter(model_parameters)) in capsys.readouterr().err
        assert not output.exists()

    def test_missing_preset(self):
        with pytest.raises(SystemExit):
            main([])

    def test_invalid_override(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["quadratic-euler", "--step-size", "-0.1", "--output", str(tmp_path / "x.dat")])
