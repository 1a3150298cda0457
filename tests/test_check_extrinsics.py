"""Tests for the synthetic extrinsics check script."""

import numpy as np
import pytest

from lenscalib.calibration import create_camera
from scripts.check_extrinsics import DEFAULT_CONFIG, main, make_target_grid, run_check


class TestTargetGrid:
    """Tests for make_target_grid."""

    def test_shape_and_extent(self):
        grid = make_target_grid([4, 3, 2], 0.1)

        assert grid.shape == (24, 3)
        assert np.allclose(grid.min(axis=0), [0.0, 0.0, 0.0])
        assert np.allclose(grid.max(axis=0), [0.3, 0.2, 0.1])

    def test_grid_is_not_coplanar(self):
        grid = make_target_grid([3, 3, 2], 0.5)
        centered = grid - grid.mean(axis=0)

        assert np.linalg.matrix_rank(centered) == 3


class TestRunCheck:
    """Tests for run_check."""

    @pytest.fixture
    def synthetic(self):
        return {
            "grid_size": [4, 3, 2],
            "spacing": 0.1,
            "rvec": [0.1, -0.2, 0.05],
            "tvec": [-0.15, -0.1, 1.0],
            "pixel_noise": 0.0,
            "seed": 0,
        }

    def test_exact_data_passes(self, camera, synthetic):
        result = run_check(camera, synthetic, {"rotation_rad": 0.01, "translation": 0.001})

        assert result["passed"]
        assert result["reprojection_error"] < 1e-3
        assert result["per_view_errors"].shape == (1,)

    def test_zero_tolerance_fails(self, pinhole_camera, synthetic):
        synthetic["pixel_noise"] = 1.0

        result = run_check(pinhole_camera, synthetic, {"rotation_rad": 0.0, "translation": 0.0})

        assert not result["passed"]
        assert result["reprojection_error"] > 0.1

    def test_default_camera_is_usable(self, synthetic):
        camera = create_camera("pinhole")

        result = run_check(camera, synthetic, {"rotation_rad": 0.01, "translation": 0.001})

        assert result["passed"]


class TestMain:
    """Tests for the command-line entry point."""

    @pytest.mark.parametrize("camera_key", [
        "camera", "cameras.pinhole", "cameras.fisheye", "cameras.omni",
    ])
    def test_default_config_passes(self, camera_key):
        assert main(["--config", str(DEFAULT_CONFIG), "--camera-key", camera_key]) == 0

    def test_overrides_can_fail_the_check(self):
        argv = [
            "--config", str(DEFAULT_CONFIG),
            "--set", "synthetic.pixel_noise=2.0",
            "--set", "tolerance.translation=0.0",
        ]

        assert main(argv) == 1

    def test_missing_camera_section(self):
        assert main(["--config", str(DEFAULT_CONFIG), "--camera-key", "cameras.stereo"]) == 1

    def test_log_level_option(self, tmp_path):
        log_file = tmp_path / "check.log"
        argv = [
            "--config", str(DEFAULT_CONFIG),
            "--log-level", "DEBUG",
            "--set", f"logging.log_file={log_file}",
        ]

        assert main(argv) == 0
        assert "Estimating extrinsics" in log_file.read_text()
