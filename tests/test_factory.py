"""Tests for building cameras from model tags and configuration."""

from pathlib import Path

import numpy as np
import pytest
import yaml

from lenscalib.calibration import (
    KannalaBrandtCamera,
    MeiCamera,
    ModelType,
    PinholeCamera,
    camera_from_config,
    create_camera,
    load_camera,
)

CONFIG_DIR = Path(__file__).parent.parent / "configs"


class TestCreateCamera:
    """Tests for create_camera."""

    @pytest.mark.parametrize("model_type,cls", [
        (ModelType.PINHOLE, PinholeCamera),
        ("fisheye", KannalaBrandtCamera),
        ("mei", MeiCamera),
    ])
    def test_returns_registered_class(self, model_type, cls):
        camera = create_camera(model_type, "cam", 640, 480)

        assert isinstance(camera, cls)
        assert camera.camera_name == "cam"
        assert camera.parameters.image_size == (640, 480)

    def test_unknown_model_raises(self):
        with pytest.raises(ValueError):
            create_camera("orthographic")


class TestCameraFromConfig:
    """Tests for camera_from_config."""

    def test_named_intrinsics(self):
        camera = camera_from_config({
            "model_type": "pinhole",
            "camera_name": "left",
            "image_width": 752,
            "image_height": 480,
            "intrinsics": {"fx": 460.0, "fy": 461.0, "cx": 376.0, "cy": 240.0},
        })

        assert isinstance(camera, PinholeCamera)
        assert camera.intrinsics.fx == 460.0
        assert camera.intrinsics.k1 == 0.0
        assert np.allclose(camera.space_to_plane(np.array([0.0, 0.0, 1.0])), [376.0, 240.0])

    def test_list_intrinsics(self):
        values = [0.9, -0.1, 0.02, 0.0, 0.0, 700.0, 701.0, 376.0, 240.0]

        camera = camera_from_config({"model_type": "mei", "intrinsics": values})

        assert isinstance(camera, MeiCamera)
        assert np.allclose(camera.write_parameters(), values)

    def test_without_intrinsics_uses_defaults(self):
        camera = camera_from_config({"model_type": "kannala_brandt"})

        assert np.allclose(camera.write_parameters(), [0, 0, 0, 0, 1, 1, 0, 0])

    def test_missing_model_type_raises(self):
        with pytest.raises(KeyError, match="model_type"):
            camera_from_config({"camera_name": "left"})

    def test_unknown_intrinsic_name_raises(self):
        with pytest.raises(KeyError, match="xi"):
            camera_from_config({"model_type": "pinhole", "intrinsics": {"xi": 1.0}})

    def test_wrong_list_length_raises(self):
        with pytest.raises(ValueError, match="expects 8"):
            camera_from_config({"model_type": "pinhole", "intrinsics": [1.0, 2.0]})


class TestLoadCamera:
    """Tests for load_camera."""

    def test_load_from_yaml(self, tmp_path):
        config_path = tmp_path / "camera.yaml"
        with open(config_path, "w") as f:
            yaml.safe_dump({
                "rig": {
                    "front": {
                        "model_type": "fisheye",
                        "camera_name": "front",
                        "intrinsics": {"mu": 300.0, "mv": 300.0, "u0": 320.0, "v0": 240.0},
                    }
                }
            }, f)

        camera = load_camera(config_path, key="rig.front")

        assert isinstance(camera, KannalaBrandtCamera)
        assert camera.intrinsics.mu == 300.0

    def test_missing_section_raises(self, tmp_path):
        config_path = tmp_path / "camera.yaml"
        config_path.write_text("other: {}\n")

        with pytest.raises(KeyError, match="camera"):
            load_camera(config_path)

    @pytest.mark.parametrize("key,cls", [
        ("camera", PinholeCamera),
        ("cameras.pinhole", PinholeCamera),
        ("cameras.fisheye", KannalaBrandtCamera),
        ("cameras.omni", MeiCamera),
    ])
    def test_default_config_sections(self, key, cls):
        camera = load_camera(CONFIG_DIR / "default.yaml", key=key)

        assert isinstance(camera, cls)
        assert camera.image_width > 0

    def test_overrides_merge_over_section(self):
        camera = load_camera(
            CONFIG_DIR / "default.yaml",
            key="cameras.pinhole",
            overrides={"camera_name": "resized", "intrinsics": {"fx": 470.0}},
        )
        reference = load_camera(CONFIG_DIR / "default.yaml", key="cameras.pinhole")

        assert camera.camera_name == "resized"
        assert camera.intrinsics.fx == 470.0
        assert camera.intrinsics.fy == reference.intrinsics.fy
        assert camera.image_width == reference.image_width
