"""
Camera Factory Module.

Builds camera models from a model tag or from a configuration mapping such
as the ``camera`` section of ``configs/default.yaml``:

    camera:
      model_type: pinhole
      camera_name: left
      image_width: 752
      image_height: 480
      intrinsics:
        fx: 460.0
        fy: 460.0
        cx: 376.0
        cy: 240.0

``intrinsics`` may also be a flat list in the model's canonical order.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type, Union

from ..utils.config_loader import get_nested, load_config, merge_configs
from .camera import CameraModel
from .kannala_brandt import KannalaBrandtCamera
from .mei import MeiCamera
from .parameters import ModelType
from .pinhole import PinholeCamera

logger = logging.getLogger(__name__)

CAMERA_CLASSES: Dict[ModelType, Type[CameraModel]] = {
    ModelType.KANNALA_BRANDT: KannalaBrandtCamera,
    ModelType.MEI: MeiCamera,
    ModelType.PINHOLE: PinholeCamera,
}


def create_camera(
    model_type: Union[str, ModelType],
    camera_name: str = "",
    image_width: int = 0,
    image_height: int = 0,
) -> CameraModel:
    """
    Create a camera with default intrinsics for the given model.

    Args:
        model_type: Model tag or name (see ModelType.parse).
        camera_name: Free-text label.
        image_width: Image width in pixels.
        image_height: Image height in pixels.

    Returns:
        CameraModel: Instance of the registered model class.
    """
    model_type = ModelType.parse(model_type)
    camera_cls = CAMERA_CLASSES[model_type]

    logger.debug(f"Creating {camera_cls.__name__} '{camera_name}'")
    return camera_cls(
        camera_name=camera_name,
        image_width=image_width,
        image_height=image_height,
    )


def camera_from_config(config: Mapping[str, Any]) -> CameraModel:
    """
    Create a camera from a configuration mapping.

    Args:
        config: Mapping with 'model_type' and optional 'camera_name',
                'image_width', 'image_height' and 'intrinsics'.

    Returns:
        CameraModel: Configured camera.

    Raises:
        KeyError: If 'model_type' is missing or an intrinsic name is unknown.
        ValueError: If an intrinsics list has the wrong length.
    """
    if "model_type" not in config:
        raise KeyError("Camera config requires 'model_type'")

    camera = create_camera(
        config["model_type"],
        camera_name=config.get("camera_name", ""),
        image_width=config.get("image_width", 0),
        image_height=config.get("image_height", 0),
    )

    intrinsics = config.get("intrinsics")
    if intrinsics is None:
        return camera

    if isinstance(intrinsics, Mapping):
        values = dict(zip(camera.INTRINSIC_NAMES, camera.write_parameters()))
        for name, value in intrinsics.items():
            if name not in values:
                raise KeyError(
                    f"Unknown {camera.model_type.name} intrinsic '{name}', "
                    f"expected one of {list(camera.INTRINSIC_NAMES)}"
                )
            values[name] = float(value)
        camera.read_parameters([values[name] for name in camera.INTRINSIC_NAMES])
    else:
        camera.read_parameters(intrinsics)

    return camera


def load_camera(
    config_path: Union[str, Path],
    key: str = "camera",
    overrides: Optional[Mapping[str, Any]] = None,
) -> CameraModel:
    """
    Load a camera from a YAML configuration file.

    Args:
        config_path: Path to the YAML file.
        key: Dot-separated key of the camera section.
        overrides: Optional mapping deep-merged over the section, e.g.
                   {"image_width": 640, "intrinsics": {"fx": 470.0}}.

    Returns:
        CameraModel: Configured camera.

    Raises:
        KeyError: If the section is missing.
    """
    config = load_config(config_path)

    section = get_nested(config, key)
    if not isinstance(section, Mapping):
        raise KeyError(f"Camera section '{key}' not found in {config_path}")

    if overrides:
        section = merge_configs(section, overrides)

    camera = camera_from_config(section)
    logger.info(f"Loaded {camera!r} from {config_path}")
    return camera
