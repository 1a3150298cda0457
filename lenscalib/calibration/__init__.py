"""
Camera lens models for geometric calibration.

This package provides an abstract camera model, three concrete lens models,
and the calibration algorithms shared by all of them: pose estimation from
3D-2D correspondences, batch projection, and reprojection error metrics.

Classes:
    ModelType: Lens model tag (PINHOLE, KANNALA_BRANDT, MEI).
    CameraParameters: Model tag, camera name, image size, intrinsic count.
    CameraModel: Abstract base with the shared calibration algorithms.
    PinholeCamera: Perspective camera with radial-tangential distortion.
    KannalaBrandtCamera: Equidistant fisheye camera.
    MeiCamera: Unified sphere omnidirectional camera.

Standalone Functions:
    create_camera: Default camera for a model tag.
    camera_from_config: Camera from a configuration mapping.
    load_camera: Camera from a YAML file.

Example Usage:
    >>> from lenscalib.calibration import PinholeCamera, PinholeIntrinsics
    >>>
    >>> camera = PinholeCamera(PinholeIntrinsics(fx=460, fy=460, cx=376, cy=240))
    >>> rvec, tvec = camera.estimate_extrinsics(object_points, image_points)
    >>> error = camera.reprojection_error([object_points], [image_points],
    ...                                   [rvec], [tvec])
"""

from .parameters import CameraParameters, ModelType, intrinsic_count
from .camera import CameraModel, PoseEstimationError
from .pinhole import PinholeCamera, PinholeIntrinsics
from .kannala_brandt import KannalaBrandtCamera, KannalaBrandtIntrinsics
from .mei import MeiCamera, MeiIntrinsics
from .factory import CAMERA_CLASSES, camera_from_config, create_camera, load_camera
from .rotation import (
    as_rotation_matrix,
    matrix_to_rodrigues,
    quaternion_to_matrix,
    rodrigues_to_matrix,
    rotation_angle_between,
)

__all__ = [
    # Classes
    "ModelType",
    "CameraParameters",
    "CameraModel",
    "PoseEstimationError",
    "PinholeCamera",
    "PinholeIntrinsics",
    "KannalaBrandtCamera",
    "KannalaBrandtIntrinsics",
    "MeiCamera",
    "MeiIntrinsics",
    # Standalone functions
    "intrinsic_count",
    "CAMERA_CLASSES",
    "create_camera",
    "camera_from_config",
    "load_camera",
    "as_rotation_matrix",
    "matrix_to_rodrigues",
    "quaternion_to_matrix",
    "rodrigues_to_matrix",
    "rotation_angle_between",
]
