"""
Rotation Representation Helpers.

Camera poses reach the calibration code in three rotation representations:

    Rotation vector (3,)   axis * angle, OpenCV's rvec (Rodrigues form)
    Quaternion (4,)        unit quaternion, scalar-last [x, y, z, w]
    Rotation matrix (3x3)  orthonormal, det(R) = +1

All are converted to a rotation matrix R before being applied to a point:

    P_cam = R @ P_world + t
"""

from typing import Union

import cv2
import numpy as np
from scipy.spatial.transform import Rotation


def rodrigues_to_matrix(rvec: np.ndarray) -> np.ndarray:
    """
    Convert a rotation vector to a 3x3 rotation matrix.

    Args:
        rvec: Rotation vector (3,), (3, 1) or (1, 3).

    Returns:
        np.ndarray: 3x3 rotation matrix (float64).
    """
    rvec = np.asarray(rvec, dtype=np.float64).reshape(3, 1)
    R, _ = cv2.Rodrigues(rvec)
    return R


def matrix_to_rodrigues(R: np.ndarray) -> np.ndarray:
    """
    Convert a 3x3 rotation matrix to a rotation vector.

    Returns:
        np.ndarray: Rotation vector (3, 1).
    """
    R = np.asarray(R, dtype=np.float64)
    if R.shape != (3, 3):
        raise ValueError(f"R must be 3x3, got {R.shape}")
    rvec, _ = cv2.Rodrigues(R)
    return rvec


def quaternion_to_matrix(q: np.ndarray) -> np.ndarray:
    """
    Convert a quaternion in scalar-last order [x, y, z, w] to a rotation matrix.

    The quaternion is normalized before conversion.
    """
    q = np.asarray(q, dtype=np.float64).reshape(4)
    return Rotation.from_quat(q).as_matrix()


def as_rotation_matrix(
    rotation: Union[np.ndarray, list, tuple],
) -> np.ndarray:
    """
    Convert any supported rotation representation to a 3x3 matrix.

    Args:
        rotation: Quaternion (4 elements, [x, y, z, w]), rotation matrix
                  (3x3) or rotation vector (3 elements).

    Returns:
        np.ndarray: 3x3 rotation matrix.

    Raises:
        ValueError: If the shape matches none of the representations.
    """
    rotation = np.asarray(rotation, dtype=np.float64)

    if rotation.shape == (3, 3):
        return rotation
    if rotation.size == 4:
        return quaternion_to_matrix(rotation)
    if rotation.size == 3:
        return rodrigues_to_matrix(rotation)

    raise ValueError(
        f"Expected quaternion (4,), rotation vector (3,) or matrix (3, 3), "
        f"got shape {rotation.shape}"
    )


def rotation_angle_between(R1: np.ndarray, R2: np.ndarray) -> float:
    """
    Angle of the relative rotation R1^T @ R2 in radians.

        angle = arccos((trace(R1^T R2) - 1) / 2)
    """
    R_rel = np.asarray(R1, dtype=np.float64).T @ np.asarray(R2, dtype=np.float64)
    cos_angle = (np.trace(R_rel) - 1.0) / 2.0
    return float(np.arccos(np.clip(cos_angle, -1.0, 1.0)))
