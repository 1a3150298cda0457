"""
Abstract Camera Model Module.

A camera model maps 3D points in the camera frame to 2D pixel coordinates
and back. Every lens model (pinhole, fisheye, omnidirectional) supplies its
own pair of non-linear transforms:

    space_to_plane:   P = (X, Y, Z)  ->  p = (u, v)      (with distortion)
    lift_projective:  p = (u, v)     ->  P ~ (X, Y, Z)   (ray through pixel)

The calibration algorithms below are written once against that pair and
work for every model:

    estimate_extrinsics      pose from 3D-2D correspondences (PnP)
    project_points           batch world -> pixel projection
    reprojection_error       aggregate pixel error over several views
    point_reprojection_error pixel residual of one point under one pose
    reprojection_dist        pixel distance between two camera-frame points

Pose Estimation Without Distortion:
===================================
Lifting every observed pixel and dividing by its forward component gives
the ideal normalized image point

    m = (X/Z, Y/Z)

which a distortion-free camera with K = I would observe. A single PnP
solver configured with K = I and no distortion therefore serves every lens
model.

Known Limitation:
=================
Near-planar or near-collinear point sets make the PnP problem poorly
conditioned. Accuracy degrades silently; nothing here detects it.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from ..utils.logger import LoggerMixin
from .parameters import CameraParameters, ModelType
from .rotation import as_rotation_matrix, rodrigues_to_matrix


class PoseEstimationError(RuntimeError):
    """The PnP solver found no pose for the given correspondences."""


def as_points(points, dim: int, name: str = "points") -> np.ndarray:
    """
    Normalize a point collection to an (N, dim) float64 array.

    Accepts lists of tuples, (N, dim) arrays and OpenCV-style (N, 1, dim)
    arrays.

    Raises:
        ValueError: If the trailing dimension is not ``dim``.
    """
    points = np.asarray(points, dtype=np.float64)
    if points.size == 0:
        return points.reshape(0, dim)
    if points.shape[-1] != dim:
        raise ValueError(
            f"{name} must have {dim} coordinates per point, got shape {points.shape}"
        )
    return points.reshape(-1, dim)


class CameraModel(LoggerMixin, ABC):
    """
    Base class for all lens models.

    Owns a private copy of its CameraParameters and an optional validity
    mask. Model type and image size are fixed at construction; only the
    camera name and the mask can change afterwards.
    Subclasses implement space_to_plane, lift_projective and the intrinsic
    vector accessors; everything else is shared.

    Attributes:
        parameters: Snapshot of model tag, camera name and image size.
        mask: Optional single-channel (height, width) array. Zero marks
              pixels excluded from calibration. Never affects projection.
    """

    INTRINSIC_NAMES: Tuple[str, ...] = ()

    def __init__(self, parameters: CameraParameters):
        self._parameters = parameters.copy()
        self._mask: Optional[np.ndarray] = None

    # -------------------------------------------------------------------------
    # Parameter set and mask
    # -------------------------------------------------------------------------

    @property
    def parameters(self) -> CameraParameters:
        """Copy of the parameter set; changing it does not affect the model."""
        return self._parameters.copy()

    @property
    def model_type(self) -> ModelType:
        return self._parameters.model_type

    @property
    def camera_name(self) -> str:
        return self._parameters.camera_name

    @camera_name.setter
    def camera_name(self, value: str) -> None:
        self._parameters.camera_name = value

    @property
    def image_width(self) -> int:
        return self._parameters.image_width

    @property
    def image_height(self) -> int:
        return self._parameters.image_height

    @property
    def n_intrinsics(self) -> int:
        return self._parameters.n_intrinsics

    @property
    def mask(self) -> Optional[np.ndarray]:
        return self._mask

    @mask.setter
    def mask(self, mask: Optional[np.ndarray]) -> None:
        if mask is None:
            self._mask = None
            return

        mask = np.asarray(mask)
        if mask.ndim != 2:
            raise ValueError(f"Mask must be single-channel 2D, got shape {mask.shape}")

        expected = (self.image_height, self.image_width)
        if all(expected) and mask.shape != expected:
            raise ValueError(
                f"Mask shape {mask.shape} does not match image size {expected}"
            )
        self._mask = mask

    # -------------------------------------------------------------------------
    # Model-specific transforms
    # -------------------------------------------------------------------------

    @abstractmethod
    def space_to_plane(self, P: np.ndarray) -> np.ndarray:
        """
        Project a 3D camera-frame point to pixel coordinates.

        Args:
            P: 3D point (3,) in the camera frame.

        Returns:
            np.ndarray: Pixel coordinates (2,).
        """

    @abstractmethod
    def lift_projective(self, p: np.ndarray) -> np.ndarray:
        """
        Back-project a pixel to a ray in the camera frame.

        The ray is not unit length in general, but P / P[2] is the
        undistorted normalized image point for pixels in front of the camera.

        Args:
            p: Pixel coordinates (2,).

        Returns:
            np.ndarray: Ray direction (3,).
        """

    @abstractmethod
    def read_parameters(self, values: Sequence[float]) -> None:
        """Set the intrinsics from a flat vector in canonical order."""

    @abstractmethod
    def write_parameters(self) -> np.ndarray:
        """Intrinsics as a flat (n_intrinsics,) vector in canonical order."""

    def _check_parameter_vector(self, values: Sequence[float]) -> np.ndarray:
        values = np.asarray(values, dtype=np.float64).ravel()
        if values.size != self.n_intrinsics:
            raise ValueError(
                f"{self.model_type.name} expects {self.n_intrinsics} intrinsics, "
                f"got {values.size}"
            )
        return values

    # -------------------------------------------------------------------------
    # Shared algorithms
    # -------------------------------------------------------------------------

    def estimate_extrinsics(
        self,
        object_points,
        image_points,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Estimate the pose of an object from 3D-2D correspondences.

        Each image point is lifted to a ray and scaled to unit forward
        component; the resulting distortion-free points go to cv2.solvePnP
        with an identity camera matrix and no distortion coefficients.

        Args:
            object_points: 3D points (N, 3) in the object frame.
            image_points: Observed pixels (N, 2), matched 1:1.

        Returns:
            Tuple[np.ndarray, np.ndarray]: (rvec, tvec), each (3, 1), such
            that P_cam = R(rvec) @ P_obj + tvec.

        Raises:
            ValueError: If counts differ or fewer than 4 points are given.
            PoseEstimationError: If the solver reports no solution.
        """
        object_points = as_points(object_points, 3, "object_points")
        image_points = as_points(image_points, 2, "image_points")

        if len(object_points) != len(image_points):
            raise ValueError(
                f"Got {len(object_points)} object points but "
                f"{len(image_points)} image points"
            )
        if len(object_points) < 4:
            raise ValueError(
                f"Pose estimation needs at least 4 correspondences, "
                f"got {len(object_points)}"
            )

        normalized = np.empty_like(image_points)
        for i, p in enumerate(image_points):
            P = self.lift_projective(p)
            normalized[i] = P[:2] / P[2]

        self.logger.debug(
            f"Estimating extrinsics from {len(object_points)} correspondences"
        )

        success, rvec, tvec = cv2.solvePnP(
            object_points,
            normalized,
            np.eye(3, dtype=np.float64),
            None,
        )
        if not success:
            raise PoseEstimationError(
                f"solvePnP found no pose for {len(object_points)} points"
            )

        return rvec.reshape(3, 1), tvec.reshape(3, 1)

    def project_points(
        self,
        object_points,
        rvec: np.ndarray,
        tvec: np.ndarray,
    ) -> np.ndarray:
        """
        Project world points into the image.

        The rotation vector is converted once per call. Points the model
        cannot image (e.g. behind the camera) are still passed to
        space_to_plane and not filtered.

        Args:
            object_points: 3D points (N, 3) in the world frame.
            rvec: Rotation vector (3,) or (3, 1).
            tvec: Translation vector (3,) or (3, 1).

        Returns:
            np.ndarray: Pixel coordinates (N, 2), same order as the input.
        """
        object_points = as_points(object_points, 3, "object_points")

        R = rodrigues_to_matrix(rvec)
        t = np.asarray(tvec, dtype=np.float64).reshape(3)

        image_points = np.empty((len(object_points), 2), dtype=np.float64)
        for i, P in enumerate(object_points):
            image_points[i] = self.space_to_plane(R @ P + t)

        return image_points

    def reprojection_error(
        self,
        object_points: Sequence,
        image_points: Sequence,
        rvecs: Sequence[np.ndarray],
        tvecs: Sequence[np.ndarray],
        per_view: bool = False,
    ) -> Union[float, Tuple[float, np.ndarray]]:
        """
        Mean pixel reprojection error over several views.

        The mean is taken over all points of all views at once:

            error = sum_views sum_points |p_obs - p_proj| / total_points

        so views with more points weigh more than views with fewer.

        Args:
            object_points: Per-view 3D points, each (N_i, 3).
            image_points: Per-view observed pixels, each (N_i, 2).
            rvecs: Per-view rotation vectors.
            tvecs: Per-view translation vectors.
            per_view: Also return the mean error of each view.

        Returns:
            float: Aggregate mean error, or (error, per_view_errors) when
            per_view is True. per_view_errors has shape (n_views,).

        Raises:
            ValueError: On mismatched view or point counts, or no points.
        """
        n_views = len(object_points)
        if not (len(image_points) == len(rvecs) == len(tvecs) == n_views):
            raise ValueError(
                f"View count mismatch: {n_views} object point sets, "
                f"{len(image_points)} image point sets, {len(rvecs)} rvecs, "
                f"{len(tvecs)} tvecs"
            )

        per_view_errors = np.zeros(n_views, dtype=np.float64)
        total_error = 0.0
        total_points = 0

        for i in range(n_views):
            observed = as_points(image_points[i], 2, "image_points")
            projected = self.project_points(object_points[i], rvecs[i], tvecs[i])

            if len(observed) != len(projected):
                raise ValueError(
                    f"View {i}: {len(projected)} object points but "
                    f"{len(observed)} image points"
                )

            point_count = len(observed)
            error = float(np.linalg.norm(observed - projected, axis=1).sum())

            if point_count > 0:
                per_view_errors[i] = error / point_count

            total_error += error
            total_points += point_count

        if total_points == 0:
            raise ValueError("No points to compute reprojection error")

        mean_error = total_error / total_points
        self.logger.debug(
            f"Reprojection error over {n_views} views, "
            f"{total_points} points: {mean_error:.4f} px"
        )

        if per_view:
            return mean_error, per_view_errors
        return mean_error

    def point_reprojection_error(
        self,
        P: np.ndarray,
        rotation: np.ndarray,
        translation: np.ndarray,
        observed_p: np.ndarray,
    ) -> float:
        """
        Pixel residual of a single world point under a given pose.

            P_cam = R @ P + t
            error = |space_to_plane(P_cam) - observed_p|

        Args:
            P: 3D point (3,) in the world frame.
            rotation: Quaternion [x, y, z, w], 3x3 matrix or rotation vector.
            translation: Translation (3,).
            observed_p: Observed pixel (2,).

        Returns:
            float: Euclidean pixel distance.
        """
        R = as_rotation_matrix(rotation)
        t = np.asarray(translation, dtype=np.float64).reshape(3)
        P_cam = R @ np.asarray(P, dtype=np.float64).reshape(3) + t

        p = self.space_to_plane(P_cam)
        return float(np.linalg.norm(p - np.asarray(observed_p, dtype=np.float64).reshape(2)))

    def reprojection_dist(self, P1: np.ndarray, P2: np.ndarray) -> float:
        """
        Pixel distance between the projections of two camera-frame points.

        Compares two 3D estimates by their image footprint instead of their
        metric separation.
        """
        p1 = self.space_to_plane(np.asarray(P1, dtype=np.float64).reshape(3))
        p2 = self.space_to_plane(np.asarray(P2, dtype=np.float64).reshape(3))
        return float(np.linalg.norm(p1 - p2))

    def __repr__(self) -> str:
        """String representation."""
        return f"{self.__class__.__name__}({self._parameters!r})"
