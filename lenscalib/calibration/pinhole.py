"""
Pinhole Camera Model with Radial-Tangential Distortion.

Forward projection of a camera-frame point P = (X, Y, Z):

    x = X / Z,  y = Y / Z                           (normalized image point)

    r² = x² + y²
    dx = x (k1 r² + k2 r⁴) + 2 p1 x y + p2 (r² + 2x²)
    dy = y (k1 r² + k2 r⁴) + p1 (r² + 2y²) + 2 p2 x y

    u = fx (x + dx) + cx
    v = fy (y + dy) + cy

Back-projection inverts the pixel mapping with K^(-1) and removes the
distortion by fixed-point iteration:

    x_u ← x_d - dx(x_u, y_u)
    y_u ← y_d - dy(x_u, y_u)

which converges for the moderate distortion of non-fisheye lenses.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

from .camera import CameraModel
from .parameters import CameraParameters, ModelType

UNDISTORT_MAX_ITERATIONS = 50
UNDISTORT_TOLERANCE = 1e-14


def radial_tangential_distortion(
    x: float,
    y: float,
    k1: float,
    k2: float,
    p1: float,
    p2: float,
) -> Tuple[float, float]:
    """
    Distortion offset (dx, dy) of a normalized image point.

    Returns:
        Tuple[float, float]: Offset to add to (x, y).
    """
    x2 = x * x
    y2 = y * y
    xy = x * y
    r2 = x2 + y2
    radial = k1 * r2 + k2 * r2 * r2

    dx = x * radial + 2.0 * p1 * xy + p2 * (r2 + 2.0 * x2)
    dy = y * radial + p1 * (r2 + 2.0 * y2) + 2.0 * p2 * xy
    return dx, dy


def undistort_normalized(
    x_d: float,
    y_d: float,
    k1: float,
    k2: float,
    p1: float,
    p2: float,
) -> Tuple[float, float]:
    """
    Remove radial-tangential distortion from a normalized image point.

    Iterates x_u = x_d - d(x_u) until the update drops below tolerance.
    """
    x_u, y_u = x_d, y_d
    for _ in range(UNDISTORT_MAX_ITERATIONS):
        dx, dy = radial_tangential_distortion(x_u, y_u, k1, k2, p1, p2)
        x_next = x_d - dx
        y_next = y_d - dy
        step = abs(x_next - x_u) + abs(y_next - y_u)
        x_u, y_u = x_next, y_next
        if step < UNDISTORT_TOLERANCE:
            break
    return x_u, y_u


@dataclass
class PinholeIntrinsics:
    """Pinhole intrinsics in canonical order."""

    k1: float = 0.0
    k2: float = 0.0
    p1: float = 0.0
    p2: float = 0.0
    fx: float = 1.0
    fy: float = 1.0
    cx: float = 0.0
    cy: float = 0.0

    @property
    def has_distortion(self) -> bool:
        return any(c != 0.0 for c in (self.k1, self.k2, self.p1, self.p2))


class PinholeCamera(CameraModel):
    """
    Perspective camera with two radial and two tangential coefficients.

    Example:
        >>> camera = PinholeCamera(
        ...     PinholeIntrinsics(fx=460.0, fy=460.0, cx=376.0, cy=240.0),
        ...     camera_name="left", image_width=752, image_height=480,
        ... )
        >>> camera.space_to_plane(np.array([0.0, 0.0, 2.0]))
        array([376., 240.])
    """

    INTRINSIC_NAMES = ("k1", "k2", "p1", "p2", "fx", "fy", "cx", "cy")

    def __init__(
        self,
        intrinsics: PinholeIntrinsics = None,
        camera_name: str = "",
        image_width: int = 0,
        image_height: int = 0,
    ):
        super().__init__(
            CameraParameters(ModelType.PINHOLE, camera_name, image_width, image_height)
        )
        self.intrinsics = intrinsics if intrinsics is not None else PinholeIntrinsics()

    def space_to_plane(self, P: np.ndarray) -> np.ndarray:
        c = self.intrinsics
        X, Y, Z = np.asarray(P, dtype=np.float64).reshape(3)

        x = X / Z
        y = Y / Z
        dx, dy = radial_tangential_distortion(x, y, c.k1, c.k2, c.p1, c.p2)

        return np.array([c.fx * (x + dx) + c.cx, c.fy * (y + dy) + c.cy])

    def lift_projective(self, p: np.ndarray) -> np.ndarray:
        c = self.intrinsics
        u, v = np.asarray(p, dtype=np.float64).reshape(2)

        x_d = (u - c.cx) / c.fx
        y_d = (v - c.cy) / c.fy

        if c.has_distortion:
            x_u, y_u = undistort_normalized(x_d, y_d, c.k1, c.k2, c.p1, c.p2)
        else:
            x_u, y_u = x_d, y_d

        return np.array([x_u, y_u, 1.0])

    def read_parameters(self, values: Union[Sequence[float], np.ndarray]) -> None:
        values = self._check_parameter_vector(values)
        self.intrinsics = PinholeIntrinsics(*(float(v) for v in values))

    def write_parameters(self) -> np.ndarray:
        c = self.intrinsics
        return np.array([getattr(c, name) for name in self.INTRINSIC_NAMES])

    def get_K_matrix(self) -> np.ndarray:
        """
        Get the 3x3 camera intrinsic matrix.

            K = | fx   0  cx |
                |  0  fy  cy |
                |  0   0   1 |
        """
        c = self.intrinsics
        return np.array([
            [c.fx, 0, c.cx],
            [0, c.fy, c.cy],
            [0, 0, 1]
        ], dtype=np.float64)
