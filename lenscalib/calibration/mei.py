"""
MEI (Unified Sphere) Omnidirectional Camera Model.

Reference: C. Mei and P. Rives, "Single View Point Omnidirectional Camera
Calibration from Planar Grids", ICRA 2007.

A point is first projected onto the unit sphere, then perspectively from a
center shifted by xi along the optical axis:

    z = Z + xi |P|
    x = X / z,  y = Y / z

followed by the same radial-tangential distortion as the pinhole model
(k1, k2, p1, p2) and the generalized focal lengths (gamma1, gamma2):

    u = gamma1 (x + dx) + u0
    v = gamma2 (y + dy) + v0

Back-projection undistorts the normalized point, then lifts it back onto
the unit sphere:

    ρ² = x² + y²
    λ  = (xi + sqrt(1 + (1 - xi²) ρ²)) / (1 + ρ²)
    P  = (λ x, λ y, λ - xi)

xi = 0 reduces to a pinhole camera; xi = 1 is the parabolic mirror case.
"""

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from .camera import CameraModel
from .parameters import CameraParameters, ModelType
from .pinhole import radial_tangential_distortion, undistort_normalized


@dataclass
class MeiIntrinsics:
    """MEI intrinsics in canonical order."""

    xi: float = 0.0
    k1: float = 0.0
    k2: float = 0.0
    p1: float = 0.0
    p2: float = 0.0
    gamma1: float = 1.0
    gamma2: float = 1.0
    u0: float = 0.0
    v0: float = 0.0

    @property
    def has_distortion(self) -> bool:
        return any(c != 0.0 for c in (self.k1, self.k2, self.p1, self.p2))


class MeiCamera(CameraModel):
    """Unified sphere camera for catadioptric and wide-angle lenses."""

    INTRINSIC_NAMES = ("xi", "k1", "k2", "p1", "p2", "gamma1", "gamma2", "u0", "v0")

    def __init__(
        self,
        intrinsics: MeiIntrinsics = None,
        camera_name: str = "",
        image_width: int = 0,
        image_height: int = 0,
    ):
        super().__init__(
            CameraParameters(ModelType.MEI, camera_name, image_width, image_height)
        )
        self.intrinsics = intrinsics if intrinsics is not None else MeiIntrinsics()

    def space_to_plane(self, P: np.ndarray) -> np.ndarray:
        c = self.intrinsics
        P = np.asarray(P, dtype=np.float64).reshape(3)

        z = P[2] + c.xi * np.linalg.norm(P)
        x = P[0] / z
        y = P[1] / z
        dx, dy = radial_tangential_distortion(x, y, c.k1, c.k2, c.p1, c.p2)

        return np.array([c.gamma1 * (x + dx) + c.u0, c.gamma2 * (y + dy) + c.v0])

    def lift_projective(self, p: np.ndarray) -> np.ndarray:
        c = self.intrinsics
        u, v = np.asarray(p, dtype=np.float64).reshape(2)

        x_d = (u - c.u0) / c.gamma1
        y_d = (v - c.v0) / c.gamma2

        if c.has_distortion:
            x_u, y_u = undistort_normalized(x_d, y_d, c.k1, c.k2, c.p1, c.p2)
        else:
            x_u, y_u = x_d, y_d

        rho2 = x_u * x_u + y_u * y_u
        discriminant = 1.0 + (1.0 - c.xi * c.xi) * rho2
        if discriminant < 0.0:
            raise ValueError(
                f"Pixel ({u}, {v}) lies outside the valid image of xi={c.xi}"
            )

        lam = (c.xi + np.sqrt(discriminant)) / (1.0 + rho2)
        return np.array([lam * x_u, lam * y_u, lam - c.xi])

    def read_parameters(self, values: Union[Sequence[float], np.ndarray]) -> None:
        values = self._check_parameter_vector(values)
        self.intrinsics = MeiIntrinsics(*(float(v) for v in values))

    def write_parameters(self) -> np.ndarray:
        c = self.intrinsics
        return np.array([getattr(c, name) for name in self.INTRINSIC_NAMES])
