"""
Kannala-Brandt (Equidistant Fisheye) Camera Model.

Reference: J. Kannala and S. Brandt, "A Generic Camera Model and Calibration
Method for Conventional, Wide-Angle, and Fish-Eye Lenses", PAMI 2006.

Forward projection of P = (X, Y, Z):

    θ = atan2(sqrt(X² + Y²), Z)         angle from the optical axis
    φ = atan2(Y, X)                     azimuth

    r(θ) = θ + k2 θ³ + k3 θ⁵ + k4 θ⁷ + k5 θ⁹

    u = mu r(θ) cos φ + u0
    v = mv r(θ) sin φ + v0

Back-projection solves the odd polynomial r(θ) = |m| for θ, where m is the
pixel mapped back through (mu, mv, u0, v0), and returns the unit ray

    P = (sin θ cos φ, sin θ sin φ, cos θ)

The model handles fields of view beyond 180°, since θ is an angle rather than
a tangent.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

from .camera import CameraModel
from .parameters import CameraParameters, ModelType

MIN_RADIUS = 1e-10
ROOT_IMAG_TOLERANCE = 1e-10


@dataclass
class KannalaBrandtIntrinsics:
    """Kannala-Brandt intrinsics in canonical order."""

    k2: float = 0.0
    k3: float = 0.0
    k4: float = 0.0
    k5: float = 0.0
    mu: float = 1.0
    mv: float = 1.0
    u0: float = 0.0
    v0: float = 0.0

    def radius(self, theta: float) -> float:
        """Distorted radius r(θ) on the normalized image plane."""
        theta2 = theta * theta
        return theta * (
            1.0 + theta2 * (self.k2 + theta2 * (self.k3 + theta2 * (self.k4 + theta2 * self.k5)))
        )


class KannalaBrandtCamera(CameraModel):
    """Equidistant fisheye camera with four polynomial coefficients."""

    INTRINSIC_NAMES = ("k2", "k3", "k4", "k5", "mu", "mv", "u0", "v0")

    def __init__(
        self,
        intrinsics: KannalaBrandtIntrinsics = None,
        camera_name: str = "",
        image_width: int = 0,
        image_height: int = 0,
    ):
        super().__init__(
            CameraParameters(
                ModelType.KANNALA_BRANDT, camera_name, image_width, image_height
            )
        )
        self.intrinsics = (
            intrinsics if intrinsics is not None else KannalaBrandtIntrinsics()
        )

    def space_to_plane(self, P: np.ndarray) -> np.ndarray:
        c = self.intrinsics
        P = np.asarray(P, dtype=np.float64).reshape(3)

        theta = np.arctan2(np.hypot(P[0], P[1]), P[2])
        phi = np.arctan2(P[1], P[0])
        r = c.radius(theta)

        return np.array([c.mu * r * np.cos(phi) + c.u0, c.mv * r * np.sin(phi) + c.v0])

    def lift_projective(self, p: np.ndarray) -> np.ndarray:
        c = self.intrinsics
        u, v = np.asarray(p, dtype=np.float64).reshape(2)

        mx = (u - c.u0) / c.mu
        my = (v - c.v0) / c.mv
        theta, phi = self.backproject_symmetric(mx, my)

        sin_theta = np.sin(theta)
        return np.array([sin_theta * np.cos(phi), sin_theta * np.sin(phi), np.cos(theta)])

    def backproject_symmetric(self, mx: float, my: float) -> Tuple[float, float]:
        """
        Recover (θ, φ) of a normalized distorted image point.

        Solves θ + k2 θ³ + k3 θ⁵ + k4 θ⁷ + k5 θ⁹ = |m| and keeps the smallest
        non-negative real root.

        Raises:
            ValueError: If the polynomial has no non-negative real root.
        """
        c = self.intrinsics
        radius = float(np.hypot(mx, my))
        if radius < MIN_RADIUS:
            return 0.0, 0.0

        phi = float(np.arctan2(my, mx))

        if c.k2 == c.k3 == c.k4 == c.k5 == 0.0:
            return radius, phi

        # Highest degree first: k5 θ⁹ + 0 + k4 θ⁷ + 0 + k3 θ⁵ + 0 + k2 θ³ + 0 + θ - r
        coeffs = [c.k5, 0.0, c.k4, 0.0, c.k3, 0.0, c.k2, 0.0, 1.0, -radius]
        roots = np.roots(np.trim_zeros(coeffs, "f"))

        real = roots[np.abs(roots.imag) < ROOT_IMAG_TOLERANCE].real
        real = real[real >= -ROOT_IMAG_TOLERANCE]
        if real.size == 0:
            raise ValueError(f"No real incidence angle for normalized radius {radius}")

        theta = max(float(real.min()), 0.0)

        # Newton polish of the eigenvalue root
        for _ in range(2):
            theta2 = theta * theta
            slope = 1.0 + theta2 * (
                3.0 * c.k2 + theta2 * (5.0 * c.k3 + theta2 * (7.0 * c.k4 + 9.0 * theta2 * c.k5))
            )
            if slope == 0.0:
                break
            theta -= (c.radius(theta) - radius) / slope

        return theta, phi

    def read_parameters(self, values: Union[Sequence[float], np.ndarray]) -> None:
        values = self._check_parameter_vector(values)
        self.intrinsics = KannalaBrandtIntrinsics(*(float(v) for v in values))

    def write_parameters(self) -> np.ndarray:
        c = self.intrinsics
        return np.array([getattr(c, name) for name in self.INTRINSIC_NAMES])
