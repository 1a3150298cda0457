"""Shared fixtures: one calibrated camera per lens model and a synthetic target."""

import numpy as np
import pytest

from lenscalib.calibration import (
    KannalaBrandtCamera,
    KannalaBrandtIntrinsics,
    MeiCamera,
    MeiIntrinsics,
    PinholeCamera,
    PinholeIntrinsics,
)


@pytest.fixture
def pinhole_camera():
    """Pinhole camera with typical radial-tangential distortion."""
    return PinholeCamera(
        PinholeIntrinsics(
            k1=-0.28, k2=0.07, p1=0.0002, p2=0.00002,
            fx=461.6, fy=460.3, cx=363.0, cy=248.1,
        ),
        camera_name="pinhole",
        image_width=752,
        image_height=480,
    )


@pytest.fixture
def kannala_brandt_camera():
    """Equidistant fisheye camera."""
    return KannalaBrandtCamera(
        KannalaBrandtIntrinsics(
            k2=-0.0132, k3=0.0122, k4=-0.0064, k5=0.0011,
            mu=360.2, mv=360.1, u0=640.4, v0=360.8,
        ),
        camera_name="fisheye",
        image_width=1280,
        image_height=720,
    )


@pytest.fixture
def mei_camera():
    """Unified sphere camera."""
    return MeiCamera(
        MeiIntrinsics(
            xi=0.9, k1=-0.05, k2=0.02, p1=0.0001, p2=-0.0001,
            gamma1=700.0, gamma2=698.5, u0=376.0, v0=240.0,
        ),
        camera_name="omni",
        image_width=752,
        image_height=480,
    )


@pytest.fixture(params=["pinhole", "kannala_brandt", "mei"])
def camera(request):
    """Each concrete lens model in turn."""
    return request.getfixturevalue(f"{request.param}_camera")


@pytest.fixture
def target_points():
    """Non-coplanar 4x3x2 grid with 0.1 spacing (24 points)."""
    xs, ys, zs = np.meshgrid(np.arange(4), np.arange(3), np.arange(2), indexing="ij")
    return np.stack([xs.ravel(), ys.ravel(), zs.ravel()], axis=1) * 0.1


@pytest.fixture
def known_pose():
    """Rotation vector and translation placing the target ~1 m ahead."""
    rvec = np.array([[0.1], [-0.2], [0.05]])
    tvec = np.array([[-0.15], [-0.1], [1.0]])
    return rvec, tvec
