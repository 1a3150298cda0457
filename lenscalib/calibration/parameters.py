"""
Camera Parameter Set Module.

This module holds the model-independent part of a camera calibration: which
lens model is used, a human-readable camera name, the image size, and how
many intrinsic coefficients the model carries.

Supported Lens Models:
======================

    Model            Intrinsics   Coefficients (canonical order)
    --------------   ----------   ------------------------------------------
    PINHOLE               8       k1, k2, p1, p2, fx, fy, cx, cy
    KANNALA_BRANDT        8       k2, k3, k4, k5, mu, mv, u0, v0
    MEI                   9       xi, k1, k2, p1, p2, gamma1, gamma2, u0, v0

The intrinsic count is derived from the model type and is never set on its
own, so the two can not disagree.
"""

from enum import Enum
from typing import Tuple, Union


class ModelType(Enum):
    """Lens model tag."""

    KANNALA_BRANDT = "kannala_brandt"
    MEI = "mei"
    PINHOLE = "pinhole"

    @classmethod
    def parse(cls, value: Union[str, "ModelType"]) -> "ModelType":
        """
        Parse a model type from its name or an alias.

        Args:
            value: ModelType instance or case-insensitive name. Accepts
                   'equidistant'/'fisheye' for KANNALA_BRANDT and
                   'cata'/'omni' for MEI.

        Returns:
            ModelType: Parsed model type.

        Raises:
            ValueError: If the name is not a known model.
        """
        if isinstance(value, cls):
            return value

        name = str(value).strip().lower().replace("-", "_")
        if name in _ALIASES:
            return _ALIASES[name]

        raise ValueError(f"Unknown camera model type: {value!r}")


_ALIASES = {
    "kannala_brandt": ModelType.KANNALA_BRANDT,
    "equidistant": ModelType.KANNALA_BRANDT,
    "fisheye": ModelType.KANNALA_BRANDT,
    "mei": ModelType.MEI,
    "cata": ModelType.MEI,
    "omni": ModelType.MEI,
    "pinhole": ModelType.PINHOLE,
}

_INTRINSIC_COUNTS = {
    ModelType.KANNALA_BRANDT: 8,
    ModelType.MEI: 9,
    ModelType.PINHOLE: 8,
}


def intrinsic_count(model_type: Union[str, ModelType]) -> int:
    """Number of intrinsic coefficients for a lens model."""
    return _INTRINSIC_COUNTS[ModelType.parse(model_type)]


class CameraParameters:
    """
    Model tag, camera name and image size of a calibrated camera.

    Attributes:
        model_type: Lens model of the camera.
        camera_name: Free-text label.
        image_width: Image width in pixels.
        image_height: Image height in pixels.
        n_intrinsics: Number of intrinsic coefficients (read-only).

    Example:
        >>> params = CameraParameters(ModelType.MEI, "left", 752, 480)
        >>> params.n_intrinsics
        9
    """

    def __init__(
        self,
        model_type: Union[str, ModelType],
        camera_name: str = "",
        image_width: int = 0,
        image_height: int = 0,
    ):
        self._model_type = ModelType.parse(model_type)
        self._n_intrinsics = intrinsic_count(self._model_type)
        self.camera_name = camera_name
        self.image_width = image_width
        self.image_height = image_height

    @property
    def model_type(self) -> ModelType:
        return self._model_type

    @model_type.setter
    def model_type(self, value: Union[str, ModelType]) -> None:
        self._model_type = ModelType.parse(value)
        self._n_intrinsics = intrinsic_count(self._model_type)

    @property
    def n_intrinsics(self) -> int:
        return self._n_intrinsics

    @property
    def camera_name(self) -> str:
        return self._camera_name

    @camera_name.setter
    def camera_name(self, value: str) -> None:
        self._camera_name = str(value)

    @property
    def image_width(self) -> int:
        return self._image_width

    @image_width.setter
    def image_width(self, value: int) -> None:
        self._image_width = _check_dimension("image_width", value)

    @property
    def image_height(self) -> int:
        return self._image_height

    @image_height.setter
    def image_height(self, value: int) -> None:
        self._image_height = _check_dimension("image_height", value)

    @property
    def image_size(self) -> Tuple[int, int]:
        """Image size as (width, height)."""
        return self._image_width, self._image_height

    def copy(self) -> "CameraParameters":
        """Independent copy of this parameter set."""
        return CameraParameters(
            self._model_type, self._camera_name, self._image_width, self._image_height
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CameraParameters):
            return NotImplemented
        return (
            self._model_type == other._model_type
            and self._camera_name == other._camera_name
            and self.image_size == other.image_size
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"CameraParameters(model_type={self._model_type.name}, "
            f"camera_name={self._camera_name!r}, "
            f"width={self._image_width}, height={self._image_height}, "
            f"n_intrinsics={self._n_intrinsics})"
        )


def _check_dimension(name: str, value: int) -> int:
    value = int(value)
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value
