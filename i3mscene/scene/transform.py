"""Local transform model for scene nodes.

Provides the Transform class for representing position, rotation (unit
quaternion) and per-axis scale, with conversion to and from 4x4 homogeneous
transformation matrices. All components are held at 32-bit float precision,
matching the precision of the interchange format.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, Field, field_validator
from scipy.spatial.transform import Rotation

# Allowed deviation of a rotation quaternion's magnitude from 1.0
ROTATION_TOLERANCE = 1e-5

IDENTITY_ROTATION = (0.0, 0.0, 0.0, 1.0)


def to_f32(value: float) -> float:
    """Round a float to 32-bit precision.

    Returns the Python float whose shortest decimal form is the shortest
    decimal form of the nearest float32, so that printing and re-parsing
    the value is lossless.
    """
    with np.errstate(over="ignore"):
        return float(str(np.float32(value)))


def to_f32_tuple(values: Sequence[float]) -> tuple[float, ...]:
    """Round every component of a vector to 32-bit precision."""
    return tuple(to_f32(v) for v in values)


def check_unit_rotation(value: tuple[float, ...]) -> tuple[float, ...]:
    """Reject a finite quaternion whose magnitude is not 1 within tolerance.

    Non-finite rotations pass through; they are rejected at serialization.
    """
    quat = np.asarray(value, dtype=np.float64)
    if np.all(np.isfinite(quat)):
        magnitude = float(np.linalg.norm(quat))
        if abs(magnitude - 1.0) > ROTATION_TOLERANCE:
            raise ValueError(
                f"rotation quaternion must have unit magnitude, got {magnitude:.6f}"
            )
    return value


class Transform(BaseModel):
    """Local transformation: position + rotation + scale.

    Attributes:
        position: XYZ translation relative to the parent node
        rotation: Unit quaternion in (x, y, z, w) order
        scale: Per-axis XYZ scale factors
    """

    position: tuple[float, float, float] = Field(
        default=(0.0, 0.0, 0.0),
        description="XYZ translation"
    )
    rotation: tuple[float, float, float, float] = Field(
        default=IDENTITY_ROTATION,
        description="Rotation quaternion (x, y, z, w)"
    )
    scale: tuple[float, float, float] = Field(
        default=(1.0, 1.0, 1.0),
        description="XYZ scale factors"
    )

    model_config = {"frozen": True}

    @field_validator("position", "rotation", "scale")
    @classmethod
    def _quantize(cls, value: tuple[float, ...]) -> tuple[float, ...]:
        return to_f32_tuple(value)

    @field_validator("rotation")
    @classmethod
    def _check_unit_rotation(cls, value: tuple[float, ...]) -> tuple[float, ...]:
        return check_unit_rotation(value)

    @classmethod
    def from_components(
        cls,
        position: Sequence[float],
        rotation: Sequence[float],
        scale: Sequence[float],
    ) -> Transform:
        """Create a Transform from raw engine components.

        The rotation is normalized before validation, since engine
        quaternions drift slightly from unit length.

        Raises:
            ValueError: If the rotation has zero length or a vector has the
                        wrong number of components
        """
        quat = np.asarray(rotation, dtype=np.float64)
        if quat.shape != (4,):
            raise ValueError(f"rotation must have 4 components, got {quat.shape}")
        if np.all(np.isfinite(quat)):
            norm = float(np.linalg.norm(quat))
            if norm < 1e-12:
                raise ValueError("rotation quaternion has zero length")
            quat = quat / norm

        return cls(
            position=tuple(float(v) for v in position),
            rotation=tuple(float(v) for v in quat),
            scale=tuple(float(v) for v in scale),
        )

    @classmethod
    def from_matrix(cls, matrix: NDArray[np.float64]) -> Transform:
        """Decompose a 4x4 homogeneous matrix into translation, rotation and scale.

        Reflections are folded into a negative X scale. A zero-length basis
        column leaves the rotation undefined; the identity rotation is used
        and the resulting transform reports ``is_degenerate``.

        Args:
            matrix: 4x4 transformation matrix (T @ R @ S)

        Returns:
            Transform instance
        """
        matrix = np.asarray(matrix, dtype=np.float64)
        if matrix.shape != (4, 4):
            raise ValueError(f"Expected a 4x4 matrix, got shape {matrix.shape}")

        rot_part = matrix[:3, :3]
        scales = np.linalg.norm(rot_part, axis=0)

        if np.any(scales < 1e-10):
            rotation = IDENTITY_ROTATION
        else:
            if np.linalg.det(rot_part) < 0:
                scales[0] = -scales[0]
            rot = Rotation.from_matrix(rot_part / scales)
            rotation = tuple(rot.as_quat().tolist())

        return cls.from_components(
            position=matrix[:3, 3].tolist(),
            rotation=rotation,
            scale=scales.tolist(),
        )

    def to_matrix(self) -> NDArray[np.float64]:
        """Convert to 4x4 homogeneous transformation matrix.

        The transformation order is: Scale -> Rotate -> Translate
        """
        s = np.diag([*self.scale, 1.0])

        r = np.eye(4, dtype=np.float64)
        r[:3, :3] = Rotation.from_quat(self.rotation).as_matrix()

        t = np.eye(4, dtype=np.float64)
        t[:3, 3] = self.position

        return t @ r @ s

    @property
    def is_finite(self) -> bool:
        """True if every component is a finite number."""
        values = np.asarray([*self.position, *self.rotation, *self.scale])
        return bool(np.all(np.isfinite(values)))

    @property
    def is_degenerate(self) -> bool:
        """True if any scale component is zero (collapsed geometry)."""
        return any(s == 0.0 for s in self.scale)

    @classmethod
    def identity(cls) -> Transform:
        """Return identity transform (no transformation)."""
        return cls()

    def __repr__(self) -> str:
        return (
            f"Transform(pos={self.position}, "
            f"rot={self.rotation}, scale={self.scale})"
        )
