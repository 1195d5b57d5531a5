# astrokernel/core/transform.py
# -----------------------------------------------------------------------------
# Time-Tagged Rigid Transforms
#
# Convention (rotate, then translate), for a transform from frame A to B:
#   p_B = R p_A + T
#   v_B = R v_A + V + w x (R p_A)
# where w is the rotation rate of A with respect to B, expressed in B.
# Dropping the w x (R p) term gives wrong velocities in rotating frames
# such as Earth-fixed ones.
#
# Composition of A->B (R1, w1, T1, V1) with B->C (R2, w2, T2, V2):
#   R = R2 R1
#   T = R2 T1 + T2
#   w = w2 + R2 w1
#   V = R2 V1 + V2 + w2 x (R2 T1)
# -----------------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional

import numpy as np
from numpy.typing import NDArray

from astrokernel.core.dates import AbsoluteDate

__all__ = [
    "PVCoordinates",
    "Transform",
]

Vector = NDArray[np.float64]
Matrix = NDArray[np.float64]

_ZERO = np.zeros(3, dtype=float)
_IDENTITY = np.eye(3, dtype=float)


def _vector(value, name: str) -> Vector:
    vec: Vector = np.asarray(value, dtype=float)
    if vec.shape != (3,):
        raise ValueError(f"{name} must be shape (3,), got {vec.shape}")
    if not np.all(np.isfinite(vec)):
        raise ValueError(f"{name} must be finite")
    return vec


class PVCoordinates(NamedTuple):
    """Position [m] and velocity [m/s] in one frame."""
    position: Vector
    velocity: Vector

    @classmethod
    def of(cls, position, velocity) -> "PVCoordinates":
        return cls(_vector(position, "position"), _vector(velocity, "velocity"))


@dataclass(frozen=True)
class Transform:
    """Rigid relation from a source frame to a target frame at one date."""

    date: Optional[AbsoluteDate]
    rotation: Matrix
    rotation_rate: Vector
    translation: Vector
    velocity: Vector

    def __post_init__(self) -> None:
        rot: Matrix = np.asarray(self.rotation, dtype=float)
        if rot.shape != (3, 3):
            raise ValueError(f"rotation must be shape (3, 3), got {rot.shape}")
        if not np.all(np.isfinite(rot)):
            raise ValueError("rotation must be finite")
        object.__setattr__(self, "rotation", rot)
        object.__setattr__(self, "rotation_rate", _vector(self.rotation_rate, "rotation_rate"))
        object.__setattr__(self, "translation", _vector(self.translation, "translation"))
        object.__setattr__(self, "velocity", _vector(self.velocity, "velocity"))

    # Factories

    @staticmethod
    def identity(date: Optional[AbsoluteDate] = None) -> "Transform":
        return Transform(date, _IDENTITY, _ZERO, _ZERO, _ZERO)

    @staticmethod
    def from_rotation(date: Optional[AbsoluteDate], rotation: Matrix,
                      rotation_rate=_ZERO) -> "Transform":
        return Transform(date, rotation, rotation_rate, _ZERO, _ZERO)

    @staticmethod
    def from_translation(date: Optional[AbsoluteDate], translation,
                         velocity=_ZERO) -> "Transform":
        return Transform(date, _IDENTITY, _ZERO, translation, velocity)

    def with_date(self, date: Optional[AbsoluteDate]) -> "Transform":
        if date is self.date:
            return self
        return Transform(date, self.rotation, self.rotation_rate, self.translation, self.velocity)

    # Algebra

    def get_inverse(self) -> "Transform":
        """Transform from the target frame back to the source frame."""
        r_inv: Matrix = self.rotation.T
        translation: Vector = -(r_inv @ self.translation)
        rotation_rate: Vector = -(r_inv @ self.rotation_rate)
        velocity: Vector = np.cross(rotation_rate, translation) - r_inv @ self.velocity
        return Transform(self.date, r_inv, rotation_rate, translation, velocity)

    def compose(self, other: "Transform") -> "Transform":
        """Chain ``self: A->B`` with ``other: B->C`` into ``A->C``."""
        r2: Matrix = other.rotation
        rotated_t1: Vector = r2 @ self.translation
        return Transform(
            self.date if self.date is not None else other.date,
            r2 @ self.rotation,
            other.rotation_rate + r2 @ self.rotation_rate,
            rotated_t1 + other.translation,
            r2 @ self.velocity + other.velocity + np.cross(other.rotation_rate, rotated_t1),
        )

    # Application

    def transform_position(self, position) -> Vector:
        return self.rotation @ _vector(position, "position") + self.translation

    def transform_vector(self, vector) -> Vector:
        return self.rotation @ _vector(vector, "vector")

    def transform_pv_coordinates(self, pv: PVCoordinates) -> PVCoordinates:
        rotated_p: Vector = self.rotation @ _vector(pv.position, "position")
        rotated_v: Vector = self.rotation @ _vector(pv.velocity, "velocity")
        return PVCoordinates(
            rotated_p + self.translation,
            rotated_v + self.velocity + np.cross(self.rotation_rate, rotated_p),
        )

    def is_identity(self, tolerance: float = 1.0e-12) -> bool:
        return (np.allclose(self.rotation, _IDENTITY, rtol=0.0, atol=tolerance)
                and np.allclose(self.translation, _ZERO, rtol=0.0, atol=tolerance)
                and np.allclose(self.rotation_rate, _ZERO, rtol=0.0, atol=tolerance)
                and np.allclose(self.velocity, _ZERO, rtol=0.0, atol=tolerance))
