"""
Geometric Primitives for slice ordering.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence


class Axis(IntEnum):
    """Patient coordinate axis."""
    X = 0
    Y = 1
    Z = 2


@dataclass(frozen=True)
class Vector:
    """
    A vector in 3D space.
    """
    x: float
    y: float
    z: float = 0.0

    def __abs__(self) -> Vector:
        """Component-wise absolute value."""
        return Vector(abs(self.x), abs(self.y), abs(self.z))

    def __getitem__(self, axis: int) -> float:
        return (self.x, self.y, self.z)[axis]

    def cross(self, other: Vector) -> Vector:
        return Vector(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x
        )

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> Vector:
        if len(values) != 3:
            raise ValueError(f"Expected 3 coordinates, got {len(values)}")
        return cls(float(values[0]), float(values[1]), float(values[2]))


@dataclass(frozen=True)
class ImageOrientation:
    """
    Direction cosines of the first row and the first column of a frame
    (Image Orientation (Patient)).
    """
    row: Vector
    column: Vector

    @classmethod
    def from_cosines(cls, cosines: Sequence[float]) -> ImageOrientation:
        """
        Build the orientation from the six direction cosine values.

        Args:
            cosines: Row direction (x, y, z) followed by column direction (x, y, z).
        """
        if len(cosines) != 6:
            raise ValueError(f"Image orientation needs 6 values, got {len(cosines)}")
        return cls(
            row=Vector.from_sequence(cosines[:3]),
            column=Vector.from_sequence(cosines[3:]),
        )

    @property
    def normal(self) -> Vector:
        """Slice normal, i.e. the cross product of row and column direction."""
        return self.row.cross(self.column)

    def as_tuple(self) -> tuple[float, float, float, float, float, float]:
        return (
            self.row.x, self.row.y, self.row.z,
            self.column.x, self.column.y, self.column.z,
        )


@dataclass(frozen=True)
class FramePosition:
    """Image Position (Patient) of a single physical frame."""
    frame_number: int
    position: Vector

    def coordinate(self, axis: Axis) -> float:
        return self.position[axis]
