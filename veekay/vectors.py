"""Small vector and 4x4 matrix types for 3D transforms.

Matrices are stored column-major: ``m[c][r]`` is the element in column ``c``
and row ``r``, which is the layout shader uniform buffers expect.
"""

from __future__ import annotations

import math
import operator
from dataclasses import dataclass, field
from typing import Callable, Iterator, Union

Number = Union[int, float]


class _Components:
    """Iteration and component-wise helpers shared by the fixed-size vectors."""

    __slots__ = ()

    _NAMES: tuple[str, ...] = ()
    _SCALARS = True

    def __iter__(self) -> Iterator[float]:
        return (getattr(self, name) for name in self._NAMES)

    def __len__(self) -> int:
        return len(self._NAMES)

    def _apply(self, other, op: Callable[[float, float], float]):
        cls = type(self)
        if isinstance(other, cls):
            return cls(*map(op, self, other))
        if self._SCALARS and isinstance(other, (int, float)):
            return cls(*(op(component, other) for component in self))
        return NotImplemented

    def _get(self, index: int) -> float:
        return getattr(self, self._NAMES[index])

    def _set(self, index: int, value: float) -> None:
        setattr(self, self._NAMES[index], value)


@dataclass(slots=True)
class Vec2(_Components):
    """Two-component vector; arithmetic works with vectors and scalars."""

    x: float = 0.0
    y: float = 0.0

    _NAMES = ("x", "y")

    def __add__(self, other):
        return self._apply(other, operator.add)

    def __sub__(self, other):
        return self._apply(other, operator.sub)

    def __mul__(self, other):
        return self._apply(other, operator.mul)

    def __truediv__(self, other):
        return self._apply(other, operator.truediv)

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def __getitem__(self, index: int) -> float:
        return self._get(index)

    def __setitem__(self, index: int, value: float) -> None:
        self._set(index, value)


@dataclass(slots=True)
class Vec3(_Components):
    """Three-component vector with dot and cross products."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    _NAMES = ("x", "y", "z")

    def __add__(self, other):
        return self._apply(other, operator.add)

    def __sub__(self, other):
        return self._apply(other, operator.sub)

    def __mul__(self, other):
        return self._apply(other, operator.mul)

    def __truediv__(self, other):
        return self._apply(other, operator.truediv)

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    def __getitem__(self, index: int) -> float:
        return self._get(index)

    def __setitem__(self, index: int, value: float) -> None:
        self._set(index, value)

    @staticmethod
    def dot(lhs: Vec3, rhs: Vec3) -> float:
        return lhs.x * rhs.x + lhs.y * rhs.y + lhs.z * rhs.z

    @staticmethod
    def squared_length(vector: Vec3) -> float:
        return Vec3.dot(vector, vector)

    @staticmethod
    def length(vector: Vec3) -> float:
        return math.sqrt(Vec3.squared_length(vector))

    @staticmethod
    def normalized(vector: Vec3) -> Vec3:
        """Return ``vector`` scaled to unit length."""
        return vector / Vec3.length(vector)

    @staticmethod
    def cross(lhs: Vec3, rhs: Vec3) -> Vec3:
        return Vec3(
            lhs.y * rhs.z - lhs.z * rhs.y,
            lhs.z * rhs.x - lhs.x * rhs.z,
            lhs.x * rhs.y - lhs.y * rhs.x,
        )


@dataclass(slots=True)
class Vec4(_Components):
    """Four-component vector; arithmetic works only between two Vec4s."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0

    _NAMES = ("x", "y", "z", "w")
    _SCALARS = False

    def __add__(self, other):
        return self._apply(other, operator.add)

    def __sub__(self, other):
        return self._apply(other, operator.sub)

    def __mul__(self, other):
        return self._apply(other, operator.mul)

    def __truediv__(self, other):
        return self._apply(other, operator.truediv)

    def __getitem__(self, index: int) -> float:
        return self._get(index)

    def __setitem__(self, index: int, value: float) -> None:
        self._set(index, value)


def _zero_columns() -> list[Vec4]:
    return [Vec4() for _ in range(4)]


@dataclass(slots=True)
class Mat4:
    """4x4 matrix held as four column vectors; a new matrix is all zeros."""

    columns: list[Vec4] = field(default_factory=_zero_columns)

    def __post_init__(self) -> None:
        if len(self.columns) != 4:
            raise ValueError("a Mat4 needs exactly four columns")

    def __getitem__(self, index: int) -> Vec4:
        return self.columns[index]

    @staticmethod
    def identity() -> Mat4:
        result = Mat4()
        for i in range(4):
            result[i][i] = 1.0
        return result

    @staticmethod
    def translation(vector: Vec3) -> Mat4:
        result = Mat4.identity()
        result[3][0] = vector.x
        result[3][1] = vector.y
        result[3][2] = vector.z
        return result

    @staticmethod
    def scaling(vector: Vec3) -> Mat4:
        result = Mat4()
        result[0][0] = vector.x
        result[1][1] = vector.y
        result[2][2] = vector.z
        result[3][3] = 1.0
        return result

    @staticmethod
    def rotation(axis: Vec3, angle: float) -> Mat4:
        """Rotation of ``angle`` radians about ``axis`` (need not be unit length)."""
        x, y, z = Vec3.normalized(axis)
        sina = math.sin(angle)
        cosa = math.cos(angle)
        cosv = 1.0 - cosa

        result = Mat4()
        result[0][0] = x * x * cosv + cosa
        result[0][1] = x * y * cosv + z * sina
        result[0][2] = x * z * cosv - y * sina

        result[1][0] = y * x * cosv - z * sina
        result[1][1] = y * y * cosv + cosa
        result[1][2] = y * z * cosv + x * sina

        result[2][0] = z * x * cosv + y * sina
        result[2][1] = z * y * cosv - x * sina
        result[2][2] = z * z * cosv + cosa

        result[3][3] = 1.0
        return result

    @staticmethod
    def projection(fov: float, aspect_ratio: float, near: float, far: float) -> Mat4:
        """Perspective projection; ``fov`` is the vertical angle in degrees."""
        radians = fov * math.pi / 180.0
        cot = 1.0 / math.tan(radians / 2.0)

        result = Mat4()
        result[0][0] = cot / aspect_ratio
        result[1][1] = cot
        result[2][3] = 1.0
        result[2][2] = far / (far - near)
        result[3][2] = (-near * far) / (far - near)
        return result

    @staticmethod
    def transpose(matrix: Mat4) -> Mat4:
        return Mat4([Vec4(*(column[j] for column in matrix.columns)) for j in range(4)])

    def __mul__(self, other):
        if not isinstance(other, Mat4):
            return NotImplemented
        return Mat4(
            [
                Vec4(
                    *(
                        sum(a * col[i] for a, col in zip(column, other.columns))
                        for i in range(4)
                    )
                )
                for column in self.columns
            ]
        )