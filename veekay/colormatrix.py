"""3x3 colour matrices: RGB to XYZ conversion and white point adaptation.

Matrices are 9-tuples in row-major order, so ``m[3 * row + col]``.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import IntEnum

Matrix = tuple[float, float, float, float, float, float, float, float, float]
Triple = tuple[float, float, float]

IDENTITY: Matrix = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0)


class SingularMatrixError(ValueError):
    """Raised when a matrix cannot be inverted or built without dividing by zero."""


class AdaptationMethod(IntEnum):
    """Chromatic adaptation transform used to move between white points."""

    XYZ_SCALING = 0
    BRADFORD = 1
    VON_KRIES = 2


_BRADFORD: Matrix = (
    0.8951, 0.2664, -0.1614,
    -0.7502, 1.7135, 0.0367,
    0.0389, -0.0685, 1.0296,
)
_BRADFORD_INV: Matrix = (
    0.9869929, -0.1470543, 0.1599627,
    0.4323053, 0.5183603, 0.0492912,
    -0.0085287, 0.0400428, 0.9684867,
)
_VON_KRIES: Matrix = (
    0.40024, 0.70760, -0.08081,
    -0.22630, 1.16532, 0.04570,
    0.00000, 0.00000, 0.91822,
)
_VON_KRIES_INV: Matrix = (
    1.8599364, -1.1293816, 0.2198974,
    0.3611914, 0.6388125, -0.0000064,
    0.0000000, 0.0000000, 1.0890636,
)


def _as_matrix(m: Sequence[float]) -> Matrix:
    if len(m) != 9:
        raise ValueError("a 3x3 matrix needs exactly nine elements")
    return tuple(float(v) for v in m)  # type: ignore[return-value]


def mul_matrix(m: Sequence[float], x: float, y: float, z: float) -> Triple:
    """Multiply the column vector ``(x, y, z)`` by the matrix ``m``."""
    return (
        x * m[0] + y * m[1] + z * m[2],
        x * m[3] + y * m[4] + z * m[5],
        x * m[6] + y * m[7] + z * m[8],
    )


def mul_matrix_matrix(a: Sequence[float], b: Sequence[float]) -> Matrix:
    """Return the matrix product ``a @ b``."""
    a = _as_matrix(a)
    b = _as_matrix(b)
    columns = [mul_matrix(a, b[col], b[col + 3], b[col + 6]) for col in range(3)]
    return tuple(columns[col][row] for row in range(3) for col in range(3))  # type: ignore[return-value]


def invert_matrix(m: Sequence[float]) -> Matrix:
    """Return the inverse of ``m``, raising SingularMatrixError if it has none."""
    m = _as_matrix(m)
    e0 = m[4] * m[8] - m[5] * m[7]
    e3 = m[5] * m[6] - m[3] * m[8]
    e6 = m[3] * m[7] - m[4] * m[6]
    determinant = m[0] * e0 + m[1] * e3 + m[2] * e6
    if determinant == 0:
        raise SingularMatrixError("matrix is not invertible")
    d = 1.0 / determinant
    if abs(d) > 1e15:
        raise SingularMatrixError("matrix is not invertible")
    return (
        e0 * d,
        (m[2] * m[7] - m[1] * m[8]) * d,
        (m[1] * m[5] - m[2] * m[4]) * d,
        e3 * d,
        (m[0] * m[8] - m[2] * m[6]) * d,
        (m[3] * m[2] - m[0] * m[5]) * d,
        e6 * d,
        (m[6] * m[1] - m[0] * m[7]) * d,
        (m[0] * m[4] - m[3] * m[1]) * d,
    )


def chrm_matrix_xyz(
    white: Sequence[float],
    red: Sequence[float],
    green: Sequence[float],
    blue: Sequence[float],
) -> Matrix:
    """Linear RGB to XYZ matrix from the white point and primaries given in XYZ."""
    r_x, r_y, r_z = red
    g_x, g_y, g_z = green
    b_x, b_y, b_z = blue
    primaries = (r_x, g_x, b_x, r_y, g_y, b_y, r_z, g_z, b_z)
    rs, gs, bs = mul_matrix(invert_matrix(primaries), *white)
    return (
        rs * r_x, gs * g_x, bs * b_x,
        rs * r_y, gs * g_y, bs * b_y,
        rs * r_z, gs * g_z, bs * b_z,
    )


def _xy_to_xyz(x: float, y: float) -> Triple:
    return (x / y, 1.0, (1.0 - x - y) / y)


def chrm_matrix_xy(
    wx: float, wy: float,
    rx: float, ry: float,
    gx: float, gy: float,
    bx: float, by: float,
) -> Matrix:
    """Linear RGB to XYZ matrix from the white point and primaries given in xy."""
    if wy == 0 or ry == 0 or gy == 0 or by == 0:
        raise SingularMatrixError("chromaticity y coordinate is zero")
    return chrm_matrix_xyz(
        _xy_to_xyz(wx, wy),
        _xy_to_xyz(rx, ry),
        _xy_to_xyz(gx, gy),
        _xy_to_xyz(bx, by),
    )


def adaptation_matrix(
    method: AdaptationMethod,
    source_white: Sequence[float],
    target_white: Sequence[float],
) -> Matrix:
    """Matrix that adapts XYZ colours from ``source_white`` to ``target_white``."""
    method = AdaptationMethod(method)
    sx, sy, sz = source_white
    tx, ty, tz = target_white
    try:
        if method == AdaptationMethod.XYZ_SCALING:
            return (tx / sx, 0.0, 0.0, 0.0, ty / sy, 0.0, 0.0, 0.0, tz / sz)
        if method == AdaptationMethod.BRADFORD:
            cat, inverse = _BRADFORD, _BRADFORD_INV
        else:
            cat, inverse = _VON_KRIES, _VON_KRIES_INV
        rho0, gam0, bet0 = mul_matrix(cat, sx, sy, sz)
        rho1, gam1, bet1 = mul_matrix(cat, tx, ty, tz)
        scales = (rho1 / rho0, gam1 / gam0, bet1 / bet0)
    except ZeroDivisionError as exc:
        raise SingularMatrixError("source white point has a zero component") from exc
    scaled = tuple(scales[k // 3] * cat[k] for k in range(9))
    return mul_matrix_matrix(inverse, scaled)