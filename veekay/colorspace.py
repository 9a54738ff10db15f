"""Conversion of RGB pixel data between PNG colour models and absolute XYZ.

A PNG may describe its RGB model with the gAMA, cHRM, sRGB and iCCP chunks.
``ColorInfo`` holds those chunks. The functions here move floating-point RGBA
pixels (4 floats per pixel, 0..1 for black..white) to XYZ and back.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from veekay.colormatrix import (
    IDENTITY,
    AdaptationMethod,
    Matrix,
    SingularMatrixError,
    adaptation_matrix,
    chrm_matrix_xy,
    chrm_matrix_xyz,
    invert_matrix,
    mul_matrix,
    mul_matrix_matrix,
)
from veekay.icc import IccColorSpace, IccProfile, fast_powf

Triple = tuple[float, float, float]

GAMMA_UNIT = 100000
ABSOLUTE_INTENT = 3
RELATIVE_INTENT = 1

_SRGB_MATRIX: Matrix = (
    0.4124564, 0.3575761, 0.1804375,
    0.2126729, 0.7151522, 0.0721750,
    0.0193339, 0.1191920, 0.9503041,
)
_SRGB_WHITE: Triple = (0.9504559270516716, 1.0, 1.0890577507598784)


class ColorConversionError(ValueError):
    """Raised when a colour model cannot be turned into a usable transform."""


@dataclass(frozen=True)
class Chromaticities:
    """cHRM chunk values: xy coordinates scaled by 100000."""

    white_x: int
    white_y: int
    red_x: int
    red_y: int
    green_x: int
    green_y: int
    blue_x: int
    blue_y: int

    def scaled(self) -> tuple[float, ...]:
        """The eight coordinates as plain fractions, white first."""
        return tuple(
            v / GAMMA_UNIT
            for v in (
                self.white_x, self.white_y,
                self.red_x, self.red_y,
                self.green_x, self.green_y,
                self.blue_x, self.blue_y,
            )
        )


SRGB_CHROMATICITIES = Chromaticities(31270, 32900, 64000, 33000, 30000, 60000, 15000, 6000)


@dataclass(frozen=True)
class ColorInfo:
    """The colorimetry chunks of a PNG; with none set, the model is sRGB.

    ``gamma`` is the gAMA value (scaled by 100000), ``srgb`` tells whether an
    sRGB chunk is present and ``icc_profile`` holds the iCCP profile bytes.
    """

    gamma: int | None = None
    chromaticities: Chromaticities | None = None
    srgb: bool = False
    icc_profile: bytes | None = None

    def __post_init__(self) -> None:
        if self.gamma is not None and self.gamma <= 0:
            raise ValueError("gamma must be positive")


def is_srgb(info: ColorInfo | None) -> bool:
    """Whether ``info`` describes the default PNG sRGB model."""
    if info is None:
        return True
    if info.icc_profile is not None:
        return False
    if info.srgb:
        return True
    if info.gamma is not None:
        return False
    if info.chromaticities is not None and info.chromaticities != SRGB_CHROMATICITIES:
        return False
    return True


def models_equal(a: ColorInfo | None, b: ColorInfo | None) -> bool:
    """Whether two colour models are the same; ``None`` stands for sRGB."""
    a_srgb = is_srgb(a)
    b_srgb = is_srgb(b)
    if a_srgb != b_srgb:
        return False
    if a_srgb:
        return True
    assert a is not None and b is not None
    if (a.icc_profile is None) != (b.icc_profile is None):
        return False
    if a.icc_profile is not None:
        return bytes(a.icc_profile) == bytes(b.icc_profile)
    if a.srgb != b.srgb:
        return False
    if a.srgb:
        return True
    if a.gamma != b.gamma:
        return False
    return a.chromaticities == b.chromaticities


def _usable_profile(info: ColorInfo) -> IccProfile | None:
    if info.icc_profile is None:
        return None
    profile = IccProfile.parse(info.icc_profile)
    return profile if profile.is_usable() else None


def _icc_chromaticity(profile: IccProfile) -> tuple[Matrix, Triple]:
    if profile.color_space != IccColorSpace.RGB:
        return IDENTITY, (1.0, 1.0, 1.0)
    if profile.chad is not None:
        try:
            adapt = invert_matrix(profile.chad)
        except SingularMatrixError:
            adapt = tuple(profile.chad)  # type: ignore[assignment]
        white = mul_matrix(adapt, *profile.white)
    else:
        adapt = adaptation_matrix(AdaptationMethod.BRADFORD, profile.illuminant, profile.white)
        white = tuple(profile.white)  # type: ignore[assignment]
    red = mul_matrix(adapt, *profile.red)
    green = mul_matrix(adapt, *profile.green)
    blue = mul_matrix(adapt, *profile.blue)
    return chrm_matrix_xyz(white, red, green, blue), white


def chromaticity_matrix(
    info: ColorInfo | None, profile: IccProfile | None
) -> tuple[Matrix, Triple]:
    """Linear RGB to XYZ matrix and absolute white point of a colour model.

    A given ``profile`` takes precedence over the chunks in ``info``. A gray
    profile yields the identity matrix and the equal-energy white point.
    """
    info = info or ColorInfo()
    try:
        if profile is not None:
            return _icc_chromaticity(profile)
        if info.chromaticities is not None and not info.srgb:
            wx, wy, rx, ry, gx, gy, bx, by = info.chromaticities.scaled()
            matrix = chrm_matrix_xy(wx, wy, rx, ry, gx, gy, bx, by)
            return matrix, (wx / wy, 1.0, (1.0 - wx - wy) / wy)
    except SingularMatrixError as exc:
        raise ColorConversionError(str(exc)) from exc
    return _SRGB_MATRIX, _SRGB_WHITE


def _srgb_expand(v: float) -> float:
    return v / 12.92 if v < 0.04045 else fast_powf((v + 0.055) / 1.055, 2.4)


def _srgb_compress(v: float) -> float:
    return v * 12.92 if v < 0.0031308 else 1.055 * fast_powf(v, 1 / 2.4) - 0.055


def gamma_table(
    size: int, channel: int, info: ColorInfo | None, profile: IccProfile | None
) -> list[float]:
    """Linear values for the encoded levels ``0 .. size - 1`` of one channel."""
    if size < 2:
        raise ValueError("a gamma table needs at least two entries")
    info = info or ColorInfo()
    step = 1.0 / (size - 1)
    levels = (i * step for i in range(size))
    if profile is not None:
        curve = profile.trc[channel]
        return [curve.forward(v) for v in levels]
    if info.gamma is not None and not info.srgb:
        if info.gamma == GAMMA_UNIT:
            return list(levels)
        exponent = GAMMA_UNIT / info.gamma
        return [fast_powf(v, exponent) for v in levels]
    return [_srgb_expand(v) for v in levels]


def _rgba(pixels: Sequence[float], width: int, height: int) -> Iterator[tuple[float, ...]]:
    if width < 0 or height < 0:
        raise ValueError("image size must not be negative")
    if len(pixels) != 4 * width * height:
        raise ValueError(f"expected {4 * width * height} values, got {len(pixels)}")
    values = iter(pixels)
    return zip(values, values, values, values)


def convert_to_xyz_float(
    pixels: Sequence[float], width: int, height: int, info: ColorInfo | None
) -> tuple[list[float], Triple]:
    """Convert RGBA floats in the model of ``info`` to XYZA floats.

    Returns the XYZA values and the white point of the source model, which
    ``convert_from_xyz_float`` needs for relative rendering. Nothing is clipped.
    """
    info = info or ColorInfo()
    profile = _usable_profile(info)

    if profile is not None:
        curves = profile.trc

        def expand(v: float, c: int) -> float:
            return curves[c].forward(v)

    elif info.gamma is not None and not info.srgb:
        exponent = GAMMA_UNIT / info.gamma
        unit = info.gamma == GAMMA_UNIT

        def expand(v: float, c: int) -> float:
            return v if unit or v <= 0 else fast_powf(v, exponent)

    else:

        def expand(v: float, c: int) -> float:
            return _srgb_expand(v)

    matrix, white = chromaticity_matrix(info, profile)
    transform = profile is None or profile.color_space == IccColorSpace.RGB

    out: list[float] = []
    for r, g, b, a in _rgba(pixels, width, height):
        linear = (expand(r, 0), expand(g, 1), expand(b, 2))
        if transform:
            linear = mul_matrix(matrix, *linear)
        out.extend((*linear, a))
    return out, white


def convert_from_xyz_float(
    pixels: Sequence[float],
    width: int,
    height: int,
    info: ColorInfo | None,
    whitepoint: Sequence[float],
    rendering_intent: int = RELATIVE_INTENT,
) -> list[float]:
    """Convert XYZA floats to RGBA floats in the model of ``info``.

    ``whitepoint`` is the absolute white of the model the data came from. Any
    rendering intent but 3 (absolute) adapts it to the target white. Nothing
    is clipped.
    """
    info = info or ColorInfo()
    profile = _usable_profile(info)

    matrix, white = chromaticity_matrix(info, profile)
    try:
        matrix = invert_matrix(matrix)
        if rendering_intent != ABSOLUTE_INTENT:
            adapt = adaptation_matrix(AdaptationMethod.BRADFORD, whitepoint, white)
            matrix = mul_matrix_matrix(matrix, adapt)
    except SingularMatrixError as exc:
        raise ColorConversionError(str(exc)) from exc
    transform = (
        profile is None
        or profile.color_space == IccColorSpace.RGB
        or rendering_intent != ABSOLUTE_INTENT
    )

    if profile is not None:
        curves = profile.trc

        def compress(v: float, c: int) -> float:
            return curves[c].backward(v)

    elif info.gamma is not None and not info.srgb:
        exponent = info.gamma / GAMMA_UNIT
        unit = info.gamma == GAMMA_UNIT

        def compress(v: float, c: int) -> float:
            return fast_powf(v, exponent) if not unit and v > 0 else v

    else:

        def compress(v: float, c: int) -> float:
            return _srgb_compress(v)

    out: list[float] = []
    for x, y, z, a in _rgba(pixels, width, height):
        linear = mul_matrix(matrix, x, y, z) if transform else (x, y, z)
        out.extend((compress(linear[0], 0), compress(linear[1], 1), compress(linear[2], 2), a))
    return out


def quantize_rgba(pixels: Sequence[float], bit16: bool) -> bytes:
    """Clamp floats to 0..1 and round them to 8-bit or big-endian 16-bit samples."""
    if bit16:
        return b"".join(
            int(0.5 + 65535.0 * min(max(0.0, v), 1.0)).to_bytes(2, "big") for v in pixels
        )
    return bytes(int(0.5 + 255.0 * min(max(0.0, v), 1.0)) for v in pixels)