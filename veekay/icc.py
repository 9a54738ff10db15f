"""Parsing of the subset of ICC profiles that PNG colour handling needs.

Only the parts required to map an RGB or gray profile to XYZ are read:
the header, the white point, the RGB colorant tags, the chromatic
adaptation matrix and the tone reproduction curves.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import IntEnum

_FLT_MAX = 3.4028234663852886e38
_MAX_LUT_ENTRIES = 16777216


class IccParseError(ValueError):
    """Raised when an ICC profile is truncated or malformed."""


class CurveType(IntEnum):
    """Kind of tone reproduction curve; parametric kinds match ICC types 0-4."""

    LINEAR = 0
    LUT = 1
    GAMMA = 2
    PARAMETRIC_1 = 3
    PARAMETRIC_2 = 4
    PARAMETRIC_3 = 5
    PARAMETRIC_4 = 6


class IccColorSpace(IntEnum):
    """Input colour space of a profile as far as PNG is concerned."""

    UNSUPPORTED = 0
    GRAY = 1
    RGB = 2


def _fdiv(a: float, b: float) -> float:
    """Division with IEEE results instead of an exception on zero."""
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def fast_powf(x: float, y: float) -> float:
    """Approximate ``x ** y`` to about six digits, with C ``pow`` edge cases."""
    i = 0
    if x == 1 or y == 0:
        return 1.0
    if y == 1:
        return x
    if not (0 < x <= _FLT_MAX and -_FLT_MAX <= y <= _FLT_MAX):
        if x != x or y != y:
            return x + y
        if x > 0:
            if x > _FLT_MAX:
                return (1.0 if y == 0 else 0.0) if y <= 0 else x
        else:
            if not (y < -1073741824.0 or y > 1073741824.0):
                i = int(y)
                if i != y:
                    if x < -_FLT_MAX:
                        return 0.0 if y < 0 else math.inf
                    if x == 0:
                        return math.inf if y < 0 else 0.0
                    return math.nan
                if i & 1:
                    if x == 0:
                        return math.copysign(math.inf, x) if y < 0 else x
                    return -fast_powf(-x, y)
            if x == 0:
                return math.inf if y <= 0 else 0.0
            if x < -_FLT_MAX:
                if y <= 0:
                    return 1.0 if y == 0 else 0.0
                return -math.inf if i & 1 else math.inf
            x = -x
            if x == 1:
                return 1.0
        if y < -_FLT_MAX or y > _FLT_MAX:
            return abs(y) if (x < 1) != (y > 0) else 0.0

    value = x
    exponent = 0
    while value < 1.0 / 65536:
        exponent -= 16
        value *= 65536.0
    while value > 65536:
        exponent += 16
        value *= 1.0 / 65536
    while value < 1:
        exponent -= 1
        value *= 2.0
    while value > 2:
        exponent += 1
        value *= 0.5
    # log2 on [1, 2] by a rational approximation
    t0 = -0.393118410458557 + value * (
        -0.0883639468229365 + value * (0.466142650227994 + value * 0.0153397331014276)
    )
    t1 = 0.0907447971403586 + value * (0.388892024755479 + value * 0.137228280305862)
    log = (t0 / t1 + exponent) * y

    if log <= -128.0 or log >= 128.0:
        return math.inf if (x > 1) == (y > 0) else 0.0
    i = int(log)
    frac = log - i
    # exp2 on [-1, 1]
    t0 = 1.0 + frac * (
        0.41777833582744256 + frac * (0.0728482595347711 + frac * 0.005635023478609625)
    )
    t1 = 1.0 + frac * (-0.27537016151408167 + frac * 0.023501446055084033)
    while i <= -31:
        t0 *= 1.0 / 2147483648.0
        i += 31
    while i >= 31:
        t0 *= 2147483648.0
        i -= 31
    if i < 0:
        return t0 / (t1 * (1 << -i))
    return (t0 * (1 << i)) / t1


@dataclass
class IccCurve:
    """A tone reproduction curve, given by a table or by a power formula."""

    type: CurveType = CurveType.LINEAR
    lut: tuple[float, ...] = ()
    gamma: float = 0.0
    a: float = 0.0
    b: float = 0.0
    c: float = 0.0
    d: float = 0.0
    e: float = 0.0
    f: float = 0.0

    def forward(self, x: float) -> float:
        """Map an encoded value in 0..1 to linear light; does not clip."""
        kind = self.type
        if kind == CurveType.LINEAR:
            return x
        if kind == CurveType.LUT:
            if not self.lut:
                return 0.0
            if x < 0:
                return x
            last = len(self.lut) - 1
            index = int(x * last)
            if index >= len(self.lut):
                return x
            v0 = self.lut[index]
            v1 = self.lut[index + 1] if index + 1 < len(self.lut) else 1.0
            fraction = x * last - index
            return v0 * (1 - fraction) + v1 * fraction
        if kind == CurveType.GAMMA:
            return fast_powf(x, self.gamma) if x > 0 else x
        if kind == CurveType.PARAMETRIC_1:
            if x < 0:
                return x
            if x >= _fdiv(-self.b, self.a):
                return fast_powf(self.a * x + self.b, self.gamma) + self.c
            return 0.0
        if kind == CurveType.PARAMETRIC_2:
            if x < 0:
                return x
            if x >= _fdiv(-self.b, self.a):
                return fast_powf(self.a * x + self.b, self.gamma) + self.c
            return self.c
        if kind == CurveType.PARAMETRIC_3:
            if x >= self.d:
                return fast_powf(self.a * x + self.b, self.gamma)
            return self.c * x
        if kind == CurveType.PARAMETRIC_4:
            if x >= self.d:
                return fast_powf(self.a * x + self.b, self.gamma) + self.c
            return self.c * x + self.f
        return 0.0

    def backward(self, x: float) -> float:
        """Map a linear value in 0..1 back to its encoded form; does not clip."""
        kind = self.type
        if kind == CurveType.LINEAR:
            return x
        if kind == CurveType.LUT:
            if x <= 0 or x >= 1:
                return x
            if not self.lut:
                return 0.0
            lut = self.lut

            def entry(k: int) -> float:
                return lut[k] if k < len(lut) else 1.0

            low, high = 0, len(lut)
            while True:
                if low == high:
                    return entry(low)
                if low + 1 == high:
                    v0, v1 = entry(low), entry(high)
                    if v0 == v1:
                        return v0
                    fraction = (x - v0) / (v1 - v0)
                    return v0 * (1 - fraction) + v1 * fraction
                middle = (low + high) // 2
                if entry(middle) > x:
                    high = middle
                else:
                    low = middle
        if kind == CurveType.GAMMA:
            return fast_powf(x, _fdiv(1.0, self.gamma)) if x > 0 else x
        if kind == CurveType.PARAMETRIC_1:
            if x < 0:
                return x
            if x > 0:
                return _fdiv(fast_powf(x, _fdiv(1.0, self.gamma)) - self.b, self.a)
            return _fdiv(-self.b, self.a)
        if kind == CurveType.PARAMETRIC_2:
            if x < 0:
                return x
            if x > self.c:
                return _fdiv(fast_powf(x - self.c, _fdiv(1.0, self.gamma)) - self.b, self.a)
            return _fdiv(-self.b, self.a)
        if kind == CurveType.PARAMETRIC_3:
            if x > self.c * self.d:
                return _fdiv(fast_powf(x, _fdiv(1.0, self.gamma)) - self.b, self.a)
            return _fdiv(x, self.c)
        if kind == CurveType.PARAMETRIC_4:
            if x > self.c * self.d + self.f:
                return _fdiv(fast_powf(x - self.c, _fdiv(1.0, self.gamma)) - self.b, self.a)
            return _fdiv(x - self.f, self.c)
        return 0.0


class _Cursor:
    """Big-endian reader that yields 0 for reads past the end, as ICC parsing expects."""

    def __init__(self, data: bytes, pos: int) -> None:
        self.data = data
        self.pos = pos

    def _take(self, width: int, signed: bool = False) -> int:
        self.pos += width
        if self.pos > len(self.data):
            return 0
        return int.from_bytes(self.data[self.pos - width : self.pos], "big", signed=signed)

    def u16(self) -> int:
        return self._take(2)

    def u32(self) -> int:
        return self._take(4)

    def fixed(self) -> float:
        return self._take(4, signed=True) / 65536.0

    def triple(self) -> tuple[float, float, float]:
        return (self.fixed(), self.fixed(), self.fixed())

    def is_word(self, word: bytes) -> bool:
        return self.pos + 4 <= len(self.data) and self.data[self.pos : self.pos + 4] == word


_ZERO3 = (0.0, 0.0, 0.0)
_COLOR_SPACES = {0x47524159: IccColorSpace.GRAY, 0x52474220: IccColorSpace.RGB}
_TRC_TAGS = {b"rTRC": 0, b"gTRC": 1, b"bTRC": 2, b"kTRC": 0}


def _default_curves() -> tuple[IccCurve, IccCurve, IccCurve]:
    return (IccCurve(), IccCurve(), IccCurve())


@dataclass
class IccProfile:
    """Values read from an ICC profile that describe its RGB or gray model."""

    color_space: IccColorSpace = IccColorSpace.UNSUPPORTED
    version_major: int = 0
    version_minor: int = 0
    version_bugfix: int = 0
    illuminant: tuple[float, float, float] = _ZERO3
    chad: tuple[float, ...] | None = None
    has_whitepoint: bool = False
    white: tuple[float, float, float] = _ZERO3
    has_chromaticity: bool = False
    red: tuple[float, float, float] = _ZERO3
    green: tuple[float, float, float] = _ZERO3
    blue: tuple[float, float, float] = _ZERO3
    has_trc: bool = False
    trc: tuple[IccCurve, IccCurve, IccCurve] = field(default_factory=_default_curves)

    @property
    def has_chad(self) -> bool:
        return self.chad is not None

    @classmethod
    def parse(cls, data: bytes) -> IccProfile:
        """Read a profile from its raw bytes, raising IccParseError if malformed."""
        data = bytes(data)
        size = len(data)
        if size < 132:
            raise IccParseError("too small to be an ICC profile")
        profile = cls()

        cursor = _Cursor(data, 8)
        version = cursor.u32()
        profile.version_major = (version >> 24) & 255
        profile.version_minor = (version >> 20) & 15
        profile.version_bugfix = (version >> 16) & 15

        cursor.pos = 16
        profile.color_space = _COLOR_SPACES.get(cursor.u32(), IccColorSpace.UNSUPPORTED)

        cursor.pos = 68
        profile.illuminant = cursor.triple()

        cursor.pos = 128
        tag_count = cursor.u32()
        if cursor.pos >= size:
            raise IccParseError("profile has no tag table")

        curves = list(profile.trc)
        for _ in range(tag_count):
            name_pos = cursor.pos
            cursor.pos += 4
            offset = cursor.u32()
            tag_size = cursor.u32()
            if cursor.pos >= size or offset >= size:
                raise IccParseError("tag table runs past the end of the profile")
            if offset + tag_size > size:
                raise IccParseError("tag data runs past the end of the profile")
            if tag_size < 8:
                raise IccParseError("tag is too small")

            name = data[name_pos : name_pos + 4]
            tag = _Cursor(data, offset)
            if name == b"wtpt":
                tag.pos += 8
                profile.white = tag.triple()
                profile.has_whitepoint = True
            elif name in (b"rXYZ", b"gXYZ", b"bXYZ"):
                tag.pos += 8
                value = tag.triple()
                if name == b"rXYZ":
                    profile.red = value
                elif name == b"gXYZ":
                    profile.green = value
                else:
                    profile.blue = value
                profile.has_chromaticity = True
            elif name == b"chad":
                tag.pos += 8
                profile.chad = tuple(tag.fixed() for _ in range(9))
            elif name in _TRC_TAGS:
                channel = _TRC_TAGS[name]
                if tag.is_word(b"curv"):
                    profile.has_trc = True
                    tag.pos += 8
                    count = tag.u32()
                    if count == 0:
                        curves[channel] = replace(curves[channel], type=CurveType.LINEAR)
                    elif count == 1:
                        curves[channel] = replace(
                            curves[channel], type=CurveType.GAMMA, gamma=tag.u16() / 256.0
                        )
                    else:
                        if tag.pos + count * 2 > size or count > _MAX_LUT_ENTRIES:
                            raise IccParseError("curve table runs past the end of the profile")
                        lut = tuple(tag.u16() * (1.0 / 65535.0) for _ in range(count))
                        curves[channel] = replace(curves[channel], type=CurveType.LUT, lut=lut)
                if tag.is_word(b"para"):
                    profile.has_trc = True
                    tag.pos += 8
                    kind = tag.u16()
                    tag.pos += 2
                    if kind > 4:
                        raise IccParseError(f"unknown parametric curve type {kind}")
                    params: dict[str, float] = {
                        "type": CurveType(kind + 2),
                        "gamma": tag.fixed(),
                    }
                    if kind >= 1:
                        params["a"] = tag.fixed()
                        params["b"] = tag.fixed()
                    if kind >= 2:
                        params["c"] = tag.fixed()
                    if kind >= 3:
                        params["d"] = tag.fixed()
                    if kind == 4:
                        params["e"] = tag.fixed()
                        params["f"] = tag.fixed()
                    curves[channel] = replace(curves[channel], **params)
            if tag.pos > size:
                raise IccParseError("tag content runs past the end of the profile")

        profile.trc = (curves[0], curves[1], curves[2])
        return profile

    def is_usable(self) -> bool:
        """Whether this profile has everything needed to convert colours with it."""
        if self.color_space == IccColorSpace.UNSUPPORTED:
            return False
        if self.color_space == IccColorSpace.RGB and not self.has_chromaticity:
            return False
        return self.has_whitepoint and self.has_trc