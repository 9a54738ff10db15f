# veekay

A small pure-Python toolkit for graphics work. It uses only the standard library.

## Modules

### `veekay.vectors`

This module provides the `Vec2`, `Vec3`, `Vec4` and `Mat4` types.

- `Vec2` and `Vec3` support `+`, `-`, `*` and `/`. The other operand can be a vector of the same type, which gives an element-wise result, or a number.
- `Vec4` arithmetic works only between two `Vec4` values.
- All vectors support unary `-`, except `Vec4`.
- All vectors support indexing, assignment by index, iteration and `len`.
- `Vec3` has the static methods `dot`, `cross`, `squared_length`, `length` and `normalized`.
- `Mat4` is a 4×4 matrix stored as four `Vec4` columns. `m[c][r]` is the element in column `c` and row `r`.
    - A new `Mat4()` is all zeros.
    - The static constructors are `identity`, `translation`, `scaling`, `rotation(axis, angle)` and `projection(fov, aspect_ratio, near, far)`. For `rotation` the angle is in radians. For `projection` the field of view is in degrees.
    - `Mat4.transpose` returns the transposed matrix.
    - `*` multiplies two matrices.

### `veekay.chunks`

This module reads and edits the chunk structure of a PNG file. All functions work on the raw file bytes.

- `iter_chunks(png)` yields a `Chunk` for each chunk after the 8-byte signature. A `Chunk` has these members:
    - `name`, `offset`, `length` and `raw`
    - `end` and `data`
    - `crc`, which is `None` when the chunk is truncated
    - `crc_ok`
- `chunk_info(png)` returns a `(name, length)` pair for each chunk.
- `chunks_by_location(png)` returns three lists of non-critical chunks, grouped by position in the file:
    1. the chunks between IHDR and PLTE
    2. the chunks between PLTE and IDAT
    3. the chunks between IDAT and IEND
- `insert_chunks(png, chunks)` returns new file bytes. `chunks` gives exactly three lists of encoded chunks, one for each of the three locations above.
- `make_chunk(name, data)` encodes a complete chunk: length, name, data and CRC.
- `palette_value(data, index, bits)` reads a packed 1, 2, 4 or 8-bit sample.

### `veekay.icc`

This module parses the subset of an ICC profile that PNG colour handling needs.

- `IccProfile.parse(data)` reads these parts of a profile:
    - the header
    - the white point
    - the RGB colorants
    - the `chad` matrix
    - the `curv` and `para` tone curves
- `IccProfile.is_usable()` tells whether the profile has enough information to convert colours.
- `IccCurve.forward` maps encoded values to linear values, and `IccCurve.backward` maps them back.
- `fast_powf` is the approximate power function that these curves use.

### `veekay.colormatrix`

This module has helpers for 3×3 matrices. A matrix is a row-major 9-tuple.

- General matrix operations: `mul_matrix`, `mul_matrix_matrix` and `invert_matrix`.
- RGB-to-XYZ matrices from white point and primaries:
    - `chrm_matrix_xyz` takes the white point and primaries in XYZ.
    - `chrm_matrix_xy` takes them as xy coordinates.
- `adaptation_matrix(method, source_white, target_white)` adapts between white points. `method` is one of the `AdaptationMethod` values: XYZ scaling, Bradford or von Kries.

### `veekay.colorspace`

This module converts RGBA float pixels between an RGB colour model and absolute XYZ. Pixels are flat sequences of 4 floats each.

- `ColorInfo` describes the colour model with these fields:
    - `gamma`, the gAMA value scaled by 100000
    - `chromaticities`, a `Chromaticities` value
    - `srgb`
    - `icc_profile`
- A `ColorInfo` with none of these fields set means sRGB.
- `convert_to_xyz_float` returns the XYZA values together with the source white point.
- `convert_from_xyz_float` converts back. For any rendering intent other than 3 (absolute), it adapts the white point to the target white.
- Other functions:
    - `is_srgb` and `models_equal`
    - `chromaticity_matrix` and `gamma_table`
    - `quantize_rgba`, which clamps to 0..1 and produces 8-bit or big-endian 16-bit samples

## Examples

```python
import math
from veekay.vectors import Vec3, Mat4

axis = Vec3(0.0, 1.0, 0.0)
model = Mat4.translation(Vec3(1.0, 2.0, 3.0)) * Mat4.rotation(axis, math.pi / 2)
proj = Mat4.projection(60.0, 16 / 9, 0.1, 100.0)
print(Vec3.cross(Vec3(1, 0, 0), Vec3(0, 1, 0)))
```

```python
from veekay.chunks import chunk_info, make_chunk, insert_chunks

with open("image.png", "rb") as f:
    png = f.read()

for name, size in chunk_info(png):
    print(name, size)

text = make_chunk("tEXt", b"Comment\x00hello")
png = insert_chunks(png, ([], [], [text]))
```

```python
from veekay.colorspace import ColorInfo, convert_to_xyz_float, convert_from_xyz_float

info = ColorInfo()          # no colorimetry chunks: sRGB
pixels = [1.0, 0.5, 0.25, 1.0]
xyz, white = convert_to_xyz_float(pixels, 1, 1, info)
back = convert_from_xyz_float(xyz, 1, 1, info, white, 1)
```

## Errors

Errors are raised as exceptions. All of them are subclasses of `ValueError`.

- `ChunkError` is raised for broken chunk structure.
- `IccParseError` is raised for truncated or malformed ICC profiles.
- `SingularMatrixError` is raised for matrices that cannot be inverted or built.
- `ColorConversionError` is raised for colour models that give no usable transform.

## What this package does not do

The package has no window, no rendering, no GPU buffers or textures, and no keyboard or mouse input.

It does not decode or encode PNG image data. It does not inflate IDAT data, it does not read scanline filter types, and it does not convert pixels between byte formats. Colour conversion works only on float RGBA values.

There are no command-line tools.

## Installation

```
pip install .
```

To install and run the tests:

```
pip install ".[test]"
pytest
```