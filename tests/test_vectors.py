import math

import pytest

from veekay.vectors import Mat4, Vec2, Vec3, Vec4


def assert_mat_close(a, b, tol=1e-9):
    for col_a, col_b in zip(a.columns, b.columns):
        assert list(col_a) == pytest.approx(list(col_b), abs=tol)


def sample_matrix():
    return Mat4([Vec4(*(float(c * 4 + r + 1) for r in range(4))) for c in range(4)])


# --- Vec2 ---------------------------------------------------------------


def test_vec2_add_sub_round_trip():
    a, b = Vec2(1.5, -2.0), Vec2(3.0, 4.25)
    assert (a + b) - b == a


def test_vec2_scalar_ops_consistent():
    a = Vec2(1.5, -2.0)
    assert a * 2 == a + a
    assert (a + 3.0) - 3.0 == a
    assert (a / 2.0) * 2.0 == a


def test_vec2_componentwise_mul_div():
    a, b = Vec2(2.0, 8.0), Vec2(4.0, 0.5)
    assert (a * b) / b == a
    assert a * Vec2(1.0, 1.0) == a


def test_vec2_negation():
    a = Vec2(3.0, -7.0)
    assert -a + a == Vec2()
    assert -(-a) == a


def test_vec2_indexing():
    a = Vec2(5.0, 6.0)
    assert a[0] == a.x
    assert a[1] == a.y
    a[1] = 9.0
    assert a.y == 9.0
    with pytest.raises(IndexError):
        a[2]


def test_vec2_rejects_other_types():
    with pytest.raises(TypeError):
        Vec2(1.0, 2.0) + Vec3(1.0, 2.0, 3.0)


# --- Vec3 ---------------------------------------------------------------


def test_vec3_arithmetic_round_trip():
    a, b = Vec3(1.0, 2.0, 3.0), Vec3(-4.0, 0.5, 2.0)
    assert (a + b) - b == a
    assert a * 3 == a + a + a
    assert -a + a == Vec3()


def test_vec3_dot_and_lengths():
    v = Vec3(3.0, 4.0, 12.0)
    assert Vec3.squared_length(v) == Vec3.dot(v, v)
    assert Vec3.length(v) == pytest.approx(math.sqrt(Vec3.dot(v, v)))


def test_vec3_normalized_is_unit():
    v = Vec3(2.0, -3.0, 6.0)
    n = Vec3.normalized(v)
    assert Vec3.length(n) == pytest.approx(1.0)
    assert list(n * Vec3.length(v)) == pytest.approx(list(v))


def test_vec3_cross_of_basis():
    x, y, z = Vec3(1.0, 0.0, 0.0), Vec3(0.0, 1.0, 0.0), Vec3(0.0, 0.0, 1.0)
    assert Vec3.cross(x, y) == z
    assert Vec3.cross(y, z) == x
    assert Vec3.cross(z, x) == y


def test_vec3_cross_is_perpendicular_and_anticommutative():
    a, b = Vec3(1.0, 2.0, 3.0), Vec3(-2.0, 0.5, 4.0)
    c = Vec3.cross(a, b)
    assert Vec3.dot(c, a) == pytest.approx(0.0)
    assert Vec3.dot(c, b) == pytest.approx(0.0)
    assert Vec3.cross(b, a) == -c


def test_vec3_indexing():
    v = Vec3(1.0, 2.0, 3.0)
    assert [v[0], v[1], v[2]] == [v.x, v.y, v.z]
    v[2] = 10.0
    assert v.z == 10.0
    with pytest.raises(IndexError):
        v[3] = 1.0


def test_vec3_normalize_zero_raises():
    with pytest.raises(ZeroDivisionError):
        Vec3.normalized(Vec3())


# --- Vec4 ---------------------------------------------------------------


def test_vec4_arithmetic_round_trip():
    a, b = Vec4(1.0, 2.0, 3.0, 4.0), Vec4(2.0, 4.0, 8.0, 0.5)
    assert (a + b) - b == a
    assert (a * b) / b == a


def test_vec4_rejects_scalars():
    a = Vec4(1.0, 2.0, 3.0, 4.0)
    with pytest.raises(TypeError) as add_error:
        a + 1.0
    assert "Vec4" in str(add_error.value)
    with pytest.raises(TypeError) as mul_error:
        a * 2
    assert "Vec4" in str(mul_error.value)
    assert a + Vec4(1.0, 1.0, 1.0, 1.0) == Vec4(2.0, 3.0, 4.0, 5.0)


def test_vec4_indexing():
    a = Vec4(1.0, 2.0, 3.0, 4.0)
    assert list(a) == [a[0], a[1], a[2], a[3]]
    a[3] = 7.0
    assert a.w == 7.0
    with pytest.raises(IndexError):
        a[4]


# --- Mat4 ---------------------------------------------------------------


def test_identity_diagonal():
    m = Mat4.identity()
    for c in range(4):
        for r in range(4):
            assert m[c][r] == (1.0 if c == r else 0.0)


def test_default_matrix_is_zero():
    m = Mat4()
    assert all(value == 0.0 for column in m.columns for value in column)


def test_identity_is_neutral_for_multiplication():
    m = sample_matrix()
    assert m * Mat4.identity() == m
    assert Mat4.identity() * m == m


def test_transpose_twice_is_original():
    m = sample_matrix()
    assert Mat4.transpose(Mat4.transpose(m)) == m
    t = Mat4.transpose(m)
    assert t[1][3] == m[3][1]


def test_transpose_of_product():
    a = sample_matrix()
    b = Mat4.rotation(Vec3(1.0, 1.0, 0.0), 0.7)
    assert_mat_close(Mat4.transpose(a * b), Mat4.transpose(b) * Mat4.transpose(a))


def test_translation_layout():
    v = Vec3(2.0, -3.0, 5.0)
    m = Mat4.translation(v)
    assert (m[3][0], m[3][1], m[3][2], m[3][3]) == (v.x, v.y, v.z, 1.0)
    assert m[0][0] == m[1][1] == m[2][2] == 1.0


def test_translations_compose():
    a, b = Vec3(1.0, 2.0, 3.0), Vec3(-4.0, 0.5, 2.0)
    assert Mat4.translation(a) * Mat4.translation(b) == Mat4.translation(a + b)


def test_scaling_layout_and_inverse():
    v = Vec3(2.0, 4.0, 0.5)
    m = Mat4.scaling(v)
    assert (m[0][0], m[1][1], m[2][2], m[3][3]) == (v.x, v.y, v.z, 1.0)
    inverse = Mat4.scaling(Vec3(1.0 / v.x, 1.0 / v.y, 1.0 / v.z))
    assert m * inverse == Mat4.identity()


def test_rotation_zero_angle_is_identity():
    assert_mat_close(Mat4.rotation(Vec3(0.3, -1.0, 2.0), 0.0), Mat4.identity())


def test_rotation_is_orthogonal():
    r = Mat4.rotation(Vec3(1.0, 2.0, 3.0), 1.1)
    assert_mat_close(Mat4.transpose(r) * r, Mat4.identity())
    assert_mat_close(r * Mat4.transpose(r), Mat4.identity())


def test_rotation_axis_length_does_not_matter():
    axis = Vec3(1.0, 2.0, 3.0)
    assert_mat_close(Mat4.rotation(axis, 0.4), Mat4.rotation(axis * 5.0, 0.4))


def test_rotations_about_same_axis_compose():
    axis = Vec3(0.0, 1.0, 1.0)
    combined = Mat4.rotation(axis, 0.3) * Mat4.rotation(axis, 0.5)
    assert_mat_close(combined, Mat4.rotation(axis, 0.8))


def test_projection_depth_range():
    near, far = 0.1, 100.0
    m = Mat4.projection(60.0, 16.0 / 9.0, near, far)
    assert m[2][3] == 1.0
    assert m[3][3] == 0.0
    assert m[2][2] * near + m[3][2] == pytest.approx(0.0)
    assert (m[2][2] * far + m[3][2]) / far == pytest.approx(1.0)
    assert m[0][0] * (16.0 / 9.0) == pytest.approx(m[1][1])


def test_projection_ninety_degrees():
    m = Mat4.projection(90.0, 1.0, 1.0, 10.0)
    assert m[1][1] == pytest.approx(1.0)
    assert m[0][0] == pytest.approx(1.0)


def test_mat4_rejects_non_matrix_operand():
    with pytest.raises(TypeError):
        Mat4.identity() * Vec4(1.0, 2.0, 3.0, 4.0)


def test_mat4_requires_four_columns():
    with pytest.raises(ValueError):
        Mat4([Vec4(), Vec4()])


def test_mat4_column_indexing_is_live():
    m = Mat4()
    m[2][1] = 3.5
    assert m.columns[2].y == 3.5
    with pytest.raises(IndexError):
        m[4]