"""Small vector, quaternion and 4x4 matrix toolkit used by the model code.

Matrices follow the OpenGL convention: right handed, column major, with the
sixteen elements named ``m0`` to ``m15``.  In memory (and on disk) the
elements are laid out row by row: ``m0, m4, m8, m12, m1, m5, ...``.
"""

from __future__ import annotations

import math
from dataclasses import astuple, dataclass
from typing import Iterable

EPSILON = 0.000001

# Element order of a matrix when it is stored: m0, m4, m8, m12, m1, ...
_STORAGE_ORDER = tuple(col * 4 + row for row in range(4) for col in range(4))


@dataclass(frozen=True)
class Vector3:
    """A three component vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self):
        return iter(astuple(self))


@dataclass(frozen=True)
class Quaternion:
    """A rotation quaternion with the scalar part in ``w``."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def __iter__(self):
        return iter(astuple(self))


@dataclass(frozen=True)
class Matrix:
    """A 4x4 column-major matrix."""

    m0: float = 0.0
    m1: float = 0.0
    m2: float = 0.0
    m3: float = 0.0
    m4: float = 0.0
    m5: float = 0.0
    m6: float = 0.0
    m7: float = 0.0
    m8: float = 0.0
    m9: float = 0.0
    m10: float = 0.0
    m11: float = 0.0
    m12: float = 0.0
    m13: float = 0.0
    m14: float = 0.0
    m15: float = 0.0

    @property
    def elements(self) -> tuple[float, ...]:
        """The sixteen elements in ``m0`` .. ``m15`` order."""
        return astuple(self)

    def rows(self) -> tuple[float, ...]:
        """The sixteen elements in storage order (``m0, m4, m8, m12, m1, ...``)."""
        values = self.elements
        return tuple(values[k] for k in _STORAGE_ORDER)

    @classmethod
    def from_rows(cls, values: Iterable[float]) -> "Matrix":
        """Build a matrix from sixteen values in storage order."""
        values = tuple(float(v) for v in values)
        if len(values) != 16:
            raise ValueError(f"a matrix needs 16 values, got {len(values)}")
        elements = [0.0] * 16
        for value, k in zip(values, _STORAGE_ORDER):
            elements[k] = value
        return cls(*elements)


def float_equals(x: float, y: float) -> bool:
    """Whether two floats are equal within a relative tolerance."""
    return abs(x - y) <= EPSILON * max(1.0, abs(x), abs(y))


def vector3_zero() -> Vector3:
    return Vector3(0.0, 0.0, 0.0)


def vector3_add(v1: Vector3, v2: Vector3) -> Vector3:
    return Vector3(v1.x + v2.x, v1.y + v2.y, v1.z + v2.z)


def vector3_scale(v: Vector3, scalar: float) -> Vector3:
    return Vector3(v.x * scalar, v.y * scalar, v.z * scalar)


def vector3_length(v: Vector3) -> float:
    return math.sqrt(v.x * v.x + v.y * v.y + v.z * v.z)


def vector3_negate(v: Vector3) -> Vector3:
    return Vector3(-v.x, -v.y, -v.z)


def vector3_transform(v: Vector3, mat: Matrix) -> Vector3:
    """Transform a point (w = 1) by a matrix."""
    return Vector3(
        v.x * mat.m0 + v.y * mat.m4 + v.z * mat.m8 + mat.m12,
        v.x * mat.m1 + v.y * mat.m5 + v.z * mat.m9 + mat.m13,
        v.x * mat.m2 + v.y * mat.m6 + v.z * mat.m10 + mat.m14,
    )


def vector3_lerp(v1: Vector3, v2: Vector3, amount: float) -> Vector3:
    return Vector3(
        v1.x + amount * (v2.x - v1.x),
        v1.y + amount * (v2.y - v1.y),
        v1.z + amount * (v2.z - v1.z),
    )


def matrix_identity() -> Matrix:
    return Matrix(m0=1.0, m5=1.0, m10=1.0, m15=1.0)


def matrix_translate(x: float, y: float, z: float) -> Matrix:
    return Matrix(m0=1.0, m5=1.0, m10=1.0, m15=1.0, m12=x, m13=y, m14=z)


def matrix_scale(x: float, y: float, z: float) -> Matrix:
    return Matrix(m0=x, m5=y, m10=z, m15=1.0)


def matrix_multiply(left: Matrix, right: Matrix) -> Matrix:
    """Multiply two matrices; the order matters."""
    a = left.elements
    b = right.elements
    return Matrix(
        *(
            sum(a[i * 4 + k] * b[k * 4 + j] for k in range(4))
            for i in range(4)
            for j in range(4)
        )
    )


def matrix_decompose(mat: Matrix) -> tuple[Vector3, Quaternion, Vector3]:
    """Split a transform into ``(translation, rotation, scale)``."""
    translation = Vector3(mat.m12, mat.m13, mat.m14)

    a, b, c = mat.m0, mat.m4, mat.m8
    d, e, f = mat.m1, mat.m5, mat.m9
    g, h, i = mat.m2, mat.m6, mat.m10
    big_a = e * i - f * h
    big_b = f * g - d * i
    big_c = d * h - e * g
    det = a * big_a + b * big_b + c * big_c

    scale = Vector3(
        vector3_length(Vector3(a, b, c)),
        vector3_length(Vector3(d, e, f)),
        vector3_length(Vector3(g, h, i)),
    )
    if det < 0:
        scale = vector3_negate(scale)

    if float_equals(det, 0.0):
        return translation, quaternion_identity(), scale

    values = list(mat.elements)
    for axis, s in enumerate((scale.x, scale.y, scale.z)):
        for k in (axis, axis + 4, axis + 8):
            values[k] /= s
    rotation = quaternion_from_matrix(Matrix(*values))
    return translation, rotation, scale


def quaternion_identity() -> Quaternion:
    return Quaternion(0.0, 0.0, 0.0, 1.0)


def quaternion_dot(a: Quaternion, b: Quaternion) -> float:
    return a.x * b.x + a.y * b.y + a.z * b.z + a.w * b.w


def quaternion_slerp(q1: Quaternion, q2: Quaternion, amount: float) -> Quaternion:
    """Spherical linear interpolation, falling back to normalised lerp when close."""
    cos_half_theta = quaternion_dot(q1, q2)
    if cos_half_theta < 0:
        q2 = Quaternion(-q2.x, -q2.y, -q2.z, -q2.w)
        cos_half_theta = -cos_half_theta

    if abs(cos_half_theta) >= 1.0:
        return q1

    if cos_half_theta > 0.95:
        parts = [p + amount * (r - p) for p, r in zip(q1, q2)]
        length = math.sqrt(sum(p * p for p in parts))
        if length > 0.0:
            parts = [p / length for p in parts]
        return Quaternion(*parts)

    half_theta = math.acos(cos_half_theta)
    sin_half_theta = math.sqrt(1.0 - cos_half_theta * cos_half_theta)
    if abs(sin_half_theta) < EPSILON:
        return Quaternion(*(p * 0.5 + r * 0.5 for p, r in zip(q1, q2)))

    ratio_a = math.sin((1 - amount) * half_theta) / sin_half_theta
    ratio_b = math.sin(amount * half_theta) / sin_half_theta
    return Quaternion(*(p * ratio_a + r * ratio_b for p, r in zip(q1, q2)))


def quaternion_from_matrix(mat: Matrix) -> Quaternion:
    """Extract the rotation of a pure rotation matrix."""
    candidates = (
        mat.m0 + mat.m5 + mat.m10,
        mat.m0 - mat.m5 - mat.m10,
        mat.m5 - mat.m0 - mat.m10,
        mat.m10 - mat.m0 - mat.m5,
    )
    biggest_index = 0
    for index in range(1, 4):
        if candidates[index] > candidates[biggest_index]:
            biggest_index = index

    biggest = math.sqrt(candidates[biggest_index] + 1.0) * 0.5
    mult = 0.25 / biggest

    if biggest_index == 0:
        return Quaternion(
            (mat.m6 - mat.m9) * mult,
            (mat.m8 - mat.m2) * mult,
            (mat.m1 - mat.m4) * mult,
            biggest,
        )
    if biggest_index == 1:
        return Quaternion(
            biggest,
            (mat.m1 + mat.m4) * mult,
            (mat.m8 + mat.m2) * mult,
            (mat.m6 - mat.m9) * mult,
        )
    if biggest_index == 2:
        return Quaternion(
            (mat.m1 + mat.m4) * mult,
            biggest,
            (mat.m6 + mat.m9) * mult,
            (mat.m8 - mat.m2) * mult,
        )
    return Quaternion(
        (mat.m8 + mat.m2) * mult,
        (mat.m6 + mat.m9) * mult,
        biggest,
        (mat.m1 - mat.m4) * mult,
    )


def quaternion_to_matrix(q: Quaternion) -> Matrix:
    """Rotation matrix for a unit quaternion."""
    a2 = q.x * q.x
    b2 = q.y * q.y
    c2 = q.z * q.z
    ac = q.x * q.z
    ab = q.x * q.y
    bc = q.y * q.z
    ad = q.w * q.x
    bd = q.w * q.y
    cd = q.w * q.z
    return Matrix(
        m0=1 - 2 * (b2 + c2),
        m1=2 * (ab + cd),
        m2=2 * (ac - bd),
        m4=2 * (ab - cd),
        m5=1 - 2 * (a2 + c2),
        m6=2 * (bc + ad),
        m8=2 * (ac + bd),
        m9=2 * (bc - ad),
        m10=1 - 2 * (a2 + b2),
        m15=1.0,
    )