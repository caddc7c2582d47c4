"""Tuple-based 3-vector helpers shared by the physics modules."""

from __future__ import annotations

import math
from typing import Iterable, Tuple

Vector = Tuple[float, float, float]


def vector_add(a: Vector, b: Vector) -> Vector:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def vector_sub(a: Vector, b: Vector) -> Vector:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def vector_scale(v: Vector, scalar: float) -> Vector:
    return (v[0] * scalar, v[1] * scalar, v[2] * scalar)


def vector_length(v: Vector) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def vector_dot(a: Vector, b: Vector) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def vector_zero() -> Vector:
    return (0.0, 0.0, 0.0)


def vector_sum(vectors: Iterable[Vector]) -> Vector:
    total = vector_zero()
    for v in vectors:
        total = vector_add(total, v)
    return total


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
