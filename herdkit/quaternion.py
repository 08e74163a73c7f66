"""Quaternion helpers for rotations, stored as numpy arrays in (w, x, y, z) order."""

from __future__ import annotations

import math

import numpy as np

_EPSILON = float(np.finfo(np.float32).eps)

IDENTITY = np.array([1.0, 0.0, 0.0, 0.0])


def _vec3(v) -> np.ndarray:
    return np.asarray(v, dtype=float).reshape(3)


def _quat(q) -> np.ndarray:
    return np.asarray(q, dtype=float).reshape(4)


def angle_axis(angle: float, axis) -> np.ndarray:
    """Rotation of ``angle`` radians about the (unit-length) ``axis``."""
    axis = _vec3(axis)
    half = 0.5 * angle
    return np.array([math.cos(half), *(axis * math.sin(half))])


def quat_multiply(a, b) -> np.ndarray:
    """Hamilton product ``a * b`` (apply ``b`` first, then ``a``)."""
    w1, x1, y1, z1 = _quat(a)
    w2, x2, y2, z2 = _quat(b)
    return np.array([
        w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
        w1 * y2 + y1 * w2 + z1 * x2 - x1 * z2,
        w1 * z2 + z1 * w2 + x1 * y2 - y1 * x2,
    ])


def quat_inverse(q) -> np.ndarray:
    """Multiplicative inverse of ``q``."""
    q = _quat(q)
    conjugate = q * np.array([1.0, -1.0, -1.0, -1.0])
    return conjugate / float(np.dot(q, q))


def quat_to_mat3(q) -> np.ndarray:
    """3x3 rotation matrix (acting on column vectors) for ``q``."""
    w, x, y, z = _quat(q)
    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z
    return np.array([
        [1.0 - 2.0 * (yy + zz), 2.0 * (xy - wz), 2.0 * (xz + wy)],
        [2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz), 2.0 * (yz - wx)],
        [2.0 * (xz - wy), 2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy)],
    ])


def rotate_vector(q, v) -> np.ndarray:
    """Rotate vector ``v`` by unit quaternion ``q``."""
    q = _quat(q)
    v = _vec3(v)
    u = q[1:]
    uv = np.cross(u, v)
    uuv = np.cross(u, uv)
    return v + 2.0 * (q[0] * uv + uuv)


def rotation_between(a, b) -> np.ndarray:
    """Shortest rotation taking unit vector ``a`` onto unit vector ``b``."""
    a = _vec3(a)
    b = _vec3(b)
    cos_theta = float(np.dot(a, b))
    if cos_theta >= 1.0 - _EPSILON:
        return IDENTITY.copy()
    if cos_theta < -1.0 + _EPSILON:
        axis = np.cross(np.array([0.0, 0.0, 1.0]), a)
        if float(np.dot(axis, axis)) < _EPSILON:
            axis = np.cross(np.array([1.0, 0.0, 0.0]), a)
        axis = axis / np.linalg.norm(axis)
        return angle_axis(math.pi, axis)
    axis = np.cross(a, b)
    s = math.sqrt((1.0 + cos_theta) * 2.0)
    return np.array([0.5 * s, *(axis / s)])


def quat_pitch(q) -> float:
    """Pitch (rotation about x) component of ``q``, in radians."""
    w, x, y, z = _quat(q)
    sy = 2.0 * (y * z + w * x)
    sx = w * w - x * x - y * y + z * z
    if abs(sx) < _EPSILON and abs(sy) < _EPSILON:
        return 2.0 * math.atan2(x, w)
    return math.atan2(sy, sx)