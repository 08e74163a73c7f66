"""Client-side helpers for the herding game: camera pitch, visibility and win colour."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

_PI = 3.1415926

PITCH_MIN = 0.05 * _PI
PITCH_MAX = 0.95 * _PI

# Background colour while the flock is tight, and once it is spread across the level:
GATHERED_COLOR = np.array([0.1, 0.3, 0.9])
SCATTERED_COLOR = np.array([0.5, 0.5, 0.5])


def _points(points: Iterable[Sequence[float]]) -> np.ndarray:
    return np.asarray(list(points), dtype=float).reshape(-1, 3)


def clamp_pitch(pitch: float) -> float:
    """Keep camera pitch away from straight down (0) and straight up (pi)."""
    return max(min(pitch, PITCH_MAX), PITCH_MIN)


def visible_points(own_point, points, radius: float) -> list[np.ndarray]:
    """World points farther than ``radius`` from ``own_point``, in their original order.

    Things closer than that are hidden so the player is never drawn inside them.
    """
    own = np.asarray(own_point, dtype=float).reshape(3)
    return [
        point
        for point in _points(points)
        if float(np.linalg.norm(point - own)) > radius
    ]


def background_color(sheep_points, min_bound, max_bound) -> np.ndarray:
    """Background colour from the widest spread of the flock.

    Blends from the gathered colour (all sheep together) toward the scattered colour
    as the largest distance between two sheep approaches the level's diagonal.
    Raises ValueError if the bounds enclose no space.
    """
    sheep = _points(sheep_points)
    diagonal = float(
        np.linalg.norm(
            np.asarray(max_bound, dtype=float).reshape(3)
            - np.asarray(min_bound, dtype=float).reshape(3)
        )
    )
    if diagonal == 0.0:
        raise ValueError("level bounds must not coincide")
    if len(sheep) == 0:
        max_distance = 0.0
    else:
        offsets = sheep[:, np.newaxis, :] - sheep[np.newaxis, :, :]
        max_distance = float(np.linalg.norm(offsets, axis=2).max())
    amount = max_distance / diagonal
    return GATHERED_COLOR * (1.0 - amount) + SCATTERED_COLOR * amount