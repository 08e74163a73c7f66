"""Walking on triangle meshes using barycentric positions."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

import numpy as np

from herdkit.quaternion import rotation_between

UNSET_INDEX = 0xFFFFFFFF


def _vec3(v) -> np.ndarray:
    return np.asarray(v, dtype=float).reshape(3)


def _normalize(v: np.ndarray) -> np.ndarray:
    return v / np.linalg.norm(v)


def barycentric_weights(a, b, c, pt) -> np.ndarray:
    """Barycentric weights of ``pt`` projected onto the plane of triangle (a, b, c)."""
    a, b, c, pt = _vec3(a), _vec3(b), _vec3(c), _vec3(pt)
    abh = np.cross(np.cross(c - a, b - a), b - a)
    bch = np.cross(np.cross(a - b, c - b), c - b)
    cah = np.cross(np.cross(b - c, a - c), a - c)
    hab = float(np.dot(pt - a, abh)) / float(np.linalg.norm(abh))
    hbc = float(np.dot(pt - b, bch)) / float(np.linalg.norm(bch))
    hca = float(np.dot(pt - c, cah)) / float(np.linalg.norm(cah))
    w = np.array([
        float(np.linalg.norm(c - b)) * hbc,
        float(np.linalg.norm(a - c)) * hca,
        float(np.linalg.norm(b - a)) * hab,
    ])
    return w / float(w.sum())


@dataclass
class WalkPoint:
    """A location on a walk mesh: triangle vertex indices (CCW) and barycentric weights.

    By convention a point on an edge has its indices arranged so that ``weights[2] == 0``.
    """

    indices: tuple[int, int, int] = (UNSET_INDEX, UNSET_INDEX, UNSET_INDEX)
    weights: np.ndarray = field(default_factory=lambda: np.full(3, math.nan))

    def __post_init__(self) -> None:
        self.indices = tuple(int(i) for i in self.indices)
        if len(self.indices) != 3:
            raise ValueError("a walk point needs exactly three vertex indices")
        self.weights = np.asarray(self.weights, dtype=float).reshape(3).copy()


class WalkMesh:
    """A triangle mesh that can be walked on, with per-vertex normals."""

    def __init__(self, vertices, normals, triangles: Iterable[Sequence[int]]) -> None:
        self.vertices = np.asarray(vertices, dtype=float).reshape(-1, 3)
        self.normals = np.asarray(normals, dtype=float).reshape(-1, 3)
        self.triangles: list[tuple[int, int, int]] = [
            (int(t[0]), int(t[1]), int(t[2])) for t in triangles
        ]

        # maps each directed edge (a, b) to the third vertex of its triangle:
        self.next_vertex: dict[tuple[int, int], int] = {}
        for x, y, z in self.triangles:
            for edge, other in (((x, y), z), ((y, z), x), ((z, x), y)):
                if edge in self.next_vertex:
                    raise ValueError(f"walk mesh edge {edge} appears in more than one triangle")
                self.next_vertex[edge] = other

        for x, y, z in self.triangles:
            a, b, c = self.vertices[x], self.vertices[y], self.vertices[z]
            out = _normalize(np.cross(b - a, c - a))
            dots = [float(np.dot(out, self.normals[i])) for i in (x, y, z)]
            if not all(d > 0.1 for d in dots):
                raise ValueError(
                    f"vertex normals of triangle {(x, y, z)} disagree with its geometric normal"
                )

    def to_world_point(self, wp: WalkPoint) -> np.ndarray:
        """World-space position of a walk point."""
        return wp.weights @ self.vertices[list(wp.indices)]

    def to_world_smooth_normal(self, wp: WalkPoint) -> np.ndarray:
        """Interpolated (and normalized) vertex normal at a walk point."""
        return _normalize(wp.weights @ self.normals[list(wp.indices)])

    def to_world_triangle_normal(self, wp: WalkPoint) -> np.ndarray:
        """Geometric normal of the triangle a walk point lies on."""
        a, b, c = self.vertices[list(wp.indices)]
        return _normalize(np.cross(b - a, c - a))

    def nearest_walk_point(self, world_point) -> WalkPoint:
        """Closest point on the mesh to ``world_point``."""
        if not self.triangles:
            raise ValueError("Cannot start on an empty walkmesh")
        world_point = _vec3(world_point)

        closest = WalkPoint()
        closest_dis2 = math.inf

        def consider(indices, weights, point) -> None:
            nonlocal closest, closest_dis2
            offset = world_point - point
            dis2 = float(np.dot(offset, offset))
            if dis2 < closest_dis2:
                closest_dis2 = dis2
                closest = WalkPoint(indices, weights)

        for tri in self.triangles:
            a, b, c = self.vertices[list(tri)]
            coords = barycentric_weights(a, b, c, world_point)
            if (coords >= 0.0).all():
                consider(tri, coords, self.to_world_point(WalkPoint(tri, coords)))
                continue
            x, y, z = tri
            for ai, bi, ci in ((x, y, z), (y, z, x), (z, x, y)):
                va, vb = self.vertices[ai], self.vertices[bi]
                along = float(np.dot(world_point - va, vb - va))
                length2 = float(np.dot(vb - va, vb - va))
                if along < 0.0:
                    point, weights = va, (1.0, 0.0, 0.0)
                elif along > length2:
                    point, weights = vb, (0.0, 1.0, 0.0)
                else:
                    amt = along / length2
                    point, weights = va + amt * (vb - va), (1.0 - amt, amt, 0.0)
                consider((ai, bi, ci), weights, point)
        return closest

    def walk_in_triangle(self, start: WalkPoint, step) -> tuple[WalkPoint, float]:
        """Take ``step`` (projected onto the triangle), stopping at the first edge reached.

        Returns ``(end, time)``: ``time`` is 1.0 when the whole step stays inside the
        triangle; otherwise ``end`` lies on the crossed edge with ``end.weights[2] == 0``.
        """
        a, b, c = self.vertices[list(start.indices)]
        target = self.to_world_point(start) + _vec3(step)
        bary_step = barycentric_weights(a, b, c, target) - start.weights

        time = 1.0
        crossed_edge: Optional[int] = None
        for i in range(3):
            if bary_step[i] < 0.0:
                t = -start.weights[i] / bary_step[i]
                if t < time:
                    time = float(t)
                    crossed_edge = i

        x, y, z = start.indices
        wx, wy, wz = start.weights + time * bary_step
        if crossed_edge == 0:
            end = WalkPoint((y, z, x), (wy, wz, 0.0))
        elif crossed_edge == 1:
            end = WalkPoint((z, x, y), (wz, wx, 0.0))
        elif crossed_edge == 2:
            end = WalkPoint((x, y, z), (wx, wy, 0.0))
        else:
            end = WalkPoint((x, y, z), (wx, wy, wz))
        return end, time

    def cross_edge(self, start: WalkPoint) -> Optional[tuple[WalkPoint, np.ndarray]]:
        """Move a point on an edge over to the neighbouring triangle.

        Returns ``(end, rotation)`` where ``rotation`` takes the start triangle's normal to
        the end triangle's normal, or None if the edge is on the mesh boundary.
        """
        if start.weights[2] != 0.0:
            raise ValueError("cross_edge needs a walk point on an edge (weights[2] == 0)")
        x, y, z = start.indices
        other = self.next_vertex.get((y, x))
        if other is None:
            return None
        end = WalkPoint((y, x, other), (start.weights[1], start.weights[0], 0.0))

        def plane_normal(indices) -> np.ndarray:
            p, q, r = self.vertices[list(indices)]
            return _normalize(np.cross(p - r, q - r))

        rotation = rotation_between(plane_normal(start.indices), plane_normal(end.indices))
        return end, rotation


def _as_name_bytes(names) -> bytes:
    if isinstance(names, str):
        return names.encode("utf-8")
    return bytes(names)


class WalkMeshes:
    """A set of named walk meshes."""

    def __init__(self, meshes: Optional[dict[str, WalkMesh]] = None) -> None:
        self.meshes: dict[str, WalkMesh] = dict(meshes or {})

    @classmethod
    def from_arrays(cls, vertices, normals, triangles, names, index, filename) -> "WalkMeshes":
        """Build walk meshes from shared arrays and an index of
        ``(name_begin, name_end, vertex_begin, vertex_end, triangle_begin, triangle_end)``
        entries; ``filename`` is used in error messages.
        """
        vertices = np.asarray(vertices, dtype=float).reshape(-1, 3)
        normals = np.asarray(normals, dtype=float).reshape(-1, 3)
        triangles = [tuple(int(v) for v in t) for t in triangles]
        name_bytes = _as_name_bytes(names)

        if len(vertices) != len(normals):
            raise ValueError(f"Mis-matched position and normal sizes in '{filename}'")

        result = cls()
        for entry in index:
            name_begin, name_end, vertex_begin, vertex_end, tri_begin, tri_end = (
                int(v) for v in entry
            )
            if not (0 <= name_begin <= name_end <= len(name_bytes)):
                raise ValueError(f"Invalid name indices in index of '{filename}'")
            if not (0 <= vertex_begin <= vertex_end <= len(vertices)):
                raise ValueError(f"Invalid vertex indices in index of '{filename}'")
            if not (0 <= tri_begin <= tri_end <= len(triangles)):
                raise ValueError(f"Invalid triangle indices in index of '{filename}'")

            remapped = []
            for tri in triangles[tri_begin:tri_end]:
                if not all(vertex_begin <= v < vertex_end for v in tri):
                    raise ValueError(f"Invalid triangle in '{filename}'")
                remapped.append(tuple(v - vertex_begin for v in tri))

            name = name_bytes[name_begin:name_end].decode("utf-8")
            if name in result.meshes:
                raise ValueError(f"WalkMesh with duplicated name '{name}' in '{filename}'")
            result.meshes[name] = WalkMesh(
                vertices[vertex_begin:vertex_end],
                normals[vertex_begin:vertex_end],
                remapped,
            )
        return result

    def lookup(self, name: str) -> WalkMesh:
        """The walk mesh called ``name``; raises KeyError if there is none."""
        try:
            return self.meshes[name]
        except KeyError:
            raise KeyError(f"WalkMesh with name '{name}' not found.") from None