"""Hierarchical transforms with attached drawables, cameras and lights."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

import numpy as np

from herdkit.quaternion import IDENTITY, quat_inverse, quat_to_mat3

GL_TRIANGLES = 0x0004
GL_TEXTURE_2D = 0x0DE1
UNUSED_LOCATION = 0xFFFFFFFF
TEXTURE_COUNT = 4

_PAD_ROW = np.array([[0.0, 0.0, 0.0, 1.0]])


def _pad(mat4x3: np.ndarray) -> np.ndarray:
    """Extend a 3x4 affine matrix to 4x4 with a (0, 0, 0, 1) bottom row."""
    return np.vstack([mat4x3, _PAD_ROW])


def infinite_perspective(fovy: float, aspect: float, near: float) -> np.ndarray:
    """Right-handed perspective projection (4x4) with the far plane at infinity."""
    extent = math.tan(fovy / 2.0) * near
    left, right = -extent * aspect, extent * aspect
    bottom, top = -extent, extent
    result = np.zeros((4, 4))
    result[0, 0] = (2.0 * near) / (right - left)
    result[1, 1] = (2.0 * near) / (top - bottom)
    result[2, 2] = -1.0
    result[3, 2] = -1.0
    result[2, 3] = -2.0 * near
    return result


@dataclass(eq=False)
class Transform:
    """A position, rotation and scale, optionally relative to a parent transform.

    Matrices are 3x4 numpy arrays acting on homogeneous column vectors.
    """

    name: str = ""
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: IDENTITY.copy())
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    parent: Optional["Transform"] = None

    def __post_init__(self) -> None:
        self.position = np.asarray(self.position, dtype=float).reshape(3).copy()
        self.rotation = np.asarray(self.rotation, dtype=float).reshape(4).copy()
        self.scale = np.asarray(self.scale, dtype=float).reshape(3).copy()

    def make_local_to_parent(self) -> np.ndarray:
        """translate * rotate * scale, as a 3x4 matrix."""
        rot = quat_to_mat3(self.rotation)
        return np.hstack([rot * self.scale[np.newaxis, :], self.position.reshape(3, 1)])

    def make_parent_to_local(self) -> np.ndarray:
        """Inverse of make_local_to_parent; a zero scale yields a degenerate matrix, not NaN."""
        inv_scale = np.array([0.0 if s == 0.0 else 1.0 / s for s in self.scale])
        inv_rot = quat_to_mat3(quat_inverse(self.rotation)) * inv_scale[:, np.newaxis]
        return np.hstack([inv_rot, (inv_rot @ -self.position).reshape(3, 1)])

    def make_local_to_world(self) -> np.ndarray:
        if self.parent is None:
            return self.make_local_to_parent()
        return self.parent.make_local_to_world() @ _pad(self.make_local_to_parent())

    def make_world_to_local(self) -> np.ndarray:
        if self.parent is None:
            return self.make_parent_to_local()
        return self.make_parent_to_local() @ _pad(self.parent.make_world_to_local())


@dataclass
class TextureInfo:
    """A texture object and the target it binds to."""

    texture: int = 0
    target: int = GL_TEXTURE_2D


@dataclass
class Pipeline:
    """Everything needed to draw one object with a shader program."""

    program: int = 0
    vao: int = 0
    type: int = GL_TRIANGLES
    start: int = 0
    count: int = 0
    OBJECT_TO_CLIP_mat4: int = UNUSED_LOCATION
    OBJECT_TO_LIGHT_mat4x3: int = UNUSED_LOCATION
    NORMAL_TO_LIGHT_mat3: int = UNUSED_LOCATION
    set_uniforms: Optional[Callable[[], None]] = None
    textures: list[TextureInfo] = field(
        default_factory=lambda: [TextureInfo() for _ in range(TEXTURE_COUNT)]
    )


def _copy_pipeline(pipeline: Pipeline) -> Pipeline:
    return replace(pipeline, textures=[replace(t) for t in pipeline.textures])


def _require_transform(transform: Optional[Transform], what: str) -> None:
    if transform is None:
        raise ValueError(f"{what} must be attached to a transform")


@dataclass(eq=False)
class Drawable:
    """Attaches drawing data to a transform."""

    transform: Transform
    pipeline: Pipeline = field(default_factory=Pipeline)

    def __post_init__(self) -> None:
        _require_transform(self.transform, "Drawable")


@dataclass(eq=False)
class Camera:
    """Perspective camera looking down the -z axis of its transform."""

    transform: Transform
    fovy: float = math.radians(60.0)
    aspect: float = 1.0
    near: float = 0.01

    def __post_init__(self) -> None:
        _require_transform(self.transform, "Camera")

    def make_projection(self) -> np.ndarray:
        return infinite_perspective(self.fovy, self.aspect, self.near)


class LightType(enum.Enum):
    POINT = "p"
    HEMISPHERE = "h"
    SPOT = "s"
    DIRECTIONAL = "d"


@dataclass(eq=False)
class Light:
    """Light attached to a transform; directed lights point down its -z axis."""

    transform: Transform
    type: LightType = LightType.POINT
    energy: np.ndarray = field(default_factory=lambda: np.ones(3))
    spot_fov: float = math.radians(45.0)

    def __post_init__(self) -> None:
        _require_transform(self.transform, "Light")
        self.energy = np.asarray(self.energy, dtype=float).reshape(3).copy()


@dataclass(eq=False)
class Scene:
    """A collection of transforms and the drawables, cameras and lights on them."""

    transforms: list[Transform] = field(default_factory=list)
    drawables: list[Drawable] = field(default_factory=list)
    cameras: list[Camera] = field(default_factory=list)
    lights: list[Light] = field(default_factory=list)

    def set(self, other: "Scene") -> dict[Transform, Transform]:
        """Make this scene a copy of ``other`` with references remapped.

        Returns the mapping from ``other``'s transforms to this scene's new ones.
        Raises ValueError if anything in ``other`` refers to a transform it does not hold.
        """
        if other is self:
            return {t: t for t in self.transforms}

        mapping: dict[Transform, Transform] = {}
        new_transforms = []
        for old in other.transforms:
            new = Transform(
                name=old.name,
                position=old.position,
                rotation=old.rotation,
                scale=old.scale,
            )
            mapping[old] = new
            new_transforms.append(new)

        def remap(transform: Optional[Transform]) -> Optional[Transform]:
            if transform is None:
                return None
            try:
                return mapping[transform]
            except KeyError:
                raise ValueError(
                    f"transform '{transform.name}' is not part of the copied scene"
                ) from None

        for old, new in zip(other.transforms, new_transforms):
            new.parent = remap(old.parent)

        drawables = [
            Drawable(remap(d.transform), _copy_pipeline(d.pipeline)) for d in other.drawables
        ]
        cameras = [
            Camera(remap(c.transform), fovy=c.fovy, aspect=c.aspect, near=c.near)
            for c in other.cameras
        ]
        lights = [
            Light(remap(l.transform), type=l.type, energy=l.energy, spot_fov=l.spot_fov)
            for l in other.lights
        ]

        self.transforms = new_transforms
        self.drawables = drawables
        self.cameras = cameras
        self.lights = lights
        return mapping

    def copy(self) -> "Scene":
        """Independent copy of this scene."""
        result = Scene()
        result.set(self)
        return result