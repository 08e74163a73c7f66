# herdkit

The math and data handling behind a small 3D herding game. It covers a scene
graph, walking on triangle meshes, a software audio mixer, an orbit camera and
a few gameplay helpers. Everything works on plain numpy arrays. Quaternions are
stored in `(w, x, y, z)` order.

## Modules

- `herdkit.quaternion` holds the rotation helpers:
  - `angle_axis`, `quat_multiply`, `quat_inverse` and `quat_to_mat3`.
  - `rotate_vector`.
  - `rotation_between`, the shortest rotation from one unit vector to another.
  - `quat_pitch`.
- `herdkit.scene` is the scene graph:
  - `Transform` has a position, rotation, scale and optional parent. It builds
    3x4 matrices with `make_local_to_parent`, `make_parent_to_local`,
    `make_local_to_world` and `make_world_to_local`. A zero scale gives a
    degenerate matrix, not NaNs.
  - `Drawable` (with a `Pipeline`), `Camera` and `Light` (with a `LightType`)
    each attach to a transform. Creating one without a transform raises
    `ValueError`.
  - `Camera.make_projection` returns the `infinite_perspective` matrix.
  - `Scene` holds lists of transforms, drawables, cameras and lights.
    `Scene.set(other)` copies another scene, remaps every transform reference,
    and returns the old-to-new transform mapping. `Scene.copy()` returns an
    independent copy.
- `herdkit.walkmesh` handles walking on meshes:
  - `WalkPoint` is a location given as triangle indices plus barycentric weights.
    On an edge, `weights[2] == 0`.
  - `WalkMesh` checks that every directed edge appears only once and that the
    vertex normals agree with the triangle normals. It provides:
    - `nearest_walk_point(point)`.
    - `walk_in_triangle(start, step)`, which returns `(end, time)`.
    - `cross_edge(start)`, which returns `(end, rotation)`, or `None` at a
      boundary edge.
    - `to_world_point`, `to_world_smooth_normal` and `to_world_triangle_normal`.
  - `barycentric_weights(a, b, c, pt)` projects a point onto a triangle's plane.
  - `WalkMeshes` is a set of named meshes. `WalkMeshes.from_arrays` builds it
    from shared vertex, normal and triangle arrays plus a names buffer and an
    index, and checks all of them. `lookup(name)` raises `KeyError` for an
    unknown name.
- `herdkit.sound` is a stereo mixer at 48 kHz:
  - A `Mixer` plays a `Sample` (mono float data) with `play`, `loop`, `play_3d`
    or `loop_3d`.
  - Each call returns a `PlayingSample` whose volume, pan, position and
    half-volume radius change smoothly through `Ramp` values.
  - `Mixer.mix()` returns the next block of 1024 stereo frames as a float32
    array of shape `(1024, 2)`.
  - The `Mixer.listener` sets the panning of 3D samples.
  - `stop_all_samples` and `set_volume` act on everything that is playing.
  - The ramp stepping and panning functions are public too.
- `herdkit.orbit_camera` has `OrbitCamera`, a z-up trackball camera:
  - `begin_drag` and `drag` tumble the view, or pan it when `pan=True`.
  - `dolly` zooms. The radius is kept between 0.1 and 1e6.
  - `rotation()` and `position()` give the camera's pose.
- `herdkit.mesh_selection` has `select_prev_mesh` and `select_next_mesh`. They
  step through sorted mesh names and stop at the ends. An unknown current name
  selects the first (prev) or last (next) name, and no names gives `""`.
- `herdkit.herding` has the gameplay helpers:
  - `clamp_pitch` keeps the camera pitch within 0.05π and 0.95π.
  - `visible_points` drops points that lie within a radius.
  - `background_color` blends from blue toward grey as the flock spreads across
    the level bounds.
- `herdkit.hex_dump` has `hex_dump(data)`, which writes any bytes-like object
  in the layout of `xxd`.
- `herdkit.pngio` has `load_png(filename, origin)`, which returns
  `((width, height), pixels)` with the pixels as RGBA. `save_png(filename, size,
  data, origin)` writes such pixels back out. `Origin` chooses whether the
  bottom row or the top row comes first.
- `herdkit.data_path` has `data_path(suffix)`, which joins `suffix` onto the
  directory of the running program.

## Install

```
pip install .
```

## Example

```python
from herdkit.hex_dump import hex_dump
from herdkit.walkmesh import WalkMesh

print(hex_dump(b"hello, world"))

mesh = WalkMesh(
    vertices=[(0, 0, 0), (1, 0, 0), (0, 1, 0)],
    normals=[(0, 0, 1)] * 3,
    triangles=[(0, 1, 2)],
)
at = mesh.nearest_walk_point((0.2, 0.2, 5.0))
print(mesh.to_world_point(at))  # [0.2 0.2 0. ]
```

## What it does not do

This is a library only. It has no commands, no game client and no game server.
It also leaves out the following:

- Rendering: there are no windows, OpenGL calls or shaders. `Pipeline` only
  holds the values a renderer would need.
- Networking.
- Reading scene or walk-mesh files. You build `Scene` objects yourself, and you
  build `WalkMeshes` from arrays you have already read.
- Audio output: the `Mixer` produces sample blocks but does not open an audio
  device.
- Audio decoding: `Sample` takes float data, not WAV or Opus files.

## Tests

```
pip install .[test]
pytest
```