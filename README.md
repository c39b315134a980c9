# dmsmodel

Tools for working with DMS model files: a compact little-endian binary
format holding meshes whose indices are grouped into triangle strips and
loose triangles, with an optional skeleton and baked animation frames. The
package also decodes DTEX texture headers and works out which texture file
belongs to which texture id.

It has no dependencies outside the standard library.

## Modules

- `dmsmodel.raymath` – vector, quaternion and 4×4 column-major matrix
  helpers: `Vector3`, `Quaternion`, `Matrix` (with `rows()` and
  `Matrix.from_rows()` for the stored element order), `matrix_multiply`,
  `matrix_translate`, `matrix_scale`, `matrix_decompose`,
  `vector3_transform`, `vector3_lerp`, `quaternion_slerp`,
  `quaternion_from_matrix`, `quaternion_to_matrix`, `float_equals` and more.
- `dmsmodel.dms_format` – the data classes `Model`, `Mesh`, `Vertex`,
  `Skeleton`, `Bone`, `Animation` and `Transform`; `read_model` /
  `load_model` to read, `write_model` / `save_model` to write (both return
  the number of bytes written), and `dms_path_for` to turn an input path
  into its `.dms` output path. Malformed data raises `DMSFormatError`.
  `Model` offers `animation_count()`, `animation_name(index)`,
  `current_animation()`, `set_animation(index)` and `texture_count()`.
- `dmsmodel.keyframes` – `is_keyframe_needed` and `reduce_keyframes`, which
  drop baked frames whose bone transforms barely change from the last kept
  frame (thresholds of 0.1 for position, rotation and scale).
- `dmsmodel.strips` – `split_indices` decodes an index buffer into strips
  and loose triangle indices, `count_triangles` counts what it draws,
  `encode_indices` builds one, and `can_join_strips`, `join_strips` and
  `triangles_from_strip` work on plain strips.
- `dmsmodel.textures` – `parse_dtex` and `read_dtex` decode a DTEX header
  into a `DtexImage` (size, colour layout, compressed / twiddled /
  mipmapped flags, raw data, `description`, `pixel_format()`); bad data
  raises `DtexError`. `texture_candidates` lists the file names tried for a
  texture id, and `resolve_textures` picks the first that exists.
- `dmsmodel.playback` – `AnimationSwitcher`, which cycles a model's
  animations on `press(model, now_ms)` with a 500 ms debounce.
- `dmsmodel.scene` – `ball_grid` lays out up to twenty `Ball` instances on a
  4 by 5 grid; `Ball.advance()` steps their rotations, wrapping at 360°.

## Installing

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Example

```python
from dmsmodel.dms_format import load_model, save_model
from dmsmodel.strips import count_triangles, split_indices
from dmsmodel.textures import resolve_textures

model = load_model("dragon.dms")
print(model.animation_count(), "animations")

for mesh in model.meshes:
    strips, loose = split_indices(mesh.indices)
    print(count_triangles(mesh.indices), "triangles in",
          len(strips), "strips and", len(loose) // 3, "loose triangles")

paths = resolve_textures("assets", "assets/texture0.tex", model.texture_count())
print(paths)

save_model(model, "copy.dms")
```

Strip indices carry a marker in their top bits: bit 31 is set and bits
24–30 hold the strip id; the low 24 bits are the vertex index. Indices with
bit 31 clear are loose triangles, read three at a time. Strips shorter than
three indices are ignored when decoding.

## What it does not do

- It does not import glTF or GLB files; models are built in code or read
  from existing `.dms` files.
- It does not play animations back: there is no sampling of animation
  tracks, no computation of bone world poses from the baked frames and no
  skinning of mesh vertices. `Model.set_animation` only records which
  animation is current and rewinds its time.
- It does not render anything, and it does not decode DTEX pixel data; the
  data is kept as raw bytes.
- There is no command-line tool.