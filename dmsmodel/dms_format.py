"""Reading and writing of DMS model files.

A DMS file holds a little-endian header (magic ``DMST``, version, mesh count,
bone count), an optional skeleton with baked animation frames, and a list of
meshes.  Mesh index buffers keep strip markers in their high bits.  Animated
files store full 32-byte vertices; static files store eight floats per vertex.
"""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .raymath import Matrix, Quaternion, Vector3, matrix_identity

DMS_MAGIC = 0x54534D44
DMS_VERSION = 1

BONE_NAME_SIZE = 64
ANIMATION_NAME_SIZE = 32
NORMAL_SCALE = 127.0

_HEADER = struct.Struct("<4I")
_U32 = struct.Struct("<I")
_TRANSFORM = struct.Struct("<10f")
_MATRIX = struct.Struct("<16f")
_BONE = struct.Struct(f"<{BONE_NAME_SIZE}si")
_ANIMATION = struct.Struct(f"<{ANIMATION_NAME_SIZE}siif")
_MESH = struct.Struct("<IIi")
_VERTEX = struct.Struct("<3f3bx2fB3xf")
_STATIC_VERTEX = struct.Struct("<8f")
_INDEX = struct.Struct("<I")

PathLike = Union[str, "os.PathLike[str]"]


class DMSFormatError(ValueError):
    """Raised when DMS data cannot be read or written."""


@dataclass(frozen=True)
class Transform:
    """Translation, rotation and scale of one bone."""

    translation: Vector3 = field(default_factory=Vector3)
    rotation: Quaternion = field(default_factory=Quaternion)
    scale: Vector3 = field(default_factory=lambda: Vector3(1.0, 1.0, 1.0))


@dataclass(frozen=True)
class Vertex:
    """A vertex with packed normals and a single bone influence."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    nx: int = 0
    ny: int = 0
    nz: int = 0
    u: float = 0.0
    v: float = 0.0
    bone_id: int = 0
    bone_weight: float = 0.0


@dataclass
class Bone:
    name: str
    parent: int = -1
    bind_pose: Transform = field(default_factory=Transform)
    local_pose: Transform = field(default_factory=Transform)
    world_pose: Matrix = field(default_factory=matrix_identity)
    inverse_bind_matrix: Matrix = field(default_factory=matrix_identity)


@dataclass
class Animation:
    """Baked animation: ``frame_count * bone_count`` poses, frame by frame."""

    name: str
    bone_count: int
    frame_count: int
    duration: float
    frame_poses: list[Transform] = field(default_factory=list)


@dataclass
class Skeleton:
    bones: list[Bone] = field(default_factory=list)
    animations: list[Animation] = field(default_factory=list)
    current_anim: int = 0
    current_time: float = 0.0


@dataclass
class Mesh:
    vertices: list[Vertex] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)
    texture_id: int = -1
    animated_vertices: Optional[list[Vertex]] = None


@dataclass
class Model:
    meshes: list[Mesh] = field(default_factory=list)
    skeleton: Optional[Skeleton] = None

    def animation_count(self) -> int:
        """Number of animations, 0 without a skeleton."""
        return len(self.skeleton.animations) if self.skeleton else 0

    def animation_name(self, index: int) -> Optional[str]:
        """Name of an animation, or None when there is no such animation."""
        if self.skeleton and 0 <= index < len(self.skeleton.animations):
            return self.skeleton.animations[index].name
        return None

    def current_animation(self) -> int:
        """Index of the playing animation, -1 without a skeleton."""
        return self.skeleton.current_anim if self.skeleton else -1

    def set_animation(self, index: int) -> bool:
        """Switch to an animation and rewind it; False if the index is invalid."""
        if self.skeleton and 0 <= index < len(self.skeleton.animations):
            self.skeleton.current_anim = index
            self.skeleton.current_time = 0.0
            return True
        return False

    def texture_count(self) -> int:
        """One more than the highest texture id used by any mesh."""
        highest = max((mesh.texture_id for mesh in self.meshes), default=-1)
        return highest + 1 if highest >= 0 else 0


class _Reader:
    def __init__(self, stream: BinaryIO):
        self._stream = stream

    def read(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) != size:
            raise DMSFormatError(f"unexpected end of data: wanted {size} bytes, got {len(data)}")
        return data

    def unpack(self, layout: struct.Struct) -> tuple:
        return layout.unpack(self.read(layout.size))

    def unpack_many(self, layout: struct.Struct, count: int):
        return layout.iter_unpack(self.read(layout.size * count)) if count else iter(())


def _decode_name(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _encode_name(name: str, size: int) -> bytes:
    return name.encode("utf-8")[: size - 1]


def _transform_from(values) -> Transform:
    return Transform(
        Vector3(*values[0:3]), Quaternion(*values[3:7]), Vector3(*values[7:10])
    )


def _transform_values(transform: Transform) -> tuple[float, ...]:
    return (*transform.translation, *transform.rotation, *transform.scale)


def _unpack_normal(value: float) -> int:
    return max(-128, min(127, round(value * NORMAL_SCALE)))


def _read_bone(reader: _Reader) -> Bone:
    raw_name, parent = reader.unpack(_BONE)
    bind_pose = _transform_from(reader.unpack(_TRANSFORM))
    inverse_bind = Matrix.from_rows(reader.unpack(_MATRIX))
    return Bone(
        name=_decode_name(raw_name),
        parent=parent,
        bind_pose=bind_pose,
        local_pose=bind_pose,
        inverse_bind_matrix=inverse_bind,
    )


def _read_animation(reader: _Reader) -> Animation:
    raw_name, bone_count, frame_count, duration = reader.unpack(_ANIMATION)
    if bone_count < 0 or frame_count < 0:
        raise DMSFormatError(
            f"negative animation size: {frame_count} frames of {bone_count} bones"
        )
    poses = [
        _transform_from(values)
        for values in reader.unpack_many(_TRANSFORM, frame_count * bone_count)
    ]
    return Animation(_decode_name(raw_name), bone_count, frame_count, duration, poses)


def _read_mesh(reader: _Reader, animated: bool) -> Mesh:
    vertex_count, index_count, texture_id = reader.unpack(_MESH)
    if animated:
        vertices = [Vertex(*values) for values in reader.unpack_many(_VERTEX, vertex_count)]
        animated_vertices: Optional[list[Vertex]] = list(vertices)
    else:
        vertices = [
            Vertex(
                x, y, z,
                _unpack_normal(nx), _unpack_normal(ny), _unpack_normal(nz),
                u, v, 0, 0.0,
            )
            for x, y, z, nx, ny, nz, u, v in reader.unpack_many(_STATIC_VERTEX, vertex_count)
        ]
        animated_vertices = None
    indices = [index for (index,) in reader.unpack_many(_INDEX, index_count)]
    return Mesh(vertices, indices, texture_id, animated_vertices)


def read_model(stream: BinaryIO) -> Model:
    """Read a model from a binary stream."""
    reader = _Reader(stream)
    magic, _version, mesh_count, bone_count = reader.unpack(_HEADER)
    if magic != DMS_MAGIC:
        raise DMSFormatError(
            f"invalid file format: magic mismatch 0x{magic:08X} vs 0x{DMS_MAGIC:08X}"
        )

    skeleton: Optional[Skeleton] = None
    if bone_count > 0:
        bones = [_read_bone(reader) for _ in range(bone_count)]
        (animation_count,) = reader.unpack(_U32)
        animations = [_read_animation(reader) for _ in range(animation_count)]
        skeleton = Skeleton(bones, animations)
    else:
        reader.unpack(_U32)

    meshes = [_read_mesh(reader, skeleton is not None) for _ in range(mesh_count)]
    return Model(meshes, skeleton)


def load_model(path: PathLike) -> Model:
    """Read a model from a file."""
    with open(path, "rb") as stream:
        return read_model(stream)


def _pack(layout: struct.Struct, *values) -> bytes:
    try:
        return layout.pack(*values)
    except struct.error as exc:
        raise DMSFormatError(f"value out of range for the format: {exc}") from exc


def _model_chunks(model: Model):
    bones = model.skeleton.bones if model.skeleton else []
    animated = len(bones) > 0
    yield _pack(_HEADER, DMS_MAGIC, DMS_VERSION, len(model.meshes), len(bones))

    if animated:
        for bone in bones:
            yield _pack(_BONE, _encode_name(bone.name, BONE_NAME_SIZE), bone.parent)
            yield _pack(_TRANSFORM, *_transform_values(bone.bind_pose))
            yield _pack(_MATRIX, *bone.inverse_bind_matrix.rows())
        animations = model.skeleton.animations
        yield _pack(_U32, len(animations))
        for animation in animations:
            expected = animation.frame_count * animation.bone_count
            if len(animation.frame_poses) != expected:
                raise DMSFormatError(
                    f"animation {animation.name!r} has {len(animation.frame_poses)} poses,"
                    f" expected {expected}"
                )
            yield _pack(
                _ANIMATION,
                _encode_name(animation.name, ANIMATION_NAME_SIZE),
                animation.bone_count,
                animation.frame_count,
                animation.duration,
            )
            for pose in animation.frame_poses:
                yield _pack(_TRANSFORM, *_transform_values(pose))
    else:
        yield _pack(_U32, 0)

    for mesh in model.meshes:
        yield _pack(_MESH, len(mesh.vertices), len(mesh.indices), mesh.texture_id)
        for vertex in mesh.vertices:
            if animated:
                yield _pack(
                    _VERTEX,
                    vertex.x, vertex.y, vertex.z,
                    vertex.nx, vertex.ny, vertex.nz,
                    vertex.u, vertex.v,
                    vertex.bone_id, vertex.bone_weight,
                )
            else:
                yield _pack(
                    _STATIC_VERTEX,
                    vertex.x, vertex.y, vertex.z,
                    vertex.nx / NORMAL_SCALE,
                    vertex.ny / NORMAL_SCALE,
                    vertex.nz / NORMAL_SCALE,
                    vertex.u, vertex.v,
                )
        for index in mesh.indices:
            yield _pack(_INDEX, index)


def write_model(model: Model, stream: BinaryIO) -> int:
    """Write a model to a binary stream and return the number of bytes written."""
    data = b"".join(_model_chunks(model))
    stream.write(data)
    return len(data)


def save_model(model: Model, path: PathLike) -> int:
    """Write a model to a file and return its size in bytes."""
    data = b"".join(_model_chunks(model))
    with open(path, "wb") as stream:
        stream.write(data)
    return len(data)


def dms_path_for(path: PathLike) -> str:
    """The output path for an input model: its extension replaced by ``.dms``."""
    text = os.fspath(path)
    name = Path(text).name
    dot = name.rfind(".")
    if dot <= 0:
        return text + ".dms"
    return text[: len(text) - len(name) + dot] + ".dms"