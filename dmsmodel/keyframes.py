"""Dropping baked animation frames that barely differ from the last kept one."""

from __future__ import annotations

from typing import Sequence

from .dms_format import Transform
from .raymath import quaternion_dot, vector3_length, Vector3

POSITION_THRESHOLD = 0.1
ROTATION_THRESHOLD = 0.1
SCALE_THRESHOLD = 0.1


def _distance(a: Vector3, b: Vector3) -> float:
    return vector3_length(Vector3(a.x - b.x, a.y - b.y, a.z - b.z))


def is_keyframe_needed(current: Transform, last: Transform) -> bool:
    """Whether ``current`` moved, turned or scaled enough away from ``last``."""
    if _distance(current.translation, last.translation) > POSITION_THRESHOLD:
        return True
    rotation_delta = 1.0 - abs(quaternion_dot(current.rotation, last.rotation))
    if rotation_delta > ROTATION_THRESHOLD:
        return True
    return _distance(current.scale, last.scale) > SCALE_THRESHOLD


def reduce_keyframes(
    poses: Sequence[Transform], frame_count: int, bone_count: int
) -> list[Transform]:
    """Keep only the frames where some bone changed noticeably.

    ``poses`` holds ``frame_count * bone_count`` transforms, frame by frame.
    The first frame is always kept; each later frame is compared with the
    last kept one.  When any frame was dropped, the final frame is appended
    at the end.  Returns the kept poses; their number divided by
    ``bone_count`` is the new frame count.
    """
    if frame_count < 1:
        raise ValueError(f"frame count must be at least 1, got {frame_count}")
    if bone_count < 1:
        raise ValueError(f"bone count must be at least 1, got {bone_count}")
    total = frame_count * bone_count
    if len(poses) != total:
        raise ValueError(
            f"{frame_count} frames of {bone_count} bones need {total} poses,"
            f" got {len(poses)}"
        )

    frames = [list(poses[start:start + bone_count]) for start in range(0, total, bone_count)]
    kept = [frames[0]]
    for frame in frames[1:]:
        last = kept[-1]
        if any(is_keyframe_needed(cur, prev) for cur, prev in zip(frame, last)):
            kept.append(frame)

    if len(kept) < frame_count:
        kept.append(frames[-1])

    return [pose for frame in kept for pose in frame]