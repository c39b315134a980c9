"""Triangle strips: encoding them into index buffers, decoding them back,
counting triangles, and merging strips that share an edge.

In an encoded index buffer every index of a strip carries the high bit and
a seven-bit strip id in bits 24-30.  The vertex index itself sits in the
low 24 bits.  Indices without the high bit are loose triangles, three at a
time.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Sequence

STRIP_FLAG = 0x80000000
INDEX_MASK = 0x00FFFFFF
STRIP_ID_MASK = 0x7F
STRIP_ID_SHIFT = 24
MIN_STRIP_LENGTH = 3


def _is_strip(raw: int) -> bool:
    return bool(raw & STRIP_FLAG)


def _strip_id(raw: int) -> int:
    return (raw >> STRIP_ID_SHIFT) & STRIP_ID_MASK


def _run_end(indices: Sequence[int], start: int) -> int:
    """End of the run of strip indices sharing the id of ``indices[start]``."""
    strip_id = _strip_id(indices[start])
    end = start
    while end < len(indices) and _is_strip(indices[end]) and _strip_id(indices[end]) == strip_id:
        end += 1
    return end


def _strip_runs(indices: Sequence[int]) -> Iterator[list[int]]:
    i = 0
    while i < len(indices):
        if not _is_strip(indices[i]):
            i += 1
            continue
        end = _run_end(indices, i)
        if end - i >= MIN_STRIP_LENGTH:
            yield [raw & INDEX_MASK for raw in indices[i:end]]
        i = end


def _loose_triangles(indices: Sequence[int]) -> Iterator[tuple[int, int, int]]:
    i = 0
    count = len(indices)
    while i < count:
        if _is_strip(indices[i]):
            i = _run_end(indices, i)
        elif i + 2 < count:
            a, b, c = (raw & INDEX_MASK for raw in indices[i:i + 3])
            yield (a, b, c)
            i += 3
        else:
            i += 1


def split_indices(indices: Iterable[int]) -> tuple[list[list[int]], list[int]]:
    """Decode an index buffer into ``(strips, loose)``.

    ``strips`` lists each strip of at least three indices, in buffer order;
    ``loose`` is the flat list of loose triangle indices.  All returned
    indices have the strip markers removed.
    """
    indices = list(indices)
    strips = list(_strip_runs(indices))
    loose = [index for triangle in _loose_triangles(indices) for index in triangle]
    return strips, loose


def count_triangles(indices: Iterable[int]) -> int:
    """Number of triangles an encoded index buffer draws."""
    indices = list(indices)
    from_strips = sum(len(strip) - 2 for strip in _strip_runs(indices))
    return from_strips + sum(1 for _ in _loose_triangles(indices))


def _check_index(index: int) -> int:
    if not 0 <= index <= INDEX_MASK:
        raise ValueError(f"vertex index {index} does not fit in 24 bits")
    return index


def encode_indices(
    strips: Iterable[Sequence[int]], loose_indices: Iterable[int]
) -> list[int]:
    """Build an index buffer: the strips first, numbered from 1, then the loose triangles."""
    loose = [_check_index(index) for index in loose_indices]
    if len(loose) % 3:
        raise ValueError(f"loose triangle indices must come in threes, got {len(loose)}")
    encoded = []
    for strip_id, strip in enumerate(strips, start=1):
        marker = STRIP_FLAG | ((strip_id << STRIP_ID_SHIFT) & 0xFFFFFFFF)
        encoded.extend(marker | _check_index(index) for index in strip)
    encoded.extend(loose)
    return encoded


def can_join_strips(strip1: Sequence[int], strip2: Sequence[int]) -> bool:
    """Whether ``strip2`` starts on the edge that ``strip1`` ends with."""
    if len(strip1) < 2 or len(strip2) < 2:
        return False
    last, before_last = strip1[-1], strip1[-2]
    return (last == strip2[1] and before_last == strip2[0]) or (
        last == strip2[0] and before_last == strip2[1]
    )


def join_strips(strips: Iterable[Sequence[int]]) -> list[list[int]]:
    """Greedily append strips that continue another strip's final edge."""
    strips = [list(strip) for strip in strips]
    used = [False] * len(strips)
    joined = []
    for start, strip in enumerate(strips):
        if used[start]:
            continue
        used[start] = True
        current = list(strip)
        found = True
        while found:
            found = False
            for other, candidate in enumerate(strips):
                if not used[other] and can_join_strips(current, candidate):
                    current.extend(candidate[2:])
                    used[other] = True
                    found = True
                    break
        joined.append(current)
    return joined


def triangles_from_strip(strip: Sequence[int]) -> list[tuple[int, int, int]]:
    """The triangles of a strip, with the winding flipped on every odd one."""
    triangles = []
    for i in range(len(strip) - 2):
        if i & 1:
            triangles.append((strip[i], strip[i + 2], strip[i + 1]))
        else:
            triangles.append((strip[i], strip[i + 1], strip[i + 2]))
    return triangles