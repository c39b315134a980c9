"""DTEX texture headers and the lookup of texture files for a model.

A DTEX file starts with a 16-byte little-endian header: the id ``DTEX``,
the width and height as 16-bit values, a 32-bit type word and the 32-bit
size of the pixel data that follows.  Bits of the type word say whether the
data is twiddled, VQ compressed or mipmapped, and which colour layout it
uses.
"""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Optional, Union

PathLike = Union[str, "os.PathLike[str]"]

_HEADER = struct.Struct("<4sHHII")

_NOT_TWIDDLED_BIT = 1 << 26
_COMPRESSED_BIT = 1 << 30
_MIPMAPPED_BIT = 1 << 31
_FORMAT_SHIFT = 27
_FORMAT_MASK = 0b111

ARGB1555 = 0
RGB565 = 1
ARGB4444 = 2

_FORMAT_NAMES = {
    ARGB1555: "ARGB 1555",
    RGB565: "RGB 565",
    ARGB4444: "ARGB 4444",
}

MAX_BASE_NAME = 63


class DtexError(ValueError):
    """Raised when DTEX data cannot be decoded."""


class PixelFormat(IntEnum):
    """Pixel layouts a loaded texture is reported with."""

    UNCOMPRESSED_R5G6B5 = 3
    UNCOMPRESSED_R5G5B5A1 = 5
    UNCOMPRESSED_R4G4B4A4 = 6
    UNCOMPRESSED_R8G8B8A8 = 7


_PIXEL_FORMATS = {
    ARGB1555: PixelFormat.UNCOMPRESSED_R5G5B5A1,
    RGB565: PixelFormat.UNCOMPRESSED_R5G6B5,
    ARGB4444: PixelFormat.UNCOMPRESSED_R4G4B4A4,
}


@dataclass(frozen=True)
class DtexImage:
    """A decoded DTEX header together with its raw pixel data."""

    width: int
    height: int
    color_format: int
    compressed: bool
    twiddled: bool
    mipmapped: bool
    data: bytes

    @property
    def description(self) -> str:
        """Human readable summary such as ``Compressed - RGB 565``."""
        name = _FORMAT_NAMES[self.color_format]
        if self.compressed and self.twiddled:
            return f"Compressed & Twiddled - {name}"
        if self.compressed:
            return f"Compressed - {name}"
        return f"Uncompressed - {name}"

    def pixel_format(self) -> PixelFormat:
        """The pixel format the texture is reported with once loaded.

        Mipmapped compressed textures have no matching entry and fall back
        to 32-bit RGBA.
        """
        if self.compressed and self.mipmapped:
            return PixelFormat.UNCOMPRESSED_R8G8B8A8
        return _PIXEL_FORMATS[self.color_format]


def parse_dtex(data: bytes) -> DtexImage:
    """Decode a DTEX file held in memory."""
    data = bytes(data)
    if len(data) < _HEADER.size:
        raise DtexError(f"DTEX header needs {_HEADER.size} bytes, got {len(data)}")
    _ident, width, height, kind, size = _HEADER.unpack_from(data)

    color_format = (kind >> _FORMAT_SHIFT) & _FORMAT_MASK
    if color_format not in _FORMAT_NAMES:
        raise DtexError(f"invalid texture format {kind}")

    pixels = data[_HEADER.size:_HEADER.size + size]
    if len(pixels) != size:
        raise DtexError(f"DTEX data truncated: wanted {size} bytes, got {len(pixels)}")

    return DtexImage(
        width=width,
        height=height,
        color_format=color_format,
        compressed=bool(kind & _COMPRESSED_BIT),
        twiddled=not kind & _NOT_TWIDDLED_BIT,
        mipmapped=bool(kind & _MIPMAPPED_BIT),
        data=pixels,
    )


def read_dtex(path: PathLike) -> DtexImage:
    """Read and decode a DTEX file."""
    with open(path, "rb") as stream:
        return parse_dtex(stream.read())


def texture_candidates(base_path: str, model_texture_name: str, index: int) -> list[str]:
    """Paths tried, in order, for the texture with the given id.

    The stem is the file name of ``model_texture_name`` cut at its first
    ``0``.  First ``<stem><index>.tex`` is tried, then for id 0 the file
    name itself, then the generic ``texture<index>.tex``.
    """
    base_name = model_texture_name.rsplit("/", 1)[-1]
    stem = base_name[:MAX_BASE_NAME].split("0", 1)[0]

    paths = [f"{base_path}/{stem}{index}.tex"]
    if index == 0:
        paths.append(f"{base_path}/{base_name}")
    paths.append(f"{base_path}/texture{index}.tex")
    return list(dict.fromkeys(paths))


def resolve_textures(
    base_path: str,
    model_texture_name: str,
    count: int,
    exists: Callable[[str], bool] = os.path.isfile,
) -> list[Optional[str]]:
    """Pick a file for each texture id, or None where no candidate exists."""
    if count < 0:
        raise ValueError(f"texture count must not be negative, got {count}")
    return [
        next(
            (path for path in texture_candidates(base_path, model_texture_name, index)
             if exists(path)),
            None,
        )
        for index in range(count)
    ]