import struct

import pytest

from dmsmodel.textures import (
    DtexError,
    DtexImage,
    PixelFormat,
    parse_dtex,
    read_dtex,
    resolve_textures,
    texture_candidates,
)


def make_dtex(width, height, kind, payload, size=None):
    if size is None:
        size = len(payload)
    return struct.pack("<4sHHII", b"DTEX", width, height, kind, size) + payload


def kind_word(fmt, compressed=False, twiddled=True, mipmapped=False):
    word = fmt << 27
    if compressed:
        word |= 1 << 30
    if not twiddled:
        word |= 1 << 26
    if mipmapped:
        word |= 1 << 31
    return word


def test_parse_uncompressed_rgb565():
    payload = bytes(range(32))
    image = parse_dtex(make_dtex(4, 4, kind_word(1), payload))
    assert image.width == 4
    assert image.height == 4
    assert image.data == payload
    assert image.compressed is False
    assert image.twiddled is True
    assert image.mipmapped is False
    assert image.description == "Uncompressed - RGB 565"
    assert image.pixel_format() is PixelFormat.UNCOMPRESSED_R5G6B5


def test_parse_flags():
    image = parse_dtex(make_dtex(8, 8, kind_word(0, compressed=True, twiddled=False), b"ab"))
    assert image.compressed is True
    assert image.twiddled is False
    assert image.description == "Compressed - ARGB 1555"
    assert image.pixel_format() is PixelFormat.UNCOMPRESSED_R5G5B5A1


def test_compressed_twiddled_description():
    image = parse_dtex(make_dtex(8, 8, kind_word(2, compressed=True), b"x"))
    assert image.description == "Compressed & Twiddled - ARGB 4444"
    assert image.pixel_format() is PixelFormat.UNCOMPRESSED_R4G4B4A4


def test_compressed_mipmapped_falls_back_to_rgba():
    image = parse_dtex(make_dtex(8, 8, kind_word(1, compressed=True, mipmapped=True), b"x"))
    assert image.mipmapped is True
    assert image.pixel_format() is PixelFormat.UNCOMPRESSED_R8G8B8A8


def test_uncompressed_mipmapped_keeps_format():
    image = parse_dtex(make_dtex(8, 8, kind_word(2, mipmapped=True), b"x"))
    assert image.pixel_format() is PixelFormat.UNCOMPRESSED_R4G4B4A4


@pytest.mark.parametrize("fmt", [3, 4, 7])
def test_invalid_format(fmt):
    with pytest.raises(DtexError):
        parse_dtex(make_dtex(2, 2, kind_word(fmt), b""))


def test_short_header():
    with pytest.raises(DtexError):
        parse_dtex(b"DTEX\x01\x00")


def test_truncated_data():
    with pytest.raises(DtexError):
        parse_dtex(make_dtex(2, 2, kind_word(1), b"abc", size=8))


def test_trailing_bytes_ignored():
    image = parse_dtex(make_dtex(2, 2, kind_word(1), b"abcdef", size=4))
    assert image.data == b"abcd"


def test_read_dtex(tmp_path):
    path = tmp_path / "ball0.tex"
    payload = b"\x01\x02" * 8
    path.write_bytes(make_dtex(4, 2, kind_word(1), payload))
    image = read_dtex(path)
    assert isinstance(image, DtexImage)
    assert (image.width, image.height) == (4, 2)
    assert image.data == payload


def test_read_dtex_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_dtex(tmp_path / "missing.tex")


def test_candidates_first_texture():
    assert texture_candidates("/rd", "/rd/ball0.tex", 0) == [
        "/rd/ball0.tex",
        "/rd/texture0.tex",
    ]


def test_candidates_later_texture():
    assert texture_candidates("/rd", "/rd/texture0.tex", 1) == ["/rd/texture1.tex"]


def test_candidates_without_path_or_zero():
    paths = texture_candidates("/rd", "skin.tex", 0)
    assert paths[0] == "/rd/skin.tex0.tex"
    assert "/rd/skin.tex" in paths
    assert paths[-1] == "/rd/texture0.tex"


def test_resolve_prefers_first_candidate():
    available = {"/rd/ball0.tex", "/rd/texture0.tex", "/rd/texture1.tex"}
    result = resolve_textures("/rd", "/rd/ball0.tex", 3, available.__contains__)
    assert result == ["/rd/ball0.tex", "/rd/texture1.tex", None]


def test_resolve_none_available():
    assert resolve_textures("/rd", "/rd/ball0.tex", 2, lambda path: False) == [None, None]


def test_resolve_zero_count():
    assert resolve_textures("/rd", "/rd/ball0.tex", 0, lambda path: True) == []


def test_resolve_negative_count():
    with pytest.raises(ValueError):
        resolve_textures("/rd", "/rd/ball0.tex", -1, lambda path: True)


def test_resolve_on_disk(tmp_path):
    (tmp_path / "ball1.tex").write_bytes(b"")
    base = str(tmp_path)
    result = resolve_textures(base, "ball0.tex", 2)
    assert result == [None, f"{base}/ball1.tex"]