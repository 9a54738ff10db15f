import zlib

import pytest

from veekay.chunks import (
    Chunk,
    ChunkError,
    chunk_info,
    chunks_by_location,
    insert_chunks,
    iter_chunks,
    make_chunk,
    palette_value,
)

SIGNATURE = b"\x89PNG\r\n\x1a\n"
IHDR_DATA = bytes(13)
PLTE_DATA = bytes(range(6))
IDAT_DATA = b"pixels"


def build_png(*parts: bytes) -> bytes:
    return SIGNATURE + b"".join(parts)


@pytest.fixture
def plain_png() -> bytes:
    return build_png(
        make_chunk("IHDR", IHDR_DATA),
        make_chunk("IDAT", IDAT_DATA),
        make_chunk("IEND", b""),
    )


@pytest.fixture
def palette_png() -> bytes:
    return build_png(
        make_chunk("IHDR", IHDR_DATA),
        make_chunk("PLTE", PLTE_DATA),
        make_chunk("IDAT", IDAT_DATA),
        make_chunk("IEND", b""),
    )


def names(png: bytes) -> list[str]:
    return [chunk.name for chunk in iter_chunks(png)]


def test_make_chunk_iend_matches_format():
    assert make_chunk("IEND", b"") == bytes.fromhex("0000000049454e44ae426082")


def test_make_chunk_accepts_bytes_name():
    assert make_chunk(b"tEXt", b"a") == make_chunk("tEXt", b"a")


@pytest.mark.parametrize("name", ["IHD", "IHDRX", "IH\0R"])
def test_make_chunk_rejects_bad_names(name):
    with pytest.raises(ChunkError):
        make_chunk(name, b"")


def test_iter_chunks_order(palette_png):
    assert names(palette_png) == ["IHDR", "PLTE", "IDAT", "IEND"]


def test_iter_chunks_fields(plain_png):
    chunks = list(iter_chunks(plain_png))
    idat = chunks[1]
    assert isinstance(idat, Chunk)
    assert idat.data == IDAT_DATA
    assert idat.length == len(IDAT_DATA)
    assert idat.offset == 8 + 12 + len(IHDR_DATA)
    assert idat.crc == zlib.crc32(b"IDAT" + IDAT_DATA)
    assert idat.crc_ok


def test_chunks_cover_whole_file(palette_png):
    chunks = list(iter_chunks(palette_png))
    assert SIGNATURE + b"".join(c.raw for c in chunks) == palette_png
    assert chunks[-1].end == len(palette_png)


def test_truncated_chunk_has_no_crc(plain_png):
    cut = plain_png[:-2]
    last = list(iter_chunks(cut))[-1]
    assert last.name == "IEND"
    assert last.crc is None
    assert not last.crc_ok


def test_corrupted_crc_detected(plain_png):
    damaged = bytearray(plain_png)
    damaged[8 + 8] ^= 0xFF
    first = next(iter_chunks(bytes(damaged)))
    assert not first.crc_ok


def test_iter_chunks_rejects_zero_in_name():
    png = build_png(b"\x00\x00\x00\x00AB\x00D" + bytes(4))
    with pytest.raises(ChunkError):
        list(iter_chunks(png))


def test_iter_chunks_empty_file():
    assert list(iter_chunks(b"")) == []


def test_chunk_info(palette_png):
    assert chunk_info(palette_png) == [
        ("IHDR", len(IHDR_DATA)),
        ("PLTE", len(PLTE_DATA)),
        ("IDAT", len(IDAT_DATA)),
        ("IEND", 0),
    ]


def test_chunks_by_location_groups():
    png = build_png(
        make_chunk("IHDR", IHDR_DATA),
        make_chunk("gAMA", b"1234"),
        make_chunk("PLTE", PLTE_DATA),
        make_chunk("tRNS", b"\x00"),
        make_chunk("IDAT", IDAT_DATA),
        make_chunk("tEXt", b"k\0v"),
        make_chunk("IEND", b""),
        make_chunk("zzZz", b"after"),
    )
    first, second, third = chunks_by_location(png)
    assert [c.name for c in first] == ["gAMA"]
    assert [c.name for c in second] == ["tRNS"]
    assert [c.name for c in third] == ["tEXt"]
    assert third[0].raw == make_chunk("tEXt", b"k\0v")


def test_chunks_by_location_none(palette_png):
    assert chunks_by_location(palette_png) == ([], [], [])


def test_chunks_by_location_last_ancillary_errors():
    png = build_png(make_chunk("IHDR", IHDR_DATA), make_chunk("tEXt", b"x"))
    with pytest.raises(ChunkError):
        chunks_by_location(png)


def test_insert_chunks_with_palette(palette_png):
    a, b, c = make_chunk("aaaa", b"1"), make_chunk("bbbb", b"2"), make_chunk("cccc", b"3")
    result = insert_chunks(palette_png, [[a], [b], [c]])
    assert names(result) == ["IHDR", "aaaa", "PLTE", "bbbb", "IDAT", "cccc", "IEND"]
    assert all(chunk.crc_ok for chunk in iter_chunks(result))


def test_insert_chunks_without_palette(plain_png):
    a, b, c = make_chunk("aaaa", b"1"), make_chunk("bbbb", b"2"), make_chunk("cccc", b"3")
    result = insert_chunks(plain_png, [[a], [b], [c]])
    assert names(result) == ["IHDR", "aaaa", "bbbb", "IDAT", "cccc", "IEND"]


def test_insert_then_group_round_trip(palette_png):
    extra = [
        [make_chunk("gAMA", b"abcd"), make_chunk("cHRM", b"xy")],
        [make_chunk("tRNS", b"\x01")],
        [make_chunk("tEXt", b"k\0v")],
    ]
    result = insert_chunks(palette_png, extra)
    groups = chunks_by_location(result)
    assert [[c.raw for c in group] for group in groups] == extra


def test_insert_nothing_keeps_file(palette_png):
    assert insert_chunks(palette_png, [[], [], []]) == palette_png


def test_insert_chunks_needs_idat():
    png = build_png(make_chunk("IHDR", IHDR_DATA), make_chunk("IEND", b""))
    with pytest.raises(ChunkError):
        insert_chunks(png, [[], [], []])


def test_insert_chunks_needs_iend():
    png = build_png(make_chunk("IHDR", IHDR_DATA), make_chunk("IDAT", IDAT_DATA))
    with pytest.raises(ChunkError):
        insert_chunks(png, [[], [], []])


def test_insert_chunks_needs_three_locations(plain_png):
    with pytest.raises(ValueError):
        insert_chunks(plain_png, [[], []])


def test_palette_value_eight_bits():
    data = bytes([7, 200, 33])
    assert [palette_value(data, i, 8) for i in range(3)] == [7, 200, 33]


def test_palette_value_four_bits():
    data = bytes([0x3A])
    assert palette_value(data, 0, 4) == 0xA
    assert palette_value(data, 1, 4) == 0x3


def test_palette_value_two_bits():
    data = bytes([0b11_10_01_00])
    assert [palette_value(data, i, 2) for i in range(4)] == [0, 1, 2, 3]


def test_palette_value_one_bit():
    data = bytes([0b00000101, 0b10000000])
    assert [palette_value(data, i, 1) for i in range(3)] == [1, 0, 1]
    assert palette_value(data, 15, 1) == 1


def test_palette_value_unsupported_depth():
    assert palette_value(bytes([255]), 0, 3) == 0