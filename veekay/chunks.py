"""Listing, grouping and inserting the chunks of a PNG file.

A chunk on disk is a 4-byte big-endian length, a 4-byte type name, the data
and a 4-byte CRC of the type and data. The chunk functions here work on the
raw file bytes, skipping the 8-byte signature at the start.
"""

from __future__ import annotations

import zlib
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

SIGNATURE_SIZE = 8

_CRITICAL_LOCATIONS = {"IHDR": 0, "PLTE": 1, "IDAT": 2}


class ChunkError(ValueError):
    """Raised when the chunk structure of a PNG file is broken."""


@dataclass(frozen=True)
class Chunk:
    """One chunk as found in a PNG file; ``raw`` may be cut short at the file end."""

    name: str
    offset: int
    length: int
    raw: bytes

    @property
    def end(self) -> int:
        """Offset in the file just past the bytes of this chunk."""
        return self.offset + len(self.raw)

    @property
    def data(self) -> bytes:
        return self.raw[8 : 8 + self.length]

    @property
    def crc(self) -> int | None:
        """The stored CRC, or None when the chunk is truncated."""
        start = 8 + self.length
        if len(self.raw) < start + 4:
            return None
        return int.from_bytes(self.raw[start : start + 4], "big")

    @property
    def crc_ok(self) -> bool:
        """Whether the stored CRC matches the chunk's type and data."""
        return self.crc == zlib.crc32(self.raw[4 : 8 + self.length])


def _name_bytes(name: str | bytes) -> bytes:
    raw = name.encode("latin-1") if isinstance(name, str) else bytes(name)
    if len(raw) != 4 or 0 in raw:
        raise ChunkError(f"chunk name must be four non-zero bytes, got {name!r}")
    return raw


def make_chunk(name: str | bytes, data: bytes) -> bytes:
    """Encode a complete chunk: length, name, data and CRC."""
    raw_name = _name_bytes(name)
    data = bytes(data)
    if len(data) > 0x7FFFFFFF:
        raise ChunkError("chunk data is too long")
    crc = zlib.crc32(raw_name + data)
    return len(data).to_bytes(4, "big") + raw_name + data + crc.to_bytes(4, "big")


def iter_chunks(png: bytes) -> Iterator[Chunk]:
    """Yield the chunks of a PNG file in order, after its signature."""
    png = bytes(png)
    end = len(png)
    pos = SIGNATURE_SIZE
    while pos < end and end - pos >= 8:
        raw_name = png[pos + 4 : pos + 8]
        if 0 in raw_name:
            raise ChunkError(f"invalid chunk name at offset {pos}")
        length = int.from_bytes(png[pos : pos + 4], "big")
        next_pos = min(pos + length + 12, end)
        yield Chunk(raw_name.decode("latin-1"), pos, length, png[pos:next_pos])
        pos = next_pos


def chunk_info(png: bytes) -> list[tuple[str, int]]:
    """Names and data lengths of all chunks in the file, in order."""
    return [(chunk.name, chunk.length) for chunk in iter_chunks(png)]


def chunks_by_location(png: bytes) -> tuple[list[Chunk], list[Chunk], list[Chunk]]:
    """Group the non-critical chunks by where they sit between critical ones.

    The three lists hold the chunks found between IHDR and PLTE, between PLTE
    and IDAT, and between IDAT and IEND. Anything after IEND is ignored.
    """
    png = bytes(png)
    groups: tuple[list[Chunk], list[Chunk], list[Chunk]] = ([], [], [])
    location = 0
    for chunk in iter_chunks(png):
        if chunk.name == "IEND":
            break
        if chunk.name in _CRITICAL_LOCATIONS:
            location = _CRITICAL_LOCATIONS[chunk.name]
            continue
        if chunk.end >= len(png):
            raise ChunkError(f"chunk {chunk.name} runs to the end of the file")
        groups[location].append(chunk)
    return groups


def insert_chunks(png: bytes, chunks: Sequence[Iterable[bytes]]) -> bytes:
    """Return the file with encoded chunks added at three locations.

    ``chunks[0]`` goes after IHDR (before PLTE or IDAT), ``chunks[1]`` before
    the first IDAT and ``chunks[2]`` before IEND; each is appended at the end
    of its location.
    """
    if len(chunks) != 3:
        raise ValueError("chunks must give exactly three locations")
    png = bytes(png)
    before_plte: int | None = None
    before_idat: int | None = None
    before_iend: int | None = None
    for chunk in iter_chunks(png):
        if chunk.name == "PLTE":
            if before_plte is None:
                before_plte = chunk.offset
        elif chunk.name == "IDAT":
            if before_plte is None:
                before_plte = chunk.offset
            if before_idat is None:
                before_idat = chunk.offset
        elif chunk.name == "IEND":
            if before_iend is None:
                before_iend = chunk.offset
    if before_plte is None or before_idat is None:
        raise ChunkError("file has no IDAT chunk")
    if before_iend is None:
        raise ChunkError("file has no IEND chunk")

    first, second, third = (b"".join(bytes(c) for c in group) for group in chunks)
    return b"".join(
        (
            png[:before_plte],
            first,
            png[before_plte:before_idat],
            second,
            png[before_idat:before_iend],
            third,
            png[before_iend:],
        )
    )


def palette_value(data: bytes, index: int, bits: int) -> int:
    """Value of the ``index``-th pixel of packed 1, 2, 4 or 8-bit data; 0 for other depths."""
    if bits == 8:
        return data[index]
    if bits == 4:
        return (data[index // 2] >> ((index % 2) * 4)) & 15
    if bits == 2:
        return (data[index // 4] >> ((index % 4) * 2)) & 3
    if bits == 1:
        return (data[index // 8] >> (index % 8)) & 1
    return 0