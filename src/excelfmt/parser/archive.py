"""Forward-only reader for ZIP local file headers.

The reader walks the byte stream from offset zero, one local file header at a
time, and stops at the first position that does not carry the local header
signature. That is normally where the central directory begins; the central
directory itself is never consulted.

Header layout (little endian, 30 bytes)::

    signature  version  flags  method  mtime  mdate  crc32  csize  usize  nlen  xlen
    I          H        H      H       H      H      I      I      I      H     H

Sizes are taken from the local header as declared. A header whose sizes are
wrong (for instance an entry streamed with a trailing data descriptor) shifts
every subsequent read, and the scan simply ends early.
"""

from __future__ import annotations

import logging
import struct
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from ..errors import ArchiveEntryNotFound, DecompressionFailed

logger = logging.getLogger(__name__)

LOCAL_HEADER_SIGNATURE = 0x04034B50
LOCAL_HEADER = struct.Struct("<IHHHHHIIIHH")

METHOD_STORED = 0
METHOD_DEFLATED = 8

FLAG_ENCRYPTED = 0x0001
FLAG_DATA_DESCRIPTOR = 0x0008
FLAG_UTF8 = 0x0800


@dataclass(slots=True)
class ArchiveEntry:
    name: str
    method: int = METHOD_STORED
    flags: int = 0
    crc32: int = 0
    compressed: bytes = b""
    uncompressed_size: int = 0
    is_valid: bool = True
    _data: bytes | None = field(default=None, init=False, repr=False, compare=False)
    _error: DecompressionFailed | None = field(default=None, init=False, repr=False, compare=False)

    @property
    def content(self) -> bytes | None:
        """Inflated payload, or ``None`` when the entry cannot be decompressed."""
        if self._data is None and self._error is None:
            try:
                self.read()
            except DecompressionFailed as exc:
                logger.warning("%s", exc)
        return self._data

    def read(self) -> bytes:
        if self._error is not None:
            raise self._error
        if self._data is None:
            try:
                self._data = self._decompress()
            except DecompressionFailed as exc:
                self._error = exc
                raise
        return self._data

    def _decompress(self) -> bytes:
        if self.flags & FLAG_ENCRYPTED:
            raise DecompressionFailed(self.name, "encrypted entries are not supported")

        if self.method == METHOD_STORED:
            data = self.compressed
        elif self.method == METHOD_DEFLATED:
            data = _inflate(self.name, self.compressed)
        else:
            raise DecompressionFailed(self.name, f"unsupported compression method {self.method}")

        # A zero CRC field means the writer left it unset.
        if self.crc32 and not self.flags & FLAG_DATA_DESCRIPTOR and zlib.crc32(data) != self.crc32:
            raise DecompressionFailed(self.name, "CRC-32 mismatch")
        return data


def _inflate(name: str, payload: bytes) -> bytes:
    inflater = zlib.decompressobj(-zlib.MAX_WBITS)
    try:
        data = inflater.decompress(payload) + inflater.flush()
    except zlib.error as exc:
        raise DecompressionFailed(name, str(exc)) from exc
    if not inflater.eof:
        raise DecompressionFailed(name, "truncated deflate stream")
    return data


def _read_entry(data: bytes, offset: int) -> tuple[ArchiveEntry, int]:
    if offset + LOCAL_HEADER.size > len(data):
        return ArchiveEntry(name="", is_valid=False), offset

    (
        signature,
        _version,
        flags,
        method,
        _mtime,
        _mdate,
        crc32,
        compressed_size,
        uncompressed_size,
        name_length,
        extra_length,
    ) = LOCAL_HEADER.unpack_from(data, offset)
    if signature != LOCAL_HEADER_SIGNATURE:
        return ArchiveEntry(name="", is_valid=False), offset

    name_start = offset + LOCAL_HEADER.size
    raw_name = data[name_start : name_start + name_length]
    name = raw_name.decode("utf-8" if flags & FLAG_UTF8 else "cp437")
    payload_start = name_start + name_length + extra_length
    payload_end = payload_start + compressed_size

    if flags & FLAG_DATA_DESCRIPTOR:
        logger.debug("Entry %s declares a data descriptor; local sizes may be unset", name)

    entry = ArchiveEntry(
        name=name,
        method=method,
        flags=flags,
        crc32=crc32,
        compressed=data[payload_start:payload_end],
        uncompressed_size=uncompressed_size,
    )
    return entry, payload_end


def iter_entries(data: bytes) -> Iterator[ArchiveEntry]:
    """Yield archive entries in on-disk order; the terminator is never yielded."""
    offset = 0
    while True:
        entry, offset = _read_entry(data, offset)
        if not entry.is_valid:
            logger.debug("Local header scan ended at offset %d", offset)
            return
        yield entry


class ZipStreamReader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._index: dict[str, ArchiveEntry] | None = None

    @classmethod
    def from_path(cls, path: str | Path) -> ZipStreamReader:
        return cls(Path(path).read_bytes())

    def __iter__(self) -> Iterator[ArchiveEntry]:
        return iter_entries(self._data)

    def __contains__(self, name: object) -> bool:
        return name in self._entry_index()

    def entries(self) -> list[ArchiveEntry]:
        return list(self._entry_index().values())

    def namelist(self) -> list[str]:
        return list(self._entry_index())

    def get(self, name: str) -> ArchiveEntry:
        try:
            return self._entry_index()[name]
        except KeyError:
            raise ArchiveEntryNotFound(name) from None

    def read(self, name: str) -> bytes:
        return self.get(name).read()

    def _entry_index(self) -> dict[str, ArchiveEntry]:
        if self._index is None:
            index: dict[str, ArchiveEntry] = {}
            for entry in iter_entries(self._data):
                index.setdefault(entry.name, entry)
            logger.debug("Indexed %d archive entries", len(index))
            self._index = index
        return self._index
