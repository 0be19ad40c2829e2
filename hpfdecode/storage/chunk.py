"""A single chunk read from an HPF file, with bounds-checked field access."""

from __future__ import annotations

import struct
from dataclasses import dataclass

import numpy as np

from hpfdecode.errors import FieldOutOfBoundsError
from hpfdecode.storage.format import PREFIX_SIZE, ChunkKind


@dataclass(frozen=True)
class Chunk:
    """Raw bytes of one chunk.

    ``raw`` holds the whole chunk, prefix included, so offsets used by the
    accessors match the offsets written in the file format.
    """

    kind: ChunkKind
    offset: int
    size: int
    raw: bytes

    @property
    def body(self) -> bytes:
        return self.raw[PREFIX_SIZE:]

    def _check(self, offset: int, width: int, what: str) -> None:
        if offset < 0 or width < 0 or offset + width > len(self.raw):
            raise FieldOutOfBoundsError(
                f"{what} at +{offset} ({width} bytes) lies outside the "
                f"{len(self.raw)}-byte chunk"
            )

    def _unpack(self, fmt: str, offset: int, what: str) -> int | float:
        self._check(offset, struct.calcsize(fmt), what)
        return struct.unpack_from(fmt, self.raw, offset)[0]

    def int32(self, offset: int, what: str = "int32") -> int:
        return self._unpack("<i", offset, what)

    def int64(self, offset: int, what: str = "int64") -> int:
        return self._unpack("<q", offset, what)

    def fourcc(self, offset: int, what: str = "fourcc") -> str:
        self._check(offset, 4, what)
        return self.raw[offset:offset + 4].decode("latin-1")

    def cstring(self, offset: int, what: str = "string") -> str:
        """NUL-terminated text from offset to the first NUL or chunk end."""
        self._check(offset, 0, what)
        end = self.raw.find(b"\x00", offset)
        if end < 0:
            end = len(self.raw)
        return self.raw[offset:end].decode("utf-8", errors="replace")

    def array(self, offset: int, dtype: np.dtype | str | list, count: int, what: str = "array") -> np.ndarray:
        """Copy ``count`` items of ``dtype`` starting at offset."""
        dt = np.dtype(dtype)
        if count < 0:
            raise FieldOutOfBoundsError(f"{what}: negative item count {count}")
        self._check(offset, dt.itemsize * count, what)
        if count == 0:
            return np.empty(0, dtype=dt)
        return np.frombuffer(self.raw, dtype=dt, count=count, offset=offset).copy()

    def __repr__(self) -> str:
        return f"Chunk(kind={self.kind.label}, offset={self.offset:#x}, size={self.size})"
