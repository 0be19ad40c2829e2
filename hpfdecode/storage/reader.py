"""Sequential chunk reader for .hpf files.

Reads one self-delimiting chunk at a time, so memory use is bounded by the
largest chunk regardless of file size.
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import BinaryIO, Iterator

from hpfdecode.errors import (
    ChunkTooLargeError,
    MalformedChunkError,
    TruncatedChunkError,
    UnknownChunkKindError,
)
from hpfdecode.storage.chunk import Chunk
from hpfdecode.storage.format import MAX_CHUNK_SIZE, PREFIX_FORMAT, PREFIX_SIZE, ChunkKind

logger = logging.getLogger(__name__)


def _kind_label(code: int) -> str:
    """Kind label for error messages; the hex tag when the kind is unknown."""
    try:
        return ChunkKind(code).label
    except ValueError:
        return f"{code:#x}"


class ByteSource:
    """Positioned byte source over any seekable binary stream."""

    def __init__(self, stream: BinaryIO, name: str = "<stream>") -> None:
        self._stream = stream
        self.name = name
        self._owned = False

    @classmethod
    def open(cls, path: str | Path) -> ByteSource:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Recording not found: {path}")
        source = cls(open(path, "rb"), name=str(path))
        source._owned = True
        return source

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, offset: int) -> None:
        self._stream.seek(offset)

    def read(self, n: int) -> bytes:
        """Read up to n bytes; shorter only at end of stream."""
        parts = []
        remaining = n
        while remaining > 0:
            data = self._stream.read(remaining)
            if not data:
                break
            parts.append(data)
            remaining -= len(data)
        return b"".join(parts)

    def close(self) -> None:
        if self._owned:
            self._stream.close()

    def __enter__(self) -> ByteSource:
        return self

    def __exit__(self, *args) -> None:
        self.close()


class ChunkReader:
    """Reads chunks from a ByteSource until end of stream.

    Args:
        source: Byte source positioned at the first chunk.
        max_chunk_size: Largest declared chunk size accepted.
    """

    def __init__(self, source: ByteSource, max_chunk_size: int = MAX_CHUNK_SIZE) -> None:
        self.source = source
        self.max_chunk_size = max_chunk_size
        self.chunks_read = 0

    def next_chunk(self) -> Chunk | None:
        """Read the next chunk, or return None at end of stream.

        A partial prefix (fewer than 16 bytes left) is treated as end of
        stream. A complete prefix followed by a short body is an error.
        """
        start = self.source.tell()
        prefix = self.source.read(PREFIX_SIZE)
        if len(prefix) < PREFIX_SIZE:
            if prefix:
                logger.warning(
                    "%s: ignoring %d trailing bytes at offset %#x",
                    self.source.name, len(prefix), start,
                )
            return None

        kind_code, size = struct.unpack(PREFIX_FORMAT, prefix)
        label = _kind_label(kind_code)
        if size > self.max_chunk_size:
            raise ChunkTooLargeError(
                f"declared size {size:#x} exceeds maximum chunk size {self.max_chunk_size:#x}",
                offset=start,
                kind=label,
            )
        if size < PREFIX_SIZE:
            raise MalformedChunkError(
                f"declared size {size} is smaller than the {PREFIX_SIZE}-byte prefix",
                offset=start,
                kind=label,
            )

        # Re-read from the chunk start so the buffer holds the prefix too
        self.source.seek(start)
        raw = self.source.read(size)
        if len(raw) < size:
            raise TruncatedChunkError(
                f"declared size {size:#x} but only {len(raw):#x} bytes remain",
                offset=start,
                kind=label,
            )

        try:
            kind = ChunkKind(kind_code)
        except ValueError:
            raise UnknownChunkKindError(f"unknown chunk kind {kind_code:#x}", offset=start, kind=label)

        self.chunks_read += 1
        logger.debug("chunk %s at %#x size %#x", kind.label, start, size)
        return Chunk(kind=kind, offset=start, size=size, raw=raw)

    def __iter__(self) -> Iterator[Chunk]:
        while True:
            chunk = self.next_chunk()
            if chunk is None:
                return
            yield chunk
