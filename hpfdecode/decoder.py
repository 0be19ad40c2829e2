"""Decoder and HPFFile: the main interfaces for reading .hpf recordings.

Usage:
    from hpfdecode import HPFFile

    with HPFFile("recording.hpf") as h:
        h.scan()
        print(h)                 # Summary
        print(h.channel_names)   # ['AIN0', 'AIN1', ...]
        print(h.num_samples)     # samples per channel across the file

    # Stream rows, keeping every 1000th sample
    from hpfdecode import ExportConfig
    with HPFFile("recording.hpf", ExportConfig(downsample=1000)) as h:
        for row in h.rows():
            ...
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, BinaryIO, Iterator

from hpfdecode.config import ExportConfig
from hpfdecode.errors import HPFError
from hpfdecode.interpret import commit, interpret
from hpfdecode.rows import RowEmitter
from hpfdecode.session import Session
from hpfdecode.storage.chunk import Chunk
from hpfdecode.storage.format import ChunkKind
from hpfdecode.storage.reader import ByteSource, ChunkReader
from hpfdecode.utils.schema import (
    ChannelDescriptor,
    Event,
    EventDefinition,
    IndexEntry,
    RecordingMetadata,
)

logger = logging.getLogger(__name__)


class Decoder:
    """Pull-driven decoding pipeline for one byte source.

    Chunks are read, interpreted and committed one at a time. Any
    HPFError stops decoding; it is annotated with the kind and offset of
    the chunk being handled.

    Args:
        source: Byte source or seekable binary stream positioned at the first chunk.
        config: Export settings. Defaults to ExportConfig().
    """

    def __init__(self, source: ByteSource | BinaryIO, config: ExportConfig | None = None) -> None:
        if not isinstance(source, ByteSource):
            source = ByteSource(source)
        self.config = config or ExportConfig()
        self.session = Session()
        self.reader = ChunkReader(source, max_chunk_size=self.config.max_chunk_size)
        self.emitter = RowEmitter(self.session, self.config)

    def _next(self) -> Chunk | None:
        try:
            return self.reader.next_chunk()
        except HPFError as e:
            raise e.locate(None, self.reader.source.tell())

    def chunks(self) -> Iterator[tuple[Chunk, Any]]:
        """Yield (chunk, interpreted value) after committing each chunk.

        Raises MissingChunkError at end of stream if the header or
        channel-info chunk never appeared.
        """
        while True:
            chunk = self._next()
            if chunk is None:
                break
            try:
                value = interpret(chunk, self.session)
                commit(chunk.kind, value, self.session)
            except HPFError as e:
                raise e.locate(chunk.kind.label, chunk.offset)
            yield chunk, value

        self.session.check_complete()
        logger.info(
            "decoded %d chunks, %d samples per channel",
            self.reader.chunks_read, self.session.samples_seen,
        )

    def rows(self) -> Iterator[list[str]]:
        """Yield header rows once, then one row per kept sample."""
        header_done = False
        for chunk, value in self.chunks():
            if chunk.kind is not ChunkKind.DATA:
                continue
            if not header_done:
                yield from self.emitter.header_rows()
                header_done = True
            start = self.session.samples_seen - value.sample_count
            yield from self.emitter.rows(value, start)

        if not header_done:
            yield from self.emitter.header_rows()

    @property
    def rows_emitted(self) -> int:
        return self.emitter.rows_emitted


class HPFFile:
    """Read-only view of an .hpf recording.

    Provides metadata, channel table, events and index after scan(),
    and row streaming through rows().

    Args:
        path: Path to an .hpf file.
        config: Export settings used by rows().
    """

    def __init__(self, path: str | Path, config: ExportConfig | None = None) -> None:
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Recording not found: {self.path}")
        self.config = config or ExportConfig()
        self._source: ByteSource | None = None
        self._session: Session | None = None
        self._chunks: list[tuple[ChunkKind, int, int]] = []

    def open(self) -> None:
        """Open the file for reading."""
        self._source = ByteSource.open(self.path)

    def close(self) -> None:
        """Close the file."""
        if self._source is not None:
            self._source.close()
            self._source = None

    def __enter__(self) -> HPFFile:
        self.open()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _decoder(self) -> Decoder:
        if self._source is None:
            raise RuntimeError("HPFFile not opened. Call .open() first.")
        self._source.seek(0)
        decoder = Decoder(self._source, self.config)
        self._session = decoder.session
        return decoder

    # --- Decoding ---

    def scan(self) -> HPFFile:
        """Walk every chunk, collecting metadata without producing rows."""
        decoder = self._decoder()
        self._chunks = [(chunk.kind, chunk.offset, chunk.size) for chunk, _ in decoder.chunks()]
        return self

    def rows(self) -> Iterator[list[str]]:
        """Stream header and data rows using this file's config."""
        return self._decoder().rows()

    # --- Properties ---

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError("HPFFile not scanned. Call .scan() first.")
        return self._session

    @property
    def metadata(self) -> RecordingMetadata:
        assert self.session.metadata is not None
        return self.session.metadata

    @property
    def channels(self) -> list[ChannelDescriptor]:
        return self.session.channels

    @property
    def channel_names(self) -> list[str]:
        return [c.name for c in self.channels]

    @property
    def event_definitions(self) -> list[EventDefinition]:
        return self.session.event_definitions or []

    @property
    def events(self) -> list[Event]:
        return self.session.events

    @property
    def index(self) -> list[IndexEntry]:
        return self.session.index

    @property
    def chunk_list(self) -> list[tuple[ChunkKind, int, int]]:
        """(kind, offset, size) of every chunk seen by scan()."""
        return self._chunks

    @property
    def chunk_counts(self) -> dict[str, int]:
        return {kind.label: n for kind, n in sorted(self.session.chunk_counts.items())}

    @property
    def num_samples(self) -> int:
        """Samples per channel across the whole file."""
        return self.session.samples_seen

    # --- Display ---

    def summary(self) -> str:
        """Generate a human-readable summary string."""
        meta = self.metadata
        lines = []
        lines.append(f"Recording: {self.path.name}")
        lines.append(f"Creator: {meta.creator_id}  version {meta.file_version}")
        lines.append(f"Recorded: {meta.recording_date or '(unset)'}")
        lines.append(f"Samples: {self.num_samples}")
        lines.append(f"Channels: {', '.join(self.channel_names)}")
        for c in self.channels:
            lines.append(
                f"  [{c.index}] {c.name} ({c.unit}) {c.sample_type.value} "
                f"scale={c.scale:g} offset={c.offset:g} rate={c.sample_rate_hz:g}Hz"
            )
        if self.event_definitions:
            lines.append(f"Event definitions: {len(self.event_definitions)}")
        if self.events:
            lines.append(f"Events: {len(self.events)}")
        if self.index:
            lines.append(f"Index entries: {len(self.index)}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        if self._session is None:
            return f"HPFFile(path='{self.path}')"
        return (
            f"HPFFile(path='{self.path}', channels={self.channel_names}, "
            f"samples={self.num_samples})"
        )

    def __str__(self) -> str:
        return self.summary()
