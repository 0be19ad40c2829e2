"""Cross-chunk decoding state for one HPF file.

Header and channel-info chunks are committed once each; every later data
chunk reads the channel table without changing it. Values are committed
only after a chunk has been fully interpreted, and duplicate checks run
before any field is touched, so a failed chunk leaves the session as it was.
"""

from __future__ import annotations

from collections import Counter

from hpfdecode.errors import DuplicateChunkError, MissingChunkError
from hpfdecode.storage.format import ChunkKind
from hpfdecode.utils.schema import (
    ChannelDescriptor,
    ChannelInfo,
    Event,
    EventDefinition,
    IndexEntry,
    RecordingMetadata,
)


class Session:
    """Decoding state for a single file."""

    def __init__(self) -> None:
        self.metadata: RecordingMetadata | None = None
        self.channel_info: ChannelInfo | None = None
        self.event_definitions: list[EventDefinition] | None = None
        self.events: list[Event] = []
        self.index: list[IndexEntry] = []
        self.chunk_counts: Counter[ChunkKind] = Counter()
        self.samples_seen = 0  # global sample counter, never reset per chunk

    # --- Commit ---

    def set_metadata(self, metadata: RecordingMetadata) -> None:
        if self.metadata is not None:
            raise DuplicateChunkError("second header chunk")
        self.metadata = metadata

    def set_channel_info(self, info: ChannelInfo) -> None:
        if self.channel_info is not None:
            raise DuplicateChunkError(
                f"second channel-info chunk (group {info.group_id}); "
                f"group {self.channel_info.group_id} already declared"
            )
        self.channel_info = info

    def set_event_definitions(self, definitions: list[EventDefinition]) -> None:
        if self.event_definitions is not None:
            raise DuplicateChunkError("second event-definition chunk")
        self.event_definitions = definitions

    def add_events(self, events: list[Event]) -> None:
        self.events.extend(events)

    def add_index_entries(self, entries: list[IndexEntry]) -> None:
        """Append entries, numbering them after those already held."""
        base = len(self.index)
        for i, entry in enumerate(entries):
            entry.position = base + i
        self.index.extend(entries)

    def advance(self, samples: int) -> None:
        self.samples_seen += samples

    def count(self, kind: ChunkKind) -> None:
        self.chunk_counts[kind] += 1

    # --- Read ---

    def require_channels(self) -> ChannelInfo:
        if self.channel_info is None:
            raise MissingChunkError("data chunk precedes the channel-info chunk")
        return self.channel_info

    @property
    def channels(self) -> list[ChannelDescriptor]:
        if self.channel_info is None:
            return []
        return self.channel_info.channels

    def check_complete(self) -> None:
        """Raise unless both single-valued chunks were seen."""
        if self.metadata is None:
            raise MissingChunkError("file has no header chunk")
        if self.channel_info is None:
            raise MissingChunkError("file has no channel-info chunk")

    def __repr__(self) -> str:
        return (
            f"Session(channels={len(self.channels)}, samples={self.samples_seen}, "
            f"events={len(self.events)}, index={len(self.index)})"
        )
