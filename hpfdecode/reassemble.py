"""Split a data chunk's payload into per-channel sample arrays."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from hpfdecode.errors import MalformedChunkError
from hpfdecode.storage.chunk import Chunk
from hpfdecode.utils.schema import DataChunkLayout


@dataclass
class DataChunk:
    """A decoded data chunk: its layout and one raw array per channel."""

    layout: DataChunkLayout
    samples: list[np.ndarray] = field(default_factory=list)

    @property
    def sample_count(self) -> int:
        return self.layout.sample_count

    @property
    def data_start_index(self) -> int:
        return self.layout.data_start_index


def reassemble(chunk: Chunk, layout: DataChunkLayout) -> list[np.ndarray]:
    """Extract each channel's samples, in channel index order.

    Each channel's samples are contiguous at ``offset_bytes`` from the chunk
    start. The returned arrays are copies and do not reference the chunk.
    """
    arrays = []
    expected = layout.sample_count
    for s in layout.slices:
        width = s.sample_type.width
        if s.length_bytes % width:
            raise MalformedChunkError(
                f"channel {s.index} length {s.length_bytes} is not a multiple "
                f"of its {width}-byte sample width"
            )
        if s.sample_count != expected:
            raise MalformedChunkError(
                f"channel {s.index} carries {s.sample_count} samples, "
                f"channel 0 carries {expected}"
            )
        arrays.append(
            chunk.array(s.offset_bytes, s.sample_type.dtype, s.sample_count, what=f"channel {s.index} samples")
        )
    return arrays
