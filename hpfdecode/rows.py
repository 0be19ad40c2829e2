"""Turn decoded data chunks into text rows, with optional downsampling.

Downsampling is by global sample index: with factor k, sample g is kept
when g % k == 0, so sample 0 is always kept and chunk boundaries do not
change which samples survive.
"""

from __future__ import annotations

from typing import Iterator

import numpy as np

from hpfdecode.config import ExportConfig
from hpfdecode.reassemble import DataChunk
from hpfdecode.session import Session

DATA_LINE_COLUMN = "data_line"

CHANNEL_TABLE_HEADERS = [
    "ChannelName",
    "ChannelNumber",
    "Units",
    "DataType",
    "RangeMin",
    "RangeMax",
    "DataScale",
    "DataOffset",
    "SensorScale",
    "SensorOffset",
]


def format_value(value: float) -> str:
    """15 significant digits, so values survive a text round trip."""
    return f"{value:.15g}"


def kept_positions(start: int, count: int, factor: int) -> np.ndarray:
    """Positions within a chunk whose global index start + i is kept."""
    first = (-start) % factor
    return np.arange(first, count, factor)


class RowEmitter:
    """Builds header and data rows for one session.

    Args:
        session: Session whose channel table is used for conversion.
        config: Export settings.
    """

    def __init__(self, session: Session, config: ExportConfig | None = None) -> None:
        self.session = session
        self.config = config or ExportConfig()
        self.rows_emitted = 0

    def preamble_rows(self) -> list[list[str]]:
        """Recording date, channel summary, downsample factor and channel table."""
        session = self.session
        channels = session.channels
        recording_date = session.metadata.recording_date if session.metadata else ""
        rate = format_value(channels[0].sample_rate_hz) if channels else ""

        rows = [
            ["RecordingDate", recording_date],
            ["ChannelsRecorded", str(len(channels))],
            ["PerChannelSampleRate", rate],
            ["DownsampleCount", str(self.config.downsample)],
            [],
            list(CHANNEL_TABLE_HEADERS),
        ]
        for c in channels:
            rows.append([
                c.name,
                str(c.index),
                c.unit,
                c.sample_type.value,
                str(c.range_min),
                str(c.range_max),
                format_value(c.scale),
                format_value(c.offset),
                format_value(c.sensor_scale),
                format_value(c.sensor_offset),
            ])
        rows.append([])
        return rows

    def column_names(self) -> list[str]:
        names = [c.name for c in self.session.channels]
        if self.config.include_data_line:
            names.insert(0, DATA_LINE_COLUMN)
        return names

    def header_rows(self) -> list[list[str]]:
        """Rows written once before any data row."""
        rows = self.preamble_rows() if self.config.include_preamble else []
        rows.append(self.column_names())
        return rows

    def rows(self, data: DataChunk, start: int) -> Iterator[list[str]]:
        """Yield kept rows of a data chunk whose first sample has global index ``start``."""
        channels = self.session.channels
        keep = kept_positions(start, data.sample_count, self.config.downsample)
        if len(keep) == 0:
            return

        columns = [
            channel.to_physical(raw[keep]).tolist()
            for channel, raw in zip(channels, data.samples)
        ]
        line_numbers = (keep + start + 1).tolist()
        for i, line in enumerate(line_numbers):
            row = [format_value(col[i]) for col in columns]
            if self.config.include_data_line:
                row.insert(0, str(line))
            self.rows_emitted += 1
            yield row
