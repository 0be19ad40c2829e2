"""Pydantic models for HPF data structures."""

from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Any

import numpy as np
from pydantic import BaseModel, Field

from hpfdecode.errors import UnsupportedFieldValueError

_TIME_PATTERN = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2}(?:\.\d+)?)$"
)
_LEADING_INT = re.compile(r"^\s*[+-]?\d+")


class RecordingTime(BaseModel):
    """Timestamp written as ``YYYY-MM-DDThh:mm:ss.fffffff``.

    Text with no leading integer, or whose leading integer is zero, means
    "unset" and leaves every component at zero. This covers the empty string
    and words such as "unset".
    """

    text: str = ""
    year: int = 0
    month: int = 0
    day: int = 0
    hour: int = 0
    minute: int = 0
    second: float = 0.0

    @classmethod
    def parse(cls, text: str, field: str = "time") -> RecordingTime:
        text = text.strip()
        lead = _LEADING_INT.match(text)
        if lead is None or int(lead.group()) == 0:
            return cls(text=text)

        m = _TIME_PATTERN.match(text)
        if m is None:
            raise UnsupportedFieldValueError(field, text, "YYYY-MM-DDThh:mm:ss.ffffff")
        year, month, day, hour, minute = (int(g) for g in m.groups()[:5])
        return cls(
            text=text,
            year=year,
            month=month,
            day=day,
            hour=hour,
            minute=minute,
            second=float(m.group(6)),
        )

    @property
    def is_set(self) -> bool:
        return self.year != 0

    def as_datetime(self) -> datetime | None:
        if not self.is_set:
            return None
        whole = int(self.second)
        micro = int(round((self.second - whole) * 1_000_000))
        if micro >= 1_000_000:
            micro = 999_999
        return datetime(self.year, self.month, self.day, self.hour, self.minute, whole, micro)

    def __str__(self) -> str:
        return self.text


class RecordingMetadata(BaseModel):
    """Contents of the header chunk."""

    creator_id: str
    file_version: int
    index_chunk_offset: int
    recording_date: str = ""
    recording_time: RecordingTime = Field(default_factory=RecordingTime)


class SampleType(str, Enum):
    """Sample encodings a channel may declare."""

    INT16 = "Int16"
    UINT16 = "UInt16"
    INT32 = "Int32"
    FLOAT32 = "Float"
    FLOAT64 = "Double"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(_SAMPLE_DTYPES[self])

    @property
    def width(self) -> int:
        return self.dtype.itemsize

    @classmethod
    def lookup(cls) -> dict[str, SampleType]:
        """Lowercase spelling to member, for case-insensitive parsing."""
        return {member.value.lower(): member for member in cls}


_SAMPLE_DTYPES = {
    SampleType.INT16: "<i2",
    SampleType.UINT16: "<u2",
    SampleType.INT32: "<i4",
    SampleType.FLOAT32: "<f4",
    SampleType.FLOAT64: "<f8",
}


class ChannelDescriptor(BaseModel):
    """One channel declared in the channel-info chunk."""

    index: int
    name: str = ""
    unit: str = ""
    channel_type: str = "RandomDataChannel"
    assigned_time_channel_index: int = 0
    sample_type: SampleType = SampleType.INT16
    start_time: RecordingTime = Field(default_factory=RecordingTime)
    time_increment: float = 0.0
    range_min: int = 0
    range_max: int = 0
    scale: float = 1.0
    offset: float = 0.0
    sensor_scale: float = 1.0
    sensor_offset: float = 0.0
    sample_rate_hz: float = 0.0
    physical_channel_number: int = 0
    uses_sensor_values: bool = False
    thermocouple_type: str = ""
    temperature_unit: str = ""
    use_thermocouple_values: bool = False

    def to_physical(self, raw: Any) -> Any:
        """Convert raw samples to physical units: raw * scale + offset."""
        if isinstance(raw, np.ndarray):
            return raw.astype(np.float64) * self.scale + self.offset
        return float(raw) * self.scale + self.offset


class ChannelInfo(BaseModel):
    """Contents of the channel-info chunk, channels ordered by index."""

    group_id: int
    channels: list[ChannelDescriptor] = Field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.channels]

    def __len__(self) -> int:
        return len(self.channels)


class ChannelSlice(BaseModel):
    """Where one channel's samples sit inside a data chunk."""

    index: int
    offset_bytes: int
    length_bytes: int
    sample_type: SampleType = SampleType.INT16

    @property
    def sample_count(self) -> int:
        return self.length_bytes // self.sample_type.width


class DataChunkLayout(BaseModel):
    """Per-chunk table of channel slices."""

    group_id: int
    data_start_index: int
    slices: list[ChannelSlice] = Field(default_factory=list)

    @property
    def sample_count(self) -> int:
        if not self.slices:
            return 0
        return self.slices[0].sample_count


class EventDefinition(BaseModel):
    """One event type declared in the event-definition chunk."""

    index: int
    name: str = ""
    description: str = ""
    event_class: int = 1
    event_id: int
    event_type: str = "Point"
    uses_idata1: bool = False
    uses_idata2: bool = False
    uses_ddata1: bool = False
    uses_ddata2: bool = False
    uses_ddata3: bool = False
    uses_ddata4: bool = False
    description_idata1: str = ""
    description_idata2: str = ""
    description_ddata1: str = ""
    description_ddata2: str = ""
    description_ddata3: str = ""
    description_ddata4: str = ""
    parameter1: str = ""
    parameter2: str = ""
    tolerance: str = ""
    uses_parameter1: bool = False
    uses_parameter2: bool = False
    uses_tolerance: bool = False
    description_parameter1: str = ""
    description_parameter2: str = ""
    description_tolerance: str = ""


class Event(BaseModel):
    """A single recorded event."""

    event_class: int
    event_id: int
    channel_index: int
    start_index: int
    end_index: int
    idata1: int = 0
    idata2: int = 0
    ddata1: float = 0.0
    ddata2: float = 0.0
    ddata3: float = 0.0
    ddata4: float = 0.0


class IndexEntry(BaseModel):
    """One entry of an index chunk."""

    position: int
    data_start_index: int
    samples_per_channel: int
    chunk_kind: int
    group_id: int
    file_offset: int
