"""Interpreters for the six HPF chunk kinds.

Each interpreter turns one chunk into a typed value and leaves the session
untouched; the decoder commits the value afterwards. Field offsets are
listed in :mod:`hpfdecode.storage.format`.

Fields the converter does not model yet are refused rather than guessed:
an unexpected channel type, data type, event class or event type raises
:class:`~hpfdecode.errors.UnsupportedFieldValueError`.
"""

from __future__ import annotations

import logging
from typing import Any

from hpfdecode.errors import (
    ChannelCountMismatchError,
    GroupMismatchError,
    MalformedChunkError,
    UnsupportedFieldValueError,
)
from hpfdecode.reassemble import DataChunk, reassemble
from hpfdecode.session import Session
from hpfdecode.storage import format as fmt
from hpfdecode.storage.chunk import Chunk
from hpfdecode.storage.format import ChunkKind
from hpfdecode.utils.records import (
    FieldTable,
    element_text,
    expect_root,
    read_record,
    repeated_children,
    to_bool,
    to_choice,
    to_float,
    to_int,
    to_text,
)
from hpfdecode.utils.schema import (
    ChannelDescriptor,
    ChannelInfo,
    ChannelSlice,
    DataChunkLayout,
    Event,
    EventDefinition,
    IndexEntry,
    RecordingMetadata,
    RecordingTime,
    SampleType,
)

logger = logging.getLogger(__name__)

SUPPORTED_SAMPLE_TYPES = (SampleType.INT16,)
SUPPORTED_EVENT_CLASSES = (1,)  # Data Translation instrument event

# --- Field converters ---


def _time(field: str, text: str) -> RecordingTime:
    return RecordingTime.parse(text, field)


def _channel_type(field: str, text: str) -> str:
    return to_choice(field, text, {"randomdatachannel": "RandomDataChannel"})


def _sample_type(field: str, text: str) -> SampleType:
    sample_type = SampleType.lookup().get(text.lower())
    if sample_type not in SUPPORTED_SAMPLE_TYPES:
        raise UnsupportedFieldValueError(
            field, text, " or ".join(t.value for t in SUPPORTED_SAMPLE_TYPES)
        )
    return sample_type


def _event_class(field: str, text: str) -> int:
    value = to_int(field, text)
    if value not in SUPPORTED_EVENT_CLASSES:
        raise UnsupportedFieldValueError(field, text, "1")
    return value


def _event_id(field: str, text: str) -> int:
    value = to_int(field, text)
    if value == 0:
        raise UnsupportedFieldValueError(field, text, "a non-zero event id")
    return value


def _event_type(field: str, text: str) -> str:
    return to_choice(field, text, {"point": "Point"})


CHANNEL_FIELDS: FieldTable = {
    "Name": ("name", to_text),
    "Unit": ("unit", to_text),
    "ChannelType": ("channel_type", _channel_type),
    "AssignedTimeChannelIndex": ("assigned_time_channel_index", to_int),
    "DataType": ("sample_type", _sample_type),
    "DataIndex": ("index", to_int),
    "StartTime": ("start_time", _time),
    "TimeIncrement": ("time_increment", to_float),
    "RangeMin": ("range_min", to_int),
    "RangeMax": ("range_max", to_int),
    "DataScale": ("scale", to_float),
    "DataOffset": ("offset", to_float),
    "SensorScale": ("sensor_scale", to_float),
    "SensorOffset": ("sensor_offset", to_float),
    "PerChannelSampleRate": ("sample_rate_hz", to_float),
    "PhysicalChannelNumber": ("physical_channel_number", to_int),
    "UsesSensorValues": ("uses_sensor_values", to_bool),
    "ThermocoupleType": ("thermocouple_type", to_text),
    "TemperatureUnit": ("temperature_unit", to_text),
    "UseThermocoupleValues": ("use_thermocouple_values", to_bool),
}

EVENT_DEFINITION_FIELDS: FieldTable = {
    "Name": ("name", to_text),
    "Description": ("description", to_text),
    "Class": ("event_class", _event_class),
    "ID": ("event_id", _event_id),
    "Type": ("event_type", _event_type),
    "UsesIData1": ("uses_idata1", to_bool),
    "UsesIData2": ("uses_idata2", to_bool),
    "UsesDData1": ("uses_ddata1", to_bool),
    "UsesDData2": ("uses_ddata2", to_bool),
    "UsesDData3": ("uses_ddata3", to_bool),
    "UsesDData4": ("uses_ddata4", to_bool),
    "DescriptionIData1": ("description_idata1", to_text),
    "DescriptionIData2": ("description_idata2", to_text),
    "DescriptionDData1": ("description_ddata1", to_text),
    "DescriptionDData2": ("description_ddata2", to_text),
    "DescriptionDData3": ("description_ddata3", to_text),
    "DescriptionDData4": ("description_ddata4", to_text),
    "Parameter1": ("parameter1", to_text),
    "Parameter2": ("parameter2", to_text),
    "Tolerance": ("tolerance", to_text),
    "UsesParameter1": ("uses_parameter1", to_bool),
    "UsesParameter2": ("uses_parameter2", to_bool),
    "UsesTolerance": ("uses_tolerance", to_bool),
    "DescriptionParameter1": ("description_parameter1", to_text),
    "DescriptionParameter2": ("description_parameter2", to_text),
    "DescriptionTolerance": ("description_tolerance", to_text),
}

# --- Interpreters ---


def interpret_header(chunk: Chunk) -> RecordingMetadata:
    """Creator id, file version, index offset and recording start time."""
    creator_id = chunk.fourcc(fmt.HEADER_CREATOR_ID, "creator id")
    file_version = chunk.int64(fmt.HEADER_FILE_VERSION, "file version")
    index_offset = chunk.int64(fmt.HEADER_INDEX_OFFSET, "index chunk offset")
    root = expect_root(chunk.cstring(fmt.HEADER_XML, "recording date record"), fmt.HEADER_ROOT)

    recording_date = element_text(root)
    metadata = RecordingMetadata(
        creator_id=creator_id,
        file_version=file_version,
        index_chunk_offset=index_offset,
        recording_date=recording_date,
        recording_time=RecordingTime.parse(recording_date, fmt.HEADER_ROOT),
    )
    logger.debug(
        "header: creator '%s' version %d index at %#x recorded %s",
        creator_id, file_version, index_offset, recording_date or "(unset)",
    )
    return metadata


def interpret_channel_info(chunk: Chunk) -> ChannelInfo:
    """Channel table, placed by each record's DataIndex."""
    group_id = chunk.int32(fmt.CHANNELINFO_GROUP_ID, "group id")
    count = chunk.int32(fmt.CHANNELINFO_COUNT, "channel count")
    root = expect_root(chunk.cstring(fmt.CHANNELINFO_XML, "channel record"), fmt.CHANNELINFO_ROOT)

    records = repeated_children(root, fmt.CHANNELINFO_RECORD)
    if len(records) != count:
        raise ChannelCountMismatchError(
            f"declares {count} channels but carries {len(records)} channel records"
        )

    by_index: dict[int, ChannelDescriptor] = {}
    for record in records:
        values = read_record(record, CHANNEL_FIELDS, fmt.CHANNELINFO_RECORD, required=("DataIndex",))
        channel = ChannelDescriptor(**values)
        if channel.index in by_index:
            raise MalformedChunkError(f"channel DataIndex {channel.index} declared twice")
        if not 0 <= channel.index < count:
            raise MalformedChunkError(
                f"channel DataIndex {channel.index} outside 0..{count - 1}"
            )
        by_index[channel.index] = channel

    channels = [by_index[i] for i in range(count)]
    logger.debug(
        "channelinfo: group %d, %d channels: %s",
        group_id, count, ", ".join(f"{c.name}:{c.sample_type.value}" for c in channels),
    )
    return ChannelInfo(group_id=group_id, channels=channels)


def interpret_data_layout(chunk: Chunk, info: ChannelInfo) -> DataChunkLayout:
    """Read the data chunk's group id, start index and channel slices."""
    group_id = chunk.int32(fmt.DATA_GROUP_ID, "group id")
    if group_id != info.group_id:
        raise GroupMismatchError(
            f"group id {group_id} does not match channel-info group id {info.group_id}"
        )
    start = chunk.int64(fmt.DATA_START_INDEX, "data start index")
    count = chunk.int32(fmt.DATA_CHANNEL_COUNT, "channel descriptor count")
    if count != len(info):
        raise ChannelCountMismatchError(
            f"carries {count} channel descriptors, channel-info declares {len(info)}"
        )

    pairs = chunk.array(fmt.DATA_DESCRIPTORS, "<i4", 2 * count, "channel descriptors")
    slices = []
    for i, channel in enumerate(info.channels):
        offset, length = int(pairs[2 * i]), int(pairs[2 * i + 1])
        if offset < 0 or length < 0:
            raise MalformedChunkError(f"channel {i} has offset {offset}, length {length}")
        slices.append(
            ChannelSlice(index=i, offset_bytes=offset, length_bytes=length, sample_type=channel.sample_type)
        )
    return DataChunkLayout(group_id=group_id, data_start_index=start, slices=slices)


def interpret_data(chunk: Chunk, session: Session) -> DataChunk:
    """Layout plus reassembled raw samples; needs the channel table."""
    layout = interpret_data_layout(chunk, session.require_channels())
    samples = reassemble(chunk, layout)
    logger.debug(
        "data: start index %d, %d samples x %d channels",
        layout.data_start_index, layout.sample_count, len(samples),
    )
    return DataChunk(layout=layout, samples=samples)


def interpret_event_definitions(chunk: Chunk) -> list[EventDefinition]:
    count = chunk.int32(fmt.EVENTDEF_COUNT, "definition count")
    root = expect_root(chunk.cstring(fmt.EVENTDEF_XML, "event definition record"), fmt.EVENTDEF_ROOT)

    records = repeated_children(root, fmt.EVENTDEF_RECORD)
    if len(records) != count:
        raise MalformedChunkError(
            f"declares {count} event definitions but carries {len(records)}"
        )
    definitions = []
    for i, record in enumerate(records):
        values = read_record(record, EVENT_DEFINITION_FIELDS, fmt.EVENTDEF_RECORD, required=("ID",))
        definitions.append(EventDefinition(index=i, **values))
    logger.debug("eventdefinition: %d definitions", count)
    return definitions


def interpret_event_data(chunk: Chunk) -> list[Event]:
    count = chunk.int64(fmt.EVENTDATA_COUNT, "event count")
    records = chunk.array(fmt.EVENTDATA_RECORDS, fmt.EVENT_RECORD_DTYPE, count, "event records")
    names = records.dtype.names
    events = [Event(**dict(zip(names, row))) for row in records.tolist()]
    logger.debug("eventdata: %d events", count)
    return events


def interpret_index(chunk: Chunk) -> list[IndexEntry]:
    """Index entries numbered from 0; the session renumbers on commit."""
    count = chunk.int64(fmt.INDEX_COUNT, "index entry count")
    values = chunk.array(
        fmt.INDEX_RECORDS, "<i8", count * fmt.INDEX_RECORD_FIELDS, "index entries"
    ).reshape(count, fmt.INDEX_RECORD_FIELDS)
    entries = [
        IndexEntry(
            position=i,
            data_start_index=start,
            samples_per_channel=length,
            chunk_kind=kind,
            group_id=group,
            file_offset=offset,
        )
        for i, (start, length, kind, group, offset) in enumerate(values.tolist())
    ]
    logger.debug("index: %d entries", count)
    return entries


_INTERPRETERS = {
    ChunkKind.HEADER: interpret_header,
    ChunkKind.CHANNEL_INFO: interpret_channel_info,
    ChunkKind.EVENT_DEFINITION: interpret_event_definitions,
    ChunkKind.EVENT_DATA: interpret_event_data,
    ChunkKind.INDEX: interpret_index,
}


def interpret(chunk: Chunk, session: Session) -> Any:
    """Interpret a chunk of any kind. The session is only read."""
    if chunk.kind is ChunkKind.DATA:
        return interpret_data(chunk, session)
    return _INTERPRETERS[chunk.kind](chunk)


def commit(kind: ChunkKind, value: Any, session: Session) -> None:
    """Apply an interpreted value to the session."""
    if kind is ChunkKind.HEADER:
        session.set_metadata(value)
    elif kind is ChunkKind.CHANNEL_INFO:
        session.set_channel_info(value)
    elif kind is ChunkKind.DATA:
        session.advance(value.sample_count)
    elif kind is ChunkKind.EVENT_DEFINITION:
        session.set_event_definitions(value)
    elif kind is ChunkKind.EVENT_DATA:
        session.add_events(value)
    elif kind is ChunkKind.INDEX:
        session.add_index_entries(value)
    session.count(kind)
