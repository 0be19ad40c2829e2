"""HPF file format constants.

An .hpf file is a sequence of self-delimiting chunks. Every chunk starts
with a 16-byte prefix:

    +0   int64   chunk kind (0x1000 .. 0x6000)
    +8   int64   chunk size in bytes, prefix included

All integers are little-endian. Field offsets below are measured from the
first byte of the chunk, prefix included.
"""

from enum import IntEnum


class ChunkKind(IntEnum):
    """Chunk kind tags."""

    HEADER = 0x1000
    CHANNEL_INFO = 0x2000
    DATA = 0x3000
    EVENT_DEFINITION = 0x4000
    EVENT_DATA = 0x5000
    INDEX = 0x6000

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "")


# Chunk prefix
PREFIX_FORMAT = "<qq"
PREFIX_SIZE = 16

# Largest chunk accepted by default
MAX_CHUNK_SIZE = 1024 * 1024

# Header chunk
HEADER_CREATOR_ID = 16  # int32, FourCC e.g. 'datx'
HEADER_FILE_VERSION = 20  # int64
HEADER_INDEX_OFFSET = 28  # int64
HEADER_XML = 36

# Channel info chunk
CHANNELINFO_GROUP_ID = 16  # int32
CHANNELINFO_COUNT = 20  # int32
CHANNELINFO_XML = 24

# Data chunk
DATA_GROUP_ID = 16  # int32
DATA_START_INDEX = 20  # int64
DATA_CHANNEL_COUNT = 28  # int32
DATA_DESCRIPTORS = 32  # int32 (offset, length) pairs

# Event definition chunk
EVENTDEF_COUNT = 16  # int32
EVENTDEF_XML = 20

# Event data chunk
EVENTDATA_COUNT = 16  # int64
EVENTDATA_RECORDS = 24
EVENT_RECORD_DTYPE = [  # 68 bytes, packed
    ("event_class", "<i4"),
    ("event_id", "<i4"),
    ("channel_index", "<i4"),
    ("start_index", "<i8"),
    ("end_index", "<i8"),
    ("idata1", "<i4"),
    ("idata2", "<i4"),
    ("ddata1", "<f8"),
    ("ddata2", "<f8"),
    ("ddata3", "<f8"),
    ("ddata4", "<f8"),
]

# Index chunk
INDEX_COUNT = 16  # int64
INDEX_RECORDS = 24
INDEX_RECORD_FIELDS = 5  # int64 each

# Descriptive record root and repeated tags
HEADER_ROOT = "RecordingDate"
CHANNELINFO_ROOT = "ChannelInformationData"
CHANNELINFO_RECORD = "ChannelInformation"
EVENTDEF_ROOT = "EventDefinitionData"
EVENTDEF_RECORD = "EventDefinition"
