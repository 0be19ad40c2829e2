"""Exceptions raised while decoding HPF files.

Every error is fatal: decoding stops at the first one. Errors raised while a
chunk is being handled carry that chunk's kind and byte offset so the message
points at the offending spot in the file.
"""

from __future__ import annotations


class HPFError(Exception):
    """Base class for all HPF decoding errors."""

    def __init__(self, message: str, *, kind: str | None = None, offset: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.offset = offset

    def locate(self, kind: str | None, offset: int | None) -> HPFError:
        """Attach chunk kind and offset, keeping any already set."""
        if self.kind is None:
            self.kind = kind
        if self.offset is None:
            self.offset = offset
        return self

    def __str__(self) -> str:
        where = []
        if self.kind is not None:
            where.append(f"{self.kind} chunk")
        if self.offset is not None:
            where.append(f"at offset {self.offset:#x}")
        if not where:
            return self.message
        return f"{' '.join(where)}: {self.message}"


class TruncatedChunkError(HPFError):
    """Fewer bytes remain than the chunk declares."""


class ChunkTooLargeError(HPFError):
    """Declared chunk size exceeds the configured maximum."""


class UnknownChunkKindError(HPFError):
    """Chunk kind tag is not one of the six known kinds."""


class MalformedChunkError(HPFError):
    """Chunk structure is internally inconsistent."""


class FieldOutOfBoundsError(MalformedChunkError):
    """A fixed-offset field lies past the end of the chunk."""


class DuplicateChunkError(HPFError):
    """A chunk kind allowed once per file appeared again."""


class MissingChunkError(HPFError):
    """A required chunk was not seen before it was needed."""


class GroupMismatchError(HPFError):
    """Data chunk group id differs from the channel-info group id."""


class ChannelCountMismatchError(HPFError):
    """Data chunk channel count differs from the declared channel count."""


class UnsupportedFieldValueError(HPFError):
    """A descriptive field holds a value outside the supported vocabulary."""

    def __init__(self, field: str, value: str, expected: str = "") -> None:
        message = f"unsupported value {value!r} for field '{field}'"
        if expected:
            message += f" (expected {expected})"
        super().__init__(message)
        self.field = field
        self.value = value


class UnknownFieldError(HPFError):
    """A descriptive record carries a field name that is not modelled."""


class MissingFieldError(HPFError):
    """A descriptive record lacks a required field."""


class MissingRootElementError(HPFError):
    """Descriptive payload is empty or not parseable."""


class WrongRootElementError(HPFError):
    """Descriptive payload has an unexpected root tag."""
