"""Export settings shared by the library and the CLI."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from hpfdecode.storage.format import MAX_CHUNK_SIZE, PREFIX_SIZE

DEFAULT_DELIMITER = "\t"

# Named delimiters accepted on the command line
DELIMITER_NAMES = {
    "tab": "\t",
    "\\t": "\t",
    "comma": ",",
    "semicolon": ";",
    "space": " ",
}


class ExportConfig(BaseModel):
    """How decoded samples are written out.

    Args:
        delimiter: Field separator, a single character.
        downsample: Keep every k-th sample by global index. 1 keeps all.
        include_preamble: Write recording date and channel table first.
        include_data_line: Prefix each row with its 1-based line number.
        max_chunk_size: Largest declared chunk size accepted, in bytes.
    """

    delimiter: str = DEFAULT_DELIMITER
    downsample: int = Field(default=1, ge=1)
    include_preamble: bool = False
    include_data_line: bool = False
    max_chunk_size: int = Field(default=MAX_CHUNK_SIZE, ge=PREFIX_SIZE)

    @field_validator("delimiter", mode="before")
    @classmethod
    def resolve_delimiter(cls, v: str) -> str:
        v = DELIMITER_NAMES.get(v.lower(), v) if isinstance(v, str) else v
        if not isinstance(v, str) or len(v) != 1:
            raise ValueError(f"delimiter must be a single character, got {v!r}")
        return v
