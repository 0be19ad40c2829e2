"""Delimited-text export for HPF recordings.

Writes one table per recording: an optional preamble, a row of channel
names, then one row per kept sample. Tab-separated by default; a comma
delimiter gives CSV.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import TextIO

from hpfdecode.config import ExportConfig
from hpfdecode.decoder import Decoder
from hpfdecode.storage.reader import ByteSource

logger = logging.getLogger(__name__)


def default_output_path(path: str | Path, config: ExportConfig) -> Path:
    """Input path with .csv for comma-separated output, .txt otherwise."""
    suffix = ".csv" if config.delimiter == "," else ".txt"
    return Path(path).with_suffix(suffix)


def write_table(path: str | Path, stream: TextIO, config: ExportConfig | None = None) -> int:
    """Decode an .hpf file and write its table to a text stream.

    Args:
        path: Path to the .hpf file.
        stream: Open text stream to write to.
        config: Export settings.

    Returns:
        Number of data rows written.
    """
    config = config or ExportConfig()
    writer = csv.writer(stream, delimiter=config.delimiter, lineterminator="\n")

    with ByteSource.open(path) as source:
        decoder = Decoder(source, config)
        for row in decoder.rows():
            writer.writerow(row)

    written = decoder.rows_emitted
    logger.info("wrote %d rows from %s", written, path)
    return written


def export_csv(
    path: str | Path,
    output: str | Path | None = None,
    config: ExportConfig | None = None,
) -> Path:
    """Export an .hpf recording to a delimited text file.

    Args:
        path: Path to the .hpf file.
        output: Output file. Defaults to the input path with .csv or .txt.
        config: Export settings.

    Returns:
        Path to the created file.
    """
    config = config or ExportConfig()
    out = Path(output) if output is not None else default_output_path(path, config)
    out.parent.mkdir(parents=True, exist_ok=True)

    with open(out, "w", newline="") as f:
        write_table(path, f, config)
    return out
