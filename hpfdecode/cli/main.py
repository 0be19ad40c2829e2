"""hpfdecode CLI: command-line interface for .hpf recordings.

Commands:
    hpfdecode convert <file>     Write samples as TSV/CSV, optionally downsampled
    hpfdecode info <file>        Show recording summary
    hpfdecode chunks <file>      List every chunk with offset and size
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from hpfdecode import __version__
from hpfdecode.errors import HPFError
from hpfdecode.storage.format import MAX_CHUNK_SIZE

console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool, debug: bool) -> None:
    """Configure logging based on verbosity flags."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(file: Path, error: Exception) -> None:
    err_console.print(f"[red]Error decoding {file}: {escape(str(error))}[/red]")
    raise SystemExit(1)


@click.group(context_settings={"auto_envvar_prefix": "HPFDECODE"})
@click.version_option(version=__version__, prog_name="hpfdecode")
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr")
@click.option("--debug", is_flag=True, help="Log every chunk to stderr")
def cli(verbose: bool, debug: bool) -> None:
    """hpfdecode: convert QuickDAQ .hpf recordings to delimited text.

    Streams files of any size and can keep only every k-th sample.
    """
    setup_logging(verbose, debug)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path),
              help="Output file (default: stdout)")
@click.option("--delimiter", "-d", default="tab", show_default=True,
              help="Field separator: a character, or tab/comma/semicolon/space")
@click.option("--downsample", "-k", default=1000, show_default=True, type=click.IntRange(min=1),
              help="Keep every k-th sample (1 keeps all)")
@click.option("--preamble/--no-preamble", default=False, show_default=True,
              help="Write recording date and channel table before the data")
@click.option("--data-line/--no-data-line", default=False, show_default=True,
              help="Prefix each row with its 1-based line number")
@click.option("--max-chunk-size", default=MAX_CHUNK_SIZE, show_default=True, type=click.IntRange(min=16),
              help="Largest chunk size accepted, in bytes")
def convert(
    file: Path,
    output: Path | None,
    delimiter: str,
    downsample: int,
    preamble: bool,
    data_line: bool,
    max_chunk_size: int,
) -> None:
    """Convert a recording to TSV/CSV."""
    from pydantic import ValidationError

    from hpfdecode.config import ExportConfig
    from hpfdecode.export.csv import export_csv, write_table

    try:
        config = ExportConfig(
            delimiter=delimiter,
            downsample=downsample,
            include_preamble=preamble,
            include_data_line=data_line,
            max_chunk_size=max_chunk_size,
        )
    except ValidationError as e:
        raise click.BadParameter(str(e.errors()[0]["msg"]), param_hint="'--delimiter'")

    try:
        if output is None:
            write_table(file, click.get_text_stream("stdout"), config)
        else:
            created = export_csv(file, output=output, config=config)
            err_console.print(f"  Created: {created}")
    except HPFError as e:
        _fail(file, e)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def info(file: Path) -> None:
    """Show recording summary."""
    from hpfdecode import HPFFile

    try:
        with HPFFile(file) as hpf:
            hpf.scan()
    except HPFError as e:
        _fail(file, e)

    meta = hpf.metadata

    # Header
    console.print()
    console.print(Panel.fit(f"[bold]{file.name}[/bold]", subtitle=f"{file}"))

    meta_table = Table(show_header=False, box=None, padding=(0, 2))
    meta_table.add_column("Key", style="dim")
    meta_table.add_column("Value")
    meta_table.add_row("Creator", meta.creator_id)
    meta_table.add_row("Format version", str(meta.file_version))
    meta_table.add_row("Recorded", meta.recording_date or "(unset)")
    meta_table.add_row("Samples", str(hpf.num_samples))
    meta_table.add_row("Channels", str(len(hpf.channels)))
    meta_table.add_row("Events", str(len(hpf.events)))
    meta_table.add_row("Index entries", str(len(hpf.index)))
    meta_table.add_row(
        "Chunks", ", ".join(f"{kind}={n}" for kind, n in hpf.chunk_counts.items())
    )
    console.print(meta_table)

    # Channels
    if hpf.channels:
        console.print()
        channel_table = Table(title="Channels")
        channel_table.add_column("#", justify="right")
        channel_table.add_column("Name")
        channel_table.add_column("Unit")
        channel_table.add_column("Type")
        channel_table.add_column("Scale", justify="right")
        channel_table.add_column("Offset", justify="right")
        channel_table.add_column("Rate (Hz)", justify="right")

        for c in hpf.channels:
            channel_table.add_row(
                str(c.index),
                c.name,
                c.unit,
                c.sample_type.value,
                f"{c.scale:.6g}",
                f"{c.offset:.6g}",
                f"{c.sample_rate_hz:g}",
            )
        console.print(channel_table)

    # Event definitions
    if hpf.event_definitions:
        console.print()
        events_table = Table(title="Event Definitions")
        events_table.add_column("ID", justify="right")
        events_table.add_column("Name")
        events_table.add_column("Type")
        events_table.add_column("Description")

        for d in hpf.event_definitions[:10]:
            events_table.add_row(str(d.event_id), d.name, d.event_type, d.description)

        if len(hpf.event_definitions) > 10:
            events_table.add_row("...", f"({len(hpf.event_definitions) - 10} more)", "", "")

        console.print(events_table)

    console.print()


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def chunks(file: Path) -> None:
    """List every chunk with its offset, kind and size."""
    from hpfdecode import HPFFile

    try:
        with HPFFile(file) as hpf:
            hpf.scan()
    except HPFError as e:
        _fail(file, e)

    table = Table(title=f"Chunks in {file.name}")
    table.add_column("#", justify="right")
    table.add_column("Offset", justify="right")
    table.add_column("Kind")
    table.add_column("Size", justify="right")

    for i, (kind, offset, size) in enumerate(hpf.chunk_list):
        table.add_row(str(i), f"{offset:#x}", kind.label, f"{size:#x}")
    console.print(table)


if __name__ == "__main__":
    cli()
