"""hpfdecode: stream QuickDAQ .hpf recordings out as delimited text.

Decodes the chunked HPF binary format chunk by chunk, so multi-gigabyte
recordings convert in bounded memory, and optionally keeps only every
k-th sample (1 kHz to 1 Hz with k=1000).

Quick start:
    from hpfdecode import ExportConfig, HPFFile, export_csv

    # Inspect
    with HPFFile("run_017.hpf") as h:
        h.scan()
        print(h)                # Summary
        print(h.channel_names)  # Channel names

    # Convert, keeping every 1000th sample
    export_csv("run_017.hpf", config=ExportConfig(downsample=1000))
"""

__version__ = "0.1.0"

from hpfdecode.config import ExportConfig
from hpfdecode.decoder import Decoder, HPFFile
from hpfdecode.errors import HPFError
from hpfdecode.export.csv import export_csv, write_table

__all__ = [
    "Decoder",
    "ExportConfig",
    "HPFError",
    "HPFFile",
    "export_csv",
    "write_table",
    "__version__",
]
