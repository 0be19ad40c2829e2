"""Export modules for HPF recordings."""

from hpfdecode.export.csv import export_csv, write_table

__all__ = ["export_csv", "write_table"]
