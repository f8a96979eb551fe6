"""sheetgrid -- in-memory spreadsheet grid engine."""

__version__ = "0.1.0"
