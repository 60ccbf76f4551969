"""SheetDoctor - diagnostics and fix suggestions for spreadsheet formulas."""

__version__ = "0.1.0"
