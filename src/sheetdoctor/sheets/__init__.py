"""Document access: the accessor protocol and its implementations."""

from .accessor import AccessorError, DocumentAccessor, InMemoryAccessor
from .client import GoogleSheetsAccessor, GoogleSheetsClient
from .models import GridRange, SheetBounds

__all__ = [
    "AccessorError",
    "DocumentAccessor",
    "InMemoryAccessor",
    "GoogleSheetsAccessor",
    "GoogleSheetsClient",
    "GridRange",
    "SheetBounds",
]
