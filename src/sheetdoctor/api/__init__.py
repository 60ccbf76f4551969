"""HTTP API for SheetDoctor."""

from .app import create_app

__all__ = ["create_app"]
