"""Assignment reminder planning and subject reconciliation."""

__version__ = "0.1.0"
