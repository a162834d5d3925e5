"""Content-addressed directory snapshots and rename/move-aware history."""

__version__ = "0.1.0"
