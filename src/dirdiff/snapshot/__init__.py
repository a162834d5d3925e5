"""Snapshot capture, models, and persistence."""

from .capture import (
    CaptureProfile,
    Clock,
    capture_snapshot,
    hash_file,
    now_millis,
    should_exclude,
)
from .models import ROOT_PATH, FileRecord, SnapshotStore, sort_key, validate_record
from .storage import SnapshotLog, claim_owner, verify_owner

__all__ = [
    "CaptureProfile",
    "Clock",
    "FileRecord",
    "ROOT_PATH",
    "SnapshotLog",
    "SnapshotStore",
    "capture_snapshot",
    "claim_owner",
    "hash_file",
    "now_millis",
    "should_exclude",
    "sort_key",
    "validate_record",
    "verify_owner",
]
