"""Structured logging utilities."""

from .audit import AuditEvent, JsonlAuditLogger, millis_to_iso, sanitize_arguments, utc_timestamp

__all__ = ["AuditEvent", "JsonlAuditLogger", "millis_to_iso", "sanitize_arguments", "utc_timestamp"]
