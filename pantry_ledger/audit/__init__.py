"""Audit logging package."""

from pantry_ledger.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
