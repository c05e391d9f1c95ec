"""Audit logging package."""

from lifeledger.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
