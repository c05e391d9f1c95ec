"""
Audit Models for LifeLedger

Every identity transition and record mutation is described by an
AuditEvent and written to the structured log. This provides:
1. Traceability of who changed what
2. Debugging information when a write is silently skipped
3. A visible record of external-service failures
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Identity
    USER_REGISTERED = "user_registered"
    REGISTRATION_REJECTED = "registration_rejected"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGGED_OUT = "logged_out"
    FEDERATED_SESSION_SYNCED = "federated_session_synced"
    SESSION_CORRUPTED = "session_corrupted"

    # Records
    RECORD_SAVED = "record_saved"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    WRITE_SKIPPED = "write_skipped"
    VALIDATION_FAILED = "validation_failed"

    # External services
    ADVISOR_RESPONDED = "advisor_responded"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Which user and record this is about
    user_id: Optional[str] = None
    entity_type: Optional[str] = Field(
        default=None,
        description="Collection name or 'user'"
    )
    entity_id: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.login_succeeded(user_id)
        event = AuditEventBuilder.record_saved("habits", habit.id, user_id)
    """

    @staticmethod
    def user_registered(user_id: str, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description=f"Account registered: {email}",
        )

    @staticmethod
    def registration_rejected(email: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            description="Registration rejected",
            details={"email": email, "reason": reason},
        )

    @staticmethod
    def login_succeeded(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description="User logged in",
        )

    @staticmethod
    def login_failed(email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            description="Login failed",
            details={"email": email},
        )

    @staticmethod
    def logged_out(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGGED_OUT,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description="User logged out",
        )

    @staticmethod
    def federated_session_synced(user_id: str, created: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FEDERATED_SESSION_SYNCED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description="Federated account created" if created else "Federated session synced",
            details={"created": created},
        )

    @staticmethod
    def session_corrupted(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_CORRUPTED,
            severity=AuditSeverity.WARNING,
            description="Session snapshot unreadable, treating as logged out",
            error_message=error_message,
        )

    @staticmethod
    def record_saved(collection: str, record_id: str, user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_SAVED,
            user_id=user_id,
            entity_type=collection,
            entity_id=record_id,
            description=f"Saved {collection} record",
        )

    @staticmethod
    def record_updated(collection: str, record_id: str, user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            user_id=user_id,
            entity_type=collection,
            entity_id=record_id,
            description=f"Updated {collection} record",
        )

    @staticmethod
    def record_deleted(collection: str, record_id: str, user_id: str, count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            user_id=user_id,
            entity_type=collection,
            entity_id=record_id,
            description=f"Deleted {count} {collection} record(s)",
            details={"count": count},
        )

    @staticmethod
    def write_skipped(collection: str, operation: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WRITE_SKIPPED,
            severity=AuditSeverity.DEBUG,
            entity_type=collection,
            description=f"{operation} skipped: no current user",
        )

    @staticmethod
    def validation_failed(
        entity_type: str,
        issues: list[dict],
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type=entity_type,
            description=f"{entity_type} input rejected with {len(issues)} issue(s)",
            details={"issues": issues},
        )

    @staticmethod
    def advisor_responded(characters: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVISOR_RESPONDED,
            description="Advisor returned a message",
            details={"characters": characters},
        )

    @staticmethod
    def external_service_error(service: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={"service": service},
        )
