"""
Audit Models for Spendful

Every ledger mutation (and every swallowed failure) produces an audit
event that is written to the structured log. This gives:
1. Traceability of what changed in the local ledger and when
2. Debugging information when storage misbehaves
3. A record of data dropped by a failed migration

DESIGN DECISION: Audit events are log-only. They are not persisted in the
key-value store, so a broken store cannot also break auditing.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from spendful.models.ledger import new_id, utcnow


class LedgerEventType(str, Enum):
    """Types of events we audit."""
    # Entries
    ENTRY_ADDED = "entry_added"
    ENTRY_UPDATED = "entry_updated"
    ENTRY_DELETED = "entry_deleted"

    # Migration
    MIGRATION_COMPLETED = "migration_completed"
    MIGRATION_FAILED = "migration_failed"

    # Recurring templates
    RECURRING_ADDED = "recurring_added"
    RECURRING_UPDATED = "recurring_updated"
    RECURRING_DELETED = "recurring_deleted"
    RECURRING_GENERATED = "recurring_generated"

    # Categories
    CATEGORY_ADDED = "category_added"
    CATEGORY_RENAMED = "category_renamed"
    CATEGORY_DELETED = "category_deleted"

    # Account
    SETTINGS_UPDATED = "settings_updated"
    SUBSCRIPTION_UPDATED = "subscription_updated"

    # Export
    DATA_EXPORTED = "data_exported"

    # Failures
    STORAGE_READ_FAILED = "storage_read_failed"
    STORAGE_WRITE_FAILED = "storage_write_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """A single audit event."""

    event_id: str = Field(default_factory=new_id)
    timestamp: datetime = Field(
        default_factory=utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: LedgerEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what record is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of record (e.g., 'entry', 'recurring', 'settings')"
    )
    entity_id: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = LedgerEventBuilder.entry_added(entry_id, "2024-01-01", "12.50")
        event = LedgerEventBuilder.read_failed("spendful_spend_entries", str(e))
    """

    @staticmethod
    def entry_added(
        entry_id: str,
        day: str,
        amount: str,
        warnings: Optional[list[str]] = None,
    ) -> LedgerEvent:
        details: dict[str, Any] = {"date": day, "amount": amount}
        if warnings:
            details["warnings"] = warnings
        return LedgerEvent(
            event_type=LedgerEventType.ENTRY_ADDED,
            severity=AuditSeverity.WARNING if warnings else AuditSeverity.INFO,
            entity_type="entry",
            entity_id=entry_id,
            description=f"Entry added on {day}",
            details=details,
        )

    @staticmethod
    def entry_updated(entry_id: str, amount: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.ENTRY_UPDATED,
            entity_type="entry",
            entity_id=entry_id,
            description="Entry updated",
            details={"amount": amount},
        )

    @staticmethod
    def entry_deleted(entry_id: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.ENTRY_DELETED,
            entity_type="entry",
            entity_id=entry_id,
            description="Entry deleted",
        )

    @staticmethod
    def migration_completed(converted: int, skipped: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.MIGRATION_COMPLETED,
            entity_type="ledger",
            description=f"Legacy logs migrated: {converted} entries created",
            details={"converted": converted, "skipped": skipped},
        )

    @staticmethod
    def migration_failed(error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.MIGRATION_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            description="Legacy migration failed; legacy data was not converted",
            error_message=error_message,
        )

    @staticmethod
    def recurring_changed(
        event_type: LedgerEventType,
        template_id: str,
        details: Optional[dict] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=event_type,
            entity_type="recurring",
            entity_id=template_id,
            description=f"Recurring template {event_type.value.split('_', 1)[1]}",
            details=details or {},
        )

    @staticmethod
    def recurring_generated(template_id: str, day: str, entry_id: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RECURRING_GENERATED,
            entity_type="recurring",
            entity_id=template_id,
            description=f"Recurring occurrence generated for {day}",
            details={"date": day, "entry_id": entry_id},
        )

    @staticmethod
    def category_changed(
        event_type: LedgerEventType,
        category_id: str,
        name: Optional[str] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=event_type,
            entity_type="category",
            entity_id=category_id,
            description=f"Custom category {event_type.value.split('_', 1)[1]}",
            details={"name": name} if name is not None else {},
        )

    @staticmethod
    def account_updated(
        event_type: LedgerEventType,
        fields: list[str],
    ) -> LedgerEvent:
        entity = "settings" if event_type == LedgerEventType.SETTINGS_UPDATED else "subscription"
        return LedgerEvent(
            event_type=event_type,
            entity_type=entity,
            description=f"{entity.capitalize()} updated",
            details={"fields": fields},
        )

    @staticmethod
    def data_exported(entry_count: int, export_format: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.DATA_EXPORTED,
            entity_type="ledger",
            description=f"Exported {entry_count} entries as {export_format}",
            details={"entry_count": entry_count, "format": export_format},
        )

    @staticmethod
    def read_failed(key: str, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STORAGE_READ_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="storage",
            entity_id=key,
            description=f"Read of {key} failed; using defaults",
            error_message=error_message,
        )

    @staticmethod
    def write_failed(key: str, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STORAGE_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            entity_id=key,
            description=f"Write of {key} failed",
            error_message=error_message,
        )
