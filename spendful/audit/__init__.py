"""Audit logging package."""

from spendful.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
