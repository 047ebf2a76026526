"""
Audit Logger

DESIGN DECISION: Every ledger mutation is logged as a structured event.
This provides:
1. Traceability of changes to the local ledger
2. Debugging capability when the store misbehaves
3. A visible trace of failures that are otherwise swallowed

The audit logger:
- Is async so stores can await it in their own flow
- Never raises (logging must not break a ledger operation)
"""

import logging
import sys
from typing import Optional

import structlog

from spendful.config import get_settings
from spendful.models.audit import AuditSeverity, LedgerEvent, LedgerEventBuilder


def configure_logging(level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """
    Configure structlog on top of stdlib logging.

    Called once on import; call again to change level or renderer.
    """
    settings = get_settings().ledger
    level = (level or settings.log_level).upper()
    json_logs = settings.log_json if json_logs is None else json_logs

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
    )
    logging.getLogger().setLevel(getattr(logging, level, logging.INFO))

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """Central audit logging service for ledger events."""

    def __init__(self, logger_name: str = "spendful.audit"):
        self._logger = structlog.get_logger(logger_name)

    async def log(self, event: LedgerEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be emitted.
        """
        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # A broken log sink must not fail the ledger operation
            sys.stderr.write(f"audit logging failed: {e}\n")
            return False
        return True

    async def log_read_failed(self, key: str, error_message: str) -> None:
        """Log a read failure that was replaced by defaults."""
        await self.log(LedgerEventBuilder.read_failed(key, error_message))

    async def log_write_failed(self, key: str, error_message: str) -> None:
        """Log a write failure that is being propagated."""
        await self.log(LedgerEventBuilder.write_failed(key, error_message))
