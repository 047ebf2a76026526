"""
Ledger package.

The stores that own persisted records, the legacy migrator, access
control and the recurring engine.
"""

from spendful.ledger.access import (
    can_view_date,
    filter_viewable,
    free_history_cutoff_date,
    is_premium,
)
from spendful.ledger.account import AccountStore
from spendful.ledger.base import LedgerStoreBase, MutationQueue
from spendful.ledger.categories import CategoryStore
from spendful.ledger.entries import EntryStore
from spendful.ledger.keys import MIGRATION_DONE_MARKER, StorageKeys
from spendful.ledger.migration import SchemaMigrator, convert_legacy_log
from spendful.ledger.recurring import (
    LedgerSession,
    RecurringEngine,
    RecurringStore,
    next_occurrence,
    recurring_status,
)

__all__ = [
    # Stores
    "AccountStore",
    "CategoryStore",
    "EntryStore",
    "LedgerStoreBase",
    "RecurringStore",
    # Migration
    "SchemaMigrator",
    "convert_legacy_log",
    # Recurring
    "LedgerSession",
    "RecurringEngine",
    "next_occurrence",
    "recurring_status",
    # Access control
    "can_view_date",
    "filter_viewable",
    "free_history_cutoff_date",
    "is_premium",
    # Plumbing
    "MIGRATION_DONE_MARKER",
    "MutationQueue",
    "StorageKeys",
]
