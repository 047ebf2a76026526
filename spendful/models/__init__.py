"""
Data Models Package

This package contains all Pydantic models used in Spendful.
Everything persisted to the key-value store conforms to these schemas.
"""

from spendful.models.account import (
    AppSettings,
    SettingsPatch,
    StoreSource,
    Subscription,
    SubscriptionPatch,
    SubscriptionPlan,
    ThemeMode,
)
from spendful.models.audit import (
    AuditSeverity,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)
from spendful.models.currency import (
    SUPPORTED_CURRENCIES,
    CurrencyInfo,
    format_currency,
)
from spendful.models.ledger import (
    DEFAULT_CATEGORIES,
    RECURRING_NOTE_TAG,
    UNCATEGORIZED,
    CustomCategory,
    DayData,
    Frequency,
    LegacyDailyLog,
    RecurringEntry,
    RecurringPatch,
    RecurringStatus,
    SpendEntry,
)
from spendful.models.reports import (
    CategoryTotal,
    DayTotal,
    ExportData,
    PeriodSummary,
    SpendingStats,
)
from spendful.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Ledger models
    "DEFAULT_CATEGORIES",
    "RECURRING_NOTE_TAG",
    "UNCATEGORIZED",
    "CustomCategory",
    "DayData",
    "Frequency",
    "LegacyDailyLog",
    "RecurringEntry",
    "RecurringPatch",
    "RecurringStatus",
    "SpendEntry",
    # Account models
    "AppSettings",
    "SettingsPatch",
    "StoreSource",
    "Subscription",
    "SubscriptionPatch",
    "SubscriptionPlan",
    "ThemeMode",
    # Reports
    "CategoryTotal",
    "DayTotal",
    "ExportData",
    "PeriodSummary",
    "SpendingStats",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Currency
    "SUPPORTED_CURRENCIES",
    "CurrencyInfo",
    "format_currency",
    # Audit models
    "AuditSeverity",
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
]
