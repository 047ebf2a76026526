"""
Storage keys.

These are a contract with the schema migrator and with existing installs:
never rename a key, add a new versioned one instead.
"""


class StorageKeys:
    SPEND_ENTRIES = "spendful_spend_entries"
    APP_SETTINGS = "spendful_app_settings"
    SUBSCRIPTION = "spendful_subscription"
    MIGRATED_V2 = "spendful_migrated_v2"
    CUSTOM_CATEGORIES = "spendful_custom_categories"
    RECURRING_ENTRIES = "spendful_recurring_entries"

    # v1 single-entry-per-day logs, read only by the migrator
    LEGACY_DAILY_LOGS = "spendful_daily_logs"


MIGRATION_DONE_MARKER = "true"
