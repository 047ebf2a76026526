"""
Settings & Subscription Store

Holds the two singleton records. Reads never fail: a missing or broken
record yields defaults (free plan, default settings). Writes merge a
patch into the current record and overwrite the whole thing.
"""

from spendful.config import get_settings
from spendful.ledger.base import LedgerStoreBase
from spendful.ledger.keys import StorageKeys
from spendful.models.account import (
    AppSettings,
    SettingsPatch,
    Subscription,
    SubscriptionPatch,
)
from spendful.models.audit import LedgerEventBuilder, LedgerEventType


class AccountStore(LedgerStoreBase):
    """User configuration and entitlement state."""

    def default_settings(self) -> AppSettings:
        seeds = get_settings().ledger
        return AppSettings(
            free_history_days=seeds.default_free_history_days,
            default_currency=seeds.default_currency,
            updated_at=self._clock.now(),
        )

    def default_subscription(self) -> Subscription:
        return Subscription(updated_at=self._clock.now())

    async def get_settings(self) -> AppSettings:
        return await self._load_record(
            StorageKeys.APP_SETTINGS, AppSettings, self.default_settings()
        )

    async def update_settings(self, patch: SettingsPatch) -> AppSettings:
        """Apply the explicitly set fields of `patch` and persist."""
        changes = patch.changes()
        async with self._queue.mutation():
            current = await self.get_settings()
            updated = AppSettings.model_validate({
                **current.model_dump(),
                **changes,
                "updated_at": self._clock.now(),
            })
            await self._write_json(
                StorageKeys.APP_SETTINGS, updated.model_dump(mode="json")
            )

        await self._audit.log(LedgerEventBuilder.account_updated(
            LedgerEventType.SETTINGS_UPDATED, sorted(changes)
        ))
        return updated

    async def get_subscription(self) -> Subscription:
        return await self._load_record(
            StorageKeys.SUBSCRIPTION, Subscription, self.default_subscription()
        )

    async def update_subscription(self, patch: SubscriptionPatch) -> Subscription:
        """Apply the explicitly set fields of `patch` and persist."""
        changes = patch.changes()
        async with self._queue.mutation():
            current = await self.get_subscription()
            updated = Subscription.model_validate({
                **current.model_dump(),
                **changes,
                "updated_at": self._clock.now(),
            })
            await self._write_json(
                StorageKeys.SUBSCRIPTION, updated.model_dump(mode="json")
            )

        await self._audit.log(LedgerEventBuilder.account_updated(
            LedgerEventType.SUBSCRIPTION_UPDATED, sorted(changes)
        ))
        return updated
