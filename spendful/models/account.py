"""
Account Models for Spendful

Two singleton records live next to the ledger:
1. AppSettings - user configuration, written by onboarding/settings screens
2. Subscription - entitlement state, written by the purchase flow

Both are updated with merge-then-overwrite semantics: the current record
is loaded, the explicitly set fields of a patch are applied, and the
whole record is written back.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from spendful.models.ledger import utcnow


REMINDER_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class ThemeMode(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class SubscriptionPlan(str, Enum):
    FREE = "free"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    LIFETIME = "lifetime"


class StoreSource(str, Enum):
    """App store the entitlement was purchased through."""
    APPLE = "apple"
    GOOGLE = "google"


def _validate_reminder_time(v: str) -> str:
    if not REMINDER_TIME_PATTERN.match(v):
        raise ValueError(f"Reminder time must be HH:MM (24h), got: {v}")
    return v


class AppSettings(BaseModel):
    """
    Singleton user configuration.

    Created with defaults on first read if absent.
    """

    daily_reminder_time: str = Field(
        default="20:00",
        description="Daily reminder time, HH:MM 24h"
    )
    notifications_enabled: bool = False
    free_history_days: int = Field(
        default=30,
        ge=0,
        description="Past days a non-premium user may view"
    )
    tone: str = "calm"
    first_launch_at: Optional[datetime] = None
    onboarding_completed: bool = False
    show_onboarding_on_launch: bool = False
    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
    )
    theme_mode: ThemeMode = ThemeMode.SYSTEM
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("daily_reminder_time")
    @classmethod
    def validate_reminder_time(cls, v: str) -> str:
        return _validate_reminder_time(v)

    @field_validator("default_currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    @property
    def reminder_hour_minute(self) -> tuple[int, int]:
        """Reminder time as (hour, minute) for the notification scheduler."""
        hours, minutes = self.daily_reminder_time.split(":")
        return int(hours), int(minutes)


class SettingsPatch(BaseModel):
    """
    Partial update for AppSettings.

    Unspecified fields are unchanged. `updated_at` is always refreshed
    by the store and cannot be patched.
    """

    daily_reminder_time: Optional[str] = None
    notifications_enabled: Optional[bool] = None
    free_history_days: Optional[int] = Field(default=None, ge=0)
    tone: Optional[str] = None
    first_launch_at: Optional[datetime] = None
    onboarding_completed: Optional[bool] = None
    show_onboarding_on_launch: Optional[bool] = None
    default_currency: Optional[str] = None
    theme_mode: Optional[ThemeMode] = None

    @field_validator("daily_reminder_time")
    @classmethod
    def validate_reminder_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _validate_reminder_time(v)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class Subscription(BaseModel):
    """
    Singleton entitlement record.

    Owned by the purchase flow; read by access control.
    """

    plan: SubscriptionPlan = SubscriptionPlan.FREE
    is_active: bool = False
    expires_at: Optional[datetime] = Field(
        default=None,
        description="Expiry instant; None means no expiry"
    )
    source: Optional[StoreSource] = None
    updated_at: datetime = Field(default_factory=utcnow)


class SubscriptionPatch(BaseModel):
    """Partial update for Subscription. Unspecified fields are unchanged."""

    plan: Optional[SubscriptionPlan] = None
    is_active: Optional[bool] = None
    expires_at: Optional[datetime] = None
    source: Optional[StoreSource] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)
