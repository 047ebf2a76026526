"""
Access Control

Pure functions deciding which calendar days a user may view.

Free users see today plus the last `free_history_days` days. Premium
users see everything. Nothing here deletes data: restricted days stay in
storage and callers show a locked placeholder instead.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional

from spendful.dates import DayLike, as_day
from spendful.models.account import Subscription, SubscriptionPlan
from spendful.models.ledger import SpendEntry


def _aware(instant: datetime) -> datetime:
    # Records written without a zone are taken to be UTC
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


def is_premium(subscription: Subscription, now: Optional[datetime] = None) -> bool:
    """
    Whether the subscription currently grants premium access.

    Lifetime always does. Other paid plans do while active and not past
    `expires_at` (no expiry means no end).
    """
    if subscription.plan == SubscriptionPlan.LIFETIME:
        return True

    if subscription.is_active and subscription.plan != SubscriptionPlan.FREE:
        if subscription.expires_at is None:
            return True
        now = _aware(now or datetime.now(timezone.utc))
        return _aware(subscription.expires_at) > now

    return False


def can_view_date(
    day: DayLike,
    subscription: Subscription,
    free_history_days: int,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> bool:
    """
    Whether data for `day` may be shown.

    Today is never gated. Future days and days older than the free
    window are gated for non-premium users.
    """
    if is_premium(subscription, now=now):
        return True

    day = as_day(day)
    today = today or date.today()
    if day == today:
        return True

    diff_days = (today - day).days
    return 0 <= diff_days <= free_history_days


def free_history_cutoff_date(free_history_days: int, today: Optional[date] = None) -> date:
    """Oldest day a free user may view."""
    return (today or date.today()) - timedelta(days=free_history_days)


def filter_viewable(
    entries: Iterable[SpendEntry],
    subscription: Subscription,
    free_history_days: int,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> list[SpendEntry]:
    """Drop entries on days the user may not view, keeping order."""
    today = today or date.today()
    return [
        e for e in entries
        if can_view_date(e.date, subscription, free_history_days, today=today, now=now)
    ]
