"""
Statistics Aggregator

Pure reductions over a list of entries. The result only depends on the
input list (and its order, for tie-breaking), never on storage.

Guarantees:
- an empty list gives zero totals and no extremes, never an error
- each entry counts towards exactly one day and one category
- total_spend equals the sum of all category totals
"""

from datetime import date
from decimal import Decimal
from typing import Iterable

from spendful.models.ledger import SpendEntry, normalize_category
from spendful.models.reports import CategoryTotal, DayTotal, SpendingStats


def day_totals(entries: Iterable[SpendEntry]) -> dict[date, Decimal]:
    """Sum of amounts per day, in first-seen order."""
    totals: dict[date, Decimal] = {}
    for entry in entries:
        totals[entry.date] = totals.get(entry.date, Decimal("0")) + entry.amount
    return totals


def category_totals(entries: Iterable[SpendEntry]) -> list[CategoryTotal]:
    """
    Sum of amounts per category, largest first.

    Equal totals keep the order in which the categories were first seen.
    """
    totals: dict[str, Decimal] = {}
    for entry in entries:
        category = normalize_category(entry.category)
        totals[category] = totals.get(category, Decimal("0")) + entry.amount

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [CategoryTotal(category=name, total=total) for name, total in ranked]


def calculate_spending_stats(
    entries: list[SpendEntry],
    total_days_in_period: int = 7,
) -> SpendingStats:
    """
    Reduce a period's entries to totals, category breakdown and extremes.

    Args:
        entries: Entries of the period (already filtered for access)
        total_days_in_period: Calendar days the period spans

    Returns:
        SpendingStats; highest/lowest days take the first day in
        iteration order when several days share the extreme total.
    """
    if not entries:
        return SpendingStats(total_days_in_period=total_days_in_period)

    per_day = day_totals(entries)
    total_spend = sum(per_day.values(), Decimal("0"))
    spend_days = len(per_day)

    # max/min return the first of equal items
    highest_day = max(per_day.items(), key=lambda item: item[1])
    lowest_day = min(per_day.items(), key=lambda item: item[1])

    return SpendingStats(
        total_spend=total_spend,
        total_entries=len(entries),
        spend_days=spend_days,
        average_spend_per_spend_day=total_spend / spend_days,
        top_categories=category_totals(entries),
        highest_spend_day=DayTotal(date=highest_day[0], amount=highest_day[1]),
        lowest_spend_day=DayTotal(date=lowest_day[0], amount=lowest_day[1]),
        total_days_in_period=total_days_in_period,
    )
