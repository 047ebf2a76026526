"""
Report Models for Spendful

Read-only views derived from the ledger:
- SpendingStats: totals and extremes for a period
- PeriodSummary: a weekly/monthly overview with one cell per day
- ExportData: the JSON backup envelope
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from spendful.models.account import AppSettings
from spendful.models.ledger import CustomCategory, DayData, SpendEntry, utcnow


EXPORT_FORMAT_VERSION = "1.0.0"


class CategoryTotal(BaseModel):
    category: str
    total: Decimal


class DayTotal(BaseModel):
    date: date
    amount: Decimal


class SpendingStats(BaseModel):
    """
    Aggregates over the entries of one period.

    An empty period yields zero totals, an empty category list and no
    extreme days.
    """

    total_spend: Decimal = Decimal("0")
    total_entries: int = Field(default=0, ge=0)
    spend_days: int = Field(default=0, ge=0)
    average_spend_per_spend_day: Decimal = Decimal("0")
    top_categories: list[CategoryTotal] = Field(default_factory=list)
    highest_spend_day: Optional[DayTotal] = None
    lowest_spend_day: Optional[DayTotal] = None
    total_days_in_period: int = Field(default=7, ge=0)

    @property
    def no_spend_days(self) -> int:
        """Days in the period with nothing recorded."""
        return max(self.total_days_in_period - self.spend_days, 0)


class PeriodSummary(BaseModel):
    """
    Weekly or monthly overview.

    `days` holds one DayData per calendar day of the period, in date
    order. Days outside the viewable history are locked placeholders and
    contribute nothing to `stats`.
    """

    start_date: date
    end_date: date
    days: list[DayData] = Field(default_factory=list)
    stats: SpendingStats
    locked_days: int = Field(default=0, ge=0)

    @property
    def has_locked_days(self) -> bool:
        return self.locked_days > 0


class ExportData(BaseModel):
    """Structured JSON backup envelope."""

    exported_at: datetime = Field(default_factory=utcnow)
    version: str = EXPORT_FORMAT_VERSION
    entries: list[SpendEntry] = Field(default_factory=list)
    settings: AppSettings
    custom_categories: list[CustomCategory] = Field(default_factory=list)

    def to_backup_dict(self) -> dict:
        """Envelope with the camelCase top-level keys the backup file uses."""
        data = self.model_dump(mode="json")
        return {
            "exportedAt": data["exported_at"],
            "version": data["version"],
            "entries": data["entries"],
            "settings": data["settings"],
            "customCategories": data["custom_categories"],
        }
