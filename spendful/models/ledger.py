"""
Core Ledger Models for Spendful

These models define the records persisted in the key-value store:
1. SpendEntry - one instance of spending on a calendar day
2. RecurringEntry - a template that spawns SpendEntry rows
3. CustomCategory - a user-defined category label
4. LegacyDailyLog - the pre-v2 single-entry-per-day record (read-only)

DESIGN DECISION: Calendar days are plain `date` objects (no timezone).
On the wire they are ISO `YYYY-MM-DD` strings, which are fixed-width and
zero-padded, so string order and date order agree.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


UNCATEGORIZED = "Uncategorized"

DEFAULT_CATEGORIES: tuple[str, ...] = (
    UNCATEGORIZED,
    "Groceries",
    "Shopping",
    "Rent",
    "Utilities",
    "Insurance",
    "Transportation",
    "Dining",
    "Subscriptions",
    "Entertainment",
    "Healthcare",
    "Other",
)

RECURRING_NOTE_TAG = "[Recurring]"

# Alias for annotating fields that are themselves named `date`
CalendarDay = date


def utcnow() -> datetime:
    """Current instant, timezone-aware (UTC)."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


def normalize_category(value: Optional[str]) -> str:
    """Blank or missing categories collapse to 'Uncategorized'."""
    if value is None:
        return UNCATEGORIZED
    value = value.strip()
    return value or UNCATEGORIZED


# =============================================================================
# ENUMS
# =============================================================================

class Frequency(str, Enum):
    """How often a recurring template fires."""
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class RecurringStatus(str, Enum):
    """
    Lifecycle state of a recurring template relative to a given day.

    Only ACTIVE templates generate entries.
    """
    PENDING = "pending"    # start_date is still in the future
    ACTIVE = "active"
    PAUSED = "paused"      # is_active is False
    ENDED = "ended"        # end_date is in the past


# =============================================================================
# SPEND ENTRY
# =============================================================================

class SpendEntry(BaseModel):
    """
    One recorded spend event on a specific date.

    `entry_id` and `date` are fixed at creation; everything else may be
    edited. Several entries may share a date.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    entry_id: str = Field(
        default_factory=new_id,
        description="Client-generated unique identifier"
    )
    date: CalendarDay = Field(
        ...,
        description="Calendar day of the spend (no timezone)"
    )
    amount: Decimal = Field(
        ...,
        description="Amount spent"
    )
    category: str = Field(
        default=UNCATEGORIZED,
        description="Category label"
    )
    currency: Optional[str] = Field(
        default=None,
        description="Currency code; None means the user's default currency"
    )
    note: Optional[str] = Field(
        default=None,
        description="Free text note"
    )

    # Timestamps
    timestamp: datetime = Field(
        default_factory=utcnow,
        description="Creation instant, orders entries within a day"
    )
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, v: Optional[str]) -> str:
        return normalize_category(v)

    @field_validator("currency", mode="before")
    @classmethod
    def upper_currency(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not str(v).strip():
            return None
        return str(v).strip().upper()

    def resolved_currency(self, default_currency: str) -> str:
        """Currency to display, falling back to the user's default."""
        return self.currency or default_currency


# =============================================================================
# RECURRING TEMPLATE
# =============================================================================

class RecurringEntry(BaseModel):
    """
    A template that spawns SpendEntry rows on a schedule.

    The recurring engine only ever mutates `last_generated_date`.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    amount: Decimal
    category: str = Field(default=UNCATEGORIZED)
    currency: Optional[str] = None
    note: Optional[str] = None
    frequency: Frequency
    start_date: date
    end_date: Optional[date] = Field(
        default=None,
        description="Last day an occurrence may fall on; None is open-ended"
    )
    last_generated_date: Optional[date] = Field(
        default=None,
        description="Date of the most recent spawned occurrence"
    )
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, v: Optional[str]) -> str:
        return normalize_category(v)

    @field_validator("currency", mode="before")
    @classmethod
    def upper_currency(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not str(v).strip():
            return None
        return str(v).strip().upper()

    @model_validator(mode="after")
    def validate_dates(self) -> "RecurringEntry":
        """Validate date relationships."""
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")

        if (
            self.last_generated_date is not None
            and self.last_generated_date < self.start_date
        ):
            raise ValueError("Last generated date cannot be before start date")

        return self

    @property
    def generated_note(self) -> str:
        """Note stamped on every entry this template spawns."""
        if self.note:
            return f"{RECURRING_NOTE_TAG} {self.note}"
        return RECURRING_NOTE_TAG


class RecurringPatch(BaseModel):
    """
    Partial update for a recurring template.

    Only fields that were explicitly set are applied; everything else
    is left unchanged.
    """

    amount: Optional[Decimal] = None
    category: Optional[str] = None
    currency: Optional[str] = None
    note: Optional[str] = None
    frequency: Optional[Frequency] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    last_generated_date: Optional[date] = None
    is_active: Optional[bool] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


# =============================================================================
# CATEGORIES
# =============================================================================

class CustomCategory(BaseModel):
    """User-defined category label. Names are not required to be unique."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=100)
    created_at: datetime = Field(default_factory=utcnow)


# =============================================================================
# DERIVED VIEWS
# =============================================================================

class DayData(BaseModel):
    """Everything recorded for one calendar day."""

    date: date
    entries: list[SpendEntry] = Field(default_factory=list)
    total_amount: Decimal = Decimal("0")
    has_spend: bool = False
    locked: bool = Field(
        default=False,
        description="True when the day is outside the viewable history window"
    )

    @classmethod
    def from_entries(cls, day: date, entries: list[SpendEntry]) -> "DayData":
        return cls(
            date=day,
            entries=entries,
            total_amount=sum((e.amount for e in entries), Decimal("0")),
            has_spend=len(entries) > 0,
        )

    @classmethod
    def locked_placeholder(cls, day: date) -> "DayData":
        return cls(date=day, locked=True)


# =============================================================================
# LEGACY (v1) RECORD
# =============================================================================

class LegacyDailyLog(BaseModel):
    """
    Pre-v2 single-entry-per-day log.

    Only read by the schema migrator. Timestamps were stored as epoch
    milliseconds, which pydantic parses into aware datetimes.
    """

    id: str
    date: date
    did_spend: bool = False
    amount: Optional[Decimal] = None
    category: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime
    updated_at: datetime
