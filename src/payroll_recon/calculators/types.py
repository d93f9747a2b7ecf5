"""Type definitions for deduction and hours calculations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Union
from uuid import UUID

ZERO = Decimal("0")


@dataclass(frozen=True)
class W2Compensation:
    """W2 compensation amount withheld from the invoice."""

    amount: Decimal


@dataclass(frozen=True)
class Contractor1099Compensation:
    """1099 compensation amount withheld from the invoice."""

    amount: Decimal


# Exactly one variant (or none) may be given, so W2 and 1099 amounts can
# never both be set on the same deduction.
CompensationInput = Union[W2Compensation, Contractor1099Compensation]


@dataclass(frozen=True)
class CustomDeduction:
    """A named custom deduction line."""

    name: str = ""
    amount: Decimal = ZERO


@dataclass(frozen=True)
class DeductionInput:
    """Deduction fields for one invoice."""

    compensation: CompensationInput | None = None
    processing_tax: Decimal = ZERO
    processing_charges: Decimal = ZERO
    custom: tuple[CustomDeduction, ...] = ()
    is_override: bool = False
    override_amount: Decimal | None = None

    @property
    def amount_w2(self) -> Decimal:
        if isinstance(self.compensation, W2Compensation):
            return self.compensation.amount
        return ZERO

    @property
    def amount_1099(self) -> Decimal:
        if isinstance(self.compensation, Contractor1099Compensation):
            return self.compensation.amount
        return ZERO

    def deduction_amounts(self) -> list[Decimal]:
        """All amounts subtracted from gross in non-override mode."""
        return [
            self.amount_w2,
            self.amount_1099,
            self.processing_tax,
            self.processing_charges,
            *(line.amount for line in self.custom),
        ]


@dataclass(frozen=True)
class HoursEntry:
    """Minimal view of a time entry used for aggregation."""

    worker_id: UUID
    work_date: date
    hours_worked: Decimal
    client_id: UUID | None = None


@dataclass
class HoursSummary:
    """Aggregated hours for a set of entries."""

    total_hours: Decimal = ZERO
    entry_count: int = 0
    average_hours: Decimal = ZERO
    pay: Decimal | None = None


@dataclass
class WorkerWeek:
    """One worker's entries and total for a week."""

    worker_id: UUID
    total_hours: Decimal = ZERO
    entries: list[HoursEntry] = field(default_factory=list)


@dataclass
class HoursStats:
    """Administrative statistics over a period."""

    total_hours: Decimal
    total_entries: int
    unique_workers: int
    average_hours_per_entry: Decimal
    hours_by_day: dict[str, Decimal]


@dataclass
class ClientActivity:
    """Hours logged against one client (``None`` for unassigned entries)."""

    client_id: UUID | None
    total_hours: Decimal = ZERO
    entry_count: int = 0
