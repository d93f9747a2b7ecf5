"""Hours aggregation used by reporting."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from decimal import ROUND_HALF_EVEN, Decimal
from uuid import UUID

from payroll_recon.calculators.types import (
    ZERO,
    ClientActivity,
    HoursEntry,
    HoursStats,
    HoursSummary,
    WorkerWeek,
)

HOURS_PRECISION = Decimal("0.01")
WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(HOURS_PRECISION, rounding=ROUND_HALF_EVEN)


def summarize_hours(
    entries: Iterable[HoursEntry],
    hourly_rate: Decimal | None = None,
) -> HoursSummary:
    """Total, average and (when a rate is known) pay for a set of entries.

    An empty set averages to zero rather than failing.
    """
    entries = list(entries)
    total = sum((e.hours_worked for e in entries), ZERO)
    count = len(entries)
    average = _quantize(total / count) if count else ZERO
    pay = _quantize(total * hourly_rate) if hourly_rate is not None else None
    return HoursSummary(total_hours=total, entry_count=count, average_hours=average, pay=pay)


def weekly_summary(entries: Iterable[HoursEntry], week_start: date) -> list[WorkerWeek]:
    """Group a week's entries (start + 6 days) by worker, ordered by date."""
    week_end = week_start + timedelta(days=6)
    by_worker: dict[UUID, WorkerWeek] = {}
    for entry in sorted(entries, key=lambda e: (str(e.worker_id), e.work_date)):
        if not week_start <= entry.work_date <= week_end:
            continue
        week = by_worker.setdefault(entry.worker_id, WorkerWeek(worker_id=entry.worker_id))
        week.entries.append(entry)
        week.total_hours += entry.hours_worked
    return list(by_worker.values())


def monthly_totals(entries: Iterable[HoursEntry]) -> dict[tuple[UUID, str], HoursSummary]:
    """Per (worker, YYYY-MM) totals."""
    buckets: dict[tuple[UUID, str], list[HoursEntry]] = {}
    for entry in entries:
        key = (entry.worker_id, entry.work_date.strftime("%Y-%m"))
        buckets.setdefault(key, []).append(entry)
    # Newest month first
    ordered = sorted(buckets, key=lambda key: (key[1], str(key[0])), reverse=True)
    return {key: summarize_hours(buckets[key]) for key in ordered}


def hours_stats(entries: Iterable[HoursEntry]) -> HoursStats:
    """Statistics over a period, including hours by weekday."""
    entries = list(entries)
    summary = summarize_hours(entries)
    by_day = {name: ZERO for name in WEEKDAY_NAMES}
    for entry in entries:
        by_day[WEEKDAY_NAMES[entry.work_date.weekday()]] += entry.hours_worked
    return HoursStats(
        total_hours=summary.total_hours,
        total_entries=summary.entry_count,
        unique_workers=len({e.worker_id for e in entries}),
        average_hours_per_entry=summary.average_hours,
        hours_by_day=by_day,
    )


def client_activity(entries: Iterable[HoursEntry]) -> list[ClientActivity]:
    """Hours and entry counts per client, busiest client first."""
    by_client: dict[UUID | None, ClientActivity] = {}
    for entry in entries:
        activity = by_client.setdefault(entry.client_id, ClientActivity(client_id=entry.client_id))
        activity.total_hours += entry.hours_worked
        activity.entry_count += 1
    return sorted(
        by_client.values(),
        key=lambda a: (-a.total_hours, str(a.client_id or "")),
    )
