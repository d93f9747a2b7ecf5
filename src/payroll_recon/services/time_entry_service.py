"""Time entry ledger: one entry per worker per calendar date."""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_recon.calculators.types import HoursEntry
from payroll_recon.exceptions import (
    AuthorizationError,
    LockedRecordError,
    NotFoundError,
    ValidationError,
)
from payroll_recon.models import TimeEntry, UserRole
from payroll_recon.models.timesheet import MAX_NOTES_LENGTH
from payroll_recon.services.actor import Actor

logger = logging.getLogger(__name__)

MIN_HOURS = Decimal("0")
MAX_HOURS = Decimal("24")
HOURS_PRECISION = Decimal("0.01")


def validate_hours(hours_worked: Decimal | float | int | str) -> Decimal:
    """Coerce and range-check hours, returning them at storage precision."""
    try:
        hours = Decimal(str(hours_worked))
    except (InvalidOperation, ValueError):
        raise ValidationError("Hours must be a number", field="hours_worked")
    if not hours.is_finite() or hours < MIN_HOURS or hours > MAX_HOURS:
        raise ValidationError("Hours must be between 0 and 24", field="hours_worked")
    return hours.quantize(HOURS_PRECISION, rounding=ROUND_HALF_EVEN)


class TimeEntryService:
    """Service for submitting, deleting and listing time entries.

    Locked entries are never mutated here; locking and unlocking belong to
    LockingService. This service only honours the flag as a precondition.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_entry(self, entry_id: UUID) -> TimeEntry:
        entry = await self.session.get(TimeEntry, entry_id)
        if entry is None:
            raise NotFoundError("Time entry", entry_id)
        return entry

    async def find_entry(self, worker_id: UUID, work_date: date) -> TimeEntry | None:
        """Look up the entry for a (worker, date) pair."""
        result = await self.session.execute(
            select(TimeEntry).where(
                TimeEntry.worker_id == worker_id,
                TimeEntry.work_date == work_date,
            )
        )
        return result.scalar_one_or_none()

    async def submit(
        self,
        actor: Actor,
        work_date: date,
        hours_worked: Decimal | float | int | str,
        notes: str | None = None,
        client_id: UUID | None = None,
    ) -> TimeEntry:
        """Insert or update the actor's entry for ``work_date``.

        Raises:
            ValidationError: hours outside [0, 24] or notes too long
            LockedRecordError: an entry exists for the date and is locked
            AuthorizationError: actor is not an employee or employer
        """
        actor.require_role(UserRole.EMPLOYEE, UserRole.EMPLOYER, action="submit time entries")

        # A locked date rejects every resubmission, valid or not
        entry = await self.find_entry(actor.user_id, work_date)
        if entry is not None and entry.is_locked:
            logger.warning(
                "Rejected update of locked time entry %s for worker %s",
                entry.time_entry_id,
                actor.user_id,
            )
            raise LockedRecordError(entry.time_entry_id)

        hours = validate_hours(hours_worked)
        if notes is not None and len(notes) > MAX_NOTES_LENGTH:
            raise ValidationError(
                f"Notes cannot exceed {MAX_NOTES_LENGTH} characters",
                field="notes",
            )

        if entry is not None:
            entry.hours_worked = hours
            # Resubmission without notes keeps the earlier notes
            if notes is not None:
                entry.notes = notes.strip()
            if client_id is not None:
                entry.client_id = client_id
            await self.session.flush()
            return entry

        employer_id = actor.user_id if actor.role == UserRole.EMPLOYER.value else actor.employer_id
        entry = TimeEntry(
            worker_id=actor.user_id,
            employer_id=employer_id,
            work_date=work_date,
            hours_worked=hours,
            notes=(notes or "").strip(),
            client_id=client_id,
            is_locked=False,
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def delete(self, actor: Actor, entry_id: UUID) -> None:
        """Delete an unlocked entry owned by the actor."""
        entry = await self.get_entry(entry_id)
        if entry.worker_id != actor.user_id:
            raise AuthorizationError("Not authorized to delete this entry")
        if entry.is_locked:
            logger.warning("Rejected delete of locked time entry %s", entry_id)
            raise LockedRecordError(entry_id, "This time entry is locked and cannot be deleted")

        await self.session.delete(entry)
        await self.session.flush()

    async def list_range(
        self,
        worker_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[TimeEntry]:
        """Entries for one worker within an inclusive date range, by date."""
        return await self.list_entries(start_date, end_date, worker_id=worker_id)

    async def list_entries(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        worker_id: UUID | None = None,
        employer_id: UUID | None = None,
    ) -> list[TimeEntry]:
        """Entries across workers, optionally scoped to a worker or employer."""
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must not be after end_date", field="start_date")

        query = select(TimeEntry)
        if worker_id is not None:
            query = query.where(TimeEntry.worker_id == worker_id)
        if employer_id is not None:
            query = query.where(TimeEntry.employer_id == employer_id)
        if start_date is not None:
            query = query.where(TimeEntry.work_date >= start_date)
        if end_date is not None:
            query = query.where(TimeEntry.work_date <= end_date)

        result = await self.session.execute(
            query.order_by(TimeEntry.work_date, TimeEntry.worker_id)
        )
        return list(result.scalars().all())

    async def list_visible(
        self,
        actor: Actor,
        start_date: date | None = None,
        end_date: date | None = None,
        worker_id: UUID | None = None,
    ) -> list[TimeEntry]:
        """Entries the actor may see: admins see all, employers their workers."""
        if actor.is_admin:
            return await self.list_entries(start_date, end_date, worker_id=worker_id)
        actor.require_role(UserRole.EMPLOYER, action="list other workers' entries")
        return await self.list_entries(
            start_date, end_date, worker_id=worker_id, employer_id=actor.user_id
        )

    @staticmethod
    def to_hours_entries(entries: list[TimeEntry]) -> list[HoursEntry]:
        """Project ORM entries onto the aggregation input type."""
        return [
            HoursEntry(
                worker_id=e.worker_id,
                work_date=e.work_date,
                hours_worked=Decimal(e.hours_worked),
                client_id=e.client_id,
            )
            for e in entries
        ]
