"""Administrative locking and unlocking of time entries."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_recon.exceptions import NotFoundError, ValidationError
from payroll_recon.models import TimeEntry
from payroll_recon.models.base import utcnow
from payroll_recon.services.actor import Actor
from payroll_recon.services.audit import record_audit

logger = logging.getLogger(__name__)


class LockingService:
    """Service for freezing historical time entries.

    Locking a period marks every unlocked entry in range as locked so the
    ledger rejects later edits and deletes. Unlocking is a per-entry,
    reason-required administrative action that leaves an audit record.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def lock_range(
        self,
        actor: Actor,
        start_date: date,
        end_date: date,
        worker_id: UUID | None = None,
    ) -> int:
        """Lock all unlocked entries in an inclusive date range.

        Returns count of locked records.
        """
        actor.require_admin("lock time entries")
        if start_date > end_date:
            raise ValidationError("start_date must not be after end_date", field="start_date")

        conditions = [
            TimeEntry.work_date >= start_date,
            TimeEntry.work_date <= end_date,
            TimeEntry.is_locked.is_(False),
        ]
        if worker_id is not None:
            conditions.append(TimeEntry.worker_id == worker_id)

        result = await self.session.execute(select(TimeEntry).where(*conditions))
        entries = list(result.scalars().all())

        locked_at = utcnow()
        for entry in entries:
            entry.is_locked = True
            entry.locked_at = locked_at
            entry.locked_by_user_id = actor.user_id
            await record_audit(
                self.session,
                entity_type="time_entry",
                entity_id=entry.time_entry_id,
                action="lock",
                actor_user_id=actor.user_id,
                before={"is_locked": False},
                after={"is_locked": True, "locked_at": locked_at},
            )
        await self.session.flush()
        locked_count = len(entries)

        logger.info(
            "Locked %d time entries between %s and %s (worker=%s) by %s",
            locked_count,
            start_date,
            end_date,
            worker_id,
            actor.user_id,
        )
        return locked_count

    async def unlock(self, actor: Actor, entry_id: UUID, reason: str) -> TimeEntry:
        """Reopen a single locked entry, recording who and why."""
        actor.require_admin("unlock time entries")
        if not reason or not reason.strip():
            raise ValidationError("A reason is required to unlock an entry", field="reason")

        entry = await self.session.get(TimeEntry, entry_id)
        if entry is None:
            raise NotFoundError("Time entry", entry_id)
        if not entry.is_locked:
            return entry

        before = {
            "is_locked": entry.is_locked,
            "locked_at": entry.locked_at,
            "locked_by_user_id": entry.locked_by_user_id,
        }
        entry.is_locked = False
        entry.locked_at = None
        entry.locked_by_user_id = None

        await record_audit(
            self.session,
            entity_type="time_entry",
            entity_id=entry.time_entry_id,
            action="unlock",
            actor_user_id=actor.user_id,
            before=before,
            after={"is_locked": False, "reason": reason.strip()},
        )
        await self.session.flush()

        logger.info("Unlocked time entry %s by %s", entry_id, actor.user_id)
        return entry
