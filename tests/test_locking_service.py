"""Tests for locking and audited unlocking of time entries."""

from datetime import date
from uuid import uuid4

import pytest

from payroll_recon.exceptions import AuthorizationError, NotFoundError, ValidationError
from payroll_recon.services.audit import list_audit_events
from payroll_recon.services.locking_service import LockingService
from payroll_recon.services.time_entry_service import TimeEntryService

pytestmark = pytest.mark.asyncio


@pytest.fixture
async def march_entries(session, employee, other_employee):
    service = TimeEntryService(session)
    entries = []
    for day in (4, 5, 6):
        entries.append(await service.submit(employee, date(2024, 3, day), 8))
    entries.append(await service.submit(other_employee, date(2024, 3, 5), 6))
    return entries


class TestLockRange:
    """Test locking a period."""

    async def test_locks_entries_in_range(self, session, admin, march_entries):
        count = await LockingService(session).lock_range(
            admin, date(2024, 3, 4), date(2024, 3, 5)
        )

        assert count == 3
        locked = [e for e in march_entries if e.is_locked]
        assert len(locked) == 3
        assert all(e.locked_by_user_id == admin.user_id for e in locked)
        assert all(e.locked_at is not None for e in locked)

    async def test_already_locked_not_counted(self, session, admin, march_entries):
        service = LockingService(session)
        await service.lock_range(admin, date(2024, 3, 4), date(2024, 3, 6))

        assert await service.lock_range(admin, date(2024, 3, 4), date(2024, 3, 6)) == 0

    async def test_single_worker(self, session, admin, employee, march_entries):
        count = await LockingService(session).lock_range(
            admin, date(2024, 3, 1), date(2024, 3, 31), worker_id=employee.user_id
        )

        assert count == 3
        entries = await TimeEntryService(session).list_entries(date(2024, 3, 1), date(2024, 3, 31))
        assert {e.worker_id for e in entries if e.is_locked} == {employee.user_id}

    async def test_requires_admin(self, session, employer, march_entries):
        with pytest.raises(AuthorizationError):
            await LockingService(session).lock_range(
                employer, date(2024, 3, 4), date(2024, 3, 5)
            )

    async def test_inverted_range(self, session, admin):
        with pytest.raises(ValidationError):
            await LockingService(session).lock_range(admin, date(2024, 3, 5), date(2024, 3, 4))

    async def test_lock_is_audited(self, session, admin, march_entries):
        await LockingService(session).lock_range(admin, date(2024, 3, 4), date(2024, 3, 4))
        await session.flush()

        events = await list_audit_events(session, "time_entry", march_entries[0].time_entry_id)
        assert [e.action for e in events] == ["lock"]
        assert events[0].actor_user_id == admin.user_id


class TestUnlock:
    """Test administrative unlock."""

    async def test_unlock_allows_edit(self, session, admin, employee, march_entries):
        entry = march_entries[0]
        locking = LockingService(session)
        await locking.lock_range(admin, entry.work_date, entry.work_date)

        unlocked = await locking.unlock(admin, entry.time_entry_id, "Corrected client hours")

        assert unlocked.is_locked is False
        assert unlocked.locked_at is None
        updated = await TimeEntryService(session).submit(employee, entry.work_date, 5)
        assert updated.time_entry_id == entry.time_entry_id

    async def test_unlock_records_reason(self, session, admin, march_entries):
        entry = march_entries[0]
        locking = LockingService(session)
        await locking.lock_range(admin, entry.work_date, entry.work_date)
        await locking.unlock(admin, entry.time_entry_id, "Payroll correction")

        events = await list_audit_events(session, "time_entry", entry.time_entry_id)
        unlock_events = [e for e in events if e.action == "unlock"]

        assert len(unlock_events) == 1
        assert unlock_events[0].before_json["is_locked"] is True
        assert unlock_events[0].after_json == {"is_locked": False, "reason": "Payroll correction"}

    async def test_reason_required(self, session, admin, march_entries):
        with pytest.raises(ValidationError):
            await LockingService(session).unlock(admin, march_entries[0].time_entry_id, "  ")

    async def test_requires_admin(self, session, employee, march_entries):
        with pytest.raises(AuthorizationError):
            await LockingService(session).unlock(employee, march_entries[0].time_entry_id, "x")

    async def test_missing_entry(self, session, admin):
        with pytest.raises(NotFoundError):
            await LockingService(session).unlock(admin, uuid4(), "reason")

    async def test_unlocking_unlocked_entry_is_noop(self, session, admin, march_entries):
        entry = march_entries[0]
        result = await LockingService(session).unlock(admin, entry.time_entry_id, "reason")

        assert result.is_locked is False
        assert await list_audit_events(session, "time_entry", entry.time_entry_id) == []
