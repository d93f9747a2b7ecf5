"""Time entry API endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from payroll_recon.api.dependencies import CurrentActor, DbSession
from payroll_recon.api.schemas import (
    ErrorResponse,
    HoursSummaryResponse,
    LockRequest,
    LockResponse,
    TimeEntryCreate,
    TimeEntryListResponse,
    TimeEntryResponse,
    UnlockRequest,
)
from payroll_recon.calculators.aggregation import summarize_hours
from payroll_recon.models import AppUser, TimeEntry
from payroll_recon.services.locking_service import LockingService
from payroll_recon.services.time_entry_service import TimeEntryService

router = APIRouter(prefix="/time-entries", tags=["time-entries"])


def _list_response(entries: list[TimeEntry], summary) -> TimeEntryListResponse:
    return TimeEntryListResponse(
        items=[TimeEntryResponse.model_validate(e) for e in entries],
        total=len(entries),
        summary=HoursSummaryResponse.model_validate(summary),
    )


# ============================================================================
# Worker ledger
# ============================================================================


@router.post(
    "",
    response_model=TimeEntryResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        423: {"model": ErrorResponse},
    },
)
async def submit_time_entry(
    db: DbSession,
    actor: CurrentActor,
    payload: TimeEntryCreate,
) -> TimeEntryResponse:
    """Record hours for a date, replacing any unlocked entry for that date."""
    service = TimeEntryService(db)
    entry = await service.submit(
        actor,
        work_date=payload.work_date,
        hours_worked=payload.hours_worked,
        notes=payload.notes,
        client_id=payload.client_id,
    )
    await db.commit()
    return TimeEntryResponse.model_validate(entry)


@router.get(
    "/mine",
    response_model=TimeEntryListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def list_my_time_entries(
    db: DbSession,
    actor: CurrentActor,
    start_date: date | None = None,
    end_date: date | None = None,
) -> TimeEntryListResponse:
    """List the caller's entries with totals and pay."""
    entries = await TimeEntryService(db).list_range(actor.user_id, start_date, end_date)
    user = await db.get(AppUser, actor.user_id)
    summary = summarize_hours(
        TimeEntryService.to_hours_entries(entries),
        hourly_rate=user.hourly_rate if user is not None else None,
    )
    return _list_response(entries, summary)


@router.get(
    "",
    response_model=TimeEntryListResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def list_time_entries(
    db: DbSession,
    actor: CurrentActor,
    start_date: date | None = None,
    end_date: date | None = None,
    worker_id: Annotated[UUID | None, Query()] = None,
) -> TimeEntryListResponse:
    """List entries visible to an employer or administrator."""
    entries = await TimeEntryService(db).list_visible(actor, start_date, end_date, worker_id)
    summary = summarize_hours(TimeEntryService.to_hours_entries(entries))
    return _list_response(entries, summary)


@router.delete(
    "/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        423: {"model": ErrorResponse},
    },
)
async def delete_time_entry(
    db: DbSession,
    actor: CurrentActor,
    entry_id: Annotated[UUID, Path()],
) -> Response:
    """Delete one of the caller's unlocked entries."""
    await TimeEntryService(db).delete(actor, entry_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Locking
# ============================================================================


@router.post(
    "/lock",
    response_model=LockResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def lock_time_entries(
    db: DbSession,
    actor: CurrentActor,
    payload: LockRequest,
) -> LockResponse:
    """Lock every unlocked entry in a date range."""
    locked_count = await LockingService(db).lock_range(
        actor, payload.start_date, payload.end_date, worker_id=payload.worker_id
    )
    await db.commit()
    return LockResponse(locked_count=locked_count)


@router.post(
    "/{entry_id}/unlock",
    response_model=TimeEntryResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def unlock_time_entry(
    db: DbSession,
    actor: CurrentActor,
    entry_id: Annotated[UUID, Path()],
    payload: UnlockRequest,
) -> TimeEntryResponse:
    """Reopen a locked entry. A reason is required and recorded."""
    entry = await LockingService(db).unlock(actor, entry_id, payload.reason)
    await db.commit()
    return TimeEntryResponse.model_validate(entry)
