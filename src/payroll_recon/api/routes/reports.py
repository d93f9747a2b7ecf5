"""Hours reporting endpoints."""

from datetime import date, timedelta
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query

from payroll_recon.api.dependencies import CurrentActor, DbSession
from payroll_recon.api.schemas import (
    ClientActivityResponse,
    ErrorResponse,
    HoursStatsResponse,
    HoursSummaryResponse,
    MonthlyTotalResponse,
    WeeklySummaryResponse,
    WorkerWeekResponse,
)
from payroll_recon.calculators.aggregation import (
    client_activity,
    hours_stats,
    monthly_totals,
    summarize_hours,
    weekly_summary,
)
from payroll_recon.models import AppUser
from payroll_recon.services.time_entry_service import TimeEntryService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get(
    "/hours-summary",
    response_model=HoursSummaryResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def hours_summary(
    db: DbSession,
    actor: CurrentActor,
    start_date: date | None = None,
    end_date: date | None = None,
    worker_id: Annotated[UUID | None, Query()] = None,
) -> HoursSummaryResponse:
    """Total and average hours; pay is included when a single worker is selected."""
    service = TimeEntryService(db)
    target = worker_id or actor.user_id
    if target == actor.user_id:
        entries = await service.list_range(target, start_date, end_date)
    else:
        entries = await service.list_visible(actor, start_date, end_date, worker_id=target)

    worker = await db.get(AppUser, target)
    summary = summarize_hours(
        TimeEntryService.to_hours_entries(entries),
        hourly_rate=worker.hourly_rate if worker is not None else None,
    )
    return HoursSummaryResponse.model_validate(summary)


@router.get(
    "/weekly-summary",
    response_model=WeeklySummaryResponse,
    responses={403: {"model": ErrorResponse}},
)
async def weekly_hours_summary(
    db: DbSession,
    actor: CurrentActor,
    week_start: date,
) -> WeeklySummaryResponse:
    """Per-worker hours for the seven days starting at ``week_start``."""
    week_end = week_start + timedelta(days=6)
    entries = await TimeEntryService(db).list_visible(actor, week_start, week_end)
    weeks = weekly_summary(TimeEntryService.to_hours_entries(entries), week_start)
    return WeeklySummaryResponse(
        week_start=week_start,
        week_end=week_end,
        workers=[WorkerWeekResponse.model_validate(w) for w in weeks],
    )


@router.get(
    "/stats",
    response_model=HoursStatsResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def stats(
    db: DbSession,
    actor: CurrentActor,
    start_date: date | None = None,
    end_date: date | None = None,
) -> HoursStatsResponse:
    """Administrative statistics over a period."""
    actor.require_admin("view hours statistics")
    entries = await TimeEntryService(db).list_entries(start_date, end_date)
    return HoursStatsResponse.model_validate(
        hours_stats(TimeEntryService.to_hours_entries(entries))
    )


@router.get(
    "/monthly-totals",
    response_model=list[MonthlyTotalResponse],
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def monthly_hours_totals(
    db: DbSession,
    actor: CurrentActor,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[MonthlyTotalResponse]:
    """Per-worker totals by month, newest month first."""
    entries = await TimeEntryService(db).list_visible(actor, start_date, end_date)
    totals = monthly_totals(TimeEntryService.to_hours_entries(entries))
    return [
        MonthlyTotalResponse(
            worker_id=worker_id,
            month=month,
            total_hours=summary.total_hours,
            entry_count=summary.entry_count,
        )
        for (worker_id, month), summary in totals.items()
    ]


@router.get(
    "/client-activity",
    response_model=list[ClientActivityResponse],
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def client_activity_report(
    db: DbSession,
    actor: CurrentActor,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[ClientActivityResponse]:
    """Hours per client across all workers, busiest client first."""
    actor.require_admin("view client activity")
    entries = await TimeEntryService(db).list_entries(start_date, end_date)
    return [
        ClientActivityResponse.model_validate(activity)
        for activity in client_activity(TimeEntryService.to_hours_entries(entries))
    ]
