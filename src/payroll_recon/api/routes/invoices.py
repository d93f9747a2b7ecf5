"""Invoice and deduction API endpoints."""

from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from payroll_recon.api.dependencies import CurrentActor, DbSession
from payroll_recon.api.schemas import (
    DeductionResponse,
    DeductionUpdate,
    ErrorResponse,
    InvoiceCreate,
    InvoiceListResponse,
    InvoiceResponse,
    InvoiceStatusUpdate,
    InvoiceUpdate,
    PendingGroupResponse,
    PendingInvoicesResponse,
)
from payroll_recon.models import Invoice
from payroll_recon.services.deduction_service import DeductionService, build_deduction_input
from payroll_recon.services.invoice_service import InvoiceData, InvoiceService

router = APIRouter(prefix="/invoices", tags=["invoices"])


async def _invoice_response(service: InvoiceService, invoice: Invoice) -> InvoiceResponse:
    resp = InvoiceResponse.model_validate(invoice)
    deduction = await service.get_deduction(invoice.invoice_id)
    if deduction is not None:
        resp.deduction = DeductionResponse.model_validate(deduction)
    return resp


# ============================================================================
# Invoice CRUD
# ============================================================================


@router.post(
    "",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_invoice(
    db: DbSession,
    actor: CurrentActor,
    payload: InvoiceCreate,
) -> InvoiceResponse:
    """Create an invoice with a unique number."""
    service = InvoiceService(db)
    invoice = await service.create(actor, InvoiceData(**payload.model_dump()))
    await db.commit()
    return InvoiceResponse.model_validate(invoice)


@router.get(
    "",
    response_model=InvoiceListResponse,
    responses={403: {"model": ErrorResponse}},
)
async def list_invoices(
    db: DbSession,
    actor: CurrentActor,
    month: str | None = None,
    name: str | None = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    search: str | None = None,
) -> InvoiceListResponse:
    """List invoices with optional filters."""
    actor.require_admin("list invoices")
    service = InvoiceService(db)
    invoices = await service.list_invoices(
        month=month, name=name, status=status_filter, search=search
    )
    items = [await _invoice_response(service, inv) for inv in invoices]
    return InvoiceListResponse(items=items, total=len(items))


@router.get(
    "/pending",
    response_model=PendingInvoicesResponse,
    responses={403: {"model": ErrorResponse}},
)
async def list_pending_invoices(
    db: DbSession,
    actor: CurrentActor,
) -> PendingInvoicesResponse:
    """Outstanding invoices grouped by billed person."""
    actor.require_admin("view pending invoices")
    groups = await InvoiceService(db).list_pending()
    return PendingInvoicesResponse(
        groups=[PendingGroupResponse.model_validate(g) for g in groups],
        total_pending=sum((g.total_pending for g in groups), Decimal("0")),
    )


@router.get(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_invoice(
    db: DbSession,
    actor: CurrentActor,
    invoice_id: Annotated[UUID, Path()],
) -> InvoiceResponse:
    """Get an invoice with its deduction, if any."""
    actor.require_admin("view invoices")
    service = InvoiceService(db)
    invoice = await service.get_invoice(invoice_id)
    return await _invoice_response(service, invoice)


@router.put(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def update_invoice(
    db: DbSession,
    actor: CurrentActor,
    invoice_id: Annotated[UUID, Path()],
    payload: InvoiceUpdate,
) -> InvoiceResponse:
    """Apply a partial update; only fields present in the body change."""
    service = InvoiceService(db)
    invoice = await service.update(actor, invoice_id, payload.model_dump(exclude_unset=True))
    await db.commit()
    return await _invoice_response(service, invoice)


@router.put(
    "/{invoice_id}/status",
    response_model=InvoiceResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_invoice_status(
    db: DbSession,
    actor: CurrentActor,
    invoice_id: Annotated[UUID, Path()],
    payload: InvoiceStatusUpdate,
) -> InvoiceResponse:
    """Change status; Received requires a payment date."""
    service = InvoiceService(db)
    invoice = await service.update_status(
        actor, invoice_id, payload.status, payload.payment_received_date
    )
    await db.commit()
    return await _invoice_response(service, invoice)


@router.delete(
    "/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_invoice(
    db: DbSession,
    actor: CurrentActor,
    invoice_id: Annotated[UUID, Path()],
) -> Response:
    """Delete an invoice and its deduction."""
    await InvoiceService(db).delete(actor, invoice_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Deductions
# ============================================================================


@router.put(
    "/{invoice_id}/deductions",
    response_model=DeductionResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def save_deductions(
    db: DbSession,
    actor: CurrentActor,
    invoice_id: Annotated[UUID, Path()],
    payload: DeductionUpdate,
) -> DeductionResponse:
    """Save deduction lines and return the recomputed net payable."""
    data = build_deduction_input(
        compensation_type=payload.compensation.type if payload.compensation else None,
        compensation_amount=payload.compensation.amount if payload.compensation else None,
        processing_tax=payload.processing_tax,
        processing_charges=payload.processing_charges,
        custom=[(line.name, line.amount) for line in payload.custom],
        is_override=payload.is_override,
        override_amount=payload.override_amount,
    )
    deduction = await DeductionService(db).save(actor, invoice_id, data)
    await db.commit()
    return DeductionResponse.model_validate(deduction)
