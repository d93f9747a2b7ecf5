"""Invoice records and their payment lifecycle."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_recon.calculators.deductions import round_to_cents
from payroll_recon.exceptions import (
    DuplicateInvoiceNumberError,
    NotFoundError,
    ValidationError,
)
from payroll_recon.models import EmploymentType, Invoice, InvoiceStatus, PayrollDeduction
from payroll_recon.services.actor import Actor
from payroll_recon.services.audit import record_audit
from payroll_recon.services.state_machine import InvoiceStatusRules

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS = ("name", "payroll_month", "invoice_number", "client_name")
UPDATABLE_FIELDS = {
    "name",
    "worker_id",
    "payroll_month",
    "invoice_date",
    "invoice_number",
    "invoice_amount",
    "number_of_hours",
    "client_name",
    "end_client",
    "employment_type",
    "name_1099",
    "status",
    "payment_received_date",
    "notes",
}
# Columns that cannot be cleared through an update
NON_NULLABLE_FIELDS = UPDATABLE_FIELDS - {
    "worker_id",
    "end_client",
    "name_1099",
    "payment_received_date",
    "notes",
}


@dataclass
class InvoiceData:
    """Fields supplied when creating an invoice."""

    name: str
    payroll_month: str
    invoice_date: date
    invoice_number: str
    invoice_amount: Decimal
    number_of_hours: Decimal
    client_name: str
    end_client: str | None = None
    employment_type: str = EmploymentType.W2.value
    name_1099: str | None = None
    status: str = InvoiceStatus.PENDING.value
    payment_received_date: date | None = None
    notes: str | None = None
    worker_id: UUID | None = None


@dataclass
class PendingGroup:
    """Outstanding invoices for one billed person."""

    name: str
    worker_id: UUID | None
    total_pending: Decimal = Decimal("0")
    invoices: list[Invoice] = field(default_factory=list)


def _to_amount(value: Any, field_name: str, label: str) -> Decimal:
    """Coerce a non-negative amount, rounded to cents."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{label} must be a number", field=field_name)
    if not amount.is_finite():
        raise ValidationError(f"{label} must be a number", field=field_name)
    if amount < 0:
        raise ValidationError(f"{label} cannot be negative", field=field_name)
    return round_to_cents(amount)


def _validate_employment_type(employment_type: str) -> str:
    value = employment_type.value if isinstance(employment_type, EmploymentType) else employment_type
    if value not in {t.value for t in EmploymentType}:
        raise ValidationError(
            f"Invalid employment type '{value}'", field="employment_type"
        )
    return value


class InvoiceService:
    """Service for invoice CRUD and status changes.

    Operations are administrator-only. Status changes are unrestricted
    apart from the payment-received-date rule in InvoiceStatusRules.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_invoice(self, invoice_id: UUID) -> Invoice:
        invoice = await self.session.get(Invoice, invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    async def get_deduction(self, invoice_id: UUID) -> PayrollDeduction | None:
        result = await self.session.execute(
            select(PayrollDeduction).where(PayrollDeduction.invoice_id == invoice_id)
        )
        return result.scalar_one_or_none()

    async def _number_taken(self, invoice_number: str) -> bool:
        result = await self.session.execute(
            select(Invoice.invoice_id).where(Invoice.invoice_number == invoice_number)
        )
        return result.first() is not None

    async def _flush_unique(self, invoice_number: str) -> None:
        """Flush, translating a unique-number race into a typed error."""
        try:
            await self.session.flush()
        except IntegrityError as exc:
            if "invoice_number" in str(exc.orig).lower():
                raise DuplicateInvoiceNumberError(invoice_number) from exc
            raise

    async def create(self, actor: Actor, data: InvoiceData) -> Invoice:
        """Create an invoice.

        Raises:
            DuplicateInvoiceNumberError: the number is already in use
            ValidationError: negative amount/hours, missing text fields, or
                Received without a payment date
        """
        actor.require_admin("create invoices")

        invoice_number = (data.invoice_number or "").strip()
        for field_name in REQUIRED_TEXT_FIELDS:
            value = invoice_number if field_name == "invoice_number" else getattr(data, field_name)
            if not value or not str(value).strip():
                raise ValidationError(f"{field_name} is required", field=field_name)
        invoice_amount = _to_amount(data.invoice_amount, "invoice_amount", "Invoice amount")
        number_of_hours = _to_amount(data.number_of_hours, "number_of_hours", "Number of hours")
        status = InvoiceStatusRules.normalize(data.status)
        payment_date = InvoiceStatusRules.resolve_payment_date(status, data.payment_received_date)
        employment_type = _validate_employment_type(data.employment_type)

        if await self._number_taken(invoice_number):
            logger.warning("Rejected duplicate invoice number %s", invoice_number)
            raise DuplicateInvoiceNumberError(invoice_number)

        invoice = Invoice(
            invoice_number=invoice_number,
            name=data.name.strip(),
            worker_id=data.worker_id,
            payroll_month=data.payroll_month.strip(),
            invoice_date=data.invoice_date,
            invoice_amount=invoice_amount,
            number_of_hours=number_of_hours,
            client_name=data.client_name.strip(),
            end_client=data.end_client.strip() if data.end_client else None,
            employment_type=employment_type,
            name_1099=data.name_1099.strip() if data.name_1099 else None,
            status=status,
            payment_received_date=payment_date,
            notes=data.notes,
            created_by_user_id=actor.user_id,
        )
        self.session.add(invoice)
        await self._flush_unique(invoice_number)
        logger.info("Created invoice %s (%s)", invoice.invoice_number, invoice.invoice_id)
        return invoice

    async def update(self, actor: Actor, invoice_id: UUID, changes: dict[str, Any]) -> Invoice:
        """Apply a partial update.

        A changed invoice amount recomputes the deduction's net payable
        unless the deduction is in override mode.
        """
        actor.require_admin("update invoices")
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown invoice fields: {sorted(unknown)}")

        cleared = sorted(f for f in NON_NULLABLE_FIELDS if f in changes and changes[f] is None)
        if cleared:
            raise ValidationError(f"{cleared[0]} cannot be null", field=cleared[0])

        invoice = await self.get_invoice(invoice_id)
        changes = dict(changes)

        if "invoice_number" in changes:
            number = (changes["invoice_number"] or "").strip()
            if not number:
                raise ValidationError("invoice_number is required", field="invoice_number")
            if number != invoice.invoice_number and await self._number_taken(number):
                logger.warning("Rejected duplicate invoice number %s", number)
                raise DuplicateInvoiceNumberError(number)
            changes["invoice_number"] = number
        for field_name in ("name", "payroll_month", "client_name"):
            if field_name in changes and not (changes[field_name] or "").strip():
                raise ValidationError(f"{field_name} is required", field=field_name)
        if "invoice_amount" in changes:
            changes["invoice_amount"] = _to_amount(
                changes["invoice_amount"], "invoice_amount", "Invoice amount"
            )
        if "number_of_hours" in changes:
            changes["number_of_hours"] = _to_amount(
                changes["number_of_hours"], "number_of_hours", "Number of hours"
            )
        if "employment_type" in changes:
            changes["employment_type"] = _validate_employment_type(changes["employment_type"])

        before_status = self._status_snapshot(invoice)
        if "status" in changes or "payment_received_date" in changes:
            status = InvoiceStatusRules.normalize(changes.get("status", invoice.status))
            payment_date = changes.get("payment_received_date", invoice.payment_received_date)
            changes["status"] = status
            changes["payment_received_date"] = InvoiceStatusRules.resolve_payment_date(
                status, payment_date
            )

        amount_changed = (
            "invoice_amount" in changes
            and changes["invoice_amount"] != Decimal(invoice.invoice_amount)
        )
        for field_name, value in changes.items():
            setattr(invoice, field_name, value)
        if self._status_snapshot(invoice) != before_status:
            await self._record_status_change(actor, invoice, before_status)
        await self._flush_unique(invoice.invoice_number)

        if amount_changed:
            # Deferred import: DeductionService depends on this module
            from payroll_recon.services.deduction_service import DeductionService

            await DeductionService(self.session).recompute(invoice)

        return invoice

    async def update_status(
        self,
        actor: Actor,
        invoice_id: UUID,
        status: str | InvoiceStatus,
        payment_received_date: date | None = None,
    ) -> Invoice:
        """Move an invoice to any status.

        Received requires ``payment_received_date``; every other status
        clears the stored date.
        """
        actor.require_admin("update invoice status")
        new_status = InvoiceStatusRules.normalize(status)
        payment_date = InvoiceStatusRules.resolve_payment_date(new_status, payment_received_date)

        invoice = await self.get_invoice(invoice_id)
        before = self._status_snapshot(invoice)
        invoice.status = new_status
        invoice.payment_received_date = payment_date

        await self._record_status_change(actor, invoice, before)
        await self.session.flush()
        return invoice

    @staticmethod
    def _status_snapshot(invoice: Invoice) -> dict[str, Any]:
        return {
            "status": invoice.status,
            "payment_received_date": invoice.payment_received_date,
        }

    async def _record_status_change(
        self, actor: Actor, invoice: Invoice, before: dict[str, Any]
    ) -> None:
        after = self._status_snapshot(invoice)
        await record_audit(
            self.session,
            entity_type="invoice",
            entity_id=invoice.invoice_id,
            action=f"status_change:{before['status']}:{after['status']}",
            actor_user_id=actor.user_id,
            before=before,
            after=after,
        )
        logger.info(
            "Invoice %s status %s -> %s",
            invoice.invoice_number,
            before["status"],
            after["status"],
        )

    async def delete(self, actor: Actor, invoice_id: UUID) -> None:
        """Delete an invoice together with its deduction record."""
        actor.require_admin("delete invoices")
        invoice = await self.get_invoice(invoice_id)
        await record_audit(
            self.session,
            entity_type="invoice",
            entity_id=invoice.invoice_id,
            action="deleted",
            actor_user_id=actor.user_id,
            before=invoice.to_dict(),
        )
        await self.session.execute(
            delete(PayrollDeduction).where(PayrollDeduction.invoice_id == invoice_id)
        )
        await self.session.delete(invoice)
        await self.session.flush()
        logger.info("Deleted invoice %s", invoice.invoice_number)

    async def list_invoices(
        self,
        month: str | None = None,
        name: str | None = None,
        status: str | None = None,
        search: str | None = None,
    ) -> list[Invoice]:
        """Invoices filtered by month, person name, status or number, newest first."""
        query = select(Invoice)
        if month:
            query = query.where(Invoice.payroll_month == month)
        if name:
            query = query.where(Invoice.name.ilike(f"%{name}%"))
        if status:
            query = query.where(Invoice.status == InvoiceStatusRules.normalize(status))
        if search:
            query = query.where(Invoice.invoice_number.ilike(f"%{search}%"))

        result = await self.session.execute(
            query.order_by(Invoice.invoice_date.desc(), Invoice.invoice_number)
        )
        return list(result.scalars().all())

    async def list_pending(self) -> list[PendingGroup]:
        """Outstanding invoices grouped by billed person.

        Invoices linked to a worker group by that worker; unlinked invoices
        fall back to the free-text name, so spelling variants of an
        unlinked name stay separate.
        """
        result = await self.session.execute(
            select(Invoice)
            .where(Invoice.status.in_(InvoiceStatusRules.OUTSTANDING))
            .order_by(Invoice.invoice_date.desc(), Invoice.invoice_number)
        )

        groups: dict[UUID | str, PendingGroup] = {}
        for invoice in result.scalars().all():
            key: UUID | str = invoice.worker_id if invoice.worker_id is not None else invoice.name
            group = groups.get(key)
            if group is None:
                group = PendingGroup(name=invoice.name, worker_id=invoice.worker_id)
                groups[key] = group
            group.invoices.append(invoice)
            group.total_pending += Decimal(invoice.invoice_amount)
        return list(groups.values())
