"""Persistence of invoice deductions and the derived net payable."""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from payroll_recon.calculators.deductions import (
    compensation_from_amounts,
    compute_net_payable,
    custom_lines,
    quantize_deduction,
    validate_deduction,
)
from payroll_recon.calculators.types import (
    Contractor1099Compensation,
    CustomDeduction,
    DeductionInput,
    W2Compensation,
)
from payroll_recon.exceptions import ValidationError
from payroll_recon.models import Invoice, PayrollDeduction
from payroll_recon.services.actor import Actor
from payroll_recon.services.invoice_service import InvoiceService

logger = logging.getLogger(__name__)


def deduction_input_from_record(deduction: PayrollDeduction) -> DeductionInput:
    """Rebuild calculator input from a stored deduction."""
    return DeductionInput(
        compensation=compensation_from_amounts(deduction.amount_w2, deduction.amount_1099),
        processing_tax=Decimal(deduction.processing_tax or 0),
        processing_charges=Decimal(deduction.processing_charges or 0),
        custom=custom_lines(
            (deduction.custom_deduction_1_name, deduction.custom_deduction_1_amount),
            (deduction.custom_deduction_2_name, deduction.custom_deduction_2_amount),
            (deduction.custom_deduction_3_name, deduction.custom_deduction_3_amount),
        ),
        is_override=deduction.is_override,
        override_amount=(
            Decimal(deduction.override_amount) if deduction.override_amount is not None else None
        ),
    )


def _apply_input(deduction: PayrollDeduction, data: DeductionInput) -> None:
    deduction.amount_w2 = data.amount_w2
    deduction.amount_1099 = data.amount_1099
    deduction.processing_tax = data.processing_tax
    deduction.processing_charges = data.processing_charges

    lines = list(data.custom) + [CustomDeduction()] * (3 - len(data.custom))
    deduction.custom_deduction_1_name = lines[0].name
    deduction.custom_deduction_1_amount = lines[0].amount
    deduction.custom_deduction_2_name = lines[1].name
    deduction.custom_deduction_2_amount = lines[1].amount
    deduction.custom_deduction_3_name = lines[2].name
    deduction.custom_deduction_3_amount = lines[2].amount

    deduction.is_override = data.is_override
    deduction.override_amount = data.override_amount


class DeductionService:
    """Service for saving deductions against an invoice.

    The deduction record is created lazily on first save. Net payable is
    always recomputed from the stored fields and never written directly.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.invoices = InvoiceService(session)

    async def save(self, actor: Actor, invoice_id: UUID, data: DeductionInput) -> PayrollDeduction:
        """Persist deduction fields and the recomputed net payable.

        Amounts are stored rounded to cents, and net payable is computed
        from exactly the stored values. Idempotent: saving identical input
        yields an identical record.
        """
        actor.require_admin("save payroll deductions")
        validate_deduction(data)
        data = quantize_deduction(data)
        invoice = await self.invoices.get_invoice(invoice_id)

        deduction = await self.invoices.get_deduction(invoice_id)
        if deduction is None:
            deduction = PayrollDeduction(invoice_id=invoice.invoice_id)
            self.session.add(deduction)

        _apply_input(deduction, data)
        deduction.net_payable = compute_net_payable(invoice.invoice_amount, data)
        await self.session.flush()

        logger.info(
            "Saved deductions for invoice %s: net payable %s (override=%s)",
            invoice.invoice_number,
            deduction.net_payable,
            deduction.is_override,
        )
        return deduction

    async def recompute(self, invoice: Invoice) -> PayrollDeduction | None:
        """Refresh net payable after the invoice amount changed."""
        deduction = await self.invoices.get_deduction(invoice.invoice_id)
        if deduction is None or deduction.is_override:
            return deduction
        deduction.net_payable = compute_net_payable(
            invoice.invoice_amount, deduction_input_from_record(deduction)
        )
        await self.session.flush()
        return deduction


def build_deduction_input(
    compensation_type: str | None = None,
    compensation_amount: Decimal | None = None,
    processing_tax: Decimal | None = None,
    processing_charges: Decimal | None = None,
    custom: list[tuple[str | None, Decimal | None]] | None = None,
    is_override: bool = False,
    override_amount: Decimal | None = None,
) -> DeductionInput:
    """Assemble a DeductionInput from loosely typed request fields."""
    compensation: W2Compensation | Contractor1099Compensation | None = None
    if compensation_type is not None:
        amount = Decimal(compensation_amount or 0)
        if compensation_type == "W2":
            compensation = W2Compensation(amount)
        elif compensation_type == "1099":
            compensation = Contractor1099Compensation(amount)
        else:
            raise ValidationError(
                f"Unknown compensation type '{compensation_type}'", field="compensation"
            )
    return DeductionInput(
        compensation=compensation,
        processing_tax=Decimal(processing_tax or 0),
        processing_charges=Decimal(processing_charges or 0),
        custom=custom_lines(*(custom or [])),
        is_override=is_override,
        override_amount=Decimal(override_amount) if override_amount is not None else None,
    )
