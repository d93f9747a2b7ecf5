"""Net payable calculation for invoice deductions."""

from __future__ import annotations

from dataclasses import replace
from decimal import ROUND_HALF_EVEN, Decimal

from payroll_recon.calculators.types import (
    ZERO,
    Contractor1099Compensation,
    CustomDeduction,
    DeductionInput,
    W2Compensation,
)
from payroll_recon.exceptions import ValidationError

MAX_CUSTOM_DEDUCTIONS = 3
CENTS = Decimal("0.01")


def round_to_cents(amount: Decimal) -> Decimal:
    """Round to 2 decimal places, half-even."""
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_EVEN)


def quantize_deduction(deduction: DeductionInput) -> DeductionInput:
    """Round every monetary field to cents.

    Stored values and the net payable computed from them then agree, and
    recomputing from the stored record reproduces the same result.
    """
    compensation = deduction.compensation
    if compensation is not None:
        compensation = type(compensation)(round_to_cents(compensation.amount))
    return replace(
        deduction,
        compensation=compensation,
        processing_tax=round_to_cents(deduction.processing_tax),
        processing_charges=round_to_cents(deduction.processing_charges),
        custom=tuple(replace(line, amount=round_to_cents(line.amount)) for line in deduction.custom),
        override_amount=(
            round_to_cents(deduction.override_amount)
            if deduction.override_amount is not None
            else None
        ),
    )


def validate_deduction(deduction: DeductionInput) -> None:
    """Reject deduction input that cannot be persisted.

    Raises ValidationError for negative amounts, more than three custom
    lines, or override mode without an override amount.
    """
    if deduction.compensation is not None and deduction.compensation.amount < 0:
        raise ValidationError("Compensation amount cannot be negative", field="compensation")

    for field_name in ("processing_tax", "processing_charges"):
        if getattr(deduction, field_name) < 0:
            raise ValidationError(f"{field_name} cannot be negative", field=field_name)

    if len(deduction.custom) > MAX_CUSTOM_DEDUCTIONS:
        raise ValidationError(
            f"At most {MAX_CUSTOM_DEDUCTIONS} custom deductions are allowed",
            field="custom",
        )
    for index, line in enumerate(deduction.custom, start=1):
        if line.amount < 0:
            raise ValidationError(
                f"Custom deduction {index} cannot be negative",
                field=f"custom_deduction_{index}_amount",
            )

    if deduction.is_override and deduction.override_amount is None:
        raise ValidationError(
            "override_amount is required when override is enabled",
            field="override_amount",
        )


def total_deductions(deduction: DeductionInput) -> Decimal:
    """Sum of every deduction field (ignores override)."""
    return sum(deduction.deduction_amounts(), ZERO)


def compute_net_payable(gross_amount: Decimal, deduction: DeductionInput) -> Decimal:
    """Compute the net payable for an invoice.

    In override mode the override amount is returned verbatim, unrounded
    and unclamped. Otherwise the result is gross minus all deductions and
    may be negative for an over-deducted invoice.
    """
    if deduction.is_override:
        if deduction.override_amount is None:
            raise ValidationError(
                "override_amount is required when override is enabled",
                field="override_amount",
            )
        return deduction.override_amount

    return round_to_cents(Decimal(gross_amount) - total_deductions(deduction))


def compensation_from_amounts(
    amount_w2: Decimal | None,
    amount_1099: Decimal | None,
) -> W2Compensation | Contractor1099Compensation | None:
    """Build the compensation variant from two stored amounts.

    Raises ValidationError when both amounts are non-zero.
    """
    w2 = Decimal(amount_w2 or 0)
    c1099 = Decimal(amount_1099 or 0)
    if w2 and c1099:
        raise ValidationError(
            "W2 and 1099 amounts are mutually exclusive",
            field="compensation",
        )
    if w2:
        return W2Compensation(w2)
    if c1099:
        return Contractor1099Compensation(c1099)
    return None


def custom_lines(*pairs: tuple[str | None, Decimal | None]) -> tuple[CustomDeduction, ...]:
    """Build custom deduction lines from (name, amount) pairs."""
    return tuple(
        CustomDeduction(name=name or "", amount=Decimal(amount or 0))
        for name, amount in pairs
    )
