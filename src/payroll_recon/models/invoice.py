"""Invoice and payroll deduction models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from payroll_recon.models.base import Base, TimestampMixin


class InvoiceStatus(str, Enum):
    """Invoice payment status values."""

    PENDING = "Pending"
    RECEIVED = "Received"
    WAITING_ON_CLIENT = "Waiting on Client"


class EmploymentType(str, Enum):
    """Employment classification of the billed person."""

    W2 = "W2"
    CONTRACTOR_1099 = "1099"


# ===== Invoices =====


class Invoice(Base, TimestampMixin):
    """One payroll-cycle invoice to a client."""

    __tablename__ = "invoice"

    invoice_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    invoice_number: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    worker_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("app_user.user_id", ondelete="SET NULL"),
        nullable=True,
    )
    payroll_month: Mapped[str] = mapped_column(String, nullable=False)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    invoice_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    number_of_hours: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    client_name: Mapped[str] = mapped_column(String, nullable=False)
    end_client: Mapped[str | None] = mapped_column(String, nullable=True)
    employment_type: Mapped[str] = mapped_column(
        String, nullable=False, default=EmploymentType.W2.value
    )
    name_1099: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=InvoiceStatus.PENDING.value
    )
    payment_received_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by_user_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("app_user.user_id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint("invoice_amount >= 0", name="invoice_amount_check"),
        CheckConstraint("number_of_hours >= 0", name="invoice_hours_check"),
        CheckConstraint(
            "status IN ('Pending', 'Received', 'Waiting on Client')",
            name="invoice_status_check",
        ),
        CheckConstraint(
            "employment_type IN ('W2', '1099')",
            name="invoice_employment_type_check",
        ),
        CheckConstraint(
            "(status = 'Received' AND payment_received_date IS NOT NULL) OR "
            "(status <> 'Received' AND payment_received_date IS NULL)",
            name="invoice_payment_date_check",
        ),
    )


# ===== Deductions =====


class PayrollDeduction(Base, TimestampMixin):
    """Deduction lines and derived net payable for one invoice."""

    __tablename__ = "payroll_deduction"

    payroll_deduction_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    invoice_id: Mapped[UUID] = mapped_column(
        ForeignKey("invoice.invoice_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    amount_w2: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    amount_1099: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    processing_tax: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0")
    )
    processing_charges: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0")
    )
    custom_deduction_1_name: Mapped[str] = mapped_column(String, nullable=False, default="")
    custom_deduction_1_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0")
    )
    custom_deduction_2_name: Mapped[str] = mapped_column(String, nullable=False, default="")
    custom_deduction_2_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0")
    )
    custom_deduction_3_name: Mapped[str] = mapped_column(String, nullable=False, default="")
    custom_deduction_3_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0")
    )
    net_payable: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    is_override: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    override_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "amount_w2 = 0 OR amount_1099 = 0",
            name="payroll_deduction_compensation_exclusive",
        ),
        CheckConstraint(
            "amount_w2 >= 0 AND amount_1099 >= 0 AND processing_tax >= 0 "
            "AND processing_charges >= 0 AND custom_deduction_1_amount >= 0 "
            "AND custom_deduction_2_amount >= 0 AND custom_deduction_3_amount >= 0",
            name="payroll_deduction_non_negative",
        ),
    )
