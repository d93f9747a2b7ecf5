"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Errors
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    detail: str
    code: str | None = None


# ============================================================================
# Time entry schemas
# ============================================================================


class TimeEntryCreate(BaseModel):
    """Schema for submitting hours for one date."""

    work_date: date
    hours_worked: Decimal
    notes: str | None = None
    client_id: UUID | None = None


class TimeEntryResponse(BaseModel):
    """Schema for time entry response."""

    model_config = ConfigDict(from_attributes=True)

    time_entry_id: UUID
    worker_id: UUID
    employer_id: UUID | None = None
    work_date: date
    hours_worked: Decimal
    notes: str
    client_id: UUID | None = None
    is_locked: bool
    locked_at: datetime | None = None
    locked_by_user_id: UUID | None = None
    created_at: datetime
    updated_at: datetime


class HoursSummaryResponse(BaseModel):
    """Schema for aggregated hours."""

    model_config = ConfigDict(from_attributes=True)

    total_hours: Decimal
    entry_count: int
    average_hours: Decimal
    pay: Decimal | None = None


class TimeEntryListResponse(BaseModel):
    """Schema for listing time entries."""

    items: list[TimeEntryResponse]
    total: int
    summary: HoursSummaryResponse


class LockRequest(BaseModel):
    """Schema for locking a period."""

    start_date: date
    end_date: date
    worker_id: UUID | None = None


class LockResponse(BaseModel):
    """Schema for lock result."""

    locked_count: int


class UnlockRequest(BaseModel):
    """Schema for unlocking one entry."""

    reason: str


# ============================================================================
# Report schemas
# ============================================================================


class HoursEntryResponse(BaseModel):
    """Schema for one day within a report."""

    model_config = ConfigDict(from_attributes=True)

    worker_id: UUID
    work_date: date
    hours_worked: Decimal


class WorkerWeekResponse(BaseModel):
    """Schema for one worker's week."""

    model_config = ConfigDict(from_attributes=True)

    worker_id: UUID
    total_hours: Decimal
    entries: list[HoursEntryResponse]


class WeeklySummaryResponse(BaseModel):
    """Schema for the weekly summary report."""

    week_start: date
    week_end: date
    workers: list[WorkerWeekResponse]


class HoursStatsResponse(BaseModel):
    """Schema for administrative hours statistics."""

    model_config = ConfigDict(from_attributes=True)

    total_hours: Decimal
    total_entries: int
    unique_workers: int
    average_hours_per_entry: Decimal
    hours_by_day: dict[str, Decimal]


class MonthlyTotalResponse(BaseModel):
    """Schema for one worker's total in one month."""

    worker_id: UUID
    month: str
    total_hours: Decimal
    entry_count: int


class ClientActivityResponse(BaseModel):
    """Schema for hours logged against one client."""

    model_config = ConfigDict(from_attributes=True)

    client_id: UUID | None
    total_hours: Decimal
    entry_count: int


# ============================================================================
# Invoice schemas
# ============================================================================


class InvoiceCreate(BaseModel):
    """Schema for creating an invoice."""

    name: str
    payroll_month: str
    invoice_date: date
    invoice_number: str
    invoice_amount: Decimal
    number_of_hours: Decimal
    client_name: str
    end_client: str | None = None
    employment_type: Literal["W2", "1099"] = "W2"
    name_1099: str | None = None
    status: str = "Pending"
    payment_received_date: date | None = None
    notes: str | None = None
    worker_id: UUID | None = None


class InvoiceUpdate(BaseModel):
    """Schema for a partial invoice update; only fields sent are applied."""

    name: str | None = None
    payroll_month: str | None = None
    invoice_date: date | None = None
    invoice_number: str | None = None
    invoice_amount: Decimal | None = None
    number_of_hours: Decimal | None = None
    client_name: str | None = None
    end_client: str | None = None
    employment_type: Literal["W2", "1099"] | None = None
    name_1099: str | None = None
    status: str | None = None
    payment_received_date: date | None = None
    notes: str | None = None
    worker_id: UUID | None = None


class InvoiceStatusUpdate(BaseModel):
    """Schema for changing an invoice status."""

    status: str
    payment_received_date: date | None = None


class DeductionResponse(BaseModel):
    """Schema for payroll deduction response."""

    model_config = ConfigDict(from_attributes=True)

    payroll_deduction_id: UUID
    invoice_id: UUID
    amount_w2: Decimal
    amount_1099: Decimal
    processing_tax: Decimal
    processing_charges: Decimal
    custom_deduction_1_name: str
    custom_deduction_1_amount: Decimal
    custom_deduction_2_name: str
    custom_deduction_2_amount: Decimal
    custom_deduction_3_name: str
    custom_deduction_3_amount: Decimal
    net_payable: Decimal
    is_override: bool
    override_amount: Decimal | None = None


class InvoiceResponse(BaseModel):
    """Schema for invoice response."""

    model_config = ConfigDict(from_attributes=True)

    invoice_id: UUID
    invoice_number: str
    name: str
    worker_id: UUID | None = None
    payroll_month: str
    invoice_date: date
    invoice_amount: Decimal
    number_of_hours: Decimal
    client_name: str
    end_client: str | None = None
    employment_type: str
    name_1099: str | None = None
    status: str
    payment_received_date: date | None = None
    notes: str | None = None
    created_by_user_id: UUID | None = None
    created_at: datetime
    updated_at: datetime
    deduction: DeductionResponse | None = None


class InvoiceListResponse(BaseModel):
    """Schema for listing invoices."""

    items: list[InvoiceResponse]
    total: int


class PendingGroupResponse(BaseModel):
    """Schema for one person's outstanding invoices."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    worker_id: UUID | None = None
    total_pending: Decimal
    invoices: list[InvoiceResponse]


class PendingInvoicesResponse(BaseModel):
    """Schema for outstanding invoices grouped by person."""

    groups: list[PendingGroupResponse]
    total_pending: Decimal


# ============================================================================
# Deduction schemas
# ============================================================================


class W2CompensationIn(BaseModel):
    """W2 compensation withheld from the invoice."""

    type: Literal["W2"]
    amount: Decimal


class Contractor1099CompensationIn(BaseModel):
    """1099 compensation withheld from the invoice."""

    type: Literal["1099"]
    amount: Decimal


Compensation = Annotated[
    Union[W2CompensationIn, Contractor1099CompensationIn],
    Field(discriminator="type"),
]


class CustomDeductionIn(BaseModel):
    """A named custom deduction line."""

    name: str = ""
    amount: Decimal = Decimal("0")


class DeductionUpdate(BaseModel):
    """Schema for saving an invoice's deductions."""

    compensation: Compensation | None = None
    processing_tax: Decimal = Decimal("0")
    processing_charges: Decimal = Decimal("0")
    custom: list[CustomDeductionIn] = Field(default_factory=list)
    is_override: bool = False
    override_amount: Decimal | None = None


# ============================================================================
# Credential change schemas
# ============================================================================


class CredentialChangeCreate(BaseModel):
    """Schema for requesting a password change."""

    current_password: str
    new_password: str


class CredentialChangeReject(BaseModel):
    """Schema for rejecting a password change."""

    reason: str


class CredentialChangeResponse(BaseModel):
    """Schema for credential change request response.

    The candidate hash is never exposed.
    """

    model_config = ConfigDict(from_attributes=True)

    request_id: UUID
    user_id: UUID
    status: str
    requested_at: datetime
    reviewed_by_user_id: UUID | None = None
    reviewed_at: datetime | None = None
    reason: str | None = None


class CredentialChangeListResponse(BaseModel):
    """Schema for listing credential change requests."""

    items: list[CredentialChangeResponse]
    total: int
