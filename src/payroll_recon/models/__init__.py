"""ORM models."""

from payroll_recon.models.audit import AuditEvent
from payroll_recon.models.base import Base, TimestampMixin
from payroll_recon.models.credentials import CredentialChangeRequest
from payroll_recon.models.invoice import (
    EmploymentType,
    Invoice,
    InvoiceStatus,
    PayrollDeduction,
)
from payroll_recon.models.timesheet import TimeEntry
from payroll_recon.models.user import AppUser, UserRole

__all__ = [
    "AppUser",
    "AuditEvent",
    "Base",
    "CredentialChangeRequest",
    "EmploymentType",
    "Invoice",
    "InvoiceStatus",
    "PayrollDeduction",
    "TimeEntry",
    "TimestampMixin",
    "UserRole",
]
