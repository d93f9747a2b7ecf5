"""Reconciliation services."""

from payroll_recon.services.actor import Actor
from payroll_recon.services.credential_service import CredentialChangeService
from payroll_recon.services.deduction_service import DeductionService
from payroll_recon.services.invoice_service import InvoiceData, InvoiceService, PendingGroup
from payroll_recon.services.locking_service import LockingService
from payroll_recon.services.state_machine import (
    CredentialChangeStateMachine,
    CredentialRequestStatus,
    InvoiceStatusRules,
)
from payroll_recon.services.time_entry_service import TimeEntryService
from payroll_recon.services.user_service import UserService

__all__ = [
    "Actor",
    "CredentialChangeService",
    "CredentialChangeStateMachine",
    "CredentialRequestStatus",
    "DeductionService",
    "InvoiceData",
    "InvoiceService",
    "InvoiceStatusRules",
    "LockingService",
    "PendingGroup",
    "TimeEntryService",
    "UserService",
]
