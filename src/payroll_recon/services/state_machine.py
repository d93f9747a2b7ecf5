"""Status rules for credential change requests and invoices."""

from __future__ import annotations

from datetime import date
from enum import Enum

from payroll_recon.exceptions import InvalidStateError, ValidationError
from payroll_recon.models.invoice import InvoiceStatus


class CredentialRequestStatus(str, Enum):
    """Credential change request status values."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class CredentialChangeStateMachine:
    """State machine for credential change requests.

    Allowed transitions:
    - Pending → Approved
    - Pending → Rejected

    Approved and Rejected are terminal. Cancellation deletes a Pending
    request rather than moving it to another state.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        CredentialRequestStatus.PENDING.value: [
            CredentialRequestStatus.APPROVED.value,
            CredentialRequestStatus.REJECTED.value,
        ],
        CredentialRequestStatus.APPROVED.value: [],
        CredentialRequestStatus.REJECTED.value: [],
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidStateError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidStateError(
                from_status,
                f"move to '{to_status}'",
                "request has already been processed",
            )

    @classmethod
    def can_cancel(cls, status: str) -> bool:
        """Only pending requests may be cancelled."""
        return status == CredentialRequestStatus.PENDING


class InvoiceStatusRules:
    """Invoice status rules.

    Any status may follow any status; the only invariant is that a payment
    received date exists exactly when the status is Received.
    """

    STATUSES = {s.value for s in InvoiceStatus}
    # Not yet paid; these make up the pending report
    OUTSTANDING = STATUSES - {InvoiceStatus.RECEIVED.value}

    @classmethod
    def normalize(cls, status: str | InvoiceStatus) -> str:
        value = status.value if isinstance(status, InvoiceStatus) else status
        if value not in cls.STATUSES:
            raise ValidationError(
                f"Invalid status '{value}'; expected one of {sorted(cls.STATUSES)}",
                field="status",
            )
        return value

    @classmethod
    def resolve_payment_date(
        cls,
        status: str | InvoiceStatus,
        payment_received_date: date | None,
    ) -> date | None:
        """Return the payment date to store for a status.

        Raises ValidationError if the status is Received and no date is given.
        """
        value = cls.normalize(status)
        if value == InvoiceStatus.RECEIVED.value:
            if payment_received_date is None:
                raise ValidationError(
                    "payment_received_date is required when status is Received",
                    field="payment_received_date",
                )
            return payment_received_date
        return None

