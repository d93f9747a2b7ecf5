"""Tests for credential request and invoice status rules."""

from datetime import date

import pytest

from payroll_recon.exceptions import InvalidStateError, ValidationError
from payroll_recon.models import InvoiceStatus
from payroll_recon.services.state_machine import (
    CredentialChangeStateMachine,
    CredentialRequestStatus,
    InvoiceStatusRules,
)


class TestCredentialChangeStateMachine:
    """Test credential request transitions."""

    def test_valid_transitions(self):
        """Pending may be approved or rejected."""
        assert CredentialChangeStateMachine.can_transition("Pending", "Approved") is True
        assert CredentialChangeStateMachine.can_transition("Pending", "Rejected") is True

    def test_terminal_states(self):
        """Approved and Rejected cannot move anywhere."""
        for status in ("Approved", "Rejected"):
            for target in ("Pending", "Approved", "Rejected"):
                assert CredentialChangeStateMachine.can_transition(status, target) is False

    def test_validate_transition_raises(self):
        with pytest.raises(InvalidStateError) as exc_info:
            CredentialChangeStateMachine.validate_transition("Approved", "Rejected")

        assert exc_info.value.current_state == "Approved"
        assert exc_info.value.code == "INVALID_STATE"

    def test_only_pending_can_be_cancelled(self):
        assert CredentialChangeStateMachine.can_cancel(CredentialRequestStatus.PENDING.value)
        assert not CredentialChangeStateMachine.can_cancel("Approved")
        assert not CredentialChangeStateMachine.can_cancel("Rejected")


class TestInvoiceStatusRules:
    """Test invoice status and payment date rules."""

    def test_received_requires_payment_date(self):
        with pytest.raises(ValidationError) as exc_info:
            InvoiceStatusRules.resolve_payment_date("Received", None)
        assert exc_info.value.field == "payment_received_date"

    def test_received_keeps_payment_date(self):
        paid = date(2024, 4, 2)
        assert InvoiceStatusRules.resolve_payment_date(InvoiceStatus.RECEIVED, paid) == paid

    def test_other_statuses_clear_payment_date(self):
        paid = date(2024, 4, 2)
        assert InvoiceStatusRules.resolve_payment_date("Pending", paid) is None
        assert InvoiceStatusRules.resolve_payment_date("Waiting on Client", paid) is None

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            InvoiceStatusRules.normalize("Paid")

    def test_outstanding(self):
        assert InvoiceStatusRules.OUTSTANDING == {"Pending", "Waiting on Client"}
