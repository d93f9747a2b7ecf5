"""Typed exceptions for the reconciliation core.

Every error carries a machine-readable ``code`` so callers catch by type
and the API layer can map errors to responses without parsing messages.

    ReconciliationError
    +-- ValidationError              VALIDATION_ERROR
    +-- LockedRecordError            RECORD_LOCKED
    +-- DuplicateInvoiceNumberError  DUPLICATE_INVOICE_NUMBER
    +-- InvalidStateError            INVALID_STATE
    +-- AuthenticationError          AUTHENTICATION_FAILED
    +-- AuthorizationError           NOT_AUTHORIZED
    +-- NotFoundError                NOT_FOUND
"""

from __future__ import annotations

from typing import Any


class ReconciliationError(Exception):
    """Base class for all reconciliation errors."""

    code: str = "RECONCILIATION_ERROR"

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(ReconciliationError):
    """Malformed or out-of-range input."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None, **details: Any):
        self.field = field
        super().__init__(message, field=field, **details)


class LockedRecordError(ReconciliationError):
    """Attempted mutation of a locked time entry."""

    code = "RECORD_LOCKED"

    def __init__(self, entry_id: Any, message: str | None = None):
        self.entry_id = entry_id
        super().__init__(
            message or "This time entry is locked and cannot be modified",
            entry_id=str(entry_id),
        )


class DuplicateInvoiceNumberError(ReconciliationError):
    """Invoice number already in use."""

    code = "DUPLICATE_INVOICE_NUMBER"

    def __init__(self, invoice_number: str):
        self.invoice_number = invoice_number
        super().__init__(
            f"Invoice number '{invoice_number}' already exists",
            invoice_number=invoice_number,
        )


class InvalidStateError(ReconciliationError):
    """Workflow transition attempted from a non-eligible state."""

    code = "INVALID_STATE"

    def __init__(self, current_state: str, action: str, reason: str | None = None):
        self.current_state = current_state
        self.action = action
        msg = f"Cannot {action} from state '{current_state}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, current_state=current_state, action=action)


class AuthenticationError(ReconciliationError):
    """Presented credentials do not match."""

    code = "AUTHENTICATION_FAILED"


class AuthorizationError(ReconciliationError):
    """Caller is not permitted to perform the operation."""

    code = "NOT_AUTHORIZED"


class NotFoundError(ReconciliationError):
    """Referenced record does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found", entity=entity, entity_id=str(entity_id))
