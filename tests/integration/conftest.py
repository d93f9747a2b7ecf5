"""Integration test fixtures for the HTTP API."""

from collections.abc import Callable

import pytest

from payroll_recon.models import AppUser


@pytest.fixture
def headers() -> Callable[[AppUser], dict[str, str]]:
    """Build the identity header for a user."""

    def _headers(user: AppUser) -> dict[str, str]:
        return {"X-User-ID": str(user.user_id)}

    return _headers


@pytest.fixture
def invoice_payload() -> dict:
    return {
        "name": "Wren Worker",
        "payroll_month": "2024-03",
        "invoice_date": "2024-03-31",
        "invoice_number": "INV-1001",
        "invoice_amount": "10000.00",
        "number_of_hours": "160",
        "client_name": "Acme Corp",
        "employment_type": "W2",
    }
