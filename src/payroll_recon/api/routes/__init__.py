"""API routes."""

from payroll_recon.api.routes.credential_changes import router as credential_changes_router
from payroll_recon.api.routes.health import router as health_router
from payroll_recon.api.routes.invoices import router as invoices_router
from payroll_recon.api.routes.reports import router as reports_router
from payroll_recon.api.routes.time_entries import router as time_entries_router

__all__ = [
    "credential_changes_router",
    "health_router",
    "invoices_router",
    "reports_router",
    "time_entries_router",
]
