"""Deduction and hours calculations."""

from payroll_recon.calculators.aggregation import (
    client_activity,
    hours_stats,
    monthly_totals,
    summarize_hours,
    weekly_summary,
)
from payroll_recon.calculators.deductions import (
    compute_net_payable,
    quantize_deduction,
    round_to_cents,
    validate_deduction,
)
from payroll_recon.calculators.types import (
    CompensationInput,
    Contractor1099Compensation,
    CustomDeduction,
    DeductionInput,
    HoursEntry,
    W2Compensation,
)

__all__ = [
    "CompensationInput",
    "Contractor1099Compensation",
    "CustomDeduction",
    "DeductionInput",
    "HoursEntry",
    "W2Compensation",
    "client_activity",
    "compute_net_payable",
    "hours_stats",
    "monthly_totals",
    "quantize_deduction",
    "round_to_cents",
    "summarize_hours",
    "validate_deduction",
    "weekly_summary",
]
