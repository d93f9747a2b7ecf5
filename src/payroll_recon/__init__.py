"""Time and payroll reconciliation service."""

__version__ = "0.1.0"
